# swiftkey/menu/merge.py
import logging
from typing import Iterable, List, Set

from swiftkey.models.models import MenuItem, MergeStrategy

logger = logging.getLogger(__name__)

_LAST_KEY_CODE = ord("z")


def next_available_key(key: str, taken: Iterable[str]) -> str:
    """Find a key that does not collide with `taken`.

    Single characters are bumped one code point at a time up to 'z'; after
    that (or for keys past 'z') the original key gets a numeric suffix.
    """
    taken_set: Set[str] = set(taken)
    if len(key) == 1:
        for code in range(ord(key) + 1, _LAST_KEY_CODE + 1):
            candidate = chr(code)
            if candidate not in taken_set:
                return candidate
    counter = 2
    while f"{key}{counter}" in taken_set:
        counter += 1
    return f"{key}{counter}"


def smart_merge(base: List[MenuItem], incoming: List[MenuItem]) -> List[MenuItem]:
    result = list(base)
    for item in incoming:
        same = next(
            (i for i, existing in enumerate(result) if existing.key == item.key and existing.title == item.title),
            None,
        )
        if same is not None:
            logger.debug("Smart merge: replacing '%s' (%s)", item.title, item.key)
            result[same] = item
            continue

        keys = [existing.key for existing in result]
        if item.key in keys:
            new_key = next_available_key(item.key, keys)
            logger.info("Smart merge: key '%s' is taken, importing '%s' as '%s'", item.key, item.title, new_key)
            result.append(item.model_copy(update={"key": new_key}))
        else:
            result.append(item)
    return result


def merge(base: List[MenuItem], incoming: List[MenuItem], strategy: MergeStrategy) -> List[MenuItem]:
    strategy = MergeStrategy(strategy)
    if strategy == MergeStrategy.APPEND:
        return list(base) + list(incoming)
    if strategy == MergeStrategy.PREPEND:
        return list(incoming) + list(base)
    if strategy == MergeStrategy.REPLACE:
        return list(incoming)
    return smart_merge(base, incoming)
