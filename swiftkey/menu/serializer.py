# swiftkey/menu/serializer.py
from typing import Any, Dict, List, Optional

import yaml

from swiftkey.models.models import MenuItem

FIELD_ORDER = ("key", "title", "icon", "action", "sticky", "notify", "batch", "hidden", "hotkey", "submenu")


def item_to_dict(item: MenuItem) -> Dict[str, Any]:
    """Clean mapping for one item: no id, no unset optional fields, stable field order."""
    data = item.model_dump(exclude_none=True, exclude={"submenu"})
    result: Dict[str, Any] = {"key": item.key, "title": item.title}
    for name in FIELD_ORDER[2:-1]:
        if name in data:
            result[name] = data[name]
    if item.submenu is not None:
        result["submenu"] = [item_to_dict(child) for child in item.submenu]
    return result


def to_document(items: List[MenuItem]) -> List[Dict[str, Any]]:
    return [item_to_dict(item) for item in items]


def serialize(items: List[MenuItem], header: Optional[str] = None) -> str:
    body = yaml.safe_dump(
        to_document(items),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=1000,
    )
    if header:
        comment = "\n".join(f"# {line}" if line else "#" for line in header.splitlines())
        return f"{comment}\n\n{body}"
    return body
