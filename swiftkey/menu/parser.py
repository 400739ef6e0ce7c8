# swiftkey/menu/parser.py
import logging
from typing import Any, List

import yaml
from pydantic import TypeAdapter, ValidationError

from swiftkey.menu.validation import validate_menu
from swiftkey.models.errors import (
    EmptyDocumentError,
    EmptyResultError,
    MalformedDocumentError,
    MissingFieldError,
    TypeMismatchError,
)
from swiftkey.models.models import MenuItem

logger = logging.getLogger(__name__)

_MENU_ADAPTER = TypeAdapter(List[MenuItem])


def parse_menu(text: str, validate: bool = True) -> List[MenuItem]:
    """Parse a YAML menu document into a list of MenuItem.

    Raises a ConfigError subclass describing the first problem found.
    """
    if text is None or not text.strip():
        raise EmptyDocumentError()

    data = load_document(text)
    items = decode_items(data)

    if not items:
        raise EmptyResultError()

    if validate:
        validate_menu(items)

    logger.debug("Parsed %d root menu items", len(items))
    return items


def load_document(text: str) -> List[Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        line = mark.line + 1 if mark else None
        column = mark.column + 1 if mark else None
        raise MalformedDocumentError(e.problem or str(e), line, column) from e
    except yaml.YAMLError as e:
        raise MalformedDocumentError(str(e)) from e

    if data is None:
        raise EmptyDocumentError()
    if not isinstance(data, list):
        raise MalformedDocumentError(
            f"the document root must be a list of menu items, found {type(data).__name__}", 1, 1
        )
    return data


def decode_items(data: List[Any]) -> List[MenuItem]:
    try:
        return _MENU_ADAPTER.validate_python(_strip_ids(data))
    except ValidationError as e:
        raise _schema_error(e) from e


def _strip_ids(node: Any) -> Any:
    # ids are process-local; anything found in the input is ignored
    if isinstance(node, list):
        return [_strip_ids(child) for child in node]
    if isinstance(node, dict):
        return {
            k: (_strip_ids(v) if k == "submenu" else v)
            for k, v in node.items()
            if k != "id"
        }
    return node


def _schema_error(error: ValidationError):
    first = error.errors()[0]
    loc = first.get("loc", ())
    field = next((part for part in reversed(loc) if isinstance(part, str)), "item")
    context = describe_location(loc)
    if first.get("type") == "missing":
        return MissingFieldError(field, context)
    return TypeMismatchError(field, context)


def describe_location(loc) -> str:
    """Turn a pydantic location such as (1, 'submenu', 0, 'key') into 'item 2 > submenu item 1'."""
    parts = []
    nested = False
    for part in loc:
        if isinstance(part, int):
            parts.append(f"{'submenu item' if nested else 'item'} {part + 1}")
        elif part == "submenu":
            nested = True
    return " > ".join(parts) or "document root"
