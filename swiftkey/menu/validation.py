# swiftkey/menu/validation.py
"""
Semantic validation of a menu tree.

Two flavours share the same rules:

* `validate_menu` stops at the first problem and raises `SemanticError`
  (config load, snippet import, dynamic submenus).
* `collect_issues` walks the whole tree and returns every problem with a
  severity, which is what editors need for an issues panel.
"""
import logging
import os
from typing import Iterator, List, Optional, Set

from swiftkey.models.errors import SemanticError
from swiftkey.models.models import ACTION_SCHEMES, MenuItem, Severity, ValidationIssue

logger = logging.getLogger(__name__)

MAX_COMMAND_LENGTH = 1000

BLACKLISTED_PATTERNS = (
    "rm -rf /",
    "sudo ",
    "> /",
    ">> /",
    "mkfs",
    "dd if=",
    ":(){ :|:& };:",
)

MODIFIER_NAMES = {
    "cmd": "cmd", "command": "cmd", "⌘": "cmd",
    "ctrl": "ctrl", "control": "ctrl", "⌃": "ctrl",
    "alt": "alt", "option": "alt", "⌥": "alt",
    "shift": "shift", "⇧": "shift",
}

KEY_TOKENS = (
    set("abcdefghijklmnopqrstuvwxyz0123456789")
    | {"space", "return", "enter", "tab", "esc", "escape", "left", "right", "up", "down", "backspace", "delete"}
    | {f"f{n}" for n in range(1, 13)}
    | set("[]\\;'\",./-=`")
)


def shell_command_problem(command: str) -> Optional[str]:
    """Return why a shell command is rejected, or None when it is acceptable."""
    trimmed = command.strip()
    if not trimmed:
        return "command is empty"
    for pattern in BLACKLISTED_PATTERNS:
        if trimmed.startswith(pattern) or (" " + pattern) in trimmed:
            return f"contains blacklisted pattern '{pattern.strip()}'"
    if len(command) > MAX_COMMAND_LENGTH:
        return f"command exceeds {MAX_COMMAND_LENGTH} characters"
    quotes = command.count("'") + command.count('"')
    if quotes % 2:
        return "unbalanced quotes"
    return None


def hotkey_problem(hotkey: str) -> Optional[str]:
    if not hotkey or not hotkey.strip():
        return "hotkey is empty"
    parts = hotkey.lower().split("+")
    *modifiers, key = parts
    for modifier in modifiers:
        if modifier.strip() not in MODIFIER_NAMES:
            return f"unknown modifier '{modifier}'"
    if key.strip() not in KEY_TOKENS:
        return f"unknown key '{key}'"
    return None


def action_problem(action: str) -> Optional[str]:
    if "://" not in action:
        return f"action '{action}' must look like <scheme>://<payload>"
    scheme, payload = action.split("://", 1)
    if scheme not in ACTION_SCHEMES:
        return f"unknown action scheme '{scheme}' (expected one of {', '.join(ACTION_SCHEMES)})"
    if not payload.strip():
        return f"{scheme}:// action has an empty payload"
    if scheme == "shell":
        problem = shell_command_problem(payload)
        if problem:
            return f"unsafe shell command: {problem}"
    return None


def _item_problems(item: MenuItem) -> Iterator[ValidationIssue]:
    if len(item.key) != 1:
        message = "Key is required" if not item.key else f"Key '{item.key}' must be a single character"
        yield ValidationIssue(field="key", message=message)
    if not item.title.strip():
        yield ValidationIssue(field="title", message="Title is required")
    if item.action is None and not item.is_branch:
        yield ValidationIssue(field="action", message="Item must have either an action or a submenu")
    if item.action is not None:
        problem = action_problem(item.action)
        if problem:
            yield ValidationIssue(field="action", message=problem)
    if item.hotkey is not None:
        problem = hotkey_problem(item.hotkey)
        if problem:
            yield ValidationIssue(field="hotkey", message=f"Invalid hotkey '{item.hotkey}': {problem}")


def _item_warnings(item: MenuItem) -> Iterator[ValidationIssue]:
    scheme, payload = item.action_scheme, item.action_payload
    if scheme == "launch" and payload and not os.path.exists(os.path.expanduser(payload)):
        yield ValidationIssue(field="action", message="Application not found on this machine", severity=Severity.WARNING)
    elif scheme == "dynamic" and payload and " " not in payload.strip() and os.sep in payload:
        if not os.path.exists(os.path.expanduser(payload.strip())):
            yield ValidationIssue(field="action", message="Script not found", severity=Severity.WARNING)
    elif scheme == "shell" and payload and ("rm " in payload or "sudo" in payload):
        yield ValidationIssue(field="action", message="Potentially dangerous command", severity=Severity.WARNING)
    if item.batch is True and not item.is_branch:
        yield ValidationIssue(field="batch", message="Batch items need submenu items to run", severity=Severity.WARNING)
    if item.action is not None and item.is_branch:
        yield ValidationIssue(
            field="action",
            message="Action is ignored while the item has a submenu",
            severity=Severity.WARNING,
        )


def _level_name(titles: List[str]) -> str:
    return "root" if not titles else "root > " + " > ".join(titles)


def iter_issues(
    items: List[MenuItem],
    path: Optional[List[str]] = None,
    warnings: bool = True,
    titles: Optional[List[str]] = None,
) -> Iterator[ValidationIssue]:
    """Depth-first walk yielding issues; siblings are visited in order.

    `path` is the key path of the level, `titles` its breadcrumb titles.
    """
    path = path or []
    titles = titles or []
    seen: Set[str] = set()
    for item in items:
        item_path = path + [item.key]
        for issue in _item_problems(item):
            yield issue.model_copy(update={"item_id": item.id, "path": item_path})
        if item.key in seen:
            yield ValidationIssue(
                item_id=item.id,
                path=item_path,
                field="key",
                message=f"Duplicate key '{item.key}' at level '{_level_name(titles)}'",
            )
        seen.add(item.key)
        if warnings:
            for issue in _item_warnings(item):
                yield issue.model_copy(update={"item_id": item.id, "path": item_path})
        if item.submenu:
            yield from iter_issues(item.submenu, item_path, warnings, titles + [item.title])


def collect_issues(items: List[MenuItem]) -> List[ValidationIssue]:
    return list(iter_issues(items))


def validate_menu(items: List[MenuItem]) -> None:
    """Raise SemanticError for the first blocking problem in the tree."""
    for issue in iter_issues(items, warnings=False):
        where = " > ".join(issue.path)
        logger.debug("Validation failed at %s: %s", where, issue.message)
        raise SemanticError(f"{issue.message} (item '{where}')")
