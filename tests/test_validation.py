import pytest

from swiftkey.menu.parser import parse_menu
from swiftkey.menu.validation import (
    collect_issues,
    hotkey_problem,
    shell_command_problem,
    validate_menu,
)
from swiftkey.models.errors import SemanticError
from swiftkey.models.models import MenuItem, Severity


def _leaf(key: str, title: str = "Item", action: str = "open://https://example.com", **kwargs) -> MenuItem:
    return MenuItem(key=key, title=title, action=action, **kwargs)


def test_duplicate_sibling_keys_name_key_and_level() -> None:
    items = [
        MenuItem(key="w", title="Web", submenu=[_leaf("g", "GitHub"), _leaf("g", "Google")]),
    ]

    with pytest.raises(SemanticError) as excinfo:
        validate_menu(items)

    assert "Duplicate key 'g'" in str(excinfo.value)
    assert "root > Web" in str(excinfo.value)


def test_duplicate_check_includes_hidden_items() -> None:
    items = [_leaf("a"), _leaf("a", hidden=True)]

    with pytest.raises(SemanticError, match="Duplicate key 'a'"):
        validate_menu(items)


def test_same_key_on_different_levels_is_fine() -> None:
    items = [MenuItem(key="a", title="A", submenu=[_leaf("a")])]

    validate_menu(items)


def test_item_needs_action_or_submenu() -> None:
    with pytest.raises(SemanticError, match="either an action or a submenu"):
        validate_menu([MenuItem(key="a", title="Nothing")])


def test_empty_submenu_does_not_count_as_branch() -> None:
    with pytest.raises(SemanticError, match="either an action or a submenu"):
        validate_menu([MenuItem(key="a", title="Empty", submenu=[])])


def test_action_and_submenu_together_are_allowed() -> None:
    validate_menu([MenuItem(key="a", title="Both", action="open://https://example.com", submenu=[_leaf("b")])])


@pytest.mark.parametrize(
    "item, message",
    [
        (MenuItem(key="", title="A", action="open://x"), "Key is required"),
        (MenuItem(key="a", title="   ", action="open://x"), "Title is required"),
        (MenuItem(key="a", title="A", action="ftp://x"), "unknown action scheme"),
        (MenuItem(key="a", title="A", action="open://"), "empty payload"),
        (MenuItem(key="a", title="A", action="just text"), "<scheme>://<payload>"),
        (MenuItem(key="a", title="A", action="open://x", hotkey="hyper+k"), "unknown modifier"),
    ],
)
def test_item_rules(item: MenuItem, message: str) -> None:
    with pytest.raises(SemanticError, match=message):
        validate_menu([item])


@pytest.mark.parametrize("action", ["shell://sudo rm", "shell://rm -rf /", "shell://echo 'oops"])
def test_unsafe_shell_commands_are_rejected(action: str) -> None:
    with pytest.raises(SemanticError, match="unsafe shell command"):
        parse_menu(f'- key: "a"\n  title: "A"\n  action: "{action}"\n')


def test_safe_shell_command_passes() -> None:
    items = parse_menu('- key: "a"\n  title: "A"\n  action: "shell://echo hello"\n')

    assert items[0].action_payload == "echo hello"


@pytest.mark.parametrize(
    "command, expected",
    [
        ("", "command is empty"),
        ("   ", "command is empty"),
        ("mkfs.ext4 /dev/sda1", "blacklisted pattern 'mkfs'"),
        ("ls > /etc/passwd", "blacklisted pattern '> /'"),
        (":(){ :|:& };:", "blacklisted pattern"),
        ("echo " + "x" * 1000, "exceeds 1000"),
        ("echo \"it's\"", "unbalanced quotes"),
    ],
)
def test_shell_command_problem(command: str, expected: str) -> None:
    assert expected in shell_command_problem(command)


@pytest.mark.parametrize("command", ["echo hello", "ls -la ~/Documents", "echo 'a' \"b\"", "date +%s"])
def test_shell_command_ok(command: str) -> None:
    assert shell_command_problem(command) is None


@pytest.mark.parametrize("hotkey", ["cmd+k", "Command+Shift+K", "⌘+⌥+space", "ctrl+f12", "a"])
def test_valid_hotkeys(hotkey: str) -> None:
    assert hotkey_problem(hotkey) is None


@pytest.mark.parametrize("hotkey", ["", "cmd+", "cmd+shift", "super+k", "cmd+f13"])
def test_invalid_hotkeys(hotkey: str) -> None:
    assert hotkey_problem(hotkey) is not None


def test_collect_issues_accumulates_with_paths() -> None:
    items = [
        MenuItem(key="ab", title="", action="open://x"),
        MenuItem(key="s", title="Shell", submenu=[MenuItem(key="x", title="X")]),
    ]

    issues = collect_issues(items)
    blocking = [issue for issue in issues if issue.is_blocking]

    assert {(tuple(issue.path), issue.field) for issue in blocking} == {
        (("ab",), "key"),
        (("ab",), "title"),
        (("s", "x"), "action"),
    }
    assert all(issue.item_id for issue in issues)


def test_collect_issues_reports_warnings() -> None:
    items = [
        MenuItem(key="l", title="Launch", action="launch:///definitely/not/here.app"),
        MenuItem(key="r", title="Remove", action="shell://rm old.txt"),
        MenuItem(key="b", title="Batch", action="open://https://example.com", batch=True),
        MenuItem(key="p", title="Parent", action="open://https://example.com", submenu=[_leaf("c")]),
    ]

    warnings = [issue for issue in collect_issues(items) if issue.severity == Severity.WARNING]

    assert [issue.path[0] for issue in warnings] == ["l", "r", "b", "p"]
    assert not any(issue.is_blocking for issue in warnings)
    validate_menu(items)
