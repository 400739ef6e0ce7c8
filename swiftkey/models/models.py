# swiftkey/models/models.py
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from datetime import date, datetime
from enum import Enum
import uuid
from typing import List, Optional


ACTION_SCHEMES = ("launch", "open", "shortcut", "shell", "dynamic")

DEFAULT_ICONS = {
    "launch": "app",
    "open": "link",
    "shortcut": "bolt.fill",
    "shell": "terminal",
    "dynamic": "arrow.triangle.branch",
}


def _new_id() -> str:
    return str(uuid.uuid4())


class MenuItem(BaseModel):
    """A node of the menu tree: a leaf with an action, or a branch with a submenu."""

    id: str = Field(default_factory=_new_id, exclude=True)
    key: str
    title: str
    icon: Optional[str] = None
    action: Optional[str] = None
    sticky: Optional[StrictBool] = None
    notify: Optional[StrictBool] = None
    batch: Optional[StrictBool] = None
    hidden: Optional[StrictBool] = None
    hotkey: Optional[str] = None
    submenu: Optional[List["MenuItem"]] = None

    @field_validator("key", mode="before")
    @classmethod
    def _digit_key(cls, value):
        # YAML turns `key: 1` into an int; every other non-string scalar is a type mismatch
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def is_branch(self) -> bool:
        return bool(self.submenu)

    @property
    def is_leaf(self) -> bool:
        return self.action is not None and not self.is_branch

    @property
    def action_scheme(self) -> Optional[str]:
        if not self.action or "://" not in self.action:
            return None
        return self.action.split("://", 1)[0]

    @property
    def action_payload(self) -> Optional[str]:
        if not self.action or "://" not in self.action:
            return None
        return self.action.split("://", 1)[1]

    @property
    def is_dynamic(self) -> bool:
        return self.action_scheme == "dynamic"

    @property
    def default_icon(self) -> str:
        if self.icon:
            return self.icon
        if self.is_branch:
            return "folder"
        return DEFAULT_ICONS.get(self.action_scheme or "", "questionmark")

    def same_as(self, other: "MenuItem") -> bool:
        """Structural equality, ignoring the process-local ids."""
        return self.model_dump() == other.model_dump()

    @classmethod
    def sample_data(cls) -> List["MenuItem"]:
        return [
            cls(
                key="a",
                icon="star.fill",
                title="Launch Calculator",
                action="launch://Calculator",
                submenu=[
                    cls(key="b", icon="globe", title="Open Example", action="open://https://www.example.com"),
                ],
            ),
            cls(key="c", icon="terminal", title="Say Hello", action="shell://echo 'Hello, World!'"),
        ]


class ConfigSnippet(BaseModel):
    """A shareable bundle of menu configuration that can be merged into the live config."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: str
    author: str
    tags: List[str] = Field(default_factory=list)
    created: str
    updated: Optional[str] = None
    content: str
    preview_image_url: Optional[str] = Field(default=None, alias="previewImageURL")

    def menu_items(self) -> List[MenuItem]:
        """Parse `content` with the same parser used for the main config."""
        from swiftkey.menu.parser import parse_menu

        return parse_menu(self.content)

    @property
    def creation_date(self) -> Optional[date]:
        return _parse_day(self.created)

    @property
    def update_date(self) -> Optional[date]:
        if self.updated is None:
            return None
        return _parse_day(self.updated)

    def matches(self, query: str) -> bool:
        if not query:
            return True
        q = query.lower()
        return (
            q in self.name.lower()
            or q in self.description.lower()
            or q in self.author.lower()
            or any(q in tag.lower() for tag in self.tags)
        )


def _parse_day(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


class MergeStrategy(str, Enum):
    APPEND = "append"
    PREPEND = "prepend"
    REPLACE = "replace"
    SMART = "smart"


class OverlayStyle(str, Enum):
    PANEL = "panel"
    HUD = "hud"
    FACELESS = "faceless"


class KeyPressKind(str, Enum):
    ESCAPE = "escape"
    HELP = "help"
    UP = "up"
    SUBMENU_PUSHED = "submenu_pushed"
    ACTION_EXECUTED = "action_executed"
    LOADING = "loading"
    ERROR = "error"
    NONE = "none"


class KeyPressResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: KeyPressKind
    title: Optional[str] = None
    key: Optional[str] = None
    sticky: bool = False

    @classmethod
    def escape(cls) -> "KeyPressResult":
        return cls(kind=KeyPressKind.ESCAPE)

    @classmethod
    def help(cls) -> "KeyPressResult":
        return cls(kind=KeyPressKind.HELP)

    @classmethod
    def up(cls) -> "KeyPressResult":
        return cls(kind=KeyPressKind.UP)

    @classmethod
    def submenu_pushed(cls, title: str) -> "KeyPressResult":
        return cls(kind=KeyPressKind.SUBMENU_PUSHED, title=title)

    @classmethod
    def action_executed(cls, sticky: bool = False) -> "KeyPressResult":
        return cls(kind=KeyPressKind.ACTION_EXECUTED, sticky=sticky)

    @classmethod
    def loading(cls, key: str) -> "KeyPressResult":
        return cls(kind=KeyPressKind.LOADING, key=key)

    @classmethod
    def error(cls, key: str) -> "KeyPressResult":
        return cls(kind=KeyPressKind.ERROR, key=key)

    @classmethod
    def none(cls) -> "KeyPressResult":
        return cls(kind=KeyPressKind.NONE)


class NavigationState(BaseModel):
    """Live position in the menu tree. Mutated only by the key press controller."""

    root: List[MenuItem] = Field(default_factory=list)
    stack: List[List[MenuItem]] = Field(default_factory=list)
    breadcrumbs: List[str] = Field(default_factory=list)
    current_key: Optional[str] = None
    generation: int = 0

    @property
    def current_menu(self) -> List[MenuItem]:
        return self.stack[-1] if self.stack else self.root

    @property
    def visible_menu(self) -> List[MenuItem]:
        menu = self.current_menu
        # a lone hidden item inside a submenu is still shown
        if len(menu) == 1 and menu[0].hidden is True and self.breadcrumbs:
            return list(menu)
        return [item for item in menu if item.hidden is not True]

    @property
    def breadcrumb_text(self) -> str:
        if not self.breadcrumbs:
            return "Home"
        return "Home > " + " > ".join(self.breadcrumbs)

    def push(self, submenu: List[MenuItem], title: str) -> None:
        self.stack.append(submenu)
        self.breadcrumbs.append(title)
        self.generation += 1

    def pop(self) -> None:
        if self.stack:
            self.stack.pop()
        if self.breadcrumbs:
            self.breadcrumbs.pop()
        self.generation += 1

    def reset(self) -> None:
        self.stack = []
        self.breadcrumbs = []
        self.current_key = None
        self.generation += 1

    def set_root(self, items: List[MenuItem]) -> None:
        self.root = list(items)
        self.reset()


class CommandResult(BaseModel):
    stdout: str
    stderr: str
    exit_code: int


class ActionOutcome(BaseModel):
    success: bool
    message: str = ""


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(BaseModel):
    item_id: Optional[str] = None
    path: List[str] = Field(default_factory=list)
    field: str
    message: str
    severity: Severity = Severity.ERROR

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.ERROR
