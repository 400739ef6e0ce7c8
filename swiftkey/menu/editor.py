# swiftkey/menu/editor.py
"""
Editable working copy of the menu tree.

Items live in a flat arena keyed by id; each node keeps its parent id and
the ordered ids of its children. Callers still address items by index path
(`[2, 0]` is the first child of the third root item). Every edit is a pair
of closures (apply, revert) so it can be undone and redone without copying
the tree.
"""
import logging
import uuid
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from swiftkey.menu.config_manager import ConfigManager
from swiftkey.menu.merge import next_available_key
from swiftkey.menu.validation import iter_issues
from swiftkey.models.errors import SemanticError
from swiftkey.models.models import MenuItem, ValidationIssue

logger = logging.getLogger(__name__)

Path = Sequence[int]

# fields an edit may change; the tree shape is changed through insert/remove/move
EDITABLE_FIELDS = ("key", "title", "icon", "action", "sticky", "notify", "batch", "hidden", "hotkey")


class EditorNode(BaseModel):
    id: str
    parent_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    # None means the item has no submenu at all, [] an empty one
    children: Optional[List[str]] = None


class Edit(NamedTuple):
    description: str
    apply: Callable[[], None]
    revert: Callable[[], None]


class ConfigEditor:
    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager
        self._nodes: Dict[str, EditorNode] = {}
        self._roots: List[str] = []
        self._original: List[MenuItem] = []
        self._undo: List[Edit] = []
        self._redo: List[Edit] = []
        self.load()

    # --- Loading ---

    def load(self) -> None:
        """Take a fresh copy of the live configuration and forget the edit history."""
        self._original = self.config_manager.menu_items
        self._rebuild(self._original)
        logger.debug("Editor loaded %d root items", len(self._roots))

    def discard_changes(self) -> None:
        self._rebuild(self._original)

    def _rebuild(self, items: List[MenuItem]) -> None:
        self._nodes = {}
        self._roots = []
        self._undo = []
        self._redo = []
        for item in items:
            self._roots.append(self._add_subtree(item, None))

    def _add_subtree(self, item: MenuItem, parent_id: Optional[str], fresh_ids: bool = False) -> str:
        node_id = str(uuid.uuid4()) if fresh_ids else item.id
        node = EditorNode(
            id=node_id,
            parent_id=parent_id,
            data=item.model_dump(exclude={"id", "submenu"}),
        )
        self._nodes[node_id] = node
        if item.submenu is not None:
            node.children = [self._add_subtree(child, node_id, fresh_ids) for child in item.submenu]
        return node_id

    # --- Reading ---

    def to_items(self) -> List[MenuItem]:
        return [self._build_item(node_id) for node_id in self._roots]

    def _build_item(self, node_id: str) -> MenuItem:
        node = self._nodes[node_id]
        submenu = None
        if node.children is not None:
            submenu = [self._build_item(child) for child in node.children]
        return MenuItem(id=node.id, submenu=submenu, **node.data)

    def item_at(self, path: Path) -> MenuItem:
        parent_id, index = self._resolve(path)
        return self._build_item(self._child_list(parent_id)[index])

    def find_path(self, item_id: str) -> Optional[List[int]]:
        path: List[int] = []
        current: Optional[str] = item_id
        while current is not None:
            node = self._nodes.get(current)
            if node is None:
                return None
            siblings = self._child_list(node.parent_id)
            if current not in siblings:
                # detached by a remove that has not been undone
                return None
            path.insert(0, siblings.index(current))
            current = node.parent_id
        return path

    @property
    def has_unsaved_changes(self) -> bool:
        current = self.to_items()
        if len(current) != len(self._original):
            return True
        return not all(a.same_as(b) for a, b in zip(current, self._original))

    # --- Path helpers ---

    def _child_list(self, parent_id: Optional[str], create: bool = False) -> List[str]:
        if parent_id is None:
            return self._roots
        node = self._nodes[parent_id]
        if node.children is None:
            if not create:
                return []
            node.children = []
        return node.children

    def _resolve(self, path: Path, for_insert: bool = False) -> Tuple[Optional[str], int]:
        """Return (parent id, index) for `path`.

        With `for_insert` the last index may point one past the end (it is
        clamped), and the parent may be an item without a submenu yet.
        """
        if not path:
            raise IndexError("An item path needs at least one index")
        parent_id: Optional[str] = None
        for index in path[:-1]:
            siblings = self._child_list(parent_id)
            if not 0 <= index < len(siblings):
                raise IndexError(f"No menu item at path {list(path)}")
            parent_id = siblings[index]
        index = path[-1]
        siblings = self._child_list(parent_id)
        if for_insert:
            return parent_id, max(0, min(index, len(siblings)))
        if not 0 <= index < len(siblings):
            raise IndexError(f"No menu item at path {list(path)}")
        return parent_id, index

    def _attach(self, node_id: str, parent_id: Optional[str], index: int) -> None:
        self._child_list(parent_id, create=True).insert(index, node_id)
        self._nodes[node_id].parent_id = parent_id

    def _detach(self, parent_id: Optional[str], index: int) -> str:
        # the subtree stays in the arena so that undo can re-attach it
        return self._child_list(parent_id).pop(index)

    # --- Undo / redo ---

    def _perform(self, edit: Edit) -> None:
        edit.apply()
        self._undo.append(edit)
        self._redo.clear()
        logger.debug("Editor: %s", edit.description)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        if not self._undo:
            return False
        edit = self._undo.pop()
        edit.revert()
        self._redo.append(edit)
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        edit = self._redo.pop()
        edit.apply()
        self._undo.append(edit)
        return True

    # --- Edits ---

    def add_item(self, path: Optional[Path] = None) -> str:
        """Add a blank item at `path`, or at the end of the root menu."""
        item = MenuItem(key="", title="New Item", icon="star", submenu=[])
        if path is None:
            path = [len(self._roots)]
        return self.insert_item(item, path)

    def insert_item(self, item: MenuItem, path: Path, fresh_ids: bool = True) -> str:
        """Insert a copy of `item` (and its submenu) so that it ends up at `path`."""
        parent_id, index = self._resolve(path, for_insert=True)
        node_id = self._add_subtree(item, None, fresh_ids)
        had_submenu = parent_id is None or self._nodes[parent_id].children is not None

        def apply():
            self._attach(node_id, parent_id, index)

        def revert():
            self._detach(parent_id, index)
            if not had_submenu:
                self._nodes[parent_id].children = None

        self._perform(Edit(f"insert '{item.title}' at {list(path)}", apply, revert))
        return node_id

    def remove_item(self, path: Path) -> MenuItem:
        parent_id, index = self._resolve(path)
        removed = self.item_at(path)

        def apply():
            self._detach(parent_id, index)

        def revert():
            self._attach(removed.id, parent_id, index)

        self._perform(Edit(f"remove '{removed.title}'", apply, revert))
        return removed

    def update_item(self, path: Path, **changes: Any) -> MenuItem:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        parent_id, index = self._resolve(path)
        node = self._nodes[self._child_list(parent_id)[index]]
        before = dict(node.data)
        # run the new values through the model so types are checked the same way as on load
        updated = MenuItem(**{**before, **changes})
        after = updated.model_dump(exclude={"id", "submenu"})

        def apply():
            node.data = dict(after)

        def revert():
            node.data = dict(before)

        self._perform(Edit(f"update '{before.get('title')}' ({', '.join(sorted(changes))})", apply, revert))
        return self._build_item(node.id)

    def move_item(self, source: Path, destination: Path) -> None:
        """Move the item at `source` so that it ends up at `destination`.

        `destination` is read against the tree after the item was taken out,
        so the item's own submenu can never be a destination.
        """
        src_parent, src_index = self._resolve(source)
        node_id = self._child_list(src_parent)[src_index]
        placed: Dict[str, Any] = {}

        def apply():
            self._detach(src_parent, src_index)
            try:
                dst_parent, dst_index = self._resolve(destination, for_insert=True)
            except IndexError:
                self._attach(node_id, src_parent, src_index)
                raise
            placed["parent"] = dst_parent
            placed["index"] = dst_index
            placed["had_submenu"] = dst_parent is None or self._nodes[dst_parent].children is not None
            self._attach(node_id, dst_parent, dst_index)

        def revert():
            self._detach(placed["parent"], placed["index"])
            if not placed["had_submenu"]:
                self._nodes[placed["parent"]].children = None
            self._attach(node_id, src_parent, src_index)

        self._perform(Edit(f"move {list(source)} -> {list(destination)}", apply, revert))

    def duplicate_item(self, path: Path) -> str:
        """Copy the item next to itself with the next free key."""
        parent_id, index = self._resolve(path)
        original = self.item_at(path)
        taken = [self._nodes[sibling].data.get("key", "") for sibling in self._child_list(parent_id)]
        copy = original.model_copy(update={"key": next_available_key(original.key, taken)})
        return self.insert_item(copy, list(path[:-1]) + [index + 1])

    # --- Validation / saving ---

    def issues(self) -> List[ValidationIssue]:
        return list(iter_issues(self.to_items()))

    def validate(self) -> Dict[str, List[ValidationIssue]]:
        by_item: Dict[str, List[ValidationIssue]] = {}
        for issue in self.issues():
            by_item.setdefault(issue.item_id or "", []).append(issue)
        return by_item

    @property
    def has_blocking_issues(self) -> bool:
        return any(issue.is_blocking for issue in self.issues())

    def save(self) -> bool:
        """Commit the working copy through the config manager.

        Returns False when there was nothing to save.
        """
        if not self.has_unsaved_changes:
            return False
        blocking = [issue for issue in self.issues() if issue.is_blocking]
        if blocking:
            first = blocking[0]
            raise SemanticError(
                f"{len(blocking)} validation error(s); first: {first.message} (item '{' > '.join(first.path)}')"
            )
        items = self.to_items()
        self.config_manager.save_configuration(items)
        self._original = items
        logger.info("Editor saved %d root items", len(items))
        return True
