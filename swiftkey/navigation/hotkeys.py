# swiftkey/navigation/hotkeys.py
import logging
from functools import partial
from typing import Dict, FrozenSet, List, NamedTuple, Optional

from swiftkey.menu.validation import MODIFIER_NAMES, hotkey_problem
from swiftkey.models.errors import SemanticError
from swiftkey.models.models import KeyPressResult, MenuItem
from swiftkey.navigation.controller import KeyPressController
from swiftkey.navigation.deep_link import Presenter
from swiftkey.tools.tools import ActionDispatcher

logger = logging.getLogger(__name__)

KEY_ALIASES = {"esc": "escape", "enter": "return"}


class Hotkey(NamedTuple):
    modifiers: FrozenSet[str]
    key: str

    def __str__(self) -> str:
        return "+".join(sorted(self.modifiers) + [self.key])


def parse_hotkey(text: str) -> Hotkey:
    """Parse `modifier+modifier+key` into a normalized Hotkey.

    Modifier spellings collapse to cmd/ctrl/alt/shift, so `command+K` and
    `⌘+k` describe the same hotkey.
    """
    problem = hotkey_problem(text)
    if problem:
        raise SemanticError(f"Invalid hotkey '{text}': {problem}")
    *modifiers, key = [part.strip() for part in text.lower().split("+")]
    key = KEY_ALIASES.get(key, key)
    return Hotkey(frozenset(MODIFIER_NAMES[m] for m in modifiers), key)


class HotkeyRegistry:
    """Maps global hotkeys to menu items.

    The OS-level registration lives in the presentation layer; this class
    only knows which item a descriptor belongs to and what to do with it.
    """

    def __init__(
        self,
        controller: KeyPressController,
        dispatcher: ActionDispatcher,
        presenter: Optional[Presenter] = None,
    ):
        self.controller = controller
        self.dispatcher = dispatcher
        self.presenter = presenter
        self._bindings: Dict[Hotkey, MenuItem] = {}

    @property
    def bindings(self) -> Dict[Hotkey, MenuItem]:
        return dict(self._bindings)

    def clear(self) -> None:
        self._bindings = {}

    def register_menu_hotkeys(self, items: List[MenuItem]) -> int:
        self.clear()
        self._register(items)
        logger.info("Registered %d hotkeys", len(self._bindings))
        return len(self._bindings)

    def _register(self, items: List[MenuItem]) -> None:
        for item in items:
            if item.hotkey:
                try:
                    hotkey = parse_hotkey(item.hotkey)
                except SemanticError as e:
                    logger.warning("Skipping hotkey for '%s': %s", item.title, e)
                else:
                    existing = self._bindings.get(hotkey)
                    if existing is not None:
                        logger.warning(
                            "Hotkey %s of '%s' is already bound to '%s'", hotkey, item.title, existing.title
                        )
                    else:
                        self._bindings[hotkey] = item
            if item.submenu:
                self._register(item.submenu)

    def lookup(self, descriptor: str) -> Optional[MenuItem]:
        try:
            return self._bindings.get(parse_hotkey(descriptor))
        except SemanticError:
            return None

    def trigger(self, descriptor: str) -> bool:
        """Fire the item bound to `descriptor`. Returns False when nothing is bound."""
        item = self.lookup(descriptor)
        if item is None:
            logger.debug("No item bound to hotkey %s", descriptor)
            return False

        logger.info("Hotkey %s triggered '%s'", descriptor, item.title)
        if item.is_leaf and not item.is_dynamic:
            self.dispatcher.dispatch_async(item, self.controller.executor)
            return True

        self.controller.post(partial(self._open_at, item))
        return True

    def _open_at(self, item: MenuItem) -> Optional[KeyPressResult]:
        # branches open the overlay at their position; dynamic items resolve in place
        self.controller.navigate_to(item.id)
        result = self.controller.handle_key(item.key) if item.is_dynamic else None
        if self.presenter is not None:
            self.presenter.present_overlay()
        return result
