# swiftkey/container.py
"""
Wires the services together once at startup.

Components never look each other up globally; they receive what they need
here and talk back through observers and the controller inbox.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from swiftkey.config import Settings, load_settings
from swiftkey.menu.config_manager import ConfigManager
from swiftkey.menu.editor import ConfigEditor
from swiftkey.models.errors import AccessDeniedError, ConfigError, ConfigFileNotFoundError
from swiftkey.models.models import MenuItem, NavigationState
from swiftkey.navigation.controller import KeyPressController
from swiftkey.navigation.deep_link import DeepLinkHandler, Presenter
from swiftkey.navigation.hotkeys import HotkeyRegistry
from swiftkey.services.dynamic_menu import DynamicMenuLoader
from swiftkey.services.snippets_api import SnippetsService, SnippetsStore
from swiftkey.tools.tools import ActionDispatcher, Notifier

logger = logging.getLogger(__name__)


class DependencyContainer:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        dispatcher: Optional[ActionDispatcher] = None,
        dynamic_loader: Optional[DynamicMenuLoader] = None,
        snippets_service: Optional[SnippetsService] = None,
        max_workers: int = 4,
    ):
        self.settings = settings or load_settings()
        self.notifier = notifier
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="swiftkey")

        self.config_manager = ConfigManager(self.settings)
        self.state = NavigationState()
        self.dispatcher = dispatcher or ActionDispatcher(self.settings, notifier=notifier)
        self.dynamic_loader = dynamic_loader or DynamicMenuLoader(
            shell=self.settings.shell, timeout=self.settings.dynamic_timeout
        )
        self.controller = KeyPressController(
            self.state,
            self.dispatcher,
            self.dynamic_loader,
            self.executor,
            overlay_style=self.settings.overlay_style,
        )
        self.hotkeys = HotkeyRegistry(self.controller, self.dispatcher)
        self.deep_links = DeepLinkHandler(self.controller, self.dispatcher)
        self.snippets = SnippetsStore(
            snippets_service or SnippetsService(self.settings.snippets_base_url),
            self.settings.cache_file,
            self.config_manager,
        )

        self._connect_components()

    def _connect_components(self) -> None:
        self.config_manager.add_observer(self._on_menu_items)
        self.config_manager.add_error_observer(self._on_config_error)

    def _on_menu_items(self, items: List[MenuItem]) -> None:
        # may run on any thread; the tree swap itself happens on the interaction thread
        self.controller.post(lambda: self._apply_menu_items(items))

    def _apply_menu_items(self, items: List[MenuItem]) -> None:
        self.controller.set_root(items)
        logger.info("Updated menu items: %d items", len(items))
        self.hotkeys.register_menu_hotkeys(items)

    def _on_config_error(self, error: ConfigError) -> None:
        if isinstance(error, (ConfigFileNotFoundError, AccessDeniedError)) and self.notifier is not None:
            self.notifier("Configuration Error", str(error))
        else:
            logger.error("Config error: %s", error)

    def set_presenter(self, presenter: Presenter) -> None:
        self.hotkeys.presenter = presenter
        self.deep_links.presenter = presenter

    def start(self) -> List[MenuItem]:
        """Load the configuration (falling back to the bundled menu) and apply it."""
        items = self.config_manager.load_or_fallback()
        self.controller.run_pending()
        return items

    def editor(self) -> ConfigEditor:
        return ConfigEditor(self.config_manager)

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down")
        self.executor.shutdown(wait=wait)
