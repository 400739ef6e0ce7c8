# swiftkey/menu/config_manager.py
import errno
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from swiftkey.config import DEFAULT_MENU_YAML, Settings
from swiftkey.menu.merge import merge
from swiftkey.menu.parser import parse_menu
from swiftkey.menu.serializer import serialize
from swiftkey.models.errors import (
    AccessDeniedError,
    ConfigError,
    ConfigFileNotFoundError,
    DependencyNotReadyError,
    ReadFailedError,
    WriteFailedError,
)
from swiftkey.models.models import MenuItem, MergeStrategy

logger = logging.getLogger(__name__)

ItemsObserver = Callable[[List[MenuItem]], None]
ErrorObserver = Callable[[ConfigError], None]


class ConfigManager:
    """Owns the live menu tree: loading, reloading, saving and snippet imports.

    Consumers register observers instead of reaching into the manager; every
    successful load swaps the whole tree and notifies them.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings
        self._menu_items: List[MenuItem] = []
        self.last_error: Optional[ConfigError] = None
        self.last_update_time: Optional[datetime] = None
        self._last_modification: Optional[float] = None
        self._observers: List[ItemsObserver] = []
        self._error_observers: List[ErrorObserver] = []
        self._lock = threading.Lock()

    @property
    def menu_items(self) -> List[MenuItem]:
        with self._lock:
            return list(self._menu_items)

    def add_observer(self, observer: ItemsObserver) -> None:
        self._observers.append(observer)

    def add_error_observer(self, observer: ErrorObserver) -> None:
        self._error_observers.append(observer)

    # --- Paths ---

    def resolve_config_path(self) -> Path:
        if self.settings is None:
            raise DependencyNotReadyError("Settings")

        explicit = self.settings.config_file_resolved_path
        if explicit is not None:
            return explicit
        return self._create_default_config_if_needed(self.settings.default_config_path)

    def _create_default_config_if_needed(self, path: Path) -> Path:
        if path.exists():
            return path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(DEFAULT_MENU_YAML, encoding="utf-8")
            logger.info("Created default config at %s", path)
        except OSError as e:
            logger.error("Failed to create default config at %s: %s", path, e)
        return path

    # --- Loading ---

    def read_config_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ConfigFileNotFoundError(str(path))
        except PermissionError:
            raise AccessDeniedError(str(path))
        except OSError as e:
            if e.errno == errno.EACCES:
                raise AccessDeniedError(str(path))
            raise ReadFailedError(str(path), e) from e

    def load_config(self) -> List[MenuItem]:
        """Read, parse and validate the config file, then swap the live tree.

        On failure the previous tree stays live, `last_error` is set and error
        observers are notified before the error is re-raised.
        """
        try:
            path = self.resolve_config_path()
            logger.info("Loading config from %s", path)
            text = self.read_config_text(path)
            items = parse_menu(text)
        except ConfigError as e:
            logger.error("Failed to load configuration: %s", e)
            self._set_error(e)
            raise

        self._remember_mtime(path)
        self._swap(items)
        return items

    def load_or_fallback(self) -> List[MenuItem]:
        """Startup load: an unusable config falls back to the bundled default menu."""
        try:
            return self.load_config()
        except ConfigError as e:
            logger.warning("Using bundled default configuration (%s)", e)
            items = parse_menu(DEFAULT_MENU_YAML)
            self._swap(items, clear_error=False)
            return items

    def has_config_changed(self) -> bool:
        try:
            path = self.resolve_config_path()
            mtime = os.path.getmtime(path)
        except (OSError, ConfigError) as e:
            logger.debug("Could not stat config file: %s", e)
            return False

        if self._last_modification is None:
            self._last_modification = mtime
            return False
        if mtime > self._last_modification:
            logger.info("Config file changed on disk")
            self._last_modification = mtime
            return True
        return False

    def refresh_if_needed(self) -> bool:
        if not self.has_config_changed():
            return False
        try:
            self.load_config()
        except ConfigError:
            # keep the previous tree; the error was already reported
            return False
        return True

    # --- Saving / importing ---

    def save_configuration(self, items: List[MenuItem]) -> None:
        text = serialize(items)
        # the written document must load back cleanly
        validated = parse_menu(text)

        path = self.resolve_config_path()
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".menu-", suffix=".yaml", dir=str(path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, path)
        except PermissionError:
            self._discard_temp(tmp_path)
            raise AccessDeniedError(str(path))
        except OSError as e:
            self._discard_temp(tmp_path)
            raise WriteFailedError(str(path), e) from e

        logger.info("Saved %d menu items to %s", len(validated), path)
        self._remember_mtime(path)
        self._swap(validated)

    def import_snippet(self, items: List[MenuItem], strategy: MergeStrategy = MergeStrategy.APPEND) -> List[MenuItem]:
        merged = merge(self.menu_items, items, strategy)
        self.save_configuration(merged)
        return merged

    def export_configuration(self, destination: str) -> None:
        Path(destination).write_text(serialize(self.menu_items), encoding="utf-8")

    # --- Internals ---

    @staticmethod
    def _discard_temp(tmp_path: Optional[str]) -> None:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)

    def _remember_mtime(self, path: Path) -> None:
        try:
            self._last_modification = os.path.getmtime(path)
        except OSError:
            self._last_modification = None

    def _swap(self, items: List[MenuItem], clear_error: bool = True) -> None:
        with self._lock:
            self._menu_items = list(items)
            self.last_update_time = datetime.now()
            if clear_error:
                self.last_error = None
        for observer in list(self._observers):
            observer(list(items))

    def _set_error(self, error: ConfigError) -> None:
        self.last_error = error
        for observer in list(self._error_observers):
            observer(error)
