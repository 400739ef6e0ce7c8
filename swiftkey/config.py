# swiftkey/config.py

import json
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from swiftkey.models.models import OverlayStyle

logger = logging.getLogger(__name__)

# Define settings file path
SETTINGS_FILE = "settings.json"

DEFAULT_CONFIG_NAME = "menu.yaml"

# Bundled default menu, written to <documents>/menu.yaml on first start
DEFAULT_MENU_YAML = """\
# SwiftKey configuration
#
# Every item needs a single-character `key` and a `title`, plus either an
# `action` (launch://, open://, shortcut://, shell://, dynamic://) or a `submenu`.

- key: "c"
  title: "Launch Calculator"
  action: "launch:///System/Applications/Calculator.app"

- key: "n"
  title: "Launch Notes"
  action: "launch:///System/Applications/Notes.app"

- key: "w"
  title: "Web"
  submenu:
    - key: "g"
      title: "GitHub"
      action: "open://https://github.com"
    - key: "e"
      title: "Example"
      action: "open://https://www.example.com"

- key: "s"
  title: "Shell"
  submenu:
    - key: "d"
      title: "Show date"
      action: "shell://date"
      notify: true
    - key: "u"
      title: "Uptime"
      action: "shell://uptime"
      notify: true
"""

ENV_OVERRIDES = {
    "SWIFTKEY_CONFIG_FILE": "config_file_path",
    "SWIFTKEY_OVERLAY_STYLE": "overlay_style",
    "SWIFTKEY_SNIPPETS_URL": "snippets_base_url",
    "SWIFTKEY_LOG_LEVEL": "log_level",
    "SWIFTKEY_LOG_FILE": "log_file",
    "SWIFTKEY_SHELL": "shell",
}


def documents_dir() -> Path:
    return Path.home() / "Documents"


def default_cache_file() -> str:
    base = os.getenv("XDG_CACHE_HOME") or os.path.join(os.path.expanduser("~"), ".cache")
    return os.path.join(base, "swiftkey", "snippets-cache.json")


class Settings(BaseModel):
    config_file_path: str = ""
    menu_state_reset_delay: float = 3.0
    overlay_style: OverlayStyle = OverlayStyle.PANEL
    snippets_base_url: str = "http://localhost:3000"
    snippets_cache_file: str = ""
    shell: Optional[str] = None
    dynamic_timeout: Optional[float] = 30.0
    log_level: str = "INFO"
    log_file: Optional[str] = "swiftkey.log"

    @property
    def config_file_resolved_path(self) -> Optional[Path]:
        if not self.config_file_path:
            return None
        return Path(os.path.expanduser(self.config_file_path)).resolve()

    @property
    def default_config_path(self) -> Path:
        return documents_dir() / DEFAULT_CONFIG_NAME

    @property
    def cache_file(self) -> str:
        return self.snippets_cache_file or default_cache_file()

    def save_settings(self, settings_file: str = SETTINGS_FILE) -> None:
        """Saves the settings to settings.json."""
        try:
            with open(settings_file, "w") as f:
                json.dump(self.model_dump(mode="json"), f, indent=4)
            logger.debug("Saved settings to %s", settings_file)
        except (IOError, TypeError) as e:
            logger.error("Failed to save settings to %s: %s", settings_file, e)


def apply_env_overrides(settings: Settings) -> Settings:
    updates = {}
    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            updates[field_name] = value
    if not updates:
        return settings
    try:
        return Settings(**{**settings.model_dump(), **updates})
    except ValidationError as e:
        logger.warning("Ignoring invalid SWIFTKEY_* environment overrides: %s", e)
        return settings


def load_settings(settings_file: str = SETTINGS_FILE, env_file: Optional[str] = None) -> Settings:
    load_dotenv(dotenv_path=env_file)

    settings = None
    try:
        logger.info("Loading settings from %s...", settings_file)
        with open(settings_file, "r") as f:
            settings = Settings(**json.load(f))
    except FileNotFoundError:
        logger.info("Settings file (%s) not found. Creating defaults.", settings_file)
        settings = Settings()
        settings.save_settings(settings_file)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning("Failed to load or validate %s (%s). Using default settings.", settings_file, e)
        settings = Settings()

    return apply_env_overrides(settings)
