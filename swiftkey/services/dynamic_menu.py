# swiftkey/services/dynamic_menu.py
import logging
from typing import Callable, List, Optional

from swiftkey.menu.parser import parse_menu
from swiftkey.models.errors import ConfigError, DynamicMenuError, ScriptError
from swiftkey.models.models import CommandResult, MenuItem
from swiftkey.tools.run_script import run_script

logger = logging.getLogger(__name__)


class DynamicMenuLoader:
    """Builds a transient submenu from the YAML printed by a `dynamic://` command."""

    def __init__(
        self,
        runner: Callable[..., CommandResult] = run_script,
        shell: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.runner = runner
        self.shell = shell
        self.timeout = timeout

    def load(self, item: MenuItem) -> List[MenuItem]:
        if not item.is_dynamic:
            raise DynamicMenuError(item.action or "", ValueError(f"'{item.title}' is not a dynamic menu item"))

        command = item.action_payload or ""
        try:
            result = self.runner(command, shell=self.shell, timeout=self.timeout)
            items = parse_menu(result.stdout)
        except (ScriptError, ConfigError) as e:
            logger.error("Dynamic menu error for '%s': %s", item.title, e)
            raise DynamicMenuError(command, e) from e

        logger.info("Dynamic menu '%s' produced %d items", item.title, len(items))
        return items
