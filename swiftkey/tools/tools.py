# swiftkey/tools/tools.py

import logging
import os
import platform
import subprocess
from concurrent.futures import Executor, Future
from typing import Callable, List, Optional
from urllib.parse import urlparse

from swiftkey.config import Settings
from swiftkey.models.errors import ActionError, ScriptError
from swiftkey.models.models import ActionOutcome, CommandResult, MenuItem
from swiftkey.tools.run_script import run_script

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]
Opener = Callable[[str], None]
ShortcutRunner = Callable[[str], None]
ScriptRunner = Callable[..., CommandResult]


def system_open(target: str) -> None:
    """Ask the OS to open a path or URL with its registered handler."""
    system = platform.system().lower()
    if system == "windows":
        os.startfile(target)  # type: ignore[attr-defined]
        return
    opener = "open" if system == "darwin" else "xdg-open"
    try:
        subprocess.Popen([opener, target], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise ActionError(f"Could not open {target}: {e}") from e


def run_shortcut(name: str) -> None:
    """Fire-and-forget run of an automation shortcut by name."""
    try:
        subprocess.Popen(["shortcuts", "run", name], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise ActionError(f"Could not run shortcut '{name}': {e}") from e


def is_well_formed_url(value: str) -> bool:
    parsed = urlparse(value)
    if not parsed.scheme or " " in value:
        return False
    return bool(parsed.netloc or parsed.path)


class ActionDispatcher:
    """Turns a leaf item's action descriptor into exactly one side effect."""

    def __init__(
        self,
        settings: Settings,
        notifier: Optional[Notifier] = None,
        opener: Opener = system_open,
        shortcut_runner: ShortcutRunner = run_shortcut,
        runner: ScriptRunner = run_script,
    ):
        self.settings = settings
        self.notifier = notifier
        self.opener = opener
        self.shortcut_runner = shortcut_runner
        self.runner = runner

    def dispatch_async(self, item: MenuItem, executor: Executor) -> Future:
        return executor.submit(self.dispatch, item)

    def dispatch_batch(self, items: List[MenuItem], executor: Executor) -> List[Future]:
        """Submit every actionable, non-dynamic item in order; completion order is not guaranteed."""
        futures = []
        for child in items:
            if child.action is None or child.is_dynamic:
                continue
            futures.append(self.dispatch_async(child, executor))
        return futures

    def dispatch(self, item: MenuItem) -> ActionOutcome:
        """Run the item's action. Runtime failures are logged (and notified), never raised."""
        try:
            return self._dispatch(item)
        except (ActionError, ScriptError) as e:
            logger.error("Action '%s' for '%s' failed: %s", item.action, item.title, e)
            if item.notify:
                self._notify(f"{item.title} failed", str(e))
            return ActionOutcome(success=False, message=str(e))
        except Exception as e:
            logger.exception("Unexpected error running '%s' for '%s'", item.action, item.title)
            if item.notify:
                self._notify(f"{item.title} failed", str(e))
            return ActionOutcome(success=False, message=str(e))

    def _dispatch(self, item: MenuItem) -> ActionOutcome:
        scheme, payload = item.action_scheme, item.action_payload
        if scheme is None or payload is None:
            raise ActionError(f"Item '{item.title}' has no usable action")

        logger.info("Executing %s action for '%s'", scheme, item.title)
        if scheme == "launch":
            return self._launch(payload)
        if scheme == "open":
            return self._open(payload)
        if scheme == "shortcut":
            self.shortcut_runner(payload)
            return ActionOutcome(success=True, message=f"Shortcut '{payload}' started")
        if scheme == "shell":
            return self._shell(item, payload)
        if scheme == "dynamic":
            raise ActionError("dynamic:// actions are resolved by navigation, not dispatched")
        raise ActionError(f"Unknown action scheme '{scheme}'")

    def _launch(self, path: str) -> ActionOutcome:
        expanded = os.path.expanduser(path)
        if not os.path.exists(expanded):
            raise ActionError(f"Application not found or invalid at path: {path}")
        self.opener(expanded)
        return ActionOutcome(success=True, message=f"Launched {path}")

    def _open(self, url: str) -> ActionOutcome:
        if not is_well_formed_url(url):
            raise ActionError(f"Invalid URL: {url}")
        self.opener(url)
        return ActionOutcome(success=True, message=f"Opened {url}")

    def _shell(self, item: MenuItem, command: str) -> ActionOutcome:
        result = self.runner(command, shell=self.settings.shell)
        output = result.stdout.strip()
        if item.notify:
            self._notify(item.title, output or "Command executed successfully")
        return ActionOutcome(success=True, message=output)

    def _notify(self, title: str, message: str) -> None:
        if self.notifier is None:
            logger.info("%s: %s", title, message)
            return
        self.notifier(title, message)
