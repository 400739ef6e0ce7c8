# swiftkey/ui/launcher.py
"""
Terminal front end for the key press controller.

A reader thread turns raw keystrokes into callables posted on the controller
inbox, so keys, dynamic menu results and config reloads are all handled one
at a time on the thread running `TerminalLauncher.run`.
"""
import logging
import threading
import time
from functools import partial
from typing import Callable, Optional, Tuple

import readchar
from rich.console import Console

from swiftkey.container import DependencyContainer
from swiftkey.models.models import KeyPressKind, KeyPressResult
from swiftkey.ui.display import console, print_welcome_message, render_help, render_menu, render_result
from swiftkey.ui.prompts import run_gallery

logger = logging.getLogger(__name__)

QUIT_KEYS = (readchar.key.CTRL_C, readchar.key.CTRL_D)
UP_KEYS = (readchar.key.UP, readchar.key.LEFT, readchar.key.BACKSPACE)


def normalize_key(raw: str) -> Tuple[Optional[str], bool]:
    """Map a raw readchar key to (controller key, alt). None means "ignore"."""
    if raw == readchar.key.ESC:
        return "escape", False
    if raw in UP_KEYS:
        return "up", False
    if raw == "?":
        return "help", False
    # terminals send alt+x as ESC followed by x
    if len(raw) == 2 and raw[0] == "\x1b" and raw[1].isprintable():
        return raw[1], True
    if len(raw) == 1 and raw.isprintable():
        return raw, False
    return None, False


class TerminalLauncher:
    def __init__(
        self,
        container: DependencyContainer,
        console: Console = console,
        reader: Callable[[], str] = readchar.readkey,
        poll_interval: float = 0.5,
    ):
        self.container = container
        self.controller = container.controller
        self.console = console
        self.reader = reader
        self.poll_interval = poll_interval
        self.running = False
        self._reset_deadline: Optional[float] = None
        container.set_presenter(self)

    # --- Presenter ---

    def present_overlay(self) -> None:
        render_menu(self.controller.state, self.console)

    def present_gallery(self, snippet_id: Optional[str] = None) -> None:
        run_gallery(self.container.snippets, snippet_id)

    # --- Session ---

    def run(self) -> None:
        print_welcome_message(self.console)
        self.running = True
        self.present_overlay()

        reader = threading.Thread(target=self._read_keys, name="swiftkey-keys", daemon=True)
        reader.start()

        while self.running:
            for result in self.controller.run_pending(block=True, timeout=self.poll_interval):
                self.show(result)
            self._tick()

        logger.info("Session ended")

    def _read_keys(self) -> None:
        while self.running:
            try:
                raw = self.reader()
            except (KeyboardInterrupt, EOFError):
                raw = readchar.key.CTRL_C
            self.controller.post(partial(self.on_key, raw))
            if raw in QUIT_KEYS:
                return

    def _tick(self) -> None:
        if self._reset_deadline is not None and time.monotonic() >= self._reset_deadline:
            self._reset_deadline = None
            if self.controller.state.stack:
                logger.debug("Resetting navigation after inactivity")
                self.controller.reset()
                self.present_overlay()
        if self.container.config_manager.refresh_if_needed():
            # queued behind the tree swap posted by the config observer
            self.controller.post(self.present_overlay)

    def on_key(self, raw: str) -> Optional[KeyPressResult]:
        if raw in QUIT_KEYS:
            self.running = False
            return None
        key, alt = normalize_key(raw)
        if key is None:
            return None
        self._reset_deadline = None
        if key == "escape" and not self.controller.state.stack:
            self.running = False
        return self.controller.handle_key(key, alt=alt)

    def show(self, result: KeyPressResult) -> None:
        if result.kind == KeyPressKind.ESCAPE:
            if self.running:
                self.controller.reset()
                self.present_overlay()
        elif result.kind in (KeyPressKind.UP, KeyPressKind.SUBMENU_PUSHED):
            self.present_overlay()
        elif result.kind == KeyPressKind.HELP:
            render_help(self.controller.state, self.console)
        elif result.kind == KeyPressKind.ACTION_EXECUTED:
            render_result(result, self.console)
            if not result.sticky:
                self._reset_deadline = time.monotonic() + self.container.settings.menu_state_reset_delay
        elif result.kind == KeyPressKind.NONE:
            # a non-sticky panel action dismisses the menu right away
            self.controller.reset()
            self.present_overlay()
        else:
            render_result(result, self.console)
