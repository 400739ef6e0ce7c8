# swiftkey/navigation/controller.py
"""
Key press state machine.

All navigation state changes happen on the interaction thread: either
directly in `handle_key`, or through callables posted to the inbox and run
by `run_pending`. Background work (actions, dynamic submenus) only ever
posts back into the inbox.
"""
import logging
import queue
from concurrent.futures import Executor, Future, wait
from functools import partial
from typing import Callable, List, Optional

from swiftkey.models.models import KeyPressResult, MenuItem, NavigationState, OverlayStyle
from swiftkey.services.dynamic_menu import DynamicMenuLoader
from swiftkey.tools.tools import ActionDispatcher

logger = logging.getLogger(__name__)

ESCAPE = "escape"
UP = "up"
HELP = "help"

Posted = Callable[[], Optional[KeyPressResult]]


def find_path(items: List[MenuItem], item_id: str) -> Optional[List[MenuItem]]:
    """Items from the root down to (and including) the item with `item_id`."""
    for item in items:
        if item.id == item_id:
            return [item]
        if item.submenu:
            found = find_path(item.submenu, item_id)
            if found:
                return [item] + found
    return None


class KeyPressController:
    def __init__(
        self,
        state: NavigationState,
        dispatcher: ActionDispatcher,
        dynamic_loader: DynamicMenuLoader,
        executor: Executor,
        overlay_style: OverlayStyle = OverlayStyle.PANEL,
    ):
        self.state = state
        self.dispatcher = dispatcher
        self.dynamic_loader = dynamic_loader
        self.executor = executor
        self.overlay_style = overlay_style
        self._inbox: "queue.Queue[Posted]" = queue.Queue()
        self._inflight: List[Future] = []

    # --- Interaction channel ---

    def post(self, fn: Posted) -> None:
        """Queue work for the interaction thread. Safe to call from any thread."""
        self._inbox.put(fn)

    def call(self, fn: Callable[[], object]) -> Future:
        """Post `fn` and return a future that resolves with its return value once it has run."""
        future: Future = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(fn())
            except Exception as e:
                future.set_exception(e)

        self.post(run)
        return future

    def run_pending(self, block: bool = False, timeout: Optional[float] = None) -> List[KeyPressResult]:
        """Run queued callables in order and return the results they produced."""
        results: List[KeyPressResult] = []
        try:
            fn = self._inbox.get(block=block, timeout=timeout)
        except queue.Empty:
            return results
        while True:
            result = fn()
            if result is not None:
                results.append(result)
            try:
                fn = self._inbox.get_nowait()
            except queue.Empty:
                break
        return results

    def wait_idle(self, timeout: Optional[float] = None) -> None:
        """Block until in-flight actions and dynamic resolutions have finished."""
        pending, self._inflight = self._inflight, []
        if pending:
            wait(pending, timeout=timeout)

    # --- State helpers ---

    def set_root(self, items: List[MenuItem]) -> None:
        self.state.set_root(items)

    def reset(self) -> None:
        self.state.reset()

    def navigate_to(self, item_id: str) -> bool:
        """Reset and walk down to the item with `item_id`, pushing every branch on the way."""
        path = find_path(self.state.root, item_id)
        if path is None:
            return False
        self.state.reset()
        for item in path:
            if item.is_branch:
                self.state.push(item.submenu, item.title)
        return True

    # --- Key handling ---

    def handle_key(self, key: str, alt: bool = False, panel_mode: Optional[bool] = None) -> KeyPressResult:
        logger.debug("Key pressed: %s (alt=%s)", key, alt)
        self.state.current_key = key

        if key == ESCAPE:
            return KeyPressResult.escape()
        if key == UP:
            self.state.pop()
            return KeyPressResult.up()
        if key == HELP:
            return KeyPressResult.help()

        item = next((candidate for candidate in self.state.current_menu if candidate.key == key), None)
        if item is None:
            return KeyPressResult.error(key)

        if item.is_dynamic:
            return self._start_dynamic(item)

        if item.is_branch:
            if alt or item.batch is True:
                self._track(self.dispatcher.dispatch_batch(item.submenu, self.executor))
                return KeyPressResult.action_executed(sticky=item.sticky is True)
            self.state.push(item.submenu, item.title)
            return KeyPressResult.submenu_pushed(item.title)

        if item.action is not None:
            self._track([self.dispatcher.dispatch_async(item, self.executor)])
            if panel_mode is None:
                panel_mode = self.overlay_style == OverlayStyle.PANEL
            if item.sticky is False and panel_mode:
                return KeyPressResult.none()
            return KeyPressResult.action_executed(sticky=item.sticky is True)

        return KeyPressResult.none()

    def _start_dynamic(self, item: MenuItem) -> KeyPressResult:
        token = self.state.generation
        future = self.executor.submit(self.dynamic_loader.load, item)
        future.add_done_callback(lambda f: self.post(partial(self._finish_dynamic, token, item, f)))
        self._track([future])
        return KeyPressResult.loading(item.key)

    def _finish_dynamic(self, token: int, item: MenuItem, future: Future) -> Optional[KeyPressResult]:
        if token != self.state.generation:
            logger.debug("Discarding stale dynamic menu result for '%s'", item.title)
            return None
        error = future.exception()
        if error is not None:
            return KeyPressResult.error(item.key)
        self.state.push(future.result(), item.title)
        return KeyPressResult.submenu_pushed(item.title)

    def _track(self, futures: List[Future]) -> None:
        self._inflight = [f for f in self._inflight if not f.done()] + list(futures)
