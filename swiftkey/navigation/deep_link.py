# swiftkey/navigation/deep_link.py
"""
External `swiftkey://` URLs.

    swiftkey://open?path=a,b,c      walk the menu and run / show what is there
    swiftkey://snippets/<id>        open the snippet gallery on a snippet
"""
import logging
from concurrent.futures import Future
from enum import Enum
from functools import partial
from typing import List, Optional, Protocol
from urllib.parse import parse_qs, unquote, urlparse

from pydantic import BaseModel

from swiftkey.models.models import MenuItem

logger = logging.getLogger(__name__)

SCHEME = "swiftkey"


class Presenter(Protocol):
    """What the navigation layer needs from whatever draws the overlay."""

    def present_overlay(self) -> None:
        ...

    def present_gallery(self, snippet_id: Optional[str] = None) -> None:
        ...


class DeepLinkKind(str, Enum):
    ACTION_DISPATCHED = "action_dispatched"
    OVERLAY_PRESENTED = "overlay_presented"
    GALLERY_PRESENTED = "gallery_presented"
    LOADING = "loading"
    IGNORED = "ignored"
    NOT_FOUND = "not_found"


class DeepLinkResult(BaseModel):
    kind: DeepLinkKind
    item: Optional[MenuItem] = None
    snippet_id: Optional[str] = None


def _resolved(result: DeepLinkResult) -> Future:
    future: Future = Future()
    future.set_result(result)
    return future


class DeepLinkHandler:
    def __init__(self, controller, dispatcher, presenter: Optional[Presenter] = None):
        self.controller = controller
        self.dispatcher = dispatcher
        self.presenter = presenter

    def handle(self, url: str) -> Future:
        """Resolve `url` on the interaction thread.

        Returns a future with the DeepLinkResult; it completes once the
        controller inbox has been drained.
        """
        parsed = urlparse(url)
        if parsed.scheme.lower() != SCHEME:
            logger.debug("Ignoring non-swiftkey URL %s", url)
            return _resolved(DeepLinkResult(kind=DeepLinkKind.IGNORED))

        host = parsed.netloc.lower()
        if host == "open":
            values = parse_qs(parsed.query).get("path")
            if not values or not values[0]:
                logger.warning("No path specified in URL %s", url)
                return _resolved(DeepLinkResult(kind=DeepLinkKind.IGNORED))
            return self.controller.call(partial(self.open_path, values[0].split(",")))
        if host == "snippets":
            snippet_id = unquote(parsed.path.lstrip("/")) or None
            return self.controller.call(partial(self.open_gallery, snippet_id))

        logger.debug("Ignoring unknown deep link host '%s'", host)
        return _resolved(DeepLinkResult(kind=DeepLinkKind.IGNORED))

    def open_gallery(self, snippet_id: Optional[str]) -> DeepLinkResult:
        logger.info("Opening snippet gallery (%s)", snippet_id or "no selection")
        if self.presenter is not None:
            self.presenter.present_gallery(snippet_id)
        return DeepLinkResult(kind=DeepLinkKind.GALLERY_PRESENTED, snippet_id=snippet_id)

    def open_path(self, keys: List[str]) -> DeepLinkResult:
        """Walk `keys` from the root, pushing every branch on the way.

        The walk stops at the first leaf even when keys remain.
        Runs on the interaction thread.
        """
        state = self.controller.state
        self.controller.reset()

        current = state.root
        found: Optional[MenuItem] = None
        for key in keys:
            found = next((item for item in current if item.key == key), None)
            if found is None:
                logger.warning("Menu item not found for path %s", ",".join(keys))
                return DeepLinkResult(kind=DeepLinkKind.NOT_FOUND)
            if not found.is_branch:
                break
            state.push(found.submenu, found.title)
            current = found.submenu

        if found.is_dynamic:
            self.controller.handle_key(found.key)
            self._present()
            return DeepLinkResult(kind=DeepLinkKind.LOADING, item=found)

        if found.is_leaf:
            self.dispatcher.dispatch_async(found, self.controller.executor)
            return DeepLinkResult(kind=DeepLinkKind.ACTION_DISPATCHED, item=found)

        self._present()
        return DeepLinkResult(kind=DeepLinkKind.OVERLAY_PRESENTED, item=found)

    def _present(self) -> None:
        if self.presenter is not None:
            self.presenter.present_overlay()
