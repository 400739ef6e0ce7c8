import pytest

from swiftkey.models.models import MenuItem
from swiftkey.navigation.deep_link import DeepLinkHandler, DeepLinkKind


@pytest.fixture
def handler(make_controller, dispatcher, presenter):
    tree = [
        MenuItem(key="a", title="Apps", submenu=[
            MenuItem(key="b", title="Browser", action="open://https://b.org"),
            MenuItem(key="t", title="Tools", submenu=[MenuItem(key="x", title="X", action="open://https://x.org")]),
        ]),
        MenuItem(key="y", title="Dynamic", action="dynamic://echo menu"),
    ]
    return DeepLinkHandler(make_controller(tree), dispatcher, presenter)


def follow(handler, url):
    pending = handler.handle(url)
    handler.controller.run_pending()
    return pending.result()


def test_path_to_leaf_dispatches(handler, opened, presenter) -> None:
    result = follow(handler, "swiftkey://open?path=a,b")

    assert result.kind == DeepLinkKind.ACTION_DISPATCHED
    assert result.item.title == "Browser"
    assert opened == ["https://b.org"]
    assert presenter.overlays == 0


def test_path_to_branch_presents_overlay_at_position(handler, presenter) -> None:
    result = follow(handler, "swiftkey://open?path=a,t")

    assert result.kind == DeepLinkKind.OVERLAY_PRESENTED
    assert handler.controller.state.breadcrumbs == ["Apps", "Tools"]
    assert presenter.overlays == 1


def test_walk_stops_at_first_leaf(handler, opened) -> None:
    result = follow(handler, "swiftkey://open?path=a,b,zzz")

    assert result.kind == DeepLinkKind.ACTION_DISPATCHED
    assert opened == ["https://b.org"]


def test_unknown_key_is_not_found(handler, opened) -> None:
    assert follow(handler, "swiftkey://open?path=a,q").kind == DeepLinkKind.NOT_FOUND
    assert opened == []


def test_dynamic_target_starts_loading(handler, loader, presenter) -> None:
    result = follow(handler, "swiftkey://open?path=y")

    assert result.kind == DeepLinkKind.LOADING
    assert len(loader.loaded) == 1
    assert presenter.overlays == 1


def test_snippet_link_opens_gallery(handler, presenter) -> None:
    result = follow(handler, "swiftkey://snippets/alice/dev-tools")

    assert result.kind == DeepLinkKind.GALLERY_PRESENTED
    assert result.snippet_id == "alice/dev-tools"
    assert presenter.galleries == ["alice/dev-tools"]


@pytest.mark.parametrize(
    "url",
    ["https://example.com", "swiftkey://open", "swiftkey://open?path=", "swiftkey://settings"],
)
def test_ignored_links(handler, url) -> None:
    assert follow(handler, url).kind == DeepLinkKind.IGNORED


def test_scheme_and_host_are_case_insensitive(handler, opened) -> None:
    assert follow(handler, "SwiftKey://OPEN?path=a,b").kind == DeepLinkKind.ACTION_DISPATCHED


def test_navigation_waits_for_the_interaction_thread(handler, presenter) -> None:
    pending = handler.handle("swiftkey://open?path=a,t")

    assert not pending.done()
    assert handler.controller.state.breadcrumbs == []
    assert presenter.overlays == 0

    handler.controller.run_pending()

    assert pending.result().kind == DeepLinkKind.OVERLAY_PRESENTED
    assert handler.controller.state.breadcrumbs == ["Apps", "Tools"]


def test_ignored_links_resolve_immediately(handler) -> None:
    assert handler.handle("https://example.com").result().kind == DeepLinkKind.IGNORED
