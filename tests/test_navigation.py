"""Key press controller transitions."""
from concurrent.futures import ThreadPoolExecutor

from swiftkey.models.errors import DynamicMenuError
from swiftkey.models.models import KeyPressKind, KeyPressResult, MenuItem, NavigationState, OverlayStyle
from swiftkey.navigation.controller import KeyPressController


def _tree():
    return [
        MenuItem(key="a", title="Apps", submenu=[MenuItem(key="b", title="Browser", action="open://https://x.org")]),
        MenuItem(key="s", title="Say", action="shell://echo hi"),
    ]


def test_submenu_push_action_and_up(make_controller, opened) -> None:
    controller = make_controller(_tree())
    state = controller.state

    assert controller.handle_key("a") == KeyPressResult.submenu_pushed("Apps")
    assert state.breadcrumbs == ["Apps"]
    assert [i.key for i in state.current_menu] == ["b"]

    assert controller.handle_key("up").kind == KeyPressKind.UP
    assert state.breadcrumbs == []
    assert state.current_menu is state.root

    controller.handle_key("a")
    assert controller.handle_key("b").kind == KeyPressKind.ACTION_EXECUTED
    assert opened == ["https://x.org"]


def test_up_at_root_is_noop(make_controller) -> None:
    controller = make_controller(_tree())

    assert controller.handle_key("up").kind == KeyPressKind.UP
    assert controller.state.stack == []


def test_escape_and_help_do_not_mutate(make_controller) -> None:
    controller = make_controller(_tree())
    controller.handle_key("a")

    assert controller.handle_key("escape").kind == KeyPressKind.ESCAPE
    assert controller.handle_key("help").kind == KeyPressKind.HELP
    assert controller.state.breadcrumbs == ["Apps"]


def test_unknown_key_is_error(make_controller) -> None:
    controller = make_controller(_tree())

    result = controller.handle_key("q")

    assert result == KeyPressResult.error("q")
    assert controller.state.current_key == "q"
    assert controller.state.stack == []


def test_hidden_items_are_still_reachable(make_controller, opened) -> None:
    controller = make_controller([MenuItem(key="h", title="Hidden", action="open://https://h.org", hidden=True)])

    assert controller.state.visible_menu == []
    assert controller.handle_key("h").kind == KeyPressKind.ACTION_EXECUTED
    assert opened == ["https://h.org"]


def test_non_sticky_leaf_in_panel_mode_is_noop(make_controller, runner) -> None:
    controller = make_controller([MenuItem(key="s", title="Say", action="shell://echo hi", sticky=False)])

    assert controller.handle_key("s").kind == KeyPressKind.NONE
    assert controller.handle_key("s", panel_mode=False).kind == KeyPressKind.ACTION_EXECUTED
    assert runner.commands == ["echo hi", "echo hi"]


def test_overlay_style_decides_panel_mode(make_controller) -> None:
    controller = make_controller(
        [MenuItem(key="s", title="Say", action="shell://echo hi", sticky=False)],
        overlay_style=OverlayStyle.HUD,
    )

    assert controller.handle_key("s").kind == KeyPressKind.ACTION_EXECUTED


def test_sticky_unset_executes(make_controller) -> None:
    controller = make_controller(_tree())

    assert controller.handle_key("s").kind == KeyPressKind.ACTION_EXECUTED


def test_sticky_flag_travels_with_result(make_controller) -> None:
    controller = make_controller([MenuItem(key="s", title="Say", action="shell://echo hi", sticky=True)])

    result = controller.handle_key("s")

    assert result.kind == KeyPressKind.ACTION_EXECUTED
    assert result.sticky is True


def test_batch_runs_direct_children_and_skips_dynamic(make_controller, opened, runner, loader) -> None:
    batch = MenuItem(
        key="x",
        title="All",
        batch=True,
        submenu=[
            MenuItem(key="1", title="One", action="open://https://one.org"),
            MenuItem(key="2", title="Two", action="shell://echo two"),
            MenuItem(key="3", title="Three", action="dynamic://echo menu"),
        ],
    )
    controller = make_controller([batch])

    assert controller.handle_key("x").kind == KeyPressKind.ACTION_EXECUTED
    assert opened == ["https://one.org"]
    assert runner.commands == ["echo two"]
    assert loader.loaded == []
    assert controller.state.stack == []


def test_alt_runs_branch_as_batch(make_controller, opened) -> None:
    controller = make_controller(_tree())

    assert controller.handle_key("a", alt=True).kind == KeyPressKind.ACTION_EXECUTED
    assert opened == ["https://x.org"]
    assert controller.state.stack == []


def test_branch_own_action_is_not_dispatched(make_controller, opened) -> None:
    both = MenuItem(
        key="p",
        title="Parent",
        action="open://https://parent.org",
        submenu=[MenuItem(key="c", title="Child", action="open://https://child.org")],
    )
    controller = make_controller([both])

    assert controller.handle_key("p").kind == KeyPressKind.SUBMENU_PUSHED
    controller.handle_key("up")
    controller.handle_key("p", alt=True)

    assert opened == ["https://child.org"]


def test_invalid_node_is_noop(make_controller) -> None:
    controller = make_controller([MenuItem(key="n", title="Nothing")])

    assert controller.handle_key("n").kind == KeyPressKind.NONE


def test_dynamic_item_loads_then_pushes(make_controller, loader) -> None:
    loader.items = [MenuItem(key="d", title="Dyn child", action="open://https://d.org")]
    controller = make_controller([MenuItem(key="y", title="Dynamic", action="dynamic://echo menu")])

    assert controller.handle_key("y") == KeyPressResult.loading("y")
    assert controller.state.stack == []

    results = controller.run_pending()

    assert results == [KeyPressResult.submenu_pushed("Dynamic")]
    assert controller.state.breadcrumbs == ["Dynamic"]
    assert controller.state.current_menu[0].title == "Dyn child"


def test_dynamic_failure_is_error_without_mutation(make_controller, loader) -> None:
    loader.error = DynamicMenuError("bad", RuntimeError("exit 1"))
    controller = make_controller([MenuItem(key="y", title="Dynamic", action="dynamic://bad")])

    controller.handle_key("y")

    assert controller.run_pending() == [KeyPressResult.error("y")]
    assert controller.state.stack == []


def test_stale_dynamic_result_is_discarded(make_controller, loader) -> None:
    loader.items = [MenuItem(key="d", title="Late", action="open://https://d.org")]
    controller = make_controller(
        [
            MenuItem(key="y", title="Dynamic", action="dynamic://echo menu"),
            MenuItem(key="a", title="Apps", submenu=[MenuItem(key="b", title="B", action="open://x")]),
        ]
    )

    controller.handle_key("y")
    controller.reset()

    assert controller.run_pending() == []
    assert controller.state.stack == []


def test_dynamic_resolution_on_worker_thread(dispatcher, loader) -> None:
    loader.items = [MenuItem(key="d", title="Dyn", action="open://https://d.org")]
    state = NavigationState()
    state.set_root([MenuItem(key="y", title="Dynamic", action="dynamic://echo menu")])
    with ThreadPoolExecutor(max_workers=2) as pool:
        controller = KeyPressController(state, dispatcher, loader, pool)

        assert controller.handle_key("y").kind == KeyPressKind.LOADING
        results = controller.run_pending(block=True, timeout=5)

    assert results == [KeyPressResult.submenu_pushed("Dynamic")]


def test_navigate_to_pushes_path(make_controller) -> None:
    tree = _tree()
    controller = make_controller(tree)

    assert controller.navigate_to(tree[0].submenu[0].id) is True
    assert controller.state.breadcrumbs == ["Apps"]
    assert controller.navigate_to("missing") is False


def test_posted_callables_run_in_order(make_controller) -> None:
    controller = make_controller(_tree())
    order = []
    controller.post(lambda: order.append(1))
    controller.post(lambda: KeyPressResult.help())
    controller.post(lambda: order.append(2))

    results = controller.run_pending()

    assert order == [1, 2]
    assert results == [KeyPressResult.help()]


def test_state_helpers() -> None:
    state = NavigationState()
    lone_hidden = [MenuItem(key="h", title="H", action="open://x", hidden=True)]
    state.set_root([MenuItem(key="a", title="A", submenu=lone_hidden)])
    start = state.generation

    assert state.breadcrumb_text == "Home"
    state.push(lone_hidden, "A")
    assert state.breadcrumb_text == "Home > A"
    assert state.visible_menu == lone_hidden
    assert state.generation == start + 1

    state.reset()
    assert state.stack == [] and state.breadcrumbs == []
    assert state.generation == start + 2


def test_call_runs_on_drain_and_carries_errors(make_controller) -> None:
    controller = make_controller(_tree())

    ok = controller.call(lambda: 42)
    failed = controller.call(lambda: 1 / 0)
    assert not ok.done()

    assert controller.run_pending() == []

    assert ok.result() == 42
    assert isinstance(failed.exception(), ZeroDivisionError)
