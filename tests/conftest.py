from concurrent.futures import Executor, Future
from pathlib import Path
from typing import List

import pytest

from swiftkey.config import Settings
from swiftkey.menu.config_manager import ConfigManager
from swiftkey.models.errors import ExecutionFailedError
from swiftkey.models.models import CommandResult, MenuItem, NavigationState
from swiftkey.navigation.controller import KeyPressController
from swiftkey.tools.tools import ActionDispatcher


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args, **kwargs):
        self.submitted.append(fn)
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:  # surfaced through the future like a real pool
            future.set_exception(e)
        return future


class FakeRunner:
    """Stands in for run_script; records commands and returns canned output."""

    def __init__(self, stdout: str = "", exit_code: int = 0):
        self.stdout = stdout
        self.exit_code = exit_code
        self.commands: List[str] = []

    def __call__(self, command, shell=None, timeout=None):
        self.commands.append(command)
        if self.exit_code != 0:
            raise ExecutionFailedError(self.exit_code, "boom", self.stdout)
        return CommandResult(stdout=self.stdout, stderr="", exit_code=0)


class FakeLoader:
    def __init__(self, items=None, error=None):
        self.items = items or []
        self.error = error
        self.loaded: List[MenuItem] = []

    def load(self, item):
        self.loaded.append(item)
        if self.error is not None:
            raise self.error
        return self.items


class RecordingPresenter:
    def __init__(self):
        self.overlays = 0
        self.galleries = []

    def present_overlay(self):
        self.overlays += 1

    def present_gallery(self, snippet_id=None):
        self.galleries.append(snippet_id)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        config_file_path=str(tmp_path / "menu.yaml"),
        snippets_cache_file=str(tmp_path / "cache" / "snippets.json"),
        log_file=None,
    )


@pytest.fixture
def config_manager(settings: Settings) -> ConfigManager:
    return ConfigManager(settings)


@pytest.fixture
def opened() -> List[str]:
    return []


@pytest.fixture
def notifications() -> list:
    return []


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner(stdout="hello\n")


@pytest.fixture
def dispatcher(settings, opened, notifications, runner) -> ActionDispatcher:
    return ActionDispatcher(
        settings,
        notifier=lambda title, message: notifications.append((title, message)),
        opener=opened.append,
        shortcut_runner=lambda name: opened.append(f"shortcut:{name}"),
        runner=runner,
    )


@pytest.fixture
def executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def loader() -> FakeLoader:
    return FakeLoader()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def make_controller(dispatcher, loader, executor):
    def _make(items: List[MenuItem], **kwargs) -> KeyPressController:
        state = NavigationState()
        state.set_root(items)
        return KeyPressController(
            state,
            kwargs.get("dispatcher", dispatcher),
            kwargs.get("loader", loader),
            kwargs.get("executor", executor),
            **{k: v for k, v in kwargs.items() if k == "overlay_style"},
        )

    return _make
