import sys

import pytest

from swiftkey.models.errors import (
    DangerousCommandError,
    EmptyCommandError,
    ExecutionFailedError,
    InvalidShellError,
)
from swiftkey.tools.run_script import run_script, validate_shell_command

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")


def test_captures_stdout() -> None:
    result = run_script("echo hello", shell="/bin/sh")

    assert result.exit_code == 0
    assert result.stdout.strip() == "hello"


def test_non_zero_exit_raises_with_output() -> None:
    with pytest.raises(ExecutionFailedError) as excinfo:
        run_script("echo out; echo err 1>&2; exit 3", shell="/bin/sh")

    assert excinfo.value.status == 3
    assert excinfo.value.stderr.strip() == "err"
    assert excinfo.value.stdout.strip() == "out"


def test_runtime_check_rejects_dangerous_commands() -> None:
    with pytest.raises(DangerousCommandError):
        run_script("sudo rm -rf /tmp/x", shell="/bin/sh")


def test_runtime_check_rejects_empty_commands() -> None:
    with pytest.raises(EmptyCommandError):
        run_script("   ", shell="/bin/sh")


def test_missing_shell() -> None:
    with pytest.raises(InvalidShellError):
        run_script("echo hi", shell="/no/such/shell")


def test_shell_is_found_on_path() -> None:
    assert run_script("echo ok", shell="sh").stdout.strip() == "ok"


def test_timeout_is_reported_as_failure() -> None:
    with pytest.raises(ExecutionFailedError) as excinfo:
        run_script("sleep 5", shell="/bin/sh", timeout=0.2)

    assert excinfo.value.status == -1


def test_validate_returns_trimmed_command() -> None:
    assert validate_shell_command("  echo hi  ") == "echo hi"


def test_undecodable_output_is_replaced() -> None:
    result = run_script("printf '\\377\\376done'", shell="/bin/sh")

    assert result.stdout == "\ufffd\ufffddone"
