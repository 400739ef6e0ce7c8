# swiftkey/tools/run_script.py

import logging
import os
import shutil
import subprocess
from typing import Optional

from swiftkey.menu.validation import shell_command_problem
from swiftkey.models.errors import (
    DangerousCommandError,
    EmptyCommandError,
    ExecutionFailedError,
    InvalidShellError,
    LaunchFailedError,
)
from swiftkey.models.models import CommandResult

logger = logging.getLogger(__name__)


def validate_shell_command(command: str) -> str:
    """Runtime safety check, repeated right before anything is executed.

    Returns the trimmed command.
    """
    trimmed = (command or "").strip()
    if not trimmed:
        logger.error("Empty command provided")
        raise EmptyCommandError()
    problem = shell_command_problem(command)
    if problem:
        logger.error("Potentially dangerous command rejected: %s (%s)", trimmed, problem)
        raise DangerousCommandError(trimmed, problem)
    return trimmed


def _resolve_shell(shell: Optional[str]) -> str:
    shell = shell or os.getenv("SHELL") or "/bin/sh"
    resolved = shell if os.path.isabs(shell) else shutil.which(shell)
    if not resolved or not os.path.exists(resolved):
        logger.error("Shell executable not found: %s", shell)
        raise InvalidShellError(shell)
    return resolved


def run_script(command: str, shell: Optional[str] = None, timeout: Optional[float] = None) -> CommandResult:
    """Run `command` through `shell -c` and capture its output.

    Raises ExecutionFailedError on a non-zero exit status.
    """
    trimmed = validate_shell_command(command)
    executable = _resolve_shell(shell)

    try:
        process = subprocess.run(
            [executable, "-c", trimmed],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        logger.error("Command timed out after %ss: %s", timeout, trimmed)
        raise ExecutionFailedError(-1, f"timed out after {timeout}s") from e
    except OSError as e:
        logger.error("Failed to run command: %s", e)
        raise LaunchFailedError(trimmed, e) from e

    result = CommandResult(stdout=process.stdout, stderr=process.stderr, exit_code=process.returncode)
    if result.exit_code != 0:
        logger.error("Command failed with status %d: %s", result.exit_code, result.stderr.strip())
        raise ExecutionFailedError(result.exit_code, result.stderr, result.stdout)
    return result
