# swiftkey/models/errors.py
from typing import Optional


class SwiftKeyError(Exception):
    """Base class for every error raised by swiftkey."""


# --- Configuration errors ---

class ConfigError(SwiftKeyError):
    pass


class ConfigFileNotFoundError(ConfigError):
    def __init__(self, path: str = ""):
        self.path = path
        super().__init__(f"Configuration file not found: {path}" if path else "Configuration file not found.")


class AccessDeniedError(ConfigError):
    def __init__(self, path: str = ""):
        self.path = path
        super().__init__(f"Access to the configuration file was denied: {path}")


class ReadFailedError(ConfigError):
    def __init__(self, path: str, underlying: Exception):
        self.path = path
        self.underlying = underlying
        super().__init__(f"Failed to read the configuration file {path}: {underlying}")


class WriteFailedError(ConfigError):
    def __init__(self, path: str, underlying: Exception):
        self.path = path
        self.underlying = underlying
        super().__init__(f"Failed to write the configuration file {path}: {underlying}")


class DependencyNotReadyError(ConfigError):
    def __init__(self, dependency: str):
        self.dependency = dependency
        super().__init__(f"{dependency} is not available yet")


class EmptyDocumentError(ConfigError):
    def __init__(self):
        super().__init__("Configuration file is empty.")


class EmptyResultError(ConfigError):
    def __init__(self):
        super().__init__("Configuration does not contain any menu items.")


class MalformedDocumentError(ConfigError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        if line is not None and column is not None:
            text = f"Invalid YAML format at line {line}, column {column}: {message}"
        else:
            text = f"Invalid YAML format: {message}"
        super().__init__(text)


class MissingFieldError(ConfigError):
    def __init__(self, field: str, context: str):
        self.field = field
        self.context = context
        super().__init__(f"Required field '{field}' is missing ({context}).")


class TypeMismatchError(ConfigError):
    def __init__(self, field: str, context: str):
        self.field = field
        self.context = context
        super().__init__(f"Type mismatch for field '{field}' ({context}).")


class SemanticError(ConfigError):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# --- Script / process errors ---

class ScriptError(SwiftKeyError):
    pass


class EmptyCommandError(ScriptError):
    def __init__(self):
        super().__init__("Empty command provided")


class DangerousCommandError(ScriptError):
    def __init__(self, command: str, reason: str = ""):
        self.command = command
        self.reason = reason
        super().__init__(f"Potentially dangerous command rejected: {command}" + (f" ({reason})" if reason else ""))


class InvalidShellError(ScriptError):
    def __init__(self, shell: str):
        self.shell = shell
        super().__init__(f"Shell executable not found: {shell}")


class LaunchFailedError(ScriptError):
    def __init__(self, command: str, underlying: Exception):
        self.command = command
        self.underlying = underlying
        super().__init__(f"Failed to launch command '{command}': {underlying}")


class ExecutionFailedError(ScriptError):
    def __init__(self, status: int, stderr: str = "", stdout: str = ""):
        self.status = status
        self.stderr = stderr
        self.stdout = stdout
        message = stderr.strip() or "Unknown error"
        super().__init__(f"Command failed with status {status}: {message}")


# --- Runtime action errors ---

class ActionError(SwiftKeyError):
    pass


class DynamicMenuError(SwiftKeyError):
    def __init__(self, command: str, underlying: Exception):
        self.command = command
        self.underlying = underlying
        super().__init__(f"Dynamic menu '{command}' failed: {underlying}")


# --- Snippet errors ---

class SnippetError(SwiftKeyError):
    pass


class SnippetFetchError(SnippetError):
    def __init__(self, message: str):
        super().__init__(f"Failed to fetch snippets from the repository: {message}")


class InvalidSnippetError(SnippetError):
    def __init__(self, snippet_id: str, underlying: Optional[Exception] = None):
        self.snippet_id = snippet_id
        self.underlying = underlying
        detail = f": {underlying}" if underlying else ""
        super().__init__(f"The snippet '{snippet_id}' contains invalid content{detail}")


class SnippetMergeError(SnippetError):
    def __init__(self, underlying: Exception):
        self.underlying = underlying
        super().__init__(f"Failed to merge the snippet into your configuration: {underlying}")
