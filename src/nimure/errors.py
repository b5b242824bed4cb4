"""Error kinds and Azure CLI stderr classification.

All nimure failures derive from NimureError. Subprocess failures are
classified once, here, from an explicit pattern table so the heuristic can
be tested without running the Azure CLI.

Public API:
    NimureError: Base class
    ExecutionError: Non-zero exit, spawn failure or timeout
    AuthError: Azure CLI is not logged in
    ThrottledError: Azure returned 429 / TooManyRequests
    ParseError: Malformed JSON payload
    DirectoryPermissionError: Directory objects cannot be read
    ConfigError: Invalid configuration
    classify_cli_error: Build the right ExecutionError subclass from stderr
"""

from typing import ClassVar

NOT_LOGGED_IN_MESSAGE = "Not logged in to Azure. Please run 'az login'"


class NimureError(Exception):
    """Base class for all nimure errors."""

    pass


class ExecutionError(NimureError):
    """Raised when an Azure CLI invocation fails.

    Attributes:
        exit_code: Process exit code (-1 for timeouts, 127 for a missing binary)
        stderr: Captured standard error
    """

    def __init__(self, message: str, exit_code: int = 1, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class AuthError(ExecutionError):
    """Raised when the Azure CLI reports that no account is logged in."""

    pass


class ThrottledError(ExecutionError):
    """Raised when Azure rejects a request because of throttling."""

    pass


class ParseError(NimureError):
    """Raised when a CLI payload is not valid JSON of the expected shape."""

    pass


class DirectoryPermissionError(NimureError):
    """Raised when the directory permission probe fails."""

    pass


class ConfigError(NimureError):
    """Raised when configuration operations fail."""

    pass


class CLIErrorPatterns:
    """Substring tables used to classify Azure CLI stderr."""

    AUTH: ClassVar[tuple[str, ...]] = (
        "Please run 'az login'",
        "AADSTS700082",
        "No subscription found",
    )

    THROTTLE: ClassVar[tuple[str, ...]] = (
        "TooManyRequests",
        "(429)",
        "Too Many Requests",
        "RateLimiting",
    )


def _matches(stderr: str, patterns: tuple[str, ...]) -> bool:
    return any(pattern in stderr for pattern in patterns)


def is_auth_error(stderr: str) -> bool:
    """Check whether stderr says the CLI is not logged in."""
    return _matches(stderr, CLIErrorPatterns.AUTH)


def is_throttle_error(stderr: str) -> bool:
    """Check whether stderr reports Azure throttling."""
    return _matches(stderr, CLIErrorPatterns.THROTTLE)


def classify_cli_error(stderr: str, exit_code: int = 1, context: str = "") -> ExecutionError:
    """Turn a failed CLI invocation into the matching ExecutionError subclass.

    Args:
        stderr: Captured standard error of the failed command
        exit_code: Process exit code
        context: Optional prefix such as "Failed to get users"

    Returns:
        AuthError, ThrottledError or a plain ExecutionError

    Example:
        >>> err = classify_cli_error("ERROR: Please run 'az login' to setup account.")
        >>> isinstance(err, AuthError)
        True
    """
    stderr = (stderr or "").strip()

    if is_auth_error(stderr):
        return AuthError(NOT_LOGGED_IN_MESSAGE, exit_code=exit_code, stderr=stderr)

    message = f"{context}: {stderr}" if context else stderr
    if not message:
        message = f"Azure CLI exited with code {exit_code}"

    if is_throttle_error(stderr):
        return ThrottledError(message, exit_code=exit_code, stderr=stderr)

    return ExecutionError(message, exit_code=exit_code, stderr=stderr)


__all__ = [
    "NOT_LOGGED_IN_MESSAGE",
    "AuthError",
    "CLIErrorPatterns",
    "ConfigError",
    "DirectoryPermissionError",
    "ExecutionError",
    "NimureError",
    "ParseError",
    "ThrottledError",
    "classify_cli_error",
    "is_auth_error",
    "is_throttle_error",
]
