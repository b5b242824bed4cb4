"""Asynchronous Azure CLI subprocess execution.

Provides AzureCLIExecutor, a thin wrapper around
asyncio.create_subprocess_exec that never blocks the event loop and never
raises for process-level failures: timeouts and a missing binary are
reported as a CommandResult with a non-zero exit code, exactly like a
failing command.

Usage:
    from nimure.azure_cli_executor import AzureCLIExecutor

    executor = AzureCLIExecutor(timeout_ms=30000)
    result = await executor.execute(["resource", "list", "--output", "json"])
    if result.ok:
        print(result.stdout)

    # Parsed JSON, raising ExecutionError / AuthError / ParseError
    resources = await executor.run_json(["resource", "list", "--output", "json"])
"""

import asyncio
import contextlib
import json
import logging
import shlex
from dataclasses import dataclass
from typing import Any

from nimure.errors import ParseError, classify_cli_error

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = -1
NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one Azure CLI invocation.

    Attributes:
        stdout: Decoded standard output
        stderr: Decoded standard error
        exit_code: Process exit code (-1 on timeout, 127 if az is missing)
    """

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0."""
        return self.exit_code == 0


class AzureCLIExecutor:
    """Run Azure CLI commands as asynchronous subprocesses.

    Example:
        >>> executor = AzureCLIExecutor()
        >>> result = await executor.execute(["account", "show", "--output", "json"])
        >>> result.exit_code
        0
    """

    def __init__(self, binary: str = "az", timeout_ms: int = 30000):
        """Initialize executor.

        Args:
            binary: Azure CLI executable name or path
            timeout_ms: Default per-command timeout in milliseconds
        """
        self.binary = binary
        self.timeout_ms = timeout_ms

    async def execute(self, args: list[str], timeout_ms: int | None = None) -> CommandResult:
        """Run `<binary> <args...>` and capture its output.

        Args:
            args: Arguments passed to the Azure CLI
            timeout_ms: Override of the default timeout

        Returns:
            CommandResult (never raises for failures of the command itself)
        """
        timeout = (timeout_ms or self.timeout_ms) / 1000
        cmd = [self.binary, *args]
        logger.debug(f"Running: {shlex.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return CommandResult(
                stdout="",
                stderr=f"{self.binary} not found. Install the Azure CLI and make sure it is on PATH",
                exit_code=NOT_FOUND_EXIT_CODE,
            )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.debug(f"Command timed out after {timeout:.0f}s: {shlex.join(cmd)}")
            return CommandResult(
                stdout="",
                stderr=f"Command timed out after {timeout:.0f}s",
                exit_code=TIMEOUT_EXIT_CODE,
            )

        return CommandResult(
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            exit_code=process.returncode if process.returncode is not None else 1,
        )

    async def run_json(
        self,
        args: list[str],
        context: str = "",
        timeout_ms: int | None = None,
    ) -> Any:
        """Run a command and decode its JSON output.

        Args:
            args: Arguments passed to the Azure CLI
            context: Prefix for error messages (e.g. "Failed to get users")
            timeout_ms: Override of the default timeout

        Returns:
            Decoded JSON, or None when the command printed nothing

        Raises:
            ExecutionError: Non-zero exit (AuthError when not logged in)
            ParseError: Output is not valid JSON
        """
        result = await self.execute(args, timeout_ms=timeout_ms)

        if not result.ok:
            raise classify_cli_error(result.stderr, result.exit_code, context)

        output = result.stdout.strip()
        if not output:
            return None

        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            prefix = f"{context}: " if context else ""
            raise ParseError(f"{prefix}invalid JSON in Azure CLI output") from e


__all__ = ["NOT_FOUND_EXIT_CODE", "TIMEOUT_EXIT_CODE", "AzureCLIExecutor", "CommandResult"]
