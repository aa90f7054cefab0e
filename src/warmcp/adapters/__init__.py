"""
Process adapter layer for MCP tool integration.

Turns a structured command into one external-process invocation of
``task`` or ``timew`` and normalises what comes back. Tools never talk to
``subprocess`` directly; they build a ``Command`` and hand it to
``execute_command`` together with the injected ``CommandRunner``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class InvocationResult:
    """Standardized result of one external command invocation.

    ``message`` is the trimmed program output on success, or the failure
    description followed by the captured output on failure.
    """

    success: bool
    message: str

    @classmethod
    def success_result(cls, message: str) -> "InvocationResult":
        """Create success result."""
        return cls(success=True, message=message)

    @classmethod
    def error_result(cls, message: str) -> "InvocationResult":
        """Create error result."""
        return cls(success=False, message=message)


from .command import Command, CommandFamily, split_tokens
from .runner import (
    CommandRunner,
    RunOutcome,
    SubprocessRunner,
    execute_command,
    run_command,
    transient_file,
)

__all__ = [
    "InvocationResult",
    "Command",
    "CommandFamily",
    "split_tokens",
    "CommandRunner",
    "RunOutcome",
    "SubprocessRunner",
    "execute_command",
    "run_command",
    "transient_file",
]
