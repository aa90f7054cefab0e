"""MCP tools for Timewarrior.

``timew`` runs with the inherited environment and no overrides; it finds
its own database and config the way it does from a shell.
"""

from functools import partial
from typing import List

from warmcp.adapters import Command, CommandFamily, split_tokens

from .dispatch import Confirmation, ToolArguments, ToolField, ToolSpec


def timew_family(program: str = "timew") -> CommandFamily:
    """Build the Timewarrior command family."""
    return CommandFamily(program=program)


def _track(args: ToolArguments, family: CommandFamily, operation: str) -> Command:
    return family.command(operation, modifications=split_tokens(args["tags"]))


def _report(args: ToolArguments, family: CommandFamily, operation: str) -> Command:
    return family.command(operation, modifications=split_tokens(args["range"]))


def _continue(args: ToolArguments, family: CommandFamily) -> Command:
    return family.command("continue")


def _raw(args: ToolArguments, family: CommandFamily) -> Command:
    return Command.raw(family, args["command"])


def build_timew_specs(family: CommandFamily) -> List[ToolSpec]:
    """Return the Timewarrior tool catalogue bound to ``family``."""
    range_field = ToolField("range", "Time range like ':week', ':day'")

    def spec(name, summary, confirmation, builder, *fields):
        return ToolSpec(
            name=name,
            summary=summary,
            confirmation=confirmation,
            build=partial(builder, family=family),
            fields=tuple(fields),
        )

    return [
        spec(
            "timew_start", "Start tracking time.", Confirmation.REQUIRED,
            partial(_track, operation="start"),
            ToolField("tags", "Tags for the time entry"),
        ),
        spec(
            "timew_stop", "Stop tracking time.", Confirmation.REQUIRED,
            partial(_track, operation="stop"),
            ToolField("tags", "Optional tags for the entry being stopped"),
        ),
        spec(
            "timew_continue", "Continue tracking the most recent activity.",
            Confirmation.REQUIRED, _continue,
        ),
        spec(
            "timew_summary", "Get time tracking summary.", Confirmation.NONE,
            partial(_report, operation="summary"), range_field,
        ),
        spec(
            "timew_export", "Export time data as JSON.", Confirmation.NONE,
            partial(_report, operation="export"), range_field,
        ),
        spec(
            "timew_raw", "Run raw timew command.", Confirmation.REQUIRED, _raw,
            ToolField("command", "Full timew command arguments", required=True),
        ),
    ]
