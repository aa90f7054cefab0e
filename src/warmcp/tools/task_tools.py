"""MCP tools for Taskwarrior.

Every tool runs ``task`` with the same leading overrides:
- rc.confirmation=off: destructive and recurring edits never wait on a prompt
- rc.verbose=nothing: no headers or footnotes around the output
- rc.hooks=on: on-modify hooks (e.g. the Timewarrior hook) still fire
"""

from functools import partial
from pathlib import Path
from typing import List, Optional

from warmcp.adapters import Command, CommandFamily, split_tokens
from warmcp.config import resolve_taskrc_path

from .dispatch import Confirmation, ToolArguments, ToolField, ToolSpec

TASK_OVERRIDES = ("rc.confirmation=off", "rc.verbose=nothing", "rc.hooks=on")

DEFAULT_LIST_FILTER = "status:pending"


def task_family(program: str = "task", taskrc: Optional[Path] = None) -> CommandFamily:
    """
    Build the Taskwarrior command family.

    Args:
        program: task binary
        taskrc: Config file exported as TASKRC (default: resolve_taskrc_path())
    """
    taskrc = taskrc or resolve_taskrc_path()
    env = {"TASKRC": str(taskrc)}
    return CommandFamily(
        program=program,
        overrides=TASK_OVERRIDES,
        environment=lambda: dict(env),
    )


_UUID = ToolField("uuid", "UUID of the task", required=True)


# ============================================================================
# Builders
# ============================================================================

def _create(args: ToolArguments, family: CommandFamily, operation: str) -> Command:
    # Description stays one token; attributes are split
    return family.command(
        operation,
        modifications=[args["description"]] + split_tokens(args["metadata"]),
    )


def _modify(args: ToolArguments, family: CommandFamily) -> Command:
    return family.command(
        "modify",
        filters=split_tokens(args["filter"]),
        modifications=split_tokens(args["modifications"]),
    )


def _on_uuid(args: ToolArguments, family: CommandFamily, operation: str) -> Command:
    return family.command(operation, filters=[args["uuid"]])


def _on_uuid_with_text(args: ToolArguments, family: CommandFamily, operation: str) -> Command:
    return family.command(operation, filters=[args["uuid"]], modifications=[args["text"]])


def _list(args: ToolArguments, family: CommandFamily) -> Command:
    filter_text = args["filter"] or DEFAULT_LIST_FILTER
    return family.command("export", filters=split_tokens(filter_text))


def _global(args: ToolArguments, family: CommandFamily, operation: str) -> Command:
    return family.command(operation)


def _calc(args: ToolArguments, family: CommandFamily) -> Command:
    return family.command("calc", modifications=[args["expression"]])


def _raw(args: ToolArguments, family: CommandFamily) -> Command:
    return Command.raw(family, args["command"])


def _config(args: ToolArguments, family: CommandFamily) -> Command:
    modifications = []
    if args["name"]:
        modifications.append(args["name"])
        if args["value"]:
            modifications.append(args["value"])
    return family.command("config", modifications=modifications)


def _purge(args: ToolArguments, family: CommandFamily) -> Command:
    return family.command("purge", filters=split_tokens(args["filter"]))


def _import(args: ToolArguments, family: CommandFamily) -> Command:
    return family.command("import", attachment=args["json_data"])


# ============================================================================
# Catalogue
# ============================================================================

def build_task_specs(family: CommandFamily) -> List[ToolSpec]:
    """Return the Taskwarrior tool catalogue bound to ``family``."""

    def spec(name, summary, confirmation, builder, *fields):
        return ToolSpec(
            name=name,
            summary=summary,
            confirmation=confirmation,
            build=partial(builder, family=family),
            fields=tuple(fields),
        )

    def bound(builder, operation):
        return partial(builder, operation=operation)

    required = Confirmation.REQUIRED
    none = Confirmation.NONE

    return [
        spec(
            "task_add", "Create a new task.", required, bound(_create, "add"),
            ToolField("description", "Task description", required=True),
            ToolField("metadata", "Attributes like 'project:Home due:2pm +next'"),
        ),
        spec(
            "task_log", "Record a task that is already completed.", required, bound(_create, "log"),
            ToolField("description", "What was done", required=True),
            ToolField("metadata", "Attributes like 'project:Work end:yesterday'"),
        ),
        spec(
            "task_modify",
            "Modify tasks. Can take filters and multiple modifications.",
            required,
            _modify,
            ToolField("filter", "Filter for tasks to modify (e.g., '+PENDING project:Work')"),
            ToolField(
                "modifications",
                "Modifications to apply (e.g., 'project:New /old/new/ +tag')",
                required=True,
            ),
        ),
        spec("task_done", "Mark a task as done.", required, bound(_on_uuid, "done"), _UUID),
        spec("task_delete", "Delete a task.", required, bound(_on_uuid, "delete"), _UUID),
        spec(
            "task_list", "List tasks (export JSON).", none, _list,
            ToolField("filter", f"Filter string. Default: {DEFAULT_LIST_FILTER}"),
        ),
        spec(
            "task_annotate", "Add annotation.", required, bound(_on_uuid_with_text, "annotate"),
            _UUID, ToolField("text", "Annotation text", required=True),
        ),
        spec(
            "task_denote", "Remove annotation.", required, bound(_on_uuid_with_text, "denote"),
            _UUID, ToolField("text", "Annotation text to remove (substring match)", required=True),
        ),
        spec("task_start", "Start a task.", required, bound(_on_uuid, "start"), _UUID),
        spec("task_stop", "Stop a task.", required, bound(_on_uuid, "stop"), _UUID),
        spec("task_undo", "Undo the last Taskwarrior operation.", required, bound(_global, "undo")),
        spec(
            "task_calc", "Evaluate Taskwarrior date math.", none, _calc,
            ToolField("expression", "Math expression (e.g., 'now + 4d')", required=True),
        ),
        spec(
            "task_raw", "Run raw task command.", required, _raw,
            ToolField("command", "Full task command arguments", required=True),
        ),
        spec(
            "task_config", "View or modify Taskwarrior configuration.",
            Confirmation.CONDITIONAL, _config,
            ToolField("name", "Config name to view or set"),
            ToolField("value", "Value to set (if empty, views the config)"),
        ),
        spec(
            "task_purge", "Permanently remove tasks from the database.", required, _purge,
            ToolField("filter", "Filter for tasks to purge", required=True),
        ),
        spec(
            "task_append", "Append text to a task's description.", required,
            bound(_on_uuid_with_text, "append"),
            _UUID, ToolField("text", "Text to append", required=True),
        ),
        spec(
            "task_prepend", "Prepend text to a task's description.", required,
            bound(_on_uuid_with_text, "prepend"),
            _UUID, ToolField("text", "Text to prepend", required=True),
        ),
        spec(
            "task_import", "Import tasks from JSON format.", required, _import,
            ToolField("json_data", "JSON string of tasks to import", required=True),
        ),
        spec("task_tags", "List all unique tags.", none, bound(_global, "tags")),
        spec("task_projects", "List all unique projects.", none, bound(_global, "projects")),
        spec("task_udas", "List all User Defined Attributes.", none, bound(_global, "udas")),
        spec(
            "task_diagnostics",
            "Show Taskwarrior diagnostic information (config, version, environment).",
            none,
            bound(_global, "diagnostics"),
        ),
        spec("task_stats", "Show database statistics.", none, bound(_global, "stats")),
    ]
