"""
MCP resources and prompts.

Resources expose the tools' config files verbatim and a few read-only
``task`` reports; prompts are static text steering the agent towards the
right tools.
"""

import logging
from pathlib import Path
from typing import Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError

from warmcp.adapters import CommandFamily, CommandRunner, execute_command

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"

# uri -> (name, description, task subcommand)
TASK_REPORT_RESOURCES = {
    "task://summary": (
        "Taskwarrior Summary",
        "A high-level summary of active projects and pending tasks",
        "summary",
    ),
    "task://tags": ("Taskwarrior Tags", "List of all unique tags used in Taskwarrior", "tags"),
    "task://projects": ("Taskwarrior Projects", "List of all unique projects in Taskwarrior", "projects"),
    "task://udas": ("Taskwarrior UDAs", "List of all User Defined Attributes configured", "udas"),
    "task://diagnostics": (
        "Taskwarrior Diagnostics",
        "Taskwarrior diagnostic information (config, version, environment)",
        "diagnostics",
    ),
}

DAILY_PLANNER_TEXT = (
    "Please review my pending tasks using `task_list` and my recent activity "
    "using `timew_summary`. Then, suggest a plan for today and ask me to "
    "confirm which tasks I should start."
)

SETUP_CHECK_TEXT = (
    "Please run `task_raw` with command `--version` and `timew_raw` with "
    "command `--version` to verify the installation, then read the "
    "`task://config` resource to confirm Taskwarrior finds its configuration."
)


def read_config_file(path: Path, label: str) -> str:
    """Return a config file's text, raising ResourceError if unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to read %s at %s: %s", label, path, e)
        raise ResourceError(f"could not read {label} at {path}: {e}") from e


def daily_planner_text(focus: Optional[str] = None) -> str:
    if focus:
        return f"My focus today is: {focus}. {DAILY_PLANNER_TEXT}"
    return DAILY_PLANNER_TEXT


def register_features(
    app: FastMCP,
    task: CommandFamily,
    runner: CommandRunner,
    taskrc: Path,
    timew_config: Path,
    timeout: Optional[float] = None,
) -> None:
    """
    Register resources and prompts on ``app``.

    Args:
        app: FastMCP application
        task: Taskwarrior family used for the report resources
        runner: Process runner shared with the tools
        taskrc: Resolved taskrc path served as task://config
        timew_config: Resolved timewarrior.cfg path served as timew://config
        timeout: Optional deadline for report commands
    """

    @app.resource(
        "task://config",
        name="Taskwarrior Configuration",
        description="The content of the taskrc file",
        mime_type=TEXT_PLAIN,
    )
    def task_config() -> str:
        return read_config_file(taskrc, "taskrc")

    @app.resource(
        "timew://config",
        name="Timewarrior Configuration",
        description="The content of the timewarrior.cfg file",
        mime_type=TEXT_PLAIN,
    )
    def timew_config_resource() -> str:
        return read_config_file(timew_config, "timewarrior.cfg")

    for uri, (name, description, operation) in TASK_REPORT_RESOURCES.items():
        _register_task_report(app, uri, name, description, task, operation, runner, timeout)

    @app.prompt(
        name="daily_planner",
        description="Prepares a summary of pending tasks and time spent for review.",
    )
    def daily_planner(focus: Optional[str] = None) -> str:
        return daily_planner_text(focus)

    @app.prompt(
        name="setup_check",
        description="Check if Taskwarrior and Timewarrior are correctly installed and configured.",
    )
    def setup_check() -> str:
        return SETUP_CHECK_TEXT

    logger.info("Registered %d resources and 2 prompts", len(TASK_REPORT_RESOURCES) + 2)


def _register_task_report(app, uri, name, description, task, operation, runner, timeout):
    def read_report() -> str:
        result = execute_command(runner, task.command(operation), timeout=timeout)
        if not result.success:
            logger.warning("Resource %s failed", uri)
            raise ResourceError(result.message)
        return result.message

    app.resource(uri, name=name, description=description, mime_type=TEXT_PLAIN)(read_report)
