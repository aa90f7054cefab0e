"""Tests for resources and prompts registered outside the server class."""

from dataclasses import dataclass, field
from typing import List

import pytest
from fastmcp import FastMCP
from fastmcp.client import Client
from mcp import McpError

from warmcp.features import daily_planner_text, register_features
from warmcp.tools import task_family


@dataclass
class CountingFamily:
    """Delegates to a real family and records each command it builds."""

    family: object
    built: List[object] = field(default_factory=list)

    def command(self, operation="", **kwargs):
        command = self.family.command(operation, **kwargs)
        self.built.append(command)
        return command


@pytest.fixture
def counting_task(taskrc):
    return CountingFamily(task_family("task", taskrc))


@pytest.fixture
def app(counting_task, runner, taskrc, tmp_path):
    app = FastMCP("features-test")
    register_features(
        app,
        task=counting_task,
        runner=runner,
        taskrc=taskrc,
        timew_config=tmp_path / "timewarrior.cfg",
    )
    return app


class TestReportResources:

    @pytest.mark.asyncio
    async def test_each_read_builds_a_new_command(self, app, counting_task, runner):
        assert counting_task.built == []

        async with Client(app) as client:
            await client.read_resource("task://tags")
            await client.read_resource("task://tags")

        assert len(counting_task.built) == 2
        assert counting_task.built[0] is not counting_task.built[1]
        assert [call.args[-1] for call in runner.calls] == ["tags", "tags"]

    @pytest.mark.asyncio
    async def test_failed_report_raises(self, app, runner):
        runner.output = "Configuration error"
        runner.error = "exit status 2"

        async with Client(app) as client:
            with pytest.raises(McpError, match="Configuration error"):
                await client.read_resource("task://summary")


class TestPromptText:

    def test_without_focus(self):
        assert daily_planner_text().startswith("Please review my pending tasks")

    def test_with_focus(self):
        assert daily_planner_text("taxes").startswith("My focus today is: taxes. Please review")
