"""Shared fixtures: a recording process runner and the two tool families."""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import pytest

from warmcp.adapters import CommandRunner, RunOutcome
from warmcp.tools import (
    Dispatcher,
    build_task_specs,
    build_timew_specs,
    task_family,
    timew_family,
)


@dataclass
class RecordedCall:
    program: str
    args: List[str]
    env: Dict[str, str]
    timeout: Optional[float]


@dataclass
class RecordingRunner(CommandRunner):
    """Test double that records every invocation and returns a fixed outcome."""

    output: str = ""
    error: Optional[str] = None
    on_run: Optional[Callable[[str, List[str]], None]] = None
    calls: List[RecordedCall] = field(default_factory=list)

    def run(self, program, args, env=None, timeout=None):
        self.calls.append(RecordedCall(program, list(args), dict(env or {}), timeout))
        if self.on_run is not None:
            self.on_run(program, list(args))
        return RunOutcome(output=self.output, error=self.error)

    @property
    def last(self) -> RecordedCall:
        assert self.calls, "runner was never called"
        return self.calls[-1]


@pytest.fixture
def runner():
    return RecordingRunner(output="ok")


@pytest.fixture
def taskrc(tmp_path):
    path = tmp_path / "task" / "taskrc"
    path.parent.mkdir(parents=True)
    path.write_text("data.location=~/.task\n")
    return path


@pytest.fixture
def task(taskrc):
    return task_family("task", taskrc)


@pytest.fixture
def timew():
    return timew_family("timew")


@pytest.fixture
def dispatcher(runner, task, timew):
    return Dispatcher(specs=build_task_specs(task) + build_timew_specs(timew), runner=runner)
