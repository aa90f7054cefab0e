"""Tests for the process runner and result classification."""

import os
import sys
from pathlib import Path

import pytest

from warmcp.adapters import (
    CommandFamily,
    RunOutcome,
    SubprocessRunner,
    execute_command,
    run_command,
    transient_file,
)

from conftest import RecordingRunner


class TestSubprocessRunner:
    """Real processes, using the running interpreter as the external tool."""

    def test_success_output_is_trimmed(self):
        outcome = SubprocessRunner().run(sys.executable, ["-c", "print('  hello  ')"])

        assert outcome.ok
        assert outcome.output == "hello"

    def test_stderr_is_merged(self):
        code = "import sys; sys.stderr.write('No matching tasks'); sys.exit(1)"
        outcome = SubprocessRunner().run(sys.executable, ["-c", code])

        assert not outcome.ok
        assert outcome.error == "exit status 1"
        assert outcome.output == "No matching tasks"

    def test_undecodable_output_is_replaced(self):
        code = "import sys; sys.stdout.buffer.write(b'bad \\xff\\xfe bytes'); sys.exit(1)"

        outcome = SubprocessRunner().run(sys.executable, ["-c", code])

        assert outcome.error == "exit status 1"
        assert outcome.output.startswith("bad ")
        assert outcome.output.endswith(" bytes")
        assert "\ufffd" in outcome.output

    def test_env_is_added_to_inherited_environment(self, monkeypatch):
        monkeypatch.setenv("WARMCP_INHERITED", "kept")
        code = "import os; print(os.environ['WARMCP_INHERITED'], os.environ['TASKRC'])"

        outcome = SubprocessRunner().run(sys.executable, ["-c", code], env={"TASKRC": "/x/taskrc"})

        assert outcome.output == "kept /x/taskrc"

    def test_missing_program(self, tmp_path):
        outcome = SubprocessRunner().run(str(tmp_path / "no-such-binary"), ["list"])

        assert not outcome.ok
        assert outcome.output == ""
        assert outcome.error

    def test_deadline_terminates_process(self):
        code = "import time; print('started', flush=True); time.sleep(30)"

        outcome = SubprocessRunner().run(sys.executable, ["-c", code], timeout=0.5)

        assert not outcome.ok
        assert "deadline" in outcome.error


class TestRunCommand:

    def test_success_passes_output_verbatim(self):
        runner = RecordingRunner(output="Created task 1.")

        result = run_command(runner, "task", ["add", "x"])

        assert result.success
        assert result.message == "Created task 1."

    def test_failure_keeps_error_and_output(self):
        runner = RecordingRunner(output="record not found", error="exit status 1")

        result = run_command(runner, "task", ["1", "done"])

        assert not result.success
        assert result.message == "task error: exit status 1\nOutput: record not found"

    def test_env_and_timeout_forwarded(self):
        runner = RecordingRunner()

        run_command(runner, "task", ["stats"], env={"TASKRC": "/t"}, timeout=3)

        assert runner.last.env == {"TASKRC": "/t"}
        assert runner.last.timeout == 3


class TestTransientFile:

    def test_content_written_and_removed(self):
        with transient_file('[{"description": "x"}]') as path:
            assert Path(path).read_text() == '[{"description": "x"}]'

        assert not os.path.exists(path)

    def test_removed_on_exception(self):
        with pytest.raises(RuntimeError):
            with transient_file("data") as path:
                raise RuntimeError("boom")

        assert not os.path.exists(path)


class TestExecuteCommand:

    def test_attachment_goes_to_transient_file(self):
        seen = {}

        def capture(program, args):
            seen["path"] = args[-1]
            seen["content"] = Path(args[-1]).read_text()

        runner = RecordingRunner(output="Imported 1 task.", on_run=capture)
        family = CommandFamily(program="task", overrides=("rc.confirmation=off",))
        command = family.command("import", attachment='[{"description":"a"}]')

        result = execute_command(runner, command)

        assert result.success
        assert seen["content"] == '[{"description":"a"}]'
        assert runner.last.args == ["rc.confirmation=off", "import", seen["path"]]
        assert os.path.basename(seen["path"]).startswith("task_import_")
        assert not os.path.exists(seen["path"])

    def test_family_environment_is_used(self):
        runner = RecordingRunner()
        family = CommandFamily(program="task", environment=lambda: {"TASKRC": "/cfg"})

        execute_command(runner, family.command("tags"))

        assert runner.last.program == "task"
        assert runner.last.env == {"TASKRC": "/cfg"}

    def test_outcome_defaults(self):
        assert RunOutcome(output="x").ok
        assert not RunOutcome(output="x", error="exit status 2").ok
