"""Tests for the Timewarrior tool catalogue."""

import pytest

from warmcp.tools import Confirmation


class TestTracking:

    def test_start_with_tags(self, dispatcher, runner):
        runner.output = "Tracking Work"

        result = dispatcher.call("timew_start", {"tags": "Work client-a"})

        assert result.message == "Tracking Work"
        assert runner.last.program == "timew"
        assert runner.last.args == ["start", "Work", "client-a"]

    def test_start_without_tags(self, dispatcher, runner):
        dispatcher.call("timew_start", {})

        assert runner.last.args == ["start"]

    def test_stop(self, dispatcher, runner):
        dispatcher.call("timew_stop", {"tags": "Work"})

        assert runner.last.args == ["stop", "Work"]

    def test_continue(self, dispatcher, runner):
        dispatcher.call("timew_continue", {})

        assert runner.last.args == ["continue"]


class TestReports:

    @pytest.mark.parametrize("tool, keyword", [
        ("timew_summary", "summary"),
        ("timew_export", "export"),
    ])
    def test_range_follows_keyword(self, dispatcher, runner, tool, keyword):
        dispatcher.call(tool, {"range": ":day"})

        assert runner.last.args == [keyword, ":day"]

    def test_summary_without_range(self, dispatcher, runner):
        dispatcher.call("timew_summary", {})

        assert runner.last.args == ["summary"]

    def test_multi_word_range_is_split(self, dispatcher, runner):
        dispatcher.call("timew_export", {"range": "from 2024-01-01 to 2024-01-31"})

        assert runner.last.args == ["export", "from", "2024-01-01", "to", "2024-01-31"]

    def test_reports_need_no_confirmation(self, dispatcher):
        assert dispatcher.get("timew_summary").confirmation is Confirmation.NONE
        assert dispatcher.get("timew_export").read_only


class TestRawAndEnvironment:

    def test_raw(self, dispatcher, runner):
        dispatcher.call("timew_raw", {"command": "tag @1 urgent"})

        assert runner.last.args == ["tag", "@1", "urgent"]

    def test_empty_raw(self, dispatcher, runner):
        dispatcher.call("timew_raw", {})

        assert runner.last.args == []

    def test_inherited_environment_unmodified(self, dispatcher, runner):
        dispatcher.call("timew_continue", {})

        assert runner.last.env == {}

    def test_failure(self, dispatcher, runner):
        runner.output = "There is no active time tracking."
        runner.error = "exit status 255"

        result = dispatcher.call("timew_stop", {})

        assert not result.success
        assert result.message == "timew error: exit status 255\nOutput: There is no active time tracking."
