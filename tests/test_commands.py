"""Tests for chat command parsing and dispatch."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from jira_sprint_bot.commands import (
    HELP_TEXT,
    REPORT_USAGE,
    CommandRouter,
    parse_report_args,
    tokenize,
)
from jira_sprint_bot.exceptions import (
    BadDateError,
    CommandUsageError,
    FailedRequestError,
    ReportParsingError,
)

BOT_ID = "U0BOT"
MENTION = f"<@{BOT_ID}>"
NOW = datetime(2018, 1, 10, 10, 48)


def _make_router(client=None, time_reference="now"):
    return CommandRouter(
        client or MagicMock(),
        ["alice", "bob"],
        "https://jira.example.com",
        time_reference=time_reference,
        clock=lambda: NOW,
    )


class TestTokenize:
    """Tests for tokenize helper."""

    def test_drops_mention(self):
        assert tokenize(f"{MENTION} report 1 2", BOT_ID) == ["report", "1", "2"]

    def test_mention_with_punctuation(self):
        assert tokenize(f"{MENTION}: report  1\t2", BOT_ID) == ["report", "1", "2"]

    def test_mention_in_the_middle(self):
        assert tokenize(f"hey {MENTION} help", BOT_ID) == ["hey", "help"]


class TestParseReportArgs:
    """Tests for parse_report_args."""

    def test_returns_ids(self):
        assert parse_report_args(["4978", "14090"]) == ("4978", "14090")

    def test_ignores_extra_tokens(self):
        assert parse_report_args(["4978", "14090", "please"]) == ("4978", "14090")

    @pytest.mark.parametrize("args", [[], ["4978"]])
    def test_missing_ids(self, args):
        with pytest.raises(CommandUsageError, match="report <board_id> <sprint_id>"):
            parse_report_args(args)


class TestRespond:
    """Tests for CommandRouter.respond."""

    def test_ignores_message_without_mention(self):
        client = MagicMock()
        router = _make_router(client)

        assert router.respond("report 4978 14090", BOT_ID) is None
        client.fetch_sprint_report.assert_not_called()

    def test_ignores_empty_text(self):
        assert _make_router().respond("", BOT_ID) is None

    def test_unknown_command(self):
        router = _make_router()
        assert router.respond(f"{MENTION} dance", BOT_ID) == "I'm not sure what you mean by `dance`"

    def test_bare_mention_returns_help(self):
        assert _make_router().respond(MENTION, BOT_ID) == HELP_TEXT

    def test_help(self):
        assert _make_router().respond(f"{MENTION} HELP", BOT_ID) == HELP_TEXT

    @pytest.mark.parametrize("text", [f"{MENTION} report", f"{MENTION} report 4978"])
    def test_report_usage_error(self, text):
        client = MagicMock()
        router = _make_router(client)

        assert router.respond(text, BOT_ID) == REPORT_USAGE
        client.fetch_sprint_report.assert_not_called()

    @patch("jira_sprint_bot.commands.build_report", return_value="the report")
    def test_report_success(self, mock_build):
        client = MagicMock()
        client.fetch_sprint_report.return_value = {"sprint": {}}
        router = _make_router(client, time_reference="start")

        assert router.respond(f"{MENTION} report 4978 14090", BOT_ID) == "the report"

        client.fetch_sprint_report.assert_called_once_with("4978", "14090")
        mock_build.assert_called_once_with(
            {"sprint": {}},
            ("alice", "bob"),
            "https://jira.example.com",
            now=NOW,
            time_reference="start",
        )

    @pytest.mark.parametrize(
        "error",
        [
            FailedRequestError("Jira returned HTTP 500", status_code=500),
            ReportParsingError("bad", missing=["contents"]),
        ],
    )
    def test_fetch_errors_are_logged_not_sent(self, error, caplog):
        client = MagicMock()
        client.fetch_sprint_report.side_effect = error
        router = _make_router(client)

        assert router.respond(f"{MENTION} report 1 2", BOT_ID) is None
        assert f"failed at {error.stage}" in caplog.text

    @patch("jira_sprint_bot.commands.build_report", side_effect=BadDateError("bad date"))
    def test_build_errors_are_logged_not_sent(self, mock_build, caplog):
        router = _make_router()

        assert router.respond(f"{MENTION} report 1 2", BOT_ID) is None
        assert "failed at date" in caplog.text


class TestDispatch:
    """Tests for CommandRouter.dispatch."""

    def test_sends_one_message(self):
        send = MagicMock()
        router = _make_router()

        assert router.dispatch(f"{MENTION} dance", BOT_ID, "C123", send) is True
        send.assert_called_once_with("C123", "I'm not sure what you mean by `dance`")

    def test_sends_nothing_without_mention(self):
        send = MagicMock()
        router = _make_router()

        assert router.dispatch("report 1 2", BOT_ID, "C123", send) is False
        send.assert_not_called()

    def test_sends_nothing_when_report_fails(self):
        send = MagicMock()
        client = MagicMock()
        client.fetch_sprint_report.side_effect = FailedRequestError("down")
        router = _make_router(client)

        assert router.dispatch(f"{MENTION} report 1 2", BOT_ID, "C123", send) is False
        send.assert_not_called()
