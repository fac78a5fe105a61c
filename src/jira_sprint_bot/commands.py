"""Chat command parsing and dispatch."""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from jira_sprint_bot.exceptions import CommandUsageError, ReportError
from jira_sprint_bot.jira_client import JiraClient
from jira_sprint_bot.report import build_report

logger = logging.getLogger(__name__)

REPORT_USAGE = "Usage: `report <board_id> <sprint_id>`"
HELP_TEXT = "\n".join([
    "I can build sprint reports from Jira:",
    f"- {REPORT_USAGE}",
    "- `help` shows this message",
])


def tokenize(text: str, identity: str) -> list[str]:
    """Split a message on whitespace, dropping the tokens that mention the bot."""
    return [token for token in text.split() if identity not in token]


def parse_report_args(args: list[str]) -> tuple[str, str]:
    """Return (board_id, sprint_id) from the arguments of a report command.

    Raises:
        CommandUsageError: If either id is missing
    """
    if len(args) < 2:
        raise CommandUsageError(REPORT_USAGE)
    return args[0], args[1]


class CommandRouter:
    """Turns chat messages addressed to the bot into replies."""

    def __init__(
        self,
        client: JiraClient,
        roster: Sequence[str],
        jira_url: str,
        time_reference: str = "now",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.client = client
        self.roster = tuple(roster)
        self.jira_url = jira_url
        self.time_reference = time_reference
        self.clock = clock

    def respond(self, text: str, identity: str) -> str | None:
        """Work out the reply to a message.

        Returns None when the message is not addressed to the bot or the
        report could not be built; errors are logged here.
        """
        if not text or not identity or identity not in text:
            return None

        tokens = tokenize(text, identity)
        if not tokens:
            return HELP_TEXT

        cmd, args = tokens[0].lower(), tokens[1:]
        logger.info("Dispatching command %r with args %s", cmd, args)

        if cmd == "report":
            try:
                board_id, sprint_id = parse_report_args(args)
            except CommandUsageError as e:
                return str(e)
            return self.sprint_report(board_id, sprint_id)
        if cmd == "help":
            return HELP_TEXT
        return f"I'm not sure what you mean by `{tokens[0]}`"

    def sprint_report(self, board_id: str, sprint_id: str) -> str | None:
        try:
            data = self.client.fetch_sprint_report(board_id, sprint_id)
            return build_report(
                data,
                self.roster,
                self.jira_url,
                now=self.clock(),
                time_reference=self.time_reference,
            )
        except ReportError as e:
            logger.error(
                "Sprint report for board %s sprint %s failed at %s: %s",
                board_id,
                sprint_id,
                e.stage,
                e,
            )
            return None

    def dispatch(
        self,
        text: str,
        identity: str,
        channel: str,
        send: Callable[[str, str], None],
    ) -> bool:
        """Respond to a message by sending at most one reply to ``channel``.

        Returns True if a reply was sent.
        """
        response = self.respond(text, identity)
        if response is None:
            return False
        send(channel, response)
        return True
