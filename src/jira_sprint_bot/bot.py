"""Slack RTM session driving the command router."""

import enum
import logging

from slack_sdk.errors import SlackApiError
from slack_sdk.rtm_v2 import RTMClient

from jira_sprint_bot.commands import CommandRouter
from jira_sprint_bot.config import Config
from jira_sprint_bot.exceptions import AuthFailureError

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CLOSED = "closed"


def is_standard_message(event: dict) -> bool:
    """True for plain user text messages (no edits, joins, bot posts, ...)."""
    return (
        event.get("type", "message") == "message"
        and "subtype" not in event
        and isinstance(event.get("text"), str)
    )


class SprintBot:
    """Owns the Slack connection and forwards messages to the router."""

    def __init__(self, config: Config, router: CommandRouter, rtm: RTMClient | None = None) -> None:
        self.config = config
        self.router = router
        # one worker so each command finishes before the next event is handled
        self.rtm = rtm or RTMClient(token=config.slack_key, concurrency=1)
        self.state = SessionState.DISCONNECTED
        self.identity: str | None = None

        def on_message(client: RTMClient, event: dict) -> None:
            self.handle_event(event)

        self.rtm.on("message")(on_message)

    def connect(self) -> str:
        """Authenticate with Slack and record the bot's own user id.

        Raises:
            AuthFailureError: If Slack rejects the token
        """
        try:
            response = self.rtm.web_client.auth_test()
        except SlackApiError as e:
            raise AuthFailureError(f"Slack authentication failed: {e.response.get('error')}") from e

        user_id = response.get("user_id")
        if not user_id:
            raise AuthFailureError("Slack did not return the bot's user id")

        self.identity = user_id
        self.state = SessionState.CONNECTED
        logger.info("Connected as %s, my user id is %s", response.get("user"), user_id)
        return user_id

    def send(self, channel: str, text: str) -> None:
        try:
            self.rtm.web_client.chat_postMessage(channel=channel, text=text)
        except SlackApiError as e:
            logger.error("Failed to send message to %s: %s", channel, e.response.get("error"))

    def handle_event(self, event: dict) -> None:
        if self.state is not SessionState.CONNECTED:
            logger.debug("Dropping event received while %s", self.state.value)
            return
        if not is_standard_message(event):
            return
        if event.get("user") == self.identity:
            return
        channel = event.get("channel")
        if not channel:
            return
        self.router.dispatch(event["text"], self.identity, channel, self.send)

    def run(self) -> None:
        """Connect and block in the RTM receive loop until it stops."""
        self.connect()
        try:
            self.rtm.start()
        finally:
            self.close()

    def close(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        # the RTM client has no session to tear down until start() has connected
        if self.rtm.current_session is not None:
            self.rtm.close()
        logger.info("Slack session closed")
