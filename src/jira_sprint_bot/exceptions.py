"""Exception hierarchy for the sprint report bot."""


class SprintBotError(Exception):
    """Base exception for sprint bot errors."""

    pass


class ConfigNotFoundError(SprintBotError):
    """Configuration file not found."""

    pass


class InvalidConfigError(SprintBotError):
    """Configuration is invalid."""

    pass


class AuthFailureError(SprintBotError):
    """The bot could not authenticate with Slack."""

    pass


class CommandUsageError(SprintBotError):
    """A chat command was missing required arguments."""

    pass


class ReportError(SprintBotError):
    """Base exception for a failed report run.

    ``stage`` names the pipeline step that failed.
    """

    stage = "report"


class BadDateError(ReportError):
    """A date in the sprint report could not be parsed."""

    stage = "date"


class ReportParsingError(ReportError):
    """The sprint report JSON is missing fields or is not JSON at all."""

    stage = "parse"

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class FailedRequestError(ReportError):
    """The request to Jira failed."""

    stage = "request"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
