"""Jira sprint report client with retry logic."""

import logging

import requests
from jira import JIRAError
from jira.resilientsession import ResilientSession
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from jira_sprint_bot.config import Config
from jira_sprint_bot.exceptions import FailedRequestError, ReportParsingError

logger = logging.getLogger(__name__)

SPRINT_REPORT_PATH = "/rest/greenhopper/1.0/rapid/charts/sprintreport"


class TransientRequestError(Exception):
    """Raised for transport failures and 5xx responses, which are retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class JiraClient:
    """Client for the Jira sprint report endpoint."""

    retry_wait = wait_exponential(multiplier=1, min=1, max=10)

    def __init__(self, config: Config) -> None:
        """Initialize Jira client with configuration."""
        self.config = config
        self._session: ResilientSession | None = None

    @property
    def sprint_report_url(self) -> str:
        return self.config.jira_url + SPRINT_REPORT_PATH

    def _get_session(self) -> ResilientSession:
        """Get or create the HTTP session.

        The session's own retry loop is switched off; retries happen in
        ``_get`` so that 4xx responses fail immediately.
        """
        if self._session is None:
            self._session = ResilientSession(timeout=self.config.http_timeout, max_retries=0)
        return self._session

    def _get_once(self, url: str, params: dict) -> requests.Response:
        session = self._get_session()
        try:
            return session.get(
                url,
                params=params,
                **self.config.credentials.request_kwargs(),
            )
        except JIRAError as e:
            if e.status_code is not None and e.status_code >= 500:
                raise TransientRequestError(
                    f"Jira returned HTTP {e.status_code}", status_code=e.status_code
                ) from e
            raise FailedRequestError(
                f"Jira returned HTTP {e.status_code}", status_code=e.status_code
            ) from e
        except requests.RequestException as e:
            raise TransientRequestError(f"Cannot reach Jira at {url}: {e}") from e

    def _get(self, url: str, params: dict) -> requests.Response:
        """GET with bounded exponential backoff on transient failures."""
        retrying = Retrying(
            retry=retry_if_exception_type(TransientRequestError),
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=self.retry_wait,
            before_sleep=self._log_retry,
            reraise=True,
        )
        return retrying(self._get_once, url, params)

    @staticmethod
    def _log_retry(retry_state) -> None:
        logger.warning(
            "Jira request failed (attempt %d): %s; retrying",
            retry_state.attempt_number,
            retry_state.outcome.exception(),
        )

    def fetch_sprint_report(self, board_id: str, sprint_id: str) -> dict:
        """Fetch the raw sprint report for a board and sprint.

        Args:
            board_id: Rapid board (scrum board) id
            sprint_id: Sprint id on that board

        Returns:
            Parsed JSON object

        Raises:
            FailedRequestError: If Jira cannot be reached or answers non-2xx
            ReportParsingError: If the body is not a JSON object
        """
        params = {"rapidViewId": board_id, "sprintId": sprint_id}
        url = self.sprint_report_url
        logger.info("Requesting sprint report from %s with %s", url, params)

        try:
            response = self._get(url, params)
        except TransientRequestError as e:
            raise FailedRequestError(str(e), status_code=e.status_code) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ReportParsingError("Jira returned a body that is not JSON") from e

        if not isinstance(data, dict):
            raise ReportParsingError("Jira returned JSON that is not an object")

        logger.debug("Sprint report %s/%s fetched", board_id, sprint_id)
        return data
