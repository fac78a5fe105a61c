"""Jira credential providers.

The deployment picks one scheme in its configuration; the client asks the
provider for the keyword arguments to attach to each request.
"""

from dataclasses import dataclass, field

DEFAULT_SESSION_COOKIE = "JSESSIONID"


@dataclass(frozen=True)
class BasicAuthCredentials:
    """HTTP Basic authentication with a Jira username and password."""

    username: str
    password: str = field(repr=False)

    def request_kwargs(self) -> dict:
        return {"auth": (self.username, self.password)}


@dataclass(frozen=True)
class SessionCookieCredentials:
    """An existing Jira web session, sent as a cookie."""

    value: str = field(repr=False)
    name: str = DEFAULT_SESSION_COOKIE

    def request_kwargs(self) -> dict:
        return {"cookies": {self.name: self.value}}


Credentials = BasicAuthCredentials | SessionCookieCredentials
