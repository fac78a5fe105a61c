"""Configuration management for the sprint report bot."""

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import yaml

from jira_sprint_bot.credentials import (
    DEFAULT_SESSION_COOKIE,
    BasicAuthCredentials,
    Credentials,
    SessionCookieCredentials,
)

DEFAULT_CONFIG_PATH = Path("conf/config.yml")
DEFAULT_USERS_PATH = Path("conf/users.yml")

TIME_REFERENCES = ("now", "start")


@dataclass(frozen=True)
class Config:
    """Configuration for the Slack connection and the Jira sprint report."""

    jira_base: str
    slack_key: str | None = None
    jira_username: str | None = None
    jira_password: str | None = None
    session_id: str | None = None
    session_cookie: str = DEFAULT_SESSION_COOKIE
    users_file: str | None = None
    time_reference: str = "now"
    http_timeout: float = 10.0
    retry_attempts: int = 3

    @property
    def jira_url(self) -> str:
        return self.jira_base.rstrip("/")

    @property
    def credentials(self) -> Credentials:
        """The credential provider selected by this configuration."""
        if self.session_id:
            return SessionCookieCredentials(value=self.session_id, name=self.session_cookie)
        return BasicAuthCredentials(
            username=self.jira_username or "", password=self.jira_password or ""
        )

    def validate(self, require_slack: bool = False) -> list[str]:
        """Validate configuration values. Returns list of error messages."""
        errors: list[str] = []

        if not self.jira_base:
            errors.append("jira_base is required")
        else:
            parsed = urlparse(self.jira_base)
            if parsed.scheme not in ("http", "https"):
                errors.append("jira_base must start with http:// or https://")
            if not parsed.netloc:
                errors.append("jira_base must include a domain")

        has_basic = bool(self.jira_username or self.jira_password)
        if has_basic and self.session_id:
            errors.append("Configure either jira_username/jira_password or session_id, not both")
        elif has_basic and not (self.jira_username and self.jira_password):
            errors.append("jira_username and jira_password must be set together")
        elif not has_basic and not self.session_id:
            errors.append("Jira credentials are required (jira_username/jira_password or session_id)")

        if self.time_reference not in TIME_REFERENCES:
            errors.append(
                f"time_reference must be one of {', '.join(TIME_REFERENCES)}, "
                f"got {self.time_reference!r}"
            )

        if self.http_timeout <= 0:
            errors.append("http_timeout must be positive")
        if self.retry_attempts < 1:
            errors.append("retry_attempts must be at least 1")

        if require_slack and not self.slack_key:
            errors.append("slack_key is required to run the bot")

        return errors


def _read_yaml(path: Path):
    with open(path, encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"{path} is not valid YAML: {e}") from e


def config_exists(path: Path = DEFAULT_CONFIG_PATH) -> bool:
    """Check if configuration file exists."""
    return Path(path).exists()


def load_config(path: Path = DEFAULT_CONFIG_PATH, require_slack: bool = False) -> Config:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration not found at {config_path}. "
            "Copy conf/config.example.yml to set up."
        )

    data = _read_yaml(config_path) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping of settings")

    try:
        config = Config(
            jira_base=str(data.get("jira_base") or ""),
            slack_key=data.get("slack_key"),
            jira_username=data.get("jira_username"),
            jira_password=data.get("jira_password"),
            session_id=data.get("session_id"),
            session_cookie=data.get("session_cookie") or DEFAULT_SESSION_COOKIE,
            users_file=data.get("users_file"),
            time_reference=str(data.get("time_reference", "now")).lower(),
            http_timeout=float(data.get("http_timeout", 10)),
            retry_attempts=int(data.get("retry_attempts", 3)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    errors = config.validate(require_slack=require_slack)
    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    return config


def load_roster(path: Path = DEFAULT_USERS_PATH) -> tuple[str, ...]:
    """Load the team roster from a YAML file.

    The file holds ``users: [{name: ...}, ...]``; bare strings are accepted
    too. Order is kept and duplicates are dropped.

    Raises:
        FileNotFoundError: If the roster file doesn't exist
        ValueError: If the roster is malformed
    """
    roster_path = Path(path)

    if not roster_path.exists():
        raise FileNotFoundError(f"User roster not found at {roster_path}.")

    data = _read_yaml(roster_path) or {}
    users = data.get("users") if isinstance(data, dict) else None
    if not isinstance(users, list):
        raise ValueError(f"{roster_path} must contain a 'users' list")

    names: list[str] = []
    for entry in users:
        name = entry.get("name") if isinstance(entry, dict) else entry
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Invalid roster entry in {roster_path}: {entry!r}")
        if name not in names:
            names.append(name)

    return tuple(names)
