"""Data models for Jira sprint reports."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass
class Sprint:
    """A sprint and its estimate totals."""

    name: str
    start_date: datetime
    end_date: datetime
    completed: timedelta
    incomplete: timedelta
    total: timedelta


@dataclass
class Issue:
    """An issue listed in a sprint report."""

    key: str
    assignee: str | None  # username, matched against the roster
    assignee_name: str | None  # display name
    estimate: timedelta = timedelta(0)


@dataclass
class SprintReport:
    """Complete parsed sprint report."""

    sprint: Sprint
    completed_issues: list[Issue] = field(default_factory=list)
    incomplete_issues: list[Issue] = field(default_factory=list)
