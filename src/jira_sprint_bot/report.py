"""Sprint report parsing and rendering."""

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from jira_sprint_bot.dates import days_between, parse_tracker_date, pretty_date
from jira_sprint_bot.exceptions import BadDateError, ReportParsingError
from jira_sprint_bot.models import Issue, Sprint, SprintReport

logger = logging.getLogger(__name__)

ESTIMATE_TOTAL_FIELDS = {
    "completed": "completedIssuesEstimateSum",
    "incomplete": "incompletedIssuesEstimateSum",
    "total": "allIssuesEstimateSum",
}

# timedelta cannot hold more seconds than this
_MAX_SECONDS = timedelta.max.total_seconds()

COMPLETED = "Completed"
INCOMPLETE = "Incomplete"


def _dig(obj, *keys):
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _as_seconds(value) -> int | None:
    """Convert a JSON estimate value to whole seconds, or None if not numeric."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if abs(value) >= _MAX_SECONDS or not math.isfinite(value):
        return None
    return round(value)


def _hours(duration: timedelta) -> int:
    """Whole hours, truncated."""
    return int(duration.total_seconds() / 3600)


def _percent(part: int, total: int) -> str:
    if total == 0:
        return "N/A"
    return f"{part / total * 100:.1f}%"


def _parse_sprint_dates(sprint: dict) -> tuple[datetime, datetime]:
    try:
        start = parse_tracker_date(sprint.get("startDate"))
        end = parse_tracker_date(sprint.get("endDate"))
    except BadDateError as e:
        raise BadDateError(f"Was not able to parse a date in the sprint report: {e}") from e
    return start, end


def _parse_issue(raw, path: str, missing: list[str]) -> Issue | None:
    if not isinstance(raw, dict):
        missing.append(path)
        return None

    key = raw.get("key")
    if not isinstance(key, str) or not key:
        missing.append(f"{path}.key")
        return None

    estimate = _dig(raw, "estimateStatistic", "statFieldValue", "value")
    seconds = _as_seconds(estimate)
    if estimate is not None and seconds is None:
        logger.debug("Ignoring non-numeric estimate %r on %s", estimate, key)

    return Issue(
        key=key,
        assignee=raw.get("assignee"),
        assignee_name=raw.get("assigneeName"),
        estimate=timedelta(seconds=seconds or 0),
    )


def _parse_issues(contents: dict, field_name: str, missing: list[str]) -> list[Issue]:
    raw_issues = contents.get(field_name)
    if raw_issues is None:
        return []
    path = f"contents.{field_name}"
    if not isinstance(raw_issues, list):
        missing.append(path)
        return []

    issues: list[Issue] = []
    for index, raw in enumerate(raw_issues):
        issue = _parse_issue(raw, f"{path}[{index}]", missing)
        if issue is not None:
            issues.append(issue)
    return issues


def parse_sprint_report(data: dict) -> SprintReport:
    """Validate raw sprint report JSON and convert it to domain objects.

    Issues without an estimate count as zero. Every missing or invalid field
    is collected and reported together.

    Raises:
        BadDateError: If the sprint start or end date is absent or malformed
        ReportParsingError: If any other required field is missing or invalid
    """
    if not isinstance(data, dict):
        raise ReportParsingError("Sprint report is not a JSON object", missing=["<root>"])

    missing: list[str] = []

    sprint_raw = data.get("sprint")
    if not isinstance(sprint_raw, dict):
        raise ReportParsingError("Sprint report has no sprint section", missing=["sprint"])

    start, end = _parse_sprint_dates(sprint_raw)

    name = sprint_raw.get("name")
    if not isinstance(name, str):
        missing.append("sprint.name")

    contents = data.get("contents")
    if not isinstance(contents, dict):
        missing.append("contents")
        contents = {}

    totals: dict[str, timedelta] = {}
    for attr, field_name in ESTIMATE_TOTAL_FIELDS.items():
        value = _dig(contents, field_name, "value")
        seconds = _as_seconds(value)
        if seconds is None:
            missing.append(f"contents.{field_name}.value")
        else:
            totals[attr] = timedelta(seconds=seconds)

    completed_issues = _parse_issues(contents, "completedIssues", missing)
    incomplete_issues = _parse_issues(contents, "incompletedIssues", missing)

    if missing:
        raise ReportParsingError(
            "Error parsing returned JSON, missing or invalid: " + ", ".join(missing),
            missing=missing,
        )

    sprint = Sprint(
        name=name,
        start_date=start,
        end_date=end,
        completed=totals["completed"],
        incomplete=totals["incomplete"],
        total=totals["total"],
    )
    return SprintReport(
        sprint=sprint,
        completed_issues=completed_issues,
        incomplete_issues=incomplete_issues,
    )


def _issues_for_user(issues: list[Issue], user: str) -> list[Issue]:
    return [issue for issue in issues if issue.assignee == user]


def _sum_hours(issues: list[Issue]) -> int:
    return int(sum(issue.estimate.total_seconds() for issue in issues) / 3600)


def _user_sizing(report: SprintReport, roster: Sequence[str]) -> list[str]:
    lines: list[str] = []
    for user in roster:
        done = _issues_for_user(report.completed_issues, user)
        left = _issues_for_user(report.incomplete_issues, user)
        num_issues = len(done) + len(left)
        if num_issues == 0:
            continue
        done_hours = _sum_hours(done)
        left_hours = _sum_hours(left)
        total_hours = done_hours + left_hours
        lines.append(
            f"{user} has {left_hours} hours left of {total_hours} "
            f"({_percent(done_hours, total_hours)}) for {num_issues} issues"
        )
    return lines


def _issue_breakdown(name: str, issues: list[Issue], jira_url: str) -> str:
    lines = [f"{name} ({len(issues)})"]
    if not issues:
        lines.append(f"Nothing in {name} :(")
    for issue in issues:
        assignee = issue.assignee_name or issue.assignee or "Unassigned"
        lines.append(f"`{issue.key}` ({assignee}) - {jira_url}/browse/{issue.key}")
    return "\n".join(lines)


def render_report(
    report: SprintReport,
    roster: Sequence[str],
    jira_url: str,
    now: datetime | None = None,
    time_reference: str = "now",
) -> str:
    """Render a parsed sprint report as chat text.

    Args:
        report: Parsed sprint report
        roster: Display names to break workload down by, in output order
        jira_url: Jira base URL used for browse links
        now: Reference "now"; defaults to the current local time
        time_reference: "now" counts days left from ``now``, "start" from the
            sprint start date
    """
    sprint = report.sprint
    jira_url = jira_url.rstrip("/")

    if time_reference == "start":
        reference = sprint.start_date
    else:
        reference = now or datetime.now()
    days_left = days_between(reference, sprint.end_date)

    completed_hours = _hours(sprint.completed)
    incomplete_hours = _hours(sprint.incomplete)
    total_hours = _hours(sprint.total)

    header = "\n".join([
        f"Report for Sprint: {sprint.name}",
        f"Sprint Ends in: {days_left} day(s) on {pretty_date(sprint.end_date)}",
        f"Started on {pretty_date(sprint.start_date)}",
    ])
    summary = "\n".join([
        f"Completed: {completed_hours}h ({_percent(completed_hours, total_hours)}), "
        f"{len(report.completed_issues)} Issues",
        f"Incomplete: {incomplete_hours}h ({_percent(incomplete_hours, total_hours)}), "
        f"{len(report.incomplete_issues)} Issues",
    ])

    sizing_lines = _user_sizing(report, roster) or [
        "Nobody on the roster has issues in this sprint"
    ]
    sizing = "\n".join(["Sprint Sizing:", *sizing_lines])

    sections = [
        header,
        summary,
        sizing,
        _issue_breakdown(COMPLETED, report.completed_issues, jira_url),
        _issue_breakdown(INCOMPLETE, report.incomplete_issues, jira_url),
    ]
    return "\n\n".join(sections)


def build_report(
    data: dict,
    roster: Sequence[str],
    jira_url: str,
    now: datetime | None = None,
    time_reference: str = "now",
) -> str:
    """Build the report text from raw sprint report JSON.

    Raises:
        BadDateError: If a sprint date cannot be parsed
        ReportParsingError: If the JSON is missing required fields
    """
    report = parse_sprint_report(data)
    return render_report(report, roster, jira_url, now=now, time_reference=time_reference)
