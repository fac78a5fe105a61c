"""Command line entry point for the sprint report bot."""

import argparse
import logging
import sys
from pathlib import Path

from jira_sprint_bot.bot import SprintBot
from jira_sprint_bot.commands import CommandRouter
from jira_sprint_bot.config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_USERS_PATH,
    Config,
    load_config,
    load_roster,
)
from jira_sprint_bot.exceptions import (
    AuthFailureError,
    ConfigNotFoundError,
    InvalidConfigError,
    ReportError,
)
from jira_sprint_bot.jira_client import JiraClient
from jira_sprint_bot.report import build_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jira-sprint-bot",
        description="Slack bot and CLI for Jira sprint reports.",
    )
    parser.add_argument(
        "-c", "--cfg", type=Path, default=DEFAULT_CONFIG_PATH,
        help=f"Configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-u", "--users", type=Path, default=None,
        help=f"User roster file (default: users_file from config, else {DEFAULT_USERS_PATH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Print a sprint report")
    report.add_argument("-s", "--sprint_id", required=True, help="Sprint id")
    report.add_argument("-r", "--rapid_id", required=True, help="Rapid board id")
    report.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS,
        help="Debug logging",
    )

    subparsers.add_parser("burndown", help="Burndown chart (not implemented)")
    subparsers.add_parser("bot", help="Run the Slack bot")

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(args: argparse.Namespace, require_slack: bool = False) -> tuple[Config, tuple[str, ...]]:
    """Load configuration and roster.

    Raises:
        ConfigNotFoundError: If a file is missing
        InvalidConfigError: If a file is invalid
    """
    try:
        config = load_config(args.cfg, require_slack=require_slack)
    except FileNotFoundError as e:
        raise ConfigNotFoundError(str(e)) from e
    except ValueError as e:
        raise InvalidConfigError(str(e)) from e

    users_path = args.users or Path(config.users_file or DEFAULT_USERS_PATH)
    try:
        roster = load_roster(users_path)
    except FileNotFoundError as e:
        raise ConfigNotFoundError(str(e)) from e
    except ValueError as e:
        raise InvalidConfigError(str(e)) from e

    logger.debug("Loaded %d roster users from %s", len(roster), users_path)
    return config, roster


def run_report(args: argparse.Namespace) -> int:
    config, roster = _load(args)
    client = JiraClient(config)
    try:
        data = client.fetch_sprint_report(args.rapid_id, args.sprint_id)
        text = build_report(data, roster, config.jira_url, time_reference=config.time_reference)
    except ReportError as e:
        logger.error("Sprint report failed at %s: %s", e.stage, e)
        return 1
    print(text)
    return 0


def run_burndown(args: argparse.Namespace) -> int:
    logger.error("Burndown charts are not implemented")
    return 1


def run_bot(args: argparse.Namespace) -> int:
    config, roster = _load(args, require_slack=True)
    router = CommandRouter(
        JiraClient(config),
        roster,
        config.jira_url,
        time_reference=config.time_reference,
    )
    SprintBot(config, router).run()
    return 0


COMMANDS = {
    "report": run_report,
    "burndown": run_burndown,
    "bot": run_bot,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(getattr(args, "verbose", False))

    try:
        return COMMANDS[args.command](args)
    except (ConfigNotFoundError, InvalidConfigError, AuthFailureError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
