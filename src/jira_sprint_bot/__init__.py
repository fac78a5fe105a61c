"""Slack bot that reports Jira sprint progress."""
