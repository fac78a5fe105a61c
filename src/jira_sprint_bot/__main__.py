import sys

from jira_sprint_bot.cli import main

sys.exit(main())
