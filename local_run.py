#!/usr/bin/env python3
"""Run the changelog action locally.

Inputs are read from a .env file using the runner's variable names, e.g.
INPUT_GITHUB-TOKEN, INPUT_GEMINI-API-KEY and INPUT_GROUPING-LABELS.
"""

import os
import sys

from dotenv import load_dotenv

from changelog_action.actions import configure_logging, get_input
from changelog_action.main import run


def main():
    load_dotenv()

    # Stand in for the repository context the runner normally provides
    if not os.environ.get("GITHUB_REPOSITORY"):
        os.environ.setdefault("GITHUB_REPOSITORY_OWNER", "forgent")
        os.environ.setdefault("GITHUB_REPOSITORY_NAME", "changelog")

    print("Testing changelog action locally...")
    print("Environment variables loaded:")
    print(f"- GitHub Token: {'set' if get_input('github-token') else 'MISSING'}")
    print(f"- Gemini API Key: {'set' if get_input('gemini-api-key') else 'MISSING'}")
    print(f"- Grouping Labels: {get_input('grouping-labels') or 'MISSING'}")
    repository = os.environ.get("GITHUB_REPOSITORY") or (
        f"{os.environ['GITHUB_REPOSITORY_OWNER']}/{os.environ['GITHUB_REPOSITORY_NAME']}"
    )
    print(f"- Repository: {repository}")
    print()

    configure_logging()
    status = run()
    print("Action completed successfully!" if status == 0 else "Action failed.")
    sys.exit(status)


if __name__ == "__main__":
    main()
