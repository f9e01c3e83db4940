#!/usr/bin/env python3
"""Locate the latest release and fetch the PRs merged since then."""

import logging
from datetime import datetime, timedelta, timezone

import requests

from .actions import configure_logging
from .config_loader import RepoContext, load_inputs, load_repo_context
from .models import PullRequest, ReleaseInfo

logger = logging.getLogger(__name__)

FEATURE_LABEL = "feature"
LOOKBACK_WITHOUT_RELEASE = timedelta(days=7)
# Single page only: older qualifying PRs beyond the first 100 are not fetched.
PER_PAGE = 100
REQUEST_TIMEOUT = 30


def _headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
    }


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_latest_release(token: str, context: RepoContext) -> ReleaseInfo:
    """Look up the latest published release.

    Any failure, including a repository without releases, is reported as
    "no previous release" rather than raised.
    """
    url = f"{context.api_url}/repos/{context.full_name}/releases/latest"
    try:
        response = requests.get(url, headers=_headers(token), timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        release = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.debug("Latest release lookup failed: %s", e)
        logger.info("No previous releases found. This is the first release.")
        return ReleaseInfo()

    if not isinstance(release, dict) or not release.get("id"):
        logger.info("No previous releases found. This is the first release.")
        return ReleaseInfo()

    info = ReleaseInfo(
        exists=True,
        tag=release.get("tag_name") or "",
        created_at=release.get("created_at") or "",
    )
    logger.info("Found previous release: %s created at %s", info.tag, info.created_at)
    return info


def compute_since_date(release: ReleaseInfo, now: datetime) -> datetime:
    """Cutoff for merged PRs: the previous release, else seven days back."""
    if release.exists:
        logger.info("Fetching PRs since last release: %s", release.created_at)
        return parse_timestamp(release.created_at)

    since = now - LOOKBACK_WITHOUT_RELEASE
    logger.info("No previous release found. Fetching PRs from last 7 days: %s", since.isoformat())
    return since


def list_closed_prs(token: str, context: RepoContext) -> list[dict]:
    """Fetch the most recently updated closed PRs (first page only)."""
    url = f"{context.api_url}/repos/{context.full_name}/pulls"
    params = {
        "state": "closed",
        "sort": "updated",
        "direction": "desc",
        "per_page": PER_PAGE,
    }
    response = requests.get(url, headers=_headers(token), params=params, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.json()


def to_pull_request(pr: dict) -> PullRequest:
    """Project a raw GitHub PR payload to the fields the changelog needs."""
    author = pr.get("user") or {}
    return PullRequest(
        title=pr["title"],
        body=pr.get("body") or "",
        number=pr["number"],
        html_url=pr["html_url"],
        user=author.get("login") or "",
        merged_at=pr.get("merged_at") or "",
        labels=[label["name"] for label in pr.get("labels") or []],
    )


def filter_relevant_prs(
    prs: list[dict],
    since: datetime,
    grouping_labels: list[str],
    require_feature_label: bool = False,
) -> list[PullRequest]:
    """Keep PRs merged after ``since`` that carry at least one grouping label.

    Source order (most recently updated first) is preserved.
    """
    relevant = []
    for pr in prs:
        # Skip if not merged, or merged at/before the cutoff
        merged_at = pr.get("merged_at")
        if not merged_at or parse_timestamp(merged_at) <= since:
            continue

        pr_labels = [label["name"] for label in pr.get("labels") or []]
        if not any(label in pr_labels for label in grouping_labels):
            continue
        if require_feature_label and FEATURE_LABEL not in pr_labels:
            continue

        relevant.append(to_pull_request(pr))

    return relevant


def fetch_relevant_prs(
    token: str,
    context: RepoContext,
    since: datetime,
    grouping_labels: list[str],
    require_feature_label: bool = False,
) -> list[PullRequest]:
    """Fetch closed PRs and filter them down to the ones worth summarizing."""
    all_prs = list_closed_prs(token, context)
    logger.debug("Fetched %d closed PRs from %s", len(all_prs), context.full_name)
    return filter_relevant_prs(all_prs, since, grouping_labels, require_feature_label)


def main():
    """CLI for inspecting which PRs the action would pick up during development."""
    configure_logging()
    inputs = load_inputs()
    context = load_repo_context()

    release = get_latest_release(inputs.github_token, context)
    since = compute_since_date(release, datetime.now(timezone.utc))
    prs = fetch_relevant_prs(
        inputs.github_token,
        context,
        since,
        inputs.grouping_labels,
        inputs.require_feature_label,
    )

    print(f"\nFound {len(prs)} relevant PRs in {context.full_name}")
    for pr in prs:
        print(f"  #{pr.number} {pr.title}")
        print(f"    Merged: {pr.merged_date}  Labels: {', '.join(pr.labels)}")
        print(f"    URL: {pr.html_url}")


if __name__ == "__main__":
    main()
