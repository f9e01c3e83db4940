"""Shared configuration loader utilities."""

import os

from pydantic import BaseModel

from .actions import get_input

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_API_URL = "https://api.github.com"


class ConfigurationError(ValueError):
    """Raised when the action inputs or repository context are invalid."""


class ActionInputs(BaseModel):
    """Validated action inputs."""

    github_token: str
    gemini_api_key: str
    grouping_labels: list[str]
    require_feature_label: bool = False
    gemini_model: str = DEFAULT_GEMINI_MODEL


class RepoContext(BaseModel):
    """Repository the workflow runs against."""

    owner: str
    repo: str
    api_url: str = DEFAULT_API_URL

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_grouping_labels(raw: str) -> list[str]:
    """Split a comma-separated label list, dropping blank entries."""
    return [label.strip() for label in raw.split(",") if label.strip()]


def load_inputs(env: dict[str, str] | None = None) -> ActionInputs:
    """Load and validate action inputs from the environment."""
    github_token = get_input("github-token", env)
    gemini_api_key = get_input("gemini-api-key", env)
    grouping_labels_input = get_input("grouping-labels", env)

    if not github_token or not gemini_api_key or not grouping_labels_input:
        raise ConfigurationError(
            "Missing required inputs: github-token, gemini-api-key, or grouping-labels"
        )

    grouping_labels = parse_grouping_labels(grouping_labels_input)
    if not grouping_labels:
        raise ConfigurationError("At least one grouping label must be provided")

    return ActionInputs(
        github_token=github_token,
        gemini_api_key=gemini_api_key,
        grouping_labels=grouping_labels,
        require_feature_label=get_input("require-feature-label", env) == "true",
        gemini_model=get_input("gemini-model", env) or DEFAULT_GEMINI_MODEL,
    )


def load_repo_context(env: dict[str, str] | None = None) -> RepoContext:
    """Resolve owner/repo from GITHUB_REPOSITORY (or the owner/name pair used locally)."""
    env = os.environ if env is None else env
    full_name = env.get("GITHUB_REPOSITORY", "")
    if full_name:
        owner, _, repo = full_name.partition("/")
    else:
        owner = env.get("GITHUB_REPOSITORY_OWNER", "")
        repo = env.get("GITHUB_REPOSITORY_NAME", "")

    if not owner or not repo or "/" in repo:
        raise ConfigurationError(
            "Repository context not found. Set GITHUB_REPOSITORY to owner/repo."
        )

    api_url = env.get("GITHUB_API_URL") or DEFAULT_API_URL
    return RepoContext(owner=owner, repo=repo, api_url=api_url.rstrip("/"))
