#!/usr/bin/env python3
"""Group merged PRs by label and summarize each group with Gemini."""

import json
import logging
from typing import Literal

import requests
from pydantic import BaseModel, Field, ValidationError

from .config_loader import DEFAULT_GEMINI_MODEL
from .models import GroupedSummary, LabelGroup, PullRequest
from .prompts import get_release_summary_prompt, get_slack_format_prompt

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GENERATE_TIMEOUT = 120

NO_CHANGES_TEXT = "No new changes were released in this period."
AI_FAILURE_TEXT = "Failed to generate AI summary"
EMPTY_SUMMARY_TEXT = "Failed to generate summary"
SLACK_FAILURE_TEXT = "Failed to generate Slack summary"


class GeminiPart(BaseModel):
    text: str = ""


class GeminiContent(BaseModel):
    parts: list[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(BaseModel):
    content: GeminiContent | None = None


class GeminiResponse(BaseModel):
    """The subset of a generateContent reply this action reads."""
    candidates: list[GeminiCandidate] = Field(default_factory=list)

    def first_text(self) -> str:
        if not self.candidates or self.candidates[0].content is None:
            return ""
        parts = self.candidates[0].content.parts
        return parts[0].text if parts else ""


class SummaryResult(BaseModel):
    """Outcome of one generation stage.

    ``status`` says whether ``text`` came from the model or is a placeholder;
    callers never need to catch an exception for a failed generation.
    """
    text: str
    status: Literal["generated", "no_changes", "empty", "failed", "skipped"]

    @property
    def is_placeholder(self) -> bool:
        return self.status != "generated"


def group_prs_by_labels(prs: list[PullRequest], grouping_labels: list[str]) -> dict[str, list[PullRequest]]:
    """Bucket PRs under each configured grouping label, in configuration order.

    A PR carrying several grouping labels lands in every matching bucket.
    """
    groups: dict[str, list[PullRequest]] = {label: [] for label in grouping_labels}
    for pr in prs:
        for label in pr.labels:
            if label in groups:
                groups[label].append(pr)
    return groups


def generate_content(prompt: str, api_key: str, model: str = DEFAULT_GEMINI_MODEL) -> str:
    """Send a single prompt to Gemini and return the first candidate's text.

    Returns an empty string when the reply has no text part. HTTP and transport
    failures raise ``requests.RequestException``.
    """
    response = requests.post(
        GEMINI_URL.format(model=model),
        headers={
            "Content-Type": "application/json",
            "x-goog-api-key": api_key,
        },
        json={"contents": [{"parts": [{"text": prompt}]}]},
        timeout=GENERATE_TIMEOUT,
    )
    response.raise_for_status()

    data = response.json()
    try:
        return GeminiResponse.model_validate(data).first_text()
    except ValidationError as e:
        logger.warning("Unexpected Gemini response shape: %s", e)
        return ""


def generate_ai_summary(
    prs: list[PullRequest],
    api_key: str,
    group_name: str | None = None,
    model: str = DEFAULT_GEMINI_MODEL,
) -> SummaryResult:
    """Summarize a list of PRs as markdown release notes."""
    if not prs:
        return SummaryResult(text=NO_CHANGES_TEXT, status="no_changes")

    prs_json = json.dumps([pr.model_dump() for pr in prs])
    prompt = get_release_summary_prompt(prs_json, group_name)
    group_context = f" for {group_name}" if group_name else ""

    try:
        text = generate_content(prompt, api_key, model)
    except (requests.RequestException, ValueError) as e:
        logger.warning("Failed to generate AI summary%s: %s", group_context, e)
        return SummaryResult(text=AI_FAILURE_TEXT, status="failed")

    if not text:
        logger.warning("Gemini returned no summary text%s", group_context)
        return SummaryResult(text=EMPTY_SUMMARY_TEXT, status="empty")
    return SummaryResult(text=text, status="generated")


def convert_to_slack_format(
    markdown_summary: str,
    api_key: str,
    model: str = DEFAULT_GEMINI_MODEL,
) -> SummaryResult:
    """Reformat a markdown summary with Slack's mrkdwn conventions."""
    if markdown_summary in (NO_CHANGES_TEXT, AI_FAILURE_TEXT):
        return SummaryResult(text=markdown_summary, status="skipped")

    try:
        text = generate_content(get_slack_format_prompt(markdown_summary), api_key, model)
    except (requests.RequestException, ValueError) as e:
        logger.warning("Failed to generate Slack summary: %s", e)
        return SummaryResult(text=SLACK_FAILURE_TEXT, status="failed")

    if not text:
        logger.warning("Gemini returned no Slack summary text")
        return SummaryResult(text=SLACK_FAILURE_TEXT, status="empty")
    return SummaryResult(text=text, status="generated")


def summarize_groups(
    groups: dict[str, list[PullRequest]],
    api_key: str,
    model: str = DEFAULT_GEMINI_MODEL,
) -> list[LabelGroup]:
    """Summarize each non-empty group, one request at a time.

    Empty groups are dropped from the result.
    """
    label_groups = []
    for label, label_prs in groups.items():
        if not label_prs:
            continue

        logger.info("Generating summary for %s group (%d PRs)", label, len(label_prs))
        markdown = generate_ai_summary(label_prs, api_key, label, model)
        slack = convert_to_slack_format(markdown.text, api_key, model)

        label_groups.append(
            LabelGroup(
                name=label,
                prs=label_prs,
                summary=GroupedSummary(markdown=markdown.text, slack=slack.text),
            )
        )
    return label_groups
