#!/usr/bin/env python3
"""Shared data models for the changelog action."""

from pydantic import BaseModel, ConfigDict, Field


class PullRequest(BaseModel):
    """Model representing a merged pull request, projected from the GitHub API."""
    model_config = ConfigDict(frozen=True)

    title: str
    body: str = ""
    number: int
    html_url: str
    user: str = ""
    merged_at: str = ""
    labels: list[str] = Field(default_factory=list)

    @property
    def merged_date(self) -> str:
        """Extract the date portion from merged_at timestamp."""
        return self.merged_at[:10]


class ReleaseInfo(BaseModel):
    """The latest published release, or its absence."""
    exists: bool = False
    tag: str = ""
    created_at: str = ""


class GroupedSummary(BaseModel):
    markdown: str
    slack: str


class LabelGroup(BaseModel):
    """PRs sharing one grouping label, with their generated summaries."""
    name: str
    prs: list[PullRequest]
    summary: GroupedSummary


class ArtifactMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    release_date: str = Field(alias="releaseDate")
    release_timestamp: str = Field(alias="releaseTimestamp")
    total_prs: int = Field(alias="totalPRs")
    grouping_labels: list[str] = Field(alias="groupingLabels")
    generated_at: str = Field(alias="generatedAt")


class ArtifactData(BaseModel):
    """Document written to the changelog artifact file."""
    metadata: ArtifactMetadata
    groups: list[LabelGroup]
