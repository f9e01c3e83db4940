#!/usr/bin/env python3
"""Entry point: build grouped release notes for the PRs merged since the last release."""

import json
import logging
import sys
from datetime import datetime, timezone

import requests

from .actions import configure_logging, set_failed, set_output
from .artifacts import (
    ARTIFACT_DIR,
    ArtifactUploadError,
    artifact_name_for,
    upload_artifact,
    write_artifact,
)
from .config_loader import load_inputs, load_repo_context
from .fetch_prs import compute_since_date, fetch_relevant_prs, get_latest_release
from .models import ArtifactData, ArtifactMetadata
from .summarize_prs import group_prs_by_labels, summarize_groups

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Format like JavaScript's toISOString: millisecond precision and a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def run() -> int:
    """Run the whole changelog pipeline. Returns the process exit status."""
    try:
        inputs = load_inputs()
        context = load_repo_context()

        logger.info("Starting changelog generation...")
        logger.info("Repository: %s", context.full_name)
        logger.info("Grouping labels: %s", ", ".join(inputs.grouping_labels))
        logger.info("Require feature label: %s", inputs.require_feature_label)

        # Step 1: Release date and timestamp
        now = utcnow()
        release_date = now.strftime("%Y-%m-%d")
        release_timestamp = now.strftime("%Y%m%d-%H%M%S")
        set_output("release-date", release_date)
        set_output("release-timestamp", release_timestamp)
        logger.info("Release date: %s, timestamp: %s", release_date, release_timestamp)

        # Step 2: Previous release
        release = get_latest_release(inputs.github_token, context)
        set_output("has-previous-release", str(release.exists).lower())
        set_output("previous-tag", release.tag)
        set_output("previous-release-date", release.created_at)

        # Step 3: Merged PRs since the cutoff
        since = compute_since_date(release, now)
        relevant_prs = fetch_relevant_prs(
            inputs.github_token,
            context,
            since,
            inputs.grouping_labels,
            inputs.require_feature_label,
        )
        logger.info("Found %d relevant PRs", len(relevant_prs))

        # Step 4: Group and summarize
        groups = group_prs_by_labels(relevant_prs, inputs.grouping_labels)
        label_groups = summarize_groups(groups, inputs.gemini_api_key, inputs.gemini_model)

        grouped_summaries = {group.name: group.summary.model_dump() for group in label_groups}
        set_output("grouped-summaries", json.dumps(grouped_summaries))
        set_output("label-groups", ",".join(group.name for group in label_groups))
        set_output("total-prs", str(len(relevant_prs)))
        set_output("has-content", str(len(label_groups) > 0).lower())

        # Step 5: Artifact
        artifact_data = ArtifactData(
            metadata=ArtifactMetadata(
                release_date=release_date,
                release_timestamp=release_timestamp,
                total_prs=len(relevant_prs),
                grouping_labels=inputs.grouping_labels,
                generated_at=iso_timestamp(utcnow()),
            ),
            groups=label_groups,
        )
        artifact_path = write_artifact(artifact_data, ARTIFACT_DIR)

        artifact_name = artifact_name_for(release_timestamp)
        try:
            result = upload_artifact(artifact_name, [artifact_path], ARTIFACT_DIR)
        except (ArtifactUploadError, requests.RequestException, OSError) as e:
            logger.warning("Failed to upload artifact: %s", e)
            set_output("artifact-name", "")
        else:
            set_output("artifact-name", artifact_name)
            logger.info("Uploaded artifact: %s (%d bytes)", artifact_name, result.size)

        logger.info("Changelog generation completed successfully")
        return 0

    except Exception as e:
        logger.debug("Changelog generation failed", exc_info=True)
        set_failed(str(e) or "An unknown error occurred")
        return 1


def main():
    configure_logging()
    sys.exit(run())


if __name__ == "__main__":
    main()
