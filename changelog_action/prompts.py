"""Prompts for LLM summarization tasks."""


def get_release_summary_prompt(prs_json: str, group_name: str | None = None) -> str:
    """Generate the prompt for summarizing a group of PRs as release notes.

    Args:
        prs_json: The PRs serialized as JSON
        group_name: The label group being summarized, if any

    Returns:
        The formatted prompt string
    """
    group_context = f" for {group_name}" if group_name else ""
    return (
        f"Create a concise release summary{group_context} for the following pull requests. "
        "Focus on user-facing improvements and new capabilities. "
        "Requirements: Use ### for main headings (minimum h3), #### for subheadings if needed. "
        "Keep formatting simple and clean. "
        "Preserve Loom video embeddings exactly as they appear in PR descriptions. "
        "Return ONLY the summary content - no introductory text, no explanations, just the release notes. "
        f"Here are the PRs:\n\n{prs_json}"
    )


def get_slack_format_prompt(markdown_summary: str) -> str:
    """Generate the prompt for reformatting a markdown summary for Slack.

    Args:
        markdown_summary: Release notes in GitHub markdown

    Returns:
        The formatted prompt string
    """
    return (
        "Reformat the following GitHub release content for Slack using these rules: "
        "Use *text* for bold (not **text**), "
        "Use _text_ for italic, "
        "Use `code` for inline code, "
        "Use > for blockquotes, "
        "Do NOT use ### headers - just use *Bold Text* for section headers, "
        "For Loom videos format as: <video_url|Link Text> (Slack link format), "
        "Use emojis sparingly for key points only, "
        "Keep line breaks and spacing clean for Slack, "
        "Do NOT use markdown image syntax ![](url) - use Slack's link format instead. "
        "Make it engaging and easy to read in a Slack channel. "
        "Return ONLY the reformatted content - no introductory text, no explanations, "
        "just the reformatted release notes. "
        f"Here is the GitHub release content to reformat:\n\n{markdown_summary}"
    )
