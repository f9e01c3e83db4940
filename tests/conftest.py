from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest
import requests


class FakeResponse:
    def __init__(self, json_data: Any = None, status_code: int = 200, reason: str = "OK") -> None:
        self._json_data = json_data
        self.status_code = status_code
        self.reason = reason

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} {self.reason}", response=self)  # type: ignore[arg-type]

    def json(self) -> Any:
        if self._json_data is None:
            raise ValueError("No JSON object could be decoded")
        return self._json_data


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def raw_pr(
    number: int,
    merged_at: str | None,
    labels: list[str],
    title: str = "",
    body: str | None = "",
    login: str | None = "dev",
) -> dict:
    return {
        "title": title or f"PR {number}",
        "body": body,
        "number": number,
        "html_url": f"https://github.com/test-owner/test-repo/pull/{number}",
        "user": {"login": login} if login is not None else None,
        "merged_at": merged_at,
        "labels": [{"name": name} for name in labels],
    }


MOCK_PRS = [
    raw_pr(123, "2024-01-15T10:00:00Z", ["writer", "feature"], "Add new writer features",
           "Enhanced content editing capabilities", "dev1"),
    raw_pr(124, "2024-01-16T10:00:00Z", ["ui", "feature"], "Update UI components",
           "New dashboard design", "dev2"),
    raw_pr(100, "2023-01-01T10:00:00Z", ["writer"], "Old feature from last year",
           "Should not be included", "dev3"),
]


def runtime_token(scopes: str = "Actions.GenericRead:1 Actions.Results:run-1:job-2") -> str:
    """A JWT-shaped ACTIONS_RUNTIME_TOKEN carrying the given scopes."""
    payload = base64.urlsafe_b64encode(json.dumps({"scp": scopes}).encode()).decode().rstrip("=")
    return f"eyJhbGciOiJIUzI1NiJ9.{payload}.signature"


def read_outputs(path: Path) -> dict[str, str]:
    """Parse a GITHUB_OUTPUT file written with the heredoc delimiter form."""
    outputs: dict[str, str] = {}
    if not path.exists():
        return outputs
    lines = path.read_text(encoding="utf-8").split("\n")
    i = 0
    while i < len(lines):
        if "<<" not in lines[i]:
            i += 1
            continue
        name, delimiter = lines[i].split("<<", 1)
        end = lines.index(delimiter, i + 1)
        outputs[name] = "\n".join(lines[i + 1:end])
        i = end + 1
    return outputs


@pytest.fixture
def action_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Runner-like environment; returns the GITHUB_OUTPUT file path."""
    output_file = tmp_path / "github_output"
    monkeypatch.setenv("INPUT_GITHUB-TOKEN", "test-token")
    monkeypatch.setenv("INPUT_GEMINI-API-KEY", "test-gemini-key")
    monkeypatch.setenv("INPUT_GROUPING-LABELS", "writer,ui")
    monkeypatch.setenv("INPUT_REQUIRE-FEATURE-LABEL", "false")
    monkeypatch.setenv("GITHUB_REPOSITORY", "test-owner/test-repo")
    monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
    for name in ("GITHUB_API_URL", "ACTIONS_RUNTIME_TOKEN", "ACTIONS_RESULTS_URL", "INPUT_GEMINI-MODEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return output_file
