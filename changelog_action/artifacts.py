"""Write the changelog artifact and upload it to the GitHub Actions artifact store."""

import base64
import hashlib
import io
import json
import logging
import os
import zipfile
from pathlib import Path

import requests
from pydantic import BaseModel

from .models import ArtifactData

logger = logging.getLogger(__name__)

ARTIFACT_DIR = Path("./changelog-artifacts")
ARTIFACT_FILENAME = "grouped-changelog.json"

ARTIFACT_SERVICE = "twirp/github.actions.results.api.v1.ArtifactService"
REQUEST_TIMEOUT = 60


class ArtifactUploadError(RuntimeError):
    """Raised when the artifact service cannot be reached or rejects the upload."""


class UploadResult(BaseModel):
    artifact_id: str
    size: int


def artifact_name_for(release_timestamp: str) -> str:
    return f"changelog-{release_timestamp}"


def write_artifact(data: ArtifactData, artifact_dir: Path = ARTIFACT_DIR) -> Path:
    """Write the artifact document as pretty-printed JSON and return its path."""
    artifact_dir.mkdir(parents=True, exist_ok=True)
    artifact_path = artifact_dir / ARTIFACT_FILENAME
    with open(artifact_path, "w", encoding="utf-8") as f:
        json.dump(data.model_dump(by_alias=True), f, indent=2)
    return artifact_path


def _backend_ids(runtime_token: str) -> tuple[str, str]:
    """Extract the workflow run/job backend ids from the runtime token's scopes."""
    try:
        payload = runtime_token.split(".")[1]
        payload += "=" * (-len(payload) % 4)
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (IndexError, ValueError) as e:
        raise ArtifactUploadError(f"Failed to decode ACTIONS_RUNTIME_TOKEN: {e}") from e
    if not isinstance(claims, dict):
        raise ArtifactUploadError("ACTIONS_RUNTIME_TOKEN payload is not a JSON object")

    for scope in str(claims.get("scp", "")).split(" "):
        parts = scope.split(":")
        if parts[0] == "Actions.Results" and len(parts) == 3:
            return parts[1], parts[2]
    raise ArtifactUploadError("ACTIONS_RUNTIME_TOKEN has no Actions.Results scope")


def _zip_files(files: list[Path], root_dir: Path) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path in files:
            archive.write(path, arcname=Path(path).relative_to(root_dir).as_posix())
    return buffer.getvalue()


def _call_service(results_url: str, method: str, token: str, body: dict) -> dict:
    response = requests.post(
        f"{results_url}/{ARTIFACT_SERVICE}/{method}",
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        },
        json=body,
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    reply = response.json()
    if not isinstance(reply, dict) or not reply.get("ok"):
        raise ArtifactUploadError(f"{method} was rejected by the artifact service")
    return reply


def upload_artifact(
    name: str,
    files: list[Path],
    root_dir: Path,
    env: dict[str, str] | None = None,
) -> UploadResult:
    """Upload files as a single named artifact (artifact service v4 protocol)."""
    env = os.environ if env is None else env
    runtime_token = env.get("ACTIONS_RUNTIME_TOKEN")
    results_url = env.get("ACTIONS_RESULTS_URL")
    if not runtime_token or not results_url:
        raise ArtifactUploadError(
            "ACTIONS_RUNTIME_TOKEN and ACTIONS_RESULTS_URL are required to upload artifacts"
        )
    results_url = results_url.rstrip("/")
    run_id, job_id = _backend_ids(runtime_token)
    ids = {
        "workflow_run_backend_id": run_id,
        "workflow_job_run_backend_id": job_id,
        "name": name,
    }

    created = _call_service(results_url, "CreateArtifact", runtime_token, {**ids, "version": 4})
    upload_url = created.get("signed_upload_url")
    if not upload_url:
        raise ArtifactUploadError("CreateArtifact returned no upload URL")

    archive = _zip_files(files, root_dir)
    logger.debug("Uploading %d bytes for artifact %s", len(archive), name)
    response = requests.put(
        upload_url,
        data=archive,
        headers={"x-ms-blob-type": "BlockBlob", "Content-Type": "application/zip"},
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()

    finalized = _call_service(
        results_url,
        "FinalizeArtifact",
        runtime_token,
        {
            **ids,
            "size": str(len(archive)),
            "hash": f"sha256:{hashlib.sha256(archive).hexdigest()}",
        },
    )
    return UploadResult(artifact_id=str(finalized.get("artifact_id", "")), size=len(archive))
