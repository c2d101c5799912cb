"""
SARIF upload.

Posts SARIF result files to the code scanning API of the repository the job
runs for. Each file is gzip-compressed and base64-encoded as the API expects.
"""

import base64
import gzip
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx

from codeql_action import __version__
from codeql_action.core.config import get_required_env_param
from codeql_action.core.exceptions.errors import IOFailure, UploadError
from codeql_action.core.logger.logger import get_logger

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"
TOOL_NAME = "CodeQL"


def encode_sarif(content: bytes) -> str:
    """Compress and base64-encode SARIF content for the upload payload."""
    return base64.b64encode(gzip.compress(content)).decode("ascii")


class SarifUploader:
    """Uploads SARIF files for one repository and commit."""

    def __init__(
        self,
        repository: str,
        token: str,
        commit_sha: str,
        ref: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the uploader.

        Args:
            repository: Repository in owner/name form.
            token: Token authorized to upload code scanning results.
            commit_sha: Commit the results belong to.
            ref: Full git ref, e.g. refs/heads/main.
            api_url: Base URL of the REST API.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        self.repository = repository
        self.token = token
        self.commit_sha = commit_sha
        self.ref = ref
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def endpoint(self) -> str:
        """Return the SARIF upload URL."""
        return f"{self.api_url}/repos/{self.repository}/code-scanning/sarifs"

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "User-Agent": f"codeql-action/{__version__}",
        }

    def build_payload(self, sarif_file: Path) -> dict[str, Any]:
        """Build the request body for one SARIF file."""
        try:
            content = sarif_file.read_bytes()
        except OSError as e:
            raise IOFailure(f"Cannot read SARIF file: {e}", path=str(sarif_file)) from e
        return {
            "commit_sha": self.commit_sha,
            "ref": self.ref,
            "sarif": encode_sarif(content),
            "tool_name": TOOL_NAME,
        }

    async def upload(self, sarif_files: list[Path]) -> list[str]:
        """
        Upload SARIF files one after another.

        Returns:
            Upload identifiers returned by the API.

        Raises:
            UploadError: If the API rejects a file or cannot be reached.
        """
        ids: list[str] = []
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers(),
            transport=self.transport,
        ) as client:
            for sarif_file in sarif_files:
                payload = self.build_payload(sarif_file)
                logger.info(f"Uploading {sarif_file.name} to {self.repository}")
                try:
                    response = await client.post(self.endpoint, json=payload)
                except httpx.RequestError as e:
                    raise UploadError(
                        f"Upload request failed: {e}",
                        sarif_file=str(sarif_file),
                    ) from e

                if not response.is_success:
                    raise UploadError(
                        f"Upload rejected with HTTP {response.status_code}: {response.text[:500]}",
                        sarif_file=str(sarif_file),
                        status_code=response.status_code,
                    )

                try:
                    body = response.json()
                except ValueError as e:
                    raise UploadError(
                        f"Upload response is not valid JSON: {e}",
                        sarif_file=str(sarif_file),
                        status_code=response.status_code,
                    ) from e
                if not isinstance(body, dict):
                    raise UploadError(
                        "Upload response is not a JSON object",
                        sarif_file=str(sarif_file),
                        status_code=response.status_code,
                    )

                upload_id = body.get("id", "")
                logger.debug(f"Upload of {sarif_file.name} accepted: {upload_id}")
                ids.append(upload_id)
        return ids


def find_sarif_files(folder: Path) -> list[Path]:
    """Return the SARIF files of a folder, sorted by name."""
    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix == ".sarif")


async def upload_sarif_folder(
    sarif_folder: Path,
    environ: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[str]:
    """
    Upload every SARIF file of a folder for the current workflow run.

    Reads GITHUB_REPOSITORY, GITHUB_TOKEN, GITHUB_SHA, GITHUB_REF and,
    optionally, GITHUB_API_URL.

    Returns:
        Upload identifiers returned by the API.
    """
    environ = os.environ if environ is None else environ
    uploader = SarifUploader(
        repository=get_required_env_param("GITHUB_REPOSITORY", environ),
        token=get_required_env_param("GITHUB_TOKEN", environ),
        commit_sha=get_required_env_param("GITHUB_SHA", environ),
        ref=get_required_env_param("GITHUB_REF", environ),
        api_url=environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
        transport=transport,
    )

    sarif_files = find_sarif_files(sarif_folder)
    if not sarif_files:
        logger.warning(f"No SARIF files found in {sarif_folder}")
        return []
    return await uploader.upload(sarif_files)
