"""Tests for SARIF upload."""

import base64
import gzip
import json
from pathlib import Path

import httpx
import pytest

from codeql_action.actions.upload import (
    SarifUploader,
    encode_sarif,
    find_sarif_files,
    upload_sarif_folder,
)
from codeql_action.core.exceptions.errors import ConfigurationError, UploadError

ENVIRON = {
    "GITHUB_REPOSITORY": "octo/repo",
    "GITHUB_TOKEN": "secret",
    "GITHUB_SHA": "a" * 40,
    "GITHUB_REF": "refs/heads/main",
    "GITHUB_API_URL": "https://ghe.example.com/api/v3",
}


@pytest.fixture
def sarif_folder(temp_dir: Path) -> Path:
    """Create a folder with two SARIF files and an unrelated file."""
    folder = temp_dir / "sarif"
    folder.mkdir()
    (folder / "python.sarif").write_text('{"runs": []}', encoding="utf-8")
    (folder / "cpp.sarif").write_text('{"runs": [1]}', encoding="utf-8")
    (folder / "notes.txt").write_text("ignored", encoding="utf-8")
    return folder


class TestEncodeSarif:
    """Tests for encode_sarif."""

    def test_gzip_base64(self) -> None:
        """Test content is gzip-compressed then base64-encoded."""
        encoded = encode_sarif(b'{"runs": []}')
        assert gzip.decompress(base64.b64decode(encoded)) == b'{"runs": []}'


class TestFindSarifFiles:
    """Tests for find_sarif_files."""

    def test_only_sarif_sorted(self, sarif_folder: Path) -> None:
        """Test only .sarif files are returned, sorted by name."""
        assert [p.name for p in find_sarif_files(sarif_folder)] == ["cpp.sarif", "python.sarif"]


class TestSarifUploader:
    """Tests for SarifUploader."""

    def test_endpoint(self) -> None:
        """Test the endpoint is built from the API URL and repository."""
        uploader = SarifUploader("octo/repo", "t", "sha", "ref", api_url="https://api.test/")
        assert uploader.endpoint == "https://api.test/repos/octo/repo/code-scanning/sarifs"

    @pytest.mark.asyncio
    async def test_upload(self, sarif_folder: Path) -> None:
        """Test each file is posted with the commit and ref."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(202, json={"id": f"upload-{len(requests)}"})

        uploader = SarifUploader(
            "octo/repo",
            "secret",
            "abc",
            "refs/heads/main",
            transport=httpx.MockTransport(handler),
        )

        ids = await uploader.upload(find_sarif_files(sarif_folder))

        assert ids == ["upload-1", "upload-2"]
        assert requests[0].headers["Authorization"] == "Bearer secret"
        body = json.loads(requests[0].content)
        assert body["commit_sha"] == "abc"
        assert body["ref"] == "refs/heads/main"
        assert body["tool_name"] == "CodeQL"
        assert gzip.decompress(base64.b64decode(body["sarif"])) == b'{"runs": [1]}'

    @pytest.mark.asyncio
    async def test_rejected(self, sarif_folder: Path) -> None:
        """Test an error status raises UploadError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(403, text="forbidden"))
        uploader = SarifUploader("octo/repo", "t", "sha", "ref", transport=transport)

        with pytest.raises(UploadError) as exc_info:
            await uploader.upload(find_sarif_files(sarif_folder))

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_connection_error(self, sarif_folder: Path) -> None:
        """Test a transport failure raises UploadError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        uploader = SarifUploader(
            "octo/repo", "t", "sha", "ref", transport=httpx.MockTransport(handler)
        )

        with pytest.raises(UploadError):
            await uploader.upload(find_sarif_files(sarif_folder))


class TestUploadSarifFolder:
    """Tests for upload_sarif_folder."""

    @pytest.mark.asyncio
    async def test_uses_workflow_environment(self, sarif_folder: Path) -> None:
        """Test the repository and API URL come from the workflow variables."""
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(202, json={"id": "x"})

        ids = await upload_sarif_folder(sarif_folder, ENVIRON, httpx.MockTransport(handler))

        assert ids == ["x", "x"]
        assert urls[0] == "https://ghe.example.com/api/v3/repos/octo/repo/code-scanning/sarifs"

    @pytest.mark.asyncio
    async def test_empty_folder(self, temp_dir: Path) -> None:
        """Test a folder without SARIF files uploads nothing."""
        assert await upload_sarif_folder(temp_dir, ENVIRON) == []

    @pytest.mark.asyncio
    async def test_missing_token(self, sarif_folder: Path) -> None:
        """Test the token is required."""
        environ = {k: v for k, v in ENVIRON.items() if k != "GITHUB_TOKEN"}

        with pytest.raises(ConfigurationError):
            await upload_sarif_folder(sarif_folder, environ)


class TestUploadResponse:
    """Tests for handling accepted responses the client cannot use."""

    @pytest.mark.asyncio
    async def test_body_not_json(self, sarif_folder: Path) -> None:
        """Test a 2xx response without a JSON body raises UploadError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(202, text="<html>"))
        uploader = SarifUploader("octo/repo", "t", "sha", "ref", transport=transport)

        with pytest.raises(UploadError) as exc_info:
            await uploader.upload(find_sarif_files(sarif_folder))

        assert exc_info.value.status_code == 202

    @pytest.mark.asyncio
    async def test_body_not_object(self, sarif_folder: Path) -> None:
        """Test a 2xx response with a non-object JSON body raises UploadError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(202, json=["x"]))
        uploader = SarifUploader("octo/repo", "t", "sha", "ref", transport=transport)

        with pytest.raises(UploadError):
            await uploader.upload(find_sarif_files(sarif_folder))
