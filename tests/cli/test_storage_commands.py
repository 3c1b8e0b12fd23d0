"""Tests for the storage CLI commands."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from assetvault.cli.exit_codes import ExitCode
from assetvault.cli.storage import app
from assetvault.config import AssetVaultConfig
from assetvault.storage.pinata import ContentType, UploadData


runner = CliRunner()

CID = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"
PIN_RESPONSE = {"IpfsHash": CID, "PinSize": 42, "Timestamp": "2024-01-01T00:00:00.000Z"}


@pytest.fixture(autouse=True)
def default_config():
    with patch("assetvault.cli.storage.load_config", return_value=AssetVaultConfig()) as mock_load:
        yield mock_load


class TestUploadCommand:
    """Tests for 'storage upload'."""

    def test_upload_asset(self, tmp_path):
        asset = tmp_path / "photo.jpg"
        asset.write_bytes(b"\xff\xd8binary")

        with patch("assetvault.cli.storage.upload_to_ipfs", new_callable=AsyncMock) as mock_upload:
            mock_upload.return_value = PIN_RESPONSE
            result = runner.invoke(app, ["upload", str(asset)])

        assert result.exit_code == ExitCode.SUCCESS
        assert CID in result.output
        data, _, content_type = mock_upload.call_args.args
        assert data == UploadData(name="photo.jpg", body=b"\xff\xd8binary")
        assert content_type == ContentType.ASSET

    def test_upload_meta_with_name(self, tmp_path):
        document = tmp_path / "asset.json"
        document.write_text(json.dumps({"name": "asset #1"}))

        with patch("assetvault.cli.storage.upload_to_ipfs", new_callable=AsyncMock) as mock_upload:
            mock_upload.return_value = PIN_RESPONSE
            result = runner.invoke(app, ["upload", str(document), "--meta", "--name", "asset-1"])

        assert result.exit_code == ExitCode.SUCCESS
        data, _, content_type = mock_upload.call_args.args
        assert data == UploadData(name="asset-1", body={"name": "asset #1"})
        assert content_type == ContentType.META

    def test_upload_meta_invalid_json(self, tmp_path):
        document = tmp_path / "asset.json"
        document.write_text("{not json")

        with patch("assetvault.cli.storage.upload_to_ipfs", new_callable=AsyncMock) as mock_upload:
            result = runner.invoke(app, ["upload", str(document), "--meta"])

        assert result.exit_code == ExitCode.INVALID_ARGUMENT
        mock_upload.assert_not_called()

    def test_upload_failure(self, tmp_path):
        asset = tmp_path / "photo.jpg"
        asset.write_bytes(b"x")

        with patch("assetvault.cli.storage.upload_to_ipfs", new_callable=AsyncMock) as mock_upload:
            mock_upload.side_effect = RuntimeError("connection refused")
            result = runner.invoke(app, ["upload", str(asset)])

        assert result.exit_code == ExitCode.STORAGE_ERROR

    def test_upload_rejected_by_pinata(self, tmp_path):
        asset = tmp_path / "photo.jpg"
        asset.write_bytes(b"x")

        with patch("assetvault.cli.storage.upload_to_ipfs", new_callable=AsyncMock) as mock_upload:
            mock_upload.return_value = {"error": "Invalid API key"}
            result = runner.invoke(app, ["upload", str(asset)])

        assert result.exit_code == ExitCode.STORAGE_ERROR

    def test_upload_json_output(self, tmp_path):
        asset = tmp_path / "photo.jpg"
        asset.write_bytes(b"x")

        with patch("assetvault.cli.storage.upload_to_ipfs", new_callable=AsyncMock) as mock_upload:
            mock_upload.return_value = {"error": "Invalid API key"}
            result = runner.invoke(app, ["upload", str(asset), "--json"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Invalid API key" in result.output

    def test_upload_missing_file(self, tmp_path):
        result = runner.invoke(app, ["upload", str(tmp_path / "missing.jpg")])
        assert result.exit_code != ExitCode.SUCCESS


class TestFetchCommand:
    """Tests for 'storage fetch'."""

    def test_fetch_asset_to_file(self, tmp_path):
        output = tmp_path / "photo.jpg"

        with patch("assetvault.cli.storage.fetch_from_ipfs", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.return_value = b"binary"
            result = runner.invoke(app, ["fetch", f"ipfs://{CID}", "--output", str(output)])

        assert result.exit_code == ExitCode.SUCCESS
        assert output.read_bytes() == b"binary"
        cid, content_type, _ = mock_fetch.call_args.args
        assert cid == CID
        assert content_type == ContentType.ASSET

    def test_fetch_meta_prints_json(self):
        with patch("assetvault.cli.storage.fetch_from_ipfs", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.return_value = {"name": "asset #1"}
            result = runner.invoke(app, ["fetch", CID, "--meta"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "asset #1" in result.output
        assert mock_fetch.call_args.args[1] == ContentType.META

    def test_fetch_meta_to_file(self, tmp_path):
        output = tmp_path / "asset.json"

        with patch("assetvault.cli.storage.fetch_from_ipfs", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.return_value = {"name": "asset #1"}
            result = runner.invoke(app, ["fetch", CID, "--meta", "-o", str(output)])

        assert result.exit_code == ExitCode.SUCCESS
        assert json.loads(output.read_text()) == {"name": "asset #1"}

    def test_fetch_invalid_cid(self, tmp_path):
        with patch("assetvault.cli.storage.fetch_from_ipfs", new_callable=AsyncMock) as mock_fetch:
            result = runner.invoke(app, ["fetch", "not-a-cid", "-o", str(tmp_path / "x")])

        assert result.exit_code == ExitCode.INVALID_ARGUMENT
        mock_fetch.assert_not_called()

    def test_fetch_asset_requires_output(self):
        result = runner.invoke(app, ["fetch", CID])
        assert result.exit_code == ExitCode.INVALID_ARGUMENT

    def test_fetch_existing_output_without_force(self, tmp_path):
        output = tmp_path / "photo.jpg"
        output.write_bytes(b"old")

        result = runner.invoke(app, ["fetch", CID, "-o", str(output)])

        assert result.exit_code == ExitCode.INVALID_ARGUMENT
        assert output.read_bytes() == b"old"

    def test_fetch_existing_output_with_force(self, tmp_path):
        output = tmp_path / "photo.jpg"
        output.write_bytes(b"old")

        with patch("assetvault.cli.storage.fetch_from_ipfs", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.return_value = b"new"
            result = runner.invoke(app, ["fetch", CID, "-o", str(output), "--force"])

        assert result.exit_code == ExitCode.SUCCESS
        assert output.read_bytes() == b"new"

    def test_fetch_failure(self, tmp_path):
        with patch("assetvault.cli.storage.fetch_from_ipfs", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.side_effect = RuntimeError("404 Not Found")
            result = runner.invoke(app, ["fetch", CID, "-o", str(tmp_path / "x")])

        assert result.exit_code == ExitCode.STORAGE_ERROR


class TestTestAuthCommand:
    """Tests for 'storage test-auth'."""

    def test_success(self):
        with patch("assetvault.cli.storage.test_pinata_connection", new_callable=AsyncMock) as mock_check:
            mock_check.return_value = "success"
            result = runner.invoke(app, ["test-auth"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "success" in result.output

    def test_rejected(self):
        with patch("assetvault.cli.storage.test_pinata_connection", new_callable=AsyncMock) as mock_check:
            mock_check.side_effect = RuntimeError("401 Unauthorized")
            result = runner.invoke(app, ["test-auth"])

        assert result.exit_code == ExitCode.NETWORK_ERROR
