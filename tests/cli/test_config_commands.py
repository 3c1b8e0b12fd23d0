"""Tests for the config CLI commands."""

from unittest.mock import patch

from typer.testing import CliRunner

from assetvault.cli.config import app
from assetvault.cli.exit_codes import ExitCode
from assetvault.config import DEFAULT_CONFIG_FILE, AssetVaultConfig, load_config


runner = CliRunner()

CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


def _config() -> AssetVaultConfig:
    config = AssetVaultConfig()
    config.chain.private_key = "0xsecretkey"
    config.chain.contract_address = CONTRACT
    config.pinata.api_key = "pinata-key"
    config.pinata.secret_api_key = "pinata-secret"
    return config


class TestShowCommand:
    """Tests for 'config show'."""

    def test_show_table(self):
        with patch("assetvault.cli.config.load_config", return_value=_config()):
            result = runner.invoke(app, ["show"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "datil-dev" in result.output
        assert "pinata-key" not in result.output

    def test_show_section(self):
        with patch("assetvault.cli.config.load_config", return_value=_config()):
            result = runner.invoke(app, ["show", "lit"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "datil-dev" in result.output
        assert "api.pinata.cloud" not in result.output

    def test_show_unknown_section(self):
        with patch("assetvault.cli.config.load_config", return_value=_config()):
            result = runner.invoke(app, ["show", "nope"])

        assert result.exit_code == ExitCode.INVALID_ARGUMENT

    def test_show_json_masked(self):
        with patch("assetvault.cli.config.load_config", return_value=_config()):
            result = runner.invoke(app, ["show", "--format", "json"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "pina****" in result.output
        assert "pinata-secret" not in result.output

    def test_show_yaml_unmasked(self):
        with patch("assetvault.cli.config.load_config", return_value=_config()):
            result = runner.invoke(app, ["show", "--format", "yaml", "--unmask"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "pinata-secret" in result.output

    def test_show_unknown_format(self):
        with patch("assetvault.cli.config.load_config", return_value=_config()):
            result = runner.invoke(app, ["show", "--format", "xml"])

        assert result.exit_code == ExitCode.INVALID_ARGUMENT


class TestValidateCommand:
    """Tests for 'config validate'."""

    def test_valid(self):
        with patch("assetvault.cli.config.load_config", return_value=_config()):
            result = runner.invoke(app, ["validate"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "valid" in result.output

    def test_warnings_only(self, monkeypatch):
        monkeypatch.delenv("PINATA_KEY", raising=False)
        monkeypatch.delenv("PINATA_SECRET", raising=False)
        config = _config()
        config.pinata.api_key = None

        with patch("assetvault.cli.config.load_config", return_value=config):
            result = runner.invoke(app, ["validate"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "pinata.api_key" in result.output

    def test_errors(self):
        config = _config()
        config.chain.contract_address = "0x123"

        with patch("assetvault.cli.config.load_config", return_value=config):
            result = runner.invoke(app, ["validate"])

        assert result.exit_code == ExitCode.CONFIGURATION_ERROR


class TestInitCommand:
    """Tests for 'config init'."""

    def test_writes_defaults(self, tmp_path):
        target = tmp_path / "config.toml"

        result = runner.invoke(app, ["init", "--path", str(target)])

        assert result.exit_code == ExitCode.SUCCESS
        assert load_config(target).lit.network == "datil-dev"

    def test_refuses_overwrite(self, tmp_path):
        target = tmp_path / "config.toml"
        target.write_text("# mine\n")

        result = runner.invoke(app, ["init", "--path", str(target)])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert target.read_text() == "# mine\n"

    def test_force_overwrite(self, tmp_path):
        target = tmp_path / "config.toml"
        target.write_text("# mine\n")

        result = runner.invoke(app, ["init", "--path", str(target), "--force"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "[chain]" in target.read_text()


class TestPathCommand:
    """Tests for 'config path'."""

    def test_prints_default_path(self):
        result = runner.invoke(app, ["path"])

        assert result.exit_code == ExitCode.SUCCESS
        assert DEFAULT_CONFIG_FILE in result.output
