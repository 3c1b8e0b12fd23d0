"""Tests for exit codes module."""

from assetvault.cli.exit_codes import ExitCode


class TestExitCode:
    """Test exit code constants."""

    def test_success_code(self) -> None:
        assert ExitCode.SUCCESS == 0

    def test_general_error_code(self) -> None:
        assert ExitCode.GENERAL_ERROR == 1

    def test_domain_codes(self) -> None:
        """Test AssetVault-specific codes occupy 2-7."""
        assert ExitCode.CONFIGURATION_ERROR == 2
        assert ExitCode.ENCRYPTION_ERROR == 3
        assert ExitCode.NETWORK_ERROR == 4
        assert ExitCode.STORAGE_ERROR == 5
        assert ExitCode.INVALID_ARGUMENT == 6
        assert ExitCode.NOT_FOUND == 7

    def test_cancelled_code(self) -> None:
        """Test cancelled exit code (128 + SIGINT)."""
        assert ExitCode.CANCELLED == 130


class TestExitCodeGetName:
    """Test get_name method."""

    def test_get_name_success(self) -> None:
        assert ExitCode.get_name(ExitCode.SUCCESS) == "SUCCESS"

    def test_get_name_storage_error(self) -> None:
        assert ExitCode.get_name(ExitCode.STORAGE_ERROR) == "STORAGE_ERROR"

    def test_get_name_unknown(self) -> None:
        assert ExitCode.get_name(999) == "UNKNOWN(999)"


class TestExitCodeGetDescription:
    """Test get_description method."""

    def test_get_description_encryption_error(self) -> None:
        assert "Lit Protocol" in ExitCode.get_description(ExitCode.ENCRYPTION_ERROR)

    def test_every_code_described(self) -> None:
        for code in (0, 1, 2, 3, 4, 5, 6, 7, 130):
            assert not ExitCode.get_description(code).startswith("Unknown")

    def test_get_description_unknown(self) -> None:
        assert ExitCode.get_description(999) == "Unknown exit code: 999"
