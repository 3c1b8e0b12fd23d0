"""Standard exit codes for the AssetVault CLI."""


class ExitCode:
    """Standard exit codes for the AssetVault CLI.

    0 and 1 follow Unix convention, 130 is Ctrl+C (128 + SIGINT).
    AssetVault-specific codes use 2-7.
    """

    SUCCESS = 0
    GENERAL_ERROR = 1

    CONFIGURATION_ERROR = 2
    ENCRYPTION_ERROR = 3
    NETWORK_ERROR = 4
    STORAGE_ERROR = 5
    INVALID_ARGUMENT = 6
    NOT_FOUND = 7

    CANCELLED = 130

    _NAMES = {
        SUCCESS: "SUCCESS",
        GENERAL_ERROR: "GENERAL_ERROR",
        CONFIGURATION_ERROR: "CONFIGURATION_ERROR",
        ENCRYPTION_ERROR: "ENCRYPTION_ERROR",
        NETWORK_ERROR: "NETWORK_ERROR",
        STORAGE_ERROR: "STORAGE_ERROR",
        INVALID_ARGUMENT: "INVALID_ARGUMENT",
        NOT_FOUND: "NOT_FOUND",
        CANCELLED: "CANCELLED",
    }

    _DESCRIPTIONS = {
        SUCCESS: "Operation completed successfully",
        GENERAL_ERROR: "An unexpected error occurred",
        CONFIGURATION_ERROR: "Configuration error or invalid config file",
        ENCRYPTION_ERROR: "Lit Protocol encryption or decryption error",
        NETWORK_ERROR: "Network or connectivity error",
        STORAGE_ERROR: "Pinata or IPFS operation error",
        INVALID_ARGUMENT: "Invalid command-line argument",
        NOT_FOUND: "Requested resource not found",
        CANCELLED: "Operation cancelled by user",
    }

    @classmethod
    def get_name(cls, code: int) -> str:
        """Get the name of an exit code."""
        return cls._NAMES.get(code, f"UNKNOWN({code})")

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get the description of an exit code."""
        return cls._DESCRIPTIONS.get(code, f"Unknown exit code: {code}")
