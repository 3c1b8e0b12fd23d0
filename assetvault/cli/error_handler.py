"""Exception handling for the AssetVault CLI.

Commands raise ``AssetVaultError`` subclasses; ``handle_errors`` turns them
into a red one-line message and the matching exit code.
"""

from functools import wraps
from typing import Callable, TypeVar, Any
import logging

import typer
from rich.console import Console

from assetvault.cli.exit_codes import ExitCode

# Errors go to stderr
console = Console(stderr=True)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class AssetVaultError(Exception):
    """Base exception for the AssetVault CLI.

    Attributes:
        message: Error message
        exit_code: Exit code to use when exiting
        details: Optional dictionary of additional error details
    """

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(AssetVaultError):
    """Missing or invalid configuration (keys, contract address, config file)."""

    exit_code = ExitCode.CONFIGURATION_ERROR


class EncryptionError(AssetVaultError):
    """Lit Protocol encryption or decryption failed."""

    exit_code = ExitCode.ENCRYPTION_ERROR


class NetworkError(AssetVaultError):
    """A remote service could not be reached."""

    exit_code = ExitCode.NETWORK_ERROR


class StorageError(AssetVaultError):
    """Pinning or gateway fetch failed."""

    exit_code = ExitCode.STORAGE_ERROR


class ValidationError(AssetVaultError):
    """User input failed validation (bad CID, bad option combination)."""

    exit_code = ExitCode.INVALID_ARGUMENT


class NotFoundError(AssetVaultError):
    """A requested file or sidecar does not exist."""

    exit_code = ExitCode.NOT_FOUND


def handle_errors(func: F) -> F:
    """Decorator for consistent error handling across CLI commands.

    - AssetVaultError: message plus details, with the error's exit code
    - KeyboardInterrupt: cancellation message, exit code 130
    - anything else: generic message, exit code 1

    Example:
        @app.command()
        @handle_errors
        def my_command():
            raise ConfigurationError("Invalid config")
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except AssetVaultError as e:
            logger.error(
                f"AssetVaultError: {e.message}",
                extra={"exit_code": e.exit_code, "details": e.details},
            )
            console.print(f"[red]Error:[/red] {e.message}")
            for key, value in e.details.items():
                console.print(f"  [dim]{key}:[/dim] {value}")
            raise typer.Exit(code=e.exit_code)

        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user.[/yellow]")
            logger.info("Operation cancelled by user (KeyboardInterrupt)")
            raise typer.Exit(code=ExitCode.CANCELLED)

        except typer.Exit:
            raise

        except Exception as e:
            logger.exception("Unexpected error occurred")
            console.print(f"[red]Unexpected error:[/red] {e}")
            console.print("[dim]Run with --verbose for more details[/dim]")
            raise typer.Exit(code=ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore[return-value]
