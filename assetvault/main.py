"""Main CLI entry point for AssetVault."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from assetvault import __app_name__, __version__
from assetvault.cli import config, encryption, storage
from assetvault.cli.exit_codes import ExitCode
from assetvault.config import DEFAULT_LOG_FORMAT, load_config

# Create the main Typer app
app = typer.Typer(
    name=__app_name__,
    help="AssetVault - Lit Protocol encryption and Pinata/IPFS storage for assets.",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Console for CLI output
console = Console()

# Register command groups
app.add_typer(storage.app, name="storage")
app.add_typer(encryption.app, name="encryption")
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"{__app_name__} v{__version__}")
        raise typer.Exit(code=ExitCode.SUCCESS)


def _setup_logging(
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
    default_level: str = "WARNING",
    log_format: str = DEFAULT_LOG_FORMAT,
) -> None:
    """Set up logging configuration based on CLI options.

    Args:
        verbose: Enable INFO level logging
        debug: Enable DEBUG level logging
        quiet: Suppress non-error output
        log_file: Optional log file path
        default_level: Level name used when no flag is given
        log_format: Record format used unless debug is on
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.getLevelName(default_level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    if debug:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
    else:
        format_str = log_format

    handlers: list[logging.Handler] = []

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # Always log debug to file
        handlers.append(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        handlers.append(console_handler)
    elif not log_file:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured: level={logging.getLevelName(level)}, debug={debug}")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output (INFO level logging).",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode (DEBUG level logging).",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log to file (logs DEBUG level regardless of console settings).",
    ),
) -> None:
    """AssetVault - Lit Protocol encryption and Pinata/IPFS storage for assets.

    [bold]Core Commands:[/bold]

    • [cyan]storage[/cyan] - Pin files to IPFS and fetch them back
    • [cyan]encryption[/cyan] - Encrypt and decrypt assets with Lit Protocol
    • [cyan]config[/cyan] - Manage configuration

    [bold]Examples:[/bold]

        assetvault encryption encrypt photo.jpg
        assetvault storage upload photo.jpg.enc
        assetvault storage fetch bafybeig... --output photo.jpg.enc

    For more help on a specific command, use: [cyan]assetvault <command> --help[/cyan]
    """
    if quiet and verbose:
        console.print("[red]Error:[/red] --quiet and --verbose are mutually exclusive")
        raise typer.Exit(code=ExitCode.INVALID_ARGUMENT)

    if quiet and debug:
        console.print("[red]Error:[/red] --quiet and --debug are mutually exclusive")
        raise typer.Exit(code=ExitCode.INVALID_ARGUMENT)

    logging_config = load_config().logging
    _setup_logging(
        verbose=verbose,
        debug=debug,
        quiet=quiet,
        log_file=log_file or logging_config.file,
        default_level=logging_config.level,
        log_format=logging_config.format,
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"AssetVault v{__version__} starting")
    logger.debug(f"Options: verbose={verbose}, debug={debug}, quiet={quiet}")


__all__ = [
    "app",
    "console",
]


if __name__ == "__main__":
    app()
