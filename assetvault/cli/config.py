"""AssetVault config command - Configuration management."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from assetvault.cli.error_handler import ConfigurationError, ValidationError, handle_errors
from assetvault.cli.exit_codes import ExitCode
from assetvault.config import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    _config_to_dict,
    export_config_json,
    export_config_yaml,
    get_default_config,
    load_config,
    save_config,
    validate_config,
)

app = typer.Typer(help="Manage AssetVault configuration.")
console = Console()


@app.command("show")
@handle_errors
def show_config(
    section: Optional[str] = typer.Argument(
        None,
        help="Section to show (chain, lit, pinata, js_runtime, logging).",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format (table, yaml, json).",
    ),
    unmask: bool = typer.Option(
        False,
        "--unmask",
        help="Show unmasked secrets (use with caution).",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
) -> None:
    """Show current configuration.

    Example:
        assetvault config show
        assetvault config show pinata
        assetvault config show --format yaml
    """
    config = load_config(config_file)

    if format == "yaml":
        console.print(Syntax(export_config_yaml(config, mask_secrets=not unmask), "yaml"))
        return
    if format == "json":
        console.print(Syntax(export_config_json(config, mask_secrets=not unmask), "json"))
        return
    if format != "table":
        raise ValidationError(f"Unknown format: {format}")

    data = _config_to_dict(config, mask_secrets=not unmask)
    sections = {key: value for key, value in data.items() if isinstance(value, dict)}

    if section and section not in sections:
        raise ValidationError(
            f"Unknown section: {section}",
            details={"available": ", ".join(sections)},
        )

    for name in [section] if section else sections:
        table = Table(title=name)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for key, value in sections[name].items():
            table.add_row(key, "" if value is None else str(value))
        console.print(table)


@app.command("validate")
@handle_errors
def validate(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
) -> None:
    """Validate configuration; exits non-zero on errors.

    Example:
        assetvault config validate
    """
    errors = validate_config(load_config(config_file))

    if not errors:
        console.print("[green]✓[/green] Configuration is valid")
        return

    for error in errors:
        color = "red" if error.severity == "error" else "yellow"
        console.print(f"[{color}]{error}[/{color}]")

    error_count = sum(1 for error in errors if error.severity == "error")
    if error_count:
        raise ConfigurationError(f"{error_count} configuration error(s) found")

    console.print("[yellow]Configuration is usable, with warnings[/yellow]")


@app.command("init")
@handle_errors
def init_config(
    path: Optional[Path] = typer.Option(
        None,
        "--path",
        "-p",
        help="Where to write the config file.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing config file.",
    ),
) -> None:
    """Write a config file with default values.

    Example:
        assetvault config init
    """
    config = get_default_config()
    target = path or config.config_dir / DEFAULT_CONFIG_FILE

    if target.exists() and not force:
        console.print(f"[yellow]Config file already exists: {target}[/yellow]")
        console.print("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(code=ExitCode.GENERAL_ERROR)

    save_config(config, target)
    console.print(f"[green]✓[/green] Wrote {target}")


@app.command("path")
def config_path() -> None:
    """Print the default config file location."""
    console.print(str(DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE))
