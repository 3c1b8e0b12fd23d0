"""AssetVault storage commands - Pin to and fetch from IPFS via Pinata."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from assetvault.cli.error_handler import (
    NetworkError,
    StorageError,
    ValidationError,
    handle_errors,
)
from assetvault.config import load_config
from assetvault.storage.cid import normalize_cid, verify_cid_format
from assetvault.storage.pinata import (
    ContentType,
    UploadData,
    fetch_from_ipfs,
    test_pinata_connection,
    upload_to_ipfs,
)

app = typer.Typer(
    help="Pin assets and metadata to IPFS via Pinata.",
    no_args_is_help=True,
)
console = Console()

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to configuration file.",
)


@app.command("upload")
@handle_errors
def upload(
    file_path: Path = typer.Argument(
        ...,
        help="File to pin.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    meta: bool = typer.Option(
        False,
        "--meta",
        "-m",
        help="Pin the file as a JSON metadata document instead of a binary asset.",
    ),
    name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="Pin name (default: file name).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the raw Pinata response as JSON.",
    ),
    config_file: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Pin a file to IPFS.

    Example:
        assetvault storage upload photo.jpg
        assetvault storage upload asset.json --meta --name "asset #1"
    """
    config = load_config(config_file)
    pin_name = name or file_path.name

    if meta:
        try:
            body = json.loads(file_path.read_text())
        except json.JSONDecodeError as e:
            raise ValidationError(f"{file_path} is not valid JSON: {e}")
        content_type = ContentType.META
    else:
        body = file_path.read_bytes()
        content_type = ContentType.ASSET

    try:
        with console.status(f"Pinning {pin_name}..."):
            response = asyncio.run(upload_to_ipfs(
                UploadData(name=pin_name, body=body),
                config.pinata,
                content_type,
            ))
    except RuntimeError as e:
        raise StorageError(f"Upload failed: {e}")

    if json_output:
        console.print_json(json.dumps(response))
        return

    if "IpfsHash" not in response:
        raise StorageError("Pinata rejected the upload", details={"response": json.dumps(response)})

    table = Table(title="Pinned")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Name", pin_name)
    table.add_row("CID", str(response["IpfsHash"]))
    table.add_row("Size", str(response.get("PinSize", "")))
    table.add_row("Timestamp", str(response.get("Timestamp", "")))
    if response.get("isDuplicate"):
        table.add_row("Duplicate", "yes")
    console.print(table)


@app.command("fetch")
@handle_errors
def fetch(
    cid: str = typer.Argument(
        ...,
        help="CID to fetch (an ipfs:// prefix is accepted).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the content to this file (required for binary assets).",
        dir_okay=False,
        resolve_path=True,
    ),
    meta: bool = typer.Option(
        False,
        "--meta",
        "-m",
        help="Fetch a JSON metadata document.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing output file.",
    ),
    config_file: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Fetch pinned content through the Pinata gateway.

    Example:
        assetvault storage fetch ipfs://bafy... --meta
        assetvault storage fetch bafy... --output photo.jpg
    """
    config = load_config(config_file)

    cid = normalize_cid(cid)
    if not verify_cid_format(cid):
        raise ValidationError(
            f"Invalid CID format: {cid!r}",
            details={"hint": "CIDs start with 'Qm' (CIDv0) or 'baf' (CIDv1)"},
        )

    if not meta and output is None:
        raise ValidationError("--output is required when fetching a binary asset")

    if output is not None and output.exists() and not force:
        raise ValidationError(f"Output file already exists: {output} (use --force to overwrite)")

    content_type = ContentType.META if meta else ContentType.ASSET

    try:
        with console.status(f"Fetching {cid}..."):
            content = asyncio.run(fetch_from_ipfs(cid, content_type, config.pinata))
    except RuntimeError as e:
        raise StorageError(f"Fetch failed: {e}")

    if isinstance(content, bytes):
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(content)
        console.print(f"[green]✓[/green] Saved {len(content)} bytes to {output}")
        return

    document = json.dumps(content, indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document)
        console.print(f"[green]✓[/green] Saved metadata to {output}")
    else:
        console.print_json(document)


@app.command("test-auth")
@handle_errors
def test_auth(
    config_file: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Check the configured Pinata credentials.

    Example:
        PINATA_KEY=... PINATA_SECRET=... assetvault storage test-auth
    """
    config = load_config(config_file)

    try:
        result = asyncio.run(test_pinata_connection(config.pinata))
    except RuntimeError as e:
        raise NetworkError(f"Pinata authentication failed: {e}")

    console.print(f"[green]✓[/green] Pinata connection: {result}")
