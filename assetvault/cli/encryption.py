"""AssetVault encryption commands - Lit Protocol encrypt/decrypt."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from assetvault.cli.error_handler import (
    ConfigurationError,
    EncryptionError,
    NotFoundError,
    ValidationError,
    handle_errors,
)
from assetvault.config import AssetVaultConfig, load_config, set_config
from assetvault.encryption.access import get_default_auth
from assetvault.encryption.auth import sign_auth_message
from assetvault.encryption.lit import decrypt_asset, encrypt_asset
from assetvault.encryption.metadata import (
    EncryptionMetadata,
    get_encryption_metadata_path,
    load_encryption_metadata,
    save_encryption_metadata,
)
from assetvault.hashing import hash_content
from assetvault.js_runtime.manager import JSBridgeManager

app = typer.Typer(
    help="Encrypt and decrypt assets with Lit Protocol.",
    no_args_is_help=True,
)
console = Console()

ENCRYPTED_SUFFIX = ".enc"

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to configuration file.",
)


def _load(config_file: Optional[Path]) -> AssetVaultConfig:
    """Load the config, install it globally and check it can sign."""
    config = load_config(config_file)
    if not config.chain.private_key:
        raise ConfigurationError(
            "No private key configured",
            details={"hint": "set ASSETVAULT_PRIVATE_KEY"},
        )
    set_config(config)
    return config


async def _with_bridge(coro):
    """Await ``coro`` and always stop the JS runtime afterwards."""
    try:
        return await coro
    finally:
        await JSBridgeManager.get_instance().shutdown()


@app.command("encrypt")
@handle_errors
def encrypt(
    file_path: Path = typer.Argument(
        ...,
        help="Asset to encrypt.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Ciphertext output path (default: <file>.enc).",
        dir_okay=False,
        resolve_path=True,
    ),
    content_hash: Optional[str] = typer.Option(
        None,
        "--content-hash",
        help="Content hash checked by the access condition (default: keccak-256 of the file).",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing output file.",
    ),
    config_file: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Encrypt an asset so only authorized wallets can decrypt it.

    Writes the ciphertext and a .lit sidecar holding what decryption needs.

    Example:
        assetvault encryption encrypt photo.jpg
    """
    config = _load(config_file)
    output = output or file_path.with_suffix(file_path.suffix + ENCRYPTED_SUFFIX)

    if output.exists() and not force:
        raise ValidationError(f"Output file already exists: {output} (use --force to overwrite)")

    content = file_path.read_bytes()
    content_hash = content_hash or hash_content(content)

    try:
        with console.status("Encrypting with Lit Protocol..."):
            encrypted = asyncio.run(_with_bridge(encrypt_asset(content, content_hash, config)))
    except RuntimeError as e:
        raise EncryptionError(f"Encryption failed: {e}")

    output.write_text(encrypted.ciphertext)
    sidecar = save_encryption_metadata(output, EncryptionMetadata(
        data_to_encrypt_hash=encrypted.data_to_encrypt_hash,
        content_hash=content_hash,
        access_control_conditions=get_default_auth(
            content_hash, config.chain.chain, config.chain.contract_address
        ),
        chain=config.chain.chain,
        network=config.lit.network,
    ))

    console.print(f"[green]✓[/green] Encrypted: {output}")
    console.print(f"[dim]Metadata: {sidecar}[/dim]")
    console.print(f"[dim]Content hash: {content_hash}[/dim]")


@app.command("decrypt")
@handle_errors
def decrypt(
    encrypted_path: Path = typer.Argument(
        ...,
        help="Ciphertext file written by 'encrypt'.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Where to write the decrypted asset.",
        dir_okay=False,
        resolve_path=True,
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing output file.",
    ),
    config_file: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Decrypt an asset using its .lit sidecar.

    Example:
        assetvault encryption decrypt photo.jpg.enc --output photo.jpg
    """
    config = _load(config_file)

    metadata = load_encryption_metadata(encrypted_path)
    if metadata is None:
        raise NotFoundError(
            f"No encryption metadata found for {encrypted_path}",
            details={"expected": str(get_encryption_metadata_path(encrypted_path))},
        )

    if output.exists() and not force:
        raise ValidationError(f"Output file already exists: {output} (use --force to overwrite)")

    # Decrypt against the chain, network and conditions used at encryption time
    config.chain.chain = metadata.chain
    if metadata.network:
        config.lit.network = metadata.network

    try:
        with console.status("Decrypting with Lit Protocol..."):
            content = asyncio.run(_with_bridge(decrypt_asset(
                encrypted_path.read_text().strip(),
                metadata.data_to_encrypt_hash,
                metadata.content_hash,
                config,
                unified_access_control_conditions=metadata.access_control_conditions or None,
            )))
    except RuntimeError as e:
        raise EncryptionError(f"Decryption failed: {e}")

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(content)
    console.print(f"[green]✓[/green] Decrypted: {output} ({len(content)} bytes)")


@app.command("sign")
@handle_errors
def sign(
    config_file: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Print a freshly signed SIWE auth signature as JSON.

    Example:
        assetvault encryption sign
    """
    config = _load(config_file)

    try:
        auth_sig = sign_auth_message(config)
    except ValueError as e:
        raise ConfigurationError(str(e))

    console.print_json(json.dumps(auth_sig))
