"""Encryption metadata sidecar files.

Decrypting needs the data hash, the content hash and the chain used at
encryption time. They are kept in a ``.lit`` JSON file next to the
ciphertext so the pair can be moved around together.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".lit"


@dataclass
class EncryptionMetadata:
    """What is needed to decrypt a stored ciphertext."""

    data_to_encrypt_hash: str = ""
    content_hash: str = ""
    access_control_conditions: List[Dict[str, Any]] = field(default_factory=list)
    chain: str = "ethereum"
    network: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataToEncryptHash": self.data_to_encrypt_hash,
            "contentHash": self.content_hash,
            "unifiedAccessControlConditions": self.access_control_conditions,
            "chain": self.chain,
            "network": self.network,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptionMetadata":
        return cls(
            data_to_encrypt_hash=data.get("dataToEncryptHash", ""),
            content_hash=data.get("contentHash", ""),
            access_control_conditions=data.get("unifiedAccessControlConditions", []),
            chain=data.get("chain", "ethereum"),
            network=data.get("network", ""),
        )


def get_encryption_metadata_path(file_path: Path) -> Path:
    """Get the sidecar path for an encrypted file."""
    return file_path.with_suffix(file_path.suffix + SIDECAR_SUFFIX)


def save_encryption_metadata(file_path: Path, metadata: EncryptionMetadata) -> Path:
    """Write the sidecar for ``file_path``.

    Returns:
        Path of the written sidecar
    """
    metadata_path = get_encryption_metadata_path(file_path)
    metadata_path.write_text(json.dumps(metadata.to_dict(), indent=2))
    logger.debug(f"Saved encryption metadata to {metadata_path}")
    return metadata_path


def load_encryption_metadata(file_path: Path) -> Optional[EncryptionMetadata]:
    """Load the sidecar for ``file_path``.

    Returns:
        EncryptionMetadata, or None if there is no readable sidecar
    """
    metadata_path = get_encryption_metadata_path(file_path)
    if not metadata_path.exists():
        return None

    try:
        data = json.loads(metadata_path.read_text())
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse sidecar metadata from {metadata_path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Sidecar metadata in {metadata_path} is not an object")
        return None

    return EncryptionMetadata.from_dict(data)


def delete_encryption_metadata(file_path: Path) -> bool:
    """Delete the sidecar for ``file_path``.

    Returns:
        True if a sidecar was deleted
    """
    metadata_path = get_encryption_metadata_path(file_path)
    if not metadata_path.exists():
        return False

    metadata_path.unlink()
    logger.debug(f"Deleted encryption metadata: {metadata_path}")
    return True
