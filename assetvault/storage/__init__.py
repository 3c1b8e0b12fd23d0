"""Pinata/IPFS storage helpers."""

from assetvault.storage.cid import normalize_cid, verify_cid_format
from assetvault.storage.pinata import (
    ContentType,
    UploadData,
    fetch_from_ipfs,
    pinata_config,
    test_pinata_connection,
    upload_to_ipfs,
)

__all__ = [
    "ContentType",
    "UploadData",
    "fetch_from_ipfs",
    "normalize_cid",
    "pinata_config",
    "test_pinata_connection",
    "upload_to_ipfs",
    "verify_cid_format",
]
