"""Content hashing used to key access-control conditions."""

from eth_utils import keccak, to_hex


def hash_content(data: bytes) -> str:
    """Return the 0x-prefixed keccak-256 digest of ``data``."""
    return to_hex(keccak(data))
