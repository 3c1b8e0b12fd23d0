"""CID string helpers (format checks only; no content addressing)."""

IPFS_SCHEME = "ipfs://"

_BASE58_ALPHABET = set("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")
_BASE32_ALPHABET = set("abcdefghijklmnopqrstuvwxyz234567")


def normalize_cid(cid: str) -> str:
    """Strip whitespace and an ``ipfs://`` prefix."""
    return cid.strip().removeprefix(IPFS_SCHEME)


def verify_cid_format(cid: str) -> bool:
    """Check that a string looks like a CID.

    Supports CIDv0 (``Qm...``, base58, 46 chars) and base32 CIDv1
    (``baf...``).

    Example:
        >>> verify_cid_format("bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi")
        True
        >>> verify_cid_format("invalid")
        False
    """
    if not cid or not isinstance(cid, str):
        return False

    if cid.startswith("Qm"):
        return len(cid) == 46 and set(cid) <= _BASE58_ALPHABET

    if cid.startswith("baf"):
        return len(cid) >= 59 and set(cid.lower()) <= _BASE32_ALPHABET

    return False
