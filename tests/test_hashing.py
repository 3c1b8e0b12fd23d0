"""Tests for content hashing."""

from assetvault.hashing import hash_content


class TestHashContent:
    """Tests for keccak-256 content hashes."""

    def test_empty_input(self):
        """Test the well-known keccak-256 digest of empty input."""
        assert hash_content(b"") == (
            "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_format(self):
        digest = hash_content(b"\x00\x01\x02\x03")
        assert digest.startswith("0x")
        assert len(digest) == 66

    def test_deterministic(self):
        assert hash_content(b"asset") == hash_content(b"asset")

    def test_distinct_inputs(self):
        assert hash_content(b"asset-1") != hash_content(b"asset-2")
