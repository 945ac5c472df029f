"""
Unit tests for account addressing.

Tests cover:
1. Keccak-256 hashing
2. Address derivation
3. Hex conversion
"""

import pytest

from nftauction.crypto import (
    ADDRESS_SIZE,
    ZERO_ADDRESS,
    address_from_seed,
    bytes_to_hex,
    generate_address,
    hex_to_bytes,
    keccak256,
    short_address,
)


class TestHashing:
    """Tests for keccak256."""

    def test_keccak256_empty(self):
        """Known Keccak-256 digest of the empty string."""
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_keccak256_length(self):
        assert len(keccak256(b"anything")) == 32


class TestAddresses:
    """Tests for address derivation."""

    def test_address_from_seed_is_deterministic(self):
        assert address_from_seed(b"alice") == address_from_seed(b"alice")
        assert address_from_seed(b"alice") != address_from_seed(b"bob")

    def test_address_is_digest_suffix(self):
        """Address is the last 20 bytes of the digest."""
        assert address_from_seed(b"alice") == keccak256(b"alice")[-20:]
        assert len(address_from_seed(b"alice")) == ADDRESS_SIZE

    def test_generated_addresses_are_unique(self):
        assert generate_address() != generate_address()

    def test_zero_address(self):
        assert ZERO_ADDRESS == b"\x00" * 20


class TestHexConversion:
    """Tests for hex helpers."""

    @pytest.mark.parametrize("prefix", ["0x", "0X", ""])
    def test_hex_to_bytes_prefixes(self, prefix):
        assert hex_to_bytes(prefix + "00ff") == b"\x00\xff"

    def test_bytes_to_hex(self):
        assert bytes_to_hex(b"\x01\xab") == "0x01ab"

    def test_short_address(self):
        address = hex_to_bytes("0x" + "ab" * 20)
        assert short_address(address) == "0xabababab..."
