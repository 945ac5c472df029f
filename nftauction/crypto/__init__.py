"""
Account addressing primitives.

Accounts are 20-byte addresses derived Ethereum-style from the last
20 bytes of a Keccak-256 digest. The ledger treats them as opaque
identities; this module only exists so that callers, the CLI and tests
can mint stable, well-formed addresses.
"""

import secrets

from Crypto.Hash import keccak


# =============================================================================
# Constants
# =============================================================================

ADDRESS_SIZE = 20

# The "nobody" account
ZERO_ADDRESS = bytes(ADDRESS_SIZE)


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).
    
    Used for: address derivation.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Addresses
# =============================================================================


def address_from_seed(seed: bytes) -> bytes:
    """
    Derive a deterministic account address from arbitrary seed bytes.
    
    Args:
        seed: Any byte string (a public key, a name, ...)
        
    Returns:
        20-byte address
    """
    return keccak256(seed)[-ADDRESS_SIZE:]


def generate_address() -> bytes:
    """Generate a fresh random account address."""
    return address_from_seed(secrets.token_bytes(32))


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


def short_address(address: bytes) -> str:
    """Abbreviated hex form for log lines."""
    return bytes_to_hex(address)[:10] + "..."


__all__ = [
    "ADDRESS_SIZE",
    "ZERO_ADDRESS",
    "keccak256",
    "address_from_seed",
    "generate_address",
    "bytes_to_hex",
    "hex_to_bytes",
    "short_address",
]
