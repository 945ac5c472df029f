"""
Input Validation - Shape checks for ledger inputs.

Catches malformed arguments before they reach the ledger state:
- Addresses of the wrong type or length
- Negative or oversized amounts
- Non-integer identifiers
"""

from typing import Any, Optional, Tuple

from nftauction.crypto import ADDRESS_SIZE, ZERO_ADDRESS

# =============================================================================
# Constants
# =============================================================================

# Field bounds
MIN_AMOUNT = 0
MAX_AMOUNT = 2**256 - 1
MAX_ASSET_ID = 2**256 - 1


# =============================================================================
# Validation Functions
# =============================================================================


def validate_bytes(
    data: Any,
    name: str,
    expected_length: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate bytes input.
    
    Args:
        data: Data to validate
        name: Field name for error messages
        expected_length: Exact expected length
        
    Returns:
        (is_valid, error_message)
    """
    if not isinstance(data, (bytes, bytearray)):
        return False, f"{name} must be bytes, got {type(data).__name__}"
    
    if expected_length is not None and len(data) != expected_length:
        return False, f"{name} must be {expected_length} bytes, got {len(data)}"
    
    return True, ""


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate an account address."""
    return validate_bytes(address, name, expected_length=ADDRESS_SIZE)


def validate_contract_address(address: Any) -> Tuple[bool, str]:
    """Validate an asset contract address (must not be the zero address)."""
    if address is None:
        return False, "asset_contract is required"
    
    valid, err = validate_address(address, "asset_contract")
    if not valid:
        return False, err
    
    if bytes(address) == ZERO_ADDRESS:
        return False, "asset_contract cannot be the zero address"
    
    return True, ""


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_AMOUNT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.
    
    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value
        
    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass but never a meaningful amount
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"
    
    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"
    
    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"
    
    return True, ""


def validate_amount(amount: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a currency amount."""
    return validate_integer(amount, name, MIN_AMOUNT, MAX_AMOUNT)


def validate_asset_id(asset_id: Any) -> Tuple[bool, str]:
    """Validate an asset identifier."""
    return validate_integer(asset_id, "asset_id", 0, MAX_ASSET_ID)


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_bytes",
    "validate_address",
    "validate_contract_address",
    "validate_integer",
    "validate_amount",
    "validate_asset_id",
    "MIN_AMOUNT",
    "MAX_AMOUNT",
    "MAX_ASSET_ID",
]
