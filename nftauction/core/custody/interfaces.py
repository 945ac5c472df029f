"""
Collaborator contracts the ledger depends on.

The ledger owns no code for moving assets or currency. It calls out to:

- an AssetRegistry, which records who holds each non-fungible asset
- a PaymentPrimitive, which pays currency out of the ledger's custody

Both are synchronous from the ledger's point of view and report failure
through their return value. Either may call back into the ledger before
returning.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class AssetRegistry(Protocol):
    """Ownership registry for non-fungible assets."""

    def owner_of(self, contract: bytes, asset_id: int) -> Optional[bytes]:
        """Current holder of (contract, asset_id), or None if unknown."""
        ...

    def transfer_ownership(
        self,
        contract: bytes,
        asset_id: int,
        from_: bytes,
        to: bytes,
    ) -> bool:
        """Move an asset between accounts. Returns success."""
        ...


@runtime_checkable
class PaymentPrimitive(Protocol):
    """Pays currency out of the ledger's custody account."""

    def transfer(self, to: bytes, amount: int) -> bool:
        """Send amount to an account. Returns success."""
        ...
