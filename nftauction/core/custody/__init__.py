"""
Custody collaborators.

Protocols for the external asset registry and payment primitive,
plus in-memory implementations.
"""

from nftauction.core.custody.interfaces import AssetRegistry, PaymentPrimitive
from nftauction.core.custody.memory import InMemoryAssetRegistry, InMemoryBank

__all__ = [
    "AssetRegistry",
    "PaymentPrimitive",
    "InMemoryAssetRegistry",
    "InMemoryBank",
]
