"""
Persistent Storage Module.

Provides SQLite-backed persistence for:
- Auction records
- Withdrawable balances
- Ledger metadata
"""

from nftauction.core.storage.sqlite_adapter import SQLiteAdapter
from nftauction.core.storage.storage_manager import StorageManager

__all__ = ["SQLiteAdapter", "StorageManager"]
