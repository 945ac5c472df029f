import sqlite3
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from nftauction.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend for persistent storage.
    
    Provides:
    1. Auction records, one row per auction
    2. Withdrawable balances, one row per (auction, account)
    3. Ledger metadata (collected fees)
    
    Amounts and asset ids are stored as decimal TEXT since they may
    exceed SQLite's 64-bit INTEGER range.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn_local = threading.local()
        
        # Ensure directory exists
        if not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)
            
        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path, 
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            # Enable WAL mode for better concurrency
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            # 1. Auctions
            conn.execute("""
                CREATE TABLE IF NOT EXISTS auctions (
                    auction_id INTEGER PRIMARY KEY,
                    asset_contract BLOB NOT NULL,
                    asset_id TEXT NOT NULL,
                    seller BLOB NOT NULL,
                    starting_price TEXT NOT NULL,
                    created_at INTEGER NOT NULL,
                    end_at INTEGER NOT NULL,
                    ended INTEGER NOT NULL DEFAULT 0,
                    highest_bidder BLOB,
                    highest_bid TEXT NOT NULL DEFAULT '0',
                    bid_count INTEGER NOT NULL DEFAULT 0,
                    total_deposited TEXT NOT NULL DEFAULT '0',
                    total_paid_out TEXT NOT NULL DEFAULT '0',
                    settled_by TEXT,
                    settled_at INTEGER
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_auction_seller ON auctions(seller);")

            # 2. Refund ledger
            conn.execute("""
                CREATE TABLE IF NOT EXISTS withdrawable (
                    auction_id INTEGER NOT NULL,
                    account BLOB NOT NULL,
                    amount TEXT NOT NULL,
                    PRIMARY KEY (auction_id, account)
                )
            """)

            # 3. Ledger metadata
            conn.execute("""
                CREATE TABLE IF NOT EXISTS ledger_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    # =========================================================================
    # Auction Operations
    # =========================================================================

    def save_auction(self, row: Dict, withdrawable: List[Tuple[bytes, int]]):
        """
        Atomically replace an auction row and its refund balances.
        
        Args:
            row: Column values for the auctions table
            withdrawable: (account, amount) pairs with amount > 0
        """
        conn = self._get_conn()
        with conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO auctions (
                    auction_id, asset_contract, asset_id, seller, starting_price,
                    created_at, end_at, ended, highest_bidder, highest_bid,
                    bid_count, total_deposited, total_paid_out, settled_by, settled_at
                ) VALUES (
                    :auction_id, :asset_contract, :asset_id, :seller, :starting_price,
                    :created_at, :end_at, :ended, :highest_bidder, :highest_bid,
                    :bid_count, :total_deposited, :total_paid_out, :settled_by, :settled_at
                )
                """,
                row,
            )
            conn.execute("DELETE FROM withdrawable WHERE auction_id = ?", (row["auction_id"],))
            conn.executemany(
                "INSERT INTO withdrawable (auction_id, account, amount) VALUES (?, ?, ?)",
                [(row["auction_id"], account, str(amount)) for account, amount in withdrawable],
            )

    def get_all_auctions(self) -> List[sqlite3.Row]:
        """Get all auction rows ordered by id."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT * FROM auctions ORDER BY auction_id ASC")
        return cursor.fetchall()

    def get_auction(self, auction_id: int) -> Optional[sqlite3.Row]:
        conn = self._get_conn()
        cursor = conn.execute("SELECT * FROM auctions WHERE auction_id = ?", (auction_id,))
        return cursor.fetchone()

    def get_withdrawable(self, auction_id: int) -> List[Tuple[bytes, int]]:
        """Get (account, amount) refund balances for an auction."""
        conn = self._get_conn()
        cursor = conn.execute(
            "SELECT account, amount FROM withdrawable WHERE auction_id = ?",
            (auction_id,),
        )
        return [(bytes(row["account"]), int(row["amount"])) for row in cursor]

    def get_auction_count(self) -> int:
        conn = self._get_conn()
        cursor = conn.execute("SELECT COUNT(*) as cnt FROM auctions")
        return cursor.fetchone()["cnt"]

    # =========================================================================
    # Metadata Operations
    # =========================================================================

    def set_meta(self, key: str, value: str):
        conn = self._get_conn()
        with conn:
            conn.execute("INSERT OR REPLACE INTO ledger_meta (key, value) VALUES (?, ?)", (key, value))

    def get_meta(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        cursor = conn.execute("SELECT value FROM ledger_meta WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row["value"] if row else None

    def close(self):
        """Close the connection of the current thread."""
        conn = getattr(self._conn_local, "conn", None)
        if conn is not None:
            conn.close()
            del self._conn_local.conn
