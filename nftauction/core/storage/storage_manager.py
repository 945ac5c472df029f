from pathlib import Path
from typing import List, Optional

from nftauction.core.ledger.auction import Auction, SettlementKind
from nftauction.core.storage.sqlite_adapter import SQLiteAdapter
from nftauction.utils.logger import get_logger

logger = get_logger("storage.manager")


class StorageManager:
    """
    Manages persistent storage for the ledger.
    
    Maps Auction records to SQLite rows and back. Handles:
    - Auction records and their refund balances
    - Ledger metadata (collected listing fees)
    """

    def __init__(self, data_dir: Path, db_name: str = "auctions.db"):
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / db_name
        self.adapter = SQLiteAdapter(self.db_path)
        
        logger.info(f"StorageManager initialized at {self.db_path}")

    # =========================================================================
    # Auctions
    # =========================================================================

    def save_auction(self, auction: Auction):
        """Persist an auction and its withdrawable balances."""
        row = {
            "auction_id": auction.auction_id,
            "asset_contract": auction.asset_contract,
            "asset_id": str(auction.asset_id),
            "seller": auction.seller,
            "starting_price": str(auction.starting_price),
            "created_at": auction.created_at,
            "end_at": auction.end_at,
            "ended": int(auction.ended),
            "highest_bidder": auction.highest_bidder,
            "highest_bid": str(auction.highest_bid),
            "bid_count": auction.bid_count,
            "total_deposited": str(auction.total_deposited),
            "total_paid_out": str(auction.total_paid_out),
            "settled_by": auction.settled_by.value if auction.settled_by else None,
            "settled_at": auction.settled_at,
        }
        withdrawable = [
            (account, amount)
            for account, amount in auction.withdrawable.items()
            if amount > 0
        ]
        self.adapter.save_auction(row, withdrawable)

    def load_auction(self, auction_id: int) -> Optional[Auction]:
        """Load a single auction, or None if it was never stored."""
        row = self.adapter.get_auction(auction_id)
        if row is None:
            return None
        return self._auction_from_row(row)

    def load_auctions(self) -> List[Auction]:
        """Load all auctions ordered by id."""
        return [self._auction_from_row(row) for row in self.adapter.get_all_auctions()]

    def _auction_from_row(self, row) -> Auction:
        auction_id = row["auction_id"]
        return Auction(
            auction_id=auction_id,
            asset_contract=bytes(row["asset_contract"]),
            asset_id=int(row["asset_id"]),
            seller=bytes(row["seller"]),
            starting_price=int(row["starting_price"]),
            end_at=row["end_at"],
            created_at=row["created_at"],
            ended=bool(row["ended"]),
            highest_bidder=bytes(row["highest_bidder"]) if row["highest_bidder"] is not None else None,
            highest_bid=int(row["highest_bid"]),
            withdrawable=dict(self.adapter.get_withdrawable(auction_id)),
            total_deposited=int(row["total_deposited"]),
            total_paid_out=int(row["total_paid_out"]),
            bid_count=row["bid_count"],
            settled_by=SettlementKind(row["settled_by"]) if row["settled_by"] else None,
            settled_at=row["settled_at"],
        )

    def auction_count(self) -> int:
        return self.adapter.get_auction_count()

    # =========================================================================
    # Metadata
    # =========================================================================

    def save_collected_fees(self, amount: int):
        self.adapter.set_meta("collected_fees", str(amount))

    def get_collected_fees(self) -> int:
        value = self.adapter.get_meta("collected_fees")
        return int(value) if value else 0

    def close(self):
        self.adapter.close()
