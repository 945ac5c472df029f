"""
Auction records.

One Auction per listed asset instance. The record is created by a listing,
mutated by bids and withdrawals, and frozen by settlement, after which it
remains as read-only history.

Lifecycle:
---------
    ACTIVE  --(deadline passes)-->  EXPIRED  --(settle)-->  ENDED

ACTIVE and EXPIRED are distinguished only by comparing end_at with the
time of the call; ENDED is the single stored terminal flag.

Escrow:
------
Before settlement the currency held for an auction is always

    highest_bid + sum(withdrawable.values())

total_deposited and total_paid_out track the same quantity from the cash
side so the two can be checked against each other.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Optional

from nftauction.crypto import bytes_to_hex


# =============================================================================
# Enums
# =============================================================================


class AuctionStatus(IntEnum):
    """Derived lifecycle phase of an auction."""
    ACTIVE = 0    # Accepting bids
    EXPIRED = 1   # Deadline passed, awaiting settlement
    ENDED = 2     # Settled


class SettlementKind(str, Enum):
    """Which party triggered settlement."""
    SELLER = "seller"
    WINNER = "winner"


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class Auction:
    """
    An escrowed listing of a single non-fungible asset.
    
    Attributes:
        auction_id: Sequential identifier, never reused
        asset_contract: Contract address of the escrowed asset
        asset_id: Token id within asset_contract
        seller: Account that listed the asset
        starting_price: Informational price floor (not enforced on bids)
        end_at: Unix time; bids are accepted strictly before this instant
        ended: Terminal flag, set once by settlement
        highest_bidder: Current leader, None until the first bid
        highest_bid: Current leading amount
        withdrawable: Refunds owed to displaced bidders
    """
    auction_id: int
    asset_contract: bytes
    asset_id: int
    seller: bytes
    starting_price: int
    end_at: int
    created_at: int = 0
    ended: bool = False
    highest_bidder: Optional[bytes] = None
    highest_bid: int = 0
    withdrawable: Dict[bytes, int] = field(default_factory=dict)
    
    # Cash-side bookkeeping
    total_deposited: int = 0
    total_paid_out: int = 0
    bid_count: int = 0
    
    # Settlement outcome
    settled_by: Optional["SettlementKind"] = None
    settled_at: Optional[int] = None
    
    def status(self, now: int) -> AuctionStatus:
        """Lifecycle phase at time now."""
        if self.ended:
            return AuctionStatus.ENDED
        if now < self.end_at:
            return AuctionStatus.ACTIVE
        return AuctionStatus.EXPIRED
    
    def is_open(self, now: int) -> bool:
        """Whether bids are accepted at time now."""
        return self.status(now) == AuctionStatus.ACTIVE
    
    def withdrawable_of(self, account: bytes) -> int:
        """Refund currently owed to account."""
        return self.withdrawable.get(account, 0)
    
    @property
    def has_bids(self) -> bool:
        return self.highest_bidder is not None
    
    @property
    def escrowed(self) -> int:
        """Currency held for this auction according to the bid state."""
        pending = 0 if self.ended else self.highest_bid
        return pending + sum(self.withdrawable.values())
    
    def snapshot(self) -> "Auction":
        """Detached copy safe to hand to callers."""
        return copy.deepcopy(self)
    
    def to_dict(self) -> dict:
        """JSON-friendly view of the record."""
        return {
            "auction_id": self.auction_id,
            "asset_contract": bytes_to_hex(self.asset_contract),
            "asset_id": self.asset_id,
            "seller": bytes_to_hex(self.seller),
            "starting_price": self.starting_price,
            "created_at": self.created_at,
            "end_at": self.end_at,
            "ended": self.ended,
            "highest_bidder": bytes_to_hex(self.highest_bidder) if self.highest_bidder else None,
            "highest_bid": self.highest_bid,
            "bid_count": self.bid_count,
            "withdrawable": {
                bytes_to_hex(account): amount
                for account, amount in self.withdrawable.items()
                if amount > 0
            },
            "settled_by": self.settled_by.value if self.settled_by else None,
            "settled_at": self.settled_at,
        }


@dataclass(frozen=True)
class SettlementResult:
    """
    Outcome of settling an auction.
    
    winner is None and amount is 0 when no bid was ever placed and the
    asset went back to the seller.
    """
    auction_id: int
    winner: Optional[bytes]
    amount: int
    kind: SettlementKind


__all__ = [
    "Auction",
    "AuctionStatus",
    "SettlementKind",
    "SettlementResult",
]
