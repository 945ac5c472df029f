"""Auction records and the escrow ledger"""
from nftauction.core.ledger.auction import (
    Auction,
    AuctionStatus,
    SettlementKind,
    SettlementResult,
)
from nftauction.core.ledger.ledger import AuctionLedger

__all__ = [
    "Auction",
    "AuctionStatus",
    "SettlementKind",
    "SettlementResult",
    "AuctionLedger",
]
