"""
Ledger state survives a restart when backed by SQLite.
"""

import pytest

from nftauction.core.ledger import AuctionLedger, SettlementKind
from nftauction.core.storage import StorageManager


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary directory for ledger data."""
    data_dir = tmp_path / "ledger_data"
    data_dir.mkdir()
    return data_dir


def restart(registry, bank, accounts, clock, data_dir):
    return AuctionLedger(
        registry,
        bank,
        accounts.custody,
        storage_manager=StorageManager(data_dir=data_dir),
        clock=clock,
    )


class TestPersistence:
    """Round trips through StorageManager."""

    def test_auction_state_reloaded(self, registry, bank, accounts, collection, clock, temp_data_dir):
        """Bids, refunds and fees are restored on restart."""
        ledger_a = restart(registry, bank, accounts, clock, temp_data_dir)
        fee = ledger_a.config.listing_fee
        with bank.attached(accounts.seller, fee):
            auction_id = ledger_a.list_asset(collection, 1, 5, 7, accounts.seller, fee)
        with bank.attached(accounts.alice, 10):
            ledger_a.bid(auction_id, accounts.alice, 10)
        with bank.attached(accounts.bob, 20):
            ledger_a.bid(auction_id, accounts.bob, 20)
        original = ledger_a.get_auction(auction_id)
        del ledger_a

        ledger_b = restart(registry, bank, accounts, clock, temp_data_dir)

        assert ledger_b.auction_count == 1
        assert ledger_b.collected_fees == fee
        assert ledger_b.get_auction(auction_id) == original
        assert ledger_b.withdrawable_balance(auction_id, accounts.alice) == 10

        # Reloaded ledger keeps working
        assert ledger_b.withdraw(auction_id, accounts.alice) == 10

    def test_ids_continue_after_restart(self, registry, bank, accounts, collection, clock, temp_data_dir):
        ledger_a = restart(registry, bank, accounts, clock, temp_data_dir)
        fee = ledger_a.config.listing_fee
        with bank.attached(accounts.seller, fee):
            ledger_a.list_asset(collection, 1, 1, 7, accounts.seller, fee)

        ledger_b = restart(registry, bank, accounts, clock, temp_data_dir)
        with bank.attached(accounts.seller, fee):
            second = ledger_b.list_asset(collection, 2, 1, 7, accounts.seller, fee)

        assert second == 1
        assert ledger_b.collected_fees == 2 * fee

    def test_settlement_persisted(self, registry, bank, accounts, collection, clock, temp_data_dir):
        ledger_a = restart(registry, bank, accounts, clock, temp_data_dir)
        fee = ledger_a.config.listing_fee
        with bank.attached(accounts.seller, fee):
            auction_id = ledger_a.list_asset(collection, 1, 1, 7, accounts.seller, fee)
        with bank.attached(accounts.alice, 10):
            ledger_a.bid(auction_id, accounts.alice, 10)
        clock.now = ledger_a.get_auction(auction_id).end_at
        ledger_a.claim_as_winner(auction_id, accounts.alice)

        auction = StorageManager(data_dir=temp_data_dir).load_auction(auction_id)

        assert auction.ended
        assert auction.settled_by == SettlementKind.WINNER
        assert auction.settled_at == clock.now
        assert auction.total_paid_out == 10

    def test_large_amounts(self, accounts, collection, temp_data_dir):
        """Amounts beyond 64 bits are stored exactly."""
        from nftauction.core.ledger import Auction

        storage = StorageManager(data_dir=temp_data_dir)
        big = 2**200 + 7
        auction = Auction(
            auction_id=0,
            asset_contract=collection,
            asset_id=2**255,
            seller=accounts.seller,
            starting_price=big,
            end_at=1,
            highest_bidder=accounts.bob,
            highest_bid=big + 1,
            withdrawable={accounts.alice: big},
        )
        storage.save_auction(auction)

        assert storage.load_auction(0) == auction

    def test_missing_auction(self, temp_data_dir):
        assert StorageManager(data_dir=temp_data_dir).load_auction(3) is None
