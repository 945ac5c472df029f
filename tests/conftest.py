"""
Shared fixtures: accounts, in-memory collaborators, a ledger driven by a
controllable clock, and helpers that attach payments the way a real
caller would.
"""

from types import SimpleNamespace

import pytest

from nftauction.crypto import address_from_seed
from nftauction.core.custody import InMemoryAssetRegistry, InMemoryBank
from nftauction.core.ledger import AuctionLedger


START = 1_700_000_000
DAY = 86_400
INITIAL_BALANCE = 10_000


class FakeClock:
    """Manually advanced unix clock."""

    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def accounts():
    """Named test accounts."""
    return SimpleNamespace(
        custody=address_from_seed(b"custody"),
        seller=address_from_seed(b"seller"),
        alice=address_from_seed(b"alice"),
        bob=address_from_seed(b"bob"),
        carol=address_from_seed(b"carol"),
    )


@pytest.fixture
def collection():
    """Asset contract address."""
    return address_from_seed(b"collection")


@pytest.fixture
def registry(accounts, collection):
    """Registry with assets 1 and 2 held by the seller."""
    registry = InMemoryAssetRegistry()
    registry.mint(collection, 1, accounts.seller)
    registry.mint(collection, 2, accounts.seller)
    return registry


@pytest.fixture
def bank(accounts):
    """Bank with every participant funded."""
    bank = InMemoryBank(accounts.custody)
    for account in (accounts.seller, accounts.alice, accounts.bob, accounts.carol):
        bank.credit(account, INITIAL_BALANCE)
    return bank


@pytest.fixture
def ledger(registry, bank, accounts, clock):
    return AuctionLedger(registry, bank, accounts.custody, clock=clock)


@pytest.fixture
def list_asset(ledger, bank, accounts, collection):
    """List an asset with the listing fee attached."""
    def _list(asset_id=1, starting_price=1, duration_days=7, seller=None):
        seller = seller or accounts.seller
        fee = ledger.config.listing_fee
        with bank.attached(seller, fee):
            return ledger.list_asset(collection, asset_id, starting_price, duration_days, seller, fee)
    return _list


@pytest.fixture
def place_bid(ledger, bank):
    """Bid with the amount attached."""
    def _bid(auction_id, bidder, amount):
        with bank.attached(bidder, amount):
            ledger.bid(auction_id, bidder, amount)
    return _bid


@pytest.fixture
def auction_id(list_asset):
    """A fresh 7-day auction for asset 1."""
    return list_asset()


@pytest.fixture
def expire(ledger, clock):
    """Move the clock to an auction's deadline."""
    def _expire(auction_id):
        clock.now = ledger.get_auction(auction_id).end_at
    return _expire
