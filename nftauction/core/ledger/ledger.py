"""
Auction Ledger - Escrow accounting for time-boxed NFT auctions.

Conceptual Background:
---------------------
The ledger holds a growing, append-only collection of Auction records keyed
by sequential ids starting at 0. Each operation touches exactly one record:

1. **List**: the seller's asset moves into the ledger's custody account and
   a new record is created
2. **Bid**: the attached payment is deposited, the previous leader's bid is
   credited to its withdrawable balance, and the caller becomes the leader
3. **Withdraw**: a displaced bidder reclaims its refund
4. **Settle**: after the deadline, the asset goes to the winner (or back to
   the seller) and the winning bid goes to the seller

Effects Before Interactions:
---------------------------
Asset and payment transfers are the only calls that leave the ledger, and a
collaborator may call back into the ledger before returning. Any mutation
that must not be observed twice (a zeroed refund, the ended flag) is applied
before the outgoing call. If the call then fails, the mutation is undone and
TransferFailed is raised, so every operation either applies fully or not at
all.

Concurrency:
-----------
Operations on the same auction are serialized by a per-auction RLock.
Reentrant calls from a collaborator run on the same thread and pass the
lock, but see the protective mutations described above.
"""

import threading
import time
from typing import Callable, Dict, Iterator, List, Optional

from nftauction.core.config import LedgerConfig
from nftauction.core.custody.interfaces import AssetRegistry, PaymentPrimitive
from nftauction.core.errors import (
    AuctionAlreadyEnded,
    AuctionEnded,
    AuctionExpired,
    AuctionNotExpired,
    BidTooLow,
    CannotOutbidSelf,
    InvalidAmount,
    InvalidAsset,
    InvalidAuctionId,
    InvalidDuration,
    InvalidFee,
    InvalidPrice,
    NotAssetOwner,
    NotSeller,
    NotWinner,
    NotWithdrawable,
    SellerCannotBid,
    TransferFailed,
)
from nftauction.core.ledger.auction import (
    Auction,
    AuctionStatus,
    SettlementKind,
    SettlementResult,
)
from nftauction.crypto import short_address
from nftauction.utils.logger import get_logger
from nftauction.utils.validation import (
    validate_amount,
    validate_asset_id,
    validate_contract_address,
    validate_integer,
)

logger = get_logger("ledger")


class AuctionLedger:
    """
    Escrowed auction ledger.

    Attributes:
        asset_registry: Holds asset ownership
        payments: Pays currency out of custody
        custody: Account that holds escrowed assets and funds
        config: Fee and duration limits
        collected_fees: Listing fees received so far
    """

    def __init__(
        self,
        asset_registry: AssetRegistry,
        payments: PaymentPrimitive,
        custody: bytes,
        config: Optional[LedgerConfig] = None,
        storage_manager=None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize the ledger.

        Args:
            asset_registry: External asset registry
            payments: External payment primitive
            custody: The ledger's own account on both collaborators
            config: Ledger configuration. None = defaults.
            storage_manager: Persistence manager. None = in-memory only.
            clock: Returns the current unix time. None = wall clock.
        """
        self.asset_registry = asset_registry
        self.payments = payments
        self.custody = custody
        self.config = config or LedgerConfig()
        self.clock = clock or (lambda: int(time.time()))

        self._auctions: List[Auction] = []
        self._locks: Dict[int, threading.RLock] = {}
        self._ledger_lock = threading.RLock()
        self.collected_fees = 0

        self.storage_manager = storage_manager
        if storage_manager:
            self._load_from_storage()

    # =========================================================================
    # Listing
    # =========================================================================

    def list_asset(
        self,
        asset_contract: bytes,
        asset_id: int,
        starting_price: int,
        duration_days: int,
        caller: bytes,
        attached_fee: int,
        now: Optional[int] = None,
    ) -> int:
        """
        Escrow an asset and open an auction for it.

        Args:
            asset_contract: Contract of the asset being sold
            asset_id: Token id within asset_contract
            starting_price: Informational price floor, must be positive
            duration_days: Bidding window, within the configured limits
            caller: Seller, must currently own the asset
            attached_fee: Payment attached to the call, must equal the listing fee
            now: Current unix time. None = ledger clock.

        Returns:
            New auction id

        Raises:
            InvalidFee, InvalidAsset, NotAssetOwner, InvalidPrice,
            InvalidDuration, TransferFailed
        """
        with self._ledger_lock:
            if attached_fee != self.config.listing_fee:
                raise InvalidFee(f"Listing fee must be {self.config.listing_fee}, got {attached_fee}")

            valid, err = validate_contract_address(asset_contract)
            if not valid:
                raise InvalidAsset(err)
            valid, err = validate_asset_id(asset_id)
            if not valid:
                raise InvalidAsset(err)
            asset_contract = bytes(asset_contract)

            if self.asset_registry.owner_of(asset_contract, asset_id) != caller:
                raise NotAssetOwner(f"Caller does not own asset {asset_id}")

            valid, err = validate_amount(starting_price, "starting_price")
            if not valid or starting_price <= 0:
                raise InvalidPrice(err or "starting_price must be positive")

            valid, err = validate_integer(
                duration_days,
                "duration_days",
                self.config.min_duration_days,
                self.config.max_duration_days,
            )
            if not valid:
                raise InvalidDuration(err)

            now = self._now(now)

            # Custody must be confirmed before any record exists
            self._move_asset(asset_contract, asset_id, caller, self.custody)

            auction = Auction(
                auction_id=len(self._auctions),
                asset_contract=asset_contract,
                asset_id=asset_id,
                seller=caller,
                starting_price=starting_price,
                end_at=now + self.config.duration_seconds(duration_days),
                created_at=now,
            )
            # Lock first: the id becomes visible to other threads on append
            self._locks[auction.auction_id] = threading.RLock()
            self._auctions.append(auction)
            self.collected_fees += attached_fee

            self._persist(auction)
            if self.storage_manager:
                self.storage_manager.save_collected_fees(self.collected_fees)

            logger.info(
                f"Listed auction {auction.auction_id}: asset {asset_id} on "
                f"{short_address(asset_contract)} by {short_address(caller)}, "
                f"starting_price={starting_price}, ends at {auction.end_at}"
            )
            return auction.auction_id

    # =========================================================================
    # Bidding
    # =========================================================================

    def bid(
        self,
        auction_id: int,
        caller: bytes,
        amount: int,
        now: Optional[int] = None,
    ) -> None:
        """
        Place a bid. The amount is the payment attached to the call.

        The starting price is not enforced: the first bid only has to
        exceed the initial highest_bid of 0.

        Raises:
            InvalidAuctionId, AuctionEnded, AuctionExpired, InvalidAmount, BidTooLow,
            SellerCannotBid, CannotOutbidSelf
        """
        auction = self._get(auction_id)
        with self._lock_for(auction_id):
            now = self._now(now)

            if auction.ended:
                raise AuctionEnded(f"Auction {auction_id} has ended", auction_id)
            if now >= auction.end_at:
                raise AuctionExpired(f"Auction {auction_id} closed at {auction.end_at}", auction_id)

            # Negative ints are well-formed, just too low
            valid, err = validate_amount(amount)
            if not valid and not (isinstance(amount, int) and amount < 0):
                raise InvalidAmount(err, auction_id)
            if amount <= auction.highest_bid:
                raise BidTooLow(f"Bid {amount} must exceed {auction.highest_bid}", auction_id)

            if caller == auction.seller:
                raise SellerCannotBid("Seller cannot bid on own auction", auction_id)
            if caller == auction.highest_bidder:
                raise CannotOutbidSelf("Already the highest bidder", auction_id)

            self._deposit(auction, amount)
            self._record_bid(auction, caller, amount)
            self._persist(auction)

            logger.debug(f"Bid on auction {auction_id}: {short_address(caller)} -> {amount}")

    def _deposit(self, auction: Auction, amount: int) -> None:
        """Account for currency attached to a bid."""
        auction.total_deposited += amount

    def _record_bid(self, auction: Auction, bidder: bytes, amount: int) -> None:
        """Make bidder the leader, refunding the displaced leader."""
        previous = auction.highest_bidder
        if previous is not None:
            auction.withdrawable[previous] = auction.withdrawable.get(previous, 0) + auction.highest_bid

        auction.highest_bidder = bidder
        auction.highest_bid = amount
        auction.bid_count += 1

    # =========================================================================
    # Withdrawal
    # =========================================================================

    def withdraw(self, auction_id: int, caller: bytes) -> int:
        """
        Pay out the caller's refund for an auction.

        The current leader of an unsettled auction cannot withdraw. Once the
        auction has ended the winning bid is no longer part of withdrawable,
        so the winner may reclaim refunds from earlier displaced bids.

        Returns:
            Amount paid

        Raises:
            InvalidAuctionId, NotWithdrawable, TransferFailed
        """
        auction = self._get(auction_id)
        with self._lock_for(auction_id):
            if not auction.ended and caller == auction.highest_bidder:
                raise NotWithdrawable("Highest bidder cannot withdraw", auction_id)

            amount = auction.withdrawable.get(caller, 0)
            if amount <= 0:
                raise NotWithdrawable("Nothing to withdraw", auction_id)

            # Cleared before paying so a reentrant call finds nothing
            del auction.withdrawable[caller]

            try:
                self._pay(caller, amount, auction_id)
            except TransferFailed:
                auction.withdrawable[caller] = auction.withdrawable.get(caller, 0) + amount
                raise

            auction.total_paid_out += amount
            self._persist(auction)

            logger.debug(f"Withdrawal from auction {auction_id}: {amount} to {short_address(caller)}")
            return amount

    # =========================================================================
    # Settlement
    # =========================================================================

    def end_as_seller(
        self,
        auction_id: int,
        caller: bytes,
        now: Optional[int] = None,
    ) -> SettlementResult:
        """
        Settle an expired auction on behalf of its seller.

        Raises:
            InvalidAuctionId, AuctionAlreadyEnded, NotSeller,
            AuctionNotExpired, TransferFailed
        """
        return self._settle(auction_id, caller, SettlementKind.SELLER, now)

    def claim_as_winner(
        self,
        auction_id: int,
        caller: bytes,
        now: Optional[int] = None,
    ) -> SettlementResult:
        """
        Settle an expired auction on behalf of its highest bidder.

        Raises:
            InvalidAuctionId, AuctionAlreadyEnded, NotWinner,
            AuctionNotExpired, TransferFailed
        """
        return self._settle(auction_id, caller, SettlementKind.WINNER, now)

    def _settle(
        self,
        auction_id: int,
        caller: bytes,
        kind: SettlementKind,
        now: Optional[int],
    ) -> SettlementResult:
        """
        Release the escrowed asset and winning bid.

        Order:
        1. Set ended (blocks reentrant bids and settlements)
        2. Asset to the winner, or back to the seller if nobody bid
        3. Winning bid to the seller

        A failure at step 2 resets ended. A failure at step 3 first moves
        the asset back into custody, then resets ended. If that reversal
        also fails the asset and payment are out of step, which is
        reported as TransferFailed with stranded=True.
        """
        auction = self._get(auction_id)
        with self._lock_for(auction_id):
            now = self._now(now)

            # Checked first so a repeat settlement is always a StateError
            if auction.ended:
                raise AuctionAlreadyEnded(f"Auction {auction_id} already ended", auction_id)

            if kind == SettlementKind.SELLER and caller != auction.seller:
                raise NotSeller("Only the seller can end the auction", auction_id)
            if kind == SettlementKind.WINNER and (
                auction.highest_bidder is None or caller != auction.highest_bidder
            ):
                raise NotWinner("Only the highest bidder can claim", auction_id)

            if now < auction.end_at:
                raise AuctionNotExpired(f"Auction {auction_id} runs until {auction.end_at}", auction_id)

            auction.ended = True

            winner = auction.highest_bidder
            amount = auction.highest_bid if winner is not None else 0
            recipient = winner if winner is not None else auction.seller

            try:
                self._move_asset(auction.asset_contract, auction.asset_id, self.custody, recipient, auction_id)
            except TransferFailed:
                auction.ended = False
                raise

            if winner is not None:
                try:
                    self._pay(auction.seller, amount, auction_id)
                except TransferFailed:
                    try:
                        self._reclaim_asset(auction, recipient)
                    finally:
                        auction.ended = False
                    raise
                auction.total_paid_out += amount

            auction.settled_by = kind
            auction.settled_at = now
            self._persist(auction)

            if winner is None:
                logger.info(f"Auction {auction_id} ended without bids, asset returned to seller")
            else:
                logger.info(
                    f"Auction {auction_id} settled by {kind.value}: "
                    f"winner={short_address(winner)}, amount={amount}"
                )
            return SettlementResult(auction_id=auction_id, winner=winner, amount=amount, kind=kind)

    def _reclaim_asset(self, auction: Auction, holder: bytes) -> None:
        """Undo a settlement asset transfer after the payment leg failed."""
        try:
            self._move_asset(auction.asset_contract, auction.asset_id, holder, self.custody, auction.auction_id)
        except TransferFailed as err:
            logger.critical(
                f"Auction {auction.auction_id}: asset {auction.asset_id} left with "
                f"{short_address(holder)} but seller was not paid {auction.highest_bid}"
            )
            raise TransferFailed(
                "Payment to seller failed and asset could not be returned to custody",
                auction.auction_id,
                stranded=True,
            ) from err

    # =========================================================================
    # Collaborator Calls
    # =========================================================================

    def _move_asset(
        self,
        contract: bytes,
        asset_id: int,
        from_: bytes,
        to: bytes,
        auction_id: Optional[int] = None,
    ) -> None:
        """Transfer an asset and confirm the registry reflects it."""
        try:
            ok = self.asset_registry.transfer_ownership(contract, asset_id, from_, to)
        except Exception as err:
            raise TransferFailed(f"Asset transfer raised: {err}", auction_id) from err

        if not ok:
            logger.warning(f"Registry refused transfer of asset {asset_id} to {short_address(to)}")
            raise TransferFailed(f"Asset {asset_id} transfer refused", auction_id)

        if self.asset_registry.owner_of(contract, asset_id) != to:
            logger.warning(f"Registry reported success but asset {asset_id} is not held by {short_address(to)}")
            raise TransferFailed(f"Asset {asset_id} not received by {short_address(to)}", auction_id)

    def _pay(self, to: bytes, amount: int, auction_id: int) -> None:
        """Pay currency out of custody."""
        try:
            ok = self.payments.transfer(to, amount)
        except Exception as err:
            raise TransferFailed(f"Payment raised: {err}", auction_id) from err

        if not ok:
            logger.warning(f"Payment of {amount} to {short_address(to)} failed (auction {auction_id})")
            raise TransferFailed(f"Payment of {amount} failed", auction_id)

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def auction_count(self) -> int:
        """Number of auctions ever listed; also the next id."""
        return len(self._auctions)

    def get_auction(self, auction_id: int) -> Auction:
        """
        Public view of an auction.

        Returns a copy, so callers cannot mutate ledger state.

        Raises:
            InvalidAuctionId
        """
        auction = self._get(auction_id)
        with self._lock_for(auction_id):
            return auction.snapshot()

    def auctions(self) -> Iterator[Auction]:
        """Copies of all auctions in id order."""
        for auction_id in range(self.auction_count):
            yield self.get_auction(auction_id)

    def status(self, auction_id: int, now: Optional[int] = None) -> AuctionStatus:
        """Lifecycle phase of an auction at time now."""
        return self._get(auction_id).status(self._now(now))

    def withdrawable_balance(self, auction_id: int, account: bytes) -> int:
        """Refund owed to account on an auction."""
        return self._get(auction_id).withdrawable_of(account)

    def escrow_balance(self, auction_id: int) -> int:
        """Currency held in escrow for an auction."""
        return self._get(auction_id).escrowed

    # =========================================================================
    # Internals
    # =========================================================================

    def _now(self, now: Optional[int]) -> int:
        return self.clock() if now is None else now

    def _get(self, auction_id: int) -> Auction:
        valid, err = validate_integer(auction_id, "auction_id", 0)
        if not valid:
            raise InvalidAuctionId(err)
        if auction_id >= self.auction_count:
            raise InvalidAuctionId(f"No auction {auction_id}", auction_id)
        return self._auctions[auction_id]

    def _lock_for(self, auction_id: int) -> threading.RLock:
        return self._locks[auction_id]

    # =========================================================================
    # Persistence
    # =========================================================================

    def _persist(self, auction: Auction) -> None:
        if self.storage_manager:
            self.storage_manager.save_auction(auction)

    def _load_from_storage(self) -> None:
        """Load auctions from storage manager."""
        auctions = self.storage_manager.load_auctions()
        for expected_id, auction in enumerate(auctions):
            if auction.auction_id != expected_id:
                raise RuntimeError(f"Stored auctions are not contiguous at id {expected_id}")
            self._locks[auction.auction_id] = threading.RLock()
            self._auctions.append(auction)

        self.collected_fees = self.storage_manager.get_collected_fees()
        logger.info(f"Loaded ledger: {len(self._auctions)} auctions, fees={self.collected_fees}")

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return f"AuctionLedger(auctions={self.auction_count}, fees={self.collected_fees})"

    def stats(self, now: Optional[int] = None) -> dict:
        """Get ledger statistics."""
        now = self._now(now)
        by_status = {status.name.lower(): 0 for status in AuctionStatus}
        for auction in self._auctions:
            by_status[auction.status(now).name.lower()] += 1

        return {
            "auction_count": self.auction_count,
            **by_status,
            "total_escrowed": sum(a.escrowed for a in self._auctions),
            "collected_fees": self.collected_fees,
        }
