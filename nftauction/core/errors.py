"""
Ledger error taxonomy.

Every rejected operation raises one specific, stable error kind. Kinds are
grouped into five categories so callers can tell apart:

- ValidationError / AuthorizationError: the call will never succeed as made
- StateError: wrong lifecycle phase, may succeed later (or never, once ended)
- AccountingError: amounts or balances do not permit the call
- CollaboratorFailure: an external asset or payment transfer failed
"""

from typing import Optional


class AuctionError(Exception):
    """
    Base exception for all ledger errors.
    
    Attributes:
        code: Stable machine-readable error kind
        auction_id: Auction the error relates to, if any
    """

    code = "AuctionError"

    def __init__(self, message: str = "", auction_id: Optional[int] = None):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.auction_id = auction_id


# =============================================================================
# Categories
# =============================================================================


class ValidationError(AuctionError):
    """Bad input: invalid id, fee, price, duration or amount"""


class AuthorizationError(AuctionError):
    """Caller does not hold the role the operation requires"""


class StateError(AuctionError):
    """Operation is not allowed in the auction's current lifecycle phase"""


class AccountingError(AuctionError):
    """Bid or balance does not permit the operation"""


class CollaboratorFailure(AuctionError):
    """An external asset or payment transfer reported failure"""


# =============================================================================
# Validation
# =============================================================================


class InvalidFee(ValidationError):
    code = "InvalidFee"


class InvalidAsset(ValidationError):
    code = "InvalidAsset"


class InvalidPrice(ValidationError):
    code = "InvalidPrice"


class InvalidDuration(ValidationError):
    code = "InvalidDuration"


class InvalidAuctionId(ValidationError):
    code = "InvalidAuctionId"


class InvalidAmount(ValidationError):
    """Bid amount is not an integer or exceeds the amount range"""
    code = "InvalidAmount"


# =============================================================================
# Authorization
# =============================================================================


class NotAssetOwner(AuthorizationError):
    code = "NotAssetOwner"


class SellerCannotBid(AuthorizationError):
    code = "SellerCannotBid"


class NotSeller(AuthorizationError):
    code = "NotSeller"


class NotWinner(AuthorizationError):
    code = "NotWinner"


# =============================================================================
# Lifecycle
# =============================================================================


class AuctionEnded(StateError):
    """Bid on an auction that has been settled"""
    code = "AuctionEnded"


class AuctionExpired(StateError):
    """Bid after the deadline on an auction not yet settled"""
    code = "AuctionExpired"


class AuctionNotExpired(StateError):
    code = "AuctionNotExpired"


class AuctionAlreadyEnded(StateError):
    code = "AuctionAlreadyEnded"


# =============================================================================
# Accounting
# =============================================================================


class BidTooLow(AccountingError):
    code = "BidTooLow"


class CannotOutbidSelf(AccountingError):
    code = "CannotOutbidSelf"


class NotWithdrawable(AccountingError):
    code = "NotWithdrawable"


# =============================================================================
# Collaborators
# =============================================================================


class TransferFailed(CollaboratorFailure):
    """
    An asset or payment transfer failed.
    
    stranded is True when the ledger could not undo a partially applied
    transfer, meaning escrowed assets or funds need manual attention.
    """
    code = "TransferFailed"

    def __init__(
        self,
        message: str = "",
        auction_id: Optional[int] = None,
        stranded: bool = False,
    ):
        super().__init__(message, auction_id)
        self.stranded = stranded


__all__ = [
    "AuctionError",
    "ValidationError",
    "AuthorizationError",
    "StateError",
    "AccountingError",
    "CollaboratorFailure",
    "InvalidFee",
    "InvalidAsset",
    "InvalidPrice",
    "InvalidDuration",
    "InvalidAuctionId",
    "InvalidAmount",
    "NotAssetOwner",
    "SellerCannotBid",
    "NotSeller",
    "NotWinner",
    "AuctionEnded",
    "AuctionExpired",
    "AuctionNotExpired",
    "AuctionAlreadyEnded",
    "BidTooLow",
    "CannotOutbidSelf",
    "NotWithdrawable",
    "TransferFailed",
]
