"""
In-memory collaborators.

Reference implementations of AssetRegistry and PaymentPrimitive that keep
all state in dictionaries. Used by the CLI demo, the test-suite and any
embedder that simulates a marketplace in-process.

Both support failure injection so callers can exercise the ledger's
compensation paths, and an on_transfer hook that runs after a successful
transfer (this is where a recipient would call back into the ledger).
If the hook raises, the transfer is reverted before the exception
propagates, the way a failed contract call rolls back its own effects.
"""

from collections import defaultdict
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Set, Tuple

from nftauction.crypto import short_address
from nftauction.utils.logger import get_logger

logger = get_logger("custody")


AssetKey = Tuple[bytes, int]


class InMemoryAssetRegistry:
    """
    Ownership map for non-fungible assets.
    
    Attributes:
        owners: (contract, asset_id) -> current holder
        rejected_recipients: Transfers to these accounts return False
        lying_recipients: Transfers to these accounts return True but
            leave ownership unchanged
    """
    
    def __init__(self):
        self.owners: Dict[AssetKey, bytes] = {}
        self.rejected_recipients: Set[bytes] = set()
        self.lying_recipients: Set[bytes] = set()
        self.on_transfer: Optional[Callable[[bytes, int, bytes, bytes], None]] = None
        self.transfer_count = 0
    
    def mint(self, contract: bytes, asset_id: int, owner: bytes) -> None:
        """Create an asset held by owner."""
        key = (bytes(contract), asset_id)
        if key in self.owners:
            raise ValueError(f"Asset {asset_id} already minted on {short_address(contract)}")
        self.owners[key] = owner
    
    def owner_of(self, contract: bytes, asset_id: int) -> Optional[bytes]:
        return self.owners.get((bytes(contract), asset_id))
    
    def transfer_ownership(
        self,
        contract: bytes,
        asset_id: int,
        from_: bytes,
        to: bytes,
    ) -> bool:
        key = (bytes(contract), asset_id)
        if self.owners.get(key) != from_:
            logger.warning(f"Asset {asset_id} not held by {short_address(from_)}")
            return False
        
        if to in self.rejected_recipients:
            logger.warning(f"Asset transfer to {short_address(to)} rejected")
            return False
        
        if to not in self.lying_recipients:
            self.owners[key] = to
        self.transfer_count += 1
        
        if self.on_transfer:
            try:
                self.on_transfer(contract, asset_id, from_, to)
            except BaseException:
                # A failing recipient reverts the whole transfer
                self.owners[key] = from_
                self.transfer_count -= 1
                raise
        return True


class InMemoryBank:
    """
    Account balances with a custody account owned by the ledger.
    
    The ledger only ever pays out of custody (transfer). Money enters
    custody alongside a ledger call through attached(), which models a
    payment that travels with the call: if the call raises, the payment
    is handed back.
    
    Attributes:
        custody: Account holding escrowed funds
        balances: account -> balance
        rejected_recipients: Transfers to these accounts return False
    """
    
    def __init__(self, custody: bytes):
        self.custody = custody
        self.balances: Dict[bytes, int] = defaultdict(int)
        self.rejected_recipients: Set[bytes] = set()
        self.on_transfer: Optional[Callable[[bytes, int], None]] = None
        self.transfer_count = 0
    
    def credit(self, account: bytes, amount: int) -> None:
        """Fund an account from outside the system."""
        if amount < 0:
            raise ValueError("Amount must be non-negative")
        self.balances[account] += amount
    
    def balance_of(self, account: bytes) -> int:
        return self.balances.get(account, 0)
    
    def transfer(self, to: bytes, amount: int) -> bool:
        if amount < 0:
            return False
        
        if to in self.rejected_recipients:
            logger.warning(f"Payment of {amount} to {short_address(to)} rejected")
            return False
        
        if self.balances[self.custody] < amount:
            logger.warning(f"Custody short: {self.balances[self.custody]} < {amount}")
            return False
        
        self.balances[self.custody] -= amount
        self.balances[to] += amount
        self.transfer_count += 1
        
        if self.on_transfer:
            try:
                self.on_transfer(to, amount)
            except BaseException:
                self.balances[to] -= amount
                self.balances[self.custody] += amount
                self.transfer_count -= 1
                raise
        return True
    
    @contextmanager
    def attached(self, sender: bytes, amount: int) -> Iterator[int]:
        """
        Move amount from sender into custody for the duration of a call.
        
        Usage:
            with bank.attached(alice, 10):
                ledger.bid(auction_id, alice, 10)
        
        Raises:
            ValueError: If sender cannot cover amount
        """
        if amount < 0:
            raise ValueError("Amount must be non-negative")
        if self.balances[sender] < amount:
            raise ValueError(f"Insufficient funds: {self.balances[sender]} < {amount}")
        
        self.balances[sender] -= amount
        self.balances[self.custody] += amount
        try:
            yield amount
        except BaseException:
            self.balances[self.custody] -= amount
            self.balances[sender] += amount
            raise
