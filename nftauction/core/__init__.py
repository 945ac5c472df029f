"""
Core ledger components.

- ledger: Auction records and the escrow ledger
- custody: External asset registry and payment collaborators
- storage: SQLite persistence
- errors: Error taxonomy
- config: Ledger configuration
"""
