"""
NFT Auction Ledger

An escrowed, time-boxed auction ledger for non-fungible assets:
- Listing with asset custody moved into escrow
- Open ascending bidding with refund bookkeeping
- Pull-based withdrawal of outbid funds
- Seller- or winner-triggered settlement
"""
