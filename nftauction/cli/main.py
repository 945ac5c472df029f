"""
NFT Auction CLI - Command Line Interface for the auction ledger

Main entry point for all CLI commands.
"""

import json
from pathlib import Path

import click

from nftauction.utils.logger import setup_logging


def open_storage(ctx):
    """Open the StorageManager for the selected data directory."""
    from nftauction.core.storage import StorageManager

    cfg = ctx.obj["config"]
    return StorageManager(data_dir=ctx.obj["data_dir"], db_name=cfg.db_name)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, help="Data directory (default: NFTAUCTION_DATA_DIR or ./data)")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help="Load settings from a .env file")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, data_dir, env_file):
    """NFT Auction Ledger - escrowed, time-boxed auctions"""
    import logging
    from nftauction.core.config import load_config

    cfg = load_config(env_file)
    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level)

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["data_dir"] = Path(data_dir).expanduser() if data_dir else cfg.data_dir


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.option("--persist", is_flag=True, help="Write the demo auction to the data directory")
@click.pass_context
def demo(ctx, persist):
    """Run the list / bid / withdraw / claim walkthrough"""
    from nftauction.crypto import address_from_seed, bytes_to_hex
    from nftauction.core.custody import InMemoryAssetRegistry, InMemoryBank
    from nftauction.core.ledger import AuctionLedger

    cfg = ctx.obj["config"]

    click.echo("=" * 60)
    click.echo("  NFT AUCTION LEDGER - DEMO")
    click.echo("=" * 60)
    click.echo()

    # Setup
    click.echo("📦 Initializing components...")
    custody = address_from_seed(b"ledger-custody")
    seller = address_from_seed(b"seller")
    alice = address_from_seed(b"alice")
    bob = address_from_seed(b"bob")
    collection = address_from_seed(b"collection")

    registry = InMemoryAssetRegistry()
    bank = InMemoryBank(custody)
    registry.mint(collection, 1, seller)
    bank.credit(seller, cfg.listing_fee)
    bank.credit(alice, 100)
    bank.credit(bob, 100)

    clock = {"now": 1_700_000_000}
    storage = open_storage(ctx) if persist else None
    ledger = AuctionLedger(
        registry,
        bank,
        custody,
        config=cfg,
        storage_manager=storage,
        clock=lambda: clock["now"],
    )
    click.echo("  ✓ Registry, bank and ledger initialized")
    click.echo()

    # Listing
    click.echo("🖼️  Seller lists asset #1 for 7 days...")
    with bank.attached(seller, cfg.listing_fee):
        auction_id = ledger.list_asset(collection, 1, 1, 7, seller, cfg.listing_fee)
    click.echo(f"  ✓ Auction {auction_id} open until {ledger.get_auction(auction_id).end_at}")
    click.echo()

    # Bidding
    click.echo("💸 Alice bids 10, Bob bids 20...")
    with bank.attached(alice, 10):
        ledger.bid(auction_id, alice, 10)
    with bank.attached(bob, 20):
        ledger.bid(auction_id, bob, 20)
    click.echo(f"  ✓ Alice withdrawable: {ledger.withdrawable_balance(auction_id, alice)}")
    click.echo(f"  ✓ Escrow held: {ledger.escrow_balance(auction_id)}")
    click.echo()

    # Withdrawal
    click.echo("↩️  Alice withdraws her refund...")
    refunded = ledger.withdraw(auction_id, alice)
    click.echo(f"  ✓ Refunded {refunded}, Alice balance: {bank.balance_of(alice)}")
    click.echo()

    # Settlement
    click.echo("⚖️  Deadline passes, Bob claims...")
    clock["now"] = ledger.get_auction(auction_id).end_at
    result = ledger.claim_as_winner(auction_id, bob)
    click.echo(f"  ✓ Winner: {bytes_to_hex(result.winner)}")
    click.echo(f"  ✓ Asset owner: {bytes_to_hex(registry.owner_of(collection, 1))}")
    click.echo(f"  ✓ Seller received: {bank.balance_of(seller)}")
    click.echo()

    click.echo("📊 Final Statistics:")
    click.echo(f"  {ledger.stats()}")
    click.echo()
    click.echo("✅ Demo complete!")


# =============================================================================
# Auction Commands
# =============================================================================


@cli.group()
def auctions():
    """Inspect persisted auctions"""
    pass


@auctions.command("list")
@click.pass_context
def auctions_list(ctx):
    """List all auctions"""
    from nftauction.crypto import short_address

    storage = open_storage(ctx)
    records = storage.load_auctions()
    if not records:
        click.echo("No auctions found.")
        return

    for auction in records:
        state = "ended" if auction.ended else "open"
        click.echo(
            f"  #{auction.auction_id}: asset {auction.asset_id} "
            f"seller={short_address(auction.seller)} "
            f"highest_bid={auction.highest_bid} ({state})"
        )


@auctions.command("show")
@click.argument("auction_id", type=int)
@click.pass_context
def auctions_show(ctx, auction_id):
    """Show one auction as JSON"""
    storage = open_storage(ctx)
    auction = storage.load_auction(auction_id)
    if auction is None:
        click.echo(f"❌ Auction {auction_id} not found")
        ctx.exit(1)

    click.echo(json.dumps(auction.to_dict(), indent=2))


# =============================================================================
# Stats Command
# =============================================================================


@cli.command("stats")
@click.pass_context
def stats(ctx):
    """Show ledger statistics"""
    storage = open_storage(ctx)
    records = storage.load_auctions()

    click.echo("Ledger Statistics")
    click.echo("-" * 40)
    click.echo(f"  Auctions: {len(records)}")
    click.echo(f"  Ended: {sum(1 for a in records if a.ended)}")
    click.echo(f"  Escrowed: {sum(a.escrowed for a in records)}")
    click.echo(f"  Collected fees: {storage.get_collected_fees()}")


if __name__ == "__main__":
    cli()
