"""
CLI commands driven through click's CliRunner.
"""

import json

import pytest
from click.testing import CliRunner

from nftauction.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "data")


@pytest.fixture
def persisted_demo(runner, data_dir):
    """Data directory holding the demo auction."""
    result = runner.invoke(cli, ["--data-dir", data_dir, "demo", "--persist"])
    assert result.exit_code == 0, result.output
    return data_dir


class TestDemo:
    """Tests for the demo command."""

    def test_demo_runs(self, runner):
        result = runner.invoke(cli, ["demo"])

        assert result.exit_code == 0, result.output
        assert "Refunded 10" in result.output
        assert "Seller received: 20" in result.output
        assert "Demo complete!" in result.output


class TestAuctionCommands:
    """Tests for reading persisted auctions."""

    def test_list_empty(self, runner, data_dir):
        result = runner.invoke(cli, ["--data-dir", data_dir, "auctions", "list"])

        assert result.exit_code == 0
        assert "No auctions found." in result.output

    def test_list(self, runner, persisted_demo):
        result = runner.invoke(cli, ["--data-dir", persisted_demo, "auctions", "list"])

        assert result.exit_code == 0
        assert "#0: asset 1" in result.output
        assert "highest_bid=20 (ended)" in result.output

    def test_show(self, runner, persisted_demo):
        result = runner.invoke(cli, ["--data-dir", persisted_demo, "auctions", "show", "0"])

        assert result.exit_code == 0
        record = json.loads(result.output)
        assert record["auction_id"] == 0
        assert record["ended"] is True
        assert record["highest_bid"] == 20
        assert record["settled_by"] == "winner"
        assert record["withdrawable"] == {}

    def test_show_missing(self, runner, data_dir):
        result = runner.invoke(cli, ["--data-dir", data_dir, "auctions", "show", "5"])

        assert result.exit_code == 1
        assert "Auction 5 not found" in result.output


class TestStats:
    """Tests for the stats command."""

    def test_stats(self, runner, persisted_demo):
        result = runner.invoke(cli, ["--data-dir", persisted_demo, "stats"])

        assert result.exit_code == 0
        assert "Auctions: 1" in result.output
        assert "Ended: 1" in result.output
        assert "Escrowed: 0" in result.output
        assert "Collected fees: 100" in result.output

    def test_env_file_listing_fee(self, runner, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(f"NFTAUCTION_LISTING_FEE=7\nNFTAUCTION_DATA_DIR={tmp_path / 'env-data'}\n")

        result = runner.invoke(cli, ["--env-file", str(env_file), "demo", "--persist"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["--env-file", str(env_file), "stats"])
        assert "Collected fees: 7" in result.output
