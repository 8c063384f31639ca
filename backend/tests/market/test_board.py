"""Tests for PriceBoard."""

import pytest

from stratfeed.market.board import PriceBoard
from stratfeed.market.cache import PriceCache
from stratfeed.market.models import SIMULATED_PRICE
from stratfeed.market.seed_prices import SEED_PRICES


class TestPriceBoard:
    """Applying live prices and simulated ticks to the display board."""

    def test_seeded_from_reference_prices(self):
        """Test that every reference symbol starts at its open price, flat."""
        board = PriceBoard()

        assert set(board.snapshot()) == set(SEED_PRICES)
        update = board.get("AAPL")
        assert update.price == SEED_PRICES["AAPL"]
        assert update.change == 0.0
        assert update.direction == "flat"

    def test_absolute_price_replaces(self):
        """Test that a live price replaces the displayed one."""
        board = PriceBoard({"AAPL": 100.0})
        board.handle_update("AAPL", 101.5, 0.0)

        update = board.get("AAPL")
        assert update.price == 101.5
        assert update.change == 1.5
        assert update.change_percent == 1.5

    def test_tick_applies_to_last_price(self):
        """Test that a simulated tick moves the price by P * (1 + tick)."""
        board = PriceBoard({"AAPL": 200.0})
        board.handle_update("AAPL", SIMULATED_PRICE, 0.0005)

        assert board.get_price("AAPL") == pytest.approx(200.1)

    def test_ticks_compound(self):
        """Test that consecutive ticks build on each other."""
        board = PriceBoard({"AAPL": 100.0})
        board.handle_update("AAPL", SIMULATED_PRICE, 0.01)
        board.handle_update("AAPL", SIMULATED_PRICE, 0.01)

        assert board.get_price("AAPL") == pytest.approx(102.01)

    def test_change_is_relative_to_reference(self):
        """Test that change is measured from the open price, not the last tick."""
        board = PriceBoard({"AAPL": 100.0})
        board.handle_update("AAPL", 110.0, 0.0)
        board.handle_update("AAPL", 95.0, 0.0)

        update = board.get("AAPL")
        assert update.change == -5.0
        assert update.change_percent == -5.0
        assert update.direction == "down"

    def test_tick_for_unknown_symbol_ignored(self):
        """Test that a tick with nothing to apply it to is dropped."""
        board = PriceBoard({"AAPL": 100.0})
        version = board.version
        board.handle_update("ZZZ", SIMULATED_PRICE, 0.0003)

        assert board.get("ZZZ") is None
        assert board.version == version

    def test_first_live_price_becomes_reference(self):
        """Test that an unseen symbol is added flat on its first live price."""
        board = PriceBoard({})
        board.handle_update("NEW", 50.0, 0.0)
        board.handle_update("NEW", 55.0, 0.0)

        update = board.get("NEW")
        assert update.price == 55.0
        assert update.change == 5.0
        assert update.change_percent == 10.0

    def test_version_bumps_on_update(self):
        """Test that each applied update bumps the version."""
        board = PriceBoard({"AAPL": 100.0})
        version = board.version
        board.handle_update("AAPL", 101.0, 0.0)

        assert board.version == version + 1

    def test_snapshot_is_a_copy(self):
        """Test that mutating the snapshot leaves the board alone."""
        board = PriceBoard({"AAPL": 100.0})
        snapshot = board.snapshot()
        snapshot.clear()

        assert board.get("AAPL") is not None

    def test_load_cached(self):
        """Test that a cache snapshot is applied as live prices."""
        cache = PriceCache()
        cache.update("AAPL", 105.0)
        cache.update("NEW", 10.0)
        board = PriceBoard({"AAPL": 100.0})

        board.load_cached(cache.get_all())

        assert board.get("AAPL").change == 5.0
        assert board.get_price("NEW") == 10.0
