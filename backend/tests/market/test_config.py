"""Tests for StreamConfig.from_env."""

from stratfeed.market.config import (
    FINNHUB,
    FINNHUB_DIALECT,
    FINNHUB_WS_URL,
    MASSIVE,
    MASSIVE_WS_URL,
    StreamConfig,
)
from stratfeed.market.seed_prices import DEFAULT_SYMBOLS


class TestStreamConfig:
    """Environment parsing."""

    def test_defaults(self):
        """Test the documented defaults with an empty environment."""
        config = StreamConfig.from_env({})

        assert config.max_attempts == 10
        assert config.backoff == 2.0
        assert config.stall_threshold == 20.0
        assert config.stall_check_interval == 10.0
        assert config.tick_interval == 1.0
        assert config.max_tick == 0.0005
        assert config.preferred_provider == MASSIVE
        assert config.symbols == DEFAULT_SYMBOLS

    def test_providers_in_priority_order(self):
        """Test that Massive comes before Finnhub."""
        config = StreamConfig.from_env({})
        massive, finnhub = config.providers

        assert (massive.name, massive.url, massive.api_key) == (MASSIVE, MASSIVE_WS_URL, "")
        assert (finnhub.name, finnhub.url, finnhub.api_key) == (FINNHUB, FINNHUB_WS_URL, "")
        assert finnhub.dialect is FINNHUB_DIALECT
        assert not massive.managed

    def test_keys_are_stripped(self):
        """Test that credentials are trimmed."""
        config = StreamConfig.from_env({"MASSIVE_API_KEY": "  abc  ", "FINNHUB_API_KEY": "def\n"})
        massive, finnhub = config.providers

        assert massive.api_key == "abc"
        assert finnhub.api_key == "def"

    def test_relay_url_marks_massive_managed(self):
        """Test that MARKET_RELAY_URL routes Massive through the relay."""
        config = StreamConfig.from_env({"MARKET_RELAY_URL": "wss://relay.test/feed"})
        massive = config.providers[0]

        assert massive.url == "wss://relay.test/feed"
        assert massive.managed

    def test_overrides(self):
        """Test that tunables and symbols can be overridden."""
        config = StreamConfig.from_env(
            {
                "MARKET_MAX_ATTEMPTS": "3",
                "MARKET_BACKOFF_SECONDS": "0.5",
                "MARKET_STALL_THRESHOLD": "30",
                "MARKET_STALL_CHECK_INTERVAL": "5",
                "MARKET_TICK_INTERVAL": "0.25",
                "MARKET_SYMBOLS": "aapl, msft,,spy ",
                "MARKET_PREFERRED_PROVIDER": "Finnhub",
            }
        )

        assert config.max_attempts == 3
        assert config.backoff == 0.5
        assert config.stall_threshold == 30.0
        assert config.stall_check_interval == 5.0
        assert config.tick_interval == 0.25
        assert config.symbols == ("AAPL", "MSFT", "SPY")
        assert config.preferred_provider == FINNHUB

    def test_invalid_numbers_fall_back(self):
        """Test that garbage or non-positive values keep the defaults."""
        config = StreamConfig.from_env({"MARKET_BACKOFF_SECONDS": "soon", "MARKET_MAX_ATTEMPTS": "-1"})

        assert config.backoff == 2.0
        assert config.max_attempts == 10

    def test_max_attempts_must_be_whole_and_positive(self):
        """Test that fractional or zero attempt budgets keep the default."""
        for raw in ("0.5", "0", "2.0"):
            config = StreamConfig.from_env({"MARKET_MAX_ATTEMPTS": raw})
            assert config.max_attempts == 10, raw

        assert StreamConfig.from_env({"MARKET_MAX_ATTEMPTS": " 4 "}).max_attempts == 4
