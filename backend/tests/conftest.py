"""Pytest configuration and fixtures."""

import pytest

_MARKET_ENV = (
    "MASSIVE_API_KEY",
    "FINNHUB_API_KEY",
    "MASSIVE_WS_URL",
    "FINNHUB_WS_URL",
    "MARKET_RELAY_URL",
    "MARKET_PREFERRED_PROVIDER",
    "MARKET_SYMBOLS",
)


@pytest.fixture(autouse=True)
def isolated_market_env(monkeypatch):
    """Keep real provider keys in the developer's shell out of the tests."""
    for key in _MARKET_ENV:
        monkeypatch.delenv(key, raising=False)
