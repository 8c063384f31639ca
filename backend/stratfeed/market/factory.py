"""Factory for creating the market stream manager."""

from __future__ import annotations

import logging

from .cache import PriceCache
from .config import FINNHUB, MASSIVE, StreamConfig
from .interface import ProviderAdapter
from .manager import MarketStreamManager
from .providers import FinnhubAdapter, MassiveAdapter

logger = logging.getLogger(__name__)

ADAPTERS: dict[str, type[ProviderAdapter]] = {
    MASSIVE: MassiveAdapter,
    FINNHUB: FinnhubAdapter,
}


def create_market_stream(
    config: StreamConfig | None = None,
    price_cache: PriceCache | None = None,
) -> MarketStreamManager:
    """Create a stream manager wired to every configured provider.

    - MASSIVE_API_KEY and/or FINNHUB_API_KEY set -> live feed, in priority order
    - Neither set -> the manager runs the tick simulator

    Returns an unstarted manager. Caller must await manager.start().
    """
    config = config or StreamConfig.from_env()

    adapters: list[ProviderAdapter] = []
    for provider in config.providers:
        adapter_cls = ADAPTERS.get(provider.name)
        if adapter_cls is None:
            logger.warning("Unknown market data provider %r, skipping", provider.name)
            continue
        adapter = adapter_cls(provider)
        if adapter.has_credential():
            logger.info("Market data provider: %s (%s)", provider.name, provider.url)
        else:
            logger.info("Market data provider %s skipped: no API key", provider.name)
        adapters.append(adapter)

    if not any(a.has_credential() for a in adapters):
        logger.info("Market data source: tick simulator")

    return MarketStreamManager(adapters, config=config, cache=price_cache)
