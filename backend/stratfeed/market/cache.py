"""In-memory last-known-price cache."""

from __future__ import annotations

import time

from .models import PriceUpdate


class PriceCache:
    """In-memory cache of the latest price for each symbol.

    Confined to the event loop that owns the stream manager, so no locking.

    Writer: MarketStreamManager, on receipt of a provider message.
    Readers: subscribers, the price board, the SSE endpoint.
    """

    def __init__(self) -> None:
        self._prices: dict[str, PriceUpdate] = {}
        self._version: int = 0  # Monotonically increasing; bumped on every update

    def update(
        self,
        symbol: str,
        price: float,
        change: float | None = None,
        change_percent: float | None = None,
        timestamp: float | None = None,
    ) -> PriceUpdate:
        """Record a new price for a symbol. Returns the created PriceUpdate.

        Missing change values are derived from the previously cached price.
        If this is the first update for the symbol, the derived change is 0.
        """
        ts = timestamp or time.time()
        prev = self._prices.get(symbol)
        previous_price = prev.price if prev else price

        if change is None:
            change = round(price - previous_price, 4)
        if change_percent is None:
            change_percent = (
                round((price - previous_price) / previous_price * 100, 4) if previous_price > 0 else 0.0
            )

        update = PriceUpdate(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            timestamp=ts,
        )
        self._prices[symbol] = update
        self._version += 1
        return update

    def get(self, symbol: str) -> PriceUpdate | None:
        """Get the latest price for a single symbol, or None if unknown."""
        return self._prices.get(symbol)

    def get_all(self) -> dict[str, PriceUpdate]:
        """Snapshot of all current prices. Returns a shallow copy."""
        return dict(self._prices)

    def get_price(self, symbol: str) -> float | None:
        """Convenience: get just the price float, or None."""
        update = self.get(symbol)
        return update.price if update else None

    @property
    def version(self) -> int:
        """Current version counter. Useful for SSE change detection."""
        return self._version
