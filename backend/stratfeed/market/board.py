"""Consumer-side price board fed by the stream manager."""

from __future__ import annotations

from .cache import PriceCache
from .models import PriceUpdate, resolve_price
from .seed_prices import SEED_PRICES


class PriceBoard:
    """Display prices for every symbol, relative to a session open price.

    Register handle_update with MarketStreamManager.subscribe(). Absolute
    prices from a live feed replace the displayed price; simulated ticks
    nudge it. Ticks for a symbol with no price yet are ignored.
    """

    def __init__(self, reference_prices: dict[str, float] | None = None) -> None:
        self._reference = dict(SEED_PRICES if reference_prices is None else reference_prices)
        self._prices = PriceCache()
        for symbol, price in self._reference.items():
            self._prices.update(symbol, price, change=0.0, change_percent=0.0)

    def handle_update(self, symbol: str, price: float, tick: float) -> None:
        new_price = resolve_price(self._prices.get_price(symbol), price, tick)
        if new_price is None:
            return
        # First sighting of an unknown symbol becomes its reference
        reference = self._reference.setdefault(symbol, new_price)
        change = new_price - reference
        self._prices.update(
            symbol,
            new_price,
            change=round(change, 4),
            change_percent=round(change / reference * 100, 4) if reference else 0.0,
        )

    def load_cached(self, prices: dict[str, PriceUpdate]) -> None:
        """Apply a snapshot of last known live prices, e.g. from the manager cache."""
        for symbol, update in prices.items():
            self.handle_update(symbol, update.price, 0.0)

    def get(self, symbol: str) -> PriceUpdate | None:
        return self._prices.get(symbol)

    def get_price(self, symbol: str) -> float | None:
        return self._prices.get_price(symbol)

    def snapshot(self) -> dict[str, PriceUpdate]:
        return self._prices.get_all()

    @property
    def version(self) -> int:
        """Bumped on every change. Useful for SSE change detection."""
        return self._prices.version
