"""Data models for market data."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

# Price value carried by simulated observations: "apply the tick to your last price"
SIMULATED_PRICE = 0.0


class ConnectionStatus(str, Enum):
    """Transport status surfaced to consumers for display."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOUD_ACTIVE = "cloud_active"  # Connected through a managed relay
    SILENT = "silent"
    RECONNECTING = "reconnecting"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Trade:
    """A provider message normalized to the internal shape.

    change / change_percent are None when the provider did not send them. timestamp
    is the time of receipt, not the provider's trade time.
    """

    symbol: str
    price: float
    change: float | None = None
    change_percent: float | None = None
    timestamp: float = field(default_factory=time.time)  # Unix seconds


@dataclass(frozen=True, slots=True)
class Observation:
    """One price observation fanned out to subscribers, real or simulated."""

    symbol: str
    price: float
    tick: float = 0.0


@dataclass(frozen=True, slots=True)
class PriceUpdate:
    """Immutable snapshot of a single symbol's price at a point in time."""

    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    timestamp: float = field(default_factory=time.time)  # Unix seconds

    @property
    def direction(self) -> str:
        """'up', 'down', or 'flat'."""
        if self.change > 0:
            return "up"
        elif self.change < 0:
            return "down"
        return "flat"

    def to_dict(self) -> dict:
        """Serialize for JSON / SSE transmission."""
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change": self.change,
            "change_percent": self.change_percent,
            "timestamp": self.timestamp,
            "direction": self.direction,
        }


def apply_tick(last_price: float, tick: float) -> float:
    """Price after nudging last_price by a fractional tick."""
    return last_price * (1 + tick)


def resolve_price(last_price: float | None, price: float, tick: float) -> float | None:
    """Price a consumer should display after an observation.

    Absolute prices win. Sentinel prices apply the tick to last_price, and
    yield None when there is nothing to apply it to.
    """
    if price > SIMULATED_PRICE:
        return price
    if last_price is None or last_price <= 0:
        return None
    return apply_tick(last_price, tick)
