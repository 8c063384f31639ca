"""Abstract interface for real-time market data providers."""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import websockets

from .models import Trade

if TYPE_CHECKING:
    from .config import ProviderConfig

logger = logging.getLogger(__name__)

# Opens a transport: connector(url, open_timeout=...) -> connection
Connector = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class MessageDialect:
    """Field names a provider uses on the wire.

    Each logical field lists its aliases in lookup order. A frame is an
    envelope holding a batch array of records, a single record whose
    discriminator (under any alias) names a trade or quote, or a JSON array of
    either. Records are stamped with the time they are received.
    """

    event_fields: tuple[str, ...] = ("type", "event", "ev")
    trade_events: frozenset[str] = frozenset({"trade", "T"})
    quote_events: frozenset[str] = frozenset({"quote", "Q"})
    batch_fields: tuple[str, ...] = ("trades", "data")
    symbol_fields: tuple[str, ...] = ("symbol", "s", "sym")
    price_fields: tuple[str, ...] = ("price", "p", "last")
    change_fields: tuple[str, ...] = ("change", "d")
    change_percent_fields: tuple[str, ...] = ("changePercent", "dp")

    @property
    def price_events(self) -> frozenset[str]:
        return self.trade_events | self.quote_events

    def is_price_event(self, record: dict) -> bool:
        """True if any discriminator alias names a trade or quote."""
        for name in self.event_fields:
            event = record.get(name)
            if isinstance(event, str) and event in self.price_events:
                return True
        return False

    def normalize(self, payload: Any) -> list[Trade]:
        """Turn a decoded frame into normalized trades, skipping bad records."""
        if isinstance(payload, list):
            trades: list[Trade] = []
            for item in payload:
                trades.extend(self.normalize(item))
            return trades
        if not isinstance(payload, dict):
            return []

        batch = _first(payload, self.batch_fields)
        if isinstance(batch, list):
            records: Iterable[Any] = batch
        elif self.is_price_event(payload):
            records = [payload]
        else:
            # Auth acks, status notices, pings
            return []

        trades = []
        for record in records:
            trade = self.normalize_record(record)
            if trade is not None:
                trades.append(trade)
        return trades

    def normalize_record(self, record: Any) -> Trade | None:
        """Normalize one record, or None if it lacks a symbol or a usable price."""
        if not isinstance(record, dict):
            return None
        symbol = _first(record, self.symbol_fields)
        price = _to_float(_first(record, self.price_fields))
        if not isinstance(symbol, str) or not symbol.strip() or price is None or price <= 0:
            logger.debug("Skipping record without symbol/price: %r", record)
            return None

        return Trade(
            symbol=symbol.strip().upper(),
            price=price,
            change=_to_float(_first(record, self.change_fields)),
            change_percent=_to_float(_first(record, self.change_percent_fields)),
        )


class ProviderAdapter(ABC):
    """Contract for real-time WebSocket providers.

    The stream manager never branches on provider type; it only opens a
    transport, sends the handshake, and feeds raw frames to parse_message().

    Lifecycle driven by the manager:
        conn = await adapter.connect(timeout)
        for message in adapter.handshake_messages(symbols):
            await conn.send(json.dumps(message))
        async for frame in conn:
            trades = adapter.parse_message(frame)
    """

    # Providers that need no secret override this
    requires_credential: bool = True

    def __init__(self, config: ProviderConfig, connector: Connector | None = None) -> None:
        self._config = config
        self._connector = connector or websockets.connect

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def managed(self) -> bool:
        """True when connecting through a relay rather than the upstream itself."""
        return self._config.managed

    @property
    def dialect(self) -> MessageDialect:
        return self._config.dialect

    def has_credential(self) -> bool:
        """Whether this provider may be attempted at all."""
        return bool(self._config.api_key) or not self.requires_credential

    async def connect(self, timeout: float) -> Any:
        """Open the transport. Raises on failure; the manager handles it."""
        logger.info("%s: connecting to %s", self.name, self._config.url)
        return await self._connector(self.endpoint_url(), open_timeout=timeout)

    def parse_message(self, raw: str | bytes) -> list[Trade]:
        """Decode one frame. Unparseable frames are logged and dropped."""
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("%s: dropping unparseable frame: %s", self.name, e)
            return []
        return self.dialect.normalize(payload)

    @abstractmethod
    def endpoint_url(self) -> str:
        """Full URL to open, including any credential query parameters."""

    @abstractmethod
    def handshake_messages(self, symbols: Iterable[str]) -> list[dict]:
        """Messages to send right after open: auth (if any) and subscriptions."""


def _first(record: dict, fields: Iterable[str]) -> Any:
    """Value of the first alias that is present and not None."""
    for name in fields:
        value = record.get(name)
        if value is not None:
            return value
    return None


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
