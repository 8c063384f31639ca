"""Stream configuration and provider descriptors, read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from .interface import MessageDialect
from .seed_prices import DEFAULT_SYMBOLS

logger = logging.getLogger(__name__)

MASSIVE = "massive"
FINNHUB = "finnhub"
SIMULATION = "simulation"

MASSIVE_WS_URL = "wss://socket.massive.com/stocks"
FINNHUB_WS_URL = "wss://ws.finnhub.io"

MASSIVE_DIALECT = MessageDialect()

# Finnhub sends {"type": "trade", "data": [{"s", "p", "t", "v"}, ...]} and no deltas
FINNHUB_DIALECT = MessageDialect(
    event_fields=("type",),
    trade_events=frozenset({"trade"}),
    quote_events=frozenset(),
    batch_fields=("data",),
    symbol_fields=("s",),
    price_fields=("p",),
    change_fields=(),
    change_percent_fields=(),
)


@dataclass(frozen=True)
class ProviderConfig:
    """Static description of one upstream provider."""

    name: str
    url: str
    api_key: str = ""
    dialect: MessageDialect = field(default_factory=MessageDialect)
    managed: bool = False  # Reached through a relay -> reports cloud_active


@dataclass(frozen=True)
class StreamConfig:
    """Tunables for the stream manager.

    providers is in priority order; the first credentialed one is tried first
    unless a preference is given on connect.
    """

    providers: tuple[ProviderConfig, ...] = ()
    symbols: tuple[str, ...] = DEFAULT_SYMBOLS
    preferred_provider: str = MASSIVE
    max_attempts: int = 10
    backoff: float = 2.0
    stall_threshold: float = 20.0
    stall_check_interval: float = 10.0
    tick_interval: float = 1.0
    max_tick: float = 0.0005  # +/-0.05% per simulated tick
    connect_timeout: float = 10.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> StreamConfig:
        """Build a config from environment variables.

        - MASSIVE_API_KEY / FINNHUB_API_KEY gate whether each provider is tried
        - MARKET_RELAY_URL routes Massive through a managed relay
        - MARKET_* override the tunables; invalid values keep the defaults
        """
        env = os.environ if environ is None else environ
        relay_url = _get(env, "MARKET_RELAY_URL")

        massive = ProviderConfig(
            name=MASSIVE,
            url=relay_url or _get(env, "MASSIVE_WS_URL") or MASSIVE_WS_URL,
            api_key=_get(env, "MASSIVE_API_KEY"),
            dialect=MASSIVE_DIALECT,
            managed=bool(relay_url),
        )
        finnhub = ProviderConfig(
            name=FINNHUB,
            url=_get(env, "FINNHUB_WS_URL") or FINNHUB_WS_URL,
            api_key=_get(env, "FINNHUB_API_KEY"),
            dialect=FINNHUB_DIALECT,
        )

        symbols_raw = _get(env, "MARKET_SYMBOLS")
        symbols = tuple(s.strip().upper() for s in symbols_raw.split(",") if s.strip()) if symbols_raw else ()

        defaults = cls()
        return cls(
            providers=(massive, finnhub),
            symbols=symbols or defaults.symbols,
            preferred_provider=_get(env, "MARKET_PREFERRED_PROVIDER").lower() or defaults.preferred_provider,
            max_attempts=_integer(env, "MARKET_MAX_ATTEMPTS", defaults.max_attempts),
            backoff=_number(env, "MARKET_BACKOFF_SECONDS", defaults.backoff),
            stall_threshold=_number(env, "MARKET_STALL_THRESHOLD", defaults.stall_threshold),
            stall_check_interval=_number(env, "MARKET_STALL_CHECK_INTERVAL", defaults.stall_check_interval),
            tick_interval=_number(env, "MARKET_TICK_INTERVAL", defaults.tick_interval),
            connect_timeout=_number(env, "MARKET_CONNECT_TIMEOUT", defaults.connect_timeout),
        )


def _get(env, key: str) -> str:
    return env.get(key, "").strip()


def _number(env, key: str, default: float) -> float:
    raw = _get(env, key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %s", key, raw, default)
        return default
    return value


def _integer(env, key: str, default: int) -> int:
    raw = _get(env, key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %s", key, raw, default)
        return default
    if value < 1:
        logger.warning("Ignoring %s=%r: must be at least 1, using %s", key, raw, default)
        return default
    return value
