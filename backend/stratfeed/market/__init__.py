"""Market data subsystem for stratfeed.

Public API:
    MarketStreamManager  - Live feed with provider fallback, stall detection
                           and simulation; the only thing consumers talk to
    create_market_stream - Factory that wires providers from the environment
    StreamConfig         - Tunables and provider descriptors
    ConnectionStatus     - Status values reported to on_status_change handlers
    PriceUpdate          - Immutable cached price snapshot
    PriceCache           - In-memory last-known-price store
    PriceBoard           - Consumer-side board applying live prices and ticks
    ProviderAdapter      - Abstract interface for WebSocket providers
    create_stream_router - FastAPI router factory for SSE endpoint
"""

from .board import PriceBoard
from .cache import PriceCache
from .config import ProviderConfig, StreamConfig
from .factory import create_market_stream
from .interface import MessageDialect, ProviderAdapter
from .manager import MarketStreamManager
from .models import ConnectionStatus, PriceUpdate, resolve_price
from .stream import create_stream_router

__all__ = [
    "ConnectionStatus",
    "MarketStreamManager",
    "MessageDialect",
    "PriceBoard",
    "PriceCache",
    "PriceUpdate",
    "ProviderAdapter",
    "ProviderConfig",
    "StreamConfig",
    "create_market_stream",
    "create_stream_router",
    "resolve_price",
]
