"""WebSocket adapters for the Massive and Finnhub real-time feeds."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlencode

from .interface import ProviderAdapter


class MassiveAdapter(ProviderAdapter):
    """Massive stocks socket.

    Authenticates in-band with an ``auth`` message after open, then sends one
    ``subscribe`` message per symbol. Frames arrive as single ``trade`` or
    ``quote`` objects or as ``{"trades": [...]}`` batches.
    """

    def endpoint_url(self) -> str:
        return self._config.url

    def handshake_messages(self, symbols: Iterable[str]) -> list[dict]:
        messages: list[dict] = [{"type": "auth", "apiKey": self._config.api_key}]
        messages.extend({"type": "subscribe", "symbol": s} for s in symbols)
        return messages


class FinnhubAdapter(ProviderAdapter):
    """Finnhub trades socket.

    The token travels as a query parameter; after open the client sends one
    ``subscribe`` message per symbol.
    """

    def endpoint_url(self) -> str:
        url = self._config.url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{urlencode({'token': self._config.api_key})}"

    def handshake_messages(self, symbols: Iterable[str]) -> list[dict]:
        return [{"type": "subscribe", "symbol": s} for s in symbols]
