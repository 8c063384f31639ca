"""Fixtures for market data tests.

WebSocket transports are replaced by in-memory fakes handed to the adapters
through their ``connector`` parameter, so no test touches the network.
"""

import asyncio
import json

import pytest

_CLOSE = object()


class FakeTransport:
    """Stands in for a websockets client connection."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.closed = False
        self._frames: asyncio.Queue = asyncio.Queue()

    def push(self, frame) -> None:
        """Deliver a frame. Dicts and lists are JSON-encoded."""
        if isinstance(frame, (dict, list)):
            frame = json.dumps(frame)
        self._frames.put_nowait(frame)

    def fail(self, error: BaseException) -> None:
        """Make the next receive raise, like an abnormal close."""
        self._frames.put_nowait(error)

    def close_cleanly(self) -> None:
        """End iteration, like a normal close from the server."""
        self._frames.put_nowait(_CLOSE)

    async def send(self, data: str) -> None:
        self.sent.append(json.loads(data))

    async def close(self) -> None:
        self.closed = True

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._frames.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeConnector:
    """Async connector recording every open; optionally failing each one."""

    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.urls: list[str] = []
        self.transports: list[FakeTransport] = []

    async def __call__(self, url: str, **kwargs) -> FakeTransport:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        transport = FakeTransport()
        self.transports.append(transport)
        return transport

    @property
    def calls(self) -> int:
        return len(self.urls)

    @property
    def latest(self) -> FakeTransport:
        return self.transports[-1]


@pytest.fixture
def connector() -> FakeConnector:
    """A connector whose opens always succeed."""
    return FakeConnector()


@pytest.fixture
def failing_connector() -> FakeConnector:
    """A connector whose opens always fail with a network error."""
    return FakeConnector(error=OSError("connection refused"))


@pytest.fixture
def other_connector() -> FakeConnector:
    """A second, independent connector for two-provider scenarios."""
    return FakeConnector()
