"""SSE streaming endpoint for live price updates."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from .board import PriceBoard
from .manager import MarketStreamManager

logger = logging.getLogger(__name__)


def create_stream_router(manager: MarketStreamManager, board: PriceBoard) -> APIRouter:
    """Router exposing the board over SSE. Built per app so nothing is global."""
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/prices")
    async def stream_prices(request: Request) -> StreamingResponse:
        """Board and connection status, pushed whenever either changes.

        Each EventSource message looks like:

            data: {"status": "connected", "provider": "massive",
                   "prices": {"AAPL": {"symbol": "AAPL", "price": 190.50, ...}}}
        """
        return StreamingResponse(
            _generate_events(manager, board, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


async def _generate_events(
    manager: MarketStreamManager,
    board: PriceBoard,
    request: Request,
    interval: float = 0.5,
) -> AsyncGenerator[str, None]:
    """Poll board version and manager status every `interval` seconds.

    A snapshot is sent on connect and after every change; the loop ends once
    the client goes away.
    """
    # EventSource reconnect delay, in ms
    yield "retry: 1000\n\n"

    last_state = None
    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    try:
        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break

            state = (board.version, manager.status)
            if state != last_state:
                last_state = state
                data = {
                    "status": manager.status.value,
                    "provider": manager.current_provider,
                    "prices": {symbol: update.to_dict() for symbol, update in board.snapshot().items()},
                }
                yield f"data: {json.dumps(data)}\n\n"

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
