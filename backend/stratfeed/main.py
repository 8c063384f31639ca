"""stratfeed FastAPI application entry point."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .market import PriceBoard, StreamConfig, create_market_stream, create_stream_router

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def create_app(config: StreamConfig | None = None) -> FastAPI:
    """Build the app with its own stream manager and price board."""
    manager = create_market_stream(config)
    board = PriceBoard()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: connect the feed and attach the board. Shutdown: stop the feed."""
        await manager.start()
        board.load_cached(manager.get_all_cached_prices())
        manager.subscribe(board.handle_update)
        logger.info("Market stream started (provider: %s)", manager.current_provider)
        yield
        manager.unsubscribe(board.handle_update)
        await manager.stop()

    app = FastAPI(title="stratfeed", description="Live market data stream", lifespan=lifespan)
    app.state.market_stream = manager
    app.state.price_board = board
    app.include_router(create_stream_router(manager, board))

    @app.get("/api/health")
    async def health():
        return {
            "status": manager.status.value,
            "provider": manager.current_provider,
            "symbols": len(board.snapshot()),
        }

    return app


app = create_app()
