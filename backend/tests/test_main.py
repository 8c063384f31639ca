"""Tests for the application factory and its lifespan."""

import asyncio

import pytest

from stratfeed.main import create_app
from stratfeed.market.config import StreamConfig
from stratfeed.market.models import ConnectionStatus


@pytest.mark.asyncio
class TestAppLifespan:
    """Startup and shutdown of the market stream."""

    async def test_simulation_without_providers(self):
        """Test that the board is fed by simulation when no provider is configured."""
        app = create_app(StreamConfig(tick_interval=0.01))
        manager = app.state.market_stream
        board = app.state.price_board

        async with app.router.lifespan_context(app):
            version = board.version
            await asyncio.sleep(0.1)

            assert manager.current_provider == "simulation"
            assert not manager.is_live
            assert board.version > version

        assert manager._simulation.running is False

    async def test_shutdown_detaches_board(self):
        """Test that the board stops changing after shutdown."""
        app = create_app(StreamConfig(tick_interval=0.01))
        board = app.state.price_board

        async with app.router.lifespan_context(app):
            await asyncio.sleep(0.03)

        version = board.version
        await asyncio.sleep(0.05)
        assert board.version == version
        assert app.state.market_stream.status == ConnectionStatus.DISCONNECTED


class TestAppRoutes:
    """Router wiring."""

    def test_routes(self):
        """Test that the stream and health routes are mounted."""
        paths = {route.path for route in create_app(StreamConfig()).routes}
        assert {"/api/stream/prices", "/api/health"} <= paths
