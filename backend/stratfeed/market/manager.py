"""Live market data stream manager.

Owns at most one upstream WebSocket session at a time, falls back between
credentialed providers on failure, detects silent sessions, and degrades to
the tick simulator when no real feed is available. Consumers only ever see
the subscription interface below.

State machine:
    disconnected -> connecting -> connected | cloud_active
    connected -> silent (stall) -> reconnecting -> connecting ...
    any attempt/session -> error -> reconnecting -> connecting ...
    reconnecting -> disconnected (attempts exhausted) + simulation
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable, Sequence

from .cache import PriceCache
from .config import SIMULATION, StreamConfig
from .interface import ProviderAdapter
from .models import ConnectionStatus, Observation, PriceUpdate
from .simulator import SimulatorSource, TickSimulator

logger = logging.getLogger(__name__)

UpdateHandler = Callable[[str, float, float], None]
StatusHandler = Callable[[ConnectionStatus], None]


class MarketStreamManager:
    """Single stable subscription interface over interchangeable feeds.

    All methods must be called from the thread running the event loop. None
    of them raise on feed failures; failures surface as status transitions.

    Lifecycle:
        manager = create_market_stream()
        manager.on_status_change(show_badge)
        await manager.start()
        manager.subscribe(on_price)
        # ... app runs ...
        await manager.stop()
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        config: StreamConfig | None = None,
        cache: PriceCache | None = None,
        simulator: TickSimulator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or StreamConfig()
        self._adapters = list(adapters)  # Priority order
        self._cache = cache or PriceCache()
        self._clock = clock

        # Insertion-ordered sets of callbacks
        self._handlers: dict[UpdateHandler, None] = {}
        self._status_handlers: dict[StatusHandler, None] = {}
        self._status = ConnectionStatus.DISCONNECTED

        # Bumped whenever a session is abandoned; sessions compare against it
        # before touching any state.
        self._generation = 0
        self._adapter: ProviderAdapter | None = None
        self._provider_name = SIMULATION
        self._session: asyncio.Task | None = None
        self._closing: set[asyncio.Task] = set()  # Cancelled sessions still closing their sockets
        self._retry_handle: asyncio.TimerHandle | None = None
        self._monitor: asyncio.Task | None = None
        self._live = False
        self._attempts = 0
        self._last_message: float | None = None

        sim = simulator or TickSimulator(self._config.symbols, max_tick=self._config.max_tick)
        self._simulation = SimulatorSource(sim, self._publish, interval=self._config.tick_interval)

    # --- Public API ---

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def current_provider(self) -> str:
        """Name of the provider in use, or 'simulation'."""
        return self._provider_name

    @property
    def is_live(self) -> bool:
        return self._live

    @property
    def reconnect_attempts(self) -> int:
        """Opens made in the current connect cycle."""
        return self._attempts

    @property
    def cache(self) -> PriceCache:
        return self._cache

    async def start(self, preferred: str | None = None) -> None:
        """Start stall monitoring and connect to the preferred provider."""
        self.connect_to_live_provider(preferred)

    async def stop(self) -> None:
        """Tear down the session, timers and simulation. Safe to call twice."""
        self._cancel_retry()
        self._drop_session()
        if self._closing:
            await asyncio.wait(set(self._closing))

        if self._monitor and not self._monitor.done():
            self._monitor.cancel()
            try:
                await self._monitor
            except asyncio.CancelledError:
                pass
        self._monitor = None

        self._simulation.stop()
        self._set_status(ConnectionStatus.DISCONNECTED)
        logger.info("Market stream stopped")

    def on_status_change(self, handler: StatusHandler) -> None:
        self._status_handlers[handler] = None

    def subscribe(self, handler: UpdateHandler) -> None:
        """Register handler(symbol, price, tick).

        Real observations carry an absolute price and tick 0.0; simulated ones
        carry price 0.0 and a fractional tick. Starts the simulation when no
        transport is active or being established.
        """
        self._handlers[handler] = None
        if not self._live and not self._connecting() and not self._simulation.running:
            self.start_simulation()

    def unsubscribe(self, handler: UpdateHandler) -> None:
        self._handlers.pop(handler, None)

    def get_cached_price(self, symbol: str) -> PriceUpdate | None:
        return self._cache.get(symbol)

    def get_all_cached_prices(self) -> dict[str, PriceUpdate]:
        return self._cache.get_all()

    def connect_to_live_provider(self, preferred: str | None = None) -> None:
        """Begin a fresh connect cycle.

        Tries the preferred provider if it has a credential, otherwise the
        next credentialed one in priority order, otherwise simulates. Resets
        the attempt counter and abandons any previous session or retry.
        """
        self._ensure_monitor()
        self._cancel_retry()
        self._attempts = 0

        adapter = self._select(preferred or self._config.preferred_provider)
        if adapter is None:
            logger.warning("No API keys configured, starting simulation")
            self._drop_session()
            self._set_status(ConnectionStatus.DISCONNECTED)
            self.start_simulation()
            return
        self._open(adapter)

    def start_simulation(self) -> None:
        """Fall back to simulated ticks. No-op while live or already simulating."""
        if self._live or self._simulation.running:
            return
        self._provider_name = SIMULATION
        self._set_status(ConnectionStatus.DISCONNECTED)
        self._simulation.start()

    # --- Provider selection ---

    def _credentialed(self) -> list[ProviderAdapter]:
        return [a for a in self._adapters if a.has_credential()]

    def _select(self, preferred: str) -> ProviderAdapter | None:
        candidates = self._credentialed()
        for adapter in candidates:
            if adapter.name == preferred:
                return adapter
        return candidates[0] if candidates else None

    def _next_after(self, adapter: ProviderAdapter | None) -> ProviderAdapter | None:
        """Credentialed provider following adapter, wrapping around."""
        candidates = self._credentialed()
        if not candidates:
            return None
        if adapter in candidates:
            return candidates[(candidates.index(adapter) + 1) % len(candidates)]
        return candidates[0]

    # --- Session lifecycle ---

    def _connecting(self) -> bool:
        session_open = self._session is not None and not self._session.done()
        return session_open or self._retry_handle is not None

    def _open(self, adapter: ProviderAdapter) -> None:
        self._drop_session()
        self._adapter = adapter
        self._attempts += 1
        self._set_status(ConnectionStatus.CONNECTING)
        self._session = asyncio.get_running_loop().create_task(
            self._run_session(adapter, self._generation, frozenset(self._closing)),
            name=f"{adapter.name}-session",
        )

    def _drop_session(self) -> None:
        """Invalidate the current session; its task closes the socket."""
        self._generation += 1
        self._live = False
        self._last_message = None
        if self._session and not self._session.done():
            self._session.cancel()
            self._closing.add(self._session)
            self._session.add_done_callback(self._closing.discard)
        self._session = None

    async def _run_session(
        self,
        adapter: ProviderAdapter,
        generation: int,
        superseded: frozenset[asyncio.Task] = frozenset(),
    ) -> None:
        if superseded:
            # At most one socket open: let old sessions finish closing first
            await asyncio.wait(superseded)
            if generation != self._generation:
                return

        try:
            conn = await adapter.connect(self._config.connect_timeout)
        except Exception as e:
            if generation == self._generation:
                logger.warning("%s: connection failed: %s", adapter.name, e)
                self._on_session_lost(error=True)
            return

        try:
            if generation != self._generation:
                return
            for message in adapter.handshake_messages(self._config.symbols):
                await conn.send(json.dumps(message))
            self._on_open(adapter)

            async for raw in conn:
                if generation != self._generation:
                    break
                self._on_frame(adapter, raw)
        except Exception as e:
            # Common failures: abnormal close, handshake rejected (401), network errors
            if generation == self._generation:
                logger.warning("%s: transport error: %s", adapter.name, e)
                self._on_session_lost(error=True)
            return
        finally:
            await conn.close()

        if generation == self._generation:
            logger.warning("%s: connection closed by server", adapter.name)
            self._on_session_lost(error=False)

    def _on_open(self, adapter: ProviderAdapter) -> None:
        self._live = True
        self._attempts = 0
        self._last_message = self._clock()
        self._provider_name = adapter.name
        self._simulation.stop()
        status = ConnectionStatus.CLOUD_ACTIVE if adapter.managed else ConnectionStatus.CONNECTED
        self._set_status(status)
        logger.info("%s: live feed %s for %d symbols", adapter.name, status.value, len(self._config.symbols))

    def _on_frame(self, adapter: ProviderAdapter, raw: str | bytes) -> None:
        self._last_message = self._clock()
        try:
            trades = adapter.parse_message(raw)
        except Exception:
            logger.exception("%s: failed to parse frame", adapter.name)
            return
        for trade in trades:
            update = self._cache.update(
                symbol=trade.symbol,
                price=trade.price,
                change=trade.change,
                change_percent=trade.change_percent,
                timestamp=trade.timestamp,
            )
            self._publish(Observation(symbol=update.symbol, price=update.price))

    def _on_session_lost(self, error: bool) -> None:
        self._live = False
        self._session = None
        if error:
            self._set_status(ConnectionStatus.ERROR)
        self._schedule_reconnect()

    # --- Reconnect / stall timers ---

    def _schedule_reconnect(self) -> None:
        self._cancel_retry()
        if self._attempts >= self._config.max_attempts:
            logger.warning(
                "Giving up on live data after %d attempts, falling back to simulation",
                self._attempts,
            )
            self._set_status(ConnectionStatus.DISCONNECTED)
            self.start_simulation()
            return

        self._set_status(ConnectionStatus.RECONNECTING)
        self._retry_handle = asyncio.get_running_loop().call_later(
            self._config.backoff, self._retry, self._generation
        )

    def _retry(self, generation: int) -> None:
        self._retry_handle = None
        if generation != self._generation or self._live:
            return
        # Alternate to the other credentialed provider before hitting the same one again
        adapter = self._next_after(self._adapter)
        if adapter is None:
            self._set_status(ConnectionStatus.DISCONNECTED)
            self.start_simulation()
            return
        logger.info(
            "Retrying with %s (attempt %d/%d)",
            adapter.name,
            self._attempts + 1,
            self._config.max_attempts,
        )
        self._open(adapter)

    def _cancel_retry(self) -> None:
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None

    def _ensure_monitor(self) -> None:
        if self._monitor is None or self._monitor.done():
            self._monitor = asyncio.get_running_loop().create_task(
                self._monitor_loop(), name="stall-monitor"
            )

    async def _monitor_loop(self) -> None:
        while True:
            await asyncio.sleep(self._config.stall_check_interval)
            try:
                self._check_stall()
            except Exception:
                logger.exception("Stall check failed")

    def _check_stall(self) -> None:
        """Catch open sockets whose feed went quiet without a close or error."""
        if not self._live or self._last_message is None:
            return
        silence = self._clock() - self._last_message
        if silence <= self._config.stall_threshold:
            return
        logger.warning("%s: no data for %.1fs, reconnecting", self._provider_name, silence)
        self._set_status(ConnectionStatus.SILENT)
        self._drop_session()
        self._schedule_reconnect()

    # --- Fan-out ---

    def _publish(self, observation: Observation) -> None:
        """Invoke every handler registered at this moment exactly once."""
        for handler in tuple(self._handlers):
            try:
                handler(observation.symbol, observation.price, observation.tick)
            except Exception:
                logger.exception("Update handler %r failed for %s", handler, observation.symbol)

    def _set_status(self, status: ConnectionStatus) -> None:
        if status == self._status:
            return
        self._status = status
        logger.debug("Connection status: %s", status.value)
        for handler in tuple(self._status_handlers):
            try:
                handler(status)
            except Exception:
                logger.exception("Status handler %r failed", handler)
