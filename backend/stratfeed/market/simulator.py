"""Synthetic tick generator used when no real feed is available."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

import numpy as np

from .models import SIMULATED_PRICE, Observation

logger = logging.getLogger(__name__)


class TickSimulator:
    """Random fractional nudges for a fixed instrument universe.

    Each step picks one symbol uniformly and a tick uniformly in
    [-max_tick, max_tick]. Observations carry the SIMULATED_PRICE sentinel, so
    consumers apply the tick to their last known price:

        P(next) = P(last) * (1 + tick)
    """

    def __init__(
        self,
        symbols: Iterable[str],
        max_tick: float = 0.0005,
        seed: int | None = None,
    ) -> None:
        self._symbols: list[str] = list(dict.fromkeys(symbols))
        self._max_tick = max_tick
        self._rng = np.random.default_rng(seed)

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    def step(self) -> Observation | None:
        """Produce one observation, or None for an empty universe."""
        if not self._symbols:
            return None
        symbol = self._symbols[int(self._rng.integers(len(self._symbols)))]
        tick = float(self._rng.uniform(-self._max_tick, self._max_tick))
        return Observation(symbol=symbol, price=SIMULATED_PRICE, tick=tick)


class SimulatorSource:
    """Runs a TickSimulator on a fixed interval and hands each tick to emit().

    start() and stop() are synchronous so the stream manager can flip the
    simulation from timer callbacks; both must run on the event loop thread.
    """

    def __init__(
        self,
        simulator: TickSimulator,
        emit: Callable[[Observation], None],
        interval: float = 1.0,
    ) -> None:
        self._sim = simulator
        self._emit = emit
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run_loop(), name="simulator-loop")
        logger.info(
            "Simulator started: %d symbols, %.1fs interval",
            len(self._sim.symbols),
            self._interval,
        )

    def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            logger.info("Simulator stopped")
        self._task = None

    async def _run_loop(self) -> None:
        """Core loop: sleep, step the simulation, emit."""
        while True:
            await asyncio.sleep(self._interval)
            try:
                observation = self._sim.step()
                if observation is not None:
                    self._emit(observation)
            except Exception:
                logger.exception("Simulator step failed")
