"""
Live simulator: one shared state cell driven by three periodic tasks.

    physics  every 50 ms  -> stats
    history  every 1 s    -> history buffer
    status   every 1 s    -> status line

Every tick reads the current weather and stats through the simulator
instance and publishes a fresh immutable value, so there is nothing to lock
on a single event loop.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
import logging
import math
from typing import Callable

import numpy as np

from .config import SimulatorConfig
from .history import HistoryBuffer, SimulationHistoryPoint
from .monitor import INITIAL_STATUS, OperatingState, operating_state, system_status
from .physics import TurbineParams, TurbineStats, step
from .scenario import FALLBACK_ANALYSIS, FALLBACK_WEATHER, ScenarioClient
from .scene import RenderFrame, render_frame
from .weather import WeatherState, apply_manual_change

logger = logging.getLogger(__name__)

_EPS = 1e-9


class TurbineSimulator:
    def __init__(
        self,
        config: SimulatorConfig | None = None,
        params: TurbineParams | None = None,
        client: ScenarioClient | None = None,
        rng: np.random.Generator | None = None,
        clock: Callable[[], datetime] | None = None,
        weather: WeatherState | None = None,
    ):
        self.config = config or SimulatorConfig()
        self.params = params or TurbineParams()
        self.client = client
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.clock = clock or datetime.now

        self.weather = weather or WeatherState()
        self.stats = TurbineStats()
        self.status = INITIAL_STATUS
        self.history = HistoryBuffer(self.config.history_capacity)

        self._tasks: list[asyncio.Task] = []
        self._elapsed = 0.0
        self._ticks = {"physics": 0, "history": 0, "status": 0}

    # ----------------------------------------------------------------
    # State access
    # ----------------------------------------------------------------

    def set_weather(self, weather: WeatherState) -> None:
        self.weather = weather

    def apply_manual_change(self, **changes) -> WeatherState:
        self.weather = apply_manual_change(self.weather, **changes)
        return self.weather

    def render_frame(self) -> RenderFrame:
        return render_frame(self.stats, self.weather, self.params)

    def visual_pitch(self) -> float:
        """Blade pitch to draw: the storm override wins over the slider."""
        return self.render_frame().pitch

    def operating_state(self) -> OperatingState:
        return operating_state(self.stats)

    # ----------------------------------------------------------------
    # Ticks
    # ----------------------------------------------------------------

    def tick_physics(self) -> TurbineStats:
        self.stats = step(self.stats, self.weather, self.params, self.rng)
        return self.stats

    def tick_history(self) -> SimulationHistoryPoint:
        return self.history.record(self.stats, self.weather, self.clock())

    def tick_status(self) -> str:
        self.status = system_status(self.weather, self.params)
        return self.status

    def _schedule(self) -> list[tuple[str, float, Callable[[], object]]]:
        # Order matters for ticks due at the same instant
        return [
            ("physics", self.config.physics_interval_s, self.tick_physics),
            ("history", self.config.history_interval_s, self.tick_history),
            ("status", self.config.status_interval_s, self.tick_status),
        ]

    def advance(self, seconds: float) -> int:
        """
        Run every tick that falls due within the next `seconds` of simulated
        time, in time order. Returns the number of ticks executed.
        """
        if seconds <= 0:
            return 0
        target = self._elapsed + seconds

        due: list[tuple[float, int, str, Callable[[], object]]] = []
        for order, (name, interval, fn) in enumerate(self._schedule()):
            last = int(math.floor(target / interval + _EPS))
            for k in range(self._ticks[name] + 1, last + 1):
                due.append((k * interval, order, name, fn))
            self._ticks[name] = max(self._ticks[name], last)

        due.sort(key=lambda item: (item[0], item[1]))
        for _, _, _, fn in due:
            fn()

        self._elapsed = target
        return len(due)

    # ----------------------------------------------------------------
    # Periodic tasks
    # ----------------------------------------------------------------

    async def _periodic(self, name: str, interval: float, fn: Callable[[], object]) -> None:
        logger.debug("%s task started (every %.3f s)", name, interval)
        try:
            while True:
                await asyncio.sleep(interval)
                fn()
        finally:
            logger.debug("%s task stopped", name)

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def start(self) -> None:
        """Schedule the periodic tasks on the running event loop."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._periodic(name, interval, fn), name=f"aerogen-{name}")
            for name, interval, fn in self._schedule()
        ]
        logger.info("Simulator started")

    async def stop(self) -> None:
        """Cancel all periodic tasks and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for t in tasks:
            t.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for t, result in zip(tasks, results):
            # CancelledError is a BaseException, so only real tick failures match
            if isinstance(result, Exception):
                logger.error("%s died: %r", t.get_name(), result, exc_info=result)
        if tasks:
            logger.info("Simulator stopped")

    async def run(self) -> None:
        """Run until cancelled."""
        self.start()
        try:
            await asyncio.gather(*self._tasks)
        finally:
            await self.stop()

    async def __aenter__(self) -> "TurbineSimulator":
        self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()

    # ----------------------------------------------------------------
    # AI collaborators
    # ----------------------------------------------------------------

    async def request_scenario(self, prompt: str) -> WeatherState:
        """
        Generate a scenario and make it the current weather. Overlapping
        requests are not deduplicated: whichever completes last wins.
        """
        if self.client is None:
            logger.warning("No scenario client configured; using fallback weather")
            weather = FALLBACK_WEATHER
        else:
            weather = await asyncio.to_thread(self.client.generate_scenario, prompt)
        self.set_weather(weather)
        logger.info("Weather replaced by scenario: %s", weather.description)
        return weather

    async def request_analysis(self) -> str:
        stats, weather = self.stats, self.weather
        if self.client is None:
            return FALLBACK_ANALYSIS
        return await asyncio.to_thread(
            self.client.analyze_efficiency,
            weather.wind_speed,
            int(math.floor(stats.power_output)),
            round(stats.rpm, 1),
        )
