from __future__ import annotations

from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime
import math
from typing import Iterator

import pandas as pd

from .physics import TurbineStats
from .weather import WeatherState


HISTORY_CAPACITY = 30


@dataclass(frozen=True)
class SimulationHistoryPoint:
    time: str           # display label, HH:MM:SS
    power: int          # kW, floored
    wind_speed: float   # m/s


class HistoryBuffer:
    """
    Bounded FIFO of chart samples. Appending past capacity drops the oldest
    point; order is always insertion order.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._points: deque[SimulationHistoryPoint] = deque(maxlen=capacity)

    def append(self, point: SimulationHistoryPoint) -> None:
        self._points.append(point)

    def record(self, stats: TurbineStats, weather: WeatherState, now: datetime | None = None) -> SimulationHistoryPoint:
        now = now or datetime.now()
        point = SimulationHistoryPoint(
            time=now.strftime("%H:%M:%S"),
            power=int(math.floor(stats.power_output)),
            wind_speed=float(weather.wind_speed),
        )
        self.append(point)
        return point

    def points(self) -> list[SimulationHistoryPoint]:
        return list(self._points)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [asdict(pt) for pt in self._points],
            columns=["time", "power", "wind_speed"],
        )

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[SimulationHistoryPoint]:
        return iter(list(self._points))
