"""
Weather schedules for offline runs.

A profile maps simulated time (s) to the full WeatherState the physics tick
sees at that instant, so gusts can move turbulence, direction and time of
day along with wind speed.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Protocol, runtime_checkable
import bisect
import math

from .weather import TimeOfDay, WeatherState


@runtime_checkable
class WeatherProfile(Protocol):
    def __call__(self, t: float) -> WeatherState: ...


def _lerp(a: float, b: float, alpha: float) -> float:
    return a + alpha * (b - a)


@dataclass(frozen=True)
class SteadyWeather:
    weather: WeatherState = field(default_factory=WeatherState)

    def __call__(self, t: float) -> WeatherState:
        return self.weather


@dataclass(frozen=True)
class StormFront:
    """
    Conditions ahead of a front until `arrival_s`, then wind and turbulence
    ramp to their peaks over `ramp_s` (0 = instant) while the wind veers.
    """
    before: WeatherState = field(
        default_factory=lambda: WeatherState(wind_speed=14.0, turbulence=0.1, description="Ahead of the front")
    )
    peak_speed: float = 34.0
    peak_turbulence: float = 0.6
    veer_deg: float = 45.0
    arrival_s: float = 10.0
    ramp_s: float = 0.0
    description: str = "Storm front"

    def __call__(self, t: float) -> WeatherState:
        if t < self.arrival_s:
            return self.before
        alpha = 1.0 if self.ramp_s <= 0 else min(1.0, (t - self.arrival_s) / self.ramp_s)
        b = self.before
        return replace(
            b,
            wind_speed=_lerp(b.wind_speed, self.peak_speed, alpha),
            turbulence=_lerp(b.turbulence, self.peak_turbulence, alpha),
            wind_direction=(b.wind_direction + alpha * self.veer_deg) % 360.0,
            description=self.description,
        )


@dataclass(frozen=True)
class DiurnalCycle:
    """
    Compressed day: wind and temperature swing sinusoidally over `period_s`
    and the sky walks through sunrise, day, sunset and night.
    """
    base: WeatherState = field(default_factory=WeatherState)
    wind_amp: float = 4.0           # m/s around base.wind_speed
    temperature_amp: float = 6.0    # C around base.temperature
    period_s: float = 120.0

    def phase(self, t: float) -> float:
        return (t % self.period_s) / self.period_s

    def time_of_day(self, t: float) -> TimeOfDay:
        ph = self.phase(t)
        if ph < 0.1:
            return TimeOfDay.SUNRISE
        if ph < 0.45:
            return TimeOfDay.DAY
        if ph < 0.55:
            return TimeOfDay.SUNSET
        return TimeOfDay.NIGHT

    def __call__(self, t: float) -> WeatherState:
        s = math.sin(2.0 * math.pi * self.phase(t))
        return replace(
            self.base,
            # Afternoon sea breeze; the anemometer never reads negative
            wind_speed=max(0.0, self.base.wind_speed + self.wind_amp * s),
            temperature=self.base.temperature + self.temperature_amp * s,
            time_of_day=self.time_of_day(t),
        )


@dataclass(frozen=True)
class ScenarioSequence:
    """
    Piecewise-constant replay of weather records, e.g. a list of generated
    scenarios. Each record holds from its start time until the next one;
    before the first start the first record applies.
    """
    steps: tuple[tuple[float, WeatherState], ...]

    def __post_init__(self):
        if not self.steps:
            raise ValueError("ScenarioSequence needs at least one step")
        starts = [s for s, _ in self.steps]
        if starts != sorted(starts):
            raise ValueError("ScenarioSequence steps must be ordered by start time")

    def __call__(self, t: float) -> WeatherState:
        starts = [s for s, _ in self.steps]
        i = max(0, bisect.bisect_right(starts, t) - 1)
        return self.steps[i][1]
