from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


MANUAL_DESCRIPTION = "Manual Configuration"


class TimeOfDay(str, Enum):
    SUNRISE = "sunrise"
    DAY = "day"
    SUNSET = "sunset"
    NIGHT = "night"


@dataclass(frozen=True)
class WeatherState:
    wind_speed: float = 8.0         # m/s
    wind_direction: float = 0.0     # deg
    turbulence: float = 0.1         # 0-1 factor
    temperature: float = 20.0       # Celsius, cosmetic
    blade_pitch: float = 0.0        # deg (0 = full power, 90 = feathered)
    time_of_day: TimeOfDay = TimeOfDay.DAY
    description: str = "Manual Control Active"


@dataclass(frozen=True)
class ControlRange:
    lo: float
    hi: float
    step: float
    unit: str


# Slider ranges of the control panel
CONTROL_RANGES: dict[str, ControlRange] = {
    "wind_speed": ControlRange(0.0, 45.0, 0.5, "m/s"),
    "wind_direction": ControlRange(0.0, 360.0, 1.0, "deg"),
    "turbulence": ControlRange(0.0, 1.0, 0.05, ""),
    "temperature": ControlRange(-20.0, 50.0, 1.0, "C"),
    "blade_pitch": ControlRange(0.0, 90.0, 1.0, "deg"),
}

TIME_OF_DAY_OPTIONS = (TimeOfDay.SUNRISE, TimeOfDay.DAY, TimeOfDay.SUNSET, TimeOfDay.NIGHT)


def apply_manual_change(weather: WeatherState, **changes) -> WeatherState:
    """
    Apply control panel edits.

    Any edit replaces the description with the manual marker, overwriting
    whatever a generated scenario put there. Values are not range-checked.
    """
    unknown = set(changes) - (set(CONTROL_RANGES) | {"time_of_day"})
    if unknown:
        raise TypeError(f"Unknown weather control(s): {sorted(unknown)}")

    if "time_of_day" in changes:
        changes["time_of_day"] = TimeOfDay(changes["time_of_day"])
    for key in CONTROL_RANGES:
        if key in changes:
            changes[key] = float(changes[key])

    return replace(weather, description=MANUAL_DESCRIPTION, **changes)
