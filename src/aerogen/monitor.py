from __future__ import annotations

from enum import Enum

from .physics import TurbineParams, TurbineStats
from .weather import WeatherState


INITIAL_STATUS = "Systems Nominal."
HIGH_WIND_LIMIT = 20.0      # m/s
MANUAL_PITCH_LIMIT = 10.0   # deg
GENERATING_RPM = 0.5


class OperatingState(str, Enum):
    GENERATING = "GENERATING"
    SAFETY_STOP = "SAFETY STOP"
    IDLE = "IDLE"


def _fmt_pitch(pitch: float) -> str:
    # Whole degrees print without a decimal point, anything else in full
    pitch = float(pitch)
    return str(int(pitch)) if pitch.is_integer() else repr(pitch)


def system_status(weather: WeatherState, p: TurbineParams | None = None) -> str:
    """
    Human-readable status line. First matching rule wins; no state is kept
    between calls.
    """
    p = p or TurbineParams()
    v = weather.wind_speed

    if v > p.storm_limit:
        return "CRITICAL WARNING: Storm winds detected. Automatic safety feathering engaged. Turbine halted."
    if v > HIGH_WIND_LIMIT:
        return "CAUTION: High wind speeds. Monitor vibration levels."
    if weather.blade_pitch > MANUAL_PITCH_LIMIT:
        return f"Manual pitch adjustment active ({_fmt_pitch(weather.blade_pitch)}°). Efficiency reduced."
    if v < p.cut_in_speed:
        return "Awaiting cut-in wind speed..."
    if v >= p.rated_speed:
        return "Operating at rated capacity. Optimal power generation."
    return "Optimal operation conditions. Tracking wind vector."


def operating_state(stats: TurbineStats) -> OperatingState:
    if stats.rpm > GENERATING_RPM:
        return OperatingState.GENERATING
    if stats.is_feathered:
        return OperatingState.SAFETY_STOP
    return OperatingState.IDLE
