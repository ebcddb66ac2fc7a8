from __future__ import annotations

from dataclasses import dataclass
import logging
import math

import numpy as np

from .weather import WeatherState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurbineParams:
    cut_in_speed: float = 3.5       # m/s
    rated_speed: float = 12.0       # m/s
    storm_limit: float = 30.0       # m/s, auto-feather trigger
    rated_power: float = 2000.0     # kW
    max_rpm: float = 45.0
    power_cap_factor: float = 1.1   # noisy power is clamped to 110% of rated
    inertia_factor: float = 0.08    # per-tick lag coefficient
    tick_hz: float = 20.0
    feather_pitch: float = 90.0     # deg
    efficiency_cutoff_pitch: float = 45.0
    eff_min: float = 30.0           # % at cut-in
    eff_max: float = 45.0           # % at rated
    noise_kw: float = 100.0         # noise half-width per unit turbulence

    @property
    def power_cap(self) -> float:
        return self.rated_power * self.power_cap_factor


@dataclass(frozen=True)
class TurbineStats:
    rpm: float = 0.0
    power_output: float = 0.0       # kW
    efficiency: float = 0.0         # %
    total_energy: float = 0.0       # kWh
    is_feathered: bool = False


@dataclass(frozen=True)
class OperatingPoint:
    """Noise-free target of one physics tick."""
    effective_pitch: float
    pitch_factor: float
    power: float
    target_rpm: float
    efficiency: float
    is_feathered: bool


def effective_pitch(weather: WeatherState, p: TurbineParams) -> tuple[float, bool]:
    """
    Returns: (pitch_deg, is_feathered)
    Storm winds override the manual pitch.
    """
    if weather.wind_speed > p.storm_limit:
        return p.feather_pitch, True
    return float(weather.blade_pitch), False


def pitch_factor(pitch_deg: float) -> float:
    # 0 deg -> 1.0 (full lift), 90 deg -> 0.0 (feathered)
    factor = math.cos(math.radians(pitch_deg))
    # cos(pi/2) is ~6e-17, not 0; a feathered rotor must have no target at all
    return factor if factor > 1e-12 else 0.0


def base_power_curve(wind_speed: float, p: TurbineParams) -> tuple[float, float, float]:
    """
    Power curve before pitch is applied.
    Returns: (power_kW, target_rpm, efficiency_pct)
    """
    v = float(wind_speed)
    if v < p.cut_in_speed:
        return 0.0, 0.0, 0.0
    if v >= p.rated_speed:
        return p.rated_power, p.max_rpm, p.eff_max

    ratio = (v - p.cut_in_speed) / (p.rated_speed - p.cut_in_speed)
    power = p.rated_power * ratio ** 3
    target_rpm = p.max_rpm * ratio
    eff = p.eff_min + (p.eff_max - p.eff_min) * ratio
    return power, target_rpm, eff


def target_operating_point(weather: WeatherState, p: TurbineParams) -> OperatingPoint:
    pitch, feathered = effective_pitch(weather, p)
    factor = pitch_factor(pitch)

    power, target_rpm, eff = base_power_curve(weather.wind_speed, p)
    power *= factor
    target_rpm *= factor

    # Efficiency readout is meaningless once the blades are mostly feathered
    if pitch > p.efficiency_cutoff_pitch:
        eff = 0.0

    return OperatingPoint(
        effective_pitch=pitch,
        pitch_factor=factor,
        power=power,
        target_rpm=target_rpm,
        efficiency=eff,
        is_feathered=feathered,
    )


def step(
    prev: TurbineStats,
    weather: WeatherState,
    p: TurbineParams | None = None,
    rng: np.random.Generator | None = None,
) -> TurbineStats:
    """
    Advance the turbine by one tick (1 / p.tick_hz seconds).

    Turbulence only widens the uniform noise band on power; rotor speed
    follows the noise-free target through a first-order lag.
    """
    p = p or TurbineParams()
    op = target_operating_point(weather, p)

    power = op.power
    if op.target_rpm > 0.0:
        if rng is None:
            rng = np.random.default_rng()
        noise = rng.uniform(-1.0, 1.0) * weather.turbulence * p.noise_kw
        power = float(np.clip(power + noise, 0.0, p.power_cap))

    rpm = prev.rpm + (op.target_rpm - prev.rpm) * p.inertia_factor
    energy = prev.total_energy + power / 3600.0 / p.tick_hz

    if op.is_feathered and not prev.is_feathered:
        logger.info("Storm limit exceeded (%.1f m/s): auto-feather engaged", weather.wind_speed)
    elif prev.is_feathered and not op.is_feathered:
        logger.info("Wind back below storm limit: auto-feather released")

    return TurbineStats(
        rpm=rpm,
        power_output=power,
        efficiency=op.efficiency,
        total_energy=energy,
        is_feathered=op.is_feathered,
    )
