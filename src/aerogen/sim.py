from __future__ import annotations

from dataclasses import dataclass
import numpy as np
import pandas as pd

from .physics import TurbineParams, TurbineStats, step, target_operating_point
from .profiles import WeatherProfile
from .weather import WeatherState


# =============================
# Offline profile run
# =============================

@dataclass(frozen=True)
class ProfileSimConfig:
    t_end: float = 30.0
    seed: int | None = 0


@dataclass(frozen=True)
class SimResult:
    t: np.ndarray
    v_wind: np.ndarray
    turbulence: np.ndarray
    rpm: np.ndarray
    power: np.ndarray
    efficiency: np.ndarray
    total_energy: np.ndarray
    is_feathered: np.ndarray

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "t": self.t,
            "v_wind": self.v_wind,
            "turbulence": self.turbulence,
            "rpm": self.rpm,
            "power_kW": self.power,
            "efficiency_pct": self.efficiency,
            "energy_kWh": self.total_energy,
            "feathered": self.is_feathered,
        })


def run_profile_sim(
    profile: WeatherProfile,
    p: TurbineParams | None = None,
    cfg: ProfileSimConfig | None = None,
) -> SimResult:
    """
    Drive the physics tick at its native rate with the weather the profile
    prescribes at each tick time.
    """
    p = p or TurbineParams()
    cfg = cfg or ProfileSimConfig()
    rng = np.random.default_rng(cfg.seed)

    dt = 1.0 / p.tick_hz
    n = int(round(cfg.t_end / dt)) + 1
    t = np.arange(n, dtype=float) * dt

    v_arr = np.zeros(n)
    turb = np.zeros(n)
    rpm = np.zeros(n)
    power = np.zeros(n)
    eff = np.zeros(n)
    energy = np.zeros(n)
    feathered = np.zeros(n, dtype=bool)

    stats = TurbineStats()
    for k in range(n):
        weather = profile(float(t[k]))
        stats = step(stats, weather, p, rng)

        v_arr[k] = weather.wind_speed
        turb[k] = weather.turbulence
        rpm[k] = stats.rpm
        power[k] = stats.power_output
        eff[k] = stats.efficiency
        energy[k] = stats.total_energy
        feathered[k] = stats.is_feathered

    return SimResult(
        t=t,
        v_wind=v_arr,
        turbulence=turb,
        rpm=rpm,
        power=power,
        efficiency=eff,
        total_energy=energy,
        is_feathered=feathered,
    )


# =============================
# Steady-state power curve
# =============================

def power_curve_sweep(speeds, pitch: float = 0.0, p: TurbineParams | None = None) -> pd.DataFrame:
    """Noise-free target power / rpm / efficiency across wind speeds."""
    p = p or TurbineParams()
    rows = []
    for v in np.asarray(speeds, dtype=float):
        op = target_operating_point(WeatherState(wind_speed=float(v), blade_pitch=pitch, turbulence=0.0), p)
        rows.append({
            "v_wind_mps": float(v),
            "power_kW": op.power,
            "target_rpm": op.target_rpm,
            "efficiency_pct": op.efficiency,
            "feathered": op.is_feathered,
        })
    return pd.DataFrame(rows)
