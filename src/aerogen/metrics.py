from __future__ import annotations

from dataclasses import dataclass
import numpy as np
import pandas as pd

from .physics import TurbineParams
from .sim import SimResult


@dataclass(frozen=True)
class RunMetrics:
    energy_kWh: float
    avg_power_kW: float
    peak_power_kW: float
    capacity_factor: float
    mean_rpm: float
    feathered_fraction: float
    settling_time_s: float | None


def compute_metrics(
    t: np.ndarray,
    power: np.ndarray,
    rpm: np.ndarray,
    rated_power_kW: float,
    is_feathered: np.ndarray | None = None,
    settling_band: float = 0.05,
    settle_window_s: float = 1.0,
) -> RunMetrics:
    """
    Compute standard run metrics.

    settling_time_s:
      earliest time after which rpm stays within +/- (settling_band * final rpm)
      until the end of the run, provided that span is at least settle_window_s.
      Returns None if it never settles or the rotor ends at rest.
    """
    t = np.asarray(t, dtype=float)
    p = np.asarray(power, dtype=float)
    w = np.asarray(rpm, dtype=float)

    # kW * s -> kWh
    energy_kWh = float(np.trapezoid(np.maximum(p, 0.0), t)) / 3600.0 if len(t) >= 2 else 0.0

    avg_power = float(np.mean(p)) if len(p) else 0.0
    peak_power = float(np.max(p)) if len(p) else 0.0
    capacity_factor = avg_power / rated_power_kW if rated_power_kW > 0 else 0.0
    mean_rpm = float(np.mean(w)) if len(w) else 0.0

    feathered_fraction = 0.0
    if is_feathered is not None and len(is_feathered):
        feathered_fraction = float(np.mean(np.asarray(is_feathered, dtype=bool)))

    settling_time_s: float | None = None
    if len(t) >= 2 and abs(w[-1]) > 1e-9:
        target = float(w[-1])
        band = abs(settling_band * target)
        dt = float(np.median(np.diff(t)))
        win_n = max(1, int(round(settle_window_s / max(dt, 1e-9))))
        ok = np.abs(w - target) <= band

        # Earliest index after which rpm never leaves the band again
        bad = np.flatnonzero(~ok)
        i0 = int(bad[-1]) + 1 if len(bad) else 0
        if len(t) - i0 >= win_n:
            settling_time_s = float(t[i0])

    return RunMetrics(
        energy_kWh=energy_kWh,
        avg_power_kW=avg_power,
        peak_power_kW=peak_power,
        capacity_factor=capacity_factor,
        mean_rpm=mean_rpm,
        feathered_fraction=feathered_fraction,
        settling_time_s=settling_time_s,
    )


def history_summary(frame: pd.DataFrame) -> dict[str, float]:
    """Chart-side summary of the history buffer frame."""
    if frame.empty:
        return {"samples": 0, "avg_power_kW": 0.0, "peak_power_kW": 0.0, "avg_wind_mps": 0.0}
    return {
        "samples": int(len(frame)),
        "avg_power_kW": float(frame["power"].mean()),
        "peak_power_kW": float(frame["power"].max()),
        "avg_wind_mps": float(frame["wind_speed"].mean()),
    }


def summarize_run(res: SimResult, p: TurbineParams | None = None) -> RunMetrics:
    """compute_metrics over an offline run, rated against the turbine it ran with."""
    p = p or TurbineParams()
    return compute_metrics(
        t=res.t,
        power=res.power,
        rpm=res.rpm,
        rated_power_kW=p.rated_power,
        is_feathered=res.is_feathered,
    )
