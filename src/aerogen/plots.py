from __future__ import annotations
import matplotlib.pyplot as plt
import pandas as pd
from .sim import SimResult


def plot_timeseries(res: SimResult) -> None:
    plt.figure()
    plt.plot(res.t, res.v_wind)
    plt.xlabel("Time (s)")
    plt.ylabel("Wind speed (m/s)")
    plt.title("Wind speed vs time")
    plt.grid(True)

    plt.figure()
    plt.plot(res.t, res.rpm)
    plt.xlabel("Time (s)")
    plt.ylabel("Rotor speed (RPM)")
    plt.title("Rotor speed vs time")
    plt.grid(True)

    plt.figure()
    plt.plot(res.t, res.power, label="power")
    plt.fill_between(res.t, 0, res.power.max() if len(res.power) else 0, where=res.is_feathered,
                     alpha=0.15, color="red", label="feathered")
    plt.xlabel("Time (s)")
    plt.ylabel("Power (kW)")
    plt.title("Power output vs time")
    plt.legend()
    plt.grid(True)

    plt.show()


def plot_power_curve(df: pd.DataFrame) -> None:
    plt.figure()
    plt.plot(df["v_wind_mps"], df["power_kW"], marker="o")
    plt.xlabel("Wind speed (m/s)")
    plt.ylabel("Target power (kW)")
    plt.title("AeroGen — Power curve")
    plt.grid(True)

    plt.figure()
    plt.plot(df["v_wind_mps"], df["target_rpm"], marker="o")
    plt.xlabel("Wind speed (m/s)")
    plt.ylabel("Target rotor speed (RPM)")
    plt.title("AeroGen — Rotor speed vs wind")
    plt.grid(True)

    plt.show()
