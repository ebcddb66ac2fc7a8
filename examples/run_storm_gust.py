from __future__ import annotations

from aerogen.config import setup_logging
from aerogen.physics import TurbineParams
from aerogen.sim import ProfileSimConfig, run_profile_sim
from aerogen.profiles import StormFront
from aerogen.weather import WeatherState

from aerogen.metrics import summarize_run
from aerogen.report import (
    save_timeseries_csv,
    save_metrics_json,
    save_summary_plots,
    write_report_md,
)


def main() -> None:
    setup_logging()

    front = StormFront(
        before=WeatherState(wind_speed=14.0, turbulence=0.2, description="Ahead of the front"),
        peak_speed=34.0,
        peak_turbulence=0.6,
        veer_deg=40.0,
        arrival_s=15.0,
        ramp_s=6.0,
    )
    p = TurbineParams()
    cfg = ProfileSimConfig(t_end=40.0, seed=7)

    res = run_profile_sim(front, p=p, cfg=cfg)
    metrics = summarize_run(res, p)

    name = "storm_gust"
    csv_path = save_timeseries_csv("outputs", name, res.to_frame())
    plot_path = save_summary_plots("outputs", name, res, rated_power_kW=p.rated_power)
    save_metrics_json("outputs", name, metrics)
    write_report_md(
        "outputs",
        name,
        title="AeroGen — Storm Gust Report",
        description="Storm front ramping 14→34 m/s over 6 s with rising turbulence; once past 30 m/s the blades auto-feather and the rotor spins down.",
        metrics=metrics,
        plot_path=plot_path,
        csv_path=csv_path,
    )

    print("Saved outputs to ./outputs/")
    print(" -", plot_path)
    print(" -", csv_path)


if __name__ == "__main__":
    main()
