from __future__ import annotations
from aerogen.physics import TurbineParams
from aerogen.profiles import SteadyWeather
from aerogen.sim import ProfileSimConfig, run_profile_sim
from aerogen.weather import WeatherState
from aerogen.plots import plot_timeseries


def main() -> None:
    p = TurbineParams()
    weather = WeatherState(wind_speed=9.0, turbulence=0.1, blade_pitch=0.0)
    cfg = ProfileSimConfig(t_end=30.0, seed=1)

    res = run_profile_sim(SteadyWeather(weather), p=p, cfg=cfg)

    print("Final rotor speed (RPM):", float(res.rpm[-1]))
    print("Final power (kW):", float(res.power[-1]))
    print("Energy (kWh):", float(res.total_energy[-1]))

    plot_timeseries(res)


if __name__ == "__main__":
    main()
