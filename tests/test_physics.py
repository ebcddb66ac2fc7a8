import math

import numpy as np
import pytest

from aerogen.physics import (
    TurbineParams,
    TurbineStats,
    base_power_curve,
    effective_pitch,
    pitch_factor,
    step,
    target_operating_point,
)
from aerogen.weather import WeatherState


P = TurbineParams()


def calm(v: float, pitch: float = 0.0, turbulence: float = 0.0) -> WeatherState:
    return WeatherState(wind_speed=v, blade_pitch=pitch, turbulence=turbulence)


@pytest.mark.parametrize("v", [0.0, 1.0, 3.0, 3.49])
def test_below_cut_in_has_no_target(v):
    op = target_operating_point(calm(v), P)
    assert op.power == 0.0
    assert op.target_rpm == 0.0
    assert op.efficiency == 0.0


@pytest.mark.parametrize("v", [12.0, 15.0, 25.0, 30.0])
def test_rated_region_is_flat(v):
    op = target_operating_point(calm(v), P)
    assert op.power == pytest.approx(2000.0)
    assert op.target_rpm == pytest.approx(45.0)
    assert op.efficiency == pytest.approx(45.0)


def test_partial_load_is_cubic():
    # halfway between cut-in and rated
    power, rpm, eff = base_power_curve(7.75, P)
    assert power == pytest.approx(2000.0 * 0.5 ** 3)
    assert rpm == pytest.approx(22.5)
    assert eff == pytest.approx(37.5)


def test_power_monotone_in_wind_speed():
    speeds = np.linspace(3.5, 11.99, 60)
    powers = np.array([target_operating_point(calm(v), P).power for v in speeds])
    assert np.all(np.diff(powers) >= 0.0)
    assert target_operating_point(calm(12.0), P).power == target_operating_point(calm(28.0), P).power


def test_pitch_factor_bounds():
    assert pitch_factor(0.0) == 1.0
    assert pitch_factor(90.0) == 0.0
    assert pitch_factor(120.0) == 0.0
    assert pitch_factor(60.0) == pytest.approx(0.5)


@pytest.mark.parametrize("v", [5.0, 12.0, 25.0])
def test_full_feather_pitch_stops_everything(v):
    op = target_operating_point(calm(v, pitch=90.0), P)
    assert op.power == 0.0
    assert op.target_rpm == 0.0
    # manual feathering is not the storm override
    assert op.is_feathered is False


def test_storm_overrides_manual_pitch():
    pitch, feathered = effective_pitch(calm(31.0, pitch=0.0), P)
    assert pitch == 90.0
    assert feathered is True

    stats = step(TurbineStats(), calm(31.0, turbulence=0.8), P, np.random.default_rng(0))
    assert stats.is_feathered is True
    assert stats.power_output == 0.0
    assert stats.efficiency == 0.0


def test_storm_limit_is_exclusive():
    assert effective_pitch(calm(30.0, pitch=5.0), P) == (5.0, False)


def test_efficiency_suppressed_past_45_degrees():
    assert target_operating_point(calm(10.0, pitch=46.0), P).efficiency == 0.0
    assert target_operating_point(calm(10.0, pitch=45.0), P).efficiency > 0.0


def test_inertia_first_tick():
    stats = step(TurbineStats(), calm(15.0, turbulence=0.5), P, np.random.default_rng(3))
    assert stats.rpm == pytest.approx(3.6)


def test_rotor_spins_down_when_wind_drops():
    stats = step(TurbineStats(rpm=45.0), calm(0.0), P)
    assert stats.rpm == pytest.approx(45.0 - 45.0 * 0.08)
    assert stats.power_output == 0.0


def test_energy_per_tick():
    p = TurbineParams(rated_power=3600.0)
    stats = step(TurbineStats(total_energy=1.0), calm(15.0), p)
    assert stats.power_output == pytest.approx(3600.0)
    assert stats.total_energy == pytest.approx(1.05)


def test_noise_band_and_clamp():
    rng = np.random.default_rng(42)
    stats = TurbineStats()
    powers = []
    for _ in range(500):
        stats = step(stats, calm(12.0, turbulence=1.0), P, rng)
        powers.append(stats.power_output)
    powers = np.array(powers)
    assert powers.min() >= 1900.0
    assert powers.max() <= 2100.0
    assert powers.std() > 0.0

    # low power + heavy noise never goes negative
    stats = TurbineStats()
    for _ in range(500):
        stats = step(stats, calm(4.0, turbulence=1.0), P, rng)
        assert 0.0 <= stats.power_output <= P.power_cap


def test_zero_turbulence_is_deterministic():
    a = step(TurbineStats(rpm=10.0), calm(9.0), P, np.random.default_rng(1))
    b = step(TurbineStats(rpm=10.0), calm(9.0), P, np.random.default_rng(2))
    assert a == b


def test_temperature_has_no_effect():
    hot = WeatherState(wind_speed=9.0, turbulence=0.0, temperature=45.0)
    cold = WeatherState(wind_speed=9.0, turbulence=0.0, temperature=-15.0)
    assert step(TurbineStats(), hot, P) == step(TurbineStats(), cold, P)


def test_out_of_range_inputs_extrapolate():
    stats = step(TurbineStats(), calm(-5.0, pitch=-10.0), P)
    assert stats.rpm == 0.0
    assert math.isfinite(stats.total_energy)
