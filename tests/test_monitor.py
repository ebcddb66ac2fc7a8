import pytest

from aerogen.monitor import INITIAL_STATUS, OperatingState, operating_state, system_status
from aerogen.physics import TurbineStats
from aerogen.weather import WeatherState


@pytest.mark.parametrize(
    "v, pitch, expected",
    [
        (35.0, 0.0, "CRITICAL WARNING: Storm winds detected. Automatic safety feathering engaged. Turbine halted."),
        (31.0, 60.0, "CRITICAL WARNING: Storm winds detected. Automatic safety feathering engaged. Turbine halted."),
        (25.0, 60.0, "CAUTION: High wind speeds. Monitor vibration levels."),
        (8.0, 15.0, "Manual pitch adjustment active (15°). Efficiency reduced."),
        (2.0, 15.5, "Manual pitch adjustment active (15.5°). Efficiency reduced."),
        (8.0, 12.3456789, "Manual pitch adjustment active (12.3456789°). Efficiency reduced."),
        (2.0, 10.0, "Awaiting cut-in wind speed..."),
        (12.0, 0.0, "Operating at rated capacity. Optimal power generation."),
        (20.0, 0.0, "Operating at rated capacity. Optimal power generation."),
        (8.0, 0.0, "Optimal operation conditions. Tracking wind vector."),
    ],
)
def test_status_rules_in_priority_order(v, pitch, expected):
    assert system_status(WeatherState(wind_speed=v, blade_pitch=pitch)) == expected


def test_status_is_stateless():
    w = WeatherState(wind_speed=22.0)
    assert system_status(w) == system_status(w)
    assert INITIAL_STATUS == "Systems Nominal."


def test_operating_state():
    assert operating_state(TurbineStats(rpm=10.0)) is OperatingState.GENERATING
    assert operating_state(TurbineStats(rpm=10.0, is_feathered=True)) is OperatingState.GENERATING
    assert operating_state(TurbineStats(rpm=0.2, is_feathered=True)) is OperatingState.SAFETY_STOP
    assert operating_state(TurbineStats(rpm=0.5)) is OperatingState.IDLE
