from datetime import datetime

from aerogen.history import HistoryBuffer, SimulationHistoryPoint
from aerogen.physics import TurbineStats
from aerogen.weather import WeatherState


def test_fifo_eviction_keeps_order():
    buf = HistoryBuffer()
    pts = [SimulationHistoryPoint(time=f"t{i}", power=i, wind_speed=float(i)) for i in range(31)]
    for pt in pts:
        buf.append(pt)

    assert len(buf) == 30
    assert buf.points() == pts[1:]
    assert list(buf)[0].time == "t1"


def test_no_dedup():
    buf = HistoryBuffer(capacity=3)
    pt = SimulationHistoryPoint(time="12:00:00", power=5, wind_speed=5.0)
    buf.append(pt)
    buf.append(pt)
    assert len(buf) == 2


def test_record_floors_power_and_labels_time():
    buf = HistoryBuffer()
    pt = buf.record(
        TurbineStats(power_output=1234.9),
        WeatherState(wind_speed=11.5),
        now=datetime(2026, 3, 1, 9, 5, 7),
    )
    assert pt == SimulationHistoryPoint(time="09:05:07", power=1234, wind_speed=11.5)
    assert buf.points() == [pt]


def test_to_frame():
    buf = HistoryBuffer()
    assert list(buf.to_frame().columns) == ["time", "power", "wind_speed"]
    assert buf.to_frame().empty

    buf.append(SimulationHistoryPoint(time="a", power=10, wind_speed=3.0))
    buf.append(SimulationHistoryPoint(time="b", power=20, wind_speed=4.0))
    df = buf.to_frame()
    assert df["power"].tolist() == [10, 20]
    assert df["time"].tolist() == ["a", "b"]
