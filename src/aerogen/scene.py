"""
Render contract and procedural turbine geometry for the 3D view.

The dashboard draws whatever `render_frame` hands it: rotor speed, the
pitch to display and the weather. Geometry uses a z-up frame with the tower
base at the origin.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
import numpy as np

from .physics import TurbineParams, TurbineStats
from .weather import TimeOfDay, WeatherState


TOWER_HEIGHT = 8.0
HUB_OFFSET = 1.3
BLADE_LENGTH = 5.0
BLADE_CHORD = 0.3
N_BLADES = 3


@dataclass(frozen=True)
class RenderFrame:
    rpm: float
    pitch: float
    weather: WeatherState


@dataclass(frozen=True)
class ScenePalette:
    sky: str
    ground: str
    sun_position: tuple[float, float, float]
    stars: bool


_PALETTES = {
    TimeOfDay.SUNRISE: ScenePalette(sky="#fbcfe8", ground="#10b981", sun_position=(10.0, 10.0, 10.0), stars=False),
    TimeOfDay.DAY: ScenePalette(sky="#7dd3fc", ground="#10b981", sun_position=(10.0, 10.0, 10.0), stars=False),
    TimeOfDay.SUNSET: ScenePalette(sky="#fb923c", ground="#10b981", sun_position=(-10.0, -10.0, 2.0), stars=False),
    TimeOfDay.NIGHT: ScenePalette(sky="#0f172a", ground="#0f172a", sun_position=(0.0, -10.0, -10.0), stars=True),
}


def render_frame(stats: TurbineStats, weather: WeatherState, p: TurbineParams | None = None) -> RenderFrame:
    # The safety override always shows on the model, whatever the slider says
    p = p or TurbineParams()
    pitch = p.feather_pitch if stats.is_feathered else weather.blade_pitch
    return RenderFrame(rpm=stats.rpm, pitch=pitch, weather=weather)


def palette(time_of_day: TimeOfDay) -> ScenePalette:
    return _PALETTES[TimeOfDay(time_of_day)]


def advance_rotor_angle(angle: float, rpm: float, dt: float) -> float:
    """Rotor angle (rad) after spinning at `rpm` for `dt` seconds."""
    return (angle + rpm / 60.0 * 2.0 * math.pi * dt) % (2.0 * math.pi)


def turbine_geometry(rotor_angle: float, pitch_deg: float, yaw_deg: float) -> dict[str, np.ndarray]:
    """
    Polylines (N x 3 arrays) for the tower, nacelle axis and each blade
    outline. Blade chords lie in the rotor plane at 0 deg pitch and turn
    edge-on to the wind at 90 deg.
    """
    yaw = math.radians(yaw_deg)
    pitch = math.radians(pitch_deg)

    axial = np.array([math.sin(yaw), math.cos(yaw), 0.0])
    lateral = np.array([math.cos(yaw), -math.sin(yaw), 0.0])
    up = np.array([0.0, 0.0, 1.0])

    top = TOWER_HEIGHT * up
    hub = top + HUB_OFFSET * axial

    shapes: dict[str, np.ndarray] = {
        "tower": np.vstack([np.zeros(3), top]),
        "nacelle": np.vstack([top - 0.75 * axial, hub]),
    }

    for i in range(N_BLADES):
        theta = rotor_angle + 2.0 * math.pi * i / N_BLADES
        span = math.cos(theta) * up + math.sin(theta) * lateral
        tangent = -math.sin(theta) * up + math.cos(theta) * lateral
        chord = 0.5 * BLADE_CHORD * (math.cos(pitch) * tangent + math.sin(pitch) * axial)

        tip = hub + BLADE_LENGTH * span
        shapes[f"blade_{i}"] = np.vstack([hub - chord, tip - chord, tip + chord, hub + chord, hub - chord])

    return shapes
