from __future__ import annotations

from pathlib import Path
import sys
import asyncio
import math
import time

# --- MUST come before importing aerogen ---
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

import streamlit as st
import plotly.graph_objects as go

from aerogen.config import GeminiConfig, SimulatorConfig, setup_logging
from aerogen.metrics import history_summary
from aerogen.monitor import OperatingState
from aerogen.runtime import TurbineSimulator
from aerogen.scenario import ScenarioClient
from aerogen.scene import advance_rotor_angle, palette, turbine_geometry
from aerogen.weather import CONTROL_RANGES, TIME_OF_DAY_OPTIONS

# Longest stretch of simulated time caught up in one rerun
MAX_CATCHUP_S = 5.0
REFRESH_S = 0.5

setup_logging()

st.set_page_config(page_title="AeroGen Simulator", layout="wide")


def _new_simulator() -> TurbineSimulator:
    cfg = GeminiConfig.from_env()
    client = ScenarioClient(cfg) if cfg.api_key else None
    return TurbineSimulator(config=SimulatorConfig(), client=client)


# Session memory: one simulator per browser session
if "sim" not in st.session_state:
    st.session_state.sim = _new_simulator()
    st.session_state.last_wall = time.monotonic()
    st.session_state.rotor_angle = 0.0
    st.session_state.insight = None

sim: TurbineSimulator = st.session_state.sim

st.title("🌬️ AeroGen — Wind Turbine Simulator")
st.caption("Cubic power curve + pitch control + storm auto-feather + rotor inertia")

with st.expander("Model assumptions / notes"):
    st.markdown(
        """
- Power: cubic curve between cut-in (3.5 m/s) and rated (12 m/s), capped at 2 MW.
- Pitch: power and rotor speed scale with cos(pitch); 90° stops the rotor.
- Safety: above 30 m/s the blades are feathered automatically.
- Turbulence only adds noise to power; temperature is cosmetic.
        """
    )

# -------------------------
# Sidebar controls
# -------------------------
with st.sidebar:
    st.header("Control Panel")

    w = sim.weather
    tod = st.radio(
        "Time of day",
        [t.value for t in TIME_OF_DAY_OPTIONS],
        index=[t.value for t in TIME_OF_DAY_OPTIONS].index(w.time_of_day.value),
        horizontal=True,
    )

    labels = {
        "blade_pitch": "Blade pitch (°) — 0 = max power, 90 = feathered",
        "wind_speed": "Wind speed (m/s)",
        "wind_direction": "Direction / yaw (°)",
        "turbulence": "Turbulence",
        "temperature": "Temperature (°C)",
    }
    edits: dict[str, float | str] = {}
    for key, label in labels.items():
        rng = CONTROL_RANGES[key]
        current = float(getattr(w, key))
        value = st.slider(label, float(rng.lo), float(rng.hi), current, float(rng.step))
        if value != current:
            edits[key] = value
    if tod != w.time_of_day.value:
        edits["time_of_day"] = tod
    if edits:
        sim.apply_manual_change(**edits)

    st.divider()
    st.header("AI Scenario")
    prompt = st.text_input("Describe the weather", value="Approaching hurricane at dusk")
    if st.button("✨ Generate scenario"):
        with st.spinner("Asking the meteorologist..."):
            asyncio.run(sim.request_scenario(prompt))
        st.rerun()

    if st.button("🔍 Analyze efficiency"):
        with st.spinner("Analyzing..."):
            st.session_state.insight = asyncio.run(sim.request_analysis())
    if st.session_state.insight:
        st.info(st.session_state.insight)


# -------------------------
# Live dashboard
# -------------------------
def _turbine_figure(rotor_angle: float) -> go.Figure:
    frame = sim.render_frame()
    pal = palette(frame.weather.time_of_day)
    shapes = turbine_geometry(rotor_angle, frame.pitch, frame.weather.wind_direction)

    fig = go.Figure()
    for name, pts in shapes.items():
        is_blade = name.startswith("blade")
        fig.add_trace(go.Scatter3d(
            x=pts[:, 0], y=pts[:, 1], z=pts[:, 2],
            mode="lines",
            name=name,
            line=dict(width=4 if is_blade else 10, color="#f8fafc" if is_blade else "#94a3b8"),
            showlegend=False,
        ))
    axis = dict(visible=False)
    fig.update_layout(
        scene=dict(
            xaxis=dict(axis, range=[-7, 7]),
            yaxis=dict(axis, range=[-7, 7]),
            zaxis=dict(axis, range=[0, 14]),
            aspectmode="cube",
            bgcolor=pal.sky,
        ),
        paper_bgcolor=pal.ground,
        margin=dict(l=0, r=0, t=0, b=0),
        height=480,
    )
    return fig


def _history_figure() -> go.Figure:
    df = sim.history.to_frame()
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=df["time"], y=df["power"], name="Power (kW)", mode="lines", fill="tozeroy", yaxis="y1"))
    fig.add_trace(go.Scatter(x=df["time"], y=df["wind_speed"], name="Wind (m/s)", mode="lines", yaxis="y2"))
    fig.update_layout(
        title="Power Output History (kW)",
        xaxis=dict(showticklabels=False),
        yaxis=dict(title="Power (kW)"),
        yaxis2=dict(title="Wind (m/s)", overlaying="y", side="right"),
        template="plotly_white",
        height=320,
    )
    return fig


@st.fragment(run_every=REFRESH_S)
def live_view() -> None:
    now = time.monotonic()
    elapsed = min(now - st.session_state.last_wall, MAX_CATCHUP_S)
    st.session_state.last_wall = now

    sim.advance(elapsed)
    st.session_state.rotor_angle = advance_rotor_angle(st.session_state.rotor_angle, sim.stats.rpm, elapsed)

    stats, w = sim.stats, sim.weather
    state = sim.operating_state()
    badge = {"GENERATING": "🟢", "SAFETY STOP": "🔴", "IDLE": "⚪"}[state.value]
    st.markdown(f"**System Status:** {badge} {state.value} &nbsp;·&nbsp; *{w.description}*")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Wind Speed (m/s)", f"{w.wind_speed:g}")
    c2.metric("Rotor Speed (RPM)", f"{stats.rpm:.1f}")
    c3.metric("Active Power (kW)", f"{math.floor(stats.power_output)}")
    c4.metric("Efficiency (%)", f"{stats.efficiency:.1f}")

    c5, c6, c7 = st.columns(3)
    c5.metric("Total Energy (kWh)", f"{stats.total_energy:.2f}")
    c6.metric("Temperature (°C)", f"{w.temperature:g}")
    c7.metric("Turbulence", f"{w.turbulence * 100:.0f}%")

    left, right = st.columns([3, 2])
    with left:
        st.plotly_chart(_turbine_figure(st.session_state.rotor_angle), use_container_width=True)
    with right:
        st.plotly_chart(_history_figure(), use_container_width=True)
        summary = history_summary(sim.history.to_frame())
        st.caption(
            f"{summary['samples']} samples · avg {summary['avg_power_kW']:.0f} kW · "
            f"peak {summary['peak_power_kW']:.0f} kW"
        )
        if state is OperatingState.SAFETY_STOP or stats.is_feathered:
            st.error(sim.status)
        else:
            st.info(sim.status)


live_view()
