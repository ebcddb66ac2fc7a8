from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
import json
import pandas as pd
import matplotlib.pyplot as plt

from .metrics import RunMetrics
from .sim import SimResult


def ensure_outputs_dir(out_dir: str | Path = "outputs") -> Path:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)
    return p


def save_timeseries_csv(out_dir: str | Path, name: str, data: dict | pd.DataFrame) -> Path:
    out = ensure_outputs_dir(out_dir) / f"{name}.csv"
    df = data if isinstance(data, pd.DataFrame) else pd.DataFrame(data)
    df.to_csv(out, index=False)
    return out


def save_metrics_json(out_dir: str | Path, name: str, m: RunMetrics) -> Path:
    out = ensure_outputs_dir(out_dir) / f"{name}_metrics.json"
    out.write_text(json.dumps(asdict(m), indent=2), encoding="utf-8")
    return out


def save_summary_plots(out_dir: str | Path, name: str, res: SimResult, rated_power_kW: float | None = None) -> Path:
    """
    Save a single multi-panel PNG that looks good in README / reports.
    """
    out_dir = ensure_outputs_dir(out_dir)

    fig = plt.figure(figsize=(12, 7))

    ax1 = fig.add_subplot(2, 3, 1)
    ax1.plot(res.t, res.v_wind)
    ax1.set_title("Wind speed (m/s)")
    ax1.grid(True)

    ax2 = fig.add_subplot(2, 3, 2)
    ax2.plot(res.t, res.rpm)
    ax2.set_title("Rotor speed (RPM)")
    ax2.grid(True)

    ax3 = fig.add_subplot(2, 3, 3)
    ax3.plot(res.t, res.power, label="power")
    if rated_power_kW is not None:
        ax3.axhline(rated_power_kW, linestyle="--", linewidth=1, label="rated")
        ax3.legend()
    ax3.set_title("Power output (kW)")
    ax3.grid(True)

    ax4 = fig.add_subplot(2, 3, 4)
    ax4.plot(res.t, res.efficiency)
    ax4.set_title("Efficiency (%)")
    ax4.grid(True)

    ax5 = fig.add_subplot(2, 3, 5)
    ax5.plot(res.t, res.total_energy)
    ax5.set_title("Cumulative energy (kWh)")
    ax5.grid(True)

    ax6 = fig.add_subplot(2, 3, 6)
    ax6.step(res.t, res.is_feathered.astype(int), where="post")
    ax6.set_yticks([0, 1], ["running", "feathered"])
    ax6.set_title("Storm auto-feather")
    ax6.grid(True)

    fig.tight_layout()
    out = out_dir / f"{name}.png"
    fig.savefig(out, dpi=160)
    plt.close(fig)
    return out


def write_report_md(
    out_dir: str | Path,
    name: str,
    title: str,
    description: str,
    metrics: RunMetrics,
    plot_path: Path,
    csv_path: Path,
) -> Path:
    out_dir = ensure_outputs_dir(out_dir)
    out = out_dir / f"{name}_report.md"

    md = []
    md.append(f"# {title}\n")
    md.append(description.strip() + "\n")
    md.append("## Key metrics\n")
    md.append(f"- Energy produced: **{metrics.energy_kWh:.3f} kWh**")
    md.append(f"- Avg power: **{metrics.avg_power_kW:.1f} kW**")
    md.append(f"- Peak power: **{metrics.peak_power_kW:.1f} kW**")
    md.append(f"- Capacity factor: **{metrics.capacity_factor:.1%}**")
    md.append(f"- Mean rotor speed: **{metrics.mean_rpm:.1f} RPM**")
    md.append(f"- Time feathered: **{metrics.feathered_fraction:.1%}**")
    if metrics.settling_time_s is None:
        md.append("- Settling time: **did not settle**")
    else:
        md.append(f"- Settling time: **{metrics.settling_time_s:.2f} s**")

    md.append("\n## Outputs\n")
    md.append(f"- Plot: `{plot_path.name}`")
    md.append(f"- Timeseries: `{csv_path.name}`")
    md.append("\n## Plot\n")
    md.append(f"![plot]({plot_path.name})\n")

    out.write_text("\n".join(md), encoding="utf-8")
    return out
