from __future__ import annotations

import numpy as np
import pandas as pd

from aerogen.physics import TurbineParams
from aerogen.sim import power_curve_sweep
from aerogen.plots import plot_power_curve


def main() -> None:
    p = TurbineParams()

    # wind speed sweep (m/s), through cut-in, rated and the storm limit
    v_list = np.arange(0.0, 36.0, 1.0)

    rows = []
    for pitch in (0.0, 30.0, 60.0):
        df = power_curve_sweep(v_list, pitch=pitch, p=p)
        df["pitch_deg"] = pitch
        rows.append(df)

    out_csv = "power_curve.csv"
    full = pd.concat(rows, ignore_index=True)
    full.to_csv(out_csv, index=False)
    print(f"Saved: {out_csv}")
    print(rows[0])

    plot_power_curve(rows[0])


if __name__ == "__main__":
    main()
