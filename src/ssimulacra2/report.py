import csv
import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from .calibration import CHANNELS, DEFAULT_CALIBRATION, NUM_SCALES, feature_names

REPORT_FIELDS = ["Background", "Feature", "Scale", "Channel", "Map", "Norm",
                 "Value", "Weight", "Weighted"]


def score_breakdown(comparison, calibration=DEFAULT_CALIBRATION):
    """One row per (pass, feature) with its raw value and weighted contribution."""
    rows = []
    for p in comparison.passes:
        for name, value, weight in zip(feature_names(), p.features.values, calibration.weights):
            scale, channel, error_map, norm = name.split(".")
            rows.append({
                "Background": "none" if p.background is None else p.background,
                "Feature": name,
                "Scale": int(scale[1:]),
                "Channel": channel,
                "Map": error_map,
                "Norm": norm,
                "Value": float(value),
                "Weight": weight,
                "Weighted": weight * abs(float(value)),
            })
    return rows


def write_score_report(path, rows):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow({k: f"{v:.6f}" if isinstance(v, float) else v for k, v in row.items()})


def plot_contributions(rows, output_path, title="SSIMULACRA 2.1"):
    """Stacked bars of weighted error per scale, one panel per channel.

    Only the worst pass (highest total) is drawn when several backgrounds ran.
    """
    totals = {}
    for row in rows:
        totals[row["Background"]] = totals.get(row["Background"], 0.0) + row["Weighted"]
    worst = max(totals, key=totals.get)
    rows = [r for r in rows if r["Background"] == worst]

    maps = sorted({r["Map"] for r in rows})
    colors = {"ssim": "#4488cc", "artifact": "#dd4422", "detail_lost": "#22aa88"}

    fig, axes = plt.subplots(1, len(CHANNELS), figsize=(15, 4.5), sharey=True)
    fig.suptitle(f"{title} (background: {worst})", fontsize=13, fontweight="bold")
    scales = np.arange(NUM_SCALES)
    for ax, channel in zip(axes, CHANNELS):
        bottom = np.zeros(NUM_SCALES)
        for error_map in maps:
            heights = np.zeros(NUM_SCALES)
            for r in rows:
                if r["Channel"] == channel and r["Map"] == error_map:
                    heights[r["Scale"]] += r["Weighted"]
            ax.bar(scales, heights, bottom=bottom, color=colors.get(error_map, "#aaaaaa"),
                   label=error_map)
            bottom += heights
        ax.set_title(f"{channel} channel", fontsize=11)
        ax.set_xlabel("Scale")
        ax.set_xticks(scales)
    axes[0].set_ylabel("Weighted error")
    axes[-1].legend(fontsize=8, loc="upper right")

    fig.tight_layout(rect=[0, 0, 1, 0.94])
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
