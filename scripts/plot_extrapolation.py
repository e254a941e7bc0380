#!/usr/bin/env python3
"""
Plot extrapolated distinct-item curves written by `saturation --output`.
Each CSV becomes one line; the observed distinct count is drawn at effort 0.
"""
import argparse
import os

import matplotlib.pyplot as plt
import pandas as pd

plt.rcParams.update({
    'font.family': 'serif',
    'font.serif': ['Times New Roman', 'Times', 'DejaVu Serif'],
    'font.size': 9,
    'axes.labelsize': 10,
    'axes.titlesize': 10,
    'axes.titleweight': 'bold',
    'xtick.labelsize': 9,
    'ytick.labelsize': 9,
    'legend.fontsize': 9,
})


def load_curve(path):
    """Load a curve CSV with columns effort, expected_distinct."""
    curve = pd.read_csv(path)
    missing = {"effort", "expected_distinct"} - set(curve.columns)
    if missing:
        raise ValueError(f"{path}: missing columns {sorted(missing)}")
    return curve


def plot_curves(curves, output_path, title="Distinct-item extrapolation", lower_bound=None):
    """
    Args:
        curves: Dict mapping label -> DataFrame from load_curve
        output_path: Output file path
        title: Figure title
        lower_bound: Optional horizontal line for a conservative bound
    """
    plt.figure(figsize=(3.5, 2.5))
    for label, curve in curves.items():
        plt.plot(
            curve["effort"],
            curve["expected_distinct"],
            marker='o',
            linewidth=1.5,
            markersize=3,
            markevery=max(1, len(curve) // 10),
            label=label,
        )
    if lower_bound is not None:
        plt.axhline(lower_bound, linestyle='--', linewidth=1.0, label="Lower bound")

    plt.xlabel("Relative sampling effort")
    plt.ylabel("Expected distinct items")
    plt.title(title)
    plt.legend(loc='best')
    plt.grid(True, alpha=0.3)
    plt.tight_layout()

    plt.savefig(output_path, dpi=300, bbox_inches='tight')
    plt.close()
    print(f"   ✓ Saved: {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Plot extrapolated curves")
    parser.add_argument("curves", nargs="+", help="CSV files written by saturation --output")
    parser.add_argument("--output", type=str, default="extrapolation.png", help="Image to write")
    parser.add_argument("--title", type=str, default="Distinct-item extrapolation")
    parser.add_argument("--lower-bound", type=float, default=None)
    args = parser.parse_args()

    curves = {}
    for path in args.curves:
        label = os.path.splitext(os.path.basename(path))[0]
        curves[label] = load_curve(path)
    plot_curves(curves, args.output, title=args.title, lower_bound=args.lower_bound)


if __name__ == "__main__":
    main()
