#!/usr/bin/env python3
"""
Sweep max_terms over a set of histograms and record which degree the
continued-fraction search settles on for each, plus the extrapolated
value at max_value. Writes one CSV row per (histogram, max_terms).
"""
import argparse
import os

import pandas as pd
from tqdm import tqdm

from saturation.approximation import ApproximationConfig, ContinuedFractionApproximation, FitFailure
from saturation.histogram import read_frequencies, read_histogram


def sweep(hist, max_terms_values, step_size, max_value, diagonal_idx=0):
    """Returns a list of dicts: max_terms, degree (None on failure), estimate."""
    rows = []
    for max_terms in max_terms_values:
        config = ApproximationConfig(
            diagonal_idx=diagonal_idx,
            max_terms=min(max_terms, hist.size - 1),
            step_size=step_size,
            max_value=max_value,
        )
        result = ContinuedFractionApproximation(config).optimal_continued_fraction(hist)
        if isinstance(result, FitFailure):
            rows.append({"max_terms": max_terms, "degree": None, "estimate": float("nan")})
            continue
        estimates = result.extrapolate(hist, max_value, step_size)
        rows.append({"max_terms": max_terms, "degree": result.degree, "estimate": estimates[-1]})
    return rows


def main():
    parser = argparse.ArgumentParser(description="Sweep max_terms for continued-fraction fits")
    parser.add_argument("inputs", nargs="+", help="Histogram or per-item count files")
    parser.add_argument("-H", "--hist", action="store_true", help="Inputs are 'frequency count' histograms")
    parser.add_argument("--min-terms", type=int, default=6)
    parser.add_argument("--max-terms", type=int, default=40)
    parser.add_argument("--step", type=float, default=1.0)
    parser.add_argument("--max-value", type=float, default=100.0)
    parser.add_argument("--diagonal", type=int, default=0)
    parser.add_argument("--output", type=str, default="max_terms_sweep.csv")
    args = parser.parse_args()

    max_terms_values = list(range(args.min_terms, args.max_terms + 1, 2))
    all_rows = []
    for path in tqdm(args.inputs, desc="Histograms"):
        hist = read_histogram(path) if args.hist else read_frequencies(path)
        for row in sweep(hist, max_terms_values, args.step, args.max_value, args.diagonal):
            row["input"] = os.path.basename(path)
            all_rows.append(row)

    table = pd.DataFrame(all_rows, columns=["input", "max_terms", "degree", "estimate"])
    table.to_csv(args.output, index=False)
    print(table.to_string(index=False))
    print(f"\nSweep saved to: {args.output}")


if __name__ == "__main__":
    main()
