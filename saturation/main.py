import argparse
import json
import math
import os
import sys

from saturation.approximation import (
    ApproximationConfig,
    ContinuedFractionApproximation,
    FitFailure,
)
from saturation.histogram import (
    histogram_stats,
    read_frequencies,
    read_histogram,
    read_observations,
    read_rounds,
)
from saturation.report import coefficient_tables, curve_table, summary_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extrapolate the expected number of distinct items with a continued-fraction approximation"
    )
    parser.add_argument("input", type=str, help="Per-item counts, one per line (see -H, --items, --rounds for other formats)")
    fmt = parser.add_mutually_exclusive_group()
    fmt.add_argument("-H", "--hist", action="store_true", help="Input is a 'frequency count' histogram")
    fmt.add_argument("--items", action="store_true", help="Input is a raw stream of observed items, one per line")
    fmt.add_argument("--rounds", action="store_true", help="Input is a JSON list of sampling rounds (lists of items)")
    parser.add_argument("--config", type=str, default=None, help="JSON file with approximation settings")
    parser.add_argument("--max-terms", type=int, default=None, help="Maximum number of terms to try")
    parser.add_argument("--step", type=float, default=None, help="Step size of the extrapolation grid")
    parser.add_argument("--max-value", type=float, default=None, help="Largest effort to extrapolate to")
    parser.add_argument("--diagonal", type=int, default=None, help="Diagonal of the Padé table")
    parser.add_argument("--bound", action="store_true", help="Also compute the conservative lower bound")
    parser.add_argument("--upper-bound", type=float, default=math.inf, help="Cap for the lower bound")
    parser.add_argument("--output", type=str, default=None, help="Write the extrapolated curve to this CSV")
    parser.add_argument("--save-fraction", type=str, default=None, help="Write the selected continued fraction as JSON")
    parser.add_argument("--dump", action="store_true", help="Print the coefficient tables")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print per-degree progress")
    return parser


def load_histogram(args):
    if args.hist:
        return read_histogram(args.input)
    if args.items:
        return read_observations(args.input)
    if args.rounds:
        return read_rounds(args.input)
    return read_frequencies(args.input)


def load_config(args) -> ApproximationConfig:
    data = {}
    if args.config:
        with open(args.config) as f:
            data = json.load(f)
    overrides = {
        "diagonal_idx": args.diagonal,
        "max_terms": args.max_terms,
        "step_size": args.step,
        "max_value": args.max_value,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ApproximationConfig.from_dict(data)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if not os.path.exists(args.input):
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return 1
    try:
        hist = load_histogram(args)
        config = load_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # the power series needs hist[1..max_terms]
    if config.max_terms > hist.size - 1:
        print(f"Reducing max_terms from {config.max_terms} to {hist.size - 1} (largest observed frequency)")
        config.max_terms = hist.size - 1

    stats = histogram_stats(hist)
    print(f"Observed {stats['distinct']:.0f} distinct items in {stats['total']:.0f} observations")

    approx = ContinuedFractionApproximation(config, verbose=args.verbose)
    result = approx.optimal_continued_fraction(hist)
    if isinstance(result, FitFailure):
        tried = ", ".join(str(d) for d in result.degrees_tried) or "none"
        print(f"Error: {result.reason} (degrees tried: {tried})", file=sys.stderr)
        return 1
    cf = result

    estimates = cf.extrapolate(hist, config.max_value, config.step_size)
    curve = curve_table(estimates, config.step_size)
    if args.output:
        curve.to_csv(args.output, index=False)
        print(f"Extrapolated curve saved to: {args.output}")
    if args.save_fraction:
        with open(args.save_fraction, "w") as f:
            json.dump(cf.to_dict(), f, indent=2)
        print(f"Continued fraction saved to: {args.save_fraction}")

    lower_bound = None
    if args.bound:
        try:
            lower_bound = approx.lowerbound_librarysize(hist, args.upper_bound)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if args.dump:
        offset_df, cf_df = coefficient_tables(cf)
        print("\n==== Offset coefficients ====")
        print(offset_df.to_string(index=False) if len(offset_df) else "(none)")
        print("\n==== Continued-fraction coefficients ====")
        print(cf_df.to_string(index=False))

    print("\n==== Summary ====")
    print(summary_table(stats, cf, estimates, lower_bound).to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
