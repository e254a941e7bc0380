from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from saturation.continued_fraction import ContinuedFraction


def curve_table(estimates: Sequence[float], step_size: float) -> pd.DataFrame:
    """Extrapolated curve as a table: effort 0, step, 2*step, ... against expected distinct."""
    return pd.DataFrame({
        "effort": [i * step_size for i in range(len(estimates))],
        "expected_distinct": list(estimates),
    })


def coefficient_tables(cf: ContinuedFraction) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Same pairing as ContinuedFraction.dump(): offset coefficients against
    the leading power-series coefficients, then CF coefficients against the
    power-series coefficients after the offset.
    """
    offset = len(cf.offset_coeffs)
    offset_df = pd.DataFrame({
        "offset_coeff": list(cf.offset_coeffs),
        "ps_coeff": [cf.paired_ps_coeff(i) for i in range(offset)],
    })
    cf_df = pd.DataFrame({
        "cf_coeff": list(cf.cf_coeffs),
        "ps_coeff": [cf.paired_ps_coeff(i + offset) for i in range(len(cf.cf_coeffs))],
    })
    return offset_df, cf_df


def summary_table(stats: Dict[str, float], cf: Optional[ContinuedFraction],
                  estimates: Optional[List[float]] = None,
                  lower_bound: Optional[float] = None) -> pd.DataFrame:
    row = {
        "Observed distinct": stats["distinct"],
        "Total observations": stats["total"],
        "Singletons (f1)": stats["f1"],
        "Doubletons (f2)": stats["f2"],
    }
    if cf is not None:
        row["Diagonal"] = cf.diagonal_idx
        row["Degree"] = cf.degree
    if estimates:
        row["Expected distinct at max effort"] = estimates[-1]
    if lower_bound is not None:
        row["Lower bound"] = lower_bound
    return pd.DataFrame([row])
