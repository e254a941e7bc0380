from typing import Tuple

import numpy as np

from saturation.power_series import reciprocal_series


# -------------------------------
# Quotient-difference algorithm
# -------------------------------
def quotient_difference(coeffs) -> np.ndarray:
    """
    Continued-fraction coefficients of the power series `coeffs`:

        f(x) = c0 / (1 + c1*x / (1 + c2*x / (1 + ...)))

    Row k of the quotient table q and error table e only has entries that
    can be formed from len(coeffs) series terms (q_k: n-2k+1, e_k: n-2k),
    so the tables are filled as a triangle. When a coefficient comes out
    exactly 0 the series is a rational function, the fraction terminates
    and every later coefficient is 0. A zero leading coefficient produces
    nan/inf instead of raising.
    """
    c = np.asarray(coeffs, dtype=float)
    n = c.size
    cf_coeffs = np.zeros(n)
    if n == 0:
        return cf_coeffs
    cf_coeffs[0] = c[0]
    if n == 1:
        return cf_coeffs

    n_rows = n // 2 + 1
    q_table = np.zeros((n_rows, n))
    e_table = np.zeros((n_rows, n))  # row 0 stays zero

    with np.errstate(divide="ignore", invalid="ignore"):
        q_table[1, :n - 1] = c[1:] / c[:-1]
        e_table[1, :n - 2] = q_table[1, 1:n - 1] - q_table[1, :n - 2] + e_table[0, 1:n - 1]
        for k in range(2, n_rows):
            m = n - 2 * k + 1
            q_table[k, :m] = q_table[k - 1, 1:m + 1] * e_table[k - 1, 1:m + 1] / e_table[k - 1, :m]
            e_table[k, :m - 1] = q_table[k, 1:m] - q_table[k, :m - 1] + e_table[k - 1, 1:m]

    for i in range(1, n):
        if i % 2 == 0:
            cf_coeffs[i] = -e_table[i // 2, 0]
        else:
            cf_coeffs[i] = -q_table[(i + 1) // 2, 0]
        if cf_coeffs[i] == 0:
            # the series is rational and the fraction ends here; rows below are 0/0
            cf_coeffs[i:] = 0.0
            break
    return cf_coeffs


def quotient_difference_above(coeffs, offset: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Numerator degree exceeds the denominator by `offset`: the leading
    `offset` terms are kept verbatim as a polynomial correction and the QD
    recurrence runs on the rest. Returns (offset_coeffs, cf_coeffs).
    """
    c = np.asarray(coeffs, dtype=float)
    offset_coeffs = c[:offset].copy()
    cf_coeffs = quotient_difference(c[offset:])
    return offset_coeffs, cf_coeffs


def quotient_difference_below(coeffs, offset: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Denominator degree exceeds the numerator by `offset`: work on the
    reciprocal series g = 1/f, keep its first `offset` terms and run QD on
    the rest. The evaluator inverts the result again.
    Returns (offset_coeffs, cf_coeffs).
    """
    g = reciprocal_series(coeffs)
    offset_coeffs = g[:offset].copy()
    cf_coeffs = quotient_difference(g[offset:])
    return offset_coeffs, cf_coeffs
