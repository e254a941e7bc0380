import numpy as np


# -------------------------------
# Histogram -> power series
# -------------------------------
def power_series_coefficients(counts_hist, n_terms: int) -> np.ndarray:
    """
    Sign-alternated power series of the distinct-item curve.

    counts_hist[i] is the number of distinct items seen exactly i times, so
    the coefficient of x^(j+1) in E[new distinct items at effort x] is
    (-1)^j * counts_hist[j+1]. Returns the first n_terms of them.
    """
    hist = np.asarray(counts_hist, dtype=float)
    if n_terms < 0:
        raise ValueError(f"n_terms must be non-negative, got {n_terms}")
    if hist.size < n_terms + 1:
        raise ValueError(
            f"histogram has {hist.size} entries, need at least {n_terms + 1} for {n_terms} terms"
        )
    signs = np.where(np.arange(n_terms) % 2 == 0, 1.0, -1.0)
    return hist[1:n_terms + 1] * signs


def reciprocal_series(coeffs) -> np.ndarray:
    """
    Coefficients of g = 1/f, truncated to len(coeffs):
      g_0 = 1/f_0,  g_i = -(sum_{j<i} f_{i-j} g_j) / f_0
    A zero f_0 gives non-finite output instead of raising.
    """
    f = np.asarray(coeffs, dtype=float)
    g = np.zeros_like(f)
    if f.size == 0:
        return g
    with np.errstate(divide="ignore", invalid="ignore"):
        g[0] = np.float64(1.0) / f[0]
        for i in range(1, f.size):
            # f[i], f[i-1], ..., f[1] against g[0], ..., g[i-1]
            g[i] = -np.dot(f[i:0:-1], g[:i]) / f[0]
    return g
