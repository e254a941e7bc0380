from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Dict, Any, List, Sequence, Tuple

import numpy as np

from saturation.quotient_difference import (
    quotient_difference,
    quotient_difference_above,
    quotient_difference_below,
)

ON_DIAGONAL = "on"
ABOVE_DIAGONAL = "above"
BELOW_DIAGONAL = "below"


def diagonal_mode(diagonal_idx: int) -> str:
    if diagonal_idx > 0:
        return ABOVE_DIAGONAL
    if diagonal_idx < 0:
        return BELOW_DIAGONAL
    return ON_DIAGONAL


def extrapolation_grid(max_value: float, step_size: float) -> List[float]:
    """Points step, 2*step, ..., up to and including max_value."""
    if step_size <= 0:
        raise ValueError(f"step_size must be positive, got {step_size}")
    n_steps = int(math.floor(max_value / step_size + 1e-9))
    return [k * step_size for k in range(1, n_steps + 1)]


# -------------------------------
# Euler recurrence (real or complex)
# -------------------------------
def _nan_like(val):
    return complex(math.nan, math.nan) if isinstance(val, complex) else math.nan


def _ratio(num, den):
    if den == 0:
        return _nan_like(num)
    return num / den


def _rescale_factor(num, den, tolerance: float) -> float:
    total = abs(num) + abs(den)
    if total == 0:
        return 1.0
    if total > 1.0 / tolerance or total < tolerance:
        return 1.0 / total
    return 1.0


def evaluate_continued_fraction(cf_coeffs: Sequence[float], offset_coeffs: Sequence[float],
                                mode: str, val, depth: int, tolerance: float):
    """
    Evaluate the truncated continued fraction at `val` with Euler's two-term
    recurrence

        num[i] = num[i-1] + c[i]*x*num[i-2],   num[-1] = 0, num[0] = c0
        den[i] = den[i-1] + c[i]*x*den[i-2],   den[-1] = 1, den[0] = 1

    rescaling the current and previous terms whenever |num|+|den| leaves
    [tolerance, 1/tolerance]. `val` may be a float or a complex number; the
    arithmetic is the same for both.

    The diagonal mode picks the final form:
      on:    x * num/den
      above: x * (P(x) + x^m * num/den)
      below: x / (P(x) + x^m * num/den)
    where P is the polynomial of the first m = min(len(offset), depth)
    offset coefficients.
    """
    depth = min(depth, len(cf_coeffs))
    if depth < 1:
        raise ValueError("cannot evaluate an empty continued fraction")

    prev_num1, prev_num2 = cf_coeffs[0], 0.0
    prev_den1, prev_den2 = 1.0, 1.0
    for i in range(1, depth):
        coeff = cf_coeffs[i] * val
        current_num = prev_num1 + coeff * prev_num2
        current_den = prev_den1 + coeff * prev_den2

        prev_num2, prev_num1 = prev_num1, current_num
        prev_den2, prev_den1 = prev_den1, current_den

        # keep the magnitudes in range; the ratio is unchanged
        rescale = _rescale_factor(current_num, current_den, tolerance)
        if rescale != 1.0:
            prev_num1 *= rescale
            prev_num2 *= rescale
            prev_den1 *= rescale
            prev_den2 *= rescale

    fraction = _ratio(prev_num1, prev_den1)
    if mode == ON_DIAGONAL:
        return val * fraction

    n_offset = min(len(offset_coeffs), depth)
    offset_terms = sum(offset_coeffs[i] * val ** i for i in range(n_offset))
    tail = offset_terms + val ** n_offset * fraction
    if mode == ABOVE_DIAGONAL:
        return val * tail
    # below the diagonal the coefficients describe 1/f
    return _ratio(val, tail)


# -------------------------------
# Continued fraction value
# -------------------------------
@dataclass(frozen=True)
class ContinuedFraction:
    """
    Padé-type approximant of a power series, stored as continued-fraction
    coefficients plus an optional polynomial offset.

    diagonal_idx: 0 for equal numerator/denominator degrees, k > 0 when the
    numerator exceeds the denominator by k, -k when the denominator does.
    degree: number of recurrence terms used when evaluating.
    """
    ps_coeffs: Tuple[float, ...]
    cf_coeffs: Tuple[float, ...]
    offset_coeffs: Tuple[float, ...] = ()
    diagonal_idx: int = 0
    degree: int = 0

    TOLERANCE: ClassVar[float] = 1e-20
    DERIV_DELTA: ClassVar[float] = 1e-8

    def __post_init__(self):
        if len(self.offset_coeffs) != abs(self.diagonal_idx):
            raise ValueError(
                f"diagonal index {self.diagonal_idx} needs {abs(self.diagonal_idx)} offset "
                f"coefficients, got {len(self.offset_coeffs)}"
            )

    @classmethod
    def from_power_series(cls, ps_coeffs, diagonal_idx: int, degree: int) -> "ContinuedFraction":
        ps = np.asarray(ps_coeffs, dtype=float)
        if abs(diagonal_idx) > ps.size:
            raise ValueError(
                f"diagonal index {diagonal_idx} exceeds the {ps.size} available coefficients"
            )
        if diagonal_idx > 0:
            offset_coeffs, cf_coeffs = quotient_difference_above(ps, diagonal_idx)
        elif diagonal_idx < 0:
            offset_coeffs, cf_coeffs = quotient_difference_below(ps, -diagonal_idx)
        else:
            offset_coeffs, cf_coeffs = np.zeros(0), quotient_difference(ps)
        return cls(
            ps_coeffs=tuple(ps.tolist()),
            cf_coeffs=tuple(cf_coeffs.tolist()),
            offset_coeffs=tuple(offset_coeffs.tolist()),
            diagonal_idx=int(diagonal_idx),
            degree=int(degree),
        )

    @property
    def mode(self) -> str:
        return diagonal_mode(self.diagonal_idx)

    def is_valid(self) -> bool:
        return len(self.cf_coeffs) > 0

    def terminated_depth(self) -> int:
        """Number of coefficients before the first zero after c0 (the fraction ends there)."""
        for i in range(1, len(self.cf_coeffs)):
            if self.cf_coeffs[i] == 0:
                return i
        return len(self.cf_coeffs)

    def terminates_before(self, n_terms: int) -> bool:
        """True if fewer than n_terms of the available coefficients are in use."""
        return self.terminated_depth() < min(n_terms, len(self.cf_coeffs))

    def evaluate(self, val: float) -> float:
        return evaluate_continued_fraction(
            self.cf_coeffs, self.offset_coeffs, self.mode, float(val), self.degree, self.TOLERANCE
        )

    def __call__(self, val: float) -> float:
        return self.evaluate(val)

    def complex_deriv(self, val: float) -> float:
        """d/dx at val as Im(f(val + i*delta))/delta; no subtractive cancellation."""
        perturbed = complex(val, self.DERIV_DELTA)
        approx = evaluate_continued_fraction(
            self.cf_coeffs, self.offset_coeffs, self.mode, perturbed, self.degree, self.TOLERANCE
        )
        return approx.imag / self.DERIV_DELTA

    def extrapolate(self, counts_hist, max_value: float, step_size: float) -> List[float]:
        """
        Expected distinct items on the grid 0, step, ..., max_value: the
        observed distinct count plus the approximant at each grid point.
        """
        hist_sum = float(sum(counts_hist))
        estimates = [hist_sum]
        for t in extrapolation_grid(max_value, step_size):
            estimates.append(hist_sum + self.evaluate(t))
        return estimates

    # -------------------------------
    # Diagnostics
    # -------------------------------
    def paired_ps_coeff(self, i: int) -> float:
        """Power-series coefficient aligned with position i of offset + cf coefficients."""
        return self.ps_coeffs[i] if i < len(self.ps_coeffs) else math.nan

    def dump(self) -> str:
        """
        Two tab-separated tables: offset coefficients against the leading
        power-series coefficients, then CF coefficients against the
        power-series coefficients that follow the offset.
        """
        lines = ["OFFSET_COEFFS"]
        for i, coeff in enumerate(self.offset_coeffs):
            lines.append(f"{coeff:12.2f}\t{self.paired_ps_coeff(i):12.2f}")
        lines.append("CF_COEFFS")
        offset = len(self.offset_coeffs)
        for i, coeff in enumerate(self.cf_coeffs):
            lines.append(f"{coeff:12.2f}\t{self.paired_ps_coeff(i + offset):12.2f}")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.dump()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diagonal_idx": self.diagonal_idx,
            "degree": self.degree,
            "ps_coeffs": list(self.ps_coeffs),
            "cf_coeffs": list(self.cf_coeffs),
            "offset_coeffs": list(self.offset_coeffs),
        }
