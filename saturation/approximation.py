from __future__ import annotations

import dataclasses
import json
import math
import sys
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np

from saturation.continued_fraction import ContinuedFraction, extrapolation_grid
from saturation.power_series import power_series_coefficients


# -------------------------------
# Configuration & results
# -------------------------------
@dataclass
class ApproximationConfig:
    """
    diagonal_idx: diagonal of the Padé table to work on (0, k > 0 above, -k below)
    max_terms:    largest number of continued-fraction terms to try
    step_size:    spacing of the extrapolation grid
    max_value:    last point of the extrapolation grid
    """
    diagonal_idx: int = 0
    max_terms: int = 100
    step_size: float = 1.0
    max_value: float = 100.0

    def __post_init__(self):
        if self.max_terms < 0:
            raise ValueError(f"max_terms must be non-negative, got {self.max_terms}")
        if self.step_size <= 0:
            raise ValueError(f"step_size must be positive, got {self.step_size}")
        if self.max_value < self.step_size:
            raise ValueError(
                f"max_value ({self.max_value}) must be at least step_size ({self.step_size})"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApproximationConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> "ApproximationConfig":
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def adjusted_max_terms(self) -> int:
        # an even number of terms keeps the estimate an underestimate
        return self.max_terms - (self.max_terms % 2)


@dataclass(frozen=True)
class FitFailure:
    """No degree between the minimum and max_terms gave a stable curve."""
    reason: str
    degrees_tried: Tuple[int, ...] = ()

    def is_valid(self) -> bool:
        return False


FitResult = Union[ContinuedFraction, FitFailure]


def check_estimates_stability(estimates: Sequence[float]) -> bool:
    """
    True if the curve never decreases and its increments never grow,
    i.e. it is non-decreasing with diminishing returns.
    """
    if not all(math.isfinite(v) for v in estimates):
        return False
    for i in range(1, len(estimates)):
        if estimates[i] < estimates[i - 1]:
            return False
        if i >= 2 and estimates[i] - estimates[i - 1] > estimates[i - 1] - estimates[i - 2]:
            return False
    return True


def _movement(a: float, b: float) -> float:
    scale = max(a, b)
    if scale == 0:
        return 0.0
    return abs((a - b) / scale)


def _relative_change(previous: float, current: float) -> float:
    if previous == 0:
        return 0.0 if current == 0 else math.inf
    return abs((previous - current) / previous)


# -------------------------------
# Degree search & bounds
# -------------------------------
class ContinuedFractionApproximation:
    TOLERANCE = 1e-20
    MIN_ALLOWED_DEGREE = 6
    MAX_BISECTION_ITERATIONS = 200

    def __init__(self, config: ApproximationConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose

    def _log(self, message: str):
        if self.verbose:
            print(f"[saturation] {message}", file=sys.stderr)

    def degrees(self) -> List[int]:
        """Degrees to try, largest first: adjusted max_terms down to the minimum, step 2."""
        return list(range(self.config.adjusted_max_terms(), self.MIN_ALLOWED_DEGREE - 1, -2))

    def _base_fraction(self, counts_hist) -> ContinuedFraction:
        hist = np.asarray(counts_hist, dtype=float)
        if np.any(hist < 0):
            raise ValueError("histogram counts must be non-negative")
        max_terms = self.config.adjusted_max_terms()
        ps_coeffs = power_series_coefficients(hist, max_terms)
        # the coefficients do not depend on the degree, only the evaluation depth does
        return ContinuedFraction.from_power_series(ps_coeffs, self.config.diagonal_idx, max_terms)

    def locate_zero_cf_deriv(self, cf: ContinuedFraction, val: float, prev_val: float) -> float:
        """
        Bisect (prev_val, val) for a sign change of the derivative and return
        the last midpoint. Without a sign change the midpoints run to the
        endpoint the curve is heading towards.
        """
        val_low, val_high = prev_val, val
        deriv_low = cf.complex_deriv(val_low)
        val_mid = (val_low + val_high) / 2.0

        diff = sys.float_info.max
        prev_deriv = sys.float_info.max
        iterations = 0
        while (diff > self.TOLERANCE and _movement(val_low, val_high) > self.TOLERANCE
               and iterations < self.MAX_BISECTION_ITERATIONS):
            val_mid = (val_low + val_high) / 2.0
            deriv_mid = cf.complex_deriv(val_mid)

            if (deriv_mid > 0 and deriv_low < 0) or (deriv_mid < 0 and deriv_low > 0):
                val_high = val_mid
            else:
                val_low = val_mid
                deriv_low = deriv_mid

            diff = _relative_change(prev_deriv, deriv_mid)
            prev_deriv = deriv_mid
            iterations += 1
        return val_mid

    def local_max(self, cf: ContinuedFraction) -> float:
        """Largest value of the approximant at its stationary points along the grid."""
        step = self.config.step_size
        current_max = cf(0.0)
        for val in extrapolation_grid(self.config.max_value, step):
            candidate = cf(self.locate_zero_cf_deriv(cf, val, val - step))
            if not math.isfinite(candidate):
                continue
            if not math.isfinite(current_max) or candidate > current_max:
                current_max = candidate
        return current_max

    def optimal_continued_fraction(self, counts_hist) -> FitResult:
        """
        Largest even degree (down to MIN_ALLOWED_DEGREE) whose extrapolated
        curve passes check_estimates_stability, or a FitFailure.
        """
        base = self._base_fraction(counts_hist)
        tried = []
        for n_terms in self.degrees():
            cf = dataclasses.replace(base, degree=n_terms)
            tried.append(n_terms)
            if not cf.is_valid():
                self._log(f"degree {n_terms}: no continued-fraction coefficients")
                continue
            if cf.terminates_before(n_terms):
                # rational series: every coefficient past the end is zero
                self._log(f"degree {n_terms}: fraction terminates after {cf.terminated_depth()} terms")
                continue
            estimates = cf.extrapolate(counts_hist, self.config.max_value, self.config.step_size)
            if check_estimates_stability(estimates):
                self._log(f"degree {n_terms}: stable")
                return cf
            self._log(f"degree {n_terms}: unstable")
        return FitFailure(reason="unable to fit continued fraction", degrees_tried=tuple(tried))

    def bound_degrees(self) -> List[int]:
        """Degrees for the bound search: like degrees(), but above MIN_ALLOWED_DEGREE."""
        return list(range(self.config.adjusted_max_terms(), self.MIN_ALLOWED_DEGREE, -2))

    def lowerbound_librarysize(self, counts_hist, upper_bound: float = math.inf) -> float:
        """
        Conservative bound: for every degree in bound_degrees() take the
        largest local maximum of the approximant over the grid, then the
        smallest of those across degrees. upper_bound caps the result and
        is off (inf) by default. Degrees whose fraction terminates early are
        skipped; returns nan when no degree gives a finite value.
        """
        degrees = self.bound_degrees()
        if not degrees:
            raise ValueError(
                f"max_terms {self.config.max_terms} leaves no degree above {self.MIN_ALLOWED_DEGREE}"
            )
        base = self._base_fraction(counts_hist)
        best = math.inf
        for n_terms in degrees:
            cf = dataclasses.replace(base, degree=n_terms)
            if cf.terminates_before(n_terms):
                self._log(f"{n_terms}\tterminated")
                continue
            candidate_best = self.local_max(cf)
            self._log(f"{n_terms}\t{candidate_best}")
            if math.isfinite(candidate_best):
                best = min(best, candidate_best)
        if math.isinf(best):
            return math.nan
        return min(best, upper_bound)
