import math

import numpy as np
import pytest

from saturation.power_series import power_series_coefficients, reciprocal_series
from saturation.quotient_difference import (
    quotient_difference,
    quotient_difference_above,
    quotient_difference_below,
)


def test_power_series_alternates_signs_and_skips_zero_frequency():
    hist = [7, 5, 4, 3, 2, 1]
    ps = power_series_coefficients(hist, 4)
    assert ps.tolist() == [5.0, -4.0, 3.0, -2.0]


def test_power_series_rejects_undersized_histogram():
    with pytest.raises(ValueError):
        power_series_coefficients([0, 3, 2], 4)


def test_reciprocal_series_of_linear_polynomial():
    # 1/(2 + x) = 0.5 - 0.25x + 0.125x^2 - 0.0625x^3
    g = reciprocal_series([2.0, 1.0, 0.0, 0.0])
    assert g.tolist() == [0.5, -0.25, 0.125, -0.0625]


def test_reciprocal_series_times_series_is_one():
    f = np.array([3.0, -1.5, 0.7, 0.2, -0.1, 0.05])
    g = reciprocal_series(f)
    product = np.convolve(f, g)[:f.size]
    assert product[0] == pytest.approx(1.0)
    assert np.allclose(product[1:], 0.0, atol=1e-12)


def test_reciprocal_series_zero_leading_coefficient_is_not_finite():
    g = reciprocal_series([0.0, 1.0, 2.0])
    assert not np.all(np.isfinite(g))


def test_quotient_difference_log_series():
    # ln(1+x)/x = 1/(1 + (1/2)x/(1 + (1/6)x/(1 + (1/3)x/(1 + (1/5)x/...))))
    coeffs = [1.0, -1 / 2, 1 / 3, -1 / 4, 1 / 5]
    cf = quotient_difference(coeffs)
    assert cf.tolist() == pytest.approx([1.0, 1 / 2, 1 / 6, 1 / 3, 1 / 5], rel=1e-12)


def test_quotient_difference_geometric_series_terminates():
    cf = quotient_difference([2.0, 1.0, 0.5])
    assert cf[0] == 2.0
    assert cf[1] == -0.5
    assert cf[2] == 0.0


def test_quotient_difference_zero_fills_after_termination():
    # 2/(1 + 0.5x) ends after two coefficients; the rows below would be 0/0
    coeffs = [2.0 * (-0.5) ** j for j in range(6)]
    assert quotient_difference(coeffs).tolist() == [2.0, 0.5, 0.0, 0.0, 0.0, 0.0]


def test_quotient_difference_short_inputs():
    assert quotient_difference([]).size == 0
    assert quotient_difference([4.0]).tolist() == [4.0]
    assert quotient_difference([4.0, 2.0]).tolist() == [4.0, -0.5]


def test_above_diagonal_keeps_leading_terms_as_offset():
    coeffs = [1.0, 2.0, -1.0, 0.5, -0.25]
    offset, cf = quotient_difference_above(coeffs, 1)
    assert offset.tolist() == [1.0]
    assert cf.size == 4
    assert cf[0] == 2.0
    assert cf[1] == 0.5


def test_below_diagonal_uses_reciprocal_series():
    coeffs = [2.0, -1.0, 0.5, -0.25]
    offset, cf = quotient_difference_below(coeffs, 1)
    assert offset.tolist() == [0.5]
    assert cf[0] == 0.25
    assert cf.size == 3


def test_zero_leading_coefficient_propagates_non_finite_values():
    cf = quotient_difference([0.0, 0.0, 0.0, 0.0])
    assert any(math.isnan(c) for c in cf[1:])
