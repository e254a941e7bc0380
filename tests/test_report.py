import math

import pytest

from saturation.continued_fraction import ContinuedFraction
from saturation.histogram import histogram_stats
from saturation.report import coefficient_tables, curve_table, summary_table


def test_curve_table_spaces_effort_by_step():
    curve = curve_table([5.0, 6.0, 6.5], 0.5)
    assert list(curve.columns) == ["effort", "expected_distinct"]
    assert curve["effort"].tolist() == [0.0, 0.5, 1.0]
    assert curve["expected_distinct"].tolist() == [5.0, 6.0, 6.5]


def test_coefficient_tables_pair_with_power_series():
    cf = ContinuedFraction.from_power_series([1.0, 2.0, -1.0, 0.5, -0.25], 1, 3)
    offset_df, cf_df = coefficient_tables(cf)
    assert offset_df["offset_coeff"].tolist() == [1.0]
    assert offset_df["ps_coeff"].tolist() == [1.0]
    assert cf_df["cf_coeff"].tolist()[:2] == [2.0, 0.5]
    assert cf_df["ps_coeff"].tolist() == [2.0, -1.0, 0.5, -0.25]


def test_coefficient_tables_pad_missing_power_series_with_nan():
    cf = ContinuedFraction(ps_coeffs=(3.0,), cf_coeffs=(3.0, 0.5), degree=2)
    offset_df, cf_df = coefficient_tables(cf)
    assert len(offset_df) == 0
    assert cf_df["ps_coeff"].tolist()[0] == 3.0
    assert math.isnan(cf_df["ps_coeff"].tolist()[1])


def test_summary_table_includes_fit_and_bound():
    stats = histogram_stats([0.0, 4.0, 2.0])
    cf = ContinuedFraction(ps_coeffs=(), cf_coeffs=(4.0, 0.5), degree=2)
    table = summary_table(stats, cf, [6.0, 8.0, 9.0], lower_bound=2.5)
    assert len(table) == 1
    row = table.iloc[0]
    assert row["Observed distinct"] == 6.0
    assert row["Total observations"] == 8.0
    assert row["Degree"] == 2
    assert row["Expected distinct at max effort"] == 9.0
    assert row["Lower bound"] == pytest.approx(2.5)


def test_summary_table_without_fit():
    table = summary_table(histogram_stats([0.0, 1.0]), None)
    assert "Degree" not in table.columns
    assert "Lower bound" not in table.columns
    assert table.iloc[0]["Singletons (f1)"] == 1.0
