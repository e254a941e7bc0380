import json

import numpy as np
import pytest

from saturation.histogram import (
    histogram_from_frequencies,
    histogram_from_observations,
    histogram_from_rounds,
    histogram_stats,
    normalize_item,
    read_frequencies,
    read_histogram,
    read_observations,
    read_rounds,
)


@pytest.mark.parametrize("raw,expected", [
    ("  Foo   Bar.;", "foo bar"),
    ("Paris,", "paris"),
    ("a.b", "a.b"),
    ("x , ;", "x"),
    ("", ""),
    (None, ""),
])
def test_normalize_item(raw, expected):
    assert normalize_item(raw) == expected


def test_histogram_from_frequencies_counts_items_per_frequency():
    hist = histogram_from_frequencies([1, 1, 2, 5])
    assert hist.tolist() == [0.0, 2.0, 1.0, 0.0, 0.0, 1.0]


def test_histogram_from_empty_frequencies():
    assert histogram_from_frequencies([]).tolist() == [0.0]


def test_histogram_from_negative_frequencies_raises():
    with pytest.raises(ValueError):
        histogram_from_frequencies([1, -2])


def test_histogram_from_observations_merges_spellings():
    hist = histogram_from_observations(["Apple", "apple.", "banana", "", "  "])
    assert hist.tolist() == [0.0, 1.0, 1.0]


def test_histogram_from_observations_without_normalization():
    hist = histogram_from_observations(["Apple", "apple", "apple"], normalize=False)
    assert hist.tolist() == [0.0, 1.0, 1.0]


def test_histogram_from_rounds_counts_across_rounds():
    hist = histogram_from_rounds([["x", "y"], ["X", "z"], ["x;"]])
    assert hist.tolist() == [0.0, 2.0, 0.0, 1.0]


def test_read_frequencies_skips_comments_and_blanks(tmp_path):
    path = tmp_path / "counts.txt"
    path.write_text("# per-item counts\n3\n\n1\n1 extra-column\n2.0\n")
    assert read_frequencies(str(path)).tolist() == [0.0, 2.0, 1.0, 1.0]


def test_read_frequencies_rejects_non_numeric_line(tmp_path):
    path = tmp_path / "counts.txt"
    path.write_text("3\nabc\n")
    with pytest.raises(ValueError, match=":2:"):
        read_frequencies(str(path))


def test_read_histogram_fills_missing_frequencies(tmp_path):
    path = tmp_path / "hist.txt"
    path.write_text("1 4\n3 2\n3 1\n")
    assert read_histogram(str(path)).tolist() == [0.0, 4.0, 0.0, 3.0]


def test_read_histogram_accepts_fractional_counts(tmp_path):
    path = tmp_path / "hist.txt"
    path.write_text("1\t0.5\n2\t0.25\n")
    assert read_histogram(str(path)).tolist() == [0.0, 0.5, 0.25]


@pytest.mark.parametrize("content", ["1 2 3\n", "1 x\n", "-1 2\n", "2 -4\n"])
def test_read_histogram_rejects_malformed_lines(tmp_path, content):
    path = tmp_path / "hist.txt"
    path.write_text(content)
    with pytest.raises(ValueError):
        read_histogram(str(path))


def test_read_histogram_of_empty_file(tmp_path):
    path = tmp_path / "hist.txt"
    path.write_text("# nothing yet\n")
    assert read_histogram(str(path)).tolist() == [0.0]


def test_histogram_stats():
    stats = histogram_stats(np.array([0.0, 4.0, 2.0, 0.0, 1.0]))
    assert stats == {
        "distinct": 7.0,
        "total": 12.0,
        "f1": 4.0,
        "f2": 2.0,
        "max_frequency": 4,
    }


def test_histogram_stats_of_empty_histogram():
    stats = histogram_stats([0.0])
    assert stats["distinct"] == 0.0
    assert stats["f1"] == 0.0
    assert stats["max_frequency"] == 0


def test_read_observations_normalizes_items(tmp_path):
    path = tmp_path / "items.txt"
    path.write_text("Apple\napple.\n\nBanana \nbanana;\nbanana\ncherry\n")
    assert read_observations(str(path)).tolist() == [0.0, 1.0, 1.0, 1.0]


def test_read_observations_without_normalization(tmp_path):
    path = tmp_path / "items.txt"
    path.write_text("Apple\napple\napple\n")
    assert read_observations(str(path), normalize=False).tolist() == [0.0, 1.0, 1.0]


def test_read_rounds(tmp_path):
    path = tmp_path / "rounds.json"
    path.write_text(json.dumps([["Apple", "banana"], ["apple.", "cherry"], ["APPLE"]]))
    assert read_rounds(str(path)).tolist() == [0.0, 2.0, 0.0, 1.0]


@pytest.mark.parametrize("content", ['{"rounds": []}', '["a", "b"]', "not json"])
def test_read_rounds_rejects_other_shapes(tmp_path, content):
    path = tmp_path / "rounds.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        read_rounds(str(path))
