import json
import re
from collections import Counter
from typing import Dict, Iterable, List, Optional

import numpy as np


# -------------------------------
# Normalization
# -------------------------------
_WHITESPACE = re.compile(r"\s+")
_TRAILING_PUNCT = re.compile(r"[;,.\s]+$")


def normalize_item(s: Optional[str]) -> str:
    """Canonical spelling of an item: lowercase, single spaces, no trailing ; , or ."""
    if not s:
        return ""
    collapsed = _WHITESPACE.sub(" ", s.lower()).strip()
    return _TRAILING_PUNCT.sub("", collapsed)


# -------------------------------
# Histogram construction
# -------------------------------
def histogram_from_frequencies(freq) -> np.ndarray:
    """
    freq: per-item observation counts (one entry per distinct item).
    Returns hist with hist[i] = number of items observed exactly i times.
    """
    freq = np.asarray(freq, dtype=int)
    if freq.size == 0:
        return np.zeros(1)
    if np.any(freq < 0):
        raise ValueError("frequencies must be non-negative")
    return np.bincount(freq).astype(float)


def histogram_from_observations(observations: Iterable[str], normalize: bool = True) -> np.ndarray:
    """Histogram of a raw stream of observed items (duplicates included)."""
    items = [normalize_item(x) if normalize else x for x in observations]
    counts = Counter(x for x in items if x)
    return histogram_from_frequencies(list(counts.values()))


def histogram_from_rounds(rounds: List[List[str]]) -> np.ndarray:
    """
    rounds: list[list[str]], one list of items per sampling round. Items are
    normalized and counted across all rounds, duplicates within a round
    included.
    """
    freq_counter = Counter()
    for r in rounds:
        freq_counter.update(t for t in (normalize_item(x) for x in r) if t)
    return histogram_from_frequencies(list(freq_counter.values()))


# -------------------------------
# File readers
# -------------------------------
def _data_lines(path: str):
    with open(path, "r") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            yield line_no, line


def read_frequencies(path: str) -> np.ndarray:
    """One non-negative integer count per line, one line per distinct item."""
    freq = []
    for line_no, line in _data_lines(path):
        try:
            freq.append(int(float(line.split()[0])))
        except ValueError:
            raise ValueError(f"{path}:{line_no}: expected a count, got {line!r}")
    return histogram_from_frequencies(freq)


def read_observations(path: str, normalize: bool = True) -> np.ndarray:
    """One observed item per line, repeats included. Blank lines are not items."""
    with open(path, "r") as f:
        return histogram_from_observations([line.rstrip("\n") for line in f], normalize=normalize)


def read_rounds(path: str) -> np.ndarray:
    """JSON list of sampling rounds, each a list of item strings."""
    with open(path, "r") as f:
        rounds = json.load(f)
    if not isinstance(rounds, list) or not all(isinstance(r, list) for r in rounds):
        raise ValueError(f"{path}: expected a JSON list of rounds, each a list of items")
    return histogram_from_rounds(rounds)


def read_histogram(path: str) -> np.ndarray:
    """
    Two whitespace-separated columns per line: frequency i and the number
    of items seen exactly i times. Frequencies that do not appear get 0.
    """
    entries: Dict[int, float] = {}
    for line_no, line in _data_lines(path):
        parts = line.split()
        if len(parts) != 2:
            raise ValueError(f"{path}:{line_no}: expected 'frequency count', got {line!r}")
        try:
            frequency, count = int(float(parts[0])), float(parts[1])
        except ValueError:
            raise ValueError(f"{path}:{line_no}: non-numeric entry {line!r}")
        if frequency < 0 or count < 0:
            raise ValueError(f"{path}:{line_no}: negative entry {line!r}")
        entries[frequency] = entries.get(frequency, 0.0) + count

    hist = np.zeros(max(entries) + 1 if entries else 1)
    for frequency, count in entries.items():
        hist[frequency] = count
    return hist


# -------------------------------
# Summary statistics
# -------------------------------
def histogram_stats(counts_hist) -> Dict[str, float]:
    """
    distinct: observed distinct items (sum of the histogram)
    total: total observations (sum of i * hist[i])
    f1, f2: singletons and doubletons
    """
    hist = np.asarray(counts_hist, dtype=float)
    idx = np.arange(hist.size)
    return {
        "distinct": float(hist.sum()),
        "total": float((idx * hist).sum()),
        "f1": float(hist[1]) if hist.size > 1 else 0.0,
        "f2": float(hist[2]) if hist.size > 2 else 0.0,
        "max_frequency": int(idx[hist > 0].max()) if np.any(hist > 0) else 0,
    }
