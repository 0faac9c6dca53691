"""Nearest-rank quartiles shared by summary statistics and outlier fences.

Quantiles are taken as ``sorted[floor(n * p)]`` with no interpolation.
Both calculators must call this module so their quartiles never drift.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Quartiles:
    """First quartile, median and third quartile of a column."""

    q1: float
    median: float
    q3: float

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


def nearest_rank(sorted_values: np.ndarray, p: float) -> float:
    """Nearest-rank quantile of already sorted values.

    Args:
        sorted_values: Values in ascending order (non-empty)
        p: Quantile in [0, 1)

    Returns:
        The value at index floor(n * p)
    """
    return float(sorted_values[math.floor(len(sorted_values) * p)])


def nearest_rank_quartiles(values: np.ndarray) -> Quartiles:
    """Compute quartiles of unsorted values.

    Raises:
        ValueError: If values is empty
    """
    if len(values) == 0:
        raise ValueError("Cannot compute quartiles of an empty column")

    ordered = np.sort(values)
    return Quartiles(
        q1=nearest_rank(ordered, 0.25),
        median=nearest_rank(ordered, 0.5),
        q3=nearest_rank(ordered, 0.75),
    )


def fixed(value: float | None, digits: int = 2) -> str | None:
    """Format a number with a fixed number of decimals for display."""
    if value is None:
        return None
    return f"{value:.{digits}f}"
