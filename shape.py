"""Infer the direction and curvature of a sampled curve.

A straight line is fitted to all samples by ordinary least squares.  The
sign of the slope gives the direction.  The curvature follows from whether
the middle 60% of the samples lie above (concave) or below (convex) that
line on average.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from analysis.knee import CurveType, Direction


@dataclass(frozen=True)
class Shape:
    direction: Direction
    curve: CurveType


def find_shape(x: Sequence[float], y: Sequence[float]) -> Shape:
    """Return the :class:`Shape` of the curve ``(x, y)``.

    Raises ``ValueError`` for missing, empty or mismatched inputs and for
    fewer than two points.
    """

    if x is None or y is None:
        raise ValueError("x and y must not be None")
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.size == 0 or ys.size == 0:
        raise ValueError("x and y must not be empty")
    if xs.size != ys.size:
        raise ValueError("x and y must have the same length")
    if xs.size < 2:
        raise ValueError("need at least 2 points for shape detection")

    slope, intercept = np.polyfit(xs, ys, 1)

    n = xs.size
    lo, hi = int(n * 0.2), int(n * 0.8)
    if lo >= hi:
        lo, hi = 0, n - 1
    window = slice(lo, hi)
    q = float(np.mean(ys[window]) - np.mean(xs[window] * slope + intercept))

    direction = Direction.INCREASING if slope > 0 else Direction.DECREASING
    curve = CurveType.CONCAVE if q > 0 else CurveType.CONVEX
    return Shape(direction, curve)


__all__ = ["Shape", "find_shape"]
