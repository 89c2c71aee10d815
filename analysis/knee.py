"""Knee point detection primitives.

This module implements the building blocks of the Kneedle algorithm.  A
curve is brought into a canonical *increasing, concave* orientation so a
single scan handles all four combinations of direction and curvature:

1. ``x`` and the smoothed ``y`` are min-max normalised to ``[0, 1]``;
2. the normalised ``y`` is reflected and/or reversed by :func:`orient`;
3. the difference curve ``y_norm - x_norm`` is formed;
4. local maxima and minima of the difference curve are located;
5. each maximum receives a threshold ``y_diff[max] - S * mean|dx|``;
6. :func:`scan_knees` walks the difference curve and confirms a knee once
   the curve drops below the threshold armed by the preceding maximum.

All functions are pure.  Indices returned by the scan refer to the
canonical orientation; :func:`map_index` translates them back to the
original sample order.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
from typing import Sequence, Tuple

import numpy as np


class CurveType(str, Enum):
    CONCAVE = "concave"
    CONVEX = "convex"


class Direction(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"


FLAT_TOLERANCE = 1e-6
"""Difference curves whose maximum does not exceed this value have no knee."""


_log = logging.getLogger(__name__)


def normalize(a: Sequence[float]) -> np.ndarray:
    """Min-max scale ``a`` to ``[0, 1]``.

    A constant input has zero span and is mapped to all zeros.
    """

    arr = np.asarray(a, dtype=float)
    if arr.size == 0:
        return arr.copy()
    lo = arr.min()
    span = arr.max() - lo
    if span == 0:
        return np.zeros_like(arr)
    return (arr - lo) / span


def orient(
    y_norm: Sequence[float], direction: Direction, curve: CurveType
) -> np.ndarray:
    """Transform normalised ``y`` into the increasing, concave orientation.

    ``decreasing``/``concave`` curves are reversed, ``decreasing``/``convex``
    curves are reflected about their maximum and ``increasing``/``convex``
    curves are reflected and then reversed.  ``x`` is never reoriented.
    """

    y = np.array(y_norm, dtype=float)
    if y.size == 0:
        return y
    top = y.max()
    if direction is Direction.DECREASING:
        if curve is CurveType.CONCAVE:
            return y[::-1].copy()
        return top - y
    if curve is CurveType.CONVEX:
        return (top - y)[::-1].copy()
    return y


def difference_curve(
    x_norm: Sequence[float], y_norm: Sequence[float]
) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(x_diff, y_diff)`` where ``y_diff = y_norm - x_norm``."""

    x = np.array(x_norm, dtype=float)
    y = np.asarray(y_norm, dtype=float)
    return x, y - x


def _local_extrema(a: np.ndarray, cmp) -> np.ndarray:
    n = a.size
    if n < 2:
        return np.empty(0, dtype=int)
    idx = [i for i in range(1, n - 1) if cmp(a[i], a[i - 1]) and cmp(a[i], a[i + 1])]
    # Endpoints only have a single neighbour to compare against.
    if cmp(a[0], a[1]):
        idx.insert(0, 0)
    if cmp(a[n - 1], a[n - 2]):
        idx.append(n - 1)
    return np.asarray(idx, dtype=int)


def local_maxima(a: Sequence[float]) -> np.ndarray:
    """Indices of local maxima of ``a`` in ascending order.

    Plateaus count: a point equal to a neighbour is still a maximum.
    """

    return _local_extrema(np.asarray(a, dtype=float), lambda u, v: u >= v)


def local_minima(a: Sequence[float]) -> np.ndarray:
    """Indices of local minima of ``a`` in ascending order."""

    return _local_extrema(np.asarray(a, dtype=float), lambda u, v: u <= v)


def mean_abs_diff(a: Sequence[float]) -> float:
    """Mean absolute difference between consecutive entries of ``a``."""

    arr = np.asarray(a, dtype=float)
    if arr.size < 2:
        return 0.0
    return float(np.mean(np.abs(np.diff(arr))))


def thresholds(
    y_diff: Sequence[float],
    maxima: Sequence[int],
    x_norm: Sequence[float],
    sensitivity: float,
) -> np.ndarray:
    """Return the decision threshold for each local maximum.

    ``tmx[k] = y_diff[maxima[k]] - sensitivity * mean|diff(x_norm)|``.  The
    result is aligned with ``maxima``.
    """

    y = np.asarray(y_diff, dtype=float)
    idx = np.asarray(maxima, dtype=int)
    return y[idx] - sensitivity * mean_abs_diff(x_norm)


@dataclass(frozen=True)
class KneeScan:
    """Outcome of :func:`scan_knees`.

    ``knee`` is the canonical index of the reported knee (``None`` if no
    knee was confirmed).  ``candidates`` lists every distinct confirmed
    index in the order the scan found them.
    """

    knee: int | None
    candidates: Tuple[int, ...]


@dataclass(frozen=True)
class _ScanState:
    threshold: float = 0.0
    threshold_index: int = -1
    cursor: int = 0
    knee: int | None = None
    candidates: Tuple[int, ...] = ()
    done: bool = False


def _step(
    state: _ScanState,
    i: int,
    y_diff: np.ndarray,
    maxima: frozenset,
    minima: frozenset,
    tmx: np.ndarray,
    online: bool,
) -> _ScanState:
    if i in maxima and state.cursor < len(tmx):
        state = replace(
            state,
            threshold=float(tmx[state.cursor]),
            threshold_index=i,
            cursor=state.cursor + 1,
        )
    if i in minima:
        state = replace(state, threshold=0.0, threshold_index=-1)

    if state.threshold_index == -1 or not y_diff[i + 1] < state.threshold:
        return state

    found = state.threshold_index
    candidates = state.candidates
    if found not in candidates:
        candidates = candidates + (found,)
        _log.debug("knee candidate confirmed at canonical index %d", found)
    return replace(state, knee=found, candidates=candidates, done=not online)


def scan_knees(
    y_diff: Sequence[float],
    maxima: Sequence[int],
    minima: Sequence[int],
    tmx: Sequence[float],
    online: bool = False,
) -> KneeScan:
    """Walk the difference curve and confirm knees.

    Each local maximum arms a threshold taken from ``tmx`` (in order) and
    each local minimum disarms it.  A knee is confirmed at the armed maximum
    as soon as the next difference value falls below the threshold.  In
    offline mode the first confirmed knee is returned; in online mode the
    scan continues and the last confirmed knee is reported.  The state is
    threaded through the scan explicitly so the history is accumulated even
    when scanning stops early.
    """

    y = np.asarray(y_diff, dtype=float)
    max_idx = [int(i) for i in maxima]
    if not max_idx:
        _log.debug("difference curve has no local maxima; no knee")
        return KneeScan(None, ())
    if y.max() <= FLAT_TOLERANCE:
        _log.debug("difference curve is flat (max %.3g); no knee", y.max())
        return KneeScan(None, ())

    max_set = frozenset(max_idx)
    min_set = frozenset(int(i) for i in minima)
    tmx_arr = np.asarray(tmx, dtype=float)

    state = _ScanState()
    for i in range(max_idx[0], y.size - 1):
        state = _step(state, i, y, max_set, min_set, tmx_arr, online)
        if state.done:
            break
    return KneeScan(state.knee, state.candidates)


def map_index(
    index: int, n: int, curve: CurveType, direction: Direction
) -> int | None:
    """Map a canonical index back to the original sample order.

    Orientations that reversed the array (``convex``/``increasing`` and
    ``concave``/``decreasing``) are undone; the others are the identity.
    ``None`` is returned if the mapped index falls outside ``[0, n)``.
    """

    reversed_ = (curve is CurveType.CONVEX and direction is Direction.INCREASING) or (
        curve is CurveType.CONCAVE and direction is Direction.DECREASING
    )
    mapped = n - 1 - index if reversed_ else index
    if 0 <= mapped < n:
        return mapped
    return None


__all__ = [
    "CurveType",
    "Direction",
    "FLAT_TOLERANCE",
    "KneeScan",
    "normalize",
    "orient",
    "difference_curve",
    "local_maxima",
    "local_minima",
    "mean_abs_diff",
    "thresholds",
    "scan_knees",
    "map_index",
]
