"""Knee and elbow location for discretely sampled curves.

:func:`locate` runs the complete pipeline once and returns an immutable
:class:`KneeResult`::

    smooth -> normalise -> orient -> difference -> extrema -> threshold -> scan

:class:`KneeLocator` wraps the same computation behind read-only
properties.  "Elbow" accessors are aliases of the "knee" accessors; the two
words name the same feature on concave and convex curves respectively.

Inputs are validated up front and invalid arguments raise ``ValueError``.
Past validation every numerical edge case (flat curves, degenerate fits) is
absorbed and reported as a ``None`` knee.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Sequence, Tuple

import numpy as np

from analysis.knee import (
    CurveType,
    Direction,
    difference_curve,
    local_maxima,
    local_minima,
    map_index,
    normalize,
    orient,
    scan_knees,
    thresholds,
)
from smoothing import Interpolation, get_smoother


_log = logging.getLogger(__name__)


def _frozen(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class Diagnostics:
    """Intermediate arrays of the pipeline, kept for debugging and plots.

    ``y_normalized`` is orientation corrected.  All arrays are read-only.
    """

    y_smoothed: np.ndarray
    x_normalized: np.ndarray
    y_normalized: np.ndarray
    x_difference: np.ndarray
    y_difference: np.ndarray
    maxima_indices: np.ndarray
    minima_indices: np.ndarray
    thresholds: np.ndarray


@dataclass(frozen=True, eq=False)
class KneeResult:
    """Knee detection outcome for one curve.

    ``knee``/``knee_y`` are in the original coordinates, ``norm_knee`` and
    ``norm_knee_y`` in the normalised, canonically oriented coordinates.
    Note that ``norm_knee`` is *not* un-reversed for convex increasing and
    concave decreasing curves while ``knee`` is.  The ``all_*`` tuples hold
    every distinct knee found while scanning, in discovery order.
    """

    x: np.ndarray
    y: np.ndarray
    knee: float | None
    norm_knee: float | None
    knee_y: float | None
    norm_knee_y: float | None
    knee_index: int | None
    all_knees: Tuple[float, ...]
    all_norm_knees: Tuple[float, ...]
    all_knees_y: Tuple[float, ...]
    all_norm_knees_y: Tuple[float, ...]
    diagnostics: Diagnostics = field(repr=False)
    sensitivity: float = 1.0
    curve: CurveType = CurveType.CONCAVE
    direction: Direction = Direction.INCREASING
    interp_method: Interpolation = Interpolation.SPLINE
    online: bool = False
    polynomial_degree: int = 7

    @property
    def elbow(self) -> float | None:
        return self.knee

    @property
    def norm_elbow(self) -> float | None:
        return self.norm_knee

    @property
    def elbow_y(self) -> float | None:
        return self.knee_y

    @property
    def norm_elbow_y(self) -> float | None:
        return self.norm_knee_y

    @property
    def all_elbows(self) -> Tuple[float, ...]:
        return self.all_knees

    @property
    def all_norm_elbows(self) -> Tuple[float, ...]:
        return self.all_norm_knees

    @property
    def all_elbows_y(self) -> Tuple[float, ...]:
        return self.all_knees_y

    @property
    def all_norm_elbows_y(self) -> Tuple[float, ...]:
        return self.all_norm_knees_y


def _coerce_enum(value, enum_cls, name: str):
    if value is None:
        raise ValueError(f"{name} must not be None")
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{name} must be one of {{{choices}}}, got {value!r}") from None


def _as_curve_array(values, name: str) -> np.ndarray:
    if values is None:
        raise ValueError(f"{name} must not be None")
    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a sequence of numbers") from exc
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional")
    if arr.size == 0:
        raise ValueError(f"{name} must not be empty")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must not contain NaN or infinite values")
    return arr


def locate(
    x: Sequence[float],
    y: Sequence[float],
    sensitivity: float = 1.0,
    curve: CurveType | str = CurveType.CONCAVE,
    direction: Direction | str = Direction.INCREASING,
    interp_method: Interpolation | str = Interpolation.SPLINE,
    online: bool = False,
    polynomial_degree: int = 7,
) -> KneeResult:
    """Locate the knee (concave) or elbow (convex) of the curve ``(x, y)``.

    Parameters
    ----------
    x, y : sequence of float
        Samples of the curve.  Both must have the same length of at least
        two and contain only finite values.
    sensitivity : float
        ``S`` in the Kneedle paper.  ``0`` accepts the first local maximum of
        the difference curve; larger values demand a deeper drop after a
        maximum before it is confirmed.
    curve : {"concave", "convex"}
        Curvature of the input.
    direction : {"increasing", "decreasing"}
        Overall trend of the input.
    interp_method : {"spline", "polynomial"}
        Smoothing applied before normalisation.
    online : bool
        If ``False`` the first confirmed knee is reported.  If ``True`` the
        scan runs to the end and the last confirmed knee is reported.
    polynomial_degree : int
        Degree of the fit when ``interp_method="polynomial"``.

    Returns
    -------
    KneeResult
        ``knee`` is ``None`` when no knee qualifies.
    """

    xs = _as_curve_array(x, "x")
    ys = _as_curve_array(y, "y")
    if xs.size != ys.size:
        raise ValueError(
            f"x and y must have the same length ({xs.size} != {ys.size})"
        )
    if xs.size < 2:
        raise ValueError("need at least 2 data points")
    curve = _coerce_enum(curve, CurveType, "curve")
    direction = _coerce_enum(direction, Direction, "direction")
    interp_method = _coerce_enum(interp_method, Interpolation, "interp_method")
    sensitivity = float(sensitivity)
    if not sensitivity >= 0:
        raise ValueError("sensitivity must be non-negative")
    if int(polynomial_degree) < 0:
        raise ValueError("polynomial_degree must be non-negative")
    polynomial_degree = int(polynomial_degree)

    n = xs.size
    smoother = get_smoother(interp_method, polynomial_degree)
    y_smoothed = smoother.smooth(xs, ys)

    x_norm = normalize(xs)
    y_norm = orient(normalize(y_smoothed), direction, curve)
    x_diff, y_diff = difference_curve(x_norm, y_norm)

    maxima = local_maxima(y_diff)
    minima = local_minima(y_diff)
    tmx = thresholds(y_diff, maxima, x_norm, sensitivity)
    _log.debug(
        "difference curve: %d maxima, %d minima, peak %.3g",
        maxima.size,
        minima.size,
        y_diff.max(),
    )

    scan = scan_knees(y_diff, maxima, minima, tmx, online=online)

    all_knees: list[float] = []
    all_norm_knees: list[float] = []
    all_knees_y: list[float] = []
    all_norm_knees_y: list[float] = []
    for idx in scan.candidates:
        mapped = map_index(idx, n, curve, direction)
        if mapped is None:
            continue
        value = float(xs[mapped])
        if value in all_knees:
            continue
        all_knees.append(value)
        all_norm_knees.append(float(x_norm[idx]))
        all_knees_y.append(float(ys[mapped]))
        all_norm_knees_y.append(float(y_norm[idx]))

    knee = norm_knee = knee_y = norm_knee_y = None
    knee_index = None
    if scan.knee is not None:
        knee_index = map_index(scan.knee, n, curve, direction)
    if knee_index is not None:
        knee = float(xs[knee_index])
        norm_knee = float(x_norm[scan.knee])
        knee_y = float(ys[knee_index])
        norm_knee_y = float(y_norm[scan.knee])
        _log.debug("knee at x=%s (index %d)", knee, knee_index)
    else:
        _log.debug("no knee found")

    diagnostics = Diagnostics(
        y_smoothed=_frozen(y_smoothed),
        x_normalized=_frozen(x_norm),
        y_normalized=_frozen(y_norm),
        x_difference=_frozen(x_diff),
        y_difference=_frozen(y_diff),
        maxima_indices=_frozen(maxima),
        minima_indices=_frozen(minima),
        thresholds=_frozen(tmx),
    )
    return KneeResult(
        x=_frozen(xs),
        y=_frozen(ys),
        knee=knee,
        norm_knee=norm_knee,
        knee_y=knee_y,
        norm_knee_y=norm_knee_y,
        knee_index=knee_index,
        all_knees=tuple(all_knees),
        all_norm_knees=tuple(all_norm_knees),
        all_knees_y=tuple(all_knees_y),
        all_norm_knees_y=tuple(all_norm_knees_y),
        diagnostics=diagnostics,
        sensitivity=sensitivity,
        curve=curve,
        direction=direction,
        interp_method=interp_method,
        online=bool(online),
        polynomial_degree=polynomial_degree,
    )


class KneeLocator:
    """Find the point of maximum curvature of ``(x, y)``.

    The whole computation happens in the constructor; attributes are plain
    reads of the stored :class:`KneeResult`.  Array attributes return fresh
    copies on every access.

    >>> kl = KneeLocator(range(10), [0, 60, 80, 85, 90, 95, 96, 97, 98, 99])
    >>> kl.knee
    2.0
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        S: float = 1.0,
        curve: CurveType | str = CurveType.CONCAVE,
        direction: Direction | str = Direction.INCREASING,
        interp_method: Interpolation | str = Interpolation.SPLINE,
        online: bool = False,
        polynomial_degree: int = 7,
    ) -> None:
        self._result = locate(
            x,
            y,
            sensitivity=S,
            curve=curve,
            direction=direction,
            interp_method=interp_method,
            online=online,
            polynomial_degree=polynomial_degree,
        )

    @property
    def result(self) -> KneeResult:
        return self._result

    @property
    def S(self) -> float:
        return self._result.sensitivity

    @property
    def curve(self) -> CurveType:
        return self._result.curve

    @property
    def direction(self) -> Direction:
        return self._result.direction

    @property
    def online(self) -> bool:
        return self._result.online

    # -- knee ---------------------------------------------------------------

    @property
    def knee(self) -> float | None:
        return self._result.knee

    @property
    def norm_knee(self) -> float | None:
        return self._result.norm_knee

    @property
    def knee_y(self) -> float | None:
        return self._result.knee_y

    @property
    def norm_knee_y(self) -> float | None:
        return self._result.norm_knee_y

    @property
    def all_knees(self) -> list[float]:
        return list(self._result.all_knees)

    @property
    def all_norm_knees(self) -> list[float]:
        return list(self._result.all_norm_knees)

    @property
    def all_knees_y(self) -> list[float]:
        return list(self._result.all_knees_y)

    @property
    def all_norm_knees_y(self) -> list[float]:
        return list(self._result.all_norm_knees_y)

    # -- elbow aliases ------------------------------------------------------

    @property
    def elbow(self) -> float | None:
        return self.knee

    @property
    def norm_elbow(self) -> float | None:
        return self.norm_knee

    @property
    def elbow_y(self) -> float | None:
        return self.knee_y

    @property
    def norm_elbow_y(self) -> float | None:
        return self.norm_knee_y

    @property
    def all_elbows(self) -> list[float]:
        return self.all_knees

    @property
    def all_norm_elbows(self) -> list[float]:
        return self.all_norm_knees

    @property
    def all_elbows_y(self) -> list[float]:
        return self.all_knees_y

    @property
    def all_norm_elbows_y(self) -> list[float]:
        return self.all_norm_knees_y

    # -- diagnostics --------------------------------------------------------

    @property
    def x(self) -> np.ndarray:
        return self._result.x.copy()

    @property
    def y(self) -> np.ndarray:
        return self._result.y.copy()

    @property
    def y_smoothed(self) -> np.ndarray:
        return self._result.diagnostics.y_smoothed.copy()

    @property
    def x_normalized(self) -> np.ndarray:
        return self._result.diagnostics.x_normalized.copy()

    @property
    def y_normalized(self) -> np.ndarray:
        return self._result.diagnostics.y_normalized.copy()

    @property
    def x_difference(self) -> np.ndarray:
        return self._result.diagnostics.x_difference.copy()

    @property
    def y_difference(self) -> np.ndarray:
        return self._result.diagnostics.y_difference.copy()

    @property
    def maxima_indices(self) -> np.ndarray:
        return self._result.diagnostics.maxima_indices.copy()

    @property
    def minima_indices(self) -> np.ndarray:
        return self._result.diagnostics.minima_indices.copy()

    @property
    def Tmx(self) -> np.ndarray:
        return self._result.diagnostics.thresholds.copy()


__all__ = [
    "CurveType",
    "Direction",
    "Interpolation",
    "Diagnostics",
    "KneeResult",
    "KneeLocator",
    "locate",
]
