"""Curve smoothing strategies used ahead of knee detection.

Two interchangeable strategies are provided.  :class:`SplineSmoother`
evaluates a natural cubic spline at the original ``x`` values and
:class:`PolynomialSmoother` evaluates a least-squares polynomial of a given
degree.  Neither raises on numerically awkward input: the spline falls back
to the raw ``y`` and the polynomial falls back to :func:`linear_fit`, which
itself returns the raw ``y`` when its normal equations are singular.

Strategies are looked up by name through :func:`get_smoother` so new ones
can be registered in :data:`SMOOTHERS` without touching the knee scan.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import warnings
from typing import Callable, Dict, Sequence

import numpy as np
from numpy.exceptions import RankWarning
from scipy.interpolate import CubicSpline


class Interpolation(str, Enum):
    SPLINE = "spline"
    POLYNOMIAL = "polynomial"


SINGULAR_TOLERANCE = 1e-10
"""Determinant magnitude below which the linear fit is considered singular."""


_log = logging.getLogger(__name__)


def linear_fit(x: Sequence[float], y: Sequence[float]) -> np.ndarray:
    """Return the ordinary least-squares line through ``(x, y)`` at ``x``.

    The closed form ``slope = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)`` is used.  If
    the denominator is below :data:`SINGULAR_TOLERANCE` in magnitude (e.g.
    all ``x`` equal) a copy of ``y`` is returned instead.
    """

    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    n = xs.size
    sum_x = xs.sum()
    sum_y = ys.sum()
    denom = n * np.dot(xs, xs) - sum_x * sum_x
    if abs(denom) < SINGULAR_TOLERANCE:
        _log.warning("linear fit is degenerate; using raw y values")
        return ys.copy()
    slope = (n * np.dot(xs, ys) - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return slope * xs + intercept


@dataclass(frozen=True)
class SplineSmoother:
    """Natural cubic spline interpolation evaluated at the sample points."""

    def smooth(self, x: Sequence[float], y: Sequence[float]) -> np.ndarray:
        xs = np.asarray(x, dtype=float)
        ys = np.asarray(y, dtype=float)
        try:
            spline = CubicSpline(xs, ys, bc_type="natural")
            return np.asarray(spline(xs), dtype=float)
        except (ValueError, np.linalg.LinAlgError) as exc:
            _log.warning("spline interpolation failed (%s); using raw y values", exc)
            return ys.copy()


@dataclass(frozen=True)
class PolynomialSmoother:
    """Least-squares polynomial fit of ``degree`` evaluated at the samples."""

    degree: int = 7

    def smooth(self, x: Sequence[float], y: Sequence[float]) -> np.ndarray:
        xs = np.asarray(x, dtype=float)
        ys = np.asarray(y, dtype=float)
        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", RankWarning)
                coeffs = np.polyfit(xs, ys, self.degree)
            if any(issubclass(w.category, RankWarning) for w in caught):
                _log.warning(
                    "polynomial fit of degree %d is poorly conditioned", self.degree
                )
            if not np.all(np.isfinite(coeffs)):
                raise np.linalg.LinAlgError("non-finite polynomial coefficients")
        except (ValueError, np.linalg.LinAlgError) as exc:
            _log.warning("polynomial fit failed (%s); falling back to linear fit", exc)
            return linear_fit(xs, ys)
        return np.polyval(coeffs, xs)


SMOOTHERS: Dict[Interpolation, Callable[[int], object]] = {
    Interpolation.SPLINE: lambda degree: SplineSmoother(),
    Interpolation.POLYNOMIAL: lambda degree: PolynomialSmoother(degree),
}
"""Factories keyed by interpolation mode; each accepts the polynomial degree."""


def get_smoother(mode: Interpolation | str, degree: int = 7):
    """Return the smoothing strategy registered for ``mode``."""

    try:
        key = Interpolation(mode.lower() if isinstance(mode, str) else mode)
    except ValueError:
        raise ValueError(f"unknown interpolation method: {mode!r}") from None
    return SMOOTHERS[key](degree)


__all__ = [
    "Interpolation",
    "SINGULAR_TOLERANCE",
    "linear_fit",
    "SplineSmoother",
    "PolynomialSmoother",
    "SMOOTHERS",
    "get_smoother",
]
