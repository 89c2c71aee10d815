"""Synthetic curves for exercising the knee locator.

The fixtures reproduce the examples of the Kneedle manuscript together with
a handful of small hand-made curves, one per combination of direction and
curvature.  Every generator returns a tuple ``(x, y)`` of float arrays.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

import numpy as np

Curve = Tuple[np.ndarray, np.ndarray]


def noisy_gaussian(
    mu: float = 50.0, sigma: float = 10.0, N: int = 100, seed: int = 42
) -> Curve:
    """Empirical CDF of ``N`` normal draws (the manuscript's NoisyGaussian).

    ``x`` holds the sorted draws and ``y`` the fractions ``i / N``.
    """

    rng = np.random.RandomState(seed)
    z = rng.normal(loc=mu, scale=sigma, size=N)
    x = np.sort(z)
    y = np.arange(N) / float(N)
    return x, y


def figure2() -> Curve:
    """Curve of figure 2 in the manuscript: ``y = -1 / (x + 0.1) + 5``."""

    x = np.linspace(0.0, 1.0, 10)
    y = -1.0 / (x + 0.1) + 5.0
    return x, y


def convex_increasing() -> Curve:
    x = np.arange(10, dtype=float)
    y = np.array([1, 2, 3, 4, 5, 10, 15, 20, 40, 100], dtype=float)
    return x, y


def convex_decreasing() -> Curve:
    x = np.arange(10, dtype=float)
    y = np.array([100, 40, 20, 15, 10, 5, 4, 3, 2, 1], dtype=float)
    return x, y


def concave_decreasing() -> Curve:
    x = np.arange(10, dtype=float)
    y = np.array([99, 98, 97, 96, 95, 90, 85, 80, 60, 0], dtype=float)
    return x, y


def concave_increasing() -> Curve:
    x = np.arange(10, dtype=float)
    y = np.array([0, 60, 80, 85, 90, 95, 96, 97, 98, 99], dtype=float)
    return x, y


def bumpy() -> Curve:
    """Noisy convex decreasing curve with several local extrema."""

    x = np.arange(90, dtype=float)
    y = np.array(
        [
            7305.0, 6979.0, 6666.6, 6463.2, 6326.5, 6048.8, 6032.8, 5762.0, 5742.8, 5398.2,
            5256.8, 5227.0, 5001.7, 4942.0, 4854.2, 4734.6, 4558.7, 4491.1, 4411.6, 4333.0,
            4234.6, 4139.1, 4056.8, 4022.5, 3868.0, 3808.3, 3745.3, 3692.3, 3645.6, 3618.3,
            3574.3, 3504.3, 3452.4, 3401.2, 3382.4, 3340.7, 3301.1, 3247.6, 3190.3, 3180.0,
            3154.2, 3089.5, 3045.6, 2989.0, 2993.6, 2941.3, 2875.6, 2866.3, 2834.1, 2785.1,
            2759.7, 2763.2, 2720.1, 2660.1, 2690.2, 2635.7, 2632.9, 2574.6, 2556.0, 2545.7,
            2513.4, 2491.6, 2496.0, 2466.5, 2442.7, 2420.5, 2381.5, 2388.1, 2340.6, 2335.0,
            2318.9, 2319.0, 2308.2, 2262.2, 2235.8, 2259.3, 2221.0, 2202.7, 2184.3, 2170.1,
            2160.0, 2127.7, 2134.7, 2102.0, 2101.4, 2066.4, 2074.3, 2063.7, 2048.1, 2031.9,
        ]
    )
    return x, y


FIXTURES: Dict[str, Callable[[], Curve]] = {
    "noisy_gaussian": noisy_gaussian,
    "figure2": figure2,
    "convex_increasing": convex_increasing,
    "convex_decreasing": convex_decreasing,
    "concave_decreasing": concave_decreasing,
    "concave_increasing": concave_increasing,
    "bumpy": bumpy,
}
"""Fixture generators by name, all callable without arguments."""


__all__ = [
    "Curve",
    "noisy_gaussian",
    "figure2",
    "convex_increasing",
    "convex_decreasing",
    "concave_decreasing",
    "concave_increasing",
    "bumpy",
    "FIXTURES",
]
