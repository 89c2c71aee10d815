import numpy as np
import pytest

from analysis.knee import (
    CurveType,
    Direction,
    difference_curve,
    local_maxima,
    local_minima,
    map_index,
    mean_abs_diff,
    normalize,
    orient,
    scan_knees,
    thresholds,
)


def test_normalize_unit_range():
    assert normalize([2.0, 4.0, 6.0]).tolist() == [0.0, 0.5, 1.0]


def test_normalize_constant_is_zero():
    out = normalize([3.0, 3.0, 3.0])
    assert out.tolist() == [0.0, 0.0, 0.0]


@pytest.mark.parametrize(
    "direction, curve, expected",
    [
        (Direction.INCREASING, CurveType.CONCAVE, [0.0, 0.2, 1.0]),
        (Direction.DECREASING, CurveType.CONCAVE, [1.0, 0.2, 0.0]),
        (Direction.DECREASING, CurveType.CONVEX, [1.0, 0.8, 0.0]),
        (Direction.INCREASING, CurveType.CONVEX, [0.0, 0.8, 1.0]),
    ],
)
def test_orient(direction, curve, expected):
    y = np.array([0.0, 0.2, 1.0])
    out = orient(y, direction, curve)
    assert out == pytest.approx(expected)
    # input is left untouched
    assert y.tolist() == [0.0, 0.2, 1.0]


def test_difference_curve():
    x_diff, y_diff = difference_curve([0.0, 0.5, 1.0], [0.0, 0.9, 1.0])
    assert x_diff.tolist() == [0.0, 0.5, 1.0]
    assert y_diff == pytest.approx([0.0, 0.4, 0.0])


def test_extrema_plateau_tolerant():
    a = [0.0, 1.0, 1.0, 0.0]
    assert local_maxima(a).tolist() == [1, 2]
    assert local_minima(a).tolist() == [0, 3]


def test_extrema_endpoints():
    a = [3.0, 1.0, 2.0]
    assert local_maxima(a).tolist() == [0, 2]
    assert local_minima(a).tolist() == [1]


def test_mean_abs_diff():
    assert mean_abs_diff([0.0, 0.5, 1.0]) == pytest.approx(0.5)
    assert mean_abs_diff([1.0, 0.0, 1.0]) == pytest.approx(1.0)
    assert mean_abs_diff([4.0]) == 0.0


def test_thresholds_aligned_with_maxima():
    y_diff = [0.1, 0.5, 0.2, 0.4, 0.0]
    x_norm = [0.0, 0.25, 0.5, 0.75, 1.0]
    tmx = thresholds(y_diff, [1, 3], x_norm, 1.0)
    assert tmx == pytest.approx([0.25, 0.15])
    assert thresholds(y_diff, [1, 3], x_norm, 0.0) == pytest.approx([0.5, 0.4])


def _two_bumps():
    y = np.array([0.0, 0.3, 0.1, 0.05, 0.5, 0.1, 0.0])
    maxima = local_maxima(y)
    minima = local_minima(y)
    assert maxima.tolist() == [1, 4]
    assert minima.tolist() == [0, 3, 6]
    return y, maxima, minima, y[maxima]


def test_scan_offline_stops_at_first_knee():
    y, maxima, minima, tmx = _two_bumps()
    scan = scan_knees(y, maxima, minima, tmx, online=False)
    assert scan.knee == 1
    assert scan.candidates == (1,)


def test_scan_online_reports_last_knee():
    y, maxima, minima, tmx = _two_bumps()
    scan = scan_knees(y, maxima, minima, tmx, online=True)
    assert scan.knee == 4
    assert scan.candidates == (1, 4)


def test_scan_minimum_disarms_threshold():
    y = np.array([0.0, 0.3, 0.2, 0.25, 0.0])
    maxima = local_maxima(y)
    minima = local_minima(y)
    scan = scan_knees(y, maxima, minima, [0.15, 0.1])
    assert scan.knee == 3


def test_scan_flat_difference_curve():
    y = np.array([0.0, -0.1, -0.2])
    scan = scan_knees(y, local_maxima(y), local_minima(y), [0.0])
    assert scan.knee is None
    assert scan.candidates == ()


def test_scan_without_maxima():
    scan = scan_knees([0.0, 0.5, 0.2], [], [0], [])
    assert scan.knee is None


@pytest.mark.parametrize(
    "curve, direction, expected",
    [
        (CurveType.CONCAVE, Direction.INCREASING, 2),
        (CurveType.CONVEX, Direction.DECREASING, 2),
        (CurveType.CONVEX, Direction.INCREASING, 7),
        (CurveType.CONCAVE, Direction.DECREASING, 7),
    ],
)
def test_map_index(curve, direction, expected):
    assert map_index(2, 10, curve, direction) == expected


def test_map_index_out_of_range():
    assert map_index(12, 10, CurveType.CONVEX, Direction.INCREASING) is None
    assert map_index(12, 10, CurveType.CONCAVE, Direction.INCREASING) is None
