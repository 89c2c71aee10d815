import pytest

import data_generator as dg
from analysis.knee import CurveType, Direction
from shape import Shape, find_shape


@pytest.mark.parametrize(
    "fixture, direction, curve",
    [
        (dg.concave_increasing, Direction.INCREASING, CurveType.CONCAVE),
        (dg.concave_decreasing, Direction.DECREASING, CurveType.CONCAVE),
        (dg.convex_increasing, Direction.INCREASING, CurveType.CONVEX),
        (dg.convex_decreasing, Direction.DECREASING, CurveType.CONVEX),
        (dg.figure2, Direction.INCREASING, CurveType.CONCAVE),
    ],
)
def test_find_shape(fixture, direction, curve):
    x, y = fixture()
    assert find_shape(x, y) == Shape(direction, curve)


def test_find_shape_two_points():
    found = find_shape([0.0, 1.0], [5.0, 1.0])
    assert found.direction is Direction.DECREASING


def test_find_shape_small_concave_curve():
    found = find_shape([0.0, 1.0, 2.0, 3.0, 4.0], [0.0, 3.0, 4.0, 4.5, 4.8])
    assert found == Shape(Direction.INCREASING, CurveType.CONCAVE)


@pytest.mark.parametrize(
    "x, y, match",
    [
        (None, [1.0, 2.0], "None"),
        ([], [], "empty"),
        ([1.0, 2.0, 3.0], [1.0, 2.0], "same length"),
        ([1.0], [1.0], "at least 2"),
    ],
)
def test_find_shape_rejects_bad_input(x, y, match):
    with pytest.raises(ValueError, match=match):
        find_shape(x, y)
