import math

import numpy as np
import pytest

from journeycraft.data_models import Coordinate
from journeycraft.geo import (
    InvalidCoordinate,
    distance_km,
    distance_matrix_km,
    distances_km_from,
    is_valid_coordinate,
)


def test_one_degree_on_equator_is_about_111_km():
    assert distance_km(Coordinate(0, 0), Coordinate(0, 1)) == pytest.approx(111.19, rel=1e-3)


def test_distance_is_symmetric_and_zero_to_itself():
    a = Coordinate(48.8566, 2.3522)
    b = Coordinate(51.5074, -0.1278)
    assert distance_km(a, b) == distance_km(b, a)
    assert distance_km(a, a) == 0.0
    assert distance_km(a, b) == pytest.approx(343.5, rel=0.01)


def test_antipodal_points_do_not_produce_nan():
    d = distance_km(Coordinate(0, 0), Coordinate(0, 180))
    assert math.isfinite(d)
    assert d == pytest.approx(math.pi * 6371.0, rel=1e-6)


@pytest.mark.parametrize("bad", [
    Coordinate(float("nan"), 0.0),
    Coordinate(0.0, float("inf")),
    Coordinate(91.0, 0.0),
    Coordinate(0.0, -180.5),
])
def test_invalid_coordinates_raise(bad):
    with pytest.raises(InvalidCoordinate):
        distance_km(bad, Coordinate(0, 0))
    with pytest.raises(InvalidCoordinate):
        distance_km(Coordinate(0, 0), bad)


def test_invalid_coordinate_is_a_value_error():
    assert issubclass(InvalidCoordinate, ValueError)


def test_is_valid_coordinate_bounds():
    assert is_valid_coordinate(90, 180)
    assert is_valid_coordinate(-90, -180)
    assert not is_valid_coordinate(None, 0)
    assert not is_valid_coordinate(float("nan"), 0)


def test_vectorised_distances_flag_invalid_entries_as_nan():
    d = distances_km_from(Coordinate(0, 0), [0.0, np.nan, 95.0], [1.0, 0.0, 0.0])
    assert d[0] == pytest.approx(distance_km(Coordinate(0, 0), Coordinate(0, 1)))
    assert np.isnan(d[1])
    assert np.isnan(d[2])


def test_distance_matrix_marks_invalid_pairs_as_infinite():
    coords = [Coordinate(0, 0), Coordinate(float("nan"), 0), Coordinate(0, 1)]
    m = distance_matrix_km(coords)
    assert m[0, 0] == 0.0
    assert m[0, 2] == m[2, 0] == pytest.approx(111.19, rel=1e-3)
    assert np.isinf(m[0, 1]) and np.isinf(m[1, 2]) and np.isinf(m[1, 1])
