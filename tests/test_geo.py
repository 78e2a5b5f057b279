import math

import pytest

from app.utils.geo import EARTH_RADIUS_KM, haversine_km

POINTS = [
    (28.6139, 77.2090),   # Delhi
    (19.0760, 72.8777),   # Mumbai
    (-33.8688, 151.2093),  # Sydney
    (0.0, 0.0),
    (89.9, -179.9),
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_haversine_is_symmetric(a, b):
    assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a))


@pytest.mark.parametrize("point", POINTS)
def test_haversine_same_point_is_zero(point):
    assert haversine_km(*point, *point) == 0


def test_one_degree_of_latitude():
    assert haversine_km(0, 0, 1, 0) == pytest.approx(EARTH_RADIUS_KM * math.pi / 180)


def test_antipodal_points_do_not_fail():
    assert haversine_km(0, 0, 0, 180) == pytest.approx(EARTH_RADIUS_KM * math.pi)
