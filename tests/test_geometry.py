import math

import pytest

from routing.geometry import (
    haversine_distance_km,
    line_string_to_wkt,
    point_to_wkt,
    route_length_km,
)
from routing.geofence import measure_endpoint_proximity
from trips.models import Coordinate

CALI_CENTER = (3.4516, -76.5320)

SAMPLE_POINTS = [
    (3.4516, -76.5320),     # Cali
    (3.3750, -76.5330),     # campus
    (4.7110, -74.0721),     # Bogota
    (-33.8688, 151.2093),   # Sydney
    (51.5074, -0.1278),     # London
    (0.0, 179.9),
    (0.0, -179.9),
]


@pytest.mark.parametrize("point", SAMPLE_POINTS)
def test_distance_to_self_is_zero(point):
    assert haversine_distance_km(*point, *point) == 0.0


@pytest.mark.parametrize("a", SAMPLE_POINTS)
@pytest.mark.parametrize("b", SAMPLE_POINTS[:4])
def test_distance_is_symmetric(a, b):
    assert haversine_distance_km(*a, *b) == pytest.approx(haversine_distance_km(*b, *a), rel=1e-12, abs=1e-12)


def test_two_km_north_of_cali_center():
    """
    0.01798 degrees of latitude is ~2km; the haversine result must be within 1% of 2.0.
    """
    lat, lng = CALI_CENTER
    distance = haversine_distance_km(lat, lng, lat + 0.01798, lng)
    assert distance == pytest.approx(2.0, rel=0.01)


def test_distance_across_antimeridian_is_short():
    # 0.2 degrees of longitude at the equator, not ~40,000km the long way round
    distance = haversine_distance_km(0.0, 179.9, 0.0, -179.9)
    assert distance == pytest.approx(22.24, rel=0.01)


def test_route_length_of_short_paths_is_zero():
    assert route_length_km([]) == 0.0
    assert route_length_km([CALI_CENTER]) == 0.0


def test_route_length_of_two_points_equals_haversine():
    p, q = (3.45, -76.53), (3.46, -76.54)
    assert route_length_km([p, q]) == haversine_distance_km(*p, *q)


def test_route_length_is_running_sum():
    p, q, r = (3.45, -76.53), (3.46, -76.54), (3.47, -76.53)
    expected = haversine_distance_km(*p, *q) + haversine_distance_km(*q, *r)
    assert route_length_km([p, q, r]) == pytest.approx(expected)


def test_route_length_accepts_coordinates():
    path = [Coordinate(3.45, -76.53), Coordinate(3.46, -76.54)]
    assert route_length_km(path) == haversine_distance_km(3.45, -76.53, 3.46, -76.54)


def test_point_to_wkt_prints_longitude_first():
    assert point_to_wkt(3.4516, -76.532) == "POINT(-76.532 3.4516)"


def test_point_to_wkt_does_not_validate():
    # callers validate; NaN goes straight into the text
    assert point_to_wkt(math.nan, 1.5) == "POINT(1.5 nan)"


def test_line_string_to_wkt():
    assert line_string_to_wkt([(3.45, -76.53), (3.46, -76.54)]) == "LINESTRING(-76.53 3.45, -76.54 3.46)"


def test_line_string_to_wkt_accepts_coordinates():
    coords = (Coordinate(3.45, -76.53), Coordinate(3.46, -76.54))
    assert line_string_to_wkt(coords) == "LINESTRING(-76.53 3.45, -76.54 3.46)"


@pytest.mark.parametrize("coords", [[], [(3.45, -76.53)]])
def test_line_string_degenerate_strict_raises(coords):
    with pytest.raises(ValueError):
        line_string_to_wkt(coords)


@pytest.mark.parametrize("coords", [[], [(3.45, -76.53)]])
def test_line_string_degenerate_lenient_omits_geometry(coords):
    assert line_string_to_wkt(coords, strict=False) is None


def test_endpoint_proximity_requires_both_ends():
    query_origin, query_destination = (3.45, -76.53), (3.40, -76.50)

    near = measure_endpoint_proximity("t1", query_origin, query_destination, (3.451, -76.531), (3.401, -76.501))
    assert near.origin_distance_km == pytest.approx(0.157, abs=0.01)
    assert near.destination_distance_km == pytest.approx(0.157, abs=0.01)
    assert near.within(2.0)

    # origin ~5km north, destination identical
    far_origin = measure_endpoint_proximity("t2", query_origin, query_destination, (3.495, -76.53), query_destination)
    assert far_origin.destination_distance_km == 0.0
    assert not far_origin.within(2.0)


def test_endpoint_proximity_threshold_is_inclusive():
    lat, lng = CALI_CENTER
    proximity = measure_endpoint_proximity("t", CALI_CENTER, CALI_CENTER, (lat + 0.01798, lng), CALI_CENTER)
    assert proximity.within(proximity.origin_distance_km)
