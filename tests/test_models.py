import math
from datetime import datetime

import pytest

from trips.models import (
    Coordinate,
    InvalidInputError,
    Location,
    MatchQuery,
    RouteGeometry,
    RoutePath,
    Trip,
)


@pytest.mark.parametrize("lat, lng", [
    (90.1, 0.0),
    (-90.1, 0.0),
    (0.0, 180.5),
    (0.0, -180.5),
    (math.nan, 0.0),
    (0.0, math.inf),
])
def test_coordinate_rejects_invalid_values(lat, lng):
    with pytest.raises(InvalidInputError):
        Coordinate(lat, lng)


def test_coordinate_bounds_are_inclusive():
    Coordinate(90.0, 180.0)
    Coordinate(-90.0, -180.0)


def test_invalid_input_error_is_a_value_error():
    assert issubclass(InvalidInputError, ValueError)


def test_coordinate_unpacks_like_a_tuple():
    lat, lng = Coordinate(3.45, -76.53)
    assert (lat, lng) == (3.45, -76.53)
    assert Coordinate.from_latlon((3.45, -76.53)).latlon == (3.45, -76.53)


def test_location_at():
    location = Location.at(3.45, -76.53, "Universidad del Valle")
    assert location.coordinate == Coordinate(3.45, -76.53)
    assert (location.lat, location.lng) == (3.45, -76.53)
    assert location.address == "Universidad del Valle"


def test_route_path_length_and_wkt():
    path = RoutePath.from_latlons([(3.45, -76.53), (3.46, -76.54)])
    assert len(path) == 2
    assert path.length_km() > 0
    assert path.to_wkt() == "LINESTRING(-76.53 3.45, -76.54 3.46)"

    empty = RoutePath()
    assert empty.length_km() == 0.0
    assert empty.to_wkt(strict=False) is None


def test_match_query_requires_both_endpoints():
    origin = Location.at(3.45, -76.53)
    with pytest.raises(InvalidInputError):
        MatchQuery.new(None, origin)
    with pytest.raises(InvalidInputError):
        MatchQuery.new(origin, None)


def test_match_query_blank_vehicle_type_means_no_filter():
    origin = Location.at(3.45, -76.53)
    destination = Location.at(3.40, -76.50)
    assert MatchQuery.new(origin, destination, "  ").vehicle_type is None
    assert MatchQuery.new(origin, destination, "car").vehicle_type == "car"


def test_trip_with_geometry_returns_enriched_copy():
    trip = Trip(id="1", route_id="r1", vehicle_type="Car", departure_at=datetime(2026, 10, 20, 7, 0))
    geometry = RouteGeometry(route_id="r1", origin=Coordinate(3.45, -76.53), destination=Coordinate(3.40, -76.50))

    enriched = trip.with_geometry(geometry)

    assert enriched.geometry is geometry
    assert trip.geometry is None
    assert enriched.id == trip.id


@pytest.mark.parametrize("lat, lng", [("north", 0.0), (0.0, None)])
def test_coordinate_rejects_non_numeric_values(lat, lng):
    with pytest.raises(InvalidInputError):
        Coordinate(lat, lng)
