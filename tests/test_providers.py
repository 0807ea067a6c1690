import threading
from datetime import datetime

import pandas as pd
import pytest

from trips.models import Coordinate, RouteGeometry
from trips.providers import CachingRouteGeometryProvider, InMemoryTripCatalog, ProviderError

NOW = datetime(2026, 10, 20, 8, 0)


class CountingGeometryProvider:
    def __init__(self, geometries, fail_first=()):
        self.geometries = geometries
        self.fail_first = set(fail_first)
        self.calls = []
        self._lock = threading.Lock()

    def get_route_geometry(self, route_id):
        with self._lock:
            self.calls.append(route_id)
        if route_id in self.fail_first:
            self.fail_first.discard(route_id)
            raise ProviderError("temporary failure")
        return self.geometries.get(route_id)


@pytest.fixture
def geometry():
    return RouteGeometry(route_id="r1", origin=Coordinate(3.45, -76.53), destination=Coordinate(3.375, -76.533))


@pytest.fixture
def catalog_df():
    return pd.DataFrame([
        {
            "trip_id": "t1", "route_id": "r1", "vehicle_type": "Car",
            "departure_at": "2026-10-20T09:30:00",
            "origin_lat": 3.45, "origin_lng": -76.53, "destination_lat": 3.375, "destination_lng": -76.533,
            "driver_id": "d_1", "vehicle_plate": "ABC123",
            "path": "-76.53 3.45, -76.531 3.41, -76.533 3.375",
        },
        {
            # same route, different coordinates: first row wins
            "trip_id": "t2", "route_id": "r1", "vehicle_type": "Motorcycle",
            "departure_at": "2026-10-20T08:15:00",
            "origin_lat": 4.0, "origin_lng": -75.0, "destination_lat": 4.0, "destination_lng": -75.0,
            "driver_id": None, "vehicle_plate": None,
            "path": None,
        },
        {
            # route without coordinates
            "trip_id": "t3", "route_id": "r2", "vehicle_type": None,
            "departure_at": "2026-10-21T06:00:00",
            "origin_lat": None, "origin_lng": None, "destination_lat": None, "destination_lng": None,
            "driver_id": "d_2", "vehicle_plate": "XYZ987",
            "path": None,
        },
        {
            # already left
            "trip_id": "t4", "route_id": "r1", "vehicle_type": "Car",
            "departure_at": "2026-10-20T07:59:00",
            "origin_lat": 3.45, "origin_lng": -76.53, "destination_lat": 3.375, "destination_lng": -76.533,
            "driver_id": "d_3", "vehicle_plate": "DEF456",
            "path": None,
        },
    ])


def test_caching_provider_looks_up_each_route_once(geometry):
    inner = CountingGeometryProvider({"r1": geometry})
    cache = CachingRouteGeometryProvider(inner)

    assert cache.get_route_geometry("r1") is geometry
    assert cache.get_route_geometry("r1") is geometry
    # "no geometry" answers are cached too
    assert cache.get_route_geometry("unknown") is None
    assert cache.get_route_geometry("unknown") is None

    assert inner.calls == ["r1", "unknown"]
    assert len(cache) == 2


def test_caching_provider_does_not_cache_errors(geometry):
    inner = CountingGeometryProvider({"r1": geometry}, fail_first={"r1"})
    cache = CachingRouteGeometryProvider(inner)

    with pytest.raises(ProviderError):
        cache.get_route_geometry("r1")
    assert cache.get_route_geometry("r1") is geometry
    assert inner.calls == ["r1", "r1"]


def test_caching_provider_prefetch_and_clear(geometry):
    inner = CountingGeometryProvider({"r1": geometry})
    cache = CachingRouteGeometryProvider(inner)

    cache.prefetch(["r1", "r2", "r1"])
    assert inner.calls == ["r1", "r2"]

    cache.get_route_geometry("r1")
    assert inner.calls == ["r1", "r2"]

    cache.clear()
    assert len(cache) == 0
    cache.get_route_geometry("r1")
    assert inner.calls == ["r1", "r2", "r1"]


def test_catalog_lists_upcoming_trips_in_departure_order(catalog_df):
    catalog = InMemoryTripCatalog.from_dataframe(catalog_df, now=lambda: NOW)

    upcoming = catalog.list_upcoming_trips()

    # 1. departed trip dropped, the rest sorted by departure
    assert [trip.id for trip in upcoming] == ["t2", "t1", "t3"]

    # 2. optional columns normalized
    t1, t2, t3 = upcoming[1], upcoming[0], upcoming[2]
    assert t1.driver_id == "d_1" and t1.vehicle_plate == "ABC123"
    assert t2.driver_id is None and t2.vehicle_plate is None
    assert t3.vehicle_type is None
    assert t1.departure_at == datetime(2026, 10, 20, 9, 30)


def test_catalog_geometry_first_row_wins(catalog_df):
    catalog = InMemoryTripCatalog.from_dataframe(catalog_df, now=lambda: NOW)

    geometry = catalog.get_route_geometry("r1")

    assert geometry.origin == Coordinate(3.45, -76.53)
    assert geometry.destination == Coordinate(3.375, -76.533)
    assert len(geometry.path) == 3
    assert geometry.path.coordinates[1] == Coordinate(3.41, -76.531)
    assert geometry.length_km == pytest.approx(geometry.path.length_km())


def test_catalog_route_without_coordinates_has_no_geometry(catalog_df):
    catalog = InMemoryTripCatalog.from_dataframe(catalog_df, now=lambda: NOW)

    assert catalog.get_route_geometry("r2") is None
    assert catalog.get_route_geometry("never_seen") is None


def test_catalog_from_csv(tmp_path, catalog_df):
    csv_path = tmp_path / "trips.csv"
    catalog_df.to_csv(csv_path, index=False)

    catalog = InMemoryTripCatalog.from_csv(str(csv_path), now=lambda: NOW)

    assert [trip.id for trip in catalog.list_upcoming_trips()] == ["t2", "t1", "t3"]
    assert catalog.get_route_geometry("r1") is not None
    assert catalog.get_route_geometry("r2") is None


@pytest.mark.parametrize("bad_path", ["-76.53", "-76.53 3.45, nonsense here", "-76.53 3.45 9.9", "-200.0 3.45, -76.5 3.4"])
def test_catalog_unreadable_path_keeps_endpoints(catalog_df, bad_path):
    catalog_df.loc[0, "path"] = bad_path

    catalog = InMemoryTripCatalog.from_dataframe(catalog_df, now=lambda: NOW)

    geometry = catalog.get_route_geometry("r1")
    assert geometry.origin == Coordinate(3.45, -76.53)
    assert geometry.path is None
    assert geometry.length_km is None
    assert len(catalog.list_upcoming_trips()) == 3
