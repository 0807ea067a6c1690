"""
Purpose: The collaborators the matcher reads from.
What it does:
- Declares the two provider interfaces (Protocols):
   - TripDataProvider.list_upcoming_trips()
   - RouteGeometryProvider.get_route_geometry(route_id)
- ProviderError: what a provider raises when its backing service fails.
- CachingRouteGeometryProvider: memoizes geometry lookups per route id.
- InMemoryTripCatalog: both interfaces over plain lists (or a CSV export via pandas),
  for scripts, offline runs and tests.

Rule: Providers fetch and normalize data. They never decide what matches.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence

import pandas as pd

from .models import Coordinate, InvalidInputError, RouteGeometry, RoutePath, Trip


class ProviderError(Exception):
    """Raised when a trip or geometry lookup fails (network/service fault)."""
    pass


class TripDataProvider(Protocol):
    def list_upcoming_trips(self) -> Sequence[Trip]:
        """Trips departing at or after now, ascending by departure."""
        ...


class RouteGeometryProvider(Protocol):
    def get_route_geometry(self, route_id: str) -> Optional[RouteGeometry]:
        """Geometry for the route, or None when it cannot be resolved."""
        ...


_MISSING = object()


class CachingRouteGeometryProvider:
    """
    Wraps a RouteGeometryProvider and caches answers per route id.

    Several trips usually share one route, so a match run only needs one
    lookup per distinct route. "No geometry" (None) answers are cached too;
    errors are not, so a transient failure is retried on the next call.
    Safe to call from the matcher's worker threads.
    """
    def __init__(self, inner: RouteGeometryProvider):
        self.inner = inner
        self._cache: Dict[str, Optional[RouteGeometry]] = {}
        self._lock = threading.Lock()

    def prefetch(self, route_ids: Iterable[str]) -> None:
        """
        Resolve a batch of routes up front so later lookups are cache hits.
        """
        for route_id in dict.fromkeys(route_ids):
            self.get_route_geometry(route_id)

    def get_route_geometry(self, route_id: str) -> Optional[RouteGeometry]:
        with self._lock:
            cached = self._cache.get(route_id, _MISSING)
        if cached is not _MISSING:
            return cached

        geometry = self.inner.get_route_geometry(route_id)
        with self._lock:
            self._cache[route_id] = geometry
        return geometry

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class InMemoryTripCatalog:
    """
    Trip + geometry provider backed by in-memory data.

    Upcoming means departure_at >= now(); ordering is ascending by departure,
    ties keep insertion order.
    """
    def __init__(
        self,
        trips: Sequence[Trip],
        geometries: Optional[Dict[str, RouteGeometry]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.trips = list(trips)
        self.geometries = dict(geometries or {})
        self.now = now or datetime.now

    def list_upcoming_trips(self) -> List[Trip]:
        current = self.now()
        upcoming = [trip for trip in self.trips if trip.departure_at >= current]
        upcoming.sort(key=lambda trip: trip.departure_at)
        return upcoming

    def get_route_geometry(self, route_id: str) -> Optional[RouteGeometry]:
        return self.geometries.get(route_id)

    #----------------
    # loaders
    #----------------
    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        now: Optional[Callable[[], datetime]] = None,
    ) -> InMemoryTripCatalog:
        """
        Build a catalog from one row per trip.

        Required columns:
            trip_id, route_id, vehicle_type, departure_at,
            origin_lat, origin_lng, destination_lat, destination_lng
        Optional columns:
            driver_id, vehicle_plate, path (WKT-ish "lng lat, lng lat, ..." list)

        Rows sharing a route_id share one geometry (first row wins).
        Rows with missing endpoint coordinates get no geometry, which the
        matcher treats as incomplete data.
        """
        trips: List[Trip] = []
        geometries: Dict[str, RouteGeometry] = {}

        for _, row in df.iterrows():
            route_id = str(row["route_id"])
            trips.append(
                Trip(
                    id=str(row["trip_id"]),
                    route_id=route_id,
                    vehicle_type=_optional_str(row.get("vehicle_type")),
                    departure_at=pd.Timestamp(row["departure_at"]).to_pydatetime(),
                    driver_id=_optional_str(row.get("driver_id")),
                    vehicle_plate=_optional_str(row.get("vehicle_plate")),
                )
            )

            if route_id in geometries:
                continue
            endpoints = [row.get(c) for c in ("origin_lat", "origin_lng", "destination_lat", "destination_lng")]
            if any(pd.isna(value) for value in endpoints):
                continue

            path = _parse_path(row.get("path"))
            geometries[route_id] = RouteGeometry(
                route_id=route_id,
                origin=Coordinate(float(endpoints[0]), float(endpoints[1])),
                destination=Coordinate(float(endpoints[2]), float(endpoints[3])),
                path=path,
                length_km=path.length_km() if path is not None else None,
            )

        return cls(trips, geometries, now=now)

    @classmethod
    def from_csv(cls, filepath: str, now: Optional[Callable[[], datetime]] = None) -> InMemoryTripCatalog:
        df = pd.read_csv(filepath)
        return cls.from_dataframe(df, now=now)


def _optional_str(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _parse_path(value) -> Optional[RoutePath]:
    # "lng lat, lng lat, ..." (LINESTRING body without the wrapper)
    text = _optional_str(value)
    if text is None:
        return None
    points = []
    for pair in text.split(","):
        try:
            lng, lat = pair.split()
            points.append((float(lat), float(lng)))
        except ValueError:
            # unreadable path: keep the endpoints, drop the polyline
            return None
    try:
        return RoutePath.from_latlons(points)
    except InvalidInputError:
        return None
