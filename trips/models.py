"""
Purpose: Domain models for the Trips capability.
What it does:
- Defines core data structures:
- Coordinate (lat, lng) and Location (coordinate + address)
- RoutePath (ordered polyline) and RouteGeometry (origin, destination, optional path)
- Trip (id, route_id, vehicle type tag, departure time, optional resolved geometry)
- MatchQuery (origin, destination, optional vehicle type)
- RouteRecord (WKT payload for registering a route)

Validation rules live here: a Coordinate that is out of range or not finite
raises InvalidInputError on construction.

Rule: No HTTP calls, no matching logic. Models only.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterator, Optional, Sequence, Tuple

from routing.geometry import LatLon, line_string_to_wkt, route_length_km


class InvalidInputError(ValueError):
    """Raised when a coordinate or query is missing or out of range."""
    pass


@dataclass(frozen=True)
class Coordinate:
    """
    WGS-84 point in decimal degrees.
    Unpacks like a (lat, lng) tuple so the geometry helpers accept it directly.
    """
    lat: float
    lng: float

    def __post_init__(self) -> None:
        try:
            finite = math.isfinite(self.lat) and math.isfinite(self.lng)
        except TypeError as exc:
            raise InvalidInputError(f"Coordinate must be numeric, got ({self.lat!r}, {self.lng!r})") from exc
        if not finite:
            raise InvalidInputError(f"Coordinate must be finite, got ({self.lat}, {self.lng})")
        if not -90.0 <= self.lat <= 90.0:
            raise InvalidInputError(f"Latitude {self.lat} outside [-90, 90]")
        if not -180.0 <= self.lng <= 180.0:
            raise InvalidInputError(f"Longitude {self.lng} outside [-180, 180]")

    def __iter__(self) -> Iterator[float]:
        yield self.lat
        yield self.lng

    @property
    def latlon(self) -> LatLon:
        return (self.lat, self.lng)

    @classmethod
    def from_latlon(cls, point: Sequence[float]) -> Coordinate:
        lat, lng = point
        return cls(lat=float(lat), lng=float(lng))


@dataclass(frozen=True)
class Location:
    """
    A coordinate plus the human-readable address it was picked from
    (geocoding result or a tap on the map).
    """
    coordinate: Coordinate
    address: str = ""

    @classmethod
    def at(cls, lat: float, lng: float, address: str = "") -> Location:
        return cls(coordinate=Coordinate(lat=lat, lng=lng), address=address)

    @property
    def lat(self) -> float:
        return self.coordinate.lat

    @property
    def lng(self) -> float:
        return self.coordinate.lng


@dataclass(frozen=True)
class RoutePath:
    """
    Ordered polyline, origin first. May be empty; fewer than 2 points means zero length.
    """
    coordinates: Tuple[Coordinate, ...] = ()

    @classmethod
    def from_latlons(cls, points: Sequence[Sequence[float]]) -> RoutePath:
        return cls(coordinates=tuple(Coordinate.from_latlon(p) for p in points))

    def __len__(self) -> int:
        return len(self.coordinates)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self.coordinates)

    def length_km(self) -> float:
        return route_length_km(self.coordinates)

    def to_wkt(self, strict: bool = True) -> Optional[str]:
        return line_string_to_wkt(self.coordinates, strict=strict)


@dataclass(frozen=True)
class RouteGeometry:
    """
    Resolved geometry of a registered route, as returned by a RouteGeometryProvider.
    """
    route_id: str
    origin: Coordinate
    destination: Coordinate
    path: Optional[RoutePath] = None
    length_km: Optional[float] = None  # stored length when the backend has one


@dataclass(frozen=True)
class Trip:
    """
    A scheduled trip. Read-only from the matcher's point of view.
    """
    id: str
    route_id: str
    vehicle_type: Optional[str]
    departure_at: datetime

    driver_id: Optional[str] = None
    vehicle_plate: Optional[str] = None

    # filled in by the matcher for trips it returns
    geometry: Optional[RouteGeometry] = None

    def with_geometry(self, geometry: RouteGeometry) -> Trip:
        return replace(self, geometry=geometry)


@dataclass(frozen=True)
class MatchQuery:
    """
    One passenger search: where from, where to, optionally which vehicle type.
    """
    origin: Location
    destination: Location
    vehicle_type: Optional[str] = None

    @staticmethod
    def new(
        origin: Optional[Location],
        destination: Optional[Location],
        vehicle_type: Optional[str] = None,
    ) -> MatchQuery:
        # fail fast instead of letting a None/NaN endpoint turn into NaN distances later
        if origin is None:
            raise InvalidInputError("Match query needs an origin")
        if destination is None:
            raise InvalidInputError("Match query needs a destination")
        if vehicle_type is not None and not vehicle_type.strip():
            vehicle_type = None
        return MatchQuery(origin=origin, destination=destination, vehicle_type=vehicle_type)


@dataclass(frozen=True)
class RouteRecord:
    """
    Payload for registering a route in the hosted backend (PostGIS columns as WKT).
    path_wkt is None when the path was degenerate and strictness was off.
    """
    origin_wkt: str
    destination_wkt: str
    path_wkt: Optional[str]
    length_km: float
