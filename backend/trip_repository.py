"""
Purpose: Provider implementations over the hosted backend tables and RPCs.
What it does:
- SupabaseTripProvider: upcoming trips from `viaje` (+ vehicle plate and type tag)
- SupabaseRouteGeometryProvider: route geometry via RPC `obtener_ruta_con_coordenadas`
- SupabaseRouteRepository: route registration (RPC `insertar_ruta`) and
  address search (RPC `search_addresses`)

Rows come back with Spanish column names; everything is normalized into
trips.models here so nothing else needs to know the table layout.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Callable, Dict, List, Mapping, Optional

from trips.models import (
    Coordinate,
    Location,
    RouteGeometry,
    RoutePath,
    RouteRecord,
    Trip,
)

from .supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

TRIP_TABLE = "viaje"
TRIP_SELECT = "id_viaje,id_ruta,id_conductor,fecha,hora_salida,vehiculo:id_vehiculo(placa,tipo:tipo(tipo))"
ROUTE_GEOMETRY_RPC = "obtener_ruta_con_coordenadas"
INSERT_ROUTE_RPC = "insertar_ruta"
SEARCH_ADDRESSES_RPC = "search_addresses"


class SupabaseTripProvider:
    """
    TripDataProvider over the `viaje` table.

    The table stores a date (`fecha`) and a departure time (`hora_salida`).
    The server filters by date (today onwards) and orders by date then time;
    trips that already left earlier today are dropped here.
    """
    def __init__(self, client: SupabaseClient, now: Optional[Callable[[], datetime]] = None):
        self.client = client
        self.now = now or datetime.now

    def list_upcoming_trips(self) -> List[Trip]:
        current = self.now()
        rows = self.client.select(
            TRIP_TABLE,
            params={
                "select": TRIP_SELECT,
                "fecha": f"gte.{current.date().isoformat()}",
                "order": "fecha.asc,hora_salida.asc",
            },
        ) or []

        trips: List[Trip] = []
        for row in rows:
            try:
                trip = parse_trip_row(row)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Ignoring malformed trip row %r: %s", row.get("id_viaje"), exc)
                continue
            if trip.departure_at < current:
                continue
            trips.append(trip)
        return trips


class SupabaseRouteGeometryProvider:
    """
    RouteGeometryProvider over RPC `obtener_ruta_con_coordenadas(p_id_ruta)`.
    Returns None when the route is unknown or its geometry is incomplete.
    """
    def __init__(self, client: SupabaseClient):
        self.client = client

    def get_route_geometry(self, route_id: str) -> Optional[RouteGeometry]:
        rows = self.client.rpc(ROUTE_GEOMETRY_RPC, {"p_id_ruta": _route_key(route_id)})
        if not rows:
            return None
        row = rows[0] if isinstance(rows, list) else rows
        try:
            return parse_route_geometry_row(row, route_id)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.debug("Route %s has no usable geometry: %s", route_id, exc)
            return None


class SupabaseRouteRepository:
    """
    Writes and lookups that support the matcher (route registration, geocoding).
    """
    def __init__(self, client: SupabaseClient):
        self.client = client

    def insert_route(self, record: RouteRecord) -> Any:
        """
        Register a route. Returns whatever the RPC answers (the new route id).
        """
        return self.client.rpc(
            INSERT_ROUTE_RPC,
            {
                "p_longitud": record.length_km,
                "p_punto_partida_wkt": record.origin_wkt,
                "p_punto_llegada_wkt": record.destination_wkt,
                "p_trayecto_wkt": record.path_wkt,
            },
        )

    def search_addresses(self, query: str) -> List[Location]:
        """
        Geocode free text into Locations. Rows with invalid coordinates are dropped.
        """
        if not query or not query.strip():
            return []

        rows = self.client.rpc(SEARCH_ADDRESSES_RPC, {"search_query": query.strip()}) or []
        locations: List[Location] = []
        for row in rows:
            try:
                locations.append(Location.at(float(row["lat"]), float(row["lng"]), row.get("address") or ""))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Ignoring address row %r: %s", row, exc)
        return locations


#----------------
# row parsing
#----------------
def parse_trip_row(row: Dict[str, Any]) -> Trip:
    vehicle = row.get("vehiculo") or {}
    vehicle_kind = vehicle.get("tipo") or {}
    vehicle_type = vehicle_kind.get("tipo") if isinstance(vehicle_kind, dict) else vehicle_kind

    departure_day = date.fromisoformat(row["fecha"])
    departure_time = time.fromisoformat(row["hora_salida"]) if row.get("hora_salida") else time.min

    driver_id = row.get("id_conductor")
    return Trip(
        id=str(row["id_viaje"]),
        route_id=str(row["id_ruta"]),
        vehicle_type=vehicle_type or None,
        departure_at=datetime.combine(departure_day, departure_time),
        driver_id=str(driver_id) if driver_id is not None else None,
        vehicle_plate=vehicle.get("placa"),
    )


def parse_route_geometry_row(row: Dict[str, Any], route_id: str) -> Optional[RouteGeometry]:
    """
    Points arrive as {"x": lng, "y": lat}. Missing origin or destination -> None.
    InvalidInputError (a ValueError) surfaces for out-of-range points.
    """
    origin = _parse_point(row.get("origen_coords"))
    destination = _parse_point(row.get("destino_coords"))
    if origin is None or destination is None:
        return None

    path = None
    raw_path = row.get("trayecto_coords")
    if raw_path:
        points = [_parse_point(p) for p in raw_path]
        path = RoutePath(coordinates=tuple(p for p in points if p is not None))

    length = row.get("longitud")
    return RouteGeometry(
        route_id=str(row.get("id_ruta", route_id)),
        origin=origin,
        destination=destination,
        path=path,
        length_km=float(length) if length is not None else None,
    )


def _parse_point(value: Any) -> Optional[Coordinate]:
    # expects {"x": lng, "y": lat}; anything else (WKT text, lists) is treated as missing
    if not value or not isinstance(value, Mapping):
        return None
    x, y = value.get("x"), value.get("y")
    if x is None or y is None:
        return None
    return Coordinate(lat=float(y), lng=float(x))


def _route_key(route_id: str) -> Any:
    # id_ruta is an integer column; keep non-numeric ids as-is
    return int(route_id) if str(route_id).isdigit() else route_id
