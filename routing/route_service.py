#Purpose: Route computation and registration payloads.
#It's the “I need an actual route” module, while geofence.py is “I need proximity metrics”.
#Returns:
#the driven polyline between two endpoints (OSRM /route with full overview)
#the WKT record (origin POINT, destination POINT, path LINESTRING, length km) the backend stores

from typing import Any, Optional

from routing.geometry import LatLon, line_string_to_wkt, point_to_wkt, route_length_km
from routing.osrm_client import OSRMClient
from trips.models import Coordinate, RoutePath, RouteRecord
from trips.matching.policy import MatchingPolicy, default_policy


def compute_route_path(osrm: OSRMClient, origin: LatLon, destination: LatLon) -> RoutePath:
    """
    Ask OSRM for the road path between two endpoints.
    Raises OSRMError if OSRM cannot route them.
    """
    route = osrm.compute_route([tuple(origin), tuple(destination)], geometry=True)
    return RoutePath.from_latlons(route["geometry"])


def build_route_record(
        origin: Coordinate,
        destination: Coordinate,
        path: Optional[RoutePath],
        strict: Optional[bool] = None,
        policy: Optional[MatchingPolicy] = None,
) -> RouteRecord:
    """
    Build the registration payload for a route drawn by a driver.

    strict controls degenerate paths (0 or 1 point): True raises ValueError,
    False stores the route without a path (path_wkt=None, length 0).
    When strict is not given, policy.strict_linestring decides (default policy if None).
    """
    if strict is None:
        strict = (policy or default_policy()).strict_linestring
    coordinates = path.coordinates if path is not None else ()
    return RouteRecord(
        origin_wkt=point_to_wkt(origin.lat, origin.lng),
        destination_wkt=point_to_wkt(destination.lat, destination.lng),
        path_wkt=line_string_to_wkt(coordinates, strict=strict),
        length_km=route_length_km(coordinates),
    )


def register_route(
        repository: Any,
        origin: Coordinate,
        destination: Coordinate,
        path: Optional[RoutePath],
        policy: Optional[MatchingPolicy] = None,
) -> Any:
    """
    Build the record under the policy's strictness and hand it to the repository
    (anything with insert_route(record), e.g. backend.SupabaseRouteRepository).
    Returns the repository's answer (the new route id).
    """
    record = build_route_record(origin, destination, path, policy=policy)
    return repository.insert_route(record)
