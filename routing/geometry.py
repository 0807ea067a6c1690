#Purpose: Pure coordinate math and WKT text encoding.
#No HTTP, no models, no logging: callers pass (lat, lng) pairs and get numbers/strings back.
#Used by:
#the matcher (endpoint distances)
#route registration (WKT payload + route length for the PostGIS RPC)
#Anything that unpacks as `lat, lng = point` is accepted (tuples or trips.models.Coordinate).

import math
from typing import Iterable, Optional, Sequence, Tuple

#internal coordinate type :(lat, lng)
LatLon = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0 #mean Earth radius


def point_to_wkt(lat: float, lng: float) -> str:
    """
    Encode a single coordinate as WKT.

    WKT is x-before-y, so longitude is printed first:
        point_to_wkt(3.4516, -76.532) -> "POINT(-76.532 3.4516)"

    No range checks here; NaN/inf end up in the text as-is.
    """
    return f"POINT({lng} {lat})"


def line_string_to_wkt(coords: Sequence[LatLon], strict: bool = True) -> Optional[str]:
    """
    Encode an ordered path as a WKT LINESTRING.

    Args:
        coords: (lat, lng) points in travel order.
        strict: a LINESTRING needs at least 2 points. With strict=True a shorter
            path raises ValueError; with strict=False the geometry is omitted
            and None is returned.

    Returns:
        "LINESTRING(lng1 lat1, lng2 lat2, ...)" or None (lenient, degenerate path).
    """
    if len(coords) < 2:
        if strict:
            raise ValueError(f"LINESTRING requires at least 2 points, got {len(coords)}")
        return None

    points = ", ".join(f"{lng} {lat}" for lat, lng in coords)
    return f"LINESTRING({points})"


def haversine_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometers (haversine, atan2 form)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def route_length_km(coords: Iterable[LatLon]) -> float:
    """
    Running sum of haversine legs along the path.
    0.0 for fewer than 2 points. No elevation or projection correction.
    """
    total = 0.0
    previous: Optional[LatLon] = None
    for point in coords:
        lat, lng = point
        if previous is not None:
            total += haversine_distance_km(previous[0], previous[1], lat, lng)
        previous = (lat, lng)
    return total
