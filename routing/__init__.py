#Marks routing as a package.
#Re-exports the public APIs (geometry helpers, proximity, OSRMClient)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .geometry import (
    EARTH_RADIUS_KM,
    LatLon,
    haversine_distance_km,
    line_string_to_wkt,
    point_to_wkt,
    route_length_km,
)
from .geofence import EndpointProximity, measure_endpoint_proximity
from .osrm_client import OSRMClient, OSRMError

__all__ = [
    "EARTH_RADIUS_KM",
    "LatLon",
    "haversine_distance_km",
    "line_string_to_wkt",
    "point_to_wkt",
    "route_length_km",
    "EndpointProximity",
    "measure_endpoint_proximity",
    "OSRMClient",
    "OSRMError",
]
