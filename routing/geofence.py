#Purpose: Endpoint proximity ("same trip") measurement.
#Builds the per-trip distance metrics the matcher filters on.
#Typical responsibilities:
#Given the requested origin/destination + a trip's route origin/destination → compute great-circle distances
#Apply the per-endpoint threshold:
#origin_distance <= X km AND destination_distance <= X km
#Both ends must pass on their own; a route that only shares one end is a partial overlap, not a match.
#Output: an EndpointProximity per trip (distances in km).

from dataclasses import dataclass #for simple data structures

from routing.geometry import LatLon, haversine_distance_km


@dataclass(frozen=True) #immutable data structure for proximity metrics
class EndpointProximity:
    """
    Distances between a requested journey and one trip's route, per endpoint.
    This is what the matcher consumes to decide inclusion.
    """

    trip_id: str
    origin_distance_km: float # requested origin -> route origin
    destination_distance_km: float # requested destination -> route destination

    def within(self, max_distance_km: float) -> bool:
        """True when both endpoints are within the threshold (inclusive)."""
        return (
            self.origin_distance_km <= max_distance_km
            and self.destination_distance_km <= max_distance_km
        )


def measure_endpoint_proximity(
        trip_id: str,
        query_origin: LatLon,
        query_destination: LatLon,
        route_origin: LatLon,
        route_destination: LatLon,
) -> EndpointProximity:
    """
    Compute origin-to-origin and destination-to-destination distances.

    Args:
        trip_id: id of the trip being measured (carried through for logging/results)
        query_origin / query_destination: (lat, lng) of the passenger's request
        route_origin / route_destination: (lat, lng) of the trip's registered route

    Returns:
        EndpointProximity with both distances in kilometers.
    """
    q_lat, q_lng = query_origin
    r_lat, r_lng = route_origin
    origin_distance = haversine_distance_km(q_lat, q_lng, r_lat, r_lng)

    q_lat, q_lng = query_destination
    r_lat, r_lng = route_destination
    destination_distance = haversine_distance_km(q_lat, q_lng, r_lat, r_lng)

    return EndpointProximity(
        trip_id=trip_id,
        origin_distance_km=origin_distance,
        destination_distance_km=destination_distance,
    )
