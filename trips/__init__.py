"""
Purpose: Package entry + stable exports.
What it does:

Marks trips as a Python package.

Re-exports the public API so other modules can do:

from trips import Trip, Location, find_similar_trips

Should not contain business logic.

Trips domain package.

Public API:
- Domain models: Coordinate, Location, RoutePath, RouteGeometry, Trip, MatchQuery, RouteRecord
- Errors: InvalidInputError, ProviderError, MatchCancelled
- Providers: TripDataProvider, RouteGeometryProvider, CachingRouteGeometryProvider, InMemoryTripCatalog
- Matching entry: find_similar_trips, match_trips, RouteMatcher

"""
from .models import (
    Coordinate,
    InvalidInputError,
    Location,
    MatchQuery,
    RouteGeometry,
    RoutePath,
    RouteRecord,
    Trip,
)
from .providers import (
    CachingRouteGeometryProvider,
    InMemoryTripCatalog,
    ProviderError,
    RouteGeometryProvider,
    TripDataProvider,
)
from .matching import (
    MatchCancelled,
    MatchResult,
    MatchingPolicy,
    RouteMatcher,
    default_policy,
    find_similar_trips,
    match_trips,
)

__all__ = ["Coordinate",
           "InvalidInputError",
           "Location",
           "MatchQuery",
           "RouteGeometry",
           "RoutePath",
           "RouteRecord",
           "Trip",
           "CachingRouteGeometryProvider",
           "InMemoryTripCatalog",
           "ProviderError",
           "RouteGeometryProvider",
           "TripDataProvider",
           "MatchCancelled",
           "MatchResult",
           "MatchingPolicy",
           "RouteMatcher",
           "default_policy",
           "find_similar_trips",
           "match_trips",
           ]
