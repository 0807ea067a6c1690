#Marks backend as a package: adapters for the hosted backend (Supabase).
#No business logic.

from .supabase_client import SupabaseClient
from .trip_repository import (
    SupabaseRouteGeometryProvider,
    SupabaseRouteRepository,
    SupabaseTripProvider,
)

__all__ = [
    "SupabaseClient",
    "SupabaseRouteGeometryProvider",
    "SupabaseRouteRepository",
    "SupabaseTripProvider",
]
