"""
Purpose: The matching “orchestrator” (single entry point).
What it does:

Coordinates the pipeline end-to-end for one passenger search:

- takes a MatchQuery (origin, destination, optional vehicle type)

- fetches upcoming trips from the TripDataProvider (already ascending by departure)

- drops trips whose vehicle type does not match (case-insensitive)

- resolves each remaining trip's route geometry (RouteGeometryProvider), in parallel

- measures endpoint proximity (routing.geofence) and keeps trips where both
  ends are within policy.max_distance_km

- returns a MatchResult: matched trips (enriched with geometry, provider order
  kept) + ids of trips skipped for incomplete geometry

Typical public function signature:

- find_similar_trips(origin, destination, vehicle_type, trip_provider=..., geometry_provider=...) -> List[Trip]

Rule: Engine is the only file other modules should call directly for matching.
"""

# trips/matching/engine.py

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from routing.geofence import EndpointProximity, measure_endpoint_proximity

from ..models import Location, MatchQuery, RouteGeometry, Trip
from ..providers import ProviderError, RouteGeometryProvider, TripDataProvider
from .policy import MatchingPolicy, default_policy

logger = logging.getLogger(__name__)


class MatchCancelled(Exception):
    """Raised when the caller cancels a match run while lookups are in flight."""
    pass


@dataclass(frozen=True)
class MatchResult:
    """
    Output of a matching run for one query.
    """
    trips: List[Trip]
    skipped_trip_ids: List[str]  # no geometry (missing or lookup failed)
    proximities: Dict[str, EndpointProximity]  # matched trip id -> endpoint distances
    candidate_count: int  # trips the provider returned, before any filtering


def match_trips(
    query: MatchQuery,
    *,
    trip_provider: TripDataProvider,
    geometry_provider: RouteGeometryProvider,
    policy: Optional[MatchingPolicy] = None,
    cancel_event: Optional[threading.Event] = None,
) -> MatchResult:
    """
    Main matching entry point.

    Parameters
    ----------
    query:
        Passenger search. Build it with MatchQuery.new so missing endpoints fail early.
    trip_provider:
        Source of upcoming trips. A ProviderError here propagates: without the
        base list there is nothing to match.
    geometry_provider:
        Resolves route origin/destination per trip. A ProviderError or a None
        answer only excludes that trip.
    policy:
        MatchingPolicy (threshold, lookup concurrency). Defaults to default_policy().
    cancel_event:
        Optional. Setting it abandons in-flight lookups and raises MatchCancelled.

    Returns
    -------
    MatchResult
    """
    policy = policy or default_policy()
    policy.validate()

    candidates = list(trip_provider.list_upcoming_trips())

    # 1) vehicle type gate (before any geometry lookups)
    eligible = filter_by_vehicle_type(candidates, query.vehicle_type)

    # 2) resolve geometry per trip; None = incomplete data
    geometries = _resolve_geometries(eligible, geometry_provider, policy, cancel_event)

    # 3) proximity on both endpoints, keeping provider order
    matched: List[Trip] = []
    skipped: List[str] = []
    proximities: Dict[str, EndpointProximity] = {}

    for trip, geometry in zip(eligible, geometries):
        if geometry is None:
            logger.debug("Skipping trip %s: route %s has no geometry", trip.id, trip.route_id)
            skipped.append(trip.id)
            continue

        proximity = measure_endpoint_proximity(
            trip.id,
            query.origin.coordinate,
            query.destination.coordinate,
            geometry.origin,
            geometry.destination,
        )
        if not proximity.within(policy.max_distance_km):
            continue

        matched.append(trip.with_geometry(geometry))
        proximities[trip.id] = proximity

    logger.info(
        "Matched %d of %d upcoming trips (%d after vehicle filter, %d without geometry)",
        len(matched), len(candidates), len(eligible), len(skipped),
    )
    return MatchResult(
        trips=matched,
        skipped_trip_ids=skipped,
        proximities=proximities,
        candidate_count=len(candidates),
    )


def find_similar_trips(
    origin: Location,
    destination: Location,
    vehicle_type: Optional[str] = None,
    *,
    trip_provider: TripDataProvider,
    geometry_provider: RouteGeometryProvider,
    policy: Optional[MatchingPolicy] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[Trip]:
    """
    Trips whose route starts and ends within the threshold of the requested
    origin and destination, in departure order.
    """
    query = MatchQuery.new(origin, destination, vehicle_type)
    result = match_trips(
        query,
        trip_provider=trip_provider,
        geometry_provider=geometry_provider,
        policy=policy,
        cancel_event=cancel_event,
    )
    return result.trips


class RouteMatcher:
    """
    Holds the injected providers + policy so request handlers can call
    find_similar_trips without wiring collaborators every time.
    """
    def __init__(
        self,
        trip_provider: TripDataProvider,
        geometry_provider: RouteGeometryProvider,
        policy: Optional[MatchingPolicy] = None,
    ):
        self.trip_provider = trip_provider
        self.geometry_provider = geometry_provider
        self.policy = policy or default_policy()

    def match(self, query: MatchQuery, cancel_event: Optional[threading.Event] = None) -> MatchResult:
        return match_trips(
            query,
            trip_provider=self.trip_provider,
            geometry_provider=self.geometry_provider,
            policy=self.policy,
            cancel_event=cancel_event,
        )

    def find_similar_trips(
        self,
        origin: Location,
        destination: Location,
        vehicle_type: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Trip]:
        query = MatchQuery.new(origin, destination, vehicle_type)
        return self.match(query, cancel_event=cancel_event).trips


def filter_by_vehicle_type(trips: Sequence[Trip], vehicle_type: Optional[str]) -> List[Trip]:
    """
    Exact, case-insensitive tag match. No filter (None or blank) -> all trips.
    Trips without a tag never pass an explicit filter.
    """
    wanted = (vehicle_type or "").strip().casefold()
    if not wanted:
        return list(trips)

    return [
        trip for trip in trips
        if trip.vehicle_type is not None and trip.vehicle_type.strip().casefold() == wanted
    ]


def resolve_geometry(provider: RouteGeometryProvider, trip: Trip) -> Optional[RouteGeometry]:
    """
    One lookup, with provider failures turned into "no geometry".
    """
    try:
        return provider.get_route_geometry(trip.route_id)
    except ProviderError as exc:
        logger.warning("Skipping trip %s: geometry lookup for route %s failed: %s", trip.id, trip.route_id, exc)
        return None


def _resolve_geometries(
    trips: Sequence[Trip],
    provider: RouteGeometryProvider,
    policy: MatchingPolicy,
    cancel_event: Optional[threading.Event],
) -> List[Optional[RouteGeometry]]:
    """
    Resolve all geometries and return them in the same order as `trips`.
    Waits for every lookup (all-complete join) unless cancelled.
    """
    if not trips:
        return []

    if policy.max_concurrent_lookups == 1 or len(trips) == 1:
        results: List[Optional[RouteGeometry]] = []
        for trip in trips:
            _raise_if_cancelled(cancel_event)
            results.append(resolve_geometry(provider, trip))
        return results

    pool = ThreadPoolExecutor(
        max_workers=min(policy.max_concurrent_lookups, len(trips)),
        thread_name_prefix="geometry-lookup",
    )
    cancelled = False
    try:
        futures: List[Future] = [pool.submit(resolve_geometry, provider, trip) for trip in trips]
        pending = set(futures)
        while pending:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break
            _, pending = wait(pending, timeout=policy.cancel_poll_seconds, return_when=FIRST_COMPLETED)
    finally:
        # on cancel: drop queued lookups, don't block on the ones already running
        pool.shutdown(wait=not cancelled, cancel_futures=cancelled)

    if cancelled:
        raise MatchCancelled(f"Match cancelled with {len(pending)} geometry lookups outstanding")

    return [future.result() for future in futures]


def _raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise MatchCancelled("Match cancelled")
