"""
Matching subpackage for the Trips domain.

Public API:
- find_similar_trips / match_trips
- RouteMatcher
- MatchResult, MatchCancelled
- MatchingPolicy
"""

from .engine import (
    MatchCancelled,
    MatchResult,
    RouteMatcher,
    filter_by_vehicle_type,
    find_similar_trips,
    match_trips,
)
from .policy import MatchingPolicy, default_policy, policy_from_env

__all__ = [
    "MatchCancelled",
    "MatchResult",
    "RouteMatcher",
    "filter_by_vehicle_type",
    "find_similar_trips",
    "match_trips",
    "MatchingPolicy",
    "default_policy",
    "policy_from_env",
]
