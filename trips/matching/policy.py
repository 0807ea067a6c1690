"""
Purpose: Central configuration for trip matching (single source of truth).
What it does:

Stores all tunable thresholds/caps:

MAX_DISTANCE_KM = 2 (per endpoint)

MAX_CONCURRENT_LOOKUPS = 8

STRICT_LINESTRING = True

Optionally reads overrides from the environment (.env):

MATCH_MAX_DISTANCE_KM, MATCH_MAX_CONCURRENT_LOOKUPS, MATCH_STRICT_LINESTRING

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class MatchingPolicy:
    """
    Central configuration for route-similarity matching.

    Notes:
    - the threshold is binary and applies to each endpoint on its own:
        origin_distance <= max_distance_km AND destination_distance <= max_distance_km
      There is no scoring; matched trips keep the provider's departure order.
    - 'strict_linestring' decides what happens to 0/1-point paths when a
      route is encoded as WKT: raise (True) or store it without a path (False).
    """

    # --- Proximity threshold ---
    # Max great-circle distance between requested and route endpoints.
    max_distance_km: float = 2.0

    # --- Geometry lookups ---
    # Parallel outstanding lookups per match run. 1 = sequential.
    max_concurrent_lookups: int = 8

    # How often a running match checks its cancel event while waiting on lookups.
    cancel_poll_seconds: float = 0.05

    # --- WKT encoding ---
    strict_linestring: bool = True

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if not self.max_distance_km > 0:
            raise ValueError("max_distance_km must be > 0")

        if self.max_concurrent_lookups < 1:
            raise ValueError("max_concurrent_lookups must be >= 1")

        if not self.cancel_poll_seconds > 0:
            raise ValueError("cancel_poll_seconds must be > 0")


def default_policy() -> MatchingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = MatchingPolicy()
    p.validate()
    return p


def policy_from_env() -> MatchingPolicy:
    """
    Default policy with overrides from environment variables (.env supported).
    Unset variables keep their defaults.
    """
    load_dotenv()
    defaults = MatchingPolicy()

    p = MatchingPolicy(
        max_distance_km=float(os.getenv("MATCH_MAX_DISTANCE_KM", defaults.max_distance_km)),
        max_concurrent_lookups=int(os.getenv("MATCH_MAX_CONCURRENT_LOOKUPS", defaults.max_concurrent_lookups)),
        strict_linestring=_env_flag("MATCH_STRICT_LINESTRING", defaults.strict_linestring),
    )
    p.validate()
    return p


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")
