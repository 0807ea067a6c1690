import argparse
import csv
import logging
import os
import time

from routing.route_service import build_route_record
from trips.models import Location, MatchQuery
from trips.providers import CachingRouteGeometryProvider, InMemoryTripCatalog
from trips.matching.engine import RouteMatcher
from trips.matching.policy import policy_from_env

# Sample passenger searches around Cali: (label, origin, destination, vehicle type)
SEARCHES = [
    ("centro-to-campus", (3.4516, -76.5320), (3.3750, -76.5330), None),
    ("campus-to-chipichape", (3.3750, -76.5330), (3.4760, -76.5270), "car"),
    ("unicentro-to-campus", (3.3740, -76.5390), (3.3750, -76.5330), None),
    ("palmira-to-campus", (3.5394, -76.3036), (3.3750, -76.5330), "motorcycle"),
    ("jamundi-to-centro", (3.2610, -76.5390), (3.4516, -76.5320), "bus"),
]


def run_simulation(catalog_path: str, output_name: str = "match_results.csv"):
    print("=== STARTING TRIP MATCHING SIMULATION ===")

    # 1. Load Data
    catalog = InMemoryTripCatalog.from_csv(catalog_path)
    print(f"Loaded {len(catalog.trips)} trips over {len(catalog.geometries)} routes with geometry.\n")

    # 2. Configure System
    policy = policy_from_env()
    matcher = RouteMatcher(
        trip_provider=catalog,
        geometry_provider=CachingRouteGeometryProvider(catalog),
        policy=policy,
    )
    print(f"Threshold: {policy.max_distance_km} km per endpoint, {policy.max_concurrent_lookups} parallel lookups.\n")

    # 3. Check the catalog routes would register under the configured WKT strictness
    unregistrable = 0
    without_path = 0
    for geometry in catalog.geometries.values():
        try:
            record = build_route_record(geometry.origin, geometry.destination, geometry.path, policy=policy)
        except ValueError as exc:
            unregistrable += 1
            print(f"Route {geometry.route_id} cannot be registered: {exc}")
            continue
        if record.path_wkt is None:
            without_path += 1
    print(f"Route payloads: {len(catalog.geometries) - unregistrable} ok ({without_path} without path), "
          f"{unregistrable} rejected (strict_linestring={policy.strict_linestring}).\n")

    # Save next to the script's project root
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    output_path = os.path.join(base_dir, output_name)

    total_matches = 0
    with open(output_path, "w", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(["search", "trip_id", "route_id", "vehicle_type", "departure_at",
                         "origin_distance_km", "destination_distance_km"])

        # 4. Run each search
        for label, origin, destination, vehicle_type in SEARCHES:
            start_time = time.time()
            query = MatchQuery.new(
                Location.at(*origin, address=f"{label} origin"),
                Location.at(*destination, address=f"{label} destination"),
                vehicle_type,
            )
            result = matcher.match(query)
            elapsed = time.time() - start_time

            print(f"[{label}] {len(result.trips)} matches "
                  f"({len(result.skipped_trip_ids)} skipped without geometry) in {elapsed:.3f}s")
            for trip in result.trips:
                proximity = result.proximities[trip.id]
                print(f"  {trip.id} {trip.vehicle_type} {trip.departure_at:%Y-%m-%d %H:%M} "
                      f"origin {proximity.origin_distance_km:.2f}km, destination {proximity.destination_distance_km:.2f}km")
                writer.writerow([
                    label,
                    trip.id,
                    trip.route_id,
                    trip.vehicle_type,
                    trip.departure_at.isoformat(),
                    round(proximity.origin_distance_km, 3),
                    round(proximity.destination_distance_km, 3),
                ])
            total_matches += len(result.trips)

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Searches: {len(SEARCHES)}, total matches: {total_matches}")
    print(f"Results written to '{output_name}'.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser(description="Run sample passenger searches against a trip catalog CSV.")
    parser.add_argument("catalog", nargs="?", default="mock_trips.csv",
                        help="CSV produced by scripts/generate_mock_trips.py")
    args = parser.parse_args()
    run_simulation(args.catalog)
