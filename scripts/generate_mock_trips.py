import pandas as pd
import numpy as np
from datetime import datetime, timedelta

# Campus + city hubs around Cali, Colombia (lat, lon)
CAMPUS = (3.3750, -76.5330)
HUBS = [
    ("Centro", 3.4516, -76.5320),
    ("Chipichape", 3.4760, -76.5270),
    ("Unicentro", 3.3740, -76.5390),
    ("Terminal", 3.4690, -76.5240),
    ("Jamundi", 3.2610, -76.5390),
    ("Palmira", 3.5394, -76.3036),
]


def generate_mock_trips(num_routes=40, trips_per_route=3, output_file="mock_trips.csv"):
    """
    Generates a trip catalog CSV for the in-memory provider (InMemoryTripCatalog.from_csv).
    Routes go from a hub to campus (or back), with endpoints jittered within ~1.5km
    so some routes fall inside the 2km matching radius of each other and some do not.
    A few routes are written without coordinates to exercise the "incomplete data" path.
    """
    now = datetime.now()
    data = []

    for route_index in range(num_routes):
        name, hub_lat, hub_lon = HUBS[np.random.randint(0, len(HUBS))]
        # ~0.0135 degrees of latitude is roughly 1.5km
        start = (hub_lat + np.random.uniform(-0.0135, 0.0135), hub_lon + np.random.uniform(-0.0135, 0.0135))
        end = (CAMPUS[0] + np.random.uniform(-0.0135, 0.0135), CAMPUS[1] + np.random.uniform(-0.0135, 0.0135))
        if np.random.random() < 0.5:
            start, end = end, start

        incomplete = np.random.random() < 0.05
        # straight 5-point path between the endpoints
        path = ", ".join(
            f"{np.round(start[1] + (end[1] - start[1]) * t, 6)} {np.round(start[0] + (end[0] - start[0]) * t, 6)}"
            for t in np.linspace(0.0, 1.0, 5)
        )

        for trip_index in range(trips_per_route):
            data.append({
                "trip_id": f"t_{route_index + 1:03d}_{trip_index + 1}",
                "route_id": f"r_{route_index + 1:03d}",
                "route_name": name,
                "vehicle_type": np.random.choice(["Car", "Motorcycle", "Bus"], p=[0.6, 0.3, 0.1]),
                "vehicle_plate": f"{chr(65 + route_index % 26)}{chr(65 + trip_index)}{np.random.randint(100, 999)}",
                "driver_id": f"d_{np.random.randint(1000, 9999)}",
                "departure_at": (now + timedelta(minutes=int(np.random.randint(-60, 72 * 60)))).isoformat(timespec="seconds"),
                "origin_lat": None if incomplete else np.round(start[0], 6),
                "origin_lng": None if incomplete else np.round(start[1], 6),
                "destination_lat": None if incomplete else np.round(end[0], 6),
                "destination_lng": None if incomplete else np.round(end[1], 6),
                "path": None if incomplete else path,
            })

    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"Generated {len(df)} trips over {num_routes} routes and saved to '{output_file}'")

    print("\nTrips per hub:")
    for name, count in df["route_name"].value_counts().items():
        print(f"  {name}: {count} trips")


if __name__ == "__main__":
    generate_mock_trips()
