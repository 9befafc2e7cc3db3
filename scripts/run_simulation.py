#!/usr/bin/env python3
"""
Run the availability simulation from the command line and print the
nearest parking locations every time the store changes.
"""

import argparse
import random
import sys
import time
from pathlib import Path

# Add the repository root to sys.path to import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from parkpulse.core.availability import availability_status, format_distance
from parkpulse.core.config import get_default_position, get_simulation_interval, validate_simulation_config
from parkpulse.core.heartbeat import Heartbeat, SIMULATION_TASK
from parkpulse.core.schema import Position
from parkpulse.core.store import ParkingStore


def format_snapshot(store: ParkingStore, origin: Position, top: int) -> str:
    """Format the closest locations for display."""
    lines = [f"Store version {store.version}"]
    for record, distance in store.list_sorted_with_distance(origin)[:top]:
        available = record.available_spaces if record.available_spaces is not None else "?"
        total = record.total_spaces if record.total_spaces is not None else "?"
        lines.append(
            f"  {record.name:<40} {available:>5}/{total:<5} "
            f"{availability_status(record):<22} {format_distance(distance)}"
        )
    return "\n".join(lines)


def main(argv=None):
    """Main entry point for the simulation script."""
    default_lat, default_lon = get_default_position()

    parser = argparse.ArgumentParser(description="Run the parking availability simulation")
    parser.add_argument("--interval", type=int, default=get_simulation_interval(),
                        help="Seconds between perturbations")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--lat", type=float, default=default_lat, help="Origin latitude")
    parser.add_argument("--lon", type=float, default=default_lon, help="Origin longitude")
    parser.add_argument("--top", type=int, default=5, help="Number of locations to print")
    parser.add_argument("--duration", type=float, default=None,
                        help="Stop after this many seconds (default: run until Ctrl+C)")
    args = parser.parse_args(argv)

    issues = validate_simulation_config(args.interval)
    if issues:
        print(f"Invalid configuration: {issues}")
        sys.exit(1)

    origin = Position(args.lat, args.lon)
    store = ParkingStore(rng=random.Random(args.seed))
    store.initialize()
    store.subscribe(lambda event: print(format_snapshot(store, origin, args.top)))

    heartbeat = Heartbeat()
    heartbeat.register_task(SIMULATION_TASK, args.interval, store.run_periodic_update)

    print(f"Simulating {len(store)} locations every {args.interval}s (Ctrl+C to stop)")
    print(format_snapshot(store, origin, args.top))

    try:
        heartbeat.start()
        deadline = time.monotonic() + args.duration if args.duration is not None else None
        while deadline is None or time.monotonic() < deadline:
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("\nShutting down gracefully...")
    finally:
        heartbeat.stop()
        store.close()


if __name__ == "__main__":
    main()
