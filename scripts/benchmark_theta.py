#!/usr/bin/env python3
"""
Benchmark the Barnes-Hut accuracy/speed tradeoff across opening angles.

For each theta, builds one tree over a random body set, times the force
pass and reports its relative error against direct summation.

Usage:
    uv run python scripts/benchmark_theta.py [--bodies N] [--thetas T,...]

Examples:
    uv run python scripts/benchmark_theta.py
    uv run python scripts/benchmark_theta.py --bodies 2000 --thetas 0.3,0.5,1.0
    uv run python scripts/benchmark_theta.py --output results.json
"""

from __future__ import annotations

import argparse
import json
import time
from typing import Any

from barnes_hut import ForceStats, QuadTree, SimulationConfig, force_error
from barnes_hut.physics import bodies_from_config


def benchmark_theta(config: SimulationConfig, measure_error: bool = True) -> dict[str, Any]:
    """
    Time one tree build and one force pass at the config's theta.

    Returns:
        Dict with timing, traversal counters and (optionally) error
    """
    bodies = bodies_from_config(config)

    start = time.perf_counter()
    tree = QuadTree.from_bodies(bodies, config)
    build = time.perf_counter() - start

    stats = ForceStats()
    start = time.perf_counter()
    for body in bodies:
        body.reset_force()
        tree.update_force(body, stats)
    forces = time.perf_counter() - start

    result: dict[str, Any] = {
        "theta": config.theta,
        "bodies": len(bodies),
        "build_seconds": build,
        "force_seconds": forces,
        "expansions": stats.expansions,
        "approximations": stats.approximations,
        "exact": stats.exact,
        "tree_depth": tree.depth(),
    }
    if measure_error:
        result["relative_error"] = force_error(bodies, config.gravity, config.softening)
    return result


def run_benchmarks(
    bodies: int = 1000,
    thetas: list[float] | None = None,
    seed: int = 42,
    measure_error: bool = True,
) -> list[dict]:
    """Run the benchmark for each theta on the same random body set."""
    if thetas is None:
        thetas = [0.0, 0.25, 0.5, 0.75, 1.0, 1.5]

    base = SimulationConfig(body_count=bodies, random_seed=seed)

    print(f"\nBarnes-Hut force pass on {bodies} bodies (seed {seed})")
    print("=" * 80)
    print(
        f"{'theta':>6s} {'build (s)':>10s} {'force (s)':>10s} "
        f"{'opened':>9s} {'approx':>9s} {'exact':>9s} {'error':>10s}"
    )
    print("-" * 80)

    results = []
    for theta in thetas:
        result = benchmark_theta(base.replace(theta=theta), measure_error=measure_error)
        error = result.get("relative_error")
        error_str = f"{error:>10.2e}" if error is not None else f"{'--':>10s}"
        print(
            f"{theta:>6.2f} {result['build_seconds']:>10.4f} {result['force_seconds']:>10.4f} "
            f"{result['expansions']:>9d} {result['approximations']:>9d} "
            f"{result['exact']:>9d} {error_str}"
        )
        results.append(result)

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Barnes-Hut opening angles")
    parser.add_argument("--bodies", type=int, default=1000, help="Number of random bodies")
    parser.add_argument("--thetas", help="Comma-separated theta values (e.g. '0.3,0.5,1.0')")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--no-error", action="store_true", help="Skip the O(n^2) error check")
    parser.add_argument("--output", help="Output JSON file for results")

    args = parser.parse_args()

    thetas = [float(t) for t in args.thetas.split(",")] if args.thetas else None

    results = run_benchmarks(
        bodies=args.bodies,
        thetas=thetas,
        seed=args.seed,
        measure_error=not args.no_error,
    )

    if args.output and results:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
