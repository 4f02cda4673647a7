"""
Random initial conditions.

Bodies are scattered uniformly over the domain with small random
velocities and masses drawn from a uniform range. Useful as the default
starting state and as input for benchmarks.
"""

from __future__ import annotations

import random
from typing import Optional

from ..config import SimulationConfig
from .body import Body


def random_bodies(
    count: int,
    extent: float,
    *,
    max_speed: float = 1.0,
    mass_range: tuple[float, float] = (1.0, 11.0),
    random_seed: Optional[int] = None,
) -> list[Body]:
    """
    Generate bodies uniformly distributed over [0, extent]^2.

    Args:
        count: Number of bodies
        extent: Domain side length
        max_speed: Velocity components are uniform in [-max_speed, max_speed]
        mass_range: (low, high) bounds of the uniform mass distribution
        random_seed: Seed for reproducible output

    Returns:
        List of new bodies
    """
    rng = random.Random(random_seed)
    low, high = mass_range
    bodies = []
    for _ in range(count):
        bodies.append(
            Body(
                x=rng.uniform(0, extent),
                y=rng.uniform(0, extent),
                vx=rng.uniform(-max_speed, max_speed),
                vy=rng.uniform(-max_speed, max_speed),
                mass=rng.uniform(low, high),
            )
        )
    return bodies


def bodies_from_config(config: SimulationConfig) -> list[Body]:
    """Generate the random starting bodies described by a config."""
    return random_bodies(
        config.body_count,
        config.extent,
        max_speed=config.max_speed,
        mass_range=config.mass_range,
        random_seed=config.random_seed,
    )


__all__ = ["random_bodies", "bodies_from_config"]
