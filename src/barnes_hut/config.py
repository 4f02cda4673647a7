"""
Simulation configuration.

All run-wide constants (domain size, opening angle, softening, time step and
gravitational constant) live in one immutable value that is passed to the
tree and the simulation explicitly.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Optional

from .validation import (
    validate_count,
    validate_extent,
    validate_gravity,
    validate_mass,
    validate_mass_range,
    validate_max_depth,
    validate_softening,
    validate_speed,
    validate_theta,
    validate_timestep,
)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Fixed configuration for one simulation run.

    Attributes:
        extent: Side length of the square domain [0, extent]^2
        dt: Fixed integration time step
        gravity: Gravitational constant G
        theta: Barnes-Hut opening angle (0 = exact, higher = more approximation)
        softening: Softening length eps added to the squared distance
        body_count: Number of randomly generated bodies at start
        insert_mass: Mass of bodies injected through Simulation.add_body
        max_depth: Tree depth past which co-located bodies share one leaf
        max_speed: Bound on initial velocity components of random bodies
        mass_range: (low, high) mass range of random bodies
        random_seed: Seed for reproducible initial conditions
    """

    extent: float = 800.0
    dt: float = 0.1
    gravity: float = 1.0
    theta: float = 0.5
    softening: float = 3.0
    body_count: int = 500
    insert_mass: float = 20.0
    max_depth: int = 32
    max_speed: float = 1.0
    mass_range: tuple[float, float] = (1.0, 11.0)
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "extent", validate_extent(self.extent))
        object.__setattr__(self, "dt", validate_timestep(self.dt))
        object.__setattr__(self, "gravity", validate_gravity(self.gravity))
        object.__setattr__(self, "theta", validate_theta(self.theta))
        object.__setattr__(self, "softening", validate_softening(self.softening))
        object.__setattr__(self, "body_count", validate_count(self.body_count))
        object.__setattr__(self, "insert_mass", validate_mass(self.insert_mass))
        object.__setattr__(self, "max_depth", validate_max_depth(self.max_depth))
        object.__setattr__(self, "max_speed", validate_speed(self.max_speed))
        object.__setattr__(self, "mass_range", validate_mass_range(self.mass_range))

    def replace(self, **changes: Any) -> SimulationConfig:
        """Return a copy with the given fields changed (re-validated)."""
        return dataclasses.replace(self, **changes)


__all__ = ["SimulationConfig"]
