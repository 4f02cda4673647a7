"""
Point-mass bodies and the per-body physics: softened pairwise gravity and
semi-implicit Euler integration with reflecting domain walls.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple


class BodyView(NamedTuple):
    """Read-only (x, y, mass) snapshot handed to renderers."""

    x: float
    y: float
    mass: float


@dataclass(eq=False)
class Body:
    """
    A point mass with position, velocity and accumulated force.

    Bodies compare by identity, never by value: two bodies at the same
    place with the same mass are still distinct.

    Attributes:
        x, y: Position
        vx, vy: Velocity
        mass: Mass (strictly positive)
        fx, fy: Force accumulated during the current tick
    """

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    mass: float = 1.0
    fx: float = 0.0
    fy: float = 0.0

    def reset_force(self) -> None:
        """Clear the accumulated force."""
        self.fx = 0.0
        self.fy = 0.0

    def add_force(
        self,
        x: float,
        y: float,
        mass: float,
        gravity: float = 1.0,
        softening: float = 3.0,
    ) -> None:
        """
        Add the softened attraction exerted by a mass located at (x, y).

        The magnitude is G * m1 * m2 / (d^2 + eps^2); the direction is the
        unit vector toward (x, y). A source at exactly zero distance has no
        direction and contributes nothing.

        Args:
            x, y: Position of the acting body or pseudo-body
            mass: Its mass
            gravity: Gravitational constant G
            softening: Softening length eps
        """
        dx = x - self.x
        dy = y - self.y
        dist_sq = dx * dx + dy * dy
        if dist_sq == 0.0:
            return

        dist = math.sqrt(dist_sq)
        force = gravity * self.mass * mass / (dist_sq + softening * softening)
        self.fx += force * dx / dist
        self.fy += force * dy / dist

    def update(self, dt: float, extent: float) -> None:
        """
        Advance one step of semi-implicit Euler and reflect off the walls.

        Velocity is updated from the accumulated force first, then position
        from the new velocity. A coordinate that leaves [0, extent] is clamped
        to the wall and the matching velocity component changes sign.
        """
        self.vx += (self.fx / self.mass) * dt
        self.vy += (self.fy / self.mass) * dt
        self.x += self.vx * dt
        self.y += self.vy * dt

        if self.x < 0:
            self.x = 0.0
            self.vx = -self.vx
        elif self.x > extent:
            self.x = extent
            self.vx = -self.vx

        if self.y < 0:
            self.y = 0.0
            self.vy = -self.vy
        elif self.y > extent:
            self.y = extent
            self.vy = -self.vy

    def view(self) -> BodyView:
        """Get a read-only snapshot of position and mass."""
        return BodyView(self.x, self.y, self.mass)


__all__ = ["Body", "BodyView"]
