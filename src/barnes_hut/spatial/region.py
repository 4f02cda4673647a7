"""
Axis-aligned square regions used to partition the simulation domain.
"""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple


class Quadrant(IntEnum):
    """
    Child slot of a quadtree node.

    The y axis grows downward (screen coordinates), so "north" is the half
    with the smaller y values.
    """

    NW = 0
    NE = 1
    SW = 2
    SE = 3


class Region(NamedTuple):
    """
    A square [x, x + length] x [y, y + length].

    Attributes:
        x, y: Origin (north-west corner)
        length: Side length (always > 0)
    """

    x: float
    y: float
    length: float

    @property
    def half(self) -> float:
        """Half the side length."""
        return self.length / 2

    @property
    def center(self) -> tuple[float, float]:
        """Center point of the square."""
        h = self.length / 2
        return self.x + h, self.y + h

    def contains(self, px: float, py: float) -> bool:
        """Check if point (px, py) lies in the closed square (edges included)."""
        return self.x <= px <= self.x + self.length and self.y <= py <= self.y + self.length

    def quadrant(self, which: Quadrant | int) -> Region:
        """
        Get one of the four sub-squares with half the side length.

        Args:
            which: Quadrant.NW, NE, SW or SE (or the matching index 0-3)
        """
        which = Quadrant(which)
        h = self.length / 2
        dx = h if which & 1 else 0.0
        dy = h if which & 2 else 0.0
        return Region(self.x + dx, self.y + dy, h)

    def quadrants(self) -> tuple[Region, Region, Region, Region]:
        """All four sub-squares in [NW, NE, SW, SE] order."""
        return (
            self.quadrant(Quadrant.NW),
            self.quadrant(Quadrant.NE),
            self.quadrant(Quadrant.SW),
            self.quadrant(Quadrant.SE),
        )

    def quadrant_of(self, px: float, py: float) -> Quadrant:
        """
        Get the quadrant a point belongs to.

        Containment is closed on all edges, so a point on a midline lies in
        two quadrants. The tie is broken half-open: points on the vertical
        midline go east, points on the horizontal midline go south.
        """
        mid_x, mid_y = self.center
        east = px >= mid_x
        south = py >= mid_y
        return Quadrant((2 if south else 0) + (1 if east else 0))


__all__ = ["Quadrant", "Region"]
