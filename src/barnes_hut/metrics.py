"""
Simulation diagnostics.

Provides quantitative measures of the body set and of force accuracy:
- Conserved quantities: total mass, center of mass, linear momentum
- Energies: kinetic and softened gravitational potential energy
- Accuracy: direct-sum reference forces and the relative error of the
  Barnes-Hut forces against them

The direct sum here is a measuring stick for the approximation, not an
alternative force mode of the simulation.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .physics.body import Body


def _positions(bodies: Sequence[Body]) -> np.ndarray:
    return np.array([(b.x, b.y) for b in bodies], dtype=np.float64).reshape(-1, 2)


def _masses(bodies: Sequence[Body]) -> np.ndarray:
    return np.array([b.mass for b in bodies], dtype=np.float64)


def total_mass(bodies: Sequence[Body]) -> float:
    """Sum of all body masses."""
    return float(_masses(bodies).sum())


def center_of_mass(bodies: Sequence[Body]) -> tuple[float, float]:
    """
    Mass-weighted centroid of the bodies.

    Returns:
        (x, y); (0.0, 0.0) for an empty sequence
    """
    if not bodies:
        return 0.0, 0.0
    m = _masses(bodies)
    com = (_positions(bodies) * m[:, None]).sum(axis=0) / m.sum()
    return float(com[0]), float(com[1])


def linear_momentum(bodies: Sequence[Body]) -> tuple[float, float]:
    """Total momentum (sum of m * v)."""
    px = sum(b.mass * b.vx for b in bodies)
    py = sum(b.mass * b.vy for b in bodies)
    return float(px), float(py)


def kinetic_energy(bodies: Sequence[Body]) -> float:
    """Total kinetic energy (sum of m * |v|^2 / 2)."""
    return float(sum(0.5 * b.mass * (b.vx * b.vx + b.vy * b.vy) for b in bodies))


def potential_energy(
    bodies: Sequence[Body],
    gravity: float = 1.0,
    softening: float = 3.0,
) -> float:
    """
    Softened gravitational potential energy.

    Uses -G * m_i * m_j / sqrt(d^2 + eps^2) summed over all pairs.

    Time Complexity: O(n^2)
    """
    n = len(bodies)
    if n < 2:
        return 0.0
    pos = _positions(bodies)
    m = _masses(bodies)
    diff = pos[:, None, :] - pos[None, :, :]
    dist_sq = (diff**2).sum(axis=-1)
    iu = np.triu_indices(n, k=1)
    with np.errstate(divide="ignore"):
        inv = 1.0 / np.sqrt(dist_sq[iu] + softening * softening)
    pair = m[iu[0]] * m[iu[1]] * inv
    return float(-gravity * pair.sum())


def direct_forces(
    bodies: Sequence[Body],
    gravity: float = 1.0,
    softening: float = 3.0,
) -> np.ndarray:
    """
    Exact softened pairwise forces by direct summation.

    Uses the same law as Body.add_force: magnitude G*m1*m2 / (d^2 + eps^2)
    along the unsoftened unit vector; coincident pairs contribute nothing.

    Returns:
        Array of shape (n, 2) with (fx, fy) per body

    Time Complexity: O(n^2)
    """
    n = len(bodies)
    if n == 0:
        return np.zeros((0, 2), dtype=np.float64)
    pos = _positions(bodies)
    m = _masses(bodies)

    # diff[i, j] points from body i toward body j
    diff = pos[None, :, :] - pos[:, None, :]
    dist_sq = (diff**2).sum(axis=-1)
    dist = np.sqrt(dist_sq)
    coincident = dist_sq == 0.0

    with np.errstate(divide="ignore", invalid="ignore"):
        scale = gravity * m[:, None] * m[None, :] / ((dist_sq + softening * softening) * dist)
    scale[coincident] = 0.0

    return (scale[:, :, None] * diff).sum(axis=1)


def force_error(
    bodies: Sequence[Body],
    gravity: float = 1.0,
    softening: float = 3.0,
) -> float:
    """
    Relative error of the accumulated forces against direct summation.

    Reads each body's current (fx, fy), so call it after a force pass.

    Returns:
        ||F_approx - F_exact|| / ||F_exact|| over all bodies (0.0 if the
        exact forces vanish)
    """
    exact = direct_forces(bodies, gravity, softening)
    approx = np.array([(b.fx, b.fy) for b in bodies], dtype=np.float64).reshape(-1, 2)
    norm = float(np.linalg.norm(exact))
    if norm == 0.0:
        return 0.0
    return float(np.linalg.norm(approx - exact) / norm)


__all__ = [
    "total_mass",
    "center_of_mass",
    "linear_momentum",
    "kinetic_energy",
    "potential_energy",
    "direct_forces",
    "force_error",
]
