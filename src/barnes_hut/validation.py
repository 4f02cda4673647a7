"""
Input validation utilities for the Barnes-Hut simulation.

Provides centralized validation functions for simulation parameters,
body masses and positions. Raises descriptive exceptions on invalid input.
"""

from __future__ import annotations

import math
from typing import Sequence


class ValidationError(ValueError):
    """Base exception for simulation validation errors."""

    pass


class InvalidParameterError(ValidationError):
    """Raised when a simulation parameter is out of range."""

    pass


class InvalidDomainError(ValidationError):
    """Raised when the simulation domain extent is invalid."""

    pass


class InvalidBodyError(ValidationError):
    """Raised when a body has a non-positive mass or an unusable position."""

    pass


def validate_extent(extent: float) -> float:
    """
    Validate the side length of the square simulation domain.

    Args:
        extent: Domain side length

    Returns:
        Validated extent as float

    Raises:
        InvalidDomainError: If extent is not a positive finite number
    """
    value = float(extent)
    if not math.isfinite(value) or value <= 0:
        raise InvalidDomainError(f"Domain extent must be positive, got {extent}")
    return value


def validate_mass(mass: float) -> float:
    """
    Validate a body mass.

    Raises:
        InvalidBodyError: If mass is not strictly positive and finite
    """
    value = float(mass)
    if not math.isfinite(value) or value <= 0:
        raise InvalidBodyError(f"Body mass must be positive, got {mass}")
    return value


def validate_position(x: float, y: float, extent: float) -> tuple[float, float]:
    """
    Validate that a position lies inside the closed domain [0, extent]^2.

    Args:
        x: X coordinate
        y: Y coordinate
        extent: Domain side length

    Returns:
        Validated (x, y) tuple

    Raises:
        InvalidBodyError: If the position is non-finite or outside the domain
    """
    px, py = float(x), float(y)
    if not (math.isfinite(px) and math.isfinite(py)):
        raise InvalidBodyError(f"Body position must be finite, got ({x}, {y})")
    if not (0.0 <= px <= extent and 0.0 <= py <= extent):
        raise InvalidBodyError(
            f"Body position ({px}, {py}) lies outside domain [0, {extent}]"
        )
    return px, py


def validate_theta(theta: float) -> float:
    """
    Validate the Barnes-Hut opening angle.

    Raises:
        InvalidParameterError: If theta is negative or not finite
    """
    value = float(theta)
    if not math.isfinite(value) or value < 0:
        raise InvalidParameterError(f"theta must be >= 0, got {theta}")
    return value


def validate_softening(softening: float) -> float:
    """Validate the softening length (must be >= 0)."""
    value = float(softening)
    if not math.isfinite(value) or value < 0:
        raise InvalidParameterError(f"softening must be >= 0, got {softening}")
    return value


def validate_gravity(gravity: float) -> float:
    """Validate the gravitational constant (must be >= 0)."""
    value = float(gravity)
    if not math.isfinite(value) or value < 0:
        raise InvalidParameterError(f"gravity must be >= 0, got {gravity}")
    return value


def validate_timestep(dt: float) -> float:
    """Validate the fixed integration time step (must be > 0)."""
    value = float(dt)
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError(f"dt must be positive, got {dt}")
    return value


MAX_TREE_DEPTH = 64


def validate_max_depth(max_depth: int) -> int:
    """
    Validate the tree depth cutoff.

    Insertion recurses once per level, so the cutoff is bounded well below
    the interpreter's recursion limit.

    Raises:
        InvalidParameterError: If max_depth is outside [1, MAX_TREE_DEPTH]
    """
    value = int(max_depth)
    if not 1 <= value <= MAX_TREE_DEPTH:
        raise InvalidParameterError(
            f"max_depth must be between 1 and {MAX_TREE_DEPTH}, got {max_depth}"
        )
    return value


def validate_speed(speed: float) -> float:
    """Validate a speed bound (must be finite and >= 0)."""
    value = float(speed)
    if not math.isfinite(value) or value < 0:
        raise InvalidParameterError(f"max_speed must be >= 0, got {speed}")
    return value


def validate_count(count: int) -> int:
    """Validate a body count (must be >= 0)."""
    value = int(count)
    if value < 0:
        raise InvalidParameterError(f"body_count must be >= 0, got {count}")
    return value


def validate_mass_range(mass_range: Sequence[float]) -> tuple[float, float]:
    """
    Validate a (low, high) mass range used for random body generation.

    Raises:
        InvalidParameterError: If the range is malformed or not strictly positive
    """
    if len(mass_range) != 2:
        raise InvalidParameterError(
            f"mass_range must have 2 elements [low, high], got {len(mass_range)}"
        )
    low, high = float(mass_range[0]), float(mass_range[1])
    if low <= 0 or high < low:
        raise InvalidParameterError(f"mass_range must satisfy 0 < low <= high, got {mass_range}")
    return low, high


__all__ = [
    "ValidationError",
    "InvalidParameterError",
    "InvalidDomainError",
    "InvalidBodyError",
    "validate_extent",
    "validate_mass",
    "validate_position",
    "validate_theta",
    "validate_softening",
    "validate_gravity",
    "validate_timestep",
    "MAX_TREE_DEPTH",
    "validate_max_depth",
    "validate_speed",
    "validate_count",
    "validate_mass_range",
]
