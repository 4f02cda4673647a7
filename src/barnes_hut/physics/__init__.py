"""
Body state and per-body physics.

Provides the Body point mass (softened gravity, Euler integration) and
random initial-condition generators.
"""

from .body import Body, BodyView
from .generators import bodies_from_config, random_bodies

__all__ = ["Body", "BodyView", "bodies_from_config", "random_bodies"]
