"""
barnes-hut-sim: Planar gravitational n-body simulation with Barnes-Hut
force approximation.

Bodies are inserted into a region quadtree that keeps the mass and center
of mass of every cell. Forces are evaluated by walking the tree and
replacing distant cells by a single pseudo-body, trading accuracy for
speed through the opening angle theta.

Available modules:
- spatial: Square regions and the Barnes-Hut quadtree
- physics: Bodies, softened gravity, integration, random initial conditions
- simulation: The per-tick build / force / integrate loop
- metrics: Conserved quantities, energies and force accuracy
- export: SVG snapshots
"""

__version__ = "0.1.0"

from .config import SimulationConfig

# Diagnostics
from .metrics import (
    center_of_mass,
    direct_forces,
    force_error,
    kinetic_energy,
    linear_momentum,
    potential_energy,
    total_mass,
)

# Bodies and initial conditions
from .physics import Body, BodyView, bodies_from_config, random_bodies
from .simulation import DroppedBodyWarning, Simulation

# Spatial data structures
from .spatial import ForceStats, Quadrant, QuadTree, QuadTreeNode, Region
from .types import Event, EventType

# Validation
from .validation import (
    InvalidBodyError,
    InvalidDomainError,
    InvalidParameterError,
    ValidationError,
)

__all__ = [
    # Configuration
    "SimulationConfig",
    # Simulation
    "Simulation",
    "DroppedBodyWarning",
    "Event",
    "EventType",
    # Physics
    "Body",
    "BodyView",
    "bodies_from_config",
    "random_bodies",
    # Spatial
    "ForceStats",
    "Quadrant",
    "QuadTree",
    "QuadTreeNode",
    "Region",
    # Metrics
    "center_of_mass",
    "direct_forces",
    "force_error",
    "kinetic_energy",
    "linear_momentum",
    "potential_energy",
    "total_mass",
    # Validation
    "ValidationError",
    "InvalidBodyError",
    "InvalidDomainError",
    "InvalidParameterError",
]
