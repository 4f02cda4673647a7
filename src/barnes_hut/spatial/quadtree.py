"""
Quadtree implementation for Barnes-Hut gravity approximation.

The quadtree recursively subdivides the square domain into quadrants,
enabling O(n log n) approximate n-body force calculations. Every node
keeps the total mass and center of mass of its subtree up to date as
bodies are inserted, so the tree is ready for force evaluation as soon
as the last body is in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional

from ..validation import validate_max_depth
from .region import Quadrant, Region

if TYPE_CHECKING:
    from ..config import SimulationConfig
    from ..physics.body import Body


@dataclass
class ForceStats:
    """
    Counters collected while evaluating forces.

    Attributes:
        expansions: Internal nodes opened (recursed into)
        approximations: Subtrees replaced by a single pseudo-body
        exact: Exact body-body contributions at leaves
    """

    expansions: int = 0
    approximations: int = 0
    exact: int = 0

    def merge(self, other: ForceStats) -> None:
        """Add another set of counters to this one."""
        self.expansions += other.expansions
        self.approximations += other.approximations
        self.exact += other.exact


@dataclass
class QuadTreeNode:
    """
    A node in the quadtree.

    A node is either external (no children; holds zero or one body, or
    several co-located bodies once the depth cutoff is reached) or internal
    (exactly four children, no bodies of its own).

    Attributes:
        region: Square covered by this node
        depth: Distance from the root (root = 0)
        center_of_mass_x/y: Center of mass of bodies in this subtree
        total_mass: Total mass of bodies in this subtree
        bodies: Bodies held directly if this is an external node
        children: Four child quadrants [NW, NE, SW, SE] if internal
    """

    region: Region
    depth: int = 0

    # Aggregated properties
    center_of_mass_x: float = 0.0
    center_of_mass_y: float = 0.0
    total_mass: float = 0.0

    # Content
    bodies: List[Body] = field(default_factory=list)
    children: Optional[List[QuadTreeNode]] = None

    def is_external(self) -> bool:
        """True if this node has no children."""
        return self.children is None

    def is_empty(self) -> bool:
        """True if no body was ever inserted below this node."""
        return not self.bodies and self.children is None

    @property
    def body(self) -> Optional[Body]:
        """The single body held by an external node, if any."""
        return self.bodies[0] if self.bodies else None

    def child(self, which: Quadrant | int) -> QuadTreeNode:
        """Get one child of an internal node."""
        if self.children is None:
            raise ValueError("External node has no children")
        return self.children[int(which)]

    # -------------------------------------------------------------------------
    # Insertion
    # -------------------------------------------------------------------------

    def insert(self, body: Body, max_depth: int = 32) -> bool:
        """
        Insert a body into the subtree rooted at this node.

        Bodies outside this node's region are ignored. Below this node the
        body follows `Region.quadrant_of` and is never re-tested against the
        children's bounds, which may be off by a rounding error.

        Args:
            body: Body to insert
            max_depth: Nodes at this depth never subdivide; further bodies
                reaching them share the leaf

        Returns:
            True if the body was stored, False if it lies outside the region
        """
        if not self.region.contains(body.x, body.y):
            return False
        self._place(body, max_depth)
        return True

    def _place(self, body: Body, max_depth: int) -> None:
        """Store a body routed to this node, subdividing as needed."""
        if self.children is None:
            if not self.bodies:
                # Empty external node becomes a leaf with this body
                self.bodies.append(body)
                self.total_mass = body.mass
                self.center_of_mass_x = body.x
                self.center_of_mass_y = body.y
                return

            if self.depth >= max_depth:
                self.bodies.append(body)
                self._absorb(body)
                return

            self._subdivide(max_depth)

        self._child_for(body)._place(body, max_depth)
        self._absorb(body)

    def _subdivide(self, max_depth: int) -> None:
        """Create four empty children and push the held bodies down into them."""
        self.children = [
            QuadTreeNode(region, depth=self.depth + 1) for region in self.region.quadrants()
        ]
        existing = self.bodies
        self.bodies = []
        for body in existing:
            self._child_for(body)._place(body, max_depth)

    def _child_for(self, body: Body) -> QuadTreeNode:
        assert self.children is not None
        return self.children[self.region.quadrant_of(body.x, body.y)]

    def _absorb(self, body: Body) -> None:
        """Fold one more body into the running mass and center of mass."""
        total = self.total_mass + body.mass
        self.center_of_mass_x = (self.center_of_mass_x * self.total_mass + body.x * body.mass) / total
        self.center_of_mass_y = (self.center_of_mass_y * self.total_mass + body.y * body.mass) / total
        self.total_mass = total

    # -------------------------------------------------------------------------
    # Force evaluation
    # -------------------------------------------------------------------------

    def update_force(
        self,
        body: Body,
        theta: float = 0.5,
        gravity: float = 1.0,
        softening: float = 3.0,
        stats: Optional[ForceStats] = None,
    ) -> None:
        """
        Accumulate on `body` the attraction of every other body in this subtree.

        Uses Barnes-Hut approximation: if a cluster is sufficiently far away
        (size/distance < theta), it acts as a single mass at its center of
        mass. Clusters on the body's own insertion route are always opened,
        so a body never attracts itself through an aggregate.

        Args:
            body: The body receiving the force
            theta: Opening angle threshold
            gravity: Gravitational constant G
            softening: Softening length eps
            stats: Optional counters to update
        """
        on_route = self.region.contains(body.x, body.y)
        self._accumulate(body, on_route, theta, gravity, softening, stats)

    def _accumulate(
        self,
        body: Body,
        on_route: bool,
        theta: float,
        gravity: float,
        softening: float,
        stats: Optional[ForceStats],
    ) -> None:
        """Recursively add the contribution of this node to `body`."""
        if self.total_mass == 0:
            return

        if self.children is None:
            for other in self.bodies:
                # Skip self-interaction (identity, not equality)
                if other is body:
                    continue
                body.add_force(other.x, other.y, other.mass, gravity, softening)
                if stats is not None:
                    stats.exact += 1
            return

        dx = self.center_of_mass_x - body.x
        dy = self.center_of_mass_y - body.y
        dist = math.sqrt(dx * dx + dy * dy)

        # Barnes-Hut criterion: s/d < theta
        if not on_route and dist > 0 and self.region.length / dist < theta:
            body.add_force(
                self.center_of_mass_x,
                self.center_of_mass_y,
                self.total_mass,
                gravity,
                softening,
            )
            if stats is not None:
                stats.approximations += 1
            return

        # Node is too close - recurse into children
        if stats is not None:
            stats.expansions += 1
        route = self.region.quadrant_of(body.x, body.y) if on_route else None
        for index, child in enumerate(self.children):
            child._accumulate(body, index == route, theta, gravity, softening, stats)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def walk(self) -> Iterator[QuadTreeNode]:
        """Iterate over this node and all descendants (pre-order)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children is not None:
                stack.extend(reversed(node.children))

    def height(self) -> int:
        """Number of levels below this node (0 for an external node)."""
        if self.children is None:
            return 0
        return 1 + max(child.height() for child in self.children)


class QuadTree:
    """
    Barnes-Hut quadtree for approximate gravity calculations.

    The Barnes-Hut algorithm uses a quadtree to approximate long-range
    forces. For distant clusters, the algorithm treats the cluster as
    a single body at its center of mass, reducing complexity from
    O(n^2) to O(n log n).

    Usage:
        tree = QuadTree(Region(0, 0, 800), theta=0.5)
        for body in bodies:
            tree.insert(body)

        for body in bodies:
            body.reset_force()
            tree.update_force(body)

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.5: Good balance (recommended)
    - theta = 1.0+: Fast but less accurate
    """

    def __init__(
        self,
        region: Region,
        theta: float = 0.5,
        gravity: float = 1.0,
        softening: float = 3.0,
        max_depth: int = 32,
    ):
        """
        Initialize an empty quadtree.

        Args:
            region: Square covered by the root node
            theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
            gravity: Gravitational constant G
            softening: Softening length eps
            max_depth: Depth at which nodes stop subdividing (1 to 64)
        """
        self.root = QuadTreeNode(region)
        self.theta = theta
        self.gravity = gravity
        self.softening = softening
        self.max_depth = validate_max_depth(max_depth)
        self.body_count = 0
        self.dropped_count = 0

    @property
    def total_mass(self) -> float:
        """Total mass of all inserted bodies."""
        return self.root.total_mass

    @property
    def center_of_mass(self) -> tuple[float, float]:
        """Mass-weighted centroid of all inserted bodies."""
        return self.root.center_of_mass_x, self.root.center_of_mass_y

    def insert(self, body: Body) -> bool:
        """
        Insert a body into the quadtree.

        Bodies outside the root region are dropped and counted in
        `dropped_count`.

        Returns:
            True if the body was stored
        """
        if self.root.insert(body, self.max_depth):
            self.body_count += 1
            return True
        self.dropped_count += 1
        return False

    def update_force(self, body: Body, stats: Optional[ForceStats] = None) -> None:
        """Add the tree's gravitational pull to `body`'s accumulated force."""
        self.root.update_force(body, self.theta, self.gravity, self.softening, stats)

    def nodes(self) -> Iterator[QuadTreeNode]:
        """Iterate over all nodes (pre-order, children in NW, NE, SW, SE order)."""
        return self.root.walk()

    def depth(self) -> int:
        """Height of the tree (0 when the root never subdivided)."""
        return self.root.height()

    @classmethod
    def from_bodies(
        cls,
        bodies: Iterable[Body],
        config: SimulationConfig,
    ) -> QuadTree:
        """
        Build a quadtree spanning the configured domain.

        Args:
            bodies: Bodies to insert
            config: Simulation configuration (extent, theta, G, eps, max_depth)

        Returns:
            QuadTree with all in-domain bodies inserted
        """
        tree = cls(
            Region(0.0, 0.0, config.extent),
            theta=config.theta,
            gravity=config.gravity,
            softening=config.softening,
            max_depth=config.max_depth,
        )
        for body in bodies:
            tree.insert(body)
        return tree


__all__ = ["ForceStats", "QuadTree", "QuadTreeNode"]
