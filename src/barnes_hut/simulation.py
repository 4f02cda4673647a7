"""
Barnes-Hut n-body simulation loop.

Each tick runs three phases in strict order:

1. Build a fresh quadtree over every body's current position.
2. Reset and accumulate the force on every body from that tree.
3. Integrate every body by one fixed time step.

No body moves before all forces are known, so the result of a tick does
not depend on the order of the body list. Bodies injected from outside
(see `add_body`) are queued and only join between ticks.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from .config import SimulationConfig
from .physics.body import Body, BodyView
from .physics.generators import bodies_from_config
from .spatial.quadtree import ForceStats, QuadTree
from .types import Event, EventCallback, EventType
from .validation import validate_mass, validate_position


class DroppedBodyWarning(UserWarning):
    """Warning issued when bodies could not be placed in the tick's tree."""

    pass


class Simulation:
    """
    Gravitational n-body simulation with Barnes-Hut force approximation.

    Example:
        sim = Simulation(SimulationConfig(body_count=200, random_seed=1))
        sim.on("tick", lambda event: redraw(sim.snapshot()))
        sim.run(100)

        sim.add_body(400, 400)   # joins at the next tick boundary
        sim.tick()
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        bodies: Optional[Iterable[Body]] = None,
        *,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize the simulation.

        Args:
            config: Run configuration (defaults to SimulationConfig())
            bodies: Initial bodies. If None, `config.body_count` random bodies
                are generated.
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event

        Raises:
            InvalidBodyError: If a body has a non-positive mass or lies
                outside the domain
        """
        self._config = config if config is not None else SimulationConfig()
        self._bodies: list[Body] = []
        self._pending: list[Body] = []
        self._tree: Optional[QuadTree] = None
        self._stats = ForceStats()
        self._ticks = 0
        self._time = 0.0
        self._events: dict[EventType, EventCallback] = {}

        initial = bodies_from_config(self._config) if bodies is None else bodies
        for body in initial:
            self._check_body(body)
            self._bodies.append(body)

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> SimulationConfig:
        """Get the run configuration."""
        return self._config

    @property
    def bodies(self) -> tuple[Body, ...]:
        """Get the current bodies (pending insertions excluded)."""
        return tuple(self._bodies)

    @property
    def pending(self) -> int:
        """Number of injected bodies waiting for the next tick boundary."""
        return len(self._pending)

    @property
    def tree(self) -> Optional[QuadTree]:
        """The quadtree built during the last tick (None before the first)."""
        return self._tree

    @property
    def stats(self) -> ForceStats:
        """Force-evaluation counters of the last tick."""
        return self._stats

    @property
    def ticks(self) -> int:
        """Number of completed ticks."""
        return self._ticks

    @property
    def time(self) -> float:
        """Simulated time elapsed."""
        return self._time

    def snapshot(self) -> tuple[BodyView, ...]:
        """Read-only (x, y, mass) view of every body, for rendering."""
        return tuple(body.view() for body in self._bodies)

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: EventCallback) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """Trigger an event, calling the registered callback."""
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Body injection
    # -------------------------------------------------------------------------

    def add_body(self, x: float, y: float) -> Body:
        """
        Queue a new resting body at (x, y) with the configured insert mass.

        The body joins the simulation at the start of the next tick, never
        in the middle of one.

        Returns:
            The queued body

        Raises:
            InvalidBodyError: If (x, y) lies outside the domain
        """
        px, py = validate_position(x, y, self._config.extent)
        body = Body(px, py, 0.0, 0.0, self._config.insert_mass)
        self._pending.append(body)
        return body

    def _check_body(self, body: Body) -> None:
        validate_mass(body.mass)
        validate_position(body.x, body.y, self._config.extent)

    def _apply_pending(self) -> None:
        if self._pending:
            self._bodies.extend(self._pending)
            self._pending = []

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def build_tree(self) -> QuadTree:
        """Build a fresh quadtree over the current body positions."""
        return QuadTree.from_bodies(self._bodies, self._config)

    def tick(self) -> Self:
        """
        Advance the simulation by one time step.

        Returns:
            self (for chaining)
        """
        self._step()
        return self

    def _step(self) -> None:
        # The warning stacklevel assumes a direct call from tick() or run()
        self._apply_pending()

        tree = self.build_tree()
        if tree.dropped_count:
            warnings.warn(
                f"{tree.dropped_count} bodies lie outside the domain "
                "and were left out of this tick's tree.",
                DroppedBodyWarning,
                stacklevel=3,
            )

        stats = ForceStats()
        for body in self._bodies:
            body.reset_force()
            tree.update_force(body, stats)

        dt = self._config.dt
        extent = self._config.extent
        for body in self._bodies:
            body.update(dt, extent)

        self._tree = tree
        self._stats = stats
        self._ticks += 1
        self._time += dt

        self.trigger(
            {
                "type": EventType.tick,
                "tick": self._ticks,
                "time": self._time,
                "bodies": len(self._bodies),
                "dropped": tree.dropped_count,
                "stats": stats,
            }
        )

    def run(self, steps: int = 1) -> Self:
        """
        Run a fixed number of ticks, firing start and end events around them.

        Args:
            steps: Number of ticks (values below 1 run no ticks)

        Returns:
            self (for chaining)
        """
        self.trigger({"type": EventType.start, "tick": self._ticks, "time": self._time})
        for _ in range(max(0, int(steps))):
            self._step()
        self.trigger({"type": EventType.end, "tick": self._ticks, "time": self._time})
        return self


__all__ = ["DroppedBodyWarning", "Simulation"]
