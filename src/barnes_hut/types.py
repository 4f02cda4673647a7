"""
Common types for the simulation.

- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Callable, Optional, TypedDict

if TYPE_CHECKING:
    from .spatial.quadtree import ForceStats


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: A run of ticks has begun
    - tick: Fired once per completed tick (redraw hook)
    - end: The run has finished
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    tick: int
    time: float
    bodies: int
    dropped: int
    stats: Optional[ForceStats]


EventCallback = Callable[[Optional[Event]], None]


__all__ = ["Event", "EventCallback", "EventType"]
