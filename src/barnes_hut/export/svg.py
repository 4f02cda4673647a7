"""
SVG export for simulation snapshots.

Renders the current body positions as circles whose radius grows with the
cube root of mass, framed by the square simulation domain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Union
from xml.sax.saxutils import escape

from ..physics.body import Body, BodyView

if TYPE_CHECKING:
    from ..simulation import Simulation


def body_radius(mass: float, min_radius: float = 2.0) -> float:
    """Draw radius for a body: the cube root of its mass, at least `min_radius`."""
    return max(min_radius, mass ** (1.0 / 3.0))


def to_svg(
    source: Union[Simulation, Iterable[Union[Body, BodyView]]],
    *,
    extent: Optional[float] = None,
    body_color: str = "#ffffff",
    background: Optional[str] = "#000000",
    min_radius: float = 2.0,
    show_tree: bool = False,
    tree_color: str = "#333333",
) -> str:
    """
    Export a snapshot of bodies to SVG format.

    Args:
        source: A Simulation, or any iterable of bodies / body views
        extent: Domain side length. Taken from the simulation config when
            a Simulation is given; otherwise derived from the bodies.
        body_color: Fill color for bodies (default white)
        background: Background color (None for transparent)
        min_radius: Smallest drawn radius
        show_tree: Outline the quadtree cells of the simulation's last tick
        tree_color: Stroke color for tree cells

    Returns:
        SVG string representation of the snapshot
    """
    tree = None
    if hasattr(source, "snapshot"):
        views = list(source.snapshot())
        if extent is None:
            extent = source.config.extent
        tree = source.tree
    else:
        views = [BodyView(b.x, b.y, b.mass) for b in source]

    if extent is None:
        extent = max((max(v.x, v.y) for v in views), default=1.0) or 1.0

    svg_parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{extent:.1f}" height="{extent:.1f}" '
        f'viewBox="0 0 {extent:.1f} {extent:.1f}">'
    ]

    if background:
        svg_parts.append(f'  <rect width="100%" height="100%" fill="{escape(background)}"/>')

    if show_tree and tree is not None:
        svg_parts.append('  <g class="tree">')
        for node in tree.nodes():
            r = node.region
            svg_parts.append(
                f'    <rect x="{r.x:.2f}" y="{r.y:.2f}" '
                f'width="{r.length:.2f}" height="{r.length:.2f}" '
                f'fill="none" stroke="{escape(tree_color)}" stroke-width="0.5"/>'
            )
        svg_parts.append("  </g>")

    svg_parts.append('  <g class="bodies">')
    for view in views:
        radius = body_radius(view.mass, min_radius)
        svg_parts.append(
            f'    <circle cx="{view.x:.2f}" cy="{view.y:.2f}" r="{radius:.2f}" '
            f'fill="{escape(body_color)}"/>'
        )
    svg_parts.append("  </g>")
    svg_parts.append("</svg>")

    return "\n".join(svg_parts)


__all__ = ["body_radius", "to_svg"]
