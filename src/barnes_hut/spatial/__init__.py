"""
Spatial data structures for efficient force calculations.

Provides the square Region and the quadtree used for Barnes-Hut
O(n log n) force approximation.
"""

from .quadtree import ForceStats, QuadTree, QuadTreeNode
from .region import Quadrant, Region

__all__ = ["ForceStats", "Quadrant", "QuadTree", "QuadTreeNode", "Region"]
