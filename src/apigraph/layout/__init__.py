"""Layout of visible subgraphs.

The adapter sizes nodes and converts coordinates; engines do the placement.
"""

from .adapter import LayoutAdapter, LayoutError
from .engine import LayeredLayoutEngine, LayoutEngine, LayoutRequest, Position

__all__ = [
    "LayoutAdapter",
    "LayoutError",
    "LayoutEngine",
    "LayeredLayoutEngine",
    "LayoutRequest",
    "Position",
]
