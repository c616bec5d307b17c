"""
Adapter layer for converting drawing-surface primitives into IMDF geometry.
Each adapter scales screen-space units by a fixed factor and substitutes a
deterministic fallback geometry for missing or degenerate primitives.
"""

from .base_adapter import BaseAdapter, SCALE_FACTOR, close_rings
from .rect_adapter import RectAdapter
from .circle_adapter import CircleAdapter
from .line_adapter import LineAdapter

__all__ = [
    'BaseAdapter',
    'SCALE_FACTOR',
    'close_rings',
    'RectAdapter',
    'CircleAdapter',
    'LineAdapter'
]
