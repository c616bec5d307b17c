"""
Line adapter for fixtures and openings drawn as two-point lines.
"""

from typing import Any, Dict, List, Optional
from .base_adapter import BaseAdapter


class LineAdapter(BaseAdapter):
    """Adapter for line primitives."""

    REQUIRED_FIELDS = ['x1', 'y1', 'x2', 'y2']

    def to_geometry(self, primitive: Dict[str, Any]) -> List[List[float]]:
        """Ordered endpoint pair, each endpoint scaled independently."""
        return [
            [self.scale(primitive['x1']), self.scale(primitive['y1'])],
            [self.scale(primitive['x2']), self.scale(primitive['y2'])]
        ]

    def fallback_geometry(self) -> List[List[float]]:
        return [[0, 0], [0, 0.0001]]

    def to_primitive(self, coordinates: Any) -> Optional[Dict[str, Any]]:
        try:
            (x1, y1), (x2, y2) = coordinates
            return {
                'x1': self.unscale(float(x1)),
                'y1': self.unscale(float(y1)),
                'x2': self.unscale(float(x2)),
                'y2': self.unscale(float(y2))
            }
        except (ValueError, TypeError):
            return None

