"""
Circle adapter: amenity and anchor markers become IMDF points.
"""

from typing import Any, Dict, List, Optional
from .base_adapter import BaseAdapter


class CircleAdapter(BaseAdapter):
    """Adapter for circle (point marker) primitives."""

    REQUIRED_FIELDS = ['left', 'top']

    def to_geometry(self, primitive: Dict[str, Any]) -> List[float]:
        # Placement anchor only; the radius is not applied.
        return [self.scale(primitive['left']), self.scale(primitive['top'])]

    def fallback_geometry(self) -> List[float]:
        return [0, 0]

    def to_primitive(self, coordinates: Any) -> Optional[Dict[str, Any]]:
        try:
            x, y = coordinates
            return {'left': self.unscale(float(x)), 'top': self.unscale(float(y))}
        except (ValueError, TypeError):
            return None
