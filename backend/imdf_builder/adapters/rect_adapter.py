"""
Rectangle adapter: unit footprints drawn as rectangles become IMDF polygons.
"""

from typing import Any, Dict, List, Optional
from shapely.errors import ShapelyError
from shapely.geometry import Polygon
from .base_adapter import BaseAdapter


class RectAdapter(BaseAdapter):
    """Adapter for rectangle primitives."""

    REQUIRED_FIELDS = ['left', 'top', 'width', 'height']

    FALLBACK_POLYGON = [[[0, 0], [0, 0.0001], [0.0001, 0.0001], [0.0001, 0], [0, 0]]]
    FALLBACK_DISPLAY_POINT = [0, 0]

    def to_geometry(self, primitive: Dict[str, Any]) -> List[List[List[float]]]:
        """Closed ring ordered top-left, bottom-left, bottom-right, top-right, top-left."""
        left = self.scale(primitive['left'])
        top = self.scale(primitive['top'])
        width = self.scale(primitive['width'] * self.scale_axis(primitive, 'scaleX'))
        height = self.scale(primitive['height'] * self.scale_axis(primitive, 'scaleY'))

        return [[
            [left, top],
            [left, top + height],
            [left + width, top + height],
            [left + width, top],
            [left, top]
        ]]

    def fallback_geometry(self) -> List[List[List[float]]]:
        return [[list(point) for point in ring] for ring in self.FALLBACK_POLYGON]

    def display_point(self, primitive: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """GeoJSON Point at the rectangle's center, each axis scaled independently."""
        if not self.validate_primitive(primitive):
            return {'type': 'Point', 'coordinates': list(self.FALLBACK_DISPLAY_POINT)}

        half_width = primitive['width'] * self.scale_axis(primitive, 'scaleX') / 2
        half_height = primitive['height'] * self.scale_axis(primitive, 'scaleY') / 2

        return {
            'type': 'Point',
            'coordinates': [
                self.scale(primitive['left'] + half_width),
                self.scale(primitive['top'] + half_height)
            ]
        }

    def to_primitive(self, coordinates: Any) -> Optional[Dict[str, Any]]:
        """Rebuild a rectangle from the bounding box of the polygon's outer ring."""
        try:
            polygon = Polygon(coordinates[0])
        except (ShapelyError, ValueError, TypeError, IndexError, KeyError, AttributeError):
            return None
        if polygon.is_empty:
            return None

        min_x, min_y, max_x, max_y = polygon.bounds

        return {
            'left': self.unscale(min_x),
            'top': self.unscale(min_y),
            'width': self.unscale(max_x - min_x),
            'height': self.unscale(max_y - min_y),
            'scaleX': 1,
            'scaleY': 1
        }
