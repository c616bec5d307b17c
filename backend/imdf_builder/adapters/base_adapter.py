"""
Base adapter class for converting drawing-surface primitives into IMDF geometry.
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import structlog

logger = structlog.get_logger()

# Raw drawing-surface units are divided by this factor on both the save and the
# export path. It is a linear scale-down, not a geographic projection.
SCALE_FACTOR = 100000


def close_rings(coordinates: Any) -> Any:
    """Return polygon coordinates with every ring closed (first == last).

    Anything that is not a list of coordinate rings is returned untouched.
    """
    if not isinstance(coordinates, list):
        return coordinates

    closed = []
    for ring in coordinates:
        if isinstance(ring, list) and len(ring) > 0 and ring[0] != ring[-1]:
            ring = ring + [ring[0]]
        closed.append(ring)
    return closed


class BaseAdapter(ABC):
    """Base class for all primitive adapters."""

    # Fields the primitive must carry as finite numbers
    REQUIRED_FIELDS: List[str] = []

    def __init__(self, scale_factor: float = SCALE_FACTOR):
        self.scale_factor = scale_factor
        self.processed_count = 0
        self.fallback_count = 0

    @abstractmethod
    def to_geometry(self, primitive: Dict[str, Any]) -> Any:
        """Convert a validated primitive into GeoJSON coordinates."""
        pass

    @abstractmethod
    def fallback_geometry(self) -> Any:
        """Deterministic geometry used when no usable primitive is attached."""
        pass

    @abstractmethod
    def to_primitive(self, coordinates: Any) -> Optional[Dict[str, Any]]:
        """Rebuild a primitive from stored coordinates (inverse of to_geometry)."""
        pass

    def normalize(self, primitive: Optional[Dict[str, Any]]) -> Any:
        """Convert a primitive, substituting the fallback geometry for degenerate input."""
        if not self.validate_primitive(primitive):
            self.fallback_count += 1
            logger.debug(
                "Primitive missing or degenerate, using fallback geometry",
                adapter=self.__class__.__name__
            )
            return self.fallback_geometry()

        self.processed_count += 1
        return self.to_geometry(primitive)

    def scale(self, value: float) -> float:
        """Scale a raw drawing-surface value down to coordinate space."""
        return value / self.scale_factor

    def unscale(self, value: float) -> float:
        """Map a coordinate back to drawing-surface units, rounded to 1e-6."""
        return round(value * self.scale_factor, 6)

    def validate_primitive(self, primitive: Optional[Dict[str, Any]]) -> bool:
        """Check the primitive carries every required field as a finite number."""
        if not isinstance(primitive, dict):
            return False

        for field in self.REQUIRED_FIELDS:
            value = primitive.get(field)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return False
            if not math.isfinite(value):
                return False

        return True

    @staticmethod
    def scale_axis(primitive: Dict[str, Any], key: str) -> float:
        """Return the primitive's scaleX/scaleY, defaulting to 1."""
        value = primitive.get(key, 1)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 1
        return value

    def get_processing_stats(self) -> Dict[str, int]:
        """Get processing statistics."""
        return {
            'processed_count': self.processed_count,
            'fallback_count': self.fallback_count
        }

    def reset_stats(self):
        """Reset processing statistics."""
        self.processed_count = 0
        self.fallback_count = 0
