"""
Feature service for assembling IMDF GeoJSON feature collections.

Turns a project payload (venue, building, levels, units, amenities, fixtures,
openings, anchors) into the documents of an IMDF archive. Assembly is pure:
no I/O, no side effects, and partial input never fails. Missing fields are
replaced by the defaults below so an in-progress drawing can always be exported.
"""

import copy
import json
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from shapely.errors import ShapelyError
from shapely.geometry import Polygon
from ..adapters.base_adapter import close_rings
from ..config import settings
from ..timestamps import utc_now, to_iso

# Feature types written as populated collections
FEATURE_FILES = [
    'venue.geojson',
    'building.geojson',
    'level.geojson',
    'unit.geojson',
    'amenity.geojson',
    'fixture.geojson',
    'opening.geojson',
    'anchor.geojson',
]

# The archive format requires these even when unused
EMPTY_FEATURE_FILES = [
    'address.geojson',
    'detail.geojson',
    'footprint.geojson',
    'geojson-spec.geojson',
    'kiosk.geojson',
    'occupant.geojson',
    'relationship.geojson',
    'section.geojson',
]

MANIFEST_FILE = 'manifest.json'

IMDF_FILES = FEATURE_FILES + EMPTY_FEATURE_FILES + [MANIFEST_FILE]

DEFAULT_POINT = [0, 0]
DEFAULT_POLYGON = [[[0, 0], [0, 1], [1, 1], [1, 0], [0, 0]]]
DEFAULT_LINE = [[0, 0], [0, 1]]

FIXTURE_GEOMETRY_TYPES = {
    'Point': DEFAULT_POINT,
    'LineString': DEFAULT_LINE,
}

# Namespace for ids generated for entries that arrive without one
FEATURE_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, 'imdf-builder/feature')


class FeatureService:
    """Service for building IMDF documents from project data."""

    def generate_imdf_files(self, project_data: Optional[Dict[str, Any]],
                            generated_at: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Build every IMDF document for a project payload.

        Returns:
            Mapping of archive entry name to document, in archive order
        """
        project_data = project_data if isinstance(project_data, dict) else {}

        venue = self._entity(project_data.get('venue'))
        building = self._entity(project_data.get('building'))

        venue_id = self._feature_id(venue, 'venue', 0)
        building_id = self._feature_id(building, 'building', 0)

        files = {
            'venue.geojson': self._collection([self._venue_feature(venue, venue_id)]),
            'building.geojson': self._collection([self._building_feature(building, building_id)]),
            'level.geojson': self._collection([
                self._level_feature(level, self._feature_id(level, 'level', index), building_id)
                for index, level in enumerate(self._entities(project_data, 'levels'))
            ]),
            'unit.geojson': self._collection([
                self._unit_feature(unit, self._feature_id(unit, 'unit', index))
                for index, unit in enumerate(self._entities(project_data, 'units'))
            ]),
            'amenity.geojson': self._collection([
                self._amenity_feature(amenity, self._feature_id(amenity, 'amenity', index))
                for index, amenity in enumerate(self._entities(project_data, 'amenities'))
            ]),
            'fixture.geojson': self._collection([
                self._fixture_feature(fixture, self._feature_id(fixture, 'fixture', index))
                for index, fixture in enumerate(self._entities(project_data, 'fixtures'))
            ]),
            'opening.geojson': self._collection([
                self._opening_feature(opening, self._feature_id(opening, 'opening', index))
                for index, opening in enumerate(self._entities(project_data, 'openings'))
            ]),
            'anchor.geojson': self._collection([
                self._anchor_feature(anchor, self._feature_id(anchor, 'anchor', index))
                for index, anchor in enumerate(self._entities(project_data, 'anchors'))
            ]),
        }

        for filename in EMPTY_FEATURE_FILES:
            files[filename] = self._collection([])

        files[MANIFEST_FILE] = self.build_manifest(generated_at)
        return files

    def build_manifest(self, generated_at: Optional[datetime] = None) -> Dict[str, Any]:
        timestamp = to_iso(generated_at or utc_now())
        return {
            'version': settings.imdf_version,
            'language': settings.imdf_language,
            'created': timestamp,
            'updated': timestamp
        }

    # ------------------------------------------------------------------
    # Feature builders
    # ------------------------------------------------------------------

    def _venue_feature(self, venue: Dict[str, Any], feature_id: str) -> Dict[str, Any]:
        return self._feature(feature_id, 'venue', 'Point', self._coordinates(venue, DEFAULT_POINT), {
            'category': 'business',
            'restriction': 'restricted',
            'name': venue.get('name') or 'Venue',
            'alt_name': self._copy(venue.get('alt_name') or {})
        })

    def _building_feature(self, building: Dict[str, Any], feature_id: str) -> Dict[str, Any]:
        return self._feature(feature_id, 'building', 'Polygon', self._polygon(building), {
            'category': 'unspecified',
            'restriction': 'restricted',
            'name': building.get('name') or 'Building',
            'alt_name': self._copy(building.get('alt_name') or {})
        })

    def _level_feature(self, level: Dict[str, Any], feature_id: str,
                       building_id: str) -> Dict[str, Any]:
        ordinal = level.get('ordinal') or 0
        return self._feature(feature_id, 'level', 'Polygon', self._polygon(level), {
            'ordinal': ordinal,
            'category': 'unspecified',
            'restriction': 'restricted',
            'name': level.get('name') or f"Level {ordinal}",
            'short_name': level.get('short_name') or str(ordinal),
            'building': building_id
        })

    def _unit_feature(self, unit: Dict[str, Any], feature_id: str) -> Dict[str, Any]:
        coordinates = self._polygon(unit)
        display_point = unit.get('display_point')
        if display_point:
            display_point = self._copy(display_point)
        else:
            display_point = self._derive_display_point(coordinates)

        return self._feature(feature_id, 'unit', 'Polygon', coordinates, {
            'category': unit.get('category') or 'unspecified',
            'restriction': unit.get('restriction') or 'restricted',
            'accessibility': self._copy(unit.get('accessibility') or []),
            'name': unit.get('name') or 'Unit',
            'alt_name': self._copy(unit.get('alt_name') or {}),
            'display_point': display_point,
            'level': unit.get('levelId')
        })

    def _amenity_feature(self, amenity: Dict[str, Any], feature_id: str) -> Dict[str, Any]:
        return self._feature(feature_id, 'amenity', 'Point', self._coordinates(amenity, DEFAULT_POINT), {
            'category': amenity.get('category') or 'seating',
            'accessibility': self._copy(amenity.get('accessibility') or []),
            'name': amenity.get('name') or 'Amenity',
            'alt_name': self._copy(amenity.get('alt_name') or {}),
            'unit': amenity.get('unitId'),
            'level': amenity.get('levelId')
        })

    def _fixture_feature(self, fixture: Dict[str, Any], feature_id: str) -> Dict[str, Any]:
        geometry_type = fixture.get('geometryType')
        if geometry_type not in FIXTURE_GEOMETRY_TYPES:
            geometry_type = 'Point'
        coordinates = self._coordinates(fixture, FIXTURE_GEOMETRY_TYPES[geometry_type])

        return self._feature(feature_id, 'fixture', geometry_type, coordinates, {
            'category': fixture.get('category') or 'wall',
            'level': fixture.get('levelId')
        })

    def _opening_feature(self, opening: Dict[str, Any], feature_id: str) -> Dict[str, Any]:
        return self._feature(feature_id, 'opening', 'LineString', self._coordinates(opening, DEFAULT_LINE), {
            'category': opening.get('category') or 'door',
            'accessibility': self._copy(opening.get('accessibility') or []),
            'door': opening.get('door') or 'no',
            'level': opening.get('levelId')
        })

    def _anchor_feature(self, anchor: Dict[str, Any], feature_id: str) -> Dict[str, Any]:
        return self._feature(feature_id, 'anchor', 'Point', self._coordinates(anchor, DEFAULT_POINT), {
            'unit': anchor.get('unitId'),
            'address': self._copy(anchor.get('address') or {})
        })

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _collection(features: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {'type': 'FeatureCollection', 'features': features}

    @staticmethod
    def _feature(feature_id: str, feature_type: str, geometry_type: str,
                 coordinates: Any, properties: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'type': 'Feature',
            'id': feature_id,
            'feature_type': feature_type,
            'geometry': {
                'type': geometry_type,
                'coordinates': coordinates
            },
            'properties': properties
        }

    @staticmethod
    def _entity(value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    def _entities(self, project_data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        values = project_data.get(key) or []
        if not isinstance(values, list):
            return []
        return [self._entity(value) for value in values]

    @staticmethod
    def _copy(value: Any) -> Any:
        return copy.deepcopy(value)

    def _coordinates(self, entity: Dict[str, Any], default: Any) -> Any:
        return self._copy(entity.get('coordinates') or default)

    def _polygon(self, entity: Dict[str, Any]) -> Any:
        return close_rings(self._coordinates(entity, DEFAULT_POLYGON))

    @staticmethod
    def _derive_display_point(coordinates: Any) -> Dict[str, Any]:
        """Centroid of the outer ring, or the origin when the ring is unusable."""
        try:
            centroid = Polygon(coordinates[0]).centroid
            if not centroid.is_empty:
                return {'type': 'Point', 'coordinates': [centroid.x, centroid.y]}
        except (ShapelyError, ValueError, TypeError, IndexError, KeyError, AttributeError):
            pass
        return {'type': 'Point', 'coordinates': list(DEFAULT_POINT)}

    @staticmethod
    def _feature_id(entity: Dict[str, Any], feature_type: str, index: int) -> str:
        """Return the entity's id, or a deterministic UUID derived from its content."""
        if entity.get('id'):
            return entity['id']

        try:
            content = json.dumps(entity, sort_keys=True, default=str)
        except (TypeError, ValueError):
            content = repr(entity)
        return str(uuid.uuid5(FEATURE_ID_NAMESPACE, f"{feature_type}|{index}|{content}"))


# Global feature service instance
feature_service = FeatureService()


def generate_imdf_files(project_data: Optional[Dict[str, Any]],
                        generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Module-level shortcut for FeatureService.generate_imdf_files."""
    return feature_service.generate_imdf_files(project_data, generated_at)
