"""
Drawing session state.

Holds the in-memory collections a drawing client edits: levels and the units,
amenities, fixtures, openings and anchors placed on them, the current level,
the selection, and the visual primitive behind each entity. Entities are
plain dicts of semantic fields; primitives live in ``handles`` keyed by
entity id, so the project payload never carries rendering objects.
"""

import copy
import uuid
from typing import Any, Dict, List, Optional, Tuple
import structlog

from .adapters import RectAdapter, CircleAdapter, LineAdapter
from .errors import InvalidInput, NotFound

logger = structlog.get_logger()

ENTITY_COLLECTIONS = ('units', 'amenities', 'fixtures', 'openings', 'anchors')

# Level-scoped collections, removed together with their level
LEVEL_COLLECTIONS = ('units', 'amenities', 'fixtures', 'openings')

# Payload keys recomputed from primitives on every save
GEOMETRY_KEYS = ('coordinates', 'display_point', 'geometryType')

FOOTPRINT_COORDINATES = [[[0, 0], [0, 0.001], [0.001, 0.001], [0.001, 0], [0, 0]]]

# Default primitive sizes in drawing-surface units
UNIT_SIZE = 100
MARKER_RADIUS = 15
FIXTURE_LENGTH = 50
OPENING_LENGTH = 30


def parse_coordinates(text: Optional[str]) -> List[float]:
    """Parse "x, y" into [x, y]; anything else yields [0, 0]."""
    if not isinstance(text, str):
        return [0, 0]

    parts = [part.strip() for part in text.split(',')]
    if len(parts) != 2:
        return [0, 0]
    try:
        return [float(parts[0]), float(parts[1])]
    except ValueError:
        return [0, 0]


class DrawingSession:
    """Editable state of one drawing, independent of any UI toolkit."""

    def __init__(self):
        self.rect_adapter = RectAdapter()
        self.circle_adapter = CircleAdapter()
        self.line_adapter = LineAdapter()
        self.reset()

    def reset(self):
        """Start a new, empty project."""
        self.project_id: Optional[str] = None
        self.project_name = ''
        self.building_name = ''
        self.venue_coordinates = [0, 0]
        self.venue_id = str(uuid.uuid4())
        self.building_id = str(uuid.uuid4())
        self.floorplan_image: Optional[str] = None

        self.levels: List[Dict[str, Any]] = []
        self.units: List[Dict[str, Any]] = []
        self.amenities: List[Dict[str, Any]] = []
        self.fixtures: List[Dict[str, Any]] = []
        self.openings: List[Dict[str, Any]] = []
        self.anchors: List[Dict[str, Any]] = []

        self.current_level: Optional[Dict[str, Any]] = None
        self.selected_id: Optional[str] = None
        self.handles: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Levels
    # ------------------------------------------------------------------

    def add_level(self, name: Optional[str] = None, ordinal: Optional[int] = None) -> Dict[str, Any]:
        """Add a level and make it current."""
        if ordinal is None:
            ordinal = len(self.levels)
        level = {
            'id': str(uuid.uuid4()),
            'name': name or f"Level {len(self.levels)}",
            'ordinal': ordinal,
            'short_name': str(ordinal)
        }
        self.levels.append(level)
        self.current_level = level
        logger.info("Level added", level_id=level['id'], ordinal=ordinal)
        return level

    def select_level(self, level_id: str) -> Dict[str, Any]:
        level = self._find_level(level_id)
        if level is None:
            raise NotFound(f"Level {level_id} not found")
        self.current_level = level
        return level

    def remove_level(self, level_id: str) -> List[str]:
        """
        Remove a level and every entity placed on it.

        Returns:
            Ids of the removed entities
        """
        if self._find_level(level_id) is None:
            raise NotFound(f"Level {level_id} not found")

        self.levels = [level for level in self.levels if level['id'] != level_id]

        removed = []
        for collection in LEVEL_COLLECTIONS:
            kept = []
            for entity in getattr(self, collection):
                if entity.get('levelId') == level_id:
                    removed.append(entity['id'])
                else:
                    kept.append(entity)
            setattr(self, collection, kept)

        self._release_unit_references(set(removed))
        for entity_id in removed:
            self.handles.pop(entity_id, None)
        if self.selected_id in removed:
            self.selected_id = None
        if self.current_level and self.current_level['id'] == level_id:
            self.current_level = None

        logger.info("Level removed", level_id=level_id, removed_entities=len(removed))
        return removed

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place_unit(self, pointer: Dict[str, float]) -> Dict[str, Any]:
        level = self._require_level()
        unit = {
            'id': str(uuid.uuid4()),
            'name': f"Unit {len(self.units) + 1}",
            'category': 'room',
            'restriction': 'restricted',
            'levelId': level['id']
        }
        primitive = {
            'type': 'rect',
            'left': pointer['x'],
            'top': pointer['y'],
            'width': UNIT_SIZE,
            'height': UNIT_SIZE,
            'scaleX': 1,
            'scaleY': 1
        }
        return self._add(self.units, unit, primitive)

    def place_amenity(self, pointer: Dict[str, float]) -> Dict[str, Any]:
        level = self._require_level()
        amenity = {
            'id': str(uuid.uuid4()),
            'name': f"Amenity {len(self.amenities) + 1}",
            'category': 'seating',
            'levelId': level['id']
        }
        return self._add(self.amenities, amenity, self._marker(pointer))

    def place_fixture(self, pointer: Dict[str, float]) -> Dict[str, Any]:
        level = self._require_level()
        fixture = {
            'id': str(uuid.uuid4()),
            'category': 'wall',
            'levelId': level['id']
        }
        return self._add(self.fixtures, fixture, self._line(pointer, FIXTURE_LENGTH))

    def place_opening(self, pointer: Dict[str, float]) -> Dict[str, Any]:
        level = self._require_level()
        opening = {
            'id': str(uuid.uuid4()),
            'category': 'door',
            'levelId': level['id']
        }
        return self._add(self.openings, opening, self._line(pointer, OPENING_LENGTH))

    def place_anchor(self, pointer: Dict[str, float], unit_id: Optional[str] = None,
                     address: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self._require_level()
        if unit_id is not None and self._find_in(self.units, unit_id) is None:
            raise NotFound(f"Unit {unit_id} not found")
        anchor = {
            'id': str(uuid.uuid4()),
            'unitId': unit_id,
            'address': address or {}
        }
        return self._add(self.anchors, anchor, self._marker(pointer))

    def update_primitive(self, entity_id: str, **changes) -> Dict[str, Any]:
        """Apply a placement change reported by the drawing surface (move, resize)."""
        if self.find_entity(entity_id) is None:
            raise NotFound(f"Entity {entity_id} not found")
        primitive = self.handles.setdefault(entity_id, {})
        primitive.update(changes)
        return primitive

    # ------------------------------------------------------------------
    # Selection and editing
    # ------------------------------------------------------------------

    def select(self, entity_id: str) -> Dict[str, Any]:
        found = self.find_entity(entity_id)
        if found is None:
            raise NotFound(f"Entity {entity_id} not found")
        self.selected_id = entity_id
        return found[1]

    def clear_selection(self):
        self.selected_id = None

    def update_selected_properties(self, name: Optional[str] = None,
                                   category: Optional[str] = None) -> Dict[str, Any]:
        """Edit name/category of the selected entity; fields it lacks are left alone."""
        entity = self._require_selection()
        if name is not None and 'name' in entity:
            entity['name'] = name
        if category is not None and 'category' in entity:
            entity['category'] = category
        return entity

    def delete_selected(self) -> str:
        entity = self._require_selection()
        entity_id = entity['id']

        for collection in ENTITY_COLLECTIONS:
            setattr(self, collection, [
                item for item in getattr(self, collection) if item['id'] != entity_id
            ])
        self._release_unit_references({entity_id})
        self.handles.pop(entity_id, None)
        self.selected_id = None
        return entity_id

    def find_entity(self, entity_id: str) -> Optional[Tuple[str, Dict[str, Any]]]:
        """Return (collection name, entity) for a placed entity, or None."""
        for collection in ENTITY_COLLECTIONS:
            entity = self._find_in(getattr(self, collection), entity_id)
            if entity is not None:
                return collection, entity
        return None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_project_data(self) -> Dict[str, Any]:
        """Build the project payload, normalizing every primitive to IMDF geometry."""
        rect = self.rect_adapter
        circle = self.circle_adapter
        line = self.line_adapter
        name = self.project_name or 'Untitled Project'

        return {
            'projectName': name,
            'venue': {
                'id': self.venue_id,
                'name': name,
                'coordinates': list(self.venue_coordinates)
            },
            'building': {
                'id': self.building_id,
                'name': self.building_name or 'Building',
                'coordinates': copy.deepcopy(FOOTPRINT_COORDINATES)
            },
            'levels': [
                dict(level, coordinates=copy.deepcopy(FOOTPRINT_COORDINATES))
                for level in self.levels
            ],
            'units': [
                dict(unit,
                     coordinates=rect.normalize(self.handles.get(unit['id'])),
                     display_point=rect.display_point(self.handles.get(unit['id'])))
                for unit in self.units
            ],
            'amenities': [
                dict(amenity, coordinates=circle.normalize(self.handles.get(amenity['id'])))
                for amenity in self.amenities
            ],
            'fixtures': [
                dict(fixture, geometryType='LineString',
                     coordinates=line.normalize(self.handles.get(fixture['id'])))
                for fixture in self.fixtures
            ],
            'openings': [
                dict(opening, coordinates=line.normalize(self.handles.get(opening['id'])))
                for opening in self.openings
            ],
            'anchors': [
                dict(anchor, coordinates=circle.normalize(self.handles.get(anchor['id'])))
                for anchor in self.anchors
            ],
            'floorplanImage': self.floorplan_image
        }

    def load(self, record: Dict[str, Any]):
        """Replace the session state with a stored project record."""
        self.reset()
        data = record.get('data') or {}

        self.project_id = record.get('id')
        self.project_name = record.get('name') or ''
        self.floorplan_image = data.get('floorplanImage')

        venue = data.get('venue') or {}
        self.venue_id = venue.get('id') or self.venue_id
        if isinstance(venue.get('coordinates'), list) and len(venue['coordinates']) == 2:
            self.venue_coordinates = list(venue['coordinates'])

        building = data.get('building') or {}
        self.building_id = building.get('id') or self.building_id
        self.building_name = building.get('name') or ''

        self.levels = [
            self._strip_geometry(level) for level in data.get('levels') or []
            if isinstance(level, dict) and level.get('id')
        ]
        level_ids = {level['id'] for level in self.levels}

        adapters = {
            'units': self.rect_adapter,
            'amenities': self.circle_adapter,
            'fixtures': self.line_adapter,
            'openings': self.line_adapter,
            'anchors': self.circle_adapter
        }
        skipped = 0
        for collection, adapter in adapters.items():
            for stored in data.get(collection) or []:
                if not isinstance(stored, dict) or not stored.get('id'):
                    skipped += 1
                    continue
                if collection in LEVEL_COLLECTIONS and stored.get('levelId') not in level_ids:
                    skipped += 1
                    continue

                entity = self._strip_geometry(stored)
                getattr(self, collection).append(entity)
                primitive = adapter.to_primitive(stored.get('coordinates'))
                if primitive is not None:
                    self.handles[entity['id']] = primitive

        unit_ids = [unit['id'] for unit in self.units]
        for entity in self.amenities + self.anchors:
            if entity.get('unitId') is not None and entity.get('unitId') not in unit_ids:
                entity['unitId'] = None

        if self.levels:
            self.current_level = self.levels[0]

        logger.info(
            "Project loaded into session",
            project_id=self.project_id,
            levels=len(self.levels),
            units=len(self.units),
            skipped_entities=skipped
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _add(self, collection: List[Dict[str, Any]], entity: Dict[str, Any],
             primitive: Dict[str, Any]) -> Dict[str, Any]:
        collection.append(entity)
        self.handles[entity['id']] = primitive
        return entity

    def _release_unit_references(self, unit_ids) -> None:
        """Clear unitId on amenities and anchors that point at any of unit_ids."""
        if not unit_ids:
            return
        for entity in self.amenities + self.anchors:
            if entity.get('unitId') in unit_ids:
                entity['unitId'] = None

    def _require_level(self) -> Dict[str, Any]:
        if self.current_level is None:
            raise InvalidInput("Please add and select a level first")
        return self.current_level

    def _require_selection(self) -> Dict[str, Any]:
        found = self.find_entity(self.selected_id) if self.selected_id else None
        if found is None:
            raise InvalidInput("No object selected")
        return found[1]

    def _find_level(self, level_id: str) -> Optional[Dict[str, Any]]:
        return self._find_in(self.levels, level_id)

    @staticmethod
    def _find_in(collection: List[Dict[str, Any]], entity_id: str) -> Optional[Dict[str, Any]]:
        for entity in collection:
            if entity.get('id') == entity_id:
                return entity
        return None

    @staticmethod
    def _strip_geometry(stored: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in stored.items() if key not in GEOMETRY_KEYS}

    @staticmethod
    def _marker(pointer: Dict[str, float]) -> Dict[str, Any]:
        return {'type': 'circle', 'left': pointer['x'], 'top': pointer['y'], 'radius': MARKER_RADIUS}

    @staticmethod
    def _line(pointer: Dict[str, float], length: float) -> Dict[str, Any]:
        return {
            'type': 'line',
            'x1': pointer['x'],
            'y1': pointer['y'],
            'x2': pointer['x'] + length,
            'y2': pointer['y']
        }
