"""
Unit tests for IMDF archive packaging.
"""

import io
import json
import unittest
import zipfile
from unittest.mock import Mock
from imdf_builder.errors import SerializationFailure
from imdf_builder.services.export_service import ExportService
from imdf_builder.services.feature_service import IMDF_FILES


def open_archive(archive_bytes: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(archive_bytes))


class TestExportService(unittest.TestCase):
    def setUp(self):
        self.service = ExportService()

    def test_empty_project_has_all_entries(self):
        with open_archive(self.service.package({})) as archive:
            self.assertEqual(archive.namelist(), IMDF_FILES)
            self.assertEqual(len(archive.namelist()), 17)

    def test_entry_names_do_not_depend_on_content(self):
        populated = {
            "levels": [{"id": "L1"}],
            "units": [{"id": "U1", "levelId": "L1"}, {"id": "U2", "levelId": "L1"}],
            "openings": [{"id": "O1", "levelId": "L1"}]
        }
        with open_archive(self.service.package(populated)) as archive:
            self.assertEqual(archive.namelist(), IMDF_FILES)

    def test_entries_are_indented_json(self):
        archive_bytes = self.service.package({
            "units": [{"id": "U1", "name": "Café", "levelId": "L1"}]
        })
        with open_archive(archive_bytes) as archive:
            raw = archive.read('unit.geojson').decode('utf-8')
            self.assertIn('\n  "type": "FeatureCollection"', raw)
            self.assertIn('Café', raw)
            units = json.loads(raw)
            self.assertEqual(units['features'][0]['id'], 'U1')

            manifest = json.loads(archive.read('manifest.json'))
            self.assertEqual(manifest['version'], '1.0.0')
            self.assertEqual(archive.getinfo('unit.geojson').compress_type, zipfile.ZIP_DEFLATED)

    def test_non_finite_coordinates_abort_export(self):
        with self.assertRaises(SerializationFailure):
            self.service.package({"amenities": [{"id": "A1", "coordinates": [float('nan'), 0]}]})

    def test_unserializable_document_aborts_export(self):
        feature_service = Mock()
        feature_service.generate_imdf_files.return_value = {
            'venue.geojson': {'type': 'FeatureCollection', 'features': []},
            'building.geojson': {'bad': object()}
        }
        service = ExportService(feature_service=feature_service)
        with self.assertRaises(SerializationFailure) as ctx:
            service.package({})
        self.assertIn('building.geojson', ctx.exception.message)

    def test_serialize_document(self):
        self.assertEqual(
            ExportService.serialize_document('x.json', {'a': [1, 2]}),
            b'{\n  "a": [\n    1,\n    2\n  ]\n}'
        )


if __name__ == '__main__':
    unittest.main()
