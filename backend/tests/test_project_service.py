"""
Unit tests for project persistence against an in-memory SQLite database.
"""

import unittest
from unittest.mock import Mock
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from imdf_builder.database.connection import build_engine, create_tables
from imdf_builder.errors import InvalidIdentifier, NotFound, StorageFailure
from imdf_builder.services.project_service import ProjectService, validate_project_id


class TestValidateProjectId(unittest.TestCase):
    def test_accepts_uuid_and_alphanumerics(self):
        for project_id in ("3f2b8c1e-9a7d-4c2e-8f1a-0b9c8d7e6f5a", "abc", "A-1", "a" * 50):
            self.assertEqual(validate_project_id(project_id), project_id)

    def test_rejects_bad_characters(self):
        for project_id in ("../etc/passwd", "a b", "a_b", "a.json", "", "id\n", "ünicode"):
            with self.assertRaises(InvalidIdentifier):
                validate_project_id(project_id)

    def test_rejects_overlong_ids(self):
        with self.assertRaises(InvalidIdentifier):
            validate_project_id("a" * 51)

    def test_rejects_non_strings(self):
        with self.assertRaises(InvalidIdentifier):
            validate_project_id(123)


class TestProjectService(unittest.TestCase):
    def setUp(self):
        self.engine = build_engine("sqlite://")
        create_tables(bind=self.engine)
        self.db = sessionmaker(bind=self.engine)()
        self.service = ProjectService()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_save_then_load_round_trip(self):
        data = {"levels": [{"id": "L1", "name": "Ground", "ordinal": 0}], "floorplanImage": "/uploads/x.png"}
        project_id = self.service.save_project(self.db, "project-1", "Office", data)
        self.assertEqual(project_id, "project-1")

        record = self.service.load_project(self.db, "project-1")
        self.assertEqual(record['id'], "project-1")
        self.assertEqual(record['name'], "Office")
        self.assertEqual(record['data'], data)
        self.assertTrue(record['createdAt'].endswith('Z'))
        self.assertEqual(record['createdAt'], record['updatedAt'])

    def test_save_without_id_generates_distinct_ids(self):
        first = self.service.save_project(self.db, None, "One", {})
        second = self.service.save_project(self.db, None, "Two", {})
        self.assertNotEqual(first, second)
        validate_project_id(first)
        self.assertEqual(len(self.service.list_projects(self.db)), 2)

    def test_overwrite_preserves_created_at(self):
        project_id = self.service.save_project(self.db, None, "Draft", {"units": []})
        original = self.service.load_project(self.db, project_id)

        self.service.save_project(self.db, project_id, "Final", {"units": [{"id": "U1"}]})
        updated = self.service.load_project(self.db, project_id)

        self.assertEqual(updated['id'], project_id)
        self.assertEqual(updated['name'], "Final")
        self.assertEqual(updated['data'], {"units": [{"id": "U1"}]})
        self.assertEqual(updated['createdAt'], original['createdAt'])
        self.assertGreaterEqual(updated['updatedAt'], original['updatedAt'])
        self.assertEqual(len(self.service.list_projects(self.db)), 1)

    def test_load_missing_project(self):
        with self.assertRaises(NotFound):
            self.service.load_project(self.db, "does-not-exist")

    def test_list_returns_summaries_only(self):
        self.service.save_project(self.db, "p1", "First", {"big": list(range(100))})
        summaries = self.service.list_projects(self.db)
        self.assertEqual(len(summaries), 1)
        self.assertEqual(set(summaries[0].keys()), {'id', 'name', 'createdAt', 'updatedAt'})
        self.assertEqual(summaries[0]['name'], "First")

    def test_list_empty_store(self):
        self.assertEqual(self.service.list_projects(self.db), [])

    def test_invalid_id_never_touches_storage(self):
        db = Mock()
        with self.assertRaises(InvalidIdentifier):
            self.service.save_project(db, "../../secrets", "x", {})
        with self.assertRaises(InvalidIdentifier):
            self.service.load_project(db, "a" * 51)
        db.get.assert_not_called()
        db.add.assert_not_called()
        db.commit.assert_not_called()
        db.query.assert_not_called()

    def test_storage_errors_surface_as_storage_failure(self):
        db = Mock()
        db.get.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
        with self.assertRaises(StorageFailure):
            self.service.save_project(db, "p1", "x", {})
        db.rollback.assert_called_once()

        with self.assertRaises(StorageFailure):
            self.service.load_project(db, "p1")


if __name__ == '__main__':
    unittest.main()
