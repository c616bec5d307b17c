"""
Unit tests for floor-plan upload validation and storage.
"""

import asyncio
import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch
from imdf_builder.errors import InvalidInput, StorageFailure
from imdf_builder.services.file_service import FileService


def upload(filename: str, content_type: str) -> Mock:
    file = Mock()
    file.filename = filename
    file.content_type = content_type
    return file


class TestFileService(unittest.TestCase):
    def setUp(self):
        self.upload_dir = tempfile.mkdtemp()
        self.service = FileService(upload_dir=self.upload_dir)

    def tearDown(self):
        shutil.rmtree(self.upload_dir, ignore_errors=True)

    def test_allowed_types(self):
        for content_type in ("image/png", "image/jpeg", "image/jpg", "application/pdf"):
            self.service.validate_upload(content_type, 10)

    def test_rejects_other_types(self):
        for content_type in ("image/gif", "application/zip", "text/html", None):
            with self.assertRaises(InvalidInput):
                self.service.validate_upload(content_type, 10)

    def test_rejects_oversized_files(self):
        self.service.validate_upload("image/png", self.service.max_file_size)
        with self.assertRaises(InvalidInput):
            self.service.validate_upload("image/png", self.service.max_file_size + 1)

    def test_save_writes_file_under_generated_name(self):
        content = b"\x89PNG\r\n\x1a\nfake"
        filename, path, file_hash = asyncio.run(
            self.service.save_uploaded_file(upload("../../Plan.PNG", "image/png"), content)
        )
        self.assertTrue(filename.endswith(".png"))
        self.assertNotIn("Plan", filename)
        self.assertEqual(path, f"/uploads/{filename}")
        self.assertEqual(len(file_hash), 64)
        with open(os.path.join(self.upload_dir, filename), "rb") as f:
            self.assertEqual(f.read(), content)

    def test_save_rejects_invalid_upload_without_writing(self):
        with self.assertRaises(InvalidInput):
            asyncio.run(self.service.save_uploaded_file(upload("x.gif", "image/gif"), b"GIF89a"))
        self.assertEqual(os.listdir(self.upload_dir), [])

    @patch('imdf_builder.services.file_service.logging_service')
    def test_save_logs_duration(self, mock_logging):
        asyncio.run(self.service.save_uploaded_file(upload("plan.pdf", "application/pdf"), b"%PDF-1.4"))
        kwargs = mock_logging.log_file_operation.call_args.kwargs
        self.assertEqual(kwargs["file_size"], 8)
        self.assertIn("duration_ms", kwargs)
        self.assertNotIn("error", kwargs)

    @patch('imdf_builder.services.file_service.logging_service')
    def test_write_failure_raises_storage_failure(self, mock_logging):
        blocker = os.path.join(self.upload_dir, "not-a-directory")
        with open(blocker, "wb") as f:
            f.write(b"x")
        service = FileService(upload_dir=blocker)

        with self.assertRaises(StorageFailure):
            asyncio.run(service.save_uploaded_file(upload("plan.png", "image/png"), b"data"))

        kwargs = mock_logging.log_file_operation.call_args.kwargs
        self.assertIn("error", kwargs)
        self.assertNotIn("duration_ms", kwargs)


if __name__ == '__main__':
    unittest.main()
