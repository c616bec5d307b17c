"""
Export service for packaging IMDF documents into a zip archive.
"""

import io
import json
import zipfile
from typing import Any, Dict, Optional
import structlog

from ..errors import SerializationFailure
from .feature_service import FeatureService, feature_service as default_feature_service

logger = structlog.get_logger()

ARCHIVE_FILENAME = "imdf-export.zip"
ARCHIVE_CONTENT_TYPE = "application/zip"


class ExportService:
    """Service that turns project data into a downloadable IMDF archive."""

    def __init__(self, feature_service: Optional[FeatureService] = None):
        self.feature_service = feature_service or default_feature_service

    def package(self, project_data: Optional[Dict[str, Any]]) -> bytes:
        """
        Build the IMDF archive for a project payload.

        Every document is serialized before the archive is opened, so a
        serialization failure never leaves a partial archive behind.

        Returns:
            Zip archive bytes
        """
        imdf_files = self.feature_service.generate_imdf_files(project_data)

        serialized = {
            filename: self.serialize_document(filename, document)
            for filename, document in imdf_files.items()
        }

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
            for filename, content in serialized.items():
                archive.writestr(filename, content)

        archive_bytes = buffer.getvalue()
        logger.info(
            "IMDF archive created",
            entries=len(serialized),
            archive_size=len(archive_bytes)
        )
        return archive_bytes

    @staticmethod
    def serialize_document(filename: str, document: Any) -> bytes:
        """Render one document as indented UTF-8 JSON."""
        try:
            return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False).encode('utf-8')
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialize IMDF document", filename=filename, error=str(e))
            raise SerializationFailure(f"Could not serialize {filename}: {e}") from e


# Global export service instance
export_service = ExportService()
