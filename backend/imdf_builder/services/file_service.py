"""
File service for floor-plan uploads.
"""

import os
import hashlib
import time
import uuid
from typing import Optional, Tuple
from fastapi import UploadFile
import aiofiles
from ..config import settings
from ..errors import InvalidInput, StorageFailure
from .logging_service import logging_service

UPLOAD_URL_PREFIX = "/uploads"

class FileService:
    """Service for storing uploaded floor plans."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = upload_dir or settings.upload_dir
        self.allowed_types = set(settings.allowed_upload_types)
        self.max_file_size = settings.max_file_size

    def validate_upload(self, content_type: Optional[str], size: int):
        """Reject files outside the type allowlist or above the size ceiling."""
        if content_type not in self.allowed_types:
            raise InvalidInput("Invalid file type. Only PNG, JPEG, and PDF are allowed.")
        if size > self.max_file_size:
            raise InvalidInput(
                f"File too large. Maximum size is {self.max_file_size // (1024 * 1024)}MB."
            )

    async def save_uploaded_file(self, file: UploadFile, content: bytes) -> Tuple[str, str, str]:
        """
        Validate and save an uploaded file.

        Returns:
            Tuple of (stored filename, public path, file hash)
        """
        self.validate_upload(file.content_type, len(content))

        # Generate file hash
        file_hash = hashlib.sha256(content).hexdigest()

        # Generate unique filename; the client's name is never used as a path
        file_extension = os.path.splitext(file.filename or "")[1].lower()
        if not file_extension[1:].isalnum():
            file_extension = ""
        unique_filename = f"{uuid.uuid4()}{file_extension}"
        file_path = os.path.join(self.upload_dir, unique_filename)

        start_time = time.time()
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            logging_service.log_file_operation(
                operation="save_upload",
                file_path=file_path,
                file_size=len(content),
                error=str(e)
            )
            raise StorageFailure(f"Could not store upload: {e}") from e

        logging_service.log_file_operation(
            operation="save_upload",
            file_path=file_path,
            file_size=len(content),
            duration_ms=int((time.time() - start_time) * 1000)
        )

        return unique_filename, f"{UPLOAD_URL_PREFIX}/{unique_filename}", file_hash
