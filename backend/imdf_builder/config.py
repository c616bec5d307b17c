"""
Configuration settings for the IMDF Builder backend.
"""

from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./imdf_builder.db"

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # File Storage
    upload_dir: str = "uploads"
    max_file_size: int = 50 * 1024 * 1024  # 50MB
    allowed_upload_types: List[str] = [
        "image/png",
        "image/jpeg",
        "image/jpg",
        "application/pdf",
    ]

    # Projects
    project_id_max_length: int = 50

    # IMDF manifest
    imdf_version: str = "1.0.0"
    imdf_language: str = "en"

    class Config:
        env_file = ".env"
        case_sensitive = False

# Global settings instance
settings = Settings()

# Ensure directories exist
os.makedirs(settings.upload_dir, exist_ok=True)
