"""
Project service: whole-record persistence of drawing projects.

A project is stored as one row keyed by its identifier. Identifiers are
validated against a restricted character class and length bound before they
are used to address storage; nothing reaches the database otherwise.
"""

import re
import time
import uuid
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from ..config import settings
from ..errors import InvalidIdentifier, NotFound, StorageFailure
from ..models.database_models import Project
from ..timestamps import utc_now, to_iso
from .logging_service import logging_service

logger = structlog.get_logger()

PROJECT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")


def validate_project_id(project_id: Any) -> str:
    """Return the identifier unchanged, or raise InvalidIdentifier."""
    if not isinstance(project_id, str) or not PROJECT_ID_PATTERN.fullmatch(project_id):
        raise InvalidIdentifier("Invalid project ID format")
    if len(project_id) > settings.project_id_max_length:
        raise InvalidIdentifier("Invalid project ID length")
    return project_id


class ProjectService:
    """Service for saving, loading and listing projects."""

    def save_project(self, db: Session, project_id: Optional[str],
                     name: Optional[str], data: Dict[str, Any]) -> str:
        """
        Create or overwrite a project record.

        Returns:
            The identifier the record was stored under
        """
        project_id = validate_project_id(project_id) if project_id else str(uuid.uuid4())
        start_time = time.time()

        try:
            now = utc_now()
            project = db.get(Project, project_id)
            if project:
                project.name = name
                project.data = data
                project.updated_at = now
                operation = "update"
            else:
                project = Project(
                    id=project_id,
                    name=name,
                    data=data,
                    created_at=now,
                    updated_at=now
                )
                db.add(project)
                operation = "insert"
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logging_service.log_database_operation(
                operation="save", table=Project.__tablename__,
                record_id=project_id, error=str(e)
            )
            raise StorageFailure(str(e)) from e

        logging_service.log_database_operation(
            operation=operation, table=Project.__tablename__, record_id=project_id,
            duration_ms=int((time.time() - start_time) * 1000)
        )
        logger.info("Project saved", project_id=project_id, operation=operation)
        return project_id

    def load_project(self, db: Session, project_id: str) -> Dict[str, Any]:
        """Return the full project record {id, name, createdAt, updatedAt, data}."""
        project_id = validate_project_id(project_id)

        try:
            project = db.get(Project, project_id)
        except SQLAlchemyError as e:
            logging_service.log_database_operation(
                operation="load", table=Project.__tablename__,
                record_id=project_id, error=str(e)
            )
            raise StorageFailure(str(e)) from e

        if project is None:
            raise NotFound("Project not found")

        return {
            'id': project.id,
            'name': project.name,
            'createdAt': to_iso(project.created_at),
            'updatedAt': to_iso(project.updated_at),
            'data': project.data
        }

    def list_projects(self, db: Session) -> List[Dict[str, Any]]:
        """Return project summaries, most recently updated first; payloads are not loaded."""
        try:
            rows = db.query(
                Project.id, Project.name, Project.created_at, Project.updated_at
            ).order_by(Project.updated_at.desc()).all()
        except SQLAlchemyError as e:
            logging_service.log_database_operation(
                operation="list", table=Project.__tablename__, error=str(e)
            )
            raise StorageFailure(str(e)) from e

        return [
            {
                'id': row.id,
                'name': row.name,
                'createdAt': to_iso(row.created_at),
                'updatedAt': to_iso(row.updated_at)
            }
            for row in rows
        ]


# Global project service instance
project_service = ProjectService()
