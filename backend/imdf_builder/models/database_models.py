"""
SQLAlchemy database models for the IMDF Builder.
"""

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class Project(Base):
    __tablename__ = "projects"

    # Assigned by the project service, validated before any query
    id = Column(String(50), primary_key=True)
    name = Column(String(255))
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, index=True)
