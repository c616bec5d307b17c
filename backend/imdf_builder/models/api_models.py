"""
Pydantic models for API request/response serialization.

Field names follow the browser client's camelCase JSON.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime

class UploadResponse(BaseModel):
    success: bool = True
    filename: str
    path: str
    mimetype: str

class SaveProjectRequest(BaseModel):
    projectId: Optional[str] = Field(default=None, description="Existing project id; omit to create a new project")
    projectName: Optional[str] = Field(default="Untitled Project", description="Display name of the project")
    projectData: Dict[str, Any] = Field(default_factory=dict, description="Opaque project payload")

class SaveProjectResponse(BaseModel):
    success: bool = True
    projectId: str

class ProjectSummary(BaseModel):
    id: str
    name: Optional[str] = None
    createdAt: str
    updatedAt: str

class ProjectRecord(ProjectSummary):
    data: Dict[str, Any]

class GenerateIMDFRequest(BaseModel):
    projectData: Dict[str, Any] = Field(default_factory=dict, description="Project payload to export")

class HealthResponse(BaseModel):
    status: str
    service: str

class ErrorResponse(BaseModel):
    detail: str
    error_code: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
