"""
IMDF Builder - FastAPI Backend Application
Main application entry point with all API endpoints.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, UploadFile, File, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
import time
import traceback
import uuid
from typing import List, Optional

from .config import settings
from .database.connection import get_db, create_tables
from .errors import IMDFBuilderError, InvalidInput, SerializationFailure
from .models.api_models import (
    UploadResponse, SaveProjectRequest, SaveProjectResponse,
    ProjectSummary, ProjectRecord, GenerateIMDFRequest,
    HealthResponse, ErrorResponse,
)
from .services.export_service import export_service, ARCHIVE_FILENAME, ARCHIVE_CONTENT_TYPE
from .services.file_service import FileService, UPLOAD_URL_PREFIX
from .services.logging_service import logging_service
from .services.project_service import project_service

logger = logging_service.logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info("IMDF Builder started", environment=settings.environment)
    yield


# Create FastAPI app
app = FastAPI(
    title="IMDF Builder",
    description="Draw indoor-map features over floor plans and export IMDF archives",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded floor plans are served back to the drawing client
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")

# Initialize services
file_service = FileService()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start_time = time.time()

    logging_service.log_api_request(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None
    )

    response = await call_next(request)

    logging_service.log_api_response(
        request_id=request_id,
        status_code=response.status_code,
        duration_ms=int((time.time() - start_time) * 1000),
        response_size=int(response.headers["content-length"]) if "content-length" in response.headers else None
    )
    return response


@app.exception_handler(IMDFBuilderError)
async def imdf_builder_error_handler(request: Request, exc: IMDFBuilderError):
    """Render every service error as an ErrorResponse carrying its kind."""
    request_logger = logging_service.get_logger_with_context(
        request_id=getattr(request.state, "request_id", None)
    )
    request_logger.warning(
        "Request failed",
        error_code=exc.kind,
        error=exc.message
    )
    body = ErrorResponse(detail=exc.message, error_code=exc.kind)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Render malformed request bodies as invalid_input errors."""
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    logging_service.get_logger_with_context(
        request_id=getattr(request.state, "request_id", None)
    ).warning("Request validation failed", error=detail)
    body = ErrorResponse(detail=detail or "Invalid request", error_code=InvalidInput.kind)
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for container monitoring."""
    return HealthResponse(status="healthy", service="imdf-builder")


@app.post("/api/upload", response_model=UploadResponse)
async def upload_floorplan(floorplan: Optional[UploadFile] = File(None)):
    """Upload a floor-plan image or PDF."""
    if floorplan is None:
        raise InvalidInput("No file uploaded")

    # Reject by declared type and size before buffering the body
    file_service.validate_upload(floorplan.content_type, floorplan.size or 0)

    logger.info(
        "Floor plan upload started",
        filename=floorplan.filename,
        content_type=floorplan.content_type
    )

    content = await floorplan.read()
    filename, path, file_hash = await file_service.save_uploaded_file(floorplan, content)

    logger.info(
        "Floor plan upload completed",
        stored_filename=filename,
        file_size=len(content),
        file_hash=file_hash
    )

    return UploadResponse(
        filename=filename,
        path=path,
        mimetype=floorplan.content_type
    )


@app.post("/api/projects/save", response_model=SaveProjectResponse)
async def save_project(
    save_request: SaveProjectRequest,
    db: Session = Depends(get_db)
):
    """Create or overwrite a project."""
    project_id = project_service.save_project(
        db,
        save_request.projectId,
        save_request.projectName,
        save_request.projectData
    )
    return SaveProjectResponse(projectId=project_id)


@app.get("/api/projects", response_model=List[ProjectSummary])
async def list_projects(db: Session = Depends(get_db)):
    """List saved projects without their payloads."""
    return project_service.list_projects(db)


@app.get("/api/projects/{project_id}", response_model=ProjectRecord)
async def load_project(project_id: str, db: Session = Depends(get_db)):
    """Load a full project record."""
    return project_service.load_project(db, project_id)


@app.post("/api/generate-imdf")
async def generate_imdf(export_request: GenerateIMDFRequest):
    """Generate the IMDF archive for a project payload and return it as a download."""
    try:
        archive = export_service.package(export_request.projectData)
    except IMDFBuilderError:
        raise
    except Exception as e:
        logger.error(
            "IMDF export failed",
            error=str(e),
            traceback=traceback.format_exc()
        )
        raise SerializationFailure(f"IMDF export failed: {e}") from e

    return Response(
        content=archive,
        media_type=ARCHIVE_CONTENT_TYPE,
        headers={"Content-Disposition": f"attachment; filename={ARCHIVE_FILENAME}"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
