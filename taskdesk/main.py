"""
FastAPI application entry point.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pathlib import Path
import logging

from .config import settings
from .api import tasks_router, users_router
from .database import init_db
from .exceptions import TaskDeskError
from .services.attachment_uploader import LocalAttachmentUploader
from .services.identity_provider import Auth0IdentityProvider

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Disable verbose SQLAlchemy logging
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)
logging.getLogger('sqlalchemy.dialects').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Task tracking and user administration API with Auth0 authentication",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Collaborators shared by all requests, injected through dependencies
app.state.identity_provider = Auth0IdentityProvider.from_settings(settings)
app.state.uploader = LocalAttachmentUploader(
    upload_dir=settings.UPLOAD_DIR,
    base_url=settings.FILES_BASE_URL,
    max_file_size=settings.MAX_UPLOAD_SIZE,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskDeskError)
async def taskdesk_error_handler(request: Request, exc: TaskDeskError):
    """Map service-layer errors to ``{"detail": ...}`` responses."""
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Include routers
app.include_router(tasks_router)
app.include_router(users_router)

# Mount static files directory for serving uploaded files
# This allows /files/... URLs to be served directly
files_dir = Path(settings.UPLOAD_DIR)
files_dir.mkdir(parents=True, exist_ok=True)

app.mount("/files", StaticFiles(directory=str(files_dir)), name="files")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "TaskDesk API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.APP_ENV
    }


@app.on_event("startup")
async def startup_event():
    """Create missing tables on development databases."""
    init_db()
    logger.info("✅ Application startup complete")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskdesk.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG
    )
