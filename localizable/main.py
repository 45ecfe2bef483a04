# localizable/main.py
"""
Main application file for Localizable.

On startup the localizations table is created when missing (``init_db``);
schema changes after that are applied with Alembic.
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from localizable import __version__
from localizable.api.api import api_router
from localizable.core.config import settings
from localizable.core.exceptions import LocalizableException, StorageException, ValidationException
from localizable.db.session import init_db

# --- Logging Configuration ---
LOG_LEVEL = getattr(logging, settings.LOG_LEVEL, logging.INFO)

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("localizable")
logger.setLevel(LOG_LEVEL)
# --- END: Logging Configuration ---

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Per-entity, per-locale field localization API",
    version=__version__,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
)


# --- Error Handlers ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error_details = jsonable_encoder(exc.errors())
    logger.error(f"Request validation error on {request.method} {request.url.path}: {error_details}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": error_details},
    )


@app.exception_handler(LocalizableException)
async def localizable_exception_handler(request: Request, exc: LocalizableException):
    if isinstance(exc, ValidationException):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, StorageException):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.error(f"Unhandled {exc.__class__.__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# Create the localizations table on startup; Alembic manages upgrades
@app.on_event("startup")
async def create_schema_on_startup():
    """Create missing tables so a fresh database is usable without migrations."""
    logger.info("Initializing database schema...")
    if not init_db():
        logger.error("Database schema initialization failed; storage calls will return 503")


# Log requests
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = datetime.now()
    logger.info(f"-> Request: {request.method} {request.url.path}")
    response = await call_next(request)
    process_time = (datetime.now() - start_time).total_seconds()
    logger.info(f"<- Response: {response.status_code} ({process_time:.4f}s)")
    return response


# Include the API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", tags=["Health"], summary="API Health Check")
def health_check():
    """Returns the operational status of the API."""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}
