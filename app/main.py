"""
Vita - FastAPI Application Entry Point

Emergency-resource coordination API: a directory of hospitals, ambulances,
blood banks and oxygen suppliers, plus community help requests.

DESIGN PRINCIPLES:
- Travel times degrade to a straight-line estimate, never to an error
- Client input errors name the offending field
- Community reports can flag a resource; only an admin clears the flag
"""

import logging
import traceback
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.errors import APIError
from app.core.settings import settings
from app.config.firebase import initialize_firestore
from app.routes import admin, alerts, health, requests, resources, stats, volunteer


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Emergency resource directory with live travel-time ranking",
    debug=settings.DEBUG
)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    """Render client-facing errors as {"error": ..., "details"?: ...}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.error}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}\n"
        f"{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )
    content = {"error": "Internal server error", "details": str(exc)}
    if not settings.is_production:
        content["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Catch Pydantic validation errors and log them."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: Firestore connection
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    try:
        initialize_firestore()
    except Exception as e:
        logger.warning(f"Firestore initialization failed: {e}")
        logger.warning("The app will start but database operations may fail.")

    if not settings.GOOGLE_MAPS_API_KEY:
        logger.warning("GOOGLE_MAPS_API_KEY not set; travel times will be straight-line estimates")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(resources.router)
app.include_router(requests.router)
app.include_router(stats.router)
app.include_router(alerts.router)
app.include_router(volunteer.router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "resources": "/resources?type={type}&lat={lat}&lng={lng}"
    }
