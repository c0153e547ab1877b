"""
FastAPI application factory and main app configuration.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from presx.api.deps import get_intake_registry
from presx.api.routers import consultations, dashboard, health, patients, prescriptions, uploads
from presx.core.config import get_settings
from presx.core.logging_config import configure_logging, get_logger
from presx.domain.errors import DomainError

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    configure_logging(settings.logging)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.app_env}, debug: {settings.debug}")
    # Initialize database connection (MongoDB + Beanie)
    try:
        from beanie import init_beanie
        from motor.motor_asyncio import AsyncIOMotorClient

        from presx.adapters.db.mongo.models.dashboard_m import (
            DashboardStatsMongo,
            RecentActivityMongo,
        )
        from presx.adapters.db.mongo.models.patient_m import PatientMongo
        from presx.adapters.db.mongo.models.prescription_m import PrescriptionMongo

        client = AsyncIOMotorClient(settings.database.uri)
        db = client[settings.database.db_name]
        await init_beanie(
            database=db,
            document_models=[
                PatientMongo,
                PrescriptionMongo,
                RecentActivityMongo,
                DashboardStatsMongo,
            ],
        )
        logger.info("MongoDB/Beanie initialized")
    except Exception as exc:
        logger.warning(f"Skipping MongoDB init (reason: {exc})", exc_info=True)

    yield

    # Shutdown: force-stop recordings of consultations still open
    await get_intake_registry().close_all()
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PresX",
        description="Prescription and patient management for small clinics",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(patients.router)
    app.include_router(prescriptions.router)
    app.include_router(dashboard.router)
    app.include_router(consultations.router)
    app.include_router(uploads.router)

    # Global exception handler for domain errors
    @app.exception_handler(DomainError)
    async def domain_error_handler(request, exc: DomainError):
        return JSONResponse(
            status_code=400,
            content={
                "error": exc.error_code or "DOMAIN_ERROR",
                "message": exc.message,
                "details": exc.details,
            },
        )

    # Global exception handler for validation errors
    @app.exception_handler(ValueError)
    async def validation_error_handler(request, exc: ValueError):
        return JSONResponse(
            status_code=422,
            content={"error": "VALIDATION_ERROR", "message": str(exc), "details": {}},
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "status": "running",
            "docs": "/docs" if settings.debug else "disabled",
            "endpoints": {
                "health": "/health",
                "patients": "/patients/",
                "prescriptions": "/prescriptions/recent",
                "dashboard": "/dashboard/",
                "open_consultation": "POST /consultations/",
                "upload_audio": "POST /uploads/audio",
            },
        }

    return app


# Create the app instance
app = create_app()
