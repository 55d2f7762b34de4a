"""Vendor Onboarding API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.base import session_scope
from app.schemas.common import HealthResponse
from app.services.dispatch import wait_for_dispatch
from app.services.monitor import MonitorScheduler, UnresponsiveVendorMonitor
from app.services.templates import TemplateService

# v1 routers
from app.routers.v1.follow_ups import router as follow_ups_v1_router
from app.routers.v1.notifications import router as notifications_v1_router
from app.routers.v1.templates import router as templates_v1_router
from app.routers.v1.validation import router as validation_v1_router
from app.routers.v1.vendor_portal import router as vendor_portal_v1_router
from app.routers.v1.vendors import router as vendors_v1_router

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.seed_default_templates:
        async with session_scope() as session:
            await TemplateService(session).seed_defaults()

    scheduler = None
    if settings.unresponsive_scheduler_enabled:
        scheduler = MonitorScheduler(UnresponsiveVendorMonitor())
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()
    await wait_for_dispatch(timeout=30)
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(vendors_v1_router, prefix="/api/v1")
    app.include_router(validation_v1_router, prefix="/api/v1")
    app.include_router(follow_ups_v1_router, prefix="/api/v1")
    app.include_router(templates_v1_router, prefix="/api/v1")
    app.include_router(vendor_portal_v1_router, prefix="/api/v1")
    app.include_router(notifications_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        scheduler = getattr(app.state, "scheduler", None)
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            version=app.version,
            scheduler_running=scheduler is not None and scheduler.is_running,
        )

    return app


app = create_app()
