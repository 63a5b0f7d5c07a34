"""
FastAPI application factory for the date/time visibility control.

Creates and configures the FastAPI app, the in-memory field store,
the optional portal system and the routes.

Run with:
    uvicorn datetime_control.api.app:app --reload
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datetime_control.api.routes import configure_routes, router
from datetime_control.core.store import InMemoryFieldStore, StaticPortalSystem, parse_portal_map
from datetime_control.core.utils import get_reference_timezone, is_truthy

# Load environment variables from .env
load_dotenv()

# Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    application = FastAPI(
        title="Date/Time Visibility Control",
        description="Date and datetime field rules for block visibility",
        version="1.0.0",
    )

    allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    timezone_name = os.getenv("DATETIME_CONTROL_TIMEZONE", "UTC")
    timezone = get_reference_timezone(timezone_name)

    # Diagnostics stay silent unless explicitly enabled
    diagnostics_logger = None
    if is_truthy(os.getenv("DATETIME_CONTROL_DEBUG"), default=False):
        diagnostics_logger = logging.getLogger("datetime_control.diagnostics")
        diagnostics_logger.setLevel(logging.DEBUG)
        logger.info("Diagnostic logging enabled")

    portal_system = None
    if is_truthy(os.getenv("PORTAL_SYSTEM_ENABLED"), default=False):
        try:
            portal_map = parse_portal_map(os.getenv("PORTAL_MAP"))
        except ValueError as e:
            logger.warning("Ignoring invalid PORTAL_MAP: %s", e)
            portal_map = {}
        portal_system = StaticPortalSystem(os.getenv("PORTAL_CURRENT_ID") or None, portal_map)
        logger.info("Portal system enabled")

    field_store = InMemoryFieldStore()
    configure_routes(field_store, portal_system, timezone, diagnostics_logger)
    application.include_router(router, prefix="/api")

    @application.on_event("startup")
    async def on_startup():
        logger.info("Date/time visibility control starting up")
        logger.info("Reference timezone: %s", timezone_name)

    return application


# Create the app instance (used by uvicorn)
app = create_app()
