"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the catalog and allocation tables once
  - CORS middleware
  - Global exception handlers (SDK ValueError → 404/409/400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``costseg-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from costseg_flow.allocation import AllocationCalculator, load_tables
from costseg_flow.catalog import CatalogBuilder, CatalogStore
from costseg_flow.render import RenderManager
from costseg_flow.service import ChatService

from costseg_server.config import ServerSettings, load_settings
from costseg_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from costseg_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup.

    Startup:
      1. Load the question catalog YAML into a ``CatalogStore``
      2. Load the allocation tables
      3. Build ``CatalogBuilder``, ``AllocationCalculator`` and ``ChatService``
         and stash them on ``app.state`` for dependency injection

    Sessions live in memory, so shutdown only logs how many are dropped.
    """
    settings: ServerSettings = app.state.settings

    # --- Load data files ---
    store = CatalogStore(catalog_path=settings.catalog_path)
    store.load()
    tables = load_tables(settings.allocation_path)
    logger.info("Catalog and allocation tables loaded successfully")

    # --- Build service ---
    builder = CatalogBuilder(store)
    calculator = AllocationCalculator(tables)
    service = ChatService(
        builder,
        calculator,
        renderer=RenderManager(),
        reveal_delay=settings.reveal_delay_ms / 1000,
    )

    app.state.builder = builder
    app.state.calculator = calculator
    app.state.service = service

    yield

    # --- Shutdown ---
    logger.info("Shutting down, %d in-memory session(s) discarded", service.session_count)


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Cost Segregation Dialogue API",
        description="REST API for the guided cost segregation questionnaire",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler can read them
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — verifies the data files were loaded."""
        if getattr(app.state, "service", None) is None:
            return {"status": "error", "detail": "service not initialised"}
        return {"status": "ok"}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn costseg_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``costseg-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "costseg_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
