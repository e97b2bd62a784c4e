"""FastAPI dependency injection — provides the service, builder, calculator, settings and user identity."""

from fastapi import Header, HTTPException, Request

from costseg_flow.allocation import AllocationCalculator
from costseg_flow.catalog import CatalogBuilder
from costseg_flow.service import ChatService

from costseg_server.config import ServerSettings


# ------------------------------------------------------------------
# Singletons stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_service(request: Request) -> ChatService:
    """Return the ChatService singleton from ``app.state``."""
    return request.app.state.service


def get_builder(request: Request) -> CatalogBuilder:
    """Return the CatalogBuilder singleton from ``app.state``."""
    return request.app.state.builder


def get_calculator(request: Request) -> AllocationCalculator:
    """Return the AllocationCalculator singleton from ``app.state``."""
    return request.app.state.calculator


# ------------------------------------------------------------------
# User identity from the X-User-ID header
# ------------------------------------------------------------------

async def get_user_id(
    x_user_id: str | None = Header(None, alias="X-User-ID"),
) -> str:
    """Extract user identity from the ``X-User-ID`` header.

    Returns 401 if the header is missing — every session endpoint
    requires a known caller.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header is required")
    return x_user_id


def get_settings(request: Request) -> ServerSettings:
    """Return the ServerSettings the app was created with."""
    return request.app.state.settings
