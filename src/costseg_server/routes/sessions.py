"""Session management endpoints — create, get, list, delete, restart sessions.

All endpoints require the ``X-User-ID`` header for user identification.
Session identity is the (user_id, session_id) pair.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from costseg_flow.models.session import PropertyDetails, SessionInfo, StepResult
from costseg_flow.service import ChatService

from costseg_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, ServerSettings
from costseg_server.dependencies import get_service, get_settings, get_user_id

router = APIRouter(tags=["sessions"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateSessionRequest(BaseModel):
    """Body for POST /sessions."""
    session_id: str
    property: PropertyDetails
    # None → server default flavor
    flavor: str | None = None
    # Pins the question wording for this session
    seed: int | None = None


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions", status_code=201)
async def create_session(
    body: CreateSessionRequest,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
    settings: ServerSettings = Depends(get_settings),
) -> SessionInfo:
    """Create a new dialogue session for a property.

    Returns 201 on success.  Raises 409 if a session with the same
    (user_id, session_id) already exists.
    """
    return await service.create_session(
        user_id=user_id,
        session_id=body.session_id,
        property=body.property,
        flavor=body.flavor or settings.default_flavor,
        seed=body.seed,
    )


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> SessionInfo:
    """Get session info by session_id.

    Raises 404 if the session does not exist for this user.
    """
    info = await service.get_session(user_id=user_id, session_id=session_id)
    if info is None:
        raise ValueError(f"Session not found: session_id={session_id}")
    return info


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> None:
    """Delete a session and its answers.  Returns 404 if it does not exist."""
    await service.delete_session(user_id=user_id, session_id=session_id)


@router.get("/sessions")
async def list_sessions(
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[SessionInfo]:
    """List sessions for the current user, most recent first."""
    return await service.list_sessions(user_id=user_id, limit=limit, offset=offset)


@router.post("/sessions/{session_id}/restart")
async def restart_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> StepResult:
    """Discard all answers and return to the greeting."""
    return await service.restart_session(user_id=user_id, session_id=session_id)
