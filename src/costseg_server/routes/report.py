"""Report endpoints — cost allocation for completed sessions and the preliminary estimate."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from costseg_flow.models.allocation import AllocationReport, PreliminaryAnalysis
from costseg_flow.service import ChatService

from costseg_server.dependencies import get_service, get_user_id

router = APIRouter(tags=["report"])


@router.get("/sessions/{session_id}/report")
async def get_report(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> AllocationReport:
    """Return the allocation report.  400 while the dialogue is still running."""
    return await service.get_report(user_id=user_id, session_id=session_id)


@router.get("/sessions/{session_id}/report/text", response_class=PlainTextResponse)
async def get_report_text(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> str:
    """Return the allocation report rendered as plain text."""
    return await service.get_report_text(user_id=user_id, session_id=session_id)


@router.get("/sessions/{session_id}/preliminary")
async def get_preliminary(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> PreliminaryAnalysis:
    """Return the estimate computed from the property details alone."""
    return await service.get_preliminary(user_id=user_id, session_id=session_id)
