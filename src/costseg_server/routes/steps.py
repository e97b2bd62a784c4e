"""Step endpoints — get the current step, submit answers, read the transcript.

A step is either a ``question`` (one prompt awaiting an answer) or
``completed`` (the final response snapshot plus the recap text).
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from costseg_flow.models.session import StepResult, TranscriptEntry
from costseg_flow.service import ChatService

from costseg_server.dependencies import get_service, get_user_id

router = APIRouter(tags=["steps"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class SubmitAnswerRequest(BaseModel):
    """Body for POST /sessions/{session_id}/step.

    Numbers are accepted for convenience and stored as their string form.
    """
    value: str | int | float


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/sessions/{session_id}/step")
async def get_current_step(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> StepResult:
    """Return the current step for the session without changing it."""
    return await service.get_current_step(user_id=user_id, session_id=session_id)


@router.post("/sessions/{session_id}/step")
async def submit_answer(
    session_id: str,
    body: SubmitAnswerRequest,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> StepResult:
    """Submit an answer to the pending question and advance the session.

    Returns the next question, or the completion step after the last
    answer.  Invalid answers give 400 and leave the session unchanged;
    answering a completed session gives 409.
    """
    return await service.submit_answer(
        user_id=user_id,
        session_id=session_id,
        value=str(body.value),
    )


@router.get("/sessions/{session_id}/transcript")
async def get_transcript(
    session_id: str,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_service),
) -> list[TranscriptEntry]:
    """Return the chat transcript so far, oldest first."""
    return await service.get_transcript(user_id=user_id, session_id=session_id)
