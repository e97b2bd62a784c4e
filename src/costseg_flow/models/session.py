"""Session and step models — the contract between the engine and its callers.

These models define what the engine returns at each step of the dialogue and
what the chat service exposes about a session.  Runtime ``Question`` objects
are never handed out directly: the engine flattens them into a
``QuestionPayload`` that carries only what a UI needs to render the prompt.

Step types:
  - QuestionStep: show one question and wait for the answer
  - CompletionStep: the dialogue is finished; carries the response snapshot

The ``StepResult`` union covers both cases so callers can dispatch on ``type``.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class QuestionPayload(BaseModel):
    """Flattened question for adapters and API consumers."""

    id: str
    text: str
    question_type: str
    # Selectable strings for single_select / confirmation
    options: list[str] | None = None
    allows_zero: bool = False
    phase: str


class QuestionStep(BaseModel):
    """Engine step: present a question and wait for the answer."""

    type: Literal["question"] = "question"
    # 0-based cursor into the catalog and the catalog length
    position: int
    total: int
    phase: str
    phase_name: str
    question: QuestionPayload


class CompletionStep(BaseModel):
    """Engine step: the dialogue finished.

    ``responses`` is the final response store snapshot; ``recap`` is the
    human-readable summary that was appended to the transcript.
    """

    type: Literal["completed"] = "completed"
    responses: dict[str, str]
    recap: str
    completed_at: datetime


# Callers can match on step.type to dispatch rendering logic.
StepResult = QuestionStep | CompletionStep


class TranscriptEntry(BaseModel):
    """One line of the chat transcript.  Append-only, never read by the engine."""

    speaker: Literal["engine", "user"]
    text: str
    produced_at: datetime
    question_id: str | None = None


class PropertyDetails(BaseModel):
    """Property data entered before the dialogue starts.

    ``property_type`` is the category that parameterises the question
    catalog and the allocation table.  Numeric-looking fields stay strings,
    matching how the dialogue keeps raw answers.
    """

    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    purchase_price: str = Field(min_length=1)
    purchase_date: str = Field(min_length=1)
    property_type: str = Field(min_length=1)
    square_footage: str = Field(min_length=1)
    year_built: str = Field(min_length=1)
    # Optional details
    land_value: Optional[str] = None
    building_value: Optional[str] = None
    bedrooms: Optional[str] = None
    bathrooms: Optional[str] = None
    lot_size: Optional[str] = None
    description: Optional[str] = None


class SessionInfo(BaseModel):
    """Public view of a dialogue session for API consumers."""

    user_id: str
    session_id: str
    category: str
    flavor: str
    status: str
    position: int
    total: int
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
