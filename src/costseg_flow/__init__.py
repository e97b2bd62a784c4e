"""costseg_flow — Guided cost segregation dialogue SDK.

Public API:
    CatalogStore         — loads the YAML question catalog into typed templates
    CatalogBuilder       — builds the ordered question catalog for a category/flavor
    build_catalog        — shortcut using the packaged catalog
    FlowEngine           — sequences questions, applies skips, stores answers
    ResponseStore        — field -> answer mapping filled by the engine
    AllocationCalculator — cost allocation report, plus a preliminary estimate from property details
    ChatService          — async multi-session adapter with validation and reveal delay
    RenderManager        — Jinja2 renderer for the recap and text report

Step models:
    QuestionStep   — step: present one question
    CompletionStep — step: dialogue finished with the response snapshot
    StepResult     — union of the two
"""

from costseg_flow.allocation import AllocationCalculator
from costseg_flow.catalog import CatalogBuilder, CatalogStore, build_catalog
from costseg_flow.engine import FlowEngine, FlowSequenceError, FlowState
from costseg_flow.models.allocation import AllocationReport, PreliminaryAnalysis
from costseg_flow.models.question import Question
from costseg_flow.models.session import (
    CompletionStep,
    PropertyDetails,
    QuestionPayload,
    QuestionStep,
    SessionInfo,
    StepResult,
    TranscriptEntry,
)
from costseg_flow.render import RenderManager
from costseg_flow.service import ChatService
from costseg_flow.store import ResponseStore
from costseg_flow.validation import AnswerValidationError, validate_answer

__all__ = [
    # Catalog, engine & store
    "CatalogBuilder",
    "CatalogStore",
    "build_catalog",
    "FlowEngine",
    "FlowSequenceError",
    "FlowState",
    "ResponseStore",
    "Question",
    # Adapters
    "ChatService",
    "RenderManager",
    "AnswerValidationError",
    "validate_answer",
    # Allocation
    "AllocationCalculator",
    "AllocationReport",
    "PreliminaryAnalysis",
    # Session / step
    "CompletionStep",
    "PropertyDetails",
    "QuestionPayload",
    "QuestionStep",
    "SessionInfo",
    "StepResult",
    "TranscriptEntry",
]
