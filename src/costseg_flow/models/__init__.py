"""Public model re-exports for costseg_flow.

Consumers should import from ``costseg_flow.models`` rather than
reaching into sub-modules directly.
"""

# --- Questions / catalog ---
from costseg_flow.models.question import (
    CatalogData,
    CompletionTemplates,
    Predicate,
    Question,
    QuestionTemplate,
    QuestionType,
    SkipCondition,
)

# --- Session / step ---
from costseg_flow.models.session import (
    CompletionStep,
    PropertyDetails,
    QuestionPayload,
    QuestionStep,
    SessionInfo,
    StepResult,
    TranscriptEntry,
)

# --- Allocation ---
from costseg_flow.models.allocation import (
    Adjustment,
    AllocationBucket,
    AllocationReport,
    AllocationSummary,
    AllocationTables,
    CategoryAllocation,
    CostAllocation,
    PreliminaryAnalysis,
    PreliminaryRules,
    PreliminarySplit,
    TakeoffsBreakdown,
    TaxInformation,
)

__all__ = [
    # Questions
    "CatalogData",
    "CompletionTemplates",
    "Predicate",
    "Question",
    "QuestionTemplate",
    "QuestionType",
    "SkipCondition",
    # Session
    "CompletionStep",
    "PropertyDetails",
    "QuestionPayload",
    "QuestionStep",
    "SessionInfo",
    "StepResult",
    "TranscriptEntry",
    # Allocation
    "Adjustment",
    "AllocationBucket",
    "AllocationReport",
    "AllocationSummary",
    "AllocationTables",
    "CategoryAllocation",
    "CostAllocation",
    "PreliminaryAnalysis",
    "PreliminaryRules",
    "PreliminarySplit",
    "TakeoffsBreakdown",
    "TaxInformation",
]
