"""Question models for the guided tax / takeoffs dialogue.

Two layers live here:

  Runtime:
    - Question: the immutable descriptor the flow engine walks.  One class
      covers every type; ``question_type`` decides how the engine and the
      presentation adapter treat it.

  Catalog data (parsed from ``data/catalog.yaml``):
    - Predicate: a declarative show-if condition over a prior answer
    - QuestionTemplate: a question before wording/options are fixed for a
      category (variants keyed by category, option maps, branch predicates)
    - CatalogData: the whole YAML document

Question types:

  Shown to the user:
    - free_text:     open-ended text input
    - numeric:       amount input (``allows_zero`` controls whether 0 is valid)
    - date:          MM/DD/YYYY date input
    - single_select: pick one of ``options``
    - confirmation:  pick one of ``options``; never writes to the store

  Completion markers (never shown as a prompt awaiting input):
    - summary:  completion with a recap of collected answers
    - terminal: completion without further prompting
"""

from __future__ import annotations

from typing import Any, Callable, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

QuestionType = Literal[
    "free_text", "numeric", "date", "single_select", "confirmation", "summary", "terminal",
]

# A skip condition is a plain predicate over the response store snapshot.
SkipCondition = Callable[[Mapping[str, str]], bool]


# --- Runtime question ---

class Question(BaseModel):
    """Immutable question descriptor.

    ``skip_condition`` is evaluated by the engine at traversal time: when it
    returns False the question is skipped.  Questions without one are always
    presented.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    text: str
    question_type: QuestionType
    target_field: Optional[str] = None
    options: List[str] = []
    allows_zero: bool = False
    skip_condition: Optional[SkipCondition] = Field(default=None, exclude=True)
    phase: str = "tax"
    # Recap caption; falls back to the id
    label: Optional[str] = None
    # Recap formatting only
    display: Literal["text", "currency"] = "text"

    @model_validator(mode="after")
    def _chk(self):
        if self.question_type in ("single_select", "confirmation") and not self.options:
            raise ValueError(f"{self.question_type} question '{self.id}' needs options")
        if self.question_type in ("confirmation", "summary", "terminal") and self.target_field:
            raise ValueError(
                f"{self.question_type} question '{self.id}' cannot have a target_field"
            )
        return self

    @property
    def caption(self) -> str:
        return self.label or self.id

    @property
    def is_completion(self) -> bool:
        """True for summary/terminal markers that end the dialogue."""
        return self.question_type in ("summary", "terminal")


# --- Catalog data models ---

class Predicate(BaseModel):
    """A single show-if condition that references a prior answer.

    Operators:
      - eq, ne: equality / inequality against the raw string
      - lt, le, gt, ge: numeric comparisons
      - between: value is [min, max] inclusive
      - contains, not_contains: substring membership
      - contains_any: any of the listed substrings
      - matches: regex search
      - present: field answered with a non-blank value (``value`` ignored)
    """

    field: str
    op: Literal[
        "eq", "ne", "contains", "not_contains", "contains_any", "matches",
        "lt", "le", "gt", "ge", "between", "present",
    ]
    value: Any = None


# Variants / options can be a flat list or a map keyed by category.
CategoryText = List[str] | dict[str, List[str]]


class QuestionTemplate(BaseModel):
    """A catalog entry before category-specific wording is chosen.

    ``categories`` restricts the template to those categories (supplemental
    questions); None means every category.  ``show_if`` predicates are AND-ed
    into the question's skip condition.
    """

    id: str
    question_type: QuestionType
    variants: CategoryText
    field: Optional[str] = None
    label: Optional[str] = None
    options: Optional[CategoryText] = None
    allows_zero: bool = False
    display: Literal["text", "currency"] = "text"
    categories: Optional[List[str]] = None
    show_if: Optional[List[Predicate]] = None

    @model_validator(mode="after")
    def _chk(self):
        if isinstance(self.variants, list) and not self.variants:
            raise ValueError(f"template '{self.id}' has no wording variants")
        if isinstance(self.variants, dict) and not any(self.variants.values()):
            raise ValueError(f"template '{self.id}' has no wording variants")
        return self


class CompletionTemplates(BaseModel):
    """Completion markers, one per catalog flavor."""

    tax_only: QuestionTemplate
    combined: QuestionTemplate


class CatalogData(BaseModel):
    """Top-level shape of ``data/catalog.yaml``."""

    greeting: QuestionTemplate
    tax: List[QuestionTemplate]
    transition: QuestionTemplate
    takeoffs: List[QuestionTemplate]
    completion: CompletionTemplates
