"""FlowEngine — drives one guided dialogue over a question catalog.

The engine owns a cursor into the catalog, a :class:`ResponseStore`, and an
append-only transcript.  It is synchronous and single-session: callers
(the chat service, the terminal simulator, tests) feed it one raw answer at
a time and render whatever step it returns.

Lifecycle::

    engine = FlowEngine()
    step = engine.start(build_catalog("commercial", "tax_only"))
    while step.type == "question":
        step = engine.submit(read_answer(step.question))
    step.responses   # the completed response store snapshot

Skip conditions are evaluated lazily while scanning forward from the
current question, against whatever has been answered so far.  They are
never re-evaluated for questions already passed.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from costseg_flow.constants import PHASE_NAMES
from costseg_flow.models.question import Question
from costseg_flow.models.session import (
    CompletionStep,
    QuestionPayload,
    QuestionStep,
    StepResult,
    TranscriptEntry,
)
from costseg_flow.render import RenderManager
from costseg_flow.store import ResponseStore

logger = logging.getLogger(__name__)


class FlowState(str, enum.Enum):
    """Lifecycle states of a flow engine.

    Transitions:
        idle -> awaiting_answer       (start)
        awaiting_answer -> completed  (submit reaches the end of the catalog)
        any -> awaiting_answer        (start again, full reset)
    """

    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    COMPLETED = "completed"


class FlowSequenceError(ValueError):
    """``submit`` was called with no pending question (before start / after completion)."""


def validate_catalog(catalog: Sequence[Question]) -> None:
    """Check the structural invariants every catalog must satisfy.

    Raises:
        ValueError: empty catalog, first question not a confirmation, last
            question not a summary/terminal marker, or duplicate ids.
    """
    if not catalog:
        raise ValueError("Catalog is empty")
    if catalog[0].question_type != "confirmation":
        raise ValueError(
            f"Catalog must open with a confirmation question, got "
            f"'{catalog[0].question_type}' ({catalog[0].id})"
        )
    if not catalog[-1].is_completion:
        raise ValueError(
            f"Catalog must end with a summary or terminal question, got "
            f"'{catalog[-1].question_type}' ({catalog[-1].id})"
        )
    seen: set[str] = set()
    for q in catalog:
        if q.id in seen:
            raise ValueError(f"Duplicate question id in catalog: {q.id}")
        seen.add(q.id)


class FlowEngine:
    """Sequences questions, applies skip conditions, and accumulates answers.

    Args:
        renderer: renders the completion recap; a default
            :class:`RenderManager` is created when omitted.
        on_complete: optional callback receiving the final response snapshot,
            invoked exactly once per completed run.
        clock: returns the current time for transcript timestamps.
    """

    def __init__(
        self,
        renderer: RenderManager | None = None,
        *,
        on_complete: Callable[[dict[str, str]], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._renderer = renderer or RenderManager()
        self._on_complete = on_complete
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._catalog: tuple[Question, ...] = ()
        self._store = ResponseStore()
        self._transcript: list[TranscriptEntry] = []
        self._cursor = 0
        self._state = FlowState.IDLE
        self._result: CompletionStep | None = None

    # ==================================================================
    # Read accessors
    # ==================================================================

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def catalog(self) -> tuple[Question, ...]:
        return self._catalog

    @property
    def transcript(self) -> list[TranscriptEntry]:
        """Copy of the transcript so far."""
        return list(self._transcript)

    @property
    def result(self) -> CompletionStep | None:
        """The completion step, once the dialogue has finished."""
        return self._result

    @property
    def current_question(self) -> Question | None:
        """The question awaiting an answer, or None when nothing is pending."""
        if self._state is not FlowState.AWAITING_ANSWER:
            return None
        return self._catalog[self._cursor]

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the response store."""
        return self._store.snapshot()

    def current_step(self) -> StepResult:
        """Re-derive the current step without changing any state."""
        if self._state is FlowState.COMPLETED:
            return self._result
        if self._state is FlowState.IDLE:
            raise FlowSequenceError("Flow has not been started")
        return self._build_question_step(self._cursor)

    # ==================================================================
    # Operations
    # ==================================================================

    def start(self, catalog: Sequence[Question]) -> QuestionStep:
        """Reset all state and present the first question of ``catalog``."""
        catalog = tuple(catalog)
        validate_catalog(catalog)

        self._catalog = catalog
        self._store.clear()
        self._transcript = []
        self._cursor = 0
        self._result = None
        self._state = FlowState.AWAITING_ANSWER
        logger.info("Flow started with %d questions", len(catalog))
        return self._present(0)

    def submit(self, raw_answer: str) -> StepResult:
        """Record the answer to the pending question and advance.

        The answer is kept verbatim; option membership and format checks are
        the caller's job.

        Raises:
            FlowSequenceError: if no question is pending.
        """
        if self._state is not FlowState.AWAITING_ANSWER:
            raise FlowSequenceError(
                f"Flow is not accepting answers (state={self._state.value})"
            )

        question = self._catalog[self._cursor]
        self._append("user", raw_answer, question.id)
        if question.target_field:
            self._store.set(question.target_field, raw_answer)

        next_index = self._next_eligible(self._cursor + 1)
        if next_index >= len(self._catalog):
            self._cursor = len(self._catalog)
            return self._complete(None)

        self._cursor = next_index
        next_q = self._catalog[next_index]
        if next_q.is_completion:
            return self._complete(next_q)
        return self._present(next_index)

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _next_eligible(self, start: int) -> int:
        """Scan forward from ``start`` to the first question that should be shown.

        Returns ``len(catalog)`` when every remaining question is skipped.
        """
        responses = self._store.snapshot()
        index = start
        while index < len(self._catalog):
            candidate = self._catalog[index]
            if candidate.skip_condition is None or candidate.skip_condition(responses):
                return index
            logger.debug("Skipping question %s: condition not met", candidate.id)
            index += 1
        return index

    def _present(self, index: int) -> QuestionStep:
        question = self._catalog[index]
        self._append("engine", question.text, question.id)
        return self._build_question_step(index)

    def _build_question_step(self, index: int) -> QuestionStep:
        question = self._catalog[index]
        return QuestionStep(
            position=index,
            total=len(self._catalog),
            phase=question.phase,
            phase_name=PHASE_NAMES.get(question.phase, question.phase),
            question=QuestionPayload(
                id=question.id,
                text=question.text,
                question_type=question.question_type,
                options=list(question.options) or None,
                allows_zero=question.allows_zero,
                phase=question.phase,
            ),
        )

    def _complete(self, marker: Question | None) -> CompletionStep:
        """Finish the dialogue: append the recap, notify, and return the result."""
        responses = self._store.snapshot()
        recap = self._renderer.render_recap(
            self._catalog,
            responses,
            heading=marker.text if marker is not None else None,
        )
        self._append("engine", recap, None)
        self._state = FlowState.COMPLETED
        self._result = CompletionStep(
            responses=responses,
            recap=recap,
            completed_at=self._clock(),
        )
        logger.info("Flow completed with %d answered fields", len(responses))
        if self._on_complete is not None:
            self._on_complete(dict(responses))
        return self._result

    def _append(self, speaker: str, text: str, question_id: str | None) -> None:
        self._transcript.append(TranscriptEntry(
            speaker=speaker,
            text=text,
            produced_at=self._clock(),
            question_id=question_id,
        ))
