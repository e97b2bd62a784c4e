"""ChatService — the presentation adapter between callers and flow engines.

Wraps one :class:`FlowEngine` per session and adds what a chat front end
needs on top of the engine's correctness contract:

  1. **Sessions** — create / get / list / delete / restart, namespaced by
     user, held in an in-memory :class:`SessionRegistry`.
  2. **Answer validation** — blank input, bad amounts, bad dates, and
     off-list choices are rejected before the engine sees them.
  3. **Reveal delay** — after the engine has processed an answer, the
     service waits ``reveal_delay`` seconds before handing back the next
     engine message (the "assistant is typing" pause).
  4. **Reports** — completed sessions are fed to the
     :class:`AllocationCalculator`; the preliminary estimate only needs the
     property details captured at creation.

Usage::

    service = ChatService(CatalogBuilder(store), AllocationCalculator())
    info = await service.create_session(
        user_id="u1", session_id="s1", property=details, flavor="tax_only",
    )
    step = await service.get_current_step(user_id="u1", session_id="s1")
    step = await service.submit_answer(user_id="u1", session_id="s1",
                                       value="Yes, let's begin")
    # ... until step.type == "completed"
    report = await service.get_report(user_id="u1", session_id="s1")
"""

from __future__ import annotations

import asyncio
import logging

from costseg_flow.allocation import AllocationCalculator
from costseg_flow.catalog import CatalogBuilder, normalize_category
from costseg_flow.constants import DEFAULT_FLAVOR
from costseg_flow.engine import FlowEngine, FlowState
from costseg_flow.models.allocation import AllocationReport, PreliminaryAnalysis
from costseg_flow.models.session import (
    PropertyDetails,
    SessionInfo,
    StepResult,
    TranscriptEntry,
)
from costseg_flow.registry import SessionRecord, SessionRegistry, SessionStatus
from costseg_flow.render import RenderManager
from costseg_flow.validation import validate_answer

logger = logging.getLogger(__name__)


class ChatService:
    """Runs guided dialogues for many independent sessions.

    Args:
        builder: catalog builder used for new and restarted sessions
        calculator: allocation calculator for finished sessions
        renderer: shared renderer for recaps and text reports
        reveal_delay: seconds to wait before returning the next engine message
    """

    def __init__(
        self,
        builder: CatalogBuilder,
        calculator: AllocationCalculator,
        *,
        renderer: RenderManager | None = None,
        reveal_delay: float = 0.0,
    ) -> None:
        self._builder = builder
        self._calculator = calculator
        self._renderer = renderer or RenderManager()
        self._reveal_delay = reveal_delay
        self._registry = SessionRegistry()

    @property
    def session_count(self) -> int:
        return len(self._registry)

    # ==================================================================
    # Session lifecycle
    # ==================================================================

    async def create_session(
        self,
        *,
        user_id: str,
        session_id: str,
        property: PropertyDetails,
        flavor: str = DEFAULT_FLAVOR,
        seed: int | None = None,
    ) -> SessionInfo:
        """Create a session and start its dialogue at the greeting.

        Raises:
            ValueError: duplicate (user_id, session_id) or unknown flavor.
        """
        if self._registry.get(user_id, session_id) is not None:
            raise ValueError(
                f"Session already exists: user_id={user_id}, session_id={session_id}"
            )
        category = normalize_category(property.property_type)
        catalog = self._builder.build(category, flavor, seed=seed)

        record = SessionRecord(
            user_id=user_id,
            session_id=session_id,
            category=category,
            flavor=flavor,
            engine=FlowEngine(self._renderer),
            property=property,
            seed=seed,
        )
        record.engine.start(catalog)
        self._registry.add(record)
        logger.info(
            "Session created: user_id=%s session_id=%s category=%s flavor=%s",
            user_id, session_id, category, flavor,
        )
        return record.to_info()

    async def get_session(self, *, user_id: str, session_id: str) -> SessionInfo | None:
        """Fetch session info.  Returns None if not found."""
        record = self._registry.get(user_id, session_id)
        if record is None:
            return None
        return record.to_info()

    async def list_sessions(
        self, *, user_id: str, limit: int = 20, offset: int = 0,
    ) -> list[SessionInfo]:
        """List sessions for a user, most recent first."""
        return [
            r.to_info()
            for r in self._registry.list_by_user(user_id, limit=limit, offset=offset)
        ]

    async def delete_session(self, *, user_id: str, session_id: str) -> None:
        """Forget a session.

        Raises:
            ValueError: if the session does not exist.
        """
        if self._registry.remove(user_id, session_id) is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        logger.info("Session deleted: user_id=%s session_id=%s", user_id, session_id)

    async def restart_session(self, *, user_id: str, session_id: str) -> StepResult:
        """Start the dialogue over with a freshly built catalog.

        All previous answers and the transcript are discarded.  The wording
        is rebuilt, so it may differ from the first run unless the session
        was created with a seed.
        """
        record = self._load(user_id, session_id)
        catalog = self._builder.build(record.category, record.flavor, seed=record.seed)
        step = record.engine.start(catalog)
        record.status = SessionStatus.IN_PROGRESS
        record.completed_at = None
        record.touch()
        logger.info("Session restarted: user_id=%s session_id=%s", user_id, session_id)
        return step

    # ==================================================================
    # Step API
    # ==================================================================

    async def get_current_step(self, *, user_id: str, session_id: str) -> StepResult:
        """Return the pending question, or the completion result.  Read-only."""
        record = self._load(user_id, session_id)
        return record.engine.current_step()

    async def submit_answer(
        self, *, user_id: str, session_id: str, value: str,
    ) -> StepResult:
        """Validate and submit an answer, then reveal the next engine message.

        Raises:
            ValueError: session not found, session not accepting answers,
                or the answer fails validation.
        """
        record = self._load(user_id, session_id)
        question = record.engine.current_question
        if question is None:
            raise ValueError(
                f"Session is not accepting answers: session_id={session_id} "
                f"(status={record.status.value})"
            )

        try:
            answer = validate_answer(question, value)
        except ValueError as exc:
            logger.warning("Rejected answer for %s/%s: %s", session_id, question.id, exc)
            raise

        step = record.engine.submit(answer)
        record.touch()
        if record.engine.state is FlowState.COMPLETED:
            record.status = SessionStatus.COMPLETED
            record.completed_at = record.updated_at

        if self._reveal_delay > 0:
            await asyncio.sleep(self._reveal_delay)
        return step

    async def get_transcript(
        self, *, user_id: str, session_id: str,
    ) -> list[TranscriptEntry]:
        """Return the chat transcript so far (works mid-dialogue)."""
        record = self._load(user_id, session_id)
        return record.engine.transcript

    # ==================================================================
    # Reports
    # ==================================================================

    async def get_report(self, *, user_id: str, session_id: str) -> AllocationReport:
        """Compute the allocation report for a completed session.

        Raises:
            ValueError: if the session is missing or not completed yet.
        """
        record = self._load(user_id, session_id)
        if record.status is not SessionStatus.COMPLETED:
            raise ValueError(
                f"Session not completed: session_id={session_id}; "
                f"finish the dialogue before requesting a report"
            )
        return self._calculator.calculate(record.engine.snapshot(), record.category)

    async def get_report_text(self, *, user_id: str, session_id: str) -> str:
        """Render the allocation report as plain text."""
        report = await self.get_report(user_id=user_id, session_id=session_id)
        record = self._load(user_id, session_id)
        return self._renderer.render_report(report, record.property)

    async def get_preliminary(
        self, *, user_id: str, session_id: str,
    ) -> PreliminaryAnalysis:
        """Estimate the allocation from the session's property details.

        Available at any point of the dialogue; no answers are needed.
        """
        record = self._load(user_id, session_id)
        return self._calculator.preliminary(record.property)

    # ==================================================================
    # Internal
    # ==================================================================

    def _load(self, user_id: str, session_id: str) -> SessionRecord:
        record = self._registry.get(user_id, session_id)
        if record is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        return record
