"""In-memory session registry for the chat service.

Sessions are kept in a process-local dict keyed by ``(user_id, session_id)``.
Nothing is persisted: restarting the process forgets every dialogue.

The registry holds no business logic: it stores, finds, lists and removes
:class:`SessionRecord` objects.  The record owns its
:class:`FlowEngine`, so each session has an independent cursor and store.
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone

from costseg_flow.engine import FlowEngine
from costseg_flow.models.session import PropertyDetails, SessionInfo


class SessionStatus(str, enum.Enum):
    """Lifecycle states for a dialogue session.

    Transitions:
        in_progress -> completed   (engine reached the end of the catalog)
        completed -> in_progress   (restart)
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Creation order; breaks created_at ties between sessions made in the same tick.
_SEQUENCE = itertools.count()


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionRecord:
    """One dialogue session and the engine driving it."""

    user_id: str
    session_id: str
    category: str
    flavor: str
    engine: FlowEngine
    property: PropertyDetails | None = None
    seed: int | None = None
    status: SessionStatus = SessionStatus.IN_PROGRESS
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    completed_at: datetime | None = None
    seq: int = field(default_factory=lambda: next(_SEQUENCE))

    def touch(self) -> None:
        self.updated_at = _now()

    def to_info(self) -> SessionInfo:
        return SessionInfo(
            user_id=self.user_id,
            session_id=self.session_id,
            category=self.category,
            flavor=self.flavor,
            status=self.status.value,
            position=self.engine.cursor,
            total=len(self.engine.catalog),
            created_at=self.created_at,
            updated_at=self.updated_at,
            completed_at=self.completed_at,
        )


class SessionRegistry:
    """Process-local store of :class:`SessionRecord` objects."""

    def __init__(self) -> None:
        self._sessions: dict[tuple[str, str], SessionRecord] = {}

    def add(self, record: SessionRecord) -> SessionRecord:
        """Register a new session.

        Raises:
            ValueError: if the (user_id, session_id) pair is already taken.
        """
        key = (record.user_id, record.session_id)
        if key in self._sessions:
            raise ValueError(
                f"Session already exists: user_id={record.user_id}, "
                f"session_id={record.session_id}"
            )
        self._sessions[key] = record
        return record

    def get(self, user_id: str, session_id: str) -> SessionRecord | None:
        return self._sessions.get((user_id, session_id))

    def list_by_user(
        self, user_id: str, *, limit: int = 20, offset: int = 0,
    ) -> list[SessionRecord]:
        """List a user's sessions, most recently created first."""
        rows = sorted(
            (r for (uid, _), r in self._sessions.items() if uid == user_id),
            key=lambda r: (r.created_at, r.seq),
            reverse=True,
        )
        return rows[offset:offset + limit]

    def remove(self, user_id: str, session_id: str) -> SessionRecord | None:
        return self._sessions.pop((user_id, session_id), None)

    def __len__(self) -> int:
        return len(self._sessions)
