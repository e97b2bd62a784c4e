"""SessionRegistry tests — keying, listing order, and removal."""

from datetime import datetime, timezone

import pytest

from costseg_flow.engine import FlowEngine
from costseg_flow.registry import SessionRecord, SessionRegistry

SAME_TICK = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record(session_id, user_id="u1", **kwargs):
    return SessionRecord(
        user_id=user_id,
        session_id=session_id,
        category="commercial",
        flavor="tax_only",
        engine=FlowEngine(),
        **kwargs,
    )


class TestSessionRegistry:

    def test_add_and_get(self):
        registry = SessionRegistry()
        record = registry.add(_record("s1"))
        assert registry.get("u1", "s1") is record
        assert registry.get("u2", "s1") is None
        assert len(registry) == 1

    def test_duplicate_rejected(self):
        registry = SessionRegistry()
        registry.add(_record("s1"))
        with pytest.raises(ValueError, match="already exists"):
            registry.add(_record("s1"))

    def test_list_newest_first(self):
        registry = SessionRegistry()
        for sid in ("a", "b", "c"):
            registry.add(_record(sid))
        listed = [r.session_id for r in registry.list_by_user("u1")]
        assert listed == ["c", "b", "a"]

    def test_list_same_timestamp_newest_first(self):
        """Records created in the same clock tick still list newest first."""
        registry = SessionRegistry()
        for sid in ("a", "b", "c"):
            registry.add(_record(sid, created_at=SAME_TICK))
        listed = [r.session_id for r in registry.list_by_user("u1")]
        assert listed == ["c", "b", "a"]

    def test_list_pagination_and_scope(self):
        registry = SessionRegistry()
        for sid in ("a", "b", "c"):
            registry.add(_record(sid, created_at=SAME_TICK))
        registry.add(_record("x", user_id="u2"))
        page = [r.session_id for r in registry.list_by_user("u1", limit=2, offset=1)]
        assert page == ["b", "a"]

    def test_remove(self):
        registry = SessionRegistry()
        registry.add(_record("s1"))
        assert registry.remove("u1", "s1").session_id == "s1"
        assert registry.remove("u1", "s1") is None
        assert len(registry) == 0
