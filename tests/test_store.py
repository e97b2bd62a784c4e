"""ResponseStore tests."""

from costseg_flow.store import ResponseStore


class TestResponseStore:

    def test_set_and_get(self):
        store = ResponseStore()
        store.set("depreciableBasis", "500000")
        assert store.get("depreciableBasis") == "500000"
        assert store.get("missing") is None
        assert store.get("missing", "n/a") == "n/a"
        assert "depreciableBasis" in store
        assert len(store) == 1

    def test_overwrite(self):
        store = ResponseStore()
        store.set("f", "one")
        store.set("f", "two")
        assert store.snapshot() == {"f": "two"}

    def test_snapshot_is_copy(self):
        store = ResponseStore()
        store.set("f", "v")
        snap = store.snapshot()
        snap["g"] = "w"
        assert "g" not in store
        assert store.snapshot() == store.snapshot(), "snapshot is idempotent"

    def test_clear(self):
        store = ResponseStore()
        store.set("f", "v")
        store.clear()
        assert store.snapshot() == {}
        assert len(store) == 0
