"""ResponseStore — the field → raw answer mapping of one dialogue session."""

from __future__ import annotations


class ResponseStore:
    """Accumulates raw answers keyed by field identifier.

    Values are kept exactly as submitted; parsing numbers or dates is left
    to downstream consumers.  Writing an existing field overwrites it.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def set(self, field: str, value: str) -> None:
        self._values[field] = value

    def get(self, field: str, default: str | None = None) -> str | None:
        return self._values.get(field, default)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the current mapping."""
        return dict(self._values)

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, field: object) -> bool:
        return field in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResponseStore({self._values!r})"
