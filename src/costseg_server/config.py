"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

from costseg_flow.constants import DEFAULT_FLAVOR

# --- Pagination defaults ---
# Module-level constants read at import time so FastAPI Query() defaults
# can reference them (Query defaults must be static at decoration time).
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Data files (None → the YAML files packaged with costseg_flow)
    catalog_path: str | None = None
    allocation_path: str | None = None

    # Logging
    log_level: str = "INFO"

    # Pause before the next engine message is returned, in milliseconds
    reveal_delay_ms: int = 0

    # Flavor used when POST /sessions does not name one
    default_flavor: str = DEFAULT_FLAVOR


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        catalog_path=os.getenv("SERVER_CATALOG_PATH") or None,
        allocation_path=os.getenv("SERVER_ALLOCATION_PATH") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        reveal_delay_ms=int(os.getenv("SERVER_REVEAL_DELAY_MS", "0")),
        default_flavor=os.getenv("SERVER_DEFAULT_FLAVOR", DEFAULT_FLAVOR),
    )
