"""Global exception handlers — map SDK exceptions to HTTP status codes.

The SDK raises ``ValueError`` for the expected failure modes (session not
found, duplicate session, answer rejected, report requested too early).
The handlers below inspect the message and pick the HTTP status code so
route handlers only deal with the happy path.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    # Answer failed validation (checked first: the message quotes user input)
    ("invalid answer", 400),
    # Session already exists (user_id + session_id taken)
    ("already exists", 409),
    # Session not found
    ("not found", 404),
    # Dialogue already finished, nothing to answer
    ("not accepting answers", 409),
    # Report requested before the dialogue finished
    ("not completed", 400),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (user_id, session_id) stay in the server log.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Request conflicts with the current session state",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map SDK ``ValueError`` to a contextual HTTP error response.

    Falls back to 400 for unrecognised messages.  Answer validation
    failures are the one case where the message is returned as-is: it
    names the question and the accepted format, which the client needs.
    """
    msg = str(exc)
    lowered = msg.lower()
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in lowered:
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    if lowered.startswith("invalid answer"):
        detail = msg
    else:
        detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (unknown lookup key) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
