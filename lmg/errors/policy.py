"""Retry policy over failure kinds: permanent, chunk-and-retry, or plain retry."""

from __future__ import annotations

from lmg.errors.kinds import ErrorKind

PERMANENT_KINDS: frozenset[ErrorKind] = frozenset({
    ErrorKind.AUTHENTICATION,
    ErrorKind.PERMISSION,
    ErrorKind.CONTENT_FILTERED_RECITATION,
    ErrorKind.CONTENT_FILTERED_SAFETY,
    ErrorKind.INVALID_REQUEST,
})

CHUNKING_KINDS: frozenset[ErrorKind] = frozenset({
    ErrorKind.TOKEN_LIMIT_INPUT,
    ErrorKind.TOKEN_LIMIT_OUTPUT,
    ErrorKind.TIMEOUT,
})

# Non-LLM codes set by the ingestion flow that no retry can fix
PERMANENT_CODES: frozenset[str] = frozenset({"TRANSCRIPT_UNAVAILABLE"})


def is_permanent(kind: ErrorKind | str | None) -> bool:
    """True when retrying with the same input can never succeed."""
    if isinstance(kind, str) and kind.strip().upper() in PERMANENT_CODES:
        return True
    return ErrorKind.parse(kind) in PERMANENT_KINDS


def requires_chunking(kind: ErrorKind | str | None) -> bool:
    """True when the full-transcript request is too large or slow for one call."""
    return ErrorKind.parse(kind) in CHUNKING_KINDS


def is_transient(kind: ErrorKind | str | None) -> bool:
    """Anything neither permanent nor chunking-bound: retry the original request."""
    return not is_permanent(kind) and not requires_chunking(kind)
