"""Closed taxonomy of generation failure kinds."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds. Values are the codes persisted on the job record."""

    AUTHENTICATION = "LLM_AUTHENTICATION"
    PERMISSION = "LLM_PERMISSION_DENIED"
    RATE_LIMIT = "LLM_RATE_LIMIT"
    TOKEN_LIMIT_INPUT = "LLM_TOKEN_LIMIT"
    TOKEN_LIMIT_OUTPUT = "LLM_OUTPUT_LIMIT"
    CONTENT_FILTERED_RECITATION = "LLM_CONTENT_FILTERED_RECITATION"
    CONTENT_FILTERED_SAFETY = "LLM_CONTENT_FILTERED_SAFETY"
    TIMEOUT = "LLM_TIMEOUT"
    UNAVAILABLE = "LLM_UNAVAILABLE"
    INVALID_REQUEST = "LLM_INVALID_REQUEST"
    SERVICE_ERROR = "LLM_SERVICE_ERROR"

    @classmethod
    def parse(cls, value: ErrorKind | str | None) -> ErrorKind | None:
        """Resolve a stored error code, kind name or legacy code; None if unknown."""
        if value is None or isinstance(value, ErrorKind):
            return value
        key = str(value).strip()
        if not key:
            return None
        try:
            return cls(key.upper())
        except ValueError:
            pass
        by_name = cls.__members__.get(key.upper())
        if by_name is not None:
            return by_name
        return _LEGACY_CODES.get(key.upper())


# Codes written by older ingestion flows
_LEGACY_CODES: dict[str, ErrorKind] = {
    "API_KEY_ERROR": ErrorKind.AUTHENTICATION,
    "PERMISSION_DENIED": ErrorKind.PERMISSION,
    "CONTENT_FILTERED": ErrorKind.CONTENT_FILTERED_SAFETY,
    "INVALID_REQUEST": ErrorKind.INVALID_REQUEST,
    "RECITATION": ErrorKind.CONTENT_FILTERED_RECITATION,
}

# Stored on a job when no error type was recorded
UNKNOWN_ERROR_TYPE = "UNKNOWN"
