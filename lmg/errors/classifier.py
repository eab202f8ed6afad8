"""Map raw provider errors to a typed failure kind.

The provider exposes no structured error codes, so classification works on
the message text alone: case-insensitive substring tests, evaluated in a
fixed priority order. The first rule that matches wins, which is why a
message mentioning both "timeout" and "503" is a timeout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from lmg.errors.kinds import ErrorKind
from lmg.errors.policy import is_permanent, requires_chunking


@dataclass(frozen=True)
class ClassifiedError:
    """Control-flow view of a failure. Only ``kind.value`` is ever persisted."""

    kind: ErrorKind
    retryable: bool
    requires_chunking: bool
    message: str = ""

    @classmethod
    def from_kind(cls, kind: ErrorKind, message: str = "") -> ClassifiedError:
        return cls(
            kind=kind,
            retryable=not is_permanent(kind),
            requires_chunking=requires_chunking(kind),
            message=message,
        )


def _any(*needles: str) -> Callable[[str], bool]:
    return lambda text: any(n in text for n in needles)


def _all(*needles: str) -> Callable[[str], bool]:
    return lambda text: all(n in text for n in needles)


def _either(*tests: Callable[[str], bool]) -> Callable[[str], bool]:
    return lambda text: any(t(text) for t in tests)


# Order matters: first match wins.
_RULES: list[tuple[ErrorKind, Callable[[str], bool]]] = [
    (
        ErrorKind.AUTHENTICATION,
        _any("auth key", "api key", "unauthorized", "unauthenticated", "authentication"),
    ),
    (ErrorKind.PERMISSION, _any("permission", "forbidden")),
    (
        ErrorKind.RATE_LIMIT,
        _any("rate limit", "429", "resource_exhausted", "quota", "too many requests"),
    ),
    (
        ErrorKind.TOKEN_LIMIT_INPUT,
        _either(
            _all("context", "length"),
            _all("token", "limit", "input"),
            _any("context_length_exceeded", "maximum context length"),
        ),
    ),
    (ErrorKind.TOKEN_LIMIT_OUTPUT, _all("output", "limit")),
    (ErrorKind.CONTENT_FILTERED_RECITATION, _any("recitation")),
    (
        ErrorKind.CONTENT_FILTERED_SAFETY,
        lambda text: "safety" in text and ("block" in text or "filter" in text),
    ),
    (ErrorKind.TIMEOUT, _any("timeout", "timed out", "deadline", "504")),
    (ErrorKind.UNAVAILABLE, _any("503", "unavailable", "overload", "capacity")),
    (
        ErrorKind.INVALID_REQUEST,
        _either(
            lambda text: "invalid" in text and ("argument" in text or "request" in text),
            _any("malformed", "failed_precondition"),
        ),
    ),
]


def error_message(error: BaseException | str | None) -> str:
    """Message text of an error; falls back to the exception class name."""
    if error is None:
        return ""
    if isinstance(error, str):
        return error
    return str(error) or type(error).__name__


def classify_message(message: str) -> ErrorKind:
    """Return the first matching kind for ``message``; never raises."""
    text = (message or "").lower()
    for kind, matches in _RULES:
        if matches(text):
            return kind
    return ErrorKind.SERVICE_ERROR


def classify_error(error: BaseException | str | None) -> ClassifiedError:
    """Classify a raw exception or message into a :class:`ClassifiedError`."""
    message = error_message(error)
    return ClassifiedError.from_kind(classify_message(message), message=message)
