"""Failure taxonomy: classify raw provider errors and decide how to retry."""

from lmg.errors.classifier import ClassifiedError, classify_error, classify_message, error_message
from lmg.errors.kinds import UNKNOWN_ERROR_TYPE, ErrorKind
from lmg.errors.policy import is_permanent, is_transient, requires_chunking

__all__ = [
    "ClassifiedError",
    "ErrorKind",
    "UNKNOWN_ERROR_TYPE",
    "classify_error",
    "classify_message",
    "error_message",
    "is_permanent",
    "is_transient",
    "requires_chunking",
]
