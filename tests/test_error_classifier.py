"""Tests for provider error classification: message rules and priority order."""

import pytest

from lmg.errors import ClassifiedError, ErrorKind, classify_error, classify_message, error_message


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Invalid API key provided", ErrorKind.AUTHENTICATION),
        ("401 Unauthorized", ErrorKind.AUTHENTICATION),
        ("403 Forbidden: insufficient permissions", ErrorKind.PERMISSION),
        ("Error 429: Too many requests", ErrorKind.RATE_LIMIT),
        ("RESOURCE_EXHAUSTED: quota exceeded for project", ErrorKind.RATE_LIMIT),
        ("This model's maximum context length is 128000 tokens", ErrorKind.TOKEN_LIMIT_INPUT),
        ("Input token limit exceeded", ErrorKind.TOKEN_LIMIT_INPUT),
        ("Model stopped at the output token limit", ErrorKind.TOKEN_LIMIT_OUTPUT),
        ("Response blocked: RECITATION", ErrorKind.CONTENT_FILTERED_RECITATION),
        ("Candidate was blocked due to SAFETY", ErrorKind.CONTENT_FILTERED_SAFETY),
        ("Request timed out", ErrorKind.TIMEOUT),
        ("504 Deadline Exceeded", ErrorKind.TIMEOUT),
        ("503 Service Unavailable", ErrorKind.UNAVAILABLE),
        ("The model is overloaded", ErrorKind.UNAVAILABLE),
        ("Invalid argument: temperature must be <= 2", ErrorKind.INVALID_REQUEST),
        ("FAILED_PRECONDITION: location not supported", ErrorKind.INVALID_REQUEST),
        ("Something went sideways", ErrorKind.SERVICE_ERROR),
        ("", ErrorKind.SERVICE_ERROR),
    ],
)
def test_classify_message(message, expected):
    assert classify_message(message) is expected


def test_classification_is_case_insensitive():
    assert classify_message("UNAUTHENTICATED") is ErrorKind.AUTHENTICATION
    assert classify_message("rate LIMIT reached") is ErrorKind.RATE_LIMIT


class TestPriorityOrder:

    def test_authentication_beats_timeout(self):
        assert classify_message("unauthorized after request timeout") is ErrorKind.AUTHENTICATION

    def test_permission_beats_rate_limit(self):
        assert classify_message("permission denied (429)") is ErrorKind.PERMISSION

    def test_rate_limit_beats_unavailable(self):
        assert classify_message("503: quota exhausted") is ErrorKind.RATE_LIMIT

    def test_timeout_beats_unavailable(self):
        assert classify_message("timeout: 503 service unavailable") is ErrorKind.TIMEOUT

    def test_token_limit_beats_invalid_request(self):
        assert classify_message("Invalid request: context length exceeded") is ErrorKind.TOKEN_LIMIT_INPUT


class TestClassifyError:

    def test_exception_message_is_used(self):
        result = classify_error(RuntimeError("Error 429: Too many requests"))
        assert isinstance(result, ClassifiedError)
        assert result.kind is ErrorKind.RATE_LIMIT
        assert result.retryable is True
        assert result.requires_chunking is False
        assert result.message == "Error 429: Too many requests"

    def test_permanent_kind_is_not_retryable(self):
        result = classify_error("403 Forbidden: insufficient permissions")
        assert result.kind is ErrorKind.PERMISSION
        assert result.retryable is False
        assert result.requires_chunking is False

    def test_chunking_kind(self):
        result = classify_error("maximum context length exceeded")
        assert result.retryable is True
        assert result.requires_chunking is True

    def test_empty_message_falls_back_to_class_name(self):
        assert error_message(TimeoutError()) == "TimeoutError"
        assert classify_error(TimeoutError()).kind is ErrorKind.TIMEOUT

    def test_none(self):
        assert classify_error(None).kind is ErrorKind.SERVICE_ERROR
