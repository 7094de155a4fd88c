"""Tests for the error taxonomy."""

from __future__ import annotations

import pytest

from polynomial.errors import (
    APIError,
    ErrorKind,
    NetworkError,
    OrderError,
    PolynomialError,
    SigningError,
    ValidationError,
    create_api_error,
    is_polynomial_error,
    redact,
)


@pytest.mark.parametrize(
    "body, reason, expected",
    [
        ({"message": "Insufficient margin", "error": "ignored"}, "Bad Request", "Insufficient margin"),
        ({"error": "Invalid signature"}, "Bad Request", "Invalid signature"),
        ({"detail": "x"}, "Bad Request", "Bad Request"),
        ("<html>upstream down</html>", "Bad Gateway", "Bad Gateway"),
        (None, None, "Unknown API error"),
    ],
)
def test_api_error_message_precedence(body, reason, expected) -> None:
    error = create_api_error(400, reason, body, url="https://example/x", method="POST")
    assert isinstance(error, APIError)
    assert error.message == expected
    assert error.status == 400
    assert error.response == body
    assert error.context == {"url": "https://example/x", "method": "POST"}


def test_kinds_are_distinct_per_subclass() -> None:
    assert ValidationError("x").code == "VALIDATION_ERROR"
    assert SigningError("x").kind is ErrorKind.SIGNING
    assert NetworkError("x").kind is ErrorKind.NETWORK
    assert OrderError("x").code == "ORDER_ERROR"
    assert len({kind.value for kind in ErrorKind}) == len(ErrorKind)


def test_context_is_redacted_recursively() -> None:
    error = ValidationError(
        "bad",
        {"sessionKey": "0xabc", "apiKey": "k", "nested": {"private_key": "0xdef", "marketId": "1"}, "signature": None},
    )
    assert error.context == {
        "sessionKey": "REDACTED",
        "apiKey": "REDACTED",
        "nested": {"private_key": "REDACTED", "marketId": "1"},
        "signature": None,
    }
    assert "0xabc" not in repr(error)
    assert redact(None) == {}


def test_is_polynomial_error() -> None:
    assert is_polynomial_error(APIError("x", 500))
    assert not is_polynomial_error(ValueError("x"))
    assert isinstance(NetworkError("x"), PolynomialError)
