"""
Error taxonomy for the Polynomial client.

Every error raised by this package is a :class:`PolynomialError` carrying a
``kind`` (an :class:`ErrorKind`) and a ``context`` dictionary with
structured diagnostic fields.  The subclasses exist so callers can write
``except ValidationError`` rather than inspecting ``kind``; they add no
behaviour beyond fixing the kind (``APIError`` also exposes the HTTP status
and decoded response body).

Context values stored under secret-bearing keys are redacted when the error
is constructed, so an error can be logged or re-raised without leaking
session keys or API keys.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


REDACTED = "REDACTED"

# Keys whose values must never appear in error context.
SECRET_KEYS = frozenset(
    {
        "apiKey",
        "api_key",
        "sessionKey",
        "session_key",
        "privateKey",
        "private_key",
        "signature",
    }
)


class ErrorKind(str, Enum):
    CONFIGURATION = "CONFIGURATION_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    SIGNING = "SIGNING_ERROR"
    ORDER = "ORDER_ERROR"
    ACCOUNT = "ACCOUNT_ERROR"
    MARKET = "MARKET_ERROR"
    API = "API_ERROR"
    NETWORK = "NETWORK_ERROR"


def redact(context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``context`` with secret values replaced.

    Nested dictionaries are redacted recursively.
    """
    if not context:
        return {}
    cleaned: Dict[str, Any] = {}
    for key, value in context.items():
        if key in SECRET_KEYS and value is not None:
            cleaned[key] = REDACTED
        elif isinstance(value, dict):
            cleaned[key] = redact(value)
        else:
            cleaned[key] = value
    return cleaned


class PolynomialError(Exception):
    """Base class for all client errors."""

    kind: ErrorKind = ErrorKind.ORDER

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = redact(context)

    @property
    def code(self) -> str:
        return self.kind.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(PolynomialError):
    """Required configuration is missing."""

    kind = ErrorKind.CONFIGURATION


class ValidationError(PolynomialError):
    """Malformed input, or a business entity the caller referred to does not exist."""

    kind = ErrorKind.VALIDATION


class SigningError(PolynomialError):
    kind = ErrorKind.SIGNING


class OrderError(PolynomialError):
    kind = ErrorKind.ORDER


class AccountError(PolynomialError):
    kind = ErrorKind.ACCOUNT


class MarketError(PolynomialError):
    kind = ErrorKind.MARKET


class NetworkError(PolynomialError):
    """The request never produced an HTTP response (DNS, refused connection, timeout)."""

    kind = ErrorKind.NETWORK


class APIError(PolynomialError):
    """The server answered with a non-2xx status."""

    kind = ErrorKind.API

    def __init__(
        self,
        message: str,
        status: int,
        response: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context)
        self.status = status
        self.response = response


def create_api_error(
    status: int,
    reason: Optional[str],
    body: Any,
    *,
    url: str = "",
    method: str = "",
) -> APIError:
    """Build an :class:`APIError` from a failed HTTP response.

    The message is taken from the body's ``message`` field, then its
    ``error`` field, then the HTTP reason phrase.
    """
    message = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
    if not message:
        message = reason or "Unknown API error"
    return APIError(str(message), status, body, {"url": url, "method": method})


def is_polynomial_error(error: BaseException) -> bool:
    return isinstance(error, PolynomialError)
