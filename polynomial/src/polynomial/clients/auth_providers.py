"""
Authentication provider abstractions for the Polynomial REST APIs.

The provider owns the credential.  Both transports of a client hold a
reference to the same provider and ask it for headers on every request, so
rotating the key through :meth:`ApiKeyProvider.update_api_key` is seen by
the next request on either transport.  A request already in flight keeps
the headers it was built with.
"""
from __future__ import annotations

from typing import Dict

from ..errors import ValidationError


API_KEY_HEADER = "x-api-key"


class AuthProvider:
    """Supplies the headers every venue request is sent with."""

    async def get_headers(self, method: str, path: str, body: str) -> Dict[str, str]:
        """Headers for ``method path`` with serialised ``body`` (empty for GET)."""
        raise NotImplementedError


class ApiKeyProvider(AuthProvider):
    """Static API key sent in the ``x-api-key`` header."""

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ValidationError("API key cannot be empty")
        self._api_key = api_key

    @property
    def api_key(self) -> str:
        return self._api_key

    def update_api_key(self, api_key: str) -> None:
        if not api_key:
            raise ValidationError("API key cannot be empty")
        self._api_key = api_key

    async def get_headers(self, method: str, path: str, body: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            API_KEY_HEADER: self._api_key,
        }

    def __repr__(self) -> str:
        return "ApiKeyProvider(api_key=REDACTED)"
