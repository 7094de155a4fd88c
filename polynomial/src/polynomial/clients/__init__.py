"""
Transport clients for the Polynomial REST and orderbook endpoints.

This package provides the JSON HTTP client and the authentication provider
that supplies its ``x-api-key`` header.
"""

from .auth_providers import ApiKeyProvider, AuthProvider  # noqa: F401
from .http_client import HttpClient  # noqa: F401
