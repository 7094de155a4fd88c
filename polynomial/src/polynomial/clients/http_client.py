"""
JSON-over-HTTPS transport for the Polynomial APIs.

One :class:`HttpClient` talks to one base URL (the REST API or the
orderbook).  Headers come from an :class:`AuthProvider` on every request.
Responses with a 2xx status are decoded and returned as-is; anything else
raises :class:`~polynomial.errors.APIError` built from the body's
``message``/``error`` field.  Failures that never produce a response
(refused connection, DNS, timeout) raise
:class:`~polynomial.errors.NetworkError`.

POST requests are never retried.  GET requests are retried on
``NetworkError`` only when the client is built with ``read_attempts > 1``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientResponse
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import APIError, NetworkError, create_api_error
from .auth_providers import AuthProvider


logger = logging.getLogger(__name__)


class HttpClient:
    """Asynchronous JSON client bound to one base URL."""

    def __init__(
        self,
        base_url: str,
        auth_provider: AuthProvider,
        *,
        timeout: Optional[float] = None,
        read_attempts: int = 1,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Construct the HTTP client.

        Args:
            base_url: Endpoint root; a trailing slash is removed.
            auth_provider: Supplies request headers, including the API key.
            timeout: Total seconds per request.  ``None`` keeps aiohttp's default.
            read_attempts: Attempts for GET requests on network failure.
            session: Optional externally managed session.  When omitted the
                client creates one lazily and closes it in :meth:`close`.
        """
        self.base_url = base_url.rstrip("/")
        self.auth_provider = auth_provider
        self.timeout = timeout
        self.read_attempts = max(1, read_attempts)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout) if self.timeout else None
            self._session = aiohttp.ClientSession(timeout=timeout) if timeout else aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = self.url_for(path)
        body = json.dumps(payload) if payload is not None and method in ("POST", "PUT") else None
        headers = await self.auth_provider.get_headers(method, path, body or "")
        logger.debug("%s %s params=%s", method, url, params)
        session = await self._get_session()
        try:
            async with session.request(
                method, url, headers=headers, data=body, params=_stringify(params)
            ) as resp:
                data = await self._decode(resp)
                if not 200 <= resp.status < 300:
                    # Avoid logging full response bodies; truncate to prevent leakage
                    logger.error("REST API error %s %s %s: %s", method, url, resp.status, str(data)[:200])
                    raise create_api_error(resp.status, resp.reason, data, url=url, method=method)
                return data
        except APIError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise NetworkError(
                f"Network error: unable to complete {method} {url}",
                {"url": url, "method": method, "originalError": str(exc) or type(exc).__name__},
            ) from exc

    @staticmethod
    async def _decode(resp: ClientResponse) -> Any:
        if "json" in (resp.content_type or ""):
            try:
                return await resp.json(content_type=None)
            except ValueError:
                pass
        return await resp.text()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.read_attempts),
            wait=wait_exponential(min=1, max=8),
            retry=retry_if_exception_type(NetworkError),
            reraise=True,
        ):
            with attempt:
                return await self._request("GET", path, params=params)

    async def post(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return await self._request("POST", path, payload, params)


def _stringify(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
    # aiohttp rejects non-str query values
    if not params:
        return None
    return {key: str(value) for key, value in params.items() if value is not None}
