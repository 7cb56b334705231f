# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
SafeHttpClient: an httpx.AsyncClient wrapper that validates URLs first.

Every request URL is checked against the Policy before any I/O happens.
Rejected URLs raise SSRFValidationError and never reach the network.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx
import structlog

from ssrf_guard.core.models import Policy
from ssrf_guard.core.validator import UrlValidator
from ssrf_guard.sdk._config import ClientConfig
from ssrf_guard.sdk.transport import GuardedAsyncTransport, check_request_url

logger = structlog.get_logger(__name__)


class SafeHttpClient:
    """
    SSRF-guarded async HTTP client.

    Usage::

        async with SafeHttpClient(Policy(allowed_domains={"api.example.com"})) as client:
            resp = await client.get("https://api.example.com/data")

    When no ``client`` is given, an owned ``httpx.AsyncClient`` with
    redirect following disabled is opened on enter and closed on exit.
    A caller-supplied client is used as-is and left open, but redirects
    are never followed on it: a 3xx response is returned to the caller.
    """

    def __init__(
        self,
        policy: Policy | None = None,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._policy = policy if policy is not None else Policy.from_env()
        self._config = config or ClientConfig.from_env()
        self._validator = UrlValidator(self._policy)
        self._owns_client = client is None
        self._http_client: httpx.AsyncClient | None = client

    async def __aenter__(self) -> SafeHttpClient:
        if self._owns_client:
            self._http_client = httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                follow_redirects=False,
            )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def policy(self) -> Policy:
        return self._policy

    def _require_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            raise RuntimeError(
                "SafeHttpClient must be used as an async context manager: "
                "async with SafeHttpClient() as client: ..."
            )
        return self._http_client

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Validate and send a prepared request."""
        client = self._require_client()
        url = str(request.url)
        check_request_url(self._validator, url)
        logger.debug("ssrf_guard.request", method=request.method, url=url)
        return await client.send(request, follow_redirects=False)

    async def request(self, method: str, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        """
        Build, validate and send a request.

        Keyword arguments are passed to ``httpx.AsyncClient.build_request``
        (``params``, ``headers``, ``json``, ``content``, ``timeout``, ...).
        """
        client = self._require_client()
        return await self.send(client.build_request(method, url, **kwargs))

    async def get(self, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)


def create_guarded_client(
    policy: Policy | None = None,
    config: ClientConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient whose transport enforces the policy.

    Args:
        policy: Policy to enforce. Defaults to Policy.from_env().
        config: Client settings. Defaults to ClientConfig.from_env().
        transport: Inner transport to delegate to (defaults to httpx's own).

    Returns:
        An httpx.AsyncClient; the caller is responsible for closing it.
    """
    policy = policy if policy is not None else Policy.from_env()
    config = config or ClientConfig.from_env()
    return httpx.AsyncClient(
        transport=GuardedAsyncTransport(policy, transport=transport),
        timeout=config.timeout_seconds,
        follow_redirects=config.follow_redirects,
    )
