# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
Guarded httpx transports.

Wrap another transport and validate every outgoing request URL before it
is handed over. Redirect hops followed by the httpx client go through the
transport again, so each hop is validated on its own.
"""

from __future__ import annotations

import httpx
import structlog

from ssrf_guard.core.models import Policy, SSRFValidationError
from ssrf_guard.core.validator import UrlValidator

logger = structlog.get_logger(__name__)


def check_request_url(validator: UrlValidator, url: str) -> None:
    """Validate a request URL, logging and raising SSRFValidationError on rejection."""
    result = validator.validate(url)
    if not result.allowed:
        logger.warning(
            "ssrf_guard.request_blocked",
            url=url,
            reason=str(result.reason),
            value=result.value,
        )
        result.raise_for_rejection()


class GuardedAsyncTransport(httpx.AsyncBaseTransport):
    """Async transport that refuses requests to URLs the policy rejects."""

    def __init__(
        self,
        policy: Policy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._validator = UrlValidator(policy if policy is not None else Policy())
        self._transport = transport or httpx.AsyncHTTPTransport()

    @property
    def policy(self) -> Policy:
        return self._validator.policy

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        check_request_url(self._validator, str(request.url))
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self._transport.aclose()


class GuardedTransport(httpx.BaseTransport):
    """Sync counterpart of GuardedAsyncTransport."""

    def __init__(
        self,
        policy: Policy | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._validator = UrlValidator(policy if policy is not None else Policy())
        self._transport = transport or httpx.HTTPTransport()

    @property
    def policy(self) -> Policy:
        return self._validator.policy

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        check_request_url(self._validator, str(request.url))
        return self._transport.handle_request(request)

    def close(self) -> None:
        self._transport.close()
