# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
SSRF-Guard HTTP integration.

Example:
    >>> from ssrf_guard.sdk import SafeHttpClient
    >>> async with SafeHttpClient() as client:
    ...     resp = await client.get("https://api.example.com/data")
"""

from ssrf_guard.sdk._config import ClientConfig
from ssrf_guard.sdk.client import SafeHttpClient, create_guarded_client
from ssrf_guard.sdk.transport import GuardedAsyncTransport, GuardedTransport

__all__ = [
    "ClientConfig",
    "GuardedAsyncTransport",
    "GuardedTransport",
    "SafeHttpClient",
    "create_guarded_client",
]
