# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
SSRF-Guard: outbound request firewall.

Rejects URLs that could be used for Server-Side Request Forgery before an
HTTP client dispatches them.

Example:
    >>> import ssrf_guard
    >>>
    >>> policy = ssrf_guard.Policy(allowed_domains={"api.example.com"})
    >>> result = ssrf_guard.validate("http://169.254.169.254/latest/meta-data", policy)
    >>> result.allowed, result.reason
    (False, <RejectionReason.DOMAIN_NOT_ALLOWED: 'domain_not_allowed'>)
    >>>
    >>> # Guard an HTTP client
    >>> async with ssrf_guard.SafeHttpClient(policy) as client:
    ...     resp = await client.get("https://api.example.com/data")
"""

from __future__ import annotations

from ssrf_guard.core.models import (
    WELL_KNOWN_SERVICE_PORTS,
    Policy,
    RejectionReason,
    SSRFValidationError,
    ValidationResult,
)
from ssrf_guard.core.validator import UrlValidator, validate
from ssrf_guard.sdk import (
    ClientConfig,
    GuardedAsyncTransport,
    GuardedTransport,
    SafeHttpClient,
    create_guarded_client,
)

__version__ = "0.1.0"
__all__ = [
    # Validation
    "validate",
    "UrlValidator",
    # Models
    "Policy",
    "RejectionReason",
    "ValidationResult",
    "WELL_KNOWN_SERVICE_PORTS",
    # HTTP integration
    "ClientConfig",
    "SafeHttpClient",
    "GuardedAsyncTransport",
    "GuardedTransport",
    "create_guarded_client",
    # Exceptions
    "SSRFValidationError",
    # Version
    "__version__",
]
