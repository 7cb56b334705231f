# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""Core SSRF-Guard functionality: policy models and the URL validator."""

from ssrf_guard.core.models import (
    WELL_KNOWN_SERVICE_PORTS,
    Policy,
    RejectionReason,
    SSRFValidationError,
    ValidationResult,
)
from ssrf_guard.core.validator import UrlValidator, validate

__all__ = [
    "Policy",
    "RejectionReason",
    "SSRFValidationError",
    "UrlValidator",
    "ValidationResult",
    "WELL_KNOWN_SERVICE_PORTS",
    "validate",
]
