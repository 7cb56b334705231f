# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
HTTP client configuration.

Settings for the guarded httpx clients. The validation rules themselves
live in :class:`ssrf_guard.core.models.Policy`.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from ssrf_guard.core.models import TRUTHY_VALUES


class ClientConfig(BaseModel):
    """Configuration for SafeHttpClient and create_guarded_client()."""

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Default request timeout in seconds.",
    )
    follow_redirects: bool = Field(
        default=False,
        description="Follow server redirects. Only honoured by create_guarded_client(), "
        "where every hop passes through the guarded transport and is re-validated.",
    )

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build config from environment variables."""
        return cls(
            timeout_seconds=float(os.getenv("SSRF_GUARD_TIMEOUT", "30")),
            follow_redirects=os.getenv("SSRF_GUARD_FOLLOW_REDIRECTS", "").strip().lower()
            in TRUTHY_VALUES,
        )
