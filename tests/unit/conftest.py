# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for unit tests."""

from __future__ import annotations

import os

import pytest
import structlog

from ssrf_guard.core.models import Policy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep SSRF_GUARD_* variables from the host environment out of the tests."""
    for name in list(os.environ):
        if name.startswith("SSRF_GUARD_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test (e.g. --quiet) applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def default_policy() -> Policy:
    """Policy with every default in place."""
    return Policy()


@pytest.fixture
def domain_policy() -> Policy:
    """Policy restricted to an exact host and a wildcard suffix."""
    return Policy(allowed_domains={"api.example.com", "*.trusted.com"})
