# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for HTTP integration tests."""

from __future__ import annotations

import httpx
import pytest

from ssrf_guard.sdk._config import ClientConfig


class RecordingHandler:
    """httpx.MockTransport handler that records every request it receives."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._response = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._response is not None:
            return self._response
        return httpx.Response(200, json={"ok": True})


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def mock_transport(handler: RecordingHandler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(timeout_seconds=5.0)
