"""Shared fixtures for contracts tracker tests."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest


class RecordingLogger:
    """Logger capturing (level, message) pairs."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def _record(self, level: str, message: str) -> None:
        self.records.append((level, message))

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("debug", message)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("info", message)

    def success(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("success", message)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("warning", message)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("error", message)

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message in self.records if lvl == level]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def gmp_transport():
    """Build an ``httpx.MockTransport`` answering every POST with ``payload``.

    Requests are collected in ``transport.requests`` as (url, json body).
    """

    def factory(payload: Any = None, *, status_code: int = 200, raw: str | None = None):
        requests: list[tuple[str, dict[str, Any]]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append((str(request.url), json.loads(request.content)))
            if raw is not None:
                return httpx.Response(status_code, text=raw)
            return httpx.Response(status_code, json=payload)

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport

    return factory

