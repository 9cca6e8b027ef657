# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Programmable httpx transports for tests and offline use."""

from __future__ import annotations

import threading
from typing import Callable

import httpx

Responder = Callable[[httpx.Request], httpx.Response]


def _not_configured(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, text=f"No responder configured for {request.url}")


class RecordingTransport(httpx.BaseTransport):
    """
    Deterministic httpx transport that records every request it handles.

    Responses come from the ``responder`` callable; ``closed`` tells tests
    whether the owning httpx.Client disposed of the transport.
    """

    def __init__(self, responder: Responder | None = None):
        self._responder = responder or _not_configured
        self._lock = threading.Lock()
        self.requests: list[httpx.Request] = []
        self.closed = False

    @property
    def calls(self) -> int:
        with self._lock:
            return len(self.requests)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self.requests.append(request)
        return self._responder(request)

    def close(self) -> None:
        self.closed = True


class TransportFactory:
    """Handler factory that builds a fresh RecordingTransport per transport rebuild."""

    def __init__(self, responder: Responder | None = None):
        self._responder = responder
        self.created: list[RecordingTransport] = []

    def __call__(self) -> RecordingTransport:
        transport = RecordingTransport(responder=self._responder)
        self.created.append(transport)
        return transport

    @property
    def latest(self) -> RecordingTransport | None:
        return self.created[-1] if self.created else None


__all__ = ["RecordingTransport", "Responder", "TransportFactory"]
