# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx transport construction."""

from __future__ import annotations

from typing import Callable

import httpx

from ..config import ClientSettings, load_client_settings

HandlerFactory = Callable[[], "httpx.BaseTransport | None"]


def create_default_transport(
    settings: ClientSettings | None = None,
    handler: httpx.BaseTransport | None = None,
    *,
    http2: bool | None = None,
) -> httpx.Client:
    """
    Build the pooled httpx client used by an ApiClient.

    ``handler`` replaces httpx's connection-pool transport (interceptors, mocks,
    proxies); it is owned by the returned client and closed with it.
    ``http2`` overrides ``settings.http2``; it only affects httpx's own pool,
    not a custom ``handler``.
    """
    settings = settings or load_client_settings()
    limits = httpx.Limits(
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_keepalive_connections,
    )
    return httpx.Client(
        transport=handler,
        http2=settings.http2 if http2 is None else http2,
        follow_redirects=settings.allow_redirects,
        timeout=httpx.Timeout(settings.timeout),
        verify=settings.verify_ssl,
        limits=limits,
    )


__all__ = ["HandlerFactory", "create_default_transport"]
