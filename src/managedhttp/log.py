# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for managedhttp."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

DEFAULT_LOG_LEVEL = os.getenv("MANAGEDHTTP_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "set-cookie"})


def setup_logging(level: str | None = None, *, fmt: str = LOG_FORMAT) -> None:
    """Configure standard logging for library or script use."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format=fmt,
    )


def redact_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Return a copy of ``headers`` safe to write to debug logs."""
    if not headers:
        return {}
    return {name: ("<redacted>" if name.lower() in SENSITIVE_HEADERS else value) for name, value in headers.items()}


__all__ = ["LOG_FORMAT", "SENSITIVE_HEADERS", "redact_headers", "setup_logging"]
