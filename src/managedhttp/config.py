# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for managedhttp."""

import os
import threading
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"managedhttp/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ClientSettings:
    """Transport and download defaults applied when an ApiClient builds its transport."""

    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    download_buffer_bytes: int = 81920
    progress_interval: int = 10
    max_connections: int = 100
    max_keepalive_connections: int = 20
    # HTTP/2 needs the optional h2 package (httpx[http2])
    http2: bool = False

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Create settings from environment variables (evaluated at call time)."""
        buffer_bytes = _int_env("MANAGEDHTTP_DOWNLOAD_BUFFER_BYTES", cls.download_buffer_bytes)
        if buffer_bytes <= 0:
            buffer_bytes = cls.download_buffer_bytes
        progress_interval = _int_env("MANAGEDHTTP_PROGRESS_INTERVAL", cls.progress_interval)
        if progress_interval <= 0:
            progress_interval = cls.progress_interval
        return cls(
            timeout=_float_env("MANAGEDHTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("MANAGEDHTTP_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("MANAGEDHTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("MANAGEDHTTP_VERIFY_SSL", cls.verify_ssl),
            download_buffer_bytes=buffer_bytes,
            progress_interval=progress_interval,
            max_connections=_int_env("MANAGEDHTTP_MAX_CONNECTIONS", cls.max_connections),
            max_keepalive_connections=_int_env("MANAGEDHTTP_MAX_KEEPALIVE", cls.max_keepalive_connections),
            http2=_bool_env("MANAGEDHTTP_HTTP2", cls.http2),
        )


_defaults: ClientSettings | None = None
_defaults_sealed = False
_defaults_lock = threading.Lock()


def configure_defaults(settings: ClientSettings) -> None:
    """
    Install process-wide default settings.

    Must run once, before the first client loads its settings. Later calls raise
    RuntimeError so clients created at different times never disagree on defaults.
    """
    global _defaults, _defaults_sealed
    with _defaults_lock:
        if _defaults_sealed:
            raise RuntimeError("Process-wide client defaults were already initialised")
        _defaults = settings
        _defaults_sealed = True


def reset_defaults() -> None:
    """Forget configured defaults (intended for tests)."""
    global _defaults, _defaults_sealed
    with _defaults_lock:
        _defaults = None
        _defaults_sealed = False


def load_client_settings() -> ClientSettings:
    """Return the configured process defaults, or settings read from the environment."""
    global _defaults_sealed
    with _defaults_lock:
        # first read seals the defaults; configure_defaults() is no longer allowed
        _defaults_sealed = True
        if _defaults is not None:
            return _defaults
    return ClientSettings.from_env()


__all__ = [
    "DEFAULT_USER_AGENT",
    "ClientSettings",
    "configure_defaults",
    "load_client_settings",
    "reset_defaults",
]
