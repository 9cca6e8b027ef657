# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header collection and header lookup utilities.

HTTP header field names are case-insensitive (RFC 9110). The client keeps its
default headers in a HeaderCollection that remembers the caller's casing but
matches names case-insensitively, and tells its owner whenever it changes so
the transport can be refreshed before the next request.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any, Protocol

import httpx


class HeaderOwner(Protocol):
    def request_client_reset(self, full_reset: bool) -> None: ...


def _coerce_headers_mapping(headers: Any) -> Mapping[object, object] | None:
    """
    Coerce "dict-like" header containers into a Mapping.

    Accepts plain dicts, httpx.Headers, HeaderCollection and iterables of pairs.
    """
    if not headers:
        return None
    if isinstance(headers, Mapping):
        return headers

    items = getattr(headers, "items", None)
    if callable(items):
        return dict(items())

    return dict(headers)


def header_value(headers: Any, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return default

    lower = name.lower()
    for key in (name, lower, lower.title()):
        if key in coerced:
            value = coerced.get(key)
            return default if value is None else str(value).strip()

    for key, value in coerced.items():
        if key is None:
            continue
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def has_header(headers: Any, name: str) -> bool:
    """Return True when ``name`` is present with a non-empty value."""
    return bool(header_value(headers, name))


class HeaderCollection(MutableMapping[str, str]):
    """
    Ordered, case-insensitive header table owned by an ApiClient.

    Every mutation asks the owner for a headers-only reset, so the values are
    re-applied to the transport the next time a request acquires it. Setting a
    header to ``None`` or ``""`` removes it.
    """

    def __init__(self, owner: HeaderOwner | None = None, initial: Mapping[str, str] | None = None):
        self._owner = owner
        self._lock = threading.Lock()
        # lowercase name -> (original name, value)
        self._entries: dict[str, tuple[str, str]] = {}
        self._applied: set[str] = set()
        for name, value in (initial or {}).items():
            self._store(name, value)

    def _store(self, name: str, value: str | None) -> bool:
        key = name.lower()
        with self._lock:
            if value is None or value == "":
                return self._entries.pop(key, None) is not None
            current = self._entries.get(key)
            if current == (name, value):
                return False
            self._entries[key] = (name, str(value))
            return True

    def _changed(self) -> None:
        if self._owner is not None:
            self._owner.request_client_reset(False)

    def __getitem__(self, name: str) -> str:
        with self._lock:
            return self._entries[name.lower()][1]

    def __setitem__(self, name: str, value: str | None) -> None:
        if not name:
            raise ValueError("Header name must not be empty")
        if self._store(name, value):
            self._changed()

    def __delitem__(self, name: str) -> None:
        with self._lock:
            del self._entries[name.lower()]
        self._changed()

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            return name.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.snapshot()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"HeaderCollection({self.snapshot()!r})"

    def get(self, name: str, default: str | None = None) -> str | None:  # type: ignore[override]
        with self._lock:
            entry = self._entries.get(name.lower())
        return entry[1] if entry is not None else default

    def remove(self, name: str) -> bool:
        """Remove ``name``; returns False when it was not set."""
        if self._store(name, None):
            self._changed()
            return True
        return False

    def clear(self) -> None:
        with self._lock:
            had_entries = bool(self._entries)
            self._entries.clear()
        if had_entries:
            self._changed()

    def snapshot(self) -> dict[str, str]:
        """Ordered copy of the current headers, using the caller's casing."""
        with self._lock:
            return dict(self._entries.values())

    def apply_to(self, transport: httpx.Client) -> None:
        """
        Replace the headers previously written to ``transport`` with the current set.

        Only called by the owning client while it holds exclusive access to the transport.
        """
        with self._lock:
            current = dict(self._entries.values())
            previous = set(self._applied)
            self._applied = {name.lower() for name in current}

        for name in previous:
            if name in transport.headers:
                del transport.headers[name]
        transport.headers.update(current)


__all__ = ["HeaderCollection", "HeaderOwner", "has_header", "header_value"]
