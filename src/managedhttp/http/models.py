# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request data models and enums shared by the compiler and the client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag, IntEnum
from types import MappingProxyType
from typing import Mapping

Headers = dict[str, str]


class Methods(str, Enum):
    """Request verbs understood by the compiler."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    TRACE = "TRACE"

    @property
    def carries_body(self) -> bool:
        return self in _BODY_METHODS


_BODY_METHODS = frozenset({Methods.POST, Methods.PUT, Methods.PATCH, Methods.DELETE})


class BodyType(Enum):
    """How a request body is produced."""

    ENCODED = "encoded"
    SERIALIZED = "serialized"
    SERIALIZED_PROPERTY = "serialized_property"
    CUSTOM = "custom"


class DataDirection(Flag):
    """Direction a serializer is registered for."""

    IN = 1
    OUT = 2
    ALL = IN | OUT


class ResetLevel(IntEnum):
    """Pending transport reconfiguration, ordered by severity."""

    CLEAN = 0
    HEADERS = 1
    FULL = 2


def _frozen_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


@dataclass(frozen=True)
class WireRequest:
    """Fully compiled request, ready to be handed to the transport."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _frozen_headers(self.headers))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WireRequest):
            return NotImplemented
        return (self.method, self.url, dict(self.headers), self.body) == (
            other.method,
            other.url,
            dict(other.headers),
            other.body,
        )

    def __hash__(self) -> int:
        return hash((self.method, self.url, tuple(self.headers.items()), self.body))

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        lower = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lower:
                return value
        return default


__all__ = [
    "BodyType",
    "DataDirection",
    "Headers",
    "Methods",
    "ResetLevel",
    "WireRequest",
]
