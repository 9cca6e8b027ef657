# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Value stringification and query/form encoding."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from enum import Enum
from typing import Any
from urllib.parse import quote, urlencode

from .parameters import CollectionMode, EnumMode, Parameter

# RFC 3986 query characters left readable; '&', '=', '+', '#' and '%' are always escaped
_QUERY_SAFE = ":@/?!$'()*,;"
_KEY_SAFE = _QUERY_SAFE + "[]"


def format_enum(value: Enum, mode: EnumMode) -> str:
    if mode is EnumMode.LOWER_NAME:
        return value.name.lower()
    if mode is EnumMode.VALUE:
        raw = value.value
        return format_scalar(raw, None) if not isinstance(raw, Enum) else str(raw)
    return value.name


def format_scalar(value: Any, format_spec: str | None) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if format_spec:
        return format(value, format_spec)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def format_value(value: Any, parameter: Parameter) -> str:
    if isinstance(value, Enum):
        return format_enum(value, parameter.enum)
    return format_scalar(value, parameter.format_spec)


def is_collection(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray, Mapping, Enum))


def expand_pairs(name: str, value: Any, parameter: Parameter) -> list[tuple[str, str]]:
    """Turn one bound value into key/value pairs following the parameter's collection mode."""
    if value is None:
        return []
    if not is_collection(value):
        return [(name, format_value(value, parameter))]

    items = [format_value(item, parameter) for item in value if item is not None]
    if not items:
        return []

    mode = parameter.collection
    if mode is CollectionMode.CONCATENATED:
        return [(name, parameter.separator.join(items))]
    if mode is CollectionMode.ORDERED:
        return [(f"{name}[{index}]", item) for index, item in enumerate(items)]
    if mode is CollectionMode.UNORDERED:
        return [(f"{name}[]", item) for item in items]
    return [(name, item) for item in items]


def query_string(pairs: Iterable[tuple[str, str]]) -> str:
    """Build ``?k=v&k2=v2`` from pairs; empty input yields an empty string."""
    encoded = "&".join(f"{quote(str(key), safe=_KEY_SAFE)}={quote(str(value), safe=_QUERY_SAFE)}" for key, value in pairs)
    return f"?{encoded}" if encoded else ""


def form_body(pairs: Iterable[tuple[str, str]]) -> bytes:
    """application/x-www-form-urlencoded body for ``pairs``."""
    return urlencode(list(pairs)).encode("ascii")


__all__ = [
    "expand_pairs",
    "form_body",
    "format_enum",
    "format_scalar",
    "format_value",
    "is_collection",
    "query_string",
]
