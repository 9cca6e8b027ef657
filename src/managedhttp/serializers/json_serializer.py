# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON serializer (fallback default for every type)."""

from __future__ import annotations

import base64
import dataclasses
import json
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import IO, Any
from uuid import UUID

from .base import ApiSerializer


def to_jsonable(obj: Any) -> Any:
    """``json.dumps`` default hook for the types request models commonly carry."""
    to_payload = getattr(obj, "to_payload", None)
    if callable(to_payload):
        return to_payload()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, (Decimal, UUID)):
        return str(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def coerce_to(data: Any, target_type: type | None) -> Any:
    """Shape decoded JSON into ``target_type`` where a conversion is known."""
    if target_type is None or target_type is Any or target_type is object:
        return data
    if not isinstance(target_type, type):
        return data
    if isinstance(data, target_type):
        return data
    from_mapping = getattr(target_type, "from_mapping", None)
    if callable(from_mapping) and isinstance(data, dict):
        return from_mapping(data)
    if dataclasses.is_dataclass(target_type) and isinstance(data, dict):
        names = {f.name for f in dataclasses.fields(target_type) if f.init}
        return target_type(**{k: v for k, v in data.items() if k in names})
    return data


class JsonSerializer(ApiSerializer):
    content_type = "application/json"

    def __init__(self, *, encoding: str = "utf-8", indent: int | None = None, sort_keys: bool = False):
        self.encoding = encoding
        self.indent = indent
        self.sort_keys = sort_keys

    def serialize(self, obj: Any) -> bytes:
        text = json.dumps(
            obj,
            default=to_jsonable,
            ensure_ascii=False,
            indent=self.indent,
            sort_keys=self.sort_keys,
        )
        return text.encode(self.encoding)

    def deserialize(self, stream: IO[bytes], target_type: type) -> Any:
        raw = stream.read()
        if not raw:
            return None
        data = json.loads(raw.decode(self.encoding) if isinstance(raw, bytes) else raw)
        return coerce_to(data, target_type)


__all__ = ["JsonSerializer", "coerce_to", "to_jsonable"]
