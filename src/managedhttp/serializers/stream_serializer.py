# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Inbound-only serializers that hand back the raw response body."""

from __future__ import annotations

import io
from typing import IO, Any

from .base import ApiSerializer


class StreamSerializer(ApiSerializer):
    """Returns the body as bytes, a bytearray or a fresh in-memory stream."""

    content_type = "*/*"

    def serialize(self, obj: Any) -> bytes:
        raise NotImplementedError("StreamSerializer is only registered for inbound data")

    def deserialize(self, stream: IO[bytes], target_type: type) -> Any:
        data = stream.read()
        if target_type is bytes:
            return bytes(data)
        if target_type is bytearray:
            return bytearray(data)
        return io.BytesIO(data)


class TextSerializer(ApiSerializer):
    """Returns the body decoded as text."""

    content_type = "text/plain"

    def __init__(self, *, encoding: str = "utf-8"):
        self.encoding = encoding

    def serialize(self, obj: Any) -> bytes:
        return str(obj).encode(self.encoding)

    def deserialize(self, stream: IO[bytes], target_type: type) -> Any:
        return stream.read().decode(self.encoding, errors="replace")


__all__ = ["StreamSerializer", "TextSerializer"]
