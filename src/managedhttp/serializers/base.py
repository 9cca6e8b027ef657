# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Serializer contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, Any


class ApiSerializer(ABC):
    """Encodes outbound request bodies and decodes inbound response bodies."""

    content_type: str = "application/octet-stream"
    encoding: str | None = None

    @property
    def content_type_header(self) -> str:
        """Value for the Content-Type header of a body produced by this serializer."""
        if self.encoding:
            return f"{self.content_type}; charset={self.encoding}"
        return self.content_type

    @abstractmethod
    def serialize(self, obj: Any) -> bytes:
        """Encode ``obj`` into a wire body."""

    @abstractmethod
    def deserialize(self, stream: IO[bytes], target_type: type) -> Any:
        """Decode the body in ``stream`` into an instance of ``target_type``."""


__all__ = ["ApiSerializer"]
