# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Serializer registry and per-client resolution."""

from __future__ import annotations

import logging
import threading
from typing import Callable, ClassVar, TypeVar

from ..errors import UnsupportedTypeError
from ..http.models import DataDirection
from .base import ApiSerializer
from .json_serializer import JsonSerializer

logger = logging.getLogger(__name__)

SerializerT = TypeVar("SerializerT", bound=ApiSerializer)

_UNSET = object()


class SerializerResolver:
    """
    Resolve the serializer for a payload type and direction.

    Type registrations are process-wide and keyed by ``(type, direction)``;
    a direction-specific entry wins over an ``ALL`` entry for the same type.
    Types without a registration (including their base classes) fall back to
    the resolver's ``default`` serializer. Resolution happens on every call, so
    registrations made after a client was created are still honoured.
    """

    _registry: ClassVar[dict[tuple[type, DataDirection], ApiSerializer]] = {}
    _registry_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, default: ApiSerializer | None | object = _UNSET):
        self.default: ApiSerializer | None = JsonSerializer() if default is _UNSET else default  # type: ignore[assignment]

    @classmethod
    def register(
        cls,
        target_type: type,
        serializer: ApiSerializer,
        direction: DataDirection = DataDirection.ALL,
    ) -> None:
        """Register ``serializer`` for ``target_type`` in ``direction`` (IN, OUT or ALL)."""
        if direction not in (DataDirection.IN, DataDirection.OUT, DataDirection.ALL):
            raise ValueError(f"Unsupported serializer direction: {direction!r}")
        with cls._registry_lock:
            cls._registry[(target_type, direction)] = serializer
        logger.debug("Registered %s for %s (%s)", type(serializer).__name__, target_type, direction)

    @classmethod
    def unregister(cls, target_type: type, direction: DataDirection = DataDirection.ALL) -> bool:
        with cls._registry_lock:
            return cls._registry.pop((target_type, direction), None) is not None

    @classmethod
    def registered(cls, target_type: type, direction: DataDirection) -> ApiSerializer | None:
        """Return the registration for ``target_type`` (exact type, no fallback)."""
        with cls._registry_lock:
            return cls._registry.get((target_type, direction)) or cls._registry.get((target_type, DataDirection.ALL))

    def resolve(self, target_type: type, direction: DataDirection) -> ApiSerializer:
        if direction not in (DataDirection.IN, DataDirection.OUT):
            raise ValueError("resolve() needs a single direction (IN or OUT)")

        for candidate in getattr(target_type, "__mro__", (target_type,)):
            if candidate is object:
                break
            serializer = self.registered(candidate, direction)
            if serializer is not None:
                return serializer

        if self.default is None:
            raise UnsupportedTypeError(target_type, direction)
        return self.default

    def configure(self, serializer_type: type[SerializerT], callback: Callable[[SerializerT], None]) -> bool:
        """
        Apply ``callback`` to the default serializer when it is a ``serializer_type``.

        Returns False when the default serializer is of another type.
        """
        if isinstance(self.default, serializer_type):
            callback(self.default)
            return True
        return False


__all__ = ["SerializerResolver"]
