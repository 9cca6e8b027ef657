# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP building blocks: headers, wire models, transport construction and locking."""

from .adapters import RecordingTransport, TransportFactory
from .headers import HeaderCollection, has_header, header_value
from .locking import ReadLease, ReadWriteLock
from .models import BodyType, DataDirection, Headers, Methods, ResetLevel, WireRequest
from .transport import HandlerFactory, create_default_transport

__all__ = [
    "BodyType",
    "DataDirection",
    "HandlerFactory",
    "HeaderCollection",
    "Headers",
    "Methods",
    "ReadLease",
    "ReadWriteLock",
    "RecordingTransport",
    "ResetLevel",
    "TransportFactory",
    "WireRequest",
    "create_default_transport",
    "has_header",
    "header_value",
]
