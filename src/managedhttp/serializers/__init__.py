# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Serializer exports and built-in registrations."""

import io
import xml.etree.ElementTree as ET

from ..http.models import DataDirection
from .base import ApiSerializer
from .json_serializer import JsonSerializer, coerce_to, to_jsonable
from .resolver import SerializerResolver
from .stream_serializer import StreamSerializer, TextSerializer
from .xml_serializer import XmlSerializer


def register_builtin_serializers() -> None:
    """Register the serializers every client understands without configuration."""
    xml = XmlSerializer()
    SerializerResolver.register(ET.Element, xml)
    SerializerResolver.register(ET.ElementTree, xml)

    raw = StreamSerializer()
    for raw_type in (bytes, bytearray, io.BytesIO, io.IOBase):
        SerializerResolver.register(raw_type, raw, DataDirection.IN)

    SerializerResolver.register(str, TextSerializer(), DataDirection.IN)


register_builtin_serializers()

__all__ = [
    "ApiSerializer",
    "JsonSerializer",
    "SerializerResolver",
    "StreamSerializer",
    "TextSerializer",
    "XmlSerializer",
    "coerce_to",
    "register_builtin_serializers",
    "to_jsonable",
]
