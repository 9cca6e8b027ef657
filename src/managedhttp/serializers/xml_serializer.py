# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""XML serializer for ElementTree documents."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import IO, Any

from .base import ApiSerializer


class XmlSerializer(ApiSerializer):
    content_type = "application/xml"

    def __init__(self, *, encoding: str = "utf-8", xml_declaration: bool = True):
        self.encoding = encoding
        self.xml_declaration = xml_declaration

    def serialize(self, obj: Any) -> bytes:
        if isinstance(obj, ET.ElementTree):
            obj = obj.getroot()
        if not isinstance(obj, ET.Element):
            raise TypeError(f"XmlSerializer can only encode ElementTree elements, not {type(obj).__name__}")
        return ET.tostring(obj, encoding=self.encoding, xml_declaration=self.xml_declaration)

    def deserialize(self, stream: IO[bytes], target_type: type) -> Any:
        tree = ET.parse(stream)
        if target_type is ET.ElementTree:
            return tree
        return tree.getroot()


__all__ = ["XmlSerializer"]
