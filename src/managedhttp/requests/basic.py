# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Ad-hoc requests built from a URL instead of a subclass."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import unquote, urlsplit

from ..http.models import Methods
from .request import ApiFileRequest, ApiRequest

DEFAULT_FILE_NAME = "download"


class BasicApiRequest(ApiRequest):
    """Request to a fixed path with an explicit list of query pairs."""

    def __init__(self, path: str, method: Methods = Methods.GET, queries: Iterable[tuple[str, str]] | None = None):
        self.path = path
        self.method = method
        self.queries: list[tuple[str, str]] = list(queries or [])

    def add_query(self, key: str, value: object) -> BasicApiRequest:
        self.queries.append((key, str(value)))
        return self

    def query_pairs(self) -> list[tuple[str, str]]:
        return list(self.queries)

    def to_payload(self) -> dict[str, object]:
        return dict(self.queries)


def file_name_from_url(url: str) -> str:
    name = os.path.basename(unquote(urlsplit(url).path))
    return name or DEFAULT_FILE_NAME


class BasicApiFileRequest(ApiFileRequest):
    """
    Download ``path`` to ``destination``.

    When ``destination`` is an existing directory the file is named after the
    last segment of the URL path (or ``file_name`` when given).
    """

    def __init__(self, path: str, destination: str | Path, *, file_name: str | None = None, file_mode: str = "wb"):
        self.path = path
        target = Path(destination)
        if target.is_dir():
            target = target / (file_name or file_name_from_url(path))
        self.destination = target
        self.file_mode = file_mode


__all__ = ["BasicApiFileRequest", "BasicApiRequest", "file_name_from_url"]
