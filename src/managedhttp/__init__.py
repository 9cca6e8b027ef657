# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
managedhttp package entrypoint.

A managed HTTP client: one long-lived ApiClient wraps a pooled httpx.Client,
rebuilds it lazily and thread-safely when headers or the transport handler
change, and performs declarative ApiRequest descriptors whose query, header
and body parameters are bound with descriptors and compiled into wire
requests. Bodies are encoded and decoded through a pluggable serializer
registry.
"""

from .client import ApiClient, ClientHooks
from .config import ClientSettings, configure_defaults, load_client_settings
from .errors import (
    AmbiguousBodyError,
    ApiClientError,
    AuthRequiredError,
    HttpStatusError,
    InvalidPathError,
    MissingBodyTypeError,
    NullRequestError,
    UnsupportedTypeError,
)
from .http import BodyType, DataDirection, HeaderCollection, Methods, ResetLevel, WireRequest
from .log import setup_logging
from .requests import (
    ApiFileRequest,
    ApiRequest,
    BasicApiFileRequest,
    BasicApiRequest,
    CollectionMode,
    EnumMode,
    FormParameter,
    HeaderParameter,
    QueryParameter,
    RequestBody,
    compile_request,
)
from .serializers import ApiSerializer, JsonSerializer, SerializerResolver, XmlSerializer
from .version import __version__

__all__ = [
    "AmbiguousBodyError",
    "ApiClient",
    "ApiClientError",
    "ApiFileRequest",
    "ApiRequest",
    "ApiSerializer",
    "AuthRequiredError",
    "BasicApiFileRequest",
    "BasicApiRequest",
    "BodyType",
    "ClientHooks",
    "ClientSettings",
    "CollectionMode",
    "DataDirection",
    "EnumMode",
    "FormParameter",
    "HeaderCollection",
    "HeaderParameter",
    "HttpStatusError",
    "InvalidPathError",
    "JsonSerializer",
    "Methods",
    "MissingBodyTypeError",
    "NullRequestError",
    "QueryParameter",
    "RequestBody",
    "ResetLevel",
    "SerializerResolver",
    "UnsupportedTypeError",
    "WireRequest",
    "XmlSerializer",
    "__version__",
    "compile_request",
    "configure_defaults",
    "load_client_settings",
    "setup_logging",
]
