# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum

import httpx


class ApiClientError(Exception):
    """Base class for errors raised by managedhttp itself."""


class InvalidPathError(ApiClientError):
    """The request path does not start with a URI scheme (http, https or //)."""

    def __init__(self, path: str | None):
        self.path = path
        super().__init__(f"The request path is invalid (it must start with http, https or //): {path!r}")


class MissingBodyTypeError(ApiClientError):
    """A body-carrying method was used without a body policy (or without a body member)."""


class AmbiguousBodyError(ApiClientError):
    """More than one member was marked as the request body."""


class AuthRequiredError(ApiClientError):
    """The request requires an Authorization header and none was found."""

    def __init__(self, message: str = "Authorization header was expected, but not found (in request or client)"):
        super().__init__(message)


class UnsupportedTypeError(ApiClientError):
    """No serializer could be resolved for a type and direction."""

    def __init__(self, target_type: type, direction: object):
        self.target_type = target_type
        self.direction = direction
        name = getattr(target_type, "__qualname__", repr(target_type))
        super().__init__(f"No serializer registered for {name} ({direction})")


class NullRequestError(ApiClientError):
    """The request was empty or has nowhere to put its result."""

    def __init__(self, message: str = "The request provided was null or has no destination"):
        super().__init__(message)


class HttpStatusError(ApiClientError):
    """The server answered with a non-success status code."""

    def __init__(self, status_code: int, reason: str = "", url: str | None = None):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        detail = f"{status_code} {reason}".strip()
        super().__init__(f"Response status code does not indicate success: {detail}" + (f" ({url})" if url else ""))


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    CANCELLED = "CANCELLED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map transport (httpx/socket/ssl) exceptions to an ErrorCategory.

    Used for log messages only; callers always receive the original exception.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)):
        return ErrorCategory.SSL_ERROR

    cause = exc.__cause__ or exc.__context__
    if isinstance(cause, (socket.gaierror, socket.herror)) or isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, KeyboardInterrupt):
        return ErrorCategory.CANCELLED

    return ErrorCategory.UNKNOWN_ERROR


__all__ = [
    "AmbiguousBodyError",
    "ApiClientError",
    "AuthRequiredError",
    "ErrorCategory",
    "HttpStatusError",
    "InvalidPathError",
    "MissingBodyTypeError",
    "NullRequestError",
    "UnsupportedTypeError",
    "categorize_exception",
]
