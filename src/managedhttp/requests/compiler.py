# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Compile request descriptors into wire requests.

Compilation is pure: it reads the descriptor, the serializer registry and a
snapshot of the client headers, and returns a new frozen WireRequest. Nothing
it receives is modified.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from ..errors import AmbiguousBodyError, InvalidPathError, MissingBodyTypeError
from ..http.headers import has_header
from ..http.models import BodyType, DataDirection, Methods, WireRequest
from ..serializers import SerializerResolver
from .formatting import form_body, format_value, is_collection, query_string
from .parameters import ParameterTarget, bindings_for

if TYPE_CHECKING:
    from .request import ApiRequest

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def validate_path(path: str | None) -> str:
    if not path or not (path.startswith("http") or path.startswith("//")):
        raise InvalidPathError(path)
    return path


def compile_url(request: ApiRequest) -> str:
    """Path plus the query string built from the request's query pairs."""
    path = request.path or ""
    query = query_string(request.query_pairs())
    if query and "?" in path:
        query = "&" + query[1:]
    return path + query


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    for existing in [key for key in headers if key.lower() == name.lower()]:
        del headers[existing]
    headers[name] = value


def header_pairs(request: ApiRequest) -> list[tuple[str, str]]:
    """Rendered ``(name, value)`` pairs of the request's header bindings."""
    pairs: list[tuple[str, str]] = []
    for binding in bindings_for(type(request), ParameterTarget.HEADER):
        value = binding.value(request)
        if value is None:
            continue
        parameter = binding.parameter
        if is_collection(value):
            rendered = parameter.separator.join(format_value(item, parameter) for item in value if item is not None)
        else:
            rendered = format_value(value, parameter)
        if rendered:
            pairs.append((binding.name, rendered))
    return pairs


def merge_headers(request: ApiRequest, client_headers: Mapping[str, str] | None) -> dict[str, str]:
    """Client headers, overlaid by header bindings, overlaid by request headers."""
    headers: dict[str, str] = {}
    for name, value in (client_headers or {}).items():
        _set_header(headers, name, value)
    for name, value in header_pairs(request):
        _set_header(headers, name, value)
    if request.custom_headers_created:
        for name, value in request.headers.items():
            if value is None or value == "":
                continue
            _set_header(headers, name, str(value))
    return headers


def _serialized_property(request: ApiRequest):
    bodies = bindings_for(type(request), ParameterTarget.BODY)
    if not bodies:
        raise MissingBodyTypeError(f"{type(request).__name__} uses SERIALIZED_PROPERTY but declares no RequestBody member")
    if len(bodies) > 1:
        names = ", ".join(binding.attr for binding in bodies)
        raise AmbiguousBodyError(f"{type(request).__name__} declares more than one RequestBody member: {names}")
    return bodies[0].value(request)


def materialize_body(request: ApiRequest, serializer: SerializerResolver) -> tuple[bytes, str | None]:
    """Return ``(body, content_type)`` for the request's body policy."""
    body_type = request.body_type

    if body_type is BodyType.ENCODED:
        return form_body(request.form_pairs()), FORM_CONTENT_TYPE

    if body_type is BodyType.SERIALIZED:
        outbound = serializer.resolve(type(request), DataDirection.OUT)
        return outbound.serialize(request), outbound.content_type_header

    if body_type is BodyType.SERIALIZED_PROPERTY:
        value = _serialized_property(request)
        outbound = serializer.resolve(type(value), DataDirection.OUT)
        return outbound.serialize(value), outbound.content_type_header

    if body_type is BodyType.CUSTOM:
        content = request.body_content
        if content is None:
            content = b""
        if isinstance(content, str):
            content = content.encode("utf-8")
        return bytes(content), request.body_content_type

    raise MissingBodyTypeError(f"{type(request).__name__} uses {request.method} but has no body_type set")


def compile_request(
    request: ApiRequest,
    serializer: SerializerResolver,
    client_headers: Mapping[str, str] | None = None,
) -> WireRequest:
    """Turn ``request`` into a WireRequest."""
    validate_path(request.path)
    method = request.method if isinstance(request.method, Methods) else Methods(str(request.method).upper())

    url = compile_url(request)
    if url.startswith("//"):
        url = f"https:{url}"

    headers = merge_headers(request, client_headers)

    body: bytes | None = None
    if method.carries_body:
        body, content_type = materialize_body(request, serializer)
        if content_type and not has_header(headers, "Content-Type"):
            headers["Content-Type"] = content_type

    if not has_header(headers, "Accept"):
        response_type = request.response_type or type(request)
        headers["Accept"] = serializer.resolve(response_type, DataDirection.IN).content_type

    return WireRequest(method=method.value, url=url, headers=headers, body=body)


__all__ = [
    "FORM_CONTENT_TYPE",
    "compile_request",
    "compile_url",
    "header_pairs",
    "materialize_body",
    "merge_headers",
    "validate_path",
]
