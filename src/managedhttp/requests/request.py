# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request descriptors."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..http.models import BodyType, Methods, WireRequest
from ..serializers import SerializerResolver
from .compiler import compile_request, compile_url
from .formatting import expand_pairs
from .parameters import ParameterTarget, binding_table, bindings_for

if TYPE_CHECKING:
    from ..client import ApiClient


class ApiRequest:
    """
    Declarative description of one HTTP request.

    Subclasses set ``path`` (absolute, including scheme and host) and, as
    needed, ``method``, ``body_type``, ``require_auth`` and ``response_type``,
    and declare their parameters with QueryParameter, HeaderParameter,
    FormParameter and RequestBody.
    """

    path: str | None = None
    method: Methods = Methods.GET
    body_type: BodyType | None = None
    require_auth: bool = False
    # type the response is decoded into; also picks the Accept header
    response_type: type | None = None

    # used only with BodyType.CUSTOM
    body_content: bytes | str | None = None
    body_content_type: str | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Request-scoped headers; they override client headers with the same name."""
        headers = self.__dict__.get("_headers")
        if headers is None:
            headers = self.__dict__["_headers"] = {}
        return headers

    @property
    def custom_headers_created(self) -> bool:
        return self.__dict__.get("_headers") is not None

    def with_header(self, name: str, value: str) -> ApiRequest:
        self.headers[name] = value
        return self

    def with_auth(self, value: str) -> ApiRequest:
        return self.with_header("Authorization", value)

    def additional_queries(self) -> Iterable[tuple[str, str]]:
        """Extra query pairs appended after the bound parameters."""
        return ()

    def query_pairs(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for binding in bindings_for(type(self), ParameterTarget.QUERY):
            pairs.extend(expand_pairs(binding.name, binding.value(self), binding.parameter))
        pairs.extend((str(key), str(value)) for key, value in (self.additional_queries() or ()))
        return pairs

    def form_pairs(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for binding in bindings_for(type(self), ParameterTarget.FORM):
            pairs.extend(expand_pairs(binding.name, binding.value(self), binding.parameter))
        return pairs

    def on_request_executing(self, client: ApiClient) -> None:
        """Runs before validation; may adjust headers (signing, timestamps)."""

    def to_payload(self) -> dict[str, Any]:
        """Mapping used when the whole request is serialized as the body."""
        payload: dict[str, Any] = {}
        for binding in binding_table(type(self)):
            if binding.target is ParameterTarget.HEADER:
                continue
            value = binding.value(self)
            if value is not None:
                payload[binding.attr] = value
        for name, value in vars(self).items():
            if name.startswith("_") or value is None:
                continue
            payload.setdefault(name, value)
        return payload

    @property
    def full_url(self) -> str:
        return compile_url(self)

    def build(self, serializer: SerializerResolver | ApiClient, client_headers: dict[str, str] | None = None) -> WireRequest:
        """Compile this request against a serializer resolver or a client."""
        if isinstance(serializer, SerializerResolver):
            return compile_request(self, serializer, client_headers)
        return serializer.compile(self)

    def __repr__(self) -> str:
        method = self.method.value if isinstance(self.method, Methods) else self.method
        return f"{type(self).__name__}({method} {self.path!r})"


class ApiFileRequest(ApiRequest):
    """Request whose response body is written to ``destination`` instead of being decoded."""

    destination: str | Path | None = None
    # "wb" replaces an existing file, "ab" appends to it
    file_mode: str = "wb"
    # chunk size; None uses the client's download_buffer_bytes setting
    buffer_size: int | None = None


__all__ = ["ApiFileRequest", "ApiRequest"]
