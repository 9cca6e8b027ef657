# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request descriptors, parameter bindings and the request compiler."""

from .basic import BasicApiFileRequest, BasicApiRequest
from .compiler import compile_request, compile_url
from .parameters import (
    Binding,
    CollectionMode,
    EnumMode,
    FormParameter,
    HeaderParameter,
    Parameter,
    ParameterTarget,
    QueryParameter,
    RequestBody,
    binding_table,
)
from .request import ApiFileRequest, ApiRequest

__all__ = [
    "ApiFileRequest",
    "ApiRequest",
    "BasicApiFileRequest",
    "BasicApiRequest",
    "Binding",
    "CollectionMode",
    "EnumMode",
    "FormParameter",
    "HeaderParameter",
    "Parameter",
    "ParameterTarget",
    "QueryParameter",
    "RequestBody",
    "binding_table",
    "compile_request",
    "compile_url",
]
