# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Declarative parameter bindings for request classes.

Bindings are descriptors declared on ApiRequest subclasses, either as plain
class attributes holding a default value::

    class SearchRequest(ApiRequest):
        path = "https://api.example.com/search"
        term = QueryParameter("q")
        tags = QueryParameter("tag", collection=CollectionMode.UNORDERED, default=())

or as decorators over a computed getter::

        @QueryParameter("sort", enum=EnumMode.LOWER_NAME)
        def sort_order(self):
            return self._order

The binding table of a class is discovered once and cached per class.
"""

from __future__ import annotations

import threading
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar


class ParameterTarget(Enum):
    QUERY = "query"
    HEADER = "header"
    FORM = "form"
    BODY = "body"


class CollectionMode(Enum):
    """How a collection value is laid out in a query string or form body."""

    # key=v1,v2,v3
    CONCATENATED = "concatenated"
    # key[0]=v1&key[1]=v2
    ORDERED = "ordered"
    # key[]=v1&key[]=v2
    UNORDERED = "unordered"
    # key=v1&key=v2
    RECURSIVE = "recursive"


class EnumMode(Enum):
    """How an Enum member is written."""

    NAME = "name"
    LOWER_NAME = "lower_name"
    VALUE = "value"


class Parameter:
    """Base descriptor binding a request attribute to part of the outgoing message."""

    target: ClassVar[ParameterTarget]

    def __init__(
        self,
        name: str | None = None,
        *,
        collection: CollectionMode = CollectionMode.RECURSIVE,
        separator: str = ",",
        enum: EnumMode = EnumMode.NAME,
        format_spec: str | None = None,
        default: Any = None,
    ):
        self.name = name
        self.collection = collection
        self.separator = separator
        self.enum = enum
        self.format_spec = format_spec
        self.default = default
        self.attr: str | None = None
        self.fget: Callable[[Any], Any] | None = None

    def __call__(self, fget: Callable[[Any], Any]) -> Parameter:
        self.fget = fget
        self.__doc__ = fget.__doc__
        return self

    def __set_name__(self, owner: type, attr: str) -> None:
        self.attr = attr
        if self.name is None:
            self.name = attr

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        if self.fget is not None:
            return self.fget(instance)
        return instance.__dict__.get(self.attr, self.default)

    def __set__(self, instance: Any, value: Any) -> None:
        if self.fget is not None:
            raise AttributeError(f"{self.attr} is computed and cannot be assigned")
        instance.__dict__[self.attr] = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, collection={self.collection.name}, enum={self.enum.name})"


class QueryParameter(Parameter):
    target = ParameterTarget.QUERY


class HeaderParameter(Parameter):
    target = ParameterTarget.HEADER


class FormParameter(Parameter):
    target = ParameterTarget.FORM


class RequestBody(Parameter):
    """Marks the single member serialized as the body under BodyType.SERIALIZED_PROPERTY."""

    target = ParameterTarget.BODY


@dataclass(frozen=True)
class Binding:
    attr: str
    parameter: Parameter

    @property
    def name(self) -> str:
        return self.parameter.name or self.attr

    @property
    def target(self) -> ParameterTarget:
        return self.parameter.target

    def value(self, instance: Any) -> Any:
        return getattr(instance, self.attr)


# weak keys: request classes created at runtime stay collectable
_tables: weakref.WeakKeyDictionary[type, tuple[Binding, ...]] = weakref.WeakKeyDictionary()
_tables_lock = threading.Lock()


def binding_table(cls: type) -> tuple[Binding, ...]:
    """
    Ordered bindings of ``cls``: base-class members first, in declaration order.

    A subclass redefining a member replaces the base binding in its original
    position; redefining it as a plain attribute removes the binding.
    """
    with _tables_lock:
        table = _tables.get(cls)
    if table is not None:
        return table

    members: dict[str, Binding] = {}
    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            if isinstance(value, Parameter):
                members[attr] = Binding(attr, value)
            elif attr in members:
                del members[attr]
    table = tuple(members.values())
    with _tables_lock:
        return _tables.setdefault(cls, table)


def bindings_for(cls: type, target: ParameterTarget) -> list[Binding]:
    return [binding for binding in binding_table(cls) if binding.target is target]


__all__ = [
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
    "bindings_for",
]
