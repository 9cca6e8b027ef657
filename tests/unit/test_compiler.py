# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import gc
import json
import weakref
from dataclasses import dataclass
from enum import Enum

import pytest

from managedhttp.errors import AmbiguousBodyError, InvalidPathError, MissingBodyTypeError
from managedhttp.http.models import BodyType, Methods
from managedhttp.requests import (
    ApiRequest,
    BasicApiRequest,
    CollectionMode,
    EnumMode,
    FormParameter,
    HeaderParameter,
    QueryParameter,
    RequestBody,
    binding_table,
)
from managedhttp.requests.compiler import compile_request, compile_url
from managedhttp.serializers import SerializerResolver

DATASET = ["a", "b", "c"]


class Shade(Enum):
    Red = 1
    Blue = 2
    Green = 512


class CollectionRequest(ApiRequest):
    path = "https://example.com/collections"

    concatenated = QueryParameter("data", collection=CollectionMode.CONCATENATED, separator=":", default=DATASET)
    ordered = QueryParameter("data", collection=CollectionMode.ORDERED, default=DATASET)
    unordered = QueryParameter("data", collection=CollectionMode.UNORDERED, default=DATASET)
    recursive = QueryParameter("data", collection=CollectionMode.RECURSIVE, default=DATASET)


class EnumRequest(ApiRequest):
    path = "https://example.com/enums"

    symbolic = QueryParameter("enum", enum=EnumMode.NAME, default=Shade.Red)
    lowered = QueryParameter("enum", enum=EnumMode.LOWER_NAME, default=Shade.Blue)
    numeric = QueryParameter("enum", enum=EnumMode.VALUE, default=Shade.Green)


class SearchRequest(ApiRequest):
    path = "https://example.com/search"

    term = QueryParameter("q")
    page = QueryParameter("page", default=1)
    exact = QueryParameter("exact", default=False)
    trace = HeaderParameter("X-Trace")

    def __init__(self, term=None):
        self.term = term

    def additional_queries(self):
        return [("a", "x")]


@dataclass
class Profile:
    name: str
    age: int


class FormLogin(ApiRequest):
    path = "https://example.com/login"
    method = Methods.POST
    body_type = BodyType.ENCODED

    username = FormParameter("user", default="alice")
    password = FormParameter("pass", default="p&ss word")
    scopes = FormParameter("scope", collection=CollectionMode.CONCATENATED, separator=" ", default=("read", "write"))


class UpdateProfile(ApiRequest):
    path = "https://example.com/profile"
    method = Methods.PUT
    body_type = BodyType.SERIALIZED_PROPERTY

    profile = RequestBody(default=Profile("bob", 42))


class TwoBodies(UpdateProfile):
    other = RequestBody(default=Profile("eve", 1))


class NoBodyMember(ApiRequest):
    path = "https://example.com/profile"
    method = Methods.PATCH
    body_type = BodyType.SERIALIZED_PROPERTY


class CreateItem(ApiRequest):
    path = "https://example.com/items"
    method = Methods.POST
    body_type = BodyType.SERIALIZED

    name = QueryParameter("name", default="widget")
    secret = HeaderParameter("X-Secret", default="s")

    def __init__(self, quantity=3):
        self.quantity = quantity


class RawUpload(ApiRequest):
    path = "https://example.com/raw"
    method = Methods.POST
    body_type = BodyType.CUSTOM
    body_content = "hello"
    body_content_type = "text/plain"


@pytest.fixture
def resolver():
    return SerializerResolver()


def test_all_collection_modes_in_one_query(resolver):
    url = compile_request(CollectionRequest(), resolver).url
    assert "data=a:b:c" in url
    assert "data[0]=a&data[1]=b&data[2]=c" in url
    assert "data[]=a&data[]=b&data[]=c" in url
    assert "data=a&data=b&data=c" in url


def test_enum_modes(resolver):
    url = compile_request(EnumRequest(), resolver).url
    assert url == "https://example.com/enums?enum=Red&enum=blue&enum=512"


def test_query_skips_none_and_appends_additional_queries():
    assert compile_url(SearchRequest()) == "https://example.com/search?page=1&exact=false&a=x"
    assert compile_url(SearchRequest("cats & dogs")) == "https://example.com/search?q=cats%20%26%20dogs&page=1&exact=false&a=x"


def test_empty_collection_emits_nothing():
    request = CollectionRequest()
    request.concatenated = []
    request.ordered = [None]
    assert "data=a:b:c" not in request.full_url
    assert "data[0]" not in request.full_url


def test_existing_query_in_path_is_extended():
    request = BasicApiRequest("https://example.com/x?fixed=1")
    request.add_query("extra", "2")
    assert compile_url(request) == "https://example.com/x?fixed=1&extra=2"


@pytest.mark.parametrize("path", [None, "", "example.com/x", "/relative", "ftp://example.com"])
def test_invalid_paths_are_rejected(resolver, path):
    request = BasicApiRequest(path)
    with pytest.raises(InvalidPathError):
        compile_request(request, resolver)


def test_scheme_relative_path_gets_https(resolver):
    wire = compile_request(BasicApiRequest("//example.com/x"), resolver)
    assert wire.url == "https://example.com/x"


def test_request_header_overrides_client_header(resolver):
    request = SearchRequest().with_header("x-api-key", "request")
    wire = compile_request(request, resolver, {"X-Api-Key": "client", "X-Other": "1"})
    assert wire.header("X-API-KEY") == "request"
    assert wire.header("x-other") == "1"


def test_header_bindings_sit_between_client_and_request_headers(resolver):
    request = SearchRequest()
    request.trace = "bound"
    assert compile_request(request, resolver, {"X-Trace": "client"}).header("x-trace") == "bound"
    request.with_header("X-Trace", "scoped")
    assert compile_request(request, resolver, {"X-Trace": "client"}).header("x-trace") == "scoped"


def test_compile_is_pure(resolver):
    request = CreateItem()
    client_headers = {"User-Agent": "tests"}
    first = compile_request(request, resolver, client_headers)
    second = compile_request(request, resolver, client_headers)
    assert first == second
    assert first.body == second.body
    assert client_headers == {"User-Agent": "tests"}
    assert not request.custom_headers_created


def test_body_method_without_policy_fails(resolver):
    request = BasicApiRequest("https://example.com/x", Methods.POST)
    with pytest.raises(MissingBodyTypeError):
        compile_request(request, resolver)


def test_get_ignores_body_policy(resolver):
    request = FormLogin()
    request.method = Methods.GET
    wire = compile_request(request, resolver)
    assert wire.body is None
    assert wire.header("content-type") is None


def test_form_body(resolver):
    wire = compile_request(FormLogin(), resolver)
    assert wire.method == "POST"
    assert wire.body == b"user=alice&pass=p%26ss+word&scope=read+write"
    assert wire.header("Content-Type") == "application/x-www-form-urlencoded"


def test_serialized_property_body(resolver):
    wire = compile_request(UpdateProfile(), resolver)
    assert json.loads(wire.body) == {"name": "bob", "age": 42}
    assert wire.header("content-type") == "application/json; charset=utf-8"


def test_serialized_property_requires_exactly_one_member(resolver):
    with pytest.raises(MissingBodyTypeError):
        compile_request(NoBodyMember(), resolver)
    with pytest.raises(AmbiguousBodyError):
        compile_request(TwoBodies(), resolver)


def test_serialized_request_body_excludes_headers(resolver):
    wire = compile_request(CreateItem(), resolver)
    assert json.loads(wire.body) == {"name": "widget", "quantity": 3}
    assert wire.header("X-Secret") == "s"
    assert wire.url == "https://example.com/items?name=widget"


def test_custom_body(resolver):
    wire = compile_request(RawUpload(), resolver)
    assert wire.body == b"hello"
    assert wire.header("Content-Type") == "text/plain"


def test_accept_header_follows_response_type(resolver):
    request = BasicApiRequest("https://example.com/x")
    assert compile_request(request, resolver).header("Accept") == "application/json"
    request.response_type = str
    assert compile_request(request, resolver).header("Accept") == "text/plain"
    request.with_header("Accept", "application/custom")
    assert compile_request(request, resolver).header("Accept") == "application/custom"


def test_method_strings_are_normalised(resolver):
    request = BasicApiRequest("https://example.com/x")
    request.method = "delete"
    request.body_type = BodyType.CUSTOM
    assert compile_request(request, resolver).method == "DELETE"


def test_binding_table_keeps_base_order_and_overrides():
    class Base(ApiRequest):
        path = "https://example.com/"
        first = QueryParameter("first", default="1")
        second = QueryParameter("second", default="2")

    class Child(Base):
        third = QueryParameter("third", default="3")
        first = QueryParameter("first", default="override")

    class Plain(Base):
        second = "no longer bound"

    assert [b.attr for b in binding_table(Child)] == ["first", "second", "third"]
    assert Child().full_url == "https://example.com/?first=override&second=2&third=3"
    assert [b.attr for b in binding_table(Plain)] == ["first"]


def test_computed_parameters():
    class Sorted(ApiRequest):
        path = "https://example.com/list"

        def __init__(self, shade):
            self._shade = shade

        @QueryParameter("sort", enum=EnumMode.LOWER_NAME)
        def shade(self):
            return self._shade

    request = Sorted(Shade.Green)
    assert request.full_url == "https://example.com/list?sort=green"
    with pytest.raises(AttributeError):
        request.shade = Shade.Red


def test_binding_tables_do_not_keep_request_classes_alive():
    Dynamic = type(
        "Dynamic",
        (ApiRequest,),
        {"path": "https://example.com/", "q": QueryParameter("q", default="1")},
    )
    assert [b.attr for b in binding_table(Dynamic)] == ["q"]
    assert binding_table(Dynamic) is binding_table(Dynamic)

    ref = weakref.ref(Dynamic)
    del Dynamic
    gc.collect()
    assert ref() is None
