# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the pattern compiler, route targets and the route table."""

import re

import pytest

from genro_hashrouter import InvalidPathError, InvalidTargetError, wrap
from genro_hashrouter.core.matcher import compile_pattern, decode_param
from genro_hashrouter.core.route_table import RouteTable, strip_prefix
from genro_hashrouter.core.targets import Direct, Wrapped, to_target


class Home:
    pass


class Book:
    pass


class NewBook:
    pass


class NotFound:
    pass


class TestPatternGrammar:
    def test_named_and_optional_params(self):
        compiled = compile_pattern("/book/:id/:chapter?")
        assert compiled.param_names == ("id", "chapter")
        assert compiled.match("/book/42") == {"id": "42", "chapter": None}
        assert compiled.match("/book/42/7") == {"id": "42", "chapter": "7"}
        assert compiled.match("/author/42") is None

    def test_literals_are_case_insensitive_and_escaped(self):
        compiled = compile_pattern("/v1.0/items")
        assert compiled.match("/V1.0/ITEMS") == {}
        assert compiled.match("/v1x0/items") is None

    def test_trailing_slash_is_optional(self):
        compiled = compile_pattern("/about")
        assert compiled.match("/about/") == {}
        assert compiled.match("/about") == {}

    def test_root(self):
        compiled = compile_pattern("/")
        assert compiled.match("/") == {}
        assert compiled.match("/x") is None

    def test_wildcards(self):
        assert compile_pattern("*").match("/any/thing") == {}
        assert compile_pattern("*").match("/") == {}
        compiled = compile_pattern("/files/*")
        assert compiled.param_names == ()
        assert compiled.match("/files/a/b/c") == {}
        assert compiled.match("/other/a") is None

    def test_param_with_suffix(self):
        compiled = compile_pattern("/docs/:file.pdf")
        assert compiled.match("/docs/report.pdf") == {"file": "report"}
        assert compiled.match("/docs/report.txt") is None

    def test_regex_is_opaque(self):
        compiled = compile_pattern(re.compile(r"^/hello/(\w+)$"))
        assert compiled.param_names is False
        found = compiled.match("/hello/world")
        assert isinstance(found, re.Match)
        assert found.group(1) == "world"

    @pytest.mark.parametrize("path", ["", "books", "#/books", 42, None])
    def test_invalid_paths(self, path):
        with pytest.raises(InvalidPathError) as excinfo:
            compile_pattern(path)
        assert excinfo.value.path == path


class TestDecoding:
    def test_percent_decoding(self):
        compiled = compile_pattern("/tag/:name")
        assert compiled.match("/tag/caf%C3%A9") == {"name": "café"}
        assert compiled.match("/tag/a%20b") == {"name": "a b"}

    @pytest.mark.parametrize("raw", ["%E0%A4%A", "100%", "%FF", ""])
    def test_undecodable_values_become_none(self, raw):
        assert decode_param(raw) is None

    def test_malformed_capture_does_not_raise(self):
        assert compile_pattern("/tag/:name").match("/tag/%zz") == {"name": None}


class TestTargets:
    def test_callables_become_direct(self):
        target = to_target(Home)
        assert isinstance(target, Direct)
        assert target.identity is Home
        assert target.conditions == ()

    def test_wrapped_passes_through(self):
        wrapped = wrap(Home, user_data={"k": 1})
        assert to_target(wrapped) is wrapped
        assert wrapped.identity is wrapped

    @pytest.mark.parametrize("value", [None, "Home", 3])
    def test_invalid_targets(self, value):
        with pytest.raises(InvalidTargetError):
            to_target(value)

    def test_wrap_requires_exactly_one_view(self):
        with pytest.raises(InvalidTargetError):
            wrap()
        with pytest.raises(InvalidTargetError):
            wrap(Home, async_view=lambda: Home)

    def test_wrap_rejects_non_callable_async_view(self):
        with pytest.raises(InvalidTargetError) as excinfo:
            wrap(async_view="views.home")
        assert excinfo.value.target == "async_view"

    def test_wrap_names_the_bad_condition(self):
        with pytest.raises(InvalidTargetError) as excinfo:
            wrap(Home, conditions=[lambda detail: True, "nope"])
        assert excinfo.value.target == "conditions[1]"

    def test_wrap_accepts_single_condition(self):
        def check(detail):
            return True

        wrapped = wrap(Home, conditions=check, props={"title": "Home"})
        assert isinstance(wrapped, Wrapped)
        assert wrapped.conditions == (check,)
        assert wrapped.props == {"title": "Home"}


class TestRouteTable:
    def test_first_match_wins(self):
        table = RouteTable({"/books/new": NewBook, "/books/:id": Book})
        route, found = table.match("/books/new")
        assert route.target.identity is NewBook
        assert found == {}

        table = RouteTable([("/books/:id", Book), ("/books/new", NewBook)])
        route, found = table.match("/books/new")
        assert route.target.identity is Book
        assert found == {"id": "new"}

    def test_no_match(self):
        assert RouteTable({"/": Home}).match("/missing") is None

    def test_catch_all_last(self):
        table = RouteTable({"/": Home, "*": NotFound})
        route, _ = table.match("/missing")
        assert route.target.identity is NotFound

    def test_invalid_definitions_fail_at_build_time(self):
        with pytest.raises(InvalidPathError):
            RouteTable({"books": Home})
        with pytest.raises(InvalidTargetError):
            RouteTable({"/books": None})

    def test_string_prefix(self):
        table = RouteTable({"/": Home, "/books/:id": Book}, prefix="/shop")
        route, found = table.match("/shop/books/3")
        assert found == {"id": "3"}
        route, found = table.match("/shop")
        assert route.target.identity is Home
        assert table.match("/books/3") is None

    def test_regex_prefix(self):
        table = RouteTable({"/books/:id": Book}, prefix=re.compile(r"/shop\d+"))
        _, found = table.match("/shop12/books/3")
        assert found == {"id": "3"}
        assert table.match("/books/3") is None

    def test_strip_prefix(self):
        assert strip_prefix("/a/b", "") == "/a/b"
        assert strip_prefix("/a/b", "/a") == "/b"
        assert strip_prefix("/a", "/a") == "/"
        assert strip_prefix("/b", "/a") is None
        assert strip_prefix("/b", re.compile(r"x*")) is None

    def test_describe(self):
        table = RouteTable(
            {
                "/": Home,
                "/books/:id": wrap(async_view=lambda: Book, conditions=[bool]),
                re.compile(r"^/re/(.*)$"): NotFound,
            }
        )
        info = table.describe()
        assert [item["path"] for item in info] == ["/", "/books/:id", r"^/re/(.*)$"]
        assert info[0]["view"] == "Home"
        assert info[1]["params"] == ["id"]
        assert info[1]["wrapped"] is True
        assert info[1]["conditions"] == 1
        assert info[2]["params"] is False
