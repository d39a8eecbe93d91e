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

"""Tests for the plugin registry, loader middleware and the logging plugin."""

import re

import pydantic
import pytest

# Import to trigger plugin registration
import genro_hashrouter.plugins.logging  # noqa: F401
from genro_hashrouter import Router, wrap
from genro_hashrouter.plugins._base_plugin import BasePlugin  # Not public API
from genro_hashrouter.testing import MemoryContext


class Home:
    pass


class Book:
    pass


class Admin:
    pass


ROUTES = {"/": Home, "/books/:id": Book, "/admin": wrap(Admin, conditions=lambda detail: False)}


class DummyLogger:
    def __init__(self):
        self.records = []

    def hasHandlers(self):  # noqa: N802
        return True

    def info(self, message):
        self.records.append(message)


class TracePlugin(BasePlugin):
    plugin_code = "trace_test"
    plugin_description = "Records hook calls"

    __slots__ = ("calls",)

    def __init__(self, router, **config):
        self.calls = []
        super().__init__(router, **config)

    def configure(self, enabled: bool = True, threshold: int = 0):
        pass

    def on_route_loading(self, router, detail):
        self.calls.append(("loading", detail.route))

    def on_route_loaded(self, router, detail):
        self.calls.append(("loaded", detail.name))

    def on_conditions_failed(self, router, detail):
        self.calls.append(("failed", detail.route))

    def wrap_loader(self, router, route, call_next):
        async def wrapper():
            self.calls.append(("before", route.key))
            view = await call_next()
            self.calls.append(("after", route.key))
            return view

        return wrapper

    def route_metadata(self, router, route):
        return {"traced": True}


class OuterPlugin(TracePlugin):
    plugin_code = "outer_test"


Router.register_plugin(TracePlugin)
Router.register_plugin(OuterPlugin)


class TestRegistry:
    def test_register_requires_base_plugin(self):
        with pytest.raises(TypeError):
            Router.register_plugin(object)  # type: ignore[arg-type]

    def test_register_requires_code(self):
        class Nameless(BasePlugin):
            pass

        with pytest.raises(ValueError):
            Router.register_plugin(Nameless)

    def test_register_rejects_collisions(self):
        class Impostor(BasePlugin):
            plugin_code = "trace_test"

        with pytest.raises(ValueError):
            Router.register_plugin(Impostor)
        Router.register_plugin(TracePlugin)

    def test_available_plugins(self):
        available = Router.available_plugins()
        assert available["logging"] is genro_hashrouter.plugins.logging.LoggingPlugin
        assert available["trace_test"] is TracePlugin

    @pytest.mark.asyncio
    async def test_plug_errors(self):
        router = Router(MemoryContext("#/"), ROUTES)
        with pytest.raises(TypeError):
            router.plug(TracePlugin)  # type: ignore[arg-type]
        with pytest.raises(ValueError):
            router.plug("missing")
        router.plug("trace_test")
        with pytest.raises(ValueError):
            router.plug("trace_test")
        with pytest.raises(AttributeError):
            router.missing_plugin  # noqa: B018
        with pytest.raises(AttributeError):
            router.get_config("missing")
        await router.settle()


class TestPluginHooks:
    @pytest.mark.asyncio
    async def test_hooks_receive_lifecycle(self):
        router = Router(MemoryContext("#/"), ROUTES).plug("trace_test")
        await router.settle()
        assert router.trace_test.calls == [
            ("loading", "/"),
            ("before", "/"),
            ("after", "/"),
            ("loaded", "Home"),
        ]
        router.trace_test.calls.clear()
        await router.push("/admin")
        await router.settle()
        assert router.trace_test.calls == [("loading", "/admin"), ("failed", "/admin")]

    @pytest.mark.asyncio
    async def test_plugins_run_before_callbacks_and_host(self):
        order = []
        context = MemoryContext("#/")
        context.add_listener("routeLoaded", lambda detail: order.append("host"))
        router = Router(
            context, ROUTES, on_route_loaded=lambda detail: order.append("callback")
        ).plug("trace_test")
        await router.settle()
        assert router.trace_test.calls[-1] == ("loaded", "Home")
        assert order == ["callback", "host"]

    @pytest.mark.asyncio
    async def test_middleware_order(self):
        router = Router(MemoryContext("#/"), ROUTES).plug("outer_test").plug("trace_test")
        shared = []
        router.outer_test.calls = shared
        router.trace_test.calls = shared
        await router.settle()
        wrapped = [call for call in shared if call[0] in ("before", "after")]
        assert wrapped == [("before", "/"), ("before", "/"), ("after", "/"), ("after", "/")]
        assert router.iter_plugins() == [router.outer_test, router.trace_test]

    @pytest.mark.asyncio
    async def test_disable_per_route(self):
        router = Router(MemoryContext("#/"), ROUTES).plug("trace_test")
        router.set_plugin_enabled("/", "trace_test", False)
        await router.settle()
        assert router.trace_test.calls == []
        assert router.is_plugin_enabled("/books/:id", "trace_test")
        await router.push("/books/1")
        await router.settle()
        assert ("loaded", "Book") in router.trace_test.calls

    @pytest.mark.asyncio
    async def test_configure_enabled_false(self):
        router = Router(MemoryContext("#/"), ROUTES).plug("trace_test")
        router.trace_test.configure(enabled=False)
        await router.settle()
        assert router.trace_test.calls == []
        assert not router.is_plugin_enabled("/", "trace_test")

    @pytest.mark.asyncio
    async def test_configure_validates_and_targets_routes(self):
        router = Router(MemoryContext("#/"), ROUTES).plug("trace_test", threshold=3)
        router.trace_test.configure(_target="/, /books/:id", threshold=5)
        with pytest.raises(pydantic.ValidationError):
            router.trace_test.configure(threshold="many")
        assert router.get_config("trace_test")["threshold"] == 3
        assert router.get_config("trace_test", "/books/:id")["threshold"] == 5
        assert router.get_config("trace_test", "/")["threshold"] == 5
        await router.settle()

    @pytest.mark.asyncio
    async def test_configure_targets_regex_route_with_commas(self):
        numbered = re.compile(r"^/n/(\d{1,3})$")
        router = Router(MemoryContext("#/"), {**ROUTES, numbered: Book}).plug("trace_test")
        router.trace_test.configure(_target=numbered.pattern, threshold=7)
        assert router.get_config("trace_test", numbered.pattern)["threshold"] == 7
        assert "^/n/(\\d{1" not in router._plugin_info["trace_test"]
        router.trace_test.configure(_target=["/", numbered.pattern], threshold=9)
        assert router.get_config("trace_test", "/")["threshold"] == 9
        assert router.get_config("trace_test", numbered.pattern)["threshold"] == 9
        await router.settle()

    @pytest.mark.asyncio
    async def test_runtime_data(self):
        router = Router(MemoryContext("#/"), ROUTES).plug("trace_test")
        router.set_runtime_data("/", "trace_test", "hits", 2)
        assert router.get_runtime_data("/", "trace_test", "hits") == 2
        assert router.get_runtime_data("/books/:id", "trace_test", "hits", 0) == 0
        await router.settle()

    @pytest.mark.asyncio
    async def test_describe_includes_plugin_data(self):
        router = Router(MemoryContext("#/"), ROUTES).plug("trace_test")
        router.trace_test.configure(_target="/admin", threshold=1)
        await router.settle()
        routes = {route["path"]: route for route in router.describe()["routes"]}
        assert routes["/"]["plugins"]["trace_test"]["metadata"] == {"traced": True}
        assert routes["/admin"]["plugins"]["trace_test"]["config"]["threshold"] == 1


class TestLoggingPlugin:
    @pytest.mark.asyncio
    async def test_logs_lifecycle_and_timing(self):
        logger = DummyLogger()
        router = Router(MemoryContext("#/books/42"), ROUTES).plug("logging", logger=logger)
        await router.settle()
        assert logger.records[0] == "/books/:id loading /books/42"
        assert logger.records[1].startswith("/books/:id load end (")
        assert logger.records[1].endswith(" ms)")
        assert logger.records[2] == "/books/:id loaded Book"
        elapsed = router.get_runtime_data("/books/:id", "logging", "last_load_ms")
        assert isinstance(elapsed, float)

    @pytest.mark.asyncio
    async def test_logs_rejections(self):
        logger = DummyLogger()
        router = Router(MemoryContext("#/admin"), ROUTES).plug("logging", logger=logger)
        await router.settle()
        assert logger.records[-1] == "/admin rejected by conditions at /admin"

    @pytest.mark.asyncio
    async def test_flags_and_route_targets(self):
        logger = DummyLogger()
        router = Router(MemoryContext("#/"), ROUTES).plug("logging", logger=logger)
        router.logging.configure(flags="before:off")
        router.logging.configure(_target="/books/:id", enabled=False)
        await router.settle()
        assert [record.split(" ")[1] for record in logger.records] == ["load", "loaded"]
        logger.records.clear()
        await router.push("/books/1")
        await router.settle()
        assert logger.records == []

    @pytest.mark.asyncio
    async def test_print_sink(self, capsys):
        logger = DummyLogger()
        router = Router(MemoryContext("#/"), ROUTES).plug("logging", logger=logger)
        router.logging.configure(print=True)
        await router.settle()
        captured = capsys.readouterr()
        assert logger.records == []
        assert "/ loading /" in captured.out
        assert "/ loaded Home" in captured.out
