# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Router with plugin pipeline for Genro HashRouter.

``Router`` extends ``BaseRouter`` with a global plugin registry, per-router
plugin instances, loader middleware, and plugin state stored on the router.

Internal state
--------------
- ``_plugin_specs``: list of ``_PluginSpec`` (factory, kwargs copy).
- ``_plugins``: instantiated plugins in the order they were attached.
- ``_plugins_by_name``: name → plugin instance.
- ``_plugin_info``: per-plugin state store on the router, one ``_all_``
  bucket plus one bucket per route pattern, each with ``config`` and
  ``locals``.

Global registry
---------------
``Router.register_plugin(plugin_class, name=None)`` validates that
``plugin_class`` is a subclass of ``BasePlugin`` with a ``plugin_code``.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks up the plugin class by name in the
global registry, instantiates it, appends it to ``_plugins`` and
``_plugins_by_name`` and returns ``self``. Attached plugins are reachable as
attributes (``router.logging``).

Notifications and wrapping
--------------------------
Lifecycle notifications reach plugins in attachment order, skipping plugins
disabled for the matched route. ``_wrap_loader(route, call_next)`` builds
middleware layers from ``_plugins`` in reverse order (last attached closest
to the loader).

Example::

    from genro_hashrouter import Router, wrap

    router = Router(context, {"/": Home, "/admin": wrap(async_view=load_admin)})
    router.plug("logging")
    router.logging.configure(_target="/admin", before=False)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from genro_hashrouter.plugins._base_plugin import BasePlugin

from .base_router import BaseRouter
from .resolver import RouteDetail
from .route_table import CompiledRoute

__all__ = ["Router"]

_PLUGIN_REGISTRY: dict[str, type[BasePlugin]] = {}


@dataclass
class _PluginSpec:
    """Specification for creating plugin instances."""

    factory: type[BasePlugin]
    kwargs: dict[str, Any]

    def instantiate(self, router: Router) -> BasePlugin:
        """Create a plugin instance for the given router."""
        return self.factory(router=router, **self.kwargs)


def _route_key(route: Any) -> str:
    return getattr(route, "pattern", route)


class Router(BaseRouter):
    """Router with plugin registry and pipeline support.

    Extends BaseRouter with:
        - Global plugin registry for registering plugin classes
        - Per-router plugin instances with loader middleware
        - Plugin state management and configuration per route pattern
    """

    __slots__ = BaseRouter.__slots__ + (
        "_plugin_specs",
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        # Set before BaseRouter starts resolving the current location.
        self._plugin_specs: list[_PluginSpec] = []
        self._plugins: list[BasePlugin] = []
        self._plugins_by_name: dict[str, BasePlugin] = {}
        self._plugin_info: dict[str, dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: type[BasePlugin], name: str | None = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined.
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered with a different class.

        Raises:
            TypeError: If plugin_class is not a BasePlugin subclass.
            ValueError: If plugin_code is missing or name collision occurs.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> dict[str, type[BasePlugin]]:
        """Return a copy of the global plugin registry."""
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> Router:
        """Attach a plugin by name (previously registered globally).

        Plugins attached after the router was created see notifications from
        the next navigation on.

        Args:
            plugin: Name of the plugin to attach.
            **config: Configuration options passed to the plugin.

        Returns:
            self (for method chaining).

        Raises:
            TypeError: If plugin is not a string.
            ValueError: If plugin is not registered or already attached.
        """
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        if plugin in self._plugins_by_name:
            raise ValueError(
                f"Plugin '{plugin}' is already attached to this router. "
                "Use configure() to update settings."
            )
        spec = _PluginSpec(plugin_class, dict(config))
        self._plugin_specs.append(spec)
        instance = spec.instantiate(self)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        return self

    def iter_plugins(self) -> list[BasePlugin]:
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, route: Any = None) -> dict[str, Any]:
        """Return plugin config (global + per-route overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to this router")
        return plugin.configuration(_route_key(route) if route is not None else None)

    def __getattr__(self, name: str) -> Any:
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to this router")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to this router")
        bucket.setdefault("_all_", {"config": {}, "locals": {}})
        return bucket

    # ------------------------------------------------------------------
    # Runtime helpers (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route: Any, plugin_name: str, enabled: bool = True) -> None:
        """Enable or disable a plugin for one route pattern (``"_all_"`` for every route)."""
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(_route_key(route), {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route: Any, plugin_name: str) -> bool:
        """Check if a plugin is enabled for a route pattern.

        Resolution order (first found wins):
        1. route locals (runtime override via set_plugin_enabled)
        2. route config (static via configure(_target=pattern, enabled=...))
        3. global locals (runtime override via set_plugin_enabled for _all_)
        4. global config (static via configure(enabled=...))
        5. default: True
        """
        bucket = self._get_plugin_bucket(plugin_name)
        entry_data = bucket.get(_route_key(route), {})
        if "enabled" in entry_data.get("locals", {}):
            return bool(entry_data["locals"]["enabled"])
        if "enabled" in entry_data.get("config", {}):
            return bool(entry_data["config"]["enabled"])
        base_data = bucket.get("_all_", {})
        if "enabled" in base_data.get("locals", {}):
            return bool(base_data["locals"]["enabled"])
        if "enabled" in base_data.get("config", {}):
            return bool(base_data["config"]["enabled"])
        return True

    def set_runtime_data(self, route: Any, plugin_name: str, key: str, value: Any) -> None:
        """Set runtime data for a plugin/route combination."""
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(_route_key(route), {"config": {}, "locals": {}})
        entry.setdefault("locals", {})[key] = value

    def get_runtime_data(self, route: Any, plugin_name: str, key: str, default: Any = None) -> Any:
        """Get runtime data for a plugin/route combination."""
        bucket = self._get_plugin_bucket(plugin_name)
        entry_locals = bucket.get(_route_key(route), {}).get("locals", {})
        return entry_locals.get(key, default)

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _notify_plugins(self, hook: str, detail: RouteDetail) -> None:
        for plugin in list(self._plugins):
            if self.is_plugin_enabled(detail.route, plugin.name):
                getattr(plugin, hook)(self, detail)

    def _wrap_loader(
        self, route: CompiledRoute, call_next: Callable[[], Awaitable[Any]]
    ) -> Callable[[], Awaitable[Any]]:
        wrapped = call_next
        for plugin in reversed(self._plugins):
            plugin_call = plugin.wrap_loader(self, route, wrapped)
            wrapped = self._create_wrapper(plugin, route, plugin_call, wrapped)
        return wrapped

    def _create_wrapper(
        self,
        plugin: BasePlugin,
        route: CompiledRoute,
        plugin_call: Callable[[], Awaitable[Any]],
        next_loader: Callable[[], Awaitable[Any]],
    ) -> Callable[[], Awaitable[Any]]:
        @wraps(next_loader)
        async def wrapper() -> Any:
            if not self.is_plugin_enabled(route.key, plugin.name):
                return await next_loader()
            return await plugin_call()

        return wrapper

    def _describe_route_extra(
        self, route: CompiledRoute, base_description: dict[str, Any]
    ) -> dict[str, Any]:
        """Gather plugin config and metadata for a route."""
        plugins_info: dict[str, dict[str, Any]] = {}
        for plugin in self._plugins:
            plugin_data: dict[str, Any] = {}
            config = plugin.configuration(route.key)
            if config:
                plugin_data["config"] = config
            meta = plugin.route_metadata(self, route)
            if meta:
                if not isinstance(meta, dict):
                    raise TypeError(
                        f"Plugin {plugin.name} returned non-dict "
                        f"from route_metadata: {type(meta)}"
                    )
                plugin_data["metadata"] = meta
            if plugin_data:
                plugins_info[plugin.name] = plugin_data
        if plugins_info:
            return {"plugins": plugins_info}
        return {}
