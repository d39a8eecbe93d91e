# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Plugin contract definitions for Genro HashRouter.

``BasePlugin``
    Base class that every plugin must subclass. Provides:
        - Configuration helpers that delegate to the router's ``_plugin_info``
          store (``_all_`` bucket plus one bucket per route pattern)
        - Lifecycle hooks mirroring the router notifications
        - ``wrap_loader`` to build middleware around view resolution

    Required class attributes:
        - ``plugin_code``: unique identifier used for registration (e.g. "logging")
        - ``plugin_description``: human-readable description of the plugin

    Constructor signature: ``BasePlugin(router, **config)``

    Key methods:
        - ``configure(**config)``: Define accepted configuration parameters
        - ``configuration(route_key=None)``: Read merged configuration
        - ``on_route_loading(router, detail)``: Route matched, before conditions
        - ``on_route_loaded(router, detail)``: Placeholder or view published
        - ``on_conditions_failed(router, detail)``: A condition rejected the route
        - ``wrap_loader(router, route, call_next)``: Build loader middleware
        - ``route_metadata(router, route)``: Provide data for ``describe()``

Example::

    from genro_hashrouter import Router
    from genro_hashrouter.plugins._base_plugin import BasePlugin

    class AuditPlugin(BasePlugin):
        plugin_code = "audit"
        plugin_description = "Records every rejected navigation"

        def configure(self, enabled: bool = True, sink: str = "memory"):
            pass  # Storage handled by wrapper

        def on_conditions_failed(self, router, detail):
            router.set_runtime_data(detail.route, self.name, "rejected", True)

    Router.register_plugin(AuditPlugin)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from functools import wraps
from typing import TYPE_CHECKING, Any

from pydantic import validate_call

if TYPE_CHECKING:  # pragma: no cover
    from genro_hashrouter.core.resolver import RouteDetail
    from genro_hashrouter.core.route_table import CompiledRoute

__all__ = ["BasePlugin"]


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    @wraps(original_configure)
    def wrapper(
        self: BasePlugin,
        *,
        _target: str | Sequence[str] = "_all_",
        flags: str | None = None,
        **kwargs: Any,
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if not isinstance(_target, str):
            for target in _target:
                wrapper(self, _target=target, **kwargs)
            return

        # Regex route keys may contain commas: only split unknown targets
        if "," in _target and _target not in self._route_keys():
            for target in (t.strip() for t in _target.split(",")):
                if target:
                    wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface and configuration helpers for router plugins.

    Subclass this to create custom plugins. Override the hooks you need
    and define your configuration schema in ``configure()``.
    """

    __slots__ = ("name", "_router")

    # Subclasses MUST define these class attributes
    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])  # type: ignore[method-assign]

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "_all_", {"config": {"enabled": True}, "locals": {}}
        )

    def _write_config(self, target: str, config: dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, route_key: str | None = None) -> dict[str, Any]:
        """Read merged configuration (base + optional per-route override).

        Args:
            route_key: Route pattern; if given, its config overrides the base.

        Returns:
            Dict of configuration values.
        """
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("_all_", {}).get("config", {}))
        if route_key:
            merged.update(plugin_bucket.get(route_key, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> dict[str, bool]:
        """Parse flag string like "enabled,before:off" into boolean dict."""
        mapping: dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def _get_store(self) -> dict[str, Any]:
        return self._router._plugin_info  # type: ignore[no-any-return]

    def _route_keys(self) -> set[str]:
        return {route.key for route in getattr(self._router, "table", ())}

    # =========================================================================
    # METHODS TO OVERRIDE IN CUSTOM PLUGINS
    # =========================================================================

    def configure(self, *, _target: str = "_all_", flags: str | None = None) -> None:
        """Override to define accepted configuration parameters.

        The wrapper added by __init_subclass__ handles:
            - Parsing ``flags`` (e.g. "enabled,before:off") into booleans
            - Routing to ``_target`` ("_all_", a route pattern, "p1,p2" or a list)
            - Pydantic validation via @validate_call
            - Writing to the router's config store

        Example::

            def configure(self, enabled: bool = True, threshold: int = 10):
                pass  # Storage is handled by the wrapper
        """
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def on_route_loading(self, router: Any, detail: RouteDetail) -> None:
        """Called when a route matched, before its conditions run."""

    def on_route_loaded(self, router: Any, detail: RouteDetail) -> None:
        """Called when a placeholder or the final view has been published."""

    def on_conditions_failed(self, router: Any, detail: RouteDetail) -> None:
        """Called when a condition rejected the matched route."""

    def wrap_loader(
        self,
        router: Any,
        route: CompiledRoute,
        call_next: Callable[[], Awaitable[Any]],
    ) -> Callable[[], Awaitable[Any]]:
        """Override to wrap view resolution with custom logic.

        Return a coroutine function that awaits ``call_next()`` and returns
        its result (the resolved view).

        Example::

            def wrap_loader(self, router, route, call_next):
                async def wrapper():
                    print(f"Loading {route.key}")
                    return await call_next()
                return wrapper
        """
        return call_next

    def route_metadata(self, router: Any, route: CompiledRoute) -> dict[str, Any]:
        """Override to add plugin-specific data to ``router.describe()``."""
        return {}
