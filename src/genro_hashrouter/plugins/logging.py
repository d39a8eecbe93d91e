# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Logging plugin for Genro HashRouter.

Logs navigation lifecycle notifications and times view resolution.

Configuration
-------------
Accepted keys (router-level or per route pattern):
    - ``enabled``: Gate the plugin entirely (default True)
    - ``before``: Log "loading" messages when a route matches (default True)
    - ``after``: Log "loaded" messages with load timing (default True)
    - ``log``: Use logger.info() when available (default True)
    - ``print``: Always use print() (default False)

Example::

    from genro_hashrouter import Router

    router = Router(context, routes).plug("logging")

    # Or configure per route:
    router.logging.configure(_target="/reports/:id", after=False)
    router.logging.configure(flags="before:off")
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Awaitable, Callable
from typing import Any

from genro_hashrouter.core.resolver import RouteDetail
from genro_hashrouter.core.route_table import CompiledRoute
from genro_hashrouter.core.router import Router
from genro_hashrouter.plugins._base_plugin import BasePlugin


def _route_key(route: str | re.Pattern[str]) -> str:
    return route.pattern if isinstance(route, re.Pattern) else route


class LoggingPlugin(BasePlugin):
    """Logging plugin with configurable loading/loaded messages and timing."""

    plugin_code = "logging"
    plugin_description = "Logs navigation lifecycle and view load timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: logging.Logger | None = None, **cfg):
        self._logger = logger or logging.getLogger("genro_hashrouter")
        super().__init__(router, **cfg)

    def configure(  # type: ignore[override]
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options.

        Args:
            enabled: Enable/disable the plugin entirely.
            before: Log "{route} loading {location}" when a route matches.
            after: Log "{route} loaded ..." and load timing.
            log: Use logger.info() when handlers available.
            print: Always use print() instead of logger.
        """
        pass  # Storage is handled by the wrapper

    def _emit(self, message: str, *, cfg: dict | None = None):
        """Emit a log message via configured sink."""
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            if self._logger.hasHandlers():
                self._logger.info(message)
            else:
                print(message)

    def _active_config(self, route: str | re.Pattern[str]) -> dict | None:
        cfg = self._effective_config(_route_key(route))
        if not cfg["enabled"]:
            return None
        return cfg

    def on_route_loading(self, router: Any, detail: RouteDetail) -> None:
        cfg = self._active_config(detail.route)
        if cfg and cfg["before"]:
            self._emit(f"{_route_key(detail.route)} loading {detail.location}", cfg=cfg)

    def on_route_loaded(self, router: Any, detail: RouteDetail) -> None:
        cfg = self._active_config(detail.route)
        if cfg and cfg["after"]:
            self._emit(f"{_route_key(detail.route)} loaded {detail.name}", cfg=cfg)

    def on_conditions_failed(self, router: Any, detail: RouteDetail) -> None:
        cfg = self._active_config(detail.route)
        if cfg:
            self._emit(
                f"{_route_key(detail.route)} rejected by conditions at {detail.location}",
                cfg=cfg,
            )

    def wrap_loader(
        self,
        router: Any,
        route: CompiledRoute,
        call_next: Callable[[], Awaitable[Any]],
    ) -> Callable[[], Awaitable[Any]]:
        """Wrap view resolution with timing."""

        async def timed() -> Any:
            t0 = time.perf_counter()
            view = await call_next()
            elapsed = (time.perf_counter() - t0) * 1000
            router.set_runtime_data(route.key, self.name, "last_load_ms", elapsed)
            cfg = self._active_config(route.path)
            if cfg and cfg["after"]:
                self._emit(f"{route.key} load end ({elapsed:.2f} ms)", cfg=cfg)
            return view

        return timed

    def _effective_config(self, route_key: str) -> dict:
        """Get effective configuration for a route, merging defaults."""
        defaults = {"enabled": True, "before": True, "after": True, "log": True, "print": False}
        cfg = defaults | self.configuration(route_key)
        flags = cfg.pop("flags", None)
        if isinstance(flags, str):
            cfg.update(self._parse_flags(flags))

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


Router.register_plugin(LoggingPlugin)
