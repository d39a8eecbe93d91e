# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Plugin-free hash router runtime for Genro HashRouter.

This module exposes :class:`BaseRouter`, which wires a route table to a host
:class:`~genro_hashrouter.core.context.NavigationContext` and publishes the
active view through stores. Subclasses add plugins but must preserve these
semantics.

Constructor
-----------
Constructor signature::

    BaseRouter(context, routes=None, *, prefix="", restore_scroll_state=False,
               on_route_loading=None, on_route_loaded=None,
               on_conditions_failed=None, options=None)

- ``context`` is required; ``None`` raises ``ValueError``, anything that is
  not a ``NavigationContext`` raises ``TypeError``.
- ``routes``: mapping (insertion order) or sequence of ``(pattern, target)``
  pairs. Every pattern and target is validated up front.
- ``options``: a ready :class:`~genro_hashrouter.core.options.RouterOptions`
  replacing the keyword options.

The router must be created while an asyncio event loop is running: the
current location resolves as soon as the constructor returns.

Published stores
----------------
- ``loc``: current :class:`~genro_hashrouter.core.location.Location`
  (``location`` and ``querystring`` are its derived stores).
- ``params``: params of the committed route (``None`` if none).
- ``state``: :class:`~genro_hashrouter.core.resolver.NavigationState` with
  the view to render, its params and its props.
- ``scroll_state``: last position requested by a back/forward navigation.

Lifecycle notifications
-----------------------
``routeLoading``, ``routeLoaded`` and ``conditionsFailed`` are delivered, in
order, to attached plugins, to the matching option callback and to
``context.dispatch_event``. A callback returning an
awaitable is scheduled on the loop.

Hooks for subclasses
--------------------
- ``_notify_plugins``: forward lifecycle notifications to plugins.
- ``_wrap_loader``: wrap view loading (middleware stack).
- ``_describe_route_extra``: extend per-route description.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from genro_hashrouter.actions.active import ActiveAction, ActiveBinding
from genro_hashrouter.actions.link import LinkAction, LinkBinding

from .context import NavigationContext
from .location import Location, LocationObserver
from .navigation import NavigationController
from .options import RouterOptions
from .resolver import (
    CONDITIONS_FAILED,
    ROUTE_LOADED,
    ROUTE_LOADING,
    ComponentResolver,
    NavigationState,
    RouteDetail,
)
from .route_table import CompiledRoute, RouteTable
from .scroll import ScrollCoordinator
from .stores import Readable, Writable

__all__ = ["BaseRouter"]

logger = logging.getLogger(__name__)

_HOOKS = {
    ROUTE_LOADING: "on_route_loading",
    ROUTE_LOADED: "on_route_loaded",
    CONDITIONS_FAILED: "on_conditions_failed",
}


class BaseRouter:
    """Plugin-free hash router bound to a navigation context.

    Responsibilities:
        - Compile the route table and keep it immutable
        - Resolve every location change into a published view
        - Expose push/pop/replace and the ``link``/``active`` element actions
        - Provide hooks for subclasses to wrap loaders and extend introspection
    """

    __slots__ = (
        "context",
        "options",
        "table",
        "loc",
        "location",
        "querystring",
        "params",
        "state",
        "_resolver",
        "_scroll",
        "_navigation",
        "_links",
        "_actives",
        "_destroyed",
    )

    def __init__(
        self,
        context: NavigationContext,
        routes: Mapping[Any, Any] | Any = None,
        *,
        prefix: Any = "",
        restore_scroll_state: bool = False,
        on_route_loading: Callable[[RouteDetail], Any] | None = None,
        on_route_loaded: Callable[[RouteDetail], Any] | None = None,
        on_conditions_failed: Callable[[RouteDetail], Any] | None = None,
        options: RouterOptions | None = None,
    ) -> None:
        if context is None:
            raise ValueError("Router requires a navigation context")
        if not isinstance(context, NavigationContext):
            raise TypeError(
                f"Router context must be a NavigationContext, got {type(context).__name__}"
            )
        if options is None:
            options = RouterOptions(
                routes=routes,
                prefix=prefix,
                restore_scroll_state=restore_scroll_state,
                on_route_loading=on_route_loading,
                on_route_loaded=on_route_loaded,
                on_conditions_failed=on_conditions_failed,
            )
        self.context = context
        self.options = options
        self.table = RouteTable(options.routes, options.prefix)
        self.loc = LocationObserver(context)
        self.location: Readable[str] = self.loc.path
        self.querystring: Readable[str] = self.loc.querystring
        self.params: Writable[Any] = Writable(None)
        self.state: Writable[NavigationState] = Writable(NavigationState())
        self._resolver = ComponentResolver(
            self.table, self.state, self.params, self._notify, self._wrap_loader
        )
        self._scroll = ScrollCoordinator(context, self.loc)
        self._navigation = NavigationController(
            context, self.loc, self._resolver, on_settled=self._on_settled
        )
        self._links = LinkAction(self._navigation)
        self._actives = ActiveAction(self.loc)
        self._destroyed = False
        if options.restore_scroll_state:
            self._scroll.start()
        self._navigation.start()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    @property
    def current(self) -> Location:
        """Current location snapshot."""
        return self.loc.value

    @property
    def scroll_state(self) -> Writable[tuple[float, float] | None]:
        return self._scroll.scroll_state

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def push(self, location: str):
        """Navigate to ``location`` (``/path`` or ``#/path``).

        Raises:
            InvalidLocationError: Synchronously, before any side effect.

        Returns:
            An awaitable task completing once the hash has been set.
        """
        return self._navigation.push(location)

    def replace(self, location: str):
        """Replace the current history entry with ``location``.

        Raises:
            InvalidLocationError: Synchronously, before any side effect.
        """
        return self._navigation.replace(location)

    def pop(self):
        """Go back one history entry."""
        return self._navigation.pop()

    async def settle(self) -> None:
        """Wait until pending navigations and resolutions have finished."""
        await self._navigation.settle()

    # ------------------------------------------------------------------
    # Element actions
    # ------------------------------------------------------------------
    def link(self, element: Any, options: Any = None) -> LinkBinding:
        """Attach the ``link`` action to an anchor element."""
        return self._links.attach(element, options)

    def active(self, element: Any, options: Any = None) -> ActiveBinding:
        """Attach the ``active`` action to an element."""
        return self._actives.attach(element, options)

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------
    def destroy(self) -> None:
        """Stop listening, detach every action binding. Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True
        self._navigation.stop()
        self._scroll.stop()
        self._links.detach_all()
        self._actives.detach_all()

    def __enter__(self) -> BaseRouter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.destroy()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def describe(self) -> dict[str, Any]:
        """Return the route table and current state as plain data."""
        routes = self.table.describe()
        for route, info in zip(self.table, routes):
            info.update(self._describe_route_extra(route, info))
        prefix = self.table.prefix
        return {
            "prefix": getattr(prefix, "pattern", prefix),
            "restore_scroll_state": self.options.restore_scroll_state,
            "location": str(self.current),
            "routes": routes,
        }

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def _notify_plugins(self, hook: str, detail: RouteDetail) -> None:
        """Hook for subclasses to forward lifecycle notifications (default: none)."""

    def _wrap_loader(self, route: CompiledRoute, call_next: Callable) -> Callable:
        """Hook for subclasses to wrap view loading (default: passthrough)."""
        return call_next

    def _describe_route_extra(
        self, route: CompiledRoute, base_description: dict[str, Any]
    ) -> dict[str, Any]:
        """Hook used by subclasses to extend per-route description."""
        return {}

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _notify(self, event: str, detail: RouteDetail) -> None:
        hook = _HOOKS[event]
        self._notify_plugins(hook, detail)
        callback = getattr(self.options, hook)
        if callback is not None:
            result = callback(detail)
            if inspect.isawaitable(result):
                self._navigation.spawn(result)
        self.context.dispatch_event(event, detail)

    def _on_settled(self, outcome: str) -> None:
        logger.debug("Navigation to %s settled: %s", self._resolver.latest, outcome)
        if self._scroll.active:
            self._scroll.restore()
