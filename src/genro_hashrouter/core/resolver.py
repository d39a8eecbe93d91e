# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Per-navigation resolution: match, gate, load, commit.

``ComponentResolver.resolve(location)`` runs one navigation attempt::

    Matched -> GateChecking -> Rejected
                            -> Committing

- No route matches: the published state is cleared, ``params`` becomes
  ``None`` and no lifecycle notification fires.
- Matched: ``routeLoading`` fires with the :class:`RouteDetail`, then the
  route's conditions run in order.
- Rejected: the published view is cleared and ``conditionsFailed`` fires.
- Committing, new view identity: the placeholder (if any) is published and
  announced with ``routeLoaded``, otherwise the view is cleared; then the
  loader runs and its result is published with params and props, followed by
  ``routeLoaded``.
- Committing, same view identity: only params and props are republished;
  ``routeLoaded`` still fires.

Staleness guard
---------------
``latest`` holds the snapshot of the most recent location emission. An
attempt whose snapshot is no longer ``latest`` (identity, not equality) when
it starts, after its conditions, or after its loader, stops silently: it
publishes nothing and fires nothing. Superseded work is not cancelled, only
ignored.

Exceptions raised by conditions or loaders are not caught here.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .conditions import check_conditions
from .location import Location
from .route_table import CompiledRoute, RouteTable
from .stores import Writable
from .targets import load_view, view_name

__all__ = [
    "ComponentResolver",
    "NavigationState",
    "RouteDetail",
    "ROUTE_LOADING",
    "ROUTE_LOADED",
    "CONDITIONS_FAILED",
]

logger = logging.getLogger(__name__)

ROUTE_LOADING = "routeLoading"
ROUTE_LOADED = "routeLoaded"
CONDITIONS_FAILED = "conditionsFailed"

_NOTHING = object()


@dataclass(frozen=True)
class RouteDetail:
    """Payload passed to conditions and lifecycle notifications.

    Attributes:
        route: The matched route pattern as registered.
        location: The matched path.
        querystring: The querystring of the location.
        user_data: ``user_data`` of the route target.
        params: Published parameters (mapping, positional tuple or ``None``).
        view: The view announced by ``routeLoaded`` (``None`` otherwise).
        name: Display name of ``view``.
    """

    route: str | re.Pattern[str]
    location: str
    querystring: str
    user_data: Any = None
    params: Any = None
    view: Any = None
    name: str | None = None

    def with_view(self, view: Any, params: Any) -> RouteDetail:
        """Return a copy announcing ``view`` with ``params``."""
        return replace(self, view=view, name=view_name(view), params=params)


@dataclass(frozen=True)
class NavigationState:
    """Published view state, replaced on every change."""

    view: Any = None
    params: Any = None
    props: Mapping[str, Any] = field(default_factory=dict)


def published_params(found: Mapping[str, str | None] | re.Match[str]) -> Any:
    """Convert a match result into the params value consumers see."""
    if isinstance(found, re.Match):
        return (found.group(0), *found.groups())
    return dict(found) if found else None


class ComponentResolver:
    """Runs navigation attempts against a :class:`RouteTable`.

    Args:
        table: Routes to match.
        state: Store receiving :class:`NavigationState` values.
        params: Store receiving the matched params.
        notify: ``notify(event_name, detail)`` lifecycle sink.
        wrap_loader: Optional ``wrap_loader(route, call_next)`` returning the
            coroutine function that actually loads the view (plugin
            middleware hook).
    """

    __slots__ = ("table", "state", "params", "_notify", "_wrap_loader", "latest", "_active")

    def __init__(
        self,
        table: RouteTable,
        state: Writable[NavigationState],
        params: Writable[Any],
        notify: Callable[[str, RouteDetail], None],
        wrap_loader: Callable[[CompiledRoute, Callable], Callable] | None = None,
    ) -> None:
        self.table = table
        self.state = state
        self.params = params
        self._notify = notify
        self._wrap_loader = wrap_loader
        self.latest: Location | None = None
        self._active: Any = _NOTHING

    def is_stale(self, location: Location) -> bool:
        """True if a newer location has been emitted since ``location``."""
        return location is not self.latest

    async def resolve(self, location: Location) -> str:
        """Run one navigation attempt for ``location``.

        Returns:
            The outcome: ``"stale"``, ``"no_match"``, ``"rejected"`` or
            ``"committed"``.
        """
        if self.is_stale(location):
            return "stale"

        matched = self.table.match(location.path)
        if matched is None:
            self._active = _NOTHING
            self.state.set(NavigationState())
            self.params.set(None)
            return "no_match"

        route, found = matched
        params = published_params(found)
        detail = RouteDetail(
            route=route.path,
            location=location.path,
            querystring=location.querystring,
            user_data=route.user_data,
            params=params,
        )
        self._notify(ROUTE_LOADING, detail)

        allowed = await check_conditions(route.target.conditions, detail)
        if self.is_stale(location):
            logger.debug("Discarding superseded navigation to %s", location)
            return "stale"
        if not allowed:
            self._active = _NOTHING
            self.state.set(NavigationState())
            self._notify(CONDITIONS_FAILED, detail)
            return "rejected"

        target = route.target
        view = self.state.value.view
        if target.identity is not self._active:
            self._active = _NOTHING
            if target.loading_view is not None:
                self.state.set(
                    NavigationState(view=target.loading_view, params=target.loading_params)
                )
                self._notify(
                    ROUTE_LOADED, detail.with_view(target.loading_view, target.loading_params)
                )
            else:
                self.state.set(NavigationState())
            view = await self._load(route)
            if self.is_stale(location):
                logger.debug("Discarding superseded view for %s", location)
                return "stale"
            self._active = target.identity

        self.state.set(NavigationState(view=view, params=params, props=dict(target.props)))
        self.params.set(params)
        self._notify(ROUTE_LOADED, detail.with_view(view, params))
        return "committed"

    async def _load(self, route: CompiledRoute) -> Any:
        async def call_next() -> Any:
            return await load_view(route.target.loader)

        loader = call_next
        if self._wrap_loader is not None:
            loader = self._wrap_loader(route, call_next)
        return await loader()
