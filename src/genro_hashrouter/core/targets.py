# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Route targets: what a matched route activates.

A route target is one of two explicit variants:

``Direct(view)``
    A plain view, no conditions, no props.

``Wrapped``
    A view loader plus pre-conditions, user data, props and an optional
    placeholder shown while the loader runs. Built with :func:`wrap`.

Raw values in a route map are converted with :func:`to_target` when the
route table is built: ``Direct``/``Wrapped`` instances pass through, any
other callable (a view class or render function) becomes ``Direct``, and
everything else raises ``InvalidTargetError``.

Example::

    from genro_hashrouter import wrap

    routes = {
        "/": Home,
        "/admin": wrap(
            async_view=lambda: import_module("app.views.admin"),
            conditions=[is_logged_in],
            loading_view=Spinner,
        ),
    }
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from genro_hashrouter.exceptions import InvalidTargetError

__all__ = ["Direct", "Wrapped", "RouteTarget", "wrap", "to_target", "load_view", "view_name"]

Condition = Callable[[Any], Any]


@dataclass(frozen=True, eq=False)
class Direct:
    """Plain view target."""

    view: Any

    def __post_init__(self) -> None:
        if self.view is None:
            raise InvalidTargetError(self.view)

    @property
    def identity(self) -> Any:
        return self.view

    @property
    def conditions(self) -> tuple[Condition, ...]:
        return ()

    @property
    def user_data(self) -> Any:
        return None

    @property
    def props(self) -> Mapping[str, Any]:
        return {}

    @property
    def loading_view(self) -> Any:
        return None

    @property
    def loading_params(self) -> Any:
        return None

    def loader(self) -> Any:
        return self.view


@dataclass(frozen=True, eq=False)
class Wrapped:
    """View loader with conditions, user data, props and placeholder.

    Attributes:
        loader: Zero-argument callable returning the view, an awaitable of
            the view, or an awaitable of a module (or mapping) exposing ``default``.
        conditions: Predicates ``(RouteDetail) -> bool | Awaitable[bool]``
            evaluated in order before the view activates.
        user_data: Arbitrary value forwarded in every ``RouteDetail``.
        props: Extra properties published with the view.
        loading_view: Placeholder published while ``loader`` runs.
        loading_params: Params published with the placeholder.
    """

    loader: Callable[[], Any]
    conditions: tuple[Condition, ...] = ()
    user_data: Any = None
    props: Mapping[str, Any] = field(default_factory=dict)
    loading_view: Any = None
    loading_params: Any = None

    @property
    def identity(self) -> Any:
        return self


RouteTarget = Direct | Wrapped


def wrap(
    view: Any = None,
    *,
    async_view: Callable[[], Any] | None = None,
    conditions: Condition | Sequence[Condition] | None = None,
    user_data: Any = None,
    props: Mapping[str, Any] | None = None,
    loading_view: Any = None,
    loading_params: Any = None,
) -> Wrapped:
    """Build a :class:`Wrapped` route target.

    Args:
        view: The view itself. Mutually exclusive with ``async_view``.
        async_view: Zero-argument callable resolving the view, possibly
            asynchronously. Mutually exclusive with ``view``.
        conditions: One predicate or a sequence of predicates.
        user_data: Value forwarded to conditions and lifecycle callbacks.
        props: Extra properties published with the view.
        loading_view: Placeholder shown while ``async_view`` runs.
        loading_params: Params published with ``loading_view``.

    Raises:
        InvalidTargetError: On any invalid argument.
    """
    if (view is None) == (async_view is None):
        raise InvalidTargetError(
            "view", "One and only one of view and async_view is required"
        )
    if view is not None:
        loader: Callable[[], Any] = _constant(view)
    elif not callable(async_view):
        raise InvalidTargetError("async_view", "Parameter async_view must be a callable")
    else:
        loader = async_view

    if conditions is None:
        checks: tuple[Condition, ...] = ()
    elif callable(conditions):
        checks = (conditions,)
    else:
        checks = tuple(conditions)
        for index, check in enumerate(checks):
            if not callable(check):
                raise InvalidTargetError(
                    f"conditions[{index}]", f"Invalid parameter conditions[{index}]"
                )

    return Wrapped(
        loader=loader,
        conditions=checks,
        user_data=user_data,
        props=dict(props or {}),
        loading_view=loading_view,
        loading_params=loading_params,
    )


def to_target(value: Any) -> RouteTarget:
    """Discriminate a route-map value into a :class:`Direct` or :class:`Wrapped`."""
    if isinstance(value, (Direct, Wrapped)):
        return value
    if value is None or not callable(value):
        raise InvalidTargetError(value)
    return Direct(value)


async def load_view(loader: Callable[[], Any]) -> Any:
    """Run ``loader`` and normalize its result to the view object."""
    loaded = loader()
    if inspect.isawaitable(loaded):
        loaded = await loaded
    if isinstance(loaded, Mapping):
        default = loaded.get("default")
    else:
        default = getattr(loaded, "default", None)
    return loaded if default is None else default


def view_name(view: Any) -> str | None:
    """Return a display name for ``view``."""
    if view is None:
        return None
    return getattr(view, "__name__", None) or type(view).__name__


def _constant(view: Any) -> Callable[[], Any]:
    def load() -> Any:
        return view

    return load
