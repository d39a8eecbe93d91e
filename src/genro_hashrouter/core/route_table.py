# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Ordered route table.

``RouteTable(routes, prefix="")`` compiles a route map once. Insertion order
is priority order: ``match(path)`` returns the first route whose pattern
matches, regardless of specificity, so a ``"*"`` catch-all belongs last.

``routes`` may be any mapping (a plain ``dict`` keeps insertion order) or an
iterable of ``(pattern, target)`` pairs. Keys are pattern strings or
compiled regular expressions; values are route targets (see
:mod:`genro_hashrouter.core.targets`).

Prefix scoping
--------------
With a string ``prefix`` only paths starting with it are considered and the
prefix is stripped before matching. A regex ``prefix`` must match at the
start of the path with a non-empty match, which is stripped. An empty
remainder becomes ``/``. A path outside the prefix matches nothing.

The table is immutable: adding or removing routes means building a new one.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .matcher import CompiledPattern, compile_pattern
from .targets import Direct, RouteTarget, to_target, view_name

__all__ = ["CompiledRoute", "RouteTable", "strip_prefix"]


@dataclass(frozen=True, eq=False)
class CompiledRoute:
    """Route definition bound to its compiled pattern.

    Attributes:
        path: The pattern as registered (string or compiled regex).
        target: The discriminated route target.
        pattern: The compiled matcher.
    """

    path: str | re.Pattern[str]
    target: RouteTarget
    pattern: CompiledPattern

    @classmethod
    def build(cls, path: Any, target: Any) -> CompiledRoute:
        """Validate and compile one route definition."""
        pattern = compile_pattern(path)
        return cls(path=path, target=to_target(target), pattern=pattern)

    @property
    def key(self) -> str:
        """String form of the pattern, used as configuration target."""
        if isinstance(self.path, re.Pattern):
            return self.path.pattern
        return self.path

    @property
    def user_data(self) -> Any:
        return self.target.user_data


def strip_prefix(path: str, prefix: str | re.Pattern[str] | None) -> str | None:
    """Remove ``prefix`` from ``path``; ``None`` when the path is out of scope."""
    if not prefix:
        return path
    if isinstance(prefix, re.Pattern):
        found = prefix.match(path)
        if not found or not found.group(0):
            return None
        return path[len(found.group(0)) :] or "/"
    if not path.startswith(prefix):
        return None
    return path[len(prefix) :] or "/"


class RouteTable:
    """Immutable, ordered collection of :class:`CompiledRoute`."""

    __slots__ = ("_routes", "prefix")

    def __init__(
        self,
        routes: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
        prefix: str | re.Pattern[str] | None = "",
    ) -> None:
        items = routes.items() if isinstance(routes, Mapping) else routes
        self._routes: tuple[CompiledRoute, ...] = tuple(
            CompiledRoute.build(path, target) for path, target in items
        )
        self.prefix = prefix or ""

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __getitem__(self, index: int) -> CompiledRoute:
        return self._routes[index]

    def match(
        self, path: str
    ) -> tuple[CompiledRoute, dict[str, str | None] | re.Match[str]] | None:
        """Return ``(route, match)`` for the first matching route, or ``None``."""
        stripped = strip_prefix(path, self.prefix)
        if stripped is None:
            return None
        for route in self._routes:
            found = route.pattern.match(stripped)
            if found is not None:
                return route, found
        return None

    def describe(self) -> list[dict[str, Any]]:
        """Return introspection data for every route, in priority order."""
        info: list[dict[str, Any]] = []
        for route in self._routes:
            target = route.target
            direct = isinstance(target, Direct)
            names = route.pattern.param_names
            info.append(
                {
                    "path": route.key,
                    "params": list(names) if names is not False else False,
                    "view": view_name(target.view) if direct else None,
                    "wrapped": not direct,
                    "conditions": len(target.conditions),
                    "loading_view": view_name(target.loading_view),
                }
            )
        return info
