# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Location snapshots and the hash-change observer.

``parse_location(fragment)`` splits a location fragment into a
:class:`Location`:

- everything after the first ``#/`` is the path (the ``/`` is kept);
- the first ``?`` in that path splits off the querystring (without ``?``);
- a fragment without ``#/`` collapses to path ``/``.

``LocationObserver`` is a readable store of :class:`Location`. A new
snapshot is created on every hash change, so two snapshots may compare equal
while being different objects; the resolver relies on that identity to
detect superseded navigations.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .context import HASHCHANGE, NavigationContext
from .stores import Readable, derived

__all__ = ["Location", "LocationObserver", "parse_location"]


@dataclass(frozen=True)
class Location:
    """Immutable location snapshot.

    Attributes:
        path: Path part of the hash, always starting with ``/``.
        querystring: Text after the first ``?``, without the ``?``.
    """

    path: str
    querystring: str = ""

    def __str__(self) -> str:
        if self.querystring:
            return f"{self.path}?{self.querystring}"
        return self.path


def parse_location(fragment: str | None) -> Location:
    """Parse a hash fragment (or full href) into a :class:`Location`."""
    fragment = fragment or ""
    position = fragment.find("#/")
    path = fragment[position + 1 :] if position > -1 else "/"
    querystring = ""
    qs_position = path.find("?")
    if qs_position > -1:
        querystring = path[qs_position + 1 :]
        path = path[:qs_position]
    return Location(path, querystring)


class LocationObserver(Readable[Location]):
    """Readable store of the context's current :class:`Location`.

    The ``hashchange`` listener is registered on the context when the first
    subscriber arrives and removed when the last one leaves.

    Attributes:
        path: Derived store of ``Location.path``.
        querystring: Derived store of ``Location.querystring``.
    """

    __slots__ = ("context", "path", "querystring")

    def __init__(self, context: NavigationContext) -> None:
        self.context = context
        super().__init__(None, self._listen)
        self.path: Readable[str] = derived(self, lambda loc: loc.path)
        self.querystring: Readable[str] = derived(self, lambda loc: loc.querystring)

    @property
    def value(self) -> Location:
        """Current snapshot; parsed on the fly while nobody is subscribed."""
        if self._value is None or not self._subscribers:
            return parse_location(self.context.current_hash)
        return self._value

    @property
    def listening(self) -> bool:
        """True while the ``hashchange`` listener is registered."""
        return self._stop is not None

    def refresh(self, _payload: Any = None) -> None:
        """Re-read the hash and publish a new snapshot."""
        self._set(parse_location(self.context.current_hash))

    def _listen(self, set_value: Callable[[Location], None]) -> Callable[[], None]:
        set_value(parse_location(self.context.current_hash))
        self.context.add_listener(HASHCHANGE, self.refresh)

        def stop() -> None:
            self.context.remove_listener(HASHCHANGE, self.refresh)

        return stop
