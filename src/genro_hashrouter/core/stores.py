# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Publish/subscribe stores for the router's observable state.

A store holds one value and notifies subscribers synchronously whenever the
value changes. Subscribing immediately calls the callback with the current
value, so a subscriber never misses the initial state.

``Readable(value, start=None)``
    ``start(set)`` runs when the first subscriber arrives and may return a
    ``stop()`` callable, which runs when the last subscriber leaves. This is
    how listeners on the host (hash changes, history pops) are acquired and
    released exactly once per active period. Values set while ``start`` runs
    are stored and delivered by the initial emission, not broadcast.

``Writable``
    Adds ``set(value)`` and ``update(fn)`` for the owner of the value.
    Consumers receive it typed as ``Readable`` and must treat it as read-only.

``derived(store, fn)``
    A readable whose value is ``fn(store_value)``. It subscribes to the
    source only while it has subscribers itself.

Change detection: scalars (``str``, ``int``, ``float``, ``bool``, ``bytes``,
``None``) are compared by equality; any other value always notifies, so a
fresh snapshot that compares equal to the previous one is still published.

Example::

    counter = Writable(0)
    unsubscribe = counter.subscribe(print)   # prints 0
    counter.set(1)                           # prints 1
    unsubscribe()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

__all__ = ["Readable", "Writable", "derived"]

T = TypeVar("T")
S = TypeVar("S")

_SCALARS = (str, int, float, bool, bytes, type(None))


def _changed(old: Any, new: Any) -> bool:
    if isinstance(old, _SCALARS) and isinstance(new, _SCALARS):
        return bool(old != new or type(old) is not type(new))
    return True


def _noop() -> None:
    return None


class Readable(Generic[T]):
    """Store exposing ``subscribe`` and the current ``value``."""

    __slots__ = ("_value", "_start", "_stop", "_subscribers")

    def __init__(
        self,
        value: T | None = None,
        start: Callable[[Callable[[T], None]], Callable[[], None] | None] | None = None,
    ) -> None:
        self._value = value
        self._start = start
        self._stop: Callable[[], None] | None = None
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T | None:
        """Return the current value without subscribing."""
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` and call it with the current value.

        Returns:
            An ``unsubscribe()`` callable. Calling it more than once is a no-op.
        """
        self._subscribers.append(callback)
        if len(self._subscribers) == 1 and self._start is not None:
            self._stop = self._start(self._set) or _noop
        callback(self._value)  # type: ignore[arg-type]

        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if not subscribed:
                return
            subscribed = False
            self._subscribers.remove(callback)
            if not self._subscribers and self._stop is not None:
                stop, self._stop = self._stop, None
                stop()

        return unsubscribe

    def _set(self, value: T) -> None:
        if not _changed(self._value, value):
            return
        self._value = value
        if self._start is not None and self._stop is None:
            return
        for callback in list(self._subscribers):
            callback(value)


class Writable(Readable[T]):
    """Readable store whose owner can replace the value."""

    __slots__ = ()

    def set(self, value: T) -> None:
        """Replace the value and notify subscribers if it changed."""
        self._set(value)

    def update(self, fn: Callable[[T | None], T]) -> None:
        """Replace the value with ``fn(current_value)``."""
        self._set(fn(self._value))


class _Derived(Readable[T]):
    __slots__ = ("_source", "_fn")

    def __init__(self, source: Readable[S], fn: Callable[[S], T]) -> None:
        self._source = source
        self._fn = fn
        super().__init__(None, self._follow)

    @property
    def value(self) -> T | None:
        if self._subscribers:
            return self._value
        return self._apply(self._source.value)

    def _apply(self, value: S | None) -> T | None:
        return None if value is None else self._fn(value)

    def _follow(self, set_value: Callable[[T | None], None]) -> Callable[[], None]:
        return self._source.subscribe(lambda value: set_value(self._apply(value)))


def derived(store: Readable[S], fn: Callable[[S], T]) -> Readable[T]:
    """Return a store publishing ``fn`` applied to every value of ``store``.

    ``None`` source values are passed through as ``None``.
    """
    return _Derived(store, fn)
