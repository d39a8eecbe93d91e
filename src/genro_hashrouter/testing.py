# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""In-memory host implementations for tests and headless use.

``MemoryContext``
    A :class:`~genro_hashrouter.core.context.NavigationContext` backed by a
    history list. Setting the hash truncates forward entries and appends a
    new one; ``go(delta)`` moves through the list. Listeners are called
    synchronously: ``popstate`` first, then ``hashchange`` (only when the
    hash actually changed). ``sandboxed=True`` makes ``replace_state`` raise,
    like a browser that forbids history state changes.

``MemoryElement`` / ``ClickEvent``
    Minimal element and click event for the ``link`` and ``active`` actions.

Example::

    context = MemoryContext("#/books/42")
    router = Router(context, {"/books/:id": Book})
    await router.settle()
    context.set_hash("#/")
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from genro_hashrouter.core.context import HASHCHANGE, POPSTATE, NavigationContext

__all__ = ["MemoryContext", "MemoryElement", "ClickEvent"]


class MemoryContext(NavigationContext):
    """History-list navigation context."""

    def __init__(self, initial_hash: str = "", *, sandboxed: bool = False) -> None:
        self.sandboxed = sandboxed
        self.entries: list[dict[str, Any]] = [{"hash": initial_hash, "state": None}]
        self.index = 0
        self._scroll: tuple[float, float] = (0, 0)
        self._scroll_restoration = "auto"
        self._listeners: dict[str, list[Callable[[Any], None]]] = {}
        self.dispatched: list[tuple[str, Any]] = []

    @property
    def entry(self) -> dict[str, Any]:
        return self.entries[self.index]

    @property
    def current_hash(self) -> str:
        return self.entry["hash"]

    def set_hash(self, value: str) -> None:
        if not value.startswith("#"):
            value = f"#{value}"
        if value == self.current_hash:
            return
        del self.entries[self.index + 1 :]
        self.entries.append({"hash": value, "state": None})
        self.index += 1
        self._emit(POPSTATE, None)
        self._emit(HASHCHANGE, None)

    @property
    def history_state(self) -> Mapping[str, Any] | None:
        return self.entry["state"]

    def replace_state(self, state: Mapping[str, Any] | None, url: str | None = None) -> None:
        if self.sandboxed:
            raise PermissionError("history state changes are not allowed in this host")
        self.entry["state"] = copy.deepcopy(dict(state)) if state is not None else None
        if url is not None:
            self.entry["hash"] = url if url.startswith("#") else f"#{url}"

    def go(self, delta: int) -> None:
        target = self.index + delta
        if not 0 <= target < len(self.entries):
            return
        previous = self.current_hash
        self.index = target
        self._emit(POPSTATE, self.entry["state"])
        if self.current_hash != previous:
            self._emit(HASHCHANGE, None)

    @property
    def scroll_position(self) -> tuple[float, float]:
        return self._scroll

    def scroll_to(self, x: float, y: float) -> None:
        self._scroll = (x, y)

    @property
    def scroll_restoration(self) -> str:
        return self._scroll_restoration

    @scroll_restoration.setter
    def scroll_restoration(self, value: str) -> None:
        self._scroll_restoration = value

    def add_listener(self, event_type: str, callback: Callable[[Any], None]) -> None:
        self._listeners.setdefault(event_type, []).append(callback)

    def remove_listener(self, event_type: str, callback: Callable[[Any], None]) -> None:
        callbacks = self._listeners.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch_event(self, event_type: str, detail: Any) -> None:
        self.dispatched.append((event_type, detail))
        self._emit(event_type, detail)

    def _emit(self, event_type: str, payload: Any) -> None:
        for callback in list(self._listeners.get(event_type, [])):
            callback(payload)


class MemoryElement:
    """Element with attributes, classes and event listeners."""

    def __init__(self, tag_name: str = "a", **attributes: str) -> None:
        self.tag_name = tag_name
        self.attributes: dict[str, str] = dict(attributes)
        self.classes: set[str] = set()
        self.listeners: dict[str, list[Callable[[Any], None]]] = {}

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def add_event_listener(self, event_type: str, callback: Callable[[Any], None]) -> None:
        self.listeners.setdefault(event_type, []).append(callback)

    def remove_event_listener(self, event_type: str, callback: Callable[[Any], None]) -> None:
        callbacks = self.listeners.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def add_class(self, name: str) -> None:
        self.classes.add(name)

    def remove_class(self, name: str) -> None:
        self.classes.discard(name)

    def click(self, event: ClickEvent | None = None) -> ClickEvent:
        """Deliver a click to every listener and return the event."""
        event = event or ClickEvent()
        for callback in list(self.listeners.get("click", [])):
            callback(event)
        return event


@dataclass
class ClickEvent:
    button: int = 0
    ctrl_key: bool = False
    meta_key: bool = False
    shift_key: bool = False
    alt_key: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True
