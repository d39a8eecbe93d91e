# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""NavigationContext - Abstract host capability for hash routing.

The router never touches a browser directly. Each host (a Pyodide page, a
webview bridge, a headless test harness) provides a concrete context that
exposes the location hash, the history stack, scrolling and event listeners.
``genro_hashrouter.testing.MemoryContext`` is the in-memory implementation.

Events delivered to listeners registered with ``add_listener``:

- ``"hashchange"``: the hash changed; the payload is ``None``.
- ``"popstate"``: the active history entry changed; the payload is the
  arrived-at entry's state mapping (or ``None``).

Example::

    from genro_hashrouter import NavigationContext

    class PyodideContext(NavigationContext):
        def __init__(self, window):
            self._window = window

        @property
        def current_hash(self):
            return self._window.location.hash

        def set_hash(self, value):
            self._window.location.hash = value

        ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Protocol

__all__ = [
    "NavigationContext",
    "HostElement",
    "HostClickEvent",
    "HASHCHANGE",
    "POPSTATE",
    "SCROLL_X_KEY",
    "SCROLL_Y_KEY",
]

HASHCHANGE = "hashchange"
POPSTATE = "popstate"

# Reserved history-state keys holding the scroll offsets of an entry.
SCROLL_X_KEY = "__hashrouter_scrollX"
SCROLL_Y_KEY = "__hashrouter_scrollY"


class NavigationContext(ABC):
    """Abstract access to the host's location, history and scrolling.

    Implementations decide how events are delivered (synchronously or on the
    event loop); the router only relies on listeners eventually being called.
    """

    @property
    @abstractmethod
    def current_hash(self) -> str:
        """Current location fragment including the leading ``#`` (or ``""``)."""
        ...

    @abstractmethod
    def set_hash(self, value: str) -> None:
        """Navigate to ``value`` (``"#/path"``), creating a history entry."""
        ...

    @property
    @abstractmethod
    def history_state(self) -> Mapping[str, Any] | None:
        """State mapping attached to the current history entry."""
        ...

    @abstractmethod
    def replace_state(self, state: Mapping[str, Any] | None, url: str | None = None) -> None:
        """Replace the current entry's state and, optionally, its URL.

        Never fires ``hashchange``. May raise when the host forbids it.
        """
        ...

    @abstractmethod
    def go(self, delta: int) -> None:
        """Move ``delta`` steps through the history stack."""
        ...

    @property
    @abstractmethod
    def scroll_position(self) -> tuple[float, float]:
        """Current ``(x, y)`` scroll offsets."""
        ...

    @abstractmethod
    def scroll_to(self, x: float, y: float) -> None:
        """Scroll the viewport to ``(x, y)``."""
        ...

    @property
    @abstractmethod
    def scroll_restoration(self) -> str:
        """Host scroll restoration mode: ``"auto"`` or ``"manual"``."""
        ...

    @scroll_restoration.setter
    @abstractmethod
    def scroll_restoration(self, value: str) -> None: ...

    @abstractmethod
    def add_listener(self, event_type: str, callback: Callable[[Any], None]) -> None:
        """Register ``callback(payload)`` for ``event_type``."""
        ...

    @abstractmethod
    def remove_listener(self, event_type: str, callback: Callable[[Any], None]) -> None:
        """Remove a callback previously registered with ``add_listener``."""
        ...

    @abstractmethod
    def dispatch_event(self, event_type: str, detail: Any) -> None:
        """Dispatch a host-level event carrying ``detail`` (lifecycle interop)."""
        ...


class HostElement(Protocol):
    """Element surface used by the ``link`` and ``active`` actions."""

    tag_name: str

    def get_attribute(self, name: str) -> str | None: ...

    def set_attribute(self, name: str, value: str) -> None: ...

    def has_attribute(self, name: str) -> bool: ...

    def add_event_listener(self, event_type: str, callback: Callable[[Any], None]) -> None: ...

    def remove_event_listener(self, event_type: str, callback: Callable[[Any], None]) -> None: ...

    def add_class(self, name: str) -> None: ...

    def remove_class(self, name: str) -> None: ...


class HostClickEvent(Protocol):
    """Click event surface used by the ``link`` action."""

    button: int
    ctrl_key: bool
    meta_key: bool
    shift_key: bool
    alt_key: bool

    def prevent_default(self) -> None: ...
