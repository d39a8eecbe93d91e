# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Scroll-position continuity across history entries.

When enabled, ``ScrollCoordinator`` turns the host's automatic scroll
restoration off and listens for ``popstate``:

- the arrived-at entry carries scroll metadata: backward navigation, the
  stored ``(x, y)`` is restored;
- otherwise: forward navigation, the viewport goes to ``(0, 0)``.

The position is published on ``scroll_state`` immediately and applied with
``restore()`` once the navigation triggered by the pop has settled, so the
new view is in place before scrolling. A pop that keeps the current hash
starts no navigation, so its position is applied right away.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .context import POPSTATE, SCROLL_X_KEY, SCROLL_Y_KEY, NavigationContext
from .location import Location, parse_location
from .stores import Readable, Writable

__all__ = ["ScrollCoordinator", "restore_scroll", "scroll_offsets"]


def scroll_offsets(state: Mapping[str, Any] | None) -> tuple[float, float] | None:
    """Return the ``(x, y)`` stored in a history state, or ``None``."""
    if not state or (SCROLL_X_KEY not in state and SCROLL_Y_KEY not in state):
        return None
    return state.get(SCROLL_X_KEY) or 0, state.get(SCROLL_Y_KEY) or 0


def restore_scroll(context: NavigationContext, state: Mapping[str, Any] | None) -> None:
    """Scroll to the offsets stored in ``state``, or to the top."""
    context.scroll_to(*(scroll_offsets(state) or (0, 0)))


class ScrollCoordinator:
    """Captures pop events and restores scroll positions.

    Attributes:
        scroll_state: Store of the last position requested by a pop
            (``None`` until the first pop).
    """

    __slots__ = ("context", "observer", "scroll_state", "_pending", "_active")

    def __init__(
        self, context: NavigationContext, observer: Readable[Location] | None = None
    ) -> None:
        self.context = context
        self.observer = observer
        self.scroll_state: Writable[tuple[float, float] | None] = Writable(None)
        self._pending: tuple[float, float] | None = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self.context.scroll_restoration = "manual"
        self.context.add_listener(POPSTATE, self._on_pop)

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self.context.remove_listener(POPSTATE, self._on_pop)
        self.context.scroll_restoration = "auto"
        self._pending = None

    def restore(self) -> None:
        """Apply the position requested by the last pop, if any."""
        if self._pending is None:
            return
        position, self._pending = self._pending, None
        self.context.scroll_to(*position)

    def _on_pop(self, state: Mapping[str, Any] | None) -> None:
        self._pending = scroll_offsets(state) or (0, 0)
        self.scroll_state.set(self._pending)
        if self.observer is not None and self.observer.value == parse_location(
            self.context.current_hash
        ):
            self.restore()
