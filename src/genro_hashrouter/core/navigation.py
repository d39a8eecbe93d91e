# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Programmatic navigation and pipeline driving.

``NavigationController`` owns the subscription to the
:class:`~genro_hashrouter.core.location.LocationObserver`: every emitted
snapshot becomes the resolver's ``latest`` location and starts a resolution
attempt as an ``asyncio.Task``.

Navigation API
--------------
``push(location)`` / ``replace(location)``
    Validate synchronously (``InvalidLocationError`` before any side
    effect), then return a task that first yields to the event loop, so
    pending writes from the caller land before navigation fires.

    - ``push`` stores the current scroll offsets in the entry being left,
      then sets the hash (creating a fresh entry without scroll metadata).
    - ``replace`` rewrites the current entry's URL, drops its scroll
      metadata, and re-publishes the location directly through the observer
      (replacing history state does not fire ``hashchange``).

``pop()``
    Returns a task asking the context to go one step back. Resolution is
    driven by the resulting ``hashchange``.

``follow(href)``
    The link-click sequence: store scroll offsets, set the hash, right away.

History-state failures raised by the context (sandboxed hosts) are logged
as warnings; navigation proceeds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from genro_hashrouter.exceptions import InvalidLocationError

from .context import SCROLL_X_KEY, SCROLL_Y_KEY, NavigationContext
from .location import Location, LocationObserver
from .resolver import ComponentResolver

__all__ = ["NavigationController", "validate_location"]

logger = logging.getLogger(__name__)


def validate_location(location: Any) -> str:
    """Return the hash destination for ``location`` or raise ``InvalidLocationError``."""
    if (
        not isinstance(location, str)
        or not location
        or not (location.startswith("/") or location.startswith("#/"))
    ):
        raise InvalidLocationError(location)
    return location if location.startswith("#") else f"#{location}"


class NavigationController:
    """Drives resolution on location changes and exposes push/pop/replace.

    Args:
        context: Host navigation capability.
        observer: Location store for ``context``.
        resolver: Resolver run for every emitted location.
        on_settled: Optional ``on_settled(outcome)`` called after every
            attempt that was not superseded.
    """

    __slots__ = (
        "context",
        "observer",
        "resolver",
        "_on_settled",
        "_unsubscribe",
        "_attempts",
        "_tasks",
    )

    def __init__(
        self,
        context: NavigationContext,
        observer: LocationObserver,
        resolver: ComponentResolver,
        *,
        on_settled: Callable[[str], None] | None = None,
    ) -> None:
        self.context = context
        self.observer = observer
        self.resolver = resolver
        self._on_settled = on_settled
        self._unsubscribe: Callable[[], None] | None = None
        self._attempts: set[asyncio.Task] = set()
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Subscription lifetime
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        """Subscribe to the observer; the current location resolves at once."""
        if self._unsubscribe is None:
            self._unsubscribe = self.observer.subscribe(self._on_location)

    def stop(self) -> None:
        """Unsubscribe from the observer. In-flight attempts finish as no-ops."""
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()
            self.resolver.latest = None

    async def settle(self) -> None:
        """Wait until no navigation or resolution task is pending."""
        while self._attempts or self._tasks:
            await asyncio.wait(self._attempts | self._tasks)

    def _on_location(self, location: Location | None) -> None:
        if location is None:
            return
        self.resolver.latest = location
        task = asyncio.get_running_loop().create_task(self._attempt(location))
        self._attempts.add(task)
        task.add_done_callback(self._attempt_done)

    async def _attempt(self, location: Location) -> str:
        outcome = await self.resolver.resolve(location)
        if outcome != "stale" and self._on_settled is not None:
            self._on_settled(outcome)
        return outcome

    def _attempt_done(self, task: asyncio.Task) -> None:
        self._attempts.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            task.get_loop().call_exception_handler(
                {
                    "message": "Unhandled exception while resolving a route",
                    "exception": exc,
                    "task": task,
                }
            )

    # ------------------------------------------------------------------
    # Navigation API
    # ------------------------------------------------------------------
    def push(self, location: str) -> asyncio.Task:
        """Navigate to ``location``, creating a new history entry."""
        destination = validate_location(location)
        return self.spawn(self._push(destination))

    def replace(self, location: str) -> asyncio.Task:
        """Replace the current history entry with ``location``."""
        destination = validate_location(location)
        return self.spawn(self._replace(destination))

    def pop(self) -> asyncio.Task:
        """Go back one history entry."""
        return self.spawn(self._pop())

    def follow(self, href: str) -> None:
        """Store scroll offsets in the current entry, then navigate to ``href``."""
        self._remember_scroll()
        self.context.set_hash(href)

    def spawn(self, awaitable: Awaitable[Any]) -> asyncio.Future:
        """Run ``awaitable`` on the loop; ``settle()`` waits for it."""
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _push(self, destination: str) -> None:
        await asyncio.sleep(0)
        self.follow(destination)

    async def _replace(self, destination: str) -> None:
        await asyncio.sleep(0)
        state = {
            key: value
            for key, value in (self.context.history_state or {}).items()
            if key not in (SCROLL_X_KEY, SCROLL_Y_KEY)
        }
        self._replace_state(state, destination)
        self.observer.refresh()

    async def _pop(self) -> None:
        await asyncio.sleep(0)
        self.context.go(-1)

    # ------------------------------------------------------------------
    # History helpers
    # ------------------------------------------------------------------
    def _remember_scroll(self) -> None:
        x, y = self.context.scroll_position
        state = dict(self.context.history_state or {})
        state[SCROLL_X_KEY] = x
        state[SCROLL_Y_KEY] = y
        self._replace_state(state)

    def _replace_state(self, state: dict[str, Any], url: str | None = None) -> None:
        try:
            self.context.replace_state(state, url)
        except Exception as exc:
            logger.warning(
                "Could not replace the current history entry (%s); "
                "the host may forbid history state changes",
                exc,
            )
