# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""The ``active`` element action: highlight links matching the location.

Options (see :class:`~genro_hashrouter.core.options.ActiveOptions`):

- ``path``: route pattern string (``/books/*``) or compiled regex. Defaults
  to the element's ``href`` without its leading ``#``.
- ``class_name``: added while the location matches (default ``"active"``).
- ``inactive_class_name``: added while it does not.

Pattern strings use the route grammar and are tested against the location
path. Compiled regexes are searched in ``path?querystring``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from genro_hashrouter.core.matcher import compile_pattern
from genro_hashrouter.core.options import ActiveOptions
from genro_hashrouter.exceptions import InvalidPathError

if TYPE_CHECKING:  # pragma: no cover
    from genro_hashrouter.core.context import HostElement
    from genro_hashrouter.core.location import Location, LocationObserver

__all__ = ["ActiveAction", "ActiveBinding"]


def _toggle(element: HostElement, class_name: str | None, enabled: bool) -> None:
    if not class_name:
        return
    if enabled:
        element.add_class(class_name)
    else:
        element.remove_class(class_name)


class ActiveBinding:
    """One ``active`` attachment, following the location until detached."""

    __slots__ = ("element", "options", "matches", "_test", "_unsubscribe", "_on_detach")

    def __init__(
        self,
        observer: LocationObserver,
        element: HostElement,
        options: ActiveOptions,
        on_detach: Callable[[ActiveBinding], None] | None = None,
    ) -> None:
        self.element = element
        self._on_detach = on_detach
        path = options.path
        if not path and element.has_attribute("href"):
            path = element.get_attribute("href")
            if path and len(path) > 1 and path.startswith("#"):
                path = path[1:]
        if isinstance(path, re.Pattern):
            self._test: Callable[[Location], bool] = lambda loc: bool(path.search(str(loc)))
        elif isinstance(path, str) and path and path[0] in "/*":
            compiled = compile_pattern(path)
            self._test = lambda loc: compiled.match(loc.path) is not None
        else:
            raise InvalidPathError(path)
        self.options = options.model_copy(update={"path": path})
        self.matches = False
        self._unsubscribe: Callable[[], None] | None = observer.subscribe(self._check)

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def detach(self) -> None:
        """Stop following the location. Safe to call more than once."""
        if self._unsubscribe is None:
            return
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        unsubscribe()
        if self._on_detach is not None:
            self._on_detach(self)

    def _check(self, location: Location | None) -> None:
        if location is None:
            return
        self.matches = self._test(location)
        _toggle(self.element, self.options.class_name, self.matches)
        _toggle(self.element, self.options.inactive_class_name, not self.matches)


class ActiveAction:
    """Factory of :class:`ActiveBinding` objects following one observer."""

    __slots__ = ("_observer", "_bindings")

    def __init__(self, observer: LocationObserver) -> None:
        self._observer = observer
        self._bindings: list[ActiveBinding] = []

    @property
    def bindings(self) -> list[ActiveBinding]:
        return list(self._bindings)

    def attach(self, element: HostElement, options: Any = None) -> ActiveBinding:
        """Attach the action to ``element``.

        Raises:
            InvalidPathError: If no valid path can be determined.
        """
        binding = ActiveBinding(
            self._observer, element, ActiveOptions.coerce(options), self._bindings.remove
        )
        self._bindings.append(binding)
        return binding

    def detach_all(self) -> None:
        for binding in list(self._bindings):
            binding.detach()
