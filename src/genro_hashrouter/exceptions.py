# Copyright 2025 Softwell S.r.l. - All Rights Reserved
# SPDX-License-Identifier: Apache-2.0
"""Exceptions for Genro HashRouter.

Every error here is raised synchronously, at table-build time or at call
time, and is never swallowed by the router. Rejected conditions are not
errors: they are reported through the ``conditionsFailed`` notification.
"""

from typing import Any

__all__ = [
    "HashRouterError",
    "InvalidPathError",
    "InvalidTargetError",
    "InvalidLocationError",
    "InvalidHrefError",
    "ActionMisuseError",
]


class HashRouterError(Exception):
    """Base class for all router errors."""


class InvalidPathError(HashRouterError):
    """Raised when a route pattern is malformed.

    Patterns must be non-empty strings starting with ``/`` or ``*``, or
    compiled regular expressions.

    Attributes:
        path: The rejected pattern.
    """

    def __init__(self, path: Any) -> None:
        self.path = path
        super().__init__(
            f"Invalid value for route path {path!r}: strings must start with / or *"
        )


class InvalidTargetError(HashRouterError):
    """Raised when a route target is neither a view nor a wrapped descriptor.

    Attributes:
        target: The rejected target (or argument name for ``wrap()`` errors).
    """

    def __init__(self, target: Any, reason: str | None = None) -> None:
        self.target = target
        super().__init__(reason or f"Invalid route target {target!r}")


class InvalidLocationError(HashRouterError):
    """Raised when ``push``/``replace`` receive a malformed location.

    Attributes:
        location: The rejected location.
    """

    def __init__(self, location: Any) -> None:
        self.location = location
        super().__init__(
            f"Invalid location {location!r}: must start with '/' or '#/'"
        )


class InvalidHrefError(HashRouterError):
    """Raised when a link is given a destination that is not a hash path.

    Attributes:
        href: The rejected href.
    """

    def __init__(self, href: Any) -> None:
        self.href = href
        super().__init__(f"Invalid value for 'href' attribute: {href!r}")


class ActionMisuseError(HashRouterError):
    """Raised when an element action is attached to the wrong element.

    Attributes:
        action: Name of the action (e.g. ``"link"``).
        element: The element it was attached to.
    """

    def __init__(self, action: str, element: Any) -> None:
        self.action = action
        self.element = element
        super().__init__(f"Action {action!r} can only be used with <a> elements")
