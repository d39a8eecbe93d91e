"""Genro HashRouter - Hash-based client-side routing engine for Python hosts.

Public API surface mapping location fragments (``#/path?query``) to views,
with guarded and lazily loaded routes, history navigation, scroll
continuity, element actions and per-router plugins.

Public exports:
    - ``Router``: Main router class binding a route map to a navigation context
    - ``wrap``: Build a wrapped route target (lazy view, conditions, props)
    - ``NavigationContext``: Abstract host capability implemented per host
    - ``RouteDetail`` / ``NavigationState``: Values delivered to consumers
    - ``restore_scroll``: Scroll to the offsets stored in a history state

Plugin registration happens lazily via ``import_module`` to avoid cycles.
Built-in plugins (logging) are auto-registered on first import.

Example::

    from genro_hashrouter import Router, wrap
    from genro_hashrouter.testing import MemoryContext

    async def main():
        router = Router(
            MemoryContext("#/books/42"),
            {
                "/": Home,
                "/books/:id": Book,
                "/admin": wrap(async_view=load_admin, conditions=[is_admin]),
                "*": NotFound,
            },
        )
        await router.settle()
        router.state.value.view    # Book
        router.params.value        # {"id": "42"}
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    BaseRouter,
    Direct,
    Location,
    NavigationContext,
    NavigationState,
    RouteDetail,
    Router,
    Wrapped,
    restore_scroll,
    wrap,
)
from .actions import ActiveBinding, LinkBinding  # after .core: actions import core modules
from .core.options import ActiveOptions, LinkOptions, RouterOptions
from .exceptions import (
    ActionMisuseError,
    HashRouterError,
    InvalidHrefError,
    InvalidLocationError,
    InvalidPathError,
    InvalidTargetError,
)

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging",):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "Router",
    "BaseRouter",
    "NavigationContext",
    "Location",
    "RouteDetail",
    "NavigationState",
    "Direct",
    "Wrapped",
    "wrap",
    "restore_scroll",
    "RouterOptions",
    "LinkOptions",
    "ActiveOptions",
    "LinkBinding",
    "ActiveBinding",
    "HashRouterError",
    "InvalidPathError",
    "InvalidTargetError",
    "InvalidLocationError",
    "InvalidHrefError",
    "ActionMisuseError",
]
