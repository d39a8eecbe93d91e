"""Core runtime aggregator for Genro HashRouter.

Exposes the runtime building blocks from a single module.

Public API:
    - ``BaseRouter``: Plugin-free hash router
    - ``Router``: Plugin-enabled router with loader middleware
    - ``NavigationContext``: Abstract host capability
    - ``wrap`` / ``Direct`` / ``Wrapped``: Route targets
    - ``Readable`` / ``Writable`` / ``derived``: Observable stores

Importing this module performs only imports; it does not register plugins
or instantiate routers.
"""

from .base_router import BaseRouter
from .context import NavigationContext
from .location import Location, LocationObserver, parse_location
from .matcher import compile_pattern
from .resolver import NavigationState, RouteDetail
from .route_table import RouteTable
from .router import Router
from .scroll import restore_scroll
from .stores import Readable, Writable, derived
from .targets import Direct, Wrapped, wrap

__all__ = [
    "BaseRouter",
    "Router",
    "NavigationContext",
    "Location",
    "LocationObserver",
    "parse_location",
    "compile_pattern",
    "RouteTable",
    "RouteDetail",
    "NavigationState",
    "restore_scroll",
    "Readable",
    "Writable",
    "derived",
    "Direct",
    "Wrapped",
    "wrap",
]
