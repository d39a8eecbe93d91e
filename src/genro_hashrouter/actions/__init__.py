"""Element actions for Genro HashRouter.

- ``link``: turns an anchor into a hash navigation trigger
- ``active``: toggles CSS classes while the location matches a path
"""

from .active import ActiveAction, ActiveBinding
from .link import LinkAction, LinkBinding, normalize_href

__all__ = ["ActiveAction", "ActiveBinding", "LinkAction", "LinkBinding", "normalize_href"]
