# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""The ``link`` element action.

Attaching the action to an anchor element:

1. normalizes its ``href``: ``/path`` becomes ``#/path``; anything else must
   already start with ``#/`` or ``InvalidHrefError`` is raised;
2. registers exactly one ``click`` listener. Primary clicks (button 0, no
   modifier keys) are intercepted: the default navigation is prevented and,
   unless the binding is disabled, the router stores the scroll position in
   the current history entry and sets the hash to the link's ``href``.

Modified clicks (new tab, new window, ...) are left to the host.

Example::

    binding = router.link(anchor, "/books/42")
    binding.update_options({"href": "/books/43", "disabled": True})
    binding.detach()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from genro_hashrouter.core.options import LinkOptions
from genro_hashrouter.exceptions import ActionMisuseError, InvalidHrefError

if TYPE_CHECKING:  # pragma: no cover
    from genro_hashrouter.core.context import HostClickEvent, HostElement
    from genro_hashrouter.core.navigation import NavigationController

__all__ = ["LinkAction", "LinkBinding", "normalize_href"]


def normalize_href(href: str | None) -> str:
    """Return ``href`` as a hash path or raise ``InvalidHrefError``."""
    if href and href.startswith("/"):
        return f"#{href}"
    if not href or len(href) < 2 or not href.startswith("#/"):
        raise InvalidHrefError(href)
    return href


def is_anchor(element: Any) -> bool:
    tag_name = getattr(element, "tag_name", None)
    return isinstance(tag_name, str) and tag_name.lower() == "a"


def _is_primary_click(event: HostClickEvent) -> bool:
    if getattr(event, "button", 0) != 0:
        return False
    return not any(
        getattr(event, flag, False) for flag in ("ctrl_key", "meta_key", "shift_key", "alt_key")
    )


class LinkBinding:
    """One ``link`` attachment: one click listener, detached exactly once."""

    __slots__ = ("element", "_navigation", "_options", "_attached", "_on_detach")

    def __init__(
        self,
        navigation: NavigationController,
        element: HostElement,
        options: LinkOptions,
        on_detach: Any = None,
    ) -> None:
        self.element = element
        self._navigation = navigation
        self._on_detach = on_detach
        self._apply(options)
        self._options = options
        element.add_event_listener("click", self._on_click)
        self._attached = True

    @property
    def options(self) -> LinkOptions:
        return self._options

    @property
    def attached(self) -> bool:
        return self._attached

    def update_options(self, options: Any) -> None:
        """Apply new options (href and/or disabled) to the live binding."""
        coerced = LinkOptions.coerce(options)
        self._apply(coerced)
        self._options = coerced

    def detach(self) -> None:
        """Remove the click listener. Safe to call more than once."""
        if not self._attached:
            return
        self._attached = False
        self.element.remove_event_listener("click", self._on_click)
        if self._on_detach is not None:
            self._on_detach(self)

    def _apply(self, options: LinkOptions) -> None:
        href = normalize_href(options.href or self.element.get_attribute("href"))
        self.element.set_attribute("href", href)

    def _on_click(self, event: HostClickEvent) -> None:
        if not _is_primary_click(event):
            return
        event.prevent_default()
        if self._options.disabled:
            return
        self._navigation.follow(self.element.get_attribute("href") or "")


class LinkAction:
    """Factory of :class:`LinkBinding` objects bound to one router."""

    __slots__ = ("_navigation", "_bindings")

    def __init__(self, navigation: NavigationController) -> None:
        self._navigation = navigation
        self._bindings: list[LinkBinding] = []

    @property
    def bindings(self) -> list[LinkBinding]:
        return list(self._bindings)

    def attach(self, element: HostElement, options: Any = None) -> LinkBinding:
        """Attach the action to an anchor element.

        Raises:
            ActionMisuseError: If ``element`` is not an anchor.
            InvalidHrefError: If the destination is not a hash path.
        """
        if not is_anchor(element):
            raise ActionMisuseError("link", element)
        binding = LinkBinding(
            self._navigation, element, LinkOptions.coerce(options), self._bindings.remove
        )
        self._bindings.append(binding)
        return binding

    def detach_all(self) -> None:
        for binding in list(self._bindings):
            binding.detach()
