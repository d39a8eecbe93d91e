# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Validated option models for routers and element actions.

All models are frozen pydantic models; invalid values raise
``pydantic.ValidationError`` at construction time.

``RouterOptions``
    ``routes`` (mapping or sequence of ``(pattern, target)`` pairs),
    ``prefix`` (string or compiled regex, default ``""``),
    ``restore_scroll_state`` (default False) and the three lifecycle
    callbacks ``on_route_loading``, ``on_route_loaded``,
    ``on_conditions_failed``.

``LinkOptions``
    ``href`` (default: the element's own ``href``) and ``disabled``.

``ActiveOptions``
    ``path`` (pattern string or compiled regex; default: the element's
    ``href``), ``class_name`` (default ``"active"``) and
    ``inactive_class_name``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["RouterOptions", "LinkOptions", "ActiveOptions"]


class RouterOptions(BaseModel):
    """Router instantiation options."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    routes: Any = Field(default_factory=dict)
    prefix: Any = ""
    restore_scroll_state: bool = False
    on_route_loading: Callable[[Any], Any] | None = None
    on_route_loaded: Callable[[Any], Any] | None = None
    on_conditions_failed: Callable[[Any], Any] | None = None

    @field_validator("routes")
    @classmethod
    def _check_routes(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, (Mapping, list, tuple)):
            return value
        raise ValueError("routes must be a mapping or a sequence of (pattern, target) pairs")

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (str, re.Pattern)):
            return value
        raise ValueError("prefix must be a string or a compiled regular expression")


class LinkOptions(BaseModel):
    """Options of the ``link`` element action."""

    model_config = ConfigDict(frozen=True)

    href: str | None = None
    disabled: bool = False

    @classmethod
    def coerce(cls, value: Any) -> LinkOptions:
        """Accept ``None``, an href string, a mapping or a ``LinkOptions``."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(href=value)
        return cls.model_validate(value)


class ActiveOptions(BaseModel):
    """Options of the ``active`` element action."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Any = None
    class_name: str = "active"
    inactive_class_name: str | None = None

    @classmethod
    def coerce(cls, value: Any) -> ActiveOptions:
        """Accept ``None``, a path, a compiled regex, a mapping or an ``ActiveOptions``."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, (str, re.Pattern)):
            return cls(path=value)
        return cls.model_validate(value)
