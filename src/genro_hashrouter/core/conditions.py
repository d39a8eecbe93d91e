# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Sequential pre-condition gate for matched routes."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from typing import Any

__all__ = ["check_conditions"]


async def check_conditions(conditions: Iterable[Callable[[Any], Any]], detail: Any) -> bool:
    """Evaluate ``conditions`` in order, stopping at the first falsy result.

    Each predicate receives ``detail`` and may return a value or an
    awaitable. Exceptions raised by a predicate propagate to the caller.

    Returns:
        True if every predicate passed (or there are none), False otherwise.
    """
    for condition in conditions:
        result = condition(detail)
        if inspect.isawaitable(result):
            result = await result
        if not result:
            return False
    return True
