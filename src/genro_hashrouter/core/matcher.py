# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Route pattern compiler and matcher.

Pattern grammar
---------------
- ``/literal``: matches the segment verbatim (case-insensitive).
- ``/:name``: captures one segment as parameter ``name``.
- ``/:name?``: optional segment; the parameter is ``None`` when absent.
- ``/:name.ext`` / ``/:name?.ext``: parameter followed by a literal suffix.
- ``/*``: matches any remaining suffix after the ``/``. Not captured.
- ``*`` alone matches every path.
- A trailing ``/`` on the path is always optional.

Compiled regular expressions are accepted verbatim; their result carries no
parameter names (``param_names is False``) and ``match`` returns the raw
``re.Match``.

Parameter values are URL-decoded. An empty capture, a malformed ``%``
escape or an escape sequence that is not valid UTF-8 yields ``None``;
decoding never raises.

Example::

    compiled = compile_pattern("/book/:id/:chapter?")
    compiled.match("/book/42")      # {"id": "42", "chapter": None}
    compiled.match("/author/42")    # None
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from genro_hashrouter.exceptions import InvalidPathError

__all__ = ["CompiledPattern", "compile_pattern", "decode_param", "validate_path"]

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class CompiledPattern:
    """Compiled route pattern.

    Attributes:
        regex: Compiled regular expression run against the path.
        param_names: Parameter names in capture order, or ``False`` for an
            opaque regular expression.
    """

    regex: re.Pattern[str]
    param_names: tuple[str, ...] | bool

    def match(self, path: str) -> dict[str, str | None] | re.Match[str] | None:
        """Match ``path`` and return parameters, the raw match, or ``None``."""
        found = self.regex.match(path)
        if found is None:
            return None
        if self.param_names is False:
            return found
        groups = found.groups()
        return {
            name: decode_param(groups[index] if index < len(groups) else None)
            for index, name in enumerate(self.param_names)  # type: ignore[arg-type]
        }


def validate_path(path: Any) -> str | re.Pattern[str]:
    """Return ``path`` if it is an acceptable pattern, else raise ``InvalidPathError``."""
    if isinstance(path, re.Pattern):
        return path
    if not isinstance(path, str) or not path or path[0] not in "/*":
        raise InvalidPathError(path)
    return path


def compile_pattern(path: str | re.Pattern[str]) -> CompiledPattern:
    """Compile a route pattern into a :class:`CompiledPattern`.

    Raises:
        InvalidPathError: If ``path`` is not a valid pattern.
    """
    path = validate_path(path)
    if isinstance(path, re.Pattern):
        return CompiledPattern(path, False)

    names: list[str] = []
    source = ""
    segments = path.split("/")
    if not segments[0]:
        segments.pop(0)
    for segment in segments:
        if not segment:
            break
        head = segment[0]
        if head == "*":
            source += "/.*"
        elif head == ":":
            optional = segment.find("?", 1)
            ext = segment.find(".", 1)
            end = optional if optional != -1 else ext if ext != -1 else len(segment)
            names.append(segment[1:end])
            if optional != -1 and ext == -1:
                source += "(?:/([^/]+?))?"
            else:
                source += "/([^/]+?)"
            if ext != -1:
                source += ("?" if optional != -1 else "") + re.escape(segment[ext:])
        else:
            source += "/" + re.escape(segment)
    regex = re.compile(f"^{source}/?$", re.IGNORECASE)
    return CompiledPattern(regex, tuple(names))


def decode_param(value: str | None) -> str | None:
    """URL-decode a captured segment; ``None`` for empty or undecodable values."""
    if not value:
        return None
    if _MALFORMED_ESCAPE.search(value):
        return None
    try:
        decoded = unquote(value, errors="strict")
    except UnicodeDecodeError:
        return None
    return decoded or None
