"""Key and LIKE-pattern helpers shared by the stores."""

from __future__ import annotations

import re

LIKE_ESCAPE = "\\"
NAMESPACE_SEPARATOR = ":"

_LIKE_SPECIAL = re.compile(r"[%_\\]")


def escape_like(value: str) -> str:
    """Escape ``%``, ``_`` and ``\\`` so *value* matches only itself in a LIKE pattern."""
    return _LIKE_SPECIAL.sub(lambda m: LIKE_ESCAPE + m.group(0), value)


def build_prefix_pattern(namespace: str | None) -> str:
    """Return the LIKE pattern matching every composite id under *namespace*.

    Without a namespace the pattern matches everything.
    """
    if namespace:
        return f"{escape_like(namespace)}{NAMESPACE_SEPARATOR}%"
    return "%"


def build_composite_id(namespace: str | None, key: str) -> str:
    """Return the primary-key value for *key* under *namespace*."""
    if namespace:
        return f"{namespace}{NAMESPACE_SEPARATOR}{key}"
    return key


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier, doubling any embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a LIKE *pattern* (backslash escape) into an anchored regex.

    Lets in-process stores apply exactly the prefix rules the SQL stores do.
    """
    parts: list[str] = []
    chars = iter(pattern)
    for ch in chars:
        if ch == LIKE_ESCAPE:
            parts.append(re.escape(next(chars, LIKE_ESCAPE)))
        elif ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.DOTALL)
