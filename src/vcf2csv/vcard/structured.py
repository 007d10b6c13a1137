"""Text form of structured vCard values (``N``, ``ADR``)."""

from __future__ import annotations

import re

_UNESCAPED_SEMICOLON = re.compile(r"(?<!\\)((?:\\\\)*);")
_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


def split_components(value: str, count: int = 0) -> list[str]:
    """Split a structured value on unescaped ``;`` and unescape each part.

    When ``count`` is given the result is padded with empty strings to at
    least that many components.
    """
    parts = []
    start = 0
    for match in _UNESCAPED_SEMICOLON.finditer(value):
        end = match.end() - 1
        parts.append(value[start:end])
        start = match.end()
    parts.append(value[start:])

    components = [unescape(p) for p in parts]
    if len(components) < count:
        components.extend([""] * (count - len(components)))
    return components


def join_components(components: list[str | list[str]]) -> str:
    """Inverse of ``split_components``; list components are comma-joined."""
    out = []
    for component in components:
        if isinstance(component, (list, tuple)):
            out.append(",".join(escape(str(c)) for c in component))
        else:
            out.append(escape(str(component or "")))
    return ";".join(out)


def escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def unescape(text: str) -> str:
    return _ESCAPE.sub(lambda m: "\n" if m.group(1) in "nN" else m.group(1), text)
