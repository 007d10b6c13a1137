"""Best-effort value formatting: dates, phone numbers, labeled values.

None of these raise on unrecognized input; they hand the value back as-is.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Iterable

# Month/day values carry no year; parse them in a leap year so 2/29 is valid.
_LEAP_YEAR = 2000

LABELED_VALUE_SEPARATOR = " - "

UNINFORMATIVE_TYPES = frozenset({"voice", "internet", "pref"})


def _parse_month_day(text: str) -> datetime:
    return datetime.strptime(f"{text}/{_LEAP_YEAR}", "%m/%d/%Y")


def _parse_iso(text: str) -> datetime:
    return datetime.strptime(text, "%Y-%m-%d")


def _parse_month_name(text: str) -> datetime:
    try:
        return datetime.strptime(text, "%B %d, %Y")
    except ValueError:
        return datetime.strptime(text, "%b %d, %Y")


_DATE_PARSERS = (_parse_month_day, _parse_iso, _parse_month_name)


def format_date(value: str) -> str:
    """Format a date as ``"Mar 5"``, dropping the year.

    Accepts ``3/5``, ``2024-03-05`` and ``March 5, 2024`` (or ``Mar 5, 2024``).
    """
    text = value.strip()
    for parse in _DATE_PARSERS:
        try:
            parsed = parse(text)
        except ValueError:
            continue
        return f"{parsed:%b} {parsed.day}"
    return value


def normalize_phone(raw: str) -> str:
    """Format a 10-digit number as ``(555) 123-4567``."""
    digits = re.sub(r"\D", "", raw)
    if len(digits) != 10:
        return raw
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def format_labeled(value: str, transform: Callable[[str], str] | None = None) -> str:
    """Rewrite ``"Value - Name"`` as ``"Name: transform(Value)"``.

    Without the separator the whole value goes through ``transform`` and no
    name prefix is added.
    """
    transform = transform or (lambda v: v)
    head, sep, name = value.partition(LABELED_VALUE_SEPARATOR)
    if not sep:
        return transform(value)
    return f"{name.strip()}: {transform(head.strip())}"


def append_types(text: str, types: Iterable[str]) -> str:
    """Append informative TYPE values, e.g. ``"jane@x.com (home)"``."""
    extra = sorted(
        {t.lower() for t in types if t and t.lower() not in UNINFORMATIVE_TYPES}
    )
    for type_name in extra:
        text = f"{text} ({type_name})"
    return text
