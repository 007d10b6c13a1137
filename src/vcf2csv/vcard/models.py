"""Data models for the vCard module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from vcf2csv.exceptions import NormalizationError


@dataclass(frozen=True)
class FieldOccurrence:
    """One occurrence of a vCard field, e.g. ``item1.EMAIL;TYPE=HOME:...``."""

    value: str
    group: str = ""
    params: Mapping[str, frozenset] = field(default_factory=dict)

    def param(self, name: str) -> frozenset:
        """Values of parameter ``name``; empty when absent."""
        return self.params.get(name.upper(), frozenset())


# Field name (upper-cased) -> occurrences in source order.
RawRecord = dict[str, list[FieldOccurrence]]

# Group id -> normalized label.
LabelMap = dict[str, str]


@dataclass(frozen=True)
class PersonName:
    """Names taken from the ``N`` field.

    ``given`` and ``family`` are the components verbatim; ``primary`` and
    ``partner`` are derived by splitting ``given`` on ``&``.
    """

    given: str
    family: str
    primary: str
    partner: str = ""


@dataclass(frozen=True)
class Entry:
    """A normalized contact, one CSV row."""

    given_name: str
    family_name: str
    image: str = ""
    address: tuple[str, ...] = ()
    phone: tuple[str, ...] = ()
    email: tuple[str, ...] = ()
    birthday: tuple[str, ...] = ()
    children: tuple[str, ...] = ()
    anniversary: str = ""


@dataclass
class NormalizedRecord:
    """An Entry plus what the normalizer saw but did not use."""

    entry: Entry
    labels: LabelMap = field(default_factory=dict)
    unused: RawRecord = field(default_factory=dict)


@dataclass
class RecordOutcome:
    """Result of normalizing the ``index``-th record (1-based) of a stream."""

    index: int
    record: NormalizedRecord | None = None
    error: NormalizationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
