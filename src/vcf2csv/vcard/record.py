"""Per-record working copy that tracks which fields are still unconsumed."""

from __future__ import annotations

from typing import Callable, Iterable, Mapping

from vcf2csv.vcard.models import FieldOccurrence, RawRecord


class WorkingRecord:
    """A copy of a RawRecord that extraction steps consume from.

    The source mapping is never mutated. Whatever is left after all steps
    have run is what the normalizer did not understand.
    """

    def __init__(self, raw: Mapping[str, Iterable[FieldOccurrence]]):
        self._fields: RawRecord = {}
        for name, occurrences in raw.items():
            occurrences = list(occurrences)
            if occurrences:
                self._fields.setdefault(name.upper(), []).extend(occurrences)

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._fields

    def take(self, name: str) -> list[FieldOccurrence]:
        """Consume and return every occurrence of ``name``."""
        return self._fields.pop(name.upper(), [])

    def take_matching(
        self, name: str, predicate: Callable[[FieldOccurrence], bool]
    ) -> list[FieldOccurrence]:
        """Consume the occurrences of ``name`` that satisfy ``predicate``.

        Non-matching occurrences stay behind in their original order.
        """
        key = name.upper()
        taken, kept = [], []
        for occurrence in self._fields.get(key, []):
            (taken if predicate(occurrence) else kept).append(occurrence)
        if kept:
            self._fields[key] = kept
        else:
            self._fields.pop(key, None)
        return taken

    def remaining(self, ignore: Iterable[str] = ()) -> RawRecord:
        """Unconsumed fields, minus the names in ``ignore``."""
        skip = {n.upper() for n in ignore}
        return {
            name: list(occurrences)
            for name, occurrences in self._fields.items()
            if name not in skip
        }
