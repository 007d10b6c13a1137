"""Report what the normalizer saw but did not use."""

from __future__ import annotations

import logging

from vcf2csv.vcard.models import NormalizedRecord, RecordOutcome

logger = logging.getLogger(__name__)


def describe_record(index: int, record: NormalizedRecord) -> list[str]:
    """Readable lines for one record's label map and unused fields."""
    lines = [f"record {index}: labels {record.labels}"]
    for name, occurrences in sorted(record.unused.items()):
        for occurrence in occurrences:
            group = f"{occurrence.group}." if occurrence.group else ""
            params = {k: sorted(v) for k, v in sorted(occurrence.params.items())}
            lines.append(f"record {index}: unused {group}{name} {occurrence.value!r} {params}")
    return lines


class UnusedFieldTally:
    """Largest per-record occurrence count of each unused field name."""

    def __init__(self):
        self.counts: dict[str, int] = {}

    def add(self, record: NormalizedRecord) -> None:
        for name, occurrences in record.unused.items():
            if self.counts.get(name, 0) < len(occurrences):
                self.counts[name] = len(occurrences)

    def summary(self) -> str:
        if not self.counts:
            return "unused fields: none"
        fields = ", ".join(f"{name}={count}" for name, count in sorted(self.counts.items()))
        return f"unused fields: {fields}"


def log_outcome(outcome: RecordOutcome, tally: UnusedFieldTally | None = None) -> None:
    """Log diagnostics for a successful outcome at debug level."""
    if outcome.record is None:
        return
    if tally is not None:
        tally.add(outcome.record)
    if logger.isEnabledFor(logging.DEBUG):
        for line in describe_record(outcome.index, outcome.record):
            logger.debug(line)
