"""Resolve Apple Address Book group labels (``itemN.X-ABLABEL``)."""

from __future__ import annotations

import logging
import re

from vcf2csv.vcard.models import FieldOccurrence, LabelMap
from vcf2csv.vcard.record import WorkingRecord

logger = logging.getLogger(__name__)

LABEL_FIELD = "X-ABLABEL"

# Built-in labels are written as _$!<Name>!$_, custom ones as plain text.
_VENDOR_LABEL = re.compile(r"^_\$!<(.*)>!\$_$", re.DOTALL)


def normalize_label(label: str) -> str:
    """Reduce a vendor-canonical or free-text label to plain text.

    Brackets are stripped until none remain, so the result is stable.
    """
    text = label.strip()
    match = _VENDOR_LABEL.match(text)
    while match:
        text = match.group(1).strip()
        match = _VENDOR_LABEL.match(text)
    return text


def _group_key(group: str) -> str:
    # vCard group names are case-insensitive.
    return group.lower()


def build_label_map(record: WorkingRecord) -> LabelMap:
    """Consume the label field and map each group id (lower-cased) to its label."""
    labels: LabelMap = {}
    for occurrence in record.take(LABEL_FIELD):
        label = normalize_label(occurrence.value)
        if not occurrence.group:
            logger.debug(f"Ignoring ungrouped label {label!r}")
            continue
        key = _group_key(occurrence.group)
        if key in labels:
            logger.debug(f"Group {key!r} relabeled {labels[key]!r} -> {label!r}")
        labels[key] = label
    return labels


def label_for(labels: LabelMap, occurrence: FieldOccurrence) -> str | None:
    """The resolved label of ``occurrence``'s group, if it has one."""
    if not occurrence.group:
        return None
    return labels.get(_group_key(occurrence.group))
