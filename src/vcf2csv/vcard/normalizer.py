"""Normalize raw vCard records into flat Entry records.

This is a pure transformation: no I/O. Each extraction step consumes the
fields it understands from a WorkingRecord, so whatever is left at the end
is reported back as unused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from vcf2csv.exceptions import (
    DuplicateValueError,
    MalformedRecord,
    NormalizationError,
    UnknownDateField,
    UnsupportedAddressShape,
)
from vcf2csv.vcard.formatting import (
    append_types,
    format_date,
    format_labeled,
    normalize_phone,
)
from vcf2csv.vcard.labels import build_label_map, label_for
from vcf2csv.vcard.models import (
    Entry,
    FieldOccurrence,
    LabelMap,
    NormalizedRecord,
    PersonName,
    RawRecord,
    RecordOutcome,
)
from vcf2csv.vcard.record import WorkingRecord
from vcf2csv.vcard.structured import split_components

logger = logging.getLogger(__name__)

NAME_FIELD = "N"
FORMATTED_NAME_FIELD = "FN"
ADDRESS_FIELD = "ADR"
BIRTHDAY_FIELD = "BDAY"
DATE_FIELD = "X-ABDATE"
RELATED_NAMES_FIELD = "X-ABRELATEDNAMES"
EMAIL_FIELD = "EMAIL"
PHONE_FIELD = "TEL"
PHOTO_FIELD = "PHOTO"

ANNIVERSARY_LABEL = "Anniversary"
CHILD_LABEL = "Child"
BIRTHDAY_LABELS = frozenset({"Birthday", "Partner", "Spouse"})
RELATED_LABELS = BIRTHDAY_LABELS | {CHILD_LABEL, ANNIVERSARY_LABEL}

# Present on every card and carry nothing worth exporting.
IGNORED_FIELDS = frozenset({"UID", "VERSION", "CATEGORIES", "PRODID"})

CO_RESIDENT_DELIMITER = "&"


@dataclass
class DateFields:
    """Accumulates birthday, children and anniversary for one record."""

    birthday: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)
    anniversary: str = ""
    _anniversary_source: FieldOccurrence | None = field(default=None, repr=False)

    def set_anniversary(self, value: str, occurrence: FieldOccurrence) -> None:
        if self._anniversary_source is not None:
            raise DuplicateValueError(
                f"Anniversary already set to {self.anniversary!r} "
                f"from {self._anniversary_source.value!r}; "
                f"second value {occurrence.value!r}",
                occurrence,
            )
        self.anniversary = value
        self._anniversary_source = occurrence


def extract_names(record: WorkingRecord) -> PersonName:
    """Read the single ``N`` field and split off a co-resident name."""
    occurrences = record.take(NAME_FIELD)
    if len(occurrences) != 1:
        raise MalformedRecord(
            f"Expected exactly one {NAME_FIELD} field, found {len(occurrences)}",
            occurrences[1] if len(occurrences) > 1 else None,
        )
    record.take(FORMATTED_NAME_FIELD)

    family, given = split_components(occurrences[0].value, count=2)[:2]
    primary, _, partner = given.partition(CO_RESIDENT_DELIMITER)
    return PersonName(
        given=given,
        family=family,
        primary=primary.strip(),
        partner=partner.strip(),
    )


def extract_addresses(record: WorkingRecord) -> list[str]:
    """Format each ``ADR`` as a street line and a locality line."""
    addresses = []
    for occurrence in record.take(ADDRESS_FIELD):
        box, extended, street, locality, region, code = split_components(
            occurrence.value, count=7
        )[:6]
        if box or extended:
            raise UnsupportedAddressShape(
                f"Address has a PO box or extended component: {occurrence.value!r}",
                occurrence,
            )
        addresses.append(f"{street}\n{locality}, {region} {code}")
    return addresses


def extract_dates(
    record: WorkingRecord, labels: LabelMap, names: PersonName
) -> DateFields:
    """Collect dates from X-ABDATE, BDAY and X-ABRELATEDNAMES, in that order."""
    dates = DateFields()

    for occurrence in record.take(DATE_FIELD):
        label = label_for(labels, occurrence)
        if label != ANNIVERSARY_LABEL:
            raise UnknownDateField(
                f"{DATE_FIELD} with label {label!r} is not an anniversary",
                occurrence,
            )
        dates.set_anniversary(format_date(occurrence.value), occurrence)

    birthdays = record.take(BIRTHDAY_FIELD)
    if birthdays:
        birthday = format_date(birthdays[0].value)
        if names.partner:
            birthday = f"{names.primary}: {birthday}"
        dates.birthday.append(birthday)

    related = record.take_matching(
        RELATED_NAMES_FIELD, lambda o: label_for(labels, o) in RELATED_LABELS
    )
    for occurrence in related:
        label = label_for(labels, occurrence)
        value = format_labeled(occurrence.value, format_date)
        if label in BIRTHDAY_LABELS:
            dates.birthday.append(value)
        elif label == CHILD_LABEL:
            dates.children.append(value)
        else:
            dates.set_anniversary(value, occurrence)

    return dates


def _format_contact(occurrence: FieldOccurrence, transform=None) -> str:
    text = format_labeled(occurrence.value, transform)
    return append_types(text, occurrence.param("TYPE"))


def extract_emails(record: WorkingRecord) -> list[str]:
    return [_format_contact(o) for o in record.take(EMAIL_FIELD)]


def extract_phones(record: WorkingRecord) -> list[str]:
    return [_format_contact(o, normalize_phone) for o in record.take(PHONE_FIELD)]


def _is_photo_reference(occurrence: FieldOccurrence) -> bool:
    if "uri" in {v.lower() for v in occurrence.param("VALUE")}:
        return True
    return occurrence.value.lower().startswith(("http://", "https://"))


def extract_image(record: WorkingRecord) -> str:
    """First PHOTO given by URL; embedded photos are left unconsumed."""
    photos = record.take_matching(PHOTO_FIELD, _is_photo_reference)
    return photos[0].value if photos else ""


def normalize(raw: Mapping[str, Iterable[FieldOccurrence]]) -> NormalizedRecord:
    """Normalize one record, or raise a NormalizationError subclass."""
    record = WorkingRecord(raw)
    labels = build_label_map(record)
    names = extract_names(record)
    addresses = extract_addresses(record)
    dates = extract_dates(record, labels, names)
    emails = extract_emails(record)
    phones = extract_phones(record)
    image = extract_image(record)

    entry = Entry(
        given_name=names.given,
        family_name=names.family,
        image=image,
        address=tuple(addresses),
        phone=tuple(phones),
        email=tuple(emails),
        birthday=tuple(dates.birthday),
        children=tuple(dates.children),
        anniversary=dates.anniversary,
    )
    return NormalizedRecord(
        entry=entry,
        labels=labels,
        unused=record.remaining(IGNORED_FIELDS),
    )


def normalize_records(raws: Iterable[RawRecord]) -> Iterator[RecordOutcome]:
    """Normalize records in order; one failure never affects the others."""
    for index, raw in enumerate(raws, start=1):
        try:
            normalized = normalize(raw)
        except NormalizationError as e:
            logger.warning(f"Record {index}: {type(e).__name__}: {e}")
            yield RecordOutcome(index=index, error=e)
            continue
        yield RecordOutcome(index=index, record=normalized)
