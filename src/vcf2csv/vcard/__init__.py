"""vCard decoding and record normalization."""

from vcf2csv.vcard.decoder import read_records
from vcf2csv.vcard.labels import build_label_map, normalize_label
from vcf2csv.vcard.models import (
    Entry,
    FieldOccurrence,
    NormalizedRecord,
    PersonName,
    RecordOutcome,
)
from vcf2csv.vcard.normalizer import normalize, normalize_records
from vcf2csv.vcard.record import WorkingRecord

__all__ = [
    "read_records",
    "build_label_map",
    "normalize_label",
    "Entry",
    "FieldOccurrence",
    "NormalizedRecord",
    "PersonName",
    "RecordOutcome",
    "normalize",
    "normalize_records",
    "WorkingRecord",
]
