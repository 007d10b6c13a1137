"""Serialize normalized entries as fixed 9-column CSV rows."""

from __future__ import annotations

import csv
import logging
from typing import IO, Iterable

from vcf2csv.exceptions import ExportError
from vcf2csv.vcard.models import Entry

logger = logging.getLogger(__name__)

# Column order is a compatibility contract with downstream consumers.
COLUMNS = (
    "Given Name",
    "Family Name",
    "Image",
    "Address",
    "Phone",
    "Email",
    "Birthday",
    "Children",
    "Anniversary",
)

ADDRESS_SEPARATOR = "\n\n"
LIST_SEPARATOR = "\n"


def entry_to_row(entry: Entry) -> list[str]:
    """Flatten an Entry into the column order of ``COLUMNS``."""
    return [
        entry.given_name,
        entry.family_name,
        entry.image,
        ADDRESS_SEPARATOR.join(entry.address),
        LIST_SEPARATOR.join(entry.phone),
        LIST_SEPARATOR.join(entry.email),
        LIST_SEPARATOR.join(entry.birthday),
        LIST_SEPARATOR.join(entry.children),
        entry.anniversary,
    ]


def write_entries(
    entries: Iterable[Entry],
    stream: IO[str],
    header: bool = False,
) -> int:
    """Write entries to ``stream`` and return the number of data rows."""
    writer = csv.writer(stream, lineterminator="\n")
    if header:
        _write_row(writer, COLUMNS, "header")
    count = 0
    for entry in entries:
        count += 1
        _write_row(writer, entry_to_row(entry), f"row {count}")
    logger.info(f"Wrote {count} entries")
    return count


def _write_row(writer, row, where: str) -> None:
    try:
        writer.writerow(row)
    except (csv.Error, OSError) as e:
        raise ExportError(f"Failed to write CSV {where}: {e}") from e
