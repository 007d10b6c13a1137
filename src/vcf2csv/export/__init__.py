"""CSV export of normalized contacts."""

from vcf2csv.export.writer import COLUMNS, entry_to_row, write_entries

__all__ = [
    "COLUMNS",
    "entry_to_row",
    "write_entries",
]
