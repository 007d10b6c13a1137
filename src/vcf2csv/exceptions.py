"""Unified exception hierarchy for vcf2csv."""

from __future__ import annotations

from typing import Any


class Vcf2CsvError(Exception):
    """Base exception for all vcf2csv errors."""


# Decoding
class DecodeError(Vcf2CsvError):
    """Failed to decode a vCard stream into records."""


# Normalization
class NormalizationError(Vcf2CsvError):
    """Base exception for per-record normalization failures.

    Args:
        message: Human-readable description of the failure.
        occurrence: The field occurrence that triggered it, if any.
    """

    def __init__(self, message: str, occurrence: Any = None):
        super().__init__(message)
        self.occurrence = occurrence


class MalformedRecord(NormalizationError):
    """Record does not have exactly one name field."""


class UnsupportedAddressShape(NormalizationError):
    """Address has a post-office-box or extended-address component."""


class UnknownDateField(NormalizationError):
    """Date field whose group label is not a known date kind."""


class DuplicateValueError(NormalizationError):
    """Second assignment to a single-valued attribute."""


# Export
class ExportError(Vcf2CsvError):
    """Failed to write normalized entries."""
