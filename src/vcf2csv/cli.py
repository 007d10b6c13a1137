"""Command line driver: vCard files (or stdin) in, CSV out."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator

from vcf2csv.diagnostics import UnusedFieldTally, log_outcome
from vcf2csv.exceptions import DecodeError, ExportError, NormalizationError
from vcf2csv.export.writer import write_entries
from vcf2csv.vcard.decoder import read_records
from vcf2csv.vcard.models import Entry, RawRecord, RecordOutcome
from vcf2csv.vcard.normalizer import normalize_records

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vcf2csv",
        description="Convert vCard contacts to a flat CSV table.",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        type=Path,
        help="vCard files to read (default: stdin)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="CSV file to write (default: stdout)",
    )
    parser.add_argument(
        "--header",
        action="store_true",
        help="write a header row before the entries",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="skip records that fail to normalize instead of stopping",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="log each record's labels and unused fields",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="log progress information",
    )
    return parser


def _read_inputs(paths: list[Path]) -> Iterator[RawRecord]:
    if not paths:
        yield from read_records(sys.stdin.buffer)
        return
    for path in paths:
        logger.info(f"Reading {path}")
        yield from read_records(path.read_bytes())


def _entries(
    outcomes: Iterable[RecordOutcome],
    keep_going: bool,
    failures: list[RecordOutcome],
    tally: UnusedFieldTally | None,
) -> Iterator[Entry]:
    for outcome in outcomes:
        if not outcome.ok:
            failures.append(outcome)
            if not keep_going:
                logger.error(
                    f"Stopping at record {outcome.index}; "
                    "use --keep-going to skip failed records"
                )
                raise outcome.error
            continue
        log_outcome(outcome, tally)
        yield outcome.record.entry


def run(
    inputs: list[Path],
    output: Path | None = None,
    header: bool = False,
    keep_going: bool = False,
    debug: bool = False,
) -> int:
    """Convert ``inputs`` to CSV; returns the process exit status."""
    failures: list[RecordOutcome] = []
    tally = UnusedFieldTally() if debug else None
    outcomes = normalize_records(_read_inputs(inputs))
    entries = _entries(outcomes, keep_going, failures, tally)

    try:
        if output is None:
            count = write_entries(entries, sys.stdout, header=header)
        else:
            with output.open("w", newline="", encoding="utf-8") as stream:
                count = write_entries(entries, stream, header=header)
    except NormalizationError:
        return 1
    except (DecodeError, ExportError, OSError) as e:
        logger.error(str(e))
        return 1
    finally:
        if tally is not None:
            logger.debug(tally.summary())

    if failures:
        logger.warning(f"Skipped {len(failures)} record(s) that failed to normalize")
        return 1
    logger.info(f"Converted {count} contacts")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose:
        level = logging.INFO
    if args.debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    return run(
        args.inputs,
        output=args.output,
        header=args.header,
        keep_going=args.keep_going,
        debug=args.debug,
    )
