"""Decode a vCard stream into RawRecords using vobject."""

from __future__ import annotations

import base64
import logging
from typing import IO, Iterator

import vobject
from charset_normalizer import from_bytes

from vcf2csv.exceptions import DecodeError
from vcf2csv.vcard.models import FieldOccurrence, RawRecord
from vcf2csv.vcard.structured import join_components

logger = logging.getLogger(__name__)

# vCard 2.1 bare parameters that name an encoding, not a type.
_BARE_ENCODINGS = frozenset({"QUOTED-PRINTABLE", "BASE64", "8BIT", "7BIT"})


def decode_text(raw: bytes) -> str:
    """Decode vCard bytes, detecting the encoding best-effort."""
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw.decode("utf-8-sig", errors="replace")
    match = from_bytes(raw).best()
    if match is None:
        logger.debug("Encoding detection failed, decoding as UTF-8")
        return raw.decode("utf-8", errors="replace")
    logger.debug(f"Detected input encoding {match.encoding}")
    return str(match)


def read_records(source: str | bytes | IO) -> Iterator[RawRecord]:
    """Yield one RawRecord per VCARD component in ``source``.

    ``source`` may be text, bytes, or a text or binary stream. The iterator
    ends at end of stream; unparseable input raises DecodeError.
    """
    if hasattr(source, "read"):
        source = source.read()
    text = decode_text(source) if isinstance(source, bytes) else source

    components = vobject.readComponents(text)
    while True:
        try:
            component = next(components)
        except StopIteration:
            return
        except (vobject.base.VObjectError, ValueError) as e:
            # ValueError covers binascii.Error from bad embedded base64.
            raise DecodeError(f"Failed to decode vCard stream: {e}") from e

        if component.name.upper() != "VCARD":
            logger.warning(f"Skipping non-vCard component {component.name}")
            continue
        yield to_raw_record(component)


def to_raw_record(component) -> RawRecord:
    """Flatten a vobject component into field name -> occurrences."""
    record: RawRecord = {}
    for lines in component.contents.values():
        for line in lines:
            if not isinstance(line, vobject.base.ContentLine):
                continue
            record.setdefault(line.name.upper(), []).append(
                FieldOccurrence(
                    value=_value_text(line.value),
                    group=line.group or "",
                    params=_params(line.params, getattr(line, "singletonparams", ())),
                )
            )
    return record


def _value_text(value) -> str:
    if isinstance(value, vobject.vcard.Name):
        return join_components([
            value.family,
            value.given,
            value.additional,
            value.prefix,
            value.suffix,
        ])
    if isinstance(value, vobject.vcard.Address):
        return join_components([
            value.box,
            value.extended,
            value.street,
            value.city,
            value.region,
            value.code,
            value.country,
        ])
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    if value is None:
        return ""
    return str(value)


def _params(params: dict, singletons=()) -> dict[str, frozenset]:
    """Upper-case names, split comma lists, and file vCard 2.1 bare params
    (`TEL;HOME;VOICE:`) under TYPE.
    """
    out: dict[str, frozenset] = {}
    for name, values in params.items():
        split = [
            part.strip()
            for value in values
            for part in str(value).split(",")
            if part.strip()
        ]
        out[name.upper()] = frozenset(split)

    bare = {
        str(s).strip()
        for s in singletons
        if str(s).strip() and str(s).strip().upper() not in _BARE_ENCODINGS
    }
    if bare:
        out["TYPE"] = out.get("TYPE", frozenset()) | bare
    return out
