"""Tests for the record normalizer."""

import pytest

from vcf2csv.exceptions import (
    DuplicateValueError,
    MalformedRecord,
    NormalizationError,
    UnknownDateField,
    UnsupportedAddressShape,
)
from vcf2csv.vcard.models import Entry, FieldOccurrence
from vcf2csv.vcard.normalizer import normalize, normalize_records


def _occ(text, group="", **params):
    return FieldOccurrence(
        value=text,
        group=group,
        params={k.upper(): frozenset(v) for k, v in params.items()},
    )


def _record(name="Smith;Jane;;;", **fields):
    raw = {"N": [_occ(name)], "FN": [_occ("Jane Smith")]}
    for key, occurrences in fields.items():
        raw[key.replace("_", "-")] = occurrences
    return raw


def test_minimal_record():
    result = normalize(_record())
    assert result.entry == Entry(given_name="Jane", family_name="Smith")
    assert result.labels == {}
    assert result.unused == {}


def test_missing_name_is_malformed():
    with pytest.raises(MalformedRecord, match="found 0"):
        normalize({"FN": [_occ("Jane Smith")]})


def test_two_names_is_malformed():
    raw = {"N": [_occ("Smith;Jane;;;"), _occ("Doe;John;;;")]}
    with pytest.raises(MalformedRecord, match="found 2") as exc:
        normalize(raw)
    assert exc.value.occurrence.value == "Doe;John;;;"


def test_names_kept_verbatim_with_co_resident():
    result = normalize(_record(name="Smith;Jane & Bob;;;"))
    assert result.entry.given_name == "Jane & Bob"
    assert result.entry.family_name == "Smith"


def test_end_to_end_co_resident_birthday():
    raw = _record(name=";Jane & Bob Smith;;;", BDAY=[_occ("1980-03-05")])
    entry = normalize(raw).entry
    assert entry.given_name == "Jane & Bob Smith"
    assert entry.birthday == ("Jane: Mar 5",)


def test_birthday_without_co_resident_is_bare():
    entry = normalize(_record(BDAY=[_occ("1980-03-05")])).entry
    assert entry.birthday == ("Mar 5",)


def test_address_formatting():
    raw = _record(ADR=[
        _occ(";;1 Main St;Springfield;IL;62701;USA"),
        _occ(";;2 Oak Ave;Shelbyville;IL;62565;"),
    ])
    entry = normalize(raw).entry
    assert entry.address == (
        "1 Main St\nSpringfield, IL 62701",
        "2 Oak Ave\nShelbyville, IL 62565",
    )


@pytest.mark.parametrize("value", ["PO Box 12;;1 Main St;Town;ST;00000;", ";Suite 4;1 Main St;Town;ST;00000;"])
def test_address_with_box_or_extended_rejected(value):
    with pytest.raises(UnsupportedAddressShape) as exc:
        normalize(_record(ADR=[_occ(value)]))
    assert exc.value.occurrence.value == value


def test_related_child():
    raw = _record(
        X_ABLABEL=[_occ("_$!<Child>!$_", group="item1")],
        X_ABRELATEDNAMES=[_occ("3/5 - Jane", group="item1")],
    )
    entry = normalize(raw).entry
    assert entry.children == ("Jane: Mar 5",)
    assert entry.birthday == ()


@pytest.mark.parametrize("label", ["_$!<Spouse>!$_", "_$!<Partner>!$_", "Birthday"])
def test_related_birthday_labels(label):
    raw = _record(
        X_ABLABEL=[_occ(label, group="item1")],
        X_ABRELATEDNAMES=[_occ("1975-07-04 - Bob", group="item1")],
    )
    assert normalize(raw).entry.birthday == ("Bob: Jul 4",)


def test_bday_comes_before_related_birthdays():
    raw = _record(
        BDAY=[_occ("3/5")],
        X_ABLABEL=[_occ("_$!<Spouse>!$_", group="item1")],
        X_ABRELATEDNAMES=[_occ("7/4 - Bob", group="item1")],
    )
    assert normalize(raw).entry.birthday == ("Mar 5", "Bob: Jul 4")


def test_related_unknown_label_left_unused():
    raw = _record(
        X_ABLABEL=[
            _occ("_$!<Child>!$_", group="item1"),
            _occ("_$!<Friend>!$_", group="item2"),
        ],
        X_ABRELATEDNAMES=[
            _occ("Max", group="item1"),
            _occ("Sam", group="item2"),
        ],
    )
    result = normalize(raw)
    assert result.entry.children == ("Max",)
    assert [o.value for o in result.unused["X-ABRELATEDNAMES"]] == ["Sam"]
    assert result.labels == {"item1": "Child", "item2": "Friend"}


def test_anniversary_from_date_field():
    raw = _record(
        X_ABLABEL=[_occ("_$!<Anniversary>!$_", group="item3")],
        X_ABDATE=[_occ("2010-06-12", group="item3")],
    )
    result = normalize(raw)
    assert result.entry.anniversary == "Jun 12"
    assert "X-ABDATE" not in result.unused


def test_anniversary_from_related_name():
    raw = _record(
        X_ABLABEL=[_occ("Anniversary", group="item1")],
        X_ABRELATEDNAMES=[_occ("6/12 - Wedding", group="item1")],
    )
    assert normalize(raw).entry.anniversary == "Wedding: Jun 12"


def test_unlabeled_date_field_is_unknown():
    raw = _record(X_ABDATE=[_occ("2010-06-12", group="item3")])
    with pytest.raises(UnknownDateField):
        normalize(raw)


def test_other_date_label_is_unknown():
    raw = _record(
        X_ABLABEL=[_occ("_$!<Other>!$_", group="item3")],
        X_ABDATE=[_occ("2010-06-12", group="item3")],
    )
    with pytest.raises(UnknownDateField, match="Other"):
        normalize(raw)


def test_two_anniversary_sources_is_duplicate():
    raw = _record(
        X_ABLABEL=[
            _occ("_$!<Anniversary>!$_", group="item1"),
            _occ("_$!<Anniversary>!$_", group="item2"),
        ],
        X_ABDATE=[_occ("2010-06-12", group="item1")],
        X_ABRELATEDNAMES=[_occ("6/12 - Wedding", group="item2")],
    )
    with pytest.raises(DuplicateValueError) as exc:
        normalize(raw)
    assert exc.value.occurrence.value == "6/12 - Wedding"


def test_emails_and_phones():
    raw = _record(
        EMAIL=[
            _occ("jane@x.com", type={"INTERNET", "HOME", "pref"}),
            _occ("jane@work.com - Work"),
        ],
        TEL=[
            _occ("(555) 123-4567", type={"CELL", "VOICE"}),
            _occ("555.987.6543 - Desk"),
            _occ("123-4567"),
        ],
    )
    entry = normalize(raw).entry
    assert entry.email == ("jane@x.com (home)", "Work: jane@work.com")
    assert entry.phone == ("(555) 123-4567 (cell)", "Desk: (555) 987-6543", "123-4567")


def test_photo_url_becomes_image():
    raw = _record(PHOTO=[_occ("https://example.com/jane.jpg", value={"uri"})])
    result = normalize(raw)
    assert result.entry.image == "https://example.com/jane.jpg"
    assert "PHOTO" not in result.unused


def test_embedded_photo_left_unused():
    raw = _record(PHOTO=[_occ("aGVsbG8=", encoding={"b"})])
    result = normalize(raw)
    assert result.entry.image == ""
    assert "PHOTO" in result.unused


def test_unused_excludes_ignored_fields():
    raw = _record(
        UID=[_occ("abc")],
        VERSION=[_occ("3.0")],
        CATEGORIES=[_occ("friends")],
        NOTE=[_occ("met at conference")],
    )
    assert list(normalize(raw).unused) == ["NOTE"]


def test_normalize_does_not_mutate_input():
    raw = _record(EMAIL=[_occ("jane@x.com")])
    normalize(raw)
    assert "EMAIL" in raw and "N" in raw


def test_normalize_records_isolates_failures():
    raws = [_record(), {"FN": [_occ("No Name")]}, _record(name="Doe;John;;;")]
    outcomes = list(normalize_records(raws))
    assert [o.index for o in outcomes] == [1, 2, 3]
    assert [o.ok for o in outcomes] == [True, False, True]
    assert isinstance(outcomes[1].error, NormalizationError)
    assert outcomes[1].record is None
    assert outcomes[2].record.entry.given_name == "John"


def test_first_bday_wins_and_all_are_consumed():
    raw = _record(BDAY=[_occ("1980-03-05"), _occ("1981-07-04")])
    result = normalize(raw)
    assert result.entry.birthday == ("Mar 5",)
    assert "BDAY" not in result.unused


def test_two_anniversary_date_fields_is_duplicate():
    raw = _record(
        X_ABLABEL=[
            _occ("_$!<Anniversary>!$_", group="item1"),
            _occ("_$!<Anniversary>!$_", group="item2"),
        ],
        X_ABDATE=[
            _occ("2010-06-12", group="item1"),
            _occ("2011-06-12", group="item2"),
        ],
    )
    with pytest.raises(DuplicateValueError) as exc:
        normalize(raw)
    assert exc.value.occurrence.value == "2011-06-12"


def test_group_ids_match_case_insensitively():
    raw = _record(
        X_ABLABEL=[_occ("_$!<Anniversary>!$_", group="item1")],
        X_ABDATE=[_occ("2010-06-12", group="ITEM1")],
    )
    assert normalize(raw).entry.anniversary == "Jun 12"
