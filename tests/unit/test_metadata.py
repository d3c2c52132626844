from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pagemerge.metadata import build_info_dictionary, encode_text_string, info_object_source, pdf_date_string
from pagemerge.typing.models import PdfMetadata


def test_pdf_date_string_positive_offset() -> None:
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=5, minutes=30)))

    assert pdf_date_string(moment) == "D:20240102030405+05'30'"


def test_pdf_date_string_negative_offset() -> None:
    moment = datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone(-timedelta(hours=3, minutes=30)))

    assert pdf_date_string(moment) == "D:20231231235959-03'30'"


def test_pdf_date_string_defaults_to_local_now() -> None:
    value = pdf_date_string()

    assert value.startswith("D:")
    assert len(value) == len("D:YYYYMMDDHHMMSS+HH'MM'")
    assert value[16] in "+-"
    assert value[19] == value[22] == "'"


def test_encode_text_string_is_utf16_hex_with_bom() -> None:
    assert encode_text_string("Ab") == "<FEFF00410062>"


def test_encode_text_string_supports_non_latin_text() -> None:
    encoded = encode_text_string("Résumé ✓")

    assert encoded.startswith("<FEFF")
    assert encoded.endswith(">")
    assert bytes.fromhex(encoded[1:-1]).decode("utf-16") == "Résumé ✓"


def test_build_info_dictionary_omits_empty_fields() -> None:
    metadata = PdfMetadata(title="Report", author="", subject=None, keywords="x,y")
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    info = build_info_dictionary(metadata, creator="c", producer="p", moment=moment)

    assert list(info) == ["Title", "Keywords", "Creator", "Producer", "CreationDate", "ModDate"]
    assert info["Creator"] == encode_text_string("c")
    assert info["CreationDate"] == info["ModDate"] == "(D:20240102030405+00'00')"


def test_build_info_dictionary_encodes_creator_and_producer_as_text_strings() -> None:
    info = build_info_dictionary(None, creator="Créateur ✓", producer="合并")

    assert info["Creator"] == encode_text_string("Créateur ✓")
    assert info["Producer"] == encode_text_string("合并")


def test_build_info_dictionary_without_metadata() -> None:
    info = build_info_dictionary(None, creator="c", producer="p")

    assert set(info) == {"Creator", "Producer", "CreationDate", "ModDate"}


def test_info_object_source_writes_a_dictionary() -> None:
    source = info_object_source({"Creator": "<FEFF0063>", "ModDate": "(D:20240102030405+00'00')"})

    assert source == "<</Creator <FEFF0063>/ModDate (D:20240102030405+00'00')>>"
