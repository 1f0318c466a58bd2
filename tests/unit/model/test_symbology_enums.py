from typing import Any

import pytest

from barcodeforge.model.enums import (
    Code128Mode,
    DataBar14SymbolType,
    DataMatrixScheme,
    OutputFormat,
    QRErrorCorrection,
    StringEncoding,
    SymbologyFamily,
    SymbologyKind,
)


def test_symbology_ids_are_stable() -> None:
    assert [int(k) for k in SymbologyKind] == list(range(19))
    assert SymbologyKind.CODE39 == 0
    assert SymbologyKind.YUBIN_CUSTOMER == 15
    assert SymbologyKind.PDF417 == 18


@pytest.mark.parametrize(
    "value,expected",
    [
        (SymbologyKind.QR, SymbologyKind.QR),
        (8, SymbologyKind.JAN13),
        ("8", SymbologyKind.JAN13),
        ("jan13", SymbologyKind.JAN13),
        ("gs1-databar-14", SymbologyKind.GS1_DATABAR_14),
        (" upc a ", SymbologyKind.UPC_A),
        (19, None),
        ("EAN13", None),
        (True, None),
        (None, None),
        (3.0, None),
    ],
)
def test_symbology_parse(value: Any, expected: Any) -> None:
    assert SymbologyKind.parse(value) is expected


@pytest.mark.parametrize(
    "kind,family",
    [
        (SymbologyKind.CODE128, SymbologyFamily.LINEAR),
        (SymbologyKind.UPC_E, SymbologyFamily.LINEAR),
        (SymbologyKind.GS1_DATABAR_LIMITED, SymbologyFamily.DATABAR),
        (SymbologyKind.YUBIN_CUSTOMER, SymbologyFamily.POSTAL),
        (SymbologyKind.DATAMATRIX, SymbologyFamily.MATRIX),
        (SymbologyKind.PDF417, SymbologyFamily.MATRIX),
    ],
)
def test_symbology_family(kind: SymbologyKind, family: SymbologyFamily) -> None:
    assert kind.family is family
    assert kind.is_two_dimensional == (family is SymbologyFamily.MATRIX)


def test_ean_upc_group() -> None:
    assert {k for k in SymbologyKind if k.is_ean_upc} == {
        SymbologyKind.JAN8,
        SymbologyKind.JAN13,
        SymbologyKind.UPC_A,
        SymbologyKind.UPC_E,
    }


def test_localized_names() -> None:
    for kind in SymbologyKind:
        assert kind.localized_name("ru")
        assert kind.localized_name("en")
    assert SymbologyKind.QR.localized_name("en") == "QR Code"
    assert SymbologyKind.MATRIX2OF5.localized_name("ru").startswith("Матричный")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("png", OutputFormat.PNG),
        ("PNG", OutputFormat.PNG),
        ("jpeg", OutputFormat.JPG),
        ("JPG", OutputFormat.JPG),
        (" svg ", OutputFormat.SVG),
        ("gif", None),
        (1, None),
    ],
)
def test_output_format_parse(value: Any, expected: Any) -> None:
    assert OutputFormat.parse(value) is expected


def test_output_format_properties() -> None:
    assert OutputFormat.SVG.is_vector
    assert not OutputFormat.PNG.is_vector
    assert OutputFormat.JPG.pil_format == "JPEG"


def test_qr_error_correction() -> None:
    assert QRErrorCorrection.parse("h") is QRErrorCorrection.H
    assert QRErrorCorrection.parse("X") is None
    assert [lvl.ordinal for lvl in QRErrorCorrection] == [0, 1, 2, 3]
    assert [lvl.format_bits for lvl in QRErrorCorrection] == [1, 0, 3, 2]


@pytest.mark.parametrize(
    "value,expected",
    [
        ("utf-8", StringEncoding.UTF8),
        ("UTF8", StringEncoding.UTF8),
        ("shift_jis", StringEncoding.SHIFT_JIS),
        ("sjis", StringEncoding.SHIFT_JIS),
        ("cp932", StringEncoding.SHIFT_JIS),
        ("latin-1", None),
        (None, None),
    ],
)
def test_string_encoding_parse(value: Any, expected: Any) -> None:
    assert StringEncoding.parse(value) is expected


def test_string_encoding_codec() -> None:
    assert StringEncoding.UTF8.codec == "utf-8"
    assert StringEncoding.SHIFT_JIS.codec == "cp932"


def test_option_enums_parse_leniently() -> None:
    assert Code128Mode.parse("c") is Code128Mode.C
    assert DataMatrixScheme.parse("base256") is DataMatrixScheme.BASE256
    assert DataBar14SymbolType.parse("stacked-omnidirectional") is DataBar14SymbolType.STACKED_OMNIDIRECTIONAL
    assert DataMatrixScheme.parse(["ASCII"]) is None
