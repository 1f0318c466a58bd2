import pytest

from barcodeforge.barcodegen.encoders.pdf417 import (
    LATCH_BYTE,
    LATCH_BYTE_FULL,
    LATCH_NUMERIC,
    LATCH_TEXT,
    START_PATTERN,
    STOP_PATTERN,
    PDF417Encoder,
    auto_error_level,
    choose_dimensions,
    compact,
    compact_bytes,
    compact_numeric,
    compact_text,
    row_indicators,
    symbol_codewords,
)
from barcodeforge.barcodegen.errors import InvalidPayloadError, PayloadTooLargeError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind


# === Compaction ===
def test_compact_text_switches_submodes() -> None:
    assert compact_text(b"PDF417") == [453, 178, 121, 239]


def test_compact_text_lower_case() -> None:
    # latch to lower (27), then "ab"
    assert compact_text(b"ab") == [27 * 30 + 0, 1 * 30 + 29]


def test_compact_numeric() -> None:
    assert compact_numeric("000213298174000") == [1, 624, 434, 632, 282, 200]


def test_compact_bytes() -> None:
    assert compact_bytes(b"alcool") == [163, 238, 432, 766, 244]
    assert compact_bytes(b"alcool!") == [163, 238, 432, 766, 244, 33]


@pytest.mark.parametrize("count,latch", [(6, LATCH_BYTE_FULL), (12, LATCH_BYTE_FULL), (7, LATCH_BYTE)])
def test_byte_latch_depends_on_length(count: int, latch: int) -> None:
    assert compact(b"\x80" * count)[0] == latch


def test_compact_starts_in_text_mode() -> None:
    assert compact(b"PDF417") == compact_text(b"PDF417")


def test_compact_long_digit_run_uses_numeric() -> None:
    cws = compact(b"AB" + b"1" * 13)
    assert cws[0] == compact_text(b"AB")[0]
    assert cws[1] == LATCH_NUMERIC
    assert cws[2:] == compact_numeric("1" * 13)


def test_compact_returns_to_text_after_bytes() -> None:
    cws = compact(b"\x80HELLO")
    assert cws[0] == LATCH_BYTE
    assert cws[2] == LATCH_TEXT


def test_compact_empty() -> None:
    with pytest.raises(InvalidPayloadError):
        compact(b"")


# === Sizing ===
@pytest.mark.parametrize("count,level", [(1, 2), (40, 2), (41, 3), (160, 3), (320, 4), (863, 5), (864, 6)])
def test_auto_error_level(count: int, level: int) -> None:
    assert auto_error_level(count) == level


@pytest.mark.parametrize(
    "needed,columns,rows,expected",
    [
        (10, 2, 0, (2, 5)),
        (4, 2, 0, (2, 3)),
        (10, 0, 3, (4, 3)),
        (10, 4, 4, (4, 4)),
        (10, 0, 0, (1, 10)),
    ],
)
def test_choose_dimensions(needed: int, columns: int, rows: int, expected: tuple) -> None:
    assert choose_dimensions(needed, columns, rows) == expected


@pytest.mark.parametrize(
    "needed,columns,rows",
    [(929, 0, 0), (10, 1, 3), (100, 1, 0), (300, 0, 3)],
)
def test_choose_dimensions_too_large(needed: int, columns: int, rows: int) -> None:
    with pytest.raises(PayloadTooLargeError):
        choose_dimensions(needed, columns, rows)


def test_choose_dimensions_prefers_aspect_ratio() -> None:
    wide = choose_dimensions(200, aspect_ratio=4.0)
    tall = choose_dimensions(200, aspect_ratio=0.5)
    assert wide[0] > tall[0]


def test_symbol_codewords_layout() -> None:
    cws = symbol_codewords([1, 2], 2, 3, 0)
    assert len(cws) == 6
    assert cws[:4] == [4, 1, 2, 900]


@pytest.mark.parametrize("row,expected", [(0, (0, 1)), (1, (2, 0)), (2, (1, 2))])
def test_row_indicators(row: int, expected: tuple) -> None:
    assert row_indicators(row, 3, 2, 0) == expected


def test_row_indicators_second_group() -> None:
    # rows=6: row info 1, level 1 -> 3*1 + 5 % 3 = 5
    assert row_indicators(3, 6, 2, 1) == (31, 31)
    assert row_indicators(4, 6, 2, 1) == (35, 31)
    assert row_indicators(5, 6, 2, 1) == (31, 35)


# === Encoder ===
def test_encoder_row_width_and_guards() -> None:
    cfg = EncodingConfiguration(columns=3, error_level=1)
    symbol = PDF417Encoder().encode("PDF417 barcode", cfg, SymbologyKind.PDF417)
    assert symbol.columns == 17 * 3 + 69
    for row in symbol.rows:
        bits = "".join("1" if m else "0" for m in row)
        assert bits.startswith(START_PATTERN)
        assert bits.endswith(STOP_PATTERN)
    assert symbol.row_heights == (3,) * len(symbol.rows)
    assert symbol.quiet_zone == 2
    assert not symbol.square_modules


def test_encoder_custom_row_height() -> None:
    cfg = EncodingConfiguration(y_height=5)
    symbol = PDF417Encoder().encode("HELLO", cfg, SymbologyKind.PDF417)
    assert set(symbol.row_heights) == {5}
    assert len(symbol.rows) >= 3


def test_encoder_too_large() -> None:
    cfg = EncodingConfiguration(columns=1, rows=3)
    with pytest.raises(PayloadTooLargeError):
        PDF417Encoder().encode("A" * 200, cfg, SymbologyKind.PDF417)
