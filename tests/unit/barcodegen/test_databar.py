import pytest

from barcodeforge.barcodegen.encoders.databar import (
    LIMITED_CHECK_PATTERNS,
    DataBar14Encoder,
    DataBarExpandedEncoder,
    DataBarLimitedEncoder,
    calculate_check_digit_14,
    databar14_widths,
    databar_limited_widths,
    expanded_bits,
    expanded_widths,
    normalize_gtin,
)
from barcodeforge.barcodegen.errors import InvalidPayloadError, PayloadTooLargeError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import (
    DataBar14SymbolType,
    DataBarExpandedSymbolType,
    SymbologyKind,
)
from barcodeforge.model.symbol import LinearSymbol, MatrixSymbol

GTIN = "0491234512345"


# === GTIN handling ===
@pytest.mark.parametrize(
    "content",
    ["0491234512345", "04912345123459", "(01)04912345123459", "0104912345123459", "491234512345"],
)
def test_normalize_gtin(content: str) -> None:
    assert normalize_gtin(content, "GS1_DATABAR_14") == GTIN


@pytest.mark.parametrize("content", ["", "04912345123450", "049123451234590", "12a4"])
def test_normalize_gtin_rejects(content: str) -> None:
    with pytest.raises(InvalidPayloadError):
        normalize_gtin(content, "GS1_DATABAR_14")


def test_calculate_check_digit_14() -> None:
    assert calculate_check_digit_14(GTIN) == "04912345123459"
    assert calculate_check_digit_14("1") == "00000000000017"


# === Omnidirectional ===
def test_databar14_widths_shape() -> None:
    widths = databar14_widths(GTIN)
    assert len(widths) == 46
    assert sum(widths) == 96
    assert widths[:2] == [1, 1] and widths[-2:] == [1, 1]
    assert all(1 <= w <= 9 for w in widths)


def test_databar14_differs_per_gtin() -> None:
    assert databar14_widths(GTIN) != databar14_widths("0491234512346")


def test_databar14_omnidirectional_symbol() -> None:
    symbol = DataBar14Encoder().encode(GTIN, EncodingConfiguration(), SymbologyKind.GS1_DATABAR_14)
    assert isinstance(symbol, LinearSymbol)
    assert symbol.symbol_modules == 96
    assert symbol.elements[0] == (1, False)
    assert symbol.text == "(01)04912345123459"


def test_databar14_stacked() -> None:
    cfg = EncodingConfiguration(symbol_type_14=DataBar14SymbolType.STACKED)
    symbol = DataBar14Encoder().encode(GTIN, cfg, SymbologyKind.GS1_DATABAR_14)
    assert isinstance(symbol, MatrixSymbol)
    assert symbol.row_heights == (5, 1, 7)
    assert symbol.columns == 50
    assert not symbol.square_modules


def test_databar14_stacked_omnidirectional() -> None:
    cfg = EncodingConfiguration(symbol_type_14=DataBar14SymbolType.STACKED_OMNIDIRECTIONAL)
    symbol = DataBar14Encoder().encode(GTIN, cfg, SymbologyKind.GS1_DATABAR_14)
    assert isinstance(symbol, MatrixSymbol)
    assert symbol.row_heights == (33, 1, 1, 1, 33)
    middle = symbol.rows[2]
    assert middle[5] and not middle[6]


# === Limited ===
def test_limited_check_patterns() -> None:
    assert len(LIMITED_CHECK_PATTERNS) == 89
    assert all(len(p) == 14 and sum(p) == 18 for p in LIMITED_CHECK_PATTERNS)
    assert len(set(LIMITED_CHECK_PATTERNS)) == 89


@pytest.mark.parametrize(
    "index,pattern",
    [
        (0, (1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 3, 3, 1, 1)),
        (20, (1, 3, 1, 1, 1, 1, 1, 1, 1, 1, 3, 1, 1, 1)),
        (42, (1, 1, 1, 1, 1, 1, 1, 1, 3, 1, 1, 3, 1, 1)),
        (64, (1, 1, 1, 1, 2, 2, 1, 1, 1, 1, 2, 2, 1, 1)),
        (80, (2, 1, 1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 1, 1)),
        (88, (2, 1, 1, 1, 1, 1, 1, 1, 2, 2, 1, 2, 1, 1)),
    ],
)
def test_limited_check_pattern_table(index: int, pattern: tuple) -> None:
    assert LIMITED_CHECK_PATTERNS[index] == pattern


LIMITED_WEIGHTS = (
    1, 3, 9, 27, 81, 65, 17, 51, 64, 14, 42, 37, 22, 66,
    20, 60, 2, 6, 18, 54, 73, 41, 34, 13, 39, 28, 84, 74,
)


@pytest.mark.parametrize("gtin", [GTIN, "1491234512345", "0000000000000", "1999999999999"])
def test_limited_check_character_matches_checksum(gtin: str) -> None:
    widths = databar_limited_widths(gtin)
    left, check, right = widths[2:16], widths[16:30], widths[30:44]
    checksum = sum(w * LIMITED_WEIGHTS[i] for i, w in enumerate(left + right)) % 89
    assert tuple(check) == LIMITED_CHECK_PATTERNS[checksum]


def test_limited_widths_shape() -> None:
    widths = databar_limited_widths(GTIN)
    assert len(widths) == 46
    assert sum(widths) == 74
    assert widths[:2] == [1, 1] and widths[-2:] == [1, 1]


def test_limited_rejects_indicator_above_one() -> None:
    with pytest.raises(InvalidPayloadError):
        databar_limited_widths("2491234512345")


def test_limited_symbol() -> None:
    symbol = DataBarLimitedEncoder().encode(
        "1" + GTIN[1:], EncodingConfiguration(), SymbologyKind.GS1_DATABAR_LIMITED
    )
    assert symbol.symbol_modules == 74
    assert symbol.text.startswith("(01)1")


# === Expanded ===
def test_expanded_bits_gtin_only() -> None:
    bits = expanded_bits("(01)04912345123459")
    assert len(bits) == 48
    # linkage 0, method 1, two length-field bits, indicator digit 0
    assert bits.startswith("01100000")


def test_expanded_bits_are_padded_to_minimum() -> None:
    bits = expanded_bits("(10)A")
    assert len(bits) >= 36
    assert len(bits) % 12 == 0


def test_expanded_widths_gtin_only() -> None:
    widths = expanded_widths(expanded_bits("(01)04912345123459"))
    assert len(widths) == 59
    assert sum(widths) == 5 * 17 + 3 * 15 + 4


def test_expanded_too_large() -> None:
    with pytest.raises(PayloadTooLargeError):
        expanded_bits("(90)" + "A" * 60)


def test_expanded_rejects_bad_ai() -> None:
    with pytest.raises(InvalidPayloadError):
        expanded_bits("(01)04912345123450")


def test_expanded_unstacked_symbol() -> None:
    symbol = DataBarExpandedEncoder().encode(
        "(01)04912345123459(10)ABC", EncodingConfiguration(), SymbologyKind.GS1_DATABAR_EXPANDED
    )
    assert isinstance(symbol, LinearSymbol)
    assert symbol.text == "(01)04912345123459(10)ABC"
    assert symbol.elements[0] == (1, False)


@pytest.mark.parametrize("force", [True, False])
def test_expanded_stacked_symbol(force: bool) -> None:
    cfg = EncodingConfiguration(no_of_columns=2)
    if not force:
        cfg.symbol_type_exp = DataBarExpandedSymbolType.STACKED
    symbol = DataBarExpandedEncoder().encode(
        "(01)04912345123459(10)ABCDEF12345",
        cfg,
        SymbologyKind.GS1_DATABAR_EXPANDED,
        force_stacked=force,
    )
    assert isinstance(symbol, MatrixSymbol)
    assert symbol.row_heights.count(34) >= 2
    assert len(symbol.rows) == len(symbol.row_heights)


def _runs(row: tuple) -> list:
    runs: list = []
    previous = None
    for module in row:
        if module == previous:
            runs[-1] += 1
        else:
            runs.append(1)
            previous = module
    return runs


@pytest.mark.parametrize(
    "payload,columns",
    [
        ("(01)04912345123459(10)ABCDEF12345", 2),
        ("(01)04912345123459(15)991231(10)LOT-77", 4),
        ("(01)04912345123459(15)991231(10)LOT-77", 3),
        ("(01)04912345123459(15)991231(10)LOT7", 4),
        ("(01)04912345123459(21)ABCDEFGHIJKLMN", 6),
        ("(01)04912345123459(21)ABCDEFGHIJKLMNOPQRS", 6),
        ("(01)04912345123459(21)ABCDEFGHIJKLMNOPQRS", 4),
        ("(01)04912345123459(21)ABCDEFGHIJKLMNOPQRSTUVWXYZ", 4),
    ],
)
def test_expanded_stacked_rows_carry_every_element(payload: str, columns: int) -> None:
    body = expanded_widths(expanded_bits(payload, columns))[2:-2]
    blocks = -(-len(body) // 21)
    cfg = EncodingConfiguration(no_of_columns=columns)
    symbol = DataBarExpandedEncoder().encode(
        payload, cfg, SymbologyKind.GS1_DATABAR_EXPANDED, force_stacked=True
    )
    data_rows = [row for row, h in zip(symbol.rows, symbol.row_heights) if h == 34]
    assert len(data_rows) == -(-blocks // min(columns, blocks))

    for number, row in enumerate(data_rows, start=1):
        assert any(row)
        chunk = body[(number - 1) * columns * 21 : number * columns * 21]
        assert chunk
        carried = _runs(row)[2 : 2 + len(chunk)]
        if number % 2 == 1 or columns % 2 == 1:
            assert carried == chunk
        else:
            assert carried in (chunk, chunk[::-1])


def test_expanded_stacked_partial_block_leads_mirrored_row() -> None:
    payload = "(01)04912345123459(15)991231(10)LOT7"
    body = expanded_widths(expanded_bits(payload, 4))[2:-2]
    cfg = EncodingConfiguration(no_of_columns=4)
    symbol = DataBarExpandedEncoder().encode(
        payload, cfg, SymbologyKind.GS1_DATABAR_EXPANDED, force_stacked=True
    )
    last = [row for row, h in zip(symbol.rows, symbol.row_heights) if h == 34][-1]
    tail = body[4 * 21 :]
    assert len(tail) % 21 == 13 and (len(tail) // 21 + 1) % 2 == 0
    assert last[0]
    assert _runs(last)[2 : 2 + len(tail)] == tail[::-1]


def test_expanded_stacked_odd_last_row_is_shifted() -> None:
    payload = "(01)04912345123459(21)ABCDEFGHIJKLMN"
    body = expanded_widths(expanded_bits(payload, 6))[2:-2]
    cfg = EncodingConfiguration(no_of_columns=6)
    symbol = DataBarExpandedEncoder().encode(
        payload, cfg, SymbologyKind.GS1_DATABAR_EXPANDED, force_stacked=True
    )
    last = [row for row, h in zip(symbol.rows, symbol.row_heights) if h == 34][-1]
    tail = body[6 * 21 :]
    assert -(-len(tail) // 21) % 2 == 1
    runs = _runs(last)
    assert not last[0] and runs[0] == 2
    assert runs[2 : 2 + len(tail)] == tail
