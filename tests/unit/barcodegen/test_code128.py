import pytest

from barcodeforge.barcodegen.encoders.code128 import (
    CODE128_PATTERNS,
    Code128Encoder,
    GS1128Encoder,
    encode_code128_values,
    encode_convenience,
    normalize_convenience_code,
)
from barcodeforge.barcodegen.errors import InvalidPayloadError
from barcodeforge.barcodegen.gs1 import FNC1
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import Code128Mode, SymbologyKind

CONVENIENCE_BODY = "12345678901234567890123456789012345678901"  # 41 digits


def test_pattern_table() -> None:
    assert len(CODE128_PATTERNS) == 107
    assert all(sum(int(w) for w in p) == 11 for p in CODE128_PATTERNS[:106])
    assert sum(int(w) for w in CODE128_PATTERNS[106]) == 13


@pytest.mark.parametrize(
    "data,expected",
    [
        ("1234", [105, 12, 34, 82]),
        ("PJJ123C", [104, 48, 42, 42, 17, 18, 19, 35, 55]),
    ],
)
def test_auto_values(data: str, expected: list) -> None:
    assert encode_code128_values(data) == expected


def test_auto_switches_to_c_for_long_digit_runs() -> None:
    values = encode_code128_values("AB12345678")
    assert values[:4] == [104, 33, 34, 99]
    assert values[4:8] == [12, 34, 56, 78]


def test_auto_odd_run_keeps_first_digit_in_b() -> None:
    values = encode_code128_values("X12345")
    assert values[:5] == [104, 56, 17, 99, 23]


def test_auto_uses_a_for_control_characters() -> None:
    values = encode_code128_values("A\tB")
    assert values[0] == 103
    assert values[2] == 73  # HT in set A


def test_pinned_modes() -> None:
    assert encode_code128_values("AB", Code128Mode.A)[:3] == [103, 33, 34]
    assert encode_code128_values("ab", Code128Mode.B)[:3] == [104, 65, 66]
    with pytest.raises(InvalidPayloadError):
        encode_code128_values("ab", Code128Mode.A)
    with pytest.raises(InvalidPayloadError):
        encode_code128_values("123", Code128Mode.C)


@pytest.mark.parametrize("data", ["", "naïve"])
def test_rejects(data: str) -> None:
    with pytest.raises(InvalidPayloadError):
        encode_code128_values(data)


def test_code128_symbol() -> None:
    symbol = Code128Encoder().encode("1234", EncodingConfiguration(), SymbologyKind.CODE128)
    assert symbol.symbol_modules == 4 * 11 + 13
    assert symbol.text == "1234"
    assert symbol.elements[-1] == (2, True)


def test_code128_control_characters_shown_as_spaces() -> None:
    symbol = Code128Encoder().encode("A\tB", EncodingConfiguration(), SymbologyKind.CODE128)
    assert symbol.text == "A B"


def test_gs1_128_starts_with_fnc1() -> None:
    cfg = EncodingConfiguration()
    symbol = GS1128Encoder().encode("(01)04912345123459(10)ABC", cfg, SymbologyKind.GS1_128)
    values = encode_code128_values(FNC1 + "010491234512345910ABC")
    assert values[:2] == [105, 102]
    assert symbol.text == "(01)04912345123459(10)ABC"
    assert symbol.symbol_modules == len(values) * 11 + 13


def test_gs1_128_invalid_ai() -> None:
    with pytest.raises(InvalidPayloadError):
        GS1128Encoder().encode("(01)123", EncodingConfiguration(), SymbologyKind.GS1_128)


# === Convenience-store payment code ===
@pytest.mark.parametrize(
    "code",
    [
        CONVENIENCE_BODY,
        "91" + CONVENIENCE_BODY,
        "(91)" + CONVENIENCE_BODY,
    ],
)
def test_normalize_convenience_code(code: str) -> None:
    digits = normalize_convenience_code(code)
    assert len(digits) == 44
    assert digits.startswith("91" + CONVENIENCE_BODY)


def test_normalize_convenience_code_keeps_valid_check_digit() -> None:
    full = normalize_convenience_code(CONVENIENCE_BODY)
    assert normalize_convenience_code(full) == full
    assert normalize_convenience_code(full[2:]) == full


@pytest.mark.parametrize("code", ["12ab", "92" + CONVENIENCE_BODY + "0", "91123"])
def test_normalize_convenience_code_rejects(code: str) -> None:
    with pytest.raises(InvalidPayloadError):
        normalize_convenience_code(code)


def test_normalize_convenience_code_bad_check_digit() -> None:
    full = normalize_convenience_code(CONVENIENCE_BODY)
    wrong = full[:-1] + str((int(full[-1]) + 1) % 10)
    with pytest.raises(InvalidPayloadError):
        normalize_convenience_code(wrong)


def test_encode_convenience_text_groups() -> None:
    symbol = encode_convenience(CONVENIENCE_BODY)
    groups = symbol.text.split(" ")
    assert groups[0] == "(91)"
    assert [len(g) for g in groups[1:]] == [6, 22, 13, 1]
