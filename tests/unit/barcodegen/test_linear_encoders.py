from typing import List

import pytest

from barcodeforge.barcodegen.encoders import ENCODERS, get_encoder
from barcodeforge.barcodegen.encoders.codabar import CodabarEncoder
from barcodeforge.barcodegen.encoders.code39 import Code39Encoder, Code93Encoder
from barcodeforge.barcodegen.encoders.two_of_five import ITFEncoder, TwoOfFiveEncoder
from barcodeforge.barcodegen.errors import InvalidPayloadError, UnsupportedSymbologyError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import LinearSymbol


@pytest.fixture
def config() -> EncodingConfiguration:
    return EncodingConfiguration()


def _alternates(symbol: LinearSymbol) -> bool:
    darks: List[bool] = [dark for _, dark in symbol.elements]
    return all(a != b for a, b in zip(darks, darks[1:]))


# === Registry ===
def test_every_symbology_has_an_encoder() -> None:
    assert set(ENCODERS) == set(SymbologyKind)
    for kind in SymbologyKind:
        assert kind in get_encoder(kind).kinds


def test_get_encoder_unknown() -> None:
    with pytest.raises(UnsupportedSymbologyError):
        get_encoder(99)  # type: ignore[arg-type]


# === Code 39 ===
def test_code39_single_character(config: EncodingConfiguration) -> None:
    symbol = Code39Encoder().encode("A", config, SymbologyKind.CODE39)
    # 3 characters of 15 modules + 2 gaps
    assert symbol.symbol_modules == 47
    assert symbol.text == "*A*"
    assert symbol.elements[0][1] is True
    assert _alternates(symbol)


def test_code39_check_digit_and_hidden_guards(config: EncodingConfiguration) -> None:
    config.check_digit = True
    config.show_start_stop = False
    symbol = Code39Encoder().encode("code39", config, SymbologyKind.CODE39)
    assert symbol.text == "CODE39W"


def test_code39_strips_given_asterisks(config: EncodingConfiguration) -> None:
    a = Code39Encoder().encode("*AB*", config, SymbologyKind.CODE39)
    b = Code39Encoder().encode("AB", config, SymbologyKind.CODE39)
    assert a.elements == b.elements


@pytest.mark.parametrize("payload", ["", "A#B", "Ä"])
def test_code39_rejects(payload: str, config: EncodingConfiguration) -> None:
    with pytest.raises(InvalidPayloadError):
        Code39Encoder().encode(payload, config, SymbologyKind.CODE39)


# === Code 93 ===
def test_code93_layout(config: EncodingConfiguration) -> None:
    symbol = Code93Encoder().encode("TEST93", config, SymbologyKind.CODE93)
    # start + 6 data + 2 checks + stop (9 modules each) + termination bar
    assert symbol.symbol_modules == 9 * 10 + 1
    assert symbol.text == "TEST93"
    assert symbol.elements[-1] == (1, True)


def test_code93_full_ascii_uses_shift_pairs(config: EncodingConfiguration) -> None:
    plain = Code93Encoder().encode("A", config, SymbologyKind.CODE93)
    shifted = Code93Encoder().encode("a", config, SymbologyKind.CODE93)
    assert shifted.symbol_modules == plain.symbol_modules + 9


def test_code93_rejects_non_ascii(config: EncodingConfiguration) -> None:
    with pytest.raises(InvalidPayloadError):
        Code93Encoder().encode("é", config, SymbologyKind.CODE93)


# === NW-7 ===
def test_nw7_default_guards(config: EncodingConfiguration) -> None:
    symbol = CodabarEncoder().encode("123", config, SymbologyKind.NW7)
    explicit = CodabarEncoder().encode("A123A", config, SymbologyKind.NW7)
    assert symbol.elements == explicit.elements
    assert symbol.text == "A123A"


def test_nw7_hide_guards(config: EncodingConfiguration) -> None:
    config.show_start_stop = False
    symbol = CodabarEncoder().encode("b40156c", config, SymbologyKind.NW7)
    assert symbol.text == "40156"


@pytest.mark.parametrize("payload", ["", "A123", "12X3", "AB"])
def test_nw7_rejects(payload: str, config: EncodingConfiguration) -> None:
    with pytest.raises(InvalidPayloadError):
        CodabarEncoder().encode(payload, config, SymbologyKind.NW7)


# === 2 of 5 ===
@pytest.mark.parametrize(
    "kind,modules",
    [(SymbologyKind.MATRIX2OF5, 9 + 20 + 8), (SymbologyKind.NEC2OF5, 4 + 20 + 5)],
)
def test_two_of_five_widths(kind: SymbologyKind, modules: int, config: EncodingConfiguration) -> None:
    symbol = TwoOfFiveEncoder().encode("12", config, kind)
    assert symbol.symbol_modules == modules
    assert _alternates(symbol)


def test_itf_interleaves_pairs(config: EncodingConfiguration) -> None:
    symbol = ITFEncoder().encode("1234", config, SymbologyKind.ITF)
    assert symbol.symbol_modules == 4 + 2 * 18 + 5
    assert symbol.elements[:4] == ((1, True), (1, False), (1, True), (1, False))
    assert symbol.elements[-3:] == ((3, True), (1, False), (1, True))


def test_itf_pads_odd_length(config: EncodingConfiguration) -> None:
    odd = ITFEncoder().encode("123", config, SymbologyKind.ITF)
    assert odd.text == "0123"
    assert odd.elements == ITFEncoder().encode("0123", config, SymbologyKind.ITF).elements


@pytest.mark.parametrize("payload", ["12a4", "", "12 4"])
def test_itf_rejects(payload: str, config: EncodingConfiguration) -> None:
    with pytest.raises(InvalidPayloadError):
        ITFEncoder().encode(payload, config, SymbologyKind.ITF)
