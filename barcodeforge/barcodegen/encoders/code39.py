"""
RU: Code 39 и Code 93.
EN: Code 39 (wide/narrow, optional mod-43 check) and Code 93 (9-module characters,
mandatory C/K check characters, full-ASCII shift pairs).
"""

from __future__ import annotations

import logging
from typing import Dict, Final, List, Tuple

from barcodeforge.barcodegen.checksum import CODE39_CHARSET, code39_mod43, code93_check_values
from barcodeforge.barcodegen.encoders.base import (
    SymbolEncoder,
    require_charset,
    wide_narrow,
)
from barcodeforge.barcodegen.errors import InvalidPayloadError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import LinearSymbol

logger = logging.getLogger(__name__)

__all__ = ["Code39Encoder", "Code93Encoder", "CODE93_CHARSET"]

# Флаги широких элементов: b s b s b s b s b
_CODE39_WIDE: Final[Dict[str, str]] = {
    "0": "000110100",
    "1": "100100001",
    "2": "001100001",
    "3": "101100000",
    "4": "000110001",
    "5": "100110000",
    "6": "001110000",
    "7": "000100101",
    "8": "100100100",
    "9": "001100100",
    "A": "100001001",
    "B": "001001001",
    "C": "101001000",
    "D": "000011001",
    "E": "100011000",
    "F": "001011000",
    "G": "000001101",
    "H": "100001100",
    "I": "001001100",
    "J": "000011100",
    "K": "100000011",
    "L": "001000011",
    "M": "101000010",
    "N": "000010011",
    "O": "100010010",
    "P": "001010010",
    "Q": "000000111",
    "R": "100000110",
    "S": "001000110",
    "T": "000010110",
    "U": "110000001",
    "V": "011000001",
    "W": "111000000",
    "X": "010010001",
    "Y": "110010000",
    "Z": "011010000",
    "-": "010000101",
    ".": "110000100",
    " ": "011000100",
    "$": "010101000",
    "/": "010100010",
    "+": "010001010",
    "%": "000101010",
    "*": "010010100",
}


class Code39Encoder(SymbolEncoder):
    """Code 39 with ``*`` start/stop and a narrow inter-character gap."""

    kinds = frozenset({SymbologyKind.CODE39})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        data = payload.upper()
        if data.startswith("*") and data.endswith("*") and len(data) >= 2:
            data = data[1:-1]
        require_charset(data, CODE39_CHARSET, kind)
        if config.check_digit:
            data += code39_mod43(data)

        widths: List[int] = []
        for ch in "*" + data + "*":
            if widths:
                widths.append(1)
            widths.extend(wide_narrow([int(f) for f in _CODE39_WIDE[ch]]))

        text = f"*{data}*" if config.show_start_stop else data
        return LinearSymbol.from_widths(widths, text=text)


CODE93_CHARSET: Final[str] = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-. $/+%"

# Значения 0..46 (43..46 - управляющие ($) (%) (/) (+)), затем старт/стоп
_CODE93_PATTERNS: Final[Tuple[str, ...]] = (
    "131112", "111213", "111312", "111411", "121113", "121212", "121311", "111114",
    "131211", "141111", "211113", "211212", "211311", "221112", "221211", "231111",
    "112113", "112212", "112311", "122112", "132111", "111123", "111222", "111321",
    "121122", "131121", "212112", "212211", "211122", "211221", "221121", "222111",
    "112122", "112221", "122121", "123111", "121131", "311112", "311211", "321111",
    "112131", "113121", "211131", "121221", "312111", "311121", "122211",
)
_CODE93_START_STOP: Final[str] = "111141"

_SHIFT_DOLLAR, _SHIFT_PERCENT, _SHIFT_SLASH, _SHIFT_PLUS = 43, 44, 45, 46


def _code93_full_ascii(ch: str) -> List[int]:
    """Value sequence for one ASCII character (shift pairs outside the base set)."""
    o = ord(ch)
    if ch in CODE93_CHARSET:
        return [CODE93_CHARSET.index(ch)]
    if o == 0:
        return [_SHIFT_PERCENT, CODE93_CHARSET.index("U")]
    if 1 <= o <= 26:
        return [_SHIFT_DOLLAR, CODE93_CHARSET.index(chr(o + 64))]
    if 27 <= o <= 31:
        return [_SHIFT_PERCENT, CODE93_CHARSET.index(chr(o - 27 + ord("A")))]
    if ch in "!\"#&'()*,:":
        return [_SHIFT_SLASH, CODE93_CHARSET.index(chr(o - 33 + ord("A")))]
    if ch in ";<=>?":
        return [_SHIFT_PERCENT, CODE93_CHARSET.index(chr(o - 59 + ord("F")))]
    if o == 64:
        return [_SHIFT_PERCENT, CODE93_CHARSET.index("V")]
    if 91 <= o <= 95:
        return [_SHIFT_PERCENT, CODE93_CHARSET.index(chr(o - 91 + ord("K")))]
    if o == 96:
        return [_SHIFT_PERCENT, CODE93_CHARSET.index("W")]
    if 97 <= o <= 122:
        return [_SHIFT_PLUS, CODE93_CHARSET.index(chr(o - 32))]
    if 123 <= o <= 127:
        return [_SHIFT_PERCENT, CODE93_CHARSET.index(chr(o - 123 + ord("P")))]
    raise InvalidPayloadError(
        f"Character {ch!r} is not encodable in Code93", symbology="CODE93"
    )


class Code93Encoder(SymbolEncoder):
    """Code 93, full ASCII, always with both check characters."""

    kinds = frozenset({SymbologyKind.CODE93})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        if not payload:
            raise InvalidPayloadError("Empty payload", symbology=kind.name)
        values: List[int] = []
        for ch in payload:
            values.extend(_code93_full_ascii(ch))
        c, k = code93_check_values(values)
        values += [c, k]

        widths: List[int] = [int(w) for w in _CODE93_START_STOP]
        for v in values:
            widths.extend(int(w) for w in _CODE93_PATTERNS[v])
        widths.extend(int(w) for w in _CODE93_START_STOP)
        widths.append(1)  # терминирующий штрих
        return LinearSymbol.from_widths(widths, text=payload)
