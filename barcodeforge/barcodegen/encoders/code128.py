"""
RU: Code 128 (подмножества A/B/C, автоматический выбор), GS1-128 и японский
код оплаты в магазинах (GS1-128 с AI 91).
EN: Code 128 family encoders.

Symbol values follow the standard 107-entry chart (0..102 data and functions,
103..105 start codes, 106 stop). The stop pattern has seven elements: the
trailing 2-module bar is the termination bar.
"""

from __future__ import annotations

import logging
from typing import Final, List, Optional, Tuple

from barcodeforge.barcodegen.checksum import code128_mod103, gs1_mod10
from barcodeforge.barcodegen.encoders.base import SymbolEncoder
from barcodeforge.barcodegen.errors import InvalidPayloadError
from barcodeforge.barcodegen.gs1 import FNC1, human_readable, join_with_fnc1, parse_element_strings
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import Code128Mode, SymbologyKind
from barcodeforge.model.symbol import LinearSymbol

logger = logging.getLogger(__name__)

__all__ = [
    "CODE128_PATTERNS",
    "Code128Encoder",
    "GS1128Encoder",
    "encode_code128_values",
    "encode_convenience",
    "normalize_convenience_code",
]

CODE128_PATTERNS: Final[Tuple[str, ...]] = tuple(
    """
    212222 222122 222221 121223 121322 131222 122213 122312 132212 221213
    221312 231212 112232 122132 122231 113222 123122 123221 223211 221132
    221231 213212 223112 312131 311222 321122 321221 312212 322112 322211
    212123 212321 232121 111323 131123 131321 112313 132113 132311 211313
    231113 231311 112133 112331 132131 113123 113321 133121 313121 211331
    231131 213113 213311 213131 311123 311321 331121 312113 312311 332111
    314111 221411 431111 111224 111422 121124 121421 141122 141221 112214
    112412 122114 122411 142112 142211 241211 221114 413111 241112 134111
    111242 121142 121241 114212 124112 124211 411212 421112 421211 212141
    214121 412121 111143 111341 131141 114113 114311 411113 411311 113141
    114131 311141 411131 211412 211214 211232 2331112
    """.split()
)

CODE_C: Final[int] = 99
CODE_B: Final[int] = 100
CODE_A: Final[int] = 101
FNC1_VALUE: Final[int] = 102
START: Final[dict] = {"A": 103, "B": 104, "C": 105}
STOP: Final[int] = 106

_SWITCH: Final[dict] = {"A": CODE_A, "B": CODE_B, "C": CODE_C}


def _value_a(ch: str) -> Optional[int]:
    o = ord(ch)
    if 32 <= o <= 95:
        return o - 32
    if 0 <= o < 32:
        return o + 64
    return None


def _value_b(ch: str) -> Optional[int]:
    o = ord(ch)
    if 32 <= o <= 127:
        return o - 32
    return None


def _digit_run(data: str, pos: int) -> int:
    n = 0
    while pos + n < len(data) and data[pos + n].isdigit() and data[pos + n].isascii():
        n += 1
    return n


def _needs_a(data: str, pos: int) -> bool:
    """True if a control character appears before any lowercase character."""
    for ch in data[pos:]:
        if ord(ch) < 32:
            return True
        if 96 <= ord(ch) <= 127:
            return False
    return False


def _encode_pinned(data: str, subset: str, symbology: str) -> List[int]:
    values = [START[subset]]
    if subset == "C":
        pos = 0
        while pos < len(data):
            if data[pos] == FNC1:
                values.append(FNC1_VALUE)
                pos += 1
                continue
            pair = data[pos : pos + 2]
            if len(pair) != 2 or not (pair.isdigit() and pair.isascii()):
                raise InvalidPayloadError(
                    "Code set C requires digit pairs", symbology=symbology
                )
            values.append(int(pair))
            pos += 2
        return values
    lookup = _value_a if subset == "A" else _value_b
    for ch in data:
        if ch == FNC1:
            values.append(FNC1_VALUE)
            continue
        v = lookup(ch)
        if v is None:
            raise InvalidPayloadError(
                f"Character {ch!r} is not in code set {subset}",
                symbology=symbology,
            )
        values.append(v)
    return values


def _encode_auto(data: str, symbology: str) -> List[int]:
    for ch in data:
        if ch != FNC1 and ord(ch) > 127:
            raise InvalidPayloadError(
                f"Character {ch!r} is outside ASCII", symbology=symbology
            )

    lead = _digit_run(data, 0)
    if lead >= 4 or (lead == len(data) and lead >= 2 and lead % 2 == 0):
        subset = "C"
    elif data.startswith(FNC1) and _digit_run(data, 1) >= 2:
        subset = "C"
    else:
        subset = "A" if _needs_a(data, 0) else "B"
    values = [START[subset]]

    pos = 0
    while pos < len(data):
        ch = data[pos]
        if ch == FNC1:
            values.append(FNC1_VALUE)
            pos += 1
            continue
        if subset == "C":
            if _digit_run(data, pos) >= 2:
                values.append(int(data[pos : pos + 2]))
                pos += 2
                continue
            subset = "A" if _needs_a(data, pos) else "B"
            values.append(_SWITCH[subset])
            continue

        run = _digit_run(data, pos)
        if run >= 4:
            if run % 2:
                # Нечётная серия: первая цифра в текущем наборе
                values.append(ord(ch) - 32)
                pos += 1
            subset = "C"
            values.append(CODE_C)
            continue

        v = _value_a(ch) if subset == "A" else _value_b(ch)
        if v is None:
            subset = "B" if subset == "A" else "A"
            values.append(_SWITCH[subset])
            continue
        values.append(v)
        pos += 1
    return values


def encode_code128_values(
    data: str, mode: Code128Mode = Code128Mode.AUTO, symbology: str = "CODE128"
) -> List[int]:
    """Symbol values from start code to check character (stop not included).

    Example:
        >>> encode_code128_values("1234")
        [105, 12, 34, 82]
    """
    if not data:
        raise InvalidPayloadError("Empty payload", symbology=symbology)
    if mode is Code128Mode.AUTO:
        values = _encode_auto(data, symbology)
    else:
        values = _encode_pinned(data, mode.value, symbology)
    values.append(code128_mod103(values))
    logger.debug("%s values: %s", symbology, values)
    return values


def _symbol(values: List[int], text: str, quiet: int = 10) -> LinearSymbol:
    widths: List[int] = []
    for v in values + [STOP]:
        widths.extend(int(w) for w in CODE128_PATTERNS[v])
    return LinearSymbol.from_widths(widths, text=text, quiet_left=quiet, quiet_right=quiet)


class Code128Encoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.CODE128})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        values = encode_code128_values(payload, config.code_mode, kind.name)
        text = "".join(c if 32 <= ord(c) < 127 else " " for c in payload)
        return _symbol(values, text)


class GS1128Encoder(SymbolEncoder):
    """GS1-128: FNC1 after the start code, AI element strings in AUTO subsets."""

    kinds = frozenset({SymbologyKind.GS1_128})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        elements = parse_element_strings(payload, kind.name)
        data = FNC1 + join_with_fnc1(elements)
        values = encode_code128_values(data, Code128Mode.AUTO, kind.name)
        return _symbol(values, human_readable(elements))


CONVENIENCE_AI: Final[str] = "91"
CONVENIENCE_LENGTH: Final[int] = 44


def normalize_convenience_code(code: str) -> str:
    """Complete a convenience-store payment code to its 44 digits.

    Accepts ``(91)`` brackets, a missing ``91`` prefix (42 or 41 digits) and a
    missing check digit (43 or 41 digits). The check digit is the GS1 mod-10
    digit over the digits after the AI.
    """
    digits = code.strip().replace("(", "").replace(")", "").replace(" ", "")
    if not digits.isascii() or not digits.isdigit():
        raise InvalidPayloadError(
            "Convenience code must be numeric", symbology="GS1_128", context={"code": code}
        )
    if len(digits) in (41, 42):
        digits = CONVENIENCE_AI + digits
    if not digits.startswith(CONVENIENCE_AI):
        raise InvalidPayloadError(
            "Convenience code must use AI (91)", symbology="GS1_128"
        )
    if len(digits) == CONVENIENCE_LENGTH - 1:
        digits += gs1_mod10(digits[2:])
    if len(digits) != CONVENIENCE_LENGTH:
        raise InvalidPayloadError(
            f"Convenience code requires {CONVENIENCE_LENGTH} digits, got {len(digits)}",
            symbology="GS1_128",
        )
    if gs1_mod10(digits[2:-1]) != digits[-1]:
        raise InvalidPayloadError(
            f"Convenience code check digit mismatch, expected {gs1_mod10(digits[2:-1])}",
            symbology="GS1_128",
        )
    return digits


def encode_convenience(code: str) -> LinearSymbol:
    """GS1-128 convenience-store payment symbol with four text groups."""
    digits = normalize_convenience_code(code)
    values = encode_code128_values(FNC1 + digits, Code128Mode.AUTO, "GS1_128")
    body = digits[2:]
    text = f"({CONVENIENCE_AI}) {body[:6]} {body[6:28]} {body[28:41]} {body[41:]}"
    return _symbol(values, text)
