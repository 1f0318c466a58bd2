"""
RU: GS1 DataBar: Omnidirectional (14) с многоярусными вариантами, Limited и
Expanded (в т.ч. многоярусный). Ширины символов данных вычисляются
алгоритмом перечисления ширин (widths from value), контрольный символ - по
взвешенной сумме ширин.
EN: GS1 DataBar family encoders.

All three variants share `rss_widths`, the value-to-element-widths enumeration.
Symbols start with a light guard element; the outer ``1, 1`` guards are part of
the element list.
"""

from __future__ import annotations

import logging
from typing import Final, List, Optional, Sequence, Tuple

from barcodeforge.barcodegen.checksum import gs1_mod10
from barcodeforge.barcodegen.encoders.base import SymbolEncoder
from barcodeforge.barcodegen.errors import InvalidPayloadError, PayloadTooLargeError
from barcodeforge.barcodegen.gs1 import (
    FNC1,
    ElementString,
    human_readable,
    join_with_fnc1,
    parse_element_strings,
)
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import (
    DataBar14SymbolType,
    DataBarExpandedSymbolType,
    SymbologyKind,
)
from barcodeforge.model.symbol import AbstractSymbol, LinearSymbol, MatrixSymbol

logger = logging.getLogger(__name__)

__all__ = [
    "rss_widths",
    "normalize_gtin",
    "calculate_check_digit_14",
    "databar14_widths",
    "databar_limited_widths",
    "expanded_bits",
    "expanded_widths",
    "DataBar14Encoder",
    "DataBarLimitedEncoder",
    "DataBarExpandedEncoder",
    "LIMITED_CHECK_PATTERNS",
]

QUIET_ZONE: Final[int] = 1


def _combins(n: int, r: int) -> int:
    if n - r > r:
        min_denom, max_denom = r, n - r
    else:
        min_denom, max_denom = n - r, r
    val = 1
    j = 1
    i = n
    while i > max_denom:
        val *= i
        if j <= min_denom:
            val //= j
            j += 1
        i -= 1
    while j <= min_denom:
        val //= j
        j += 1
    return val


def rss_widths(val: int, n: int, elements: int, max_width: int, no_narrow: bool) -> List[int]:
    """Element widths for character value ``val``.

    Args:
        val: Value inside its group (odd or even subset).
        n: Total modules of the ``elements`` elements.
        elements: Number of bars (or spaces) in the subset.
        max_width: Widest element allowed.
        no_narrow: When False, at least one element must be one module wide.
    """
    widths = [0] * elements
    narrow_mask = 0
    bar = 0
    while bar < elements - 1:
        elm_width = 1
        narrow_mask |= 1 << bar
        while True:
            sub_val = _combins(n - elm_width - 1, elements - bar - 2)
            if (
                not no_narrow
                and not narrow_mask
                and n - elm_width - (elements - bar - 1) >= elements - bar - 1
            ):
                sub_val -= _combins(n - elm_width - (elements - bar), elements - bar - 2)
            if elements - bar - 1 > 1:
                less_val = 0
                mxw = n - elm_width - (elements - bar - 2)
                while mxw > max_width:
                    less_val += _combins(n - elm_width - mxw - 1, elements - bar - 3)
                    mxw -= 1
                sub_val -= less_val * (elements - 1 - bar)
            elif n - elm_width > max_width:
                sub_val -= 1
            val -= sub_val
            if val < 0:
                break
            elm_width += 1
            narrow_mask &= ~(1 << bar)
        val += sub_val
        n -= elm_width
        widths[bar] = elm_width
        bar += 1
    widths[bar] = n
    return widths


def _interleave(odd: Sequence[int], even: Sequence[int]) -> List[int]:
    out: List[int] = []
    for o, e in zip(odd, even):
        out.extend((o, e))
    return out


# =============================================================================
# GTIN
# =============================================================================


def normalize_gtin(content: str, symbology: str) -> str:
    """13-digit GTIN body (no check digit) from the accepted input forms.

    Accepts ``(01)`` / ``01`` prefixed 14-digit GTINs, 14 digits with a check
    digit, or up to 13 digits (left-padded with zeros).
    """
    text = content.strip().replace(" ", "")
    if text.startswith("(01)"):
        text = text[4:]
    elif len(text) == 16 and text.startswith("01"):
        text = text[2:]
    if not text or not text.isascii() or not text.isdigit():
        raise InvalidPayloadError(
            "DataBar requires a numeric GTIN", symbology=symbology, context={"content": content}
        )
    if len(text) == 14:
        expected = gs1_mod10(text[:13])
        if text[13] != expected:
            raise InvalidPayloadError(
                f"GTIN check digit mismatch, expected {expected}",
                symbology=symbology,
            )
        return text[:13]
    if len(text) > 14:
        raise InvalidPayloadError(
            f"GTIN too long ({len(text)} digits)", symbology=symbology
        )
    return text.zfill(13)


def calculate_check_digit_14(src: str) -> str:
    """14-digit GTIN with its check digit.

    Example:
        >>> calculate_check_digit_14("0491234512345")
        '04912345123459'
    """
    body = normalize_gtin(src, "GS1_DATABAR_14")
    return body + gs1_mod10(body)


# =============================================================================
# DataBar Omnidirectional
# =============================================================================

_G_SUM_14: Final = (0, 161, 961, 2015, 2715, 0, 336, 1036, 1516)
_T_14: Final = (1, 10, 34, 70, 126, 4, 20, 48, 81)
_MODULES_ODD_14: Final = (12, 10, 8, 6, 4, 5, 7, 9, 11)
_MODULES_EVEN_14: Final = (4, 6, 8, 10, 12, 10, 8, 6, 4)
_WIDEST_ODD_14: Final = (8, 6, 4, 3, 1, 2, 4, 6, 8)
_WIDEST_EVEN_14: Final = (1, 3, 5, 6, 8, 7, 5, 3, 1)
_WEIGHTS_14: Final = (
    1, 3, 9, 27, 2, 6, 18, 54,
    4, 12, 36, 29, 8, 24, 72, 58,
    16, 48, 65, 37, 32, 17, 51, 74,
    64, 34, 23, 69, 49, 68, 46, 59,
)
_FINDERS_14: Final = (
    (3, 8, 2, 1, 1), (3, 5, 5, 1, 1), (3, 3, 7, 1, 1),
    (3, 1, 9, 1, 1), (2, 7, 4, 1, 1), (2, 5, 6, 1, 1),
    (2, 3, 8, 1, 1), (1, 5, 7, 1, 1), (1, 3, 9, 1, 1),
)
_OUTSIDE_BOUNDS: Final = (160, 960, 2014, 2714, 2840)
_INSIDE_BOUNDS: Final = (335, 1035, 1515, 1596)


def _char_widths_14(value: int, outside: bool) -> List[int]:
    """Eight element widths (odd/even interleaved) of one data character."""
    if outside:
        group = next(g for g, hi in enumerate(_OUTSIDE_BOUNDS) if value <= hi)
        reg = value - _G_SUM_14[group]
        v_odd, v_even = divmod(reg, _T_14[group])
        odd = rss_widths(v_odd, _MODULES_ODD_14[group], 4, _WIDEST_ODD_14[group], True)
        even = rss_widths(v_even, _MODULES_EVEN_14[group], 4, _WIDEST_EVEN_14[group], False)
    else:
        group = 5 + next(g for g, hi in enumerate(_INSIDE_BOUNDS) if value <= hi)
        reg = value - _G_SUM_14[group]
        v_even, v_odd = divmod(reg, _T_14[group])
        odd = rss_widths(v_odd, _MODULES_ODD_14[group], 4, _WIDEST_ODD_14[group], False)
        even = rss_widths(v_even, _MODULES_EVEN_14[group], 4, _WIDEST_EVEN_14[group], True)
    return _interleave(odd, even)


def databar14_widths(content: str) -> List[int]:
    """The 46 element widths of a DataBar Omnidirectional symbol (light first)."""
    accum = int(normalize_gtin(content, "GS1_DATABAR_14"))
    left, right = divmod(accum, 4537077)
    values = (*divmod(left, 1597), *divmod(right, 1597))
    chars = [_char_widths_14(v, outside=i % 2 == 0) for i, v in enumerate(values)]

    checksum = 0
    for c, widths in enumerate(chars):
        for e, w in enumerate(widths):
            checksum += _WEIGHTS_14[e + 8 * c] * w
    checksum %= 79
    if checksum >= 8:
        checksum += 1
    if checksum >= 72:
        checksum += 1
    c_left, c_right = divmod(checksum, 9)

    total = [1, 1]
    total += chars[0]
    total += _FINDERS_14[c_left]
    total += chars[1][::-1]
    total += chars[3]
    total += _FINDERS_14[c_right][::-1]
    total += chars[2][::-1]
    total += [1, 1]
    return total


def _row_bits(widths: Sequence[int], first_dark: bool) -> List[bool]:
    bits: List[bool] = []
    dark = first_dark
    for w in widths:
        bits.extend([dark] * w)
        dark = not dark
    return bits


def _stacked_14(widths: Sequence[int], omni: bool, text: str) -> MatrixSymbol:
    top = _row_bits(widths[:23], False) + [True, False]
    bottom = [True, False] + _row_bits(widths[23:], True)
    cols = len(top)

    if not omni:
        sep = [False] * cols
        for i in range(4, 46):
            if top[i] == bottom[i]:
                sep[i] = not top[i]
            else:
                sep[i] = not sep[i - 1]
        return MatrixSymbol(
            rows=(tuple(top), tuple(sep), tuple(bottom)),
            row_heights=(5, 1, 7),
            quiet_zone=QUIET_ZONE,
            square_modules=False,
            text=text,
        )

    middle = [False] * cols
    for i in range(5, 46, 2):
        middle[i] = True

    def complement_row(row: List[bool], lo: int, hi: int) -> List[bool]:
        sep = [False] * cols
        for i in range(4, 46):
            sep[i] = not row[i]
        latch = True
        for i in range(lo, hi):
            if not row[i]:
                sep[i] = latch
                latch = not latch
            else:
                sep[i] = False
                latch = True
        return sep

    top_sep = complement_row(top, 17, 33)
    bottom_sep = complement_row(bottom, 16, 32)
    return MatrixSymbol(
        rows=tuple(tuple(r) for r in (top, top_sep, middle, bottom_sep, bottom)),
        row_heights=(33, 1, 1, 1, 33),
        quiet_zone=QUIET_ZONE,
        square_modules=False,
        text=text,
    )


class DataBar14Encoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.GS1_DATABAR_14})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> AbstractSymbol:
        widths = databar14_widths(payload)
        text = "(01)" + calculate_check_digit_14(payload)
        if config.symbol_type_14 is DataBar14SymbolType.OMNIDIRECTIONAL:
            return LinearSymbol.from_widths(
                widths, first_dark=False, text=text, quiet_left=QUIET_ZONE, quiet_right=QUIET_ZONE
            )
        omni = config.symbol_type_14 is DataBar14SymbolType.STACKED_OMNIDIRECTIONAL
        return _stacked_14(widths, omni, text)


# =============================================================================
# DataBar Limited
# =============================================================================

_T_EVEN_LTD: Final = (28, 728, 6454, 203, 2408, 1, 16632)
_MODULES_ODD_LTD: Final = (17, 13, 9, 15, 11, 19, 7)
_MODULES_EVEN_LTD: Final = (9, 13, 17, 11, 15, 7, 19)
_WIDEST_ODD_LTD: Final = (6, 5, 3, 5, 4, 8, 1)
_WIDEST_EVEN_LTD: Final = (3, 4, 6, 4, 5, 1, 8)
_GROUP_FLOOR_LTD: Final = (0, 183064, 820064, 1000776, 1491021, 1979845, 1996939)
_WEIGHTS_LTD: Final = (
    1, 3, 9, 27, 81, 65, 17, 51, 64, 14, 42, 37, 22, 66,
    20, 60, 2, 6, 18, 54, 73, 41, 34, 13, 39, 28, 84, 74,
)


# Check character patterns from the ISO/IEC 24724 table, indexed by
# the weighted checksum modulo 89. Each has 14 elements and 18 modules.
LIMITED_CHECK_PATTERNS: Final[Tuple[Tuple[int, ...], ...]] = (
    (1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 3, 3, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1, 1, 2, 3, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1, 1, 3, 3, 1, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 2, 1, 1, 3, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 2, 1, 2, 3, 1, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 3, 1, 1, 3, 1, 1, 1),
    (1, 1, 1, 1, 1, 2, 1, 1, 1, 1, 3, 2, 1, 1),
    (1, 1, 1, 1, 1, 2, 1, 1, 1, 2, 3, 1, 1, 1),
    (1, 1, 1, 1, 1, 2, 1, 2, 1, 1, 3, 1, 1, 1),
    (1, 1, 1, 1, 1, 3, 1, 1, 1, 1, 3, 1, 1, 1),
    (1, 1, 1, 2, 1, 1, 1, 1, 1, 1, 3, 2, 1, 1),
    (1, 1, 1, 2, 1, 1, 1, 1, 1, 2, 3, 1, 1, 1),
    (1, 1, 1, 2, 1, 1, 1, 2, 1, 1, 3, 1, 1, 1),
    (1, 1, 1, 2, 1, 2, 1, 1, 1, 1, 3, 1, 1, 1),
    (1, 1, 1, 3, 1, 1, 1, 1, 1, 1, 3, 1, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 1, 1, 1, 3, 2, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 1, 1, 2, 3, 1, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 2, 1, 1, 3, 1, 1, 1),
    (1, 2, 1, 1, 1, 2, 1, 1, 1, 1, 3, 1, 1, 1),
    (1, 2, 1, 2, 1, 1, 1, 1, 1, 1, 3, 1, 1, 1),
    (1, 3, 1, 1, 1, 1, 1, 1, 1, 1, 3, 1, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1, 2, 1, 2, 3, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1, 2, 3, 2, 1, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 2, 2, 1, 2, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 1, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 3, 2, 1, 2, 1, 1, 1),
    (1, 1, 1, 1, 1, 2, 1, 1, 2, 1, 2, 2, 1, 1),
    (1, 1, 1, 1, 1, 2, 1, 1, 2, 2, 2, 1, 1, 1),
    (1, 1, 1, 1, 1, 2, 1, 2, 2, 1, 2, 1, 1, 1),
    (1, 1, 1, 1, 1, 3, 1, 1, 2, 1, 2, 1, 1, 1),
    (1, 1, 1, 2, 1, 1, 1, 1, 2, 1, 2, 2, 1, 1),
    (1, 1, 1, 2, 1, 1, 1, 1, 2, 2, 2, 1, 1, 1),
    (1, 1, 1, 2, 1, 1, 1, 2, 2, 1, 2, 1, 1, 1),
    (1, 1, 1, 2, 1, 2, 1, 1, 2, 1, 2, 1, 1, 1),
    (1, 1, 1, 3, 1, 1, 1, 1, 2, 1, 2, 1, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 1, 2, 1, 2, 2, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 1, 2, 2, 2, 1, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 2, 2, 1, 2, 1, 1, 1),
    (1, 2, 1, 1, 1, 2, 1, 1, 2, 1, 2, 1, 1, 1),
    (1, 2, 1, 2, 1, 1, 1, 1, 2, 1, 2, 1, 1, 1),
    (1, 3, 1, 1, 1, 1, 1, 1, 2, 1, 2, 1, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1, 3, 1, 1, 3, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1, 3, 2, 1, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 2, 3, 1, 1, 2, 1, 1),
    (1, 1, 1, 2, 1, 1, 1, 1, 3, 1, 1, 2, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 1, 3, 1, 1, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 2, 1, 1, 1, 2, 3, 1, 1),
    (1, 1, 1, 1, 1, 1, 2, 1, 1, 2, 2, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 2, 1, 1, 3, 2, 1, 1, 1),
    (1, 1, 1, 1, 1, 1, 2, 2, 1, 1, 2, 2, 1, 1),
    (1, 1, 1, 2, 1, 1, 2, 1, 1, 1, 2, 2, 1, 1),
    (1, 1, 1, 2, 1, 1, 2, 1, 1, 2, 2, 1, 1, 1),
    (1, 1, 1, 2, 1, 1, 2, 2, 1, 1, 2, 1, 1, 1),
    (1, 1, 1, 2, 1, 2, 2, 1, 1, 1, 2, 1, 1, 1),
    (1, 1, 1, 3, 1, 1, 2, 1, 1, 1, 2, 1, 1, 1),
    (1, 2, 1, 1, 1, 1, 2, 1, 1, 1, 2, 2, 1, 1),
    (1, 2, 1, 1, 1, 1, 2, 1, 1, 2, 2, 1, 1, 1),
    (1, 2, 1, 2, 1, 1, 2, 1, 1, 1, 2, 1, 1, 1),
    (1, 1, 1, 1, 2, 1, 1, 1, 1, 1, 2, 3, 1, 1),
    (1, 1, 1, 1, 2, 1, 1, 1, 1, 2, 2, 2, 1, 1),
    (1, 1, 1, 1, 2, 1, 1, 1, 1, 3, 2, 1, 1, 1),
    (1, 1, 1, 1, 2, 1, 1, 2, 1, 1, 2, 2, 1, 1),
    (1, 1, 1, 1, 2, 1, 1, 2, 1, 2, 2, 1, 1, 1),
    (1, 1, 1, 1, 2, 2, 1, 1, 1, 1, 2, 2, 1, 1),
    (1, 2, 1, 1, 2, 1, 1, 1, 1, 1, 2, 2, 1, 1),
    (1, 2, 1, 1, 2, 1, 1, 1, 1, 2, 2, 1, 1, 1),
    (1, 2, 1, 1, 2, 1, 1, 2, 1, 1, 2, 1, 1, 1),
    (1, 2, 1, 1, 2, 2, 1, 1, 1, 1, 2, 1, 1, 1),
    (1, 2, 1, 2, 2, 1, 1, 1, 1, 1, 2, 1, 1, 1),
    (1, 3, 1, 1, 2, 1, 1, 1, 1, 1, 2, 1, 1, 1),
    (1, 1, 2, 1, 1, 1, 1, 1, 1, 1, 2, 3, 1, 1),
    (1, 1, 2, 1, 1, 1, 1, 1, 1, 2, 2, 2, 1, 1),
    (1, 1, 2, 1, 1, 1, 1, 1, 1, 3, 2, 1, 1, 1),
    (1, 1, 2, 1, 1, 1, 1, 2, 1, 1, 2, 2, 1, 1),
    (1, 1, 2, 1, 1, 1, 1, 2, 1, 2, 2, 1, 1, 1),
    (1, 1, 2, 1, 1, 1, 1, 3, 1, 1, 2, 1, 1, 1),
    (1, 1, 2, 1, 1, 2, 1, 1, 1, 1, 2, 2, 1, 1),
    (1, 1, 2, 1, 1, 2, 1, 1, 1, 2, 2, 1, 1, 1),
    (1, 1, 2, 2, 1, 1, 1, 1, 1, 1, 2, 2, 1, 1),
    (2, 1, 1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 1, 1),
    (2, 1, 1, 1, 1, 1, 1, 1, 1, 3, 2, 1, 1, 1),
    (2, 1, 1, 1, 1, 1, 1, 2, 1, 1, 2, 2, 1, 1),
    (2, 1, 1, 1, 1, 1, 1, 2, 1, 2, 2, 1, 1, 1),
    (2, 1, 1, 1, 1, 1, 1, 3, 1, 1, 2, 1, 1, 1),
    (2, 1, 1, 1, 1, 2, 1, 1, 1, 2, 2, 1, 1, 1),
    (2, 1, 1, 1, 1, 2, 1, 2, 1, 1, 2, 1, 1, 1),
    (2, 1, 1, 2, 1, 1, 1, 1, 1, 2, 2, 1, 1, 1),
    (2, 1, 1, 1, 1, 1, 1, 1, 2, 2, 1, 2, 1, 1),
)


def _limited_char(reg: int) -> List[int]:
    group = max(g for g, floor in enumerate(_GROUP_FLOOR_LTD) if reg >= floor)
    reg -= _GROUP_FLOOR_LTD[group]
    v_odd, v_even = divmod(reg, _T_EVEN_LTD[group])
    odd = rss_widths(v_odd, _MODULES_ODD_LTD[group], 7, _WIDEST_ODD_LTD[group], True)
    even = rss_widths(v_even, _MODULES_EVEN_LTD[group], 7, _WIDEST_EVEN_LTD[group], False)
    return _interleave(odd, even)


def databar_limited_widths(content: str) -> List[int]:
    """The 46 element widths of a DataBar Limited symbol (light first)."""
    body = normalize_gtin(content, "GS1_DATABAR_LIMITED")
    if body[0] not in "01":
        raise InvalidPayloadError(
            "DataBar Limited requires indicator digit 0 or 1",
            symbology="GS1_DATABAR_LIMITED",
            context={"indicator": body[0]},
        )
    left_reg, right_reg = divmod(int(body), 2013571)
    left = _limited_char(left_reg)
    right = _limited_char(right_reg)
    checksum = 0
    for i in range(14):
        checksum += _WEIGHTS_LTD[i] * left[i] + _WEIGHTS_LTD[i + 14] * right[i]
    checksum %= 89
    return [1, 1, *left, *LIMITED_CHECK_PATTERNS[checksum], *right, 1, 1]


class DataBarLimitedEncoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.GS1_DATABAR_LIMITED})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        widths = databar_limited_widths(payload)
        text = "(01)" + calculate_check_digit_14(payload)
        return LinearSymbol.from_widths(
            widths, first_dark=False, text=text, quiet_left=QUIET_ZONE, quiet_right=QUIET_ZONE
        )


# =============================================================================
# DataBar Expanded
# =============================================================================

_G_SUM_EXP: Final = (0, 348, 1388, 2948, 3988)
_T_EVEN_EXP: Final = (4, 20, 52, 104, 204)
_MODULES_ODD_EXP: Final = (12, 10, 8, 6, 4)
_MODULES_EVEN_EXP: Final = (5, 7, 9, 11, 13)
_WIDEST_ODD_EXP: Final = (7, 5, 4, 3, 1)
_WIDEST_EVEN_EXP: Final = (2, 4, 5, 6, 8)
_WEIGHTS_EXP: Final = tuple(pow(3, i, 211) for i in range(184))
_FINDERS_EXP: Final = (
    (1, 8, 4, 1, 1), (1, 1, 4, 8, 1),
    (3, 6, 4, 1, 1), (1, 1, 4, 6, 3),
    (3, 4, 6, 1, 1), (1, 1, 6, 4, 3),
    (3, 2, 8, 1, 1), (1, 1, 8, 2, 3),
    (2, 6, 5, 1, 1), (1, 1, 5, 6, 2),
    (2, 2, 9, 1, 1), (1, 1, 9, 2, 2),
)
# Последовательности искателей (1 = A1, 2 = A2, ... 12 = F2) по числу искателей
_FINDER_SEQUENCES: Final = (
    (1, 2),
    (1, 4, 3),
    (1, 6, 3, 8),
    (1, 10, 3, 8, 5),
    (1, 10, 3, 8, 7, 12),
    (1, 10, 3, 8, 9, 12, 11),
    (1, 2, 3, 4, 5, 6, 7, 8),
    (1, 2, 3, 4, 5, 6, 7, 10, 9),
    (1, 2, 3, 4, 5, 6, 7, 10, 11, 12),
    (1, 2, 3, 4, 5, 8, 7, 10, 9, 12, 11),
)

MAX_DATA_CHARS: Final[int] = 21
MIN_BITS: Final[int] = 36

_NUMERIC, _ALPHA, _ISO = "numeric", "alpha", "iso"
_ALPHA_SPECIALS: Final = {"*": 58, ",": 59, "-": 60, ".": 61, "/": 62}
_ISO_SPECIALS: Final = "!\"%&'()*+,-./:;<=>?_ "


def _bits(value: int, width: int) -> str:
    return format(value, f"0{width}b")


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _alpha_encodable(ch: str) -> bool:
    return _is_digit(ch) or "A" <= ch <= "Z" or ch in _ALPHA_SPECIALS or ch == FNC1


def _digit_run(data: str, pos: int) -> int:
    n = 0
    while pos + n < len(data) and _is_digit(data[pos + n]):
        n += 1
    return n


def _general_purpose(data: str, prefix_len: int) -> Tuple[str, str]:
    """Encode ``data`` in the general-purpose field; returns (bits, final mode)."""
    out: List[str] = []
    length = prefix_len
    mode = _NUMERIC
    pos = 0

    def emit(s: str) -> None:
        nonlocal length
        out.append(s)
        length += len(s)

    while pos < len(data):
        ch = data[pos]
        if mode == _NUMERIC:
            nxt = data[pos + 1] if pos + 1 < len(data) else None
            numeric_pair = (_is_digit(ch) or ch == FNC1) and nxt is not None and (
                _is_digit(nxt) or nxt == FNC1
            )
            if numeric_pair:
                a = 10 if ch == FNC1 else int(ch)
                b = 10 if nxt == FNC1 else int(nxt)
                emit(_bits(11 * a + b + 8, 7))
                pos += 2
                continue
            if nxt is None and _is_digit(ch):
                to_boundary = (12 - (length % 12)) % 12
                if 4 <= to_boundary < 7:
                    emit(_bits(int(ch) + 1, 4))
                else:
                    emit(_bits(11 * int(ch) + 10 + 8, 7))
                pos += 1
                continue
            emit("0000")
            mode = _ALPHA
            continue

        if ch == FNC1:
            emit("01111")
            mode = _NUMERIC
            pos += 1
            continue
        run = _digit_run(data, pos)
        if run >= 6 or (run >= 4 and pos + run == len(data)):
            emit("000")
            mode = _NUMERIC
            continue

        if mode == _ALPHA:
            if _is_digit(ch):
                emit(_bits(int(ch) + 5, 5))
            elif "A" <= ch <= "Z":
                emit(_bits(ord(ch) - 33, 6))
            elif ch in _ALPHA_SPECIALS:
                emit(_bits(_ALPHA_SPECIALS[ch], 6))
            else:
                emit("00100")
                mode = _ISO
                continue
            pos += 1
            continue

        # ISO/IEC 646
        window = data[pos : pos + 10]
        if all(_alpha_encodable(c) for c in window) and not _is_digit(ch):
            emit("00100")
            mode = _ALPHA
            continue
        if _is_digit(ch):
            emit(_bits(int(ch) + 5, 5))
        elif "A" <= ch <= "Z":
            emit(_bits(ord(ch) - 1, 7))
        elif "a" <= ch <= "z":
            emit(_bits(ord(ch) - 7, 7))
        elif ch in _ISO_SPECIALS:
            emit(_bits(232 + _ISO_SPECIALS.index(ch), 8))
        else:
            raise InvalidPayloadError(
                f"Character {ch!r} is not encodable in DataBar Expanded",
                symbology="GS1_DATABAR_EXPANDED",
            )
        pos += 1
    return "".join(out), mode


def _method(elements: Sequence[ElementString]) -> str:
    if not elements or elements[0].ai != "01":
        return "00"
    gtin = elements[0].value
    if len(elements) == 2 and gtin[0] == "9":
        ai, weight = elements[1].ai, int(elements[1].value)
        if ai == "3103" and weight <= 32767:
            return "0100"
        if ai == "3202" and weight <= 9999:
            return "0101"
        if ai == "3203" and weight <= 22767:
            return "0101"
    return "1"


def _gtin_groups(gtin: str) -> str:
    """GTIN digits 2..13 (indicator and check digit excluded) as 4 x 10 bits."""
    return "".join(_bits(int(gtin[i : i + 3]), 10) for i in range(1, 13, 3))


def expanded_bits(content: str, stacked_columns: int = 0) -> str:
    """Binary data string of a DataBar Expanded symbol (padded, length fields set).

    Args:
        content: GS1 element strings.
        stacked_columns: Segment pairs per row for the stacked form, 0 if unstacked.

    Raises:
        InvalidPayloadError: Bad AI syntax or unencodable characters.
        PayloadTooLargeError: More than 21 data characters needed.
    """
    elements = parse_element_strings(content, "GS1_DATABAR_EXPANDED")
    method = _method(elements)
    logger.debug("DataBar Expanded encodation method %s", method)

    if method in ("0100", "0101"):
        gtin, weight = elements[0].value, elements[1]
        value = int(weight.value)
        if weight.ai == "3203":
            value += 10000
        bits = "0" + method + _gtin_groups(gtin) + _bits(value, 15)
        final_mode: Optional[str] = None
    else:
        if method == "1":
            gtin = elements[0].value
            head = "0" + "1XX" + _bits(int(gtin[0]), 4) + _gtin_groups(gtin)
            rest = list(elements[1:])
        else:
            head = "0" + "00XX"
            rest = list(elements)
        gp, final_mode = _general_purpose(join_with_fnc1(rest), len(head))
        bits = head + gp

    pad = (12 - len(bits) % 12) % 12
    if len(bits) + pad < MIN_BITS:
        pad = MIN_BITS - len(bits)
    if stacked_columns:
        per_row = 2 * stacked_columns
        while ((len(bits) + pad) // 12 + 1) % per_row == 1:
            pad += 12
    if (len(bits) + pad) // 12 > MAX_DATA_CHARS:
        raise PayloadTooLargeError(
            "DataBar Expanded data exceeds 21 data characters",
            symbology="GS1_DATABAR_EXPANDED",
            context={"bits": len(bits)},
        )
    if pad:
        filler = ("0000" if final_mode == _NUMERIC else "") + "00100" * (pad // 5 + 2)
        bits += filler[:pad]

    if "X" in bits:
        data_chars = len(bits) // 12
        d1 = "1" if (data_chars + 1) % 2 else "0"
        d2 = "1" if data_chars + 1 > 14 else "0"
        bits = bits.replace("XX", d1 + d2, 1)
    return bits


def _exp_char(value: int) -> List[int]:
    group = next(g for g in range(4, -1, -1) if value >= _G_SUM_EXP[g])
    v_odd, v_even = divmod(value - _G_SUM_EXP[group], _T_EVEN_EXP[group])
    odd = rss_widths(v_odd, _MODULES_ODD_EXP[group], 4, _WIDEST_ODD_EXP[group], False)
    even = rss_widths(v_even, _MODULES_EVEN_EXP[group], 4, _WIDEST_EVEN_EXP[group], True)
    return _interleave(odd, even)


def expanded_widths(bits: str) -> List[int]:
    """Element widths (light first, guards included) for a padded binary string."""
    values = [int(bits[i : i + 12], 2) for i in range(0, len(bits), 12)]
    data_chars = len(values)
    chars = [_exp_char(v) for v in values]
    n = data_chars + 1
    blocks = (n + 1) // 2
    sequence = _FINDER_SEQUENCES[blocks - 2]

    checksum = 0
    for i, widths in enumerate(chars):
        v = sequence[i // 2] if i % 2 == 0 else sequence[(i + 1) // 2]
        row = 2 * v - 2 if i % 2 == 0 else 2 * v - 3
        for j, w in enumerate(widths):
            checksum += w * _WEIGHTS_EXP[row * 8 + j]
    check = _exp_char(211 * (n - 4) + checksum % 211)

    pattern_width = blocks * 5 + n * 8 + 4
    elements = [0] * pattern_width
    elements[0] = elements[1] = 1
    elements[-2] = elements[-1] = 1
    for b in range(blocks):
        elements[10 + 21 * b : 15 + 21 * b] = _FINDERS_EXP[sequence[b] - 1]
    elements[2:10] = check
    for i in range(1, data_chars, 2):
        start = ((i - 1) // 2) * 21 + 23
        elements[start : start + 8] = chars[i]
    for i in range(0, data_chars, 2):
        start = (i // 2) * 21 + 15
        elements[start : start + 8] = chars[i][::-1]
    return elements


def _stacked_expanded(elements: Sequence[int], columns: int, text: str) -> MatrixSymbol:
    """Stacked DataBar Expanded: ``columns`` finder blocks per row.

    Even rows of an even-column symbol are mirrored, so a trailing partial
    block comes first in such a row. The last row is kept left to right and
    shifted by one module when it holds an odd number of blocks.
    """
    body = list(elements[2:-2])
    blocks = -(-len(body) // 21)
    per_row = min(columns, blocks)
    stack_rows = -(-blocks // per_row)
    partial_last = len(body) % 21 != 0

    data_rows: List[List[bool]] = []
    directions: List[Tuple[bool, int, bool, int, bool]] = []
    current = 0
    for row in range(1, stack_rows + 1):
        count = min(per_row, blocks - current)
        chunk = body[current * 21 : (current + count) * 21]
        special = (
            row == stack_rows
            and count != per_row
            and row % 2 == 0
            and per_row % 2 == 0
            and count % 2 == 1
        )
        left_to_right = per_row % 2 == 1 or row % 2 == 1 or special
        leading_partial = False
        if not left_to_right:
            chunk = chunk[::-1]
            leading_partial = partial_last and current + count == blocks
        current += count

        sub = [2 if special else 1, 1, *chunk, 1, 1]
        data_rows.append(_row_bits(sub, row % 2 == 0 and not special))
        directions.append((left_to_right, count, special, len(data_rows[-1]), leading_partial))

    width = max(len(r) for r in data_rows)
    data_rows = [r + [False] * (width - len(r)) for r in data_rows]

    def separator(
        row: List[bool],
        used: int,
        left_to_right: bool,
        reader: int,
        special: bool,
        leading_partial: bool,
    ) -> List[bool]:
        sep = [False] * width
        for j in range(5 if special else 4, used - 4):
            sep[j] = not row[j]
        # Блок из 13 элементов в начале ряда смещает все искатели на 17 модулей
        shift = 17 if leading_partial else 0
        for b in range(reader):
            k = 49 * b + (19 if special else 18) - shift
            indices = range(15) if left_to_right else range(14, -1, -1)
            step = -1 if left_to_right else 1
            for i in indices:
                c = i + k
                if 0 <= c + step < width and 0 <= c < width:
                    if not row[c + step] and not row[c] and sep[c + step]:
                        sep[c] = False
        return sep

    rows: List[List[bool]] = []
    heights: List[int] = []
    for idx, row in enumerate(data_rows):
        ltr, reader, special, used, leading_partial = directions[idx]
        if idx > 0:
            middle = [False] * width
            for j in range(5, min(49 * per_row, width), 2):
                middle[j] = True
            rows.append(middle)
            heights.append(1)
            rows.append(separator(row, used, ltr, reader, special, leading_partial))
            heights.append(1)
        rows.append(row)
        heights.append(34)
        if idx < len(data_rows) - 1:
            rows.append(separator(row, used, ltr, reader, False, False))
            heights.append(1)
    return MatrixSymbol(
        rows=tuple(tuple(r) for r in rows),
        row_heights=tuple(heights),
        quiet_zone=QUIET_ZONE,
        square_modules=False,
        text=text,
    )


class DataBarExpandedEncoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.GS1_DATABAR_EXPANDED})

    def encode(
        self,
        payload: str,
        config: EncodingConfiguration,
        kind: SymbologyKind,
        force_stacked: bool = False,
    ) -> AbstractSymbol:
        stacked = force_stacked or config.symbol_type_exp is DataBarExpandedSymbolType.STACKED
        columns = config.no_of_columns if stacked else 0
        bits = expanded_bits(payload, columns)
        elements = expanded_widths(bits)
        text = human_readable(parse_element_strings(payload, kind.name))
        if not stacked:
            return LinearSymbol.from_widths(
                elements, first_dark=False, text=text, quiet_left=QUIET_ZONE, quiet_right=QUIET_ZONE
            )
        return _stacked_expanded(elements, columns, text)
