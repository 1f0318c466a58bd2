"""
RU: Семейство "2 из 5": матричный, NEC и чередующийся (ITF).
EN: 2-of-5 encoders sharing the five-element digit table.

Matrix 2 of 5 and NEC 2 of 5 draw each digit as three bars and two spaces;
ITF interleaves the bars of one digit with the spaces of the next.
"""

from __future__ import annotations

import logging
from typing import Final, List, Tuple

from barcodeforge.barcodegen.encoders.base import SymbolEncoder, require_digits, wide_narrow
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import LinearSymbol

logger = logging.getLogger(__name__)

__all__ = ["TwoOfFiveEncoder", "ITFEncoder", "DIGIT_FLAGS"]

DIGIT_FLAGS: Final[Tuple[Tuple[int, ...], ...]] = tuple(
    tuple(int(f) for f in flags)
    for flags in (
        "00110", "10001", "01001", "11000", "00101",
        "10100", "01100", "00011", "10010", "01010",
    )
)

WIDE: Final[int] = 3

# Старт/стоп как ширины элементов (начиная со штриха)
_GUARDS: Final[dict] = {
    SymbologyKind.MATRIX2OF5: ((4, 1, 1, 1, 1, 1), (4, 1, 1, 1, 1)),
    SymbologyKind.NEC2OF5: ((1, 1, 1, 1), (3, 1, 1)),
}


class TwoOfFiveEncoder(SymbolEncoder):
    """Matrix 2 of 5 and NEC 2 of 5 (non-interleaved)."""

    kinds = frozenset({SymbologyKind.MATRIX2OF5, SymbologyKind.NEC2OF5})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        data = require_digits(payload, kind)
        start, stop = _GUARDS[kind]
        widths: List[int] = list(start)
        for ch in data:
            # b s b s b + узкий межсимвольный пробел
            widths.extend(wide_narrow(DIGIT_FLAGS[int(ch)], WIDE))
            widths.append(1)
        widths.extend(stop)
        return LinearSymbol.from_widths(widths, text=data)


class ITFEncoder(SymbolEncoder):
    """Interleaved 2 of 5; an odd digit count gets a leading zero."""

    kinds = frozenset({SymbologyKind.ITF})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        data = require_digits(payload, kind)
        if len(data) % 2:
            logger.debug("ITF payload of %d digits padded with a leading zero", len(data))
            data = "0" + data
        widths: List[int] = [1, 1, 1, 1]
        for i in range(0, len(data), 2):
            bars = DIGIT_FLAGS[int(data[i])]
            spaces = DIGIT_FLAGS[int(data[i + 1])]
            for b, s in zip(bars, spaces):
                widths.append(WIDE if b else 1)
                widths.append(WIDE if s else 1)
        widths.extend((WIDE, 1, 1))
        return LinearSymbol.from_widths(widths, text=data)
