"""
RU: NW-7 (Codabar): 7 элементов на символ, стартовый/стоповый символы A-D.
EN: NW-7 / Codabar encoder.
"""

from __future__ import annotations

import logging
from typing import Dict, Final, List

from barcodeforge.barcodegen.encoders.base import SymbolEncoder, require_charset, wide_narrow
from barcodeforge.barcodegen.errors import InvalidPayloadError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import LinearSymbol

logger = logging.getLogger(__name__)

__all__ = ["CodabarEncoder", "NW7_DATA_CHARSET"]

NW7_DATA_CHARSET: Final[str] = "0123456789-$:/.+"
_GUARDS: Final[str] = "ABCD"

_WIDE: Final[Dict[str, str]] = {
    "0": "0000011",
    "1": "0000110",
    "2": "0001001",
    "3": "1100000",
    "4": "0010010",
    "5": "1000010",
    "6": "0100001",
    "7": "0100100",
    "8": "0110000",
    "9": "1001000",
    "-": "0001100",
    "$": "0011000",
    ":": "1010001",
    "/": "1000101",
    ".": "1010100",
    "+": "0010101",
    "A": "0011010",
    "B": "0101001",
    "C": "0001011",
    "D": "0001110",
}


class CodabarEncoder(SymbolEncoder):
    """Start/stop characters are taken from the payload or default to ``A``."""

    kinds = frozenset({SymbologyKind.NW7})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        data = payload.strip().upper()
        if not data:
            raise InvalidPayloadError("Empty payload", symbology=kind.name)
        has_start = data[0] in _GUARDS
        has_stop = len(data) > 1 and data[-1] in _GUARDS
        if has_start != has_stop:
            raise InvalidPayloadError(
                "NW-7 start and stop characters must both be present or both omitted",
                symbology=kind.name,
            )
        if not has_start:
            data = "A" + data + "A"
        body = data[1:-1]
        if not body:
            raise InvalidPayloadError("NW-7 payload has no data characters", symbology=kind.name)
        require_charset(body, NW7_DATA_CHARSET, kind)

        widths: List[int] = []
        for ch in data:
            if widths:
                widths.append(1)
            widths.extend(wide_narrow([int(f) for f in _WIDE[ch]]))
        text = data if config.show_start_stop else body
        return LinearSymbol.from_widths(widths, text=text)
