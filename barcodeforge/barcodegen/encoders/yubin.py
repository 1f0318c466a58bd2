"""
RU: Почтовый штрих-код клиента (Япония): 4-позиционные штрихи, 20 знаков данных
(индекс + номер адреса), дополнение CC4 и контрольный знак по модулю 19.
EN: Japan Post customer barcode encoder.

Layout: start (2 bars) + 20 characters (3 bars each) + check (3) + stop (2) = 67 bars.
"""

from __future__ import annotations

import logging
import re
from typing import Final, List, Tuple

from barcodeforge.barcodegen.checksum import yubin_mod19
from barcodeforge.barcodegen.encoders.base import SymbolEncoder
from barcodeforge.barcodegen.errors import InvalidPayloadError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import BarState, PostalSymbol

logger = logging.getLogger(__name__)

__all__ = ["YubinEncoder", "to_character_values", "DATA_LENGTH", "BAR_COUNT"]

DATA_LENGTH: Final[int] = 20
BAR_COUNT: Final[int] = 2 + DATA_LENGTH * 3 + 3 + 2

HYPHEN: Final[int] = 10
CC1: Final[int] = 11
CC4: Final[int] = 14

# Значение -> штрихи (1 полный, 2 верхний, 3 нижний, 4 синхронизирующий)
_PATTERNS: Final[Tuple[str, ...]] = (
    "144", "114", "132", "312", "123", "141", "321", "213", "231", "411",
    "414",
    "324", "342", "234", "432", "243", "423", "441", "111",
)
_START: Final[str] = "13"
_STOP: Final[str] = "31"

_STATES: Final[dict] = {
    "1": BarState.FULL,
    "2": BarState.ASCENDER,
    "3": BarState.DESCENDER,
    "4": BarState.TRACKER,
}

_POSTCODE = re.compile(r"^(\d{3})-?(\d{4})")


def to_character_values(code: str) -> List[int]:
    """Postal code + address number as exactly 20 character values.

    Example:
        >>> to_character_values("1000001-1-2-3")[:12]
        [1, 0, 0, 0, 0, 0, 1, 1, 10, 2, 10, 3]
    """
    text = code.strip().upper().replace(" ", "")
    match = _POSTCODE.match(text)
    if not match:
        raise InvalidPayloadError(
            "Customer barcode must start with a 7-digit postal code",
            symbology="YUBIN_CUSTOMER",
            context={"code": code},
        )
    values: List[int] = [int(c) for c in match.group(1) + match.group(2)]
    # Дефис между индексом и номером адреса не кодируется
    for ch in text[match.end() :].lstrip("-"):
        if ch.isdigit() and ch.isascii():
            values.append(int(ch))
        elif ch == "-":
            values.append(HYPHEN)
        elif "A" <= ch <= "Z":
            offset = ord(ch) - ord("A")
            values.extend((CC1 + offset // 10, offset % 10))
        else:
            raise InvalidPayloadError(
                f"Character {ch!r} is not allowed in an address number",
                symbology="YUBIN_CUSTOMER",
            )
    values = values[:DATA_LENGTH]
    values.extend([CC4] * (DATA_LENGTH - len(values)))
    return values


class YubinEncoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.YUBIN_CUSTOMER})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> PostalSymbol:
        values = to_character_values(payload)
        check = yubin_mod19(values)
        pattern = _START + "".join(_PATTERNS[v] for v in values + [check]) + _STOP
        bars = tuple(_STATES[p] for p in pattern)
        logger.debug("Yubin values %s, check %d", values, check)
        return PostalSymbol(bars=bars, text=payload.strip(), source=payload)
