"""
RU: JAN-8, JAN-13, UPC-A и UPC-E: наборы L/G/R, чётность первой цифры,
расширенные защитные штрихи и группы подписи между ними.
EN: EAN/UPC family. Check digits are appended when omitted and verified when given.
"""

from __future__ import annotations

import logging
from typing import Final, FrozenSet, List, Sequence, Tuple

from barcodeforge.barcodegen.checksum import gs1_mod10
from barcodeforge.barcodegen.encoders.base import SymbolEncoder, require_digits
from barcodeforge.barcodegen.errors import InvalidPayloadError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import LinearSymbol, TextSegment

logger = logging.getLogger(__name__)

__all__ = [
    "EanUpcEncoder",
    "L_CODES",
    "G_CODES",
    "R_CODES",
    "EAN13_PARITY",
    "expand_upc_e",
    "complete_payload",
]

L_CODES: Final[Tuple[str, ...]] = (
    "0001101", "0011001", "0010011", "0111101", "0100011",
    "0110001", "0101111", "0111011", "0110111", "0001011",
)
R_CODES: Final[Tuple[str, ...]] = tuple(
    "".join("1" if b == "0" else "0" for b in code) for code in L_CODES
)
G_CODES: Final[Tuple[str, ...]] = tuple(code[::-1] for code in R_CODES)

EAN13_PARITY: Final[Tuple[str, ...]] = (
    "LLLLLL", "LLGLGG", "LLGGLG", "LLGGGL", "LGLLGG",
    "LGGLLG", "LGGGLL", "LGLGLG", "LGLGGL", "LGGLGL",
)
# Система счисления 0, по контрольной цифре (E = чётная = набор G)
UPCE_PARITY: Final[Tuple[str, ...]] = (
    "EEEOOO", "EEOEOO", "EEOOEO", "EEOOOE", "EOEEOO",
    "EOOEEO", "EOOOEE", "EOEOEO", "EOEOOE", "EOOEOE",
)

NORMAL_GUARD: Final[str] = "101"
CENTER_GUARD: Final[str] = "01010"
UPCE_END_GUARD: Final[str] = "010101"

# Тихие зоны (слева, справа) в модулях
QUIET_ZONES: Final[dict] = {
    SymbologyKind.JAN13: (11, 7),
    SymbologyKind.UPC_A: (11, 7),
    SymbologyKind.JAN8: (7, 7),
    SymbologyKind.UPC_E: (9, 7),
}


def _digit_code(digit: str, charset: str) -> str:
    d = int(digit)
    if charset == "L":
        return L_CODES[d]
    if charset == "G":
        return G_CODES[d]
    return R_CODES[d]


def expand_upc_e(digits6: str, number_system: str = "0") -> str:
    """Expand six UPC-E data digits into the 11-digit UPC-A body (no check digit).

    Example:
        >>> expand_upc_e("123456")
        '01234500006'
    """
    d1, d2, d3, d4, d5, d6 = digits6
    if d6 in "012":
        body = d1 + d2 + d6 + "0000" + d3 + d4 + d5
    elif d6 == "3":
        body = d1 + d2 + d3 + "00000" + d4 + d5
    elif d6 == "4":
        body = d1 + d2 + d3 + d4 + "00000" + d5
    else:
        body = d1 + d2 + d3 + d4 + d5 + "0000" + d6
    return number_system + body


def complete_payload(payload: str, kind: SymbologyKind) -> str:
    """Full digit string including the check digit (UPC-E: 8 digits).

    Raises:
        InvalidPayloadError: Wrong length, non-digits or a check digit mismatch.
    """
    lengths = {
        SymbologyKind.JAN13: (12, 13),
        SymbologyKind.JAN8: (7, 8),
        SymbologyKind.UPC_A: (11, 12),
        SymbologyKind.UPC_E: (6, 7, 8),
    }[kind]
    data = require_digits(payload.strip(), kind, lengths)

    if kind is SymbologyKind.UPC_E:
        if len(data) == 6:
            data = "0" + data
        if data[0] not in "01":
            raise InvalidPayloadError(
                "UPC-E number system must be 0 or 1",
                symbology=kind.name,
                context={"number_system": data[0]},
            )
        check = gs1_mod10(expand_upc_e(data[1:7], data[0]))
        if len(data) == 8 and data[7] != check:
            raise InvalidPayloadError(
                f"UPC-E check digit mismatch, expected {check}",
                symbology=kind.name,
            )
        return data[:7] + check

    if len(data) == lengths[0]:
        return data + gs1_mod10(data)
    check = gs1_mod10(data[:-1])
    if data[-1] != check:
        raise InvalidPayloadError(
            f"{kind.localized_name('en')} check digit mismatch, expected {check}",
            symbology=kind.name,
            context={"given": data[-1]},
        )
    return data


class _Assembler:
    """Collects module runs while remembering which ones are guard bars."""

    def __init__(self) -> None:
        self.elements: List[Tuple[int, bool]] = []
        self.guards: List[int] = []
        self.modules = 0

    def add(self, bits: str, guard: bool = False) -> None:
        for ch in bits:
            dark = ch == "1"
            if self.elements and self.elements[-1][1] == dark:
                w, _ = self.elements[-1]
                self.elements[-1] = (w + 1, dark)
            else:
                self.elements.append((1, dark))
            if guard and dark and (not self.guards or self.guards[-1] != len(self.elements) - 1):
                self.guards.append(len(self.elements) - 1)
            self.modules += 1

    def guard_set(self) -> FrozenSet[int]:
        return frozenset(self.guards)


class EanUpcEncoder(SymbolEncoder):
    kinds = frozenset(QUIET_ZONES)

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> LinearSymbol:
        digits = complete_payload(payload, kind)
        quiet_left, quiet_right = QUIET_ZONES[kind]
        asm = _Assembler()

        if kind is SymbologyKind.UPC_E:
            charsets = UPCE_PARITY[int(digits[7])]
            if digits[0] == "1":
                charsets = "".join("O" if c == "E" else "E" for c in charsets)
            asm.add(NORMAL_GUARD, guard=True)
            for d, parity in zip(digits[1:7], charsets):
                asm.add(_digit_code(d, "G" if parity == "E" else "L"))
            asm.add(UPCE_END_GUARD, guard=True)
            groups: Sequence[Tuple[str, int, int]] = (
                (digits[0], 0, quiet_left),
                (digits[1:7], quiet_left + 3, quiet_left + 45),
                (digits[7], quiet_left + 51, quiet_left + 51 + quiet_right),
            )
        elif kind is SymbologyKind.JAN8:
            asm.add(NORMAL_GUARD, guard=True)
            for d in digits[:4]:
                asm.add(_digit_code(d, "L"))
            asm.add(CENTER_GUARD, guard=True)
            for d in digits[4:]:
                asm.add(_digit_code(d, "R"))
            asm.add(NORMAL_GUARD, guard=True)
            groups = (
                (digits[:4], quiet_left + 3, quiet_left + 31),
                (digits[4:], quiet_left + 36, quiet_left + 64),
            )
        else:
            # UPC-A кодируется как JAN-13 с ведущим нулём
            full = digits if kind is SymbologyKind.JAN13 else "0" + digits
            parity = EAN13_PARITY[int(full[0])]
            upc = kind is SymbologyKind.UPC_A
            asm.add(NORMAL_GUARD, guard=True)
            for i, (d, cs) in enumerate(zip(full[1:7], parity)):
                asm.add(_digit_code(d, cs), guard=upc and i == 0)
            asm.add(CENTER_GUARD, guard=True)
            for i, d in enumerate(full[7:]):
                asm.add(_digit_code(d, "R"), guard=upc and i == 5)
            asm.add(NORMAL_GUARD, guard=True)
            if upc:
                groups = (
                    (digits[0], 0, quiet_left),
                    (digits[1:6], quiet_left + 10, quiet_left + 45),
                    (digits[6:11], quiet_left + 50, quiet_left + 85),
                    (digits[11], quiet_left + 95, quiet_left + 95 + quiet_right),
                )
            else:
                groups = (
                    (digits[0], 0, quiet_left),
                    (digits[1:7], quiet_left + 3, quiet_left + 45),
                    (digits[7:], quiet_left + 50, quiet_left + 92),
                )

        segments: Tuple[TextSegment, ...] = ()
        guards: FrozenSet[int] = frozenset()
        if config.extended_guard:
            segments = tuple(TextSegment(t, s, e) for t, s, e in groups)
            guards = asm.guard_set()
        logger.debug("%s encoded %s (%d modules)", kind.name, digits, asm.modules)
        return LinearSymbol(
            elements=tuple(asm.elements),
            text=digits,
            text_segments=segments,
            guard_indices=guards,
            quiet_left=quiet_left,
            quiet_right=quiet_right,
        )
