"""
RU: Разбор строк элементов GS1 с идентификаторами применения (AI) в скобках:
проверка синтаксиса, таблица AI предопределённой длины, контрольные цифры
AI 00/01/02, склейка с FNC1-разделителями.
EN: GS1 element string parsing shared by GS1-128 and DataBar Expanded.

Input forms:
    "(01)04912345123459(10)ABC123"   bracketed AIs
    "0104912345123459"               unbracketed, split by predefined lengths
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Final, List, Sequence

from barcodeforge.barcodegen.checksum import gs1_mod10
from barcodeforge.barcodegen.errors import InvalidPayloadError

logger = logging.getLogger(__name__)

__all__ = [
    "FNC1",
    "ElementString",
    "parse_element_strings",
    "join_with_fnc1",
    "human_readable",
    "PREDEFINED_LENGTHS",
]

# Маркер FNC1 внутри строк данных (вне набора символов GS1)
FNC1: Final[str] = "\xf1"

# Полная длина (AI + значение) для AI с предопределённой длиной, по первым двум цифрам
PREDEFINED_LENGTHS: Final[Dict[str, int]] = {
    "00": 20,
    "01": 16,
    "02": 16,
    "03": 16,
    "04": 18,
    "11": 8,
    "12": 8,
    "13": 8,
    "14": 8,
    "15": 8,
    "16": 8,
    "17": 8,
    "18": 8,
    "19": 8,
    "20": 4,
    "31": 10,
    "32": 10,
    "33": 10,
    "34": 10,
    "35": 10,
    "36": 10,
    "41": 16,
}

_CHECK_DIGIT_AIS: Final = frozenset({"00", "01", "02"})

# 82-символьный набор GS1 (ISO/IEC 646, подмножество)
_GS1_CHARSET: Final = frozenset(
    "!\"%&'()*+,-./0123456789:;<=>?ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
)

_BRACKETED = re.compile(r"\((\d{2,4})\)([^()]*)")

MAX_VALUE_LENGTH: Final[int] = 90


def _ai_length(prefix: str) -> int:
    if prefix in {"31", "32", "33", "34", "35", "36", "39"} or prefix[0] in "78":
        return 4
    if prefix[0] == "4" or prefix in {"23", "24", "25"}:
        return 3
    return 2


@dataclass(frozen=True)
class ElementString:
    """One application identifier with its value."""

    ai: str
    value: str

    @property
    def predefined_length(self) -> int:
        return PREDEFINED_LENGTHS.get(self.ai[:2], 0)

    @property
    def is_fixed(self) -> bool:
        return self.predefined_length > 0

    @property
    def data(self) -> str:
        return self.ai + self.value


def _validate(element: ElementString, symbology: str) -> ElementString:
    ai, value = element.ai, element.value
    if not value:
        raise InvalidPayloadError(
            f"AI ({ai}) has no data", symbology=symbology, context={"ai": ai}
        )
    if len(value) > MAX_VALUE_LENGTH:
        raise InvalidPayloadError(
            f"AI ({ai}) data is too long", symbology=symbology, context={"length": len(value)}
        )
    bad = [c for c in value if c not in _GS1_CHARSET]
    if bad:
        raise InvalidPayloadError(
            f"AI ({ai}) contains characters outside the GS1 set: {''.join(bad)!r}",
            symbology=symbology,
        )
    if not element.is_fixed:
        return element

    if len(ai) != _ai_length(ai[:2]):
        raise InvalidPayloadError(
            f"AI ({ai}) has the wrong number of digits", symbology=symbology
        )
    expected = element.predefined_length - len(ai)
    if not value.isdigit():
        raise InvalidPayloadError(f"AI ({ai}) requires numeric data", symbology=symbology)
    if ai in _CHECK_DIGIT_AIS and len(value) == expected - 1:
        # Неполное значение: дописываем контрольную цифру
        value = value + gs1_mod10(value)
    if len(value) != expected:
        raise InvalidPayloadError(
            f"AI ({ai}) requires {expected} digits, got {len(value)}",
            symbology=symbology,
            context={"ai": ai},
        )
    if ai in _CHECK_DIGIT_AIS and gs1_mod10(value[:-1]) != value[-1]:
        raise InvalidPayloadError(
            f"AI ({ai}) check digit mismatch, expected {gs1_mod10(value[:-1])}",
            symbology=symbology,
        )
    return ElementString(ai, value)


def _split_unbracketed(text: str, symbology: str) -> List[ElementString]:
    out: List[ElementString] = []
    pos = 0
    while pos < len(text):
        prefix = text[pos : pos + 2]
        if len(prefix) < 2 or not prefix.isdigit():
            raise InvalidPayloadError(
                "Element string must start with a numeric AI", symbology=symbology
            )
        ai_len = _ai_length(prefix)
        total = PREDEFINED_LENGTHS.get(prefix)
        if total is None:
            # Переменная длина без скобок: остаток строки относится к этому AI
            out.append(ElementString(text[pos : pos + ai_len], text[pos + ai_len :]))
            break
        out.append(ElementString(text[pos : pos + ai_len], text[pos + ai_len : pos + total]))
        pos += total
    return out


def parse_element_strings(text: str, symbology: str = "GS1") -> List[ElementString]:
    """Parse and validate GS1 element strings.

    Args:
        text: Bracketed ``(AI)value`` pairs or an unbracketed element string.
        symbology: Name used in error reports.

    Returns:
        Validated elements; AI 00/01/02 values one digit short get their check digit.

    Raises:
        InvalidPayloadError: On syntax errors, bad lengths or check digits.

    Example:
        >>> parse_element_strings("(01)0491234512345(10)AB")
        [ElementString(ai='01', value='04912345123459'), ElementString(ai='10', value='AB')]
    """
    text = text.strip()
    if not text:
        raise InvalidPayloadError("Empty GS1 payload", symbology=symbology)
    if text.startswith("("):
        elements: List[ElementString] = []
        pos = 0
        for match in _BRACKETED.finditer(text):
            if match.start() != pos:
                break
            elements.append(ElementString(match.group(1), match.group(2)))
            pos = match.end()
        if pos != len(text) or not elements:
            raise InvalidPayloadError(
                "Malformed AI brackets", symbology=symbology, context={"position": pos}
            )
    else:
        elements = _split_unbracketed(text, symbology)
    return [_validate(e, symbology) for e in elements]


def join_with_fnc1(elements: Sequence[ElementString]) -> str:
    """Concatenate element strings, with FNC1 after every non-final variable-length one."""
    parts: List[str] = []
    for idx, element in enumerate(elements):
        parts.append(element.data)
        if not element.is_fixed and idx < len(elements) - 1:
            parts.append(FNC1)
    return "".join(parts)


def human_readable(elements: Sequence[ElementString]) -> str:
    return "".join(f"({e.ai}){e.value}" for e in elements)
