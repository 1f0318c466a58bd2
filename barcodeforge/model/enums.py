"""
model/enums.py

(Краткое RU: Перечисления символик, форматов вывода и режимов кодирования.)

EN: Domain enums for the barcode engine (symbology identifiers, output formats,
per-symbology option values). Values are closed sets; parsing helpers return
None for unknown input so that configuration setters can ignore it.

- SymbologyKind carries the stable integer identifiers 0..18.
- Option enums are `str` enums so their values round-trip through JSON configs.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Final, Literal, Optional, Union

_logger: Final[logging.Logger] = logging.getLogger(__name__)

__all__ = [
    "SymbologyFamily",
    "SymbologyKind",
    "OutputFormat",
    "QRErrorCorrection",
    "QREncodeMode",
    "Code128Mode",
    "DataMatrixScheme",
    "DataBar14SymbolType",
    "DataBarExpandedSymbolType",
    "StringEncoding",
]


class SymbologyFamily(str, Enum):
    LINEAR = "linear"
    DATABAR = "databar"
    POSTAL = "postal"
    MATRIX = "matrix"


class SymbologyKind(int, Enum):
    """Supported symbologies with their stable integer identifiers."""

    CODE39 = 0
    CODE93 = 1
    CODE128 = 2
    GS1_128 = 3
    NW7 = 4
    MATRIX2OF5 = 5
    NEC2OF5 = 6
    JAN8 = 7
    JAN13 = 8
    UPC_A = 9
    UPC_E = 10
    ITF = 11
    GS1_DATABAR_14 = 12
    GS1_DATABAR_LIMITED = 13
    GS1_DATABAR_EXPANDED = 14
    YUBIN_CUSTOMER = 15
    QR = 16
    DATAMATRIX = 17
    PDF417 = 18

    @classmethod
    def parse(cls, value: Union[int, str, "SymbologyKind"]) -> Optional["SymbologyKind"]:
        """Resolve an integer id, enum member or member name; None if unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            if key.isdigit():
                return cls.parse(int(key))
            return cls.__members__.get(key)
        return None

    @property
    def family(self) -> SymbologyFamily:
        if self in _DATABAR:
            return SymbologyFamily.DATABAR
        if self is SymbologyKind.YUBIN_CUSTOMER:
            return SymbologyFamily.POSTAL
        if self in _MATRIX:
            return SymbologyFamily.MATRIX
        return SymbologyFamily.LINEAR

    @property
    def is_two_dimensional(self) -> bool:
        return self.family is SymbologyFamily.MATRIX

    @property
    def is_ean_upc(self) -> bool:
        return self in {
            SymbologyKind.JAN8,
            SymbologyKind.JAN13,
            SymbologyKind.UPC_A,
            SymbologyKind.UPC_E,
        }

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        names_ru = {
            SymbologyKind.CODE39: "Code 39",
            SymbologyKind.CODE93: "Code 93",
            SymbologyKind.CODE128: "Code 128",
            SymbologyKind.GS1_128: "GS1-128 (EAN-128)",
            SymbologyKind.NW7: "NW-7 (Codabar)",
            SymbologyKind.MATRIX2OF5: "Матричный 2 из 5",
            SymbologyKind.NEC2OF5: "NEC 2 из 5",
            SymbologyKind.JAN8: "JAN-8 (EAN-8)",
            SymbologyKind.JAN13: "JAN-13 (EAN-13)",
            SymbologyKind.UPC_A: "UPC-A",
            SymbologyKind.UPC_E: "UPC-E",
            SymbologyKind.ITF: "ITF (чередующийся 2 из 5)",
            SymbologyKind.GS1_DATABAR_14: "GS1 DataBar Omnidirectional",
            SymbologyKind.GS1_DATABAR_LIMITED: "GS1 DataBar Limited",
            SymbologyKind.GS1_DATABAR_EXPANDED: "GS1 DataBar Expanded",
            SymbologyKind.YUBIN_CUSTOMER: "Почтовый код клиента (Япония)",
            SymbologyKind.QR: "QR-код",
            SymbologyKind.DATAMATRIX: "DataMatrix ECC200",
            SymbologyKind.PDF417: "PDF417",
        }
        names_en = {
            SymbologyKind.CODE39: "Code 39",
            SymbologyKind.CODE93: "Code 93",
            SymbologyKind.CODE128: "Code 128",
            SymbologyKind.GS1_128: "GS1-128",
            SymbologyKind.NW7: "NW-7 (Codabar)",
            SymbologyKind.MATRIX2OF5: "Matrix 2 of 5",
            SymbologyKind.NEC2OF5: "NEC 2 of 5",
            SymbologyKind.JAN8: "JAN-8 (EAN-8)",
            SymbologyKind.JAN13: "JAN-13 (EAN-13)",
            SymbologyKind.UPC_A: "UPC-A",
            SymbologyKind.UPC_E: "UPC-E",
            SymbologyKind.ITF: "ITF (Interleaved 2 of 5)",
            SymbologyKind.GS1_DATABAR_14: "GS1 DataBar Omnidirectional",
            SymbologyKind.GS1_DATABAR_LIMITED: "GS1 DataBar Limited",
            SymbologyKind.GS1_DATABAR_EXPANDED: "GS1 DataBar Expanded",
            SymbologyKind.YUBIN_CUSTOMER: "Japan Post Customer Barcode",
            SymbologyKind.QR: "QR Code",
            SymbologyKind.DATAMATRIX: "Data Matrix ECC200",
            SymbologyKind.PDF417: "PDF417",
        }
        return names_ru[self] if lang == "ru" else names_en[self]


_DATABAR: Final = frozenset(
    {
        SymbologyKind.GS1_DATABAR_14,
        SymbologyKind.GS1_DATABAR_LIMITED,
        SymbologyKind.GS1_DATABAR_EXPANDED,
    }
)
_MATRIX: Final = frozenset({SymbologyKind.QR, SymbologyKind.DATAMATRIX, SymbologyKind.PDF417})


class _ParsableEnum(str, Enum):
    """str-enum with lenient, case-insensitive lookup."""

    @classmethod
    def parse(cls, value: object):  # type: ignore[no-untyped-def]
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().upper().replace("-", "_")
        for member in cls:
            if member.name == key or member.value.upper() == value.strip().upper():
                return member
        return None


class OutputFormat(_ParsableEnum):
    PNG = "png"
    JPG = "jpg"
    SVG = "svg"

    @classmethod
    def parse(cls, value: object) -> Optional["OutputFormat"]:
        if isinstance(value, str) and value.strip().lower() == "jpeg":
            return cls.JPG
        return super().parse(value)

    @property
    def is_vector(self) -> bool:
        return self is OutputFormat.SVG

    @property
    def pil_format(self) -> str:
        return {"png": "PNG", "jpg": "JPEG", "svg": "SVG"}[self.value]


class QRErrorCorrection(_ParsableEnum):
    L = "L"
    M = "M"
    Q = "Q"
    H = "H"

    @property
    def format_bits(self) -> int:
        """Two-bit level indicator used in the format information."""
        return {"L": 1, "M": 0, "Q": 3, "H": 2}[self.value]

    @property
    def ordinal(self) -> int:
        return "LMQH".index(self.value)


class QREncodeMode(_ParsableEnum):
    AUTO = "AUTO"
    NUMERIC = "NUMERIC"
    ALPHANUMERIC = "ALPHANUMERIC"
    BYTE = "BYTE"
    KANJI = "KANJI"


class Code128Mode(_ParsableEnum):
    AUTO = "AUTO"
    A = "A"
    B = "B"
    C = "C"


class DataMatrixScheme(_ParsableEnum):
    AUTO = "AUTO"
    ASCII = "ASCII"
    C40 = "C40"
    TEXT = "TEXT"
    X12 = "X12"
    EDIFACT = "EDIFACT"
    BASE256 = "BASE256"


class DataBar14SymbolType(_ParsableEnum):
    OMNIDIRECTIONAL = "OMNIDIRECTIONAL"
    STACKED = "STACKED"
    STACKED_OMNIDIRECTIONAL = "STACKED_OMNIDIRECTIONAL"


class DataBarExpandedSymbolType(_ParsableEnum):
    UNSTACKED = "UNSTACKED"
    STACKED = "STACKED"


class StringEncoding(_ParsableEnum):
    UTF8 = "utf-8"
    SHIFT_JIS = "shift-jis"

    @classmethod
    def parse(cls, value: object) -> Optional["StringEncoding"]:
        if not isinstance(value, str):
            return None
        key = value.strip().lower().replace("_", "-")
        if key in {"utf-8", "utf8"}:
            return cls.UTF8
        if key in {"shift-jis", "shiftjis", "sjis", "cp932"}:
            return cls.SHIFT_JIS
        return None

    @property
    def codec(self) -> str:
        return "utf-8" if self is StringEncoding.UTF8 else "cp932"
