"""
RU: Общий интерфейс кодировщиков символик и вспомогательные функции проверки данных.
EN: Encoder capability shared by all symbologies.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, FrozenSet, Iterable, Sequence, Tuple

from barcodeforge.barcodegen.errors import InvalidPayloadError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import AbstractSymbol

logger = logging.getLogger(__name__)

__all__ = ["SymbolEncoder", "require_charset", "require_digits", "widths_from_pattern"]


class SymbolEncoder(ABC):
    """
    Converts a payload into an abstract symbol.

    Subclasses declare the symbologies they serve in ``kinds`` and must be
    stateless: one instance is shared by every engine in the process.
    """

    kinds: ClassVar[FrozenSet[SymbologyKind]] = frozenset()

    @abstractmethod
    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> AbstractSymbol:
        """Validate ``payload`` and build the symbol.

        Raises:
            InvalidPayloadError: Payload violates the symbology grammar.
            PayloadTooLargeError: Payload exceeds the largest symbol.
        """

    def __repr__(self) -> str:
        names = ", ".join(sorted(k.name for k in self.kinds))
        return f"{self.__class__.__name__}({names})"


def require_digits(
    payload: str, kind: SymbologyKind, lengths: Iterable[int] = ()
) -> str:
    """Check that ``payload`` is ASCII digits, optionally of an allowed length."""
    allowed = tuple(lengths)
    if not payload or not payload.isascii() or not payload.isdigit():
        raise InvalidPayloadError(
            f"{kind.localized_name('en')} requires numeric data",
            symbology=kind.name,
            context={"payload": payload},
        )
    if allowed and len(payload) not in allowed:
        raise InvalidPayloadError(
            f"{kind.localized_name('en')} requires "
            f"{' or '.join(str(n) for n in allowed)} digits, got {len(payload)}",
            symbology=kind.name,
            context={"length": len(payload)},
        )
    return payload


def require_charset(payload: str, charset: str, kind: SymbologyKind) -> str:
    if not payload:
        raise InvalidPayloadError("Empty payload", symbology=kind.name)
    bad = sorted({c for c in payload if c not in charset})
    if bad:
        raise InvalidPayloadError(
            f"Characters not encodable in {kind.localized_name('en')}: {''.join(bad)!r}",
            symbology=kind.name,
        )
    return payload


def widths_from_pattern(pattern: str) -> Tuple[int, ...]:
    """``"211412"`` -> ``(2, 1, 1, 4, 1, 2)``."""
    return tuple(int(ch) for ch in pattern)


def wide_narrow(flags: Sequence[int], wide: int = 3) -> Tuple[int, ...]:
    """Map wide flags (1/0) to module widths."""
    return tuple(wide if f else 1 for f in flags)
