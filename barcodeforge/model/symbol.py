"""
RU: Абстрактное описание символа: последовательность штрихов/пробелов, матрица модулей
или 4-позиционные штрихи почтового кода. Не содержит цветов и пикселей.
EN: Abstract symbol descriptions handed from encoders to the layout stage.

Three shapes cover all symbologies:
- LinearSymbol: ordered (width, is_dark) elements measured in modules, plus quiet zones
  and human-readable text placement.
- MatrixSymbol: boolean module grid with per-row heights (QR, DataMatrix, PDF417,
  stacked DataBar variants).
- PostalSymbol: 4-state bars on a fixed pitch (Japan Post customer barcode).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

__all__ = [
    "TextSegment",
    "LinearSymbol",
    "MatrixSymbol",
    "BarState",
    "PostalSymbol",
    "AbstractSymbol",
]


@dataclass(frozen=True)
class TextSegment:
    """A run of human-readable text centered over a module span.

    Attributes:
        text: Characters shown in the segment.
        start: First module (inclusive), counted from the left edge of the left quiet zone.
        end: Last module (exclusive).
    """

    text: str
    start: int
    end: int


@dataclass(frozen=True)
class LinearSymbol:
    """Bars and spaces of a 1D symbol, left to right."""

    elements: Tuple[Tuple[int, bool], ...]
    text: str = ""
    text_segments: Tuple[TextSegment, ...] = ()
    guard_indices: FrozenSet[int] = frozenset()
    quiet_left: int = 10
    quiet_right: int = 10

    def __post_init__(self) -> None:
        for width, _dark in self.elements:
            if width <= 0:
                raise ValueError(f"Element width must be positive, got {width}")

    @classmethod
    def from_widths(
        cls,
        widths: Iterable[int],
        *,
        first_dark: bool = True,
        **kwargs: object,
    ) -> "LinearSymbol":
        """Build from alternating bar/space widths."""
        elements: List[Tuple[int, bool]] = []
        dark = first_dark
        for w in widths:
            elements.append((int(w), dark))
            dark = not dark
        return cls(elements=tuple(elements), **kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_modules(cls, bits: str, **kwargs: object) -> "LinearSymbol":
        """Build from a module string such as ``"1011001"`` (1 = dark)."""
        elements: List[Tuple[int, bool]] = []
        for ch in bits:
            dark = ch == "1"
            if elements and elements[-1][1] == dark:
                elements[-1] = (elements[-1][0] + 1, dark)
            else:
                elements.append((1, dark))
        return cls(elements=tuple(elements), **kwargs)  # type: ignore[arg-type]

    @property
    def symbol_modules(self) -> int:
        return sum(w for w, _ in self.elements)

    @property
    def total_modules(self) -> int:
        return self.quiet_left + self.symbol_modules + self.quiet_right

    def to_module_string(self) -> str:
        """Module string without quiet zones (1 = dark, 0 = light)."""
        return "".join(("1" if dark else "0") * w for w, dark in self.elements)

    def segments(self) -> Tuple[TextSegment, ...]:
        """Text segments, defaulting to the whole text centered under the bars."""
        if self.text_segments:
            return self.text_segments
        if not self.text:
            return ()
        return (
            TextSegment(
                self.text,
                self.quiet_left,
                self.quiet_left + self.symbol_modules,
            ),
        )


@dataclass(frozen=True)
class MatrixSymbol:
    """Boolean module grid; each row may span several module heights."""

    rows: Tuple[Tuple[bool, ...], ...]
    row_heights: Tuple[int, ...] = ()
    quiet_zone: int = 4
    square_modules: bool = True
    text: str = ""

    def __post_init__(self) -> None:
        if not self.rows:
            raise ValueError("Matrix symbol must contain at least one row")
        width = len(self.rows[0])
        if any(len(r) != width for r in self.rows):
            raise ValueError("Matrix rows must have equal length")
        if self.row_heights and len(self.row_heights) != len(self.rows):
            raise ValueError("row_heights must match the number of rows")

    @classmethod
    def from_grid(
        cls, grid: Sequence[Sequence[bool]], **kwargs: object
    ) -> "MatrixSymbol":
        return cls(rows=tuple(tuple(bool(v) for v in row) for row in grid), **kwargs)  # type: ignore[arg-type]

    @property
    def columns(self) -> int:
        return len(self.rows[0])

    @property
    def heights(self) -> Tuple[int, ...]:
        return self.row_heights or tuple(1 for _ in self.rows)

    @property
    def height_modules(self) -> int:
        return sum(self.heights)

    def is_dark(self, row: int, col: int) -> bool:
        return self.rows[row][col]


class BarState(str, Enum):
    """4-state bar shapes (RU: полный, верхний, нижний, синхронизирующий)."""

    FULL = "full"
    ASCENDER = "ascender"
    DESCENDER = "descender"
    TRACKER = "tracker"

    @property
    def extent(self) -> Tuple[int, int]:
        """Vertical span in thirds of the bar height, top = 0."""
        return {
            BarState.FULL: (0, 3),
            BarState.ASCENDER: (0, 2),
            BarState.DESCENDER: (1, 3),
            BarState.TRACKER: (1, 2),
        }[self]


@dataclass(frozen=True)
class PostalSymbol:
    """4-state bars on a two-module pitch (1 bar module + 1 gap module)."""

    bars: Tuple[BarState, ...]
    quiet_zone: int = 4
    text: str = ""
    source: Optional[str] = field(default=None, compare=False)

    @property
    def symbol_modules(self) -> int:
        return len(self.bars) * 2 - 1

    @property
    def total_modules(self) -> int:
        return self.symbol_modules + 2 * self.quiet_zone


AbstractSymbol = Union[LinearSymbol, MatrixSymbol, PostalSymbol]
