"""
RU: DataMatrix ECC200: 24 квадратных и 6 прямоугольных размеров, схемы
кодирования ASCII/C40/TEXT/X12/EDIFACT/BASE256, коррекция Рида-Соломона с
чередованием блоков, размещение модулей по алгоритму "Юта".
EN: Data Matrix ECC200 encoder.

A symbol is built in four steps: payload bytes are compacted into data
codewords, padded to the symbol capacity, protected with Reed-Solomon
blocks, then placed into the mapping matrix which is split into data regions
framed by finder and timing patterns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Final, List, Optional, Sequence, Tuple

from barcodeforge.barcodegen.ecc.reed_solomon import protect_datamatrix
from barcodeforge.barcodegen.encoders.base import SymbolEncoder
from barcodeforge.barcodegen.errors import InvalidPayloadError, PayloadTooLargeError
from barcodeforge.model.config import DATAMATRIX_SIZES_AUTO, EncodingConfiguration
from barcodeforge.model.enums import DataMatrixScheme, SymbologyKind
from barcodeforge.model.symbol import MatrixSymbol

logger = logging.getLogger(__name__)

__all__ = [
    "DataMatrixEncoder",
    "SymbolSize",
    "SYMBOL_SIZES",
    "parse_symbol_size",
    "encode_codewords",
    "fit_symbol",
    "pad_codewords",
    "build_datamatrix",
    "placement",
    "QUIET_ZONE",
]

QUIET_ZONE: Final[int] = 1

LATCH_C40: Final[int] = 230
LATCH_BASE256: Final[int] = 231
UPPER_SHIFT: Final[int] = 235
LATCH_X12: Final[int] = 238
LATCH_TEXT: Final[int] = 239
LATCH_EDIFACT: Final[int] = 240
UNLATCH: Final[int] = 254
PAD: Final[int] = 129
EDIFACT_UNLATCH: Final[int] = 31


@dataclass(frozen=True)
class SymbolSize:
    """One ECC200 symbol size.

    Attributes:
        rows, cols: Symbol size in modules, finder patterns included.
        region_rows, region_cols: Size of one data region (without its frame).
        data_codewords: Data capacity.
        ecc_codewords: Total error correction codewords.
        blocks: Number of interleaved Reed-Solomon blocks.
    """

    rows: int
    cols: int
    region_rows: int
    region_cols: int
    data_codewords: int
    ecc_codewords: int
    blocks: int = 1

    @property
    def name(self) -> str:
        return f"{self.rows}x{self.cols}"

    @property
    def regions_vertical(self) -> int:
        return self.rows // (self.region_rows + 2)

    @property
    def regions_horizontal(self) -> int:
        return self.cols // (self.region_cols + 2)

    @property
    def mapping_rows(self) -> int:
        return self.regions_vertical * self.region_rows

    @property
    def mapping_cols(self) -> int:
        return self.regions_horizontal * self.region_cols

    @property
    def is_square(self) -> bool:
        return self.rows == self.cols


SYMBOL_SIZES: Final[Tuple[SymbolSize, ...]] = (
    SymbolSize(10, 10, 8, 8, 3, 5),
    SymbolSize(12, 12, 10, 10, 5, 7),
    SymbolSize(14, 14, 12, 12, 8, 10),
    SymbolSize(16, 16, 14, 14, 12, 12),
    SymbolSize(18, 18, 16, 16, 18, 14),
    SymbolSize(20, 20, 18, 18, 22, 18),
    SymbolSize(22, 22, 20, 20, 30, 20),
    SymbolSize(24, 24, 22, 22, 36, 24),
    SymbolSize(26, 26, 24, 24, 44, 28),
    SymbolSize(32, 32, 14, 14, 62, 36),
    SymbolSize(36, 36, 16, 16, 86, 42),
    SymbolSize(40, 40, 18, 18, 114, 48),
    SymbolSize(44, 44, 20, 20, 144, 56),
    SymbolSize(48, 48, 22, 22, 174, 68),
    SymbolSize(52, 52, 24, 24, 204, 84, 2),
    SymbolSize(64, 64, 14, 14, 280, 112, 2),
    SymbolSize(72, 72, 16, 16, 368, 144, 4),
    SymbolSize(80, 80, 18, 18, 456, 192, 4),
    SymbolSize(88, 88, 20, 20, 576, 224, 4),
    SymbolSize(96, 96, 22, 22, 696, 272, 4),
    SymbolSize(104, 104, 24, 24, 816, 336, 6),
    SymbolSize(120, 120, 18, 18, 1050, 408, 6),
    SymbolSize(132, 132, 20, 20, 1304, 496, 8),
    SymbolSize(144, 144, 22, 22, 1558, 620, 10),
    # прямоугольные
    SymbolSize(8, 18, 6, 16, 5, 7),
    SymbolSize(8, 32, 6, 14, 10, 11),
    SymbolSize(12, 26, 10, 24, 16, 14),
    SymbolSize(12, 36, 10, 16, 22, 18),
    SymbolSize(16, 36, 14, 16, 32, 24),
    SymbolSize(16, 48, 14, 22, 49, 28),
)

_BY_DIMENSIONS: Final[Dict[Tuple[int, int], SymbolSize]] = {
    (s.rows, s.cols): s for s in SYMBOL_SIZES
}


def parse_symbol_size(value: str) -> Optional[Tuple[int, int]]:
    """``"16x48"`` -> ``(16, 48)``; None for anything that is not an ECC200 size."""
    if not isinstance(value, str):
        return None
    parts = value.strip().lower().replace("*", "x").split("x")
    if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
        return None
    dims = (int(parts[0]), int(parts[1]))
    return dims if dims in _BY_DIMENSIONS else None


# =============================================================================
# Encodation schemes
# =============================================================================


def _ascii(data: bytes) -> List[int]:
    out: List[int] = []
    i = 0
    while i < len(data):
        b = data[i]
        if 48 <= b <= 57 and i + 1 < len(data) and 48 <= data[i + 1] <= 57:
            out.append(130 + (b - 48) * 10 + (data[i + 1] - 48))
            i += 2
            continue
        if b > 127:
            out.extend((UPPER_SHIFT, b - 127))
        else:
            out.append(b + 1)
        i += 1
    return out


def _c40_values(b: int) -> List[int]:
    if b > 127:
        return [1, 30] + _c40_values(b - 128)
    if b == 32:
        return [3]
    if 48 <= b <= 57:
        return [b - 44]
    if 65 <= b <= 90:
        return [b - 51]
    if b < 32:
        return [0, b]
    if b <= 47:
        return [1, b - 33]
    if b <= 64:
        return [1, b - 43]
    if b <= 95:
        return [1, b - 69]
    return [2, b - 96]


def _text_values(b: int) -> List[int]:
    if b > 127:
        return [1, 30] + _text_values(b - 128)
    if b == 32:
        return [3]
    if 48 <= b <= 57:
        return [b - 44]
    if 97 <= b <= 122:
        return [b - 83]
    if b == 96:
        return [2, 0]
    if 65 <= b <= 90:
        return [2, b - 64]
    if b >= 123:
        return [2, b - 96]
    return _c40_values(b)


_X12_SPECIAL: Final[Dict[int, int]] = {13: 0, 42: 1, 62: 2, 32: 3}


def _x12_values(b: int) -> Optional[List[int]]:
    if b in _X12_SPECIAL:
        return [_X12_SPECIAL[b]]
    if 48 <= b <= 57:
        return [b - 44]
    if 65 <= b <= 90:
        return [b - 51]
    return None


def _triplets(
    data: bytes, latch: int, values_of: Callable[[int], Optional[List[int]]]
) -> Optional[List[int]]:
    """C40/TEXT/X12 body: value triples packed in pairs of codewords.

    Characters after the last complete triple are written in ASCII after an
    unlatch. Returns None when a character has no value in the set.
    """
    values: List[int] = []
    committed_values = 0
    committed_chars = 0
    for i, b in enumerate(data):
        v = values_of(b)
        if v is None:
            return None
        values.extend(v)
        if len(values) % 3 == 0:
            committed_values = len(values)
            committed_chars = i + 1

    out = [latch]
    for i in range(0, committed_values, 3):
        packed = 1600 * values[i] + 40 * values[i + 1] + values[i + 2] + 1
        out.extend((packed // 256, packed % 256))
    out.append(UNLATCH)
    out.extend(_ascii(data[committed_chars:]))
    return out


def _pack_edifact(values: Sequence[int]) -> List[int]:
    bits = "".join(format(v, "06b") for v in values)
    bits += "0" * (-len(bits) % 8)
    return [int(bits[i : i + 8], 2) for i in range(0, len(bits), 8)]


def _edifact(data: bytes, capacity: Optional[int] = None) -> Optional[List[int]]:
    """EDIFACT body: full groups of four values, then the end-of-data tail.

    Readers return to ASCII by themselves when two codewords or fewer are left
    in the symbol before a group, so with a known ``capacity`` such a tail is
    written in ASCII without an unlatch. Otherwise the last 0..3 characters go
    into a final group closed by the unlatch value.
    """
    if any(not 32 <= b <= 94 for b in data):
        return None
    full = len(data) - len(data) % 4
    head = [LATCH_EDIFACT] + _pack_edifact([b & 0x3F for b in data[:full]])
    tail = data[full:]
    if capacity is not None and capacity - len(head) <= 2:
        return head + _ascii(tail)
    return head + _pack_edifact([b & 0x3F for b in tail] + [EDIFACT_UNLATCH])


def _randomize_255(value: int, position: int) -> int:
    pseudo = (149 * position) % 255 + 1
    temp = value + pseudo
    return temp if temp <= 255 else temp - 256


def _base256(data: bytes) -> Optional[List[int]]:
    n = len(data)
    if n > 1555:
        return None
    header = [n] if n <= 249 else [n // 250 + 249, n % 250]
    out = [LATCH_BASE256]
    for value in header + list(data):
        out.append(_randomize_255(value, len(out) + 1))
    return out


_SCHEMES: Final[Dict[DataMatrixScheme, Callable[[bytes], Optional[List[int]]]]] = {
    DataMatrixScheme.ASCII: _ascii,
    DataMatrixScheme.C40: lambda d: _triplets(d, LATCH_C40, _c40_values),
    DataMatrixScheme.TEXT: lambda d: _triplets(d, LATCH_TEXT, _text_values),
    DataMatrixScheme.X12: lambda d: _triplets(d, LATCH_X12, _x12_values),
    DataMatrixScheme.EDIFACT: _edifact,
    DataMatrixScheme.BASE256: _base256,
}


def _choose_scheme(
    data: bytes, scheme: DataMatrixScheme
) -> Tuple[DataMatrixScheme, List[int]]:
    if not data:
        raise InvalidPayloadError("Empty payload", symbology="DATAMATRIX")
    if scheme is not DataMatrixScheme.AUTO:
        result = _SCHEMES[scheme](data)
        if result is None:
            raise InvalidPayloadError(
                f"Payload is not encodable with the {scheme.value} scheme",
                symbology="DATAMATRIX",
            )
        return scheme, result

    chosen = DataMatrixScheme.ASCII
    best = _ascii(data)
    for candidate, fn in _SCHEMES.items():
        result = fn(data)
        if result is not None and len(result) < len(best):
            best, chosen = result, candidate
    logger.debug("DataMatrix AUTO scheme chose %s (%d codewords)", chosen.value, len(best))
    return chosen, best


def encode_codewords(data: bytes, scheme: DataMatrixScheme = DataMatrixScheme.AUTO) -> List[int]:
    """Data codewords (unpadded) for ``data`` in one encodation scheme.

    AUTO tries every scheme and keeps the shortest result, ASCII winning ties.
    EDIFACT is returned in its size-independent form (closed by an unlatch).

    Raises:
        InvalidPayloadError: A pinned scheme cannot represent the data.
    """
    return _choose_scheme(data, scheme)[1]


def pad_codewords(codewords: Sequence[int], capacity: int) -> List[int]:
    """Fill up to ``capacity`` with 129 followed by 253-state randomized pads."""
    out = list(codewords)
    if len(out) < capacity:
        out.append(PAD)
    while len(out) < capacity:
        pseudo = (149 * (len(out) + 1)) % 253 + 1
        temp = PAD + pseudo
        out.append(temp if temp <= 254 else temp - 254)
    return out


# =============================================================================
# Module placement
# =============================================================================


@lru_cache(maxsize=None)
def placement(nrow: int, ncol: int) -> Tuple[Tuple[int, ...], ...]:
    """Utah placement for a mapping matrix.

    Returns a grid where each cell holds ``codeword * 8 + bit`` (bit 0 = MSB),
    ``-1`` for the fixed dark corner modules and ``-2`` for the fixed light ones.
    """
    grid: List[List[Optional[int]]] = [[None] * ncol for _ in range(nrow)]

    def module(row: int, col: int, cw: int, bit: int) -> None:
        if row < 0:
            row += nrow
            col += 4 - ((nrow + 4) % 8)
        if col < 0:
            col += ncol
            row += 4 - ((ncol + 4) % 8)
        grid[row][col] = cw * 8 + bit

    def utah(row: int, col: int, cw: int) -> None:
        module(row - 2, col - 2, cw, 0)
        module(row - 2, col - 1, cw, 1)
        module(row - 1, col - 2, cw, 2)
        module(row - 1, col - 1, cw, 3)
        module(row - 1, col, cw, 4)
        module(row, col - 2, cw, 5)
        module(row, col - 1, cw, 6)
        module(row, col, cw, 7)

    def corner(cw: int, cells: Sequence[Tuple[int, int]]) -> None:
        for bit, (r, c) in enumerate(cells):
            module(r, c, cw, bit)

    n, m = nrow, ncol
    corners = (
        ((n - 1, 0), (n - 1, 1), (n - 1, 2), (0, m - 2), (0, m - 1), (1, m - 1), (2, m - 1), (3, m - 1)),
        ((n - 3, 0), (n - 2, 0), (n - 1, 0), (0, m - 4), (0, m - 3), (0, m - 2), (0, m - 1), (1, m - 1)),
        ((n - 3, 0), (n - 2, 0), (n - 1, 0), (0, m - 2), (0, m - 1), (1, m - 1), (2, m - 1), (3, m - 1)),
        ((n - 1, 0), (n - 1, m - 1), (0, m - 3), (0, m - 2), (0, m - 1), (1, m - 3), (1, m - 2), (1, m - 1)),
    )

    cw = 0
    row, col = 4, 0
    while True:
        if row == n and col == 0:
            corner(cw, corners[0])
            cw += 1
        if row == n - 2 and col == 0 and m % 4:
            corner(cw, corners[1])
            cw += 1
        if row == n - 2 and col == 0 and m % 8 == 4:
            corner(cw, corners[2])
            cw += 1
        if row == n + 4 and col == 2 and m % 8 == 0:
            corner(cw, corners[3])
            cw += 1
        # вверх-вправо
        while True:
            if row < n and col >= 0 and grid[row][col] is None:
                utah(row, col, cw)
                cw += 1
            row -= 2
            col += 2
            if not (row >= 0 and col < m):
                break
        row += 1
        col += 3
        # вниз-влево
        while True:
            if row >= 0 and col < m and grid[row][col] is None:
                utah(row, col, cw)
                cw += 1
            row += 2
            col -= 2
            if not (row < n and col >= 0):
                break
        row += 3
        col += 1
        if not (row < n or col < m):
            break

    if grid[n - 1][m - 1] is None:
        grid[n - 1][m - 1] = grid[n - 2][m - 2] = -1
        grid[n - 1][m - 2] = grid[n - 2][m - 1] = -2
    return tuple(tuple(-2 if v is None else v for v in r) for r in grid)


def _candidate_sizes(code_size: str) -> Tuple[SymbolSize, ...]:
    if code_size == DATAMATRIX_SIZES_AUTO:
        return tuple(s for s in SYMBOL_SIZES if s.is_square)
    dims = parse_symbol_size(code_size)
    if dims is None:
        raise InvalidPayloadError(f"Unknown Data Matrix size {code_size!r}", symbology="DATAMATRIX")
    return (_BY_DIMENSIONS[dims],)


def fit_symbol(
    data: bytes,
    scheme: DataMatrixScheme = DataMatrixScheme.AUTO,
    code_size: str = DATAMATRIX_SIZES_AUTO,
) -> Tuple[List[int], SymbolSize]:
    """Data codewords and the symbol size that holds them.

    AUTO size picks the smallest square symbol. EDIFACT data is re-encoded per
    candidate size, since its end of data depends on the remaining capacity.

    Raises:
        InvalidPayloadError: Unencodable data or unknown ``code_size``.
        PayloadTooLargeError: No candidate size is large enough.
    """
    chosen, codewords = _choose_scheme(data, scheme)
    sizes = _candidate_sizes(code_size)
    for size in sizes:
        fitted = codewords
        if chosen is DataMatrixScheme.EDIFACT:
            fitted = _edifact(data, size.data_codewords) or codewords
        if len(fitted) <= size.data_codewords:
            return fitted, size
    largest = sizes[-1]
    raise PayloadTooLargeError(
        f"{len(codewords)} codewords exceed the {largest.name} capacity of {largest.data_codewords}",
        symbology="DATAMATRIX",
        context={"codewords": len(codewords)},
    )


def build_datamatrix(data_codewords: Sequence[int], size: SymbolSize) -> List[List[bool]]:
    """Full symbol grid (finder patterns included, no quiet zone)."""
    data = pad_codewords(data_codewords, size.data_codewords)
    codewords = protect_datamatrix(data, size.blocks, size.ecc_codewords // size.blocks)
    mapping = placement(size.mapping_rows, size.mapping_cols)

    grid = [[False] * size.cols for _ in range(size.rows)]
    rh, rw = size.region_rows, size.region_cols
    for ry in range(size.regions_vertical):
        for rx in range(size.regions_horizontal):
            top = ry * (rh + 2)
            left = rx * (rw + 2)
            for c in range(rw + 2):
                grid[top][left + c] = c % 2 == 0
                grid[top + rh + 1][left + c] = True
            for r in range(rh + 2):
                grid[top + r][left] = True
                grid[top + r][left + rw + 1] = r % 2 == 1
            for r in range(rh):
                for c in range(rw):
                    cell = mapping[ry * rh + r][rx * rw + c]
                    if cell == -1:
                        dark = True
                    elif cell == -2:
                        dark = False
                    else:
                        dark = (codewords[cell >> 3] >> (7 - (cell & 7))) & 1 == 1
                    grid[top + 1 + r][left + 1 + c] = dark
    return grid


class DataMatrixEncoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.DATAMATRIX})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> MatrixSymbol:
        codec = config.string_encoding.codec
        try:
            raw = payload.encode(codec)
        except UnicodeEncodeError as e:
            raise InvalidPayloadError(
                f"Payload is not encodable as {codec}", symbology=kind.name
            ) from e
        codewords, size = fit_symbol(raw, config.encode_scheme, config.code_size)
        logger.debug("DataMatrix %s, %d data codewords", size.name, len(codewords))
        return MatrixSymbol.from_grid(build_datamatrix(codewords, size), quiet_zone=QUIET_ZONE)
