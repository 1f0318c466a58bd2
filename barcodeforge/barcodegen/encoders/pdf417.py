"""
RU: PDF417: текстовое, байтовое и числовое сжатие, длина символа, коррекция
ошибок в GF(929), индикаторы строк и кластеры 0/3/6.
EN: PDF417 encoder.

Bar patterns of the three clusters come from pdf417gen's code tables; the
compaction, sizing and error correction are done here.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Final, List, Optional, Sequence, Tuple

from pdf417gen.codes import map_code_word

from barcodeforge.barcodegen.ecc.reed_solomon import pdf417_error_correction
from barcodeforge.barcodegen.encoders.base import SymbolEncoder
from barcodeforge.barcodegen.errors import InvalidPayloadError, PayloadTooLargeError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.symbol import MatrixSymbol

logger = logging.getLogger(__name__)

__all__ = [
    "PDF417Encoder",
    "compact",
    "compact_text",
    "compact_bytes",
    "compact_numeric",
    "auto_error_level",
    "choose_dimensions",
    "symbol_codewords",
    "row_indicators",
    "QUIET_ZONE",
    "MAX_CODEWORDS",
]

QUIET_ZONE: Final[int] = 2
MAX_CODEWORDS: Final[int] = 928
MIN_ROWS: Final[int] = 3
MAX_ROWS: Final[int] = 90
MAX_COLUMNS: Final[int] = 30

LATCH_TEXT: Final[int] = 900
LATCH_BYTE: Final[int] = 901
LATCH_NUMERIC: Final[int] = 902
LATCH_BYTE_FULL: Final[int] = 924
PAD_CODEWORD: Final[int] = 900

START_PATTERN: Final[str] = format(0x1FEA8, "017b")
STOP_PATTERN: Final[str] = format(0x3FA29, "018b")

NUMERIC_MIN_RUN: Final[int] = 13

# Подрежимы текстового сжатия
ALPHA, LOWER, MIXED, PUNCT = range(4)

_SUBMODE_CHARS: Final[Tuple[str, ...]] = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ ",
    "abcdefghijklmnopqrstuvwxyz ",
    "0123456789&\r\t,:#-.$/+%*=^\x00 ",
    ";<>@[\\]_`~!\r\t,:\n-.$/\"|*()?{}'",
)
_SUBMODE_TABLES: Final[Tuple[Dict[str, int], ...]] = tuple(
    {ch: i for i, ch in enumerate(chars) if ch != "\x00"} for chars in _SUBMODE_CHARS
)

# Последовательности переключения (из, в) -> значения
_LATCHES: Final[Dict[Tuple[int, int], Tuple[int, ...]]] = {
    (ALPHA, LOWER): (27,),
    (ALPHA, MIXED): (28,),
    (ALPHA, PUNCT): (28, 25),
    (LOWER, ALPHA): (28, 28),
    (LOWER, MIXED): (28,),
    (LOWER, PUNCT): (28, 25),
    (MIXED, ALPHA): (28,),
    (MIXED, LOWER): (27,),
    (MIXED, PUNCT): (25,),
    (PUNCT, ALPHA): (29,),
    (PUNCT, LOWER): (29, 27),
    (PUNCT, MIXED): (29, 28),
}
_TEXT_PAD: Final[int] = 29

TEXT_CHARS: Final[frozenset] = frozenset(
    ord(ch) for table in _SUBMODE_TABLES for ch in table
)


# =============================================================================
# Compaction
# =============================================================================


def compact_text(data: bytes) -> List[int]:
    """Text compaction codewords, starting from the Alpha submode."""
    values: List[int] = []
    submode = ALPHA
    for b in data:
        ch = chr(b)
        if ch not in _SUBMODE_TABLES[submode]:
            target = next(m for m in (ALPHA, LOWER, MIXED, PUNCT) if ch in _SUBMODE_TABLES[m])
            values.extend(_LATCHES[(submode, target)])
            submode = target
        values.append(_SUBMODE_TABLES[submode][ch])
    if len(values) % 2:
        values.append(_TEXT_PAD)
    return [values[i] * 30 + values[i + 1] for i in range(0, len(values), 2)]


def compact_bytes(data: bytes) -> List[int]:
    """Byte compaction: six bytes become five base-900 codewords."""
    out: List[int] = []
    full = len(data) - len(data) % 6
    for i in range(0, full, 6):
        value = int.from_bytes(data[i : i + 6], "big")
        group = []
        for _ in range(5):
            value, rem = divmod(value, 900)
            group.append(rem)
        out.extend(reversed(group))
    out.extend(data[full:])
    return out


def compact_numeric(digits: str) -> List[int]:
    """Numeric compaction: groups of up to 44 digits with a leading 1, in base 900."""
    out: List[int] = []
    for i in range(0, len(digits), 44):
        value = int("1" + digits[i : i + 44])
        group = []
        while value:
            value, rem = divmod(value, 900)
            group.append(rem)
        out.extend(reversed(group))
    return out


def _segments(data: bytes) -> List[Tuple[str, bytes]]:
    segments: List[Tuple[str, bytes]] = []

    def digit_run(start: int) -> int:
        end = start
        while end < len(data) and 48 <= data[end] <= 57:
            end += 1
        return end - start

    i = 0
    while i < len(data):
        run = digit_run(i)
        if run >= NUMERIC_MIN_RUN:
            segments.append(("numeric", data[i : i + run]))
            i += run
            continue
        mode = "text" if data[i] in TEXT_CHARS else "byte"
        j = i
        while j < len(data):
            if (data[j] in TEXT_CHARS) != (mode == "text"):
                break
            if 48 <= data[j] <= 57 and digit_run(j) >= NUMERIC_MIN_RUN:
                break
            j += 1
        if segments and segments[-1][0] == mode:
            segments[-1] = (mode, segments[-1][1] + data[i:j])
        else:
            segments.append((mode, data[i:j]))
        i = j
    return segments


def compact(data: bytes) -> List[int]:
    """Data codewords for ``data``, switching compaction modes per segment."""
    if not data:
        raise InvalidPayloadError("Empty payload", symbology="PDF417")
    out: List[int] = []
    for kind, chunk in _segments(data):
        if kind == "numeric":
            out.append(LATCH_NUMERIC)
            out.extend(compact_numeric(chunk.decode("ascii")))
        elif kind == "byte":
            out.append(LATCH_BYTE_FULL if len(chunk) % 6 == 0 else LATCH_BYTE)
            out.extend(compact_bytes(chunk))
        else:
            # текстовый режим действует по умолчанию в начале символа
            if out:
                out.append(LATCH_TEXT)
            out.extend(compact_text(chunk))
    return out


# =============================================================================
# Sizing
# =============================================================================


def auto_error_level(data_count: int) -> int:
    """Recommended level for ``data_count`` data codewords (length descriptor included)."""
    if data_count <= 40:
        return 2
    if data_count <= 160:
        return 3
    if data_count <= 320:
        return 4
    if data_count <= 863:
        return 5
    return 6


def _too_large(message: str, **context: object) -> PayloadTooLargeError:
    return PayloadTooLargeError(message, symbology="PDF417", context=dict(context))


def choose_dimensions(
    needed: int,
    columns: int = 0,
    rows: int = 0,
    aspect_ratio: float = 2.0,
    y_height: int = 3,
) -> Tuple[int, int]:
    """(columns, rows) holding ``needed`` codewords.

    Zero means automatic. With both automatic the column count whose symbol
    width/height ratio is closest to ``aspect_ratio`` wins.

    Raises:
        PayloadTooLargeError: No grid within the fixed limits has room.
    """
    if needed > MAX_CODEWORDS:
        raise _too_large(f"{needed} codewords exceed {MAX_CODEWORDS}", needed=needed)

    def valid(c: int, r: int) -> bool:
        return 1 <= c <= MAX_COLUMNS and MIN_ROWS <= r <= MAX_ROWS and needed <= c * r <= MAX_CODEWORDS

    if columns and rows:
        if not valid(columns, rows):
            raise _too_large(
                f"{needed} codewords do not fit {columns}x{rows}",
                needed=needed,
                columns=columns,
                rows=rows,
            )
        return columns, rows
    if columns:
        r = max(MIN_ROWS, math.ceil(needed / columns))
        if not valid(columns, r):
            raise _too_large(f"{needed} codewords do not fit {columns} columns", needed=needed)
        return columns, r
    if rows:
        c = math.ceil(needed / rows)
        if not valid(c, rows):
            raise _too_large(f"{needed} codewords do not fit {rows} rows", needed=needed)
        return c, rows

    best: Optional[Tuple[float, int, int]] = None
    for c in range(1, MAX_COLUMNS + 1):
        r = max(MIN_ROWS, math.ceil(needed / c))
        if not valid(c, r):
            continue
        ratio = (17 * c + 69) / (r * y_height)
        score = abs(ratio - aspect_ratio)
        if best is None or score < best[0]:
            best = (score, c, r)
    if best is None:
        raise _too_large(f"{needed} codewords do not fit any PDF417 grid", needed=needed)
    return best[1], best[2]


def symbol_codewords(data: Sequence[int], columns: int, rows: int, level: int) -> List[int]:
    """Length descriptor + data + padding + error correction, row-major."""
    ecc_count = 2 ** (level + 1)
    data_slots = columns * rows - ecc_count
    body = [data_slots] + list(data)
    body.extend([PAD_CODEWORD] * (data_slots - len(body)))
    return body + pdf417_error_correction(body, level)


def row_indicators(row: int, rows: int, columns: int, level: int) -> Tuple[int, int]:
    """Left and right row indicator codewords of ``row``."""
    base = 30 * (row // 3)
    r_info = (rows - 1) // 3
    l_info = level * 3 + (rows - 1) % 3
    c_info = columns - 1
    cluster = row % 3
    if cluster == 0:
        return base + r_info, base + c_info
    if cluster == 1:
        return base + l_info, base + r_info
    return base + c_info, base + l_info


def _pattern(table: int, codeword: int) -> str:
    return format(map_code_word(table, codeword), "017b")


class PDF417Encoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.PDF417})

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
        data = compact(raw)
        level = config.error_level if config.error_level >= 0 else auto_error_level(len(data) + 1)
        needed = len(data) + 1 + 2 ** (level + 1)
        columns, rows = choose_dimensions(
            needed, config.columns, config.rows, config.aspect_ratio, config.y_height
        )
        codewords = symbol_codewords(data, columns, rows, level)
        logger.debug("PDF417 %dx%d, level %d, %d data codewords", columns, rows, level, len(data))

        grid: List[List[bool]] = []
        for r in range(rows):
            table = r % 3
            left, right = row_indicators(r, rows, columns, level)
            bits = START_PATTERN + _pattern(table, left)
            for cw in codewords[r * columns : (r + 1) * columns]:
                bits += _pattern(table, cw)
            bits += _pattern(table, right) + STOP_PATTERN
            grid.append([b == "1" for b in bits])
        return MatrixSymbol.from_grid(
            grid,
            row_heights=tuple([config.y_height] * rows),
            quiet_zone=QUIET_ZONE,
            square_modules=False,
        )
