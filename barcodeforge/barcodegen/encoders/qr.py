"""
RU: QR-код модели 2, версии 1-40, уровни L/M/Q/H. Однорежимное кодирование
(числовой, буквенно-цифровой, байтовый, кандзи), блоки Рида-Соломона,
размещение зигзагом, выбор маски по штрафным правилам.
EN: QR Code encoder.

Module placement follows the standard order: timing patterns, finders,
alignment patterns, format and version information, then data in two-column
zigzag stripes from the bottom-right corner.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Final, List, Optional, Sequence, Tuple

from barcodeforge.barcodegen.ecc.reed_solomon import protect_qr
from barcodeforge.barcodegen.encoders.base import SymbolEncoder
from barcodeforge.barcodegen.errors import InvalidPayloadError, PayloadTooLargeError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import QREncodeMode, QRErrorCorrection, SymbologyKind
from barcodeforge.model.symbol import MatrixSymbol

logger = logging.getLogger(__name__)

__all__ = [
    "QREncoder",
    "QRSegment",
    "make_segment",
    "build_qr",
    "data_codeword_capacity",
    "raw_data_modules",
    "alignment_positions",
    "ALPHANUMERIC_CHARSET",
    "QUIET_ZONE",
]

QUIET_ZONE: Final[int] = 4
MIN_VERSION: Final[int] = 1
MAX_VERSION: Final[int] = 40

ALPHANUMERIC_CHARSET: Final[str] = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"

# ECC-кодслов на блок и число блоков: индекс - версия, порядок уровней L, M, Q, H
_ECC_PER_BLOCK: Final[Tuple[Tuple[int, ...], ...]] = (
    (-1, 7, 10, 15, 20, 26, 18, 20, 24, 30, 18, 20, 24, 26, 30, 22, 24, 28, 30, 28, 28,
     28, 28, 30, 30, 26, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    (-1, 10, 16, 26, 18, 24, 16, 18, 22, 22, 26, 30, 22, 22, 24, 24, 28, 28, 26, 26, 26,
     26, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28),
    (-1, 13, 22, 18, 26, 18, 24, 18, 22, 20, 24, 28, 26, 24, 20, 30, 24, 28, 28, 26, 30,
     28, 30, 30, 30, 30, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    (-1, 17, 28, 22, 16, 22, 28, 26, 26, 24, 28, 24, 28, 22, 24, 24, 30, 28, 28, 26, 28,
     30, 24, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
)
_NUM_BLOCKS: Final[Tuple[Tuple[int, ...], ...]] = (
    (-1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 4, 4, 4, 4, 4, 6, 6, 6, 6, 7, 8,
     8, 9, 9, 10, 12, 12, 12, 13, 14, 15, 16, 17, 18, 19, 19, 20, 21, 22, 24, 25),
    (-1, 1, 1, 1, 2, 2, 4, 4, 4, 5, 5, 5, 8, 9, 9, 10, 10, 11, 13, 14, 16,
     17, 17, 18, 20, 21, 23, 25, 26, 28, 29, 31, 33, 35, 37, 38, 40, 43, 45, 47, 49),
    (-1, 1, 1, 2, 2, 4, 4, 6, 6, 8, 8, 8, 10, 12, 16, 12, 17, 16, 18, 21, 20,
     23, 23, 25, 27, 29, 34, 34, 35, 38, 40, 43, 45, 48, 51, 53, 56, 59, 62, 65, 68),
    (-1, 1, 1, 2, 4, 4, 4, 5, 6, 8, 8, 11, 11, 16, 16, 18, 16, 19, 21, 25, 25,
     25, 34, 30, 32, 35, 37, 40, 42, 45, 48, 51, 54, 57, 60, 63, 66, 70, 74, 77, 81),
)

_MODE_BITS: Final = {
    QREncodeMode.NUMERIC: 0b0001,
    QREncodeMode.ALPHANUMERIC: 0b0010,
    QREncodeMode.BYTE: 0b0100,
    QREncodeMode.KANJI: 0b1000,
}
# Биты счётчика символов для диапазонов версий 1-9, 10-26, 27-40
_COUNT_BITS: Final = {
    QREncodeMode.NUMERIC: (10, 12, 14),
    QREncodeMode.ALPHANUMERIC: (9, 11, 13),
    QREncodeMode.BYTE: (8, 16, 16),
    QREncodeMode.KANJI: (8, 10, 12),
}

_PENALTY_N1: Final[int] = 3
_PENALTY_N2: Final[int] = 3
_PENALTY_N3: Final[int] = 40
_PENALTY_N4: Final[int] = 10


def raw_data_modules(version: int) -> int:
    """Modules available for data and ECC after function patterns."""
    result = (16 * version + 128) * version + 64
    if version >= 2:
        num_align = version // 7 + 2
        result -= (25 * num_align - 10) * num_align - 55
        if version >= 7:
            result -= 36
    return result


def data_codeword_capacity(version: int, level: QRErrorCorrection) -> int:
    i = level.ordinal
    return raw_data_modules(version) // 8 - _ECC_PER_BLOCK[i][version] * _NUM_BLOCKS[i][version]


def alignment_positions(version: int) -> List[int]:
    if version == 1:
        return []
    size = version * 4 + 17
    num_align = version // 7 + 2
    step = (version * 8 + num_align * 3 + 5) // (num_align * 4 - 4) * 2
    result = [size - 7 - i * step for i in range(num_align - 1)] + [6]
    return list(reversed(result))


# =============================================================================
# Segments
# =============================================================================


@dataclass(frozen=True)
class QRSegment:
    """One mode segment: mode, character count and the payload bit string."""

    mode: QREncodeMode
    count: int
    bits: str

    def total_bits(self, version: int) -> Optional[int]:
        """Header + data length, or None when the count overflows the count field."""
        band = 0 if version <= 9 else 1 if version <= 26 else 2
        cc_bits = _COUNT_BITS[self.mode][band]
        if self.count >= 1 << cc_bits:
            return None
        return 4 + cc_bits + len(self.bits)

    def header(self, version: int) -> str:
        band = 0 if version <= 9 else 1 if version <= 26 else 2
        cc_bits = _COUNT_BITS[self.mode][band]
        return format(_MODE_BITS[self.mode], "04b") + format(self.count, f"0{cc_bits}b")


def _numeric_bits(text: str) -> str:
    out: List[str] = []
    for i in range(0, len(text), 3):
        chunk = text[i : i + 3]
        out.append(format(int(chunk), f"0{len(chunk) * 3 + 1}b"))
    return "".join(out)


def _alphanumeric_bits(text: str) -> str:
    out: List[str] = []
    for i in range(0, len(text) - 1, 2):
        value = ALPHANUMERIC_CHARSET.index(text[i]) * 45 + ALPHANUMERIC_CHARSET.index(text[i + 1])
        out.append(format(value, "011b"))
    if len(text) % 2:
        out.append(format(ALPHANUMERIC_CHARSET.index(text[-1]), "06b"))
    return "".join(out)


def _kanji_values(raw: bytes) -> Optional[List[int]]:
    """13-bit Kanji values of a Shift JIS byte string, None if not all double-byte Kanji."""
    if len(raw) % 2:
        return None
    values: List[int] = []
    for i in range(0, len(raw), 2):
        code = raw[i] << 8 | raw[i + 1]
        if 0x8140 <= code <= 0x9FFC:
            code -= 0x8140
        elif 0xE040 <= code <= 0xEBBF:
            code -= 0xC140
        else:
            return None
        values.append((code >> 8) * 0xC0 + (code & 0xFF))
    return values


def _is_numeric(text: str) -> bool:
    return bool(text) and text.isascii() and text.isdigit()


def _is_alphanumeric(text: str) -> bool:
    return bool(text) and all(c in ALPHANUMERIC_CHARSET for c in text)


def make_segment(text: str, mode: QREncodeMode, codec: str = "utf-8") -> QRSegment:
    """Encode ``text`` as a single segment.

    AUTO picks the densest single mode that covers the whole text; Kanji is only
    considered for Shift JIS.

    Raises:
        InvalidPayloadError: The text is not encodable in the pinned mode or codec.
    """
    if not text:
        raise InvalidPayloadError("Empty payload", symbology="QR")
    try:
        raw = text.encode(codec)
    except UnicodeEncodeError as e:
        raise InvalidPayloadError(
            f"Payload is not encodable as {codec}: {e.reason}", symbology="QR"
        ) from e

    if mode is QREncodeMode.AUTO:
        if _is_numeric(text):
            mode = QREncodeMode.NUMERIC
        elif _is_alphanumeric(text):
            mode = QREncodeMode.ALPHANUMERIC
        elif codec == "cp932" and _kanji_values(raw) is not None:
            mode = QREncodeMode.KANJI
        else:
            mode = QREncodeMode.BYTE

    if mode is QREncodeMode.NUMERIC:
        if not _is_numeric(text):
            raise InvalidPayloadError("Numeric mode accepts digits only", symbology="QR")
        return QRSegment(mode, len(text), _numeric_bits(text))
    if mode is QREncodeMode.ALPHANUMERIC:
        if not _is_alphanumeric(text):
            raise InvalidPayloadError(
                "Alphanumeric mode accepts 0-9, A-Z, space and $%*+-./:", symbology="QR"
            )
        return QRSegment(mode, len(text), _alphanumeric_bits(text))
    if mode is QREncodeMode.KANJI:
        values = _kanji_values(raw) if codec == "cp932" else None
        if values is None:
            raise InvalidPayloadError(
                "Kanji mode requires Shift JIS double-byte characters", symbology="QR"
            )
        return QRSegment(mode, len(values), "".join(format(v, "013b") for v in values))
    return QRSegment(QREncodeMode.BYTE, len(raw), "".join(format(b, "08b") for b in raw))


def _data_codewords(segment: QRSegment, version: int, level: QRErrorCorrection) -> List[int]:
    capacity_bits = data_codeword_capacity(version, level) * 8
    bits = segment.header(version) + segment.bits
    bits += "0" * min(4, capacity_bits - len(bits))
    bits += "0" * (-len(bits) % 8)
    codewords = [int(bits[i : i + 8], 2) for i in range(0, len(bits), 8)]
    pad = 0xEC
    while len(codewords) < capacity_bits // 8:
        codewords.append(pad)
        pad ^= 0xEC ^ 0x11
    return codewords


def _choose_version(segment: QRSegment, level: QRErrorCorrection, requested: int) -> int:
    candidates = range(requested, requested + 1) if requested else range(MIN_VERSION, MAX_VERSION + 1)
    for version in candidates:
        used = segment.total_bits(version)
        if used is not None and used <= data_codeword_capacity(version, level) * 8:
            return version
    raise PayloadTooLargeError(
        f"Payload does not fit QR version {requested or MAX_VERSION} at level {level.value}",
        symbology="QR",
        context={"mode": segment.mode.value, "count": segment.count},
    )


# =============================================================================
# Matrix construction
# =============================================================================


def _mask_bit(mask: int, x: int, y: int) -> bool:
    if mask == 0:
        return (x + y) % 2 == 0
    if mask == 1:
        return y % 2 == 0
    if mask == 2:
        return x % 3 == 0
    if mask == 3:
        return (x + y) % 3 == 0
    if mask == 4:
        return (x // 3 + y // 2) % 2 == 0
    if mask == 5:
        return x * y % 2 + x * y % 3 == 0
    if mask == 6:
        return (x * y % 2 + x * y % 3) % 2 == 0
    return ((x + y) % 2 + x * y % 3) % 2 == 0


class _QRMatrix:
    """Mutable module grid used while building one symbol."""

    def __init__(self, version: int, level: QRErrorCorrection) -> None:
        self.version = version
        self.level = level
        self.size = version * 4 + 17
        self.modules: List[List[bool]] = [[False] * self.size for _ in range(self.size)]
        self.is_function: List[List[bool]] = [[False] * self.size for _ in range(self.size)]
        self._draw_function_patterns()

    def _set_function(self, x: int, y: int, dark: bool) -> None:
        self.modules[y][x] = dark
        self.is_function[y][x] = True

    def _draw_function_patterns(self) -> None:
        size = self.size
        for i in range(size):
            self._set_function(6, i, i % 2 == 0)
            self._set_function(i, 6, i % 2 == 0)
        for cx, cy in ((3, 3), (size - 4, 3), (3, size - 4)):
            for dy in range(-4, 5):
                for dx in range(-4, 5):
                    x, y = cx + dx, cy + dy
                    if 0 <= x < size and 0 <= y < size:
                        self._set_function(x, y, max(abs(dx), abs(dy)) not in (2, 4))
        positions = alignment_positions(self.version)
        last = len(positions) - 1
        for i, ax in enumerate(positions):
            for j, ay in enumerate(positions):
                if (i, j) in ((0, 0), (0, last), (last, 0)):
                    continue
                for dy in range(-2, 3):
                    for dx in range(-2, 3):
                        self._set_function(ax + dx, ay + dy, max(abs(dx), abs(dy)) != 1)
        self.draw_format_bits(0)
        self._draw_version()

    def draw_format_bits(self, mask: int) -> None:
        data = self.level.format_bits << 3 | mask
        rem = data
        for _ in range(10):
            rem = (rem << 1) ^ ((rem >> 9) * 0x537)
        bits = (data << 10 | rem) ^ 0x5412
        size = self.size

        def bit(i: int) -> bool:
            return (bits >> i) & 1 != 0

        for i in range(6):
            self._set_function(8, i, bit(i))
        self._set_function(8, 7, bit(6))
        self._set_function(8, 8, bit(7))
        self._set_function(7, 8, bit(8))
        for i in range(9, 15):
            self._set_function(14 - i, 8, bit(i))
        for i in range(8):
            self._set_function(size - 1 - i, 8, bit(i))
        for i in range(8, 15):
            self._set_function(8, size - 15 + i, bit(i))
        self._set_function(8, size - 8, True)

    def _draw_version(self) -> None:
        if self.version < 7:
            return
        rem = self.version
        for _ in range(12):
            rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
        bits = self.version << 12 | rem
        for i in range(18):
            dark = (bits >> i) & 1 != 0
            a = self.size - 11 + i % 3
            b = i // 3
            self._set_function(a, b, dark)
            self._set_function(b, a, dark)

    def draw_codewords(self, codewords: Sequence[int]) -> None:
        size = self.size
        total_bits = len(codewords) * 8
        i = 0
        right = size - 1
        while right >= 1:
            if right == 6:
                right = 5
            for vert in range(size):
                for j in range(2):
                    x = right - j
                    upward = ((right + 1) & 2) == 0
                    y = size - 1 - vert if upward else vert
                    if not self.is_function[y][x] and i < total_bits:
                        self.modules[y][x] = (codewords[i >> 3] >> (7 - (i & 7))) & 1 != 0
                        i += 1
            right -= 2

    def apply_mask(self, mask: int) -> None:
        for y in range(self.size):
            row = self.modules[y]
            func = self.is_function[y]
            for x in range(self.size):
                if not func[x] and _mask_bit(mask, x, y):
                    row[x] = not row[x]

    # --- penalty -------------------------------------------------------------

    def _add_history(self, run: int, history: Deque[int]) -> None:
        if history[0] == 0:
            run += self.size
        history.appendleft(run)

    @staticmethod
    def _count_finder_like(history: Deque[int]) -> int:
        n = history[1]
        core = n > 0 and history[2] == history[4] == history[5] == n and history[3] == n * 3
        return (1 if core and history[0] >= n * 4 and history[6] >= n else 0) + (
            1 if core and history[6] >= n * 4 and history[0] >= n else 0
        )

    def _terminate_and_count(self, color: bool, run: int, history: Deque[int]) -> int:
        if color:
            self._add_history(run, history)
            run = 0
        run += self.size
        self._add_history(run, history)
        return self._count_finder_like(history)

    def _line_penalty(self, line: Sequence[bool]) -> int:
        result = 0
        color = False
        run = 0
        history: Deque[int] = deque([0] * 7, 7)
        for dark in line:
            if dark == color:
                run += 1
                if run == 5:
                    result += _PENALTY_N1
                elif run > 5:
                    result += 1
            else:
                self._add_history(run, history)
                if not color:
                    result += self._count_finder_like(history) * _PENALTY_N3
                color = dark
                run = 1
        return result + self._terminate_and_count(color, run, history) * _PENALTY_N3

    def penalty(self) -> int:
        m = self.modules
        size = self.size
        result = 0
        for y in range(size):
            result += self._line_penalty(m[y])
        for x in range(size):
            result += self._line_penalty([m[y][x] for y in range(size)])
        for y in range(size - 1):
            for x in range(size - 1):
                c = m[y][x]
                if c == m[y][x + 1] == m[y + 1][x] == m[y + 1][x + 1]:
                    result += _PENALTY_N2
        dark = sum(sum(1 for c in row if c) for row in m)
        total = size * size
        k = (abs(dark * 20 - total * 10) + total - 1) // total - 1
        return result + k * _PENALTY_N4


def build_qr(
    segment: QRSegment,
    level: QRErrorCorrection,
    version: int = 0,
    mask: Optional[int] = None,
) -> List[List[bool]]:
    """Module grid (without quiet zone) for one segment.

    Args:
        segment: Encoded payload.
        level: Error correction level.
        version: 1..40, or 0 for the smallest version that fits.
        mask: 0..7 to force a mask pattern, None to pick the lowest penalty.

    Raises:
        PayloadTooLargeError: The segment does not fit the requested version.
    """
    version = _choose_version(segment, level, version)
    data = _data_codewords(segment, version, level)
    i = level.ordinal
    codewords = protect_qr(data, _NUM_BLOCKS[i][version], _ECC_PER_BLOCK[i][version])

    matrix = _QRMatrix(version, level)
    matrix.draw_codewords(codewords)
    if mask is None:
        best, best_penalty = 0, -1
        for candidate in range(8):
            matrix.apply_mask(candidate)
            matrix.draw_format_bits(candidate)
            score = matrix.penalty()
            if best_penalty < 0 or score < best_penalty:
                best, best_penalty = candidate, score
            matrix.apply_mask(candidate)
        mask = best
    matrix.apply_mask(mask)
    matrix.draw_format_bits(mask)
    logger.debug(
        "QR version %d level %s mode %s mask %d", version, level.value, segment.mode.value, mask
    )
    return matrix.modules


class QREncoder(SymbolEncoder):
    kinds = frozenset({SymbologyKind.QR})

    def encode(
        self, payload: str, config: EncodingConfiguration, kind: SymbologyKind
    ) -> MatrixSymbol:
        segment = make_segment(payload, config.encode_mode, config.string_encoding.codec)
        grid = build_qr(segment, config.error_correction_level, config.version)
        return MatrixSymbol.from_grid(grid, quiet_zone=QUIET_ZONE)
