"""
RU: Кодирование Рида-Соломона и чередование блоков.
EN: Reed-Solomon encoders and block interleaving for QR, DataMatrix and PDF417.

- ReedSolomonEncoder: systematic encoder over a GF(2^8) field with a configurable
  first generator root (QR: alpha^0, DataMatrix: alpha^1).
- protect_qr / protect_datamatrix: split data into blocks per the symbology rule,
  append per-block ECC and interleave.
- pdf417_error_correction: GF(929) encoder with generator roots 3^1..3^k.

Generator polynomials are cached per (field, degree, first root); cached values are
immutable tuples.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Sequence, Tuple

from barcodeforge.barcodegen.ecc.galois import (
    DATAMATRIX_FIELD,
    PDF417_FIELD,
    QR_FIELD,
    BinaryField,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ReedSolomonEncoder",
    "QR_RS",
    "DATAMATRIX_RS",
    "interleave",
    "protect_qr",
    "protect_datamatrix",
    "pdf417_generator",
    "pdf417_error_correction",
]


@lru_cache(maxsize=None)
def _generator(field: BinaryField, degree: int, first_root: int) -> Tuple[int, ...]:
    """Coefficients of prod(x - alpha^(first_root + i)), highest degree first."""
    poly = [1]
    for i in range(degree):
        root = field.power(first_root + i)
        nxt = poly + [0]
        for j, coef in enumerate(poly):
            nxt[j + 1] ^= field.multiply(coef, root)
        poly = nxt
    return tuple(poly)


class ReedSolomonEncoder:
    """Systematic Reed-Solomon encoder over GF(256).

    Args:
        field: Field with the symbology's primitive polynomial.
        first_root: Exponent of the first generator root.

    Example:
        >>> QR_RS.encode([32, 91, 11, 120, 209, 114, 220, 77, 67, 64, 236, 17, 236, 17, 236, 17], 10)
        [196, 35, 39, 119, 235, 215, 231, 226, 93, 23]
    """

    def __init__(self, field: BinaryField, first_root: int) -> None:
        self.field = field
        self.first_root = first_root

    def generator(self, degree: int) -> Tuple[int, ...]:
        return _generator(self.field, degree, self.first_root)

    def encode(self, data: Sequence[int], ecc_count: int) -> List[int]:
        """Return ``ecc_count`` check codewords for ``data``."""
        if ecc_count <= 0:
            return []
        gen = self.generator(ecc_count)
        mul = self.field.multiply
        ecc = [0] * ecc_count
        for value in data:
            factor = value ^ ecc[0]
            ecc.pop(0)
            ecc.append(0)
            if factor:
                for i in range(ecc_count):
                    ecc[i] ^= mul(gen[i + 1], factor)
        return ecc


QR_RS = ReedSolomonEncoder(QR_FIELD, 0)
DATAMATRIX_RS = ReedSolomonEncoder(DATAMATRIX_FIELD, 1)


def interleave(blocks: Sequence[Sequence[int]]) -> List[int]:
    """Column-wise read-out; shorter blocks are skipped where they end."""
    out: List[int] = []
    longest = max((len(b) for b in blocks), default=0)
    for i in range(longest):
        for block in blocks:
            if i < len(block):
                out.append(block[i])
    return out


def protect_qr(data: Sequence[int], num_blocks: int, ecc_per_block: int) -> List[int]:
    """Split into consecutive blocks (short blocks first), add ECC, interleave.

    Args:
        data: All data codewords for the chosen version and level.
        num_blocks: Number of error correction blocks.
        ecc_per_block: ECC codewords per block.

    Returns:
        Interleaved data codewords followed by interleaved ECC codewords.
    """
    total = len(data)
    short_len = total // num_blocks
    num_long = total % num_blocks
    num_short = num_blocks - num_long
    data_blocks: List[List[int]] = []
    ecc_blocks: List[List[int]] = []
    pos = 0
    for i in range(num_blocks):
        size = short_len + (0 if i < num_short else 1)
        block = list(data[pos : pos + size])
        pos += size
        data_blocks.append(block)
        ecc_blocks.append(QR_RS.encode(block, ecc_per_block))
    return interleave(data_blocks) + interleave(ecc_blocks)


def protect_datamatrix(data: Sequence[int], num_blocks: int, ecc_per_block: int) -> List[int]:
    """ECC200 rule: codeword ``i`` belongs to block ``i % num_blocks``."""
    data_blocks: List[List[int]] = [list(data[b::num_blocks]) for b in range(num_blocks)]
    ecc_blocks = [DATAMATRIX_RS.encode(block, ecc_per_block) for block in data_blocks]
    return list(data) + interleave(ecc_blocks)


@lru_cache(maxsize=None)
def pdf417_generator(level: int) -> Tuple[int, ...]:
    """Coefficients a0..a(k-1) of prod(x - 3^i), i = 1..k, k = 2^(level+1).

    The leading coefficient (1) is omitted; a0 is the constant term.
    """
    k = 2 ** (level + 1)
    poly = [1]  # lowest degree first
    for i in range(1, k + 1):
        root = PDF417_FIELD.power(i)
        nxt = [0] * (len(poly) + 1)
        for j, coef in enumerate(poly):
            nxt[j + 1] = (nxt[j + 1] + coef) % 929
            nxt[j] = (nxt[j] - coef * root) % 929
        poly = nxt
    return tuple(poly[:-1])


def pdf417_error_correction(data: Sequence[int], level: int) -> List[int]:
    """PDF417 error correction codewords for ``data`` (length descriptor included).

    Args:
        data: Data codewords, first one being the symbol length descriptor.
        level: Error correction level 0..8.

    Returns:
        2^(level+1) codewords, in transmission order.
    """
    if not 0 <= level <= 8:
        raise ValueError(f"PDF417 error correction level must be 0..8, got {level}")
    coeffs = pdf417_generator(level)
    k = len(coeffs)
    ecc = [0] * k
    for value in data:
        t1 = (value + ecc[k - 1]) % 929
        for j in range(k - 1, 0, -1):
            t2 = (t1 * coeffs[j]) % 929
            ecc[j] = (ecc[j - 1] + 929 - t2) % 929
        t2 = (t1 * coeffs[0]) % 929
        ecc[0] = (929 - t2) % 929
    return [(929 - c) % 929 for c in reversed(ecc)]
