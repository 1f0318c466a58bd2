"""
RU: Арифметика конечных полей для кодов Рида-Соломона: GF(2^8) с разными
примитивными многочленами (QR: 0x11D, DataMatrix: 0x12D) и простое поле GF(929)
для PDF417. Таблицы строятся один раз при импорте и далее не изменяются.
EN: Finite-field arithmetic backing the Reed-Solomon codecs.
"""

from __future__ import annotations

import logging
from typing import Final, Tuple

logger = logging.getLogger(__name__)

__all__ = ["BinaryField", "PrimeField", "QR_FIELD", "DATAMATRIX_FIELD", "PDF417_FIELD"]


class BinaryField:
    """
    GF(2^8) defined by a primitive polynomial, generator alpha = 2.

    Exp table is doubled (510 entries) so that ``exp[log a + log b]`` needs no
    modulo. Tables are tuples: instances are safe to share between threads.
    """

    def __init__(self, primitive_poly: int) -> None:
        self.primitive_poly = primitive_poly
        exp = [0] * 510
        log = [0] * 256
        x = 1
        for i in range(255):
            exp[i] = x
            exp[i + 255] = x
            log[x] = i
            x <<= 1
            if x & 0x100:
                x ^= primitive_poly
        self.exp: Tuple[int, ...] = tuple(exp)
        self.log: Tuple[int, ...] = tuple(log)

    def add(self, a: int, b: int) -> int:
        return a ^ b

    def multiply(self, a: int, b: int) -> int:
        if a == 0 or b == 0:
            return 0
        return self.exp[self.log[a] + self.log[b]]

    def power(self, n: int) -> int:
        """alpha ** n."""
        return self.exp[n % 255]

    def inverse(self, a: int) -> int:
        if a == 0:
            raise ZeroDivisionError("0 has no inverse in GF(256)")
        return self.exp[255 - self.log[a]]

    def __repr__(self) -> str:
        return f"BinaryField(0x{self.primitive_poly:X})"


class PrimeField:
    """GF(p) for a prime modulus; PDF417 uses p = 929 with generator 3."""

    def __init__(self, modulus: int, generator: int) -> None:
        self.modulus = modulus
        self.generator = generator
        powers = [1] * (modulus - 1)
        for i in range(1, modulus - 1):
            powers[i] = (powers[i - 1] * generator) % modulus
        self.powers: Tuple[int, ...] = tuple(powers)

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def subtract(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def multiply(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def power(self, n: int) -> int:
        """generator ** n."""
        return self.powers[n % (self.modulus - 1)]

    def __repr__(self) -> str:
        return f"PrimeField({self.modulus}, g={self.generator})"


QR_FIELD: Final[BinaryField] = BinaryField(0x11D)
DATAMATRIX_FIELD: Final[BinaryField] = BinaryField(0x12D)
PDF417_FIELD: Final[PrimeField] = PrimeField(929, 3)
