"""
RU: Контрольные цифры и символы: модуль 10 (GS1 3/1), модуль 43 (Code39),
модуль 103 (Code128), модуль 47 (Code93, C и K), модуль 19 (почтовый код Японии).
EN: Check digit / check character functions. Pure, stateless; invalid input
raises InvalidPayloadError.
"""

from __future__ import annotations

import logging
from typing import Final, List, Sequence, Tuple

from barcodeforge.barcodegen.errors import InvalidPayloadError

logger = logging.getLogger(__name__)

__all__ = [
    "CODE39_CHARSET",
    "gs1_mod10",
    "append_gs1_check_digit",
    "verify_gs1_check_digit",
    "code39_mod43",
    "code128_mod103",
    "code93_check_values",
    "yubin_mod19",
    "digits_to_ints",
]

# Порядок символов определяет их значения для модуля 43
CODE39_CHARSET: Final[str] = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-. $/+%"


def _require_digits(digits: str, what: str) -> None:
    if not digits or not digits.isascii() or not digits.isdigit():
        raise InvalidPayloadError(
            f"{what} must be a non-empty string of digits",
            context={"value": digits},
        )


def gs1_mod10(digits: str) -> str:
    """Mod-10 check digit with 3/1 weights applied from the rightmost digit.

    Used by JAN/EAN/UPC, ITF-14, GS1 AIs (00, 01, 02), DataBar and the
    convenience-store payment code.

    Args:
        digits: Payload digits without the check digit.

    Returns:
        The check digit as a one-character string.

    Raises:
        InvalidPayloadError: If ``digits`` is empty or not numeric.

    Example:
        >>> gs1_mod10("490123456789")
        '4'
    """
    _require_digits(digits, "GS1 payload")
    total = 0
    for pos, ch in enumerate(reversed(digits)):
        total += int(ch) * (3 if pos % 2 == 0 else 1)
    return str((10 - total % 10) % 10)


def append_gs1_check_digit(digits: str) -> str:
    return digits + gs1_mod10(digits)


def verify_gs1_check_digit(digits: str) -> bool:
    """True when the last digit is the mod-10 check digit of the rest."""
    _require_digits(digits, "GS1 payload")
    if len(digits) < 2:
        return False
    return gs1_mod10(digits[:-1]) == digits[-1]


def code39_mod43(data: str) -> str:
    """Optional Code39 check character; start/stop are not part of the sum."""
    total = 0
    for ch in data:
        idx = CODE39_CHARSET.find(ch)
        if idx < 0:
            raise InvalidPayloadError(
                f"Character {ch!r} is not encodable in Code39",
                symbology="CODE39",
            )
        total += idx
    return CODE39_CHARSET[total % 43]


def code128_mod103(values: Sequence[int]) -> int:
    """Weighted sum mod 103; ``values[0]`` is the start code with weight 1."""
    if not values:
        raise InvalidPayloadError("Code128 symbol values are empty", symbology="CODE128")
    total = values[0]
    for weight, value in enumerate(values[1:], start=1):
        total += weight * value
    return total % 103


def code93_check_values(values: Sequence[int]) -> Tuple[int, int]:
    """Code93 "C" (weights 1..20) and "K" (weights 1..15) check values, mod 47."""

    def weighted(seq: Sequence[int], max_weight: int) -> int:
        total = 0
        for pos, value in enumerate(reversed(seq)):
            total += ((pos % max_weight) + 1) * value
        return total % 47

    c = weighted(values, 20)
    k = weighted(list(values) + [c], 15)
    return c, k


def yubin_mod19(values: Sequence[int]) -> int:
    """Japan Post check value: 19 - (sum mod 19), with 19 mapped to 0."""
    check = 19 - (sum(values) % 19)
    return 0 if check == 19 else check


def digits_to_ints(digits: str) -> List[int]:
    _require_digits(digits, "Payload")
    return [int(c) for c in digits]
