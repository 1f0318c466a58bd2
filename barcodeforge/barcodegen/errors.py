"""
Исключения и результат отрисовки движка штрих-кодов.

Иерархия типизированных исключений по видам ошибок и структурированный
результат `DrawResult`, который ведёт себя как bool для совместимого
стиля "успех/неудача".

Example:
    >>> result = engine.draw_1d("ABC-12345", 300, 100)
    >>> if not result:
    ...     logger.error("Draw failed: %s (%s)", result.message, result.error_kind)
    >>> result.raise_for_error()

Иерархия:
    BarcodeError (базовое)
    ├── UnsupportedSymbologyError
    ├── InvalidPayloadError
    ├── PayloadTooLargeError
    ├── InvalidGeometryError
    ├── NoResultAvailableError
    └── InvalidHandleError
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type

__all__: list[str] = [
    "ErrorKind",
    "BarcodeError",
    "UnsupportedSymbologyError",
    "InvalidPayloadError",
    "PayloadTooLargeError",
    "InvalidGeometryError",
    "NoResultAvailableError",
    "InvalidHandleError",
    "DrawResult",
]


class ErrorKind(str, Enum):
    UNSUPPORTED_SYMBOLOGY = "UnsupportedSymbology"
    INVALID_PAYLOAD = "InvalidPayload"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    INVALID_GEOMETRY = "InvalidGeometry"
    NO_RESULT_AVAILABLE = "NoResultAvailable"
    INVALID_HANDLE = "InvalidHandle"


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class BarcodeError(Exception):
    """
    Базовое исключение для всех ошибок движка.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        symbology: Имя символики, вызвавшей ошибку (опционально)
        context: Дополнительный контекст для отладки (опционально)

    Example:
        >>> raise InvalidPayloadError(
        ...     "JAN-13 requires 12 or 13 digits",
        ...     symbology="JAN13",
        ...     context={"length": 5},
        ... )
    """

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        *,
        symbology: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.symbology = symbology
        self.context = context or {}

    def __str__(self) -> str:
        parts = [self.__class__.__name__, ": ", self.message]

        if self.symbology:
            parts.append(f" [symbology={self.symbology}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"symbology={self.symbology!r}, "
            f"context={self.context!r})"
        )


class UnsupportedSymbologyError(BarcodeError):
    """Неизвестный идентификатор символики или неподходящая точка входа отрисовки."""

    kind = ErrorKind.UNSUPPORTED_SYMBOLOGY


class InvalidPayloadError(BarcodeError):
    """
    Данные не соответствуют грамматике символики.

    Raises когда:
    - Недопустимый символ или длина
    - Неверная контрольная цифра во входных данных
    - Неверный синтаксис идентификаторов применения GS1
    """

    kind = ErrorKind.INVALID_PAYLOAD


class PayloadTooLargeError(BarcodeError):
    """Данные превышают ёмкость наибольшего символа для заданного уровня/версии."""

    kind = ErrorKind.PAYLOAD_TOO_LARGE


class InvalidGeometryError(BarcodeError):
    """
    Размеры дают неположительный модуль или штрих.

    Raises когда:
    - Ширина/высота меньше числа модулей символа
    - Подгонка пикселей делает штрих нулевой или отрицательной ширины
    - Явная ширина почтового кода меньше минимальной
    """

    kind = ErrorKind.INVALID_GEOMETRY


class NoResultAvailableError(BarcodeError):
    """Результат запрошен до первой успешной отрисовки."""

    kind = ErrorKind.NO_RESULT_AVAILABLE


class InvalidHandleError(BarcodeError):
    """Операция над освобождённым экземпляром движка."""

    kind = ErrorKind.INVALID_HANDLE


_ERROR_TYPES: Dict[ErrorKind, Type[BarcodeError]] = {
    cls.kind: cls  # type: ignore[misc]
    for cls in (
        UnsupportedSymbologyError,
        InvalidPayloadError,
        PayloadTooLargeError,
        InvalidGeometryError,
        NoResultAvailableError,
        InvalidHandleError,
    )
}


@dataclass(frozen=True)
class DrawResult:
    """Outcome of a draw call; truthy on success.

    Attributes:
        ok: Whether the draw produced output.
        error_kind: Failure category, None on success.
        message: Failure description, empty on success.
        width: Output image width in pixels (0 on failure).
        height: Output image height in pixels (0 on failure).
    """

    ok: bool
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    width: int = 0
    height: int = 0
    symbology: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, width: int, height: int, symbology: Optional[str] = None) -> "DrawResult":
        return cls(ok=True, width=width, height=height, symbology=symbology)

    @classmethod
    def failure(cls, error: BarcodeError) -> "DrawResult":
        return cls(
            ok=False,
            error_kind=error.kind,
            message=error.message,
            symbology=error.symbology,
        )

    def raise_for_error(self) -> None:
        """Re-raise a failed result as its typed exception."""
        if self.ok or self.error_kind is None:
            return
        raise _ERROR_TYPES[self.error_kind](self.message, symbology=self.symbology)
