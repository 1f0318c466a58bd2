"""
barcodegen

Кодирование и отрисовка штрих-кодов: кодировщики символик, коды Рида-Соломона,
расчёт геометрии, растровый (PNG/JPEG) и векторный (SVG) вывод.

- Линейные: Code 39/93/128, GS1-128, Codabar, 2 of 5 (Matrix, ITF, NEC), JAN/UPC.
- GS1 DataBar: Omnidirectional (и варианты), Limited, Expanded (и Stacked).
- Японский почтовый код (Customer Barcode), QR, DataMatrix, PDF417.

Public API:
    - BarcodeEngine: фасад движка на одну символику (class)
    - barcode_session: контекстный менеджер с гарантированным dispose()
    - batch_draw / draw_async / run_job: пакетная и асинхронная отрисовка
    - DrawResult, BarcodeError и подклассы: типизированные ошибки
    - RenderedOutput: результат отрисовки (байты растра или разметка SVG)

Примеры:
    >>> from barcodeforge.barcodegen import BarcodeEngine
    >>> with BarcodeEngine("JAN13") as engine:
    ...     engine.draw_1d("490123456789", 240, 80)

Зависимости:
    Pillow, pdf417gen
"""

from barcodeforge.barcodegen.engine import (
    BarcodeEngine,
    BatchOutcome,
    barcode_session,
    batch_draw,
    draw_async,
    run_job,
)
from barcodeforge.barcodegen.errors import (
    BarcodeError,
    DrawResult,
    ErrorKind,
    InvalidGeometryError,
    InvalidHandleError,
    InvalidPayloadError,
    NoResultAvailableError,
    PayloadTooLargeError,
    UnsupportedSymbologyError,
)
from barcodeforge.barcodegen.layout import RenderedOutput

__all__ = [
    "BarcodeEngine",
    "BatchOutcome",
    "barcode_session",
    "batch_draw",
    "draw_async",
    "run_job",
    "RenderedOutput",
    "BarcodeError",
    "DrawResult",
    "ErrorKind",
    "InvalidGeometryError",
    "InvalidHandleError",
    "InvalidPayloadError",
    "NoResultAvailableError",
    "PayloadTooLargeError",
    "UnsupportedSymbologyError",
]
