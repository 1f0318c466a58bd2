"""
RU: Геометрия: перевод абстрактного символа и запрошенного размера в пиксельные
прямоугольники и места подписи. Общий этап для растрового и векторного вывода.
EN: Layout stage shared by the raster and vector sinks.

Horizontal rules for bar symbols:
- the module count includes both quiet zones;
- ``px_adjust_black``/``px_adjust_white`` add a fixed pixel delta to every dark/light
  element, the delta comes out of the available width first;
- without ``fit_width`` the module is the largest integer that fits and the symbol is
  centered; with ``fit_width`` modules become fractional and fill the width exactly.

Any element that ends up with a non-positive pixel size is an InvalidGeometry error,
never a silently clamped bar.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Final, List, Optional, Sequence, Tuple

from barcodeforge.barcodegen.errors import InvalidGeometryError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import OutputFormat
from barcodeforge.model.symbol import LinearSymbol, MatrixSymbol, PostalSymbol, TextSegment

logger = logging.getLogger(__name__)

__all__ = [
    "Rect",
    "TextPlacement",
    "Layout",
    "RenderedOutput",
    "layout_linear",
    "layout_stacked",
    "layout_matrix",
    "layout_postal",
    "postal_auto_width",
    "text_metrics",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
]

# Предел размеров изображения против исчерпания памяти
MAX_IMAGE_WIDTH: Final[int] = 10000
MAX_IMAGE_HEIGHT: Final[int] = 10000

MIN_FONT_SIZE: Final[int] = 6
POSTAL_HEIGHT_MODULES: Final[int] = 6
MIN_POSTAL_HEIGHT: Final[int] = 3


@dataclass(frozen=True)
class Rect:
    """Filled rectangle, ``x1``/``y1`` exclusive."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0


@dataclass(frozen=True)
class TextPlacement:
    """Human-readable text centered over ``[x0, x1)`` with its top at ``y``."""

    text: str
    x0: int
    x1: int
    y: int
    font_size: int
    even_spacing: bool = False


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    rects: Tuple[Rect, ...]
    texts: Tuple[TextPlacement, ...] = ()


@dataclass(frozen=True)
class RenderedOutput:
    """Encoded image of one draw: raster bytes or SVG markup."""

    output_format: OutputFormat
    width: int
    height: int
    data: bytes = b""
    markup: str = ""

    @property
    def is_vector(self) -> bool:
        return self.output_format.is_vector

    def to_bytes(self) -> bytes:
        return self.markup.encode("utf-8") if self.is_vector else self.data


def _geometry_error(message: str, **context: object) -> InvalidGeometryError:
    return InvalidGeometryError(message, context=dict(context))


def _check_canvas(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise _geometry_error("Image size must be positive", width=width, height=height)
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise _geometry_error(
            f"Image size exceeds {MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}", width=width, height=height
        )


def text_metrics(module_px: float, config: EncodingConfiguration) -> Tuple[int, int, int]:
    """(font size, gap, text row height) for a module of ``module_px`` pixels."""
    font_size = max(MIN_FONT_SIZE, round(module_px * 9 * config.text_font_scale))
    gap = round(font_size * 0.25 * config.text_gap)
    return font_size, gap, gap + round(font_size * 1.2)


# =============================================================================
# Horizontal placement shared by 1D and postal symbols
# =============================================================================


@dataclass(frozen=True)
class _Horizontal:
    spans: Tuple[Tuple[int, int], ...]
    edges: Tuple[Tuple[int, int], ...]
    module_px: float

    def x_at(self, module: int) -> int:
        """Pixel position of a module boundary (interpolated inside quiet zones)."""
        prev_m, prev_x = self.edges[0]
        for m, x in self.edges:
            if m == module:
                return x
            if m > module:
                return prev_x + round((module - prev_m) * self.module_px)
            prev_m, prev_x = m, x
        return prev_x + round((module - prev_m) * self.module_px)


def _horizontal(
    elements: Sequence[Tuple[int, bool]],
    quiet_left: int,
    quiet_right: int,
    width: int,
    config: EncodingConfiguration,
) -> _Horizontal:
    total = quiet_left + sum(w for w, _ in elements) + quiet_right
    adjust = [config.px_adjust_black if dark else config.px_adjust_white for _, dark in elements]
    available = width - sum(adjust)
    if width < total or available < total:
        raise _geometry_error(
            f"Width {width}px is smaller than the {total} modules of the symbol",
            width=width,
            modules=total,
        )

    if config.fit_width:
        scale = available / total
        offset = 0

        def px(module: int) -> int:
            return round(module * scale)

    else:
        module_px = available // total
        scale = float(module_px)
        offset = (width - (total * module_px + sum(adjust))) // 2

        def px(module: int) -> int:
            return module * module_px

    spans: List[Tuple[int, int]] = []
    edges: List[Tuple[int, int]] = [(0, offset)]
    pos = quiet_left
    shift = 0
    edges.append((pos, offset + px(pos)))
    for (w, _dark), delta in zip(elements, adjust):
        x0 = offset + px(pos) + shift
        shift += delta
        x1 = offset + px(pos + w) + shift
        if x1 <= x0:
            raise _geometry_error(
                "Pixel adjustment leaves an element with no width",
                element_width=w,
                adjust=delta,
            )
        spans.append((x0, x1))
        pos += w
        edges.append((pos, x1))
    edges.append((total, offset + px(total) + shift))
    return _Horizontal(tuple(spans), tuple(edges), scale)


def _text_placements(
    segments: Sequence[TextSegment],
    horizontal: _Horizontal,
    y: int,
    font_size: int,
    config: EncodingConfiguration,
) -> Tuple[TextPlacement, ...]:
    return tuple(
        TextPlacement(
            text=seg.text,
            x0=horizontal.x_at(seg.start),
            x1=horizontal.x_at(seg.end),
            y=y,
            font_size=font_size,
            even_spacing=config.text_even_spacing,
        )
        for seg in segments
        if seg.text
    )


def layout_linear(
    symbol: LinearSymbol, width: int, height: int, config: EncodingConfiguration
) -> Layout:
    """Bars of a 1D symbol with an optional text row appended below ``height``."""
    if height < 1:
        raise _geometry_error("Bar height must be at least 1px", height=height)
    horizontal = _horizontal(symbol.elements, symbol.quiet_left, symbol.quiet_right, width, config)

    segments = symbol.segments() if config.show_text else ()
    texts: Tuple[TextPlacement, ...] = ()
    canvas_height = height
    guard_bottom = height
    if segments:
        font_size, gap, row_height = text_metrics(horizontal.module_px, config)
        canvas_height = height + row_height
        guard_bottom = height + gap + font_size // 2
        texts = _text_placements(segments, horizontal, height + gap, font_size, config)
    _check_canvas(width, canvas_height)

    rects = tuple(
        Rect(x0, 0, x1, guard_bottom if i in symbol.guard_indices else height)
        for i, ((_, dark), (x0, x1)) in enumerate(zip(symbol.elements, horizontal.spans))
        if dark
    )
    logger.debug(
        "Linear layout %dx%d, module %.2fpx, %d bars", width, canvas_height, horizontal.module_px, len(rects)
    )
    return Layout(width, canvas_height, rects, texts)


def _row_runs(row: Sequence[bool]) -> List[Tuple[int, int]]:
    runs: List[Tuple[int, int]] = []
    start: Optional[int] = None
    for i, dark in enumerate(row):
        if dark and start is None:
            start = i
        elif not dark and start is not None:
            runs.append((start, i))
            start = None
    if start is not None:
        runs.append((start, len(row)))
    return runs


def _distribute(heights: Sequence[int], total_px: int) -> List[int]:
    """Integer pixel heights proportional to ``heights``, at least 1px each."""
    if total_px < len(heights):
        raise _geometry_error(
            f"Height {total_px}px cannot hold {len(heights)} rows", height=total_px
        )
    total = sum(heights)
    px = [max(1, math.floor(h * total_px / total)) for h in heights]
    order = sorted(range(len(heights)), key=lambda i: -heights[i])
    i = 0
    while sum(px) < total_px:
        px[order[i % len(order)]] += 1
        i += 1
    while sum(px) > total_px:
        j = next(k for k in order if px[k] > 1)
        px[j] -= 1
    return px


def layout_stacked(
    symbol: MatrixSymbol, width: int, height: int, config: EncodingConfiguration
) -> Layout:
    """Stacked DataBar drawn through the 1D entry point.

    Rows keep their relative heights inside ``height``; quiet zones are horizontal only.
    """
    if height < 1:
        raise _geometry_error("Bar height must be at least 1px", height=height)
    q = symbol.quiet_zone
    total = symbol.columns + 2 * q
    if width < total:
        raise _geometry_error(
            f"Width {width}px is smaller than the {total} modules of the symbol",
            width=width,
            modules=total,
        )
    if config.fit_width:
        scale = width / total
        offset = 0
    else:
        scale = float(width // total)
        offset = (width - total * int(scale)) // 2

    def x(module: int) -> int:
        return offset + round(module * scale)

    row_px = _distribute(symbol.heights, height)
    rects: List[Rect] = []
    y = 0
    for row, h in zip(symbol.rows, row_px):
        for c0, c1 in _row_runs(row):
            rects.append(Rect(x(q + c0), y, x(q + c1), y + h))
        y += h

    texts: Tuple[TextPlacement, ...] = ()
    canvas_height = height
    if config.show_text and symbol.text:
        font_size, gap, row_height = text_metrics(scale, config)
        canvas_height = height + row_height
        texts = (
            TextPlacement(
                symbol.text, x(q), x(q + symbol.columns), height + gap, font_size, config.text_even_spacing
            ),
        )
    _check_canvas(width, canvas_height)
    return Layout(width, canvas_height, tuple(rects), texts)


def layout_matrix(
    symbol: MatrixSymbol, width: int, height: int, config: EncodingConfiguration
) -> Layout:
    """QR, Data Matrix and PDF417 on a ``width`` x ``height`` canvas.

    Square-module symbols use one scale for both axes; PDF417 scales x and y
    independently. The quiet zone surrounds the symbol on all sides.
    """
    _check_canvas(width, height)
    q = symbol.quiet_zone
    total_x = symbol.columns + 2 * q
    total_y = symbol.height_modules + 2 * q
    if width < total_x or height < total_y:
        raise _geometry_error(
            f"{width}x{height}px cannot hold {total_x}x{total_y} modules",
            width=width,
            height=height,
        )

    if config.fit_width:
        sx, sy = width / total_x, height / total_y
        if symbol.square_modules:
            sx = sy = min(sx, sy)
    else:
        sx, sy = float(width // total_x), float(height // total_y)
        if symbol.square_modules:
            sx = sy = min(sx, sy)
    off_x = (width - round(total_x * sx)) // 2
    off_y = (height - round(total_y * sy)) // 2

    def x(module: int) -> int:
        return off_x + round(module * sx)

    def y(module: int) -> int:
        return off_y + round(module * sy)

    rects: List[Rect] = []
    top = q
    for row, h in zip(symbol.rows, symbol.heights):
        for c0, c1 in _row_runs(row):
            rects.append(Rect(x(q + c0), y(top), x(q + c1), y(top + h)))
        top += h
    logger.debug("Matrix layout %dx%d, module %.2fx%.2fpx", width, height, sx, sy)
    return Layout(width, height, tuple(rects))


def postal_auto_width(symbol: PostalSymbol, height: int) -> int:
    """Width for a module of ``height / 6`` pixels."""
    return round(symbol.total_modules * height / POSTAL_HEIGHT_MODULES)


def layout_postal(
    symbol: PostalSymbol,
    width: Optional[int],
    height: int,
    config: EncodingConfiguration,
) -> Layout:
    """4-state bars; ``width=None`` derives the width from ``height``."""
    if height < MIN_POSTAL_HEIGHT:
        raise _geometry_error(
            f"Postal bars need at least {MIN_POSTAL_HEIGHT}px of height", height=height
        )
    elements: List[Tuple[int, bool]] = []
    for i in range(len(symbol.bars)):
        if i:
            elements.append((1, False))
        elements.append((1, True))

    if width is None:
        adjust = sum(config.px_adjust_black if d else config.px_adjust_white for _, d in elements)
        width = postal_auto_width(symbol, height) + adjust
        auto_cfg = replace(config, fit_width=True)
        horizontal = _horizontal(elements, symbol.quiet_zone, symbol.quiet_zone, width, auto_cfg)
    else:
        if width < symbol.total_modules:
            raise _geometry_error(
                f"Postal width {width}px is below the minimum of {symbol.total_modules}",
                width=width,
                minimum=symbol.total_modules,
            )
        horizontal = _horizontal(elements, symbol.quiet_zone, symbol.quiet_zone, width, config)
    _check_canvas(width, height)

    rects: List[Rect] = []
    bar_spans = horizontal.spans[::2]
    for state, (x0, x1) in zip(symbol.bars, bar_spans):
        top, bottom = state.extent
        rects.append(Rect(x0, round(top * height / 3), x1, round(bottom * height / 3)))
    logger.debug("Postal layout %dx%d", width, height)
    return Layout(width, height, tuple(rects))
