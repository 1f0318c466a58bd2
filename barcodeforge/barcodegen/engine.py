"""
RU: Фасад движка: один экземпляр на символику, изменяемая конфигурация,
точки входа отрисовки по семействам, результат последней отрисовки, явное
освобождение. Пакетная и асинхронная генерация поверх пула потоков.
EN: Barcode engine facade.

Lifecycle: created -> configured (repeatable) -> drawn -> result fetched, ending
with ``dispose()``. Each draw overwrites the previous result; a failed draw clears
it. Draw entry points return a ``DrawResult`` instead of raising, unless the
engine was created with ``strict=True``.

An engine instance is not thread-safe; use one engine per thread (``batch_draw``
does this for you).

Example:
    >>> with BarcodeEngine(SymbologyKind.CODE128) as engine:
    ...     engine.set_show_text(True)
    ...     if engine.draw_1d("ABC-12345", 300, 100):
    ...         png_b64 = engine.get_base64()
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    FrozenSet,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from barcodeforge.barcodegen.encoders import get_encoder
from barcodeforge.barcodegen.encoders.code128 import encode_convenience
from barcodeforge.barcodegen.encoders.databar import (
    DataBarExpandedEncoder,
    calculate_check_digit_14,
    databar14_widths,
)
from barcodeforge.barcodegen.errors import (
    BarcodeError,
    DrawResult,
    InvalidHandleError,
    NoResultAvailableError,
    UnsupportedSymbologyError,
)
from barcodeforge.barcodegen.layout import (
    Layout,
    RenderedOutput,
    layout_linear,
    layout_matrix,
    layout_postal,
    layout_stacked,
)
from barcodeforge.barcodegen.raster import render_raster, to_base64
from barcodeforge.barcodegen.vector import render_svg
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import (
    DataBar14SymbolType,
    OutputFormat,
    SymbologyFamily,
    SymbologyKind,
)
from barcodeforge.model.job import BarcodeJob
from barcodeforge.model.symbol import AbstractSymbol, LinearSymbol, MatrixSymbol, PostalSymbol

logger = logging.getLogger(__name__)

__all__ = [
    "BarcodeEngine",
    "BatchOutcome",
    "barcode_session",
    "batch_draw",
    "draw_async",
    "run_job",
]

_BARS: FrozenSet[SymbologyFamily] = frozenset({SymbologyFamily.LINEAR, SymbologyFamily.DATABAR})
_MATRIX: FrozenSet[SymbologyFamily] = frozenset({SymbologyFamily.MATRIX})
_POSTAL: FrozenSet[SymbologyFamily] = frozenset({SymbologyFamily.POSTAL})


class BarcodeEngine:
    """
    Encoder + renderer bound to one symbology.

    Args:
        kind: SymbologyKind, its integer id (0..18) or its name.
        output_format: "png", "jpg" or "svg".
        strict: Raise typed exceptions from draw calls instead of returning a failed result.

    Raises:
        UnsupportedSymbologyError: Unknown ``kind``.
    """

    def __init__(
        self,
        kind: Union[SymbologyKind, int, str],
        output_format: Union[OutputFormat, str] = OutputFormat.PNG,
        strict: bool = False,
    ) -> None:
        parsed = SymbologyKind.parse(kind)
        if parsed is None:
            raise UnsupportedSymbologyError(f"Unknown symbology {kind!r}", context={"kind": kind})
        self._kind = parsed
        self._strict = strict
        self._config = EncodingConfiguration()
        self._config.update("output_format", output_format, parsed)
        self._result: Optional[RenderedOutput] = None
        self._disposed = False
        logger.info("Engine created for %s", parsed.name)

    # --- lifecycle ---------------------------------------------------------

    def __enter__(self) -> "BarcodeEngine":
        self._check()
        return self

    def __exit__(self, *exc: object) -> None:
        self.dispose()

    def dispose(self) -> None:
        """Release the last result; safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        self._result = None
        logger.info("Engine for %s disposed", self._kind.name)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _check(self) -> None:
        if self._disposed:
            raise InvalidHandleError("Engine has been disposed", symbology=self._kind.name)

    @property
    def kind(self) -> SymbologyKind:
        return self._kind

    @property
    def config(self) -> EncodingConfiguration:
        self._check()
        return self._config

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else ("drawn" if self._result else "ready")
        return f"BarcodeEngine({self._kind.name}, {state})"

    # --- configuration -----------------------------------------------------

    def _set(self, name: str, value: Any) -> None:
        self._check()
        self._config.update(name, value, self._kind)

    def configure(self, **options: Any) -> None:
        """Apply several options at once; inapplicable ones are ignored."""
        for name, value in options.items():
            self._set(name, value)

    def set_output_format(self, value: Union[OutputFormat, str]) -> None:
        self._set("output_format", value)

    def set_foreground_color(self, r: int, g: int, b: int, a: int = 255) -> None:
        self._set("foreground_color", (r, g, b, a))

    def set_background_color(self, r: int, g: int, b: int, a: int = 255) -> None:
        self._set("background_color", (r, g, b, a))

    def set_fit_width(self, value: bool) -> None:
        self._set("fit_width", value)

    def set_px_adjust_black(self, value: int) -> None:
        self._set("px_adjust_black", value)

    def set_px_adjust_white(self, value: int) -> None:
        self._set("px_adjust_white", value)

    def set_show_text(self, value: bool) -> None:
        self._set("show_text", value)

    def set_text_font_scale(self, value: float) -> None:
        self._set("text_font_scale", value)

    def set_text_gap(self, value: float) -> None:
        self._set("text_gap", value)

    def set_text_even_spacing(self, value: bool) -> None:
        self._set("text_even_spacing", value)

    def set_string_encoding(self, value: str) -> None:
        self._set("string_encoding", value)

    def set_show_start_stop(self, value: bool) -> None:
        self._set("show_start_stop", value)

    def set_check_digit(self, value: bool) -> None:
        self._set("check_digit", value)

    def set_code_mode(self, value: str) -> None:
        self._set("code_mode", value)

    def set_extended_guard(self, value: bool) -> None:
        self._set("extended_guard", value)

    def set_error_correction_level(self, value: str) -> None:
        self._set("error_correction_level", value)

    def set_version(self, value: int) -> None:
        self._set("version", value)

    def set_encode_mode(self, value: str) -> None:
        self._set("encode_mode", value)

    def set_code_size(self, value: str) -> None:
        self._set("code_size", value)

    def set_encode_scheme(self, value: str) -> None:
        self._set("encode_scheme", value)

    def set_error_level(self, value: int) -> None:
        self._set("error_level", value)

    def set_columns(self, value: int) -> None:
        self._set("columns", value)

    def set_rows(self, value: int) -> None:
        self._set("rows", value)

    def set_aspect_ratio(self, value: float) -> None:
        self._set("aspect_ratio", value)

    def set_y_height(self, value: int) -> None:
        self._set("y_height", value)

    def set_symbol_type_14(self, value: str) -> None:
        self._set("symbol_type_14", value)

    def get_symbol_type_14(self) -> DataBar14SymbolType:
        self._check()
        return self._config.symbol_type_14

    def set_symbol_type_exp(self, value: str) -> None:
        self._set("symbol_type_exp", value)

    def set_no_of_columns(self, value: int) -> None:
        self._set("no_of_columns", value)

    # --- DataBar-14 helpers ------------------------------------------------

    def encode_14(self, content: str) -> List[int]:
        """Element widths of a DataBar Omnidirectional symbol, without drawing.

        Raises:
            InvalidPayloadError: ``content`` is not a 13/14-digit GTIN.
        """
        self._check()
        return databar14_widths(content)

    @staticmethod
    def calculate_check_digit_14(src: str) -> str:
        """14-digit GTIN with its check digit."""
        return calculate_check_digit_14(src)

    # --- drawing -----------------------------------------------------------

    def _draw(
        self,
        entry: str,
        families: FrozenSet[SymbologyFamily],
        build: Callable[[EncodingConfiguration], Layout],
        kinds: Optional[FrozenSet[SymbologyKind]] = None,
    ) -> DrawResult:
        self._check()
        try:
            if self._kind.family not in families or (kinds is not None and self._kind not in kinds):
                raise UnsupportedSymbologyError(
                    f"{entry} is not available for {self._kind.localized_name('en')}",
                    symbology=self._kind.name,
                )
            cfg = self._config.clamped()
            layout = build(cfg)
            output = render_svg(layout, cfg) if cfg.output_format.is_vector else render_raster(layout, cfg)
        except BarcodeError as e:
            if e.symbology is None:
                e.symbology = self._kind.name
            self._result = None
            logger.error("%s failed for %s: %s", entry, self._kind.name, e)
            if self._strict:
                raise
            return DrawResult.failure(e)
        self._result = output
        logger.debug("%s drew %s %dx%d", entry, self._kind.name, output.width, output.height)
        return DrawResult.success(output.width, output.height, self._kind.name)

    def _encode(self, code: str, cfg: EncodingConfiguration) -> AbstractSymbol:
        return get_encoder(self._kind).encode(code, cfg, self._kind)

    @staticmethod
    def _layout_bars(
        symbol: AbstractSymbol, width: int, height: int, cfg: EncodingConfiguration
    ) -> Layout:
        if isinstance(symbol, LinearSymbol):
            return layout_linear(symbol, width, height, cfg)
        if isinstance(symbol, MatrixSymbol):
            return layout_stacked(symbol, width, height, cfg)
        raise UnsupportedSymbologyError("Postal symbols use the postal entry points")

    def draw_1d(self, code: str, width: int, height: int) -> DrawResult:
        """Linear and DataBar symbols; ``height`` is the bar height, text is added below."""
        return self._draw(
            "draw_1d",
            _BARS,
            lambda cfg: self._layout_bars(self._encode(code, cfg), width, height, cfg),
        )

    def draw_2d(self, code: str, size: int) -> DrawResult:
        """Matrix symbols on a ``size`` x ``size`` canvas."""
        return self._draw_matrix("draw_2d", code, size, size)

    def draw_2d_rect(self, code: str, width: int, height: int) -> DrawResult:
        return self._draw_matrix("draw_2d_rect", code, width, height)

    def _draw_matrix(self, entry: str, code: str, width: int, height: int) -> DrawResult:
        def build(cfg: EncodingConfiguration) -> Layout:
            symbol = self._encode(code, cfg)
            if not isinstance(symbol, MatrixSymbol):
                raise UnsupportedSymbologyError(
                    f"{self._kind.name} does not produce a matrix symbol", symbology=self._kind.name
                )
            return layout_matrix(symbol, width, height, cfg)

        return self._draw(entry, _MATRIX, build)

    def draw_postal(self, code: str, height: int) -> DrawResult:
        """Postal symbol whose width follows from ``height``."""
        return self._draw_postal("draw_postal", code, None, height)

    def draw_postal_with_width(self, code: str, width: int, height: int) -> DrawResult:
        return self._draw_postal("draw_postal_with_width", code, width, height)

    def _draw_postal(self, entry: str, code: str, width: Optional[int], height: int) -> DrawResult:
        def build(cfg: EncodingConfiguration) -> Layout:
            symbol = self._encode(code, cfg)
            if not isinstance(symbol, PostalSymbol):
                raise UnsupportedSymbologyError(
                    f"{self._kind.name} does not produce a postal symbol", symbology=self._kind.name
                )
            return layout_postal(symbol, width, height, cfg)

        return self._draw(entry, _POSTAL, build)

    def draw_convenience(self, code: str, width: int, height: int) -> DrawResult:
        """Japanese convenience-store payment code (GS1-128 with AI 91)."""
        return self._draw(
            "draw_convenience",
            _BARS,
            lambda cfg: layout_linear(encode_convenience(code), width, height, cfg),
            kinds=frozenset({SymbologyKind.GS1_128}),
        )

    def draw_stacked(self, code: str, width: int, height: int) -> DrawResult:
        """DataBar Expanded Stacked regardless of ``symbol_type_exp``."""

        def build(cfg: EncodingConfiguration) -> Layout:
            encoder = get_encoder(self._kind)
            if not isinstance(encoder, DataBarExpandedEncoder):
                raise UnsupportedSymbologyError(
                    f"{self._kind.name} has no stacked form", symbology=self._kind.name
                )
            symbol = encoder.encode(code, cfg, self._kind, force_stacked=True)
            return self._layout_bars(symbol, width, height, cfg)

        return self._draw(
            "draw_stacked", _BARS, build, kinds=frozenset({SymbologyKind.GS1_DATABAR_EXPANDED})
        )

    # --- results -----------------------------------------------------------

    def is_vector_output(self) -> bool:
        self._check()
        return self._config.output_format.is_vector

    def get_result(self) -> RenderedOutput:
        """Raises NoResultAvailableError before the first successful draw."""
        self._check()
        if self._result is None:
            raise NoResultAvailableError("No successful draw yet", symbology=self._kind.name)
        return self._result

    def get_image_data(self) -> bytes:
        """PNG/JPEG bytes, or UTF-8 SVG markup."""
        return self.get_result().to_bytes()

    def get_base64(self) -> str:
        """Base64 of the raster image; "" when there is none."""
        self._check()
        if self._result is None or self._result.is_vector:
            return ""
        return to_base64(self._result)

    def get_vector_markup(self) -> str:
        """SVG markup; "" when the last draw was not vector output."""
        self._check()
        if self._result is None or not self._result.is_vector:
            return ""
        return self._result.markup


# =============================================================================
# Scoped use, batch and async helpers
# =============================================================================


@contextmanager
def barcode_session(
    kind: Union[SymbologyKind, int, str],
    output_format: Union[OutputFormat, str] = OutputFormat.PNG,
    strict: bool = False,
    **options: Any,
) -> Iterator[BarcodeEngine]:
    """Engine that is disposed on every exit path.

    Example:
        >>> with barcode_session("QR", error_correction_level="H") as engine:
        ...     engine.draw_2d("https://example.com", 200)
    """
    engine = BarcodeEngine(kind, output_format, strict)
    try:
        engine.configure(**options)
        yield engine
    finally:
        engine.dispose()


BatchOutcome = Tuple[BarcodeJob, DrawResult, Optional[RenderedOutput]]


def _dispatch(engine: BarcodeEngine, job: BarcodeJob) -> DrawResult:
    entry = job.entry_point()
    width = job.width or 0
    height = job.height or 0
    if entry == "1d":
        return engine.draw_1d(job.code, width, height)
    if entry == "2d":
        return engine.draw_2d(job.code, width or height)
    if entry == "2d_rect":
        return engine.draw_2d_rect(job.code, width, height)
    if entry == "postal":
        if job.width is None:
            return engine.draw_postal(job.code, height)
        return engine.draw_postal_with_width(job.code, width, height)
    if entry == "convenience":
        return engine.draw_convenience(job.code, width, height)
    if entry == "stacked":
        return engine.draw_stacked(job.code, width, height)
    return DrawResult.failure(
        UnsupportedSymbologyError(f"Unknown draw entry point {entry!r}", symbology=job.kind.name)
    )


def run_job(job: BarcodeJob) -> BatchOutcome:
    """Draw one job on a fresh engine."""
    with BarcodeEngine(job.kind, job.output_format) as engine:
        engine.configure(**job.options)
        result = _dispatch(engine, job)
        output = engine.get_result() if result else None
    return job, result, output


def batch_draw(
    jobs: Sequence[BarcodeJob],
    parallel: bool = True,
    max_workers: Optional[int] = None,
) -> List[BatchOutcome]:
    """Draw every job, one engine per job; failures come back as failed results.

    Args:
        jobs: Jobs to draw, order is preserved in the output.
        parallel: Use a thread pool.
        max_workers: Pool size (default: executor's choice).

    Returns:
        (job, result, output) tuples; ``output`` is None for failed jobs.
    """
    if parallel and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(run_job, jobs))
    else:
        outcomes = [run_job(job) for job in jobs]
    failed = sum(1 for _, result, _ in outcomes if not result)
    logger.info("Batch draw complete: %d jobs, %d failed", len(outcomes), failed)
    return outcomes


async def draw_async(job: BarcodeJob) -> BatchOutcome:
    """Run ``run_job`` in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, run_job, job)

