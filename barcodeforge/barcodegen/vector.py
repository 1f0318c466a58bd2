"""
RU: Векторный вывод SVG с той же геометрией, что и растровый.
EN: SVG sink: one ``<rect>`` per bar or module run on a full-canvas background.
"""

from __future__ import annotations

import logging
from typing import List, Tuple
from xml.sax.saxutils import escape

from barcodeforge.barcodegen.layout import Layout, RenderedOutput, TextPlacement
from barcodeforge.barcodegen.text import char_cells
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import OutputFormat

logger = logging.getLogger(__name__)

__all__ = ["render_svg", "svg_color"]

SVG_NS = "http://www.w3.org/2000/svg"
FONT_FAMILY = "monospace"


def svg_color(color: Tuple[int, int, int, int]) -> str:
    """Fill attributes for an RGBA color."""
    r, g, b, a = color
    attrs = f'fill="#{r:02x}{g:02x}{b:02x}"'
    if a < 255:
        attrs += f' fill-opacity="{a / 255:.3f}"'
    return attrs


def _text_elements(placement: TextPlacement, fill: str) -> List[str]:
    # базовая линия примерно на 0.8 кегля ниже верхней границы
    baseline = placement.y + round(placement.font_size * 0.8)
    common = f'font-family="{FONT_FAMILY}" font-size="{placement.font_size}" text-anchor="middle" {fill}'
    if placement.even_spacing:
        return [
            f'<text x="{center:.2f}" y="{baseline}" {common}>{escape(ch)}</text>'
            for ch, center in char_cells(placement)
        ]
    center = (placement.x0 + placement.x1) / 2
    return [f'<text x="{center:.2f}" y="{baseline}" {common}>{escape(placement.text)}</text>']


def render_svg(layout: Layout, config: EncodingConfiguration) -> RenderedOutput:
    fg = svg_color(config.foreground_color)
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="{SVG_NS}" version="1.1" width="{layout.width}" height="{layout.height}" '
        f'viewBox="0 0 {layout.width} {layout.height}">',
        f'<rect x="0" y="0" width="{layout.width}" height="{layout.height}" '
        f"{svg_color(config.background_color)}/>",
    ]
    for r in layout.rects:
        if r.width > 0 and r.height > 0:
            parts.append(f'<rect x="{r.x0}" y="{r.y0}" width="{r.width}" height="{r.height}" {fg}/>')
    for placement in layout.texts:
        parts.extend(_text_elements(placement, fg))
    parts.append("</svg>")
    markup = "\n".join(parts)
    logger.debug("SVG output produced (%d rects)", len(layout.rects))
    return RenderedOutput(
        output_format=OutputFormat.SVG, width=layout.width, height=layout.height, markup=markup
    )
