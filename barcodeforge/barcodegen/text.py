"""
RU: Отрисовка человекочитаемой подписи под линейными кодами (Pillow).
EN: Human-readable text renderer for raster output.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Tuple, Union

from PIL import ImageDraw, ImageFont
from PIL.ImageFont import FreeTypeFont
from PIL.ImageFont import ImageFont as PILImageFont

from barcodeforge.barcodegen.layout import TextPlacement

logger = logging.getLogger(__name__)

__all__ = ["get_font", "draw_text", "char_cells"]

Font = Union[FreeTypeFont, PILImageFont]


@lru_cache(maxsize=32)
def get_font(size: int) -> Font:
    """Pillow's default font at ``size`` pixels (cached, fonts are read-only)."""
    return ImageFont.load_default(size)


def char_cells(placement: TextPlacement) -> Tuple[Tuple[str, float], ...]:
    """Characters with the x center of their evenly spaced cells."""
    n = len(placement.text)
    if n == 0:
        return ()
    cell = (placement.x1 - placement.x0) / n
    return tuple(
        (ch, placement.x0 + cell * (i + 0.5)) for i, ch in enumerate(placement.text)
    )


def draw_text(
    draw: ImageDraw.ImageDraw,
    placement: TextPlacement,
    fill: Tuple[int, int, int, int],
) -> None:
    """Draw one text placement; even spacing puts each character in its own cell."""
    font = get_font(placement.font_size)
    if placement.even_spacing:
        for ch, center in char_cells(placement):
            w = draw.textlength(ch, font=font)
            draw.text((center - w / 2, placement.y), ch, font=font, fill=fill)
        return
    w = draw.textlength(placement.text, font=font)
    x = placement.x0 + (placement.x1 - placement.x0 - w) / 2
    draw.text((x, placement.y), placement.text, font=font, fill=fill)
