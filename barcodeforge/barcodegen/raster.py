"""
RU: Растровый вывод: RGBA-буфер Pillow, заливка фона, прямоугольники модулей,
подпись; кодирование в PNG или JPEG.
EN: Raster sink (PNG/JPEG via Pillow).
"""

from __future__ import annotations

import base64
import logging
from io import BytesIO

from PIL import Image, ImageDraw

from barcodeforge.barcodegen.layout import Layout, RenderedOutput
from barcodeforge.barcodegen.text import draw_text
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import OutputFormat

logger = logging.getLogger(__name__)

__all__ = ["paint", "render_raster", "to_base64"]

JPEG_QUALITY = 95


def paint(layout: Layout, config: EncodingConfiguration) -> Image.Image:
    """RGBA image of ``layout``."""
    img = Image.new("RGBA", (layout.width, layout.height), config.background_color)
    draw = ImageDraw.Draw(img)
    for r in layout.rects:
        if r.width > 0 and r.height > 0:
            draw.rectangle((r.x0, r.y0, r.x1 - 1, r.y1 - 1), fill=config.foreground_color)
    for placement in layout.texts:
        draw_text(draw, placement, config.foreground_color)
    return img


def render_raster(layout: Layout, config: EncodingConfiguration) -> RenderedOutput:
    """Encode ``layout`` as PNG or JPEG; JPEG flattens alpha onto the background color."""
    img = paint(layout, config)
    fmt = config.output_format
    buf = BytesIO()
    if fmt is OutputFormat.JPG:
        flat = Image.new("RGB", img.size, config.background_color[:3])
        flat.paste(img, mask=img.getchannel("A"))
        flat.save(buf, format="JPEG", quality=JPEG_QUALITY)
    else:
        img.save(buf, format="PNG")
    data = buf.getvalue()
    logger.debug("Output rendered as %s (%d bytes)", fmt.pil_format, len(data))
    return RenderedOutput(output_format=fmt, width=img.width, height=img.height, data=data)


def to_base64(output: RenderedOutput) -> str:
    return base64.b64encode(output.data).decode("ascii")
