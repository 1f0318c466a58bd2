"""
encoders

RU: Кодировщики символик. Один экземпляр на символику, общий для всех движков.
EN: Symbology encoders and the kind -> encoder registry.
"""

from __future__ import annotations

import logging
from typing import Dict, Final

from barcodeforge.barcodegen.encoders.base import SymbolEncoder
from barcodeforge.barcodegen.encoders.codabar import CodabarEncoder
from barcodeforge.barcodegen.encoders.code39 import Code39Encoder, Code93Encoder
from barcodeforge.barcodegen.encoders.code128 import Code128Encoder, GS1128Encoder
from barcodeforge.barcodegen.encoders.databar import (
    DataBar14Encoder,
    DataBarExpandedEncoder,
    DataBarLimitedEncoder,
)
from barcodeforge.barcodegen.encoders.datamatrix import DataMatrixEncoder
from barcodeforge.barcodegen.encoders.ean import EanUpcEncoder
from barcodeforge.barcodegen.encoders.pdf417 import PDF417Encoder
from barcodeforge.barcodegen.encoders.qr import QREncoder
from barcodeforge.barcodegen.encoders.two_of_five import ITFEncoder, TwoOfFiveEncoder
from barcodeforge.barcodegen.encoders.yubin import YubinEncoder
from barcodeforge.barcodegen.errors import UnsupportedSymbologyError
from barcodeforge.model.enums import SymbologyKind

logger = logging.getLogger(__name__)

__all__ = ["SymbolEncoder", "ENCODERS", "get_encoder"]


def _build_registry() -> Dict[SymbologyKind, SymbolEncoder]:
    registry: Dict[SymbologyKind, SymbolEncoder] = {}
    for encoder in (
        Code39Encoder(),
        Code93Encoder(),
        Code128Encoder(),
        GS1128Encoder(),
        CodabarEncoder(),
        TwoOfFiveEncoder(),
        ITFEncoder(),
        EanUpcEncoder(),
        DataBar14Encoder(),
        DataBarLimitedEncoder(),
        DataBarExpandedEncoder(),
        YubinEncoder(),
        QREncoder(),
        DataMatrixEncoder(),
        PDF417Encoder(),
    ):
        for kind in encoder.kinds:
            registry[kind] = encoder
    missing = set(SymbologyKind) - set(registry)
    if missing:
        raise RuntimeError(f"No encoder registered for {sorted(k.name for k in missing)}")
    return registry


ENCODERS: Final[Dict[SymbologyKind, SymbolEncoder]] = _build_registry()


def get_encoder(kind: SymbologyKind) -> SymbolEncoder:
    """Shared encoder for ``kind``.

    Raises:
        UnsupportedSymbologyError: ``kind`` has no encoder.
    """
    try:
        return ENCODERS[kind]
    except KeyError:
        raise UnsupportedSymbologyError(f"Unsupported symbology {kind!r}") from None
