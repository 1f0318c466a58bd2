"""
ecc

Коды Рида-Соломона для QR (GF(256), 0x11D), DataMatrix ECC200 (GF(256), 0x12D)
и PDF417 (GF(929)).
"""

from barcodeforge.barcodegen.ecc.galois import (
    DATAMATRIX_FIELD,
    PDF417_FIELD,
    QR_FIELD,
    BinaryField,
    PrimeField,
)
from barcodeforge.barcodegen.ecc.reed_solomon import (
    DATAMATRIX_RS,
    QR_RS,
    ReedSolomonEncoder,
    pdf417_error_correction,
    protect_datamatrix,
    protect_qr,
)

__all__ = [
    "BinaryField",
    "PrimeField",
    "QR_FIELD",
    "DATAMATRIX_FIELD",
    "PDF417_FIELD",
    "ReedSolomonEncoder",
    "QR_RS",
    "DATAMATRIX_RS",
    "protect_qr",
    "protect_datamatrix",
    "pdf417_error_correction",
]
