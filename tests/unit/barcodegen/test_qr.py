import pytest

from barcodeforge.barcodegen.encoders.qr import (
    QREncoder,
    alignment_positions,
    build_qr,
    data_codeword_capacity,
    make_segment,
    raw_data_modules,
)
from barcodeforge.barcodegen.errors import InvalidPayloadError, PayloadTooLargeError
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import QREncodeMode, QRErrorCorrection, StringEncoding, SymbologyKind

L, M, Q, H = QRErrorCorrection.L, QRErrorCorrection.M, QRErrorCorrection.Q, QRErrorCorrection.H


# === Capacity tables ===
@pytest.mark.parametrize(
    "version,level,expected",
    [(1, L, 19), (1, M, 16), (1, H, 9), (7, L, 156), (10, M, 216), (40, L, 2956), (40, H, 1276)],
)
def test_data_codeword_capacity(version: int, level: QRErrorCorrection, expected: int) -> None:
    assert data_codeword_capacity(version, level) == expected


def test_raw_data_modules() -> None:
    assert raw_data_modules(1) == 208
    assert raw_data_modules(40) == 29648


@pytest.mark.parametrize(
    "version,expected",
    [(1, []), (2, [6, 18]), (7, [6, 22, 38]), (32, [6, 34, 60, 86, 112, 138])],
)
def test_alignment_positions(version: int, expected: list) -> None:
    assert alignment_positions(version) == expected


# === Segments ===
@pytest.mark.parametrize(
    "text,mode",
    [
        ("01234567", QREncodeMode.NUMERIC),
        ("HELLO WORLD", QREncodeMode.ALPHANUMERIC),
        ("hello", QREncodeMode.BYTE),
    ],
)
def test_auto_mode(text: str, mode: QREncodeMode) -> None:
    assert make_segment(text, QREncodeMode.AUTO).mode is mode


def test_numeric_bits() -> None:
    segment = make_segment("01234567", QREncodeMode.NUMERIC)
    assert segment.bits == "0000001100" + "0101011001" + "1000011"
    assert segment.total_bits(1) == 4 + 10 + 27


def test_kanji_segment() -> None:
    segment = make_segment("点", QREncodeMode.KANJI, "cp932")
    assert segment.bits == format(0x0D9F, "013b")
    assert make_segment("漢字", QREncodeMode.AUTO, "cp932").mode is QREncodeMode.KANJI


def test_kanji_requires_shift_jis() -> None:
    with pytest.raises(InvalidPayloadError):
        make_segment("漢字", QREncodeMode.KANJI, "utf-8")


@pytest.mark.parametrize(
    "text,mode",
    [("", QREncodeMode.AUTO), ("12a", QREncodeMode.NUMERIC), ("abc", QREncodeMode.ALPHANUMERIC)],
)
def test_segment_rejects(text: str, mode: QREncodeMode) -> None:
    with pytest.raises(InvalidPayloadError):
        make_segment(text, mode)


def test_unencodable_in_codec() -> None:
    with pytest.raises(InvalidPayloadError):
        make_segment("é\U0001f600", QREncodeMode.BYTE, "cp932")


def test_count_overflow_returns_none() -> None:
    segment = make_segment("1" * 1024, QREncodeMode.NUMERIC)
    assert segment.total_bits(1) is None
    assert segment.total_bits(10) is not None


# === Symbol construction ===
@pytest.mark.parametrize(
    "text,version,level,mask",
    [
        ("HELLO WORLD", 1, M, 2),
        ("01234567", 1, H, 0),
        ("https://example.com/p?id=42", 3, Q, 5),
        ("barcode-" * 12, 7, L, 3),
        ("1234567890" * 30, 10, M, 6),
    ],
)
def test_matches_qrcode_library(text: str, version: int, level: QRErrorCorrection, mask: int) -> None:
    qrcode = pytest.importorskip("qrcode")
    levels = {
        L: qrcode.constants.ERROR_CORRECT_L,
        M: qrcode.constants.ERROR_CORRECT_M,
        Q: qrcode.constants.ERROR_CORRECT_Q,
        H: qrcode.constants.ERROR_CORRECT_H,
    }
    reference = qrcode.QRCode(
        version=version, error_correction=levels[level], border=0, mask_pattern=mask
    )
    reference.add_data(text, optimize=0)
    reference.make(fit=False)

    grid = build_qr(make_segment(text, QREncodeMode.AUTO), level, version, mask)
    assert grid == [[bool(m) for m in row] for row in reference.get_matrix()]


def test_finder_patterns_and_size() -> None:
    grid = build_qr(make_segment("HELLO WORLD", QREncodeMode.AUTO), M)
    assert len(grid) == 21
    for x0, y0 in ((0, 0), (14, 0), (0, 14)):
        assert all(grid[y0][x0 + i] for i in range(7))
        assert all(grid[y0 + i][x0] for i in range(7))
        assert not grid[y0 + 1][x0 + 1]
        assert grid[y0 + 3][x0 + 3]
    # dark module
    assert grid[13][8]


def test_auto_mask_is_deterministic() -> None:
    segment = make_segment("DETERMINISTIC", QREncodeMode.AUTO)
    assert build_qr(segment, Q) == build_qr(segment, Q)


def test_maximum_capacity_level_h() -> None:
    assert len(build_qr(make_segment("7" * 3057, QREncodeMode.AUTO), H)) == 177
    assert len(build_qr(make_segment("b" * 1273, QREncodeMode.AUTO), H)) == 177


@pytest.mark.parametrize("text", ["7" * 3058, "b" * 1274])
def test_over_capacity(text: str) -> None:
    with pytest.raises(PayloadTooLargeError):
        build_qr(make_segment(text, QREncodeMode.AUTO), H, 40)


def test_pinned_version_too_small() -> None:
    with pytest.raises(PayloadTooLargeError):
        build_qr(make_segment("A" * 40, QREncodeMode.AUTO), H, 1)


def test_encoder_uses_configuration() -> None:
    cfg = EncodingConfiguration(
        error_correction_level=H,
        version=5,
        string_encoding=StringEncoding.SHIFT_JIS,
    )
    symbol = QREncoder().encode("漢字テスト", cfg, SymbologyKind.QR)
    assert symbol.columns == 37
    assert symbol.quiet_zone == 4
    assert symbol.square_modules
