from typing import Any

import pytest

from barcodeforge.model.config import (
    DATAMATRIX_SIZES_AUTO,
    FIELD_SCOPES,
    EncodingConfiguration,
)
from barcodeforge.model.enums import (
    Code128Mode,
    OutputFormat,
    QRErrorCorrection,
    StringEncoding,
    SymbologyKind,
)


@pytest.fixture
def cfg() -> EncodingConfiguration:
    return EncodingConfiguration()


def test_defaults(cfg: EncodingConfiguration) -> None:
    assert cfg.output_format is OutputFormat.PNG
    assert cfg.foreground_color == (0, 0, 0, 255)
    assert cfg.background_color == (255, 255, 255, 255)
    assert cfg.show_text is True
    assert cfg.error_correction_level is QRErrorCorrection.M
    assert cfg.code_size == DATAMATRIX_SIZES_AUTO
    assert cfg.error_level == -1
    assert cfg.aspect_ratio == 2.0
    assert cfg.y_height == 3
    assert cfg.no_of_columns == 2


def test_every_field_has_a_scope() -> None:
    names = set(EncodingConfiguration().to_dict()) - {"schema_version"}
    assert names == set(FIELD_SCOPES)


@pytest.mark.parametrize(
    "name,value,kind,applied",
    [
        ("show_text", False, SymbologyKind.CODE128, True),
        ("show_text", False, SymbologyKind.QR, False),
        ("show_text", False, SymbologyKind.YUBIN_CUSTOMER, False),
        ("px_adjust_black", 1, SymbologyKind.YUBIN_CUSTOMER, True),
        ("px_adjust_black", 1, SymbologyKind.QR, False),
        ("check_digit", True, SymbologyKind.CODE39, True),
        ("check_digit", True, SymbologyKind.NW7, False),
        ("show_start_stop", False, SymbologyKind.NW7, True),
        ("extended_guard", True, SymbologyKind.UPC_E, True),
        ("string_encoding", "sjis", SymbologyKind.PDF417, True),
        ("string_encoding", "sjis", SymbologyKind.CODE128, False),
        ("fit_width", True, SymbologyKind.DATAMATRIX, True),
    ],
)
def test_update_respects_scope(
    cfg: EncodingConfiguration, name: str, value: Any, kind: SymbologyKind, applied: bool
) -> None:
    before = getattr(cfg, name)
    assert cfg.update(name, value, kind) is applied
    assert (getattr(cfg, name) != before) is applied


@pytest.mark.parametrize(
    "name,value",
    [
        ("version", 41),
        ("version", "5"),
        ("version", 5.5),
        ("error_level", 9),
        ("columns", 31),
        ("rows", 91),
        ("y_height", 0),
        ("no_of_columns", 12),
        ("show_text", "yes"),
        ("foreground_color", (0, 0, 256)),
        ("foreground_color", (0, 0)),
        ("foreground_color", (0, 0, True)),
        ("code_size", "11x11"),
        ("output_format", "bmp"),
        ("text_gap", float("nan")),
        ("not_a_field", 1),
    ],
)
def test_update_ignores_invalid_values(cfg: EncodingConfiguration, name: str, value: Any) -> None:
    before = cfg.to_dict()
    assert cfg.update(name, value) is False
    assert cfg.to_dict() == before


@pytest.mark.parametrize(
    "name,value,expected",
    [
        ("version", 5.0, 5),
        ("show_text", 0, False),
        ("foreground_color", [10, 20, 30], (10, 20, 30, 255)),
        ("code_size", "16X48", "16x48"),
        ("code_size", "auto", DATAMATRIX_SIZES_AUTO),
        ("code_mode", "b", Code128Mode.B),
        ("string_encoding", "Shift-JIS", StringEncoding.SHIFT_JIS),
        ("output_format", "jpeg", OutputFormat.JPG),
        ("px_adjust_white", -2, -2),
    ],
)
def test_update_parses_values(cfg: EncodingConfiguration, name: str, value: Any, expected: Any) -> None:
    assert cfg.update(name, value)
    assert getattr(cfg, name) == expected


def test_clamped_brings_values_into_range(cfg: EncodingConfiguration) -> None:
    cfg.text_font_scale = 0.0
    cfg.text_gap = -3.0
    cfg.aspect_ratio = -1.0
    clamped = cfg.clamped()
    assert clamped.text_font_scale == 0.1
    assert clamped.text_gap == 0.0
    assert clamped.aspect_ratio == 2.0
    assert cfg.text_font_scale == 0.0

    cfg.text_font_scale = 50.0
    cfg.text_gap = 50.0
    cfg.aspect_ratio = 1000.0
    clamped = cfg.clamped()
    assert (clamped.text_font_scale, clamped.text_gap, clamped.aspect_ratio) == (10.0, 10.0, 100.0)


def test_from_mapping_applies_aliases() -> None:
    mapping = {
        "output_format": "svg",
        "pdf417_aspect_ratio": 3.0,
        "pdf417_y_height": 4,
        "log_level": "DEBUG",
        "show_text": False,
    }
    cfg = EncodingConfiguration.from_mapping(mapping, SymbologyKind.PDF417)
    assert cfg.output_format is OutputFormat.SVG
    assert cfg.aspect_ratio == 3.0
    assert cfg.y_height == 4
    assert cfg.show_text is True


def test_dict_round_trip() -> None:
    cfg = EncodingConfiguration(
        foreground_color=(1, 2, 3, 4),
        error_correction_level=QRErrorCorrection.H,
        code_size="16x48",
        text_gap=0.5,
    )
    d = cfg.to_dict()
    assert d["foreground_color"] == [1, 2, 3, 4]
    assert d["error_correction_level"] == "H"
    assert d["schema_version"] == EncodingConfiguration.schema_version
    assert EncodingConfiguration.from_dict(d) == cfg


def test_from_dict_tolerates_foreign_schema() -> None:
    cfg = EncodingConfiguration.from_dict({"schema_version": "0.1", "version": 7, "extra": 1})
    assert cfg.version == 7
