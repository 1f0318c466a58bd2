# RU: Объект конфигурации кодирования: одна мутируемая запись на экземпляр движка, манифест применимости полей по символикам, молчаливое игнорирование неприменимых значений.
# EN: Encoding configuration value object with a per-field applicability manifest; inapplicable or unparsable values are ignored, ranges are clamped at draw time.

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Mapping, Optional, Tuple

from .enums import (
    Code128Mode,
    DataBar14SymbolType,
    DataBarExpandedSymbolType,
    DataMatrixScheme,
    OutputFormat,
    QRErrorCorrection,
    QREncodeMode,
    StringEncoding,
    SymbologyFamily,
    SymbologyKind,
)

logger = logging.getLogger(__name__)

__all__ = ["EncodingConfiguration", "FIELD_SCOPES", "DATAMATRIX_SIZES_AUTO"]

Color = Tuple[int, int, int, int]

DATAMATRIX_SIZES_AUTO = "AUTO"

_ALL: FrozenSet[SymbologyKind] = frozenset(SymbologyKind)
_ONE_D: FrozenSet[SymbologyKind] = frozenset(
    k for k in SymbologyKind if k.family in (SymbologyFamily.LINEAR, SymbologyFamily.DATABAR)
)
_BARS: FrozenSet[SymbologyKind] = _ONE_D | {SymbologyKind.YUBIN_CUSTOMER}
_TWO_D: FrozenSet[SymbologyKind] = frozenset(k for k in SymbologyKind if k.is_two_dimensional)
_EAN_UPC: FrozenSet[SymbologyKind] = frozenset(k for k in SymbologyKind if k.is_ean_upc)

# Манифест: к каким символикам применимо поле
FIELD_SCOPES: Dict[str, FrozenSet[SymbologyKind]] = {
    "output_format": _ALL,
    "foreground_color": _ALL,
    "background_color": _ALL,
    "fit_width": _ALL,
    "px_adjust_black": _BARS,
    "px_adjust_white": _BARS,
    "show_text": _ONE_D,
    "text_font_scale": _ONE_D,
    "text_gap": _ONE_D,
    "text_even_spacing": _ONE_D,
    "string_encoding": _TWO_D,
    "show_start_stop": frozenset({SymbologyKind.CODE39, SymbologyKind.NW7}),
    "check_digit": frozenset({SymbologyKind.CODE39}),
    "code_mode": frozenset({SymbologyKind.CODE128}),
    "extended_guard": _EAN_UPC,
    "error_correction_level": frozenset({SymbologyKind.QR}),
    "version": frozenset({SymbologyKind.QR}),
    "encode_mode": frozenset({SymbologyKind.QR}),
    "code_size": frozenset({SymbologyKind.DATAMATRIX}),
    "encode_scheme": frozenset({SymbologyKind.DATAMATRIX}),
    "error_level": frozenset({SymbologyKind.PDF417}),
    "columns": frozenset({SymbologyKind.PDF417}),
    "rows": frozenset({SymbologyKind.PDF417}),
    "aspect_ratio": frozenset({SymbologyKind.PDF417}),
    "y_height": frozenset({SymbologyKind.PDF417}),
    "symbol_type_14": frozenset({SymbologyKind.GS1_DATABAR_14}),
    "symbol_type_exp": frozenset({SymbologyKind.GS1_DATABAR_EXPANDED}),
    "no_of_columns": frozenset({SymbologyKind.GS1_DATABAR_EXPANDED}),
}


def _parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return None


def _parse_int(lo: Optional[int] = None, hi: Optional[int] = None) -> Callable[[Any], Optional[int]]:
    def parse(value: Any) -> Optional[int]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if isinstance(value, float) and not value.is_integer():
            return None
        v = int(value)
        if (lo is not None and v < lo) or (hi is not None and v > hi):
            return None
        return v

    return parse


def _parse_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    v = float(value)
    if v != v:  # NaN
        return None
    return v


def _parse_color(value: Any) -> Optional[Color]:
    if not isinstance(value, (tuple, list)) or len(value) not in (3, 4):
        return None
    parts = list(value) + ([255] if len(value) == 3 else [])
    if any(isinstance(p, bool) or not isinstance(p, int) or not 0 <= p <= 255 for p in parts):
        return None
    return (parts[0], parts[1], parts[2], parts[3])


def _parse_code_size(value: Any) -> Optional[str]:
    from barcodeforge.barcodegen.encoders.datamatrix import parse_symbol_size

    if not isinstance(value, str):
        return None
    if value.strip().upper() == DATAMATRIX_SIZES_AUTO:
        return DATAMATRIX_SIZES_AUTO
    size = parse_symbol_size(value)
    return None if size is None else f"{size[0]}x{size[1]}"


_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "output_format": OutputFormat.parse,
    "foreground_color": _parse_color,
    "background_color": _parse_color,
    "fit_width": _parse_bool,
    "px_adjust_black": _parse_int(),
    "px_adjust_white": _parse_int(),
    "show_text": _parse_bool,
    "text_font_scale": _parse_float,
    "text_gap": _parse_float,
    "text_even_spacing": _parse_bool,
    "string_encoding": StringEncoding.parse,
    "show_start_stop": _parse_bool,
    "check_digit": _parse_bool,
    "code_mode": Code128Mode.parse,
    "extended_guard": _parse_bool,
    "error_correction_level": QRErrorCorrection.parse,
    "version": _parse_int(0, 40),
    "encode_mode": QREncodeMode.parse,
    "code_size": _parse_code_size,
    "encode_scheme": DataMatrixScheme.parse,
    "error_level": _parse_int(-1, 8),
    "columns": _parse_int(0, 30),
    "rows": _parse_int(0, 90),
    "aspect_ratio": _parse_float,
    "y_height": _parse_int(1, 100),
    "symbol_type_14": DataBar14SymbolType.parse,
    "symbol_type_exp": DataBarExpandedSymbolType.parse,
    "no_of_columns": _parse_int(1, 11),
}


@dataclass
class EncodingConfiguration:
    """
    Per-instance encoding and rendering options.

    The object is deliberately tolerant: `update()` drops values that do not apply
    to the active symbology or do not parse, and `clamped()` brings continuous
    values into range right before drawing. Geometry and capacity problems are
    left for the draw pipeline to report.

    Examples:
        cfg = EncodingConfiguration()
        cfg.update("error_correction_level", "H", SymbologyKind.QR)   # applied
        cfg.update("show_text", False, SymbologyKind.QR)              # ignored
    """

    schema_version: ClassVar[str] = "1.0"

    output_format: OutputFormat = OutputFormat.PNG
    foreground_color: Color = (0, 0, 0, 255)
    background_color: Color = (255, 255, 255, 255)
    fit_width: bool = False
    px_adjust_black: int = 0
    px_adjust_white: int = 0

    show_text: bool = True
    text_font_scale: float = 1.0
    text_gap: float = 1.0
    text_even_spacing: bool = False

    string_encoding: StringEncoding = StringEncoding.UTF8

    show_start_stop: bool = True
    check_digit: bool = False
    code_mode: Code128Mode = Code128Mode.AUTO
    extended_guard: bool = False

    error_correction_level: QRErrorCorrection = QRErrorCorrection.M
    version: int = 0
    encode_mode: QREncodeMode = QREncodeMode.AUTO

    code_size: str = DATAMATRIX_SIZES_AUTO
    encode_scheme: DataMatrixScheme = DataMatrixScheme.AUTO

    error_level: int = -1
    columns: int = 0
    rows: int = 0
    aspect_ratio: float = 2.0
    y_height: int = 3

    symbol_type_14: DataBar14SymbolType = DataBar14SymbolType.OMNIDIRECTIONAL
    symbol_type_exp: DataBarExpandedSymbolType = DataBarExpandedSymbolType.UNSTACKED
    no_of_columns: int = 2

    def update(self, name: str, value: Any, kind: Optional[SymbologyKind] = None) -> bool:
        """Apply one option; returns True when the value was taken."""
        scope = FIELD_SCOPES.get(name)
        if scope is None:
            logger.warning("Unknown configuration field %r ignored", name)
            return False
        if kind is not None and kind not in scope:
            logger.debug("Field %r is not applicable to %s, ignored", name, kind.name)
            return False
        parsed = _PARSERS[name](value)
        if parsed is None:
            logger.warning("Invalid value %r for %r ignored", value, name)
            return False
        setattr(self, name, parsed)
        return True

    def clamped(self) -> "EncodingConfiguration":
        """Copy with continuous options brought into their working range."""
        aspect = self.aspect_ratio if self.aspect_ratio > 0 else 2.0
        return replace(
            self,
            text_font_scale=min(max(self.text_font_scale, 0.1), 10.0),
            text_gap=min(max(self.text_gap, 0.0), 10.0),
            aspect_ratio=min(max(aspect, 0.1), 100.0),
        )

    @classmethod
    def from_mapping(
        cls, config: Mapping[str, Any], kind: Optional[SymbologyKind] = None
    ) -> "EncodingConfiguration":
        """Seed from a `load_config()` dictionary; unknown keys are skipped."""
        cfg = cls()
        aliases = {
            "pdf417_aspect_ratio": "aspect_ratio",
            "pdf417_y_height": "y_height",
        }
        for key, value in config.items():
            name = aliases.get(key, key)
            if name in FIELD_SCOPES:
                cfg.update(name, value, kind)
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        dct: Dict[str, Any] = asdict(self)
        for key, value in dct.items():
            if isinstance(value, tuple):
                dct[key] = list(value)
            elif hasattr(value, "value"):
                dct[key] = value.value
        dct["schema_version"] = self.schema_version
        return dct

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EncodingConfiguration":
        d = dict(d)
        if "schema_version" in d and d["schema_version"] != cls.schema_version:
            logger.warning(
                "Schema version mismatch (expected %s, got %s)",
                cls.schema_version,
                d["schema_version"],
            )
        d.pop("schema_version", None)
        cfg = cls()
        known = {f.name for f in fields(cls)}
        for key, value in d.items():
            if key in known:
                cfg.update(key, value)
        return cfg
