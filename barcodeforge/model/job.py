# RU: Запись пакетного задания: символика, данные, размеры и переопределения настроек; сериализация с версией схемы.
# EN: Batch job record: symbology, payload, geometry and option overrides, with schema-versioned serialisation.

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, Optional

from .enums import SymbologyFamily, SymbologyKind

logger = logging.getLogger(__name__)

__all__ = ["BarcodeJob"]


@dataclass
class BarcodeJob:
    """
    One unit of batch work for `batch_draw`.

    `width` is ignored for square 2D draws (`size` is taken from `width`),
    and may be None for postal auto-width draws. `draw` selects the entry point
    explicitly ("1d", "2d", "2d_rect", "postal", "convenience", "stacked");
    when None it is derived from the symbology family.

    Examples:
        job = BarcodeJob(kind=SymbologyKind.QR, code="hello", width=200)
        job = BarcodeJob(kind=SymbologyKind.CODE128, code="ABC", width=300, height=100,
                         options={"show_text": False})
    """

    schema_version: ClassVar[str] = "1.0"

    kind: SymbologyKind
    code: str
    width: Optional[int] = None
    height: Optional[int] = None
    draw: Optional[str] = None
    output_format: str = "png"
    options: Dict[str, Any] = field(default_factory=dict)
    job_id: Optional[str] = None

    def __post_init__(self) -> None:
        parsed = SymbologyKind.parse(self.kind)
        if parsed is None:
            raise ValueError(f"Unknown symbology: {self.kind!r}")
        self.kind = parsed

    def entry_point(self) -> str:
        if self.draw:
            return self.draw
        family = self.kind.family
        if family is SymbologyFamily.POSTAL:
            return "postal"
        if family is SymbologyFamily.MATRIX:
            return "2d" if self.height is None else "2d_rect"
        return "1d"

    def to_dict(self) -> Dict[str, Any]:
        dct: Dict[str, Any] = asdict(self)
        dct["kind"] = int(self.kind)
        dct["schema_version"] = self.schema_version
        return dct

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BarcodeJob":
        d = dict(d)
        if "schema_version" in d and d["schema_version"] != cls.schema_version:
            logger.warning(
                "Schema version mismatch (expected %s, got %s)",
                cls.schema_version,
                d["schema_version"],
            )
        d.pop("schema_version", None)
        return cls(**d)

    def __str__(self) -> str:
        datashow: str = self.code[:16] + ("..." if len(self.code) > 16 else "")
        return f"BarcodeJob({self.kind.name}, code={datashow})"
