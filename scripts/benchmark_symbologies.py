#!/usr/bin/env python3
"""Draw timing for every supported symbology (PNG and SVG)."""

import sys
import time
from pathlib import Path
from typing import Dict, List, Tuple

# Корень проекта в PYTHONPATH
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from barcodeforge import BarcodeJob, SymbologyKind
from barcodeforge.barcodegen.engine import run_job

ROUNDS = 20

SAMPLES: List[Tuple[SymbologyKind, str, Dict[str, int]]] = [
    (SymbologyKind.CODE39, "CODE39-123", {"width": 400, "height": 100}),
    (SymbologyKind.CODE93, "CODE93", {"width": 400, "height": 100}),
    (SymbologyKind.CODE128, "ABC-12345", {"width": 300, "height": 100}),
    (SymbologyKind.GS1_128, "(01)04912345123459(10)ABC", {"width": 500, "height": 100}),
    (SymbologyKind.NW7, "A12345B", {"width": 300, "height": 100}),
    (SymbologyKind.MATRIX2OF5, "1234567", {"width": 300, "height": 100}),
    (SymbologyKind.NEC2OF5, "1234567", {"width": 300, "height": 100}),
    (SymbologyKind.JAN8, "4901234", {"width": 200, "height": 80}),
    (SymbologyKind.JAN13, "490123456780", {"width": 200, "height": 80}),
    (SymbologyKind.UPC_A, "03600029145", {"width": 200, "height": 80}),
    (SymbologyKind.UPC_E, "0123456", {"width": 150, "height": 80}),
    (SymbologyKind.ITF, "12345678", {"width": 300, "height": 100}),
    (SymbologyKind.GS1_DATABAR_14, "0491234512345", {"width": 300, "height": 80}),
    (SymbologyKind.GS1_DATABAR_LIMITED, "0491234512345", {"width": 300, "height": 80}),
    (SymbologyKind.GS1_DATABAR_EXPANDED, "(01)04912345123459(10)ABC", {"width": 600, "height": 80}),
    (SymbologyKind.YUBIN_CUSTOMER, "1000001-1-2-3", {"height": 50}),
    (SymbologyKind.QR, "https://example.com", {"width": 200}),
    (SymbologyKind.DATAMATRIX, "barcodeforge benchmark", {"width": 200}),
    (SymbologyKind.PDF417, "barcodeforge benchmark " * 4, {"width": 600, "height": 200}),
]


def benchmark(kind: SymbologyKind, code: str, dims: Dict[str, int], fmt: str) -> float:
    """Average milliseconds per draw, or -1.0 when the draw fails."""
    job = BarcodeJob(kind=kind, code=code, output_format=fmt, **dims)
    times = []
    for _ in range(ROUNDS):
        start = time.perf_counter()
        _, result, _ = run_job(job)
        times.append((time.perf_counter() - start) * 1000)
        if not result:
            print(f"   ⚠️  {kind.name}: {result.error_kind} {result.message}")
            return -1.0
    return sum(times) / len(times)


def print_report() -> None:
    print()
    print("╔" + "═" * 58 + "╗")
    print("║" + " " * 14 + "BARCODE DRAW BENCHMARK" + " " * 22 + "║")
    print("╚" + "═" * 58 + "╝")
    print()
    print(f"   {'Symbology':<24} {'PNG ms':>10} {'SVG ms':>10}")
    print("   " + "-" * 46)

    slowest = 0.0
    rows = []
    for kind, code, dims in SAMPLES:
        png = benchmark(kind, code, dims, "png")
        svg = benchmark(kind, code, dims, "svg")
        rows.append((kind, png, svg))
        slowest = max(slowest, png, svg)

    for kind, png, svg in rows:
        bar = "█" * int(png / slowest * 20) if slowest > 0 and png > 0 else ""
        print(f"   {kind.localized_name('en'):<24} {png:10.3f} {svg:10.3f}  {bar}")
    print()


if __name__ == "__main__":
    print_report()
