import pytest

from barcodeforge.model.enums import SymbologyKind
from barcodeforge.model.job import BarcodeJob


def test_job_minimal() -> None:
    job = BarcodeJob(kind=SymbologyKind.QR, code="hello", width=200)
    assert job.height is None
    assert job.output_format == "png"
    assert job.options == {}


@pytest.mark.parametrize("kind", [16, "QR", "16"])
def test_job_parses_kind(kind: object) -> None:
    assert BarcodeJob(kind=kind, code="x").kind is SymbologyKind.QR  # type: ignore[arg-type]


def test_job_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        BarcodeJob(kind=42, code="x")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "job,entry",
    [
        (BarcodeJob(kind=SymbologyKind.CODE128, code="A", width=100, height=50), "1d"),
        (BarcodeJob(kind=SymbologyKind.GS1_DATABAR_EXPANDED, code="A", width=100, height=50), "1d"),
        (BarcodeJob(kind=SymbologyKind.QR, code="A", width=100), "2d"),
        (BarcodeJob(kind=SymbologyKind.PDF417, code="A", width=300, height=100), "2d_rect"),
        (BarcodeJob(kind=SymbologyKind.YUBIN_CUSTOMER, code="A", height=30), "postal"),
        (BarcodeJob(kind=SymbologyKind.GS1_128, code="A", width=300, height=80, draw="convenience"), "convenience"),
    ],
)
def test_entry_point(job: BarcodeJob, entry: str) -> None:
    assert job.entry_point() == entry


def test_job_dict_round_trip() -> None:
    job = BarcodeJob(
        kind=SymbologyKind.DATAMATRIX,
        code="round trip",
        width=120,
        options={"code_size": "16x48"},
        job_id="job-1",
    )
    d = job.to_dict()
    assert d["kind"] == 17
    assert d["schema_version"] == BarcodeJob.schema_version
    assert BarcodeJob.from_dict(d) == job


def test_job_from_dict_foreign_schema() -> None:
    job = BarcodeJob.from_dict({"schema_version": "9.9", "kind": "NW7", "code": "A1B"})
    assert job.kind is SymbologyKind.NW7


def test_job_str_truncates_code() -> None:
    job = BarcodeJob(kind=SymbologyKind.CODE128, code="X" * 40)
    assert str(job) == f"BarcodeJob(CODE128, code={'X' * 16}...)"
