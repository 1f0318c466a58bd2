import pytest

from barcodeforge.model.symbol import (
    BarState,
    LinearSymbol,
    MatrixSymbol,
    PostalSymbol,
    TextSegment,
)


def test_linear_from_widths() -> None:
    symbol = LinearSymbol.from_widths([2, 1, 3], quiet_left=1, quiet_right=2)
    assert symbol.elements == ((2, True), (1, False), (3, True))
    assert symbol.symbol_modules == 6
    assert symbol.total_modules == 9
    assert symbol.to_module_string() == "110111"


def test_linear_from_widths_light_first() -> None:
    symbol = LinearSymbol.from_widths([1, 2], first_dark=False)
    assert symbol.elements == ((1, False), (2, True))


def test_linear_from_modules_merges_runs() -> None:
    symbol = LinearSymbol.from_modules("1100010")
    assert symbol.elements == ((2, True), (3, False), (1, True), (1, False))
    assert symbol.to_module_string() == "1100010"


def test_linear_rejects_zero_width() -> None:
    with pytest.raises(ValueError):
        LinearSymbol(elements=((0, True),))


def test_default_text_segment_spans_bars() -> None:
    symbol = LinearSymbol.from_modules("101", quiet_left=4, quiet_right=4, text="X")
    assert symbol.segments() == (TextSegment("X", 4, 7),)
    assert LinearSymbol.from_modules("101").segments() == ()


def test_explicit_segments_win() -> None:
    seg = TextSegment("4", 0, 3)
    symbol = LinearSymbol.from_modules("101", text="49", text_segments=(seg,))
    assert symbol.segments() == (seg,)


def test_matrix_symbol_validation() -> None:
    with pytest.raises(ValueError):
        MatrixSymbol(rows=())
    with pytest.raises(ValueError):
        MatrixSymbol(rows=((True, False), (True,)))
    with pytest.raises(ValueError):
        MatrixSymbol(rows=((True,),), row_heights=(1, 2))


def test_matrix_symbol_heights() -> None:
    symbol = MatrixSymbol.from_grid([[1, 0, 1], [0, 1, 0]])
    assert symbol.columns == 3
    assert symbol.heights == (1, 1)
    assert symbol.height_modules == 2
    assert symbol.is_dark(0, 2) and not symbol.is_dark(1, 2)

    stacked = MatrixSymbol.from_grid([[1], [0]], row_heights=(5, 7), square_modules=False)
    assert stacked.height_modules == 12


@pytest.mark.parametrize(
    "state,extent",
    [
        (BarState.FULL, (0, 3)),
        (BarState.ASCENDER, (0, 2)),
        (BarState.DESCENDER, (1, 3)),
        (BarState.TRACKER, (1, 2)),
    ],
)
def test_bar_state_extent(state: BarState, extent: tuple) -> None:
    assert state.extent == extent


def test_postal_symbol_modules() -> None:
    symbol = PostalSymbol(bars=(BarState.FULL,) * 3, quiet_zone=2)
    assert symbol.symbol_modules == 5
    assert symbol.total_modules == 9
