from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from tambola_book.placement import PlacementError, RowPlacer
from tambola_book.rng import create_rng


def buckets_for(sizes):
    """Buckets with distinct dummy numbers, column ``c`` drawn from ``c*10 + k``."""
    return [[c * 10 + k for k in range(size)] for c, size in enumerate(sizes)]


def valid_sizes(threes: int, order_seed: int):
    # 3*n3 + 2*n2 + n1 = 15 and n3 + n2 + n1 = 9
    twos = 6 - 2 * threes
    ones = 9 - threes - twos
    sizes = [3] * threes + [2] * twos + [1] * ones
    create_rng("py_random", order_seed).shuffle(sizes)
    return sizes


@given(threes=st.integers(min_value=0, max_value=3), seed=st.integers(min_value=0, max_value=10**6))
def test_every_valid_bucket_layout_fills_five_per_row(threes, seed):
    sizes = valid_sizes(threes, seed)
    buckets = buckets_for(sizes)
    expected_columns = [sorted(b) for b in buckets]
    grid = RowPlacer().place(buckets, create_rng("py_random", seed))

    assert all(not b for b in buckets)
    for row in grid:
        assert sum(1 for cell in row if cell is not None) == 5
    for c in range(9):
        placed = sorted(row[c] for row in grid if row[c] is not None)
        assert placed == expected_columns[c]
        assert len(placed) == sizes[c]


def test_three_number_columns_fill_every_row():
    sizes = [3, 3, 3, 1, 1, 1, 1, 1, 1]
    grid = RowPlacer().place(buckets_for(sizes), create_rng("py_random", 0))
    for c in range(3):
        assert all(row[c] is not None for row in grid)


def test_too_few_numbers_raise():
    with pytest.raises(PlacementError, match="row 1"):
        RowPlacer().place(buckets_for([1] * 9), create_rng("py_random", 1))


def test_leftover_numbers_raise():
    with pytest.raises(PlacementError, match="non-empty"):
        RowPlacer().place(buckets_for([3] * 9), create_rng("py_random", 1))
