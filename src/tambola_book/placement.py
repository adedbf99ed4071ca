"""Placement of allocated column buckets into ticket rows."""

from __future__ import annotations

from typing import List, Optional

from .models import NUMBERS_PER_ROW, TICKET_ROWS
from .rng import RandomSource


class PlacementError(RuntimeError):
    """A ticket grid could not be filled from its buckets."""


class RowPlacer:
    """Fill rows top to bottom, serving columns with the most numbers left first.

    A bucket holding ``k`` numbers must be emptied within the next ``k`` rows,
    so for row ``r`` sizes are scanned from ``rows - r`` down to 1.
    """

    def __init__(self, rows: int = TICKET_ROWS, per_row: int = NUMBERS_PER_ROW):
        self.rows = rows
        self.per_row = per_row

    def place(self, buckets: List[List[int]], rng: RandomSource) -> List[List[Optional[int]]]:
        columns = len(buckets)
        grid: List[List[Optional[int]]] = [[None] * columns for _ in range(self.rows)]
        for r in range(self.rows):
            self._fill_row(grid[r], buckets, self.rows - r, rng)
            if sum(1 for cell in grid[r] if cell is not None) != self.per_row:
                raise PlacementError(f"row {r} could not reach {self.per_row} numbers")
        if any(buckets):
            raise PlacementError("buckets left non-empty after placement")
        return grid

    def _fill_row(
        self,
        row: List[Optional[int]],
        buckets: List[List[int]],
        rows_left: int,
        rng: RandomSource,
    ) -> None:
        filled = 0
        for size in range(rows_left, 0, -1):
            for col in rng.shuffled_range(len(buckets)):
                if row[col] is None and len(buckets[col]) == size:
                    row[col] = buckets[col].pop()
                    filled += 1
                    if filled == self.per_row:
                        return
