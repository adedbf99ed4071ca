from __future__ import annotations

from typing import List, Optional


def sort_columns(grid: List[List[Optional[int]]]) -> List[List[Optional[int]]]:
    """Sort each column's filled cells ascending in place, keeping blanks where they are."""
    if not grid:
        return grid
    for c in range(len(grid[0])):
        filled_rows = [r for r in range(len(grid)) if grid[r][c] is not None]
        values = sorted(grid[r][c] for r in filled_rows)  # type: ignore[type-var]
        for r, value in zip(filled_rows, values):
            grid[r][c] = value
    return grid
