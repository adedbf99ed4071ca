"""Column ranges of a 90-ball Tambola book."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

# 9 + 10*7 + 11 = 90
COLUMN_SIZES: Tuple[int, ...] = (9, 10, 10, 10, 10, 10, 10, 10, 11)


@dataclass(frozen=True)
class NumberRange:
    """Half-open interval ``[start, stop)`` backing one ticket column."""

    column: int
    start: int
    stop: int

    @property
    def size(self) -> int:
        return self.stop - self.start

    def numbers(self) -> List[int]:
        return list(range(self.start, self.stop))

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.start <= value < self.stop


def partition_ranges(
    sizes: Sequence[int] = COLUMN_SIZES, first: int = 1
) -> List[NumberRange]:
    """Split ``first..first+sum(sizes)-1`` into contiguous column ranges."""
    ranges: List[NumberRange] = []
    start = first
    for column, size in enumerate(sizes):
        if size <= 0:
            raise ValueError(f"column {column} size must be positive, got {size}")
        ranges.append(NumberRange(column=column, start=start, stop=start + size))
        start += size
    return ranges


DEFAULT_RANGES: Tuple[NumberRange, ...] = tuple(partition_ranges())
