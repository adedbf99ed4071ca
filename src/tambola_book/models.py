"""Immutable ticket and book values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

TICKET_ROWS = 3
TICKET_COLUMNS = 9
NUMBERS_PER_ROW = 5
NUMBERS_PER_TICKET = TICKET_ROWS * NUMBERS_PER_ROW
TICKETS_PER_BOOK = 6

Cell = Optional[int]
Row = Tuple[Cell, ...]


@dataclass(frozen=True)
class Ticket:
    """A 3x9 grid; ``None`` marks a blank cell."""

    rows: Tuple[Row, ...]

    @classmethod
    def from_matrix(cls, matrix: Sequence[Sequence[Cell]]) -> "Ticket":
        if not isinstance(matrix, (list, tuple)) or any(
            not isinstance(row, (list, tuple)) for row in matrix
        ):
            raise ValueError("ticket must be a list of rows")
        if len(matrix) != TICKET_ROWS or any(len(row) != TICKET_COLUMNS for row in matrix):
            raise ValueError(f"ticket must be {TICKET_ROWS}x{TICKET_COLUMNS}")
        for row in matrix:
            for cell in row:
                if cell is not None and (isinstance(cell, bool) or not isinstance(cell, int)):
                    raise ValueError(f"ticket cell must be an integer or null, got {cell!r}")
        return cls(rows=tuple(tuple(cell or None for cell in row) for row in matrix))

    def row_count(self, r: int) -> int:
        return sum(1 for cell in self.rows[r] if cell is not None)

    def column(self, c: int) -> Tuple[Cell, ...]:
        return tuple(row[c] for row in self.rows)

    def column_values(self, c: int) -> List[int]:
        """Filled values of column ``c`` read top to bottom."""
        return [cell for cell in self.column(c) if cell is not None]

    def numbers(self) -> List[int]:
        return [cell for row in self.rows for cell in row if cell is not None]

    @property
    def filled_count(self) -> int:
        return len(self.numbers())

    def as_matrix(self) -> List[List[Cell]]:
        return [list(row) for row in self.rows]


@dataclass(frozen=True)
class Book:
    tickets: Tuple[Ticket, ...]
    seed: Optional[int] = None

    def __iter__(self):
        return iter(self.tickets)

    def numbers(self) -> List[int]:
        return [x for ticket in self.tickets for x in ticket.numbers()]

    def as_matrices(self) -> List[List[List[Cell]]]:
        return [ticket.as_matrix() for ticket in self.tickets]
