from __future__ import annotations

from collections import Counter
from typing import Dict, List, Sequence

from .models import (
    NUMBERS_PER_ROW,
    NUMBERS_PER_TICKET,
    TICKET_COLUMNS,
    TICKET_ROWS,
    TICKETS_PER_BOOK,
    Book,
)
from .partition import DEFAULT_RANGES, NumberRange


class BookInvariantError(RuntimeError):
    def __init__(self, violations: List[str]):
        self.violations = violations
        super().__init__("; ".join(violations))


def column_sizes(book: Book) -> List[List[int]]:
    return [
        [len(ticket.column_values(c)) for c in range(TICKET_COLUMNS)] for ticket in book.tickets
    ]


def verify_book(
    book: Book, ranges: Sequence[NumberRange] = DEFAULT_RANGES
) -> Dict[str, object]:
    """Check every ticket and book invariant and report the outcome per check."""
    violations: List[str] = []
    ok = {
        "ok_ticket_count": True,
        "ok_cell_counts": True,
        "ok_row_counts": True,
        "ok_column_counts": True,
        "ok_column_ranges": True,
        "ok_columns_ascending": True,
        "ok_coverage": True,
    }

    def fail(check: str, message: str) -> None:
        ok[check] = False
        violations.append(message)

    if len(book.tickets) != TICKETS_PER_BOOK:
        fail("ok_ticket_count", f"book has {len(book.tickets)} tickets, expected {TICKETS_PER_BOOK}")

    for t_idx, ticket in enumerate(book.tickets):
        if ticket.filled_count != NUMBERS_PER_TICKET:
            fail("ok_cell_counts", f"ticket {t_idx}: {ticket.filled_count} numbers")
        for r in range(TICKET_ROWS):
            if ticket.row_count(r) != NUMBERS_PER_ROW:
                fail("ok_row_counts", f"ticket {t_idx}: row {r} has {ticket.row_count(r)} numbers")
        for c, rng in enumerate(ranges):
            values = ticket.column_values(c)
            if not 1 <= len(values) <= TICKET_ROWS:
                fail("ok_column_counts", f"ticket {t_idx}: column {c} has {len(values)} numbers")
            if any(v not in rng for v in values):
                fail("ok_column_ranges", f"ticket {t_idx}: column {c} has value out of range")
            if any(a >= b for a, b in zip(values, values[1:])):
                fail("ok_columns_ascending", f"ticket {t_idx}: column {c} not ascending")

    counts = Counter(book.numbers())
    expected = set(range(ranges[0].start, ranges[-1].stop))
    duplicates = sorted(x for x, n in counts.items() if n > 1)
    missing = sorted(expected - set(counts))
    if duplicates:
        fail("ok_coverage", f"duplicate numbers {duplicates[:5]}")
    if missing:
        fail("ok_coverage", f"missing numbers {missing[:5]}")

    return {
        **ok,
        "ok": not violations,
        "violations": violations,
        "column_sizes": column_sizes(book),
        "seed": book.seed,
    }


def check_book(book: Book, ranges: Sequence[NumberRange] = DEFAULT_RANGES) -> None:
    report = verify_book(book, ranges)
    if not report["ok"]:
        raise BookInvariantError(list(report["violations"]))  # type: ignore[arg-type]
