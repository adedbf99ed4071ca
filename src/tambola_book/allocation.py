"""Distribution of column numbers across the tickets of a book."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from .models import NUMBERS_PER_TICKET, TICKET_ROWS, TICKETS_PER_BOOK
from .partition import NumberRange
from .rng import RandomSource


class AllocationError(RuntimeError):
    """Allocation finished without satisfying its postcondition."""


@dataclass
class AllocationState:
    """Column pools and per-ticket column buckets during one generation run."""

    pools: List[List[int]]
    buckets: List[List[List[int]]]
    totals: List[int] = field(default_factory=list)

    @classmethod
    def from_ranges(
        cls, ranges: Sequence[NumberRange], tickets: int = TICKETS_PER_BOOK
    ) -> "AllocationState":
        return cls(
            pools=[rng.numbers() for rng in ranges],
            buckets=[[[] for _ in ranges] for _ in range(tickets)],
            totals=[0] * tickets,
        )

    @property
    def ticket_count(self) -> int:
        return len(self.buckets)

    @property
    def column_count(self) -> int:
        return len(self.pools)

    def assign(self, ticket: int, column: int, number: int) -> None:
        self.buckets[ticket][column].append(number)
        self.totals[ticket] += 1

    def bucket_sizes(self, ticket: int) -> List[int]:
        return [len(bucket) for bucket in self.buckets[ticket]]

    def undistributed(self) -> int:
        return sum(len(pool) for pool in self.pools)


class ColumnAllocator:
    """Seeds every bucket, fixes the oversized last column, then runs capped passes."""

    def __init__(
        self,
        passes: int = 4,
        ceiling: int = 2,
        final_ceiling: int = TICKET_ROWS,
        ticket_total: int = NUMBERS_PER_TICKET,
    ):
        self.passes = passes
        self.ceiling = ceiling
        self.final_ceiling = final_ceiling
        self.ticket_total = ticket_total

    def allocate(self, state: AllocationState, rng: RandomSource) -> AllocationState:
        self.seed_buckets(state, rng)
        self.fix_overflow(state, rng)
        for pass_index in range(self.passes):
            self.distribute(state, rng, self.ceiling_for(pass_index))
        self.check(state)
        return state

    def ceiling_for(self, pass_index: int) -> int:
        return self.final_ceiling if pass_index == self.passes - 1 else self.ceiling

    def seed_buckets(self, state: AllocationState, rng: RandomSource) -> None:
        for column, pool in enumerate(state.pools):
            for ticket in range(state.ticket_count):
                state.assign(ticket, column, rng.pop_random(pool))

    def fix_overflow(self, state: AllocationState, rng: RandomSource) -> None:
        last = state.column_count - 1
        ticket = rng.randint(0, state.ticket_count - 1)
        state.assign(ticket, last, state.pools[last].pop())

    def distribute(self, state: AllocationState, rng: RandomSource, ceiling: int) -> None:
        """One pass: at most one number per non-empty column."""
        for column, pool in enumerate(state.pools):
            if not pool:
                continue
            for ticket in rng.shuffled_range(state.ticket_count):
                if (
                    len(state.buckets[ticket][column]) < ceiling
                    and state.totals[ticket] < self.ticket_total
                ):
                    state.assign(ticket, column, pool.pop())
                    break

    def check(self, state: AllocationState) -> None:
        leftover = state.undistributed()
        if leftover:
            raise AllocationError(f"{leftover} number(s) left undistributed")
        for ticket in range(state.ticket_count):
            if state.totals[ticket] != self.ticket_total:
                raise AllocationError(
                    f"ticket {ticket} holds {state.totals[ticket]} numbers, "
                    f"expected {self.ticket_total}"
                )
            sizes = state.bucket_sizes(ticket)
            if min(sizes) < 1 or max(sizes) > self.final_ceiling:
                raise AllocationError(f"ticket {ticket} has column counts {sizes}")
