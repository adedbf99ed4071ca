"""Book generation: partition, allocate, place, sort."""

from __future__ import annotations

import logging
import secrets
from typing import Iterator, List, Optional, Sequence

from .allocation import AllocationError, AllocationState, ColumnAllocator
from .models import Book, Ticket
from .partition import DEFAULT_RANGES, NumberRange
from .placement import RowPlacer
from .rng import RandomSource, create_rng, derive_parallel_seed
from .sorting import sort_columns
from .verify import check_book

logger = logging.getLogger(__name__)


def new_seed() -> int:
    return secrets.randbits(63)


class BookGenerator:
    """Builds one Tambola book per ``generate()`` call.

    The random source is recreated from ``seed`` on every call, so a generator
    always returns the same book. When ``seed`` is omitted one is drawn from
    the OS entropy pool and kept on the instance for reproduction.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng_engine: str = "py_random",
        max_attempts: int = 50,
        ranges: Sequence[NumberRange] = DEFAULT_RANGES,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.seed = new_seed() if seed is None else int(seed)
        self.rng_engine = rng_engine
        self.max_attempts = max_attempts
        self.ranges = tuple(ranges)
        self.allocator = ColumnAllocator()
        self.placer = RowPlacer()

    def generate(self) -> Book:
        rng = create_rng(self.rng_engine, self.seed)
        state = self.allocate(rng)
        grids = [self.placer.place(buckets, rng) for buckets in state.buckets]
        tickets = tuple(Ticket.from_matrix(sort_columns(grid)) for grid in grids)
        book = Book(tickets=tickets, seed=self.seed)
        check_book(book, self.ranges)
        logger.debug("Generated book for seed %d", self.seed)
        return book

    def allocate(self, rng: RandomSource) -> AllocationState:
        """Run the allocator until its postcondition holds.

        Reruns keep drawing from the same source, so the result is still a
        function of the seed alone.
        """
        last_error: Optional[AllocationError] = None
        for attempt in range(1, self.max_attempts + 1):
            state = AllocationState.from_ranges(self.ranges)
            try:
                return self.allocator.allocate(state, rng)
            except AllocationError as exc:
                last_error = exc
                logger.warning(
                    "Allocation attempt %d/%d for seed %d failed: %s",
                    attempt,
                    self.max_attempts,
                    self.seed,
                    exc,
                )
        raise AllocationError(
            f"Failed to allocate within {self.max_attempts} attempts"
        ) from last_error

    def generate_books(self, count: int) -> Iterator[Book]:
        """Yield ``count`` books seeded from this generator's seed."""
        for index in range(count):
            child = BookGenerator(
                seed=derive_parallel_seed(self.seed, index, "book"),
                rng_engine=self.rng_engine,
                max_attempts=self.max_attempts,
                ranges=self.ranges,
            )
            yield child.generate()


def generate_book(seed: Optional[int] = None, rng_engine: str = "py_random") -> Book:
    return BookGenerator(seed=seed, rng_engine=rng_engine).generate()


def generate_books(
    count: int, seed: Optional[int] = None, rng_engine: str = "py_random"
) -> List[Book]:
    return list(BookGenerator(seed=seed, rng_engine=rng_engine).generate_books(count))
