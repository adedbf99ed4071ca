from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import List, TypeVar


try:  # optional dependency
    import numpy as _np  # type: ignore
except ImportError:  # pragma: no cover - optional
    _np = None


T = TypeVar("T")


@dataclass
class RandomSource:
    engine: str

    def randint(self, a: int, b: int) -> int:
        raise NotImplementedError

    def shuffle(self, arr: List[T]) -> None:
        raise NotImplementedError

    def shuffled_range(self, size: int) -> List[int]:
        """Return 0..size-1 in a fresh random order."""
        order = list(range(size))
        self.shuffle(order)
        return order

    def pop_random(self, pool: List[T]) -> T:
        """Remove and return a uniformly chosen element of ``pool``."""
        if not pool:
            raise IndexError("pop_random from empty pool")
        return pool.pop(self.randint(0, len(pool) - 1))


class PyRandomSource(RandomSource):
    def __init__(self, seed: int):
        super().__init__(engine="py_random")
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def shuffle(self, arr: List[T]) -> None:
        self._rng.shuffle(arr)


class NumpyPCG64Source(RandomSource):  # pragma: no cover - covered when numpy present
    def __init__(self, seed: int):
        if _np is None:
            raise RuntimeError("numpy is not installed; install tambola-book[pcg]")
        super().__init__(engine="numpy_pcg64")
        self._rng = _np.random.Generator(_np.random.PCG64(seed))

    def randint(self, a: int, b: int) -> int:
        return int(self._rng.integers(low=a, high=b + 1))

    def shuffle(self, arr: List[T]) -> None:
        # permute via indices so list elements keep their Python types
        order = self._rng.permutation(len(arr))
        arr[:] = [arr[int(i)] for i in order]


ENGINES = ("py_random", "numpy_pcg64")


def create_rng(engine: str, seed: int) -> RandomSource:
    engine = (engine or "py_random").strip().lower()
    if engine == "py_random":
        return PyRandomSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64Source(seed)
    raise ValueError(f"Unsupported RNG engine: {engine}")


def derive_parallel_seed(base_seed: int, index: int, purpose: str) -> int:
    """Derive per-book seed from base seed, index, and purpose using sha256.

    Returns a 63-bit positive integer suitable for seeding common RNGs.
    """
    s = f"{base_seed}|{index}|{purpose}".encode("utf-8")
    digest = hashlib.sha256(s).digest()
    # take first 8 bytes, mask to 63 bits to ensure non-negative
    val = int.from_bytes(digest[:8], byteorder="big") & ((1 << 63) - 1)
    return val
