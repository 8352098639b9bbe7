"""Exception types raised by grid construction and evaluation."""

from __future__ import annotations


class GridError(ValueError):
    """An axis or grid violates its construction invariants."""


class LatticeError(ValueError):
    """Value storage does not match the grid or cannot be shared."""


class DimensionMismatchError(ValueError):
    """A query point has the wrong number of coordinates."""

    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"query point has {got} coordinates, grid has {expected} dimensions")
        self.expected = expected
        self.got = got


class OutOfBoundsError(ValueError):
    """A query coordinate lies outside the grid in strict mode."""

    def __init__(self, dim: int, value: float, lo: float, hi: float) -> None:
        super().__init__(f"coordinate {value!r} in dimension {dim} is outside [{lo!r}, {hi!r}]")
        self.dim = dim
        self.value = value
        self.lo = lo
        self.hi = hi
