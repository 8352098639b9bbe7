"""Flat row-major storage of function values at grid nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

from .errors import LatticeError
from .grid import Grid


@dataclass(frozen=True, eq=False)
class ValueLattice:
    """Read-only, row-major values for every node of a grid.

    With ``copy=True`` the values are copied in and owned exclusively. With
    ``copy=False`` the lattice keeps a read-only view onto the caller's
    C-contiguous float64 buffer; the view holds a reference to that buffer,
    so it stays alive as long as any lattice or interpolator does. Writes
    made by the caller through their own array remain visible.
    """

    values: np.ndarray
    shape: Tuple[int, ...]
    copy: bool = True
    shared: bool = field(init=False)

    def __post_init__(self) -> None:
        shape = tuple(int(n) for n in self.shape)
        expected = int(np.prod(shape, dtype=np.int64))
        if self.copy:
            try:
                src = np.array(self.values, dtype=np.float64, order="C")
            except (TypeError, ValueError) as exc:
                raise LatticeError(f"values must be real numbers: {exc}") from exc
        else:
            src = self._share(self.values)
        if src.ndim > 1 and src.shape != shape:
            raise LatticeError(f"values have shape {src.shape}, grid shape is {shape}")
        # reshape of a contiguous array is a view, never a copy
        flat = src.reshape(-1)
        if flat.shape[0] != expected:
            raise LatticeError(
                f"value count {flat.shape[0]} does not match grid shape {shape} ({expected} nodes)"
            )
        view = flat.view()
        view.flags.writeable = False
        object.__setattr__(self, "values", view)
        object.__setattr__(self, "shape", shape)
        object.__setattr__(self, "shared", not self.copy)

    @staticmethod
    def _share(values) -> np.ndarray:
        if not isinstance(values, np.ndarray):
            raise LatticeError("shared values must be a numpy array")
        if values.dtype != np.float64:
            raise LatticeError(f"shared values must be float64, got {values.dtype}")
        if not values.flags.c_contiguous:
            raise LatticeError("shared values must be C-contiguous")
        return values

    @classmethod
    def for_grid(cls, grid: Grid, values, copy: bool = True) -> "ValueLattice":
        return cls(values, grid.shape, copy=copy)

    def __len__(self) -> int:
        return int(self.values.shape[0])

    @property
    def ndim(self) -> int:
        return len(self.shape)

    def as_array(self) -> np.ndarray:
        """Read-only N-d view of the values."""
        return self.values.reshape(self.shape)

    def flat_index(self, indices: Sequence[int]) -> int:
        flat = 0
        for i, n in zip(indices, self.shape):
            flat = flat * n + int(i)
        return flat

    def __getitem__(self, indices: Sequence[int]) -> float:
        return float(self.values[self.flat_index(indices)])
