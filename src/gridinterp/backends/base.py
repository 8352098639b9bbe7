"""Backend protocol for batch interpolation kernels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np


class BatchKernel(Protocol):
    def evaluate(self, points: np.ndarray) -> np.ndarray:
        """Evaluate a well-formed ``(M, N)`` float64 array, returning ``M`` values."""
        ...


@dataclass(frozen=True)
class KernelInputs:
    """Flat, contiguous arrays describing one interpolator for compiled kernels.

    Breakpoints of all axes are concatenated; axis ``d`` occupies
    ``breakpoints[starts[d]:starts[d] + lengths[d]]``.
    """

    method: str
    breakpoints: np.ndarray
    starts: np.ndarray
    lengths: np.ndarray
    strides: np.ndarray
    values: np.ndarray
    corner_bits: np.ndarray
    corner_shift: np.ndarray
    clamp: bool

    @classmethod
    def from_interpolator(cls, interpolator) -> "KernelInputs":
        grid = interpolator.grid
        lengths = np.asarray(grid.shape, dtype=np.int64)
        starts = np.zeros_like(lengths)
        starts[1:] = np.cumsum(lengths)[:-1]
        if interpolator.method == "linear":
            bits = np.ascontiguousarray(interpolator.corner_bits, dtype=np.uint8)
            shift = np.ascontiguousarray(interpolator.corner_shift, dtype=np.int64)
        else:
            bits = np.zeros((0, grid.ndim), dtype=np.uint8)
            shift = np.zeros(0, dtype=np.int64)
        return cls(
            method=interpolator.method,
            breakpoints=np.ascontiguousarray(np.concatenate([a.breakpoints for a in grid.axes]), dtype=np.float64),
            starts=starts,
            lengths=lengths,
            strides=np.asarray(grid.strides, dtype=np.int64),
            values=np.ascontiguousarray(interpolator.values, dtype=np.float64),
            corner_bits=bits,
            corner_shift=shift,
            clamp=bool(interpolator.config.clamp),
        )
