"""Multilinear interpolation over the 2^N corners of a hypercube cell."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .interpolation_api import GridInterpolator


def corner_table(ndim: int) -> np.ndarray:
    """``(2**ndim, ndim)`` table of 0/1 flags; row ``c`` is corner ``c``, bit ``ndim-1-d`` is dimension ``d``."""
    corners = np.arange(1 << ndim, dtype=np.int64)
    shifts = np.arange(ndim - 1, -1, -1, dtype=np.int64)
    return ((corners[:, None] >> shifts[None, :]) & 1).astype(np.uint8)


def corner_offsets(bits: np.ndarray, strides: Sequence[int]) -> np.ndarray:
    """Flat-index offset of each corner relative to the cell's base node."""
    return bits.astype(np.intp) @ np.asarray(strides, dtype=np.intp)


def multilinear_many(
    idx: np.ndarray,
    offsets: np.ndarray,
    values: np.ndarray,
    strides: np.ndarray,
    bits: np.ndarray,
    corner_shift: np.ndarray,
) -> np.ndarray:
    """Vectorized corner sum for ``M`` located points.

    Accumulates corner by corner in the same order as the scalar path so
    both produce identical floating-point results.
    """
    base = (idx * strides).sum(axis=1)
    low = 1.0 - offsets
    acc = np.zeros(idx.shape[0], dtype=np.float64)
    for row, shift in zip(bits, corner_shift):
        w = np.ones(idx.shape[0], dtype=np.float64)
        for d, hi in enumerate(row):
            w = w * (offsets[:, d] if hi else low[:, d])
        acc = acc + w * values[base + shift]
    return acc


@dataclass
class MultilinearInterpolator(GridInterpolator):
    """Weighted average of the ``2**N`` corners of the containing cell.

    The weight of a corner is the product over dimensions of ``t_d`` where
    the corner takes the high side and ``1 - t_d`` where it takes the low
    side. Functions that are affine in every dimension are reproduced
    exactly.
    """

    method = "linear"

    def _setup(self) -> None:
        self._bits = corner_table(self.grid.ndim)
        self._corner_shift = corner_offsets(self._bits, self.grid.strides)
        self._corners: Tuple[Tuple[Tuple[bool, ...], int], ...] = tuple(
            (tuple(bool(b) for b in row), int(shift)) for row, shift in zip(self._bits, self._corner_shift)
        )

    @property
    def corner_bits(self) -> np.ndarray:
        return self._bits

    @property
    def corner_shift(self) -> np.ndarray:
        return self._corner_shift

    def node_weights(self, indices: Sequence[int], offsets: Sequence[float]) -> Tuple[List[int], List[float]]:
        base = self.grid.flat_index(indices)
        low = [1.0 - t for t in offsets]
        nodes = []
        weights = []
        for row, shift in self._corners:
            w = 1.0
            for d, hi in enumerate(row):
                w *= offsets[d] if hi else low[d]
            nodes.append(base + shift)
            weights.append(w)
        return nodes, weights

    def evaluate_located_many(self, idx: np.ndarray, offsets: np.ndarray) -> np.ndarray:
        return multilinear_many(idx, offsets, self.lattice.values, self._strides, self._bits, self._corner_shift)
