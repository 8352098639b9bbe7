"""Simplicial (Kuhn triangulation) interpolation over N+1 simplex vertices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .interpolation_api import GridInterpolator


def simplex_order(offsets: Sequence[float]) -> List[int]:
    """Dimensions sorted by descending offset; ties keep the lower dimension first."""
    return sorted(range(len(offsets)), key=lambda d: -offsets[d])


def simplex_weights(offsets: Sequence[float], order: Sequence[int]) -> List[float]:
    """Barycentric weights of the Kuhn simplex selected by ``order``.

    ``w_0 = 1 - t[o0]``, ``w_k = t[o(k-1)] - t[ok]``, ``w_N = t[o(N-1)]``.
    Inside the cell they are non-negative and sum to one.
    """
    n = len(order)
    weights = [1.0 - offsets[order[0]]]
    for k in range(1, n):
        weights.append(offsets[order[k - 1]] - offsets[order[k]])
    weights.append(offsets[order[n - 1]])
    return weights


def simplicial_many(
    idx: np.ndarray,
    offsets: np.ndarray,
    values: np.ndarray,
    strides: np.ndarray,
) -> np.ndarray:
    """Vectorized simplex evaluation for ``M`` located points."""
    n = idx.shape[1]
    order = np.argsort(-offsets, axis=1, kind="stable")
    ts = np.take_along_axis(offsets, order, axis=1)
    step = strides[order]
    node = (idx * strides).sum(axis=1)
    acc = np.zeros(idx.shape[0], dtype=np.float64)
    acc = acc + (1.0 - ts[:, 0]) * values[node]
    for k in range(1, n):
        node = node + step[:, k - 1]
        acc = acc + (ts[:, k - 1] - ts[:, k]) * values[node]
    node = node + step[:, n - 1]
    acc = acc + ts[:, n - 1] * values[node]
    return acc


@dataclass
class SimplicialInterpolator(GridInterpolator):
    """Interpolate from the N+1 vertices of the Kuhn simplex containing the point.

    Each cell is split into N! simplices, one per ordering of the
    fractional offsets. Sorting the offsets picks the simplex; its vertices
    are reached from the cell's low corner by raising dimensions one at a
    time in sorted order. Cost is O(N log N) per point instead of O(2**N),
    at the price of ignoring the other cell corners.
    """

    method = "simplicial"

    def node_weights(self, indices: Sequence[int], offsets: Sequence[float]) -> Tuple[List[int], List[float]]:
        strides = self.grid.strides
        order = simplex_order(offsets)
        node = self.grid.flat_index(indices)
        nodes = [node]
        for d in order:
            node += strides[d]
            nodes.append(node)
        return nodes, simplex_weights(offsets, order)

    def evaluate_located_many(self, idx: np.ndarray, offsets: np.ndarray) -> np.ndarray:
        return simplicial_many(idx, offsets, self.lattice.values, self._strides)
