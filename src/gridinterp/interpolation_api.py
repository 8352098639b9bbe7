"""Shared evaluation surface of the grid interpolators."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, List, Protocol, Sequence, Tuple

import numpy as np

from .backends.factory import build_backend
from .config import InterpConfig
from .errors import LatticeError
from .grid import Grid, LocateResult
from .lattice import ValueLattice


class Interpolator(Protocol):
    def evaluate(self, point: Sequence[float]) -> float:
        ...

    def evaluate_batch(self, points) -> np.ndarray:
        ...


@dataclass
class GridInterpolator:
    """Binds a :class:`Grid` and a :class:`ValueLattice`; read-only after construction.

    Subclasses provide the node weights for one located point
    (:meth:`node_weights`) and the vectorized equivalent
    (:meth:`evaluate_located_many`).
    """

    method: ClassVar[str] = ""

    grid: Grid
    lattice: ValueLattice
    config: InterpConfig = field(default_factory=InterpConfig)

    def __post_init__(self) -> None:
        if tuple(self.lattice.shape) != tuple(self.grid.shape):
            raise LatticeError(
                f"lattice shape {tuple(self.lattice.shape)} does not match grid shape {tuple(self.grid.shape)}"
            )
        self._strides = np.asarray(self.grid.strides, dtype=np.intp)
        self._setup()
        self._kernel = build_backend(self.config.backend, self)

    def _setup(self) -> None:
        """Precompute per-instance tables the kernels read."""

    @property
    def ndim(self) -> int:
        return self.grid.ndim

    @property
    def values(self) -> np.ndarray:
        return self.lattice.values

    @property
    def kernel(self):
        """Batch kernel for ``config.backend``, built at construction."""
        return self._kernel

    def with_config(self, config: InterpConfig) -> "GridInterpolator":
        """Same grid and shared lattice evaluated under another config."""
        if config == self.config:
            return self
        return replace(self, config=config)

    def node_weights(self, indices: Sequence[int], offsets: Sequence[float]) -> Tuple[List[int], List[float]]:
        raise NotImplementedError

    def evaluate_located_many(self, idx: np.ndarray, offsets: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def _offsets(self, located: LocateResult) -> Tuple[float, ...]:
        if self.config.clamp:
            return tuple(min(max(t, 0.0), 1.0) for t in located.offsets)
        return located.offsets

    def locate(self, point) -> LocateResult:
        if self.config.strict:
            point = self.grid.check_point(point, self.config.bounds_atol)
        return self.grid.locate(point)

    def weights(self, point) -> Tuple[np.ndarray, np.ndarray]:
        """Flat lattice indices and weights of the nodes contributing to ``point``."""
        located = self.locate(point)
        nodes, weights = self.node_weights(located.indices, self._offsets(located))
        return np.asarray(nodes, dtype=np.intp), np.asarray(weights, dtype=np.float64)

    def evaluate_coords(self, coords: Sequence[float]) -> float:
        """Evaluate an already validated N-tuple, skipping the strict-bounds check."""
        located = self.grid.locate(coords)
        nodes, weights = self.node_weights(located.indices, self._offsets(located))
        values = self.lattice.values
        acc = 0.0
        for n, w in zip(nodes, weights):
            acc += w * values[n]
        return float(acc)

    def evaluate(self, point) -> float:
        if self.config.strict:
            point = self.grid.check_point(point, self.config.bounds_atol)
        return self.evaluate_coords(point)

    def evaluate_many(self, points: np.ndarray) -> np.ndarray:
        """Vectorized evaluation of a well-formed ``(M, N)`` array."""
        idx, offsets = self.grid.locate_many(points)
        if self.config.clamp:
            offsets = np.clip(offsets, 0.0, 1.0)
        return self.evaluate_located_many(idx, offsets)

    def evaluate_batch_report(self, points):
        from .batch import BatchEvaluator

        return BatchEvaluator(self).run(points)

    def evaluate_batch(self, points) -> np.ndarray:
        return self.evaluate_batch_report(points).values

    def __call__(self, points) -> np.ndarray:
        return self.evaluate_batch(points)

    def check_bounds(self, points, atol: float | None = None) -> np.ndarray:
        tol = self.config.bounds_atol if atol is None else float(atol)
        return self.grid.check_bounds(points, tol)
