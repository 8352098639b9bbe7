"""Batch evaluation of many query points against one interpolator."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from time import perf_counter
from typing import Dict, Tuple

import numpy as np

from .config import InterpConfig
from .errors import DimensionMismatchError


@dataclass
class BatchResult:
    """Results in input order; ``errors`` maps point index to the exception it raised."""

    values: np.ndarray
    errors: Dict[int, Exception] = field(default_factory=dict)

    def __len__(self) -> int:
        return int(self.values.shape[0])

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class BatchEvaluator:
    """Drives one interpolator over a sequence of points.

    Points are independent: well-formed ones are evaluated by the
    interpolator's batch kernel, optionally split into chunks across a
    thread pool. Malformed or (in strict mode) out-of-bounds points either
    abort the batch or leave NaN in their slot, per ``batch_errors``.

    An explicit ``config`` overrides the interpolator's own; when its
    ``out_of_bounds`` or ``backend`` differ, evaluation runs on a rebound
    interpolator sharing the same grid and lattice.
    """

    interpolator: object
    config: InterpConfig | None = None

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = self.interpolator.config
        base = self.interpolator.config
        if (self.config.out_of_bounds, self.config.backend) != (base.out_of_bounds, base.backend):
            self.interpolator = self.interpolator.with_config(self.config)

    def _coerce(self, points) -> Tuple[np.ndarray, np.ndarray, Dict[int, Exception]]:
        grid = self.interpolator.grid
        ndim = grid.ndim
        errors: Dict[int, Exception] = {}
        try:
            arr = np.asarray(points, dtype=np.float64)
        except (TypeError, ValueError):
            arr = None

        if arr is not None and arr.ndim == 2:
            if arr.shape[1] == ndim:
                return arr, np.ones(arr.shape[0], dtype=bool), errors
            for i in range(arr.shape[0]):
                errors[i] = DimensionMismatchError(ndim, int(arr.shape[1]))
            return np.full((arr.shape[0], ndim), np.nan), np.zeros(arr.shape[0], dtype=bool), errors

        if arr is not None and arr.ndim == 1:
            # a flat sequence is a sequence of one-coordinate points
            if ndim == 1:
                return arr[:, None], np.ones(arr.shape[0], dtype=bool), errors
            for i in range(arr.shape[0]):
                errors[i] = DimensionMismatchError(ndim, 1)
            return np.full((arr.shape[0], ndim), np.nan), np.zeros(arr.shape[0], dtype=bool), errors

        if arr is not None and arr.ndim == 0:
            raise ValueError("points must be a sequence of query points")

        # ragged or mixed input: validate point by point
        points = list(points)
        out = np.full((len(points), ndim), np.nan)
        valid = np.zeros(len(points), dtype=bool)
        for i, p in enumerate(points):
            try:
                out[i] = grid.as_point(p)
            except (TypeError, ValueError) as exc:
                errors[i] = exc
            else:
                valid[i] = True
        return out, valid, errors

    def _check_bounds(self, pts: np.ndarray, valid: np.ndarray, errors: Dict[int, Exception]) -> None:
        grid = self.interpolator.grid
        atol = self.config.bounds_atol
        rows = np.flatnonzero(valid)
        outside = grid.check_bounds(pts[rows], atol) if rows.size else np.zeros(0, dtype=bool)
        for i in rows[outside]:
            try:
                grid.check_point(pts[i], atol)
            except ValueError as exc:
                errors[int(i)] = exc
            valid[i] = False

    def _evaluate(self, pts: np.ndarray) -> np.ndarray:
        kernel = self.interpolator.kernel
        n = pts.shape[0]
        chunk = self.config.chunk_size
        if self.config.workers == 1 or n <= chunk:
            return np.asarray(kernel.evaluate(pts), dtype=np.float64)

        res = np.empty(n, dtype=np.float64)
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = {executor.submit(kernel.evaluate, pts[s:s + chunk]): s for s in range(0, n, chunk)}
            for future in as_completed(futures):
                s = futures[future]
                res[s:s + chunk] = future.result()
        return res

    def run(self, points) -> BatchResult:
        t0 = perf_counter()
        pts, valid, errors = self._coerce(points)
        if self.config.strict:
            self._check_bounds(pts, valid, errors)
        if errors and self.config.batch_errors == "raise":
            raise errors[min(errors)]

        out = np.full(pts.shape[0], np.nan, dtype=np.float64)
        rows = np.flatnonzero(valid)
        if rows.size:
            good = pts if rows.size == pts.shape[0] else pts[rows]
            out[rows] = self._evaluate(np.ascontiguousarray(good))

        if self.config.profile_timing:
            print(
                f"timing profile (s): total={perf_counter() - t0:.3f}, points={pts.shape[0]}, "
                f"errors={len(errors)}, backend={self.config.backend}, workers={self.config.workers}"
            )
        return BatchResult(values=out, errors=dict(sorted(errors.items())))
