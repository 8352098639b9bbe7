"""Numba-accelerated batch kernels."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .base import KernelInputs

try:
    from numba import njit
except Exception as exc:  # pragma: no cover - optional dependency
    njit = None
    _NUMBA_IMPORT_ERROR = exc
else:
    _NUMBA_IMPORT_ERROR = None


if njit is not None:

    @njit(cache=True, nogil=True)
    def _locate_numba(bp: np.ndarray, start: int, n: int, x: float, clamp: bool) -> tuple[int, float]:
        # greatest i with bp[i] <= x, clamped to [0, n - 2]
        lo = 0
        hi = n
        while lo < hi:
            mid = (lo + hi) // 2
            if x < bp[start + mid]:
                hi = mid
            else:
                lo = mid + 1
        i = lo - 1
        if i < 0:
            i = 0
        if i > n - 2:
            i = n - 2
        x0 = bp[start + i]
        t = (x - x0) / (bp[start + i + 1] - x0)
        if clamp:
            if t < 0.0:
                t = 0.0
            elif t > 1.0:
                t = 1.0
        return i, t

    @njit(cache=True, nogil=True)
    def _multilinear_numba(
        points: np.ndarray,
        bp: np.ndarray,
        starts: np.ndarray,
        lengths: np.ndarray,
        strides: np.ndarray,
        values: np.ndarray,
        bits: np.ndarray,
        shift: np.ndarray,
        clamp: bool,
    ) -> np.ndarray:
        m, ndim = points.shape
        out = np.empty(m, dtype=np.float64)
        t = np.empty(ndim, dtype=np.float64)
        for p in range(m):
            base = 0
            for d in range(ndim):
                i, td = _locate_numba(bp, starts[d], lengths[d], points[p, d], clamp)
                base += i * strides[d]
                t[d] = td
            acc = 0.0
            for c in range(bits.shape[0]):
                w = 1.0
                for d in range(ndim):
                    if bits[c, d]:
                        w *= t[d]
                    else:
                        w *= 1.0 - t[d]
                acc += w * values[base + shift[c]]
            out[p] = acc
        return out

    @njit(cache=True, nogil=True)
    def _simplicial_numba(
        points: np.ndarray,
        bp: np.ndarray,
        starts: np.ndarray,
        lengths: np.ndarray,
        strides: np.ndarray,
        values: np.ndarray,
        clamp: bool,
    ) -> np.ndarray:
        m, ndim = points.shape
        out = np.empty(m, dtype=np.float64)
        t = np.empty(ndim, dtype=np.float64)
        order = np.empty(ndim, dtype=np.int64)
        for p in range(m):
            node = 0
            for d in range(ndim):
                i, td = _locate_numba(bp, starts[d], lengths[d], points[p, d], clamp)
                node += i * strides[d]
                t[d] = td
            # stable insertion sort, descending by offset
            for d in range(ndim):
                j = d
                while j > 0 and t[order[j - 1]] < t[d]:
                    order[j] = order[j - 1]
                    j -= 1
                order[j] = d
            acc = 0.0
            acc += (1.0 - t[order[0]]) * values[node]
            for k in range(1, ndim):
                node += strides[order[k - 1]]
                acc += (t[order[k - 1]] - t[order[k]]) * values[node]
            node += strides[order[ndim - 1]]
            acc += t[order[ndim - 1]] * values[node]
            out[p] = acc
        return out

    # Prime JIT cache once to avoid a latency spike on the first batch.
    _simplicial_numba(
        np.zeros((1, 1)),
        np.array([0.0, 1.0]),
        np.zeros(1, dtype=np.int64),
        np.full(1, 2, dtype=np.int64),
        np.ones(1, dtype=np.int64),
        np.array([0.0, 1.0]),
        False,
    )


@dataclass
class NumbaKernel:
    """Batch kernel backed by numba-jitted loops."""

    interpolator: object
    inputs: KernelInputs = field(init=False)

    def __post_init__(self) -> None:
        self.inputs = KernelInputs.from_interpolator(self.interpolator)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        k = self.inputs
        pts = np.ascontiguousarray(points, dtype=np.float64)
        if k.method == "linear":
            return _multilinear_numba(
                pts, k.breakpoints, k.starts, k.lengths, k.strides, k.values, k.corner_bits, k.corner_shift, k.clamp
            )
        return _simplicial_numba(pts, k.breakpoints, k.starts, k.lengths, k.strides, k.values, k.clamp)


def build_numba_backend(interpolator):
    if njit is None:
        raise RuntimeError(
            f"Numba backend unavailable: {_NUMBA_IMPORT_ERROR}"
        ) from _NUMBA_IMPORT_ERROR
    return NumbaKernel(interpolator)
