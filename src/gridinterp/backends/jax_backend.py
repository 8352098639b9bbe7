"""JAX-backed batch kernels."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import numpy as np

try:
    import jax
    from jax import config as jax_config
    import jax.numpy as jnp
except Exception as exc:  # pragma: no cover - optional dependency
    jax = None
    jax_config = None
    jnp = None
    _JAX_IMPORT_ERROR = exc
else:
    _JAX_IMPORT_ERROR = None
    # Match NumPy float64 results.
    jax_config.update("jax_enable_x64", True)


def _build_jax_fn(interpolator) -> Callable:
    grid = interpolator.grid
    axes = tuple(jnp.asarray(a.breakpoints, dtype=jnp.float64) for a in grid.axes)
    values = jnp.asarray(np.asarray(interpolator.values), dtype=jnp.float64)
    strides = jnp.asarray(grid.strides, dtype=jnp.int64)
    clamp = bool(interpolator.config.clamp)
    ndim = grid.ndim
    linear = interpolator.method == "linear"
    if linear:
        corners = [
            (tuple(bool(b) for b in row), int(shift))
            for row, shift in zip(interpolator.corner_bits, interpolator.corner_shift)
        ]

    def _locate(points: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
        idx = []
        off = []
        for d, bp in enumerate(axes):
            x = points[:, d]
            i = jnp.clip(jnp.searchsorted(bp, x, side="right") - 1, 0, bp.shape[0] - 2)
            x0 = bp[i]
            t = (x - x0) / (bp[i + 1] - x0)
            if clamp:
                t = jnp.clip(t, 0.0, 1.0)
            idx.append(i)
            off.append(t)
        return jnp.stack(idx, axis=1), jnp.stack(off, axis=1)

    def _multilinear(points: jnp.ndarray) -> jnp.ndarray:
        idx, t = _locate(points)
        base = jnp.sum(idx * strides[None, :], axis=1)
        low = 1.0 - t
        acc = jnp.zeros(points.shape[0], dtype=jnp.float64)
        for row, shift in corners:
            w = jnp.ones(points.shape[0], dtype=jnp.float64)
            for d, hi in enumerate(row):
                w = w * (t[:, d] if hi else low[:, d])
            acc = acc + w * values[base + shift]
        return acc

    def _simplicial(points: jnp.ndarray) -> jnp.ndarray:
        idx, t = _locate(points)
        order = jnp.argsort(-t, axis=1, stable=True)
        ts = jnp.take_along_axis(t, order, axis=1)
        step = strides[order]
        node = jnp.sum(idx * strides[None, :], axis=1)
        acc = (1.0 - ts[:, 0]) * values[node]
        for k in range(1, ndim):
            node = node + step[:, k - 1]
            acc = acc + (ts[:, k - 1] - ts[:, k]) * values[node]
        node = node + step[:, ndim - 1]
        return acc + ts[:, ndim - 1] * values[node]

    return jax.jit(_multilinear if linear else _simplicial)


@dataclass
class JaxKernel:
    """Batch kernel compiled with ``jax.jit``; one trace per distinct batch length."""

    interpolator: object
    _fn: Callable = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._fn = _build_jax_fn(self.interpolator)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        pts = jnp.asarray(np.asarray(points, dtype=np.float64))
        return np.asarray(self._fn(pts), dtype=np.float64)


def build_jax_backend(interpolator):
    if jax is None:
        raise RuntimeError(f"JAX backend unavailable: {_JAX_IMPORT_ERROR}") from _JAX_IMPORT_ERROR
    return JaxKernel(interpolator)
