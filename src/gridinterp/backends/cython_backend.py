"""Cython-accelerated batch kernels."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .base import KernelInputs

try:
    from .. import _cykernels  # type: ignore
except Exception as exc:  # pragma: no cover - optional compiled extension
    _cykernels = None
    _CYTHON_IMPORT_ERROR = exc
else:
    _CYTHON_IMPORT_ERROR = None


@dataclass
class CythonKernel:
    """Batch kernel backed by the compiled ``_cykernels`` extension."""

    interpolator: object
    inputs: KernelInputs = field(init=False)

    def __post_init__(self) -> None:
        self.inputs = KernelInputs.from_interpolator(self.interpolator)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        k = self.inputs
        pts = np.ascontiguousarray(points, dtype=np.float64)
        if k.method == "linear":
            return _cykernels.multilinear(
                pts, k.breakpoints, k.starts, k.lengths, k.strides, k.values, k.corner_bits, k.corner_shift, k.clamp
            )
        return _cykernels.simplicial(pts, k.breakpoints, k.starts, k.lengths, k.strides, k.values, k.clamp)


def build_cython_backend(interpolator):
    if _cykernels is None:
        raise RuntimeError(
            "Cython backend unavailable; build it with: python setup.py build_ext --inplace"
        ) from _CYTHON_IMPORT_ERROR
    return CythonKernel(interpolator)
