"""Default NumPy backend for batch kernels."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class NumpyKernel:
    """Vectorized locate and weighting over the whole batch."""

    interpolator: object

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        return self.interpolator.evaluate_many(points)


@dataclass
class PythonKernel:
    """Per-point loop over the scalar reference path."""

    interpolator: object

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        evaluate = self.interpolator.evaluate_coords
        return np.array([evaluate(tuple(p)) for p in np.asarray(points).tolist()], dtype=np.float64)


def build_numpy_backend(interpolator):
    return NumpyKernel(interpolator)


def build_python_backend(interpolator):
    return PythonKernel(interpolator)
