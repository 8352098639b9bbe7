"""Evaluation configuration for grid interpolators."""

from __future__ import annotations

from dataclasses import dataclass
import math

OUT_OF_BOUNDS_POLICIES = ("extrapolate", "clamp", "error")
BATCH_ERROR_POLICIES = ("raise", "nan")
BACKENDS = ("python", "numpy", "cython", "numba", "jax", "auto")


@dataclass(frozen=True)
class InterpConfig:
    """User-controlled evaluation parameters.

    ``out_of_bounds`` decides what happens outside the grid extent. The
    default ``"extrapolate"`` keeps the boundary cell and lets the fractional
    offset leave ``[0, 1]``, so results continue linearly with the slope of
    that cell. ``"clamp"`` holds the boundary value and ``"error"`` rejects
    the point.
    """

    out_of_bounds: str = "extrapolate"
    bounds_atol: float = 0.0
    batch_errors: str = "raise"
    backend: str = "numpy"
    workers: int = 1
    chunk_size: int = 4096
    profile_timing: bool = False

    def __post_init__(self) -> None:
        if self.out_of_bounds not in OUT_OF_BOUNDS_POLICIES:
            raise ValueError("out_of_bounds must be one of: extrapolate, clamp, error")
        if not math.isfinite(float(self.bounds_atol)) or self.bounds_atol < 0.0:
            raise ValueError("bounds_atol must be finite and >= 0")
        if self.batch_errors not in BATCH_ERROR_POLICIES:
            raise ValueError("batch_errors must be one of: raise, nan")
        if self.backend not in BACKENDS:
            raise ValueError("backend must be one of: python, numpy, cython, numba, jax, auto")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

    @property
    def clamp(self) -> bool:
        return self.out_of_bounds == "clamp"

    @property
    def strict(self) -> bool:
        return self.out_of_bounds == "error"
