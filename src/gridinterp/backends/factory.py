"""Backend factory for batch interpolation kernels."""

from __future__ import annotations

from .cython_backend import build_cython_backend
from .jax_backend import build_jax_backend
from .numba_backend import build_numba_backend
from .numpy_backend import build_numpy_backend, build_python_backend


def build_backend(name: str, interpolator):
    if name == "numpy":
        return build_numpy_backend(interpolator)
    if name == "python":
        return build_python_backend(interpolator)
    if name == "cython":
        return build_cython_backend(interpolator)
    if name == "numba":
        return build_numba_backend(interpolator)
    if name == "jax":
        return build_jax_backend(interpolator)
    if name == "auto":
        try:
            return build_cython_backend(interpolator)
        except RuntimeError:
            pass
        try:
            return build_numba_backend(interpolator)
        except RuntimeError:
            return build_numpy_backend(interpolator)
    raise ValueError(f"Unknown backend: {name}")
