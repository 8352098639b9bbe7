"""Construct interpolators from plain axes and values."""

from __future__ import annotations

from typing import Dict, Type

from .config import InterpConfig
from .grid import Grid
from .interpolation_api import GridInterpolator
from .lattice import ValueLattice
from .multilinear import MultilinearInterpolator
from .simplicial import SimplicialInterpolator

METHODS: Dict[str, Type[GridInterpolator]] = {
    "linear": MultilinearInterpolator,
    "multilinear": MultilinearInterpolator,
    "simplicial": SimplicialInterpolator,
    "simplex": SimplicialInterpolator,
}


def make_interpolator(
    axes,
    values,
    method: str = "linear",
    config: InterpConfig | None = None,
    *,
    copy: bool = True,
    **config_kwargs,
) -> GridInterpolator:
    """Validate ``axes`` and ``values`` and bind them to the chosen algorithm.

    ``values`` is either flat in row-major order (first axis slowest) or
    already shaped like the grid. ``copy=False`` shares the caller's
    C-contiguous float64 buffer instead of copying it. Extra keyword
    arguments build an :class:`InterpConfig` when ``config`` is not given.
    """
    try:
        cls = METHODS[method]
    except KeyError:
        raise ValueError(f"Unknown method: {method}") from None
    if config is None:
        config = InterpConfig(**config_kwargs)
    elif config_kwargs:
        raise ValueError("Provide either config or config keyword arguments, not both")
    grid = Grid.from_axes(axes)
    lattice = ValueLattice.for_grid(grid, values, copy=copy)
    return cls(grid, lattice, config)
