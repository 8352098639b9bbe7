"""N-dimensional multilinear and simplicial interpolation on rectilinear grids."""

from .batch import BatchEvaluator, BatchResult
from .config import InterpConfig
from .errors import DimensionMismatchError, GridError, LatticeError, OutOfBoundsError
from .factory import METHODS, make_interpolator
from .grid import Grid, GridAxis, LocateResult, RegularAxis
from .interpolation_api import GridInterpolator, Interpolator
from .lattice import ValueLattice
from .multilinear import MultilinearInterpolator
from .simplicial import SimplicialInterpolator

__all__ = [
    "BatchEvaluator",
    "BatchResult",
    "InterpConfig",
    "DimensionMismatchError",
    "GridError",
    "LatticeError",
    "OutOfBoundsError",
    "METHODS",
    "make_interpolator",
    "Grid",
    "GridAxis",
    "LocateResult",
    "RegularAxis",
    "GridInterpolator",
    "Interpolator",
    "ValueLattice",
    "MultilinearInterpolator",
    "SimplicialInterpolator",
]
