"""Rectilinear grid axes and the per-dimension locate step."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
import math
from typing import Iterable, Sequence, Tuple, Union

import numpy as np

from .errors import DimensionMismatchError, GridError, OutOfBoundsError


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class GridAxis:
    """Strictly increasing breakpoints along one dimension."""

    breakpoints: np.ndarray
    _points: list = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            arr = np.array(self.breakpoints, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise GridError(f"axis breakpoints must be real numbers: {exc}") from exc
        if arr.ndim != 1:
            raise GridError("axis breakpoints must be one-dimensional")
        if arr.shape[0] < 2:
            raise GridError("axis must contain at least 2 breakpoints")
        if not np.isfinite(arr).all():
            raise GridError("axis breakpoints must be finite")
        if not (np.diff(arr) > 0.0).all():
            raise GridError("axis breakpoints must be strictly increasing")
        object.__setattr__(self, "breakpoints", _freeze(arr))
        object.__setattr__(self, "_points", arr.tolist())

    def __len__(self) -> int:
        return len(self._points)

    @property
    def lo(self) -> float:
        return self._points[0]

    @property
    def hi(self) -> float:
        return self._points[-1]

    def locate(self, x: float) -> Tuple[int, float]:
        """Return ``(i, t)`` with ``breakpoint[i] <= x`` and ``t`` the fractional offset.

        ``i`` is clamped to ``[0, len - 2]``; outside the axis ``t`` leaves
        ``[0, 1]``.
        """
        pts = self._points
        i = bisect_right(pts, x) - 1
        i = min(max(i, 0), len(pts) - 2)
        x0 = pts[i]
        return i, (x - x0) / (pts[i + 1] - x0)

    def locate_many(self, xs: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        bp = self.breakpoints
        idx = np.clip(np.searchsorted(bp, xs, side="right") - 1, 0, bp.shape[0] - 2)
        x0 = bp[idx]
        return idx, (xs - x0) / (bp[idx + 1] - x0)


@dataclass(frozen=True, eq=False)
class RegularAxis:
    """Uniformly spaced axis ``start + k * step`` for ``k < size``, located in O(1)."""

    start: float
    step: float
    size: int
    breakpoints: np.ndarray = field(init=False, repr=False)
    _points: list = field(init=False, repr=False)

    def __post_init__(self) -> None:
        start = float(self.start)
        step = float(self.step)
        size = int(self.size)
        if not (math.isfinite(start) and math.isfinite(step)):
            raise GridError("regular axis start and step must be finite")
        if step <= 0.0:
            raise GridError("regular axis step must be > 0")
        if size < 2:
            raise GridError("axis must contain at least 2 breakpoints")
        arr = start + step * np.arange(size, dtype=np.float64)
        if not np.isfinite(arr).all() or not (np.diff(arr) > 0.0).all():
            raise GridError("regular axis breakpoints must be finite and strictly increasing")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "step", step)
        object.__setattr__(self, "size", size)
        object.__setattr__(self, "breakpoints", _freeze(arr))
        object.__setattr__(self, "_points", arr.tolist())

    def __len__(self) -> int:
        return self.size

    @property
    def lo(self) -> float:
        return self._points[0]

    @property
    def hi(self) -> float:
        return self._points[-1]

    def locate(self, x: float) -> Tuple[int, float]:
        pts = self._points
        last = self.size - 2
        q = (x - self.start) / self.step
        if not math.isfinite(q):
            i = last if not q < 0 else 0
        else:
            i = min(max(int(math.floor(q)), 0), last)
            # floor() can land one cell off when x sits on a breakpoint
            if i < last and pts[i + 1] <= x:
                i += 1
            elif i > 0 and pts[i] > x:
                i -= 1
        x0 = pts[i]
        return i, (x - x0) / (pts[i + 1] - x0)

    def locate_many(self, xs: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        bp = self.breakpoints
        last = self.size - 2
        with np.errstate(invalid="ignore"):
            q = np.floor((xs - self.start) / self.step)
            q = np.where(np.isnan(q), float(last), q)
            idx = np.clip(q, 0, last).astype(np.intp)
            idx = np.where((idx < last) & (bp[np.minimum(idx + 1, last + 1)] <= xs), idx + 1, idx)
            idx = np.where((idx > 0) & (bp[idx] > xs), idx - 1, idx)
        x0 = bp[idx]
        return idx, (xs - x0) / (bp[idx + 1] - x0)


Axis = Union[GridAxis, RegularAxis]


@dataclass(frozen=True)
class LocateResult:
    """Per-dimension left-breakpoint indices and fractional offsets for one point."""

    indices: Tuple[int, ...]
    offsets: Tuple[float, ...]

    def __iter__(self):
        return iter(zip(self.indices, self.offsets))

    def __len__(self) -> int:
        return len(self.indices)

    def inside(self) -> bool:
        return all(0.0 <= t <= 1.0 for t in self.offsets)


def as_axis(axis: Union[Axis, Sequence[float], np.ndarray]) -> Axis:
    if isinstance(axis, (GridAxis, RegularAxis)):
        return axis
    return GridAxis(axis)


@dataclass(frozen=True, eq=False)
class Grid:
    """Ordered, immutable collection of N axes."""

    axes: Tuple[Axis, ...]
    shape: Tuple[int, ...] = field(init=False)
    strides: Tuple[int, ...] = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.axes, (GridAxis, RegularAxis)):
            raise GridError("grid expects a sequence of axes, got a single axis")
        try:
            axes = tuple(as_axis(a) for a in self.axes)
        except TypeError as exc:
            raise GridError(f"grid expects a sequence of axes: {exc}") from exc
        if not axes:
            raise GridError("grid must have at least one axis")
        shape = tuple(len(a) for a in axes)
        strides = [1] * len(shape)
        for d in range(len(shape) - 2, -1, -1):
            strides[d] = strides[d + 1] * shape[d + 1]
        object.__setattr__(self, "axes", axes)
        object.__setattr__(self, "shape", shape)
        object.__setattr__(self, "strides", tuple(strides))

    @classmethod
    def from_axes(cls, axes: Iterable[Union[Axis, Sequence[float], np.ndarray]]) -> "Grid":
        if isinstance(axes, Grid):
            return axes
        if isinstance(axes, (GridAxis, RegularAxis)):
            return cls((axes,))
        return cls(tuple(axes))

    @property
    def ndim(self) -> int:
        return len(self.axes)

    @property
    def size(self) -> int:
        return int(np.prod(self.shape, dtype=np.int64))

    @property
    def bounds(self) -> Tuple[Tuple[float, float], ...]:
        return tuple((a.lo, a.hi) for a in self.axes)

    def as_point(self, point) -> Tuple[float, ...]:
        """Coerce ``point`` to an N-tuple of floats."""
        arr = np.asarray(point, dtype=np.float64)
        if arr.ndim == 0:
            arr = arr.reshape(1)
        if arr.ndim != 1 or arr.shape[0] != self.ndim:
            raise DimensionMismatchError(self.ndim, int(arr.size))
        return tuple(arr.tolist())

    def flat_index(self, indices: Sequence[int]) -> int:
        return sum(i * s for i, s in zip(indices, self.strides))

    def locate(self, point) -> LocateResult:
        coords = self.as_point(point)
        located = [axis.locate(x) for axis, x in zip(self.axes, coords)]
        return LocateResult(
            indices=tuple(i for i, _ in located),
            offsets=tuple(t for _, t in located),
        )

    def locate_many(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Vectorized locate over an ``(M, N)`` array; returns index and offset arrays."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != self.ndim:
            raise DimensionMismatchError(self.ndim, int(points.shape[-1]) if points.ndim else 1)
        idx = np.empty(points.shape, dtype=np.intp)
        off = np.empty(points.shape, dtype=np.float64)
        for d, axis in enumerate(self.axes):
            idx[:, d], off[:, d] = axis.locate_many(points[:, d])
        return idx, off

    def check_point(self, point, atol: float = 0.0) -> Tuple[float, ...]:
        """Raise :class:`OutOfBoundsError` for the first coordinate outside the grid."""
        coords = self.as_point(point)
        for d, (axis, x) in enumerate(zip(self.axes, coords)):
            if not (axis.lo - atol <= x <= axis.hi + atol):
                raise OutOfBoundsError(d, x, axis.lo, axis.hi)
        return coords

    def check_bounds(self, points, atol: float = 0.0) -> np.ndarray:
        """Return a boolean mask, True where a point has any coordinate out of bounds."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1 and self.ndim != 1:
            points = points[None, :]
        elif points.ndim == 1:
            points = points[:, None]
        if points.ndim != 2 or points.shape[1] != self.ndim:
            raise DimensionMismatchError(self.ndim, int(points.shape[-1]))
        lo = np.array([a.lo for a in self.axes]) - atol
        hi = np.array([a.hi for a in self.axes]) + atol
        # NaN fails both comparisons and counts as outside
        inside = (points >= lo) & (points <= hi)
        return ~inside.all(axis=1)
