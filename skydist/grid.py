# skydist/grid.py
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .dtypes import (
    DistanceField,
    DomainField,
    PointPix,
    PointSet,
    PosMap,
    UNASSIGNED,
    UNVISITED,
)


def as_posmap(posmap: ArrayLike) -> PosMap:
    """Flatten a [dec, ra] position map to shape (2, npix), float64, C order."""
    posmap = np.asarray(posmap, dtype=np.float64)
    if posmap.ndim < 2 or posmap.shape[0] != 2:
        raise ValueError(f"posmap must have shape (2, ...), got {posmap.shape}")
    return np.ascontiguousarray(posmap.reshape(2, -1))


def as_points(points: ArrayLike) -> PointSet:
    """Coerce reference points to shape (2, npoint) [dec, ra]."""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1 and points.shape[0] == 2:
        points = points[:, None]
    if points.ndim != 2 or points.shape[0] != 2:
        raise ValueError(f"points must have shape (2, npoint), got {points.shape}")
    return np.ascontiguousarray(points)


def as_axis(pos: ArrayLike, name: str) -> NDArray[np.float64]:
    pos = np.asarray(pos, dtype=np.float64)
    if pos.ndim != 1:
        raise ValueError(f"{name} must be 1D, got shape {pos.shape}")
    return np.ascontiguousarray(pos)


def separable_posmap(ypos: ArrayLike, xpos: ArrayLike) -> PosMap:
    """Expand separable axes into a dense (2, ny, nx) position map."""
    ypos = as_axis(ypos, "ypos")
    xpos = as_axis(xpos, "xpos")
    dec, ra = np.meshgrid(ypos, xpos, indexing="ij")
    return np.stack([dec, ra])


def _nearest_index(axis: NDArray[np.float64], values: NDArray[np.float64]) -> NDArray[np.int32]:
    """Index of the closest axis sample to each value. Axis must be monotonic."""
    n = axis.shape[0]
    descending = n > 1 and axis[-1] < axis[0]
    sorted_axis = axis[::-1] if descending else axis

    hi = np.clip(np.searchsorted(sorted_axis, values), 1, max(n - 1, 1))
    lo = hi - 1
    if n == 1:
        idx = np.zeros(values.shape, dtype=np.intp)
    else:
        # Ties go to the lower sample
        take_hi = np.abs(sorted_axis[hi] - values) < np.abs(values - sorted_axis[lo])
        idx = np.where(take_hi, hi, lo)

    if descending:
        idx = n - 1 - idx
    return idx.astype(np.int32)


def point_anchors(points: ArrayLike, ypos: ArrayLike, xpos: ArrayLike) -> PointPix:
    """
    Nearest pixel of each reference point on a separable grid.

    Each axis is searched independently, so this is exact for the
    axis-aligned grids the separable representation describes. Axes may be
    ascending or descending.

    Returns:
        Integer array of shape (2, npoint) with rows y, x.
    """
    points = as_points(points)
    ypos = as_axis(ypos, "ypos")
    xpos = as_axis(xpos, "xpos")
    return np.stack([
        _nearest_index(ypos, points[0]),
        _nearest_index(xpos, points[1]),
    ])


def alloc_fields(
    npix: int,
    out: Optional[Tuple[DistanceField, DomainField]] = None,
) -> Tuple[DistanceField, DomainField]:
    """Output fields set to the unvisited sentinel. Caller-provided buffers are filled in place."""
    if out is None:
        dists = np.empty(npix, dtype=np.float64)
        domains = np.empty(npix, dtype=np.int32)
    else:
        dists, domains = out
        if dists.size != npix or domains.size != npix:
            raise ValueError(f"output buffers must hold {npix} pixels")
        if dists.dtype != np.float64 or domains.dtype != np.int32:
            raise ValueError("output buffers must be float64 (dists) and int32 (domains)")
        if not (dists.flags.c_contiguous and domains.flags.c_contiguous):
            raise ValueError("output buffers must be C-contiguous")
        dists = dists.reshape(-1)
        domains = domains.reshape(-1)
    dists[:] = UNVISITED
    domains[:] = UNASSIGNED
    return dists, domains
