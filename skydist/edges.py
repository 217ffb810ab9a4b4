# skydist/edges.py
from __future__ import annotations

import numpy as np
from numba import njit
from numpy.typing import ArrayLike

from .buffers import _EDGE_CAPACITY, empty_index_buffer, push_index
from .dtypes import EdgeIndices, LabelMap, Mask


@njit(cache=True)
def _scan_border(flags, buf):
    """
    Emit flagged pixels on the grid border, each pixel once.

    Order: top row, bottom row, left column, right column. The column scans
    skip the corner rows already covered by the row scans.
    """
    ny, nx = flags.shape
    n = 0
    for x in range(nx):
        if flags[0, x]:
            buf, n = push_index(buf, n, x)
    if ny > 1:
        for x in range(nx):
            if flags[ny - 1, x]:
                buf, n = push_index(buf, n, (ny - 1) * nx + x)
    for y in range(1, ny - 1):
        if flags[y, 0]:
            buf, n = push_index(buf, n, y * nx)
    if nx > 1:
        for y in range(1, ny - 1):
            if flags[y, nx - 1]:
                buf, n = push_index(buf, n, y * nx + nx - 1)
    return buf, n


@njit(cache=True)
def _mask_edges(mask, buf):
    ny, nx = mask.shape
    # Beyond the grid counts as nonzero, so every background border pixel is an edge
    buf, n = _scan_border(mask == 0, buf)
    for y in range(1, ny - 1):
        for x in range(1, nx - 1):
            if mask[y, x] == 0 and (
                mask[y, x - 1] != 0 or mask[y, x + 1] != 0
                or mask[y - 1, x] != 0 or mask[y + 1, x] != 0
            ):
                buf, n = push_index(buf, n, y * nx + x)
    return buf, n


@njit(cache=True)
def _labeled_edges(labels, buf):
    ny, nx = labels.shape
    # Beyond the grid counts as a different label
    buf, n = _scan_border(labels != 0, buf)
    for y in range(1, ny - 1):
        for x in range(1, nx - 1):
            lab = labels[y, x]
            if lab != 0 and (
                labels[y, x - 1] != lab or labels[y, x + 1] != lab
                or labels[y - 1, x] != lab or labels[y + 1, x] != lab
            ):
                buf, n = push_index(buf, n, y * nx + x)
    return buf, n


def as_mask(mask: ArrayLike) -> Mask:
    """Normalize any nonzero/zero mask to a C-contiguous (ny, nx) uint8 array of 0s and 1s."""
    mask = np.asarray(mask)
    if mask.ndim != 2:
        raise ValueError(f"mask must be 2D (ny, nx), got shape {mask.shape}")
    return np.ascontiguousarray(mask != 0, dtype=np.uint8)


def as_labels(labels: ArrayLike) -> LabelMap:
    """Label map as a C-contiguous (ny, nx) integer array, keeping the caller's integer dtype."""
    labels = np.asarray(labels)
    if labels.ndim != 2:
        raise ValueError(f"labels must be 2D (ny, nx), got shape {labels.shape}")
    if labels.dtype == np.bool_:
        labels = labels.astype(np.uint8)
    elif labels.dtype.kind not in "iu":
        raise ValueError(f"labels must have an integer dtype, got {labels.dtype}")
    return np.ascontiguousarray(labels)


def find_edges(mask: ArrayLike, capacity: int = _EDGE_CAPACITY) -> EdgeIndices:
    """
    Find the boundary pixels of the zero regions of a mask.

    These are the 0-valued pixels with at least one nonzero 4-neighbor.
    Pixels outside the grid count as nonzero, since it is unknown how the
    map wraps.

    Returns:
        Flattened indices (y*nx + x), border pixels first, then interior
        pixels in raster order.
    """
    buf, n = _mask_edges(as_mask(mask), empty_index_buffer(capacity))
    return buf[:n].copy()


def find_edges_labeled(labels: ArrayLike, capacity: int = _EDGE_CAPACITY) -> EdgeIndices:
    """
    Find the boundary pixels of the labeled regions of a label map.

    These are the nonzero pixels with at least one 4-neighbor carrying a
    different label. Pixels outside the grid count as a different label.
    """
    buf, n = _labeled_edges(as_labels(labels), empty_index_buffer(capacity))
    return buf[:n].copy()
