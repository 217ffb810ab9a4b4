# skydist/buffers.py
from __future__ import annotations

import numpy as np
from numba import njit


# Constants
_EDGE_CAPACITY: int = 0x100       # Starting capacity of edge index buffers
_FRONTIER_CAPACITY: int = 1024    # Starting capacity of wavefront frontiers


@njit(cache=True)
def grow(buf, n):
    """Return ``buf``, or a copy with doubled capacity if slot ``n`` does not fit."""
    cap = buf.shape[0]
    if n < cap:
        return buf
    while cap <= n:
        cap = max(2 * cap, 1)
    out = np.empty(cap, dtype=buf.dtype)
    out[:n] = buf[:n]
    return out


@njit(cache=True)
def push_index(buf, n, i):
    """Append ``i`` at position ``n``. Returns the (possibly new) buffer and length."""
    buf = grow(buf, n)
    buf[n] = i
    return buf, n + 1


@njit(cache=True)
def push_pixel(ys, xs, n, y, x):
    """Append pixel ``(y, x)`` to a frontier stored as two parallel arrays."""
    ys = grow(ys, n)
    xs = grow(xs, n)
    ys[n] = y
    xs[n] = x
    return ys, xs, n + 1


def empty_index_buffer(capacity: int = _EDGE_CAPACITY) -> np.ndarray:
    return np.empty(max(capacity, 1), dtype=np.int64)
