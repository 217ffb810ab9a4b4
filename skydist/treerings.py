# skydist/treerings.py
"""
Approximate nearest-point distance fields by wavefront relaxation.

Instead of comparing every pixel with every point, each point is planted at
its anchor pixel and its domain grows outwards ring by ring. In each pass the
pixels updated in the previous pass offer their point to their four
neighbors; a neighbor switches to that point if it is strictly closer than
its current one, and is then queued for the next pass. The process stops
when a pass changes nothing.

This is O(npix) up to the number of times a pixel gets improved, and needs
no heap. The price is that a domain narrower than a pixel can be cut off
before it reaches pixels it should own, which leaves a tiny error in the
distance there.

Passes depend on the domain labels committed by the previous pass, so the
relaxation is sequential.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numba import njit
from numpy.typing import ArrayLike, NDArray

from .buffers import _FRONTIER_CAPACITY, push_pixel
from .dtypes import DistanceField, DistanceResult, DomainField, PointPix
from .grid import alloc_fields, as_axis, as_points, point_anchors
from .hooks import Hook, timed
from .kernels import vincenty


logger = logging.getLogger(__name__)

# Neighbor offsets (dy, dx): left, right, up, down
_NEIGHBORS = np.array([[0, -1], [0, 1], [-1, 0], [1, 0]], dtype=np.int64)


@dataclass
class Frontier:
    """Growable list of (y, x) pixels, stored as two parallel int32 arrays."""
    ys: NDArray[np.int32]
    xs: NDArray[np.int32]
    n: int = 0

    @classmethod
    def empty(cls, capacity: int = _FRONTIER_CAPACITY) -> "Frontier":
        capacity = max(capacity, 1)
        return cls(np.empty(capacity, dtype=np.int32), np.empty(capacity, dtype=np.int32))

    def __len__(self) -> int:
        return self.n

    @property
    def capacity(self) -> int:
        return self.ys.shape[0]

    def pixels(self) -> Tuple[NDArray[np.int32], NDArray[np.int32]]:
        return self.ys[:self.n], self.xs[:self.n]


@dataclass
class WavefrontState:
    """Everything one wavefront run reads and writes."""
    ny: int
    nx: int
    xpos: NDArray[np.float64]
    pix_cos_dec: NDArray[np.float64]    # per row
    pix_sin_dec: NDArray[np.float64]
    point_ra: NDArray[np.float64]
    point_cos_dec: NDArray[np.float64]  # per point
    point_sin_dec: NDArray[np.float64]
    dists: DistanceField                # flat, ny*nx
    domains: DomainField
    current: Frontier
    next: Frontier
    wrap_y: bool = False
    wrap_x: bool = True
    iteration: int = 0

    @classmethod
    def create(
        cls,
        ypos: NDArray[np.float64],
        xpos: NDArray[np.float64],
        points: NDArray[np.float64],
        wrap_y: bool = False,
        wrap_x: bool = True,
        out: Optional[Tuple[DistanceField, DomainField]] = None,
        capacity: int = _FRONTIER_CAPACITY,
    ) -> "WavefrontState":
        ny, nx = ypos.shape[0], xpos.shape[0]
        dists, domains = alloc_fields(ny * nx, out)
        return cls(
            ny=ny,
            nx=nx,
            xpos=xpos,
            pix_cos_dec=np.cos(ypos),
            pix_sin_dec=np.sin(ypos),
            point_ra=np.ascontiguousarray(points[1]),
            point_cos_dec=np.cos(points[0]),
            point_sin_dec=np.sin(points[0]),
            dists=dists,
            domains=domains,
            current=Frontier.empty(capacity),
            next=Frontier.empty(capacity),
            wrap_y=wrap_y,
            wrap_x=wrap_x,
        )


@njit(cache=True)
def _seed_kernel(point_y, point_x, point_ra, point_cos_dec, point_sin_dec,
                 xpos, pix_cos_dec, pix_sin_dec, nx, dists, domains, ys, xs, n):
    for i in range(point_y.shape[0]):
        y = point_y[i]
        x = point_x[i]
        pix = y * nx + x
        d = vincenty(point_ra[i], point_cos_dec[i], point_sin_dec[i],
                     xpos[x], pix_cos_dec[y], pix_sin_dec[y])
        # Points sharing an anchor: the first of the closest ones keeps it
        if d < dists[pix]:
            dists[pix] = d
            domains[pix] = i
            ys, xs, n = push_pixel(ys, xs, n, y, x)
    return ys, xs, n


@njit(cache=True)
def _relax_kernel(curr_ys, curr_xs, curr_n, ny, nx, wrap_y, wrap_x,
                  point_ra, point_cos_dec, point_sin_dec,
                  xpos, pix_cos_dec, pix_sin_dec, dists, domains, ys, xs, n):
    for k in range(curr_n):
        y = np.int64(curr_ys[k])
        x = np.int64(curr_xs[k])
        ipoint = domains[y * nx + x]
        for o in range(_NEIGHBORS.shape[0]):
            y2 = y + _NEIGHBORS[o, 0]
            x2 = x + _NEIGHBORS[o, 1]
            if y2 < 0 or y2 >= ny:
                if not wrap_y:
                    continue
                y2 = y2 + ny if y2 < 0 else y2 - ny
            if x2 < 0 or x2 >= nx:
                if not wrap_x:
                    continue
                x2 = x2 + nx if x2 < 0 else x2 - nx
            pix2 = y2 * nx + x2
            d = vincenty(point_ra[ipoint], point_cos_dec[ipoint], point_sin_dec[ipoint],
                         xpos[x2], pix_cos_dec[y2], pix_sin_dec[y2])
            if d < dists[pix2]:
                dists[pix2] = d
                domains[pix2] = ipoint
                ys, xs, n = push_pixel(ys, xs, n, y2, x2)
    return ys, xs, n


def seed(state: WavefrontState, point_pix: PointPix) -> int:
    """Plant every point at its anchor pixel, queueing the anchors on ``next``."""
    nxt = state.next
    nxt.ys, nxt.xs, nxt.n = _seed_kernel(
        point_pix[0], point_pix[1],
        state.point_ra, state.point_cos_dec, state.point_sin_dec,
        state.xpos, state.pix_cos_dec, state.pix_sin_dec,
        state.nx, state.dists, state.domains,
        nxt.ys, nxt.xs, nxt.n,
    )
    return nxt.n


def relax_pass(state: WavefrontState) -> int:
    """Offer each ``current`` pixel's point to its neighbors. Returns the size of ``next``."""
    cur, nxt = state.current, state.next
    nxt.ys, nxt.xs, nxt.n = _relax_kernel(
        cur.ys, cur.xs, cur.n, state.ny, state.nx, state.wrap_y, state.wrap_x,
        state.point_ra, state.point_cos_dec, state.point_sin_dec,
        state.xpos, state.pix_cos_dec, state.pix_sin_dec,
        state.dists, state.domains,
        nxt.ys, nxt.xs, nxt.n,
    )
    return nxt.n


def swap(state: WavefrontState) -> None:
    """Make ``next`` the new ``current`` and empty the old one for reuse."""
    state.current, state.next = state.next, state.current
    state.next.n = 0


def _check_anchors(point_pix: ArrayLike, npoint: int, ny: int, nx: int) -> PointPix:
    point_pix = np.ascontiguousarray(point_pix, dtype=np.int32)
    if point_pix.shape != (2, npoint):
        raise ValueError(f"point_pix must have shape (2, {npoint}), got {point_pix.shape}")
    py, px = point_pix
    if np.any((py < 0) | (py >= ny) | (px < 0) | (px >= nx)):
        raise ValueError("point_pix contains pixels outside the grid")
    return point_pix


def distance_from_points_treerings_separable(
    ypos: ArrayLike,
    xpos: ArrayLike,
    points: ArrayLike,
    point_pix: Optional[ArrayLike] = None,
    wrap_y: bool = False,
    wrap_x: bool = True,
    out: Optional[Tuple[DistanceField, DomainField]] = None,
    hook: Optional[Hook] = None,
    capacity: int = _FRONTIER_CAPACITY,
) -> DistanceResult:
    """
    Approximate distance and domain fields on a separable grid.

    Args:
        ypos: Declination of each row, shape (ny,).
        xpos: Right-ascension of each column, shape (nx,).
        points: Reference points, shape (2, npoint), rows dec, ra.
        point_pix: Anchor pixel of each point, shape (2, npoint), rows y, x.
            Defaults to the nearest pixel of each point.
        wrap_y: Let the wavefront wrap around between the first and last row.
        wrap_x: Let the wavefront wrap around between the first and last column.
        out: Optional (dists, domains) buffers of ny*nx elements to fill.
        hook: Optional observability hook, called once per pass.
        capacity: Starting capacity of the frontier buffers.

    Returns:
        DistanceResult with dists and domains of shape (ny, nx).
    """
    ypos = as_axis(ypos, "ypos")
    xpos = as_axis(xpos, "xpos")
    points = as_points(points)
    ny, nx, npoint = ypos.shape[0], xpos.shape[0], points.shape[1]
    if point_pix is None:
        point_pix = point_anchors(points, ypos, xpos)
    point_pix = _check_anchors(point_pix, npoint, ny, nx)

    state = WavefrontState.create(ypos, xpos, points, wrap_y=wrap_y, wrap_x=wrap_x,
                                  out=out, capacity=capacity)
    with timed(hook, "treerings", ny=ny, nx=nx, npoint=npoint):
        seed(state, point_pix)
        swap(state)
        while len(state.current) > 0:
            if hook is not None:
                hook("treerings_pass", iteration=state.iteration, frontier=len(state.current))
            relax_pass(state)
            swap(state)
            state.iteration += 1

    logger.debug("treerings converged after %d passes (%d points, %dx%d grid)",
                 state.iteration, npoint, ny, nx)
    return DistanceResult(state.dists.reshape(ny, nx), state.domains.reshape(ny, nx))
