# skydist/brute.py
"""
Exact nearest-point distance fields by exhaustive search.

Every pixel is compared against every reference point, so the cost is
O(npix * npoint). This is the reference answer the wavefront method in
:mod:`skydist.treerings` approximates, and fast enough on its own when the
point set is small.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np
from numba import njit, prange
from numpy.typing import ArrayLike

from .dtypes import DistanceField, DistanceResult, DomainField
from .grid import alloc_fields, as_axis, as_points, as_posmap
from .hooks import Hook, timed
from .kernels import vincenty


logger = logging.getLogger(__name__)


@njit(cache=True)
def _dense_kernel(pix_dec, pix_ra, point_dec, point_ra, dists, domains):
    npoint = point_dec.shape[0]
    point_cos_dec = np.cos(point_dec)
    point_sin_dec = np.sin(point_dec)
    for i in range(pix_dec.shape[0]):
        pix_cos_dec = np.cos(pix_dec[i])
        pix_sin_dec = np.sin(pix_dec[i])
        for j in range(npoint):
            d = vincenty(point_ra[j], point_cos_dec[j], point_sin_dec[j],
                         pix_ra[i], pix_cos_dec, pix_sin_dec)
            # Strictly smaller: the first point reaching the minimum keeps it
            if d < dists[i]:
                dists[i] = d
                domains[i] = j


def _separable_rows(ypos, xpos, point_dec, point_ra, dists, domains):
    ny = ypos.shape[0]
    nx = xpos.shape[0]
    npoint = point_dec.shape[0]
    point_cos_dec = np.cos(point_dec)
    point_sin_dec = np.sin(point_dec)
    # Each row writes only its own slice of dists/domains
    for y in prange(ny):
        pix_cos_dec = np.cos(ypos[y])
        pix_sin_dec = np.sin(ypos[y])
        for x in range(nx):
            i = y * nx + x
            for j in range(npoint):
                d = vincenty(point_ra[j], point_cos_dec[j], point_sin_dec[j],
                             xpos[x], pix_cos_dec, pix_sin_dec)
                if d < dists[i]:
                    dists[i] = d
                    domains[i] = j


# Not cached: numba's disk cache is keyed on the Python function, which both
# builds share.
_separable_parallel = njit(parallel=True)(_separable_rows)
_separable_serial = njit(_separable_rows)


def distance_from_points(
    posmap: ArrayLike,
    points: ArrayLike,
    domains: bool = False,
    out: Optional[Tuple[DistanceField, DomainField]] = None,
    hook: Optional[Hook] = None,
) -> DistanceResult:
    """
    Distance from every pixel of a dense position map to the closest point.

    Args:
        posmap: [dec, ra] position map, shape (2, ny, nx) or (2, npix).
        points: Reference points, shape (2, npoint), rows dec, ra.
        domains: Also return the index of the closest point per pixel.
        out: Optional (dists, domains) buffers of npix elements to fill.
        hook: Optional observability hook.

    Returns:
        DistanceResult shaped like one plane of ``posmap``. With no points
        the field stays at inf and the domains at -1.
    """
    grid_shape = np.shape(posmap)[1:]
    pos = as_posmap(posmap)
    points = as_points(points)
    npix = pos.shape[1]
    dists, doms = alloc_fields(npix, out)

    with timed(hook, "distance_from_points", npix=npix, npoint=points.shape[1]):
        _dense_kernel(pos[0], pos[1], points[0], points[1], dists, doms)

    logger.debug("brute-force field: %d pixels, %d points", npix, points.shape[1])
    return DistanceResult(
        dists.reshape(grid_shape),
        doms.reshape(grid_shape) if domains else None,
    )


def distance_from_points_separable(
    ypos: ArrayLike,
    xpos: ArrayLike,
    points: ArrayLike,
    domains: bool = False,
    parallel: bool = True,
    out: Optional[Tuple[DistanceField, DomainField]] = None,
    hook: Optional[Hook] = None,
) -> DistanceResult:
    """
    Distance from every pixel of a separable grid to the closest point.

    Declination trig is computed once per row and rows are processed as a
    parallel-for. The result does not depend on the number of threads.

    Args:
        ypos: Declination of each row, shape (ny,).
        xpos: Right-ascension of each column, shape (nx,).
        points: Reference points, shape (2, npoint), rows dec, ra.
        domains: Also return the index of the closest point per pixel.
        parallel: Run rows on the numba thread pool.
        out: Optional (dists, domains) buffers of ny*nx elements to fill.
        hook: Optional observability hook.

    Returns:
        DistanceResult with fields of shape (ny, nx).
    """
    ypos = as_axis(ypos, "ypos")
    xpos = as_axis(xpos, "xpos")
    points = as_points(points)
    ny, nx = ypos.shape[0], xpos.shape[0]
    dists, doms = alloc_fields(ny * nx, out)

    kernel = _separable_parallel if parallel else _separable_serial
    with timed(hook, "distance_from_points_separable", ny=ny, nx=nx,
               npoint=points.shape[1], parallel=parallel):
        kernel(ypos, xpos, points[0], points[1], dists, doms)

    return DistanceResult(
        dists.reshape(ny, nx),
        doms.reshape(ny, nx) if domains else None,
    )
