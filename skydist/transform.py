# skydist/transform.py
from __future__ import annotations

import logging
import warnings
from typing import Literal, Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike
from scipy import ndimage

from .brute import distance_from_points, distance_from_points_separable
from .dtypes import DistanceField, LabelMap, LabeledDistanceResult
from .edges import as_labels, as_mask, find_edges, find_edges_labeled
from .grid import as_axis, as_posmap
from .hooks import Hook
from .treerings import distance_from_points_treerings_separable


logger = logging.getLogger(__name__)

Method = Literal["treerings", "brute"]

# Constants
_DEFAULT_METHOD: Method = "treerings"


def _warn_if_empty(edges: np.ndarray) -> None:
    if len(edges) == 0:
        warnings.warn("[skydist] mask has no background pixels; distances are undefined (inf)")


def _edge_points_separable(
    edges: np.ndarray,
    ypos: np.ndarray,
    xpos: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """[dec, ra] positions and (y, x) anchors of flattened edge pixels."""
    ey, ex = np.divmod(edges, xpos.shape[0])
    points = np.stack([ypos[ey], xpos[ex]])
    point_pix = np.stack([ey, ex]).astype(np.int32)
    return points, point_pix


def _nearest_edge_field(
    edges: np.ndarray,
    ypos: np.ndarray,
    xpos: np.ndarray,
    method: Method,
    hook: Optional[Hook],
    **kwargs,
):
    points, point_pix = _edge_points_separable(edges, ypos, xpos)
    if method == "treerings":
        return distance_from_points_treerings_separable(
            ypos, xpos, points, point_pix=point_pix, hook=hook, **kwargs)
    if method == "brute":
        return distance_from_points_separable(
            ypos, xpos, points, domains=True, hook=hook, **kwargs)
    raise ValueError(f"unknown method {method!r}, expected 'treerings' or 'brute'")


def distance_transform(
    mask: ArrayLike,
    posmap: ArrayLike,
    hook: Optional[Hook] = None,
) -> DistanceField:
    """
    Geodesic distance from every pixel to the edge of the background region.

    Background (0) pixels report 0. Every other pixel reports the angular
    distance to the closest background pixel that touches the region.

    Args:
        mask: Binary mask, shape (ny, nx). 0 marks the background.
        posmap: [dec, ra] position map, shape (2, ny, nx).
        hook: Optional observability hook.

    Returns:
        Distance field of shape (ny, nx), radians.
    """
    mask = as_mask(mask)
    pos = as_posmap(posmap)
    if pos.shape[1] != mask.size:
        raise ValueError(f"posmap has {pos.shape[1]} pixels but mask has {mask.size}")

    edges = find_edges(mask)
    _warn_if_empty(edges)
    points = pos[:, edges]
    dists = distance_from_points(pos, points, hook=hook).dists.reshape(mask.shape)
    # The background is at zero distance from itself
    dists[mask == 0] = 0
    logger.debug("distance transform: %d edge pixels", len(edges))
    return dists


def distance_transform_separable(
    mask: ArrayLike,
    ypos: ArrayLike,
    xpos: ArrayLike,
    method: Method = _DEFAULT_METHOD,
    hook: Optional[Hook] = None,
    **kwargs,
) -> DistanceField:
    """
    :func:`distance_transform` for a separable grid.

    ``method="treerings"`` grows the field out from the edge pixels in near
    linear time; ``method="brute"`` is exact and O(npix * nedge). Extra
    keyword arguments go to the underlying field function (``wrap_x`` and
    ``wrap_y`` for treerings, ``parallel`` for brute).
    """
    mask = as_mask(mask)
    ypos = as_axis(ypos, "ypos")
    xpos = as_axis(xpos, "xpos")
    if mask.shape != (ypos.shape[0], xpos.shape[0]):
        raise ValueError(f"mask shape {mask.shape} does not match axes "
                         f"({ypos.shape[0]}, {xpos.shape[0]})")

    edges = find_edges(mask)
    _warn_if_empty(edges)
    dists = _nearest_edge_field(edges, ypos, xpos, method, hook, **kwargs).dists
    dists[mask == 0] = 0
    return dists


def labeled_distance_transform(
    labels: ArrayLike,
    ypos: ArrayLike,
    xpos: ArrayLike,
    method: Method = _DEFAULT_METHOD,
    hook: Optional[Hook] = None,
    **kwargs,
) -> LabeledDistanceResult:
    """
    Distance to, and label of, the closest labeled region for every pixel.

    Labeled pixels report distance 0 and their own label. Unlabeled pixels
    report the distance to the nearest boundary pixel of any labeled region
    and that region's label. With no labeled pixels at all, distances are
    inf and labels 0.

    Args:
        labels: Integer label map, shape (ny, nx). 0 is unlabeled.
        ypos: Declination of each row, shape (ny,).
        xpos: Right-ascension of each column, shape (nx,).
        method: "treerings" (fast) or "brute" (exact).
        hook: Optional observability hook.

    Returns:
        LabeledDistanceResult with fields of shape (ny, nx).
    """
    labels = as_labels(labels)
    ypos = as_axis(ypos, "ypos")
    xpos = as_axis(xpos, "xpos")
    if labels.shape != (ypos.shape[0], xpos.shape[0]):
        raise ValueError(f"labels shape {labels.shape} does not match axes "
                         f"({ypos.shape[0]}, {xpos.shape[0]})")

    edges = find_edges_labeled(labels)
    result = _nearest_edge_field(edges, ypos, xpos, method, hook, **kwargs)
    dists, domains = result.dists, result.domains

    edge_labels = labels.reshape(-1)[edges]
    out_labels = np.zeros_like(labels)
    assigned = domains >= 0
    out_labels[assigned] = edge_labels[domains[assigned]]

    inside = labels != 0
    dists[inside] = 0
    out_labels[inside] = labels[inside]
    return LabeledDistanceResult(dists, out_labels)


def label_mask(mask: ArrayLike, connectivity: int = 4) -> Tuple[LabelMap, int]:
    """
    Label the connected background (0) regions of a mask.

    Args:
        mask: Binary mask, shape (ny, nx). 0 marks the background.
        connectivity: 4 or 8 neighbor connectivity.

    Returns:
        (labels, nlabel): label map with regions numbered from 1, and the
        number of regions.
    """
    mask = as_mask(mask)
    if connectivity == 4:
        structure = ndimage.generate_binary_structure(2, 1)
    elif connectivity == 8:
        structure = np.ones((3, 3), dtype=np.int32)
    else:
        raise ValueError(f"connectivity must be 4 or 8, got {connectivity}")
    labels, nlabel = ndimage.label(mask == 0, structure=structure)
    return labels.astype(np.int32), int(nlabel)
