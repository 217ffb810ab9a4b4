# skydist/dtypes.py
from __future__ import annotations

from typing import NamedTuple, Optional, TypeAlias

import numpy as np
from numpy.typing import NDArray


# Type Aliases
PosMap: TypeAlias = NDArray[np.float64]
"""Dense position map. Shape: (2, ny, nx) or (2, npix). Planes: dec, ra (radians)."""

PointSet: TypeAlias = NDArray[np.float64]
"""Reference points. Shape: (2, npoint). Rows: dec, ra (radians)."""

PointPix: TypeAlias = NDArray[np.int32]
"""Pixel anchors of reference points. Shape: (2, npoint). Rows: y, x."""

Mask: TypeAlias = NDArray[np.uint8]
"""Binary mask. Shape: (ny, nx). Values: 0=background, nonzero=region."""

LabelMap: TypeAlias = NDArray[np.int32]
"""Integer region labels. Shape: (ny, nx). Values: 0=unlabeled."""

DistanceField: TypeAlias = NDArray[np.float64]
"""Angular distance to nearest reference point (radians). Unvisited: inf."""

DomainField: TypeAlias = NDArray[np.int32]
"""Index of nearest reference point. Unassigned: -1."""

EdgeIndices: TypeAlias = NDArray[np.int64]
"""Flattened pixel indices (y*nx + x) of boundary pixels."""


UNVISITED: float = np.inf
UNASSIGNED: int = -1


# Data Containers
class DistanceResult(NamedTuple):
    """Container for nearest-point distance field outputs."""
    dists: DistanceField
    domains: Optional[DomainField]


class LabeledDistanceResult(NamedTuple):
    """Container for labeled distance transform outputs."""
    dists: DistanceField
    labels: LabelMap
