# skydist/__init__.py

from skydist.dtypes import (
    PosMap,
    PointSet,
    PointPix,
    Mask,
    LabelMap,
    DistanceField,
    DomainField,
    EdgeIndices,
    DistanceResult,
    LabeledDistanceResult,
)
from skydist.kernels import angular_distance, vincenty
from skydist.edges import find_edges, find_edges_labeled
from skydist.brute import distance_from_points, distance_from_points_separable
from skydist.treerings import distance_from_points_treerings_separable
from skydist.transform import (
    distance_transform,
    distance_transform_separable,
    labeled_distance_transform,
    label_mask,
)
from skydist.grid import point_anchors, separable_posmap
from skydist.hooks import log_hook


__version__ = "0.1.0"

__all__ = [
    # Type aliases
    "PosMap",
    "PointSet",
    "PointPix",
    "Mask",
    "LabelMap",
    "DistanceField",
    "DomainField",
    "EdgeIndices",
    # Data containers
    "DistanceResult",
    "LabeledDistanceResult",
    # Distance kernel
    "angular_distance",
    "vincenty",
    # Edge extraction
    "find_edges",
    "find_edges_labeled",
    # Distance fields
    "distance_from_points",
    "distance_from_points_separable",
    "distance_from_points_treerings_separable",
    # Distance transforms
    "distance_transform",
    "distance_transform_separable",
    "labeled_distance_transform",
    "label_mask",
    # Grid helpers
    "point_anchors",
    "separable_posmap",
    # Observability
    "log_hook",
]
