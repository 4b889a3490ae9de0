"""Corner fan filling where several stitched seams meet.

Bridging triangles close each seam on its own, but where three or more seams
converge on one cluster a hole remains between them. The cluster's vertices
are ordered around the averaged normal and closed with a triangle fan.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from .constants import CORNER_MIN_MARKERS, EPS_AXIS_SQ
from .geometry import cross, dot, normalize
from .logging_utils import get_logger
from .stitcher import CornerTable
from .topology import Cluster, Topology, Vertex

logger = get_logger('seamweld.corners')

__all__ = ['CornerFillResult', 'corner_ring', 'fill_corners']

_WORLD_X = np.array((1.0, 0.0, 0.0))
_WORLD_Y = np.array((0.0, 1.0, 0.0))


@dataclass
class CornerFillResult:
    triangles: List[Tuple[int, int, int]] = field(default_factory=list)
    corners_merged: int = 0
    complex_corners: int = 0


def corner_ring(cluster: Cluster) -> List[Vertex]:
    """Cluster members sorted by the angle of their normals around the mean normal."""
    z_axis = normalize(np.sum([v.normal for v in cluster.members], axis=0))
    x_axis = cross(z_axis, _WORLD_X)
    if dot(x_axis, x_axis) < EPS_AXIS_SQ:
        x_axis = cross(z_axis, _WORLD_Y)
    x_axis = normalize(x_axis)
    y_axis = cross(z_axis, x_axis)

    keyed = [(math.atan2(dot(v.normal, y_axis), dot(v.normal, x_axis)), v) for v in cluster.members]
    keyed.sort(key=lambda item: item[0])
    return [v for _, v in keyed]


def fill_corners(topology: Topology, corner_table: CornerTable,
                 min_markers: int = CORNER_MIN_MARKERS) -> CornerFillResult:
    """Fan-fill every corner candidate in ``corner_table``.

    A cluster qualifies when it holds more than ``min_markers`` markers. If
    any of them is a valley marker the corner mixes convex and concave folds
    and is counted as complex instead of filled.
    """
    result = CornerFillResult()
    for cluster_id, markers in corner_table.items():
        if len(markers) <= min_markers:
            continue
        if any(m is None for m in markers):
            result.complex_corners += 1
            logger.debug("corner %d skipped: valley recorded", cluster_id)
            continue

        ring = corner_ring(topology.cluster_of(cluster_id))
        for i in range(2, len(ring)):
            result.triangles.append((ring[0].index, ring[i - 1].index, ring[i].index))
        result.corners_merged += 1

    logger.debug("filled %d corners (%d complex), %d fan triangles",
                 result.corners_merged, result.complex_corners, len(result.triangles))
    return result
