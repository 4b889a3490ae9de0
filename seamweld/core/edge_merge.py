"""Edge-merge driver: topology -> seam stitching -> corner filling.

``merge_edges`` is the pure core on raw buffers. ``merge_mesh_edges`` is the
mesh-level entry point: it clones the source mesh, writes the stitched
triangles into submesh 0 of the clone and optionally records a report entry.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

from .config import EdgeMergeConfig
from .corners import fill_corners
from .logging_utils import get_logger
from .mesh import MeshData, as_triangle_array
from .stats import MergeReportLog, MergeStats
from .stitcher import CornerTable, stitch_seams
from .topology import Topology

logger = get_logger('seamweld.edge_merge')

__all__ = ['EdgeMergeResult', 'merge_edges', 'merge_mesh_edges']


@dataclass
class EdgeMergeResult:
    """Output of one edge-merge call.

    Attributes
    ----------
    triangles : (M, 3) int32 ndarray
        Submesh 0 after merging: the input rows followed by ``added``.
    added : (K, 3) int32 ndarray
        Bridging triangles, then corner fan triangles.
    stats : MergeStats
    corner_table : CornerTable
        Markers per cluster id, for inspecting which corners were complex.
    """
    triangles: np.ndarray
    added: np.ndarray
    stats: MergeStats = field(default_factory=MergeStats)
    corner_table: CornerTable = field(default_factory=CornerTable)

    @property
    def edges_merged(self) -> int:
        return self.stats.edges_merged

    @property
    def corners_merged(self) -> int:
        return self.stats.corners_merged


def merge_edges(positions, normals, index_lists: Sequence,
                config: Optional[EdgeMergeConfig] = None) -> EdgeMergeResult:
    """Stitch crease seams and fill corners of one mesh.

    Parameters
    ----------
    positions, normals : (N, 3) array-like
    index_lists : sequence of triangle index lists, one per submesh
        All lists feed the topology; the result extends the first one.
    config : EdgeMergeConfig, optional

    Raises
    ------
    TopologyError
        If ``config.strict_topology`` and the mesh is non-manifold.
    """
    cfg = config or EdgeMergeConfig()
    t0 = time.perf_counter()
    topology = Topology(positions, normals, index_lists, merge_length=cfg.merge_length,
                        cluster_method=cfg.cluster_method, strict=cfg.strict_topology)
    stitched = stitch_seams(topology)
    corners = fill_corners(topology, stitched.corner_table, min_markers=cfg.corner_min_markers)

    added = stitched.triangles + corners.triangles
    added_arr = np.asarray(added, dtype=np.int32).reshape(-1, 3)
    base = as_triangle_array(index_lists[0]) if len(index_lists) else np.empty((0, 3), dtype=np.int32)
    stats = MergeStats(
        edges_merged=stitched.edges_merged,
        corners_merged=corners.corners_merged,
        valleys=stitched.valleys,
        complex_corners=corners.complex_corners,
        unmatched_edges=stitched.unmatched_edges,
        added_triangles=len(added),
    )
    logger.info("edge merge: %d edges, %d corners, +%d triangles (%.1f ms)",
                stats.edges_merged, stats.corners_merged, stats.added_triangles,
                (time.perf_counter() - t0) * 1000.0)
    return EdgeMergeResult(
        triangles=np.vstack([base, added_arr]).astype(np.int32, copy=False),
        added=added_arr,
        stats=stats,
        corner_table=stitched.corner_table,
    )


def merge_mesh_edges(src: MeshData, config: Optional[EdgeMergeConfig] = None, name: Optional[str] = None,
                     log: Optional[MergeReportLog] = None) -> Tuple[MeshData, EdgeMergeResult]:
    """Return ``(dst, result)`` where ``dst`` is a merged clone of ``src``.

    ``src`` is left untouched. With ``log`` given, one report entry is added;
    a topology failure is recorded as a failed entry before propagating.
    """
    dst_name = name if name is not None else f"{src.name}_merged"
    try:
        result = merge_edges(src.positions, src.normals, src.submeshes, config)
    except ValueError:
        if log is not None:
            log.add_edge_merge(src.name, dst_name, src.triangle_count, src.triangle_count,
                               MergeStats(), success=False)
        raise
    dst = src.with_submesh(0, result.triangles, name=dst_name)
    if log is not None:
        log.add_edge_merge(src.name, dst.name, src.triangle_count, dst.triangle_count, result.stats)
    return dst, result
