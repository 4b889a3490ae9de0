"""Seam stitching between coincident boundary edges.

Inverted-hull outlines extrude every vertex along its normal. Where a mesh is
split along a hard edge the two sides extrude apart and the outline shows a
crack. For each boundary edge that has a coincident partner edge the stitcher
decides, from the vertex normals alone, whether the fold is convex (a crease,
which cracks) or concave (a valley, which does not), and bridges creases with
zero-area triangles that the outline pass inflates into the gap.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .geometry import HalfLine, cross, dot, is_crossing, normalize
from .logging_utils import get_logger
from .topology import Cluster, HalfEdge, Topology

logger = get_logger('seamweld.stitcher')

__all__ = ['CornerTable', 'StitchResult', 'find_partner_edge', 'classify_fold', 'stitch_seams']

Triangle = Tuple[int, int, int]


class CornerTable:
    """Markers collected per cluster id while stitching.

    Every processed seam appends two markers to each of its two endpoint
    clusters: the stitched half-edges for a crease, ``None`` twice for a valley.
    Iteration follows first-insertion order of the cluster ids.
    """

    def __init__(self):
        self._markers: Dict[int, List[Optional[HalfEdge]]] = {}

    def record(self, cluster: Cluster, marker: Optional[HalfEdge]):
        self._markers.setdefault(cluster.id, []).append(marker)

    def record_seam(self, edge: HalfEdge, first: Optional[HalfEdge], second: Optional[HalfEdge]):
        for cluster in (edge.origin.cluster, edge.next.origin.cluster):
            self.record(cluster, first)
            self.record(cluster, second)

    def markers(self, cluster_id: int) -> List[Optional[HalfEdge]]:
        return self._markers.get(cluster_id, [])

    def is_complex(self, cluster_id: int) -> bool:
        """True when a valley was recorded at this cluster."""
        return any(m is None for m in self.markers(cluster_id))

    def items(self):
        return self._markers.items()

    def __contains__(self, cluster_id) -> bool:
        return cluster_id in self._markers

    def __len__(self) -> int:
        return len(self._markers)


@dataclass
class StitchResult:
    triangles: List[Triangle] = field(default_factory=list)
    corner_table: CornerTable = field(default_factory=CornerTable)
    edges_merged: int = 0
    valleys: int = 0
    unmatched_edges: int = 0


def find_partner_edge(topology: Topology, edge: HalfEdge) -> Optional[HalfEdge]:
    """Find a half-edge running from ``edge``'s destination cluster back to its origin cluster.

    Candidates are the members of the destination's cluster other than the
    destination itself, in cluster order; each candidate's fan is walked from
    its stored edge. The first hit other than ``edge`` itself wins.
    """
    v0 = edge.origin
    v1 = edge.next.origin
    for k in v1.cluster.members:
        if k is v1:
            continue
        for j in topology.outgoing(k):
            dest_cluster = j.next.origin.cluster
            if j is not edge and dest_cluster is not None and v0 in dest_cluster:
                return j
    return None


def classify_fold(edge: HalfEdge, other: HalfEdge) -> Tuple[bool, bool]:
    """Return ``(crossing0, crossing1)`` for a seam between ``edge`` and ``other``.

    Work in the plane perpendicular to the seam. ``t0``/``t1`` point from the
    seam into the faces of ``edge`` and ``other``; ``(t0, s0)`` is the 2D frame.
    At each endpoint the two vertex normals are projected into that frame and
    a ray is cast from each normal tip parallel to its own face. Rays that
    meet mean the extruded sides overlap: a valley at that endpoint.
    """
    v0 = edge.origin
    v1 = edge.next.origin
    edge_n = normalize(v1.pos - v0.pos)
    t0 = normalize(cross(edge_n, cross(edge.face.center - v0.pos, edge_n)))
    t1 = normalize(cross(edge_n, cross(other.face.center - v0.pos, edge_n)))
    s0 = cross(edge_n, t0)
    partner_dir = (dot(t1, t0), dot(t1, s0))

    def crossing(n0, n1) -> bool:
        a = (dot(n0, t0), dot(n0, s0))
        b = (dot(n1, t0), dot(n1, s0))
        return is_crossing(HalfLine(a, (1.0, 0.0)), HalfLine(b, partner_dir))

    return (crossing(v0.normal, other.next.origin.normal),
            crossing(v1.normal, other.origin.normal))


def stitch_seams(topology: Topology) -> StitchResult:
    """Bridge every crease seam of ``topology``.

    Boundary edges are visited in creation order. A matched partner edge is
    removed from the pending set so the same seam is not bridged twice.
    Edges whose two ends share a cluster have no seam to bridge and are skipped.
    """
    result = StitchResult()
    consumed = set()
    for e in topology.boundary_edges():
        if e.index in consumed:
            continue
        v0 = e.origin
        v1 = e.next.origin
        # both ends coincide: the edge is shorter than the merge length
        if v0.cluster is None or v1.cluster is None or v0.cluster is v1.cluster:
            continue

        other = find_partner_edge(topology, e)
        if other is None:
            result.unmatched_edges += 1
            continue

        crossing0, crossing1 = classify_fold(e, other)
        if crossing0 and crossing1:
            result.corner_table.record_seam(e, None, None)
            result.valleys += 1
            logger.debug("valley at %r / %r", e, other)
            continue

        i0, i1 = v0.index, v1.index
        i2, i3 = other.origin.index, other.next.origin.index
        if not crossing0:
            result.triangles.append((i0, i3, i2))
        if not crossing1:
            result.triangles.append((i0, i2, i1))

        consumed.add(other.index)
        result.corner_table.record_seam(e, e, other)
        result.edges_merged += 1

    logger.debug("stitched %d edges (%d valleys, %d unmatched), %d bridging triangles",
                 result.edges_merged, result.valleys, result.unmatched_edges, len(result.triangles))
    return result
