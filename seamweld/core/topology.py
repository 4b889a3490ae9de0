"""Half-edge topology with coincident-vertex clusters.

Built once per edge-merge call from raw position/normal/index buffers and
discarded afterwards. Clusters group vertices lying within the merge length of
one another; they are what lets the stitcher find the opposite side of a seam
whose two sides do not share vertex indices.
"""
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .config import CLUSTER_METHODS
from .conformity import TopologyError, check_topology
from .constants import DEFAULT_MERGE_LENGTH, EPS_RADIUS_REL
from .geometry import triangle_centroid, triangle_normal
from .logging_utils import get_logger
from .mesh import as_triangle_array

logger = get_logger('seamweld.topology')

__all__ = [
    'Vertex', 'HalfEdge', 'Face', 'Cluster', 'Topology',
    'cluster_indices_scan', 'cluster_indices_kdtree',
]


class Vertex:
    __slots__ = ('index', 'pos', 'normal', 'edge', 'cluster')

    def __init__(self, index: int, pos: np.ndarray, normal: np.ndarray):
        self.index = index
        self.pos = pos
        self.normal = normal
        self.edge: Optional[HalfEdge] = None   # one outgoing half-edge
        self.cluster: Optional[Cluster] = None

    def __repr__(self):
        return f"Vertex({self.index})"


class HalfEdge:
    """Directed triangle side.

    ``left`` threads every half-edge leaving the same origin into a circular
    list; walking it from ``origin.edge`` enumerates the origin's fan.
    """
    __slots__ = ('index', 'origin', 'pair', 'next', 'prev', 'left', 'face')

    def __init__(self, index: int, origin: Vertex):
        self.index = index
        self.origin = origin
        self.pair: Optional[HalfEdge] = None
        self.next: Optional[HalfEdge] = None
        self.prev: Optional[HalfEdge] = None
        self.left: Optional[HalfEdge] = None
        self.face: Optional[Face] = None

    @property
    def dest(self) -> Vertex:
        return self.next.origin

    @property
    def is_boundary(self) -> bool:
        return self.pair is None

    def __repr__(self):
        dest = self.next.origin.index if self.next is not None else '?'
        return f"HalfEdge({self.index}: {self.origin.index}->{dest})"


class Face:
    __slots__ = ('index', 'edge', 'normal', 'center')

    def __init__(self, index: int, edge: HalfEdge, normal: np.ndarray, center: np.ndarray):
        self.index = index
        self.edge = edge
        self.normal = normal
        self.center = center

    def __repr__(self):
        return f"Face({self.index})"


class Cluster:
    """Vertices treated as one position. ``id`` is stable for one topology."""
    __slots__ = ('id', 'members')

    def __init__(self, cluster_id: int, members: List[Vertex]):
        self.id = cluster_id
        self.members = members

    def __contains__(self, vertex) -> bool:
        return getattr(vertex, 'cluster', None) is self

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def __repr__(self):
        return f"Cluster({self.id}, {[v.index for v in self.members]})"


# -----------------------
# Coincident-vertex clustering
# -----------------------
def _sq_distances(points: np.ndarray, p: np.ndarray) -> np.ndarray:
    d = points - p
    return (d * d).sum(axis=1)


def cluster_indices_scan(positions: np.ndarray, merge_length: float) -> List[List[int]]:
    """Forward-scan clustering.

    Vertex ``i``, if not yet clustered, seeds a cluster with every unclustered
    ``j > i`` within ``merge_length``. A seed with no match stays unclustered.
    Membership is order dependent and not transitive: a vertex within range of
    two seeds joins the earlier one only.
    """
    pts = np.asarray(positions, dtype=np.float64)
    n = pts.shape[0]
    sq_len = merge_length * merge_length
    assigned = np.zeros(n, dtype=bool)
    groups: List[List[int]] = []
    for i in range(n):
        if assigned[i]:
            continue
        rest = np.arange(i + 1, n)
        hit = rest[(~assigned[i + 1:]) & (_sq_distances(pts[i + 1:], pts[i]) <= sq_len)]
        if hit.size == 0:
            continue
        assigned[i] = True
        assigned[hit] = True
        groups.append([i] + hit.tolist())
    return groups


def cluster_indices_kdtree(positions: np.ndarray, merge_length: float) -> List[List[int]]:
    """Same membership as :func:`cluster_indices_scan`, using kd-tree ball queries.

    The query radius is padded slightly and candidates are re-tested with the
    squared-distance comparison the scan uses, so both agree on boundary cases.
    """
    pts = np.asarray(positions, dtype=np.float64)
    n = pts.shape[0]
    if n == 0:
        return []
    tree = cKDTree(pts)
    radius = merge_length * (1.0 + EPS_RADIUS_REL)
    sq_len = merge_length * merge_length
    assigned = np.zeros(n, dtype=bool)
    groups: List[List[int]] = []
    for i in range(n):
        if assigned[i]:
            continue
        cand = np.asarray(tree.query_ball_point(pts[i], radius), dtype=np.int64)
        cand = np.sort(cand[cand > i])
        if cand.size:
            cand = cand[~assigned[cand]]
        if cand.size:
            cand = cand[_sq_distances(pts[cand], pts[i]) <= sq_len]
        if cand.size == 0:
            continue
        assigned[i] = True
        assigned[cand] = True
        groups.append([i] + cand.tolist())
    return groups


_CLUSTERERS = {
    'scan': cluster_indices_scan,
    'kdtree': cluster_indices_kdtree,
}


# -----------------------
# Topology
# -----------------------
class Topology:
    """Half-edge mesh plus coincident-vertex clusters.

    Parameters
    ----------
    positions : (N, 3) array-like of float
    normals : (N, 3) array-like of float
        Per-vertex normals, parallel to ``positions``.
    index_lists : sequence of triangle index lists
        One entry per submesh, each flat or (M, 3). They are concatenated.
    merge_length : float
        Distance under which vertices share a cluster.
    cluster_method : {'kdtree', 'scan'}
    strict : bool
        Raise ``TopologyError`` on structural violations instead of logging them.

    Triangles repeating a vertex index contribute no edge and are skipped;
    ``skipped_triangles`` counts them.
    """

    def __init__(self, positions, normals, index_lists: Sequence, merge_length: float = DEFAULT_MERGE_LENGTH,
                 cluster_method: str = 'kdtree', strict: bool = True):
        pts = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        nrm = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
        if pts.shape != nrm.shape:
            raise ValueError(f"positions {pts.shape} and normals {nrm.shape} differ in shape")
        if not (np.all(np.isfinite(pts)) and np.all(np.isfinite(nrm))):
            raise ValueError("positions and normals must be finite")
        if not np.isfinite(merge_length) or merge_length < 0:
            raise ValueError(f"merge_length must be non-negative, got {merge_length}")
        if cluster_method not in CLUSTER_METHODS:
            raise ValueError(f"unknown cluster_method '{cluster_method}'")

        self.merge_length = float(merge_length)
        self.verts: List[Vertex] = [Vertex(i, pts[i], nrm[i]) for i in range(pts.shape[0])]
        self.edges: List[HalfEdge] = []
        self.faces: List[Face] = []
        self.clusters: List[Cluster] = []
        self.duplicate_edges: List[Tuple[int, int]] = []
        self.skipped_triangles = 0

        n = len(self.verts)
        tris = [as_triangle_array(lst) for lst in index_lists]
        tris = np.vstack(tris) if tris else np.empty((0, 3), dtype=np.int32)
        if tris.size and (tris.min() < 0 or tris.max() >= n):
            raise TopologyError(["Triangle indices out of range."])

        self._build_edges(tris)
        ok, msgs = check_topology(self)
        if not ok:
            if strict:
                raise TopologyError(msgs)
            for m in msgs:
                logger.error("topology: %s", m)
        self._build_clusters(cluster_method)
        logger.debug("topology: %d verts, %d half-edges, %d faces, %d clusters, %d skipped tris",
                     n, len(self.edges), len(self.faces), len(self.clusters), self.skipped_triangles)

    @classmethod
    def from_mesh(cls, mesh, config=None) -> 'Topology':
        """Build from a ``MeshData`` using an ``EdgeMergeConfig`` (defaults if None)."""
        if config is None:
            from .config import EdgeMergeConfig
            config = EdgeMergeConfig()
        return cls(mesh.positions, mesh.normals, mesh.submeshes, merge_length=config.merge_length,
                   cluster_method=config.cluster_method, strict=config.strict_topology)

    def _build_edges(self, tris: np.ndarray):
        verts = self.verts
        key_to_edge = {}

        def get_edge(a: int, b: int) -> HalfEdge:
            e = key_to_edge.get((a, b))
            if e is not None:
                if e.face is not None:
                    self.duplicate_edges.append((a, b))
                return e
            v = verts[a]
            e = HalfEdge(len(self.edges), v)
            key_to_edge[(a, b)] = e
            self.edges.append(e)
            if v.edge is None:
                v.edge = e
                e.left = e
            else:
                e.left = v.edge.left
                v.edge.left = e
            pair = key_to_edge.get((b, a))
            if pair is not None:
                e.pair = pair
                pair.pair = e
            return e

        for tri in tris.tolist():
            i0, i1, i2 = tri
            if i0 == i1 or i1 == i2 or i2 == i0:
                self.skipped_triangles += 1
                continue
            v0, v1, v2 = verts[i0], verts[i1], verts[i2]
            e01, e12, e20 = get_edge(i0, i1), get_edge(i1, i2), get_edge(i2, i0)
            f = Face(len(self.faces), e01, triangle_normal(v0.pos, v1.pos, v2.pos),
                     triangle_centroid(v0.pos, v1.pos, v2.pos))
            self.faces.append(f)
            e01.next = e20.prev = e12
            e12.next = e01.prev = e20
            e20.next = e12.prev = e01
            e01.face = e12.face = e20.face = f

    def _build_clusters(self, method: str):
        pts = np.array([v.pos for v in self.verts], dtype=np.float64).reshape(-1, 3)
        for members in _CLUSTERERS[method](pts, self.merge_length):
            cluster = Cluster(len(self.clusters), [self.verts[i] for i in members])
            for v in cluster.members:
                v.cluster = cluster
            self.clusters.append(cluster)

    def outgoing(self, vertex: Vertex) -> Iterator[HalfEdge]:
        """Walk the ``left`` ring of ``vertex`` starting at its stored edge."""
        start = vertex.edge
        if start is None:
            return
        e = start
        while True:
            yield e
            e = e.left
            if e is start or e is None:
                return

    def boundary_edges(self) -> List[HalfEdge]:
        """Half-edges without a pair, in creation order."""
        return [e for e in self.edges if e.pair is None]

    def cluster_of(self, cluster_id: int) -> Cluster:
        return self.clusters[cluster_id]
