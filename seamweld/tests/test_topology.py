import numpy as np
import pytest

from seamweld.core.conformity import TopologyError, check_topology
from seamweld.core.config import EdgeMergeConfig
from seamweld.core.mesh import MeshData
from seamweld.core.topology import Topology

from conftest import make_cube_corner, make_split_squares, unit


def make_tetrahedron():
    positions = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=float)
    normals = np.array([unit(*p) if np.any(p) else unit(-1, -1, -1) for p in positions])
    triangles = np.array([[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]], dtype=np.int32)
    return positions, normals, triangles


def make_grid(n=4):
    xs, ys = np.meshgrid(np.arange(n + 1, dtype=float), np.arange(n + 1, dtype=float))
    positions = np.column_stack([xs.ravel(), ys.ravel(), np.zeros(xs.size)])
    normals = np.tile([0.0, 0.0, 1.0], (positions.shape[0], 1))
    tris = []
    for j in range(n):
        for i in range(n):
            a = j * (n + 1) + i
            b, c, d = a + 1, a + n + 2, a + n + 1
            tris.append([a, b, c])
            tris.append([a, c, d])
    return positions, normals, np.array(tris, dtype=np.int32)


def _all_meshes():
    return [
        make_tetrahedron(),
        make_grid(),
        make_cube_corner(),
        make_split_squares(unit(-1, 0, 1), unit(1, 0, 1)),
    ]


@pytest.mark.parametrize("mesh_index", range(4))
def test_half_edge_invariants(mesh_index):
    positions, normals, tris = _all_meshes()[mesh_index]
    topo = Topology(positions, normals, [tris])

    ok, msgs = check_topology(topo)
    assert ok, msgs
    assert len(topo.faces) == tris.shape[0]
    assert len(topo.edges) == 3 * tris.shape[0]
    for e in topo.edges:
        assert e.next.next.next is e
        assert e.next.prev is e and e.prev.next is e
        assert e.face is e.next.face is e.prev.face
        if e.pair is not None:
            assert e.pair.pair is e
            assert e.pair.origin is e.dest and e.pair.dest is e.origin
    for v in topo.verts:
        ring = list(topo.outgoing(v))
        assert all(e.origin is v for e in ring)
        assert len(ring) == sum(1 for e in topo.edges if e.origin is v)
    for f in topo.faces:
        assert f.edge.face is f


def test_closed_mesh_has_no_boundary():
    positions, normals, tris = make_tetrahedron()
    topo = Topology(positions, normals, [tris])
    assert topo.boundary_edges() == []
    assert topo.clusters == []


def test_outgoing_ring_inserts_after_head():
    positions, normals, tris = make_tetrahedron()
    topo = Topology(positions, normals, [tris])
    # edges leaving vertex 0 are created as 0->2, 0->1, 0->3; each later one
    # is linked in right after the first
    dests = [e.dest.index for e in topo.outgoing(topo.verts[0])]
    assert dests == [2, 3, 1]


def test_boundary_edges_in_creation_order():
    positions, normals, tris = make_split_squares(unit(-1, 0, 1), unit(1, 0, 1))
    topo = Topology(positions, normals, [tris])
    pairs = [(e.origin.index, e.dest.index) for e in topo.boundary_edges()]
    assert pairs == [(0, 1), (1, 2), (2, 3), (3, 0), (4, 5), (5, 6), (6, 7), (7, 4)]


def test_face_normal_and_center():
    positions, normals, tris = make_split_squares(unit(-1, 0, 1), unit(1, 0, 1))
    topo = Topology(positions, normals, [tris])
    f = topo.faces[0]
    assert np.allclose(f.normal, [0.0, 0.0, 1.0])
    assert np.allclose(f.center, [2.0 / 3.0, 1.0 / 3.0, 0.0])


def test_clusters_of_split_squares():
    positions, normals, tris = make_split_squares(unit(-1, 0, 1), unit(1, 0, 1))
    topo = Topology(positions, normals, [tris])
    assert [[v.index for v in c] for c in topo.clusters] == [[1, 4], [2, 7]]
    c = topo.verts[1].cluster
    assert topo.verts[4] in c
    assert topo.verts[2] not in c
    assert topo.verts[0].cluster is None
    assert topo.cluster_of(c.id) is c


def test_index_lists_are_concatenated():
    positions, normals, tris = make_split_squares(unit(-1, 0, 1), unit(1, 0, 1))
    flat_a = tris[:2].ravel().tolist()
    topo = Topology(positions, normals, [flat_a, tris[2:]])
    assert len(topo.faces) == 4


def test_degenerate_triangles_are_skipped():
    positions = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=float)
    normals = np.tile([0.0, 0.0, 1.0], (3, 1))
    topo = Topology(positions, normals, [[[0, 1, 2], [0, 0, 1], [2, 2, 2]]])
    assert topo.skipped_triangles == 2
    assert len(topo.faces) == 1
    assert len(topo.edges) == 3


def test_empty_mesh():
    topo = Topology(np.empty((0, 3)), np.empty((0, 3)), [np.empty((0, 3), dtype=np.int32)])
    assert topo.verts == [] and topo.edges == [] and topo.clusters == []


def test_out_of_range_index_raises():
    positions, normals, _ = make_tetrahedron()
    with pytest.raises(TopologyError, match="out of range"):
        Topology(positions, normals, [[[0, 1, 7]]])
    with pytest.raises(ValueError):
        Topology(positions, normals, [[[0, -1, 2]]])


@pytest.mark.parametrize("tris", [
    [[0, 1, 2], [0, 1, 2]],   # duplicated triangle
    [[0, 1, 2], [0, 1, 3]],   # neighbour with flipped winding
])
def test_non_manifold_strict_raises(tris):
    positions, normals, _ = make_tetrahedron()
    with pytest.raises(TopologyError) as info:
        Topology(positions, normals, [tris])
    assert info.value.messages
    assert "(0, 1)" in info.value.messages[0]


def test_non_manifold_lenient_builds():
    positions, normals, _ = make_tetrahedron()
    topo = Topology(positions, normals, [[[0, 1, 2], [0, 1, 3]]], strict=False)
    assert topo.duplicate_edges == [(0, 1)]
    ok, msgs = check_topology(topo)
    assert not ok and msgs


def test_input_validation():
    positions, normals, tris = make_tetrahedron()
    with pytest.raises(ValueError):
        Topology(positions, normals[:3], [tris])
    bad = positions.copy()
    bad[0, 0] = np.nan
    with pytest.raises(ValueError):
        Topology(bad, normals, [tris])
    with pytest.raises(ValueError):
        Topology(positions, normals, [tris], merge_length=-1.0)
    with pytest.raises(ValueError):
        Topology(positions, normals, [tris], cluster_method='octree')


def test_from_mesh_uses_config():
    positions, normals, tris = make_split_squares(unit(-1, 0, 1), unit(1, 0, 1))
    mesh = MeshData.from_triangles(positions, normals, tris)
    topo = Topology.from_mesh(mesh, EdgeMergeConfig(merge_length=0.0, cluster_method='scan'))
    # coincident vertices still cluster at zero tolerance
    assert len(topo.clusters) == 2
    topo = Topology.from_mesh(mesh)
    assert len(topo.clusters) == 2
