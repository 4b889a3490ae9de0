"""Combine several meshes into one, merging submeshes that share a material.

Each source submesh is bound to a material name; submeshes with the same name
end up in one output submesh, in first-seen material order. Sources are baked
into a common space with their local-to-world matrices.

Skinned sources also carry a bone list and one bind pose per bone. Bone lists
are merged by name in first-seen order, bone index channels are rewritten to
point into the merged list, and bind poses are re-expressed against the baked
vertices. When two sources share a bone, the later source's bind pose wins.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import normalize
from .logging_utils import get_logger
from .mesh import BONE_INDEX_CHANNEL, MeshData
from .stats import MergeReportLog

logger = get_logger('seamweld.combine')

__all__ = ['CombineSource', 'CombinedMesh', 'combine_meshes', 'transform_points', 'transform_normals']


@dataclass
class CombineSource:
    """A mesh to combine.

    Attributes
    ----------
    mesh : MeshData
    materials : sequence of str
        One material name per submesh.
    transform : (4, 4) array-like, optional
        Local-to-world matrix; identity when omitted.
    bones : sequence of str
        Bone names that ``BONE_INDEX_CHANNEL`` indexes into.
    bindposes : (B, 4, 4) array-like, optional
        One bind pose per bone; required when ``bones`` is non-empty.
    """
    mesh: MeshData
    materials: Sequence[str]
    transform: Optional[np.ndarray] = None
    bones: Sequence[str] = ()
    bindposes: Optional[np.ndarray] = None


@dataclass
class CombinedMesh:
    mesh: MeshData
    materials: List[str]
    bones: List[str] = field(default_factory=list)
    bindposes: np.ndarray = field(default_factory=lambda: np.empty((0, 4, 4)))


def _as_matrix(transform) -> np.ndarray:
    if transform is None:
        return np.eye(4)
    m = np.asarray(transform, dtype=np.float64)
    if m.shape != (4, 4):
        raise ValueError(f"transform must be a 4x4 matrix, got shape {m.shape}")
    return m


def _as_bindposes(src: CombineSource) -> np.ndarray:
    poses = np.empty((0, 4, 4)) if src.bindposes is None else np.asarray(src.bindposes, dtype=np.float64)
    if poses.size == 0:
        poses = poses.reshape(0, 4, 4)
    if poses.ndim != 3 or poses.shape[1:] != (4, 4):
        raise ValueError(f"bindposes of '{src.mesh.name}' must have shape (B, 4, 4), got {poses.shape}")
    if poses.shape[0] != len(src.bones):
        raise ValueError(f"source '{src.mesh.name}' has {len(src.bones)} bones "
                         f"but {poses.shape[0]} bindposes")
    return poses


def transform_points(points: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Apply the affine part of a 4x4 matrix to (N, 3) points."""
    return points @ matrix[:3, :3].T + matrix[:3, 3]


def transform_normals(normals: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Transform (N, 3) normals by the inverse-transpose of the linear part and renormalize."""
    try:
        normal_matrix = np.linalg.inv(matrix[:3, :3]).T
    except np.linalg.LinAlgError as exc:
        raise ValueError("transform is singular; normals cannot be transformed") from exc
    out = normals @ normal_matrix.T
    return np.array([normalize(n) for n in out], dtype=np.float64).reshape(-1, 3)


def _merge_bones(sources: Sequence[CombineSource], matrices: Sequence[np.ndarray]):
    """Return ``(bones, bindposes, bone_maps)``; ``bone_maps[i]`` maps source i's bone slots to merged ones."""
    bones: List[str] = []
    slot: Dict[str, int] = {}
    bone_maps: List[np.ndarray] = []
    poses_by_source = []
    for src in sources:
        poses = _as_bindposes(src)
        idx = []
        for b in src.bones:
            if b not in slot:
                slot[b] = len(bones)
                bones.append(b)
            idx.append(slot[b])
        bone_maps.append(np.asarray(idx, dtype=np.int64))
        poses_by_source.append(poses)

    bindposes = np.tile(np.eye(4), (len(bones), 1, 1))
    for m, poses, bmap in zip(matrices, poses_by_source, bone_maps):
        if not bmap.size:
            continue
        # vertices were baked by m, so the pose must undo it first
        bindposes[bmap] = poses @ np.linalg.inv(m)
    return bones, bindposes, bone_maps


def _check_bone_indices(src: CombineSource, n_bones: int):
    indices = src.mesh.channels.get(BONE_INDEX_CHANNEL)
    if indices is None or indices.size == 0:
        return
    if not np.issubdtype(indices.dtype, np.integer):
        raise ValueError(f"'{BONE_INDEX_CHANNEL}' of '{src.mesh.name}' must be integer, got {indices.dtype}")
    if indices.min() < 0 or indices.max() >= n_bones:
        raise ValueError(f"'{BONE_INDEX_CHANNEL}' of '{src.mesh.name}' refers to a bone outside its "
                         f"{n_bones} bones")


def combine_meshes(sources: Sequence[CombineSource], name: str = 'Combined',
                   log: Optional[MergeReportLog] = None) -> CombinedMesh:
    """Bake ``sources`` into one mesh with one submesh per distinct material.

    Every output submesh gets its own copy of the vertices it references, so
    a vertex shared by two source submeshes is duplicated. Extra vertex
    channels survive only when every source carries them; a surviving
    ``BONE_INDEX_CHANNEL`` is rewritten against the merged bone list.

    Raises
    ------
    ValueError
        No sources, a material list that does not match the submesh count, a
        bind pose count that does not match the bone count, a bone index out
        of range, or a singular transform.
    """
    if not sources:
        raise ValueError("combine_meshes needs at least one source")

    materials: List[str] = []
    groups: Dict[str, List[Tuple[int, int]]] = {}
    for si, src in enumerate(sources):
        if len(src.materials) != src.mesh.submesh_count:
            raise ValueError(f"source '{src.mesh.name}' has {src.mesh.submesh_count} submeshes "
                             f"but {len(src.materials)} materials")
        _check_bone_indices(src, len(src.bones))
        for k, mat in enumerate(src.materials):
            if mat not in groups:
                groups[mat] = []
                materials.append(mat)
            groups[mat].append((si, k))

    common = set(sources[0].mesh.channels)
    for src in sources[1:]:
        common &= set(src.mesh.channels)
    for src in sources:
        dropped = sorted(set(src.mesh.channels) - common)
        if dropped:
            logger.debug("combine: dropping channels %s of '%s'", dropped, src.mesh.name)
    channel_keys = sorted(common)

    matrices = [_as_matrix(src.transform) for src in sources]
    baked = []
    for src, m in zip(sources, matrices):
        baked.append((transform_points(src.mesh.positions, m), transform_normals(src.mesh.normals, m)))
    bones, bindposes, bone_maps = _merge_bones(sources, matrices)

    positions, normals, submeshes = [], [], []
    channels: Dict[str, list] = {key: [] for key in channel_keys}
    offset = 0
    for mat in materials:
        group_tris = []
        for si, k in groups[mat]:
            src = sources[si].mesh
            tris = src.submeshes[k]
            if tris.size == 0:
                continue
            used = np.unique(tris)
            remap = np.full(src.vertex_count, -1, dtype=np.int64)
            remap[used] = np.arange(used.size) + offset
            offset += used.size
            pts, nrm = baked[si]
            positions.append(pts[used])
            normals.append(nrm[used])
            for key in channel_keys:
                values = src.channels[key][used]
                if key == BONE_INDEX_CHANNEL and values.size:
                    values = bone_maps[si][values].astype(values.dtype)
                channels[key].append(values)
            group_tris.append(remap[tris])
        submeshes.append(np.vstack(group_tris) if group_tris else np.empty((0, 3), dtype=np.int32))

    mesh = MeshData(
        np.vstack(positions) if positions else np.empty((0, 3)),
        np.vstack(normals) if normals else np.empty((0, 3)),
        submeshes,
        name=name,
        channels={key: np.concatenate(vals) for key, vals in channels.items() if vals},
    )
    logger.info("combined %d meshes into '%s': %d vertices, %d submeshes, %d bones",
                len(sources), name, mesh.vertex_count, mesh.submesh_count, len(bones))
    if log is not None:
        log.add_combine([s.mesh.name for s in sources], name)
    return CombinedMesh(mesh=mesh, materials=materials, bones=bones, bindposes=bindposes)
