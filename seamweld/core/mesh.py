"""Mesh container shared by the edge-merge driver and the mesh combiner.

Canonical storage:
    positions: (N, 3) float64 array
    normals:   (N, 3) float64 array
    submeshes: list of (M_k, 3) int32 triangle arrays
    channels:  dict of extra per-vertex arrays (uv sets, colors, tangents,
               skinning, ...), each with N rows

Skinning uses two well-known channels: ``BONE_INDEX_CHANNEL`` holds (N, K)
integer indices into the owner's bone list, ``BONE_WEIGHT_CHANNEL`` the
matching (N, K) weights. Index channels are remapped when meshes are combined.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

__all__ = ['MeshData', 'as_triangle_array', 'BONE_INDEX_CHANNEL', 'BONE_WEIGHT_CHANNEL']

BONE_INDEX_CHANNEL = 'bone_indices'
BONE_WEIGHT_CHANNEL = 'bone_weights'


def as_triangle_array(triangles, n_vertices: Optional[int] = None) -> np.ndarray:
    """Return ``triangles`` as a contiguous (M, 3) int32 array.

    Accepts a flat index list (length divisible by 3) or an (M, 3) array-like.
    When ``n_vertices`` is given, indices are bounds checked.

    Raises
    ------
    ValueError
        If the shape is not a triangle list or an index is out of range.
    """
    arr = np.asarray(triangles)
    if arr.size == 0:
        return np.empty((0, 3), dtype=np.int32)
    if not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"triangle indices must be integers, got dtype {arr.dtype}")
    if arr.ndim == 1:
        if arr.shape[0] % 3 != 0:
            raise ValueError(f"flat index list length {arr.shape[0]} is not a multiple of 3")
        arr = arr.reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"expected (M, 3) triangle array, got shape {arr.shape}")
    if n_vertices is not None and (arr.min() < 0 or arr.max() >= n_vertices):
        raise ValueError("Triangle indices out of range.")
    return np.ascontiguousarray(arr, dtype=np.int32)


def _as_vec3_array(values, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 3), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"{what} must have shape (N, 3), got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{what} contain non-finite values")
    return np.ascontiguousarray(arr)


@dataclass
class MeshData:
    """Indexed triangle mesh with per-vertex normals and optional submeshes."""
    positions: np.ndarray
    normals: np.ndarray
    submeshes: List[np.ndarray] = field(default_factory=list)
    name: str = 'mesh'
    channels: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self):
        self.positions = _as_vec3_array(self.positions, 'positions')
        self.normals = _as_vec3_array(self.normals, 'normals')
        n = self.positions.shape[0]
        if self.normals.shape[0] != n:
            raise ValueError(f"normals ({self.normals.shape[0]}) and positions ({n}) differ in length")
        self.submeshes = [as_triangle_array(s, n) for s in self.submeshes]
        channels = {}
        for key, values in self.channels.items():
            arr = np.asarray(values)
            if arr.shape[:1] != (n,):
                raise ValueError(f"channel '{key}' has {arr.shape[:1]} rows, expected {n}")
            channels[key] = arr
        self.channels = channels

    @classmethod
    def from_triangles(cls, positions, normals, triangles, name: str = 'mesh') -> 'MeshData':
        """Build a single-submesh mesh."""
        return cls(positions, normals, [triangles], name=name)

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def submesh_count(self) -> int:
        return len(self.submeshes)

    @property
    def triangle_count(self) -> int:
        return int(sum(s.shape[0] for s in self.submeshes))

    def all_triangles(self) -> np.ndarray:
        """All submesh triangles concatenated in submesh order."""
        if not self.submeshes:
            return np.empty((0, 3), dtype=np.int32)
        return np.vstack(self.submeshes).astype(np.int32, copy=False)

    def clone(self, name: Optional[str] = None) -> 'MeshData':
        """Deep copy of every buffer, extra channels included."""
        return MeshData(
            self.positions.copy(),
            self.normals.copy(),
            [s.copy() for s in self.submeshes],
            name=self.name if name is None else name,
            channels={k: v.copy() for k, v in self.channels.items()},
        )

    def with_submesh(self, index: int, triangles, name: Optional[str] = None) -> 'MeshData':
        """Return a clone whose submesh ``index`` is replaced by ``triangles``."""
        if not 0 <= index < max(1, self.submesh_count):
            raise IndexError(f"submesh index {index} out of range ({self.submesh_count} submeshes)")
        out = self.clone(name=name)
        tris = as_triangle_array(triangles, self.vertex_count)
        if out.submeshes:
            out.submeshes[index] = tris
        else:
            out.submeshes.append(tris)
        return out
