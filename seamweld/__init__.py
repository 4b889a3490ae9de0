"""Public package API for seamweld.

seamweld closes outline cracks on toon-shaded meshes: it finds boundary edges
that coincide with another boundary edge, bridges the convex ones with
zero-area triangles and fan-fills corners where several seams meet.

Example
-------
    from seamweld import MeshData, merge_mesh_edges

    dst, result = merge_mesh_edges(src)
    print(result.edges_merged, result.corners_merged)

The deeper modules (``seamweld.core.*``) are considered internal and may
change; rely on this layer for public symbols.
"""
import logging as _logging

try:
    from importlib.metadata import version as _pkg_version, PackageNotFoundError as _NotFound
    __version__ = _pkg_version("seamweld")
except _NotFound:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.0+dev"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

from .core import constants, geometry, topology, conformity, stitcher, corners, stats  # noqa: E402
from .core.config import EdgeMergeConfig  # noqa: E402
from .core.conformity import TopologyError, check_topology  # noqa: E402
from .core.constants import DEFAULT_MERGE_LENGTH  # noqa: E402
from .core.geometry import HalfLine, is_crossing  # noqa: E402
from .core.mesh import MeshData, BONE_INDEX_CHANNEL, BONE_WEIGHT_CHANNEL  # noqa: E402
from .core.topology import Topology  # noqa: E402
from .core.stitcher import stitch_seams  # noqa: E402
from .core.corners import fill_corners  # noqa: E402
from .core.stats import MergeStats, MergeReportLog, format_stats_table  # noqa: E402
from .core.edge_merge import EdgeMergeResult, merge_edges, merge_mesh_edges  # noqa: E402
from .core.combine import CombineSource, CombinedMesh, combine_meshes  # noqa: E402
from .core.logging_utils import configure_logging, get_logger  # noqa: E402

__all__ = [
    '__version__',
    # entry points
    'merge_edges', 'merge_mesh_edges', 'combine_meshes',
    # data
    'MeshData', 'EdgeMergeConfig', 'EdgeMergeResult', 'MergeStats', 'MergeReportLog',
    'CombineSource', 'CombinedMesh', 'Topology', 'TopologyError',
    # building blocks
    'stitch_seams', 'fill_corners', 'check_topology', 'is_crossing', 'HalfLine',
    'format_stats_table', 'DEFAULT_MERGE_LENGTH', 'BONE_INDEX_CHANNEL', 'BONE_WEIGHT_CHANNEL',
    # logging
    'configure_logging', 'get_logger',
    # submodules
    'constants', 'geometry', 'topology', 'conformity', 'stitcher', 'corners', 'stats',
]
