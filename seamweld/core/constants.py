"""Central numerical tolerances and small geometry constants.

This module centralizes the thresholds used across the edge-merge pipeline so
they can be tuned consistently and referenced without scattering literals.
"""
from __future__ import annotations

# Vertex clustering
DEFAULT_MERGE_LENGTH: float = 1e-4   # coincident-vertex distance (world units)
EPS_RADIUS_REL: float = 1e-9         # relative slack on kd-tree ball queries

# Vector math
EPS_NORMALIZE: float = 1e-12         # vectors shorter than this normalize to zero
EPS_AXIS_SQ: float = 1e-5            # squared length below which a corner axis is degenerate

# Corner detection: each stitched pair records two markers per endpoint cluster,
# so more than this many markers means more than two seams meet.
CORNER_MIN_MARKERS: int = 4

__all__ = [
    'DEFAULT_MERGE_LENGTH',
    'EPS_RADIUS_REL',
    'EPS_NORMALIZE',
    'EPS_AXIS_SQ',
    'CORNER_MIN_MARKERS',
]
