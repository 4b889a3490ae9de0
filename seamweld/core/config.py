"""Configuration objects for seamweld edge merging."""
from __future__ import annotations

import math
from dataclasses import dataclass

from .constants import DEFAULT_MERGE_LENGTH, CORNER_MIN_MARKERS

CLUSTER_METHODS = ('kdtree', 'scan')


@dataclass
class EdgeMergeConfig:
    """Parameters for one edge-merge pass.

    Attributes
    ----------
    merge_length : float
        Distance under which two vertices are treated as coincident.
    cluster_method : str
        ``'kdtree'`` buckets vertices with a kd-tree; ``'scan'`` runs the
        quadratic forward scan. Both produce the same clusters.
    strict_topology : bool
        Raise ``TopologyError`` when the half-edge structure fails validation.
        When False the violations are only logged.
    corner_min_markers : int
        A cluster is a corner candidate when it collected more markers than this.
    """
    merge_length: float = DEFAULT_MERGE_LENGTH
    cluster_method: str = 'kdtree'
    strict_topology: bool = True
    corner_min_markers: int = CORNER_MIN_MARKERS

    def __post_init__(self):
        if not math.isfinite(self.merge_length) or self.merge_length < 0:
            raise ValueError(f"merge_length must be non-negative, got {self.merge_length}")
        if self.cluster_method not in CLUSTER_METHODS:
            raise ValueError(f"unknown cluster_method '{self.cluster_method}'")


__all__ = ['EdgeMergeConfig', 'CLUSTER_METHODS']
