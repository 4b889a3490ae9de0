"""Merge counters and report formatting.

``MergeStats`` is what one edge-merge call returns. ``MergeReportLog``
collects human readable entries for any number of calls; it is an ordinary
object owned by the caller, so independent tools (or tests) never share one.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

__all__ = ['MergeStats', 'MergeReportLog', 'format_stats_table']

_SEPARATOR = '------------------'


@dataclass
class MergeStats:
    edges_merged: int = 0
    corners_merged: int = 0
    valleys: int = 0
    complex_corners: int = 0
    unmatched_edges: int = 0
    added_triangles: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'edges_merged': self.edges_merged,
            'corners_merged': self.corners_merged,
            'valleys': self.valleys,
            'complex_corners': self.complex_corners,
            'unmatched_edges': self.unmatched_edges,
            'added_triangles': self.added_triangles,
        }


class MergeReportLog:
    """Accumulates report entries; successive entries are separated by a rule."""

    def __init__(self):
        self._lines: List[str] = []

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def reset(self):
        self._lines.clear()

    def _begin_entry(self):
        if self._lines:
            self._lines.extend([_SEPARATOR, ''])

    def add_edge_merge(self, src_name: str, dst_name: str, src_triangles: int, dst_triangles: int,
                       stats: MergeStats, success: bool = True):
        self._begin_entry()
        status = 'ok' if success else 'failed'
        self._lines.extend([
            f"Edge merge [{status}] : {src_name} -> {dst_name}",
            f"Triangles: {src_triangles} -> {dst_triangles}",
            f"Merged edges: {stats.edges_merged}",
            f"Merged corners: {stats.corners_merged}",
        ])

    def add_combine(self, src_names: Sequence[str], dst_name: str, success: bool = True):
        self._begin_entry()
        status = 'ok' if success else 'failed'
        self._lines.append(f"Mesh combine [{status}]")
        self._lines.extend(f"    {name}" for name in src_names)
        self._lines.append(f"     -> {dst_name}")

    def text(self) -> str:
        return '\n'.join(self._lines) + ('\n' if self._lines else '')


def format_stats_table(stats_by_mesh: Mapping[str, MergeStats]) -> str:
    """Return a human readable multi-line table, one row per mesh."""
    if not stats_by_mesh:
        return "<no stats>"
    header = ["mesh", "edges", "corners", "valleys", "complex", "unmatched", "tris+"]
    rows = []
    for name in sorted(stats_by_mesh.keys()):
        s = stats_by_mesh[name]
        rows.append([name, str(s.edges_merged), str(s.corners_merged), str(s.valleys),
                     str(s.complex_corners), str(s.unmatched_edges), str(s.added_triangles)])
    col_w = [len(h) for h in header]
    for r in rows:
        for i, v in enumerate(r):
            if len(v) > col_w[i]:
                col_w[i] = len(v)

    def fmt(r):
        return " ".join(r[i].rjust(col_w[i]) for i in range(len(r)))
    lines = [fmt(header), "-" * (sum(col_w) + len(col_w) - 1)] + [fmt(r) for r in rows]
    return "\n".join(lines)
