"""Structural checks for the half-edge topology.

A violation means the input mesh was non-manifold or inconsistently indexed;
the builder turns a failed check into a ``TopologyError``.
"""
from __future__ import annotations

from collections import Counter
from typing import List, Tuple

__all__ = ['TopologyError', 'check_topology']


class TopologyError(ValueError):
    """Raised when the half-edge structure built from a mesh is inconsistent."""

    def __init__(self, messages):
        self.messages = list(messages)
        head = self.messages[0] if self.messages else 'invalid topology'
        extra = len(self.messages) - 1
        super().__init__(head if extra <= 0 else f"{head} (+{extra} more)")


def check_topology(topology, max_messages: int = 50) -> Tuple[bool, List[str]]:
    """Check half-edge invariants on ``topology``.

    Returns ``(ok, msgs)``. Checks, in order:

    1. duplicated directed edges recorded by the builder
    2. each vertex's stored edge originates at that vertex
    3. pair symmetry (``e.pair.pair is e`` and matching endpoints)
    4. next/prev links and closed 3-cycles
    5. each ``left`` ring visits every edge of its origin exactly once
    6. each face's edge points back to that face
    """
    msgs: List[str] = []

    def fail(msg):
        if len(msgs) < max_messages:
            msgs.append(msg)

    for a, b in topology.duplicate_edges:
        fail(f"Directed edge ({a}, {b}) used by more than one triangle (non-manifold or flipped).")

    for v in topology.verts:
        if v.edge is not None and v.edge.origin is not v:
            fail(f"Vertex {v.index} stores an edge starting at vertex {v.edge.origin.index}.")

    for e in topology.edges:
        if e.pair is not None:
            if e.pair.pair is not e:
                fail(f"Half-edge {e.index} pair is not symmetric.")
            elif e.pair.origin is not e.next.origin:
                fail(f"Half-edge {e.index} pair does not span the same vertices.")
        if e.next is None or e.prev is None:
            fail(f"Half-edge {e.index} is not linked into a triangle.")
            continue
        if e.next.prev is not e:
            fail(f"Half-edge {e.index}: next.prev does not point back.")
        if e.prev.next is not e:
            fail(f"Half-edge {e.index}: prev.next does not point back.")
        if e.next.next is None or e.next.next.next is not e:
            fail(f"Half-edge {e.index} does not close a 3-cycle.")

    out_degree = Counter(id(e.origin) for e in topology.edges)
    limit = len(topology.edges) + 1
    for v in topology.verts:
        if v.edge is None:
            continue
        seen = set()
        e = v.edge
        steps = 0
        while True:
            if e is None or e.origin is not v or id(e) in seen:
                fail(f"Vertex {v.index}: outgoing edge ring is broken.")
                break
            seen.add(id(e))
            e = e.left
            steps += 1
            if e is v.edge or steps > limit:
                break
        if e is v.edge and len(seen) != out_degree[id(v)]:
            fail(f"Vertex {v.index}: ring visits {len(seen)} of {out_degree[id(v)]} outgoing edges.")

    for f in topology.faces:
        if f.edge.face is not f:
            fail(f"Face {f.index} edge does not point back to it.")

    return not msgs, msgs
