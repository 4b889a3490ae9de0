"""Geometry primitives for the edge-merge pipeline.

3D helpers take and return float64 numpy arrays of shape (3,). The 2D helpers
used by the fold classification work on plain ``(x, y)`` tuples; they run once
per boundary edge and stay exact (no tolerances) so the half-line test is a
pure sign test.
"""
from __future__ import annotations

import math
from typing import NamedTuple, Tuple

import numpy as np

from .constants import EPS_NORMALIZE

__all__ = [
    'dot', 'cross', 'normalize', 'rot90', 'rot270', 'dot2',
    'HalfLine', 'is_crossing', 'triangle_normal', 'triangle_centroid',
]

Vec2 = Tuple[float, float]


def dot(a, b) -> float:
    """3D dot product."""
    return float(a[0]*b[0] + a[1]*b[1] + a[2]*b[2])


def cross(a, b) -> np.ndarray:
    """3D cross product."""
    return np.array((
        a[1]*b[2] - a[2]*b[1],
        a[2]*b[0] - a[0]*b[2],
        a[0]*b[1] - a[1]*b[0],
    ), dtype=np.float64)


def normalize(v) -> np.ndarray:
    """Return v scaled to unit length, or the zero vector if v is (near) zero."""
    v = np.asarray(v, dtype=np.float64)
    mag = math.sqrt(float(np.dot(v, v)))
    if mag > EPS_NORMALIZE:
        return v / mag
    return np.zeros_like(v)


def rot90(a: Vec2) -> Vec2:
    """Rotate a 2D vector by +90 degrees."""
    return (-a[1], a[0])


def rot270(a: Vec2) -> Vec2:
    """Rotate a 2D vector by -90 degrees."""
    return (a[1], -a[0])


def dot2(a: Vec2, b: Vec2) -> float:
    return a[0]*b[0] + a[1]*b[1]


class HalfLine(NamedTuple):
    """2D ray starting at ``origin`` and extending along ``direction``."""
    origin: Vec2
    direction: Vec2


def is_crossing(l0: HalfLine, l1: HalfLine) -> bool:
    """Return True if the two rays cross. Touching endpoints count as crossing.

    The test never looks at how far the rays extend. With ``p01`` the vector
    from ``l0``'s origin to ``l1``'s origin and ``t`` its left normal, rays
    whose directions fall on opposite sides of the connecting line never meet;
    otherwise they meet exactly when they rotate toward each other.

    Directions running along the connecting line make the side test
    ambiguous and are resolved explicitly:

    - both along the line: they meet iff one of them heads at the other;
    - only ``l0`` along the line: they meet iff ``l0`` heads at ``l1``'s
      origin and ``l1`` turns to ``l0``'s left.

    Examples
    --------
    >>> is_crossing(HalfLine((0, 0), (1, 0)), HalfLine((1, 0), (-1, 1)))
    True
    >>> is_crossing(HalfLine((0, 0), (1, 0)), HalfLine((1, 0), (-1, -1)))
    False
    """
    p01 = (l1.origin[0] - l0.origin[0], l1.origin[1] - l0.origin[1])
    length = math.hypot(p01[0], p01[1])
    if length == 0.0:
        return True

    n = (p01[0] / length, p01[1] / length)
    t = rot90(n)
    d0 = dot2(t, l0.direction)
    d1 = dot2(t, l1.direction)
    if d0 * d1 < 0.0:
        return False

    turn = dot2(rot90(l0.direction), l1.direction)
    if d0 == 0.0:
        ahead0 = dot2(n, l0.direction) > 0.0
        if d1 == 0.0:
            return ahead0 or dot2(n, l1.direction) < 0.0
        return ahead0 and turn > 0.0
    return turn * d0 > 0.0


def triangle_normal(p0, p1, p2) -> np.ndarray:
    """Unit normal of a counter-clockwise triangle (zero for degenerate input)."""
    p0 = np.asarray(p0, dtype=np.float64)
    return normalize(cross(np.asarray(p1, dtype=np.float64) - p0,
                           np.asarray(p2, dtype=np.float64) - p0))


def triangle_centroid(p0, p1, p2) -> np.ndarray:
    return (np.asarray(p0, dtype=np.float64) + np.asarray(p1, dtype=np.float64)
            + np.asarray(p2, dtype=np.float64)) / 3.0
