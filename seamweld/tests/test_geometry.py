import math

import numpy as np
import pytest

from seamweld.core.geometry import (
    HalfLine, cross, dot, is_crossing, normalize, rot90, rot270, triangle_centroid, triangle_normal,
)


def test_is_crossing_basic_cases():
    assert is_crossing(HalfLine((0, 0), (1, 0)), HalfLine((1, 0), (-1, 1))) is True
    assert is_crossing(HalfLine((0, 0), (1, 0)), HalfLine((1, 0), (-1, -1))) is False


def test_is_crossing_shared_origin_counts_as_crossing():
    assert is_crossing(HalfLine((2, 3), (1, 0)), HalfLine((2, 3), (0, 1)))
    assert is_crossing(HalfLine((2, 3), (1, 0)), HalfLine((2, 3), (-1, 0)))


def test_is_crossing_opposite_sides_never_cross():
    # l0 heads up, l1 heads down from a point to the right
    assert not is_crossing(HalfLine((0, 0), (0, 1)), HalfLine((1, 0), (0, -1)))


def test_is_crossing_parallel_rays_do_not_cross():
    assert not is_crossing(HalfLine((0, 0), (0, 1)), HalfLine((1, 0), (0, 1)))


def test_is_crossing_collinear_rays():
    # both run along the line through the origins
    assert is_crossing(HalfLine((0, 0), (1, 0)), HalfLine((2, 0), (1, 0)))      # l0 runs into l1
    assert is_crossing(HalfLine((0, 0), (-1, 0)), HalfLine((2, 0), (-1, 0)))    # l1 runs into l0
    assert not is_crossing(HalfLine((0, 0), (-1, 0)), HalfLine((2, 0), (1, 0)))  # diverging


def test_is_crossing_randomized_against_construction():
    # Origins sit on opposite ends of a unit circle around a random point;
    # ray angles are drawn so that the answer is known by construction.
    rng = np.random.default_rng(1234)
    for _ in range(1000):
        crossing = bool(rng.integers(0, 2))
        if crossing:
            theta0 = rng.uniform(0.03, 3.14)
            theta1 = rng.uniform(0.01, theta0 - 0.01)
        else:
            theta0 = rng.uniform(-3.14, 3.1)
            theta1 = rng.uniform(max(theta0, 0.0) + 0.01, 3.14)
        ofs_theta = rng.uniform(0.0, 2.0 * math.pi)
        ofs_pos = rng.uniform(-100.0, 100.0, size=2)

        u = np.array([math.cos(ofs_theta), math.sin(ofs_theta)])
        p0 = tuple(u + ofs_pos)
        p1 = tuple(-u + ofs_pos)
        dir0 = (math.cos(ofs_theta + theta0), math.sin(ofs_theta + theta0))
        dir1 = (math.cos(ofs_theta + theta1), math.sin(ofs_theta + theta1))

        assert is_crossing(HalfLine(p0, dir0), HalfLine(p1, dir1)) == crossing, (theta0, theta1, ofs_theta)


def test_rotations():
    assert rot90((1.0, 0.0)) == (-0.0, 1.0)
    assert rot270((1.0, 0.0)) == (0.0, -1.0)
    assert rot270(rot90((0.3, -0.7))) == (0.3, -0.7)


def test_normalize_and_zero_vector():
    v = normalize((3.0, 0.0, 4.0))
    assert np.allclose(v, [0.6, 0.0, 0.8])
    z = normalize((0.0, 0.0, 0.0))
    assert z.shape == (3,)
    assert not np.any(z)


def test_cross_and_dot():
    x = np.array([1.0, 0.0, 0.0])
    y = np.array([0.0, 1.0, 0.0])
    assert np.array_equal(cross(x, y), [0.0, 0.0, 1.0])
    assert dot(x, y) == 0.0
    assert dot((1, 2, 3), (4, 5, 6)) == pytest.approx(32.0)


def test_triangle_normal_is_right_handed():
    n = triangle_normal((0, 0, 0), (1, 0, 0), (0, 1, 0))
    assert np.allclose(n, [0.0, 0.0, 1.0])
    # degenerate triangle has no normal
    assert not np.any(triangle_normal((0, 0, 0), (1, 0, 0), (2, 0, 0)))


def test_triangle_centroid():
    c = triangle_centroid((0, 0, 0), (3, 0, 0), (0, 3, 0))
    assert np.allclose(c, [1.0, 1.0, 0.0])
