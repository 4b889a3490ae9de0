import datetime
import io
import logging
import pathlib
import sys

import numpy as np
import pytest

if sys.version_info < (3, 8):
    pytest.exit("Python >= 3.8 is required to run tests. Current version: {}".format(sys.version.replace("\n", " ")))


LOG_DIR = pathlib.Path(__file__).parent / "test-logs"


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    # Attach the TestReport (with .outcome) to the item so fixtures can see the
    # outcome in teardown.
    outcome = yield
    rep = outcome.get_result()
    setattr(item, "rep_" + rep.when, rep)


@pytest.fixture(autouse=True)
def capture_test_logs(request):
    """Capture seamweld logging for each test into an in-memory buffer and
    write it to a file only when the test fails.
    """
    pkg_logger = logging.getLogger("seamweld")
    prev_handlers = list(pkg_logger.handlers)
    for h in prev_handlers:
        pkg_logger.removeHandler(h)

    buf = io.StringIO()
    handler = logging.StreamHandler(buf)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    pkg_logger.addHandler(handler)
    prev_level = pkg_logger.level
    pkg_logger.setLevel(logging.DEBUG)

    try:
        yield
    finally:
        pkg_logger.removeHandler(handler)
        pkg_logger.setLevel(prev_level)
        for h in prev_handlers:
            pkg_logger.addHandler(h)

        rep = getattr(request.node, "rep_call", None)
        if rep is not None and getattr(rep, "outcome", None) == "failed":
            nodeid = request.node.nodeid.replace("::", "__").replace("/", "_")
            ts = datetime.datetime.now().strftime("%Y%m%dT%H%M%S")
            LOG_DIR.mkdir(exist_ok=True)
            fname = LOG_DIR / ("{}__{}.log".format(nodeid, ts))
            with open(fname, "w", encoding="utf-8") as f:
                f.write("=== Test: {}\n".format(request.node.nodeid))
                f.write("=== Timestamp: {}\n\n".format(ts))
                f.write(buf.getvalue())


# -----------------------
# Shared meshes
# -----------------------
def unit(*v):
    v = np.asarray(v, dtype=float)
    return v / np.linalg.norm(v)


def make_split_squares(seam_normal_a, seam_normal_b):
    """Two unit squares side by side in the z=0 plane, split along x=1.

    Square A is vertices 0-3, square B is 4-7. The seam runs through A's
    vertices 1, 2 and B's vertices 4, 7; they get the given normals, all
    other vertices face +z.
    """
    positions = np.array([
        [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],   # A
        [1, 0, 0], [2, 0, 0], [2, 1, 0], [1, 1, 0],   # B
    ], dtype=float)
    normals = np.tile([0.0, 0.0, 1.0], (8, 1))
    normals[[1, 2]] = seam_normal_a
    normals[[4, 7]] = seam_normal_b
    triangles = np.array([[0, 1, 2], [0, 2, 3], [4, 5, 6], [4, 6, 7]], dtype=np.int32)
    return positions, normals, triangles


def make_cube_corner():
    """Three faces of a cube meeting at the origin, each with its own vertices.

    Faces lie in z=0 (0-3), y=0 (4-7) and x=0 (8-11) with outward normals
    -z, -y, -x, so all three seams are convex. Two stray triangles (12-14,
    15-17) touch the corner with one vertex each, bringing the corner
    cluster to five vertices: 0, 4, 8, 12, 15.
    """
    positions = np.array([
        [0, 0, 0], [0, 1, 0], [1, 1, 0], [1, 0, 0],       # z=0 face
        [0, 0, 0], [1, 0, 0], [1, 0, 1], [0, 0, 1],       # y=0 face
        [0, 0, 0], [0, 0, 1], [0, 1, 1], [0, 1, 0],       # x=0 face
        [0, 0, 0], [-1, -2, -3], [-3, -1, -2],            # stray
        [0, 0, 0], [-2, -3, -1], [-1, -1, -4],            # stray
    ], dtype=float)
    normals = np.zeros_like(positions)
    normals[0:4] = [0, 0, -1]
    normals[4:8] = [0, -1, 0]
    normals[8:12] = [-1, 0, 0]
    normals[12:15] = unit(-1, -2, -3)
    normals[15:18] = unit(-3, -1, -2)
    triangles = np.array([
        [0, 1, 2], [0, 2, 3],
        [4, 5, 6], [4, 6, 7],
        [8, 9, 10], [8, 10, 11],
        [12, 13, 14],
        [15, 16, 17],
    ], dtype=np.int32)
    return positions, normals, triangles


CONVEX_A = unit(-1, 0, 1)
CONVEX_B = unit(1, 0, 1)


@pytest.fixture
def convex_squares():
    return make_split_squares(CONVEX_A, CONVEX_B)


@pytest.fixture
def concave_squares():
    return make_split_squares(CONVEX_B, CONVEX_A)


@pytest.fixture
def cube_corner():
    return make_cube_corner()
