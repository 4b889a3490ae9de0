"""
seamweld Example: Closing Outline Cracks on a Hard-Edged Box Corner

This example walks through the whole edge-merge pipeline:
1. Build three faces of a box that meet at a corner, each with its own vertices
2. Inflate the mesh along its normals the way an inverted-hull outline does
3. Merge coincident edges and fill the corner
4. Inflate again and compare

Perfect for: Seeing what the bridging and fan triangles do
"""

import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from seamweld import EdgeMergeConfig, MergeReportLog, MeshData, configure_logging, merge_mesh_edges

OUTLINE_WIDTH = 0.15


def box_corner():
    """Faces z=0, y=0 and x=0 of a unit box; hard edges mean no shared vertices."""
    positions = np.array([
        [0, 0, 0], [0, 1, 0], [1, 1, 0], [1, 0, 0],
        [0, 0, 0], [1, 0, 0], [1, 0, 1], [0, 0, 1],
        [0, 0, 0], [0, 0, 1], [0, 1, 1], [0, 1, 0],
    ], dtype=float)
    normals = np.zeros_like(positions)
    normals[0:4] = [0, 0, -1]
    normals[4:8] = [0, -1, 0]
    normals[8:12] = [-1, 0, 0]
    triangles = np.array([
        [0, 1, 2], [0, 2, 3],
        [4, 5, 6], [4, 6, 7],
        [8, 9, 10], [8, 10, 11],
    ], dtype=np.int32)
    return MeshData.from_triangles(positions, normals, triangles, name='box_corner')


def inflate(mesh, width):
    """Vertex positions pushed out along their normals."""
    return mesh.positions + width * mesh.normals


def draw(ax, mesh, title):
    hull = inflate(mesh, OUTLINE_WIDTH)
    tris = mesh.all_triangles()
    ax.add_collection3d(Poly3DCollection(hull[tris], facecolor='black', edgecolor='grey',
                                         linewidths=0.3, alpha=0.8))
    ax.add_collection3d(Poly3DCollection(mesh.positions[tris], facecolor='tab:orange',
                                         edgecolor='none', alpha=0.6))
    lo, hi = hull.min(axis=0), hull.max(axis=0)
    ax.set_xlim(lo[0], hi[0])
    ax.set_ylim(lo[1], hi[1])
    ax.set_zlim(lo[2], hi[2])
    ax.view_init(elev=-30, azim=-135)
    ax.set_title(title)


def main():
    print("=" * 60)
    print("seamweld Example: Closing Outline Cracks")
    print("=" * 60)
    configure_logging('INFO')

    # Step 1: Build the mesh
    print("\n[1] Building box corner...")
    src = box_corner()
    print(f"  {src.vertex_count} vertices, {src.triangle_count} triangles")

    # Step 2: Merge edges
    print("\n[2] Merging edges...")
    log = MergeReportLog()
    dst, result = merge_mesh_edges(src, EdgeMergeConfig(merge_length=1e-3), log=log)
    print(f"  Merged edges:   {result.edges_merged}")
    print(f"  Merged corners: {result.corners_merged}")
    print(f"  Added triangles: {len(result.added)}")

    # Step 3: Report
    print("\n[3] Report:")
    for line in log.text().splitlines():
        print(f"  {line}")

    # Step 4: Visualize
    print("\n[4] Creating visualization...")
    fig = plt.figure(figsize=(12, 5))
    draw(fig.add_subplot(1, 2, 1, projection='3d'), src, 'Outline before merge')
    draw(fig.add_subplot(1, 2, 2, projection='3d'), dst, 'Outline after merge')
    plt.tight_layout()
    plt.savefig('stitch_hard_edges.png', dpi=150, bbox_inches='tight')
    print("  Saved visualization to: stitch_hard_edges.png")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
