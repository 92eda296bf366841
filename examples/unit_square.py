"""Triangulate the corners of the unit square and plot each insertion step."""

from pydelaunay.build import remove_super_triangle, triangulate


if __name__ == "__main__":
    points = [
        (0.0, 0.0),
        (0.0, 1.0),
        (1.0, 0.0),
        (1.0, 1.0),
    ]

    tri = triangulate(points, width=1, height=1, debug=True)
    print(f"Triangles (super triangle included): {len(tri.triangles)}")
    tri.export_animation_matplotlib("unit_square.gif", fps=1)

    remove_super_triangle(tri)
    for t in tri.triangles:
        print(t)
    tri.plot(show=True, exclude_super_t=False, point_labels=True)
