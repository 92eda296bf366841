"""
Compare coverage with and without the super triangle.

Keeping the triangles that touch the super triangle paints the whole canvas;
removing them leaves the regions outside the convex hull of the points empty.
"""

import numpy as np

from pydelaunay.build import triangulate
from pydelaunay.render import generate_colors, generate_points_list, write_image


def main():
    width, height = 640, 360
    rng = np.random.default_rng(0)
    points = generate_points_list(width, height, 60, boundary_probability=0, rng=rng)

    for finalize in (False, True):
        tri = triangulate(points, width=width, height=height, finalize=finalize)
        pixels = np.zeros((height, width, 3), dtype=np.uint8)
        generate_colors(pixels, tri.triangles, rng=np.random.default_rng(1))

        empty = int(np.sum(~pixels.any(axis=2)))
        print(f"finalize={finalize}: {len(tri.triangles)} triangles, {empty} unpainted pixels")
        write_image(pixels, f"coverage_finalize_{finalize}.png")


if __name__ == "__main__":
    main()
