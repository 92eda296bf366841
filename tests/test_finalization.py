"""Tests for super-triangle removal and whole-triangulation properties."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
from loguru import logger
from PIL import Image

from pydelaunay.build import (
    initialize_triangulation,
    insert_point,
    remove_super_triangle,
    triangulate,
)
from pydelaunay.geometry import is_in_circumcircle, triangle_area
from pydelaunay.utils import Point


def _convex_hull_area(points: np.ndarray) -> float:
    """Area of the convex hull (Andrew's monotone chain + shoelace)."""
    pts = sorted(map(tuple, points))

    def cross(o, a, b):
        return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])

    lower, upper = [], []
    for p in pts:
        while len(lower) >= 2 and cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)
    for p in reversed(pts):
        while len(upper) >= 2 and cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)
    hull = np.array(lower[:-1] + upper[:-1])
    x, y = hull[:, 0], hull[:, 1]
    return 0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def _circumcircle(tri: np.ndarray) -> tuple[np.ndarray, float]:
    (ax, ay), (bx, by), (cx, cy) = tri
    d = 2 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    ux = (
        (ax**2 + ay**2) * (by - cy)
        + (bx**2 + by**2) * (cy - ay)
        + (cx**2 + cy**2) * (ay - by)
    ) / d
    uy = (
        (ax**2 + ay**2) * (cx - bx)
        + (bx**2 + by**2) * (ax - cx)
        + (cx**2 + cy**2) * (bx - ax)
    ) / d
    center = np.array([ux, uy])
    return center, float(np.sum((tri[0] - center) ** 2))


@pytest.fixture
def random_points() -> np.ndarray:
    rng = np.random.default_rng(42)
    return rng.uniform(0.0, 1.0, size=(40, 2))


class TestFinalization:
    """Tests for remove_super_triangle."""

    def test_not_removed_by_default(self):
        tri = triangulate([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)])
        assert any(tri.touches_super_triangle(t) for t in tri.triangles)

    def test_remove_super_triangle(self):
        tri = triangulate([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)])
        n_before = len(tri.triangles)

        remove_super_triangle(tri)

        assert len(tri.triangles) == 2
        assert len(tri.triangles) < n_before
        for t in tri.triangles:
            for v in t:
                assert not tri.super_triangle.has_vertex(v)

    def test_finalize_flag_matches_explicit_removal(self, random_points):
        finalized = triangulate(random_points, finalize=True)

        tri = triangulate(random_points)
        remove_super_triangle(tri)

        assert finalized.triangles == tri.triangles

    def test_filtered_view_does_not_mutate(self, random_points):
        tri = triangulate(random_points)
        n_triangles = len(tri.triangles)
        inner = tri.triangles_without_super_triangle()
        assert len(inner) < n_triangles
        assert len(tri.triangles) == n_triangles

    def test_removing_twice_is_harmless(self):
        tri = triangulate([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0)], finalize=True)
        remove_super_triangle(tri)
        assert len(tri.triangles) == 1

    def test_removal_logs_covered_area(self):
        messages = []
        handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
        try:
            triangulate([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)], finalize=True)
        finally:
            logger.remove(handler_id)

        removal = [m for m in messages if "touching the super triangle" in m]
        assert len(removal) == 1
        assert "2 left covering an area of 4" in removal[0]


class TestTriangulationProperties:
    """Properties every triangulation must have."""

    def test_delaunay_property_after_every_insertion(self):
        """
        After each insertion no inserted point and no super triangle corner lies
        strictly inside the circumcircle of any triangle.
        """
        rng = np.random.default_rng(42)
        points = np.column_stack(
            [rng.uniform(0, 1920, size=40), rng.uniform(0, 1080, size=40)]
        )
        tri = initialize_triangulation(points, width=1920, height=1080)

        inserted = list(tri.super_triangle)
        for point in tri.points:
            insert_point(point, tri)
            inserted.append(point)

            for t in tri.triangles:
                for p in inserted:
                    if t.has_vertex(p):
                        continue
                    assert not is_in_circumcircle(p, t), f"{p} inside circumcircle of {t}"

    def test_delaunay_property(self, random_points):
        tri = triangulate(random_points)
        points = np.asarray(random_points)

        for t in tri.triangles_without_super_triangle():
            pts = t.to_array()
            center, radius2 = _circumcircle(pts)
            dist2 = np.sum((points - center) ** 2, axis=1)
            others = ~np.any(np.all(points[:, None, :] == pts[None, :, :], axis=2), axis=1)
            assert np.all(dist2[others] >= radius2 * (1 - 1e-9))

    def test_convex_hull_coverage(self, random_points):
        tri = triangulate(random_points)
        covered = sum(triangle_area(t) for t in tri.triangles_without_super_triangle())
        assert covered == pytest.approx(_convex_hull_area(random_points), rel=1e-9)

    def test_whole_super_triangle_is_covered(self, random_points):
        tri = triangulate(random_points)
        covered = sum(triangle_area(t) for t in tri.triangles)
        assert covered == pytest.approx(triangle_area(tri.super_triangle), rel=1e-9)

    def test_every_point_is_a_vertex(self, random_points):
        tri = triangulate(random_points)
        vertices = {v for t in tri.triangles for v in t}
        for p in random_points:
            assert Point(*p) in vertices

    def test_insertion_order_does_not_change_result(self, random_points):
        forward = triangulate(random_points)
        backward = triangulate(random_points[::-1])
        shuffled = triangulate(np.random.default_rng(3).permutation(random_points))

        expected = set(forward.triangles_without_super_triangle())
        assert set(backward.triangles_without_super_triangle()) == expected
        assert set(shuffled.triangles_without_super_triangle()) == expected

    def test_input_points_are_not_mutated(self, random_points):
        original = random_points.copy()
        tri = triangulate(random_points)
        np.testing.assert_array_equal(random_points, original)
        assert tri.points == [Point(*p) for p in original]


class TestDebugPlots:
    def test_one_frame_per_inserted_point(self):
        points = [(0.0, 0.0), (4.0, 0.0), (1.0, 3.0), (3.0, 2.0)]
        tri = triangulate(points, width=5, height=5, debug=True)
        assert len(tri.debug_plots) == len(points)
        assert tri.debug_plots[0].ndim == 3
        assert tri.debug_plots[0].shape[2] == 3

    def test_export_animation(self, tmp_path):
        tri = triangulate([(0.0, 0.0), (4.0, 0.0), (1.0, 3.0)], width=5, height=5, debug=True)
        path = tmp_path / "insertion.gif"
        tri.export_animation_matplotlib(path, fps=4)
        assert path.exists()

        with Image.open(path) as gif:
            assert gif.n_frames == len(tri.debug_plots)

    def test_export_without_frames(self, tmp_path):
        tri = triangulate([(0.0, 0.0), (4.0, 0.0), (1.0, 3.0)])
        with pytest.raises(ValueError):
            tri.export_animation_matplotlib(tmp_path / "insertion.gif")

    def test_export_unsupported_format(self, tmp_path):
        tri = triangulate([(0.0, 0.0), (4.0, 0.0), (1.0, 3.0)], debug=True)
        with pytest.raises(ValueError):
            tri.export_animation_matplotlib(tmp_path / "insertion.avi")
