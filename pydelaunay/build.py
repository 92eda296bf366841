from collections.abc import Iterable, Sequence

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from pydelaunay.delaunay import Triangulation
from pydelaunay.geometry import is_in_circumcircle, triangle_area
from pydelaunay.utils import HEIGHT, WIDTH, Edge, Point, Triangle, Vec2d, as_point


def create_super_triangle(width: int = WIDTH, height: int = HEIGHT) -> Triangle:
    """
    Build a triangle enclosing the whole canvas and, at canvas scale, the
    circumcircles met during insertion.

    In units of the canvas size its corners are (-1, -1), (-1, 5) and (5, -1).
    """
    return Triangle(
        Point(-1.0 * width, -1.0 * height),
        Point(-1.0 * width, 5.0 * height),
        Point(5.0 * width, -1.0 * height),
    )


def _as_point_list(points: Sequence[Vec2d] | NDArray[np.floating]) -> list[Point]:
    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return []
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected points with shape (N, 2), got {arr.shape}")
    return [as_point(p) for p in arr]


def initialize_triangulation(
    points: Sequence[Vec2d] | NDArray[np.floating],
    width: int = WIDTH,
    height: int = HEIGHT,
) -> Triangulation:
    """
    Initialize the triangulation with a super triangle.

    :param points: points to triangulate, in insertion order
    :param width: canvas width, only used to size the super triangle
    :param height: canvas height, only used to size the super triangle
    :return: a Triangulation holding the super triangle as its only triangle
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive, got {width}x{height}")

    super_triangle = create_super_triangle(width, height)
    return Triangulation(
        points=_as_point_list(points),
        super_triangle=super_triangle,
        width=width,
        height=height,
        triangles=[super_triangle],
    )


def find_bad_triangles(point: Point, triangles: Iterable[Triangle]) -> list[Triangle]:
    """Triangles whose circumcircle strictly contains `point`."""
    return [t for t in triangles if is_in_circumcircle(point, t)]


def find_polygon_hole(bad_triangles: Sequence[Triangle]) -> list[Edge]:
    """
    Boundary of the union of the bad triangles.

    An edge shared by two bad triangles is inside the hole and dropped; an
    edge that belongs to a single bad triangle is on the boundary. An edge is
    counted as belonging to a triangle when both its endpoints are vertices of
    that triangle.
    """
    polygon_edges = []
    for t in bad_triangles:
        for edge in t.edges():
            count = sum(
                1 for t2 in bad_triangles if t2.has_vertex(edge.a) and t2.has_vertex(edge.b)
            )
            if count <= 1:
                polygon_edges.append(edge)
    return polygon_edges


def remove_triangles(triangles: list[Triangle], to_remove: Iterable[Triangle]) -> None:
    """
    Remove, in place, the first triangle equal to each of `to_remove`.

    Equality is the order independent triangle equality, not identity.
    """
    keep_mask = [True] * len(triangles)
    for t in to_remove:
        idx = next(
            (i for i, t2 in enumerate(triangles) if keep_mask[i] and t2 == t), None
        )
        if idx is not None:
            keep_mask[idx] = False
    triangles[:] = [t for t, keep in zip(triangles, keep_mask) if keep]


def insert_point(point: Point, triangulation: Triangulation) -> Triangulation:
    """
    Insert a point into the triangulation (one Bowyer-Watson step).

    :param point: Coordinates of the point
    :param triangulation: run state, updated in place
    :return: the same Triangulation
    """
    triangles = triangulation.triangles

    bad_triangles = find_bad_triangles(point, triangles)
    polygon_edges = find_polygon_hole(bad_triangles)
    logger.trace(
        f"Point {point}: {len(bad_triangles)} bad triangles, {len(polygon_edges)} hole edges"
    )

    remove_triangles(triangles, bad_triangles)

    # fan the hole from the new point
    for edge in polygon_edges:
        triangles.append(Triangle(point, edge.a, edge.b))

    return triangulation


def remove_super_triangle(triangulation: Triangulation) -> None:
    """
    Modify the Triangulation in place by removing every triangle that shares
    a vertex with the super triangle.

    Never called by `triangulate` unless asked to: keeping those triangles
    fills the canvas border regions that the convex hull of the points does
    not reach.
    """
    n_before = len(triangulation.triangles)
    triangulation.triangles[:] = triangulation.triangles_without_super_triangle()
    covered = sum(triangle_area(t) for t in triangulation.triangles)
    logger.debug(
        f"Removed {n_before - len(triangulation.triangles)} triangles touching the super triangle, "
        f"{len(triangulation.triangles)} left covering an area of {covered:.6g}"
    )


def triangulate(
    points: Sequence[Vec2d] | NDArray[np.floating],
    width: int = WIDTH,
    height: int = HEIGHT,
    finalize: bool = False,
    debug: bool = False,
) -> Triangulation:
    """
    Delaunay triangulation with the Bowyer-Watson incremental algorithm.

    Points are inserted in the given order. The returned `triangles` still
    include triangles touching the super triangle unless `finalize` is set;
    `remove_super_triangle` can also be called on the result afterwards.

    :param points: Input points to triangulate
    :param width: canvas width used to size the super triangle
    :param height: canvas height used to size the super triangle
    :param finalize: remove triangles touching the super triangle
    :param debug: capture a debug plot after every insertion
    :return: the Triangulation, whose `triangles` is the result
    """
    triangulation = initialize_triangulation(points, width=width, height=height)

    for point in triangulation.points:
        insert_point(point, triangulation)
        if debug:
            triangulation.plot(title=f"After inserting {point}")

    logger.debug(
        f"Triangulated {len(triangulation.points)} points into {len(triangulation.triangles)} triangles"
    )

    if finalize:
        remove_super_triangle(triangulation)

    return triangulation
