import numpy as np
from shewchuk import orientation

from pydelaunay.utils import Point, Triangle


def cross_product(a: Point, b: Point) -> float:
    """2D cross product (z component of a x b)."""
    return a.x * b.y - b.x * a.y


def square_distance(a: Point, b: Point) -> float:
    # squared, so no square root is needed to compare distances
    delta_x = b.x - a.x
    delta_y = b.y - a.y
    return delta_x * delta_x + delta_y * delta_y


def get_midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def get_slope(a: Point, b: Point) -> Point:
    """Direction vector of the segment a -> b."""
    return Point(b.x - a.x, b.y - a.y)


def get_perpendicular_slope(slope: Point) -> Point:
    """Rotate a direction vector by 90 degrees clockwise."""
    return Point(slope.y, -slope.x)


def get_intersection(p1: Point, p2: Point, slope1: Point, slope2: Point) -> Point:
    """
    Intersection of the lines p1 + t * slope1 and p2 + u * slope2.

    Crossing both sides of p1 + t * slope1 = p2 + u * slope2 with slope2
    removes u, which gives

        t = ((p2 - p1) x slope2) / (slope1 x slope2)

    Parallel slopes make the denominator zero. The division then follows
    IEEE-754 and the returned point has infinite or NaN coordinates instead
    of raising.

    :param p1: point on the first line
    :param p2: point on the second line
    :param slope1: direction of the first line
    :param slope2: direction of the second line
    :return: the intersection point, non-finite for parallel lines
    """
    p2_minus_p1 = Point(p2.x - p1.x, p2.y - p1.y)

    with np.errstate(divide="ignore", invalid="ignore"):
        t = float(
            np.divide(cross_product(p2_minus_p1, slope2), cross_product(slope1, slope2))
        )

    return Point(p1.x + t * slope1.x, p1.y + t * slope1.y)


def get_circumcenter(t: Triangle) -> Point:
    """Intersection of the perpendicular bisectors of edges (a, b) and (b, c)."""
    mid1 = get_midpoint(t.a, t.b)
    mid2 = get_midpoint(t.b, t.c)

    slope1 = get_perpendicular_slope(get_slope(t.a, t.b))
    slope2 = get_perpendicular_slope(get_slope(t.b, t.c))

    return get_intersection(mid1, mid2, slope1, slope2)


def is_in_circumcircle(p: Point, t: Triangle) -> bool:
    """
    Check whether p lies strictly inside the circumcircle of t.

    Points exactly on the circle are outside. A degenerate triangle has a
    non-finite circumcenter, and every comparison against it is False, so
    such a triangle never contains any point.
    """
    circumcenter = get_circumcenter(t)

    radius = square_distance(circumcenter, t.a)
    distance = square_distance(circumcenter, p)

    return distance < radius


def triangle_area(t: Triangle) -> float:
    """Unsigned shoelace area. Used for coverage diagnostics, not by the rasteriser."""
    return abs(
        0.5
        * (
            t.a.x * (t.b.y - t.c.y)
            + t.b.x * (t.c.y - t.a.y)
            + t.c.x * (t.a.y - t.b.y)
        )
    )


def is_degenerate(t: Triangle) -> bool:
    """
    True if the three vertices are collinear (or coincide), using Shewchuk's
    exact orientation predicate.
    """
    return orientation(t.a.x, t.a.y, t.b.x, t.b.y, t.c.x, t.c.y) == 0
