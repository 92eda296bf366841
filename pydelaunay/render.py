"""Low-poly image generation on top of the triangulation."""

from collections.abc import Iterable
from pathlib import Path

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from pydelaunay.build import triangulate
from pydelaunay.geometry import is_degenerate
from pydelaunay.utils import (
    BOUNDARY_PROBABILITY,
    HEIGHT,
    NUM_POINTS,
    WIDTH,
    Point,
    Triangle,
)


def _boundary_coordinate(
    rng: np.random.Generator, size: int, boundary_probability: int
) -> float:
    edge = rng.integers(0, 100)
    if edge < boundary_probability:
        return 0.0
    if edge < boundary_probability * 2:
        return float(size - 1)
    return float(rng.integers(1, size - 1))


def generate_points_list(
    width: int = WIDTH,
    height: int = HEIGHT,
    num_points: int = NUM_POINTS,
    boundary_probability: int = BOUNDARY_PROBABILITY,
    rng: np.random.Generator | None = None,
) -> list[Point]:
    """
    Generate unique integer points on a width x height canvas.

    The four canvas corners always come first. Every other coordinate snaps
    to the near border with `boundary_probability` percent chance, to the far
    border with the same chance, and is uniform strictly inside otherwise.

    :param width: canvas width
    :param height: canvas height
    :param num_points: total number of points, corners included
    :param boundary_probability: per axis percent chance of each border
    :param rng: random generator, a fresh unseeded one if None
    :return: list of unique points
    """
    if width < 3 or height < 3:
        raise ValueError(f"Canvas must be at least 3x3, got {width}x{height}")
    if not 0 <= boundary_probability < 50:
        raise ValueError(
            f"boundary_probability must be a percentage in [0, 50), got {boundary_probability}"
        )
    # without border snapping only the corners and the interior are reachable
    if boundary_probability > 0:
        max_points = width * height
    else:
        max_points = (width - 2) * (height - 2) + 4
    if not 4 <= num_points <= max_points:
        raise ValueError(
            f"num_points must be between 4 and {max_points}, got {num_points}"
        )
    if rng is None:
        rng = np.random.default_rng()

    points = [
        Point(0.0, 0.0),
        Point(0.0, float(height - 1)),
        Point(float(width - 1), 0.0),
        Point(float(width - 1), float(height - 1)),
    ]
    seen = set(points)

    while len(points) < num_points:
        p = Point(
            _boundary_coordinate(rng, width, boundary_probability),
            _boundary_coordinate(rng, height, boundary_probability),
        )
        if p not in seen:
            seen.add(p)
            points.append(p)

    return points


def assign_color_to_triangle(
    pixels: NDArray[np.uint8], triangle: Triangle, color: NDArray[np.integer]
) -> None:
    """
    Paint every pixel inside or on the border of `triangle`.

    Only the part of the triangle's bounding box that lies on the canvas is
    scanned, so triangles touching the super triangle are clipped.
    """
    if is_degenerate(triangle):
        return

    height, width = pixels.shape[:2]
    pts = triangle.to_array()

    min_x = max(pts[:, 0].min(), 0)
    max_x = min(pts[:, 0].max(), width - 1)
    min_y = max(pts[:, 1].min(), 0)
    max_y = min(pts[:, 1].max(), height - 1)
    if min_x > max_x or min_y > max_y:
        return

    xs = np.arange(int(min_x), int(np.floor(max_x)) + 1)
    ys = np.arange(int(min_y), int(np.floor(max_y)) + 1)
    grid_x, grid_y = np.meshgrid(xs, ys)

    # signed edge functions, all of the same sign (or zero) inside
    signs = []
    for (ax, ay), (bx, by) in ((pts[0], pts[1]), (pts[1], pts[2]), (pts[2], pts[0])):
        signs.append((bx - ax) * (grid_y - ay) - (by - ay) * (grid_x - ax))
    d1, d2, d3 = signs
    inside = ((d1 >= 0) & (d2 >= 0) & (d3 >= 0)) | ((d1 <= 0) & (d2 <= 0) & (d3 <= 0))

    pixels[grid_y[inside], grid_x[inside]] = color


def generate_colors(
    pixels: NDArray[np.uint8],
    triangles: Iterable[Triangle],
    rng: np.random.Generator | None = None,
) -> None:
    """
    Fill `pixels` with one color per triangle.

    A base color is drawn once per image and each triangle deviates from it
    by up to `variation` per channel, with `variation` in [10, 50).
    """
    if rng is None:
        rng = np.random.default_rng()

    variation = int(rng.integers(10, 50))
    base = rng.integers(variation, 256 - variation, size=3)
    logger.debug(f"Base color {base.tolist()}, variation {variation}")

    for triangle in triangles:
        color = base + rng.integers(-variation, variation, size=3)
        assign_color_to_triangle(pixels, triangle, color.astype(np.uint8))


def write_image(pixels: NDArray[np.uint8], filepath: str | Path) -> Path:
    """Write an (H, W, 3) uint8 buffer to disk, format chosen from the suffix."""
    from matplotlib import image as mpimg

    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) pixel buffer, got {pixels.shape}")

    filepath = Path(filepath)
    mpimg.imsave(filepath, pixels)
    return filepath


def generate(
    num_points: int = NUM_POINTS,
    width: int = WIDTH,
    height: int = HEIGHT,
    output: str | Path | None = "out.png",
    seed: int | None = None,
    finalize: bool = False,
) -> NDArray[np.uint8]:
    """
    Generate a low-poly image from start to finish.

    :param num_points: number of points to triangulate
    :param width: image width
    :param height: image height
    :param output: image path, or None to skip writing
    :param seed: seed for the random generator
    :param finalize: drop triangles touching the super triangle, which leaves
        the canvas border regions outside the convex hull unpainted
    :return: the (height, width, 3) pixel buffer
    """
    rng = np.random.default_rng(seed)

    points = generate_points_list(width, height, num_points, rng=rng)
    logger.info(f"Generated {len(points)} points on a {width}x{height} canvas")

    triangulation = triangulate(points, width=width, height=height, finalize=finalize)
    logger.info(f"Triangulation has {len(triangulation.triangles)} triangles")

    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    generate_colors(pixels, triangulation.triangles, rng=rng)

    if output is not None:
        path = write_image(pixels, output)
        logger.info(f"Wrote image to {path}")

    return pixels
