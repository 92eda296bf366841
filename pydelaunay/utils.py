from collections import Counter
from dataclasses import dataclass
from typing import NamedTuple, TypeAlias

import numpy as np
from numpy.typing import NDArray

# default canvas, in pixels
WIDTH = 1920
HEIGHT = 1080

NUM_POINTS = 100
# percent chance, per axis, of snapping a generated point to each canvas border
BOUNDARY_PROBABILITY = 8


class Point(NamedTuple):
    """A 2D point, also used as a 2D vector. Compared exactly, no tolerance."""

    x: float
    y: float


Vec2d: TypeAlias = Point | tuple[float, float] | NDArray[np.floating]


def as_point(p: Vec2d) -> Point:
    return Point(float(p[0]), float(p[1]))


@dataclass(frozen=True, eq=False)
class Edge:
    """Unordered pair of points."""

    a: Point
    b: Point

    def __iter__(self):
        yield self.a
        yield self.b

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return Counter(self) == Counter(other)

    def __hash__(self) -> int:
        return hash(frozenset(self))


@dataclass(frozen=True, eq=False)
class Triangle:
    """
    Three vertices stored in order, but compared as a multiset: (A, B, C),
    (C, B, A) and (B, C, A) are all the same triangle.
    """

    a: Point
    b: Point
    c: Point

    def __iter__(self):
        yield self.a
        yield self.b
        yield self.c

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Triangle):
            return NotImplemented
        return Counter(self) == Counter(other)

    def __hash__(self) -> int:
        return hash(frozenset(self))

    def has_vertex(self, p: Point) -> bool:
        return p == self.a or p == self.b or p == self.c

    def shares_vertex_with(self, other: "Triangle") -> bool:
        return any(self.has_vertex(v) for v in other)

    def edges(self) -> tuple[Edge, Edge, Edge]:
        return Edge(self.a, self.b), Edge(self.b, self.c), Edge(self.c, self.a)

    def to_array(self) -> NDArray[np.floating]:
        return np.array([self.a, self.b, self.c], dtype=float)
