"""
Incremental Delaunay triangulation (Bowyer-Watson).

This module implements:
- Triangle, an unordered vertex triple with circumcircle and adjacency tests
- Triangulation, which inserts points one at a time into a bounding
  triangle, retriangulates each cavity and strips the bounding triangle
  at the end
"""

import math
from collections import Counter
from itertools import combinations
from typing import FrozenSet, Iterable, List, Tuple

import structlog

from .geometry import Circle, Point

logger = structlog.get_logger()


class DegenerateGeometryError(ValueError):
    """Raised when a circumcircle is requested for collinear vertices."""


class Triangle:
    """
    Triangle over three distinct points.

    Vertices are kept sorted so that equality and hashing depend only on
    the vertex set, never on the order the points were given in.
    """

    __slots__ = ("_vertices",)

    def __init__(self, p1: Point, p2: Point, p3: Point):
        vertices = tuple(sorted({Point(*p1), Point(*p2), Point(*p3)}))
        if len(vertices) != 3:
            raise ValueError(f"Triangle needs 3 distinct vertices, got {p1}, {p2}, {p3}")
        self._vertices: Tuple[Point, Point, Point] = vertices

    @property
    def vertices(self) -> Tuple[Point, Point, Point]:
        return self._vertices

    def __eq__(self, other) -> bool:
        if not isinstance(other, Triangle):
            return NotImplemented
        return self._vertices == other._vertices

    def __hash__(self) -> int:
        return hash(self._vertices)

    def __lt__(self, other: "Triangle") -> bool:
        return self._vertices < other._vertices

    def __repr__(self) -> str:
        return "Triangle({}, {}, {})".format(*self._vertices)

    def adjoins(self, other: "Triangle") -> bool:
        """True if the two triangles share at least one vertex."""
        return not set(self._vertices).isdisjoint(other._vertices)

    def edges(self) -> List[Tuple[Point, Point]]:
        """The three vertex pairs, each ordered low to high."""
        return list(combinations(self._vertices, 2))

    def circumcircle(self) -> Circle:
        """
        Circle through all three vertices.

        Raises:
            DegenerateGeometryError: if the vertices are collinear
        """
        p1, p2, p3 = self._vertices
        c = 2.0 * ((p2.x - p1.x) * (p3.y - p1.y) - (p2.y - p1.y) * (p3.x - p1.x))
        if c == 0:
            raise DegenerateGeometryError(f"Collinear vertices have no circumcircle: {self!r}")

        d2 = p2.x * p2.x - p1.x * p1.x + p2.y * p2.y - p1.y * p1.y
        d3 = p3.x * p3.x - p1.x * p1.x + p3.y * p3.y - p1.y * p1.y
        x = ((p3.y - p1.y) * d2 + (p1.y - p2.y) * d3) / c
        y = ((p1.x - p3.x) * d2 + (p2.x - p1.x) * d3) / c
        center = Point(x, y)
        return Circle(center, center.dist(p1))


def bounding_triangle(width: float, height: float) -> Triangle:
    """
    Build a triangle enclosing the whole width x height rectangle.

    The rectangle fits in a circle of radius r around its midpoint; the
    returned equilateral triangle has that circle as its incircle.
    """
    center = Point(width / 2.0, height / 2.0)
    radius = center.dist(Point(0.0, 0.0)) + 1.0
    spread = math.sqrt(3) * radius
    return Triangle(
        Point(center.x - spread, center.y - radius),
        Point(center.x + spread, center.y - radius),
        Point(center.x, center.y + 2 * radius),
    )


class Triangulation:
    """
    Bowyer-Watson triangulation of points inside a width x height area.

    Points farther from the area midpoint than the bounding triangle's
    incircle are rejected with ValueError.
    """

    def __init__(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError(f"Triangulation area must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.center = Point(width / 2.0, height / 2.0)
        self.reach = self.center.dist(Point(0.0, 0.0)) + 1.0
        self.external_triangle = bounding_triangle(width, height)
        self._triangles = {self.external_triangle}

    @property
    def triangles(self) -> FrozenSet[Triangle]:
        return frozenset(self._triangles)

    def insert(self, point: Point) -> None:
        """
        Insert a single point and retriangulate its cavity.

        Every triangle whose circumcircle contains the point (boundary
        included) is removed. Each edge of a removed triangle joined with
        the point is a candidate; candidates produced twice sit on an edge
        shared by two removed triangles and are dropped.
        """
        point = Point(*point)
        if self.center.dist(point) > self.reach:
            raise ValueError(f"Point {point} lies outside the {self.width}x{self.height} triangulation area")

        candidates = Counter()
        bad = [t for t in self._triangles if t.circumcircle().contains(point)]

        for triangle in bad:
            self._triangles.discard(triangle)
            for p, q in triangle.edges():
                candidates[Triangle(point, p, q)] += 1

        self._triangles.update(t for t, count in candidates.items() if count == 1)
        logger.debug("Point inserted", point=point, cavity=len(bad), triangles=len(self._triangles))

    def compute(self, points: Iterable[Point]) -> FrozenSet[Triangle]:
        """
        Insert all points in order, then remove the bounding triangle.

        Repeated points are inserted once.

        Args:
            points: Points inside the triangulation area

        Returns:
            Final set of triangles; empty for fewer than 3 points
        """
        points = list(dict.fromkeys(Point(*p) for p in points))
        logger.debug("Starting triangulation", points=len(points))

        for point in points:
            self.insert(point)

        self._triangles = {
            t for t in self._triangles if not t.adjoins(self.external_triangle)
        }
        logger.info("Triangulation complete", points=len(points), triangles=len(self._triangles))
        return self.triangles
