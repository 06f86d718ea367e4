"""Plane geometry primitives shared by the triangulation and corridor code."""

import math
from typing import NamedTuple


class Point(NamedTuple):
    """2D point / vector.

    Tuple semantics give value equality, hashing and ordering by
    coordinate (x first, then y), which the triangulation relies on to
    canonicalize triangle vertices.
    """
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def dist(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: "Point") -> "Point":
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)


class Circle(NamedTuple):
    """Circle given by center and radius."""
    center: Point
    radius: float

    def contains(self, point: Point) -> bool:
        """Boundary-inclusive containment test."""
        return self.center.dist(point) <= self.radius
