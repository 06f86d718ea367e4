"""Tests for the incremental Delaunay triangulation."""

import itertools

import numpy as np
import pytest
from scipy.spatial import Delaunay

from py_dungeon.core.delaunay import (
    DegenerateGeometryError, Triangle, Triangulation, bounding_triangle
)
from py_dungeon.core.geometry import Point


def random_points(seed, count, low, high):
    rng = np.random.default_rng(seed)
    coords = rng.uniform(low, high, size=(count, 2))
    return [Point(float(x), float(y)) for x, y in coords]


def inside_triangle(point, triangle):
    a, b, c = triangle.vertices

    def side(p, q, r):
        return (q.x - p.x) * (r.y - p.y) - (q.y - p.y) * (r.x - p.x)

    signs = [side(a, b, point), side(b, c, point), side(c, a, point)]
    return all(s >= 0 for s in signs) or all(s <= 0 for s in signs)


class TestTriangle:
    """Test triangle identity and geometry."""

    def test_equality_is_order_independent(self):
        """All vertex orders describe the same triangle."""
        a, b, c = Point(0, 0), Point(4, 0), Point(2, 3)
        triangles = [Triangle(*order) for order in itertools.permutations([a, b, c])]

        assert all(t == triangles[0] for t in triangles)
        assert len(set(triangles)) == 1
        assert len({hash(t) for t in triangles}) == 1

    def test_different_vertex_sets_differ(self):
        assert Triangle((0, 0), (4, 0), (2, 3)) != Triangle((0, 0), (4, 0), (2, 4))

    def test_accepts_plain_tuples(self):
        assert Triangle((0, 0), (4, 0), (2, 3)) == Triangle(Point(2, 3), Point(0, 0), Point(4, 0))

    def test_requires_distinct_vertices(self):
        with pytest.raises(ValueError):
            Triangle((0, 0), (0, 0), (1, 1))

    def test_adjoins(self):
        """Triangles sharing a vertex adjoin, disjoint ones do not."""
        t1 = Triangle((0, 0), (4, 0), (2, 3))
        t2 = Triangle((4, 0), (8, 0), (6, 3))
        t3 = Triangle((10, 10), (14, 10), (12, 13))

        assert t1.adjoins(t2)
        assert t2.adjoins(t1)
        assert not t1.adjoins(t3)

    def test_edges(self):
        t = Triangle((0, 0), (4, 0), (2, 3))
        edges = t.edges()

        assert len(edges) == 3
        assert {frozenset(e) for e in edges} == {
            frozenset({Point(0, 0), Point(4, 0)}),
            frozenset({Point(0, 0), Point(2, 3)}),
            frozenset({Point(4, 0), Point(2, 3)}),
        }

    def test_circumcircle_right_triangle(self):
        """Right triangle circumcenter is the hypotenuse midpoint."""
        circle = Triangle((0, 0), (4, 0), (0, 3)).circumcircle()

        assert circle.center.x == pytest.approx(2.0)
        assert circle.center.y == pytest.approx(1.5)
        assert circle.radius == pytest.approx(2.5)

    def test_circumcircle_passes_through_vertices(self):
        t = Triangle((1.5, -2.0), (7.25, 3.0), (-4.0, 6.5))
        circle = t.circumcircle()

        for v in t.vertices:
            assert circle.center.dist(v) == pytest.approx(circle.radius)

    def test_collinear_circumcircle_raises(self):
        t = Triangle((0, 0), (1, 1), (2, 2))

        with pytest.raises(DegenerateGeometryError):
            t.circumcircle()

    def test_degenerate_error_is_value_error(self):
        assert issubclass(DegenerateGeometryError, ValueError)


class TestBoundingTriangle:
    """Test the enclosing triangle."""

    @pytest.mark.parametrize("width,height", [(10, 10), (800, 600), (1, 500)])
    def test_contains_area_corners(self, width, height):
        triangle = bounding_triangle(width, height)

        for corner in [(0, 0), (width, 0), (0, height), (width, height)]:
            assert inside_triangle(Point(*corner), triangle)

    def test_circumcircle_contains_area(self):
        triangle = bounding_triangle(100, 50)
        circle = triangle.circumcircle()

        for corner in [(0, 0), (100, 0), (0, 50), (100, 50)]:
            assert circle.center.dist(Point(*corner)) < circle.radius


class TestTriangulation:
    """Test the Bowyer-Watson engine."""

    def test_single_triangle(self):
        """Three points give exactly their own triangle."""
        triangulation = Triangulation(10, 10)
        result = triangulation.compute([(0, 0), (4, 0), (2, 3)])

        assert result == {Triangle((0, 0), (4, 0), (2, 3))}
        assert triangulation.triangles == result

    def test_starts_with_bounding_triangle(self):
        triangulation = Triangulation(10, 10)

        assert triangulation.triangles == {triangulation.external_triangle}

    def test_insert_keeps_triangle_count(self):
        """Each insertion inside the hull adds exactly two triangles."""
        triangulation = Triangulation(100, 100)
        points = random_points(7, 12, 20, 80)

        for i, point in enumerate(points, start=1):
            triangulation.insert(point)
            assert len(triangulation.triangles) == 1 + 2 * i

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_too_few_points(self, count):
        points = [(1, 1), (5, 2)][:count]

        assert Triangulation(10, 10).compute(points) == frozenset()

    def test_collinear_points_give_no_triangles(self):
        assert Triangulation(100, 100).compute([(10, 50), (20, 50), (30, 50)]) == frozenset()

    def test_duplicate_points_inserted_once(self):
        result = Triangulation(10, 10).compute([(0, 0), (4, 0), (2, 3), (4, 0)])

        assert result == {Triangle((0, 0), (4, 0), (2, 3))}

    def test_point_outside_area_rejected(self):
        with pytest.raises(ValueError):
            Triangulation(10, 10).insert(Point(500, 500))

    def test_invalid_area(self):
        with pytest.raises(ValueError):
            Triangulation(0, 10)

    def test_bounding_triangle_removed(self):
        """No surviving triangle shares a vertex with the bounding triangle."""
        triangulation = Triangulation(800, 800)
        result = triangulation.compute(random_points(11, 40, 100, 700))

        assert result
        assert not any(t.adjoins(triangulation.external_triangle) for t in result)

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_delaunay_property(self, seed):
        """No input point lies strictly inside any circumcircle."""
        points = random_points(seed, 50, 50, 750)
        result = Triangulation(800, 800).compute(points)

        assert result
        for triangle in result:
            circle = triangle.circumcircle()
            for point in points:
                if point in triangle.vertices:
                    continue
                assert circle.center.dist(point) >= circle.radius - 1e-9

    @pytest.mark.parametrize("seed", [4, 5])
    def test_matches_scipy(self, seed):
        """
        Result equals the scipy Delaunay triangles whose circumcircle
        keeps clear of the bounding triangle's vertices.
        """
        points = random_points(seed, 30, 300, 500)
        triangulation = Triangulation(800, 800)
        result = triangulation.compute(points)

        reference = set()
        for simplex in Delaunay(np.array(points)).simplices:
            triangle = Triangle(*(points[i] for i in simplex))
            circle = triangle.circumcircle()
            if all(circle.center.dist(v) > circle.radius
                   for v in triangulation.external_triangle.vertices):
                reference.add(triangle)

        assert result == reference

    def test_covers_all_points(self):
        """A tight cluster keeps every point as a triangle vertex."""
        points = random_points(8, 25, 380, 420)
        result = Triangulation(800, 800).compute(points)

        vertices = {v for t in result for v in t.vertices}
        assert vertices == set(points)

    def test_insertion_order_irrelevant(self):
        """Generic input gives the same triangulation in any order."""
        points = random_points(9, 30, 100, 700)

        forward = Triangulation(800, 800).compute(points)
        backward = Triangulation(800, 800).compute(list(reversed(points)))

        assert forward == backward
