"""Tests for the disjoint-set graph and Kruskal's search."""

import itertools
import random

import numpy as np
import pytest
from scipy.sparse.csgraph import minimum_spanning_tree

from py_dungeon.core.kruskal import DisconnectedEdgeSetError, Graph, Segment


def complete_segments(points):
    segments = [
        Segment(i, j, float(np.hypot(*(points[i] - points[j]))))
        for i, j in itertools.combinations(range(len(points)), 2)
    ]
    return sorted(segments, key=lambda s: s.length)


class TestGraph:
    """Test group bookkeeping."""

    def test_initial_groups(self):
        graph = Graph(4)

        assert graph.group == [0, 1, 2, 3]
        assert graph.groups() == [{0}, {1}, {2}, {3}]
        assert graph.mst == []
        assert not graph.is_connected()

    def test_merge_equal_sizes_folds_first_into_second(self):
        graph = Graph(3)
        graph.merge(0, 1)

        assert graph.group == [1, 1, 2]
        assert graph.group_members[0] == set()
        assert graph.group_members[1] == {0, 1}

    def test_merge_keeps_larger_group(self):
        """The smaller group is relabelled into the larger one."""
        graph = Graph(3)
        graph.merge(0, 1)
        graph.merge(2, 0)

        assert graph.group == [1, 1, 1]
        assert graph.group_members[1] == {0, 1, 2}
        assert graph.is_connected()

    def test_merge_same_group_is_noop(self):
        graph = Graph(3)
        graph.merge(0, 1)
        before = (list(graph.group), [set(m) for m in graph.group_members])

        graph.merge(1, 0)

        assert (graph.group, graph.group_members) == before

    def test_groups_partition_nodes(self):
        """Random merges always leave a partition consistent with group labels."""
        rnd = random.Random(42)
        graph = Graph(30)

        for _ in range(40):
            graph.merge(rnd.randrange(30), rnd.randrange(30))

            groups = graph.groups()
            assert sorted(x for members in groups for x in members) == list(range(30))
            for label, members in enumerate(graph.group_members):
                for x in members:
                    assert graph.group[x] == label

    def test_negative_node_count(self):
        with pytest.raises(ValueError):
            Graph(-1)


class TestKruskalSearch:
    """Test minimum spanning tree construction."""

    def test_three_nodes(self):
        """The cycle-closing edge is rejected."""
        segments = [Segment(0, 1, 1.0), Segment(1, 2, 2.0), Segment(0, 2, 3.0)]
        graph = Graph(3).search(segments)

        assert graph.mst == [Segment(0, 1, 1.0), Segment(1, 2, 2.0)]
        assert graph.total_length() == 3.0
        assert graph.is_connected()

    def test_search_returns_graph(self):
        graph = Graph(2)

        assert graph.search([Segment(0, 1, 5.0)]) is graph

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_matches_scipy_weight(self, seed):
        """Total tree length equals scipy's minimum spanning tree."""
        points = np.random.default_rng(seed).uniform(0, 100, size=(12, 2))
        segments = complete_segments(points)

        graph = Graph(len(points)).search(segments)

        weights = np.zeros((len(points), len(points)))
        for s in segments:
            weights[s.a, s.b] = s.length
        expected = minimum_spanning_tree(weights).sum()

        assert len(graph.mst) == len(points) - 1
        assert graph.total_length() == pytest.approx(expected)
        assert graph.is_connected()

    def test_tree_is_acyclic(self):
        """Replaying the tree edges never joins two nodes already connected."""
        points = np.random.default_rng(3).uniform(0, 100, size=(10, 2))
        graph = Graph(len(points)).search(complete_segments(points))

        replay = Graph(len(points))
        for s in graph.mst:
            assert replay.group[s.a] != replay.group[s.b]
            replay.merge(s.a, s.b)

    def test_disconnected_input_gives_forest(self):
        segments = [Segment(0, 1, 1.0), Segment(2, 3, 1.0)]
        graph = Graph(4).search(segments)

        assert len(graph.mst) == 2
        assert not graph.is_connected()

    def test_disconnected_error_is_runtime_error(self):
        assert issubclass(DisconnectedEdgeSetError, RuntimeError)
