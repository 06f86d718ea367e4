"""
Kruskal minimum spanning tree over a disjoint-set graph.

Groups are tracked with explicit member sets and merged small-to-large,
so every node is relabelled at most log2(n) times over all merges.
"""

from dataclasses import dataclass
from typing import Iterable, List, Set


class DisconnectedEdgeSetError(RuntimeError):
    """Raised when a spanning tree was expected but only a forest was found."""


@dataclass(frozen=True)
class Segment:
    """Undirected weighted edge between two node indices."""
    a: int
    b: int
    length: float

    def __repr__(self) -> str:
        return f"{self.a} -> {self.b}: {self.length}"


class Graph:
    """Disjoint-set graph used by Kruskal's search."""

    def __init__(self, num_of_nodes: int):
        if num_of_nodes < 0:
            raise ValueError(f"Node count must be non-negative, got {num_of_nodes}")
        self.num_of_nodes = num_of_nodes
        self.group: List[int] = list(range(num_of_nodes))
        self.group_members: List[Set[int]] = [{x} for x in range(num_of_nodes)]
        self.mst: List[Segment] = []

    def merge(self, a: int, b: int) -> None:
        """Fold the smaller of the groups of a and b into the larger one."""
        group_a, group_b = self.group[a], self.group[b]
        if group_a == group_b:
            return

        members_a = self.group_members[group_a]
        members_b = self.group_members[group_b]
        if len(members_a) <= len(members_b):
            target, absorbed = group_b, members_a
        else:
            target, absorbed = group_a, members_b

        self.group_members[target].update(absorbed)
        for x in absorbed:
            self.group[x] = target
        absorbed.clear()

    def search(self, segments: Iterable[Segment]) -> "Graph":
        """
        Run Kruskal's algorithm.

        Segments must already be sorted by ascending length; accepted
        segments are appended to ``mst`` in processing order.
        """
        for segment in segments:
            if self.group[segment.a] != self.group[segment.b]:
                self.merge(segment.a, segment.b)
                self.mst.append(segment)
        return self

    def groups(self) -> List[Set[int]]:
        """Current non-empty groups; together they partition the nodes."""
        return [members for members in self.group_members if members]

    def is_connected(self) -> bool:
        return len(self.groups()) <= 1

    def total_length(self) -> float:
        return sum(segment.length for segment in self.mst)
