"""
Corridor skeleton extraction.

Turns a triangulation into corridors between anchor rooms:
- every distinct triangle edge becomes a weighted segment
- Kruskal's search keeps a minimum spanning tree of those segments
- a fraction of the leftover edges is sampled back in as loops
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

import structlog

from .alea_prng import AleaPRNG
from .delaunay import Triangle
from .geometry import Point
from .kruskal import DisconnectedEdgeSetError, Graph, Segment

logger = structlog.get_logger()

DEFAULT_LOOP_FRACTION = 1 / 8


@dataclass(frozen=True)
class Corridor:
    """Straight corridor between two room centers, ready for drawing."""
    a: Point
    b: Point
    length: float = field(init=False)
    angle: float = field(init=False)  # degrees, atan2 of b - a

    def __post_init__(self):
        object.__setattr__(self, "length", self.a.dist(self.b))
        object.__setattr__(
            self, "angle", math.degrees(math.atan2(self.b.y - self.a.y, self.b.x - self.a.x))
        )

    @property
    def midpoint(self) -> Point:
        return self.a.midpoint(self.b)


@dataclass
class CorridorPlan:
    """Result of corridor extraction."""
    nodes: List[Point]
    tree: List[Segment]
    loops: List[Segment]

    def _to_corridor(self, segment: Segment) -> Corridor:
        return Corridor(self.nodes[segment.a], self.nodes[segment.b])

    @property
    def corridors(self) -> List[Corridor]:
        """Spanning tree corridors followed by loop corridors."""
        return [self._to_corridor(s) for s in self.tree + self.loops]


def extract_segments(
    triangles: Iterable[Triangle],
    anchors: Iterable[Point] = (),
) -> Tuple[List[Point], List[Segment]]:
    """
    Collect the distinct edges of a triangle set as weighted segments.

    Anchors are numbered first, in the given order, whether or not any
    triangle touches them. Triangles are then visited in sorted order so
    node numbering does not depend on set iteration order.

    Returns:
        Tuple of (nodes, segments sorted by ascending length)
    """
    nodes: List[Point] = []
    index: Dict[Point, int] = {}
    seen = set()
    segments: List[Segment] = []

    def node_id(point: Point) -> int:
        if point not in index:
            index[point] = len(nodes)
            nodes.append(point)
        return index[point]

    for anchor in anchors:
        node_id(Point(*anchor))

    for triangle in sorted(triangles):
        for p, q in triangle.edges():
            a, b = node_id(p), node_id(q)
            key = (min(a, b), max(a, b))
            if key in seen:
                continue
            seen.add(key)
            segments.append(Segment(a, b, p.dist(q)))

    segments.sort(key=lambda s: s.length)
    return nodes, segments


def build_corridors(
    triangles: Iterable[Triangle],
    prng: AleaPRNG,
    loop_fraction: float = DEFAULT_LOOP_FRACTION,
    anchors: Iterable[Point] = (),
) -> CorridorPlan:
    """
    Build the spanning tree and loop corridors for a triangulation.

    Args:
        triangles: Final triangles of a triangulation
        prng: Generator used to sample loop edges
        loop_fraction: Share of non-tree edges kept as loops
        anchors: Points that must all be reached, including any the
            triangulation left without a triangle

    Returns:
        CorridorPlan with tree segments and sampled loops

    Raises:
        DisconnectedEdgeSetError: if the edges do not span every node
    """
    if not 0.0 <= loop_fraction <= 1.0:
        raise ValueError(f"loop_fraction must be within [0, 1], got {loop_fraction}")

    nodes, segments = extract_segments(triangles, anchors)
    if not nodes:
        return CorridorPlan(nodes=[], tree=[], loops=[])

    graph = Graph(len(nodes)).search(segments)
    if len(graph.mst) != len(nodes) - 1:
        raise DisconnectedEdgeSetError(
            f"Spanning search accepted {len(graph.mst)} segments for {len(nodes)} nodes"
        )

    accepted = set(graph.mst)
    remaining = [s for s in segments if s not in accepted]
    loops = prng.sample(remaining, int(len(remaining) * loop_fraction))

    logger.info(
        "Corridors built",
        nodes=len(nodes),
        edges=len(segments),
        tree=len(graph.mst),
        loops=len(loops),
        total_length=round(graph.total_length(), 2),
    )
    return CorridorPlan(nodes=nodes, tree=list(graph.mst), loops=loops)
