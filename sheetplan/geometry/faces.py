"""
Face Extractor Module

Builds a half-edge (DCEL) graph from a planar arrangement and walks it
to enumerate the face loops of the subdivision.

Nodes live in an arena addressed by integer index; a dict maps the
snapped point key to the node index. Each half-edge caches its position
in its origin's angle-sorted ring so the next edge of a face is found
in O(1).
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..config import GeometryConfig
from ..constants import FACE_WALK_LIMIT_FACTOR, MIN_FACE_AREA
from ..vector.segments import PointKey, Segment, canonical_key, point_key, snap_point
from .primitives import Point

logger = logging.getLogger(__name__)

Polygon2D = List[Point]


@dataclass
class Node:
    """A unique point of the arrangement."""
    point: Point
    outgoing: List[int] = field(default_factory=list)


@dataclass
class HalfEdge:
    """Directed edge; twin is the opposite direction on the same segment."""
    origin: int
    target: int
    twin: int
    angle: float
    ring_position: int = -1
    used: bool = False


@dataclass
class PlanarGraph:
    """Node arena plus half-edges built from an arrangement."""
    nodes: List[Node] = field(default_factory=list)
    half_edges: List[HalfEdge] = field(default_factory=list)
    index_by_key: Dict[PointKey, int] = field(default_factory=dict)
    pitch: float = 0.0

    def add_node(self, p: Point) -> int:
        """Return the node index for p, creating it on first use."""
        key = point_key(p, self.pitch)
        idx = self.index_by_key.get(key)
        if idx is None:
            idx = len(self.nodes)
            self.nodes.append(Node(point=p))
            self.index_by_key[key] = idx
        return idx

    def add_edge(self, ia: int, ib: int) -> None:
        """Create the twin pair of half-edges for an undirected edge."""
        if ia == ib:
            return

        i0 = len(self.half_edges)
        i1 = i0 + 1
        pa = self.nodes[ia].point
        pb = self.nodes[ib].point

        self.half_edges.append(HalfEdge(
            origin=ia, target=ib, twin=i1,
            angle=math.atan2(pb[1] - pa[1], pb[0] - pa[0]),
        ))
        self.half_edges.append(HalfEdge(
            origin=ib, target=ia, twin=i0,
            angle=math.atan2(pa[1] - pb[1], pa[0] - pb[0]),
        ))
        self.nodes[ia].outgoing.append(i0)
        self.nodes[ib].outgoing.append(i1)

    def sort_rings(self) -> None:
        """Sort each node's outgoing half-edges by angle and cache positions."""
        for node in self.nodes:
            node.outgoing.sort(key=lambda h: self.half_edges[h].angle)
            for pos, h in enumerate(node.outgoing):
                self.half_edges[h].ring_position = pos

    def next_in_face(self, he_index: int) -> Optional[int]:
        """
        Next half-edge of the face to the left of he_index.

        At the arrival node, take the ring entry just before the twin
        (clockwise neighbour in the counter-clockwise ring).
        """
        he = self.half_edges[he_index]
        ring = self.nodes[he.target].outgoing
        if not ring:
            return None

        twin = self.half_edges[he.twin]
        pos = twin.ring_position
        if pos < 0 or pos >= len(ring) or ring[pos] != he.twin:
            return None

        return ring[(pos - 1) % len(ring)]


def signed_area(poly: Sequence[Point]) -> float:
    """Shoelace signed area (positive for counter-clockwise loops)."""
    if poly is None or len(poly) < 3:
        return 0.0
    acc = 0.0
    n = len(poly)
    for i in range(n):
        x0, y0 = poly[i]
        x1, y1 = poly[(i + 1) % n]
        acc += x0 * y1 - x1 * y0
    return 0.5 * acc


def perimeter(poly: Sequence[Point]) -> float:
    """Length of the closed loop through poly."""
    if poly is None or len(poly) < 2:
        return 0.0
    n = len(poly)
    return sum(
        math.hypot(poly[(i + 1) % n][0] - poly[i][0], poly[(i + 1) % n][1] - poly[i][1])
        for i in range(n)
    )


def build_planar_graph(
    arrangement: Sequence[Segment],
    config: Optional[GeometryConfig] = None
) -> PlanarGraph:
    """
    Build the half-edge graph for an arrangement.

    Duplicate edges and edges shorter than the minimum length (after
    snapping) are skipped.
    """
    config = config or GeometryConfig()
    graph = PlanarGraph(pitch=config.snap_pitch)
    seen = set()

    for seg in arrangement:
        a = snap_point(seg.a, config.snap_pitch)
        b = snap_point(seg.b, config.snap_pitch)
        if math.hypot(b[0] - a[0], b[1] - a[1]) < config.min_segment_length:
            continue

        key = canonical_key(a, b)
        if key in seen:
            continue
        seen.add(key)

        graph.add_edge(graph.add_node(a), graph.add_node(b))

    graph.sort_rings()
    return graph


def _walk_face(graph: PlanarGraph, start: int, limit: int) -> Optional[Polygon2D]:
    """
    Walk one face starting at half-edge start.

    Returns:
        Raw point loop, or None when the walk hits an inconsistent
        structure or the iteration bound
    """
    half_edges = graph.half_edges
    nodes = graph.nodes
    poly: Polygon2D = []
    he = start

    for _ in range(limit):
        cur = half_edges[he]
        if cur.used:
            # Joined a loop that another walk already consumed
            return None
        cur.used = True

        if not poly:
            poly.append(nodes[cur.origin].point)
        poly.append(nodes[cur.target].point)

        nxt = graph.next_in_face(he)
        if nxt is None:
            return None
        if nxt == start:
            return poly
        he = nxt

    logger.debug(f"Face walk from half-edge {start} exceeded {limit} steps")
    return None


def _clean_loop(poly: Polygon2D, pitch: float) -> Polygon2D:
    """Drop the closing duplicate of a loop."""
    if len(poly) >= 2 and point_key(poly[0], pitch) == point_key(poly[-1], pitch):
        return poly[:-1]
    return poly


def extract_faces(
    arrangement: Sequence[Segment],
    eps: float = 0.0,
    config: Optional[GeometryConfig] = None
) -> List[Polygon2D]:
    """
    Enumerate the faces of a planar arrangement.

    Algorithm:
    1. Build the node arena and twin half-edge pairs
    2. Sort each node's outgoing ring by angle
    3. From every unused half-edge, walk keeping the face on the left
    4. Keep loops with >= 3 distinct points and nonzero signed area

    Both bounded faces (counter-clockwise, positive area) and the
    outer boundary of each component (clockwise, negative area) are
    returned; the caller picks the relevant one.

    Args:
        arrangement: Crossing-free segments (output of planarize)
        eps: Geometric tolerance (kept for call symmetry with planarize)
        config: Geometry configuration

    Returns:
        List of point loops without closing duplicates
    """
    config = config or GeometryConfig()
    faces: List[Polygon2D] = []
    if not arrangement:
        return faces

    graph = build_planar_graph(arrangement, config)
    if not graph.half_edges:
        return faces

    limit = len(graph.half_edges) * FACE_WALK_LIMIT_FACTOR
    discarded = 0

    for start in range(len(graph.half_edges)):
        if graph.half_edges[start].used:
            continue

        poly = _walk_face(graph, start, limit)
        if poly is None:
            discarded += 1
            continue

        poly = _clean_loop(poly, config.snap_pitch)
        distinct = {point_key(p, config.snap_pitch) for p in poly}
        if len(poly) < 3 or len(distinct) < 3:
            continue

        if abs(signed_area(poly)) <= MIN_FACE_AREA:
            continue

        faces.append(poly)

    logger.debug(
        f"Face extraction: {len(graph.nodes)} nodes, "
        f"{len(graph.half_edges)} half-edges -> {len(faces)} faces "
        f"({discarded} walks discarded)"
    )
    return faces
