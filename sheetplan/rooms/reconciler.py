"""
Room Boundary Reconciler Module

Closes the gap between a room's reported boundary and the glazing walls
next to it. The reduced boundary, the full glazing segments and short
bridges are planarized together; the room is the smallest face that
contains its test point.

Fallback chain when reconciliation fails:
1. Raw boundary loops as reported
2. Floor slice of the room solid
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..config import GeometryConfig
from ..constants import LoopSource
from ..geometry.faces import Polygon2D, extract_faces
from ..geometry.locator import pick_minimal_face
from ..geometry.primitives import (
    Point,
    abs_cosine,
    closest_point_on_segment,
    distance,
    distance_point_to_segment,
)
from ..vector.planarizer import planarize
from ..vector.segments import Segment, SegmentSet, point_key, segment_key
from .loops import Loop, slice_solid_loops

logger = logging.getLogger(__name__)

GlazingGroups = Mapping[int, Sequence[Segment]]


@dataclass
class ReconcileResult:
    """Outcome of a successful reconciliation."""
    polygon: Polygon2D
    group_ids: Set[int] = field(default_factory=set)
    removed_redrawn: int = 0
    removed_steps: int = 0
    bridges: List[Segment] = field(default_factory=list)


def find_touching_groups(
    boundary: Sequence[Segment],
    glazing_groups: GlazingGroups,
    config: GeometryConfig
) -> Set[int]:
    """
    Glazing groups running along the room boundary.

    A group touches when one of its segments has, from its midpoint, a
    nearest boundary segment within the touch tolerance that is nearly
    parallel to it.

    Args:
        boundary: Non-glazing room boundary segments
        glazing_groups: Glazing segments by group id
        config: Geometry configuration

    Returns:
        Set of touching group ids
    """
    ids: Set[int] = set()
    if not boundary or not glazing_groups:
        return ids

    for gid, segments in glazing_groups.items():
        for gs in segments:
            mid = gs.midpoint

            best = None
            best_dist = float("inf")
            for bs in boundary:
                d = distance_point_to_segment(mid, bs.a, bs.b)
                if d < best_dist:
                    best_dist = d
                    best = bs

            if best is None or best_dist > config.glazing_touch_tolerance:
                continue

            cos = abs_cosine(best.direction, gs.direction)
            if cos is None or cos < config.parallel_threshold:
                continue

            ids.add(gid)
            break

    return ids


def remove_redrawn_segments(
    boundary: Sequence[Segment],
    glazing: Sequence[Segment],
    config: GeometryConfig
) -> List[Segment]:
    """Drop boundary segments drawn over (near and parallel to) the glazing line."""
    if not boundary or not glazing:
        return list(boundary)

    kept = []
    for bs in boundary:
        mid = bs.midpoint
        redrawn = False
        for gs in glazing:
            if distance_point_to_segment(mid, gs.a, gs.b) > config.glazing_redraw_tolerance:
                continue
            cos = abs_cosine(bs.direction, gs.direction)
            if cos is None or cos < config.parallel_threshold:
                continue
            redrawn = True
            break

        if not redrawn:
            kept.append(bs)

    return kept


def remove_glazing_steps(
    boundary: Sequence[Segment],
    glazing: Sequence[Segment],
    config: GeometryConfig
) -> List[Segment]:
    """
    Drop short "step" artifacts whose both ends sit on the glazing line.

    Segments that are themselves glazing segments are always kept.
    """
    if not boundary or not glazing:
        return list(boundary)

    pitch = config.snap_pitch
    glazing_keys = {segment_key(gs, pitch) for gs in glazing}
    tol = config.glazing_step_tolerance

    kept = []
    for bs in boundary:
        if segment_key(bs, pitch) in glazing_keys:
            kept.append(bs)
            continue

        dist_a = min(distance_point_to_segment(bs.a, gs.a, gs.b) for gs in glazing)
        dist_b = min(distance_point_to_segment(bs.b, gs.a, gs.b) for gs in glazing)
        if dist_a < tol and dist_b < tol:
            continue

        kept.append(bs)

    return kept


def bridge_open_ends(
    boundary: Sequence[Segment],
    glazing: Sequence[Segment],
    config: GeometryConfig
) -> List[Segment]:
    """
    Bridges from dangling boundary ends to the nearest glazing point.

    A dangling end is a vertex of degree one. Bridges shorter than the
    bridge epsilon (already touching) or longer than the maximum bridge
    length are not built.

    Returns:
        Snapped, deduplicated bridge segments
    """
    if not boundary or not glazing:
        return []

    pitch = config.snap_pitch
    degree: Dict[Tuple[float, float], int] = {}
    point_by_key: Dict[Tuple[float, float], Point] = {}
    for seg in boundary:
        for p in (seg.a, seg.b):
            key = point_key(p, pitch)
            point_by_key[key] = p
            degree[key] = degree.get(key, 0) + 1

    bridges = SegmentSet(config)
    for key, deg in degree.items():
        if deg != 1:
            continue
        p = point_by_key[key]

        best_q = None
        best_dist = float("inf")
        for gs in glazing:
            hit = closest_point_on_segment(p, gs.a, gs.b)
            if hit is None:
                continue
            q, _ = hit
            d = distance(p, q)
            if d < best_dist:
                best_dist = d
                best_q = q

        if best_q is None:
            continue
        if best_dist > config.max_bridge_length or best_dist < config.bridge_epsilon:
            continue

        bridges.try_add(p, best_q)

    return list(bridges.segments)


def reconcile_room(
    boundary: Sequence[Segment],
    glazing_groups: GlazingGroups,
    test_point: Optional[Point],
    config: Optional[GeometryConfig] = None,
    hint_ids: Optional[Iterable[int]] = None
) -> Optional[ReconcileResult]:
    """
    Build one closed room polygon from boundary plus adjacent glazing.

    Algorithm:
    1. Find glazing groups touching the boundary (plus hinted groups)
    2. Drop boundary segments redrawn over the glazing, then steps
    3. Bridge dangling boundary ends to the glazing
    4. Planarize boundary + glazing + bridges, extract faces
    5. Pick the smallest face containing the test point

    Args:
        boundary: Non-glazing room boundary segments
        glazing_groups: Glazing segments by group id
        test_point: Interior point of the room
        config: Geometry configuration
        hint_ids: Glazing group ids the boundary itself references

    Returns:
        ReconcileResult, or None when no glazing is involved or no face
        contains the test point
    """
    config = config or GeometryConfig()
    if not glazing_groups or not boundary:
        return None

    ids = {gid for gid in (hint_ids or []) if gid}
    ids |= find_touching_groups(boundary, glazing_groups, config)
    if not ids:
        return None

    glazing: List[Segment] = []
    for gid in sorted(ids):
        glazing.extend(glazing_groups.get(gid, []))
    if not glazing:
        return None

    reduced = remove_redrawn_segments(boundary, glazing, config)
    removed_redrawn = len(boundary) - len(reduced)
    stepped = remove_glazing_steps(reduced, glazing, config)
    removed_steps = len(reduced) - len(stepped)

    bridges = bridge_open_ends(stepped, glazing, config)

    eps = config.planarize_eps
    arrangement = planarize(list(stepped) + glazing + bridges, eps, config)
    if not arrangement:
        return None

    faces = extract_faces(arrangement, eps, config)
    if not faces or test_point is None:
        return None

    best = pick_minimal_face(faces, test_point, eps)
    if best is None or len(best) < 3:
        return None

    logger.debug(
        f"Reconciled with groups {sorted(ids)}: removed {removed_redrawn} redrawn, "
        f"{removed_steps} steps, {len(bridges)} bridges, {len(best)} vertices"
    )

    return ReconcileResult(
        polygon=best,
        group_ids=ids,
        removed_redrawn=removed_redrawn,
        removed_steps=removed_steps,
        bridges=bridges,
    )


def build_room_loops(
    boundary: Sequence[Segment],
    boundary_loops: Sequence[Loop],
    glazing_groups: GlazingGroups,
    test_point: Optional[Point],
    solid_edges: Optional[Sequence[Sequence[Sequence[float]]]] = None,
    config: Optional[GeometryConfig] = None,
    hint_ids: Optional[Iterable[int]] = None
) -> Tuple[List[Loop], str, Set[int]]:
    """
    Room loops from the first tier that yields any.

    Args:
        boundary: Non-glazing boundary segments
        boundary_loops: Raw loops as reported by the host document
        glazing_groups: Glazing segments by group id
        test_point: Interior point of the room
        solid_edges: Tessellated edges of the room solid
        config: Geometry configuration
        hint_ids: Glazing group ids referenced by the boundary

    Returns:
        Tuple of (loops, LoopSource value, touching glazing group ids);
        loops is empty and the source is LoopSource.NONE when every tier
        fails
    """
    config = config or GeometryConfig()

    result = reconcile_room(boundary, glazing_groups, test_point, config, hint_ids)
    if result is not None:
        return [result.polygon], LoopSource.RECONCILED, result.group_ids

    if boundary_loops:
        return [list(loop) for loop in boundary_loops], LoopSource.BOUNDARY, set()

    if solid_edges:
        loops = slice_solid_loops(solid_edges, config)
        if loops:
            return loops, LoopSource.SOLID, set()

    return [], LoopSource.NONE, set()
