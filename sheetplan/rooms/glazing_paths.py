"""
Glazing Path Module

For a room loop and the glazing groups touching it, extracts the part
of the loop that runs along each glazing wall.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..geometry.primitives import Point, distance_point_to_segment
from ..vector.segments import Segment

logger = logging.getLogger(__name__)


def _near_any(p: Point, segments: Sequence[Segment], tolerance: float) -> bool:
    for seg in segments:
        if distance_point_to_segment(p, seg.a, seg.b) <= tolerance:
            return True
    return False


def glazing_path(
    loop: Sequence[Point],
    group_segments: Sequence[Segment],
    tolerance: float
) -> Optional[List[Point]]:
    """
    Longest run of consecutive loop vertices lying along a glazing group.

    The loop is cyclic, so a run may wrap past the last vertex; the
    returned path is rotated to be contiguous.

    Args:
        loop: Room loop (no closing duplicate)
        group_segments: Segments of one glazing group
        tolerance: Vertex-to-glazing distance tolerance

    Returns:
        Path with at least two points, or None
    """
    if not loop or not group_segments:
        return None

    n = len(loop)
    flags = [_near_any(p, group_segments, tolerance) for p in loop]

    if all(flags):
        return list(loop)
    if sum(flags) < 2:
        return None

    # Start right after a vertex that is off the glazing so no run is split
    start = next(i for i in range(n) if not flags[i])

    best: List[Point] = []
    run: List[Point] = []
    for k in range(1, n + 1):
        i = (start + k) % n
        if flags[i]:
            run.append(loop[i])
            continue
        if len(run) > len(best):
            best = run
        run = []

    if len(run) > len(best):
        best = run

    return best if len(best) >= 2 else None


def room_glazing_paths(
    loop: Sequence[Point],
    glazing_groups: Mapping[int, Sequence[Segment]],
    group_ids: Iterable[int],
    tolerance: float
) -> Dict[int, List[Point]]:
    """
    Glazing paths for every listed group, keyed by group id.

    Groups without a path are omitted.
    """
    paths: Dict[int, List[Point]] = {}
    for gid in sorted(group_ids):
        segments = glazing_groups.get(gid)
        if not segments:
            continue
        path = glazing_path(loop, segments, tolerance)
        if path:
            paths[gid] = path

    if paths:
        logger.debug(f"Glazing paths for groups: {sorted(paths)}")
    return paths
