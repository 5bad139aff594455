"""
Room Loop Module

Conversions between room loops and segments, plus the last-resort loop
builders used when planar reconciliation is not possible:

- boundary pieces -> raw loops + non-glazing segments + glazing hints
- solid edges -> floor-plane slice -> loops by adjacency walking
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from ..config import GeometryConfig
from ..geometry.primitives import Point
from ..vector.segments import Segment, SegmentSet, point_key, snap_point

logger = logging.getLogger(__name__)

Loop = List[Point]


def loops_from_segments(segments: Sequence[Segment], pitch: float) -> List[Loop]:
    """
    Chain segments into loops by walking shared endpoints.

    Simpler than the face walk: from each unused segment, keep taking
    the first unused segment attached to the current end until the walk
    returns to its start or runs out. Open chains with at least three
    points are kept as well.

    Args:
        segments: Canonical segments
        pitch: Snap pitch used for endpoint keys

    Returns:
        Loops without closing duplicate
    """
    loops: List[Loop] = []
    if not segments:
        return loops

    adjacency: Dict[Tuple[float, float], List[int]] = {}
    for i, seg in enumerate(segments):
        adjacency.setdefault(point_key(seg.a, pitch), []).append(i)
        adjacency.setdefault(point_key(seg.b, pitch), []).append(i)

    used = [False] * len(segments)

    for i, seg in enumerate(segments):
        if used[i]:
            continue
        used[i] = True

        loop = [seg.a, seg.b]
        start_key = point_key(seg.a, pitch)
        current = seg.b

        while True:
            cur_key = point_key(current, pitch)
            next_point = None

            for idx in adjacency.get(cur_key, []):
                if used[idx]:
                    continue
                cand = segments[idx]
                if point_key(cand.a, pitch) == cur_key:
                    next_point = cand.b
                elif point_key(cand.b, pitch) == cur_key:
                    next_point = cand.a
                else:
                    continue
                used[idx] = True
                break

            if next_point is None:
                break

            if point_key(next_point, pitch) == start_key:
                break

            loop.append(next_point)
            current = next_point

        if len(loop) >= 3:
            loops.append(loop)

    return loops


def slice_solid_loops(
    solid_edges: Sequence[Sequence[Sequence[float]]],
    config: Optional[GeometryConfig] = None
) -> List[Loop]:
    """
    Floor outline of a room solid.

    Takes the lowest Z over all tessellated edge points, keeps edge
    pieces whose both endpoints lie within the slice tolerance of the
    floor plane, canonicalizes them and chains them into loops.

    Args:
        solid_edges: Tessellated solid edges, each a list of (x, y, z)
        config: Geometry configuration

    Returns:
        Loops in the XY plane (may be empty)
    """
    config = config or GeometryConfig()
    polylines = []
    for edge in solid_edges or []:
        pts = np.asarray(edge, dtype=float)
        if pts.ndim != 2 or pts.shape[0] < 2 or pts.shape[1] < 2:
            continue
        if pts.shape[1] == 2:
            pts = np.column_stack([pts, np.zeros(len(pts))])
        polylines.append(pts[:, :3])

    if not polylines:
        return []

    z_min = min(float(p[:, 2].min()) for p in polylines)
    tol = config.solid_slice_tolerance
    z_plane = z_min + tol * 0.5

    segment_set = SegmentSet(config)
    for pts in polylines:
        on_plane = np.abs(pts[:, 2] - z_plane) <= tol
        for i in np.flatnonzero(on_plane[:-1] & on_plane[1:]):
            segment_set.try_add(
                (float(pts[i, 0]), float(pts[i, 1])),
                (float(pts[i + 1, 0]), float(pts[i + 1, 1])),
            )

    loops = loops_from_segments(segment_set.segments, config.snap_pitch)
    logger.debug(
        f"Solid slice at z={z_plane:.3f}: {len(segment_set)} segments -> {len(loops)} loops"
    )
    return loops


def boundary_from_pieces(
    piece_loops: Sequence[Sequence[object]],
    config: Optional[GeometryConfig] = None
) -> Tuple[List[Loop], List[Segment], Set[int]]:
    """
    Split a room's reported boundary into its three working forms.

    Each piece carries ``points`` (tessellated, in walk order),
    ``glazing`` and ``glazing_group``.

    Returns:
        Tuple of (full loops as reported, non-glazing boundary segments,
        glazing group ids the boundary itself runs along)
    """
    config = config or GeometryConfig()
    pitch = config.snap_pitch
    loops: List[Loop] = []
    non_glazing = SegmentSet(config)
    hints: Set[int] = set()

    for pieces in piece_loops or []:
        loop: Loop = []
        last_key = None

        for piece in pieces:
            points = [(float(p[0]), float(p[1])) for p in (piece.points or [])]
            if len(points) < 2:
                continue

            if piece.glazing and piece.glazing_group:
                hints.add(piece.glazing_group)

            for p in points:
                sp = snap_point(p, pitch)
                key = point_key(sp, pitch)
                if key == last_key:
                    continue
                loop.append(sp)
                last_key = key

            if not piece.glazing:
                for a, b in zip(points, points[1:]):
                    non_glazing.try_add(a, b)

        if len(loop) >= 2 and point_key(loop[0], pitch) == point_key(loop[-1], pitch):
            loop.pop()
        if len(loop) >= 3:
            loops.append(loop)

    return loops, list(non_glazing.segments), hints
