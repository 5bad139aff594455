"""
Opening Bridge Resolver Module

Reseals host wall lines across door openings. For each opening, rays
are cast along the wall tangent from points offset to both wall faces;
the nearest hits on either side give the closing segment of that face.

Glazing doors take their face offsets from the surrounding glazing
panels when those can be inferred from already collected segments.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import GeometryConfig
from ..constants import (
    CENTER_SNAP_PARALLEL_MIN,
    GLAZING_PANEL_PARALLEL_MIN,
    RAY_HIT_EPS,
)
from ..geometry.primitives import Point, abs_cosine, add_scaled, cross, dot, normalize, sub
from ..vector.segments import Segment, SegmentSet

logger = logging.getLogger(__name__)

ClosingLine = Tuple[Point, Point]


@dataclass(frozen=True)
class OpeningBridgeRequest:
    """One opening to reseal, in view coordinates."""
    center: Point
    tangent: Point        # unit vector along the host wall
    normal: Point         # unit vector across the host wall
    half_thickness: float
    in_glazing: bool = False

    @classmethod
    def from_vectors(
        cls,
        center: Sequence[float],
        tangent: Sequence[float],
        normal: Sequence[float],
        half_thickness: float,
        in_glazing: bool = False
    ) -> Optional["OpeningBridgeRequest"]:
        """
        Build a request, normalizing the direction vectors.

        Returns None when either direction is degenerate.
        """
        t = normalize((float(tangent[0]), float(tangent[1])))
        n = normalize((float(normal[0]), float(normal[1])))
        if t is None or n is None:
            return None
        return cls(
            center=(float(center[0]), float(center[1])),
            tangent=t,
            normal=n,
            half_thickness=abs(float(half_thickness)),
            in_glazing=bool(in_glazing),
        )

    def offset_point(self, offset: float) -> Point:
        """Center moved along the normal by offset."""
        return add_scaled(self.center, self.normal, offset)


@dataclass
class OpeningStats:
    """Counters for one view's opening pass."""
    requested: int = 0
    bridged: int = 0
    sides_added: int = 0
    unresolved_sides: int = 0


def nearest_hits_along_line(
    origin: Point,
    tangent: Point,
    segments: Sequence[Segment]
) -> Optional[Tuple[Point, Point]]:
    """
    Nearest segment crossings on both sides of origin along tangent.

    Parallel segments are skipped; hits at the origin itself do not
    count.

    Args:
        origin: Ray origin
        tangent: Line direction (need not be unit length)
        segments: Candidate segments

    Returns:
        Tuple of (negative-side hit, positive-side hit), or None unless
        both sides hit
    """
    if tangent[0] * tangent[0] + tangent[1] * tangent[1] < 1e-18:
        return None

    best_pos = float("inf")
    best_neg = float("-inf")
    hit_pos = None
    hit_neg = None

    for seg in segments:
        s = sub(seg.b, seg.a)
        den = cross(tangent, s)
        if abs(den) < 1e-12:
            continue

        w = sub(seg.a, origin)
        lam = cross(w, s) / den
        mu = cross(w, tangent) / den
        if mu < -RAY_HIT_EPS or mu > 1.0 + RAY_HIT_EPS:
            continue

        if RAY_HIT_EPS < lam < best_pos:
            best_pos = lam
            hit_pos = add_scaled(origin, tangent, lam)
        if best_neg < lam < -RAY_HIT_EPS:
            best_neg = lam
            hit_neg = add_scaled(origin, tangent, lam)

    if hit_neg is None or hit_pos is None:
        return None
    return hit_neg, hit_pos


def infer_glazing_panel_offsets(
    request: OpeningBridgeRequest,
    glazing_segments: Sequence[Segment],
    config: GeometryConfig
) -> Optional[Tuple[float, float]]:
    """
    Panel face offsets around a glazing door, read from nearby segments.

    Candidates are glazing segments nearly parallel to the tangent, not
    entirely beyond the sample window along the tangent and within the
    maximum normal offset.

    Returns:
        Tuple of (inner offset < 0, outer offset > 0), or None when one
        side has no candidate or the panel is thinner than the minimum
    """
    positive = []
    negative = []

    for seg in glazing_segments:
        cos = abs_cosine(seg.direction, request.tangent)
        if cos is None or cos < GLAZING_PANEL_PARALLEL_MIN:
            continue

        va = sub(seg.a, request.center)
        vb = sub(seg.b, request.center)
        ta = dot(va, request.tangent)
        tb = dot(vb, request.tangent)
        limit = config.glazing_sample_along
        if (ta > limit and tb > limit) or (ta < -limit and tb < -limit):
            continue

        offset = dot(va, request.normal)
        if abs(offset) > config.glazing_sample_max_normal:
            continue

        if offset > 0:
            positive.append(offset)
        else:
            negative.append(offset)

    if not positive or not negative:
        return None

    outer = max(positive)
    inner = min(negative)
    if outer - inner < config.min_panel_thickness:
        logger.debug(f"Panel too thin ({outer - inner:.2f}) at {request.center}")
        return None

    return inner, outer


def snap_center_to_wall_line(
    request: OpeningBridgeRequest,
    segments: Sequence[Segment]
) -> Optional[Point]:
    """
    Move the opening center along the normal onto the nearest wall line.

    Only lines nearly parallel to the tangent are considered.

    Returns:
        Corrected center, or None when no such line exists
    """
    best = None
    best_abs = float("inf")

    for seg in segments:
        cos = abs_cosine(seg.direction, request.tangent)
        if cos is None or cos < CENTER_SNAP_PARALLEL_MIN:
            continue

        dist = dot(sub(seg.a, request.center), request.normal)
        if abs(dist) < best_abs:
            best_abs = abs(dist)
            best = request.offset_point(dist)

    return best


def _shifted(line: ClosingLine, normal: Point, offset: float) -> ClosingLine:
    return add_scaled(line[0], normal, offset), add_scaled(line[1], normal, offset)


def _resolve_sides(
    request: OpeningBridgeRequest,
    outer_offset: float,
    inner_offset: float,
    host_segments: Sequence[Segment],
    center_segments: Sequence[Segment],
    replace_both: bool = True
) -> List[ClosingLine]:
    """
    Offset rays for both faces, center ray when either fails.

    The center ray is cast once against center_segments. With
    replace_both, its shifted hits replace both faces; otherwise only
    the failed faces take them.
    """
    outer_hit = nearest_hits_along_line(
        request.offset_point(outer_offset), request.tangent, host_segments)
    inner_hit = nearest_hits_along_line(
        request.offset_point(inner_offset), request.tangent, host_segments)

    lines = [hit for hit in (outer_hit, inner_hit) if hit is not None]
    if outer_hit is not None and inner_hit is not None:
        return lines

    center_hit = nearest_hits_along_line(request.center, request.tangent, center_segments)
    if center_hit is None:
        return lines

    outer_line = _shifted(center_hit, request.normal, outer_offset)
    inner_line = _shifted(center_hit, request.normal, inner_offset)
    if replace_both:
        return [outer_line, inner_line]

    if outer_hit is None:
        lines.append(outer_line)
    if inner_hit is None:
        lines.append(inner_line)
    return lines


def resolve_opening(
    request: OpeningBridgeRequest,
    host_segments: Sequence[Segment],
    config: Optional[GeometryConfig] = None,
    glazing_segments: Optional[Sequence[Segment]] = None
) -> List[ClosingLine]:
    """
    Closing lines for one opening.

    Ordinary wall: faces at +/- half thickness. Glazing door: faces from
    the inferred panel offsets (center fallback against the glazing
    segments), else the nominal half thickness with the outer line
    shifted by the configured outer shift.

    Args:
        request: Opening to reseal
        host_segments: Segments collected for the view so far
        config: Geometry configuration
        glazing_segments: Glazing subset of the host segments

    Returns:
        Zero, one or two closing lines
    """
    config = config or GeometryConfig()
    if glazing_segments is None:
        glazing_segments = [s for s in host_segments if s.is_glazing]

    if config.snap_opening_centers:
        snapped = snap_center_to_wall_line(request, host_segments)
        if snapped is not None:
            request = OpeningBridgeRequest(
                snapped, request.tangent, request.normal,
                request.half_thickness, request.in_glazing,
            )

    half = request.half_thickness

    if not request.in_glazing:
        return _resolve_sides(request, half, -half, host_segments, host_segments)

    offsets = infer_glazing_panel_offsets(request, glazing_segments, config)
    if offsets is not None:
        inner, outer = offsets
        return _resolve_sides(
            request, outer, inner, host_segments, glazing_segments, replace_both=False)

    return _resolve_sides(
        request, half + config.opening_outer_shift, -half, host_segments, host_segments)


def apply_opening_bridges(
    requests: Sequence[OpeningBridgeRequest],
    segment_set: SegmentSet,
    config: Optional[GeometryConfig] = None
) -> OpeningStats:
    """
    Resolve every opening in order and insert the closing lines.

    Each opening sees the lines added for the openings before it. The
    glazing subset is taken once, before the first opening.

    Returns:
        OpeningStats for the pass
    """
    config = config or GeometryConfig()
    stats = OpeningStats(requested=len(requests))
    if not requests or len(segment_set) == 0:
        stats.unresolved_sides = 2 * len(requests)
        return stats

    glazing_segments = [s for s in segment_set if s.is_glazing]

    for request in requests:
        lines = resolve_opening(request, segment_set.segments, config, glazing_segments)

        added = 0
        for a, b in lines:
            if segment_set.try_add(a, b):
                added += 1

        stats.unresolved_sides += max(0, 2 - len(lines))
        stats.sides_added += added
        if lines:
            stats.bridged += 1
        else:
            logger.debug(f"Opening at {request.center} unresolved on both sides")

    logger.info(
        f"Openings: {stats.bridged}/{stats.requested} bridged, "
        f"{stats.sides_added} lines added, {stats.unresolved_sides} sides unresolved"
    )
    return stats
