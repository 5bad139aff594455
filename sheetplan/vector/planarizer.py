"""
Planarizer Module

Splits a set of segments at every crossing, T-junction and collinear
overlap so that the result is a valid planar arrangement: no two edges
cross or partially overlap except at shared endpoints.
"""

import logging
import math
from typing import List, Optional, Sequence

from ..config import GeometryConfig
from ..constants import SPLIT_PARAM_MERGE
from ..geometry.primitives import (
    bbox_overlaps,
    cross,
    project_parameter,
    segment_intersection,
    sub,
)
from .segments import Segment, SegmentSet, snap_point

logger = logging.getLogger(__name__)


def add_split_param(params: List[float], t: float, tol: float = SPLIT_PARAM_MERGE) -> None:
    """Record a split parameter unless an equal one (within tol) exists."""
    for existing in params:
        if abs(existing - t) <= tol:
            return
    params.append(t)


def _collinear_within(seg_a: Segment, seg_b: Segment, eps: float) -> bool:
    """Both endpoints of seg_b lie within eps of the line through seg_a."""
    ab = sub(seg_a.b, seg_a.a)
    len_ab = math.sqrt(ab[0] * ab[0] + ab[1] * ab[1])
    if len_ab < 1e-12:
        return False

    dist_c = abs(cross(ab, sub(seg_b.a, seg_a.a))) / len_ab
    dist_d = abs(cross(ab, sub(seg_b.b, seg_a.a))) / len_ab
    return dist_c <= eps and dist_d <= eps


def compute_split_params(segments: Sequence[Segment], eps: float) -> List[List[float]]:
    """
    Compute split parameters for every segment.

    Algorithm:
    1. Skip pairs whose bounding boxes do not overlap (within eps)
    2. Non-parallel pairs: split both at the intersection parameters
    3. Collinear pairs (parallel or nearly so): split each at the
       projected endpoints of the other (overlap and T-junction case)

    Args:
        segments: Input segments
        eps: Geometric tolerance

    Returns:
        One parameter list per segment, seeded with 0 and 1 (unsorted)
    """
    n = len(segments)
    split = [[0.0, 1.0] for _ in range(n)]

    # Note: O(n^2); callers pre-filter to the spatially relevant subset
    for i in range(n):
        a, b = segments[i].a, segments[i].b

        for j in range(i + 1, n):
            c, d = segments[j].a, segments[j].b

            if not bbox_overlaps(a, b, c, d, eps):
                continue

            hit = segment_intersection(a, b, c, d, eps)
            if hit is not None:
                _, ta, tb = hit
                add_split_param(split[i], ta)
                add_split_param(split[j], tb)

            # Nearly collinear pairs may also cross; they take the overlap splits too
            if not (_collinear_within(segments[i], segments[j], eps)
                    or _collinear_within(segments[j], segments[i], eps)):
                continue

            # Split i at the ends of j that fall on i, and vice versa
            for p in (c, d):
                t = project_parameter(p, a, b, eps)
                if t is not None:
                    add_split_param(split[i], t)
            for p in (a, b):
                t = project_parameter(p, c, d, eps)
                if t is not None:
                    add_split_param(split[j], t)

    return split


def planarize(
    segments: Sequence[Segment],
    eps: float,
    config: Optional[GeometryConfig] = None
) -> List[Segment]:
    """
    Turn a noisy segment set into a crossing-free arrangement.

    Args:
        segments: Input segments (any order, may overlap or cross)
        eps: Geometric tolerance for intersections and collinearity
        config: Geometry configuration (snap pitch, minimum length)

    Returns:
        List of canonical sub-segments forming a valid arrangement
    """
    config = config or GeometryConfig()
    if not segments:
        return []

    split = compute_split_params(segments, eps)
    result = SegmentSet(config)

    for seg, params in zip(segments, split):
        ab = sub(seg.b, seg.a)
        if math.sqrt(ab[0] * ab[0] + ab[1] * ab[1]) < 1e-12:
            continue

        params.sort()
        for t0, t1 in zip(params, params[1:]):
            if t1 <= t0 + 1e-12:
                continue

            p0 = snap_point((seg.a[0] + ab[0] * t0, seg.a[1] + ab[1] * t0), config.snap_pitch)
            p1 = snap_point((seg.a[0] + ab[0] * t1, seg.a[1] + ab[1] * t1), config.snap_pitch)
            if math.hypot(p1[0] - p0[0], p1[1] - p0[1]) < config.min_segment_length:
                continue

            result.try_add(p0, p1, seg.is_glazing, seg.glazing_group_id)

    logger.debug(f"Planarize: {len(segments)} -> {len(result)} segments")
    return list(result.segments)
