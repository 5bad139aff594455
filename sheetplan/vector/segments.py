"""
Segment Module

Segment value object and the canonicalizing segment set: coordinate
snapping, order-independent keys, minimum-length filtering and
idempotent insertion.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Set, Tuple

from ..config import GeometryConfig

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
SegmentKey = Tuple[float, float, float, float]
PointKey = Tuple[float, float]


@dataclass(frozen=True)
class Segment:
    """A 2D line segment tagged with glazing metadata."""
    a: Point
    b: Point
    is_glazing: bool = False
    glazing_group_id: int = 0

    @property
    def length(self) -> float:
        """Calculate segment length."""
        dx = self.b[0] - self.a[0]
        dy = self.b[1] - self.a[1]
        return math.sqrt(dx * dx + dy * dy)

    @property
    def direction(self) -> Point:
        """Unnormalized direction vector a -> b."""
        return (self.b[0] - self.a[0], self.b[1] - self.a[1])

    @property
    def midpoint(self) -> Point:
        """Get the midpoint of the segment."""
        return (
            (self.a[0] + self.b[0]) / 2,
            (self.a[1] + self.b[1]) / 2
        )

    @property
    def angle(self) -> float:
        """Segment angle in degrees (0-180), direction ignored."""
        angle = math.degrees(math.atan2(self.b[1] - self.a[1], self.b[0] - self.a[0]))
        if angle < 0:
            angle += 180
        if angle >= 180:
            angle -= 180
        return angle


def snap_value(value: float, pitch: float) -> float:
    """Snap one coordinate to the grid of the given pitch."""
    if pitch <= 0:
        return value
    snapped = round(value / pitch) * pitch
    # Avoid -0.0 keys
    return snapped + 0.0


def snap_point(p: Point, pitch: float) -> Point:
    """Snap a point to the coordinate grid (z already dropped)."""
    return (snap_value(p[0], pitch), snap_value(p[1], pitch))


def point_key(p: Point, pitch: float) -> PointKey:
    """Hashable key for a point after snapping."""
    return snap_point(p, pitch)


def _nearly(a: float, b: float, tol: float = 1e-9) -> bool:
    return abs(a - b) < tol


def canonical_key(a: Point, b: Point) -> SegmentKey:
    """
    Order-independent key for a segment.

    Endpoints are ordered lexicographically by X, then Y, so that
    canonical_key(a, b) == canonical_key(b, a). Callers snap first.
    """
    ax, ay = a
    bx, by = b
    if ax > bx or (_nearly(ax, bx) and ay > by):
        ax, ay, bx, by = bx, by, ax, ay
    return (ax + 0.0, ay + 0.0, bx + 0.0, by + 0.0)


def segment_key(segment: Segment, pitch: float) -> SegmentKey:
    """Canonical key of a segment after snapping both endpoints."""
    return canonical_key(snap_point(segment.a, pitch), snap_point(segment.b, pitch))


@dataclass
class SegmentSet:
    """
    Accumulates canonical segments for one view or one arrangement.

    The key set guarantees that a geometric segment is stored once,
    whatever the endpoint order of the calls that add it.
    """
    config: GeometryConfig
    segments: List[Segment] = field(default_factory=list)
    keys: Set[SegmentKey] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __contains__(self, segment: Segment) -> bool:
        return segment_key(segment, self.config.snap_pitch) in self.keys

    def try_add(
        self,
        a: Point,
        b: Point,
        is_glazing: bool = False,
        group_id: int = 0
    ) -> bool:
        """
        Snap, filter and insert a segment.

        Args:
            a: First endpoint (extra coordinates are ignored)
            b: Second endpoint
            is_glazing: Segment belongs to a glazing wall
            group_id: Glazing group id (0 = not grouped)

        Returns:
            True when the segment was inserted
        """
        if a is None or b is None:
            return False

        a2 = (float(a[0]), float(a[1]))
        b2 = (float(b[0]), float(b[1]))
        if math.hypot(b2[0] - a2[0], b2[1] - a2[1]) < self.config.min_segment_length:
            return False

        pitch = self.config.snap_pitch
        sa = snap_point(a2, pitch)
        sb = snap_point(b2, pitch)
        if _nearly(sa[0], sb[0]) and _nearly(sa[1], sb[1]):
            return False

        key = canonical_key(sa, sb)
        if key in self.keys:
            return False

        self.keys.add(key)
        self.segments.append(Segment(sa, sb, is_glazing, group_id))
        return True

    def add_segment(self, segment: Segment) -> bool:
        """Insert an existing segment, keeping its glazing tags."""
        return self.try_add(segment.a, segment.b, segment.is_glazing, segment.glazing_group_id)

    def extend(self, segments: Iterable[Segment]) -> int:
        """Insert many segments; returns how many were new."""
        return sum(1 for s in segments if self.add_segment(s))

    def discard_keys(self, keys: Set[SegmentKey]) -> int:
        """
        Drop every segment whose key is in keys.

        Returns:
            Number of segments removed
        """
        before = len(self.segments)
        pitch = self.config.snap_pitch
        self.segments = [s for s in self.segments if segment_key(s, pitch) not in keys]
        self.keys -= keys
        removed = before - len(self.segments)
        if removed:
            logger.debug(f"Discarded {removed} segments by key")
        return removed

    def glazing_groups(self) -> dict:
        """
        Glazing segments grouped by group id, in insertion order.

        Segments without a group id are skipped.
        """
        groups = {}
        for s in self.segments:
            if not s.is_glazing or s.glazing_group_id == 0:
                continue
            groups.setdefault(s.glazing_group_id, []).append(s)
        return groups
