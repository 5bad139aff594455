#!/usr/bin/env python
"""
Opening Bridge Resolver Tests

Tests for:
- Ray hits along the wall tangent
- Door resealing in ordinary walls (offset rays, center fallback)
- Glazing doors (inferred panel offsets, nominal fallback)
- Opening center snapping and pass statistics
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sheetplan.config import GeometryConfig
from sheetplan.openings.bridge_resolver import (
    OpeningBridgeRequest,
    apply_opening_bridges,
    infer_glazing_panel_offsets,
    nearest_hits_along_line,
    resolve_opening,
    snap_center_to_wall_line,
)
from sheetplan.vector.segments import Segment, SegmentSet

# Door 900 mm wide in a 200 mm wall along X, centered at the origin
DOOR_HALF_WIDTH = 450.0
WALL_HALF = 100.0


def wall_with_door(jamb_from=-WALL_HALF, jamb_to=WALL_HALF, glazing=False, group=0):
    """Wall faces at y = +/-100 with a door gap and its jambs."""
    segments = []
    for y in (WALL_HALF, -WALL_HALF):
        segments.append(Segment((-3000.0, y), (-DOOR_HALF_WIDTH, y), glazing, group))
        segments.append(Segment((DOOR_HALF_WIDTH, y), (3000.0, y), glazing, group))
    for x in (-DOOR_HALF_WIDTH, DOOR_HALF_WIDTH):
        segments.append(Segment((x, jamb_from), (x, jamb_to)))
    return segments


def door(in_glazing=False, center=(0.0, 0.0)):
    return OpeningBridgeRequest.from_vectors(
        center=center,
        tangent=(1.0, 0.0),
        normal=(0.0, 1.0),
        half_thickness=WALL_HALF,
        in_glazing=in_glazing,
    )


def line_ys(lines):
    return sorted(round(a[1], 6) for a, _ in lines)


class TestOpeningRequest:
    """Tests for OpeningBridgeRequest construction."""

    def test_vectors_normalized(self):
        """Test that tangent and normal become unit vectors."""
        request = OpeningBridgeRequest.from_vectors((0, 0), (2.0, 0.0), (0.0, -5.0), -100.0)
        assert request.tangent == (1.0, 0.0)
        assert request.normal == (0.0, -1.0)
        assert request.half_thickness == 100.0
        print("  [PASS] Vectors normalized")

    def test_degenerate_direction(self):
        """Test that a zero tangent is rejected."""
        assert OpeningBridgeRequest.from_vectors((0, 0), (0.0, 0.0), (0.0, 1.0), 100.0) is None
        print("  [PASS] Degenerate direction")

    def test_offset_point(self):
        """Test moving the center along the normal."""
        assert door().offset_point(-40.0) == (0.0, -40.0)
        print("  [PASS] Offset point")


class TestNearestHits:
    """Tests for nearest_hits_along_line."""

    def test_both_sides_hit(self):
        """Test nearest hits on the jambs."""
        hits = nearest_hits_along_line((0.0, 0.0), (1.0, 0.0), wall_with_door())
        assert hits == ((-450.0, 0.0), (450.0, 0.0))
        print("  [PASS] Both sides hit")

    def test_nearest_wins(self):
        """Test that farther crossings are ignored."""
        segments = wall_with_door() + [Segment((1000.0, -100.0), (1000.0, 100.0))]
        hits = nearest_hits_along_line((0.0, 0.0), (1.0, 0.0), segments)
        assert hits[1] == (450.0, 0.0)
        print("  [PASS] Nearest hit")

    def test_one_side_missing(self):
        """Test that one-sided hits are not a result."""
        segments = [Segment((450.0, -100.0), (450.0, 100.0))]
        assert nearest_hits_along_line((0.0, 0.0), (1.0, 0.0), segments) is None
        print("  [PASS] One side missing -> None")

    def test_parallel_segments_skipped(self):
        """Test that wall faces along the ray never count."""
        segments = [Segment((-3000.0, 0.0), (3000.0, 0.0))]
        assert nearest_hits_along_line((0.0, 0.0), (1.0, 0.0), segments) is None
        print("  [PASS] Parallel skipped")


class TestResolveOpening:
    """Tests for resolve_opening."""

    def test_ordinary_door(self):
        """Test two closing lines on the wall faces."""
        lines = resolve_opening(door(), wall_with_door())
        assert len(lines) == 2
        assert line_ys(lines) == [-100.0, 100.0]
        for a, b in lines:
            assert abs(abs(b[0] - a[0]) - 900.0) < 1e-9
            assert a[1] == b[1]
        print("  [PASS] Ordinary door")

    def test_center_fallback(self):
        """Test short jambs reached only by the center ray."""
        lines = resolve_opening(door(), wall_with_door(jamb_from=-20.0, jamb_to=20.0))
        assert len(lines) == 2
        assert line_ys(lines) == [-100.0, 100.0]
        print("  [PASS] Center fallback")

    def test_center_fallback_replaces_both_faces(self):
        """Test that a one-sided failure discards the direct hit too."""
        segments = wall_with_door(jamb_from=-20.0, jamb_to=20.0)
        # Reached only by the outer ray
        segments.append(Segment((-600.0, 50.0), (-600.0, 150.0)))
        segments.append(Segment((600.0, 50.0), (600.0, 150.0)))

        lines = resolve_opening(door(), segments)
        assert line_ys(lines) == [-100.0, 100.0]
        for a, b in lines:
            assert sorted((a[0], b[0])) == [-450.0, 450.0]
        print("  [PASS] Center fallback replaces both faces")

    def test_unresolvable(self):
        """Test an opening with nothing to hit."""
        assert resolve_opening(door(), []) == []
        print("  [PASS] Unresolvable")

    def test_glazing_door_with_inferred_panel(self):
        """Test faces taken from the glazing panel around the door."""
        segments = []
        for y in (30.0, -25.0):
            segments.append(Segment((-3000.0, y), (-450.0, y), True, 1))
            segments.append(Segment((450.0, y), (3000.0, y), True, 1))
        segments.append(Segment((-450.0, -25.0), (-450.0, 30.0)))
        segments.append(Segment((450.0, -25.0), (450.0, 30.0)))

        lines = resolve_opening(door(in_glazing=True), segments)
        assert line_ys(lines) == [-25.0, 30.0]
        print("  [PASS] Glazing door with panel")

    def test_glazing_door_nominal(self):
        """Test the nominal faces with the outer shift."""
        lines = resolve_opening(door(in_glazing=True), wall_with_door())
        assert line_ys(lines) == [-100.0, 90.0]
        print("  [PASS] Glazing door nominal")


class TestGlazingPanelOffsets:
    """Tests for infer_glazing_panel_offsets."""

    def test_offsets(self):
        """Test inner and outer face offsets."""
        glazing = [
            Segment((-3000.0, 30.0), (-450.0, 30.0), True, 1),
            Segment((450.0, -25.0), (3000.0, -25.0), True, 1),
            Segment((450.0, -40.0), (450.0, 40.0), True, 1),
        ]
        assert infer_glazing_panel_offsets(door(True), glazing, GeometryConfig()) == (-25.0, 30.0)
        print("  [PASS] Panel offsets")

    def test_thin_panel_rejected(self):
        """Test a panel thinner than the minimum."""
        glazing = [
            Segment((-3000.0, 3.0), (3000.0, 3.0), True, 1),
            Segment((-3000.0, -3.0), (3000.0, -3.0), True, 1),
        ]
        assert infer_glazing_panel_offsets(door(True), glazing, GeometryConfig()) is None
        print("  [PASS] Thin panel rejected")

    def test_one_sided_panel(self):
        """Test glazing on one side of the center only."""
        glazing = [Segment((-3000.0, 30.0), (3000.0, 30.0), True, 1)]
        assert infer_glazing_panel_offsets(door(True), glazing, GeometryConfig()) is None
        print("  [PASS] One-sided panel")

    def test_far_segments_ignored(self):
        """Test segments outside the sample window."""
        glazing = [
            Segment((3000.0, 30.0), (6000.0, 30.0), True, 1),
            Segment((-3000.0, -25.0), (3000.0, -25.0), True, 1),
            Segment((-3000.0, 2000.0), (3000.0, 2000.0), True, 1),
        ]
        assert infer_glazing_panel_offsets(door(True), glazing, GeometryConfig()) is None
        print("  [PASS] Far segments ignored")


class TestCenterSnap:
    """Tests for snap_center_to_wall_line."""

    def test_snap_to_nearest_parallel_line(self):
        """Test the center moving onto the closest wall face."""
        segments = wall_with_door()
        assert snap_center_to_wall_line(door(center=(0.0, 37.0)), segments) == (0.0, 100.0)
        print("  [PASS] Center snapped")

    def test_no_parallel_line(self):
        """Test that perpendicular lines are ignored."""
        segments = [Segment((450.0, -100.0), (450.0, 100.0))]
        assert snap_center_to_wall_line(door(), segments) is None
        print("  [PASS] No parallel line")


class TestApplyOpeningBridges:
    """Tests for apply_opening_bridges."""

    def test_lines_inserted(self):
        """Test that closing lines go into the segment set."""
        segment_set = SegmentSet(GeometryConfig())
        segment_set.extend(wall_with_door())
        before = len(segment_set)

        stats = apply_opening_bridges([door()], segment_set)
        assert stats.requested == 1
        assert stats.bridged == 1
        assert stats.sides_added == 2
        assert stats.unresolved_sides == 0
        assert len(segment_set) == before + 2
        assert Segment((-450.0, 100.0), (450.0, 100.0)) in segment_set
        print("  [PASS] Lines inserted")

    def test_repeat_is_idempotent(self):
        """Test that resolving the same door twice adds nothing new."""
        segment_set = SegmentSet(GeometryConfig())
        segment_set.extend(wall_with_door())

        apply_opening_bridges([door()], segment_set)
        count = len(segment_set)
        stats = apply_opening_bridges([door()], segment_set)
        assert len(segment_set) == count
        assert stats.sides_added == 0
        print("  [PASS] Idempotent")

    def test_empty_set(self):
        """Test unresolved counters when there is nothing to hit."""
        stats = apply_opening_bridges([door(), door()], SegmentSet(GeometryConfig()))
        assert stats.requested == 2
        assert stats.bridged == 0
        assert stats.unresolved_sides == 4
        print("  [PASS] Empty set")
