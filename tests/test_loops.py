#!/usr/bin/env python
"""
Room Loop and Selection Tests

Tests for:
- Loop <-> segment conversion
- Reported boundary splitting (loops, non-glazing segments, hints)
- Floor slice of a room solid
- Common-area detection and room comments
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sheetplan.config import GeometryConfig
from sheetplan.rooms.loops import (
    boundary_from_pieces,
    loops_from_segments,
    slice_solid_loops,
)
from sheetplan.rooms.selection import (
    compose_room_comment,
    is_common_area,
    is_common_area_mark,
)
from sheetplan.scene import BoundaryPiece, RoomInput
from sheetplan.vector.segments import Segment


def box_edges(x0, y0, x1, y1, z0, z1):
    """Tessellated edges of an axis-aligned room solid."""
    corners = [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
    edges = []
    for z in (z0, z1):
        for i in range(4):
            a = corners[i]
            b = corners[(i + 1) % 4]
            edges.append([(a[0], a[1], z), (b[0], b[1], z)])
    for x, y in corners:
        edges.append([(x, y, z0), (x, y, z1)])
    return edges


def ring_segments(loops):
    """Closed-ring edges of each loop."""
    segments = []
    for loop in loops:
        for i, a in enumerate(loop):
            segments.append(Segment(a, loop[(i + 1) % len(loop)]))
    return segments


class TestLoopConversion:
    """Tests for loops_from_segments."""

    def test_loops_from_square(self):
        """Test chaining four edges into one loop."""
        segments = ring_segments([[(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]])
        loops = loops_from_segments(segments, 0.5)
        assert len(loops) == 1
        assert len(loops[0]) == 4
        assert set(loops[0]) == {(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)}
        print("  [PASS] Square chained")

    def test_two_disjoint_loops(self):
        """Test two separate rings."""
        segments = ring_segments([
            [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)],
            [(20.0, 0.0), (30.0, 0.0), (30.0, 10.0)],
        ])
        loops = loops_from_segments(segments, 0.5)
        assert sorted(len(loop) for loop in loops) == [3, 4]
        print("  [PASS] Two loops")

    def test_short_chain_dropped(self):
        """Test that a lone segment is not a loop."""
        assert loops_from_segments([Segment((0.0, 0.0), (5.0, 0.0))], 0.5) == []
        print("  [PASS] Short chain dropped")


class TestBoundaryFromPieces:
    """Tests for boundary_from_pieces."""

    def test_split_forms(self):
        """Test loops, non-glazing segments and glazing hints."""
        pieces = [[
            BoundaryPiece(points=[(0.0, 0.0), (4000.0, 0.0)]),
            BoundaryPiece(points=[(4000.0, 0.0), (4000.0, 3000.0)]),
            BoundaryPiece(points=[(4000.0, 3000.0), (0.0, 3000.0)], glazing=True, glazing_group=9),
            BoundaryPiece(points=[(0.0, 3000.0), (0.0, 0.0)]),
        ]]

        loops, segments, hints = boundary_from_pieces(pieces, GeometryConfig())
        assert loops == [[(0.0, 0.0), (4000.0, 0.0), (4000.0, 3000.0), (0.0, 3000.0)]]
        assert len(segments) == 3
        assert all(not s.is_glazing for s in segments)
        assert hints == {9}
        print("  [PASS] Boundary split")

    def test_tessellated_arc_piece(self):
        """Test a piece with intermediate points."""
        pieces = [[
            BoundaryPiece(points=[(0.0, 0.0), (50.0, -10.0), (100.0, 0.0)]),
            BoundaryPiece(points=[(100.0, 0.0), (100.0, 100.0), (0.0, 100.0), (0.0, 0.0)]),
        ]]
        loops, segments, hints = boundary_from_pieces(pieces)
        assert len(loops[0]) == 5
        assert len(segments) == 5
        assert hints == set()
        print("  [PASS] Tessellated piece")

    def test_empty_boundary(self):
        """Test a room with no boundary."""
        assert boundary_from_pieces([]) == ([], [], set())
        print("  [PASS] Empty boundary")


class TestSliceSolid:
    """Tests for slice_solid_loops."""

    def test_box_floor(self):
        """Test that the floor square of a box is found."""
        loops = slice_solid_loops(box_edges(0.0, 0.0, 5000.0, 4000.0, 0.0, 2800.0))
        assert len(loops) == 1
        assert set(loops[0]) == {(0.0, 0.0), (5000.0, 0.0), (5000.0, 4000.0), (0.0, 4000.0)}
        print("  [PASS] Box floor")

    def test_raised_floor(self):
        """Test a solid whose floor is not at zero."""
        loops = slice_solid_loops(box_edges(0.0, 0.0, 100.0, 100.0, 3500.0, 6300.0))
        assert len(loops) == 1
        assert len(loops[0]) == 4
        print("  [PASS] Raised floor")

    def test_no_edges(self):
        """Test empty and malformed input."""
        assert slice_solid_loops([]) == []
        assert slice_solid_loops([[(1.0, 2.0, 3.0)]]) == []
        print("  [PASS] No edges")


class TestCommonArea:
    """Tests for common-area marks and comments."""

    def test_marks(self):
        """Test recognised and rejected values."""
        assert is_common_area_mark("МОП") is True
        assert is_common_area_mark("моп") is True
        assert is_common_area_mark("MOP") is True
        assert is_common_area_mark("Tech room; mop") is True
        assert is_common_area_mark("Mopping closet") is False
        assert is_common_area_mark("") is False
        assert is_common_area_mark("   ") is False
        assert is_common_area_mark(None) is False
        print("  [PASS] Common-area marks")

    def test_room_checks_comment_purpose_assignment(self):
        """Test the default check over the text fields."""
        assert is_common_area(RoomInput(id="1", purpose="МОП")) is True
        assert is_common_area(RoomInput(id="2", assignment="corridor, mop")) is True
        assert is_common_area(RoomInput(id="3", comment="Office")) is False
        print("  [PASS] Text field check")

    def test_configured_parameter_only(self):
        """Test that a configured parameter replaces the text checks."""
        room = RoomInput(id="1", comment="MOP", parameters={"Category": "Rent"})
        assert is_common_area(room, "category") is False

        room = RoomInput(id="2", parameters={"Category": "МОП"})
        assert is_common_area(room, "CATEGORY") is True

        room = RoomInput(id="3", parameters={})
        assert is_common_area(room, "Category") is False
        print("  [PASS] Configured parameter")

    def test_compose_comment(self):
        """Test joined notes and the common-area marker."""
        room = RoomInput(id="1", comment="Office", purpose=" Rent ", assignment="")
        assert compose_room_comment(room) == "Office; Rent"

        room = RoomInput(id="2", comment="mop")
        assert compose_room_comment(room) == "МОП"

        assert compose_room_comment(RoomInput(id="3")) == ""
        print("  [PASS] Room comment")
