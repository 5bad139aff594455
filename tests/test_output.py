"""
Output Tests: Layout, JSON and PDF Preview

Tests for coordinate layout, rounding, JSON document writing and the
PDF preview.
"""

import sys
import json
import math
import tempfile
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pymupdf

from sheetplan.config import ExportConfig
from sheetplan.constants import GroupSource, LayoutMode, LoopSource
from sheetplan.geometry.room import RoomRecord
from sheetplan.output import (
    PIPELINE_VERSION,
    ViewGroup,
    build_output_json,
    build_view_transform,
    create_preview_pdf,
    generate_json_filename,
    generate_preview_pdf_filename,
    get_polygon_centroid,
    round_half_up,
    write_groups_to_json,
)


def create_test_groups():
    """Create a host group with one room and one glazing group."""
    room = RoomRecord(
        room_id="R-101",
        name="Office",
        number="101",
        comment="Rent",
        loops=[[(0.0, 0.0), (4.0, 0.0), (4.0, 3.3), (0.0, 3.3)]],
        glazing_paths={5: [(4.0, 3.3), (0.0, 3.3)]},
        loop_source=LoopSource.RECONCILED,
    )
    host = ViewGroup(
        group_id="V1",
        name="Level 1",
        source=GroupSource.HOST,
        segments=[((0.0, 0.0), (4.0, 0.0)), ((4.0, 0.0), (4.0, 3.0))],
        cutouts=[((1.0, 1.0), (2.0, 1.0))],
        rooms=[room],
    )
    glazing = ViewGroup(
        group_id="V1_GLAZING_5",
        name="Level 1 / glazing 5",
        source=GroupSource.GLAZING,
        segments=[((-0.5, 3.3), (4.5, 3.3))],
    )
    return [host, glazing]


def test_round_half_up():
    """Test half-away-from-zero rounding."""
    assert round_half_up(2.5, 0) == 3.0
    assert round_half_up(-2.5, 0) == -3.0
    assert round_half_up(1.005, 2) == 1.01
    assert round_half_up(-0.125, 2) == -0.13
    assert round_half_up(1.23456789, 5) == 1.23457

    # No negative zero in the output
    value = round_half_up(-0.0000001, 5)
    assert value == 0.0
    assert math.copysign(1.0, value) == 1.0

    print("  [PASS] Round half up")
    return True


def test_model_layout():
    """Test model units with the viewport placed as on the sheet."""
    config = ExportConfig(layout_mode=LayoutMode.MODEL)
    transform = build_view_transform(100, (1000.0, 2000.0), (0.3, 0.2), "none", config)

    assert transform.apply((1000.0, 2000.0)) == (30.0, 20.0)
    assert transform.apply((1100.0, 2000.0)) == (130.0, 20.0)

    print("  [PASS] Model layout")
    return True


def test_paper_layout():
    """Test sheet units at 1:100."""
    config = ExportConfig(layout_mode=LayoutMode.PAPER)
    transform = build_view_transform(100, (1000.0, 2000.0), (0.3, 0.2), "none", config)

    assert transform.apply((1000.0, 2000.0)) == (0.3, 0.2)
    assert transform.apply((1100.0, 2000.0)) == (1.3, 0.2)

    print("  [PASS] Paper layout")
    return True


def test_unified_layout():
    """Test the common unified scale."""
    config = ExportConfig(layout_mode=LayoutMode.UNIFIED, unified_scale=200)
    transform = build_view_transform(50, (0.0, 0.0), (0.0, 0.0), "none", config)

    assert transform.apply((1000.0, 400.0)) == (5.0, 2.0)

    print("  [PASS] Unified layout")
    return True


def test_rotations():
    """Test quarter and half turns of the viewport."""
    config = ExportConfig()

    ccw = build_view_transform(100, (0.0, 0.0), (0.0, 0.0), "ccw", config)
    cw = build_view_transform(100, (0.0, 0.0), (0.0, 0.0), "cw", config)
    half = build_view_transform(100, (0.0, 0.0), (0.0, 0.0), "half", config)

    assert ccw.apply((10.0, 0.0)) == (0.0, 10.0)
    assert cw.apply((10.0, 0.0)) == (0.0, -10.0)
    assert half.apply((10.0, 0.0)) == (-10.0, 0.0)

    print("  [PASS] Viewport rotations")
    return True


def test_unit_factor():
    """Test conversion to metres."""
    config = ExportConfig(unit_factor=0.001)
    transform = build_view_transform(100, (0.0, 0.0), (0.0, 0.0), "none", config)

    assert transform.apply_segment((1500.0, 2500.0), (0.0, 0.0)) == ((1.5, 2.5), (0.0, 0.0))

    print("  [PASS] Unit factor")
    return True


def test_generate_filenames():
    """Test output filename generation."""
    assert generate_json_filename("C:/Project/Sheet A1.json", "C:/output") == \
        str(Path("C:/output/Sheet A1_plans.json"))
    assert generate_preview_pdf_filename("C:/Project/Sheet A1.json", "C:/output") == \
        str(Path("C:/output/Sheet A1_preview.pdf"))

    print("  [PASS] Filename generation")
    return True


def test_build_output_json():
    """Test complete output document structure."""
    groups = create_test_groups()

    result = build_output_json(
        groups,
        sheet="A-101",
        units="meters",
        mode="opa",
        layout_mode="model",
        input_file="sheet.json",
    )

    meta = result["meta"]
    assert meta["calc_mode"] == "OPA"
    assert meta["units_length"] == "meters"
    assert meta["sheet"] == "A-101"
    assert meta["pipeline_version"] == PIPELINE_VERSION
    assert meta["total_groups"] == 2
    assert meta["total_rooms"] == 1

    host = result["groups"][0]
    assert host["id"] == "V1"
    assert host["tags"] == {"source": "host"}
    assert host["segments"][0] == [[0.0, 0.0], [4.0, 0.0]]
    assert host["cutouts"] == [[[1.0, 1.0], [2.0, 1.0]]]

    room = host["rooms"][0]
    assert room["id"] == "R-101"
    assert room["number"] == "101"
    assert room["loops"][0][2] == [4.0, 3.3]
    assert room["glazing_paths"] == {"5": [[4.0, 3.3], [0.0, 3.3]]}

    assert result["groups"][1]["tags"]["source"] == "glazing"
    assert result["groups"][1]["rooms"] == []

    print("  [PASS] Build output JSON")
    return True


def test_write_groups_to_json():
    """Test JSON writing with non-ASCII text."""
    groups = create_test_groups()
    groups[0].rooms[0].comment = "МОП"

    with tempfile.TemporaryDirectory() as tmpdir:
        output_path = Path(tmpdir) / "nested" / "plans.json"

        result = write_groups_to_json(groups, str(output_path), sheet="A-101", mode="gns")
        assert result == str(output_path)
        assert output_path.exists(), "JSON file should be created"

        text = output_path.read_text(encoding="utf-8")
        assert "МОП" in text

        data = json.loads(text)
        assert data["meta"]["calc_mode"] == "GNS"
        assert len(data["groups"]) == 2

    print("  [PASS] JSON writing")
    return True


def test_get_polygon_centroid():
    """Test polygon centroid calculation."""
    cx, cy = get_polygon_centroid([(0, 0), (100, 0), (100, 100), (0, 100)])
    assert abs(cx - 50) < 0.1
    assert abs(cy - 50) < 0.1

    cx, cy = get_polygon_centroid([])
    assert cx == 0 and cy == 0

    print("  [PASS] Polygon centroid calculation")
    return True


def test_create_preview_pdf():
    """Test one preview page per group."""
    groups = create_test_groups()

    with tempfile.TemporaryDirectory() as tmpdir:
        output_path = Path(tmpdir) / "preview.pdf"
        create_preview_pdf(groups, str(output_path))
        assert output_path.exists()

        doc = pymupdf.open(str(output_path))
        try:
            assert doc.page_count == 2
            assert "Level 1" in doc[0].get_text()
        finally:
            doc.close()

    print("  [PASS] Preview PDF")
    return True


def test_create_preview_pdf_empty():
    """Test that an empty export still yields a valid PDF."""
    with tempfile.TemporaryDirectory() as tmpdir:
        output_path = Path(tmpdir) / "empty.pdf"
        create_preview_pdf([], str(output_path))

        doc = pymupdf.open(str(output_path))
        try:
            assert doc.page_count == 1
        finally:
            doc.close()

    print("  [PASS] Empty preview PDF")
    return True


def run_all_tests():
    """Run all output tests."""
    print("\n" + "=" * 60)
    print("Output Tests: Layout, JSON and PDF Preview")
    print("=" * 60)

    results = []

    print("\nLayout Tests:")
    results.append(test_round_half_up())
    results.append(test_model_layout())
    results.append(test_paper_layout())
    results.append(test_unified_layout())
    results.append(test_rotations())
    results.append(test_unit_factor())

    print("\nJSON Output Tests:")
    results.append(test_generate_filenames())
    results.append(test_build_output_json())
    results.append(test_write_groups_to_json())

    print("\nPDF Preview Tests:")
    results.append(test_get_polygon_centroid())
    results.append(test_create_preview_pdf())
    results.append(test_create_preview_pdf_empty())

    passed = sum(results)
    total = len(results)
    print("\n" + "=" * 60)
    print(f"Output Results: {passed}/{total} tests passed")
    print("=" * 60)

    return passed == total


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
