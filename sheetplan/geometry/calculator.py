"""
Geometry Calculator Module

Functions for measuring and validating room outlines with shapely.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import Polygon
from shapely.validation import explain_validity

from .room import RoomRecord

logger = logging.getLogger(__name__)


def loops_to_polygon(loops: Sequence[Sequence[Tuple[float, float]]]) -> Optional[Polygon]:
    """
    Build a shapely Polygon from room loops.

    The largest loop (by absolute area) is the shell; loops inside it
    become holes.

    Args:
        loops: Point loops without closing duplicates

    Returns:
        Polygon, or None when no loop has three points
    """
    rings = [Polygon(loop) for loop in loops if loop is not None and len(loop) >= 3]
    if not rings:
        return None

    rings.sort(key=lambda p: p.area, reverse=True)
    shell = rings[0]
    holes = [
        list(r.exterior.coords)
        for r in rings[1:]
        if r.area > 0 and shell.contains(r.representative_point())
    ]
    return Polygon(shell.exterior.coords, holes)


def calculate_area(polygon: Polygon) -> float:
    """Area of the polygon (holes subtracted)."""
    return polygon.area


def calculate_perimeter(polygon: Polygon) -> float:
    """Length of the outer ring only."""
    return polygon.exterior.length


def validate_room_measurements(room: RoomRecord) -> List[str]:
    """
    Validate room measurements and return warnings.

    Args:
        room: RoomRecord with measurements

    Returns:
        List of warning messages
    """
    warnings = []

    if not room.loops:
        warnings.append("Room has no outline")
        return warnings

    if room.area <= 0:
        warnings.append(f"Outline area {room.area:.3f} is not positive")

    if room.shapely_polygon is not None and not room.shapely_polygon.is_valid:
        warnings.append(f"Invalid outline: {explain_validity(room.shapely_polygon)}")

    if len(room.loops) > 1:
        warnings.append(f"Outline has {len(room.loops)} loops")

    return warnings


def calculate_room_measurements(room: RoomRecord) -> RoomRecord:
    """
    Populate area, perimeter, polygon and warnings of a room.

    Args:
        room: RoomRecord with loops set

    Returns:
        The same room, updated
    """
    polygon = loops_to_polygon(room.loops)
    room.shapely_polygon = polygon

    if polygon is not None:
        room.area = calculate_area(polygon)
        room.perimeter = calculate_perimeter(polygon)
    else:
        room.area = 0.0
        room.perimeter = 0.0

    warnings = validate_room_measurements(room)
    room.warnings = warnings

    for warning in warnings:
        logger.warning(f"Room {room.room_id}: {warning}")

    logger.debug(
        f"Room {room.room_id}: area {room.area:.1f}, "
        f"perimeter {room.perimeter:.1f}, source {room.loop_source}"
    )

    return room
