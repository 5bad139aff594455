"""
Point Locator Module

Point-in-polygon test and selection of the smallest face that encloses
a query point.
"""

import logging
from typing import List, Optional, Sequence

from ..constants import MIN_FACE_AREA
from .faces import Polygon2D, perimeter, signed_area
from .primitives import Point, is_point_on_segment

logger = logging.getLogger(__name__)


def contains(point: Point, polygon: Sequence[Point], eps: float) -> bool:
    """
    Boundary-inclusive point-in-polygon test.

    A point within eps of any edge counts as inside; otherwise even-odd
    ray casting along +X decides.

    Args:
        point: Query point
        polygon: Closed loop (no closing duplicate required)
        eps: Boundary tolerance

    Returns:
        True when point is inside or on the boundary
    """
    if polygon is None or len(polygon) < 3:
        return False

    n = len(polygon)
    for i in range(n):
        if is_point_on_segment(point, polygon[i], polygon[(i + 1) % n], eps):
            return True

    x, y = point
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i

    return inside


def _same_area(a: float, b: float) -> bool:
    return abs(a - b) <= 1e-9 * max(1.0, a, b)


def faces_containing(
    faces: Sequence[Polygon2D],
    point: Point,
    eps: float
) -> List[Polygon2D]:
    """All non-degenerate faces containing point, in input order."""
    return [f for f in faces if abs(signed_area(f)) >= MIN_FACE_AREA and contains(point, f, eps)]


def pick_minimal_face(
    faces: Sequence[Polygon2D],
    point: Point,
    eps: float
) -> Optional[Polygon2D]:
    """
    Smallest face (by absolute area) containing point.

    Equal areas (within a relative 1e-9) are resolved by the smaller
    perimeter, then by order of appearance.

    Args:
        faces: Candidate loops from extract_faces
        point: Interior test point
        eps: Boundary tolerance for the containment test

    Returns:
        Selected face, or None when no face contains the point
    """
    best: Optional[Polygon2D] = None
    best_area = 0.0
    best_perimeter = 0.0

    for face in faces_containing(faces, point, eps):
        area = abs(signed_area(face))

        if best is None:
            best, best_area, best_perimeter = face, area, perimeter(face)
            continue

        if _same_area(area, best_area):
            face_perimeter = perimeter(face)
            if face_perimeter < best_perimeter - 1e-9:
                best, best_area, best_perimeter = face, area, face_perimeter
        elif area < best_area:
            best, best_area, best_perimeter = face, area, perimeter(face)

    if best is None:
        logger.debug(f"No face contains point ({point[0]:.3f}, {point[1]:.3f})")

    return best
