# Planar geometry module

from .primitives import (
    Point,
    cross,
    dot,
    distance,
    normalize,
    closest_point_on_segment,
    distance_point_to_segment,
    is_point_on_segment,
    segment_intersection,
)

from .faces import (
    PlanarGraph,
    build_planar_graph,
    extract_faces,
    signed_area,
    perimeter,
)

from .locator import (
    contains,
    pick_minimal_face,
    faces_containing,
)

from .room import RoomRecord

from .calculator import (
    loops_to_polygon,
    calculate_area,
    calculate_perimeter,
    validate_room_measurements,
    calculate_room_measurements,
)

__all__ = [
    # Primitives
    "Point",
    "cross",
    "dot",
    "distance",
    "normalize",
    "closest_point_on_segment",
    "distance_point_to_segment",
    "is_point_on_segment",
    "segment_intersection",
    # Faces
    "PlanarGraph",
    "build_planar_graph",
    "extract_faces",
    "signed_area",
    "perimeter",
    # Locator
    "contains",
    "pick_minimal_face",
    "faces_containing",
    # Room
    "RoomRecord",
    # Calculator
    "loops_to_polygon",
    "calculate_area",
    "calculate_perimeter",
    "validate_room_measurements",
    "calculate_room_measurements",
]
