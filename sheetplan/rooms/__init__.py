# Room outline reconciliation module

from .loops import (
    loops_from_segments,
    slice_solid_loops,
    boundary_from_pieces,
)

from .reconciler import (
    ReconcileResult,
    find_touching_groups,
    remove_redrawn_segments,
    remove_glazing_steps,
    bridge_open_ends,
    reconcile_room,
    build_room_loops,
)

from .glazing_paths import (
    glazing_path,
    room_glazing_paths,
)

from .selection import (
    is_common_area_mark,
    is_common_area,
    compose_room_comment,
)

__all__ = [
    # Loops
    "loops_from_segments",
    "slice_solid_loops",
    "boundary_from_pieces",
    # Reconciler
    "ReconcileResult",
    "find_touching_groups",
    "remove_redrawn_segments",
    "remove_glazing_steps",
    "bridge_open_ends",
    "reconcile_room",
    "build_room_loops",
    # Glazing paths
    "glazing_path",
    "room_glazing_paths",
    # Selection
    "is_common_area_mark",
    "is_common_area",
    "compose_room_comment",
]
