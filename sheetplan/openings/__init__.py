# Opening (door) bridge module

from .bridge_resolver import (
    OpeningBridgeRequest,
    OpeningStats,
    nearest_hits_along_line,
    infer_glazing_panel_offsets,
    snap_center_to_wall_line,
    resolve_opening,
    apply_opening_bridges,
)

__all__ = [
    "OpeningBridgeRequest",
    "OpeningStats",
    "nearest_hits_along_line",
    "infer_glazing_panel_offsets",
    "snap_center_to_wall_line",
    "resolve_opening",
    "apply_opening_bridges",
]
