# Segment canonicalization and planarization module

from .segments import (
    Segment,
    SegmentSet,
    snap_point,
    point_key,
    canonical_key,
    segment_key,
)

from .planarizer import (
    add_split_param,
    compute_split_params,
    planarize,
)

__all__ = [
    # Segments
    "Segment",
    "SegmentSet",
    "snap_point",
    "point_key",
    "canonical_key",
    "segment_key",
    # Planarizer
    "add_split_param",
    "compute_split_params",
    "planarize",
]
