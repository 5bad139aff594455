"""
Room Record Module

Defines the RoomRecord class carried from reconciliation to output.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from shapely.geometry import Polygon

from ..constants import LoopSource

logger = logging.getLogger(__name__)


@dataclass
class RoomRecord:
    """
    Room with its computed outline.

    Loops and glazing paths are in view coordinates until the output
    layout transform is applied.
    """
    # Identification
    room_id: str
    name: str = ""
    number: str = ""
    comment: str = ""

    # Geometry (no closing duplicates)
    loops: List[List[Tuple[float, float]]] = field(default_factory=list)
    glazing_paths: Dict[int, List[Tuple[float, float]]] = field(default_factory=dict)
    loop_source: str = LoopSource.NONE
    shapely_polygon: Optional[Polygon] = None

    # Measurements (view units)
    area: float = 0.0
    perimeter: float = 0.0

    # Validation warnings
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert room to dictionary for JSON serialization."""
        return {
            "id": self.room_id,
            "name": self.name,
            "number": self.number,
            "comment": self.comment,
            "loops": [[[x, y] for x, y in loop] for loop in self.loops],
            "glazing_paths": {
                str(gid): [[x, y] for x, y in path]
                for gid, path in self.glazing_paths.items()
            },
        }
