"""
View Group Module

One exported group: a view's host segments, cutouts and rooms, or the
segments of one glazing wall.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..constants import GroupSource
from ..geometry.room import RoomRecord

Line = Tuple[Tuple[float, float], Tuple[float, float]]


@dataclass
class ViewGroup:
    """Output group in output coordinates."""
    group_id: str
    name: str
    source: str = GroupSource.HOST
    segments: List[Line] = field(default_factory=list)
    cutouts: List[Line] = field(default_factory=list)
    rooms: List[RoomRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert group to dictionary for JSON serialization."""
        return {
            "id": self.group_id,
            "name": self.name,
            "tags": {"source": self.source},
            "segments": [[list(a), list(b)] for a, b in self.segments],
            "cutouts": [[list(a), list(b)] for a, b in self.cutouts],
            "rooms": [room.to_dict() for room in self.rooms],
        }
