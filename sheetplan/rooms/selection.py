"""
Room Selection Module

Common-area detection and the comment text written for each room.
"""

import logging
import re
from typing import Mapping, Optional

from ..constants import COMMON_AREA_COMMENT, COMMON_AREA_MARKS

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\w+")


def is_common_area_mark(value: Optional[str]) -> bool:
    """
    Check whether a text value marks a common-use room.

    Examples:
        "МОП" -> True
        "Tech room; mop" -> True
        "Mopping closet" -> False

    Args:
        value: Parameter or comment text

    Returns:
        True when the value is, or contains a token equal to, a mark
    """
    if not value or not value.strip():
        return False

    text = value.strip().lower()
    if text in COMMON_AREA_MARKS:
        return True

    return any(token in COMMON_AREA_MARKS for token in TOKEN_PATTERN.findall(text))


def _lookup_parameter(parameters: Mapping[str, object], name: str) -> str:
    """Case-insensitive parameter lookup; missing values read as empty."""
    want = name.strip().lower()
    for key, value in (parameters or {}).items():
        if str(key).strip().lower() == want:
            return "" if value is None else str(value)
    return ""


def is_common_area(room, param_name: str = "") -> bool:
    """
    Decide whether a room is a common area.

    With a configured parameter name only that parameter is read;
    otherwise comment, purpose and assignment are checked.
    """
    if param_name and param_name.strip():
        return is_common_area_mark(_lookup_parameter(room.parameters, param_name))

    return (
        is_common_area_mark(room.comment)
        or is_common_area_mark(room.purpose)
        or is_common_area_mark(room.assignment)
    )


def compose_room_comment(room, param_name: str = "") -> str:
    """Comment text for output: the common-area marker, or the joined notes."""
    if is_common_area(room, param_name):
        return COMMON_AREA_COMMENT

    parts = [
        text.strip()
        for text in (room.comment, room.purpose, room.assignment)
        if text and text.strip()
    ]
    return "; ".join(parts)
