"""
JSON Writer Module

Writes the exported view groups to a JSON document.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..constants import EXPORT_SOURCE_TAG
from .group import ViewGroup

logger = logging.getLogger(__name__)

PIPELINE_VERSION = "1.0.0"


def generate_json_filename(input_file: str, output_dir: str) -> str:
    """
    Output path for a scene file: <output_dir>/<stem>_plans.json.

    Args:
        input_file: Scene file path
        output_dir: Output directory

    Returns:
        JSON file path as string
    """
    stem = Path(input_file).stem
    return str(Path(output_dir) / f"{stem}_plans.json")


def build_meta_json(
    sheet: str,
    units: str,
    mode: str,
    layout_mode: str,
    groups: Sequence[ViewGroup],
    input_file: Optional[str] = None
) -> Dict[str, Any]:
    """Build the meta block of the output document."""
    return {
        "source": EXPORT_SOURCE_TAG,
        "sheet": sheet,
        "units_length": units,
        "calc_mode": mode.upper(),
        "layout_mode": layout_mode,
        "input_file": input_file or "",
        "pipeline_version": PIPELINE_VERSION,
        "generated": datetime.now().isoformat(timespec="seconds"),
        "total_groups": len(groups),
        "total_rooms": sum(len(g.rooms) for g in groups),
    }


def build_output_json(
    groups: Sequence[ViewGroup],
    sheet: str = "",
    units: str = "",
    mode: str = "",
    layout_mode: str = "",
    input_file: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the complete output document.

    Returns:
        Dict with "groups" and "meta"
    """
    return {
        "groups": [g.to_dict() for g in groups],
        "meta": build_meta_json(sheet, units, mode, layout_mode, groups, input_file),
    }


def write_groups_to_json(
    groups: List[ViewGroup],
    output_path: str,
    sheet: str = "",
    units: str = "",
    mode: str = "",
    layout_mode: str = "",
    input_file: Optional[str] = None
) -> str:
    """
    Write view groups to a JSON file.

    Args:
        groups: Groups in emission order (view, then glazing groups)
        output_path: Destination file
        sheet: Sheet name for the meta block
        units: Output length unit name
        mode: Export mode (gns / opa)
        layout_mode: Layout mode (model / paper / unified)
        input_file: Scene file the groups came from

    Returns:
        Path to the written file
    """
    data = build_output_json(groups, sheet, units, mode, layout_mode, input_file)

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info(f"Wrote {len(groups)} groups to {path}")
    return str(path)
