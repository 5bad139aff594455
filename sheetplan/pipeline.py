"""
Pipeline Orchestration Module

Coordinates the export workflow from scene file to output files:
segments -> opening bridges -> glazing groups -> room outlines ->
layout transform -> JSON (and optional PDF preview).
"""

import logging
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import ExportConfig, GeometryConfig, load_config
from .constants import ExportMode, GroupSource, LoopSource
from .geometry.calculator import calculate_room_measurements
from .geometry.room import RoomRecord
from .openings.bridge_resolver import OpeningStats, apply_opening_bridges
from .output.group import ViewGroup
from .output.json_writer import generate_json_filename, write_groups_to_json
from .output.layout import ViewTransform, build_view_transform
from .output.pdf_preview import create_preview_pdf, generate_preview_pdf_filename
from .rooms.glazing_paths import room_glazing_paths
from .rooms.loops import boundary_from_pieces
from .rooms.reconciler import build_room_loops, find_touching_groups
from .rooms.selection import compose_room_comment, is_common_area
from .scene import JsonSceneProvider, RoomInput, ViewScene, export_session
from .vector.segments import Segment, SegmentSet

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""
    input_file: str
    output: str
    config_path: Optional[str] = None
    mode: Optional[str] = None
    layout_mode: Optional[str] = None
    unified_scale: Optional[int] = None
    snap_opening_centers: bool = False
    no_cutouts: bool = False
    preview: bool = False
    verbose: bool = False


@dataclass
class ViewResult:
    """Result from processing a single view."""
    view_id: str
    groups: List[ViewGroup]
    opening_stats: OpeningStats
    rooms_by_source: Dict[str, int]
    warnings: List[str]
    processing_time: float


@dataclass
class PipelineResult:
    """Result from full pipeline execution."""
    input_file: str
    sheet: str
    views_processed: int
    groups: List[ViewGroup]
    total_rooms: int
    warnings: List[str]
    json_path: Optional[str]
    preview_path: Optional[str]
    processing_time: float
    view_results: List[ViewResult] = field(default_factory=list)


def collect_view_segments(
    view: ViewScene,
    geometry: GeometryConfig,
    export: ExportConfig
) -> Tuple[SegmentSet, SegmentSet]:
    """
    Canonicalize a view's tagged segments into host and cutout sets.

    With cutouts disabled, cutout-tagged segments are kept as host lines.
    """
    host = SegmentSet(geometry)
    cutouts = SegmentSet(geometry)

    for seg in view.segments:
        if seg.cutout and export.include_cutouts:
            cutouts.try_add(seg.a, seg.b)
        else:
            host.try_add(seg.a, seg.b, seg.glazing, seg.glazing_group)

    logger.debug(
        f"View {view.id}: {len(view.segments)} raw -> "
        f"{len(host)} host, {len(cutouts)} cutout segments"
    )
    return host, cutouts


def build_room_record(
    room: RoomInput,
    glazing_groups: Dict[int, List[Segment]],
    geometry: GeometryConfig,
    export: ExportConfig
) -> Optional[RoomRecord]:
    """
    Compute the outline of one room through the fallback chain.

    Returns:
        RoomRecord in view coordinates, or None when every tier fails
    """
    loops, boundary, hints = boundary_from_pieces(room.boundary, geometry)

    room_loops, source, group_ids = build_room_loops(
        boundary=boundary,
        boundary_loops=loops,
        glazing_groups=glazing_groups,
        test_point=room.test_point,
        solid_edges=room.solid_edges,
        config=geometry,
        hint_ids=hints,
    )

    if source == LoopSource.NONE:
        return None

    if not group_ids and glazing_groups:
        group_ids = {gid for gid in hints if gid in glazing_groups}
        group_ids |= find_touching_groups(boundary, glazing_groups, geometry)

    record = RoomRecord(
        room_id=room.id,
        name=room.name,
        number=room.number,
        comment=compose_room_comment(room, export.common_area_param),
        loops=room_loops,
        loop_source=source,
    )
    record.glazing_paths = room_glazing_paths(
        room_loops[0], glazing_groups, group_ids, geometry.glazing_step_tolerance)

    return calculate_room_measurements(record)


def transform_room(room: RoomRecord, transform: ViewTransform) -> RoomRecord:
    """Copy of a room with loops and glazing paths in output coordinates."""
    return replace(
        room,
        loops=[transform.apply_many(loop) for loop in room.loops],
        glazing_paths={
            gid: transform.apply_many(path)
            for gid, path in room.glazing_paths.items()
        },
        warnings=list(room.warnings),
    )


def process_view(
    view: ViewScene,
    geometry: GeometryConfig,
    export: ExportConfig
) -> ViewResult:
    """
    Process one view into its output groups.

    Args:
        view: Parsed view scene
        geometry: Geometry configuration
        export: Export configuration

    Returns:
        ViewResult with the host group first, then one group per
        glazing wall in opa mode
    """
    start_time = time.time()
    warnings = []
    rooms_by_source = {
        LoopSource.RECONCILED: 0,
        LoopSource.BOUNDARY: 0,
        LoopSource.SOLID: 0,
    }

    host, cutouts = collect_view_segments(view, geometry, export)

    # Openings first: rooms see the resealed wall lines
    opening_stats = apply_opening_bridges(view.openings, host, geometry)
    if opening_stats.unresolved_sides:
        warnings.append(
            f"View {view.id}: {opening_stats.unresolved_sides} opening sides unresolved"
        )

    glazing_groups = host.glazing_groups()

    rooms: List[RoomRecord] = []
    if export.mode == ExportMode.OPA:
        for room in view.rooms:
            if room.area <= 0:
                logger.debug(f"Skip room {room.id}: zero area")
                continue
            if is_common_area(room, export.common_area_param):
                logger.debug(f"Skip common-area room {room.id} ({room.number} {room.name})")
                continue

            record = build_room_record(room, glazing_groups, geometry, export)
            if record is None:
                warnings.append(f"Room {room.id} dropped: no outline from any source")
                logger.warning(f"Room {room.id} ({room.number}): no outline, dropped")
                continue

            rooms_by_source[record.loop_source] += 1
            warnings.extend(f"Room {record.room_id}: {w}" for w in record.warnings)
            rooms.append(record)

    if cutouts.keys:
        host.discard_keys(cutouts.keys)

    transform = build_view_transform(
        view.scale, view.center, view.sheet_center, view.rotation, export)

    groups = [ViewGroup(
        group_id=view.id,
        name=view.name,
        source=GroupSource.HOST,
        segments=[transform.apply_segment(s.a, s.b) for s in host],
        cutouts=[transform.apply_segment(s.a, s.b) for s in cutouts],
        rooms=[transform_room(r, transform) for r in rooms],
    )]

    if export.mode == ExportMode.OPA:
        for gid, segments in glazing_groups.items():
            groups.append(ViewGroup(
                group_id=f"{view.id}_GLAZING_{gid}",
                name=f"{view.name} / glazing {gid}",
                source=GroupSource.GLAZING,
                segments=[transform.apply_segment(s.a, s.b) for s in segments],
            ))

    processing_time = time.time() - start_time
    logger.info(
        f"View {view.id}: {len(host)} segments, {len(cutouts)} cutouts, "
        f"{len(rooms)} rooms ({rooms_by_source[LoopSource.RECONCILED]} reconciled, "
        f"{rooms_by_source[LoopSource.BOUNDARY]} boundary, "
        f"{rooms_by_source[LoopSource.SOLID]} solid), "
        f"{len(glazing_groups)} glazing groups"
    )

    return ViewResult(
        view_id=view.id,
        groups=groups,
        opening_stats=opening_stats,
        rooms_by_source=rooms_by_source,
        warnings=warnings,
        processing_time=processing_time,
    )


def apply_overrides(
    geometry: GeometryConfig,
    export: ExportConfig,
    config: PipelineConfig
) -> Tuple[GeometryConfig, ExportConfig]:
    """Apply command-line overrides on top of the settings file."""
    if config.snap_opening_centers:
        geometry = replace(geometry, snap_opening_centers=True)

    changes = {}
    if config.mode:
        changes["mode"] = config.mode
    if config.layout_mode:
        changes["layout_mode"] = config.layout_mode
    if config.unified_scale:
        changes["unified_scale"] = config.unified_scale
    if config.no_cutouts:
        changes["include_cutouts"] = False

    if changes:
        export = replace(export, **changes)
        export.validate()

    return geometry, export


def resolve_json_path(input_file: str, output: str) -> str:
    """An output ending in .json is the file itself, anything else a directory."""
    if output.lower().endswith(".json"):
        return output
    return generate_json_filename(input_file, output)


def run_pipeline(args) -> PipelineResult:
    """
    Run the full export pipeline.

    Args:
        args: Parsed command-line arguments

    Returns:
        PipelineResult with all outputs
    """
    start_time = time.time()

    # Create config from args
    config = PipelineConfig(
        input_file=args.input,
        output=args.output,
        config_path=getattr(args, 'config', None),
        mode=getattr(args, 'mode', None),
        layout_mode=getattr(args, 'layout', None),
        unified_scale=getattr(args, 'unified_scale', None),
        snap_opening_centers=getattr(args, 'snap_openings', False),
        no_cutouts=getattr(args, 'no_cutouts', False),
        preview=getattr(args, 'preview', False),
        verbose=getattr(args, 'verbose', False),
    )

    # Setup logging
    log_level = logging.DEBUG if config.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(message)s')

    geometry, export = load_config(config.config_path)
    geometry, export = apply_overrides(geometry, export, config)

    logger.info(f"Processing: {config.input_file} (mode {export.mode}, layout {export.layout_mode})")

    all_groups: List[ViewGroup] = []
    all_warnings: List[str] = []
    view_results: List[ViewResult] = []

    with export_session(JsonSceneProvider(config.input_file)) as provider:
        scene = provider.load()

        for view in scene.views:
            result = process_view(view, geometry, export)
            view_results.append(result)
            all_groups.extend(result.groups)
            all_warnings.extend(result.warnings)

        units = export.units_name if export.unit_factor != 1.0 else scene.units
        sheet = scene.sheet

    json_path = resolve_json_path(config.input_file, config.output)
    write_groups_to_json(
        all_groups, json_path,
        sheet=sheet,
        units=units,
        mode=export.mode,
        layout_mode=export.layout_mode,
        input_file=config.input_file,
    )
    logger.info(f"JSON written: {json_path}")

    preview_path = None
    if config.preview:
        preview_path = generate_preview_pdf_filename(config.input_file, str(Path(json_path).parent))
        create_preview_pdf(all_groups, preview_path)

    processing_time = time.time() - start_time
    total_rooms = sum(len(g.rooms) for g in all_groups)

    # Summary
    logger.info(f"\nSummary:")
    logger.info(f"  Views processed: {len(view_results)}")
    logger.info(f"  Groups written: {len(all_groups)}")
    logger.info(f"  Rooms exported: {total_rooms}")
    logger.info(f"  Processing time: {processing_time:.1f}s")

    if all_warnings and config.verbose:
        logger.info(f"\nWarnings ({len(all_warnings)}):")
        for w in all_warnings[:10]:
            logger.info(f"  - {w}")
        if len(all_warnings) > 10:
            logger.info(f"  ... and {len(all_warnings) - 10} more")

    return PipelineResult(
        input_file=config.input_file,
        sheet=sheet,
        views_processed=len(view_results),
        groups=all_groups,
        total_rooms=total_rooms,
        warnings=all_warnings,
        json_path=json_path,
        preview_path=preview_path,
        processing_time=processing_time,
        view_results=view_results,
    )
