"""
Scene Module

Per-view input handed over by the host-document exporter: tagged 2D
segments, openings and rooms. Scenes are read from JSON files; the
provider interface keeps the pipeline independent of the file format.
"""

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .constants import DEFAULT_UNITS_NAME, ViewportRotation
from .geometry.primitives import Point
from .openings.bridge_resolver import OpeningBridgeRequest

logger = logging.getLogger(__name__)


class SceneError(Exception):
    """Raised when a scene cannot be read."""
    pass


class SceneNotFoundError(SceneError):
    """Raised when the scene file does not exist."""
    pass


class SceneFormatError(SceneError):
    """Raised when the scene file is not valid JSON or misses fields."""
    pass


@dataclass
class TaggedSegment:
    """A projected 2D segment with its category tags."""
    a: Point
    b: Point
    cutout: bool = False
    glazing: bool = False
    glazing_group: int = 0


@dataclass
class BoundaryPiece:
    """One boundary curve of a room, tessellated in walk order."""
    points: List[Point] = field(default_factory=list)
    glazing: bool = False
    glazing_group: int = 0


@dataclass
class RoomInput:
    """Room as reported by the host document."""
    id: str
    name: str = ""
    number: str = ""
    comment: str = ""
    purpose: str = ""
    assignment: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)
    area: float = 0.0
    test_point: Optional[Point] = None
    boundary: List[List[BoundaryPiece]] = field(default_factory=list)
    solid_edges: List[List[Tuple[float, ...]]] = field(default_factory=list)


@dataclass
class ViewScene:
    """One sheet viewport and everything projected into it."""
    id: str
    name: str
    scale: int = 100
    center: Point = (0.0, 0.0)
    sheet_center: Point = (0.0, 0.0)
    rotation: str = ViewportRotation.NONE
    segments: List[TaggedSegment] = field(default_factory=list)
    openings: List[OpeningBridgeRequest] = field(default_factory=list)
    rooms: List[RoomInput] = field(default_factory=list)


@dataclass
class Scene:
    """A sheet with its views."""
    sheet: str = ""
    units: str = DEFAULT_UNITS_NAME
    views: List[ViewScene] = field(default_factory=list)


def _point(value: Any, where: str) -> Point:
    """Parse [x, y] (extra coordinates dropped)."""
    try:
        return (float(value[0]), float(value[1]))
    except (TypeError, ValueError, IndexError, KeyError) as e:
        raise SceneFormatError(f"{where}: expected [x, y], got {value!r}") from e


def _number(data: Dict[str, Any], key: str, default, cast, where: str):
    """Read an optional numeric field; empty values give the default."""
    value = data.get(key, default) or default
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise SceneFormatError(f"{where}.{key}: expected a number, got {value!r}") from e


def _mapping(value: Any, where: str, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SceneFormatError(f"{where}: {what} must be an object, got {type(value).__name__}")
    return value


def _list(value: Any, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SceneFormatError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _parse_segment(data: Dict[str, Any], where: str) -> TaggedSegment:
    data = _mapping(data, where, "segment")
    if "a" not in data or "b" not in data:
        raise SceneFormatError(f"{where}: segment needs 'a' and 'b'")
    return TaggedSegment(
        a=_point(data["a"], where),
        b=_point(data["b"], where),
        cutout=bool(data.get("cutout", False)),
        glazing=bool(data.get("glazing", False)),
        glazing_group=_number(data, "glazing_group", 0, int, where),
    )


def _half_thickness(value: Any, where: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise SceneFormatError(f"{where}.half_thickness: expected a number, got {value!r}") from e


def _parse_opening(data: Dict[str, Any], where: str) -> Optional[OpeningBridgeRequest]:
    data = _mapping(data, where, "opening")
    try:
        request = OpeningBridgeRequest.from_vectors(
            center=_point(data["center"], where),
            tangent=_point(data["tangent"], where),
            normal=_point(data["normal"], where),
            half_thickness=_half_thickness(data["half_thickness"], where),
            in_glazing=bool(data.get("in_glazing", False)),
        )
    except KeyError as e:
        raise SceneFormatError(f"{where}: opening missing {e}") from e

    if request is None:
        logger.debug(f"{where}: degenerate opening direction, skipped")
    return request


def _parse_room(data: Dict[str, Any], where: str) -> RoomInput:
    data = _mapping(data, where, "room")
    if "id" not in data:
        raise SceneFormatError(f"{where}: room needs 'id'")

    boundary = []
    for li, loop in enumerate(_list(data.get("boundary"), f"{where}.boundary")):
        pieces = []
        for pi, piece in enumerate(_list(loop, f"{where}.boundary[{li}]")):
            piece_where = f"{where}.boundary[{li}][{pi}]"
            piece = _mapping(piece, piece_where, "boundary piece")
            pieces.append(BoundaryPiece(
                points=[_point(p, piece_where) for p in _list(piece.get("points"), piece_where)],
                glazing=bool(piece.get("glazing", False)),
                glazing_group=_number(piece, "glazing_group", 0, int, piece_where),
            ))
        boundary.append(pieces)

    solid_edges = []
    for ei, edge in enumerate(_list(data.get("solid_edges"), f"{where}.solid_edges")):
        try:
            solid_edges.append([tuple(float(c) for c in p) for p in edge])
        except (TypeError, ValueError) as e:
            raise SceneFormatError(f"{where}.solid_edges[{ei}]: expected point lists") from e

    test_point = data.get("test_point")
    parameters = data.get("parameters") or {}

    return RoomInput(
        id=str(data["id"]),
        name=str(data.get("name") or ""),
        number=str(data.get("number") or ""),
        comment=str(data.get("comment") or ""),
        purpose=str(data.get("purpose") or ""),
        assignment=str(data.get("assignment") or ""),
        parameters=dict(_mapping(parameters, f"{where}.parameters", "parameters")),
        area=_number(data, "area", 0.0, float, where),
        test_point=_point(test_point, where) if test_point is not None else None,
        boundary=boundary,
        solid_edges=solid_edges,
    )


def parse_view(data: Dict[str, Any], index: int = 0) -> ViewScene:
    """
    Parse one view object of a scene file.

    Raises:
        SceneFormatError: If a required field is missing or malformed
    """
    where = f"views[{index}]"
    if not isinstance(data, dict) or "id" not in data:
        raise SceneFormatError(f"{where}: view needs 'id'")

    rotation = data.get("rotation", ViewportRotation.NONE) or ViewportRotation.NONE

    openings = []
    for i, o in enumerate(_list(data.get("openings"), f"{where}.openings")):
        request = _parse_opening(o, f"{where}.openings[{i}]")
        if request is not None:
            openings.append(request)

    return ViewScene(
        id=str(data["id"]),
        name=str(data.get("name") or data["id"]),
        scale=_number(data, "scale", 100, int, where),
        center=_point(data.get("center", (0.0, 0.0)), f"{where}.center"),
        sheet_center=_point(data.get("sheet_center", (0.0, 0.0)), f"{where}.sheet_center"),
        rotation=str(rotation).lower(),
        segments=[
            _parse_segment(s, f"{where}.segments[{i}]")
            for i, s in enumerate(_list(data.get("segments"), f"{where}.segments"))
        ],
        openings=openings,
        rooms=[
            _parse_room(r, f"{where}.rooms[{i}]")
            for i, r in enumerate(_list(data.get("rooms"), f"{where}.rooms"))
        ],
    )


class JsonSceneProvider:
    """
    Scene provider backed by a JSON file.

    The file is read lazily on first access. revert() drops everything
    read so far; a provider can be reused after revert.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._scene: Optional[Scene] = None
        self.reverted = False

    def load(self) -> Scene:
        """
        Read and parse the scene file.

        Raises:
            SceneNotFoundError: If the file does not exist
            SceneFormatError: If the content is not a valid scene
        """
        if self._scene is not None:
            return self._scene

        if not self.path.exists():
            raise SceneNotFoundError(f"Scene file not found: {self.path}")

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SceneFormatError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise SceneFormatError(f"Scene root must be an object: {self.path}")

        self._scene = Scene(
            sheet=str(data.get("sheet") or ""),
            units=str(data.get("units") or DEFAULT_UNITS_NAME),
            views=[parse_view(v, i) for i, v in enumerate(data.get("views") or [])],
        )
        self.reverted = False
        logger.info(f"Loaded scene: {self.path} ({len(self._scene.views)} views)")
        return self._scene

    def views(self) -> List[ViewScene]:
        return self.load().views

    def revert(self) -> None:
        """Discard all state taken from the source."""
        self._scene = None
        self.reverted = True
        logger.debug(f"Scene provider reverted: {self.path}")


@contextmanager
def export_session(provider) -> Iterator[Any]:
    """
    Wrap an export so that the provider is reverted on every exit path.

    Example:
        with export_session(JsonSceneProvider(path)) as scene_provider:
            views = scene_provider.views()
    """
    try:
        yield provider
    finally:
        provider.revert()
