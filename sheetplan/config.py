"""
Configuration Module

Run-scoped configuration values. Every pipeline call receives these
explicitly; nothing here is mutated after construction.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .constants import (
    MIN_SEGMENT_LENGTH_MM,
    SNAP_PITCH_MM,
    ROUND_DIGITS,
    PLANARIZE_EPS_MIN_MM,
    GLAZING_TOUCH_TOLERANCE_MM,
    GLAZING_REDRAW_TOLERANCE_MM,
    GLAZING_STEP_TOLERANCE_MM,
    MAX_BRIDGE_LENGTH_MM,
    BRIDGE_EPSILON_MM,
    PARALLEL_SIMILARITY,
    SOLID_SLICE_TOLERANCE_MM,
    GLAZING_SAMPLE_ALONG_MM,
    GLAZING_SAMPLE_MAX_NORMAL_MM,
    MIN_GLAZING_PANEL_THICKNESS_MM,
    OPENING_OUTER_SHIFT_MM,
    UNIFIED_SCALE,
    DEFAULT_UNITS_NAME,
    ExportMode,
    LayoutMode,
)

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / "config" / "settings.yaml"


class ConfigError(ValueError):
    """Raised for unreadable or inconsistent configuration."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class GeometryConfig:
    """Tolerances for the planar geometry engine (model millimetres)."""
    # Canonicalizer
    min_segment_length: float = MIN_SEGMENT_LENGTH_MM
    snap_pitch: float = SNAP_PITCH_MM

    # Room reconciliation
    glazing_touch_tolerance: float = GLAZING_TOUCH_TOLERANCE_MM
    glazing_redraw_tolerance: float = GLAZING_REDRAW_TOLERANCE_MM
    glazing_step_tolerance: float = GLAZING_STEP_TOLERANCE_MM
    max_bridge_length: float = MAX_BRIDGE_LENGTH_MM
    bridge_epsilon: float = BRIDGE_EPSILON_MM
    parallel_threshold: float = PARALLEL_SIMILARITY
    solid_slice_tolerance: float = SOLID_SLICE_TOLERANCE_MM

    # Opening bridges
    glazing_sample_along: float = GLAZING_SAMPLE_ALONG_MM
    glazing_sample_max_normal: float = GLAZING_SAMPLE_MAX_NORMAL_MM
    min_panel_thickness: float = MIN_GLAZING_PANEL_THICKNESS_MM
    opening_outer_shift: float = OPENING_OUTER_SHIFT_MM
    snap_opening_centers: bool = False

    def validate(self) -> None:
        """Raise ConfigError for non-numeric or out-of-range tolerances."""
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "snap_opening_centers":
                if not isinstance(value, bool):
                    raise ConfigError(f"{f.name} must be true or false: {value!r}")
                continue
            if not _is_number(value):
                raise ConfigError(f"{f.name} must be a number: {value!r}")
            if f.name != "opening_outer_shift" and value < 0:
                raise ConfigError(f"{f.name} must be >= 0: {value}")

        if not 0 < self.parallel_threshold <= 1:
            raise ConfigError(f"parallel_threshold must be in (0, 1]: {self.parallel_threshold}")

    @property
    def planarize_eps(self) -> float:
        """Tolerance used when planarizing room arrangements."""
        return max(self.snap_pitch, PLANARIZE_EPS_MIN_MM)


@dataclass(frozen=True)
class ExportConfig:
    """Export-level switches (mode, layout, output formatting)."""
    mode: str = ExportMode.GNS
    layout_mode: str = LayoutMode.MODEL
    unified_scale: int = UNIFIED_SCALE
    round_digits: int = ROUND_DIGITS
    unit_factor: float = 1.0
    units_name: str = DEFAULT_UNITS_NAME
    common_area_param: str = ""
    include_cutouts: bool = True

    def validate(self) -> None:
        """Raise ConfigError for values outside the accepted ranges."""
        for name in ("mode", "layout_mode", "units_name", "common_area_param"):
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string: {getattr(self, name)!r}")
        for name in ("unified_scale", "round_digits"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer: {value!r}")
        if not _is_number(self.unit_factor):
            raise ConfigError(f"unit_factor must be a number: {self.unit_factor!r}")
        if not isinstance(self.include_cutouts, bool):
            raise ConfigError(f"include_cutouts must be true or false: {self.include_cutouts!r}")

        if self.mode not in (ExportMode.GNS, ExportMode.OPA):
            raise ConfigError(f"Unknown export mode: {self.mode}")
        if self.layout_mode not in (LayoutMode.MODEL, LayoutMode.PAPER, LayoutMode.UNIFIED):
            raise ConfigError(f"Unknown layout mode: {self.layout_mode}")
        if self.unified_scale < 1:
            raise ConfigError(f"Unified scale must be >= 1: {self.unified_scale}")
        if self.round_digits < 0:
            raise ConfigError(f"Round digits must be >= 0: {self.round_digits}")
        if self.unit_factor <= 0:
            raise ConfigError(f"Unit factor must be positive: {self.unit_factor}")


def _apply_section(target, section: Optional[Dict[str, Any]], name: str):
    """Return a copy of target with the keys of one YAML section applied."""
    if not section:
        return target
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")

    known = {f.name for f in fields(target)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in section '{name}': {', '.join(unknown)}")

    return replace(target, **section)


def load_config(
    path: Optional[Union[str, Path]] = None
) -> Tuple[GeometryConfig, ExportConfig]:
    """
    Load geometry and export configuration from a YAML settings file.

    The file may contain ``geometry`` and ``export`` sections; missing
    keys keep their defaults.

    Args:
        path: Settings file (defaults to config/settings.yaml when present)

    Returns:
        Tuple of (GeometryConfig, ExportConfig)
    """
    geometry = GeometryConfig()
    export = ExportConfig()

    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH
    if not settings_path.exists():
        if path:
            raise ConfigError(f"Settings file not found: {settings_path}")
        logger.debug("No settings file, using built-in defaults")
        return geometry, export

    try:
        with open(settings_path, encoding="utf-8") as f:
            settings = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {settings_path}: {e}") from e

    if not isinstance(settings, dict):
        raise ConfigError(f"Settings file must contain a mapping: {settings_path}")

    geometry = _apply_section(geometry, settings.get("geometry"), "geometry")
    export = _apply_section(export, settings.get("export"), "export")
    geometry.validate()
    export.validate()

    logger.info(f"Loaded settings: {settings_path}")
    return geometry, export
