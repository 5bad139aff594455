"""
Output Layout Module

Maps view coordinates into the output space (model, paper or unified
scale), converts units and rounds coordinates for export.
"""

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..config import ExportConfig
from ..constants import LayoutMode, ViewportRotation
from ..geometry.primitives import Point

logger = logging.getLogger(__name__)


ROTATION_ANGLES = {
    ViewportRotation.NONE: 0.0,
    ViewportRotation.CLOCKWISE: -math.pi / 2.0,
    ViewportRotation.COUNTERCLOCKWISE: math.pi / 2.0,
}


def rotation_angle(rotation: str) -> float:
    """Viewport rotation in radians; unknown values mean a half turn."""
    return ROTATION_ANGLES.get(rotation, math.pi)


@dataclass(frozen=True)
class ViewTransform:
    """Affine map p -> origin + basis @ p, then unit scaling and rounding."""
    basis: np.ndarray
    origin: np.ndarray
    unit_factor: float = 1.0
    round_digits: int = 5

    def apply(self, p: Sequence[float]) -> Point:
        """Transform and round one point."""
        q = (self.origin + self.basis @ np.array([p[0], p[1]], dtype=float)) * self.unit_factor
        return (
            round_half_up(float(q[0]), self.round_digits),
            round_half_up(float(q[1]), self.round_digits),
        )

    def apply_many(self, points: Iterable[Sequence[float]]) -> List[Point]:
        return [self.apply(p) for p in points]

    def apply_segment(self, a: Sequence[float], b: Sequence[float]) -> Tuple[Point, Point]:
        return self.apply(a), self.apply(b)


def round_half_up(value: float, digits: int) -> float:
    """
    Round half away from zero.

    Examples:
        round_half_up(2.5, 0) -> 3.0
        round_half_up(-0.125, 2) -> -0.13
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    # Avoid -0.0 in the output
    return rounded + 0.0


def build_view_transform(
    view_scale: int,
    view_center: Sequence[float],
    sheet_center: Sequence[float],
    rotation: str,
    config: ExportConfig
) -> ViewTransform:
    """
    Build the view-to-output transform for one viewport.

    Modes:
        model: model units, views laid out as on the sheet
        paper: sheet units (1 / view scale)
        unified: one common scale for all views (1 / unified_scale)

    Args:
        view_scale: View scale denominator (e.g. 100 for 1:100)
        view_center: Viewport center in view coordinates
        sheet_center: Viewport center on the sheet (paper units)
        rotation: ViewportRotation value
        config: Export configuration

    Returns:
        ViewTransform
    """
    ang = rotation_angle(rotation)
    rot = np.array([
        [math.cos(ang), -math.sin(ang)],
        [math.sin(ang), math.cos(ang)],
    ])
    center = np.array([view_center[0], view_center[1]], dtype=float)
    sheet = np.array([sheet_center[0], sheet_center[1]], dtype=float)
    den = max(1, int(view_scale))

    if config.layout_mode == LayoutMode.PAPER:
        k = 1.0 / den
        origin = sheet - rot @ (center * k)
    elif config.layout_mode == LayoutMode.UNIFIED:
        k = 1.0 / max(1, config.unified_scale)
        origin = sheet - rot @ (center * k)
    else:
        k = 1.0
        origin = sheet * den - rot @ center

    # Snap the rotation matrix so quarter turns stay exact
    basis = np.round(rot, 12) * k

    return ViewTransform(
        basis=basis,
        origin=origin,
        unit_factor=config.unit_factor,
        round_digits=config.round_digits,
    )
