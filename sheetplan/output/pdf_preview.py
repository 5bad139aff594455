"""
PDF Preview Module

Draws each exported group on its own PDF page for visual checking:
host segments in black, cutouts in red, room outlines in blue and
glazing paths in green.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import pymupdf

from .group import ViewGroup

logger = logging.getLogger(__name__)

# A3 landscape in PDF points
PAGE_WIDTH = 1190.0
PAGE_HEIGHT = 842.0
PAGE_MARGIN = 36.0

SEGMENT_COLOR = (0, 0, 0)
CUTOUT_COLOR = (0.85, 0, 0)
ROOM_COLOR = (0, 0.3, 0.9)
GLAZING_COLOR = (0, 0.6, 0.2)


def generate_preview_pdf_filename(input_file: str, output_dir: str) -> str:
    """Preview path for a scene file: <output_dir>/<stem>_preview.pdf."""
    stem = Path(input_file).stem
    return str(Path(output_dir) / f"{stem}_preview.pdf")


def get_polygon_centroid(vertices: Sequence[Tuple[float, float]]) -> Tuple[float, float]:
    """
    Vertex average of a polygon (label anchor).

    Returns:
        (0, 0) for an empty polygon
    """
    if not vertices:
        return (0.0, 0.0)
    n = len(vertices)
    return (sum(v[0] for v in vertices) / n, sum(v[1] for v in vertices) / n)


def _group_points(group: ViewGroup) -> List[Tuple[float, float]]:
    points = []
    for a, b in list(group.segments) + list(group.cutouts):
        points.extend([a, b])
    for room in group.rooms:
        for loop in room.loops:
            points.extend(loop)
    return points


class PageMapper:
    """Fits a bounding box onto the drawable page area, Y pointing up."""

    def __init__(self, points: Iterable[Tuple[float, float]]):
        pts = list(points)
        if pts:
            xs = [p[0] for p in pts]
            ys = [p[1] for p in pts]
            self.min_x, self.max_x = min(xs), max(xs)
            self.min_y, self.max_y = min(ys), max(ys)
        else:
            self.min_x = self.min_y = 0.0
            self.max_x = self.max_y = 1.0

        width = max(self.max_x - self.min_x, 1e-9)
        height = max(self.max_y - self.min_y, 1e-9)
        self.scale = min(
            (PAGE_WIDTH - 2 * PAGE_MARGIN) / width,
            (PAGE_HEIGHT - 2 * PAGE_MARGIN) / height,
        )

    def __call__(self, p: Tuple[float, float]) -> pymupdf.Point:
        x = PAGE_MARGIN + (p[0] - self.min_x) * self.scale
        y = PAGE_HEIGHT - PAGE_MARGIN - (p[1] - self.min_y) * self.scale
        return pymupdf.Point(x, y)


def _draw_lines(page: pymupdf.Page, lines, to_page: PageMapper, color) -> None:
    if not lines:
        return
    shape = page.new_shape()
    for a, b in lines:
        shape.draw_line(to_page(a), to_page(b))
    shape.finish(width=0.5, color=color)
    shape.commit()


def draw_group_page(doc: pymupdf.Document, group: ViewGroup) -> pymupdf.Page:
    """Append one page showing a group."""
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    to_page = PageMapper(_group_points(group))

    page.insert_text((PAGE_MARGIN, PAGE_MARGIN / 2 + 6), f"{group.name} [{group.source}]", fontsize=10)

    _draw_lines(page, group.segments, to_page, SEGMENT_COLOR)
    _draw_lines(page, group.cutouts, to_page, CUTOUT_COLOR)

    for room in group.rooms:
        for loop in room.loops:
            if len(loop) < 3:
                continue
            shape = page.new_shape()
            shape.draw_polyline([to_page(p) for p in loop] + [to_page(loop[0])])
            shape.finish(width=1, color=ROOM_COLOR)
            shape.commit()

        for path in room.glazing_paths.values():
            if len(path) < 2:
                continue
            shape = page.new_shape()
            shape.draw_polyline([to_page(p) for p in path])
            shape.finish(width=1.5, color=GLAZING_COLOR)
            shape.commit()

        if room.loops:
            label = room.number or room.name or room.room_id
            page.insert_text(to_page(get_polygon_centroid(room.loops[0])), label, fontsize=7, color=ROOM_COLOR)

    return page


def create_preview_pdf(groups: Sequence[ViewGroup], output_path: str) -> str:
    """
    Write a preview PDF with one page per group.

    Args:
        groups: Groups to draw
        output_path: Destination file

    Returns:
        Path to the written file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    doc = pymupdf.open()
    try:
        for group in groups:
            draw_group_page(doc, group)
        if doc.page_count == 0:
            doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        doc.save(str(path))
    finally:
        doc.close()

    logger.info(f"Preview PDF written: {path} ({len(groups)} pages)")
    return str(path)
