# Output generation module

from .group import ViewGroup

from .layout import (
    ViewTransform,
    build_view_transform,
    round_half_up,
    rotation_angle,
)

from .json_writer import (
    PIPELINE_VERSION,
    generate_json_filename,
    build_meta_json,
    build_output_json,
    write_groups_to_json,
)

from .pdf_preview import (
    generate_preview_pdf_filename,
    get_polygon_centroid,
    create_preview_pdf,
)

__all__ = [
    # Group
    "ViewGroup",
    # Layout
    "ViewTransform",
    "build_view_transform",
    "round_half_up",
    "rotation_angle",
    # JSON
    "PIPELINE_VERSION",
    "generate_json_filename",
    "build_meta_json",
    "build_output_json",
    "write_groups_to_json",
    # PDF preview
    "generate_preview_pdf_filename",
    "get_polygon_centroid",
    "create_preview_pdf",
]
