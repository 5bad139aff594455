"""
Command Line Interface Module

Parses command-line arguments for the sheet plan exporter.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import UNIFIED_SCALE, ExportMode, LayoutMode


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the exporter."""
    parser = argparse.ArgumentParser(
        prog="sheetplan",
        description="Export sheet-view segments and room polygons from a scene file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sheetplan.cli -i sheet.json -o ./output
  python -m sheetplan.cli -i sheet.json -o ./output/plans.json --mode opa
  python -m sheetplan.cli -i sheet.json -o ./output --layout unified --unified-scale 100 --preview
        """
    )

    # Required arguments
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Input scene file (JSON)"
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output directory, or output file ending in .json"
    )

    # Optional arguments
    parser.add_argument(
        "-c", "--config",
        help="Settings file (YAML, default: config/settings.yaml)"
    )

    parser.add_argument(
        "--mode",
        choices=[ExportMode.GNS, ExportMode.OPA],
        help="Export mode: gns (sheet geometry) or opa (with room polygons)"
    )

    parser.add_argument(
        "--layout",
        choices=[LayoutMode.MODEL, LayoutMode.PAPER, LayoutMode.UNIFIED],
        help="Output coordinate layout"
    )

    parser.add_argument(
        "--unified-scale",
        type=int,
        help=f"Scale denominator for the unified layout (default: {UNIFIED_SCALE})"
    )

    parser.add_argument(
        "--snap-openings",
        action="store_true",
        help="Snap opening centers onto the nearest wall line before bridging"
    )

    parser.add_argument(
        "--no-cutouts",
        action="store_true",
        help="Treat cutout segments as ordinary host lines"
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Also write a PDF preview (one page per group)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    # Check input file exists
    input_path = Path(args.input)
    if not input_path.exists():
        return False, f"Input file not found: {args.input}"

    if not input_path.suffix.lower() == ".json":
        return False, f"Input file must be a JSON scene: {args.input}"

    if args.config and not Path(args.config).exists():
        return False, f"Settings file not found: {args.config}"

    # Check/create output directory
    output_path = Path(args.output)
    target_dir = output_path.parent if output_path.suffix.lower() == ".json" else output_path
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return False, f"Cannot create output directory: {e}"

    if args.unified_scale is not None and args.unified_scale < 1:
        return False, f"Unified scale must be >= 1: {args.unified_scale}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def main():
    """Main entry point for CLI."""
    args = parse_args()

    # Import pipeline and run
    from .pipeline import run_pipeline

    try:
        run_pipeline(args)
    except KeyboardInterrupt:
        print("\nExport cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
