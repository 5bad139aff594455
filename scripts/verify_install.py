#!/usr/bin/env python
"""
Sheetplan - Installation Verification Script

Run this script to verify all dependencies are correctly installed.
"""

import sys
from pathlib import Path

# Add project root to path for package import
sys.path.insert(0, str(Path(__file__).parent.parent))


def check_package(name: str, import_name: str = None, version_attr: str = "__version__") -> tuple[bool, str]:
    """Check if a package is installed and return version."""
    import_name = import_name or name
    try:
        module = __import__(import_name)
        version = getattr(module, version_attr, "unknown")
        return True, str(version)
    except ImportError as e:
        return False, str(e)


def check_constants() -> tuple[bool, str]:
    """Check if constants module loads correctly."""
    try:
        from sheetplan.constants import (
            MIN_SEGMENT_LENGTH_MM,
            MAX_BRIDGE_LENGTH_MM,
            ExportMode,
        )
        return True, f"loaded ({MIN_SEGMENT_LENGTH_MM=}, {MAX_BRIDGE_LENGTH_MM=})"
    except ImportError as e:
        return False, str(e)


def check_settings() -> tuple[bool, str]:
    """Check if settings.yaml loads into the configuration objects."""
    try:
        from sheetplan.config import DEFAULT_SETTINGS_PATH, ConfigError, load_config
    except ImportError as e:
        return False, str(e)

    if not DEFAULT_SETTINGS_PATH.exists():
        return False, "settings.yaml not found"

    try:
        geometry, export = load_config(DEFAULT_SETTINGS_PATH)
    except ConfigError as e:
        return False, str(e)

    return True, f"mode={export.mode}, snap={geometry.snap_pitch}"


def main():
    print("=" * 60)
    print("Sheetplan - Installation Verification")
    print("=" * 60)
    print()

    results = []

    # Core packages
    print("Core Dependencies:")
    print("-" * 40)

    packages = [
        ("shapely", "shapely", "__version__"),
        ("numpy", "numpy", "__version__"),
        ("pyyaml", "yaml", "__version__"),
        ("pymupdf", "pymupdf", "__version__"),
    ]

    for name, import_name, version_attr in packages:
        ok, info = check_package(name, import_name, version_attr)
        status = "PASS" if ok else "FAIL"
        print(f"  {name:25} [{status}] {info}")
        results.append((name, ok))

    print()
    print("Configuration:")
    print("-" * 40)

    # Constants
    ok, info = check_constants()
    status = "PASS" if ok else "FAIL"
    print(f"  {'constants.py':25} [{status}] {info}")
    results.append(("constants", ok))

    # Settings
    ok, info = check_settings()
    status = "PASS" if ok else "FAIL"
    print(f"  {'settings.yaml':25} [{status}] {info}")
    results.append(("settings", ok))

    print()
    print("=" * 60)

    # Summary
    passed = sum(1 for _, ok in results if ok)
    total = len(results)

    if passed == total:
        print(f"ALL CHECKS PASSED ({passed}/{total})")
        print("Environment is ready for sheet plan export.")
        return 0
    else:
        failed = [name for name, ok in results if not ok]
        print(f"SOME CHECKS FAILED ({passed}/{total})")
        print(f"Failed: {', '.join(failed)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
