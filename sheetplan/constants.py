"""
Sheetplan - Master Constants Reference

Default tolerances for the planar geometry engine. All lengths are in
model millimetres, the unit the scene exporter writes.
Runtime code never reads these directly; they seed GeometryConfig.
"""

# =============================================================================
# SEGMENT CANONICALIZATION CONSTANTS
# =============================================================================

# Ignore segments shorter than this (mm)
MIN_SEGMENT_LENGTH_MM = 0.5

# Grid pitch used to merge near-duplicate points (mm)
SNAP_PITCH_MM = 0.5

# Decimal places kept in the exported coordinates
ROUND_DIGITS = 5

# =============================================================================
# PLANAR GRAPH CONSTANTS
# =============================================================================

# Lower bound for the planarization tolerance (mm)
PLANARIZE_EPS_MIN_MM = 0.5

# Split parameters closer than this are merged
SPLIT_PARAM_MERGE = 1e-9

# Faces with |signed area| below this are degenerate
MIN_FACE_AREA = 1e-9

# Safety multiplier for the face walk (iterations = factor * half-edges)
FACE_WALK_LIMIT_FACTOR = 4

# =============================================================================
# GLAZING (CURTAIN WALL) RECONCILIATION CONSTANTS
# =============================================================================

# Glazing segment counts as touching a room within this distance (mm)
GLAZING_TOUCH_TOLERANCE_MM = 800.0

# Boundary segments drawn over the glazing line within this distance are dropped (mm)
GLAZING_REDRAW_TOLERANCE_MM = 800.0

# Both ends of a boundary "step" within this distance of the glazing (mm)
GLAZING_STEP_TOLERANCE_MM = 150.0

# Longest synthesized bridge from an open boundary end to the glazing (mm)
MAX_BRIDGE_LENGTH_MM = 800.0

# Skip bridges shorter than this, the end already touches (mm)
BRIDGE_EPSILON_MM = 1.0

# Absolute cosine for "nearly parallel" (about 32 degrees)
PARALLEL_SIMILARITY = 0.85

# Tolerance when slicing a room solid at its floor plane (mm)
SOLID_SLICE_TOLERANCE_MM = 1.0

# =============================================================================
# OPENING BRIDGE CONSTANTS
# =============================================================================

# Sample window along the wall tangent around a glazing door (mm)
GLAZING_SAMPLE_ALONG_MM = 2500.0

# Largest panel offset from the door center along the normal (mm)
GLAZING_SAMPLE_MAX_NORMAL_MM = 1500.0

# Thinner inferred panels are rejected (mm)
MIN_GLAZING_PANEL_THICKNESS_MM = 10.0

# Normal shift applied to the outer closing line of a glazing door (mm)
# Negative moves the line inward, toward the glazing.
OPENING_OUTER_SHIFT_MM = -10.0

# Glazing panel candidates must be at least this parallel to the tangent
GLAZING_PANEL_PARALLEL_MIN = 0.95

# Wall lines used to snap a door center must be at least this parallel
CENTER_SNAP_PARALLEL_MIN = 0.9

# Ray hits closer than this along the line are ignored
RAY_HIT_EPS = 1e-9

# =============================================================================
# OUTPUT CONSTANTS
# =============================================================================

# Scale denominator for the "unified" layout mode
UNIFIED_SCALE = 200

# Output unit name written to the JSON meta block
DEFAULT_UNITS_NAME = "millimeters"

# Source tag written to the JSON meta block
EXPORT_SOURCE_TAG = "Sheet Plans 2D"

# Markers for common-use (non-leasable) rooms
COMMON_AREA_MARKS = ("mop", "моп")

# Comment written for common-use rooms
COMMON_AREA_COMMENT = "МОП"

# =============================================================================
# EXPORT MODES
# =============================================================================

class ExportMode:
    GNS = "gns"   # gross area: sheet geometry only
    OPA = "opa"   # per-room polygons reconciled with glazing

# =============================================================================
# LAYOUT MODES
# =============================================================================

class LayoutMode:
    MODEL = "model"
    PAPER = "paper"
    UNIFIED = "unified"

# =============================================================================
# GROUP SOURCES
# =============================================================================

class GroupSource:
    HOST = "host"
    GLAZING = "glazing"

# =============================================================================
# ROOM LOOP SOURCES (fallback tiers)
# =============================================================================

class LoopSource:
    RECONCILED = "reconciled"
    BOUNDARY = "boundary"
    SOLID = "solid"
    NONE = "none"

# =============================================================================
# VIEWPORT ROTATIONS
# =============================================================================

class ViewportRotation:
    NONE = "none"
    CLOCKWISE = "cw"
    COUNTERCLOCKWISE = "ccw"
    HALF = "half"
