"""KnotPad - version constants and drawing defaults.

Keep this module tiny and dependency-free. It is imported by many places
(core, geom, UI) and must not have side effects.
"""

APP_NAME = "KnotPad"
APP_SHORT = "KNP"

# App semantic version (must match pyproject.toml).
APP_VERSION = "0.1.0"

# Intersection markers (scene units = px).
MARKER_RADIUS = 5.0
MARKER_FILL = "red"

# Default knot (seeded on start).
KNOT_STROKE_COLOR = "blue"
KNOT_STROKE_WIDTH = 20.0
KNOT_ANGLE_STEP = 0.3

# Freehand strokes (drawing mode).
FREEHAND_STROKE_COLOR = "black"
FREEHAND_STROKE_WIDTH = 2.0
SIMPLIFY_TOLERANCE = 10.0

# Hit-test tolerance (px) for anchors / strokes.
HIT_TOLERANCE = 5.0

# Samples per cubic segment when flattening for intersection queries.
# NOTE: keep stable; changing it moves reported intersection params slightly.
FLATTEN_SAMPLES = 24
