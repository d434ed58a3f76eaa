"""
Shared constants for the evidence map layout engine.

These values are used by the simulation, the interaction controller and the
render adapter. The chart page in app.py relies on the same numbers, so keep
them in sync when tuning the layout.
"""

# Target separation between the two endpoints of a link
LINK_DISTANCE = 150.0

# Many-body repulsion (negative = repel) and its interaction window
CHARGE_STRENGTH = -300.0
CHARGE_DISTANCE_MAX = 350.0
CHARGE_DISTANCE_MIN = 1.0

# Collision radius budget per node, larger than any visual radius so labels stay legible
COLLISION_RADIUS = 40.0

# Fraction of velocity lost every tick (friction)
VELOCITY_DECAY = 0.4

# Cooling schedule: ~300 ticks from ALPHA_START down to ALPHA_MIN
ALPHA_START = 1.0
ALPHA_MIN = 0.001
ALPHA_DECAY = 1 - ALPHA_MIN ** (1 / 300)

# Alpha the simulation is reheated toward while a node is dragged
DRAG_ALPHA_TARGET = 0.3

# Synchronous ticks run before the first paint
WARM_START_TICKS = 300

# Centroid correction toward the viewport centre (1.0 = full correction per tick)
CENTER_STRENGTH = 1.0

# Magnitude of the random nudge used to separate coincident nodes
JIGGLE_MAGNITUDE = 1e-6

# Radius of the random initial disc, scaled by sqrt(node count)
INITIAL_RADIUS = 10.0

# Default viewport
CHART_WIDTH = 800.0
CHART_HEIGHT = 600.0

# Pan/zoom limits and the zoom applied on first render
MIN_ZOOM = 0.1
MAX_ZOOM = 4.0
INITIAL_ZOOM = 0.75

# Frame interval for real-time ticking (seconds)
TICK_INTERVAL = 1 / 60

# Opacity levels
NODE_DIMMED_OPACITY = 0.1
LINK_BASE_OPACITY = 0.4
LINK_ACTIVE_OPACITY = 1.0
LINK_HOVERED_OPACITY = 0.8
LINK_DIMMED_OPACITY = 0.1

# Hovered nodes grow by this factor
HOVER_RADIUS_SCALE = 1.2

# Curvature range for user-authored curved connections
CURVATURE_LIMIT = 40.0
