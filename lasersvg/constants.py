"""
LaserSVG Constants

Shared numeric defaults for the geometry engine.
"""

# Artboard (mm)
ARTBOARD_WIDTH = 1000.0
ARTBOARD_HEIGHT = 1000.0

# Stroke width assigned to imported elements (mm)
STANDARD_STROKE_WIDTH = 0.25
DEFAULT_STROKE = "#000000"

# Unit conversion
PX_TO_MM = 0.2645833333

# Bezier circle approximation constant (4 * (sqrt(2) - 1) / 3)
KAPPA = 0.5522847498

# Subdivisions used when sampling a cubic segment for bounds
BEZIER_SAMPLES = 20

# Allowed difference between file mtime and the exporter timestamp (ms)
TIMESTAMP_TOLERANCE_MS = 2000
