"""
LaserSVG Core Module

Contains the core data structures:
- Point / Vertex: anchors with optional Bezier handles
- Shapes: PointElement, GroupElement, BoundingBox
- Bounds: curve-aware bounding boxes
- Document: element collection
"""

# Import order matters - point first, then shapes, bounds, document
from .point import (
    Point, Vertex, VertexType, create_vertex, has_curve, is_smooth, is_corner,
    convert_to_corner, convert_to_straight, convert_to_smooth,
    set_smooth_next_handle, set_smooth_prev_handle
)
from .shapes import (
    BoundingBox, PointElement, GroupElement, Element,
    create_line, create_rectangle, create_polygon, create_ellipse, create_circle,
    classify_shape
)
from .bounds import (
    calculate_bounds_from_points, calculate_elements_bounds,
    calculate_selection_bounds
)
from .document import Document

__all__ = [
    'Point', 'Vertex', 'VertexType', 'create_vertex', 'has_curve',
    'is_smooth', 'is_corner',
    'convert_to_corner', 'convert_to_straight', 'convert_to_smooth',
    'set_smooth_next_handle', 'set_smooth_prev_handle',
    'BoundingBox', 'PointElement', 'GroupElement', 'Element',
    'create_line', 'create_rectangle', 'create_polygon',
    'create_ellipse', 'create_circle', 'classify_shape',
    'calculate_bounds_from_points', 'calculate_elements_bounds',
    'calculate_selection_bounds',
    'Document',
]
