"""
LaserSVG Graphics Module

Contains the interactive geometry operations:
- Transform: handle-based resize, flips and moves
"""

from .transform import (
    TransformDirection, TransformHandleType, TransformHandle, TransformDelta,
    TransformManager, parse_handle, transform_points,
    flip_points_horizontal, flip_points_vertical, translate_points
)

__all__ = [
    'TransformDirection',
    'TransformHandleType',
    'TransformHandle',
    'TransformDelta',
    'TransformManager',
    'parse_handle',
    'transform_points',
    'flip_points_horizontal',
    'flip_points_vertical',
    'translate_points',
]
