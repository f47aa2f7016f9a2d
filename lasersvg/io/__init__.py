"""
LaserSVG I/O Module

Handles SVG path data and SVG document import.
"""

from .path_codec import (
    PathCommand, tokenize_path, to_absolute, parse_path_data, parse_subpaths,
    generate_path_data, format_number
)
from .svg_parser import SVGParser, SvgDimensions, SvgImportResult, is_laser_svg_compatible
from .import_normalizer import (
    ImportSettings, calculate_scale_factor, normalize_elements,
    crop_elements_to_bounds, center_elements, import_svg
)

__all__ = [
    'PathCommand', 'tokenize_path', 'to_absolute', 'parse_path_data',
    'parse_subpaths', 'generate_path_data', 'format_number',
    'SVGParser', 'SvgDimensions', 'SvgImportResult', 'is_laser_svg_compatible',
    'ImportSettings', 'calculate_scale_factor', 'normalize_elements',
    'crop_elements_to_bounds', 'center_elements', 'import_svg',
]
