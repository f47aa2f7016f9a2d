"""
SVG Import Normalization

Converts elements read from an SVG document into artboard millimetres:
unit-aware scaling with viewBox offset, optional fit to a target size,
and the batch crop/center utilities used when importing into an
existing document.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from ..constants import (
    ARTBOARD_WIDTH, ARTBOARD_HEIGHT, PX_TO_MM
)
from ..core.bounds import calculate_elements_bounds
from ..core.shapes import Element, map_point_elements
from .svg_parser import SVGParser, SvgDimensions, SvgImportResult, get_svg_dimensions

logger = logging.getLogger(__name__)

_FIT_TOLERANCE = 1e-6

__all__ = [
    'ImportSettings', 'SvgDimensions', 'get_svg_dimensions', 'unit_to_mm',
    'calculate_scale_factor', 'normalize_elements', 'crop_elements_to_bounds',
    'center_elements', 'import_svg',
]


@dataclass
class ImportSettings:
    """Import configuration (all sizes in mm)."""
    target_width: float = ARTBOARD_WIDTH
    target_height: float = ARTBOARD_HEIGHT
    artboard_width: float = ARTBOARD_WIDTH
    artboard_height: float = ARTBOARD_HEIGHT
    px_to_mm: float = PX_TO_MM


def unit_to_mm(unit: Optional[str], px_to_mm: float = PX_TO_MM) -> float:
    """Millimetres per one source unit; unknown and missing units count as px."""
    factors = {
        'mm': 1.0,
        'cm': 10.0,
        'in': 25.4,
        'pt': 25.4 / 72,
        'pc': 25.4 / 6,
    }
    return factors.get((unit or 'px').lower(), px_to_mm)


def calculate_scale_factor(dimensions: SvgDimensions,
                           settings: Optional[ImportSettings] = None,
                           fit_to_target: bool = False) -> float:
    """
    Scale from document user units to mm.

    The declared size in its unit gives the physical size; the ratio of
    declared size to viewBox size maps user units onto it. With
    fit_to_target the result is further scaled so the whole document fits
    the target size, preserving aspect ratio.
    """
    settings = settings or ImportSettings()

    ratio = 1.0
    if (dimensions.user_width > 0 and dimensions.user_height > 0 and
            dimensions.display_width > 0 and dimensions.display_height > 0):
        ratio = min(dimensions.display_width / dimensions.user_width,
                    dimensions.display_height / dimensions.user_height)

    scale = unit_to_mm(dimensions.unit, settings.px_to_mm) * ratio

    if fit_to_target:
        source_width = dimensions.user_width * scale
        source_height = dimensions.user_height * scale
        if source_width > 0 and source_height > 0:
            scale *= min(settings.target_width / source_width,
                         settings.target_height / source_height)

    return scale


def _map_all(elements: List[Element], fn) -> List[Element]:
    """Apply fn(x, y) to every anchor and handle in the element tree."""
    return map_point_elements(
        elements,
        lambda el: el.with_points([p.map_coordinates(fn) for p in el.points])
    )


def normalize_elements(elements: List[Element], dimensions: SvgDimensions,
                       scale: float) -> List[Element]:
    """Map every anchor and handle to (p - viewBox origin) * scale."""
    offset_x = dimensions.offset_x
    offset_y = dimensions.offset_y
    return _map_all(elements, lambda x, y: ((x - offset_x) * scale, (y - offset_y) * scale))


def crop_elements_to_bounds(elements: List[Element], artboard_width: float,
                            artboard_height: float) -> List[Element]:
    """
    Shrink the batch about its own centre until it fits the artboard.

    Never scales up; a batch that already fits is returned unchanged.
    """
    bounds = calculate_elements_bounds(elements)
    if bounds is None:
        return elements

    if bounds.width <= artboard_width and bounds.height <= artboard_height:
        return elements

    scale_x = artboard_width / bounds.width if bounds.width > 0 else 1.0
    scale_y = artboard_height / bounds.height if bounds.height > 0 else 1.0
    scale = min(scale_x, scale_y, 1.0)

    center = bounds.center
    logger.info(f"Scaling imported elements by {scale:.4f} to fit "
                f"{artboard_width}x{artboard_height}")
    return _map_all(elements, lambda x, y: (center.x + (x - center.x) * scale,
                                            center.y + (y - center.y) * scale))


def center_elements(elements: List[Element], target_x: float, target_y: float,
                    artboard_width: float, artboard_height: float) -> List[Element]:
    """
    Move the batch so its bounding-box centre lands on (target_x, target_y).

    A batch larger than the artboard is left untouched; crop it first.
    """
    bounds = calculate_elements_bounds(elements)
    if bounds is None:
        return elements

    # Tolerance absorbs rounding left by a preceding crop
    if (bounds.width > artboard_width + _FIT_TOLERANCE or
            bounds.height > artboard_height + _FIT_TOLERANCE):
        return elements

    dx = target_x - bounds.center.x
    dy = target_y - bounds.center.y
    return _map_all(elements, lambda x, y: (x + dx, y + dy))


def import_svg(svg_text: str, settings: Optional[ImportSettings] = None,
               into_existing: bool = False,
               file_timestamp: Optional[float] = None) -> SvgImportResult:
    """
    Read SVG text and return its elements in artboard millimetres.

    A fresh import is fitted to the target size. Importing into an
    existing document only converts units, then crops the batch to the
    artboard and centres it there.
    """
    settings = settings or ImportSettings()
    result = SVGParser().parse_string(svg_text, file_timestamp)
    if not result.elements:
        return result

    scale = calculate_scale_factor(result.dimensions, settings,
                                   fit_to_target=not into_existing)
    elements = normalize_elements(result.elements, result.dimensions, scale)

    if into_existing:
        elements = crop_elements_to_bounds(elements, settings.artboard_width,
                                           settings.artboard_height)
        elements = center_elements(elements,
                                   settings.artboard_width / 2,
                                   settings.artboard_height / 2,
                                   settings.artboard_width,
                                   settings.artboard_height)

    logger.info(f"Imported {len(elements)} elements (scale {scale:.6f}, "
                f"{'existing' if into_existing else 'new'} document)")
    return replace(result, elements=elements)
