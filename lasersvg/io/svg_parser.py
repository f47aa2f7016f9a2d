"""
SVG Parser for LaserSVG

Reads SVG documents into PointElements and GroupElements. Coordinates
stay in the document's user space (element transforms applied); scaling
to millimetres is done by the import normalizer.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from xml.etree import ElementTree as ET
from typing import List, Optional, Tuple

from ..constants import DEFAULT_STROKE, STANDARD_STROKE_WIDTH, TIMESTAMP_TOLERANCE_MS
from ..core.point import Vertex
from ..core.shapes import (
    Element, GroupElement, PointElement, generate_id,
    create_ellipse, create_line, create_rectangle
)
from .path_codec import parse_subpaths

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_SIZE = 1000.0

_NUMBER_PATTERN = re.compile(r'[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?')
_LENGTH_PATTERN = re.compile(
    r'^\s*(' + _NUMBER_PATTERN.pattern + r')\s*(px|mm|cm|in|pt|pc)?\s*$', re.IGNORECASE
)
_TRANSFORM_PATTERN = re.compile(r'(translate|rotate|scale|matrix|skewX|skewY)\s*\(([^)]*)\)')

_IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


@dataclass
class SvgDimensions:
    """
    Size information of an SVG root element.

    width/height are the declared size, falling back to the viewBox size
    (or 1000 when neither is usable). display_width/display_height are
    the declared size in `unit`.
    """
    width: float = DEFAULT_DOCUMENT_SIZE
    height: float = DEFAULT_DOCUMENT_SIZE
    display_width: float = DEFAULT_DOCUMENT_SIZE
    display_height: float = DEFAULT_DOCUMENT_SIZE
    unit: str = "px"
    view_box: Optional[Tuple[float, float, float, float]] = None

    @property
    def user_width(self) -> float:
        """Width of the user coordinate system."""
        return self.view_box[2] if self.view_box else self.width

    @property
    def user_height(self) -> float:
        return self.view_box[3] if self.view_box else self.height

    @property
    def offset_x(self) -> float:
        return self.view_box[0] if self.view_box else 0.0

    @property
    def offset_y(self) -> float:
        return self.view_box[1] if self.view_box else 0.0


@dataclass
class SvgImportResult:
    """Elements read from an SVG document, in document user space."""
    elements: List[Element] = field(default_factory=list)
    dimensions: SvgDimensions = field(default_factory=SvgDimensions)
    laser_compatible: bool = False


def _local_name(tag) -> str:
    """Tag name without its XML namespace."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit('}', 1)[-1]


def _parse_length(value: Optional[str]) -> Tuple[Optional[float], Optional[str]]:
    """Split "210mm" into (210.0, "mm"); unparseable lengths give (None, None)."""
    if not value:
        return None, None
    match = _LENGTH_PATTERN.match(value)
    if not match:
        return None, None
    try:
        number = float(match.group(1))
    except ValueError:
        return None, None
    unit = match.group(2).lower() if match.group(2) else None
    return number, unit


def get_svg_dimensions(root: ET.Element) -> SvgDimensions:
    """Read width, height, unit and viewBox from the SVG root element."""
    view_box = None
    view_box_attr = root.get('viewBox')
    if view_box_attr:
        parts = [p for p in re.split(r'[\s,]+', view_box_attr.strip()) if p]
        try:
            values = tuple(float(p) for p in parts)
        except ValueError:
            values = ()
        if len(values) == 4:
            view_box = values
        else:
            logger.debug(f"Ignoring malformed viewBox {view_box_attr!r}")

    display_width, unit = _parse_length(root.get('width'))
    display_height, height_unit = _parse_length(root.get('height'))
    unit = unit or height_unit
    # A non-positive document size is as unusable as a missing one
    if display_width is not None and display_width <= 0:
        display_width = None
    if display_height is not None and display_height <= 0:
        display_height = None

    if view_box is not None:
        width = display_width if display_width is not None else view_box[2]
        height = display_height if display_height is not None else view_box[3]
    elif display_width is None or display_height is None:
        width = height = DEFAULT_DOCUMENT_SIZE
    else:
        width, height = display_width, display_height

    dims = SvgDimensions(
        width=width,
        height=height,
        display_width=display_width if display_width is not None else width,
        display_height=display_height if display_height is not None else height,
        unit=unit or "px",
        view_box=view_box,
    )
    logger.debug(f"SVG dimensions {dims.width}x{dims.height}{dims.unit} viewBox={view_box}")
    return dims


def svg_content_is_laser_compatible(svg_text: str) -> bool:
    """Quick check for the compatibility marker without parsing."""
    return 'isLaserSvgCompatible' in (svg_text or '')


def is_laser_svg_compatible(root: ET.Element, file_timestamp: Optional[float]) -> bool:
    """
    True if the document carries the compatibility metadata and its
    timestamp lies within TIMESTAMP_TOLERANCE_MS of the file's timestamp.

    The marker may be an attribute of <metadata> or a child element
    <isLaserSvgCompatible>true</isLaserSvgCompatible>; the same holds
    for the timestamp.
    """
    if file_timestamp is None:
        return False

    meta = None
    for element in root.iter():
        if _local_name(element.tag) == 'metadata':
            meta = element
            break
    if meta is None:
        return False

    def read(name: str) -> Optional[str]:
        value = meta.get(name)
        if value is not None:
            return value.strip()
        for child in meta:
            if _local_name(child.tag) == name:
                return (child.text or '').strip()
        return None

    if read('isLaserSvgCompatible') != 'true':
        return False

    timestamp_str = read('timestamp')
    if not timestamp_str:
        return False
    try:
        svg_timestamp = float(timestamp_str)
    except ValueError:
        return False

    diff = abs(svg_timestamp - file_timestamp)
    logger.debug(f"File timestamp {file_timestamp}, SVG timestamp {svg_timestamp}, diff {diff}ms")
    return diff <= TIMESTAMP_TOLERANCE_MS


class SVGParser:
    """Parse SVG documents into LaserSVG elements."""

    def __init__(self):
        # Transform matrix: (a, b, c, d, e, f) representing [[a, c, e], [b, d, f], [0, 0, 1]]
        self.current_transform: Tuple[float, ...] = _IDENTITY
        self._element_index = 0

    def parse_file(self, filepath: str,
                   file_timestamp: Optional[float] = None) -> SvgImportResult:
        """Parse an SVG file."""
        with open(filepath, encoding='utf-8') as f:
            return self.parse_string(f.read(), file_timestamp)

    def parse_string(self, svg_string: str,
                     file_timestamp: Optional[float] = None) -> SvgImportResult:
        """Parse SVG text. Malformed XML yields an empty result."""
        try:
            root = ET.fromstring(svg_string)
        except ET.ParseError as e:
            logger.error(f"SVG parse error: {e}")
            return SvgImportResult()
        if file_timestamp is not None and not svg_content_is_laser_compatible(svg_string):
            # No marker anywhere in the text, skip the metadata lookup
            file_timestamp = None
        return self.parse_svg(root, file_timestamp)

    def parse_svg(self, root: ET.Element,
                  file_timestamp: Optional[float] = None) -> SvgImportResult:
        """Parse the SVG root element."""
        self.current_transform = _IDENTITY
        self._element_index = 0

        if _local_name(root.tag) != 'svg':
            svg = next((el for el in root.iter() if _local_name(el.tag) == 'svg'), None)
            if svg is None:
                logger.error("Invalid SVG: no svg element found")
                return SvgImportResult()
            root = svg

        result = SvgImportResult(dimensions=get_svg_dimensions(root))
        if is_laser_svg_compatible(root, file_timestamp):
            logger.info("File is LaserSVG compatible")
            result.laser_compatible = True

        result.elements = self._parse_children(root)
        logger.info(f"Parsed {len(result.elements)} top-level elements")
        return result

    def _parse_children(self, parent: ET.Element) -> List[Element]:
        elements: List[Element] = []
        for child in parent:
            elements.extend(self._parse_element(child))
        return elements

    def _parse_element(self, element: ET.Element) -> List[Element]:
        """Parse one element (recursing into groups) under its transform."""
        tag = _local_name(element.tag)

        saved_transform = self.current_transform
        transform_str = element.get('transform')
        if transform_str:
            self._apply_transform(transform_str)

        try:
            if tag == 'g':
                return self._parse_group(element)

            shapes: List[PointElement] = []
            if tag == 'rect':
                shapes = self._parse_rect(element)
            elif tag == 'circle':
                shapes = self._parse_circle(element)
            elif tag == 'ellipse':
                shapes = self._parse_ellipse(element)
            elif tag == 'line':
                shapes = self._parse_line(element)
            elif tag == 'polyline':
                shapes = self._parse_polyline(element, closed=False)
            elif tag == 'polygon':
                shapes = self._parse_polyline(element, closed=True)
            elif tag == 'path':
                shapes = self._parse_path(element)

            return [self._finish_shape(element, tag, shape) for shape in shapes
                    if len(shape.points) >= 2]
        finally:
            self.current_transform = saved_transform

    def _parse_group(self, element: ET.Element) -> List[Element]:
        children = self._parse_children(element)
        if not children:
            return []
        self._element_index += 1
        return [GroupElement(
            children=children,
            id=element.get('id') or generate_id(),
            name=(element.get('data-name') or element.get('id') or
                  f"Group {self._element_index}"),
        )]

    def _finish_shape(self, element: ET.Element, tag: str,
                      shape: PointElement) -> PointElement:
        """Apply the current transform and the element's presentation attributes."""
        if self.current_transform != _IDENTITY:
            shape.points = [p.map_coordinates(self._transform_xy) for p in shape.points]

        stroke = self._get_style_value(element, 'stroke')
        fill = self._get_style_value(element, 'fill')
        if stroke == 'none' and fill != 'none':
            stroke = fill
        if stroke == 'none':
            stroke = DEFAULT_STROKE
        shape.stroke = stroke
        shape.stroke_width = self._parse_stroke_width(element)

        self._element_index += 1
        if not shape.name:
            shape.name = (element.get('data-name') or element.get('id') or
                          f"{tag} {self._element_index}")
        if tag != 'path' and element.get('id'):
            shape.id = element.get('id')
        return shape

    def _get_style_value(self, element: ET.Element, attr: str, default: str = 'none') -> str:
        """Get style attribute value, checking both style attribute and direct attribute."""
        value = element.get(attr)
        if value:
            return value.strip()

        # Parse style="fill:black;stroke:none"
        for part in element.get('style', '').split(';'):
            if ':' in part:
                key, val = part.split(':', 1)
                if key.strip() == attr and val.strip():
                    return val.strip()

        return default

    def _parse_stroke_width(self, element: ET.Element) -> float:
        width, _ = _parse_length(self._get_style_value(element, 'stroke-width', ''))
        return width if width and width > 0 else STANDARD_STROKE_WIDTH

    def _float_attr(self, element: ET.Element, name: str) -> float:
        value, _ = _parse_length(element.get(name))
        return value if value is not None else 0.0

    def _parse_rect(self, element: ET.Element) -> List[PointElement]:
        x = self._float_attr(element, 'x')
        y = self._float_attr(element, 'y')
        width = self._float_attr(element, 'width')
        height = self._float_attr(element, 'height')
        if width <= 0 or height <= 0:
            return []
        return [create_rectangle(x, y, width, height)]

    def _parse_circle(self, element: ET.Element) -> List[PointElement]:
        r = self._float_attr(element, 'r')
        if r <= 0:
            return []
        return [create_ellipse(self._float_attr(element, 'cx'),
                               self._float_attr(element, 'cy'), r, r)]

    def _parse_ellipse(self, element: ET.Element) -> List[PointElement]:
        rx = self._float_attr(element, 'rx')
        ry = self._float_attr(element, 'ry')
        if rx <= 0 or ry <= 0:
            return []
        return [create_ellipse(self._float_attr(element, 'cx'),
                               self._float_attr(element, 'cy'), rx, ry)]

    def _parse_line(self, element: ET.Element) -> List[PointElement]:
        return [create_line(
            self._float_attr(element, 'x1'), self._float_attr(element, 'y1'),
            self._float_attr(element, 'x2'), self._float_attr(element, 'y2'),
        )]

    def _parse_polyline(self, element: ET.Element, closed: bool) -> List[PointElement]:
        """Parse a polyline or polygon element."""
        points = [Vertex(x, y) for x, y in self._parse_points(element.get('points', ''))]
        return [PointElement(points, is_closed_shape=closed and len(points) > 2)]

    def _parse_path(self, element: ET.Element) -> List[PointElement]:
        """
        Parse a path element's d attribute.

        Each subpath becomes its own element. A subpath is closed when it
        ends with Z or the path is filled (for outline cutting).
        """
        d = element.get('d', '')
        subpaths = parse_subpaths(d)
        filled = self._get_style_value(element, 'fill').lower() not in ('none', 'transparent', '')

        shapes = []
        base_id = element.get('id')
        base_name = element.get('data-name') or base_id or 'path'
        for index, (points, closed) in enumerate(subpaths):
            if len(points) < 2:
                logger.debug(f"Skipping subpath {index} of {base_name!r} with {len(points)} vertices")
                continue
            shape = PointElement(points, is_closed_shape=closed or filled)
            if len(subpaths) > 1:
                shape.name = f"{base_name} {index + 1}"
                if base_id:
                    shape.id = f"{base_id}_{index}"
            elif base_id:
                shape.id = base_id
            shapes.append(shape)
        return shapes

    def _parse_points(self, points_str: str) -> List[Tuple[float, float]]:
        """Parse SVG points attribute."""
        numbers = [float(n) for n in _NUMBER_PATTERN.findall(points_str)]
        return [(numbers[i], numbers[i + 1]) for i in range(0, len(numbers) - 1, 2)]

    def _apply_transform(self, transform_str: str) -> None:
        """Compose an SVG transform list onto the current matrix."""
        # Transforms like "translate(10, 20) rotate(45) scale(2)" apply right to left
        for match in _TRANSFORM_PATTERN.finditer(transform_str):
            func = match.group(1)
            args = [float(x) for x in _NUMBER_PATTERN.findall(match.group(2))]

            if func == 'translate':
                tx = args[0] if len(args) > 0 else 0.0
                ty = args[1] if len(args) > 1 else 0.0
                self._multiply_matrix((1.0, 0.0, 0.0, 1.0, tx, ty))

            elif func == 'rotate':
                angle = math.radians(args[0] if args else 0.0)
                cx = args[1] if len(args) > 1 else 0.0
                cy = args[2] if len(args) > 2 else 0.0
                cos_a = math.cos(angle)
                sin_a = math.sin(angle)
                # rotate(a, cx, cy) = translate(cx, cy) rotate(a) translate(-cx, -cy)
                self._multiply_matrix((1.0, 0.0, 0.0, 1.0, cx, cy))
                self._multiply_matrix((cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0))
                self._multiply_matrix((1.0, 0.0, 0.0, 1.0, -cx, -cy))

            elif func == 'scale':
                sx = args[0] if len(args) > 0 else 1.0
                sy = args[1] if len(args) > 1 else sx
                self._multiply_matrix((sx, 0.0, 0.0, sy, 0.0, 0.0))

            elif func == 'matrix':
                if len(args) >= 6:
                    self._multiply_matrix(tuple(args[:6]))
                else:
                    logger.debug(f"Ignoring matrix() with {len(args)} values")

            elif func == 'skewX':
                tan_a = math.tan(math.radians(args[0] if args else 0.0))
                self._multiply_matrix((1.0, 0.0, tan_a, 1.0, 0.0, 0.0))

            elif func == 'skewY':
                tan_a = math.tan(math.radians(args[0] if args else 0.0))
                self._multiply_matrix((1.0, tan_a, 0.0, 1.0, 0.0, 0.0))

    def _multiply_matrix(self, other: Tuple[float, ...]) -> None:
        """Post-multiply the current matrix: current = current * other."""
        a1, b1, c1, d1, e1, f1 = self.current_transform
        a2, b2, c2, d2, e2, f2 = other
        self.current_transform = (
            a1 * a2 + c1 * b2,
            b1 * a2 + d1 * b2,
            a1 * c2 + c1 * d2,
            b1 * c2 + d1 * d2,
            a1 * e2 + c1 * f2 + e1,
            b1 * e2 + d1 * f2 + f1,
        )

    def _transform_xy(self, x: float, y: float) -> Tuple[float, float]:
        """Transform a coordinate pair using the current transform matrix."""
        a, b, c, d, e, f = self.current_transform
        return a * x + c * y + e, b * x + d * y + f
