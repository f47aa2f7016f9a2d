"""
LaserSVG Core Shapes Module

Defines BoundingBox and the element types. Every drawable shape is a
PointElement (an ordered list of vertices); groups only contain other
elements.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Union
from uuid import uuid4
import math

from ..constants import KAPPA, STANDARD_STROKE_WIDTH, DEFAULT_STROKE
from .point import Point, Vertex, VertexType, has_curve


def generate_id() -> str:
    return uuid4().hex


@dataclass
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> 'BoundingBox':
        return cls(x, y, x + width, y + height)

    @property
    def x(self) -> float:
        return self.min_x

    @property
    def y(self) -> float:
        return self.min_y

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point(
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    def contains(self, point: Point) -> bool:
        """Check if point is inside bounding box."""
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y)

    def intersects(self, other: 'BoundingBox') -> bool:
        """Check if two bounding boxes overlap."""
        return not (self.max_x < other.min_x or
                    self.min_x > other.max_x or
                    self.max_y < other.min_y or
                    self.min_y > other.max_y)

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def to_dict(self) -> Dict[str, float]:
        """Overlay representation handed to the UI layer."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class PointElement:
    """
    Universal element for every geometric shape.

    - Line: 2 vertices, open
    - Rectangle / polygon: N vertices, closed, no handles
    - Ellipse: 4 smooth vertices with quarter-arc handles
    - Curves: any mix of handles
    """
    points: List[Vertex] = field(default_factory=list)
    is_closed_shape: bool = False
    id: str = field(default_factory=generate_id)
    name: str = ""
    visible: bool = True
    locked: bool = False
    stroke: str = DEFAULT_STROKE
    stroke_width: float = STANDARD_STROKE_WIDTH

    def get_bounding_box(self) -> BoundingBox:
        from .bounds import calculate_bounds_from_points
        return calculate_bounds_from_points(self.points, self.is_closed_shape)

    def with_points(self, points: List[Vertex]) -> 'PointElement':
        """Copy of this element with a new vertex list."""
        return replace(self, points=list(points))

    def clone(self) -> 'PointElement':
        return replace(self, points=list(self.points))


@dataclass
class GroupElement:
    """A container exported as <g>; its children may be nested groups."""
    children: List['Element'] = field(default_factory=list)
    id: str = field(default_factory=generate_id)
    name: str = ""
    visible: bool = True
    locked: bool = False

    def clone(self) -> 'GroupElement':
        return replace(self, children=[child.clone() for child in self.children])


Element = Union[PointElement, GroupElement]


def iter_point_elements(elements: List[Element]):
    """Yield point elements depth-first, flattening visible groups."""
    for element in elements:
        if isinstance(element, GroupElement):
            if not element.visible:
                continue
            yield from iter_point_elements(element.children)
        else:
            yield element


def map_point_elements(elements: List[Element], fn) -> List[Element]:
    """Rebuild the element tree, replacing each point element with fn(element)."""
    result = []
    for element in elements:
        if isinstance(element, GroupElement):
            result.append(replace(element, children=map_point_elements(element.children, fn)))
        else:
            result.append(fn(element))
    return result


# Shape factories

def create_line(x1: float, y1: float, x2: float, y2: float) -> PointElement:
    return PointElement([Vertex(x1, y1), Vertex(x2, y2)], is_closed_shape=False)


def create_rectangle(x: float, y: float, width: float, height: float) -> PointElement:
    return PointElement([
        Vertex(x, y),
        Vertex(x + width, y),
        Vertex(x + width, y + height),
        Vertex(x, y + height),
    ], is_closed_shape=True)


def create_polygon(cx: float, cy: float, radius: float, sides: int) -> PointElement:
    """Regular polygon with the first vertex at the top."""
    sides = max(3, sides)
    points = []
    for i in range(sides):
        angle = -math.pi / 2 + 2 * math.pi * i / sides
        points.append(Vertex(cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return PointElement(points, is_closed_shape=True)


def create_ellipse(cx: float, cy: float, rx: float, ry: float) -> PointElement:
    """Ellipse as four smooth vertices (top, right, bottom, left) with kappa handles."""
    kx = KAPPA * rx
    ky = KAPPA * ry
    smooth = VertexType.SMOOTH
    return PointElement([
        Vertex(cx, cy - ry, smooth, Point(cx - kx, cy - ry), Point(cx + kx, cy - ry)),
        Vertex(cx + rx, cy, smooth, Point(cx + rx, cy - ky), Point(cx + rx, cy + ky)),
        Vertex(cx, cy + ry, smooth, Point(cx + kx, cy + ry), Point(cx - kx, cy + ry)),
        Vertex(cx - rx, cy, smooth, Point(cx - rx, cy + ky), Point(cx - rx, cy - ky)),
    ], is_closed_shape=True)


def create_circle(cx: float, cy: float, r: float) -> PointElement:
    return create_ellipse(cx, cy, r, r)


def classify_shape(element: PointElement) -> str:
    """
    Describe what a vertex list draws.

    Returns one of "line", "polygon", "ellipse", "polyline" or "curve".
    """
    points = element.points
    curved = any(has_curve(p) for p in points)

    if not curved:
        if len(points) == 2 and not element.is_closed_shape:
            return "line"
        if len(points) >= 3 and element.is_closed_shape:
            return "polygon"
        return "polyline"

    if (len(points) == 4 and element.is_closed_shape and
            all(p.prev_control_handle is not None and
                p.next_control_handle is not None for p in points)):
        return "ellipse"
    return "curve"
