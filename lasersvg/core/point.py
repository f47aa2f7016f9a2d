"""
LaserSVG Vertex Model

Defines the 2D Point, the Vertex with optional Bezier control handles,
and the vertex-type conversions (straight / corner / smooth).
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple
import math


@dataclass(frozen=True)
class Point:
    """A 2D point."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.sqrt((self.x - other.x)**2 + (self.y - other.y)**2)


class VertexType(Enum):
    """How the control handles of a vertex behave."""
    STRAIGHT = "straight"   # no handles
    CORNER = "corner"       # independent handles
    SMOOTH = "smooth"       # collinear, mirrored handles


@dataclass(frozen=True)
class Vertex:
    """
    An anchor point of a shape with optional cubic Bezier handles.

    prev_control_handle shapes the incoming segment,
    next_control_handle the outgoing one. A straight vertex never
    carries handles.
    """
    x: float
    y: float
    vertex_type: VertexType = VertexType.STRAIGHT
    prev_control_handle: Optional[Point] = None
    next_control_handle: Optional[Point] = None

    def __post_init__(self):
        if self.vertex_type is VertexType.STRAIGHT and (
                self.prev_control_handle is not None or
                self.next_control_handle is not None):
            raise ValueError("A straight vertex cannot carry control handles")

    @property
    def anchor(self) -> Point:
        return Point(self.x, self.y)

    def map_coordinates(self, fn: Callable[[float, float], Tuple[float, float]]) -> 'Vertex':
        """Apply fn(x, y) -> (x, y) to the anchor and every present handle."""
        x, y = fn(self.x, self.y)
        prev_handle = None
        next_handle = None
        if self.prev_control_handle is not None:
            prev_handle = Point(*fn(self.prev_control_handle.x, self.prev_control_handle.y))
        if self.next_control_handle is not None:
            next_handle = Point(*fn(self.next_control_handle.x, self.next_control_handle.y))
        return replace(self, x=x, y=y,
                       prev_control_handle=prev_handle,
                       next_control_handle=next_handle)

    def translated(self, dx: float, dy: float) -> 'Vertex':
        return self.map_coordinates(lambda x, y: (x + dx, y + dy))


def create_vertex(x: float, y: float) -> Vertex:
    """Create a straight vertex without handles."""
    return Vertex(x, y)


def has_curve(v: Vertex) -> bool:
    """True if the vertex has any control handle, whatever its type."""
    return v.prev_control_handle is not None or v.next_control_handle is not None


def is_smooth(v: Vertex) -> bool:
    return v.vertex_type is VertexType.SMOOTH and has_curve(v)


def is_corner(v: Vertex) -> bool:
    return v.vertex_type is VertexType.CORNER and has_curve(v)


def outgoing_handle(v: Vertex) -> Optional[Point]:
    """The handle that bends the segment leaving v, if it is eligible."""
    if v.vertex_type in (VertexType.CORNER, VertexType.SMOOTH):
        return v.next_control_handle
    return None


def incoming_handle(v: Vertex) -> Optional[Point]:
    """The handle that bends the segment arriving at v, if it is eligible."""
    if v.vertex_type in (VertexType.CORNER, VertexType.SMOOTH):
        return v.prev_control_handle
    return None


def _neighbors(index: int, vertices: List[Vertex],
               is_closed: bool) -> Tuple[Optional[Vertex], Optional[Vertex]]:
    """Return (previous, next) neighbors; closed shapes wrap around."""
    count = len(vertices)
    if is_closed:
        return vertices[(index - 1) % count], vertices[(index + 1) % count]
    prev_v = vertices[index - 1] if index > 0 else None
    next_v = vertices[index + 1] if index < count - 1 else None
    return prev_v, next_v


def _handle_toward(p: Vertex, target: Vertex) -> Optional[Point]:
    """Handle pointing at target with a quarter of the distance to it."""
    dx = target.x - p.x
    dy = target.y - p.y
    if math.hypot(dx, dy) == 0:
        return None
    return Point(p.x + dx / 4, p.y + dy / 4)


def convert_to_corner(index: int, vertices: List[Vertex], is_closed: bool) -> Vertex:
    """
    Convert a vertex to a corner with independent handles.

    Each handle points straight at its neighbor with a quarter of the
    distance to it, so both sides may curve independently.
    """
    p = vertices[index]
    if len(vertices) < 2:
        return p

    prev_v, next_v = _neighbors(index, vertices, is_closed)
    prev_handle = _handle_toward(p, prev_v) if prev_v is not None else None
    next_handle = _handle_toward(p, next_v) if next_v is not None else None

    return Vertex(p.x, p.y, VertexType.CORNER, prev_handle, next_handle)


def convert_to_straight(index: int, vertices: List[Vertex]) -> Vertex:
    """Drop both handles, keeping the anchor position."""
    p = vertices[index]
    return Vertex(p.x, p.y, VertexType.STRAIGHT)


def convert_to_smooth(index: int, vertices: List[Vertex], is_closed: bool) -> Vertex:
    """
    Convert a vertex to a smooth node with collinear, mirrored handles.

    Interior vertices use the average of the directions to both
    neighbors as tangent. Endpoints of an open shape only get the handle
    on the side that has a neighbor.
    """
    p = vertices[index]
    if len(vertices) < 2:
        return p

    prev_v, next_v = _neighbors(index, vertices, is_closed)

    if prev_v is None or next_v is None:
        # Open endpoint: a single handle toward the only neighbor
        if next_v is not None:
            return Vertex(p.x, p.y, VertexType.SMOOTH,
                          next_control_handle=_handle_toward(p, next_v))
        return Vertex(p.x, p.y, VertexType.SMOOTH,
                      prev_control_handle=_handle_toward(p, prev_v))

    dist_next = math.hypot(next_v.x - p.x, next_v.y - p.y)
    dist_prev = math.hypot(prev_v.x - p.x, prev_v.y - p.y)
    if dist_next == 0 and dist_prev == 0:
        return Vertex(p.x, p.y, VertexType.SMOOTH)

    # Average tangent: unit vector toward next minus unit vector toward prev
    tx = 0.0
    ty = 0.0
    if dist_next > 0:
        tx += (next_v.x - p.x) / dist_next
        ty += (next_v.y - p.y) / dist_next
    if dist_prev > 0:
        tx -= (prev_v.x - p.x) / dist_prev
        ty -= (prev_v.y - p.y) / dist_prev

    length = math.hypot(tx, ty)
    if length == 0:
        # Both neighbors lie in the same direction; follow the nearer one
        if dist_next > 0:
            tx, ty, length = next_v.x - p.x, next_v.y - p.y, dist_next
        else:
            tx, ty, length = p.x - prev_v.x, p.y - prev_v.y, dist_prev
    tx /= length
    ty /= length

    handle_length = (dist_next + dist_prev) / 2 / 4
    return Vertex(
        p.x, p.y, VertexType.SMOOTH,
        prev_control_handle=Point(p.x - tx * handle_length, p.y - ty * handle_length),
        next_control_handle=Point(p.x + tx * handle_length, p.y + ty * handle_length),
    )


def set_smooth_next_handle(p: Vertex, handle: Point) -> Vertex:
    """Move the outgoing handle and mirror the incoming one through the anchor."""
    prev_handle = p.prev_control_handle
    if prev_handle is not None:
        prev_handle = Point(2 * p.x - handle.x, 2 * p.y - handle.y)
    return Vertex(p.x, p.y, VertexType.SMOOTH, prev_handle, handle)


def set_smooth_prev_handle(p: Vertex, handle: Point) -> Vertex:
    """Move the incoming handle and mirror the outgoing one through the anchor."""
    next_handle = p.next_control_handle
    if next_handle is not None:
        next_handle = Point(2 * p.x - handle.x, 2 * p.y - handle.y)
    return Vertex(p.x, p.y, VertexType.SMOOTH, handle, next_handle)
