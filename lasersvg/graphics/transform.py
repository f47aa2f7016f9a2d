"""
Transform Operations for LaserSVG

Handles transformation of shapes including:
- Scaling via the eight resize handles (coefficient law about a pivot)
- Mirroring (flip horizontal/vertical)
- Translation (movement)

Every operation moves control handles together with their anchors.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from ..core.bounds import calculate_elements_bounds
from ..core.point import Point, Vertex
from ..core.shapes import BoundingBox, Element, map_point_elements


class TransformDirection(Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class TransformHandleType(Enum):
    """Compass names of the resize handles around a selection box."""
    NORTH_WEST = "nw"
    NORTH = "n"
    NORTH_EAST = "ne"
    EAST = "e"
    SOUTH_EAST = "se"
    SOUTH = "s"
    SOUTH_WEST = "sw"
    WEST = "w"


@dataclass(frozen=True)
class TransformHandle:
    """A resize handle split into its horizontal and vertical components."""
    horizontal: Optional[TransformDirection]
    vertical: Optional[TransformDirection]
    is_corner: bool


@dataclass(frozen=True)
class TransformDelta:
    """Drag distance in document units."""
    dx: float
    dy: float


def parse_handle(name: Union[str, TransformHandleType]) -> TransformHandle:
    """
    Parse a handle name ('nw', 'e', ...) into its components.

    Raises:
        ValueError: if the name is not one of the eight compass handles
    """
    if isinstance(name, TransformHandleType):
        handle_type = name
    else:
        try:
            handle_type = TransformHandleType(name)
        except ValueError:
            raise ValueError(f"Unknown transform handle: {name!r}") from None

    code = handle_type.value
    horizontal = None
    if 'e' in code:
        horizontal = TransformDirection.RIGHT
    elif 'w' in code:
        horizontal = TransformDirection.LEFT

    vertical = None
    if 's' in code:
        vertical = TransformDirection.BOTTOM
    elif 'n' in code:
        vertical = TransformDirection.TOP

    return TransformHandle(horizontal, vertical, is_corner=len(code) == 2)


def get_pivot_point(box: BoundingBox, handle: TransformHandle) -> Point:
    """Box point opposite the handle; the centre on axes the handle does not move."""
    center = box.center
    pivot_x = center.x
    pivot_y = center.y

    if handle.horizontal is TransformDirection.RIGHT:
        pivot_x = box.min_x
    elif handle.horizontal is TransformDirection.LEFT:
        pivot_x = box.max_x

    if handle.vertical is TransformDirection.BOTTOM:
        pivot_y = box.min_y
    elif handle.vertical is TransformDirection.TOP:
        pivot_y = box.max_y

    return Point(pivot_x, pivot_y)


def get_handle_position(box: BoundingBox, handle: TransformHandle) -> Point:
    """Box point where the handle sits."""
    center = box.center
    handle_x = center.x
    handle_y = center.y

    if handle.horizontal is TransformDirection.RIGHT:
        handle_x = box.max_x
    elif handle.horizontal is TransformDirection.LEFT:
        handle_x = box.min_x

    if handle.vertical is TransformDirection.BOTTOM:
        handle_y = box.max_y
    elif handle.vertical is TransformDirection.TOP:
        handle_y = box.min_y

    return Point(handle_x, handle_y)


def _axis_mapper(active: bool, value_handle: float, value_opposite: float,
                 value_center: float, delta: float,
                 from_center: bool) -> Optional[Callable[[float], float]]:
    """Build the coordinate law for one axis, or None when it stays fixed."""
    if not active:
        return None

    span = value_handle - value_opposite
    if span == 0:
        return None

    if from_center:
        # Signed: both sides move apart, the box grows by delta in total
        return lambda v: v + (v - value_center) / span * delta

    # Unsigned: everything moves with the handle, proportional to the pivot distance
    return lambda v: v + abs(v - value_opposite) / abs(span) * delta


def transform_points(vertices: List[Vertex], box: BoundingBox,
                     delta: TransformDelta,
                     handle: Union[TransformHandle, str],
                     from_center: bool = False) -> List[Vertex]:
    """
    Resize vertices by dragging a handle of their bounding box.

    Each coordinate on an axis the handle controls moves by
    coefficient * delta. For an edge-anchored resize the coefficient is
    |p - pivot| / |handle - pivot|, so the pivot side stays put and the
    handle side follows the mouse exactly. For a resize from the centre
    the coefficient is signed and measured against the whole box side,
    so opposite sides move apart symmetrically. A zero-size axis is left
    unchanged.
    """
    if isinstance(handle, str):
        handle = parse_handle(handle)

    edge_pivot = get_pivot_point(box, handle)
    handle_pos = get_handle_position(box, handle)
    center = box.center

    map_x = _axis_mapper(handle.horizontal is not None, handle_pos.x, edge_pivot.x,
                         center.x, delta.dx, from_center)
    map_y = _axis_mapper(handle.vertical is not None, handle_pos.y, edge_pivot.y,
                         center.y, delta.dy, from_center)

    if map_x is None and map_y is None:
        return list(vertices)

    def apply(x: float, y: float) -> Tuple[float, float]:
        return (map_x(x) if map_x else x, map_y(y) if map_y else y)

    return [v.map_coordinates(apply) for v in vertices]


def flip_points_horizontal(vertices: List[Vertex], box: BoundingBox) -> List[Vertex]:
    """Mirror about the vertical centre line of the box."""
    center_x = box.center.x
    return [v.map_coordinates(lambda x, y: (2 * center_x - x, y)) for v in vertices]


def flip_points_vertical(vertices: List[Vertex], box: BoundingBox) -> List[Vertex]:
    """Mirror about the horizontal centre line of the box."""
    center_y = box.center.y
    return [v.map_coordinates(lambda x, y: (x, 2 * center_y - y)) for v in vertices]


def translate_points(vertices: List[Vertex], dx: float, dy: float) -> List[Vertex]:
    return [v.translated(dx, dy) for v in vertices]


class TransformManager:
    """
    Manages transformations of selected elements.

    A resize is a session: start_transform snapshots the elements and
    their selection box, each update_transform recomputes the result
    from that snapshot and the total drag delta, and finish or cancel
    ends it. Elements are never modified in place; every method returns
    new elements for the caller to store.
    """

    def __init__(self):
        """Initialize transform manager."""
        self._start_elements: Optional[List[Element]] = None
        self._start_bounds: Optional[BoundingBox] = None
        self._handle: Optional[TransformHandle] = None
        self._from_center = False

    @property
    def is_transforming(self) -> bool:
        return self._start_elements is not None

    @property
    def start_bounds(self) -> Optional[BoundingBox]:
        return self._start_bounds

    def start_transform(self, elements: List[Element], handle_name: str,
                        from_center: bool = False) -> bool:
        """
        Start a resize operation.

        Args:
            elements: Elements to transform
            handle_name: Dragged handle ('n', 'ne', ... 'nw')
            from_center: Resize symmetrically about the selection centre

        Returns:
            True if a session was started, False when there is nothing to resize

        Raises:
            ValueError: for an unknown handle name
        """
        handle = parse_handle(handle_name)
        bounds = calculate_elements_bounds(elements)
        if bounds is None:
            return False

        self._start_elements = [element.clone() for element in elements]
        self._start_bounds = bounds
        self._handle = handle
        self._from_center = from_center
        return True

    def update_transform(self, dx: float, dy: float,
                         from_center: Optional[bool] = None) -> Optional[List[Element]]:
        """
        Compute the elements for the current drag position.

        Args:
            dx, dy: Total distance dragged since start_transform
            from_center: Overrides the session's centre mode (modifier key
                pressed or released mid-drag)

        Returns:
            Transformed copies of the snapshot, or None outside a session
        """
        if not self.is_transforming:
            return None

        if from_center is not None:
            self._from_center = from_center

        delta = TransformDelta(dx, dy)
        return map_point_elements(
            self._start_elements,
            lambda el: el.with_points(transform_points(
                el.points, self._start_bounds, delta, self._handle, self._from_center
            ))
        )

    def finish_transform(self):
        """Finish the current transformation."""
        self._start_elements = None
        self._start_bounds = None
        self._handle = None
        self._from_center = False

    def cancel_transform(self) -> Optional[List[Element]]:
        """Cancel the current transformation, returning the untouched snapshot."""
        snapshot = self._start_elements
        self.finish_transform()
        return snapshot

    def _selection_box(self, elements: List[Element]) -> Optional[BoundingBox]:
        return calculate_elements_bounds(elements)

    def mirror_horizontal(self, elements: List[Element],
                          center_x: Optional[float] = None) -> List[Element]:
        """
        Mirror elements horizontally (flip left-right).

        Args:
            elements: Elements to mirror
            center_x: X coordinate of mirror axis (defaults to selection center)
        """
        box = self._selection_box(elements)
        if box is None:
            return list(elements)
        if center_x is not None:
            box = BoundingBox(center_x, box.min_y, center_x, box.max_y)
        return map_point_elements(
            elements, lambda el: el.with_points(flip_points_horizontal(el.points, box))
        )

    def mirror_vertical(self, elements: List[Element],
                        center_y: Optional[float] = None) -> List[Element]:
        """
        Mirror elements vertically (flip top-bottom).

        Args:
            elements: Elements to mirror
            center_y: Y coordinate of mirror axis (defaults to selection center)
        """
        box = self._selection_box(elements)
        if box is None:
            return list(elements)
        if center_y is not None:
            box = BoundingBox(box.min_x, center_y, box.max_x, center_y)
        return map_point_elements(
            elements, lambda el: el.with_points(flip_points_vertical(el.points, box))
        )

    def move(self, elements: List[Element], dx: float, dy: float) -> List[Element]:
        """Translate elements by (dx, dy)."""
        return map_point_elements(
            elements, lambda el: el.with_points(translate_points(el.points, dx, dy))
        )
