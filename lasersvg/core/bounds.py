"""
Bounding Box Calculation

Bounds over vertex sequences that follow the actual Bezier curve of
each segment, plus unions over element trees and selections.
"""

from typing import Iterable, List, Optional, Tuple

import numpy as np

from ..constants import BEZIER_SAMPLES
from .point import Point, Vertex, incoming_handle, outgoing_handle
from .shapes import BoundingBox, Element, GroupElement, PointElement, iter_point_elements

# Parameter values t = 1/n .. 1 and the matching Bernstein weights, shape (n, 4)
_T = np.linspace(0.0, 1.0, BEZIER_SAMPLES + 1)[1:]
_BERNSTEIN = np.stack([
    (1 - _T) ** 3,
    3 * (1 - _T) ** 2 * _T,
    3 * (1 - _T) * _T ** 2,
    _T ** 3,
], axis=1)


def iter_segments(points: List[Vertex], is_closed: bool) -> Iterable[Tuple[Vertex, Vertex]]:
    """Consecutive vertex pairs; the closing pair only for closed shapes."""
    count = len(points)
    if count < 2:
        return
    for i in range(count - 1):
        yield points[i], points[i + 1]
    if is_closed:
        yield points[-1], points[0]


def sample_cubic(p0: Point, p1: Point, p2: Point, p3: Point) -> np.ndarray:
    """Evaluate a cubic Bezier at BEZIER_SAMPLES parameter values; returns (n, 2)."""
    control = np.array([[p0.x, p0.y], [p1.x, p1.y], [p2.x, p2.y], [p3.x, p3.y]])
    return _BERNSTEIN @ control


def calculate_bounds_from_points(points: List[Vertex], is_closed: bool = False,
                                 include_handles: bool = True) -> BoundingBox:
    """
    Calculate the bounding box of a vertex sequence.

    The box is seeded with every anchor (and every handle when
    include_handles is set), then every curved segment is sampled so
    the extent of the curve itself is covered.
    """
    if not points:
        return BoundingBox(0, 0, 0, 0)

    coords = []
    for p in points:
        coords.append((p.x, p.y))
        if include_handles:
            if p.prev_control_handle is not None:
                coords.append((p.prev_control_handle.x, p.prev_control_handle.y))
            if p.next_control_handle is not None:
                coords.append((p.next_control_handle.x, p.next_control_handle.y))
    samples = [np.array(coords, dtype=float)]

    for p1, p2 in iter_segments(points, is_closed):
        cp1 = outgoing_handle(p1)
        cp2 = incoming_handle(p2)
        if cp1 is None and cp2 is None:
            continue
        samples.append(sample_cubic(
            p1.anchor,
            cp1 if cp1 is not None else p1.anchor,
            cp2 if cp2 is not None else p2.anchor,
            p2.anchor,
        ))

    all_coords = np.vstack(samples)
    min_x, min_y = all_coords.min(axis=0)
    max_x, max_y = all_coords.max(axis=0)
    return BoundingBox(float(min_x), float(min_y), float(max_x), float(max_y))


def _union(boxes: Iterable[BoundingBox]) -> Optional[BoundingBox]:
    result = None
    for box in boxes:
        result = box if result is None else result.union(box)
    return result


def calculate_elements_bounds(elements: List[Element]) -> Optional[BoundingBox]:
    """Union of all point elements, skipping invisible groups and empty shapes."""
    return _union(
        element.get_bounding_box()
        for element in iter_point_elements(elements)
        if element.points
    )


def find_element(elements: List[Element], element_id: str) -> Optional[Element]:
    """Find an element anywhere in the tree."""
    for element in elements:
        if element.id == element_id:
            return element
        if isinstance(element, GroupElement):
            found = find_element(element.children, element_id)
            if found is not None:
                return found
    return None


def calculate_selection_bounds(elements: List[Element],
                               selected_ids: List[str]) -> Optional[BoundingBox]:
    """
    Bounding box of the selected elements.

    Groups are flattened recursively and invisible groups are skipped.
    Returns None when nothing selected resolves to a shape.
    """
    if not selected_ids:
        return None

    shapes: List[PointElement] = []
    for element_id in selected_ids:
        element = find_element(elements, element_id)
        if element is None:
            continue
        shapes.extend(iter_point_elements([element]))

    return calculate_elements_bounds(shapes)
