"""
LaserSVG Document Model

The Document is the element collection the editor works on.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..constants import ARTBOARD_WIDTH, ARTBOARD_HEIGHT
from .bounds import calculate_elements_bounds, calculate_selection_bounds, find_element
from .shapes import BoundingBox, Element, GroupElement, PointElement, iter_point_elements


@dataclass
class Document:
    """
    The root container of a drawing.

    Holds the top-level elements (point elements and groups) and the
    artboard size in mm.
    """
    name: str = "Untitled"
    width: float = ARTBOARD_WIDTH      # mm
    height: float = ARTBOARD_HEIGHT    # mm
    elements: List[Element] = field(default_factory=list)

    def add_element(self, element: Element) -> None:
        """Add an element; an element with the same id is replaced."""
        for i, existing in enumerate(self.elements):
            if existing.id == element.id:
                self.elements[i] = element
                return
        self.elements.append(element)

    def add_elements(self, elements: List[Element]) -> None:
        for element in elements:
            self.add_element(element)

    def remove_element(self, element_id: str) -> None:
        """Remove a top-level element."""
        self.elements = [el for el in self.elements if el.id != element_id]

    def get_element(self, element_id: str) -> Optional[Element]:
        """Find an element anywhere in the tree."""
        return find_element(self.elements, element_id)

    def replace_element(self, element: Element) -> bool:
        """Swap in an updated element wherever it lives in the tree."""
        def replace_in(elements: List[Element]) -> bool:
            for i, existing in enumerate(elements):
                if existing.id == element.id:
                    elements[i] = element
                    return True
                if isinstance(existing, GroupElement) and replace_in(existing.children):
                    return True
            return False
        return replace_in(self.elements)

    def get_all_shapes(self) -> List[PointElement]:
        """Flatten all visible point elements."""
        return list(iter_point_elements(self.elements))

    def get_design_bounds(self) -> Optional[BoundingBox]:
        """
        Bounding box of all visible shapes.

        Returns:
            BoundingBox of all visible shapes, or None if there are none
        """
        return calculate_elements_bounds(
            [shape for shape in self.get_all_shapes() if shape.visible]
        )

    def get_selection_bounds(self, selected_ids: List[str]) -> Optional[BoundingBox]:
        return calculate_selection_bounds(self.elements, selected_ids)
