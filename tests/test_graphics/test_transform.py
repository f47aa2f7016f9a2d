"""
Tests for transform operations.

Covers handle parsing, the coefficient-based resize in edge and centre
mode, flips, moves and the TransformManager drag session.
"""

import unittest

from lasersvg.core.point import Point, Vertex, VertexType
from lasersvg.core.shapes import (
    BoundingBox, GroupElement, create_circle, create_rectangle
)
from lasersvg.core.bounds import calculate_bounds_from_points, calculate_elements_bounds
from lasersvg.graphics.transform import (
    TransformDelta, TransformDirection, TransformHandleType, TransformManager,
    flip_points_horizontal, flip_points_vertical, get_handle_position,
    get_pivot_point, parse_handle, transform_points, translate_points
)

HANDLES = ['n', 'ne', 'e', 'se', 's', 'sw', 'w', 'nw']


def _rect_points():
    return create_rectangle(0, 0, 100, 50).points


def _coords(points):
    return [(round(p.x, 9), round(p.y, 9)) for p in points]


class TestParseHandle(unittest.TestCase):
    """Test handle name parsing."""

    def test_corners(self):
        handle = parse_handle('nw')
        self.assertIs(handle.horizontal, TransformDirection.LEFT)
        self.assertIs(handle.vertical, TransformDirection.TOP)
        self.assertTrue(handle.is_corner)
        handle = parse_handle('se')
        self.assertIs(handle.horizontal, TransformDirection.RIGHT)
        self.assertIs(handle.vertical, TransformDirection.BOTTOM)

    def test_edges(self):
        handle = parse_handle('e')
        self.assertIs(handle.horizontal, TransformDirection.RIGHT)
        self.assertIsNone(handle.vertical)
        self.assertFalse(handle.is_corner)
        handle = parse_handle('n')
        self.assertIsNone(handle.horizontal)
        self.assertIs(handle.vertical, TransformDirection.TOP)

    def test_enum_accepted(self):
        self.assertEqual(parse_handle(TransformHandleType.SOUTH_WEST), parse_handle('sw'))

    def test_unknown_handle_rejected(self):
        for name in ['', 'x', 'north', 'NE', 'en']:
            with self.assertRaises(ValueError):
                parse_handle(name)


class TestPivotAndHandlePosition(unittest.TestCase):
    """Test pivot and handle positions on a box."""

    def setUp(self):
        self.box = BoundingBox(0, 0, 100, 50)

    def test_edge_handle(self):
        handle = parse_handle('e')
        self.assertEqual(get_pivot_point(self.box, handle), Point(0, 25))
        self.assertEqual(get_handle_position(self.box, handle), Point(100, 25))

    def test_corner_handle(self):
        handle = parse_handle('se')
        self.assertEqual(get_pivot_point(self.box, handle), Point(0, 0))
        self.assertEqual(get_handle_position(self.box, handle), Point(100, 50))

    def test_north_handle(self):
        handle = parse_handle('n')
        self.assertEqual(get_pivot_point(self.box, handle), Point(50, 50))
        self.assertEqual(get_handle_position(self.box, handle), Point(50, 0))


class TestTransformPoints(unittest.TestCase):
    """Test the coefficient-based resize."""

    def setUp(self):
        self.box = BoundingBox(0, 0, 100, 50)

    def test_east_handle_from_edge(self):
        result = transform_points(_rect_points(), self.box, TransformDelta(20, 0), 'e', False)
        self.assertEqual(_coords(result), [(0, 0), (120, 0), (120, 50), (0, 50)])

    def test_east_handle_from_center(self):
        result = transform_points(_rect_points(), self.box, TransformDelta(20, 0), 'e', True)
        self.assertEqual(_coords(result), [(-10, 0), (110, 0), (110, 50), (-10, 50)])

    def test_west_handle_from_center_grows_symmetrically(self):
        result = transform_points(_rect_points(), self.box, TransformDelta(-20, 0), 'w', True)
        self.assertEqual(_coords(result), [(-10, 0), (110, 0), (110, 50), (-10, 50)])

    def test_north_handle(self):
        result = transform_points(_rect_points(), self.box, TransformDelta(0, -10), 'n', False)
        self.assertEqual(_coords(result), [(0, -10), (100, -10), (100, 50), (0, 50)])

    def test_corner_handle_moves_both_axes(self):
        result = transform_points(_rect_points(), self.box, TransformDelta(20, 10), 'se', False)
        self.assertEqual(_coords(result), [(0, 0), (120, 0), (120, 60), (0, 60)])

    def test_interior_points_scale_proportionally(self):
        points = [Vertex(50, 25)]
        result = transform_points(points, self.box, TransformDelta(20, 0), 'e', False)
        self.assertEqual(_coords(result), [(60, 25)])

    def test_edge_mode_moves_everything_with_handle(self):
        # A point outside the box on the pivot's far side still moves with the drag
        points = [Vertex(-50, 0)]
        result = transform_points(points, self.box, TransformDelta(20, 0), 'e', False)
        self.assertEqual(_coords(result), [(-40, 0)])

    def test_handles_follow_the_same_law(self):
        points = [Vertex(50, 0, VertexType.CORNER, Point(25, 0), Point(75, 10))]
        result = transform_points(points, self.box, TransformDelta(20, 10), 'se', False)
        v = result[0]
        self.assertAlmostEqual(v.prev_control_handle.x, 30)
        self.assertAlmostEqual(v.next_control_handle.x, 90)
        self.assertAlmostEqual(v.next_control_handle.y, 12)
        self.assertIs(v.vertex_type, VertexType.CORNER)

    def test_degenerate_axis_skipped(self):
        flat = BoundingBox(0, 10, 100, 10)
        points = [Vertex(0, 10), Vertex(100, 10)]
        result = transform_points(points, flat, TransformDelta(20, 30), 'se', False)
        self.assertEqual(_coords(result), [(0, 10), (120, 10)])

    def test_pivot_never_moves(self):
        for handle_name in HANDLES:
            handle = parse_handle(handle_name)
            for from_center in (False, True):
                pivot = self.box.center if from_center else get_pivot_point(self.box, handle)
                result = transform_points([Vertex(pivot.x, pivot.y)], self.box,
                                          TransformDelta(13, -7), handle, from_center)
                self.assertAlmostEqual(result[0].x, pivot.x, msg=handle_name)
                self.assertAlmostEqual(result[0].y, pivot.y, msg=handle_name)

    def test_handle_point_follows_delta(self):
        for handle_name in HANDLES:
            handle = parse_handle(handle_name)
            pos = get_handle_position(self.box, handle)
            result = transform_points([Vertex(pos.x, pos.y)], self.box,
                                      TransformDelta(13, -7), handle, False)
            expected_x = pos.x + (13 if handle.horizontal else 0)
            expected_y = pos.y + (-7 if handle.vertical else 0)
            self.assertAlmostEqual(result[0].x, expected_x, msg=handle_name)
            self.assertAlmostEqual(result[0].y, expected_y, msg=handle_name)

    def test_input_not_mutated(self):
        points = _rect_points()
        before = list(points)
        transform_points(points, self.box, TransformDelta(20, 0), 'e')
        self.assertEqual(points, before)


class TestFlipAndTranslate(unittest.TestCase):
    """Test flips and moves."""

    def test_flip_horizontal(self):
        box = BoundingBox(0, 0, 50, 50)
        points = [Vertex(0, 0), Vertex(50, 0), Vertex(50, 50), Vertex(0, 50)]
        self.assertEqual(_coords(flip_points_horizontal(points, box)),
                         [(50, 0), (0, 0), (0, 50), (50, 50)])

    def test_flip_vertical_moves_handles(self):
        box = BoundingBox(0, 0, 50, 50)
        points = [Vertex(10, 10, VertexType.SMOOTH, Point(5, 0), Point(15, 20))]
        flipped = flip_points_vertical(points, box)[0]
        self.assertEqual((flipped.x, flipped.y), (10, 40))
        self.assertEqual(flipped.prev_control_handle, Point(5, 50))
        self.assertEqual(flipped.next_control_handle, Point(15, 30))

    def test_flip_twice_is_identity(self):
        circle = create_circle(30, 40, 12)
        box = calculate_bounds_from_points(circle.points, True)
        twice_h = flip_points_horizontal(flip_points_horizontal(circle.points, box), box)
        twice_v = flip_points_vertical(flip_points_vertical(circle.points, box), box)
        for a, b, c in zip(circle.points, twice_h, twice_v):
            self.assertAlmostEqual(a.x, b.x)
            self.assertAlmostEqual(a.y, c.y)
            self.assertAlmostEqual(a.next_control_handle.x, b.next_control_handle.x)
            self.assertAlmostEqual(a.prev_control_handle.y, c.prev_control_handle.y)

    def test_translate(self):
        points = [Vertex(1, 1, VertexType.CORNER, next_control_handle=Point(2, 2))]
        moved = translate_points(points, 10, 20)[0]
        self.assertEqual((moved.x, moved.y), (11, 21))
        self.assertEqual(moved.next_control_handle, Point(12, 22))


class TestTransformManager(unittest.TestCase):
    """Test the drag session helper."""

    def setUp(self):
        self.manager = TransformManager()
        self.rect = create_rectangle(0, 0, 100, 50)
        self.circle = create_circle(150, 25, 25)
        self.elements = [self.rect, GroupElement(children=[self.circle])]

    def test_session_uses_total_delta(self):
        self.assertTrue(self.manager.start_transform(self.elements, 'e'))
        self.assertTrue(self.manager.is_transforming)
        self.manager.update_transform(10, 0)
        result = self.manager.update_transform(175, 0)
        box = calculate_elements_bounds(result)
        # Selection box is 0..175 wide, dragged to 0..350
        self.assertAlmostEqual(box.min_x, 0)
        self.assertAlmostEqual(box.max_x, 350)
        self.assertEqual(result[0].id, self.rect.id)
        self.assertEqual(result[1].children[0].id, self.circle.id)

    def test_source_elements_untouched(self):
        self.manager.start_transform(self.elements, 'se')
        self.manager.update_transform(50, 50)
        self.assertEqual(self.rect.points[1].x, 100)

    def test_from_center_toggle(self):
        self.manager.start_transform([self.rect], 'e')
        result = self.manager.update_transform(20, 0, from_center=True)
        self.assertEqual(_coords(result[0].points)[0], (-10, 0))

    def test_finish_and_cancel(self):
        self.manager.start_transform([self.rect], 'e')
        self.manager.finish_transform()
        self.assertFalse(self.manager.is_transforming)
        self.assertIsNone(self.manager.update_transform(5, 5))

        self.manager.start_transform([self.rect], 'e')
        snapshot = self.manager.cancel_transform()
        self.assertEqual(_coords(snapshot[0].points), _coords(self.rect.points))
        self.assertFalse(self.manager.is_transforming)

    def test_nothing_to_transform(self):
        self.assertFalse(self.manager.start_transform([], 'e'))
        self.assertFalse(self.manager.is_transforming)

    def test_invalid_handle(self):
        with self.assertRaises(ValueError):
            self.manager.start_transform(self.elements, 'middle')

    def test_mirror_about_selection_center(self):
        result = self.manager.mirror_horizontal([self.rect])
        self.assertEqual(_coords(result[0].points), [(100, 0), (0, 0), (0, 50), (100, 50)])
        result = self.manager.mirror_vertical([self.rect], center_y=0)
        self.assertEqual(_coords(result[0].points), [(0, 0), (100, 0), (100, -50), (0, -50)])

    def test_move(self):
        result = self.manager.move(self.elements, 5, -5)
        self.assertEqual((result[0].points[0].x, result[0].points[0].y), (5, -5))
        moved_circle = result[1].children[0]
        self.assertAlmostEqual(moved_circle.points[0].x, 155)


if __name__ == '__main__':
    unittest.main()
