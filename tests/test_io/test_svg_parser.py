"""
Tests for the SVG document reader.
"""

import os
import tempfile
import unittest
from unittest import mock
from xml.etree import ElementTree as ET

from lasersvg.core.point import VertexType
from lasersvg.core.shapes import GroupElement, PointElement
from lasersvg.io.svg_parser import (
    SVGParser, get_svg_dimensions, is_laser_svg_compatible,
    svg_content_is_laser_compatible
)

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


def _svg(body, attrs='width="100" height="100"'):
    return f'<svg {SVG_NS} {attrs}>{body}</svg>'


class TestBasicShapes(unittest.TestCase):
    """Test conversion of the SVG basic shapes."""

    def setUp(self):
        self.parser = SVGParser()

    def _parse_one(self, body):
        result = self.parser.parse_string(_svg(body))
        self.assertEqual(len(result.elements), 1)
        return result.elements[0]

    def test_rect(self):
        el = self._parse_one('<rect id="r1" x="10" y="20" width="30" height="40" stroke="#ff0000"/>')
        self.assertEqual(el.id, "r1")
        self.assertEqual(el.name, "r1")
        self.assertTrue(el.is_closed_shape)
        self.assertEqual([(p.x, p.y) for p in el.points],
                         [(10, 20), (40, 20), (40, 60), (10, 60)])
        self.assertEqual(el.stroke, "#ff0000")

    def test_zero_size_rect_skipped(self):
        result = self.parser.parse_string(_svg('<rect width="0" height="10"/>'))
        self.assertEqual(result.elements, [])

    def test_circle_and_ellipse(self):
        circle = self._parse_one('<circle cx="50" cy="50" r="10"/>')
        self.assertEqual(len(circle.points), 4)
        self.assertTrue(all(p.vertex_type is VertexType.SMOOTH for p in circle.points))
        ellipse = self._parse_one('<ellipse cx="0" cy="0" rx="20" ry="10"/>')
        self.assertEqual((ellipse.points[1].x, ellipse.points[1].y), (20, 0))

    def test_line(self):
        el = self._parse_one('<line x1="0" y1="0" x2="10" y2="10"/>')
        self.assertFalse(el.is_closed_shape)
        self.assertEqual(len(el.points), 2)

    def test_polyline_and_polygon(self):
        polyline = self._parse_one('<polyline points="0,0 10,0 10,10"/>')
        self.assertFalse(polyline.is_closed_shape)
        polygon = self._parse_one('<polygon points="0,0 10,0 10,10"/>')
        self.assertTrue(polygon.is_closed_shape)
        self.assertEqual(len(polygon.points), 3)

    def test_stroke_falls_back_to_fill_then_black(self):
        el = self._parse_one('<rect width="1" height="1" fill="#00ff00"/>')
        self.assertEqual(el.stroke, "#00ff00")
        el = self._parse_one('<rect width="1" height="1" style="fill:none"/>')
        self.assertEqual(el.stroke, "#000000")

    def test_stroke_width(self):
        el = self._parse_one('<rect width="1" height="1" stroke-width="2"/>')
        self.assertEqual(el.stroke_width, 2)
        el = self._parse_one('<rect width="1" height="1"/>')
        self.assertEqual(el.stroke_width, 0.25)

    def test_negative_and_exponent_coordinates(self):
        rect = self._parse_one('<rect x="-10" y="-20" width="30" height="40"/>')
        self.assertEqual([(p.x, p.y) for p in rect.points],
                         [(-10, -20), (20, -20), (20, 20), (-10, 20)])
        line = self._parse_one('<line x1="-5" y1="+2" x2="5" y2="-2.5e0"/>')
        self.assertEqual([(p.x, p.y) for p in line.points], [(-5, 2), (5, -2.5)])
        circle = self._parse_one('<circle cx="-50" cy="1e1" r="5"/>')
        self.assertEqual((circle.points[0].x, circle.points[0].y), (-50, 5))
        self.assertEqual((circle.points[1].x, circle.points[1].y), (-45, 10))

    def test_coordinates_with_units(self):
        rect = self._parse_one('<rect x="-1.5px" y=".5" width="2E1px" height="10"/>')
        self.assertEqual((rect.points[0].x, rect.points[0].y), (-1.5, 0.5))
        self.assertEqual(rect.points[1].x, 18.5)

    def test_negative_stroke_width_uses_default(self):
        el = self._parse_one('<rect width="1" height="1" stroke-width="-2"/>')
        self.assertEqual(el.stroke_width, 0.25)

    def test_data_name(self):
        el = self._parse_one('<line data-name="Cut" x2="5"/>')
        self.assertEqual(el.name, "Cut")


class TestPaths(unittest.TestCase):
    """Test path elements."""

    def setUp(self):
        self.parser = SVGParser()

    def test_single_path(self):
        result = self.parser.parse_string(_svg('<path id="p" d="M 0 0 C 25 0 75 100 100 100"/>'))
        el = result.elements[0]
        self.assertEqual(el.id, "p")
        self.assertFalse(el.is_closed_shape)

    def test_filled_path_is_closed(self):
        result = self.parser.parse_string(_svg('<path fill="black" d="M 0 0 L 10 0 L 10 10"/>'))
        self.assertTrue(result.elements[0].is_closed_shape)

    def test_subpaths_become_elements(self):
        result = self.parser.parse_string(
            _svg('<path id="p" d="M0,0 L10,0 L10,10 Z m5,5 L20,15 L20,5 Z M 1 1"/>')
        )
        self.assertEqual([el.id for el in result.elements], ["p_0", "p_1"])
        self.assertEqual([el.name for el in result.elements], ["p 1", "p 2"])
        self.assertEqual((result.elements[1].points[0].x, result.elements[1].points[0].y), (5, 5))


class TestGroupsAndTransforms(unittest.TestCase):
    """Test nested groups and the transform attribute."""

    def setUp(self):
        self.parser = SVGParser()

    def test_group_kept_when_not_empty(self):
        result = self.parser.parse_string(_svg(
            '<g id="outer"><g><line x2="1"/></g><g/></g><g><desc>x</desc></g>'
        ))
        self.assertEqual(len(result.elements), 1)
        outer = result.elements[0]
        self.assertIsInstance(outer, GroupElement)
        self.assertEqual(outer.id, "outer")
        self.assertEqual(len(outer.children), 1)
        self.assertIsInstance(outer.children[0].children[0], PointElement)

    def test_translate_then_scale(self):
        result = self.parser.parse_string(_svg(
            '<line x1="1" y1="1" x2="2" y2="2" transform="translate(10, 20) scale(2)"/>'
        ))
        points = result.elements[0].points
        self.assertEqual((points[0].x, points[0].y), (12, 22))
        self.assertEqual((points[1].x, points[1].y), (14, 24))

    def test_nested_group_transforms_compose(self):
        result = self.parser.parse_string(_svg(
            '<g transform="translate(100,0)"><g transform="scale(10)">'
            '<line x1="1" y1="0" x2="2" y2="0"/></g></g>'
        ))
        line = result.elements[0].children[0].children[0]
        self.assertEqual(line.points[0].x, 110)
        self.assertEqual(line.points[1].x, 120)

    def test_transform_moves_handles(self):
        result = self.parser.parse_string(_svg(
            '<path d="M 0 0 C 10 0 20 10 20 20" transform="translate(5 5)"/>'
        ))
        points = result.elements[0].points
        self.assertEqual((points[0].next_control_handle.x, points[0].next_control_handle.y), (15, 5))
        self.assertEqual((points[1].prev_control_handle.x, points[1].prev_control_handle.y), (25, 15))

    def test_rotate_about_center(self):
        result = self.parser.parse_string(_svg(
            '<line x1="20" y1="10" x2="10" y2="10" transform="rotate(90 10 10)"/>'
        ))
        start = result.elements[0].points[0]
        self.assertAlmostEqual(start.x, 10)
        self.assertAlmostEqual(start.y, 20)


class TestDocumentLevel(unittest.TestCase):
    """Test document-level parsing behavior."""

    def test_malformed_xml_gives_empty_result(self):
        result = SVGParser().parse_string("<svg><rect></svg")
        self.assertEqual(result.elements, [])
        self.assertFalse(result.laser_compatible)

    def test_parse_file(self):
        with tempfile.NamedTemporaryFile('w', suffix='.svg', delete=False, encoding='utf-8') as f:
            f.write(_svg('<line x2="10"/>'))
            path = f.name
        try:
            result = SVGParser().parse_file(path)
        finally:
            os.unlink(path)
        self.assertEqual(len(result.elements), 1)

    def test_dimensions_with_units_and_viewbox(self):
        root = ET.fromstring(_svg('', 'width="210mm" height="297mm" viewBox="10 20 210 297"'))
        dims = get_svg_dimensions(root)
        self.assertEqual(dims.unit, "mm")
        self.assertEqual((dims.width, dims.height), (210, 297))
        self.assertEqual((dims.offset_x, dims.offset_y), (10, 20))
        self.assertEqual((dims.user_width, dims.user_height), (210, 297))

    def test_dimensions_from_viewbox_only(self):
        root = ET.fromstring(_svg('', 'viewBox="0 0 400 300"'))
        dims = get_svg_dimensions(root)
        self.assertEqual((dims.width, dims.height), (400, 300))
        self.assertEqual(dims.unit, "px")

    def test_dimensions_default(self):
        dims = get_svg_dimensions(ET.fromstring(_svg('', '')))
        self.assertEqual((dims.width, dims.height), (1000, 1000))

    def test_non_positive_size_ignored(self):
        root = ET.fromstring(_svg('', 'width="-100" height="0" viewBox="0 0 400 300"'))
        dims = get_svg_dimensions(root)
        self.assertEqual((dims.width, dims.height), (400, 300))
        self.assertEqual((dims.display_width, dims.display_height), (400, 300))


class TestLaserCompatibility(unittest.TestCase):
    """Test the compatibility metadata check."""

    def test_quick_check(self):
        self.assertTrue(svg_content_is_laser_compatible(
            '<svg><metadata><isLaserSvgCompatible>true</isLaserSvgCompatible></metadata></svg>'
        ))
        self.assertTrue(svg_content_is_laser_compatible('<svg><!-- isLaserSvgCompatible --></svg>'))
        self.assertFalse(svg_content_is_laser_compatible('<svg><rect/></svg>'))
        self.assertFalse(svg_content_is_laser_compatible(''))

    def test_metadata_attributes(self):
        root = ET.fromstring(_svg(
            '<metadata isLaserSvgCompatible="true" timestamp="1000000"/>'
        ))
        self.assertTrue(is_laser_svg_compatible(root, 1001500))
        self.assertFalse(is_laser_svg_compatible(root, 1003000))
        self.assertFalse(is_laser_svg_compatible(root, None))

    def test_metadata_child_elements(self):
        root = ET.fromstring(_svg(
            '<metadata><isLaserSvgCompatible>true</isLaserSvgCompatible>'
            '<timestamp>5000</timestamp></metadata>'
        ))
        self.assertTrue(is_laser_svg_compatible(root, 5000))

    def test_missing_timestamp(self):
        root = ET.fromstring(_svg('<metadata isLaserSvgCompatible="true"/>'))
        self.assertFalse(is_laser_svg_compatible(root, 5000))

    def test_result_flag(self):
        text = _svg('<metadata isLaserSvgCompatible="true" timestamp="42"/><line x2="1"/>')
        self.assertTrue(SVGParser().parse_string(text, file_timestamp=42).laser_compatible)
        self.assertFalse(SVGParser().parse_string(text).laser_compatible)

    def test_fractional_timestamp(self):
        root = ET.fromstring(_svg('<metadata isLaserSvgCompatible="true" timestamp="1000.75"/>'))
        self.assertTrue(is_laser_svg_compatible(root, 1001))

    def test_metadata_lookup_skipped_without_marker(self):
        text = _svg('<metadata timestamp="42"/><line x2="1"/>')
        with mock.patch('lasersvg.io.svg_parser.is_laser_svg_compatible',
                        return_value=False) as check:
            SVGParser().parse_string(text, file_timestamp=42)
        check.assert_called_once()
        self.assertIsNone(check.call_args[0][1])


if __name__ == '__main__':
    unittest.main()
