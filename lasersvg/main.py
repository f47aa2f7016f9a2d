#!/usr/bin/env python3
"""
LaserSVG - Main Entry Point

Imports an SVG file into artboard millimetres and prints the path data
and bounding box of every shape.
Run with: python -m lasersvg.main drawing.svg
"""

import argparse
import json
import logging
import os
import sys

from .constants import ARTBOARD_WIDTH, ARTBOARD_HEIGHT
from .core.bounds import calculate_elements_bounds
from .core.shapes import iter_point_elements
from .io.import_normalizer import ImportSettings, import_svg
from .io.path_codec import generate_path_data

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Configure logging for the command line."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Import an SVG and print normalized path data and bounds'
    )
    parser.add_argument('svg_file', help='SVG file to import')
    parser.add_argument('--width', type=float, default=ARTBOARD_WIDTH,
                        help='Artboard width in mm')
    parser.add_argument('--height', type=float, default=ARTBOARD_HEIGHT,
                        help='Artboard height in mm')
    parser.add_argument('--into-existing', action='store_true',
                        help='Import into an existing document (no fit, crop and center)')
    parser.add_argument('--json', action='store_true', help='Print JSON instead of text')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None) -> int:
    """Main entry point for the LaserSVG command line."""
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug)

    try:
        with open(args.svg_file, encoding='utf-8') as f:
            svg_text = f.read()
    except OSError as e:
        logger.error(f"Cannot read {args.svg_file}: {e}")
        return 1

    settings = ImportSettings(
        target_width=args.width,
        target_height=args.height,
        artboard_width=args.width,
        artboard_height=args.height,
    )
    # Milliseconds, as written by the editor into the compatibility metadata
    file_timestamp = int(os.path.getmtime(args.svg_file) * 1000)
    result = import_svg(svg_text, settings, into_existing=args.into_existing,
                        file_timestamp=file_timestamp)

    shapes = []
    for element in iter_point_elements(result.elements):
        shapes.append({
            "id": element.id,
            "name": element.name,
            "closed": element.is_closed_shape,
            "d": generate_path_data(element.points, element.is_closed_shape),
            "bounds": element.get_bounding_box().to_dict(),
        })

    design_bounds = calculate_elements_bounds(result.elements)
    if args.json:
        print(json.dumps({
            "laser_compatible": result.laser_compatible,
            "bounds": design_bounds.to_dict() if design_bounds else None,
            "shapes": shapes,
        }, indent=2))
    else:
        for shape in shapes:
            box = shape["bounds"]
            print(f"{shape['name']}: {shape['d']}")
            print(f"  bounds x={box['x']:.3f} y={box['y']:.3f} "
                  f"w={box['width']:.3f} h={box['height']:.3f}")
        if design_bounds is None:
            print("No shapes imported")

    return 0


if __name__ == "__main__":
    sys.exit(main())
