"""
LaserSVG - point-based vector geometry engine for laser cutting designs.
"""

__version__ = "0.1.0"
