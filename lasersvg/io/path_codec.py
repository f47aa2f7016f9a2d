"""
SVG Path Data Codec

Parses SVG path data (the d attribute) into vertex lists and generates
path data back from them. Parsing is permissive: malformed fragments are
skipped, never raised.
"""

import logging
import math
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from ..core.point import (
    Point, Vertex, VertexType, incoming_handle, outgoing_handle
)

logger = logging.getLogger(__name__)

# Number of values consumed by each command
COMMAND_ARITY = {
    'M': 2, 'L': 2, 'H': 1, 'V': 1,
    'C': 6, 'S': 4, 'Q': 4, 'T': 2,
    'A': 7, 'Z': 0,
}

# Commands, numbers (decimals, exponents, compact "10-5" / ".5.5" forms), anything else
_TOKEN_PATTERN = re.compile(
    r'([MmLlHhVvCcSsQqTtAaZz])'
    r'|([-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?)'
    r'|([^\s,])'
)

_SAME_POINT_TOLERANCE = 1e-9


@dataclass
class PathCommand:
    """A single path command with exactly the values it needs."""
    command: str
    values: List[float]


def tokenize_path(d: str) -> List[PathCommand]:
    """
    Split path data into commands with their numeric arguments.

    Extra argument groups repeat the command (a moveto repeats as
    lineto). Unsupported command letters discard their arguments, and
    stray characters or incomplete argument groups are dropped.
    """
    groups: List[Tuple[Optional[str], List[float]]] = []

    for match in _TOKEN_PATTERN.finditer(d or ''):
        command, number, junk = match.groups()
        if command:
            groups.append((command, []))
        elif number:
            value = float(number)
            if not math.isfinite(value):
                logger.debug(f"Dropping non-finite path value {number!r}")
            elif not groups:
                logger.debug(f"Dropping value {number!r} before the first command")
            elif groups[-1][0] is not None:
                groups[-1][1].append(value)
        elif junk.isalpha():
            logger.debug(f"Skipping unsupported path command {junk!r}")
            groups.append((None, []))
        else:
            logger.debug(f"Dropping unexpected path character {junk!r}")

    commands = []
    for letter, values in groups:
        if letter is None:
            continue
        arity = COMMAND_ARITY[letter.upper()]
        if arity == 0:
            if values:
                logger.debug(f"Ignoring {len(values)} values after {letter!r}")
            commands.append(PathCommand(letter, []))
            continue

        current = letter
        for start in range(0, len(values) - arity + 1, arity):
            commands.append(PathCommand(current, values[start:start + arity]))
            if current == 'M':
                current = 'L'
            elif current == 'm':
                current = 'l'

        leftover = len(values) % arity
        if leftover:
            logger.debug(f"Dropping {leftover} trailing values of {letter!r}")

    return commands


def arc_to_bezier(x1: float, y1: float, rx: float, ry: float,
                  phi: float, large_arc: int, sweep: int,
                  x2: float, y2: float) -> List[Tuple[Point, Point, Point]]:
    """Convert an SVG arc to cubic bezier segments (cp1, cp2, end)."""
    # Implementation based on W3C SVG arc implementation notes
    phi_rad = math.radians(phi)
    cos_phi = math.cos(phi_rad)
    sin_phi = math.sin(phi_rad)

    # Step 1: Compute (x1', y1')
    dx = (x1 - x2) / 2
    dy = (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    # Ensure radii are large enough
    lambda_ = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lambda_ > 1:
        rx *= math.sqrt(lambda_)
        ry *= math.sqrt(lambda_)

    # Step 2: Compute (cx', cy')
    denominator = (rx*rx * y1p*y1p) + (ry*ry * x1p*x1p)
    sq = max(0, ((rx*rx * ry*ry) - denominator) / denominator)
    coef = math.sqrt(sq)
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    # Step 3: Compute (cx, cy) from (cx', cy')
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    # Step 4: Compute theta1 and dtheta
    def angle(ux, uy, vx, vy):
        n = math.sqrt(ux*ux + uy*uy) * math.sqrt(vx*vx + vy*vy)
        if n == 0:
            return 0
        c = (ux*vx + uy*vy) / n
        s = ux*vy - uy*vx
        return math.atan2(s, max(-1, min(1, c)))

    theta1 = angle(1, 0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    dtheta = angle((x1p - cxp) / rx, (y1p - cyp) / ry,
                   (-x1p - cxp) / rx, (-y1p - cyp) / ry)

    if sweep == 0 and dtheta > 0:
        dtheta -= 2 * math.pi
    elif sweep == 1 and dtheta < 0:
        dtheta += 2 * math.pi

    # Split arc into segments of max 90 degrees
    segments = max(1, int(math.ceil(abs(dtheta) / (math.pi / 2) - 1e-9)))
    delta = dtheta / segments
    alpha = 4 / 3 * math.tan(delta / 4)

    def to_user_space(px: float, py: float) -> Point:
        x = px * rx
        y = py * ry
        return Point(cos_phi * x - sin_phi * y + cx,
                     sin_phi * x + cos_phi * y + cy)

    curves = []
    for i in range(segments):
        t1 = theta1 + i * delta
        t2 = t1 + delta
        cos1, sin1 = math.cos(t1), math.sin(t1)
        cos2, sin2 = math.cos(t2), math.sin(t2)
        curves.append((
            to_user_space(cos1 - alpha * sin1, sin1 + alpha * cos1),
            to_user_space(cos2 + alpha * sin2, sin2 - alpha * cos2),
            to_user_space(cos2, sin2),
        ))

    # Land exactly on the requested end point
    cp1, cp2, _ = curves[-1]
    curves[-1] = (cp1, cp2, Point(x2, y2))
    return curves


def to_absolute(commands: List[PathCommand]) -> List[PathCommand]:
    """
    Resolve relative and shorthand commands.

    The result only contains absolute M, L, C and Z commands. Z moves the
    cursor back to the start of the current subpath. A drawing command
    right after Z opens a new subpath there, so an explicit M is emitted
    for it.
    """
    absolute: List[PathCommand] = []
    x, y = 0.0, 0.0
    start_x, start_y = 0.0, 0.0
    last_cubic_control: Optional[Point] = None
    last_quad_control: Optional[Point] = None
    after_close = False

    for cmd in commands:
        cmd_upper = cmd.command.upper()
        if after_close and cmd_upper not in ('M', 'Z'):
            absolute.append(PathCommand('M', [x, y]))
        after_close = cmd_upper == 'Z'
        v = cmd.values
        ox, oy = (x, y) if cmd.command.islower() else (0.0, 0.0)
        cubic_control = None
        quad_control = None

        if cmd_upper == 'M':
            x, y = v[0] + ox, v[1] + oy
            start_x, start_y = x, y
            absolute.append(PathCommand('M', [x, y]))

        elif cmd_upper == 'L':
            x, y = v[0] + ox, v[1] + oy
            absolute.append(PathCommand('L', [x, y]))

        elif cmd_upper == 'H':
            x = v[0] + ox
            absolute.append(PathCommand('L', [x, y]))

        elif cmd_upper == 'V':
            y = v[0] + oy
            absolute.append(PathCommand('L', [x, y]))

        elif cmd_upper == 'C':
            cp1 = Point(v[0] + ox, v[1] + oy)
            cp2 = Point(v[2] + ox, v[3] + oy)
            x, y = v[4] + ox, v[5] + oy
            absolute.append(PathCommand('C', [cp1.x, cp1.y, cp2.x, cp2.y, x, y]))
            cubic_control = cp2

        elif cmd_upper == 'S':
            # Reflect the previous second control point about the cursor
            if last_cubic_control is not None:
                cp1 = Point(2 * x - last_cubic_control.x, 2 * y - last_cubic_control.y)
            else:
                cp1 = Point(x, y)
            cp2 = Point(v[0] + ox, v[1] + oy)
            x, y = v[2] + ox, v[3] + oy
            absolute.append(PathCommand('C', [cp1.x, cp1.y, cp2.x, cp2.y, x, y]))
            cubic_control = cp2

        elif cmd_upper in ('Q', 'T'):
            if cmd_upper == 'Q':
                q = Point(v[0] + ox, v[1] + oy)
                end_x, end_y = v[2] + ox, v[3] + oy
            else:
                if last_quad_control is not None:
                    q = Point(2 * x - last_quad_control.x, 2 * y - last_quad_control.y)
                else:
                    q = Point(x, y)
                end_x, end_y = v[0] + ox, v[1] + oy
            # Degree elevation to an equivalent cubic
            cp1x = x + 2 / 3 * (q.x - x)
            cp1y = y + 2 / 3 * (q.y - y)
            cp2x = end_x + 2 / 3 * (q.x - end_x)
            cp2y = end_y + 2 / 3 * (q.y - end_y)
            x, y = end_x, end_y
            absolute.append(PathCommand('C', [cp1x, cp1y, cp2x, cp2y, x, y]))
            quad_control = q

        elif cmd_upper == 'A':
            rx, ry = abs(v[0]), abs(v[1])
            end_x, end_y = v[5] + ox, v[6] + oy
            if abs(end_x - x) < 1e-4 and abs(end_y - y) < 1e-4:
                # Degenerate arc, already at destination
                pass
            elif rx == 0 or ry == 0:
                absolute.append(PathCommand('L', [end_x, end_y]))
            else:
                for cp1, cp2, end in arc_to_bezier(x, y, rx, ry, v[2],
                                                   int(v[3] != 0), int(v[4] != 0),
                                                   end_x, end_y):
                    absolute.append(PathCommand('C', [cp1.x, cp1.y, cp2.x, cp2.y,
                                                      end.x, end.y]))
            x, y = end_x, end_y

        elif cmd_upper == 'Z':
            absolute.append(PathCommand('Z', []))
            x, y = start_x, start_y

        last_cubic_control = cubic_control
        last_quad_control = quad_control

    return absolute


def _same_point(a: Vertex, b: Vertex) -> bool:
    return (abs(a.x - b.x) <= _SAME_POINT_TOLERANCE and
            abs(a.y - b.y) <= _SAME_POINT_TOLERANCE)


def _with_handles(v: Vertex, prev_handle: Optional[Point],
                  next_handle: Optional[Point]) -> Vertex:
    """Set handles, promoting a straight vertex to corner when it gains one."""
    vertex_type = v.vertex_type
    if vertex_type is VertexType.STRAIGHT and (prev_handle or next_handle):
        vertex_type = VertexType.CORNER
    return replace(v, vertex_type=vertex_type,
                   prev_control_handle=prev_handle,
                   next_control_handle=next_handle)


def _close_subpath(points: List[Vertex], start: int) -> None:
    """
    Tie the end of a subpath to its first vertex on Z.

    A final vertex that repeats the first one (an explicit closing
    segment) is merged into it. Otherwise handles are stitched across the
    implicit closing segment: the first vertex's incoming handle fills a
    missing outgoing handle on the last vertex, and vice versa.
    """
    if len(points) - start <= 2:
        return

    first = points[start]
    last = points[-1]
    if _same_point(first, last):
        closing_handle = last.prev_control_handle or first.prev_control_handle
        points[start] = _with_handles(first, closing_handle, first.next_control_handle)
        points.pop()
        return

    if first.prev_control_handle is not None and last.next_control_handle is None:
        last = _with_handles(last, last.prev_control_handle, first.prev_control_handle)
        points[-1] = last
    if last.next_control_handle is not None and first.prev_control_handle is None:
        points[start] = _with_handles(first, last.next_control_handle,
                                      first.next_control_handle)


def _build_vertices(commands: List[PathCommand]) -> List[Vertex]:
    """Walk absolute M/L/C/Z commands and build the vertex list."""
    points: List[Vertex] = []
    subpath_start = 0

    for cmd in commands:
        v = cmd.values
        if cmd.command in ('M', 'L'):
            if cmd.command == 'M':
                subpath_start = len(points)
            points.append(Vertex(v[0], v[1]))

        elif cmd.command == 'C':
            cp1 = Point(v[0], v[1])
            cp2 = Point(v[2], v[3])
            end = Vertex(v[4], v[5])

            # A handle lying on its own anchor does not bend the curve
            if points and (cp1.x, cp1.y) != (points[-1].x, points[-1].y):
                current = points[-1]
                points[-1] = _with_handles(current, current.prev_control_handle, cp1)
            if (cp2.x, cp2.y) != (end.x, end.y):
                end = _with_handles(end, cp2, None)
            points.append(end)

        elif cmd.command == 'Z':
            _close_subpath(points, subpath_start)

    return points


def parse_path_data(d: str) -> List[Vertex]:
    """
    Parse SVG path data into a vertex list.

    Never raises: unusable input yields fewer (possibly zero) vertices,
    and callers should treat fewer than two as "not a shape".
    """
    if not d or not d.strip():
        return []
    return _build_vertices(to_absolute(tokenize_path(d)))


def parse_subpaths(d: str) -> List[Tuple[List[Vertex], bool]]:
    """
    Parse path data into one (vertices, is_closed) pair per subpath.

    Each subpath starts at a moveto; it is closed when it contains Z.
    """
    if not d or not d.strip():
        return []

    groups: List[List[PathCommand]] = []
    for cmd in to_absolute(tokenize_path(d)):
        if cmd.command == 'M' or not groups:
            groups.append([])
        groups[-1].append(cmd)

    return [
        (_build_vertices(group), any(cmd.command == 'Z' for cmd in group))
        for group in groups
    ]


def format_number(value: float) -> str:
    """Shortest exact text for a coordinate; integers print without a decimal point."""
    value = float(value)
    if value == 0:
        return "0"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def _format_point(x: float, y: float) -> str:
    return f"{format_number(x)} {format_number(y)}"


def _segment_command(p1: Vertex, p2: Vertex) -> str:
    """L for straight segments, C when either side has an eligible handle."""
    cp1 = outgoing_handle(p1)
    cp2 = incoming_handle(p2)
    if cp1 is None and cp2 is None:
        return f"L {_format_point(p2.x, p2.y)}"
    if cp1 is None:
        cp1 = p1.anchor
    if cp2 is None:
        cp2 = p2.anchor
    return (f"C {_format_point(cp1.x, cp1.y)}, "
            f"{_format_point(cp2.x, cp2.y)}, "
            f"{_format_point(p2.x, p2.y)}")


def generate_path_data(points: List[Vertex], is_closed: bool) -> str:
    """
    Generate SVG path data for a vertex list.

    Closed shapes with at least three vertices end with Z; a curved
    closing segment is written out explicitly before it.
    """
    if not points:
        return ""

    parts = [f"M {_format_point(points[0].x, points[0].y)}"]
    for p1, p2 in zip(points, points[1:]):
        parts.append(_segment_command(p1, p2))

    if is_closed and len(points) >= 3:
        first = points[0]
        last = points[-1]
        if outgoing_handle(last) is not None or incoming_handle(first) is not None:
            parts.append(_segment_command(last, first))
        parts.append("Z")

    return " ".join(parts)
