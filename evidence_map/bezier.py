"""
Cubic Bézier geometry for curvature-driven connections.

A connection's curvature (-40 to 40) bends the straight segment between its
endpoints: both control points sit at 1/3 and 2/3 along the segment and are
pushed sideways by distance * curvature / 100. The helpers here evaluate the
curve and its direction so labels can be anchored on the curve and rotated
to read along it.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Tuple

from evidence_map.constants import CURVATURE_LIMIT


class Point(NamedTuple):
    x: float
    y: float


ControlPoints = Tuple[Point, Point]


@dataclass(frozen=True)
class CurvedPath:
    path: str
    control_points: ControlPoints
    degenerate: bool = False


@dataclass(frozen=True)
class LabelGeometry:
    text: str
    x: float
    y: float
    rotation_degrees: float


def format_coord(value: float) -> str:
    """Compact coordinate formatting for path strings (3 decimals, no trailing zeros)."""
    text = f"{value:.3f}".rstrip('0').rstrip('.')
    return '0' if text in ('', '-0') else text


def clamp_curvature(curvature: float) -> float:
    return max(-CURVATURE_LIMIT, min(CURVATURE_LIMIT, float(curvature)))


def curved_path(start: Tuple[float, float], end: Tuple[float, float], curvature: float) -> CurvedPath:
    """
    Build a cubic Bézier path between start and end.

    Curvature outside [-40, 40] is clamped. Positive values bend the curve to
    the left of the start->end direction (in screen coordinates, y down).
    A zero-length segment has no perpendicular; it yields a stub path with
    both control points on start and degenerate=True.
    """
    start, end = Point(*start), Point(*end)
    dx = end.x - start.x
    dy = end.y - start.y
    distance = math.hypot(dx, dy)

    if distance == 0:
        sx, sy = format_coord(start.x), format_coord(start.y)
        return CurvedPath(
            path=f"M {sx},{sy} L {sx},{sy}",
            control_points=(start, start),
            degenerate=True,
        )

    offset = distance * (clamp_curvature(curvature) / 100)
    perp_x = -dy / distance
    perp_y = dx / distance

    cp1 = Point(start.x + dx / 3 + perp_x * offset, start.y + dy / 3 + perp_y * offset)
    cp2 = Point(start.x + 2 * dx / 3 + perp_x * offset, start.y + 2 * dy / 3 + perp_y * offset)

    path = (
        f"M {format_coord(start.x)},{format_coord(start.y)} "
        f"C {format_coord(cp1.x)},{format_coord(cp1.y)} "
        f"{format_coord(cp2.x)},{format_coord(cp2.y)} "
        f"{format_coord(end.x)},{format_coord(end.y)}"
    )
    return CurvedPath(path=path, control_points=(cp1, cp2))


def point_at(start: Tuple[float, float], end: Tuple[float, float],
             control_points: ControlPoints, t: float) -> Point:
    """Evaluate the cubic curve at t (clamped to [0, 1])."""
    t = max(0.0, min(1.0, t))
    (c1x, c1y), (c2x, c2y) = control_points
    t_inv = 1 - t
    t_inv2 = t_inv * t_inv
    t_inv3 = t_inv2 * t_inv
    t2 = t * t
    t3 = t2 * t
    return Point(
        t_inv3 * start[0] + 3 * t_inv2 * t * c1x + 3 * t_inv * t2 * c2x + t3 * end[0],
        t_inv3 * start[1] + 3 * t_inv2 * t * c1y + 3 * t_inv * t2 * c2y + t3 * end[1],
    )


def tangent_angle(start: Tuple[float, float], end: Tuple[float, float],
                  control_points: ControlPoints, t: float) -> float:
    """Direction of the curve at t, in radians. 0 when the derivative vanishes."""
    t = max(0.0, min(1.0, t))
    (c1x, c1y), (c2x, c2y) = control_points
    t_inv = 1 - t
    t_inv2 = t_inv * t_inv
    t2 = t * t

    dx = (-3 * t_inv2 * start[0] + (3 * t_inv2 - 6 * t * t_inv) * c1x
          + (6 * t * t_inv - 3 * t2) * c2x + 3 * t2 * end[0])
    dy = (-3 * t_inv2 * start[1] + (3 * t_inv2 - 6 * t * t_inv) * c1y
          + (6 * t * t_inv - 3 * t2) * c2y + 3 * t2 * end[1])

    if dx == 0 and dy == 0:
        return 0.0
    return math.atan2(dy, dx)


def tangent_angle_degrees(start: Tuple[float, float], end: Tuple[float, float],
                          control_points: ControlPoints, t: float) -> float:
    return tangent_angle(start, end, control_points, t) * 180 / math.pi


def label_geometry(text: str, start: Tuple[float, float], end: Tuple[float, float],
                   curvature: float, t: float = 0.5) -> LabelGeometry:
    """Anchor point and rotation for a label placed on the curve at t."""
    curve = curved_path(start, end, curvature)
    if curve.degenerate:
        return LabelGeometry(text=text, x=float(start[0]), y=float(start[1]), rotation_degrees=0.0)
    anchor = point_at(start, end, curve.control_points, t)
    rotation = tangent_angle_degrees(start, end, curve.control_points, t)
    return LabelGeometry(text=text, x=anchor.x, y=anchor.y, rotation_degrees=rotation)
