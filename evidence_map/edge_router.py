"""
Edge routing for simulation-driven links.

Links connect moving circles, so the drawn segment is trimmed by each node's
radius: it starts on the rim of the source and ends on the rim of the target.
All functions are pure; they only read the coordinates passed in and can be
called on any position snapshot.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional

from evidence_map.bezier import Point, format_coord

DEFAULT_RADIUS = 10.0

# Quadratic arc variant
ARC_BASE_OFFSET = 0.1
ARC_FULL_BEND_DISTANCE = 200.0


class Anchor(NamedTuple):
    """A node centre (None before the simulation has placed it) and its radius."""
    x: Optional[float]
    y: Optional[float]
    radius: float = DEFAULT_RADIUS


@dataclass(frozen=True)
class Segment:
    start: Point
    end: Point
    angle: float

    @property
    def path(self) -> str:
        return (f"M{format_coord(self.start.x)},{format_coord(self.start.y)}"
                f"L{format_coord(self.end.x)},{format_coord(self.end.y)}")


def _is_placed(anchor: Anchor) -> bool:
    return (
        isinstance(anchor.x, (int, float)) and isinstance(anchor.y, (int, float))
        and math.isfinite(anchor.x) and math.isfinite(anchor.y)
    )


def _radius(anchor: Anchor) -> float:
    r = anchor.radius
    return r if isinstance(r, (int, float)) and r > 0 else DEFAULT_RADIUS


def route(source: Anchor, target: Anchor) -> Optional[Segment]:
    """
    Straight segment between two node rims.

    Returns None if either node has no position yet. Coincident centres use
    an angle of 0.
    """
    if not (_is_placed(source) and _is_placed(target)):
        return None

    dx = target.x - source.x
    dy = target.y - source.y
    angle = math.atan2(dy, dx) if (dx or dy) else 0.0
    cos_a, sin_a = math.cos(angle), math.sin(angle)

    r_source = _radius(source)
    r_target = _radius(target)
    start = Point(source.x + r_source * cos_a, source.y + r_source * sin_a)
    end = Point(target.x - r_target * cos_a, target.y - r_target * sin_a)
    return Segment(start=start, end=end, angle=angle)


def route_path(source: Anchor, target: Anchor) -> str:
    segment = route(source, target)
    return segment.path if segment else ''


def arc_path(source: Anchor, target: Anchor) -> str:
    """
    Gently bowed quadratic path between node centres.

    Short links stay nearly straight; the bend grows with length up to 10%
    of the distance.
    """
    if not (_is_placed(source) and _is_placed(target)):
        return ''

    sx, sy = format_coord(source.x), format_coord(source.y)
    tx, ty = format_coord(target.x), format_coord(target.y)
    dx = target.x - source.x
    dy = target.y - source.y
    dr = math.hypot(dx, dy)
    if dr == 0:
        return f"M{sx},{sy}L{tx},{ty}"

    offset = dr * ARC_BASE_OFFSET * min(1.0, dr / ARC_FULL_BEND_DISTANCE)
    mid_x = (source.x + target.x) / 2
    mid_y = (source.y + target.y) / 2
    ctrl_x = mid_x - (dy * offset) / dr
    ctrl_y = mid_y + (dx * offset) / dr
    return f"M{sx},{sy} Q{format_coord(ctrl_x)},{format_coord(ctrl_y)} {tx},{ty}"
