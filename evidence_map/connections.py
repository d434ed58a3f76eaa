"""
Curvature-driven connections between fixed nodes.

Unlike the simulated map, here nodes are placed by hand and every connection
carries its own curvature (-40 to 40). The geometry is a cubic Bézier from
evidence_map.bezier; labels sit at the middle of the curve and are rotated to
read along it.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from evidence_map.bezier import LabelGeometry, curved_path, label_geometry

DEFAULT_STROKE = ('#666666', 2.0)
SELECTED_STROKE = ('#007AFF', 3.0)


@dataclass(frozen=True)
class Connection:
    id: str
    source_id: str
    target_id: str
    curvature: float = 0.0
    label: Optional[str] = None
    type: Optional[str] = None


@dataclass(frozen=True)
class ConnectionGeometry:
    id: str
    path: str
    stroke_color: str
    stroke_width: float
    label: Optional[LabelGeometry] = None


def connection_geometry(connection: Connection, source: Tuple[float, float],
                        target: Tuple[float, float], selected: bool = False) -> ConnectionGeometry:
    curve = curved_path(source, target, connection.curvature)
    stroke_color, stroke_width = SELECTED_STROKE if selected else DEFAULT_STROKE
    label = None
    if connection.label:
        label = label_geometry(connection.label, source, target, connection.curvature)
    return ConnectionGeometry(
        id=connection.id,
        path=curve.path,
        stroke_color=stroke_color,
        stroke_width=stroke_width,
        label=label,
    )


@dataclass(frozen=True)
class PlacedNode:
    id: str
    x: float
    y: float
    label: str


DEMO_NODES = (
    PlacedNode('1', 100, 100, 'Node 1'),
    PlacedNode('2', 300, 100, 'Node 2'),
    PlacedNode('3', 200, 300, 'Node 3'),
)

DEMO_CONNECTIONS = (
    Connection('conn1', '1', '2', curvature=20, label='Curved Right'),
    Connection('conn2', '2', '3', curvature=-15, label='Curved Left'),
    Connection('conn3', '3', '1', curvature=0, label='Straight'),
)


def layout_connections(nodes, connections, selected_id: Optional[str] = None) -> List[ConnectionGeometry]:
    """Geometry for every connection whose endpoints are both placed."""
    by_id = {n.id: n for n in nodes}
    result = []
    for connection in connections:
        source = by_id.get(connection.source_id)
        target = by_id.get(connection.target_id)
        if source is None or target is None:
            continue
        result.append(connection_geometry(
            connection, (source.x, source.y), (target.x, target.y),
            selected=connection.id == selected_id,
        ))
    return result
