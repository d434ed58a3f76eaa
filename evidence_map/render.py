"""
Render output for the evidence map.

build_frame() turns the current graph, a simulation snapshot and the
interaction state into an immutable RenderFrame: what to draw for every
visible node, link and link label. Any renderer can consume a frame;
to_echart_options() converts one into the ECharts graph series used by the
NiceGUI page.

Pan/zoom lives in Viewport and only affects screen coordinates, never the
simulation.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from evidence_map import constants
from evidence_map.bezier import Point, curved_path, label_geometry
from evidence_map.categories import (
    LINK_COLOR,
    SELECTED_LINK_COLOR,
    SELECTED_LINK_WIDTH,
    link_stroke_width,
    style_for,
)
from evidence_map.edge_router import Anchor, arc_path, route
from evidence_map.graph_builder import Graph
from evidence_map.interaction import HOVER_LINK, HOVER_NODE, InteractionState
from evidence_map.simulation import SimulationSnapshot

EDGE_STYLES = ('straight', 'arc', 'curved')

# Event keys we request from ECharts pointer events
REQUESTED_EVENT_KEYS = ['componentType', 'dataType', 'name', 'value']

_NODE_STROKE = ('#ffffff', 1.5)
_NODE_STROKE_EMPHASIS = ('#000000', 2.0)


@dataclass(frozen=True)
class NodeView:
    id: str
    label: str
    x: float
    y: float
    radius: float
    fill_color: str
    opacity: float
    stroke_emphasis: bool
    stroke_color: str
    stroke_width: float
    label_font_size: int
    label_offset: float


@dataclass(frozen=True)
class LinkView:
    id: str
    source_id: str
    target_id: str
    path: str
    start: Point
    end: Point
    stroke_width: float
    opacity: float
    stroke_emphasis: bool
    stroke_color: str


@dataclass(frozen=True)
class LabelView:
    text: str
    x: float
    y: float
    rotation_degrees: float


@dataclass(frozen=True)
class RenderFrame:
    tick: int
    alpha: float
    nodes: Tuple[NodeView, ...] = ()
    links: Tuple[LinkView, ...] = ()
    labels: Tuple[LabelView, ...] = ()

    def node(self, node_id: str) -> Optional[NodeView]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def link(self, link_id: str) -> Optional[LinkView]:
        return next((l for l in self.links if l.id == link_id), None)


def _node_opacity(node_id: str, state: InteractionState) -> float:
    if state.is_hovering and node_id not in state.connected:
        return constants.NODE_DIMMED_OPACITY
    return 1.0


def _link_opacity(link_id: str, state: InteractionState) -> float:
    if not state.is_hovering:
        return constants.LINK_BASE_OPACITY
    if link_id not in state.active_links:
        return constants.LINK_DIMMED_OPACITY
    if state.hovered_kind == HOVER_LINK:
        return constants.LINK_HOVERED_OPACITY
    return constants.LINK_ACTIVE_OPACITY


def build_frame(graph: Graph, snapshot: SimulationSnapshot, state: InteractionState,
                edge_style: str = 'straight') -> RenderFrame:
    """
    Build the render output for one tick.

    Nodes without a position are skipped, and so are links touching them.
    """
    if edge_style not in EDGE_STYLES:
        raise ValueError(f"Unknown edge style {edge_style!r}; expected one of {EDGE_STYLES}")

    nodes: List[NodeView] = []
    anchors: Dict[str, Anchor] = {}
    for node in graph.nodes:
        pos = snapshot.position(node.id)
        if pos is None:
            continue
        style = style_for(node.category)
        hovered = state.hovered_kind == HOVER_NODE and state.hovered_id == node.id
        stroke_color, stroke_width = _NODE_STROKE_EMPHASIS if hovered else _NODE_STROKE
        radius = node.radius * constants.HOVER_RADIUS_SCALE if hovered else node.radius
        anchors[node.id] = Anchor(pos.x, pos.y, node.radius)
        nodes.append(NodeView(
            id=node.id,
            label=node.label,
            x=pos.x,
            y=pos.y,
            radius=radius,
            fill_color=node.color,
            opacity=_node_opacity(node.id, state),
            stroke_emphasis=hovered,
            stroke_color=stroke_color,
            stroke_width=stroke_width,
            label_font_size=style.label_font_size,
            label_offset=style.label_offset,
        ))

    links: List[LinkView] = []
    labels: List[LabelView] = []
    for link in graph.links:
        source = anchors.get(link.source_id)
        target = anchors.get(link.target_id)
        if source is None or target is None:
            continue
        segment = route(source, target)
        if segment is None:
            continue

        curvature = link.curvature if edge_style == 'curved' else 0.0
        if edge_style == 'arc':
            path = arc_path(source, target)
        elif edge_style == 'curved':
            path = curved_path(segment.start, segment.end, curvature).path
        else:
            path = segment.path

        selected = state.selected_id == link.id
        hovered = state.hovered_kind == HOVER_LINK and state.hovered_id == link.id
        if selected:
            width, color = SELECTED_LINK_WIDTH, SELECTED_LINK_COLOR
        else:
            width, color = link_stroke_width(link.category, emphasized=hovered), LINK_COLOR

        links.append(LinkView(
            id=link.id,
            source_id=link.source_id,
            target_id=link.target_id,
            path=path,
            start=segment.start,
            end=segment.end,
            stroke_width=width,
            opacity=_link_opacity(link.id, state),
            stroke_emphasis=selected or hovered,
            stroke_color=color,
        ))

        if link.label:
            geometry = label_geometry(link.label, segment.start, segment.end, curvature)
            labels.append(LabelView(geometry.text, geometry.x, geometry.y, geometry.rotation_degrees))

    return RenderFrame(
        tick=snapshot.tick,
        alpha=snapshot.alpha,
        nodes=tuple(nodes),
        links=tuple(links),
        labels=tuple(labels),
    )


class Viewport:
    """
    Pan/zoom transform from world (simulation) coordinates to screen pixels:
    screen = world * scale + (tx, ty).
    """

    def __init__(self, width: float = constants.CHART_WIDTH, height: float = constants.CHART_HEIGHT,
                 scale: float = constants.INITIAL_ZOOM):
        self.width = width
        self.height = height
        self.scale = self._clamp(scale)
        # Zoom about the viewport centre
        self.tx = width / 2 * (1 - self.scale)
        self.ty = height / 2 * (1 - self.scale)

    @staticmethod
    def _clamp(scale: float) -> float:
        return max(constants.MIN_ZOOM, min(constants.MAX_ZOOM, scale))

    def to_screen(self, x: float, y: float) -> Point:
        return Point(x * self.scale + self.tx, y * self.scale + self.ty)

    def to_world(self, sx: float, sy: float) -> Point:
        return Point((sx - self.tx) / self.scale, (sy - self.ty) / self.scale)

    @property
    def center(self) -> Point:
        """World point shown at the middle of the viewport."""
        return self.to_world(self.width / 2, self.height / 2)

    def pan(self, dx: float, dy: float) -> None:
        self.tx += dx
        self.ty += dy

    def zoom_at(self, factor: float, sx: float, sy: float) -> None:
        """Zoom by factor keeping the screen point (sx, sy) fixed."""
        anchor = self.to_world(sx, sy)
        self.scale = self._clamp(self.scale * factor)
        self.tx = sx - anchor.x * self.scale
        self.ty = sy - anchor.y * self.scale


def to_echart_options(frame: RenderFrame, viewport: Optional[Viewport] = None,
                      background_color: str = '#ffffff') -> Dict[str, Any]:
    """
    Build ECharts options from a render frame.

    Positions come from the simulation, so the series uses layout 'none' and
    ECharts only paints. ECharts draws links centre to centre; the trimmed
    paths in the frame are for renderers that draw their own edges.
    """
    if viewport is None:
        viewport = Viewport()
    e_nodes = []
    for n in frame.nodes:
        e_nodes.append({
            'id': n.id,
            'name': n.id,
            'value': n.label,
            'x': n.x,
            'y': n.y,
            'symbol': 'circle',
            'symbolSize': n.radius * 2,
            'itemStyle': {
                'color': n.fill_color,
                'opacity': n.opacity,
                'borderColor': n.stroke_color,
                'borderWidth': n.stroke_width,
            },
            'label': {
                'show': True,
                'formatter': n.label,
                'position': 'right',
                'distance': n.label_offset - n.radius,
                'fontSize': n.label_font_size,
                'color': '#000000',
                'opacity': n.opacity,
                'textBorderColor': '#ffffff',
                'textBorderWidth': 4,
            },
            'tooltip': {'formatter': n.label},
        })

    e_links = []
    for l in frame.links:
        e_links.append({
            'id': l.id,
            'name': l.id,
            'source': l.source_id,
            'target': l.target_id,
            'lineStyle': {
                'color': l.stroke_color,
                'width': l.stroke_width,
                'opacity': l.opacity,
                'curveness': 0,
            },
            'symbol': ['none', 'arrow'],
            'symbolSize': 6,
            'tooltip': {'show': False},
        })

    return {
        'backgroundColor': background_color,
        'tooltip': {},
        'animation': False,
        'series': [{
            'type': 'graph',
            'layout': 'none',
            'roam': True,
            # A press on a node starts a drag, not a pan
            'draggable': True,
            'scaleLimit': {'min': constants.MIN_ZOOM, 'max': constants.MAX_ZOOM},
            'zoom': viewport.scale,
            'center': [viewport.center.x, viewport.center.y],
            'data': e_nodes,
            'links': e_links,
        }],
    }


def normalize_event_payload(raw_payload: Any) -> Dict[str, Any]:
    """Normalize NiceGUI chart event payloads into a dictionary for easier parsing."""
    if isinstance(raw_payload, dict):
        return raw_payload
    if isinstance(raw_payload, (list, tuple)):
        return {
            REQUESTED_EVENT_KEYS[i]: raw_payload[i]
            for i in range(min(len(raw_payload), len(REQUESTED_EVENT_KEYS)))
        }
    if isinstance(raw_payload, str):
        return {'name': raw_payload}
    return {}


def resolve_target(payload: Dict[str, Any], graph: Graph) -> Tuple[Optional[str], Optional[str]]:
    """
    Return (kind, id) for a normalized payload, where kind is 'node' or 'link'.
    (None, None) when the payload does not point at something in the graph.
    """
    if not isinstance(payload, dict):
        return None, None
    if payload.get('componentType') not in (None, 'series'):
        return None, None

    target_id = payload.get('name')
    if not target_id:
        return None, None

    data_type = payload.get('dataType')
    if data_type in (None, 'node') and graph.has_node(target_id):
        return HOVER_NODE, target_id
    if data_type in (None, 'edge') and graph.has_link(target_id):
        return HOVER_LINK, target_id
    return None, None

