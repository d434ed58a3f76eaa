"""
Main NiceGUI application for the evidence map.

Loads the configured map export, lays it out with the force simulation and
renders every tick with ui.echart. Pointer events from the chart are turned
into hover, link selection and node drag calls on the session's controller.

A second page (/curves) shows the curvature-driven connection variant on
hand-placed nodes.
"""

import base64
import html
import logging
import sys

from dotenv import load_dotenv
from nicegui import ui

from evidence_map.config import get_map_settings, get_simulation_settings
from evidence_map.connections import DEMO_CONNECTIONS, DEMO_NODES, layout_connections
from evidence_map.data_loader import load_map_file
from evidence_map.graph_builder import GraphDataError
from evidence_map.interaction import HOVER_LINK, HOVER_NODE
from evidence_map.render import (
    REQUESTED_EVENT_KEYS,
    Viewport,
    normalize_event_payload,
    resolve_target,
    to_echart_options,
)
from evidence_map.scheduler import TimerScheduler
from evidence_map.session import LayoutSession

load_dotenv()

POINTER_EVENT = 'evidence_map_pointer'
RELEASE_EVENT = 'evidence_map_release'
DEMO_NODE_RADIUS = 20
DEMO_CANVAS_SIZE = 400


@ui.page('/')
def index():
    map_settings = get_map_settings()
    print(f"[EvidenceMap] Data: {map_settings.data_path} (seed={map_settings.seed})")

    try:
        data = load_map_file(map_settings.data_path)
    except GraphDataError as e:
        print(f"[EvidenceMap] Error loading data: {e}")
        ui.label(f'Could not load map data: {e}').classes('text-negative m-4')
        return

    session = LayoutSession(
        TimerScheduler(map_settings.tick_interval),
        settings=get_simulation_settings(),
        width=map_settings.width,
        height=map_settings.height,
        seed=map_settings.seed,
        warm_start_ticks=map_settings.warm_start_ticks,
        edge_style=map_settings.edge_style,
    )
    controller = session.interaction

    viewport = Viewport(map_settings.width, map_settings.height)
    chart = ui.echart(to_echart_options(session.frame(), viewport))
    chart.style('width: 100vw; height: 100vh; position: absolute; top: 0; left: 0; z-index: 0;')

    def render(frame):
        # Only swap series content so the user's pan/zoom survives updates
        series = to_echart_options(frame)['series'][0]
        chart.options['series'][0]['data'] = series['data']
        chart.options['series'][0]['links'] = series['links']
        chart.update()

    session.add_listener(render)

    try:
        result = session.load(data)
    except GraphDataError as e:
        print(f"[EvidenceMap] Invalid map data: {e}")
        ui.label(f'Invalid map data: {e}').classes('text-negative m-4')
        session.close()
        return
    print(f"[EvidenceMap] Graph: {len(result.graph.nodes)} nodes, {len(result.graph.links)} links "
          f"({result.dropped_links} dropped)")

    def target_of(event):
        raw_payload = event.args if hasattr(event, 'args') else event
        return resolve_target(normalize_event_payload(raw_payload), session.graph)

    def handle_mouse_over(event):
        kind, target_id = target_of(event)
        if kind == HOVER_NODE:
            controller.hover_node(target_id)
        elif kind == HOVER_LINK:
            controller.hover_link(target_id)

    def handle_mouse_out(event):
        controller.clear_hover()

    def handle_click(event):
        kind, target_id = target_of(event)
        if kind == HOVER_LINK:
            controller.select_link(target_id)

    def handle_mouse_down(event):
        kind, target_id = target_of(event)
        if kind == HOVER_NODE:
            controller.drag_start(target_id)

    def handle_pointer(event):
        dragging = controller.state.dragging_id
        args = event.args or {}
        if dragging is None or 'x' not in args or 'y' not in args:
            return
        controller.drag_move(dragging, float(args['x']), float(args['y']))

    def handle_release(event):
        dragging = controller.state.dragging_id
        if dragging is not None:
            controller.drag_end(dragging)

    chart.on('mouseover', handle_mouse_over, REQUESTED_EVENT_KEYS)
    chart.on('mouseout', handle_mouse_out, REQUESTED_EVENT_KEYS)
    chart.on('click', handle_click, REQUESTED_EVENT_KEYS)
    chart.on('mousedown', handle_mouse_down, REQUESTED_EVENT_KEYS)
    ui.on(POINTER_EVENT, handle_pointer)
    ui.on(RELEASE_EVENT, handle_release)

    # ECharts component events carry no coordinates; listen on the zrender layer
    # and convert pixels to simulation coordinates while a node is held.
    ui.run_javascript(f'''
        setTimeout(function() {{
            const component = getElement({chart.id});
            if (!component || !component.chart) {{
                console.log('EvidenceMap: chart not ready');
                return;
            }}
            const chart = component.chart;
            const zr = chart.getZr();
            let holding = false;
            zr.on('mousedown', function(ev) {{ holding = !!ev.target; }});
            zr.on('mousemove', function(ev) {{
                if (!holding) return;
                const p = chart.convertFromPixel({{seriesIndex: 0}}, [ev.offsetX, ev.offsetY]);
                if (p) emitEvent('{POINTER_EVENT}', {{x: p[0], y: p[1]}});
            }});
            zr.on('mouseup', function() {{
                if (!holding) return;
                holding = false;
                emitEvent('{RELEASE_EVENT}', {{}});
            }});
        }}, 500);
    ''')

    ui.context.client.on_disconnect(session.close)

    with ui.row().classes('fixed top-4 left-4 z-10 bg-white/90 p-3 rounded shadow-md items-center gap-2'):
        ui.icon('hub', size='md').classes('text-primary')
        with ui.column().classes('gap-0'):
            ui.label('Evidence Map').classes('text-lg font-bold leading-none')
            ui.label('Systems view').classes('text-xs text-gray-500 leading-none')
        ui.link('Curved connections', '/curves').classes('text-xs')


def render_curves_svg(selected_id=None) -> str:
    parts = []
    for geometry in layout_connections(DEMO_NODES, DEMO_CONNECTIONS, selected_id):
        parts.append(
            f'<path id="{html.escape(geometry.id)}" d="{geometry.path}" fill="none" '
            f'stroke="{geometry.stroke_color}" stroke-width="{geometry.stroke_width}" '
            f'pointer-events="stroke" cursor="pointer" />'
        )
        label = geometry.label
        if label is not None:
            parts.append(
                f'<text x="{label.x}" y="{label.y}" '
                f'transform="rotate({label.rotation_degrees} {label.x} {label.y})" '
                f'text-anchor="middle" dy="-5" font-size="12" fill="#666666">'
                f'{html.escape(label.text)}</text>'
            )
    for node in DEMO_NODES:
        parts.append(
            f'<g transform="translate({node.x},{node.y})">'
            f'<circle r="{DEMO_NODE_RADIUS}" fill="white" stroke="#333" stroke-width="2" />'
            f'<text text-anchor="middle" dominant-baseline="middle" font-size="12" fill="#333">'
            f'{html.escape(node.label)}</text></g>'
        )
    return ''.join(parts)


@ui.page('/curves')
def curves():
    state = {'selected_id': None}

    ui.label('Curved Connections').classes('text-2xl font-bold m-4')
    blank = (f'<svg xmlns="http://www.w3.org/2000/svg" width="{DEMO_CANVAS_SIZE}" '
             f'height="{DEMO_CANVAS_SIZE}"/>')
    source = 'data:image/svg+xml;base64,' + base64.b64encode(blank.encode()).decode()
    canvas = ui.interactive_image(source, content=render_curves_svg()).classes('border m-4')

    def handle_select(event):
        connection_id = (event.args or {}).get('element_id')
        if not connection_id:
            return
        state['selected_id'] = None if state['selected_id'] == connection_id else connection_id
        canvas.content = render_curves_svg(state['selected_id'])

    canvas.on('svg:pointerdown', handle_select)

    with ui.column().classes('m-4 gap-1'):
        ui.label('Instructions:').classes('text-lg font-semibold')
        ui.label('Click on a connection to select it')
        ui.label('Notice how different curvature values affect the path')
        ui.label('Labels automatically follow the curve direction')


if __name__ in {"__main__", "__mp_main__"}:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')
    ui.run(
        title='Evidence Map',
        port=8081,
        reload=not getattr(sys, 'frozen', False),
    )
