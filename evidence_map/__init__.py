"""
Layout and interaction engine for the evidence map.

This package turns a map export into an interactive force-directed diagram:
- build_graph: raw elements/connections -> filtered Graph
- ForceSimulationEngine: tick-by-tick layout with pins and reheating
- InteractionController: hover, link selection and drag state
- build_frame / to_echart_options: per-tick render output
- LayoutSession: ties the above to a tick scheduler

Usage:
    from evidence_map import LayoutSession, ManualScheduler
    session = LayoutSession(ManualScheduler(), seed=7)
    session.load(data)
"""

from evidence_map.graph_builder import (
    BuildResult,
    Graph,
    GraphDataError,
    Link,
    Node,
    build_graph,
)
from evidence_map.simulation import ForceSimulationEngine, SimulationSettings, SimulationSnapshot
from evidence_map.interaction import InteractionController, InteractionState
from evidence_map.render import RenderFrame, Viewport, build_frame, to_echart_options
from evidence_map.scheduler import ManualScheduler, TimerScheduler
from evidence_map.session import LayoutSession

__all__ = [
    'BuildResult',
    'Graph',
    'GraphDataError',
    'Link',
    'Node',
    'build_graph',
    'ForceSimulationEngine',
    'SimulationSettings',
    'SimulationSnapshot',
    'InteractionController',
    'InteractionState',
    'RenderFrame',
    'Viewport',
    'build_frame',
    'to_echart_options',
    'ManualScheduler',
    'TimerScheduler',
    'LayoutSession',
]
