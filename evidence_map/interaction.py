"""
Interaction Controller - single source of truth for hover, selection and drag.

The render layer forwards pointer events here as plain method calls:
- pointer enter/leave on a node or link -> hover_node / hover_link / clear_hover
- click on a link -> select_link (toggles)
- pointer down/move/up on a node -> drag_start / drag_move / drag_end

Hover, selection and drag are independent axes. Dragging pins the node in the
simulation and reheats it; the pin follows the pointer until the drag ends.

Events naming ids that are not in the current graph (e.g. delivered after a
rebuild) are ignored.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, FrozenSet, Optional

from evidence_map.graph_builder import Graph
from evidence_map.simulation import ForceSimulationEngine

logger = logging.getLogger(__name__)

HOVER_NODE = 'node'
HOVER_LINK = 'link'


@dataclass(frozen=True)
class InteractionState:
    """Immutable snapshot of the current interaction state."""
    hovered_id: Optional[str] = None
    hovered_kind: Optional[str] = None
    selected_id: Optional[str] = None
    dragging_id: Optional[str] = None
    connected: FrozenSet[str] = frozenset()
    active_links: FrozenSet[str] = frozenset()

    @property
    def is_hovering(self) -> bool:
        return self.hovered_id is not None


class InteractionController:
    """Manages hover/selection/drag state on top of a running simulation."""

    def __init__(self, graph: Graph, engine: ForceSimulationEngine):
        self._graph = graph
        self._engine = engine
        self._state = InteractionState()
        self._on_state_change: Optional[Callable[[InteractionState], None]] = None

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def graph(self) -> Graph:
        return self._graph

    def set_on_state_change(self, callback: Optional[Callable[[InteractionState], None]]):
        self._on_state_change = callback

    def rebind(self, graph: Graph, engine: ForceSimulationEngine) -> InteractionState:
        """Attach to a rebuilt graph; hover, selection and drag start over."""
        self._graph = graph
        self._engine = engine
        self._set_state(InteractionState())
        return self._state

    # --- Hover ---

    def hover_node(self, node_id: str) -> InteractionState:
        if not self._graph.has_node(node_id):
            logger.debug(f"hover_node ignored for unknown node {node_id}")
            return self._state
        connected = frozenset({node_id} | self._graph.neighbors(node_id))
        active = frozenset(
            l.id for l in self._graph.links
            if l.source_id in connected and l.target_id in connected
        )
        self._set_state(replace(
            self._state, hovered_id=node_id, hovered_kind=HOVER_NODE,
            connected=connected, active_links=active,
        ))
        return self._state

    def hover_link(self, link_id: str) -> InteractionState:
        link = self._graph.link(link_id)
        if link is None:
            logger.debug(f"hover_link ignored for unknown link {link_id}")
            return self._state
        self._set_state(replace(
            self._state, hovered_id=link_id, hovered_kind=HOVER_LINK,
            connected=frozenset({link.source_id, link.target_id}),
            active_links=frozenset({link_id}),
        ))
        return self._state

    def clear_hover(self) -> InteractionState:
        if not self._state.is_hovering:
            return self._state
        self._set_state(replace(
            self._state, hovered_id=None, hovered_kind=None,
            connected=frozenset(), active_links=frozenset(),
        ))
        return self._state

    def is_node_dimmed(self, node_id: str) -> bool:
        return self._state.is_hovering and node_id not in self._state.connected

    def is_link_active(self, link_id: str) -> bool:
        return self._state.is_hovering and link_id in self._state.active_links

    def is_link_dimmed(self, link_id: str) -> bool:
        return self._state.is_hovering and link_id not in self._state.active_links

    # --- Selection ---

    def select_link(self, link_id: str) -> InteractionState:
        """Toggle selection of a link."""
        if not self._graph.has_link(link_id):
            logger.debug(f"select_link ignored for unknown link {link_id}")
            return self._state
        selected = None if self._state.selected_id == link_id else link_id
        self._set_state(replace(self._state, selected_id=selected))
        return self._state

    def clear_selection(self) -> InteractionState:
        if self._state.selected_id is None:
            return self._state
        self._set_state(replace(self._state, selected_id=None))
        return self._state

    # --- Drag ---

    def drag_start(self, node_id: str) -> InteractionState:
        position = self._engine.position(node_id)
        if position is None or not self._graph.has_node(node_id):
            logger.debug(f"drag_start ignored for unknown node {node_id}")
            return self._state
        if self._state.dragging_id and self._state.dragging_id != node_id:
            self._engine.unpin(self._state.dragging_id)

        self._engine.set_alpha_target(self._engine.settings.drag_alpha_target)
        self._engine.restart()
        self._engine.pin(node_id, position.x, position.y)
        self._set_state(replace(self._state, dragging_id=node_id))
        return self._state

    def drag_move(self, node_id: str, x: float, y: float) -> InteractionState:
        if node_id != self._state.dragging_id:
            logger.debug(f"drag_move ignored for {node_id} (dragging {self._state.dragging_id})")
            return self._state
        if self._engine.pin(node_id, x, y):
            # Position changed without a state change; listeners still need to repaint
            self._notify_change()
        return self._state

    def drag_end(self, node_id: str) -> InteractionState:
        if node_id != self._state.dragging_id:
            logger.debug(f"drag_end ignored for {node_id} (dragging {self._state.dragging_id})")
            return self._state
        self._engine.set_alpha_target(0.0)
        self._engine.unpin(node_id)
        self._set_state(replace(self._state, dragging_id=None))
        return self._state

    # --- Internals ---

    def _set_state(self, new_state: InteractionState) -> None:
        self._state = new_state
        self._notify_change()

    def _notify_change(self):
        if self._on_state_change:
            self._on_state_change(self._state)
