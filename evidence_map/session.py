"""
Layout session: ties graph, simulation, interaction and tick scheduling together.

A session owns exactly one live graph at a time. Loading new data swaps the
graph, the engine and the controller binding in one step; ticks scheduled for
the previous graph are cancelled and any callback that still fires for an old
generation returns without touching anything.

Listeners receive a RenderFrame after every tick and after every interaction
change (so a drag move is visible before the next tick).
"""

import logging
from typing import Any, Callable, List, Mapping, Optional

from evidence_map import constants
from evidence_map.graph_builder import BuildResult, Graph, build_graph
from evidence_map.interaction import InteractionController, InteractionState
from evidence_map.render import RenderFrame, build_frame
from evidence_map.scheduler import TickScheduler
from evidence_map.simulation import ForceSimulationEngine, SimulationSettings

logger = logging.getLogger(__name__)

FrameListener = Callable[[RenderFrame], None]


class LayoutSession:
    def __init__(
        self,
        scheduler: TickScheduler,
        settings: Optional[SimulationSettings] = None,
        width: float = constants.CHART_WIDTH,
        height: float = constants.CHART_HEIGHT,
        seed: Optional[int] = None,
        warm_start_ticks: int = constants.WARM_START_TICKS,
        edge_style: str = 'straight',
        initial_layout: str = 'random',
    ):
        self._scheduler = scheduler
        self.warm_start_ticks = warm_start_ticks
        self.edge_style = edge_style
        self.generation = 0
        self.last_build: Optional[BuildResult] = None
        self._listeners: List[FrameListener] = []
        self._closed = False

        self.graph = Graph()
        self.engine = ForceSimulationEngine(
            self.graph, width=width, height=height, settings=settings,
            seed=seed, initial_layout=initial_layout,
        )
        self.interaction = InteractionController(self.graph, self.engine)
        self.interaction.set_on_state_change(self._on_interaction)

    # --- Listeners ---

    def add_listener(self, listener: FrameListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FrameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def frame(self) -> RenderFrame:
        return build_frame(self.graph, self.engine.snapshot(), self.interaction.state, self.edge_style)

    def _publish(self) -> None:
        if not self._listeners:
            return
        frame = self.frame()
        for listener in list(self._listeners):
            listener(frame)

    # --- Lifecycle ---

    def load(self, data: Mapping[str, Any]) -> BuildResult:
        """
        Replace the running graph with one built from raw map data.

        The new graph is built before anything is torn down, so a GraphDataError
        leaves the current session running unchanged.
        """
        if self._closed:
            raise RuntimeError("Cannot load data into a closed session")
        result = build_graph(data)

        self._scheduler.cancel()
        self.generation += 1
        self.graph = result.graph
        self.engine.reset(result.graph)
        # Rebinding resets the interaction state; the frame is published below
        self.interaction.set_on_state_change(None)
        self.interaction.rebind(result.graph, self.engine)
        self.interaction.set_on_state_change(self._on_interaction)
        self.last_build = result

        if self.warm_start_ticks:
            self.engine.warm_start(self.warm_start_ticks)
            # Warm start may already have settled the layout; real-time ticking resumes it
            self.engine.restart()
        logger.info(f"Loaded generation {self.generation}: {len(result.graph.nodes)} nodes, "
                    f"{len(result.graph.links)} links, {result.dropped_links} dropped")

        self._publish()
        self._schedule()
        return result

    def close(self) -> None:
        """Stop ticking for good; no callback runs after this returns."""
        self._scheduler.cancel()
        self.generation += 1
        self._listeners.clear()
        self.interaction.set_on_state_change(None)
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ticking(self) -> bool:
        return self._scheduler.active

    # --- Ticking ---

    def _schedule(self) -> None:
        if self._closed or self._scheduler.active or not self.engine.active:
            return
        generation = self.generation
        self._scheduler.start(lambda: self._on_tick(generation))

    def _on_tick(self, generation: int) -> None:
        if generation != self.generation:
            return
        if not self.engine.active:
            self._scheduler.cancel()
            return
        self.engine.step()
        self._publish()
        if not self.engine.active:
            logger.debug(f"Layout settled at tick {self.engine.tick_count}")
            self._scheduler.cancel()

    def _on_interaction(self, state: InteractionState) -> None:
        self._publish()
        # A drag restarts the engine; make sure ticks are flowing again
        self._schedule()
