"""
Force-directed layout simulation for the evidence map.

The engine advances the layout one discrete tick at a time. Each tick:

1. cools alpha toward alpha_target
2. applies forces in a fixed order (link, charge, centre, collision),
   all of them writing into node velocities (the centre force translates
   positions directly)
3. integrates: velocity decays by the friction factor, then position += velocity

Pinned nodes (an fx/fy pin is set) are held at the pin: their position is
forced to the pin and their velocity is discarded every tick.

The engine owns all physics state. Callers read immutable SimulationSnapshot
objects and mutate only pins and the alpha target, between ticks.
"""

import logging
import math
import random
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from evidence_map.bezier import Point
from evidence_map import constants
from evidence_map.graph_builder import Graph

logger = logging.getLogger(__name__)

INITIAL_LAYOUTS = ('random', 'phyllotaxis')


@dataclass(frozen=True)
class SimulationSettings:
    link_distance: float = constants.LINK_DISTANCE
    charge_strength: float = constants.CHARGE_STRENGTH
    charge_distance_max: float = constants.CHARGE_DISTANCE_MAX
    charge_distance_min: float = constants.CHARGE_DISTANCE_MIN
    collision_radius: float = constants.COLLISION_RADIUS
    velocity_decay: float = constants.VELOCITY_DECAY
    alpha_start: float = constants.ALPHA_START
    alpha_min: float = constants.ALPHA_MIN
    alpha_decay: float = constants.ALPHA_DECAY
    drag_alpha_target: float = constants.DRAG_ALPHA_TARGET
    center_strength: float = constants.CENTER_STRENGTH
    initial_radius: float = constants.INITIAL_RADIUS

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]


@dataclass(frozen=True)
class SimulationSnapshot:
    """Read-only view of the layout after a tick."""
    tick: int
    alpha: float
    positions: Mapping[str, Point] = field(default_factory=dict)
    pins: FrozenSet[str] = frozenset()

    def position(self, node_id: str) -> Optional[Point]:
        return self.positions.get(node_id)


class _Body:
    """Mutable physics state of one node."""
    __slots__ = ('id', 'radius', 'x', 'y', 'vx', 'vy', 'fx', 'fy')

    def __init__(self, node_id: str, radius: float):
        self.id = node_id
        self.radius = radius
        self.x = 0.0
        self.y = 0.0
        self.vx = 0.0
        self.vy = 0.0
        self.fx: Optional[float] = None
        self.fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


class ForceSimulationEngine:
    """
    Iterative force solver over a Graph.

    Usage:
        engine = ForceSimulationEngine(graph, width=800, height=600, seed=7)
        engine.warm_start(300)
        while engine.active:
            snapshot = engine.step()
    """

    def __init__(
        self,
        graph: Graph,
        width: float = constants.CHART_WIDTH,
        height: float = constants.CHART_HEIGHT,
        settings: Optional[SimulationSettings] = None,
        seed: Optional[int] = None,
        initial_layout: str = 'random',
    ):
        if initial_layout not in INITIAL_LAYOUTS:
            raise ValueError(f"Unknown initial layout {initial_layout!r}; expected one of {INITIAL_LAYOUTS}")
        self.width = float(width)
        self.height = float(height)
        self.settings = settings or SimulationSettings()
        self.seed = seed
        self.initial_layout = initial_layout
        self.non_finite_corrections = 0
        self.reset(graph)

    # --- Lifecycle ---

    def reset(self, graph: Graph) -> None:
        """Replace the graph and restart the layout from scratch."""
        # Same seed, same layout on every rebuild
        self._random = random.Random(self.seed)
        self.graph = graph
        self.alpha = self.settings.alpha_start
        self.alpha_target = 0.0
        self.tick_count = 0
        self.active = True
        self._bodies: List[_Body] = [_Body(n.id, n.radius) for n in graph.nodes]
        self._by_id: Dict[str, _Body] = {b.id: b for b in self._bodies}
        self._springs = self._build_springs()
        self._place_initial()
        self._snapshot = self._take_snapshot()

    def restart(self) -> None:
        self.active = True

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2

    @property
    def settled(self) -> bool:
        return self.alpha < self.settings.alpha_min

    def set_alpha_target(self, target: float) -> None:
        self.alpha_target = max(0.0, float(target))

    # --- Pins ---

    def pin(self, node_id: str, x: float, y: float) -> bool:
        """
        Pin a node at (x, y). The node moves there immediately, so the next
        snapshot already reflects the pin without waiting for a tick.
        """
        body = self._by_id.get(node_id)
        if body is None:
            return False
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.warning(f"Ignoring non-finite pin for {node_id}: ({x}, {y})")
            return False
        body.fx, body.fy = float(x), float(y)
        body.x, body.y = body.fx, body.fy
        body.vx = body.vy = 0.0
        self._snapshot = self._take_snapshot()
        return True

    def unpin(self, node_id: str) -> bool:
        body = self._by_id.get(node_id)
        if body is None:
            return False
        body.fx = body.fy = None
        self._snapshot = self._take_snapshot()
        return True

    def pin_of(self, node_id: str) -> Optional[Point]:
        body = self._by_id.get(node_id)
        if body is None or not body.pinned:
            return None
        return Point(body.fx, body.fy)

    # --- Reading ---

    def snapshot(self) -> SimulationSnapshot:
        return self._snapshot

    def position(self, node_id: str) -> Optional[Point]:
        return self._snapshot.position(node_id)

    def velocity(self, node_id: str) -> Optional[Tuple[float, float]]:
        body = self._by_id.get(node_id)
        if body is None:
            return None
        return body.vx, body.vy

    # --- Ticking ---

    def step(self) -> SimulationSnapshot:
        """Advance one tick and return the new snapshot."""
        s = self.settings
        self.alpha += (self.alpha_target - self.alpha) * s.alpha_decay
        self.alpha = max(0.0, self.alpha)

        previous = [(b.x, b.y) for b in self._bodies]

        self._apply_link_force()
        self._apply_charge_force()
        self._apply_center_force()
        self._apply_collision_force()
        self._integrate(previous)

        self.tick_count += 1
        if self.alpha < s.alpha_min:
            self.active = False
        self._snapshot = self._take_snapshot()
        return self._snapshot

    def warm_start(self, ticks: int = constants.WARM_START_TICKS) -> SimulationSnapshot:
        """Run ticks synchronously, ignoring whether the layout has settled."""
        for _ in range(max(0, int(ticks))):
            self.step()
        return self._snapshot

    # --- Internals ---

    def _jiggle(self) -> float:
        return (self._random.random() - 0.5) * constants.JIGGLE_MAGNITUDE

    def _build_springs(self) -> List[Tuple[_Body, _Body, float, float]]:
        """(source, target, strength, bias) for every non-loop link."""
        springs = []
        for link in self.graph.links:
            if link.source_id == link.target_id:
                continue
            source = self._by_id.get(link.source_id)
            target = self._by_id.get(link.target_id)
            if source is None or target is None:
                continue
            count_s = self.graph.degree(link.source_id)
            count_t = self.graph.degree(link.target_id)
            strength = 1.0 / min(count_s, count_t)
            bias = count_s / (count_s + count_t)
            springs.append((source, target, strength, bias))
        return springs

    def _place_initial(self) -> None:
        cx, cy = self.center
        n = len(self._bodies)
        if self.initial_layout == 'phyllotaxis':
            golden_angle = math.pi * (3 - math.sqrt(5))
            for i, body in enumerate(self._bodies):
                radius = self.settings.initial_radius * math.sqrt(0.5 + i)
                angle = i * golden_angle
                body.x = cx + radius * math.cos(angle)
                body.y = cy + radius * math.sin(angle)
            return

        spread = self.settings.initial_radius * math.sqrt(max(n, 1)) * 3
        for body in self._bodies:
            r = spread * math.sqrt(self._random.random())
            theta = self._random.random() * 2 * math.pi
            body.x = cx + r * math.cos(theta)
            body.y = cy + r * math.sin(theta)

    def _apply_link_force(self) -> None:
        distance = self.settings.link_distance
        alpha = self.alpha
        for source, target, strength, bias in self._springs:
            x = target.x + target.vx - source.x - source.vx
            y = target.y + target.vy - source.y - source.vy
            if x == 0:
                x = self._jiggle()
            if y == 0:
                y = self._jiggle()
            l = math.sqrt(x * x + y * y)
            l = (l - distance) / l * alpha * strength
            x *= l
            y *= l
            target.vx -= x * bias
            target.vy -= y * bias
            source.vx += x * (1 - bias)
            source.vy += y * (1 - bias)

    def _apply_charge_force(self) -> None:
        s = self.settings
        max2 = s.charge_distance_max ** 2
        min2 = s.charge_distance_min ** 2
        k = s.charge_strength * self.alpha
        bodies = self._bodies
        for i in range(len(bodies)):
            a = bodies[i]
            for j in range(i + 1, len(bodies)):
                b = bodies[j]
                x = b.x - a.x
                y = b.y - a.y
                l = x * x + y * y
                if l >= max2:
                    continue
                if x == 0:
                    x = self._jiggle()
                    l += x * x
                if y == 0:
                    y = self._jiggle()
                    l += y * y
                if l < min2:
                    l = math.sqrt(min2 * l)
                w = k / l
                a.vx += x * w
                a.vy += y * w
                b.vx -= x * w
                b.vy -= y * w

    def _apply_center_force(self) -> None:
        if not self._bodies:
            return
        cx, cy = self.center
        n = len(self._bodies)
        sx = sum(b.x for b in self._bodies) / n - cx
        sy = sum(b.y for b in self._bodies) / n - cy
        sx *= self.settings.center_strength
        sy *= self.settings.center_strength
        for body in self._bodies:
            if body.pinned:
                continue
            body.x -= sx
            body.y -= sy

    def _apply_collision_force(self) -> None:
        base = self.settings.collision_radius
        bodies = self._bodies
        for i in range(len(bodies)):
            a = bodies[i]
            ra = max(base, a.radius)
            ra2 = ra * ra
            xa = a.x + a.vx
            ya = a.y + a.vy
            for j in range(i + 1, len(bodies)):
                b = bodies[j]
                rb = max(base, b.radius)
                r = ra + rb
                x = xa - b.x - b.vx
                y = ya - b.y - b.vy
                l = x * x + y * y
                if l >= r * r:
                    continue
                if x == 0:
                    x = self._jiggle()
                    l += x * x
                if y == 0:
                    y = self._jiggle()
                    l += y * y
                l = math.sqrt(l)
                l = (r - l) / l
                x *= l
                y *= l
                rb2 = rb * rb
                share = rb2 / (ra2 + rb2)
                a.vx += x * share
                a.vy += y * share
                b.vx -= x * (1 - share)
                b.vy -= y * (1 - share)

    def _integrate(self, previous: List[Tuple[float, float]]) -> None:
        friction = 1 - self.settings.velocity_decay
        for body, (px, py) in zip(self._bodies, previous):
            if body.pinned:
                body.x, body.y = body.fx, body.fy
                body.vx = body.vy = 0.0
                continue
            body.vx *= friction
            body.vy *= friction
            body.x += body.vx
            body.y += body.vy
            if not (math.isfinite(body.x) and math.isfinite(body.y)):
                self.non_finite_corrections += 1
                logger.warning(f"Non-finite position for {body.id} at tick {self.tick_count}; "
                               f"restoring ({px}, {py})")
                body.x, body.y = px, py
                body.vx = body.vy = 0.0

    def _take_snapshot(self) -> SimulationSnapshot:
        positions = {b.id: Point(b.x, b.y) for b in self._bodies}
        pins = frozenset(b.id for b in self._bodies if b.pinned)
        return SimulationSnapshot(
            tick=self.tick_count,
            alpha=self.alpha,
            positions=MappingProxyType(positions),
            pins=pins,
        )
