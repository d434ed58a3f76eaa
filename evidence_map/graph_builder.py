"""
Graph construction for the evidence map.

Turns the raw Kumu-style export (elements + connections) into the working
graph used by the simulation and the interaction controller:

- only elements referenced by at least one connection are kept, in their
  original order
- every connection becomes a Link whose endpoints are resolved by id against
  the kept nodes; connections pointing at missing nodes are dropped and
  counted instead of failing the build

Expected input format:
  {
    "elements": [{"id": "<id>", "attributes": {"label": "...", "element type": "..."}}],
    "connections": [{"id": "<id>", "from": "<id>", "to": "<id>",
                     "attributes": {"connection type": "++"},
                     "direction": "directed", "delayed": false, "reversed": false}]
  }

Kumu exports use "_id" instead of "id"; both are accepted.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set, Tuple

import networkx as nx

from evidence_map.categories import ElementCategory, style_for

logger = logging.getLogger(__name__)


class GraphDataError(ValueError):
    """Raised when the raw map data cannot be turned into a graph."""


@dataclass(frozen=True)
class Node:
    id: str
    label: str
    category: ElementCategory
    radius: float
    color: str
    description: str = ''
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Link:
    id: str
    source_id: str
    target_id: str
    category: Optional[str] = None
    label: Optional[str] = None
    curvature: float = 0.0
    direction: Optional[str] = None
    delayed: bool = False
    reversed: bool = False


@dataclass
class Graph:
    """
    Arena of nodes and links indexed by id.

    Nodes and links keep their build order. Link endpoints are looked up by id
    through the arena, never held as object references.
    """
    nodes: Tuple[Node, ...] = ()
    links: Tuple[Link, ...] = ()
    _node_index: Dict[str, Node] = field(default_factory=dict, init=False, repr=False)
    _link_index: Dict[str, Link] = field(default_factory=dict, init=False, repr=False)
    _topology: nx.MultiGraph = field(default_factory=nx.MultiGraph, init=False, repr=False)

    def __post_init__(self):
        self._node_index = {n.id: n for n in self.nodes}
        self._link_index = {l.id: l for l in self.links}
        self._topology = nx.MultiGraph()
        self._topology.add_nodes_from(self._node_index)
        for link in self.links:
            self._topology.add_edge(link.source_id, link.target_id, key=link.id)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def node(self, node_id: str) -> Optional[Node]:
        return self._node_index.get(node_id)

    def link(self, link_id: str) -> Optional[Link]:
        return self._link_index.get(link_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._node_index

    def has_link(self, link_id: str) -> bool:
        return link_id in self._link_index

    def neighbors(self, node_id: str) -> Set[str]:
        """Nodes reachable from node_id through exactly one link (excluding itself)."""
        if node_id not in self._topology:
            return set()
        return {n for n in self._topology.neighbors(node_id) if n != node_id}

    def links_of(self, node_id: str) -> List[Link]:
        return [l for l in self.links if node_id in (l.source_id, l.target_id)]

    def degree(self, node_id: str) -> int:
        """Number of link endpoints at node_id (a self-loop counts twice)."""
        if node_id not in self._topology:
            return 0
        return self._topology.degree(node_id)


@dataclass(frozen=True)
class BuildResult:
    graph: Graph
    dropped_links: int = 0


def _raw_id(item: Mapping[str, Any]) -> Optional[str]:
    raw = item.get('id', item.get('_id'))
    if raw is None:
        return None
    return str(raw)


def _attributes(item: Mapping[str, Any]) -> Mapping[str, Any]:
    attrs = item.get('attributes')
    return attrs if isinstance(attrs, Mapping) else {}


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def element_to_node(element: Mapping[str, Any], node_id: str) -> Node:
    attrs = _attributes(element)
    category = ElementCategory.from_raw(attrs.get('element type'))
    style = style_for(category)
    tags = attrs.get('tags') or ()
    return Node(
        id=node_id,
        label=str(attrs.get('label') or ''),
        category=category,
        radius=style.radius,
        color=style.color,
        description=str(attrs.get('description') or ''),
        tags=tuple(str(t) for t in tags) if isinstance(tags, (list, tuple)) else (),
    )


def connection_to_link(connection: Mapping[str, Any], index: int) -> Link:
    attrs = _attributes(connection)
    source = connection.get('from')
    target = connection.get('to')
    link_id = _raw_id(connection) or f"{source}->{target}#{index}"
    label = attrs.get('label') or attrs.get('connection')
    return Link(
        id=link_id,
        source_id=str(source) if source is not None else '',
        target_id=str(target) if target is not None else '',
        category=attrs.get('connection type'),
        label=str(label) if label else None,
        curvature=_to_float(attrs.get('curvature'), 0.0),
        direction=connection.get('direction'),
        delayed=bool(connection.get('delayed', False)),
        reversed=bool(connection.get('reversed', False)),
    )


def build_graph(data: Mapping[str, Any]) -> BuildResult:
    """
    Build a filtered Graph from raw map data.

    Raises:
        GraphDataError: if data is not a mapping or lacks an
            "elements" / "connections" list.
    """
    if not isinstance(data, Mapping):
        raise GraphDataError(f"Map data must be an object, got {type(data).__name__}")
    elements = data.get('elements')
    connections = data.get('connections')
    if not isinstance(elements, list):
        raise GraphDataError("Map data is missing an 'elements' array")
    if not isinstance(connections, list):
        raise GraphDataError("Map data is missing a 'connections' array")

    # 1. Ids referenced by any connection
    referenced: Set[str] = set()
    for conn in connections:
        if not isinstance(conn, Mapping):
            continue
        for key in ('from', 'to'):
            if conn.get(key) is not None:
                referenced.add(str(conn[key]))

    # 2. Keep referenced elements in first-seen order
    nodes: List[Node] = []
    seen: Set[str] = set()
    for element in elements:
        if not isinstance(element, Mapping):
            continue
        node_id = _raw_id(element)
        if node_id is None:
            logger.warning("Skipping element without id")
            continue
        if node_id not in referenced:
            continue
        if node_id in seen:
            logger.warning(f"Duplicate element id {node_id}; keeping first occurrence")
            continue
        seen.add(node_id)
        nodes.append(element_to_node(element, node_id))

    # 3. Resolve connections against the kept nodes
    links: List[Link] = []
    link_ids: Set[str] = set()
    dropped = 0
    for index, conn in enumerate(connections):
        if not isinstance(conn, Mapping):
            dropped += 1
            continue
        link = connection_to_link(conn, index)
        if link.source_id not in seen or link.target_id not in seen:
            dropped += 1
            continue
        if link.id in link_ids:
            suffix = index
            while f"{link.id}#{suffix}" in link_ids:
                suffix += 1
            link = replace(link, id=f"{link.id}#{suffix}")
        link_ids.add(link.id)
        links.append(link)

    if dropped:
        logger.warning(f"Dropped {dropped} connection(s) referencing unknown elements")

    graph = Graph(nodes=tuple(nodes), links=tuple(links))
    logger.info(f"Built graph: {len(graph.nodes)} nodes, {len(graph.links)} links")
    return BuildResult(graph=graph, dropped_links=dropped)
