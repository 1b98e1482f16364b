"""Validated, read-only knowledge graph."""
import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from conceptgraph.exceptions import (
    DanglingEdgeReference,
    DuplicateNodeId,
    InvalidEdgeWeight,
    PropertyOutOfRange,
    UnknownNodeError,
    ValidationError,
)
from conceptgraph.models import (
    NODE_TYPES,
    RELATIONSHIP_TYPES,
    Edge,
    GraphStatistics,
    Node,
    NodeProperties,
)

logger = logging.getLogger(__name__)

ALL_TYPES = "all"

# Snapshot payloads come from a JS client, so both spellings are accepted
_PROPERTY_KEYS = {
    "difficulty": "difficulty",
    "importance": "importance",
    "mastery": "mastery",
    "learningTime": "learning_time",
    "learning_time": "learning_time",
}


class GraphModel:
    """Maintains the nodes and edges of one graph snapshot.

    A GraphModel is only created through `load` (or `from_snapshot`), which
    validates the whole snapshot before anything is kept. Afterwards the
    model is never modified; adjacency is precomputed once.

    Attributes:
        nodes (Tuple[Node, ...]): Nodes in input order
        edges (Tuple[Edge, ...]): Edges in input order
    """

    def __init__(self, nodes: Tuple[Node, ...], edges: Tuple[Edge, ...]):
        self._nodes = nodes
        self._edges = edges
        self._by_id: Dict[str, Node] = {node.id: node for node in nodes}

        outgoing: Dict[str, List[Tuple[str, Edge]]] = {node.id: [] for node in nodes}
        incident: Dict[str, List[Edge]] = {node.id: [] for node in nodes}
        neighbors: Dict[str, set] = {node.id: set() for node in nodes}
        for edge in edges:
            outgoing[edge.source].append((edge.target, edge))
            incident[edge.source].append(edge)
            if edge.target != edge.source:
                incident[edge.target].append(edge)
            neighbors[edge.source].add(edge.target)
            neighbors[edge.target].add(edge.source)

        self._outgoing = {k: tuple(v) for k, v in outgoing.items()}
        self._incident = {k: tuple(v) for k, v in incident.items()}
        self._neighbors = {k: frozenset(v) for k, v in neighbors.items()}

    @classmethod
    def load(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> "GraphModel":
        """Validate a snapshot and build a model from it.

        Args:
            nodes: Nodes of the snapshot
            edges: Edges of the snapshot

        Returns:
            GraphModel: The validated model

        Raises:
            DuplicateNodeId: If two nodes share an id
            DanglingEdgeReference: If an edge references a missing node
            InvalidEdgeWeight: If an edge weight is not > 0
            PropertyOutOfRange: If a node property is outside its range
        """
        node_list = tuple(nodes)
        edge_list = tuple(edges)

        try:
            seen = set()
            for node in node_list:
                if node.id in seen:
                    raise DuplicateNodeId(node.id)
                seen.add(node.id)
                _check_properties(node)
                if node.type not in NODE_TYPES:
                    logger.warning(f"Node {node.id} has unknown type '{node.type}'")

            for edge in edge_list:
                for endpoint in (edge.source, edge.target):
                    if endpoint not in seen:
                        raise DanglingEdgeReference(edge.source, edge.target, endpoint)
                if not edge.weight > 0:
                    raise InvalidEdgeWeight(
                        f"Edge {edge.source} -> {edge.target} has non-positive weight {edge.weight}"
                    )
                if edge.relationship not in RELATIONSHIP_TYPES:
                    logger.warning(
                        f"Edge {edge.source} -> {edge.target} has unknown relationship '{edge.relationship}'"
                    )
        except ValidationError as e:
            logger.error(f"Rejected graph snapshot: {e}")
            raise

        logger.info(f"Loaded graph with {len(node_list)} nodes and {len(edge_list)} edges")
        return cls(node_list, edge_list)

    @classmethod
    def from_snapshot(cls, payload: Mapping[str, Any]) -> "GraphModel":
        """Build a model from a `{nodes: [...], edges: [...]}` mapping.

        Args:
            payload: Parsed snapshot, e.g. the JSON body returned by the backend

        Returns:
            GraphModel: The validated model

        Raises:
            ValidationError: If the payload is malformed or violates an invariant
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Graph snapshot must be a mapping with 'nodes' and 'edges'")

        nodes = [_node_from_dict(raw) for raw in payload.get("nodes") or []]
        edges = [_edge_from_dict(raw) for raw in payload.get("edges") or []]
        return cls.load(nodes, edges)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def has_node(self, node_id: str) -> bool:
        return node_id in self._by_id

    def node(self, node_id: str) -> Node:
        """Look up a node by id.

        Raises:
            UnknownNodeError: If the id is not in the graph
        """
        self._require(node_id)
        return self._by_id[node_id]

    def neighbors(self, node_id: str) -> FrozenSet[str]:
        """Get nodes one edge away from a node, in either direction."""
        self._require(node_id)
        return self._neighbors[node_id]

    def outgoing(self, node_id: str) -> Tuple[Tuple[str, Edge], ...]:
        """Get (target, edge) pairs for edges leaving a node, in insertion order."""
        self._require(node_id)
        return self._outgoing[node_id]

    def incident_edges(self, node_id: str) -> Tuple[Edge, ...]:
        """Get every edge whose source or target is the node, in insertion order."""
        self._require(node_id)
        return self._incident[node_id]

    def filter_by_type(self, node_type: str) -> FrozenSet[str]:
        """Get ids of nodes of a type; "all" selects every node."""
        if node_type == ALL_TYPES:
            return frozenset(self._by_id)
        return frozenset(node.id for node in self._nodes if node.type == node_type)

    def edges_within(self, node_ids: Iterable[str]) -> Tuple[Edge, ...]:
        """Get edges whose endpoints both belong to the given node set."""
        visible = set(node_ids)
        return tuple(e for e in self._edges if e.source in visible and e.target in visible)

    def statistics(self) -> GraphStatistics:
        """Summarize the graph for display."""
        count = len(self._nodes)
        total_mastery = sum(node.properties.mastery for node in self._nodes)
        return GraphStatistics(
            node_count=count,
            edge_count=len(self._edges),
            average_mastery=total_mastery / count if count else 0.0,
            total_learning_time=sum(node.properties.learning_time for node in self._nodes),
        )

    def _require(self, node_id: str) -> None:
        if node_id not in self._by_id:
            raise UnknownNodeError(node_id)


def _check_properties(node: Node) -> None:
    props = node.properties
    for name in ("difficulty", "importance", "mastery"):
        value = getattr(props, name)
        if not 0.0 <= value <= 1.0:
            raise PropertyOutOfRange(f"Node {node.id} has {name}={value}, expected a value in [0, 1]")
    if not props.learning_time >= 0.0:
        raise PropertyOutOfRange(
            f"Node {node.id} has learning_time={props.learning_time}, expected a value >= 0"
        )


def _node_from_dict(raw: Any) -> Node:
    if not isinstance(raw, Mapping) or "id" not in raw:
        raise ValidationError(f"Malformed node entry: {raw!r}")

    values: Dict[str, float] = {}
    for key, value in (raw.get("properties") or {}).items():
        name = _PROPERTY_KEYS.get(key)
        if name is None:
            logger.debug(f"Ignoring unknown property '{key}' on node {raw['id']}")
            continue
        values[name] = _as_float(value, f"node {raw['id']} property {key}")

    node_id = str(raw["id"])
    return Node(
        id=node_id,
        label=str(raw.get("label", node_id)),
        type=str(raw.get("type", "concept")),
        properties=NodeProperties(**values),
    )


def _edge_from_dict(raw: Any) -> Edge:
    if not isinstance(raw, Mapping) or "source" not in raw or "target" not in raw:
        raise ValidationError(f"Malformed edge entry: {raw!r}")
    return Edge(
        source=str(raw["source"]),
        target=str(raw["target"]),
        relationship=str(raw.get("relationship", "related_to")),
        weight=_as_float(raw.get("weight", 1.0), f"edge {raw['source']} -> {raw['target']} weight"),
    )


def _as_float(value: Any, what: str) -> float:
    # bool is an int subclass but never a meaningful number here
    if isinstance(value, bool):
        raise ValidationError(f"Expected a number for {what}, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Expected a number for {what}, got {value!r}")
