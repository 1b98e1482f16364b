"""Data models for conceptgraph.

This module contains the value types shared by the graph model, the layout
engines and the selection/pathfinding queries. All of them are frozen so a
loaded graph can be handed to several callers without copying.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class NodeType(str, Enum):
    """Known kinds of learning node."""
    CONCEPT = "concept"
    SKILL = "skill"
    TOPIC = "topic"
    PREREQUISITE = "prerequisite"
    OUTCOME = "outcome"


class RelationshipType(str, Enum):
    """Known kinds of directed relationship between two nodes."""
    PREREQUISITE = "prerequisite"
    LEADS_TO = "leads_to"
    RELATED_TO = "related_to"
    PART_OF = "part_of"
    ENABLES = "enables"


NODE_TYPES = frozenset(t.value for t in NodeType)
RELATIONSHIP_TYPES = frozenset(r.value for r in RelationshipType)


@dataclass(frozen=True)
class NodeProperties:
    """Learning attributes of a node.

    Attributes:
        difficulty (float): Normalized difficulty in [0, 1]
        importance (float): Normalized importance in [0, 1]
        learning_time (float): Expected study time in hours, >= 0
        mastery (float): Learner's normalized mastery in [0, 1]
    """
    difficulty: float = 0.0
    importance: float = 0.0
    learning_time: float = 0.0
    mastery: float = 0.0


@dataclass(frozen=True)
class Node:
    """A concept, skill, topic, prerequisite or outcome in the graph.

    Attributes:
        id (str): Unique node id
        label (str): Display label, also the target of text search
        type (str): Node type, normally one of NodeType
        properties (NodeProperties): Learning attributes
    """
    id: str
    label: str
    type: str = NodeType.CONCEPT.value
    properties: NodeProperties = field(default_factory=NodeProperties)


@dataclass(frozen=True)
class Edge:
    """A directed, weighted relationship between two nodes.

    Attributes:
        source (str): Id of the node the edge starts from
        target (str): Id of the node the edge points to
        relationship (str): Relationship type, normally one of RelationshipType
        weight (float): Strictly positive strength, scales layout attraction
    """
    source: str
    target: str
    relationship: str = RelationshipType.RELATED_TO.value
    weight: float = 1.0

    @property
    def key(self) -> Tuple[str, str]:
        """Key used by the renderer to address this edge."""
        return (self.source, self.target)


@dataclass(frozen=True)
class Position:
    """A point in model space."""
    x: float
    y: float


@dataclass(frozen=True)
class HighlightSet:
    """Nodes and edges touched by selecting a single node."""
    nodes: FrozenSet[str]
    edges: Tuple[Edge, ...]


@dataclass(frozen=True)
class HighlightState:
    """What the renderer should emphasize.

    Attributes:
        selected_node_id (Optional[str]): The clicked node, if any
        highlighted_node_ids (FrozenSet[str]): Nodes drawn emphasized
        highlighted_edge_keys (FrozenSet[Tuple[str, str]]): (source, target) keys of emphasized edges
    """
    selected_node_id: Optional[str] = None
    highlighted_node_ids: FrozenSet[str] = frozenset()
    highlighted_edge_keys: FrozenSet[Tuple[str, str]] = frozenset()


@dataclass(frozen=True)
class GraphStatistics:
    """Summary figures shown under the graph."""
    node_count: int
    edge_count: int
    average_mastery: float
    total_learning_time: float
