import random

import pytest

from conceptgraph.graph_model import GraphModel
from conceptgraph.models import Edge, Node, NodeProperties

NODE_TYPES = ["concept", "skill", "topic", "prerequisite", "outcome"]
RELATIONSHIPS = ["prerequisite", "leads_to", "related_to", "part_of", "enables"]


def make_random_graph(seed, node_count=12, edge_count=20):
    """Build a random valid graph; same seed gives the same graph."""
    rnd = random.Random(seed)
    nodes = [
        Node(
            id=f"n{i}",
            label=f"Node {i}",
            type=rnd.choice(NODE_TYPES),
            properties=NodeProperties(
                difficulty=rnd.random(),
                importance=rnd.random(),
                learning_time=rnd.uniform(0, 10),
                mastery=rnd.random(),
            ),
        )
        for i in range(node_count)
    ]
    edges = [
        Edge(
            source=rnd.choice(nodes).id,
            target=rnd.choice(nodes).id,
            relationship=rnd.choice(RELATIONSHIPS),
            weight=rnd.uniform(0.1, 2.0),
        )
        for _ in range(edge_count if node_count else 0)
    ]
    return nodes, edges


@pytest.fixture
def scenario_graph():
    """A(concept) -> B(skill) -> C(topic)."""
    nodes = [
        Node(id="A", label="Algebra Basics", type="concept"),
        Node(id="B", label="Equation Solving Skill", type="skill"),
        Node(id="C", label="Calculus", type="topic"),
    ]
    edges = [
        Edge(source="A", target="B", relationship="prerequisite", weight=1.0),
        Edge(source="B", target="C", relationship="leads_to", weight=1.0),
    ]
    return GraphModel.load(nodes, edges)


@pytest.fixture
def snapshot_payload():
    """Snapshot as the backend sends it, camelCase keys included."""
    return {
        "nodes": [
            {
                "id": "vars",
                "label": "Variables",
                "type": "prerequisite",
                "properties": {"difficulty": 0.2, "importance": 0.9, "learningTime": 2, "mastery": 0.9},
            },
            {
                "id": "loops",
                "label": "Loops",
                "type": "concept",
                "properties": {"difficulty": 0.4, "importance": 0.8, "learningTime": 3, "mastery": 0.5},
            },
            {
                "id": "recursion",
                "label": "Recursion",
                "type": "skill",
                "properties": {"difficulty": 0.7, "importance": 0.6, "learningTime": 5, "mastery": 0.1},
            },
        ],
        "edges": [
            {"source": "vars", "target": "loops", "relationship": "prerequisite", "weight": 1},
            {"source": "loops", "target": "recursion", "relationship": "leads_to", "weight": 0.5},
        ],
    }
