"""Colour rules for nodes and edges."""
from conceptgraph.config import GraphSettings
from conceptgraph.models import Edge, Node

NEUTRAL_COLOR = "#6b7280"

NODE_TYPE_COLORS = {
    "concept": "#3b82f6",
    "skill": "#10b981",
    "topic": "#8b5cf6",
    "prerequisite": "#f59e0b",
    "outcome": "#ef4444",
}

RELATIONSHIP_COLORS = {
    "prerequisite": "#ef4444",
    "leads_to": "#3b82f6",
    "related_to": "#8b5cf6",
    "part_of": "#10b981",
    "enables": "#f59e0b",
}

# (lower bound, colour), checked from the top
MASTERY_BANDS = (
    (0.8, "#10b981"),
    (0.6, "#f59e0b"),
    (0.4, "#ef4444"),
)


def node_color(node: Node, settings: GraphSettings) -> str:
    """Pick a node's fill colour.

    Type colouring wins over mastery colouring when both are enabled.
    """
    if settings.color_by_type:
        return NODE_TYPE_COLORS.get(node.type, NEUTRAL_COLOR)
    if settings.show_mastery:
        for lower, color in MASTERY_BANDS:
            if node.properties.mastery >= lower:
                return color
    return NEUTRAL_COLOR


def edge_color(edge: Edge) -> str:
    return RELATIONSHIP_COLORS.get(edge.relationship, NEUTRAL_COLOR)


def mastery_hue(mastery: float) -> float:
    """HSL hue of the mastery dot, red (0) to green (120)."""
    return mastery * 120.0
