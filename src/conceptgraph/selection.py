"""Highlight sets derived from graph topology.

SelectionIndex answers "what should light up" for a clicked node, a search
box query or a learning path. It works on the GraphModel only and knows
nothing about positions.
"""

import logging
from typing import FrozenSet, List, Optional

from conceptgraph.graph_model import GraphModel
from conceptgraph.models import HighlightSet, HighlightState
from conceptgraph.pathfinding import PathFinder

logger = logging.getLogger(__name__)


class SelectionIndex:
    """Derives highlight sets from a graph.

    Attributes:
        graph (GraphModel): Graph the selections refer to
    """

    def __init__(self, graph: GraphModel):
        self.graph = graph

    def select(self, node_id: str) -> HighlightSet:
        """Get the node, its one-hop neighbours and its edges.

        Edge direction is ignored: incoming and outgoing edges both count.

        Args:
            node_id: The selected node

        Returns:
            HighlightSet: Highlighted nodes and edges

        Raises:
            UnknownNodeError: If the node is not in the graph
        """
        nodes = frozenset({node_id}) | self.graph.neighbors(node_id)
        edges = self.graph.incident_edges(node_id)
        logger.debug(f"Selected {node_id}: {len(nodes)} nodes, {len(edges)} edges")
        return HighlightSet(nodes=nodes, edges=edges)

    def search(self, query: str) -> FrozenSet[str]:
        """Find nodes whose label contains the query, ignoring case.

        A blank query matches nothing; clearing the highlight on empty input
        is left to the caller.
        """
        if not query or not query.strip():
            return frozenset()
        needle = query.lower()
        return frozenset(node.id for node in self.graph.nodes if needle in node.label.lower())

    def highlight_selection(self, node_id: str) -> HighlightState:
        selection = self.select(node_id)
        return HighlightState(
            selected_node_id=node_id,
            highlighted_node_ids=selection.nodes,
            highlighted_edge_keys=frozenset(edge.key for edge in selection.edges),
        )

    def highlight_search(self, query: str, selected_node_id: Optional[str] = None) -> HighlightState:
        return HighlightState(
            selected_node_id=selected_node_id,
            highlighted_node_ids=self.search(query),
        )

    def highlight_path(self, path: Optional[List[str]]) -> HighlightState:
        """Highlight the nodes and edges of a learning path; None clears it."""
        if not path:
            return HighlightState()
        edges = PathFinder(self.graph).path_edges(path)
        return HighlightState(
            highlighted_node_ids=frozenset(path),
            highlighted_edge_keys=frozenset(edge.key for edge in edges),
        )
