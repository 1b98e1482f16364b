"""Directed shortest learning paths over a GraphModel."""

import logging
from collections import deque
from typing import Dict, List, Optional

from conceptgraph.graph_model import GraphModel
from conceptgraph.models import Edge

logger = logging.getLogger(__name__)


class PathFinder:
    """Finds learning paths between concepts.

    Paths follow edges from source to target only. A prerequisite edge
    A -> B therefore gives a path from A to B but never from B to A.
    """

    def __init__(self, graph: GraphModel):
        self.graph = graph

    def find(self, start_id: str, end_id: str) -> Optional[List[str]]:
        """Find a shortest directed path with breadth-first search.

        When several shortest paths exist, the one reached first is returned:
        outgoing edges are expanded in the order they were loaded.

        Args:
            start_id: Node the path starts at
            end_id: Node the path should reach

        Returns:
            Optional[List[str]]: Node ids from start to end, or None if the
            end is unreachable or either id is not in the graph
        """
        if start_id not in self.graph or end_id not in self.graph:
            logger.debug(f"No path {start_id} -> {end_id}: unknown endpoint")
            return None
        if start_id == end_id:
            return [start_id]

        parents: Dict[str, str] = {}
        visited = {start_id}
        queue = deque([start_id])

        while queue:
            current = queue.popleft()
            for target, _edge in self.graph.outgoing(current):
                if target in visited:
                    continue
                visited.add(target)
                parents[target] = current
                if target == end_id:
                    path = self._unwind(parents, start_id, end_id)
                    logger.debug(f"Found path {start_id} -> {end_id} with {len(path)} nodes")
                    return path
                queue.append(target)

        logger.debug(f"No path {start_id} -> {end_id}")
        return None

    def path_edges(self, path: List[str]) -> List[Edge]:
        """Get the edges that join consecutive nodes of a path.

        For each step the first edge in load order is used.

        Args:
            path: Node ids as returned by `find`

        Returns:
            List[Edge]: One edge per step

        Raises:
            ValueError: If two consecutive nodes are not joined by an edge
        """
        edges = []
        for source, target in zip(path, path[1:]):
            step = next((edge for t, edge in self.graph.outgoing(source) if t == target), None)
            if step is None:
                raise ValueError(f"No edge {source} -> {target} in graph")
            edges.append(step)
        return edges

    @staticmethod
    def _unwind(parents: Dict[str, str], start_id: str, end_id: str) -> List[str]:
        path = [end_id]
        while path[-1] != start_id:
            path.append(parents[path[-1]])
        path.reverse()
        return path
