"""Layout engines for the knowledge graph.

Each engine turns a GraphModel into a fresh ``{node_id: Position}`` map. The
graph itself is never touched; callers merge the positions into their own
render state. Engines are selected through LayoutKind, one class per kind.
"""

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import numpy as np

from conceptgraph.config import GraphSettings, LayoutKind
from conceptgraph.exceptions import ConfigurationError
from conceptgraph.graph_model import GraphModel
from conceptgraph.models import NodeType, Position

logger = logging.getLogger(__name__)

PositionMap = Dict[str, Position]
ProgressCallback = Callable[[int, int], None]

# Rank of each node type in the hierarchical layout
TYPE_RANKS = {
    NodeType.PREREQUISITE.value: 0,
    NodeType.CONCEPT.value: 1,
    NodeType.SKILL.value: 2,
    NodeType.TOPIC.value: 3,
    NodeType.OUTCOME.value: 4,
}
DEFAULT_RANK = 2


class LayoutEngine(ABC):
    """Base class for layout strategies."""

    kind: LayoutKind

    def compute(
        self,
        graph: GraphModel,
        settings: GraphSettings,
        seed: int = 0,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Optional[PositionMap]:
        """Compute node positions.

        Args:
            graph: Graph to lay out
            settings: Layout settings
            seed: Seed for any randomness the strategy uses
            cancel_event: Set by another thread to abort the run
            progress_callback: Called with (completed_steps, total_steps)

        Returns:
            Optional[PositionMap]: Positions keyed by node id, or None if the
            run was cancelled
        """
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"{self.kind.value} layout cancelled before start")
            return None
        return self._place(graph, settings, seed, cancel_event, progress_callback)

    @abstractmethod
    def _place(
        self,
        graph: GraphModel,
        settings: GraphSettings,
        seed: int,
        cancel_event: Optional[threading.Event],
        progress_callback: Optional[ProgressCallback],
    ) -> Optional[PositionMap]:
        ...


class ForceDirectedLayout(LayoutEngine):
    """Physics-style layout with pairwise repulsion and weighted edge attraction.

    Nodes start at seeded random points on the canvas. Every iteration sums
    the repulsion between each pair of nodes (``repulsion / d**2``, d floored
    at 1) and the attraction along each edge (``attraction * d * weight``),
    then moves every node by its summed displacement. The cost is O(n**2) per
    iteration. Disconnected components keep pushing each other apart.
    """

    kind = LayoutKind.FORCE

    def _place(self, graph, settings, seed, cancel_event, progress_callback):
        nodes = graph.nodes
        if not nodes:
            return {}
        if len(nodes) == 1:
            return {nodes[0].id: Position(settings.width / 2.0, settings.height / 2.0)}

        rng = np.random.default_rng(seed)
        positions = rng.random((len(nodes), 2)) * np.array([settings.width, settings.height])

        index = {node.id: i for i, node in enumerate(nodes)}
        sources = np.array([index[e.source] for e in graph.edges], dtype=np.intp)
        targets = np.array([index[e.target] for e in graph.edges], dtype=np.intp)
        weights = np.array([e.weight for e in graph.edges], dtype=float)

        total = settings.iterations
        for step in range(total):
            displacement = self._repulsion(positions, settings.repulsion)
            displacement += self._attraction(positions, sources, targets, weights, settings.attraction)
            positions = positions + displacement

            if progress_callback is not None:
                progress_callback(step + 1, total)
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Force layout cancelled after {step + 1}/{total} iterations")
                return None

        return {node.id: Position(float(x), float(y)) for node, (x, y) in zip(nodes, positions)}

    @staticmethod
    def _repulsion(positions: np.ndarray, strength: float) -> np.ndarray:
        # delta[i, j] points from j to i, i.e. away from the other node
        delta = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
        raw = np.sqrt((delta ** 2).sum(axis=-1))
        magnitude = strength / np.maximum(raw, 1.0) ** 2
        # coincident pairs and the diagonal have no direction to push along
        apart = raw > 0.0
        scale = np.divide(magnitude, raw, out=np.zeros_like(raw), where=apart)
        return (delta * scale[..., np.newaxis]).sum(axis=1)

    @staticmethod
    def _attraction(
        positions: np.ndarray,
        sources: np.ndarray,
        targets: np.ndarray,
        weights: np.ndarray,
        strength: float,
    ) -> np.ndarray:
        displacement = np.zeros_like(positions)
        if sources.size == 0:
            return displacement

        delta = positions[targets] - positions[sources]
        distance = np.sqrt((delta ** 2).sum(axis=-1))
        distance[distance == 0.0] = 1.0
        magnitude = strength * distance * weights
        pull = delta * (magnitude / distance)[:, np.newaxis]

        # np.add.at accumulates repeated indices, plain fancy assignment would not
        np.add.at(displacement, sources, pull)
        np.add.at(displacement, targets, -pull)
        return displacement


class CircularLayout(LayoutEngine):
    """Places nodes evenly on a circle, in input order."""

    kind = LayoutKind.CIRCULAR

    def _place(self, graph, settings, seed, cancel_event, progress_callback):
        count = len(graph.nodes)
        center_x, center_y = settings.center
        positions: PositionMap = {}
        for i, node in enumerate(graph.nodes):
            angle = 2 * math.pi * i / count
            positions[node.id] = Position(
                center_x + settings.radius * math.cos(angle),
                center_y + settings.radius * math.sin(angle),
            )
        return positions


class HierarchicalLayout(LayoutEngine):
    """Stacks nodes in rows by type rank, spread evenly across the canvas."""

    kind = LayoutKind.HIERARCHICAL

    def _place(self, graph, settings, seed, cancel_event, progress_callback):
        levels: Dict[int, List[str]] = {}
        for node in graph.nodes:
            levels.setdefault(rank_of(node.type), []).append(node.id)

        positions: PositionMap = {}
        for rank, node_ids in levels.items():
            spacing = settings.width / (len(node_ids) + 1)
            y = rank * settings.level_height + settings.level_offset
            for i, node_id in enumerate(node_ids):
                positions[node_id] = Position((i + 1) * spacing, y)
        return positions


def rank_of(node_type: str) -> int:
    """Hierarchical rank of a node type; unknown types share the middle rank."""
    return TYPE_RANKS.get(node_type, DEFAULT_RANK)


_ENGINES = {
    LayoutKind.FORCE: ForceDirectedLayout,
    LayoutKind.CIRCULAR: CircularLayout,
    LayoutKind.HIERARCHICAL: HierarchicalLayout,
}


def get_layout_engine(kind: LayoutKind) -> LayoutEngine:
    """Get the engine for a layout kind.

    Raises:
        ConfigurationError: If no engine is registered for the kind
    """
    engine_class = _ENGINES.get(kind)
    if engine_class is None:
        raise ConfigurationError(f"No layout engine registered for {kind!r}")
    return engine_class()


def compute_layout(
    graph: GraphModel,
    settings: GraphSettings,
    seed: int = 0,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Optional[PositionMap]:
    """Run the layout selected by ``settings.layout``.

    Returns:
        Optional[PositionMap]: Positions keyed by node id, or None if cancelled
    """
    engine = get_layout_engine(settings.layout)
    start_time = time.time()
    positions = engine.compute(graph, settings, seed, cancel_event, progress_callback)
    if positions is not None:
        elapsed = time.time() - start_time
        logger.info(
            f"Computed {settings.layout.value} layout for {len(positions)} nodes in {elapsed:.3f}s (seed={seed})"
        )
    return positions
