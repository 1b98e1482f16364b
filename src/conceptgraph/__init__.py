"""conceptgraph - Layout and topology queries for learning knowledge graphs."""

from conceptgraph.config import GraphSettings, LayoutKind, load_settings
from conceptgraph.exceptions import (
    ConfigurationError,
    DanglingEdgeReference,
    DuplicateNodeId,
    UnknownNodeError,
    ValidationError,
)
from conceptgraph.graph_model import GraphModel
from conceptgraph.layout import (
    CircularLayout,
    ForceDirectedLayout,
    HierarchicalLayout,
    LayoutEngine,
    compute_layout,
    get_layout_engine,
)
from conceptgraph.models import Edge, HighlightSet, HighlightState, Node, NodeProperties, Position
from conceptgraph.pathfinding import PathFinder
from conceptgraph.selection import SelectionIndex
from conceptgraph.viewport import Viewport, ViewportController

__version__ = "0.1.0"
