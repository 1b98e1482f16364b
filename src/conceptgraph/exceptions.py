"""Custom exceptions for the conceptgraph package."""

class ValidationError(Exception):
    """Exception raised when a graph snapshot violates a load-time invariant."""
    pass

class DuplicateNodeId(ValidationError):
    """Exception raised when two nodes in a snapshot share an id."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Duplicate node id: {node_id}")

class DanglingEdgeReference(ValidationError):
    """Exception raised when an edge points at a node that is not in the snapshot."""

    def __init__(self, source: str, target: str, missing: str):
        self.source = source
        self.target = target
        self.missing = missing
        super().__init__(f"Edge {source} -> {target} references unknown node: {missing}")

class InvalidEdgeWeight(ValidationError):
    """Exception raised for an edge weight that is not strictly positive."""
    pass

class PropertyOutOfRange(ValidationError):
    """Exception raised for a node property outside its allowed range."""
    pass

class ConfigurationError(ValueError):
    """Exception raised for settings that cannot be interpreted."""
    pass

class UnknownNodeError(KeyError):
    """Exception raised when a query names a node id the graph does not contain."""
    pass
