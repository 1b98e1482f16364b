"""Snapshot file loading for conceptgraph.

This module reads graph snapshots saved as YAML or JSON files, the format
the backend returns (``{nodes: [...], edges: [...]}``).
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from conceptgraph.exceptions import ValidationError
from conceptgraph.graph_model import GraphModel

logger = logging.getLogger(__name__)


def read_snapshot(snapshot_file: Union[str, Path]) -> Dict[str, Any]:
    """Read a snapshot file without validating it.

    JSON documents are parsed by the YAML loader as well.

    Args:
        snapshot_file: Path to a .yaml, .yml or .json file

    Returns:
        Dict[str, Any]: Parsed snapshot payload

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file cannot be parsed into a mapping
    """
    path = Path(snapshot_file)
    if not path.exists():
        logger.error(f"Snapshot file does not exist: {path}")
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Error parsing snapshot {path}: {e}")
        raise ValidationError(f"Could not parse snapshot {path}: {e}")

    if payload is None:
        logger.warning(f"Snapshot {path} is empty")
        return {"nodes": [], "edges": []}
    if not isinstance(payload, dict):
        raise ValidationError(f"Snapshot {path} must contain a mapping with 'nodes' and 'edges'")
    return payload


def load_snapshot(snapshot_file: Union[str, Path]) -> GraphModel:
    """Read and validate a snapshot file.

    Args:
        snapshot_file: Path to the snapshot

    Returns:
        GraphModel: The validated graph
    """
    payload = read_snapshot(snapshot_file)
    graph = GraphModel.from_snapshot(payload)
    logger.info(f"Loaded snapshot {snapshot_file}")
    return graph
