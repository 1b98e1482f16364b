"""Settings for layout and rendering.

Settings arrive either as a mapping from the settings UI (camelCase keys,
e.g. ``nodeSize``) or from a YAML file. Numeric values outside their valid
range are clamped with a warning; only an unknown layout name is rejected.
"""

import logging
import math
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from conceptgraph.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class LayoutKind(str, Enum):
    """Available layout strategies."""
    FORCE = "force"
    CIRCULAR = "circular"
    HIERARCHICAL = "hierarchical"


@dataclass(frozen=True)
class GraphSettings:
    """Layout and visualization settings.

    Attributes:
        layout (LayoutKind): Layout strategy to run
        iterations (int): Force-directed simulation steps
        repulsion (float): Force-directed repulsion constant
        attraction (float): Force-directed attraction constant
        node_size (float): Node radius used by the renderer
        edge_thickness (float): Edge stroke width used by the renderer
        color_by_type (bool): Colour nodes by type
        show_mastery (bool): Colour nodes by mastery and draw the mastery dot
        show_labels (bool): Draw node labels
        show_relationships (bool): Draw relationship names on edges
        width (float): Canvas width in model units
        height (float): Canvas height in model units
        radius (float): Circle radius of the circular layout
        center (Tuple[float, float]): Circle centre of the circular layout
        level_height (float): Vertical distance between hierarchical ranks
        level_offset (float): y of rank 0 in the hierarchical layout
    """
    layout: LayoutKind = LayoutKind.FORCE
    iterations: int = 100
    repulsion: float = 1000.0
    attraction: float = 0.1
    node_size: float = 8.0
    edge_thickness: float = 2.0
    color_by_type: bool = True
    show_mastery: bool = True
    show_labels: bool = True
    show_relationships: bool = True
    width: float = 400.0
    height: float = 300.0
    radius: float = 150.0
    center: Tuple[float, float] = (200.0, 150.0)
    level_height: float = 80.0
    level_offset: float = 50.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GraphSettings":
        """Create settings from a mapping, clamping out-of-range numbers.

        Args:
            data: Settings keyed by field name or its camelCase spelling

        Returns:
            GraphSettings: Normalized settings

        Raises:
            ConfigurationError: If the layout name or a value's type is invalid
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in _FIELD_NAMES:
                logger.warning(f"Ignoring unknown setting '{key}'")
                continue
            values[name] = value

        if "layout" in values:
            values["layout"] = parse_layout(values["layout"])
        if "center" in values:
            values["center"] = _parse_center(values["center"])

        for name, (low, high, kind) in _NUMERIC_RANGES.items():
            if name in values:
                values[name] = _clamp(name, values[name], low, high, kind)
        for name in _FLAGS:
            if name in values:
                values[name] = bool(values[name])

        return replace(cls(), **values)

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation, suitable for YAML output."""
        data = asdict(self)
        data["layout"] = self.layout.value
        data["center"] = list(self.center)
        return data


_FIELD_NAMES = frozenset(f.name for f in fields(GraphSettings))

_ALIASES = {
    "nodeSize": "node_size",
    "edgeThickness": "edge_thickness",
    "colorByType": "color_by_type",
    "showMastery": "show_mastery",
    "showLabels": "show_labels",
    "showRelationships": "show_relationships",
    "levelHeight": "level_height",
    "levelOffset": "level_offset",
}

# name -> (min, max, type); None means unbounded
_NUMERIC_RANGES = {
    "iterations": (0, None, int),
    "repulsion": (0.0, None, float),
    "attraction": (0.0, None, float),
    "node_size": (4.0, 16.0, float),
    "edge_thickness": (1.0, 8.0, float),
    "width": (1.0, None, float),
    "height": (1.0, None, float),
    "radius": (0.0, None, float),
    "level_height": (1.0, None, float),
    "level_offset": (None, None, float),
}

_FLAGS = ("color_by_type", "show_mastery", "show_labels", "show_relationships")


def parse_layout(value: Union[str, LayoutKind]) -> LayoutKind:
    """Resolve a layout name to a LayoutKind.

    Raises:
        ConfigurationError: If the name is not a known layout
    """
    try:
        return LayoutKind(value)
    except ValueError:
        known = ", ".join(kind.value for kind in LayoutKind)
        raise ConfigurationError(f"Unknown layout '{value}', expected one of: {known}")


def _parse_center(value: Any) -> Tuple[float, float]:
    if isinstance(value, Mapping):
        value = (value.get("x"), value.get("y"))
    try:
        x, y = value
        return (float(x), float(y))
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid center {value!r}, expected [x, y]")


def _clamp(name: str, value: Any, low: Optional[float], high: Optional[float], kind: type) -> Any:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid value for {name}: {value!r}")
    try:
        if not math.isfinite(float(value)):
            raise ValueError(value)
        number = kind(value)
    except (TypeError, ValueError, OverflowError):
        raise ConfigurationError(f"Invalid value for {name}: {value!r}")

    clamped = number
    if low is not None and clamped < low:
        clamped = kind(low)
    if high is not None and clamped > high:
        clamped = kind(high)
    if clamped != number:
        logger.warning(f"Setting {name}={number} out of range, clamped to {clamped}")
    return clamped


def load_settings(config_path: Optional[Union[str, Path]] = None) -> GraphSettings:
    """Load settings from a YAML file, falling back to defaults.

    The file may hold the settings at top level or under a ``graph`` key.
    Values in the file are merged over the defaults.

    Args:
        config_path: Path to the YAML file, defaults to ``config.yaml``

    Returns:
        GraphSettings: Loaded settings

    Raises:
        ConfigurationError: If the file cannot be parsed or holds invalid settings
    """
    path = Path(config_path) if config_path else Path("config.yaml")
    if not path.exists():
        logger.warning(f"Config file {path} not found, using default settings")
        return GraphSettings()

    try:
        with open(path, encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse config file {path}: {e}")
        raise ConfigurationError(f"Failed to parse config file {path}: {e}")

    section = user_config.get("graph", user_config) if isinstance(user_config, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    merged = GraphSettings().to_dict()
    _deep_merge_dict(merged, section)
    settings = GraphSettings.from_dict(merged)
    logger.info(f"Loaded settings from {path} (layout={settings.layout.value})")
    return settings


def _deep_merge_dict(target: Dict, source: Dict) -> None:
    """Deep merge two dictionaries.

    Args:
        target: Target dictionary to merge into
        source: Source dictionary to merge from
    """
    for key, value in source.items():
        if key in target and isinstance(target[key], dict) and isinstance(value, dict):
            _deep_merge_dict(target[key], value)
        else:
            target[key] = value
