"""Zoom and pan transforms.

These functions do not depend on the graph. The renderer applies
``scale(zoom) translate(pan)``, so a model point p lands on screen at
``zoom * (p + pan)``.
"""

from dataclasses import dataclass
from typing import Tuple

from conceptgraph.models import Position

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 0.2


@dataclass(frozen=True)
class Viewport:
    """Current zoom level and pan offset."""
    zoom: float = 1.0
    offset: Tuple[float, float] = (0.0, 0.0)


class ViewportController:
    """Stateless zoom/pan arithmetic."""

    @staticmethod
    def zoom(current_level: float, delta: float) -> float:
        """Change the zoom level, clamped to [MIN_ZOOM, MAX_ZOOM]."""
        return max(MIN_ZOOM, min(MAX_ZOOM, current_level + delta))

    @staticmethod
    def pan(current_offset: Tuple[float, float], dx: float, dy: float) -> Tuple[float, float]:
        """Move the pan offset. The offset is not bounded."""
        return (current_offset[0] + dx, current_offset[1] + dy)

    @staticmethod
    def zoom_in(viewport: Viewport) -> Viewport:
        return Viewport(ViewportController.zoom(viewport.zoom, ZOOM_STEP), viewport.offset)

    @staticmethod
    def zoom_out(viewport: Viewport) -> Viewport:
        return Viewport(ViewportController.zoom(viewport.zoom, -ZOOM_STEP), viewport.offset)

    @staticmethod
    def to_screen(position: Position, viewport: Viewport) -> Position:
        """Map a model-space position to screen space."""
        return Position(
            viewport.zoom * (position.x + viewport.offset[0]),
            viewport.zoom * (position.y + viewport.offset[1]),
        )

    @staticmethod
    def to_model(position: Position, viewport: Viewport) -> Position:
        """Map a screen-space position back to model space."""
        return Position(
            position.x / viewport.zoom - viewport.offset[0],
            position.y / viewport.zoom - viewport.offset[1],
        )
