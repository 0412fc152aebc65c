"""Core geometric types for glyph outlines.

This module defines the outline types used by shape extraction:
- CommandType: Enum for path command kinds
- PathCommand: A single move/line/curve/close command in pixel space
- Contour: The commands of one closed sub-path
- BoundingBox: Axis-aligned bounds in pixel space
"""

from dataclasses import dataclass, field
from enum import Enum


class CommandType(str, Enum):
    """Path command kind.

    Values follow the SVG path letters:
    - MOVE: Start a new sub-path
    - LINE: Straight segment to (x, y)
    - QUAD: Quadratic Bezier with control (x1, y1)
    - CUBIC: Cubic Bezier with controls (x1, y1) and (x2, y2)
    - CLOSE: Close the current sub-path
    """

    MOVE = "M"
    LINE = "L"
    QUAD = "Q"
    CUBIC = "C"
    CLOSE = "Z"


@dataclass(frozen=True, slots=True)
class PathCommand:
    """A path command with absolute pixel coordinates.

    Coordinates are in scaled pixel units with the origin on the baseline
    and y growing downward.

    Attributes:
        type: Command kind
        x: End point X (unused for CLOSE)
        y: End point Y (unused for CLOSE)
        x1: First control point X (QUAD, CUBIC)
        y1: First control point Y (QUAD, CUBIC)
        x2: Second control point X (CUBIC)
        y2: Second control point Y (CUBIC)
    """

    type: CommandType
    x: float = 0.0
    y: float = 0.0
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0

    def points(self) -> list[tuple[float, float]]:
        """Get all coordinate pairs of the command, controls included."""
        if self.type == CommandType.CLOSE:
            return []
        if self.type == CommandType.QUAD:
            return [(self.x1, self.y1), (self.x, self.y)]
        if self.type == CommandType.CUBIC:
            return [(self.x1, self.y1), (self.x2, self.y2), (self.x, self.y)]
        return [(self.x, self.y)]


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box.

    Attributes:
        x1: Left edge
        y1: Top edge (y grows downward)
        x2: Right edge
        y2: Bottom edge
    """

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1


@dataclass
class Contour:
    """One closed sub-path of a glyph outline.

    A contour starts with a MOVE command. A contour made of a single
    command is degenerate and signals a normalization failure.

    Attributes:
        commands: Path commands of the contour, in drawing order
    """

    commands: list[PathCommand]
    _cached_bbox: BoundingBox | None = field(default=None, repr=False, init=False)

    def __len__(self) -> int:
        return len(self.commands)

    def is_degenerate(self) -> bool:
        """Check if the contour has exactly one command."""
        return len(self.commands) == 1

    def bounding_box(self) -> BoundingBox:
        """Calculate the bounding box of all command points.

        Control points are included, so curved contours get a slightly
        generous box. Result is cached.

        Returns:
            Bounding box of the contour
        """
        if self._cached_bbox is not None:
            return self._cached_bbox

        points = [point for command in self.commands for point in command.points()]
        if not points:
            self._cached_bbox = BoundingBox()
            return self._cached_bbox

        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        self._cached_bbox = BoundingBox(min(xs), min(ys), max(xs), max(ys))
        return self._cached_bbox
