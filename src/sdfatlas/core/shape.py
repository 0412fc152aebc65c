"""Shape extraction for the distance field rasterizer.

This module turns a glyph outline into contours and a shape description
string in msdfgen's -defineshape syntax:

    { x, y; (cx, cy); x, y; (c1x, c1y; c2x, c2y); x, y; # }

Each contour is enclosed in braces. Control points are in parentheses
before their end point, and # stands for the contour's first point.
"""

from dataclasses import dataclass

import structlog

from sdfatlas.config.settings import ContourFilterConfig
from sdfatlas.core.geometry import round_number
from sdfatlas.domain.contour import BoundingBox, CommandType, Contour, PathCommand
from sdfatlas.domain.glyph import GlyphOutline

logger = structlog.get_logger(__name__)

# Decimal places of coordinates in shape descriptions
COORDINATE_DECIMALS = 3


@dataclass
class ShapeDescription:
    """A glyph shape ready for rasterization.

    Attributes:
        contours: Contours left after filtering
        descriptor: Shape description string
        bounds: Glyph bounds in pixels
        filtered: Number of contours removed by the tolerance filter
        degenerate: Whether a single-command contour remained
    """

    contours: list[Contour]
    descriptor: str
    bounds: BoundingBox
    filtered: int = 0
    degenerate: bool = False

    def is_empty(self) -> bool:
        """Check if there is nothing to draw."""
        return not any(len(contour) for contour in self.contours)


def split_contours(commands: list[PathCommand]) -> list[Contour]:
    """Split path commands into contours at each move command.

    Args:
        commands: Path commands of a whole glyph

    Returns:
        One contour per sub-path (no contours for an empty path)
    """
    contours: list[Contour] = []
    current: list[PathCommand] = []

    for command in commands:
        if command.type == CommandType.MOVE and current:
            contours.append(Contour(commands=current))
            current = []
        current.append(command)

    if current:
        contours.append(Contour(commands=current))

    return contours


def filter_contours(
    contours: list[Contour],
    small: float,
    large: float,
) -> tuple[list[Contour], int]:
    """Remove visually insignificant contours.

    A contour is removed when its shorter side is below the small
    threshold and its longer side below the large one. Tiny specks and
    short slivers go; long thin strokes stay.

    Args:
        contours: Contours to filter
        small: Small threshold in pixels
        large: Large threshold in pixels

    Returns:
        Tuple of (kept contours, number removed)
    """
    kept: list[Contour] = []
    for contour in contours:
        box = contour.bounding_box()
        shorter = min(box.width, box.height)
        longer = max(box.width, box.height)
        if shorter < small and longer < large:
            continue
        kept.append(contour)
    return kept, len(contours) - len(kept)


def _format_coordinate(value: float) -> str:
    rounded = round_number(value, COORDINATE_DECIMALS)
    if rounded.is_integer():
        return str(int(rounded))
    return repr(rounded)


def _format_point(x: float, y: float) -> str:
    return f"{_format_coordinate(x)}, {_format_coordinate(y)}"


def stringify_contours(contours: list[Contour]) -> str:
    """Build a shape description string from contours.

    Contours whose last point differs from their first are closed with #.

    Args:
        contours: Contours to describe

    Returns:
        Shape description in msdfgen syntax
    """
    parts: list[str] = []

    for contour in contours:
        tokens: list[str] = []
        start: tuple[str, str] | None = None
        last: tuple[str, str] | None = None

        for command in contour.commands:
            if command.type == CommandType.CLOSE:
                continue
            if command.type == CommandType.QUAD:
                tokens.append(f"({_format_point(command.x1, command.y1)})")
            elif command.type == CommandType.CUBIC:
                tokens.append(
                    f"({_format_point(command.x1, command.y1)}; "
                    f"{_format_point(command.x2, command.y2)})"
                )
            point = (_format_coordinate(command.x), _format_coordinate(command.y))
            tokens.append(f"{point[0]}, {point[1]}")
            if start is None:
                start = point
            last = point

        if not tokens:
            parts.append("{}")
            continue
        if last != start:
            tokens.append("#")
        parts.append("{ " + "; ".join(tokens) + " }")

    return " ".join(parts)


class ShapeExtractor:
    """Converts glyph outlines into shape descriptions.

    The contour filter is disabled when the tolerance is 0.

    Example:
        extractor = ShapeExtractor(tolerance=0.5)
        shape = extractor.extract(outline)
        shape.descriptor
    """

    def __init__(
        self,
        tolerance: float = 0.0,
        filter_config: ContourFilterConfig | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            tolerance: Contour size tolerance in pixels (0 disables filtering)
            filter_config: Threshold factors for the filter
        """
        self.tolerance = tolerance
        self.filter_config = filter_config or ContourFilterConfig()

    def extract(self, outline: GlyphOutline) -> ShapeDescription:
        """Extract the shape description of a glyph.

        Args:
            outline: Glyph outline in pixel space

        Returns:
            ShapeDescription with the filtered contours and descriptor
        """
        contours = split_contours(outline.commands)
        filtered = 0

        if self.tolerance > 0:
            small, large = self.filter_config.thresholds(self.tolerance)
            contours, filtered = filter_contours(contours, small, large)
            if filtered:
                logger.debug("Small contours removed", char=outline.char, filtered=filtered)

        degenerate = any(contour.is_degenerate() for contour in contours)
        if degenerate:
            logger.warning(
                "Failed to normalize glyph",
                char=outline.char,
                reason="contour with a single command",
            )

        return ShapeDescription(
            contours=contours,
            descriptor=stringify_contours(contours),
            bounds=outline.bounds,
            filtered=filtered,
            degenerate=degenerate,
        )
