"""Converters between fontTools glyphs and domain models.

This module draws fontTools glyphs into pens that produce domain path
commands, bounding boxes and SVG outlines in pixel space. Pixel space
has its origin at (x, y) on the baseline and y growing downward.
"""

from typing import Any

from fontTools.pens.basePen import BasePen
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen

from sdfatlas.domain.contour import BoundingBox, CommandType, PathCommand


class CommandPen(BasePen):
    """Pen that records scaled, y-flipped path commands.

    BasePen decomposes TrueType implied on-curve points and components,
    so only single-segment callbacks reach this pen.

    Example:
        pen = CommandPen(glyph_set, scale=42 / 1000)
        glyph_set["A"].draw(pen)
        pen.commands
    """

    def __init__(
        self,
        glyph_set: Any,
        scale: float,
        x: float = 0.0,
        y: float = 0.0,
    ) -> None:
        super().__init__(glyph_set)
        self._scale = scale
        self._origin_x = x
        self._origin_y = y
        self.commands: list[PathCommand] = []

    def _transform(self, pt: tuple[float, float]) -> tuple[float, float]:
        return (
            self._origin_x + pt[0] * self._scale,
            self._origin_y - pt[1] * self._scale,
        )

    def _moveTo(self, pt: tuple[float, float]) -> None:
        x, y = self._transform(pt)
        self.commands.append(PathCommand(CommandType.MOVE, x, y))

    def _lineTo(self, pt: tuple[float, float]) -> None:
        x, y = self._transform(pt)
        self.commands.append(PathCommand(CommandType.LINE, x, y))

    def _qCurveToOne(self, pt1: tuple[float, float], pt2: tuple[float, float]) -> None:
        x1, y1 = self._transform(pt1)
        x, y = self._transform(pt2)
        self.commands.append(PathCommand(CommandType.QUAD, x, y, x1, y1))

    def _curveToOne(
        self,
        pt1: tuple[float, float],
        pt2: tuple[float, float],
        pt3: tuple[float, float],
    ) -> None:
        x1, y1 = self._transform(pt1)
        x2, y2 = self._transform(pt2)
        x, y = self._transform(pt3)
        self.commands.append(PathCommand(CommandType.CUBIC, x, y, x1, y1, x2, y2))

    def _closePath(self) -> None:
        self.commands.append(PathCommand(CommandType.CLOSE))

    def _endPath(self) -> None:
        # Open contours get no close command
        pass


def glyph_to_commands(glyph_set: Any, glyph_name: str, scale: float) -> list[PathCommand]:
    """Draw a glyph into pixel-space path commands.

    Args:
        glyph_set: fontTools glyph set of the font
        glyph_name: Name of the glyph to draw
        scale: Font units to pixels factor

    Returns:
        Path commands of the glyph outline
    """
    pen = CommandPen(glyph_set, scale)
    glyph_set[glyph_name].draw(pen)
    return pen.commands


def glyph_bounds(glyph_set: Any, glyph_name: str, scale: float) -> BoundingBox:
    """Calculate the exact pixel-space bounds of a glyph.

    Curve extrema are included. Glyphs without outlines get an empty box
    at the origin.

    Args:
        glyph_set: fontTools glyph set of the font
        glyph_name: Name of the glyph
        scale: Font units to pixels factor

    Returns:
        Bounding box with y growing downward
    """
    pen = BoundsPen(glyph_set)
    glyph_set[glyph_name].draw(pen)
    if pen.bounds is None:
        return BoundingBox()

    x_min, y_min, x_max, y_max = pen.bounds
    return BoundingBox(
        x1=x_min * scale,
        y1=-y_max * scale,
        x2=x_max * scale,
        y2=-y_min * scale,
    )


def glyph_to_svg_path(
    glyph_set: Any,
    glyph_name: str,
    scale: float,
    x: float,
    y: float,
) -> str:
    """Render a glyph outline as an SVG path element.

    Args:
        glyph_set: fontTools glyph set of the font
        glyph_name: Name of the glyph
        scale: Font units to pixels factor
        x: Baseline origin X in pixels
        y: Baseline origin Y in pixels

    Returns:
        An SVG <path> element, or an empty string for empty glyphs
    """
    svg_pen = SVGPathPen(glyph_set)
    pen = TransformPen(svg_pen, (scale, 0, 0, -scale, x, y))
    glyph_set[glyph_name].draw(pen)
    commands = svg_pen.getCommands()
    if not commands:
        return ""
    return f'<path d="{commands}"/>'
