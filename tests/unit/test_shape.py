"""Tests for shape extraction."""

from unittest.mock import patch

from sdfatlas.config import ContourFilterConfig
from sdfatlas.core.shape import (
    ShapeExtractor,
    filter_contours,
    split_contours,
    stringify_contours,
)
from sdfatlas.domain import BoundingBox, CommandType, Contour, GlyphOutline, PathCommand

M, L, Q, C, Z = (
    CommandType.MOVE,
    CommandType.LINE,
    CommandType.QUAD,
    CommandType.CUBIC,
    CommandType.CLOSE,
)


def rectangle(x: float, y: float, width: float, height: float) -> list[PathCommand]:
    return [
        PathCommand(M, x, y),
        PathCommand(L, x + width, y),
        PathCommand(L, x + width, y + height),
        PathCommand(L, x, y + height),
        PathCommand(L, x, y),
        PathCommand(Z),
    ]


def make_outline(commands: list[PathCommand], char: str = "A") -> GlyphOutline:
    return GlyphOutline(
        char=char,
        index=1,
        commands=commands,
        bounds=BoundingBox(0.0, -20.0, 20.0, 0.0),
        advance_width=25.0,
    )


class TestSplitContours:
    """Tests for split_contours function."""

    def test_splits_at_move(self) -> None:
        """Test each move command starts a new contour."""
        contours = split_contours(rectangle(0, 0, 10, 10) + rectangle(20, 0, 5, 5))
        assert len(contours) == 2
        assert all(contour.commands[0].type == M for contour in contours)
        assert len(contours[0]) == 6

    def test_empty_path(self) -> None:
        """Test an empty path has no contours."""
        assert split_contours([]) == []


class TestFilterContours:
    """Tests for filter_contours function."""

    def test_removes_specks(self) -> None:
        """Test contours small in both directions are removed."""
        contours = split_contours(rectangle(0, 0, 10, 10) + rectangle(20, 0, 0.5, 0.5))
        kept, removed = filter_contours(contours, small=1.0, large=10.0)
        assert removed == 1
        assert kept == [contours[0]]

    def test_removes_short_slivers(self) -> None:
        """Test thin contours shorter than the large threshold are removed."""
        contours = split_contours(rectangle(0, 0, 0.5, 8))
        _, removed = filter_contours(contours, small=1.0, large=10.0)
        assert removed == 1

    def test_keeps_long_thin_strokes(self) -> None:
        """Test thin contours longer than the large threshold are kept."""
        contours = split_contours(rectangle(0, 0, 0.5, 30))
        kept, removed = filter_contours(contours, small=1.0, large=10.0)
        assert removed == 0
        assert len(kept) == 1


class TestStringifyContours:
    """Tests for stringify_contours function."""

    def test_closed_contour(self) -> None:
        """Test a contour ending on its start point gets no #."""
        text = stringify_contours(split_contours(rectangle(0, 0, 10, 5)))
        assert text == "{ 0, 0; 10, 0; 10, 5; 0, 5; 0, 0 }"

    def test_open_contour_closed_with_hash(self) -> None:
        """Test a contour ending elsewhere is closed with #."""
        contour = Contour(
            commands=[PathCommand(M, 0, 0), PathCommand(L, 10, 0), PathCommand(L, 10, 5)]
        )
        assert stringify_contours([contour]) == "{ 0, 0; 10, 0; 10, 5; # }"

    def test_curves(self) -> None:
        """Test control points precede their end points in parentheses."""
        contour = Contour(
            commands=[
                PathCommand(M, 0, 0),
                PathCommand(Q, 10, 0, 5, -5),
                PathCommand(C, 0, 0, 10, 5, 0, 5),
                PathCommand(Z),
            ]
        )
        assert stringify_contours([contour]) == (
            "{ 0, 0; (5, -5); 10, 0; (10, 5; 0, 5); 0, 0 }"
        )

    def test_coordinates_rounded_to_three_decimals(self) -> None:
        """Test coordinates are rounded half up to three decimals."""
        contour = Contour(
            commands=[PathCommand(M, 1.23456, 0.0005), PathCommand(L, 2.5, 1.0)]
        )
        assert stringify_contours([contour]) == "{ 1.235, 0.001; 2.5, 1; # }"

    def test_several_contours(self) -> None:
        """Test contours are joined by a space."""
        text = stringify_contours(split_contours(rectangle(0, 0, 1, 1) + rectangle(2, 2, 1, 1)))
        assert text.count("{") == 2
        assert "} {" in text


class TestShapeExtractor:
    """Tests for ShapeExtractor class."""

    def test_extract_without_tolerance(self) -> None:
        """Test all contours are kept when tolerance is 0."""
        extractor = ShapeExtractor(tolerance=0.0)
        shape = extractor.extract(make_outline(rectangle(0, 0, 10, 10) + rectangle(20, 0, 0.1, 0.1)))
        assert len(shape.contours) == 2
        assert shape.filtered == 0
        assert shape.bounds == BoundingBox(0.0, -20.0, 20.0, 0.0)
        assert not shape.is_empty()

    def test_extract_filters_with_tolerance(self) -> None:
        """Test small contours are dropped when tolerance is set."""
        extractor = ShapeExtractor(tolerance=1.0)
        shape = extractor.extract(make_outline(rectangle(0, 0, 10, 10) + rectangle(20, 0, 0.1, 0.1)))
        assert len(shape.contours) == 1
        assert shape.filtered == 1
        assert shape.descriptor.count("{") == 1

    def test_filter_config_passed_explicitly(self) -> None:
        """Test threshold factors come from the filter configuration."""
        config = ContourFilterConfig(small_factor=20.0, large_factor=200.0)
        extractor = ShapeExtractor(tolerance=1.0, filter_config=config)
        shape = extractor.extract(make_outline(rectangle(0, 0, 10, 10)))
        assert shape.filtered == 1
        assert shape.is_empty()

    def test_empty_outline(self) -> None:
        """Test a glyph without outline yields an empty shape."""
        shape = ShapeExtractor().extract(make_outline([], char=" "))
        assert shape.is_empty()
        assert shape.descriptor == ""
        assert not shape.degenerate

    def test_degenerate_contour_logged(self) -> None:
        """Test a single-command contour is reported but not fatal."""
        commands = rectangle(0, 0, 10, 10) + [PathCommand(M, 30, 30)]
        with patch("sdfatlas.core.shape.logger") as mock_logger:
            shape = ShapeExtractor().extract(make_outline(commands))

        assert shape.degenerate
        assert len(shape.contours) == 2
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "Failed to normalize glyph"
