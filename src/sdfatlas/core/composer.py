"""Page image composition.

Draws packed glyph images onto page canvases with Pillow and encodes
them as PNG. msdf pages start opaque black, sdf and psdf pages start
transparent. Pages recorded by a previous run are loaded from disk and
drawn first, so new glyphs are added on top of the existing atlas.
"""

from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import structlog
from PIL import Image, UnidentifiedImageError

from sdfatlas.config.settings import FieldType
from sdfatlas.domain.atlas import AtlasPage, PackedRect
from sdfatlas.exceptions import ResumeError

logger = structlog.get_logger(__name__)

# Returns the <path> element of a character with its origin at (x, y)
SvgPathSource = Callable[[str, float, float], str]

_OPAQUE_BLACK = (0, 0, 0, 255)
_TRANSPARENT = (0, 0, 0, 0)


def page_name(filename: str, index: int, page_count: int) -> str:
    """File name of a new page image.

    Examples:
        >>> page_name("font", 0, 1)
        'font.png'
        >>> page_name("font", 2, 3)
        'font.2.png'
    """
    if page_count > 1:
        return f"{filename}.{index}.png"
    return f"{filename}.png"


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes."""
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class PageComposer:
    """Builds atlas pages from packed glyphs.

    Example:
        composer = PageComposer(Path("out"), "font", FieldType.MSDF)
        pages = composer.compose(placements, [(512, 512)])
    """

    def __init__(
        self,
        output_dir: Path,
        filename: str,
        field_type: FieldType,
        existing_pages: list[str] | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            output_dir: Directory holding the page images
            filename: Base name for new page images
            field_type: Distance field variant (selects the background)
            existing_pages: Page file names recorded by a previous run
        """
        self.output_dir = output_dir
        self.filename = filename
        self.field_type = field_type
        self.existing_pages = list(existing_pages or [])

    @property
    def background(self) -> tuple[int, int, int, int]:
        return _OPAQUE_BLACK if self.field_type == FieldType.MSDF else _TRANSPARENT

    def page_names(self, page_count: int) -> list[str]:
        """Names of all pages: recorded names first, then new ones."""
        names = self.existing_pages[:page_count]
        for index in range(len(names), page_count):
            names.append(page_name(self.filename, index, page_count))
        return names

    def _new_canvas(self, index: int, name: str, size: tuple[int, int]) -> Image.Image:
        canvas = Image.new("RGBA", size, self.background)
        if index >= len(self.existing_pages):
            return canvas

        path = self.output_dir / name
        if not path.exists():
            raise ResumeError(str(path), "page image recorded in the settings is missing")
        try:
            with Image.open(path) as previous:
                canvas.paste(previous.convert("RGBA"), (0, 0))
        except (OSError, UnidentifiedImageError) as e:
            raise ResumeError(str(path), f"cannot read page image: {e}") from e

        logger.debug("Existing page loaded", page=index, path=str(path))
        return canvas

    def compose(
        self,
        placements: list[PackedRect],
        page_sizes: list[tuple[int, int]],
        svg_path: SvgPathSource | None = None,
        baseline: float = 0.0,
        pad: int = 0,
    ) -> list[AtlasPage]:
        """Draw glyphs onto their pages.

        Args:
            placements: Packed glyphs
            page_sizes: (width, height) of every page
            svg_path: Outline source for the SVG overlay (None = no overlay)
            baseline: Baseline position in pixels (overlay only)
            pad: Glyph image padding (overlay only)

        Returns:
            Pages with PNG data, and SVG overlays when requested

        Raises:
            ResumeError: If a recorded page image is missing or unreadable
        """
        names = self.page_names(len(page_sizes))
        canvases = [
            self._new_canvas(index, name, size)
            for index, (name, size) in enumerate(zip(names, page_sizes))
        ]
        overlays: list[list[str]] = [[] for _ in page_sizes]

        for placed in placements:
            glyph = placed.glyph
            if glyph.is_blank():
                continue
            image = Image.frombytes("RGBA", (glyph.width, glyph.height), glyph.pixels)
            canvases[placed.page].paste(image, (placed.x, placed.y))

            if svg_path is not None:
                origin_x = placed.x - glyph.metrics.xoffset + pad
                origin_y = placed.y - glyph.metrics.yoffset + baseline + pad
                path = svg_path(glyph.char, origin_x, origin_y)
                if path:
                    overlays[placed.page].append(path)

        pages: list[AtlasPage] = []
        for index, (name, canvas) in enumerate(zip(names, canvases)):
            width, height = canvas.size
            svg = None
            if svg_path is not None:
                svg = (
                    f'<svg xmlns="http://www.w3.org/2000/svg" '
                    f'width="{width}" height="{height}">\n'
                    + "".join(path + "\n" for path in overlays[index])
                    + "</svg>\n"
                )
            pages.append(
                AtlasPage(
                    index=index,
                    filename=self.output_dir / name,
                    width=width,
                    height=height,
                    image=encode_png(canvas),
                    svg=svg,
                )
            )
            canvas.close()

        return pages
