"""Distance field rasterization through the msdfgen binary.

msdfgen is invoked once per glyph with the shape description and canvas
geometry, and prints the bitmap as whitespace-separated hexadecimal
channel values. The output is converted to RGBA so every field type
shares one page format.
"""

import re
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from sdfatlas.config.settings import FieldType
from sdfatlas.core.geometry import round_half_up, round_number
from sdfatlas.core.shape import ShapeDescription
from sdfatlas.domain.contour import BoundingBox
from sdfatlas.domain.glyph import GlyphImage, GlyphMetrics, GlyphOutline
from sdfatlas.exceptions import ConfigurationError, InvalidRasterError, RasterizationError

RASTERIZER_BINARY = "msdfgen"

_HEX_VALUE = re.compile(r"[0-9a-fA-F]+")

# Takes msdfgen arguments, returns its standard output
RasterProcess = Callable[[list[str]], str]


class MsdfgenProcess:
    """Runs the msdfgen binary.

    Example:
        process = MsdfgenProcess.locate(None, timeout=30)
        stdout = process(["sdf", "-format", "text", ...])
    """

    def __init__(self, binary_path: Path, timeout: float) -> None:
        """Initialize the process runner.

        Args:
            binary_path: Path to the msdfgen executable
            timeout: Seconds before an invocation is killed
        """
        self.binary_path = binary_path
        self.timeout = timeout

    @classmethod
    def locate(cls, binary_path: Path | None, timeout: float) -> "MsdfgenProcess":
        """Create a runner for a configured or PATH-installed msdfgen.

        Args:
            binary_path: Explicit binary path (None = search PATH)
            timeout: Seconds before an invocation is killed

        Returns:
            MsdfgenProcess instance

        Raises:
            ConfigurationError: If no msdfgen binary can be found
        """
        if binary_path is not None:
            if not binary_path.is_file():
                raise ConfigurationError(f"Rasterizer binary not found: {binary_path}")
            return cls(binary_path, timeout)

        found = shutil.which(RASTERIZER_BINARY)
        if found is None:
            raise ConfigurationError(
                f"No {RASTERIZER_BINARY} binary on PATH; pass --rasterizer to set one"
            )
        return cls(Path(found), timeout)

    def __call__(self, args: list[str]) -> str:
        """Run msdfgen and return its standard output.

        Raises:
            OSError: If the binary cannot be launched
            subprocess.TimeoutExpired: If the run exceeds the timeout
            subprocess.CalledProcessError: If msdfgen exits with an error
        """
        completed = subprocess.run(
            [str(self.binary_path), *args],
            capture_output=True,
            text=True,
            timeout=self.timeout,
            check=True,
        )
        return completed.stdout


@dataclass(frozen=True)
class CanvasGeometry:
    """Size and translation of a glyph's distance field image.

    Attributes:
        width: Image width including padding
        height: Image height including padding
        translate_x: Shape translation X passed to the rasterizer
        translate_y: Shape translation Y passed to the rasterizer
        pad: Padding on each side (half the distance range)
    """

    width: int
    height: int
    translate_x: float
    translate_y: float
    pad: int


def compute_canvas(
    bounds: BoundingBox,
    distance_range: int,
    round_decimal: int | None = None,
) -> CanvasGeometry:
    """Compute the image size and shape translation for glyph bounds.

    Args:
        bounds: Glyph bounds in pixels
        distance_range: Distance range in pixels
        round_decimal: Decimals for the translation (None = unrounded)

    Returns:
        CanvasGeometry for the glyph
    """
    pad = distance_range >> 1
    translate_x: float = round_half_up(-bounds.x1) + pad
    translate_y: float = round_half_up(-bounds.y1) + pad
    if round_decimal is not None:
        translate_x = round_number(float(translate_x), round_decimal)
        translate_y = round_number(float(translate_y), round_decimal)

    return CanvasGeometry(
        width=round_half_up(bounds.width) + pad + pad,
        height=round_half_up(bounds.height) + pad + pad,
        translate_x=translate_x,
        translate_y=translate_y,
        pad=pad,
    )


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def build_arguments(
    field_type: FieldType,
    canvas: CanvasGeometry,
    distance_range: int,
    descriptor: str,
) -> list[str]:
    """Build the msdfgen argument list for one glyph."""
    return [
        field_type.value,
        "-format", "text",
        "-stdout",
        "-size", str(canvas.width), str(canvas.height),
        "-translate", _format_number(canvas.translate_x), _format_number(canvas.translate_y),
        "-pxrange", str(distance_range),
        "-defineshape", descriptor,
    ]


def parse_raster_output(
    char: str,
    output: str,
    width: int,
    height: int,
    field_type: FieldType,
) -> bytes | None:
    """Convert msdfgen text output to an RGBA pixel buffer.

    msdf output keeps its three channels and gets an opaque alpha. sdf
    and psdf values are copied to all four channels.

    Args:
        char: Character being rasterized (for error messages)
        output: msdfgen standard output
        width: Expected image width
        height: Expected image height
        field_type: Distance field variant

    Returns:
        RGBA bytes, or None if the image is blank

    Raises:
        InvalidRasterError: If the value count is not a whole number of
            channels per pixel
    """
    values = [min(int(token, 16), 255) for token in _HEX_VALUE.findall(output)]
    area = width * height
    if area == 0:
        return None
    if len(values) % area != 0:
        raise InvalidRasterError(char, len(values), width, height)
    if not any(values):
        return None

    channels = len(values) // area
    if field_type == FieldType.MSDF and channels < 3:
        raise InvalidRasterError(char, len(values), width, height)

    pixels = bytearray()
    for start in range(0, len(values), channels):
        if field_type == FieldType.MSDF:
            pixels.extend(values[start:start + 3])
            pixels.append(255)
        else:
            value = values[start]
            pixels.extend((value, value, value, value))
    return bytes(pixels)


class GlyphRasterizer:
    """Rasterizes glyph shapes into distance field images.

    Example:
        rasterizer = GlyphRasterizer(process, FieldType.MSDF, distance_range=4)
        image = rasterizer.rasterize(outline, shape, ascender=33.6)
    """

    def __init__(
        self,
        process: RasterProcess,
        field_type: FieldType,
        distance_range: int,
        round_decimal: int | None = None,
    ) -> None:
        """Initialize the rasterizer.

        Args:
            process: Callable running the external rasterizer
            field_type: Distance field variant
            distance_range: Distance range in pixels
            round_decimal: Decimals for the translation (None = unrounded)
        """
        self.process = process
        self.field_type = field_type
        self.distance_range = distance_range
        self.round_decimal = round_decimal

    def rasterize(
        self,
        outline: GlyphOutline,
        shape: ShapeDescription,
        ascender: float,
    ) -> GlyphImage:
        """Rasterize one glyph.

        Glyphs with nothing to draw skip the external process and come
        back blank.

        Args:
            outline: Glyph outline with advance and index
            shape: Shape description of the outline
            ascender: Font ascender in pixels

        Returns:
            GlyphImage with RGBA pixels and metrics (0x0 if blank)

        Raises:
            RasterizationError: If the external process fails or times out
            InvalidRasterError: If the process output is malformed
        """
        canvas = compute_canvas(shape.bounds, self.distance_range, self.round_decimal)
        width, height = canvas.width, canvas.height

        pixels: bytes | None = None
        if not shape.is_empty():
            output = self._run(outline.char, shape, canvas)
            pixels = parse_raster_output(outline.char, output, width, height, self.field_type)

        if pixels is None:
            width = height = 0

        metrics = GlyphMetrics(
            id=outline.code,
            index=outline.index,
            char=outline.char,
            width=width,
            height=height,
            xoffset=round_half_up(shape.bounds.x1) - canvas.pad,
            yoffset=round_half_up(shape.bounds.y1) + canvas.pad + ascender,
            xadvance=outline.advance_width,
        )
        return GlyphImage(
            metrics=metrics,
            pixels=pixels,
            filtered_contours=shape.filtered,
            degenerate=shape.degenerate,
        )

    def _run(self, char: str, shape: ShapeDescription, canvas: CanvasGeometry) -> str:
        args = build_arguments(self.field_type, canvas, self.distance_range, shape.descriptor)
        try:
            return self.process(args)
        except subprocess.TimeoutExpired as e:
            raise RasterizationError(char, f"timed out after {e.timeout}s") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise RasterizationError(char, f"exit code {e.returncode}: {stderr}") from e
        except OSError as e:
            raise RasterizationError(char, f"cannot launch rasterizer: {e}") from e
