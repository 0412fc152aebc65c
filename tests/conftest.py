"""Shared fixtures: fonts built on the fly and a fake msdfgen process."""

import re
import threading
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

UNITS_PER_EM = 1000
ASCENDER = 800
DESCENDER = -200
LINE_GAP = 0
ADVANCE = 600

# Glyph name -> (xMin, yMin, xMax, yMax) of a rectangular outline
GLYPH_BOXES = {
    ".notdef": (50, 0, 450, 700),
    "A": (100, 0, 500, 700),
    "B": (100, 0, 600, 700),
    "C": (50, -100, 550, 750),
}

CHARACTER_MAP = {0x20: "space", 0x41: "A", 0x42: "B", 0x43: "C"}

KERNING_FEATURES = """
languagesystem DFLT dflt;
feature kern {
    pos A B -50;
} kern;
"""


def _rectangle(x_min: int, y_min: int, x_max: int, y_max: int):
    pen = TTGlyphPen(None)
    pen.moveTo((x_min, y_min))
    pen.lineTo((x_min, y_max))
    pen.lineTo((x_max, y_max))
    pen.lineTo((x_max, y_min))
    pen.closePath()
    return pen.glyph()


def build_test_font(path: Path, kerning: bool = True) -> Path:
    """Build a TrueType font with rectangular glyphs for A, B, C and an empty space."""
    glyph_order = [".notdef", "space", "A", "B", "C"]
    builder = FontBuilder(UNITS_PER_EM, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    builder.setupCharacterMap(CHARACTER_MAP)

    glyphs = {name: _rectangle(*box) for name, box in GLYPH_BOXES.items()}
    glyphs["space"] = TTGlyphPen(None).glyph()
    builder.setupGlyf(glyphs)

    metrics = {name: (ADVANCE, GLYPH_BOXES.get(name, (0,))[0]) for name in glyph_order}
    builder.setupHorizontalMetrics(metrics)
    builder.setupHorizontalHeader(ascent=ASCENDER, descent=DESCENDER)
    builder.setupNameTable({"familyName": "Atlas Test", "styleName": "Regular"})
    builder.setupOS2(
        sTypoAscender=ASCENDER,
        sTypoDescender=DESCENDER,
        sTypoLineGap=LINE_GAP,
        usWinAscent=ASCENDER,
        usWinDescent=-DESCENDER,
    )
    builder.setupPost()
    if kerning:
        builder.addOpenTypeFeatures(KERNING_FEATURES)
    builder.save(str(path))
    return path


class FakeRasterProcess:
    """Stands in for msdfgen: returns a filled image of the requested size.

    Records the argument list of every call.
    """

    def __init__(self, channels: int = 3, value: str = "80") -> None:
        self.channels = channels
        self.value = value
        self.calls: list[list[str]] = []
        self._lock = threading.Lock()

    def __call__(self, args: list[str]) -> str:
        with self._lock:
            self.calls.append(list(args))
        size = args.index("-size")
        width, height = int(args[size + 1]), int(args[size + 2])
        row = " ".join([self.value] * (width * self.channels))
        return "\n".join([row] * height) + "\n"

    def shapes(self) -> list[str]:
        """Shape descriptions passed to the process."""
        return [call[call.index("-defineshape") + 1] for call in self.calls]

    @staticmethod
    def size_of(args: list[str]) -> tuple[int, int]:
        match = re.search(r"-size (\d+) (\d+)", " ".join(args))
        assert match is not None
        return int(match.group(1)), int(match.group(2))


@pytest.fixture
def test_font(tmp_path: Path) -> Path:
    """TrueType font with GPOS kerning for the pair A B."""
    return build_test_font(tmp_path / "AtlasTest.ttf")


@pytest.fixture
def unkerned_font(tmp_path: Path) -> Path:
    """TrueType font without kerning."""
    return build_test_font(tmp_path / "Unkerned.ttf", kerning=False)


@pytest.fixture
def fake_process() -> FakeRasterProcess:
    """Fake three-channel msdfgen."""
    return FakeRasterProcess(channels=3)


@pytest.fixture
def fake_sdf_process() -> FakeRasterProcess:
    """Fake single-channel msdfgen."""
    return FakeRasterProcess(channels=1)
