"""BMFont descriptor assembly.

Combines packed glyph metrics, font-wide metrics and kerning into the
descriptor document, and builds the settings a later run needs to resume.
"""

import dataclasses
from collections.abc import Callable
from typing import Any

from sdfatlas.config.settings import GeneratorOptions
from sdfatlas.core.geometry import round_all_values
from sdfatlas.domain.atlas import FontDescriptor, KerningPair, PackedRect
from sdfatlas.domain.state import PackerState
from sdfatlas.io.descriptor import serialize_descriptor

# Takes two characters, returns their kerning in font units
KerningSource = Callable[[str, str], int]


@dataclasses.dataclass(frozen=True)
class FontMetrics:
    """Font-wide metrics in font units.

    Attributes:
        face: Face name written to the descriptor
        units_per_em: Font design units per em
        ascender: Typographic ascender
        descender: Typographic descender (negative below the baseline)
        line_gap: Typographic line gap
    """

    face: str
    units_per_em: int
    ascender: int
    descender: int
    line_gap: int


class MetadataAssembler:
    """Builds the descriptor document for a run.

    Example:
        assembler = MetadataAssembler(options, metrics, reader.get_kerning)
        descriptor = assembler.build(placements, pages, (512, 512))
        text = assembler.serialize(descriptor)
    """

    def __init__(
        self,
        options: GeneratorOptions,
        metrics: FontMetrics,
        kerning: KerningSource,
    ) -> None:
        """Initialize the assembler.

        Args:
            options: Resolved generator options
            metrics: Font-wide metrics
            kerning: Kerning lookup for character pairs
        """
        self.options = options
        self.metrics = metrics
        self.kerning = kerning

    @property
    def scale(self) -> float:
        """Font units to pixels factor."""
        return self.options.font_size / self.metrics.units_per_em

    @property
    def pad(self) -> int:
        return self.options.distance_range >> 1

    @property
    def baseline(self) -> float:
        """Distance from the line top to the baseline, glyph padding included."""
        return self.metrics.ascender * self.scale + self.pad

    @property
    def line_height(self) -> float:
        m = self.metrics
        return (m.ascender - m.descender + m.line_gap) * self.scale

    def kernings(self) -> list[KerningPair]:
        """Scan every ordered character pair for kerning.

        Returns:
            Pairs with a nonzero adjustment, in charset order
        """
        charset = self.options.charset
        pairs: list[KerningPair] = []
        for first in charset:
            for second in charset:
                amount = self.kerning(first, second)
                if amount != 0:
                    pairs.append(KerningPair(ord(first), ord(second), amount * self.scale))
        return pairs

    def build(
        self,
        placements: list[PackedRect],
        pages: list[str],
        page_size: tuple[int, int],
        kernings: list[KerningPair] | None = None,
    ) -> FontDescriptor:
        """Assemble the descriptor document.

        Args:
            placements: Packed glyphs
            pages: Page image file names
            page_size: (width, height) of the first page
            kernings: Precomputed kerning pairs (None = scan now)

        Returns:
            FontDescriptor with one char record per placement
        """
        options = self.options
        if kernings is None:
            kernings = self.kernings()

        chars = tuple(
            dataclasses.replace(
                placed.glyph.metrics, x=placed.x, y=placed.y, page=placed.page
            ).to_dict()
            for placed in placements
        )

        return FontDescriptor(
            pages=tuple(pages),
            chars=chars,
            info={
                "face": self.metrics.face,
                "size": options.font_size,
                "bold": 0,
                "italic": 0,
                "charset": list(options.charset),
                "unicode": 1,
                "stretchH": 100,
                "smooth": 1,
                "aa": 1,
                "padding": list(options.font_padding),
                "spacing": list(options.font_spacing),
            },
            common={
                "lineHeight": self.line_height,
                "base": self.baseline,
                "scaleW": page_size[0],
                "scaleH": page_size[1],
                "pages": len(pages),
                "packed": 0,
                "alphaChnl": 0,
                "redChnl": 0,
                "greenChnl": 0,
                "blueChnl": 0,
            },
            distance_field={
                "fieldType": options.field_type.value,
                "distanceRange": options.distance_range,
            },
            kernings=tuple(pair.to_dict() for pair in kernings),
        )

    def to_dict(self, descriptor: FontDescriptor) -> dict[str, Any]:
        """Descriptor dictionary with the configured rounding applied."""
        data = descriptor.to_dict()
        if self.options.round_decimal is not None:
            data = round_all_values(data, self.options.round_decimal)
        return data

    def serialize(self, descriptor: FontDescriptor) -> str:
        """Serialize the descriptor in the configured output format."""
        return serialize_descriptor(self.to_dict(descriptor), self.options.output_type)

    def settings(self, pages: list[str], packer_state: PackerState) -> dict[str, Any]:
        """Build the resume settings for this run."""
        return {
            "opt": self.options.model_dump(mode="json"),
            "pages": list(pages),
            "packer": packer_state.model_dump(mode="json"),
        }
