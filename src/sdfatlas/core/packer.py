"""MaxRects bin packing of glyph images onto atlas pages.

Each page is a bin with a list of maximal free rectangles. A glyph is
placed into the free rectangle that leaves the least area unused
(best-area-fit), then every free rectangle it overlaps is split and
free rectangles contained in others are pruned.

Bins can be saved to and loaded from a PackerState, so a resumed run
adds glyphs around the ones already drawn on existing pages.
"""

from dataclasses import dataclass

import structlog

from sdfatlas.core.geometry import Rect, next_power_of_two
from sdfatlas.domain.atlas import PackedRect
from sdfatlas.domain.glyph import GlyphImage
from sdfatlas.domain.state import BinState, FreeRect, PackerState, PlacedRect
from sdfatlas.exceptions import PackingError

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class Placement:
    """A glyph rectangle placed on a bin (padding excluded)."""

    id: int
    rect: Rect


class MaxRectsBin:
    """One atlas page managed by the MaxRects algorithm.

    With smart sizing the page starts at 1x1 and grows to the extent of
    its placements, rounded to powers of two (pot) and squared (square)
    when requested. Without it the page always has its maximum size.
    """

    def __init__(
        self,
        max_width: int,
        max_height: int,
        padding: int = 0,
        smart: bool = False,
        pot: bool = False,
        square: bool = False,
    ) -> None:
        self.max_width = max_width
        self.max_height = max_height
        self.padding = padding
        self.smart = smart
        self.pot = pot
        self.square = square
        self.width = 1 if smart else max_width
        self.height = 1 if smart else max_height
        self.free_rects: list[Rect] = [
            Rect(0, 0, max_width + padding, max_height + padding)
        ]
        self.placements: list[Placement] = []

    def place(self, glyph_id: int, width: int, height: int) -> Rect | None:
        """Place a rectangle on this bin.

        Args:
            glyph_id: Code point recorded with the placement
            width: Rectangle width without padding
            height: Rectangle height without padding

        Returns:
            The placed rectangle, or None if it does not fit
        """
        node = self.find_node(width + self.padding, height + self.padding)
        if node is None:
            return None

        rect = Rect(node.x, node.y, width, height)
        size = self._grown_size(rect)
        if size is None:
            return None

        self._split_free_rects(node)
        self._prune_free_list()

        self.placements.append(Placement(glyph_id, rect))
        self.width, self.height = size
        return rect

    def forget(self, glyph_id: int) -> None:
        """Drop the placement records of a glyph.

        The area stays out of the free list, since the page still shows
        the glyph's old pixels there.
        """
        self.placements = [p for p in self.placements if p.id != glyph_id]

    def find_node(self, width: int, height: int) -> Rect | None:
        """Find the best-area-fit position for a padded rectangle.

        Ties are broken by the smaller leftover short side.
        """
        best: Rect | None = None
        best_area = best_short = None

        for free in self.free_rects:
            if free.width < width or free.height < height:
                continue
            area_fit = free.area() - width * height
            short_fit = min(free.width - width, free.height - height)
            if best is None or (area_fit, short_fit) < (best_area, best_short):
                best = Rect(free.x, free.y, width, height)
                best_area, best_short = area_fit, short_fit

        return best

    def _split_free_rects(self, used: Rect) -> None:
        remaining: list[Rect] = []
        for free in self.free_rects:
            if free.collides(used):
                remaining.extend(self._split_node(free, used))
            else:
                remaining.append(free)
        self.free_rects = remaining

    @staticmethod
    def _split_node(free: Rect, used: Rect) -> list[Rect]:
        """Split a free rectangle around a used one into maximal pieces."""
        pieces: list[Rect] = []

        if used.x < free.right and used.right > free.x:
            if free.y < used.y < free.bottom:
                pieces.append(Rect(free.x, free.y, free.width, used.y - free.y))
            if used.bottom < free.bottom:
                pieces.append(
                    Rect(free.x, used.bottom, free.width, free.bottom - used.bottom)
                )

        if used.y < free.bottom and used.bottom > free.y:
            if free.x < used.x < free.right:
                pieces.append(Rect(free.x, free.y, used.x - free.x, free.height))
            if used.right < free.right:
                pieces.append(
                    Rect(used.right, free.y, free.right - used.right, free.height)
                )

        return pieces

    def _prune_free_list(self) -> None:
        pruned: list[Rect] = []
        for i, rect in enumerate(self.free_rects):
            redundant = any(
                other.contains(rect) and (j < i or not rect.contains(other))
                for j, other in enumerate(self.free_rects)
                if j != i
            )
            if not redundant:
                pruned.append(rect)
        self.free_rects = pruned

    def _grown_size(self, rect: Rect) -> tuple[int, int] | None:
        """Page size after placing rect, or None if it exceeds the maximum."""
        if not self.smart:
            return self.width, self.height

        width = max(self.width, rect.right)
        height = max(self.height, rect.bottom)
        if self.pot:
            width = next_power_of_two(width)
            height = next_power_of_two(height)
        if self.square:
            width = height = max(width, height)

        if width > self.max_width or height > self.max_height:
            return None
        return width, height

    def save(self) -> BinState:
        """Snapshot the bin's free space and placements."""
        return BinState(
            width=self.width,
            height=self.height,
            max_width=self.max_width,
            max_height=self.max_height,
            free_rects=[
                FreeRect(x=r.x, y=r.y, width=r.width, height=r.height)
                for r in self.free_rects
            ],
            rects=[
                PlacedRect(
                    id=p.id,
                    x=p.rect.x,
                    y=p.rect.y,
                    width=p.rect.width,
                    height=p.rect.height,
                )
                for p in self.placements
            ],
        )

    @classmethod
    def from_state(
        cls,
        state: BinState,
        padding: int = 0,
        smart: bool = False,
        pot: bool = False,
        square: bool = False,
    ) -> "MaxRectsBin":
        """Restore a bin from a snapshot."""
        bin_ = cls(state.max_width, state.max_height, padding, smart, pot, square)
        bin_.width = state.width
        bin_.height = state.height
        bin_.free_rects = [Rect(r.x, r.y, r.width, r.height) for r in state.free_rects]
        bin_.placements = [
            Placement(r.id, Rect(r.x, r.y, r.width, r.height)) for r in state.rects
        ]
        return bin_


class AtlasPacker:
    """Assigns glyph images to atlas pages.

    Glyphs are packed largest side first. Blank glyphs occupy no area and
    are assigned page 0 at (0, 0). After load(), glyphs already placed on
    the loaded pages with the same size keep their placement.

    Example:
        packer = AtlasPacker(512, 512, padding=1)
        placements = packer.pack(glyphs)
        state = packer.save()
    """

    def __init__(
        self,
        width: int,
        height: int,
        padding: int = 0,
        smart: bool = False,
        pot: bool = False,
        square: bool = False,
    ) -> None:
        """Initialize the packer.

        Args:
            width: Maximum page width
            height: Maximum page height
            padding: Space kept free right and below each glyph
            smart: Shrink pages to their used extent
            pot: Round smart page sizes up to powers of two
            square: Make smart pages square
        """
        self.width = width
        self.height = height
        self.padding = padding
        self.smart = smart
        self.pot = pot
        self.square = square
        self.bins: list[MaxRectsBin] = []
        self.reused_count = 0

    def _new_bin(self) -> MaxRectsBin:
        bin_ = MaxRectsBin(
            self.width, self.height, self.padding, self.smart, self.pot, self.square
        )
        self.bins.append(bin_)
        return bin_

    @property
    def page_count(self) -> int:
        return len(self.bins)

    def load(self, state: PackerState) -> None:
        """Restore pages from a previous run."""
        self.bins = [
            MaxRectsBin.from_state(
                bin_state, self.padding, self.smart, self.pot, self.square
            )
            for bin_state in state.bins
        ]
        logger.debug("Packer state loaded", pages=len(self.bins))

    def save(self) -> PackerState:
        """Snapshot all pages for a later resume."""
        return PackerState(bins=[bin_.save() for bin_ in self.bins])

    def _previous_placements(self) -> dict[int, tuple[int, Rect]]:
        previous: dict[int, tuple[int, Rect]] = {}
        for page, bin_ in enumerate(self.bins):
            for placement in bin_.placements:
                previous[placement.id] = (page, placement.rect)
        return previous

    def _forget(self, glyph_id: int) -> None:
        for bin_ in self.bins:
            bin_.forget(glyph_id)

    def pack(self, glyphs: list[GlyphImage]) -> list[PackedRect]:
        """Place glyphs on pages.

        Args:
            glyphs: Rasterized glyphs

        Returns:
            One placement per glyph, in input order

        Raises:
            PackingError: If a glyph is larger than a page
        """
        previous = self._previous_placements()
        placed: list[PackedRect | None] = [None] * len(glyphs)
        pending: list[int] = []
        self.reused_count = 0

        for i, glyph in enumerate(glyphs):
            if glyph.is_blank():
                placed[i] = PackedRect(glyph=glyph, page=0, x=0, y=0)
                continue
            prior = previous.get(glyph.metrics.id)
            if prior is not None:
                page, rect = prior
                if (rect.width, rect.height) == (glyph.width, glyph.height):
                    placed[i] = PackedRect(glyph=glyph, page=page, x=rect.x, y=rect.y)
                    self.reused_count += 1
                    continue
            pending.append(i)

        for i in pending:
            self._forget(glyphs[i].metrics.id)

        pending.sort(key=lambda i: max(glyphs[i].width, glyphs[i].height), reverse=True)

        for i in pending:
            placed[i] = self._place(glyphs[i])

        if not self.bins:
            self._new_bin()

        return [rect for rect in placed if rect is not None]

    def _place(self, glyph: GlyphImage) -> PackedRect:
        for page, bin_ in enumerate(self.bins):
            rect = bin_.place(glyph.metrics.id, glyph.width, glyph.height)
            if rect is not None:
                return PackedRect(glyph=glyph, page=page, x=rect.x, y=rect.y)

        bin_ = self._new_bin()
        rect = bin_.place(glyph.metrics.id, glyph.width, glyph.height)
        if rect is None:
            self.bins.pop()
            raise PackingError(
                glyph.char,
                f"{glyph.width}x{glyph.height} image does not fit a "
                f"{self.width}x{self.height} page",
            )
        return PackedRect(glyph=glyph, page=len(self.bins) - 1, x=rect.x, y=rect.y)
