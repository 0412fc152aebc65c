"""Kerning lookup for fontTools fonts.

Kerning comes from the GPOS 'kern' feature when the font has one
(pair adjustment lookups, formats 1 and 2), otherwise from the legacy
'kern' table. Only the horizontal advance of the first glyph is used.
"""

from typing import Any

from fontTools.ttLib import TTFont

# GPOS lookup types
_LOOKUP_PAIR_POS = 2
_LOOKUP_EXTENSION = 9


def _x_advance(value_record: Any) -> int:
    if value_record is None:
        return 0
    return getattr(value_record, "XAdvance", 0) or 0


class _GlyphPairSubtable:
    """PairPos format 1: explicit glyph pairs."""

    def __init__(self, subtable: Any) -> None:
        self._pairs: dict[str, dict[str, int]] = {}
        for first, pair_set in zip(subtable.Coverage.glyphs, subtable.PairSet):
            seconds = self._pairs.setdefault(first, {})
            for record in pair_set.PairValueRecord:
                value = _x_advance(getattr(record, "Value1", None))
                seconds.setdefault(record.SecondGlyph, value)

    def get(self, left: str, right: str) -> int | None:
        seconds = self._pairs.get(left)
        if seconds is None:
            return None
        return seconds.get(right)


class _ClassPairSubtable:
    """PairPos format 2: pairs of glyph classes."""

    def __init__(self, subtable: Any) -> None:
        self._coverage = set(subtable.Coverage.glyphs)
        self._class1 = dict(subtable.ClassDef1.classDefs) if subtable.ClassDef1 else {}
        self._class2 = dict(subtable.ClassDef2.classDefs) if subtable.ClassDef2 else {}
        self._values = [
            [_x_advance(getattr(class2, "Value1", None)) for class2 in class1.Class2Record]
            for class1 in subtable.Class1Record
        ]

    def get(self, left: str, right: str) -> int | None:
        if left not in self._coverage:
            return None
        class1 = self._class1.get(left, 0)
        class2 = self._class2.get(right, 0)
        try:
            return self._values[class1][class2]
        except IndexError:
            return 0


class KerningTable:
    """Kerning values between glyph pairs, in font units.

    Example:
        kerning = KerningTable(font)
        kerning.get("A", "V")
    """

    def __init__(self, font: TTFont) -> None:
        """Index the kerning data of a font.

        Args:
            font: Loaded fontTools font
        """
        self._subtables = self._collect_gpos_subtables(font)
        self._pairs = self._collect_kern_pairs(font)

    @property
    def source(self) -> str | None:
        """Which table the kerning values come from ('GPOS', 'kern' or None)."""
        if self._subtables:
            return "GPOS"
        if self._pairs:
            return "kern"
        return None

    def get(self, left: str, right: str) -> int:
        """Get the kerning value for an ordered pair of glyph names.

        Args:
            left: Name of the first glyph
            right: Name of the second glyph

        Returns:
            Advance adjustment in font units (0 if the pair is not kerned)
        """
        if self._subtables:
            for subtable in self._subtables:
                value = subtable.get(left, right)
                if value is not None:
                    return value
            return 0
        return self._pairs.get((left, right), 0)

    @staticmethod
    def _collect_gpos_subtables(font: TTFont) -> list[Any]:
        if "GPOS" not in font:
            return []

        gpos = font["GPOS"].table
        if gpos.FeatureList is None or gpos.LookupList is None:
            return []

        lookup_indices: set[int] = set()
        for record in gpos.FeatureList.FeatureRecord:
            if record.FeatureTag == "kern":
                lookup_indices.update(record.Feature.LookupListIndex)

        subtables: list[Any] = []
        for index in sorted(lookup_indices):
            lookup = gpos.LookupList.Lookup[index]
            for subtable in lookup.SubTable:
                lookup_type = lookup.LookupType
                if lookup_type == _LOOKUP_EXTENSION:
                    lookup_type = subtable.ExtensionLookupType
                    subtable = subtable.ExtSubTable
                if lookup_type != _LOOKUP_PAIR_POS:
                    continue
                if subtable.Format == 1:
                    subtables.append(_GlyphPairSubtable(subtable))
                elif subtable.Format == 2:
                    subtables.append(_ClassPairSubtable(subtable))
        return subtables

    @staticmethod
    def _collect_kern_pairs(font: TTFont) -> dict[tuple[str, str], int]:
        if "kern" not in font:
            return {}

        pairs: dict[tuple[str, str], int] = {}
        for table in font["kern"].kernTables:
            for pair, value in getattr(table, "kernTable", {}).items():
                pairs.setdefault(pair, value)
        return pairs
