"""Persisted resume state.

The resume settings file records the effective options, the page file
names and a snapshot of the packer's free-space bookkeeping, so a later
run can add glyphs without moving the ones already on the pages.

Layout:
    {
        "opt": {...},
        "pages": ["font.png"],
        "packer": {"version": 1, "bins": [...]}
    }
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

PACKER_STATE_VERSION = 1


class FreeRect(BaseModel):
    """A free rectangle of a page (padding included)."""

    x: int
    y: int
    width: int
    height: int


class PlacedRect(BaseModel):
    """A glyph rectangle already drawn on a page."""

    id: int = Field(description="Code point of the glyph")
    x: int
    y: int
    width: int
    height: int


class BinState(BaseModel):
    """Snapshot of one page of the packer."""

    width: int
    height: int
    max_width: int
    max_height: int
    free_rects: list[FreeRect] = Field(default_factory=list)
    rects: list[PlacedRect] = Field(default_factory=list)


class PackerState(BaseModel):
    """Versioned snapshot of the packer."""

    version: int = PACKER_STATE_VERSION
    bins: list[BinState] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value != PACKER_STATE_VERSION:
            raise ValueError(
                f"unsupported packer state version {value} "
                f"(expected {PACKER_STATE_VERSION})"
            )
        return value


class ResumeSettings(BaseModel):
    """Contents of a resume settings file."""

    opt: dict[str, Any] = Field(default_factory=dict)
    pages: list[str] = Field(default_factory=list)
    packer: PackerState | None = None
