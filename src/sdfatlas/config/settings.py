"""Configuration settings for sdfatlas."""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_CHARSET = "".join(chr(code) for code in range(0x20, 0x7F))

# Characters that never become glyphs
CONTROL_CHARS = frozenset("\n\r\t")


class FieldType(str, Enum):
    """Distance field variant produced by the rasterizer."""

    MSDF = "msdf"
    SDF = "sdf"
    PSDF = "psdf"


class OutputType(str, Enum):
    """Font descriptor file format."""

    XML = "xml"
    JSON = "json"


def normalize_charset(chars: str) -> str:
    """Remove duplicate and control characters, keeping first occurrences.

    Args:
        chars: Raw charset string

    Returns:
        Charset with each printable character exactly once
    """
    seen: set[str] = set()
    result: list[str] = []
    for char in chars:
        if char in seen or char in CONTROL_CHARS:
            continue
        seen.add(char)
        result.append(char)
    return "".join(result)


class GeneratorOptions(BaseModel):
    """Options for a single atlas generation run.

    These are the options persisted in the resume settings file, so a
    later run can extend the atlas with the same geometry.
    """

    charset: str = Field(
        default=DEFAULT_CHARSET,
        description="Characters to render",
    )
    output_type: OutputType = Field(
        default=OutputType.XML,
        description="Font descriptor format",
    )
    filename: str | None = Field(
        default=None,
        description="Output file name (default: font file name)",
    )
    font_size: int = Field(
        default=42,
        gt=0,
        description="Font size in pixels used for the glyph images",
    )
    font_spacing: tuple[int, int] = Field(
        default=(0, 0),
        description="Character spacing (horizontal, vertical)",
    )
    font_padding: tuple[int, int, int, int] = Field(
        default=(0, 0, 0, 0),
        description="Character padding (up, right, down, left)",
    )
    texture_size: tuple[int, int] = Field(
        default=(512, 512),
        description="Maximum page size (width, height)",
    )
    texture_padding: int = Field(
        default=1,
        ge=0,
        description="Padding between glyphs on a page",
    )
    distance_range: int = Field(
        default=4,
        gt=0,
        description="Distance range in pixels",
    )
    field_type: FieldType = Field(
        default=FieldType.MSDF,
        description="Distance field variant",
    )
    round_decimal: int | None = Field(
        default=None,
        ge=0,
        description="Decimal places for numbers in the descriptor (None = no rounding)",
    )
    smart_size: bool = Field(
        default=False,
        description="Shrink pages to the smallest size that fits",
    )
    pot: bool = Field(
        default=False,
        description="Page dimensions must be powers of two",
    )
    square: bool = Field(
        default=False,
        description="Pages must be square",
    )
    tolerance: float = Field(
        default=0.0,
        ge=0.0,
        description="Drop contours smaller than this (pixels, 0 = keep all)",
    )
    vector: bool = Field(
        default=False,
        description="Also generate an SVG outline overlay per page",
    )

    @field_validator("charset", mode="before")
    @classmethod
    def _join_charset(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return "".join(value)
        return value

    @field_validator("charset")
    @classmethod
    def _normalize_charset(cls, value: str) -> str:
        return normalize_charset(value)

    @field_validator("texture_size")
    @classmethod
    def _positive_texture_size(cls, value: tuple[int, int]) -> tuple[int, int]:
        if value[0] <= 0 or value[1] <= 0:
            raise ValueError("texture size must be positive")
        return value


class ContourFilterConfig(BaseModel):
    """Thresholds for dropping visually insignificant contours.

    Both thresholds scale with the tolerance option. A contour is dropped
    when both sides of its bounding box are below the small threshold, or
    when one side is below the small threshold and the other below the
    large one.
    """

    small_factor: float = Field(
        default=1.0,
        gt=0.0,
        description="Small threshold as a multiple of the tolerance",
    )
    large_factor: float = Field(
        default=10.0,
        gt=0.0,
        description="Large threshold as a multiple of the tolerance",
    )

    def thresholds(self, tolerance: float) -> tuple[float, float]:
        """Get (small, large) thresholds for a tolerance."""
        return tolerance * self.small_factor, tolerance * self.large_factor


class ProcessingConfig(BaseModel):
    """Configuration for glyph rasterization."""

    concurrency: int = Field(
        default=15,
        ge=1,
        description="Max concurrent rasterizer processes",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout per rasterizer invocation",
    )
    rasterizer_path: Path | None = Field(
        default=None,
        description="Path to the msdfgen binary (None = look up on PATH)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class AtlasSettings(BaseModel):
    """Main application settings."""

    contour_filter: ContourFilterConfig = Field(default_factory=ContourFilterConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> AtlasSettings:
    """Get default application settings."""
    return AtlasSettings()
