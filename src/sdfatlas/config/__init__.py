"""Configuration management for sdfatlas.

This module provides configuration management using Pydantic models.
Run options can come from CLI arguments, a resume settings file, or defaults.

Key classes:
- GeneratorOptions: Options for one atlas generation run
- ContourFilterConfig: Thresholds for small contour filtering
- ProcessingConfig: Rasterizer process settings
- LoggingConfig: Logging settings
- AtlasSettings: Main application settings
- LayeredOptions: Resolves options from explicit > resumed > default layers
"""

from sdfatlas.config.resolver import LayeredOptions
from sdfatlas.config.settings import (
    CONTROL_CHARS,
    DEFAULT_CHARSET,
    AtlasSettings,
    ContourFilterConfig,
    FieldType,
    GeneratorOptions,
    LoggingConfig,
    OutputType,
    ProcessingConfig,
    get_default_settings,
    normalize_charset,
)

__all__ = [
    "CONTROL_CHARS",
    "DEFAULT_CHARSET",
    "AtlasSettings",
    "ContourFilterConfig",
    "FieldType",
    "GeneratorOptions",
    "LayeredOptions",
    "LoggingConfig",
    "OutputType",
    "ProcessingConfig",
    "get_default_settings",
    "normalize_charset",
]
