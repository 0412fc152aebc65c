"""Core atlas generation pipeline for sdfatlas.

This module contains the pipeline stages:

- Shape extraction (contour splitting, small contour filtering)
- Distance field rasterization through msdfgen
- MaxRects packing of glyph images onto pages
- Page composition with Pillow
- Descriptor assembly (line metrics, kerning, rounding)

Key functions:
- round_half_up: Round halves away from even, toward +infinity
- round_all_values: Round every float of a nested structure
- stringify_contours: Build an msdfgen shape description
- parse_raster_output: Convert msdfgen text output to RGBA pixels
- generate_glyph: Rasterize one glyph (runs on worker threads)
- generate_bmfont: Generate an atlas, optionally resuming a previous one

Key classes:
- ShapeExtractor: Converts outlines into shape descriptions
- GlyphRasterizer / MsdfgenProcess: Runs the external rasterizer
- AtlasPacker: Assigns glyph images to pages
- PageComposer: Draws and encodes page images
- MetadataAssembler: Builds the descriptor and resume settings
- AtlasGenerator: Orchestrates a run
"""

from sdfatlas.core.composer import PageComposer, page_name
from sdfatlas.core.geometry import (
    Rect,
    next_power_of_two,
    round_all_values,
    round_half_up,
    round_number,
)
from sdfatlas.core.metadata import FontMetrics, MetadataAssembler
from sdfatlas.core.packer import AtlasPacker, MaxRectsBin
from sdfatlas.core.processor import AtlasGenerator, generate_bmfont, generate_glyph
from sdfatlas.core.rasterizer import (
    CanvasGeometry,
    GlyphRasterizer,
    MsdfgenProcess,
    build_arguments,
    compute_canvas,
    parse_raster_output,
)
from sdfatlas.core.shape import (
    ShapeDescription,
    ShapeExtractor,
    filter_contours,
    split_contours,
    stringify_contours,
)

__all__ = [
    # Processor
    "AtlasGenerator",
    # Packing and composition
    "AtlasPacker",
    "CanvasGeometry",
    "FontMetrics",
    # Rasterization
    "GlyphRasterizer",
    "MaxRectsBin",
    "MetadataAssembler",
    "MsdfgenProcess",
    "PageComposer",
    "Rect",
    # Shapes
    "ShapeDescription",
    "ShapeExtractor",
    "build_arguments",
    "compute_canvas",
    "filter_contours",
    "generate_bmfont",
    "generate_glyph",
    # Geometry functions
    "next_power_of_two",
    "page_name",
    "parse_raster_output",
    "round_all_values",
    "round_half_up",
    "round_number",
    "split_contours",
    "stringify_contours",
]
