"""Command-line interface for sdfatlas.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bar for glyph rasterization
- Options layered over a resume settings file
- Quiet output mode
- Detailed error reporting
"""

from sdfatlas.cli.app import cli, main

__all__ = ["cli", "main"]
