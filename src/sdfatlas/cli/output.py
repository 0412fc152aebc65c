"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars and formatted messages.
"""

from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from sdfatlas.utils import GenerationStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for glyph rasterization.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_header(version: str) -> None:
    """Print application header."""
    console.print(f"\n[bold]sdfatlas[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator."""
    console.print(f"\n{SYM_STEP} {message}")


def print_run_info(font_path: str, concurrency: int, resume_path: str | None) -> None:
    """Print the input font and run configuration.

    Args:
        font_path: Path to the font file
        concurrency: Maximum concurrent rasterizer processes
        resume_path: Resume settings file, if any
    """
    line = Text("  ")
    line.append(font_path)
    console.print(line)
    console.print(f"  {concurrency} rasterizer processes {SYM_DOT} Ctrl+C to cancel")
    if resume_path:
        resume_line = Text("  resume: ")
        resume_line.append(resume_path)
        console.print(resume_line)


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_success(written: list[Path], stats: GenerationStats) -> None:
    """Print success message with summary.

    Args:
        written: Paths of all written files
        stats: Statistics of the run
    """
    console.print(
        f"\n[bold green]{SYM_OK} Generation complete[/bold green] "
        f"in {_format_time(stats.duration_seconds)}"
    )

    for path in written:
        line = Text("  ")
        line.append(str(path), style="bold")
        console.print(line)

    console.print(
        f"  {stats.rasterized_count} glyphs {SYM_DOT} {stats.blank_count} blank "
        f"{SYM_DOT} {stats.page_count} pages {SYM_DOT} {stats.kerning_pairs} kernings"
    )
    if stats.reused_placements:
        console.print(f"  {stats.reused_placements} glyphs kept from the previous atlas")
    if stats.normalization_warnings:
        console.print(
            f"  [yellow]{stats.normalization_warnings} glyphs failed to normalize[/yellow]"
        )


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print("  Pending glyphs were dropped; no output files created")
