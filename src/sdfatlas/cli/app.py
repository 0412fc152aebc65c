"""CLI application entry point for sdfatlas.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated, Any

import typer

from sdfatlas import __version__
from sdfatlas.cli.output import (
    console,
    create_progress,
    print_cancellation_notice,
    print_error,
    print_header,
    print_run_info,
    print_step,
    print_success,
)
from sdfatlas.config import AtlasSettings, LoggingConfig, ProcessingConfig
from sdfatlas.core import AtlasGenerator
from sdfatlas.exceptions import (
    ConfigurationError,
    FontLoadError,
    ResumeError,
    SdfAtlasError,
)
from sdfatlas.io import AtlasWriter, load_resume_settings
from sdfatlas.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="sdfatlas",
    help="Generate signed distance field BMFont atlases from TTF/OTF fonts.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]sdfatlas[/bold blue] v{__version__}")
        raise typer.Exit()


def parse_int_list(value: str | None, count: int, name: str) -> list[int] | None:
    """Parse a comma-separated list of integers such as "512,512".

    Raises:
        ConfigurationError: If the value does not hold exactly count integers
    """
    if value is None:
        return None
    try:
        items = [int(item) for item in value.split(",")]
    except ValueError:
        items = []
    if len(items) != count:
        raise ConfigurationError(f"{name} must be {count} comma-separated integers, got {value!r}")
    return items


def build_options(**values: Any) -> dict[str, Any]:
    """Collect the options given on the command line, dropping unset ones."""
    return {name: value for name, value in values.items() if value is not None}


@app.command()
def generate(
    font_file: Annotated[
        Path,
        typer.Argument(
            help="Path to input TTF/OTF/WOFF font file",
            show_default=False,
        ),
    ],
    output_type: Annotated[
        str | None,
        typer.Option("--output-type", "-o", help="Descriptor format (xml|json) [default: xml]"),
    ] = None,
    filename: Annotated[
        str | None,
        typer.Option(
            "--filename",
            "-f",
            help="Output file name, optionally with directory (default: font name)",
        ),
    ] = None,
    font_size: Annotated[
        int | None,
        typer.Option("--font-size", "-s", help="Font size in pixels [default: 42]"),
    ] = None,
    charset: Annotated[
        str | None,
        typer.Option("--charset", "-m", help="Characters to render [default: printable ASCII]"),
    ] = None,
    charset_file: Annotated[
        Path | None,
        typer.Option("--charset-file", "-i", help="UTF-8 text file with characters to render"),
    ] = None,
    texture_size: Annotated[
        str | None,
        typer.Option("--texture-size", "-t", help="Maximum page size W,H [default: 512,512]"),
    ] = None,
    texture_padding: Annotated[
        int | None,
        typer.Option("--texture-padding", "-p", help="Padding between glyphs [default: 1]"),
    ] = None,
    font_padding: Annotated[
        str | None,
        typer.Option("--font-padding", help="Character padding up,right,down,left"),
    ] = None,
    font_spacing: Annotated[
        str | None,
        typer.Option("--font-spacing", help="Character spacing h,v"),
    ] = None,
    distance_range: Annotated[
        int | None,
        typer.Option("--distance-range", "-r", help="Distance range in pixels [default: 4]"),
    ] = None,
    field_type: Annotated[
        str | None,
        typer.Option("--field-type", "-T", help="msdf|sdf|psdf [default: msdf]"),
    ] = None,
    round_decimal: Annotated[
        int | None,
        typer.Option("--round-decimal", "-d", help="Round descriptor numbers to N decimals"),
    ] = None,
    smart_size: Annotated[
        bool,
        typer.Option("--smart-size", help="Shrink pages to the smallest size that fits"),
    ] = False,
    pot: Annotated[
        bool,
        typer.Option("--pot", help="Page dimensions are powers of two"),
    ] = False,
    square: Annotated[
        bool,
        typer.Option("--square", help="Pages are square"),
    ] = False,
    tolerance: Annotated[
        float | None,
        typer.Option("--tolerance", help="Drop contours smaller than this many pixels"),
    ] = None,
    vector: Annotated[
        bool,
        typer.Option("--vector", "-v", help="Also write an SVG outline overlay per page"),
    ] = False,
    reuse: Annotated[
        Path | None,
        typer.Option(
            "--reuse",
            "-u",
            help="Resume settings file: extend the atlas it records, then update it",
        ),
    ] = None,
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", "-j", help="Max concurrent rasterizer processes", min=1),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Seconds before a rasterizer process is killed"),
    ] = None,
    rasterizer: Annotated[
        Path | None,
        typer.Option("--rasterizer", help="Path to the msdfgen binary (default: from PATH)"),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Write detailed logs to file"),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level (DEBUG|INFO|WARNING|ERROR)"),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Minimal console output"),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Generate a distance field atlas and BMFont descriptor for a font.

    Options not given fall back to the values recorded in the --reuse
    file, then to the defaults.

    Example:
        sdfatlas Roboto-Regular.ttf -T sdf -t 256,256

    This will create Roboto-Regular.png and Roboto-Regular.fnt next to the font.
    """
    if not font_file.is_file():
        print_error(
            f"Input file not found: {font_file}",
            details="Please provide a path to a TTF, OTF or WOFF font file.",
        )
        raise typer.Exit(code=1)

    processing = ProcessingConfig()
    processing_values = build_options(
        concurrency=concurrency, timeout_seconds=timeout, rasterizer_path=rasterizer
    )
    settings = AtlasSettings(
        processing=processing.model_copy(update=processing_values),
        logging=LoggingConfig(log_file=log_file, log_level=log_level),
    )

    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    if not quiet:
        print_header(__version__)

    try:
        if charset is None and charset_file is not None:
            try:
                charset = charset_file.read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigurationError(f"Cannot read charset file: {e}") from e

        options = build_options(
            output_type=output_type,
            filename=filename,
            font_size=font_size,
            charset=charset,
            texture_size=parse_int_list(texture_size, 2, "texture size"),
            texture_padding=texture_padding,
            font_padding=parse_int_list(font_padding, 4, "font padding"),
            font_spacing=parse_int_list(font_spacing, 2, "font spacing"),
            distance_range=distance_range,
            field_type=field_type,
            round_decimal=round_decimal,
            # Flags only switch features on; unset flags keep resumed values
            smart_size=smart_size or None,
            pot=pot or None,
            square=square or None,
            tolerance=tolerance,
            vector=vector or None,
        )
        resume = load_resume_settings(reuse) if reuse is not None else None

        if not quiet:
            print_step("Generating")
            print_run_info(
                str(font_file),
                settings.processing.concurrency,
                str(reuse) if reuse is not None else None,
            )

        generator = AtlasGenerator(settings)
        try:
            if not quiet:
                with create_progress() as progress:
                    task_id = progress.add_task("Rasterizing", total=None)

                    def update_progress(completed: int, total: int, *_: object) -> None:
                        progress.update(task_id, completed=completed, total=total)

                    result = generator.generate(font_file, options, resume, update_progress)
            else:
                result = generator.generate(font_file, options, resume)
        except KeyboardInterrupt:
            if not quiet:
                print_cancellation_notice()
            raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

        written = AtlasWriter(result).save(resume_path=reuse)

        if not quiet:
            print_success(written, generator.stats)

    except ConfigurationError as e:
        print_error(f"Invalid configuration: {e.message}")
        raise typer.Exit(code=1)
    except FontLoadError as e:
        print_error(f"Could not load font: {e.reason}")
        raise typer.Exit(code=1)
    except ResumeError as e:
        print_error(f"Could not resume atlas: {e.reason}", details=e.path)
        raise typer.Exit(code=1)
    except SdfAtlasError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except OSError as e:
        print_error(f"Could not write output: {e}")
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
