"""Atlas generation orchestration.

This module sequences a run: resolve options, load the font, rasterize
every glyph through a bounded thread pool, pack the images, compose the
pages and assemble the descriptor.

Key components:
- generate_glyph: Shape extraction plus rasterization of one glyph
- AtlasGenerator: Main orchestrator class
- generate_bmfont: Convenience entry point taking a resume file path
"""

import time
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any

import structlog
from fontTools.ttLib import TTLibError

from sdfatlas.config import AtlasSettings, GeneratorOptions, LayeredOptions
from sdfatlas.core.composer import PageComposer
from sdfatlas.core.metadata import FontMetrics, MetadataAssembler
from sdfatlas.core.packer import AtlasPacker
from sdfatlas.core.rasterizer import GlyphRasterizer, MsdfgenProcess, RasterProcess
from sdfatlas.core.shape import ShapeExtractor
from sdfatlas.domain import FontFile, GenerationResult, GlyphImage, GlyphOutline, ResumeSettings
from sdfatlas.exceptions import FontLoadError
from sdfatlas.io import DESCRIPTOR_EXTENSIONS, FontReader, load_resume_settings
from sdfatlas.utils import GenerationLogger, GenerationStats

# Called with (completed, total, char) after each glyph
ProgressCallback = Callable[[int, int, str], None]


def generate_glyph(
    outline: GlyphOutline,
    extractor: ShapeExtractor,
    rasterizer: GlyphRasterizer,
    ascender: float,
) -> GlyphImage:
    """Extract the shape of one glyph and rasterize it.

    Runs on a worker thread. Only the outline is passed in; the font
    itself is never touched off the main thread.

    Args:
        outline: Glyph outline in pixel space
        extractor: Shape extractor
        rasterizer: Distance field rasterizer
        ascender: Font ascender in pixels

    Returns:
        Rasterized glyph with metrics
    """
    shape = extractor.extract(outline)
    return rasterizer.rasterize(outline, shape, ascender)


def output_location(
    options: GeneratorOptions, font_path: Path, face_name: str
) -> tuple[Path, str]:
    """Get the output directory and base file name of a run.

    Args:
        options: Resolved options
        font_path: Input font path
        face_name: Font face name

    Returns:
        Tuple of (directory, base name without extension)
    """
    if options.filename:
        target = Path(options.filename)
        return target.parent, target.stem
    return font_path.parent, face_name


class AtlasGenerator:
    """Orchestrates atlas generation.

    Manages the complete workflow:
    1. Resolve options (explicit > resumed > default)
    2. Load the font and read glyph outlines
    3. Rasterize glyphs in parallel, bounded by the concurrency setting
    4. Pack glyph images onto pages, keeping resumed placements
    5. Compose page images and assemble the descriptor

    Either a complete result is returned or an exception is raised.

    Example:
        generator = AtlasGenerator(get_default_settings())
        result = generator.generate(Path("font.ttf"), {"field_type": "sdf"})
        AtlasWriter(result).save()
    """

    def __init__(
        self,
        settings: AtlasSettings,
        process: RasterProcess | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            settings: Application settings
            process: Rasterizer process (None = locate msdfgen on first run)
        """
        self.settings = settings
        self.process = process
        self.logger = structlog.get_logger("sdfatlas")
        self.generation_logger = GenerationLogger(self.logger)

    @property
    def stats(self) -> GenerationStats:
        """Statistics of the last run."""
        return self.generation_logger.stats

    def _resolve_process(self) -> RasterProcess:
        if self.process is None:
            processing = self.settings.processing
            self.process = MsdfgenProcess.locate(
                processing.rasterizer_path, processing.timeout_seconds
            )
        return self.process

    def generate(
        self,
        font_path: Path,
        options: Mapping[str, Any] | None = None,
        resume: ResumeSettings | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> GenerationResult:
        """Generate an atlas for a font.

        Args:
            font_path: Path to a TTF, OTF or WOFF font
            options: Options given explicitly for this run
            resume: Settings of a previous run to extend
            progress_callback: Optional callback(completed, total, char)

        Returns:
            GenerationResult with encoded pages and the descriptor file

        Raises:
            ConfigurationError: If options are invalid or msdfgen is missing
            FontLoadError: If the font cannot be read
            FontFormatError: If the font has no vector outlines
            GlyphError: If rasterizing any glyph fails
            PackingError: If a glyph does not fit on a page
            ResumeError: If a resumed page image is missing
        """
        self.generation_logger = GenerationLogger(self.logger)
        stats = self.generation_logger.stats
        stats.start_time = time.time()

        options_model = LayeredOptions(options, resume.opt if resume else None).resolve()
        process = self._resolve_process()

        self.logger.info(
            "Starting atlas generation",
            font=str(font_path),
            field_type=options_model.field_type.value,
            charset_size=len(options_model.charset),
            resumed=resume is not None,
        )

        reader = FontReader(font_path)
        try:
            reader.load()
        except (OSError, TTLibError) as e:
            raise FontLoadError(str(font_path), str(e)) from e

        try:
            result = self._generate(
                reader, font_path, options_model, resume, process, progress_callback
            )
        finally:
            reader.close()

        stats.end_time = time.time()
        self.logger.info(
            "Generation complete",
            glyphs=stats.rasterized_count,
            blank=stats.blank_count,
            pages=stats.page_count,
            kernings=stats.kerning_pairs,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return result

    def _generate(
        self,
        reader: FontReader,
        font_path: Path,
        options: GeneratorOptions,
        resume: ResumeSettings | None,
        process: RasterProcess,
        progress_callback: ProgressCallback | None,
    ) -> GenerationResult:
        ascender, descender, line_gap = reader.vertical_metrics
        metrics = FontMetrics(
            face=reader.face_name,
            units_per_em=reader.units_per_em,
            ascender=ascender,
            descender=descender,
            line_gap=line_gap,
        )
        self.logger.info(
            "Font loaded",
            format=reader.format,
            upm=metrics.units_per_em,
            glyph_count=reader.glyph_count,
        )

        output_dir, filename = output_location(options, font_path, reader.face_name)
        if not options.filename:
            self.logger.info("Using font face as file name", filename=filename)

        outlines = [reader.get_outline(char, options.font_size) for char in options.charset]
        glyphs = self._rasterize_all(
            outlines,
            ShapeExtractor(options.tolerance, self.settings.contour_filter),
            GlyphRasterizer(
                process, options.field_type, options.distance_range, options.round_decimal
            ),
            ascender * reader.scale(options.font_size),
            progress_callback,
        )

        width, height = options.texture_size
        packer = AtlasPacker(
            width,
            height,
            options.texture_padding,
            smart=options.smart_size,
            pot=options.pot,
            square=options.square,
        )
        existing_pages: list[str] = []
        if resume is not None and resume.packer is not None:
            packer.load(resume.packer)
            existing_pages = resume.pages
        placements = packer.pack(glyphs)
        page_sizes = [(bin_.width, bin_.height) for bin_ in packer.bins]
        self.generation_logger.log_packing(
            page_count=packer.page_count,
            reused=packer.reused_count,
            packed=sum(1 for glyph in glyphs if not glyph.is_blank()) - packer.reused_count,
        )

        assembler = MetadataAssembler(options, metrics, reader.get_kerning)
        composer = PageComposer(output_dir, filename, options.field_type, existing_pages)
        svg_path = None
        if options.vector:
            font_size = options.font_size
            svg_path = lambda char, x, y: reader.get_svg_path(char, font_size, x, y)  # noqa: E731
        pages = composer.compose(
            placements,
            page_sizes,
            svg_path=svg_path,
            baseline=assembler.baseline,
            pad=assembler.pad,
        )
        page_names = [page.filename.name for page in pages]

        kernings = assembler.kernings()
        self.generation_logger.log_kerning(len(kernings), len(options.charset))

        descriptor = assembler.build(placements, page_names, page_sizes[0], kernings)
        font_file = FontFile(
            filename=output_dir / f"{filename}{DESCRIPTOR_EXTENSIONS[options.output_type]}",
            data=assembler.serialize(descriptor),
            settings=assembler.settings(page_names, packer.save()),
            descriptor=descriptor,
        )
        return GenerationResult(pages=pages, font_file=font_file)

    def _rasterize_all(
        self,
        outlines: list[GlyphOutline],
        extractor: ShapeExtractor,
        rasterizer: GlyphRasterizer,
        ascender: float,
        progress_callback: ProgressCallback | None,
    ) -> list[GlyphImage]:
        """Rasterize glyphs on a bounded thread pool.

        Results are ordered like the outlines. The first failure cancels
        all glyphs not yet started and is re-raised.
        """
        concurrency = self.settings.processing.concurrency
        total = len(outlines)
        results: list[GlyphImage | None] = [None] * total
        completed = 0

        self.logger.info("Starting rasterization", glyph_count=total, concurrency=concurrency)

        with ThreadPoolExecutor(max_workers=concurrency) as executor:
            futures = {
                executor.submit(generate_glyph, outline, extractor, rasterizer, ascender): index
                for index, outline in enumerate(outlines)
            }
            try:
                for future in as_completed(futures):
                    index = futures[future]
                    try:
                        glyph = future.result()
                    except Exception as e:
                        self.generation_logger.log_error(outlines[index].char, e)
                        raise

                    results[index] = glyph
                    self.generation_logger.log_glyph_rasterized(
                        char=glyph.char,
                        width=glyph.width,
                        height=glyph.height,
                        filtered_contours=glyph.filtered_contours,
                        degenerate=glyph.degenerate,
                    )
                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, glyph.char)

            except (Exception, KeyboardInterrupt):
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        return [glyph for glyph in results if glyph is not None]


def generate_bmfont(
    font_path: Path,
    options: Mapping[str, Any] | None = None,
    reuse: Path | None = None,
    settings: AtlasSettings | None = None,
    process: RasterProcess | None = None,
    progress_callback: ProgressCallback | None = None,
) -> GenerationResult:
    """Generate an atlas, optionally extending the one recorded at reuse.

    The result is not written to disk; use AtlasWriter for that.

    Args:
        font_path: Path to a TTF, OTF or WOFF font
        options: Options given explicitly for this run
        reuse: Resume settings file (created on save if it does not exist)
        settings: Application settings (None = defaults)
        process: Rasterizer process (None = msdfgen on PATH)
        progress_callback: Optional callback(completed, total, char)

    Returns:
        GenerationResult with encoded pages and the descriptor file
    """
    resume = load_resume_settings(reuse) if reuse is not None else None
    generator = AtlasGenerator(settings or AtlasSettings(), process=process)
    return generator.generate(font_path, options, resume, progress_callback)
