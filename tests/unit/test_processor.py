"""Tests for atlas generation orchestration."""

import json
import subprocess
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sdfatlas.config import AtlasSettings, FieldType, GeneratorOptions, ProcessingConfig
from sdfatlas.core.processor import AtlasGenerator, generate_bmfont, generate_glyph, output_location
from sdfatlas.core.rasterizer import GlyphRasterizer
from sdfatlas.core.shape import ShapeExtractor
from sdfatlas.domain import BoundingBox, CommandType, GlyphOutline, PathCommand, ResumeSettings
from sdfatlas.exceptions import ConfigurationError, FontLoadError, RasterizationError
from sdfatlas.io import AtlasWriter

SDF_OPTIONS = {
    "charset": "AB",
    "field_type": "sdf",
    "distance_range": 4,
    "texture_size": (64, 64),
}


@pytest.fixture
def settings() -> AtlasSettings:
    """Settings with a small worker pool."""
    return AtlasSettings(processing=ProcessingConfig(concurrency=2))


class TestGenerateGlyph:
    """Tests for generate_glyph function."""

    def test_generate_glyph(self, fake_process):
        """Test one glyph goes through extraction and rasterization."""
        outline = GlyphOutline(
            char="I",
            index=4,
            commands=[
                PathCommand(CommandType.MOVE, 0, 0),
                PathCommand(CommandType.LINE, 0, -10),
                PathCommand(CommandType.LINE, 2, -10),
                PathCommand(CommandType.LINE, 2, 0),
                PathCommand(CommandType.CLOSE),
            ],
            bounds=BoundingBox(0.0, -10.0, 2.0, 0.0),
            advance_width=4.0,
        )
        rasterizer = GlyphRasterizer(fake_process, FieldType.MSDF, distance_range=2)

        glyph = generate_glyph(outline, ShapeExtractor(), rasterizer, ascender=8.0)

        assert (glyph.width, glyph.height) == (4, 12)
        assert len(fake_process.calls) == 1


class TestOutputLocation:
    """Tests for output_location function."""

    def test_defaults_to_font_directory(self):
        """Test output goes next to the font, named after the face."""
        location = output_location(GeneratorOptions(), Path("fonts/Roboto.ttf"), "Roboto")
        assert location == (Path("fonts"), "Roboto")

    def test_filename_option(self):
        """Test the filename option sets directory and base name."""
        options = GeneratorOptions(filename="out/atlas.fnt")
        assert output_location(options, Path("fonts/Roboto.ttf"), "Roboto") == (
            Path("out"),
            "atlas",
        )


class TestAtlasGenerator:
    """Tests for AtlasGenerator class."""

    def test_init(self, settings: AtlasSettings, fake_process):
        """Test AtlasGenerator initialization."""
        generator = AtlasGenerator(settings, process=fake_process)
        assert generator.settings == settings
        assert generator.process is fake_process
        assert generator.stats.rasterized_count == 0

    def test_generate_two_glyphs(self, settings, test_font, fake_sdf_process):
        """Test a two-glyph sdf atlas on one 64x64 page."""
        generator = AtlasGenerator(settings, process=fake_sdf_process)
        result = generator.generate(test_font, SDF_OPTIONS)

        assert len(result.pages) == 1
        page = result.pages[0]
        assert (page.width, page.height) == (64, 64)
        assert page.filename == test_font.parent / "AtlasTest.png"

        descriptor = result.font_file.descriptor
        assert [char["id"] for char in descriptor.chars] == [65, 66]
        assert all(char["page"] == 0 for char in descriptor.chars)
        assert len(descriptor.kernings) == 1
        assert descriptor.kernings[0]["amount"] == pytest.approx(-2.1)
        assert descriptor.pages == ("AtlasTest.png",)
        assert result.font_file.filename == test_font.parent / "AtlasTest.fnt"

    def test_glyph_geometry(self, settings, test_font, fake_sdf_process):
        """Test char records of the generated glyphs."""
        generator = AtlasGenerator(settings, process=fake_sdf_process)
        chars = generator.generate(test_font, SDF_OPTIONS).font_file.descriptor.chars
        a, b = chars

        assert (a["width"], a["height"]) == (21, 33)
        assert a["xoffset"] == 2
        assert a["xadvance"] == pytest.approx(25.2)
        assert b["width"] == 25

    def test_results_follow_charset_order(self, settings, test_font, fake_process):
        """Test char records keep charset order whatever order workers finish in."""
        generator = AtlasGenerator(settings, process=fake_process)
        result = generator.generate(test_font, {"charset": "CBA "})
        chars = result.font_file.descriptor.chars
        assert [char["char"] for char in chars] == ["C", "B", "A", " "]

    def test_blank_glyph_skips_process(self, settings, test_font, fake_process):
        """Test glyphs without outline never reach the rasterizer."""
        generator = AtlasGenerator(settings, process=fake_process)
        result = generator.generate(test_font, {"charset": "A B"})

        assert len(fake_process.calls) == 2
        space = result.font_file.descriptor.chars[1]
        assert (space["width"], space["height"], space["page"]) == (0, 0, 0)
        assert generator.stats.blank_count == 1
        assert generator.stats.blank_chars == [" "]

    def test_control_characters_removed(self, settings, test_font, fake_process):
        """Test newlines in the charset produce no glyph."""
        generator = AtlasGenerator(settings, process=fake_process)
        result = generator.generate(test_font, {"charset": "A\nB"})
        assert len(result.font_file.descriptor.chars) == 2

    def test_invalid_field_type(self, settings, test_font, fake_process):
        """Test invalid options fail before any rasterization."""
        generator = AtlasGenerator(settings, process=fake_process)
        with pytest.raises(ConfigurationError, match="field_type"):
            generator.generate(test_font, {"field_type": "foo"})
        assert fake_process.calls == []

    def test_missing_msdfgen(self, settings, test_font):
        """Test a missing rasterizer binary is a configuration error."""
        generator = AtlasGenerator(settings)
        with patch("sdfatlas.core.rasterizer.shutil.which", return_value=None):
            with pytest.raises(ConfigurationError, match="msdfgen"):
                generator.generate(test_font, SDF_OPTIONS)

    def test_font_not_found(self, settings, tmp_path, fake_process):
        """Test a missing font file raises FontLoadError."""
        generator = AtlasGenerator(settings, process=fake_process)
        with pytest.raises(FontLoadError):
            generator.generate(tmp_path / "missing.ttf", SDF_OPTIONS)

    def test_invalid_font_file(self, settings, tmp_path, fake_process):
        """Test a file that is not a font raises FontLoadError."""
        path = tmp_path / "broken.ttf"
        path.write_bytes(b"this is not a font file at all")
        generator = AtlasGenerator(settings, process=fake_process)
        with pytest.raises(FontLoadError):
            generator.generate(path, SDF_OPTIONS)

    def test_rasterizer_failure_propagates(self, settings, test_font):
        """Test a failing glyph fails the run."""
        process = MagicMock(side_effect=subprocess.CalledProcessError(1, ["msdfgen"], stderr="x"))
        generator = AtlasGenerator(settings, process=process)
        with pytest.raises(RasterizationError):
            generator.generate(test_font, {"charset": "ABC"})

    def test_failure_cancels_pending_glyphs(self, test_font):
        """Test glyphs not yet started are not rasterized after a failure."""
        calls = []

        def process(args):
            calls.append(args)
            if len(calls) > 1:
                time.sleep(0.2)
            raise subprocess.TimeoutExpired(["msdfgen"], 1)

        settings = AtlasSettings(processing=ProcessingConfig(concurrency=1))
        generator = AtlasGenerator(settings, process=process)

        with pytest.raises(RasterizationError):
            generator.generate(test_font, {"charset": "ABC"})
        assert len(calls) < 3

    def test_unexpected_error_cancels_pending_glyphs(self, test_font):
        """Test errors outside the error hierarchy also stop pending glyphs."""
        calls = []

        def process(args):
            calls.append(args)
            if len(calls) > 1:
                time.sleep(0.2)
            raise ValueError("unexpected output")

        settings = AtlasSettings(processing=ProcessingConfig(concurrency=1))
        generator = AtlasGenerator(settings, process=process)

        with pytest.raises(ValueError):
            generator.generate(test_font, {"charset": "ABC"})
        assert len(calls) < 3

    def test_concurrency_bound(self, test_font, fake_process):
        """Test rasterizer invocations in flight never exceed the concurrency."""
        lock = threading.Lock()
        active = 0
        peak = 0

        def process(args):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            try:
                time.sleep(0.02)
                return fake_process(args)
            finally:
                with lock:
                    active -= 1

        settings = AtlasSettings(processing=ProcessingConfig(concurrency=2))
        generator = AtlasGenerator(settings, process=process)
        result = generator.generate(test_font, {"charset": "ABCXYZ"})

        assert len(fake_process.calls) == 6
        assert 1 <= peak <= 2
        assert len(result.font_file.descriptor.chars) == 6

    def test_progress_callback(self, settings, test_font, fake_process):
        """Test the progress callback runs once per glyph."""
        progress = MagicMock()
        generator = AtlasGenerator(settings, process=fake_process)
        generator.generate(test_font, {"charset": "AB "}, progress_callback=progress)

        assert progress.call_count == 3
        completed, total, _char = progress.call_args.args
        assert (completed, total) == (3, 3)

    def test_filename_option(self, settings, test_font, tmp_path, fake_process):
        """Test output names come from the filename option."""
        options = {"charset": "AB", "filename": str(tmp_path / "out" / "atlas")}
        generator = AtlasGenerator(settings, process=fake_process)
        result = generator.generate(test_font, options)

        assert result.pages[0].filename == tmp_path / "out" / "atlas.png"
        assert result.font_file.filename == tmp_path / "out" / "atlas.fnt"

    def test_json_output(self, settings, test_font, fake_process):
        """Test JSON descriptors use the .json extension."""
        generator = AtlasGenerator(settings, process=fake_process)
        result = generator.generate(test_font, {"charset": "AB", "output_type": "json"})

        assert result.font_file.filename.suffix == ".json"
        data = json.loads(result.font_file.data)
        assert data["common"]["pages"] == 1
        assert data["distanceField"]["fieldType"] == "msdf"

    def test_vector_overlay(self, settings, test_font, fake_process):
        """Test vector mode adds one SVG path per drawn glyph."""
        generator = AtlasGenerator(settings, process=fake_process)
        result = generator.generate(test_font, {"charset": "AB ", "vector": True})
        assert result.pages[0].svg.count("<path") == 2

    def test_settings_recorded(self, settings, test_font, fake_process):
        """Test the result carries the settings needed to resume."""
        generator = AtlasGenerator(settings, process=fake_process)
        result = generator.generate(test_font, {"charset": "AB", "font_size": 32})

        recorded = result.font_file.settings
        assert recorded["opt"]["font_size"] == 32
        assert recorded["pages"] == ["AtlasTest.png"]
        assert len(recorded["packer"]["bins"]) == 1

    def test_stats(self, settings, test_font, fake_process):
        """Test run statistics."""
        generator = AtlasGenerator(settings, process=fake_process)
        generator.generate(test_font, {"charset": "AB "})

        stats = generator.stats
        assert stats.rasterized_count == 3
        assert stats.kerning_pairs == 1
        assert stats.page_count == 1
        assert stats.duration_seconds >= 0


class TestResume:
    """Tests for extending a previous atlas."""

    def test_resumed_options_used(self, settings, test_font, fake_process):
        """Test options recorded in the resume settings apply when not given."""
        generator = AtlasGenerator(settings, process=fake_process)
        first = generator.generate(test_font, {"charset": "AB", "font_size": 32})
        AtlasWriter(first).save()

        resume = ResumeSettings.model_validate(first.font_file.settings)
        second = generator.generate(test_font, {"charset": "ABC"}, resume=resume)
        assert second.font_file.descriptor.info["size"] == 32

    def test_existing_placements_kept(self, settings, test_font, fake_process):
        """Test glyphs already on the page keep their position."""
        generator = AtlasGenerator(settings, process=fake_process)
        first = generator.generate(test_font, {"charset": "AB"})
        AtlasWriter(first).save()

        resume = ResumeSettings.model_validate(first.font_file.settings)
        second = generator.generate(test_font, {"charset": "ABC"}, resume=resume)

        before = {c["id"]: (c["x"], c["y"], c["page"]) for c in first.font_file.descriptor.chars}
        after = {c["id"]: (c["x"], c["y"], c["page"]) for c in second.font_file.descriptor.chars}
        assert after[65] == before[65]
        assert after[66] == before[66]
        assert 67 in after
        assert generator.stats.reused_placements == 2

    def test_generate_bmfont_creates_then_resumes(self, test_font, tmp_path, fake_process):
        """Test a resume file path that does not exist yet starts a new atlas."""
        reuse = tmp_path / "atlas.cfg"
        result = generate_bmfont(
            test_font, {"charset": "AB"}, reuse=reuse, process=fake_process
        )
        AtlasWriter(result).save(resume_path=reuse)
        assert reuse.exists()

        resumed = generate_bmfont(test_font, {"charset": "C"}, reuse=reuse, process=fake_process)
        assert resumed.pages[0].filename.name == "AtlasTest.png"
