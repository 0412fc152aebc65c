"""Atlas output and resume settings files.

This module provides the AtlasWriter class for writing page images,
outline overlays and the descriptor to disk, and helpers to load and
save the resume settings file.
"""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from sdfatlas.domain.atlas import GenerationResult
from sdfatlas.domain.state import ResumeSettings
from sdfatlas.exceptions import ResumeError

logger = structlog.get_logger(__name__)


def load_resume_settings(path: Path) -> ResumeSettings | None:
    """Load a resume settings file.

    Args:
        path: Path to the settings file

    Returns:
        Parsed settings, or None if the file does not exist yet

    Raises:
        ResumeError: If the file cannot be read or does not match the schema
    """
    if not path.exists():
        logger.info("Creating resume settings file", path=str(path))
        return None

    logger.info("Loading resume settings file", path=str(path))
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ResumeError(str(path), str(e)) from e

    try:
        return ResumeSettings.model_validate(data)
    except ValidationError as e:
        raise ResumeError(str(path), str(e)) from e


def save_resume_settings(path: Path, settings: dict[str, Any]) -> None:
    """Write a resume settings file.

    Args:
        path: Destination path
        settings: Settings dictionary (FontFile.settings)
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings, indent=2, ensure_ascii=False), encoding="utf-8")


class AtlasWriter:
    """Writes a generation result to disk.

    Example:
        writer = AtlasWriter(result)
        written = writer.save(resume_path=Path("font.cfg"))
    """

    def __init__(self, result: GenerationResult) -> None:
        """Initialize the atlas writer.

        Args:
            result: Pages and descriptor produced by a run
        """
        self._result = result

    def save(self, resume_path: Path | None = None) -> list[Path]:
        """Write pages, overlays, descriptor and resume settings.

        Args:
            resume_path: Where to write the resume settings (None = skip)

        Returns:
            Paths of all written files

        Raises:
            IOError: If a file cannot be written
        """
        written: list[Path] = []

        for page in self._result.pages:
            page.filename.parent.mkdir(parents=True, exist_ok=True)
            page.filename.write_bytes(page.image)
            written.append(page.filename)
            if page.svg is not None:
                svg_path = page.filename.with_suffix(".svg")
                svg_path.write_text(page.svg, encoding="utf-8")
                written.append(svg_path)

        font_file = self._result.font_file
        font_file.filename.parent.mkdir(parents=True, exist_ok=True)
        font_file.filename.write_text(font_file.data, encoding="utf-8")
        written.append(font_file.filename)

        if resume_path is not None:
            save_resume_settings(resume_path, font_file.settings)
            written.append(resume_path)

        logger.info("Atlas written", files=len(written))
        return written
