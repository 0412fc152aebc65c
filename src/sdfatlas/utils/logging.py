"""Logging utilities for sdfatlas."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class GenerationStats:
    """Statistics from a generation run."""

    rasterized_count: int = 0
    blank_count: int = 0
    filtered_contours: int = 0
    normalization_warnings: int = 0
    kerning_pairs: int = 0
    page_count: int = 0
    reused_placements: int = 0
    blank_chars: list[str] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate generation duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("sdfatlas")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class GenerationLogger:
    """Logger for tracking generation progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = GenerationStats()

    def log_glyph_rasterized(
        self,
        char: str,
        width: int,
        height: int,
        filtered_contours: int,
        degenerate: bool,
    ) -> None:
        """Log a finished glyph."""
        self._stats.rasterized_count += 1
        self._stats.filtered_contours += filtered_contours
        if degenerate:
            self._stats.normalization_warnings += 1
        if width == 0 or height == 0:
            self._stats.blank_count += 1
            self._stats.blank_chars.append(char)
            self._logger.debug("Blank glyph", char=char, code=ord(char))
        else:
            self._logger.debug("Glyph rasterized", char=char, width=width, height=height)

    def log_packing(self, page_count: int, reused: int, packed: int) -> None:
        """Log packing results."""
        self._stats.page_count = page_count
        self._stats.reused_placements = reused
        self._logger.info(
            "Glyphs packed",
            pages=page_count,
            reused=reused,
            packed=packed,
        )

    def log_kerning(self, pair_count: int, charset_size: int) -> None:
        """Log kerning table results."""
        self._stats.kerning_pairs = pair_count
        self._logger.info(
            "Kerning computed",
            pairs=pair_count,
            scanned=charset_size * charset_size,
        )

    def log_error(self, char: str | None, error: Exception) -> None:
        """Log a failure that aborts the run."""
        self._logger.error(
            "Generation failed",
            char=char,
            error=str(error),
            error_type=type(error).__name__,
        )

    @property
    def stats(self) -> GenerationStats:
        """Get current generation statistics."""
        return self._stats
