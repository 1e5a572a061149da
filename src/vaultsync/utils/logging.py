"""
Logging configuration for vaultsync.

Everything logs under the ``vaultsync`` logger. setup_logging() installs a
Rich console handler (or a plain stderr handler) and, optionally, a file
handler with one parseable line per record.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

ROOT_LOGGER = "vaultsync"

FILE_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
PLAIN_FORMAT = "%(levelname)s: %(asctime)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class PlainConsoleFormatter(logging.Formatter):
    """Console format without Rich; errors also name the source file and line."""

    def __init__(self, fmt: str | None = None) -> None:
        super().__init__(fmt=fmt or PLAIN_FORMAT, datefmt=DATE_FORMAT)
        self._custom = fmt is not None

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if not self._custom and record.levelno >= logging.ERROR and record.pathname:
            line = f"{line} ({Path(record.pathname).name}:{record.lineno})"
        return line


def parse_level(level: str | int | None) -> int:
    """Accept ``"debug"``, ``"INFO"``, ``logging.WARNING`` etc.; anything unknown means INFO."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if isinstance(value, int):
            return value
    return logging.INFO


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_string: str | None = None,
    file_mode: str = "a",
    console_enabled: bool = True,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Configure the ``vaultsync`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Level name or number (default: INFO)
        log_file: Also write records to this file
        format_string: Format for the plain console handler
        file_mode: 'a' to append to ``log_file``, 'w' to truncate it
        console_enabled: Install a console handler
        use_rich: Use RichHandler for the console instead of plain stderr lines

    Returns:
        The configured logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level_int = parse_level(level)
    logger.setLevel(level_int)

    if console_enabled:
        console_handler: logging.Handler
        if use_rich:
            console_handler = RichHandler(
                show_path=False,
                markup=False,
                rich_tracebacks=True,
                log_time_format="[%X]",
                omit_repeated_times=False,
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(PlainConsoleFormatter(format_string))
        console_handler.setLevel(level_int)
        logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode=file_mode, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(config: dict[str, Any], base_dir: Path | None = None) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of a config mapping.

    Keys: ``level``, ``file``, ``file_mode``, ``format``, ``console_enabled``
    and ``console_type`` ("rich" or "plain"). A relative ``file`` is resolved
    against ``base_dir``.
    """
    section = config.get("logging") or {}

    log_file = section.get("file")
    if log_file and base_dir is not None and not Path(log_file).is_absolute():
        log_file = base_dir / log_file

    return setup_logging(
        level=section.get("level", logging.INFO),
        log_file=log_file,
        format_string=section.get("format"),
        file_mode=section.get("file_mode", "a"),
        console_enabled=section.get("console_enabled", True),
        use_rich=section.get("console_type", "rich") != "plain",
    )


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return a logger in the ``vaultsync`` hierarchy, e.g. ``get_logger("vaultsync.sync.planner")``."""
    return logging.getLogger(name)
