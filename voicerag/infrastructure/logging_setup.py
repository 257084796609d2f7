# voicerag/infrastructure/logging_setup.py

import logging

from rich.console import Console
from rich.logging import RichHandler


LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"

# Third-party loggers that are noisy at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "pdfminer", "multipart")


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route all log records through rich, once per process."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )

    debug_mode = numeric_level <= logging.DEBUG
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug_mode else logging.WARNING)
