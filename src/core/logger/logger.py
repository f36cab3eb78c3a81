"""Logging setup with Rich console output."""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from src.core.config.settings import LoggingSettings, get_settings

_console: Console | None = None
_configured = False


def setup_logging(settings: LoggingSettings | None = None) -> None:
    """Configure the root logger.

    Args:
        settings: Logging settings. Uses global settings if not provided.
    """
    global _console, _configured

    if settings is None:
        settings = get_settings().logging

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.level))
    root_logger.handlers.clear()

    handler: logging.Handler
    if settings.use_rich:
        _console = Console(stderr=True)
        handler = RichHandler(
            console=_console,
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            markup=False,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(settings.format))

    root_logger.addHandler(handler)

    if settings.file:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, settings.level))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(file_handler)

    _configured = True


def set_level(level: str) -> None:
    """Change the root log level after setup.

    Args:
        level: Level name (DEBUG, INFO, ...).
    """
    logging.getLogger().setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> logging.Logger:
    """Get a logger, configuring logging on first use.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    if not _configured and not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)


def get_console() -> Console:
    """Get the shared Rich console.

    Returns:
        Console instance.
    """
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console
