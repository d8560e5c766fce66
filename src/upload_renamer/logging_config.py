"""Logging configuration module for upload-renamer."""

from __future__ import annotations

import logging
from pathlib import Path

from upload_renamer.config import LoggingConfig

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_HANDLER_MARK = "_upload_renamer_handler"


def _parse_level(level: str) -> int:
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        return logging.INFO
    return log_level


def setup_logging(*, level: str, log_file: str | None = None) -> None:
    """Configure root logging with a console and an optional file handler.

    Handlers installed by an earlier call are replaced, so the host
    application may call this again after reloading its configuration.

    Args:
        level: Log level string (DEBUG/INFO/WARNING/ERROR).
        log_file: Path to the log file. ``None`` or ``""`` logs to the
            console only.
    """
    log_level = _parse_level(level)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        if getattr(handler, _HANDLER_MARK, False):
            handler.close()
            root.removeHandler(handler)
    root.setLevel(log_level)

    formatter = logging.Formatter(_LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        root.addHandler(handler)


def setup_logging_from_config(config: LoggingConfig) -> None:
    setup_logging(level=config.level, log_file=config.file)
