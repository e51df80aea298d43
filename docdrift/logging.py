"""Logger hierarchy for docdrift and per-scan context."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, TextIO, Tuple

ROOT_LOGGER = "docdrift"
CONSOLE_FORMAT = "[docdrift] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``docdrift.<name>``, or the package logger when no name is given."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


class ScanLogAdapter(logging.LoggerAdapter):
    """Prefixes every record with the repository and ref being scanned."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['repo']}@{self.extra['ref']}] {msg}", kwargs


def scan_logger(name: str, repo_id: str, ref: str) -> ScanLogAdapter:
    return ScanLogAdapter(get_logger(name), {"repo": repo_id, "ref": ref})


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install console (and optional file) handlers on the package logger.

    Existing handlers are removed first, so a long-lived caller can call this
    again to change verbosity without duplicating output.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream)]
    handlers[0].setFormatter(logging.Formatter(CONSOLE_FORMAT))
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


__all__ = ["ROOT_LOGGER", "ScanLogAdapter", "configure_logging", "get_logger", "scan_logger"]
