"""
Logging System - Centralized logging management.

Provides colored console logging and optional file logging with rotation.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

ROOT_LOGGER_NAME = "modkernel"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogManager:
    """
    Centralized logging configuration for the modkernel logger tree.

    Handlers are attached once; calling configure() again only changes
    levels and, when a new path is given, the file handler.
    """

    def __init__(self, root_name: str = ROOT_LOGGER_NAME) -> None:
        self._root = logging.getLogger(root_name)
        self._console_handler: logging.Handler | None = None
        self._file_handler: logging.Handler | None = None
        self._log_level = logging.INFO

    @property
    def root(self) -> logging.Logger:
        return self._root

    def configure(self, level: int | str = "INFO", log_file: str | Path | None = None) -> None:
        """Configure console (and optionally file) output."""
        self.set_level(level)
        self._root.setLevel(logging.DEBUG)

        if self._console_handler is None:
            console_formatter = colorlog.ColoredFormatter(
                "%(log_color)s%(asctime)s | %(levelname)-8s | %(name)s%(reset)s | %(message)s",
                datefmt=DATE_FORMAT,
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bg_white",
                },
            )
            self._console_handler = logging.StreamHandler(sys.stdout)
            self._console_handler.setFormatter(console_formatter)
            self._root.addHandler(self._console_handler)
        self._console_handler.setLevel(self._log_level)

        if log_file:
            self._attach_file_handler(Path(log_file))

    def _attach_file_handler(self, log_file: Path) -> None:
        if self._file_handler is not None:
            self._root.removeHandler(self._file_handler)
            self._file_handler.close()

        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        self._root.addHandler(file_handler)
        self._file_handler = file_handler

    def set_level(self, level: int | str) -> None:
        """Set the console logging level."""
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)
        self._log_level = level
        if self._console_handler is not None:
            self._console_handler.setLevel(level)

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger below the modkernel root."""
        if name == self._root.name or name.startswith(self._root.name + "."):
            return logging.getLogger(name)
        return self._root.getChild(name)


_log_manager: LogManager | None = None


def get_log_manager() -> LogManager:
    """Get the global log manager instance."""
    global _log_manager
    if _log_manager is None:
        _log_manager = LogManager()
    return _log_manager


def setup_logging(level: int | str = "INFO", log_file: str | Path | None = None) -> LogManager:
    """Configure the modkernel logger tree and return the manager."""
    manager = get_log_manager()
    manager.configure(level=level, log_file=log_file)
    return manager


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return get_log_manager().get_logger(name)
