"""Logging configuration for kgp."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    """
    Configura o logger ``kgp``.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Arquivo de log opcional. Se None, loga no stderr via rich.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger("kgp")
    logger.setLevel(log_level)
    logger.handlers.clear()

    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )

    handler.setLevel(log_level)
    logger.addHandler(handler)
    logger.propagate = False


__all__ = ["configure_logging"]
