"""Configuración de logging de nbenv.

Los registros de consola pasan por Rich para compartir estilo con las tablas
de la CLI; un handler de fichero opcional guarda en texto plano cada comando
ejecutado.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "nbenv"


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
    *,
    console: Console | None = None,
) -> logging.Logger:
    """Configure and return the application logger.

    Calling it again only adjusts the level; handlers are installed once.
    """

    log = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    log.setLevel(level)
    if log.handlers:
        return log

    log.propagate = False
    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(rich_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        log.addHandler(fh)

    return log


def get_logger(name: str) -> logging.Logger:
    """Return a child of the application logger for module `name`."""

    return logging.getLogger(LOGGER_NAME).getChild(name)
