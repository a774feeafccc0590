"""Logging setup shared by the engine, the coordinator and the host session."""

import logging

from config import config


def setup_logging(level: str | None = None) -> None:
    """Call once at program start, from the host application."""
    level = (level or config.logging.level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
