"""Настройка loguru для продакшена."""

from __future__ import annotations

import sys
from loguru import logger


def setup_logging(json: bool = False, level: str = "DEBUG") -> None:
    """Stdout sink; при ``json=True`` каждая запись сериализуется loguru в валидный JSON."""

    logger.remove()
    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
        level=level,
        colorize=not json,
        serialize=json,
        backtrace=False,
        enqueue=True,
    )


__all__ = ["setup_logging"]
