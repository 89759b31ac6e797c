"""Перехват и логирование ошибок фоновых хендлеров."""

from __future__ import annotations

from functools import wraps
from typing import Any, Awaitable, Callable

from loguru import logger

Handler = Callable[..., Awaitable[Any]]


def guarded(handler: Handler) -> Handler:
    """Хендлер никогда не роняет процесс: исключение логируется, запрос считается завершённым."""

    @wraps(handler)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await handler(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Ошибка в хендлере {name}: {error}", name=handler.__name__, error=exc)
            return None

    return wrapper


__all__ = ["guarded"]
