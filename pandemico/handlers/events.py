"""Обработка упоминаний бота (app_mention)."""

from __future__ import annotations

from typing import Any

from loguru import logger

from pandemico.blocks import build_usage_text
from pandemico.context import Services


def extract_country(text: str | None) -> str | None:
    """Второй токен сообщения (первый - само упоминание ``<@U123>``)."""

    parts = (text or "").split()
    if len(parts) < 2:
        return None
    return parts[1].strip().upper() or None


async def handle_app_mention(event: dict[str, Any], services: Services) -> None:
    logger.info(
        "Упоминание от {user}: {text}",
        user=event.get("user"),
        text=event.get("text"),
    )
    channel = event.get("channel")
    if not channel:
        logger.debug("app_mention без channel, пропускаем")
        return
    country = extract_country(event.get("text"))
    if country is None:
        await services.notifier.post_message(channel, text=build_usage_text())
        return
    await services.notifier.post_country_data(country, channel)


__all__ = ["extract_country", "handle_app_mention"]
