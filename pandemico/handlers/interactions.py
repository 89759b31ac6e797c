"""Обработка нажатий кнопок и отправки модалок."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import aiohttp
from loguru import logger
from slack_sdk.webhook.async_client import AsyncWebhookClient

from pandemico.context import Services

Responder = Callable[[str], Awaitable[None]]

HEALTH_CHECK_THANKS = "Thank you for completing your health check!"


def make_responder(response_url: str | None) -> Responder:
    """Эфемерный ответ через response_url взаимодействия."""

    async def respond(text: str) -> None:
        if not response_url:
            logger.debug("Нет response_url, ответ пропущен: {text}", text=text)
            return
        try:
            response = await AsyncWebhookClient(response_url).send(
                text=text,
                response_type="ephemeral",
                replace_original=False,
            )
        except aiohttp.ClientError as exc:
            logger.error("Не удалось ответить на взаимодействие: {error}", error=exc)
            return
        if response.status_code != 200:
            logger.warning(
                "response_url вернул {status}: {body}",
                status=response.status_code,
                body=response.body,
            )

    return respond


async def handle_interaction(payload: dict[str, Any], services: Services, respond: Responder) -> None:
    kind = payload.get("type")
    logger.info("Получено взаимодействие: {kind}", kind=kind)
    if kind == "block_actions":
        for action in payload.get("actions", []):
            await _handle_block_action(action, payload, services, respond)
    elif kind == "view_submission":
        # у view_submission нет response_url, благодарим личным сообщением
        user_id = (payload.get("user") or {}).get("id")
        if user_id:
            await services.notifier.post_message(user_id, text=HEALTH_CHECK_THANKS)
        else:
            logger.warning("view_submission без user.id, благодарность не отправлена")
    else:
        await respond(f"Sorry, I don't recognize this type of interaction: {kind}")


async def _handle_block_action(
    action: dict[str, Any],
    payload: dict[str, Any],
    services: Services,
    respond: Responder,
) -> None:
    prefix = services.action_prefix
    action_id = action.get("action_id", "")
    name = action_id[len(prefix) + 1:] if action_id.startswith(f"{prefix}_") else None
    country = action.get("value") or ""
    user = payload.get("user") or {}
    user_id = user.get("id", "")
    username = user.get("username") or user.get("name") or user_id
    registry = services.registry

    if name == "subscribe":
        registry.set_subscribed(country, user_id, True)
        await respond(f"User subscribed: {username} to {country}")
    elif name == "unsubscribe":
        registry.set_subscribed(country, user_id, False)
        await respond(f"User unsubscribed: {username} from {country}")
    elif name == "close":
        registry.set_closed(country, True)
        await respond(f"Country closed: {country}")
    elif name == "open":
        registry.set_closed(country, False)
        await respond(f"Country opened: {country}")
    elif name == "health_check":
        trigger_id = payload.get("trigger_id")
        if trigger_id:
            await services.health_check.open_health_check(trigger_id)
        else:
            logger.warning("health_check без trigger_id от {user}", user=user_id)
    else:
        logger.debug("Неизвестное действие {action}", action=action_id)
        await respond(f"Sorry, I don't recognize this action: {action_id}")


__all__ = ["HEALTH_CHECK_THANKS", "Responder", "handle_interaction", "make_responder"]
