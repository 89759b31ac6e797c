"""Рассылка health check всей команде Slack."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
from loguru import logger
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from pandemico.blocks import build_health_check_blocks, build_health_check_modal


class HealthCheckService:
    """Раз в запуск отправляет каждому участнику приглашение пройти health check."""

    def __init__(self, client: AsyncWebClient, action_prefix: str = "pandemico") -> None:
        self._client = client
        self._prefix = action_prefix
        self._task: asyncio.Task[None] | None = None

    def schedule(self, delay: float) -> None:
        """Запускает рассылку в фоне через ``delay`` секунд после старта."""

        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._delayed_start(delay), name="health-check")
        logger.info("Health check запланирован через {delay} c", delay=delay)

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _delayed_start(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.start_health_check()
        except (SlackApiError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Health check прерван: {error}", error=exc)

    async def start_health_check(self) -> int:
        """Проходит по всем страницам users.list и шлёт приглашение. Возвращает число отправленных."""

        logger.info("Запуск health check команды")
        members: list[str] = []
        response = await self._client.users_list()
        async for page in response:
            members.extend(
                member["id"] for member in page.get("members", []) if self._is_human(member)
            )
        results = await asyncio.gather(*(self.post_health_check(user) for user in members))
        sent = sum(1 for ok in results if ok)
        logger.info("Health check отправлен {sent}/{total}", sent=sent, total=len(members))
        return sent

    async def post_health_check(self, user: str) -> bool:
        try:
            await self._client.chat_postMessage(
                channel=user,
                text="Please perform your regular health check.",
                blocks=build_health_check_blocks(user, prefix=self._prefix),
            )
        except (SlackApiError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("Не удалось отправить health check {user}: {error}", user=user, error=exc)
            return False
        return True

    async def open_health_check(self, trigger_id: str) -> bool:
        try:
            await self._client.views_open(trigger_id=trigger_id, view=build_health_check_modal())
        except (SlackApiError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Не удалось открыть модалку health check: {error}", error=exc)
            return False
        return True

    @staticmethod
    def _is_human(member: dict[str, Any]) -> bool:
        return not (
            member.get("deleted")
            or member.get("is_bot")
            or member.get("id") == "USLACKBOT"
        )


__all__ = ["HealthCheckService"]
