"""Доставка статистики в Slack и рассылка подписчикам."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine

import aiohttp
from loguru import logger
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from pandemico.blocks import build_country_blocks, build_unavailable_blocks
from .registry import CountryRegistry
from .stats_client import FetchFailure, FetchResult, StatsClient


class CountryNotifier:
    """Постит данные страны в канал/личку и делает fan-out по подписчикам.

    Подключается к реестру как наблюдатель (``on_country_changed``) и как
    push-хук (``push``). Сами хуки синхронные: они лишь ставят задачи в event
    loop, поэтому мутации реестра никогда не ждут сеть.
    """

    def __init__(
        self,
        client: AsyncWebClient,
        stats: StatsClient,
        registry: CountryRegistry,
        action_prefix: str = "pandemico",
    ) -> None:
        self._client = client
        self._stats = stats
        self._registry = registry
        self._prefix = action_prefix
        self._tasks: set[asyncio.Task[Any]] = set()

    def attach(self) -> None:
        """Подписывает нотификатор на события реестра."""

        self._registry.add_listener(self.on_country_changed)
        self._registry.set_push_hook(self.push)

    def push(self, country: str, user: str) -> None:
        self._spawn(self.post_country_data(country, user), name=f"push-{country}-{user}")

    def on_country_changed(self, country: str) -> None:
        self._spawn(self.broadcast(country), name=f"broadcast-{country}")

    async def broadcast(self, country: str) -> int:
        """Рассылает свежие данные всем подписчикам страны. Возвращает число успешных доставок."""

        subscribers = self._registry.subscribers(country)
        if not subscribers:
            return 0
        logger.info(
            "Рассылка {country} для {count} подписчиков",
            country=country,
            count=len(subscribers),
        )
        result = await self._stats.fetch_country_stats(country)
        results = await asyncio.gather(
            *(self.deliver(country, user, result) for user in subscribers),
            return_exceptions=True,
        )
        delivered = 0
        for user, outcome in zip(subscribers, results):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Не удалось доставить {country} пользователю {user}: {error}",
                    country=country,
                    user=user,
                    error=outcome,
                )
            elif outcome:
                delivered += 1
        return delivered

    async def post_country_data(self, country: str, channel: str) -> bool:
        """Получает статистику и постит сообщение. Возвращает True при успешной отправке."""

        result = await self._stats.fetch_country_stats(country)
        return await self.deliver(country, channel, result)

    async def deliver(self, country: str, channel: str, result: FetchResult) -> bool:
        """Рендерит уже полученную статистику под конкретного получателя и отправляет."""

        if isinstance(result, FetchFailure):
            blocks = build_unavailable_blocks(country, result.reason)
            text = f"Data for {country} is currently unavailable"
        else:
            blocks = build_country_blocks(
                result,
                country=country,
                closed=self._registry.is_closed(country),
                subscribed=self._registry.is_subscribed(country, channel),
                closed_at=self._registry.closed_at(country),
                source_url=self._stats.source_url(country),
                flag_url=self._stats.flag_url(country),
                prefix=self._prefix,
            )
            text = f"Latest data for {result.name}"
        return await self.post_message(channel, text=text, blocks=blocks)

    async def post_message(self, channel: str, *, text: str, blocks: list[dict] | None = None) -> bool:
        try:
            await self._client.chat_postMessage(channel=channel, text=text, blocks=blocks)
        except SlackApiError as exc:
            logger.error(
                "Slack отклонил сообщение в {channel}: {error}",
                channel=channel,
                error=exc.response.get("error") if exc.response is not None else exc,
            )
            return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Сеть недоступна при отправке в {channel}: {error}", channel=channel, error=exc)
            return False
        return True

    async def drain(self) -> None:
        """Дожидается всех запущенных доставок (graceful shutdown)."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("Фоновая доставка {name} упала", name=task.get_name())


__all__ = ["CountryNotifier"]
