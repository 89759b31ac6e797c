"""Клиент публичного API статистики по странам."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import aiohttp
from loguru import logger

from config.settings import StatsApiSettings


@dataclass(slots=True, frozen=True)
class StatsSnapshot:
    """Снимок статистики страны на момент запроса."""

    country: str
    name: str
    population: int
    updated_at: datetime | None
    confirmed_today: int
    confirmed_total: int
    deaths_today: int
    deaths_total: int
    recovered_total: int

    @property
    def active_total(self) -> int:
        return self.confirmed_total - self.deaths_total - self.recovered_total

    @property
    def confirmed_rate(self) -> float:
        return self._rate(self.confirmed_total)

    @property
    def deaths_rate(self) -> float:
        return self._rate(self.deaths_total)

    @property
    def active_rate(self) -> float:
        return self._rate(self.active_total)

    def _rate(self, value: int) -> float:
        """Процент от населения с точностью до сотых."""

        if not self.population:
            return 0.0
        return round(value / self.population * 100, 2)


@dataclass(slots=True, frozen=True)
class FetchFailure:
    """Неудачный запрос (сеть, HTTP-статус или кривой JSON)."""

    country: str
    reason: str
    status: int | None = None


FetchResult = StatsSnapshot | FetchFailure


def parse_country_payload(country: str, payload: Any) -> StatsSnapshot:
    """Разбирает ответ API. Бросает ValueError, если структура не та."""

    try:
        data = payload["data"]
        latest = data["latest_data"]
        today = data["today"]
        return StatsSnapshot(
            country=country,
            name=data.get("name") or country,
            population=int(data.get("population") or 0),
            updated_at=_parse_timestamp(data.get("updated_at")),
            confirmed_today=int(today.get("confirmed") or 0),
            confirmed_total=int(latest.get("confirmed") or 0),
            deaths_today=int(today.get("deaths") or 0),
            deaths_total=int(latest.get("deaths") or 0),
            recovered_total=int(latest.get("recovered") or 0),
        )
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise ValueError(f"Неожиданный формат ответа для {country}: {exc!r}") from exc


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Не удалось разобрать updated_at: {value}", value=value)
        return None


class StatsClient:
    """Получает статистику страны через внешний API (один GET на запрос, без ретраев)."""

    def __init__(self, settings: StatsApiSettings) -> None:
        self._api_url = settings.api_url
        self._flags_url = settings.flags_url
        self._timeout = settings.request_timeout

    def source_url(self, country: str) -> str:
        return self._api_url.replace("{country}", country)

    def flag_url(self, country: str) -> str:
        return self._flags_url.replace("{country}", country)

    async def fetch_country_stats(self, country: str) -> FetchResult:
        url = self.source_url(country)
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as resp:
                    if resp.status != 200:
                        logger.warning(
                            "Stats API ошибка HTTP {status} для {country}",
                            status=resp.status,
                            country=country,
                        )
                        return FetchFailure(country, f"HTTP {resp.status}", status=resp.status)
                    payload = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.warning("Stats API запрос упал для {country}: {error}", country=country, error=exc)
            return FetchFailure(country, str(exc) or exc.__class__.__name__)

        try:
            return parse_country_payload(country, payload)
        except ValueError as exc:
            logger.warning("{error}", error=exc)
            return FetchFailure(country, "malformed response")


__all__ = [
    "FetchFailure",
    "FetchResult",
    "StatsClient",
    "StatsSnapshot",
    "parse_country_payload",
]
