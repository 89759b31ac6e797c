"""Контейнер сервисов Pandemico.

Сервисы создаются один раз при старте приложения и передаются в хендлеры
явно, без глобальных переменных модулей.
"""

from __future__ import annotations

from dataclasses import dataclass

from slack_sdk.web.async_client import AsyncWebClient

from config.settings import AppSettings
from .services.health_check import HealthCheckService
from .services.notifier import CountryNotifier
from .services.registry import CountryRegistry
from .services.stats_client import StatsClient


@dataclass(slots=True)
class Services:
    settings: AppSettings
    registry: CountryRegistry
    stats: StatsClient
    notifier: CountryNotifier
    health_check: HealthCheckService

    @property
    def action_prefix(self) -> str:
        return self.settings.slack.action_prefix


def build_services(settings: AppSettings, client: AsyncWebClient | None = None) -> Services:
    """Собирает граф сервисов и связывает реестр с нотификатором."""

    if client is None:
        client = AsyncWebClient(token=settings.slack.token.get_secret_value())
    prefix = settings.slack.action_prefix
    registry = CountryRegistry()
    stats = StatsClient(settings.stats)
    notifier = CountryNotifier(client, stats, registry, action_prefix=prefix)
    notifier.attach()
    return Services(
        settings=settings,
        registry=registry,
        stats=stats,
        notifier=notifier,
        health_check=HealthCheckService(client, action_prefix=prefix),
    )


__all__ = ["Services", "build_services"]
