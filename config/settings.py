"""Глобальные настройки Pandemico.

Настройки разделены по доменам (Slack, источник статистики, health check),
вся конфигурация загружается из переменных окружения через Pydantic Settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, PositiveInt, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
ACCESSIBLE_ENV_FILE = BASE_DIR / "config" / "runtime.env"
DEFAULT_ENV_FILE = BASE_DIR / ".env"
ENV_FILE = ACCESSIBLE_ENV_FILE if ACCESSIBLE_ENV_FILE.exists() else DEFAULT_ENV_FILE


class SlackSettings(BaseModel):
    """Конфигурация Slack-приложения."""

    signing_secret: SecretStr = Field(..., description="Signing secret для проверки вебхуков")
    token: SecretStr = Field(..., description="Bot token (xoxb-...) для Web API")
    action_prefix: str = Field("pandemico", description="Префикс action_id у кнопок")

    @field_validator("action_prefix")
    @classmethod
    def _strip_prefix(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("action_prefix не может быть пустым")
        return value


class StatsApiSettings(BaseModel):
    """Источник статистики по странам."""

    api_url: str = Field(
        "http://corona-api.com/countries/{country}",
        description="Шаблон URL, {country} заменяется кодом страны",
    )
    flags_url: str = Field(
        "https://www.countryflags.io/{country}/flat/64.png",
        description="Шаблон URL картинки флага",
    )
    request_timeout: PositiveInt = 10

    @field_validator("api_url", "flags_url")
    @classmethod
    def _require_placeholder(cls, value: str) -> str:
        if "{country}" not in value:
            raise ValueError("Шаблон URL должен содержать {country}")
        return value


class HealthCheckSettings(BaseModel):
    """Периодическая проверка самочувствия команды."""

    enabled: bool = True
    delay_sec: int = Field(60, ge=0, description="Задержка после старта перед рассылкой")


class AppSettings(BaseSettings):
    """Главный контейнер настроек Pandemico."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "prod"] = "dev"
    host: str = "0.0.0.0"
    port: int = 8080
    log_json: bool = False
    slack: SlackSettings
    stats: StatsApiSettings = StatsApiSettings()
    health_check: HealthCheckSettings = HealthCheckSettings()

    @property
    def is_production(self) -> bool:
        """True, если бот запущен в продовой среде."""

        return self.environment == "prod"


# Ленивый синглтон (избегаем глобальных переменных в модулях).
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Возвращает единый экземпляр настроек.

    Значения кэшируются, поэтому инициализация .env происходит ровно один раз
    за процесс.
    """

    global _settings
    if _settings is None:
        _settings = AppSettings()  # type: ignore[call-arg]
    return _settings


__all__ = [
    "AppSettings",
    "HealthCheckSettings",
    "SlackSettings",
    "StatsApiSettings",
    "get_settings",
]
