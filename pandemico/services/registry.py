"""Реестр стран: статус "закрыта" и подписчики.

Все операции синхронные и не отдают управление event loop'у, поэтому
блокировки не нужны. Запись создаётся лениво при первой мутации и живёт
до конца процесса.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from loguru import logger

ChangeListener = Callable[[str], None]
PushHook = Callable[[str, str], None]


@dataclass(slots=True)
class CountryRecord:
    """Состояние одной страны."""

    closed: bool = False
    closed_at: datetime | None = None
    subscribers: set[str] = field(default_factory=set)


class CountryRegistry:
    """In-memory реестр с уведомлениями об изменении статуса."""

    def __init__(
        self,
        push: PushHook | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._records: dict[str, CountryRecord] = {}
        self._listeners: list[ChangeListener] = []
        self._push = push
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def add_listener(self, listener: ChangeListener) -> None:
        """Регистрирует наблюдателя за сменой статуса страны."""

        self._listeners.append(listener)

    def set_push_hook(self, push: PushHook | None) -> None:
        self._push = push

    def set_closed(self, country: str, closed: bool) -> bool:
        """Меняет статус страны. Возвращает True, если статус действительно изменился."""

        if self.is_closed(country) == closed:
            return False
        record = self._records.setdefault(country, CountryRecord())
        record.closed = closed
        record.closed_at = self._clock()
        logger.info(
            "Страна {country} {state}",
            country=country,
            state="закрыта" if closed else "открыта",
        )
        self._notify(country)
        return True

    def is_closed(self, country: str) -> bool:
        record = self._records.get(country)
        return record.closed if record else False

    def closed_at(self, country: str) -> datetime | None:
        record = self._records.get(country)
        return record.closed_at if record else None

    def set_subscribed(self, country: str, user: str, subscribed: bool) -> bool:
        """Подписывает либо отписывает пользователя.

        При фактической подписке сразу вызывает push-хук для этого пользователя
        (минуя наблюдателей). Повторная подписка и отписка без подписки ничего не делают.
        """

        if self.is_subscribed(country, user) == subscribed:
            return False
        if subscribed:
            self._records.setdefault(country, CountryRecord()).subscribers.add(user)
            logger.info("{user} подписан на {country}", user=user, country=country)
            if self._push is not None:
                try:
                    self._push(country, user)
                except Exception as exc:  # noqa: BLE001
                    logger.exception("Push для {user} не запущен: {error}", user=user, error=exc)
        else:
            self._records[country].subscribers.discard(user)
            logger.info("{user} отписан от {country}", user=user, country=country)
        return True

    def is_subscribed(self, country: str, user: str) -> bool:
        record = self._records.get(country)
        return record is not None and user in record.subscribers

    def subscribers(self, country: str) -> frozenset[str]:
        """Снапшот подписчиков (безопасен для итерации во время рассылки)."""

        record = self._records.get(country)
        return frozenset(record.subscribers) if record else frozenset()

    def get(self, country: str) -> CountryRecord:
        """Копия записи страны (для неизвестной страны: значения по умолчанию)."""

        record = self._records.get(country)
        if record is None:
            return CountryRecord()
        return CountryRecord(
            closed=record.closed,
            closed_at=record.closed_at,
            subscribers=set(record.subscribers),
        )

    def __contains__(self, country: object) -> bool:
        return country in self._records

    def _notify(self, country: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(country)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "Наблюдатель реестра упал на {country}: {error}",
                    country=country,
                    error=exc,
                )


__all__ = ["ChangeListener", "CountryRecord", "CountryRegistry", "PushHook"]
