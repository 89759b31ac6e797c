from __future__ import annotations

import asyncio
import json
import time
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

import pytest
from slack_sdk.errors import SlackApiError
from slack_sdk.signature import SignatureVerifier

from config.settings import AppSettings, HealthCheckSettings, SlackSettings
from pandemico.context import Services
from pandemico.services.health_check import HealthCheckService
from pandemico.services.notifier import CountryNotifier
from pandemico.services.registry import CountryRegistry
from pandemico.services.stats_client import FetchFailure, StatsSnapshot

SIGNING_SECRET = "test-signing-secret"


def make_snapshot(country: str = "US", **overrides) -> StatsSnapshot:
    values = dict(
        country=country,
        name="USA",
        population=1_000_000,
        updated_at=datetime(2020, 4, 1, 12, 0, tzinfo=timezone.utc),
        confirmed_today=120,
        confirmed_total=5000,
        deaths_today=3,
        deaths_total=200,
        recovered_total=800,
    )
    values.update(overrides)
    return StatsSnapshot(**values)


class FakePages:
    def __init__(self, pages: list[dict]) -> None:
        self._pages = pages

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for page in self._pages:
            yield page


class FakeSlackClient:
    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.views: list[dict] = []
        self.failing_channels: set[str] = set()
        self.timeout_channels: set[str] = set()
        self.exploding_channels: set[str] = set()
        self.member_pages: list[dict] = []

    async def chat_postMessage(self, **kwargs):
        if kwargs["channel"] in self.failing_channels:
            raise SlackApiError("channel_not_found", {"ok": False, "error": "channel_not_found"})
        if kwargs["channel"] in self.timeout_channels:
            raise asyncio.TimeoutError()
        if kwargs["channel"] in self.exploding_channels:
            raise RuntimeError("unexpected failure")
        self.messages.append(kwargs)
        return {"ok": True}

    async def views_open(self, **kwargs):
        self.views.append(kwargs)
        return {"ok": True}

    async def users_list(self, **kwargs):
        return FakePages(self.member_pages)

    def channels(self) -> list[str]:
        return [message["channel"] for message in self.messages]


class FakeStats:
    def __init__(self) -> None:
        self.failures: dict[str, FetchFailure] = {}
        self.requests: list[str] = []

    def source_url(self, country: str) -> str:
        return f"http://stats.test/countries/{country}"

    def flag_url(self, country: str) -> str:
        return f"http://flags.test/{country}.png"

    async def fetch_country_stats(self, country: str):
        self.requests.append(country)
        if country in self.failures:
            return self.failures[country]
        return make_snapshot(country)


class StepClock:
    """Детерминированные часы: каждый вызов на минуту позже предыдущего."""

    def __init__(self) -> None:
        self.now = datetime(2020, 3, 15, 9, 0, tzinfo=timezone.utc)
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        slack=SlackSettings(signing_secret=SIGNING_SECRET, token="xoxb-test"),
        health_check=HealthCheckSettings(enabled=False),
    )


@pytest.fixture
def slack_client() -> FakeSlackClient:
    return FakeSlackClient()


@pytest.fixture
def stats() -> FakeStats:
    return FakeStats()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def services(settings, slack_client, stats, clock) -> Services:
    registry = CountryRegistry(clock=clock)
    notifier = CountryNotifier(slack_client, stats, registry)
    notifier.attach()
    return Services(
        settings=settings,
        registry=registry,
        stats=stats,
        notifier=notifier,
        health_check=HealthCheckService(slack_client),
    )


def signed_headers(body: str, secret: str = SIGNING_SECRET) -> dict[str, str]:
    timestamp = str(int(time.time()))
    signature = SignatureVerifier(secret).generate_signature(timestamp=timestamp, body=body)
    return {"X-Slack-Request-Timestamp": timestamp, "X-Slack-Signature": signature}


def interaction_body(payload: dict) -> str:
    return urlencode({"payload": json.dumps(payload)})
