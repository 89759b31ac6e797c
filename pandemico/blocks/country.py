"""Block Kit разметка сообщения со статистикой страны."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pandemico.services.stats_client import StatsSnapshot

Block = dict[str, Any]

COUNT_WIDTH = 7

ADVICE_CLOSED = "      _*Please work from home and refrain from any travel.*_"
ADVICE_OPEN = "      _Please remain cautious and limit office visits and travel._"


def action_id(prefix: str, name: str) -> str:
    return f"{prefix}_{name}"


def format_stats(snapshot: StatsSnapshot) -> str:
    """Моноширинный блок цифр, счётчики выровнены по правому краю."""

    lines = [
        f"Active:    {snapshot.active_total:>{COUNT_WIDTH}} ({snapshot.active_rate}%)",
        f"Confirmed: {snapshot.confirmed_total:>{COUNT_WIDTH}} ({snapshot.confirmed_rate}%)"
        f" [Today: +{snapshot.confirmed_today}]",
        f"Deaths:    {snapshot.deaths_total:>{COUNT_WIDTH}} ({snapshot.deaths_rate}%)"
        f" [Today: +{snapshot.deaths_today}]",
    ]
    return "```" + "\n".join(lines) + "```"


def _button(text: str, action: str, value: str, style: str | None = None) -> Block:
    button: Block = {
        "type": "button",
        "text": {"type": "plain_text", "text": text},
        "action_id": action,
        "value": value,
    }
    if style:
        button["style"] = style
    return button


def _timestamp(value: datetime | None) -> str:
    if value is None:
        return "unknown"
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def build_country_blocks(
    snapshot: StatsSnapshot,
    *,
    country: str,
    closed: bool,
    subscribed: bool,
    closed_at: datetime | None,
    source_url: str,
    flag_url: str,
    prefix: str = "pandemico",
) -> list[Block]:
    if closed:
        toggle = _button("Open Country", action_id(prefix, "open"), country, style="primary")
    else:
        toggle = _button("Close Country", action_id(prefix, "close"), country, style="danger")
    if subscribed:
        subscription = _button("Unsubscribe", action_id(prefix, "unsubscribe"), country)
    else:
        subscription = _button("Subscribe", action_id(prefix, "subscribe"), country)

    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"Latest data for {snapshot.name}:\n{format_stats(snapshot)}",
            },
            "accessory": {
                "type": "image",
                "image_url": flag_url,
                "alt_text": f"flag for {snapshot.name}",
            },
        },
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"Source: {source_url}\nUpdated: {_timestamp(snapshot.updated_at)}",
                }
            ],
        },
        {"type": "divider"},
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"Latest advice for {snapshot.name}:\n\n{ADVICE_CLOSED if closed else ADVICE_OPEN}",
            },
            "accessory": toggle,
        },
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"Updated: {_timestamp(closed_at or datetime.now(timezone.utc))}",
                }
            ],
        },
        {"type": "actions", "elements": [subscription]},
    ]


def build_unavailable_blocks(country: str, reason: str) -> list[Block]:
    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f":warning: Data for *{country}* is currently unavailable ({reason}).",
            },
        }
    ]


def build_usage_text() -> str:
    return "Mention me with a country code, e.g. `@pandemico US`."


__all__ = [
    "ADVICE_CLOSED",
    "ADVICE_OPEN",
    "Block",
    "action_id",
    "build_country_blocks",
    "build_unavailable_blocks",
    "build_usage_text",
    "format_stats",
]
