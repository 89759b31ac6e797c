from __future__ import annotations

import pytest

from pandemico.handlers import extract_country, guarded, handle_app_mention, handle_interaction


class Replies(list):
    async def __call__(self, text: str) -> None:
        self.append(text)


@pytest.fixture
def replies() -> Replies:
    return Replies()


def _action(action_id: str, value: str = "US", **extra) -> dict:
    payload = {
        "type": "block_actions",
        "user": {"id": "U1", "username": "alice"},
        "actions": [{"action_id": action_id, "value": value}],
    }
    payload.update(extra)
    return payload


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("<@UBOT> us", "US"),
        ("<@UBOT>   DE  please", "DE"),
        ("<@UBOT>", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_country(text, expected):
    assert extract_country(text) == expected


async def test_mention_posts_country_data(services, slack_client, stats):
    await handle_app_mention({"user": "U1", "text": "<@UBOT> fr", "channel": "C1"}, services)

    assert stats.requests == ["FR"]
    assert slack_client.channels() == ["C1"]


async def test_mention_without_country_posts_usage(services, slack_client, stats):
    await handle_app_mention({"user": "U1", "text": "<@UBOT>", "channel": "C1"}, services)

    assert stats.requests == []
    assert "country code" in slack_client.messages[0]["text"]


async def test_subscribe_action(services, slack_client, replies):
    await handle_interaction(_action("pandemico_subscribe"), services, replies)
    await services.notifier.drain()

    assert services.registry.is_subscribed("US", "U1")
    assert replies == ["User subscribed: alice to US"]
    assert slack_client.channels() == ["U1"]


async def test_unsubscribe_action(services, replies):
    services.registry.set_subscribed("US", "U1", True)
    await handle_interaction(_action("pandemico_unsubscribe"), services, replies)
    await services.notifier.drain()

    assert not services.registry.is_subscribed("US", "U1")
    assert replies == ["User unsubscribed: alice from US"]


async def test_close_and_open_actions(services, replies):
    await handle_interaction(_action("pandemico_close", "IT"), services, replies)
    assert services.registry.is_closed("IT")

    await handle_interaction(_action("pandemico_open", "IT"), services, replies)
    assert not services.registry.is_closed("IT")
    assert replies == ["Country closed: IT", "Country opened: IT"]


async def test_health_check_action_opens_modal(services, slack_client, replies):
    await handle_interaction(
        _action("pandemico_health_check", "U1", trigger_id="T123"), services, replies
    )

    assert slack_client.views[0]["trigger_id"] == "T123"
    assert slack_client.views[0]["view"]["type"] == "modal"
    assert replies == []


async def test_unknown_action(services, replies):
    await handle_interaction(_action("other_button"), services, replies)
    assert replies == ["Sorry, I don't recognize this action: other_button"]


async def test_view_submission_thanks_user_directly(services, slack_client, replies):
    payload = {"type": "view_submission", "user": {"id": "U1", "username": "alice"}}

    await handle_interaction(payload, services, replies)

    assert replies == []
    assert slack_client.channels() == ["U1"]
    assert slack_client.messages[0]["text"] == "Thank you for completing your health check!"


async def test_unknown_interaction_type(services, replies):
    await handle_interaction({"type": "shortcut"}, services, replies)
    assert replies == ["Sorry, I don't recognize this type of interaction: shortcut"]


async def test_guarded_swallows_and_logs():
    async def broken() -> None:
        raise RuntimeError("boom")

    assert await guarded(broken)() is None
